"""Best matching field and context snippet for a result row."""

from __future__ import annotations

import math
from dataclasses import dataclass

from record_search.highlight.highlighter import Highlighter
from record_search.query.boolean import extract_search_terms
from record_search.types import (
    DocumentRecord,
    FinancialRecord,
    OrganizationRecord,
    PersonRecord,
    SearchRecord,
)


@dataclass(slots=True)
class HighlightMatch:
    field: str
    content: str
    highlighted_content: str


def searchable_fields(record: SearchRecord) -> list[tuple[str, str]]:
    fields = [
        ("title", record.title),
        ("summary", record.summary),
        ("project", record.project),
        ("client", record.client),
        ("status", record.status),
        ("tags", " ".join(record.tags)),
    ]
    if isinstance(record, DocumentRecord):
        fields.extend((("documentType", record.document_type), ("author", record.author)))
    elif isinstance(record, FinancialRecord):
        for index, item in enumerate(record.line_items):
            fields.extend(
                (
                    (f"lineItem{index}_title", item.title),
                    (f"lineItem{index}_description", item.description),
                    (f"lineItem{index}_type", item.item_type.value),
                )
            )
    elif isinstance(record, PersonRecord):
        fields.extend((("jobTitle", record.job_title), ("email", record.email)))
    elif isinstance(record, OrganizationRecord):
        fields.extend((("tradeFocus", record.trade_focus), ("serviceArea", record.service_area)))
    for key, value in record.metadata.items():
        if value is not None:
            fields.append((f"metadata_{key}", str(value)))
    return fields


def find_best_match(
    record: SearchRecord, query: str, highlighter: Highlighter
) -> HighlightMatch | None:
    """The field containing the most query terms; earlier fields win ties."""
    terms = extract_search_terms(query)
    if not terms:
        return None

    best: HighlightMatch | None = None
    best_score = 0
    for field_name, content in searchable_fields(record):
        if not content:
            continue
        lowered = content.lower()
        score = sum(1 for term in terms if term in lowered)
        if score > best_score:
            best = HighlightMatch(
                field=field_name,
                content=content,
                highlighted_content=highlighter.highlight_text(content, query),
            )
            best_score = score
    return best


def context_snippet(
    match: HighlightMatch,
    query: str,
    highlighter: Highlighter,
    max_length: int = 100,
) -> str:
    """A word window starting two words before the first hit."""
    content = match.content
    if len(content) <= max_length:
        return match.highlighted_content

    words = content.split()
    terms = extract_search_terms(query)
    start = 0
    for index, word in enumerate(words):
        lowered = word.lower()
        if any(term in lowered for term in terms):
            start = max(0, index - 2)
            break

    snippet = " ".join(words[start : start + math.ceil(max_length / 8)])
    if len(snippet) < len(content):
        return highlighter.highlight_text(snippet + "...", query)
    return match.highlighted_content
