"""Record matching for text, monetary and boolean queries."""

from __future__ import annotations

from record_search.query.boolean import parse_boolean_query
from record_search.query.monetary import (
    extract_monetary_tokens,
    has_monetary_potential,
    is_close_match,
    matches_monetary_string,
    number_to_string,
    parse_monetary_query,
)
from record_search.query.tokenizer import tokenize
from record_search.types import (
    BooleanOperator,
    BuildertrendRecord,
    DailyLogRecord,
    DocumentRecord,
    FinancialRecord,
    LineItem,
    OrganizationRecord,
    ParsedQuery,
    PersonRecord,
    SearchRecord,
    SimpleQuery,
)

_LINE_ITEM_FIELDS = (
    "title",
    "description",
    "quantity",
    "unit_of_measure",
    "unit_price",
    "total",
    "item_type",
)


def build_haystack(record: SearchRecord) -> str:
    """Concatenated, lowercased searchable text of a record."""
    parts: list[str] = [
        record.title,
        record.summary,
        record.project,
        record.client,
        record.status,
        " ".join(record.tags),
    ]
    parts.extend("" if value is None else str(value) for value in record.metadata.values())

    if isinstance(record, FinancialRecord):
        for item in record.line_items:
            parts.extend((item.title, item.description, item.item_type.value))
    elif isinstance(record, DocumentRecord):
        parts.extend((record.document_type, record.author))
    elif isinstance(record, PersonRecord):
        parts.extend(
            (
                record.person_type.value,
                record.job_title,
                record.associated_organization or "",
                record.email,
                record.phone,
                record.location,
                record.trade_focus or "",
            )
        )
    elif isinstance(record, OrganizationRecord):
        parts.extend(
            (
                record.organization_type.value,
                record.trade_focus,
                record.service_area,
                record.primary_contact,
                record.phone,
                record.email,
                record.website or "",
            )
        )
    elif isinstance(record, DailyLogRecord):
        parts.append(record.author)
        if record.weather is not None:
            parts.append(record.weather.description)
        parts.append(record.weather_notes or "")
        parts.extend(record.notes.values())
    elif isinstance(record, BuildertrendRecord):
        parts.extend((record.path, record.description, " ".join(record.trigger_queries)))

    return " ".join(part for part in parts if part).lower()


def matches_trigger(record: BuildertrendRecord, query: str) -> bool:
    needle = query.strip().lower()
    return any(needle == trigger.strip().lower() for trigger in record.trigger_queries)


def matches_query(record: SearchRecord, query: str) -> bool:
    """Every query token must be a substring of the record's haystack."""
    if isinstance(record, BuildertrendRecord):
        return matches_trigger(record, query)
    tokens = tokenize(query)
    if not tokens:
        return True
    haystack = build_haystack(record)
    return all(token in haystack for token in tokens)


def visible_amounts(record: FinancialRecord) -> list[float]:
    """Amounts shown to the user: the total plus line totals and unit prices."""
    values = [record.total_value]
    for item in record.line_items:
        values.extend((item.total, item.unit_price))
    return values


def monetary_field_text(item: LineItem) -> str:
    """Text of the line-item fields flagged as monetary."""
    chunks: list[str] = []
    for name in _LINE_ITEM_FIELDS:
        if not item.is_monetary_field(name):
            continue
        value = getattr(item, name)
        if isinstance(value, (int, float)):
            chunks.append(number_to_string(value))
        elif hasattr(value, "value"):
            chunks.append(str(value.value))
        else:
            chunks.append(str(value))
    return " ".join(chunks).lower()


def matches_monetary_query(record: SearchRecord, query: str, *, explicit: bool = False) -> bool:
    """Match a monetary query (leading `$` already stripped) against a record.

    Explicit queries only ever compare against visible amounts. Implicit ones
    additionally accept records where every text token appears in a line
    item's monetary-flagged fields. Quantities and descriptions never take
    part, so `$5` does not match a "5 hours" line.
    """
    tokens = extract_monetary_tokens(query)
    if tokens.is_empty:
        return True
    if not isinstance(record, FinancialRecord):
        return False

    amounts = visible_amounts(record)
    if tokens.range is not None and any(tokens.range.contains(value) for value in amounts):
        return True

    for amount in tokens.amounts:
        if any(is_close_match(value, amount) for value in amounts):
            return True
    for token in tokens.amount_tokens:
        if any(matches_monetary_string(token, value) for value in amounts):
            return True

    if explicit:
        return False

    if tokens.text_tokens:
        for item in record.line_items:
            text = monetary_field_text(item)
            if all(token in text for token in tokens.text_tokens):
                return True
    return False


def matches_query_with_monetary_support(record: SearchRecord, text: str) -> bool:
    monetary = parse_monetary_query(text)
    if monetary.is_monetary:
        if isinstance(record, BuildertrendRecord):
            return matches_trigger(record, text)
        return matches_monetary_query(record, monetary.search_query, explicit=True)
    if matches_query(record, text):
        return True
    if isinstance(record, BuildertrendRecord) or not has_monetary_potential(text):
        return False
    return matches_monetary_query(record, text)


def matches_boolean_query(record: SearchRecord, parsed: ParsedQuery) -> bool:
    if isinstance(parsed, SimpleQuery):
        return matches_query_with_monetary_support(record, parsed.text)

    left = matches_boolean_query(record, parsed.left)
    if parsed.operator is BooleanOperator.NOT:
        if parsed.right is None:
            return not left
        return left and not matches_boolean_query(record, parsed.right)

    right = parsed.right is not None and matches_boolean_query(record, parsed.right)
    if parsed.operator is BooleanOperator.AND:
        return left and right
    return left or right


def matches_record(record: SearchRecord, query: str) -> bool:
    """Top-level match used by the engine's filter pass."""
    if isinstance(record, BuildertrendRecord):
        return matches_trigger(record, query)
    return matches_boolean_query(record, parse_boolean_query(query))
