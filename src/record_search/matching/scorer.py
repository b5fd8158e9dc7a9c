"""Relevance scoring for text, monetary and boolean queries."""

from __future__ import annotations

import math

from record_search.matching.matcher import (
    build_haystack,
    matches_boolean_query,
    monetary_field_text,
)
from record_search.query.boolean import parse_boolean_query
from record_search.query.monetary import (
    extract_monetary_tokens,
    has_monetary_potential,
    is_close_match,
    matches_monetary_string,
    parse_monetary_query,
)
from record_search.query.tokenizer import tokenize
from record_search.types import (
    BooleanOperator,
    FinancialRecord,
    ParsedQuery,
    PriceRange,
    SearchRecord,
    SimpleQuery,
)

TOTAL_VALUE = "total_value"
LINE_ITEM_TOTAL = "line_item_total"
LINE_ITEM_UNIT_PRICE = "line_item_unit_price"

VISIBLE_MATCH_BONUS = 2000
VISIBLE_EXACT_BONUS = 1000
VISIBLE_FIELD_BONUS = {TOTAL_VALUE: 500, LINE_ITEM_TOTAL: 300, LINE_ITEM_UNIT_PRICE: 200}
RANGE_PROXIMITY_WEIGHT = {TOTAL_VALUE: 800, LINE_ITEM_TOTAL: 700, LINE_ITEM_UNIT_PRICE: 600}
# (exact, within 0.01, within 1.00)
AMOUNT_TIERS = {
    TOTAL_VALUE: (1000, 800, 600),
    LINE_ITEM_TOTAL: (900, 700, 500),
    LINE_ITEM_UNIT_PRICE: (800, 600, 400),
}
STRING_MATCH_BONUS = {TOTAL_VALUE: 750, LINE_ITEM_TOTAL: 650, LINE_ITEM_UNIT_PRICE: 550}
NEGATION_SCORE = 10.0


def calculate_relevance_score(record: SearchRecord, query: str) -> float:
    """Additive text score over title, summary and the full haystack."""
    tokens = tokenize(query)
    if not tokens:
        return 0.0

    phrase = query.lower()
    title = record.title.lower()
    summary = record.summary.lower()
    haystack = build_haystack(record)

    score = 0.0
    if phrase in title:
        score += 100
    score += 20 * sum(1 for token in tokens if token in title)
    score += 10 * sum(1 for token in tokens if token in summary)
    score += 5 * sum(1 for token in tokens if token in haystack)
    if phrase in title:
        score += 50
    if phrase in summary:
        score += 25
    return score


def _monetary_fields(record: FinancialRecord) -> list[tuple[str, float]]:
    fields = [(TOTAL_VALUE, record.total_value)]
    for item in record.line_items:
        fields.append((LINE_ITEM_TOTAL, item.total))
        fields.append((LINE_ITEM_UNIT_PRICE, item.unit_price))
    return fields


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _range_proximity(value: float, price_range: PriceRange, weight: int) -> int:
    center = (price_range.min + price_range.max) / 2
    size = price_range.max - price_range.min
    distance = 0.0 if size <= 0 else min(abs(value - center) / size, 1.0)
    return _round_half_up(weight * (1 - distance))


def calculate_monetary_relevance_score(
    record: SearchRecord, query: str, *, explicit: bool = False
) -> float:
    """Score a monetary query (leading `$` stripped) against a financial record.

    Matches on amounts the user can see dominate: any visible match earns a
    flat bonus, plus a bonus per matched field kind and another one when a
    match is exact. Range proximity, numeric tolerance tiers and progressive
    string matches are layered on top. Implicit queries also get small
    bonuses for text tokens found in monetary-flagged fields.
    """
    tokens = extract_monetary_tokens(query)
    if tokens.is_empty or not isinstance(record, FinancialRecord):
        return 0.0

    fields = _monetary_fields(record)
    score = 0.0

    matched_kinds: set[str] = set()
    exact_visible = False
    for token, amount in zip(tokens.amount_tokens, tokens.amounts, strict=True):
        for kind, value in fields:
            if is_close_match(value, amount) or matches_monetary_string(token, value):
                matched_kinds.add(kind)
                exact_visible = exact_visible or value == amount
    if matched_kinds:
        score += VISIBLE_MATCH_BONUS
        score += sum(VISIBLE_FIELD_BONUS[kind] for kind in matched_kinds)
        if exact_visible:
            score += VISIBLE_EXACT_BONUS

    if tokens.range is not None:
        for kind, value in fields:
            if tokens.range.contains(value):
                score += _range_proximity(value, tokens.range, RANGE_PROXIMITY_WEIGHT[kind])

    for amount in tokens.amounts:
        for kind, value in fields:
            exact, near, loose = AMOUNT_TIERS[kind]
            if value == amount:
                score += exact
            elif is_close_match(value, amount, 0.01):
                score += near
            elif is_close_match(value, amount, 1.0):
                score += loose

    for token in tokens.amount_tokens:
        for kind, value in fields:
            if matches_monetary_string(token, value):
                score += STRING_MATCH_BONUS[kind]

    if not explicit and tokens.text_tokens:
        for item in record.line_items:
            text = monetary_field_text(item)
            score += 50 * sum(1 for token in tokens.text_tokens if token in text)
        if record.is_monetary_field("title"):
            title = record.title.lower()
            score += 10 * sum(1 for token in tokens.text_tokens if token in title)
        if record.is_monetary_field("summary"):
            summary = record.summary.lower()
            score += 5 * sum(1 for token in tokens.text_tokens if token in summary)

    return score


def score_text_with_monetary_support(record: SearchRecord, text: str) -> float:
    monetary = parse_monetary_query(text)
    if monetary.is_monetary:
        return calculate_monetary_relevance_score(record, monetary.search_query, explicit=True)
    score = calculate_relevance_score(record, text)
    if has_monetary_potential(text):
        score += calculate_monetary_relevance_score(record, text)
    return score


def score_boolean_query(record: SearchRecord, parsed: ParsedQuery) -> float:
    if isinstance(parsed, SimpleQuery):
        return score_text_with_monetary_support(record, parsed.text)

    left = score_boolean_query(record, parsed.left)
    if parsed.operator is BooleanOperator.NOT:
        if parsed.right is None:
            return NEGATION_SCORE if left > 0 else 0.0
        return 0.0 if matches_boolean_query(record, parsed.right) else left

    right = score_boolean_query(record, parsed.right) if parsed.right is not None else 0.0
    if parsed.operator is BooleanOperator.AND:
        return min(left, right)
    return max(left, right)


def score_record(record: SearchRecord, query: str) -> float:
    return score_boolean_query(record, parse_boolean_query(query))


def score_records(records: list[SearchRecord], query: str) -> dict[str, float]:
    parsed = parse_boolean_query(query)
    return {record.id: score_boolean_query(record, parsed) for record in records}
