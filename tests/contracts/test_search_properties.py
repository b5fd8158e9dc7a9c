import re
from datetime import datetime, timezone

import pytest

from record_search.engine import SearchEngine
from record_search.highlight.highlighter import Highlighter
from record_search.matching.matcher import matches_record
from record_search.matching.scorer import score_record
from record_search.types import DocumentRecord, EntityType, FinancialRecord, LineItem, LineItemType

_UPDATED = datetime(2024, 5, 1, tzinfo=timezone.utc)


def _bill_946() -> FinancialRecord:
    return FinancialRecord(
        id="bill-946",
        title="Interior finishing bill",
        summary="Second floor",
        entity_type=EntityType.BILL,
        total_value=946.0,
        issued_date=_UPDATED,
        updated_at=_UPDATED,
        line_items=[
            LineItem(
                line_item_id="li-1",
                title="Drywall install",
                description="Hang and tape",
                quantity=22.0,
                unit_of_measure="sheet",
                unit_price=43.0,
                total=946.0,
                item_type=LineItemType.LABOR,
            )
        ],
    )


def _labor_bill() -> FinancialRecord:
    return FinancialRecord(
        id="bill-labor",
        title="Framing labor",
        entity_type=EntityType.BILL,
        total_value=600.0,
        issued_date=_UPDATED,
        updated_at=_UPDATED,
        line_items=[
            LineItem(
                line_item_id="li-1",
                title="Framing crew",
                description="5 hours at site",
                quantity=5.0,
                unit_of_measure="hours",
                unit_price=120.0,
                total=600.0,
                item_type=LineItemType.LABOR,
            )
        ],
    )


@pytest.mark.parametrize(("query", "expected"), [("$946", True), ("$43", True), ("$22", False), ("22", False)])
def test_bill_example(query: str, expected: bool) -> None:
    assert matches_record(_bill_946(), query) is expected


def test_dollar_amount_never_matches_quantity_or_description() -> None:
    assert not matches_record(_labor_bill(), "$5")
    assert not matches_record(_labor_bill(), "$5.00")
    assert matches_record(_labor_bill(), "$600")


def test_range_matches_iff_visible_amount_inside() -> None:
    inside = _bill_946()
    assert matches_record(_labor_bill(), "$500-$700")
    assert not matches_record(inside, "$1000-$2000")
    assert matches_record(inside, "$40-$50")


def test_empty_query_matches_every_regular_record() -> None:
    records = [_bill_946(), _labor_bill(), DocumentRecord(id="d", title="Plan", updated_at=_UPDATED)]
    assert SearchEngine(records).search("   ").total_results == len(records)


def test_unique_title_substring_matches_its_record() -> None:
    doc = DocumentRecord(id="d", title="Foundation waterproofing memo", updated_at=_UPDATED)
    assert matches_record(doc, "waterproofing")


@pytest.mark.parametrize(
    ("left", "right"),
    [("drywall", "interior"), ("$946", "finishing"), ("hang", "missing")],
)
def test_and_is_min_or_is_max(left: str, right: str) -> None:
    bill = _bill_946()
    a = score_record(bill, left)
    b = score_record(bill, right)
    assert score_record(bill, f"{left} AND {right}") == min(a, b)
    assert score_record(bill, f"{left} OR {right}") == max(a, b)


def test_entity_type_facet_sums_to_total() -> None:
    records = [_bill_946(), _labor_bill(), DocumentRecord(id="d", title="Plan", updated_at=_UPDATED)]
    response = SearchEngine(records).search("")
    assert sum(f.count for f in response.facets["entityType"]) == response.total_results


@pytest.mark.parametrize(
    ("text", "query", "mode"),
    [
        ("$946.00 total, 946 again, 9,460 later", "$946 946 total", "monetary"),
        ("Roof roofing roofer", "roof roofing roofer", "text"),
        ("$1,500 - $2,000 bids at 1,750", "$1500-$2000", "monetary"),
    ],
)
def test_highlights_never_overlap_and_cache_is_stable(text: str, query: str, mode: str) -> None:
    highlighter = Highlighter()
    first = highlighter.highlight(text, query, mode)
    tags = re.findall(r"</?mark", first)
    assert tags == ["<mark", "</mark"] * (len(tags) // 2)
    assert highlighter.highlight(text, query, mode) == first
