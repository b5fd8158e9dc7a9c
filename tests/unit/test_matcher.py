from datetime import datetime, timezone

from record_search.matching.matcher import (
    build_haystack,
    matches_monetary_query,
    matches_query,
    matches_record,
)
from record_search.types import (
    BuildertrendRecord,
    DailyLogRecord,
    DocumentRecord,
    EntityType,
    FinancialRecord,
    LineItem,
    LineItemType,
    PersonRecord,
    StructuredNotes,
)

_UPDATED = datetime(2024, 5, 1, tzinfo=timezone.utc)


def _line_item(**overrides: object) -> LineItem:
    values = {
        "line_item_id": "li-1",
        "title": "Drywall install",
        "description": "Hang and tape 22 sheets",
        "quantity": 22.0,
        "unit_of_measure": "sheet",
        "unit_price": 43.0,
        "total": 946.0,
        "item_type": LineItemType.LABOR,
    }
    values.update(overrides)
    return LineItem(**values)


def _bill(**overrides: object) -> FinancialRecord:
    values = {
        "id": "bill-1",
        "title": "Interior finishing bill",
        "summary": "Second floor drywall",
        "project": "Maple Street Remodel",
        "client": "Hartley Family",
        "status": "Open",
        "entity_type": EntityType.BILL,
        "total_value": 946.0,
        "issued_date": _UPDATED,
        "updated_at": _UPDATED,
        "line_items": [_line_item()],
    }
    values.update(overrides)
    return FinancialRecord(**values)


def _document() -> DocumentRecord:
    return DocumentRecord(
        id="doc-1",
        title="Roof inspection report",
        summary="Shingles replaced on the north slope",
        project="Maple Street Remodel",
        tags=["roofing", "inspection"],
        metadata={"pages": 12},
        document_type="Report",
        author="Dana Cho",
        updated_at=_UPDATED,
    )


def _shortcut() -> BuildertrendRecord:
    return BuildertrendRecord(
        id="bt-1",
        title="Schedule",
        path="/app/schedule",
        description="Open the project schedule",
        trigger_queries=["schedule", "calendar"],
        updated_at=_UPDATED,
    )


def test_haystack_covers_common_and_variant_fields() -> None:
    haystack = build_haystack(_document())
    for fragment in ("roof inspection", "north slope", "maple street", "roofing", "12", "report", "dana cho"):
        assert fragment in haystack


def test_haystack_includes_line_item_text_but_not_amounts() -> None:
    haystack = build_haystack(_bill())
    assert "drywall install" in haystack
    assert "labor" in haystack
    assert "946" not in haystack


def test_daily_log_haystack_includes_notes() -> None:
    log = DailyLogRecord(
        id="log-1",
        title="Daily log",
        author="Sam",
        notes=StructuredNotes(progress="Framing complete", issues="Late lumber"),
        updated_at=_UPDATED,
    )
    assert matches_query(log, "lumber framing")


def test_text_query_requires_every_token() -> None:
    doc = _document()
    assert matches_query(doc, "ROOF north")
    assert not matches_query(doc, "roof south")
    assert matches_query(doc, "")


def test_person_fields_are_searchable() -> None:
    person = PersonRecord(
        id="p-1",
        title="Ava Lopez",
        job_title="Site superintendent",
        associated_organization="Lopez Builders",
        updated_at=_UPDATED,
    )
    assert matches_record(person, "superintendent lopez")


def test_buildertrend_matches_only_exact_trigger() -> None:
    shortcut = _shortcut()
    assert matches_record(shortcut, " Calendar ")
    assert not matches_record(shortcut, "project schedule")
    assert not matches_record(shortcut, "sched")
    assert not matches_record(shortcut, "")


def test_monetary_query_only_for_financial_records() -> None:
    assert not matches_monetary_query(_document(), "12")
    assert matches_monetary_query(_document(), "   ")


def test_monetary_range_over_visible_amounts() -> None:
    bill = _bill()
    assert matches_monetary_query(bill, "900-1000")
    assert matches_monetary_query(bill, "40 to 50")
    assert not matches_monetary_query(bill, "1000-2000")


def test_explicit_query_ignores_quantity_and_description() -> None:
    bill = _bill()
    assert matches_record(bill, "$946")
    assert matches_record(bill, "$43")
    assert not matches_record(bill, "$22")


def test_implicit_text_fallback_uses_monetary_flagged_fields() -> None:
    item = _line_item(
        field_metadata={
            "title": "monetary",
            "description": "non-monetary",
            "quantity": "non-monetary",
            "unit_of_measure": "non-monetary",
            "unit_price": "monetary",
            "total": "monetary",
            "item_type": "non-monetary",
        }
    )
    bill = _bill(line_items=[item])
    assert matches_monetary_query(bill, "drywall")
    assert not matches_monetary_query(bill, "drywall", explicit=True)
    assert not matches_monetary_query(_bill(), "drywall")


def test_boolean_queries_combine_leaves() -> None:
    doc = _document()
    assert matches_record(doc, "roof AND inspection")
    assert not matches_record(doc, "roof AND invoice")
    assert matches_record(doc, "invoice OR shingles")
    assert matches_record(doc, "roof NOT invoice")
    assert not matches_record(doc, "roof NOT shingles")
    assert matches_record(doc, "NOT invoice")
    assert not matches_record(doc, "NOT roof")


def test_boolean_leaf_with_dollar_is_monetary_only() -> None:
    bill = _bill()
    assert matches_record(bill, "$946 AND drywall")
    assert not matches_record(bill, "$22 AND drywall")
    assert matches_record(bill, "$22 OR drywall")


def test_long_explicit_amount_matches_shorter_unit_price() -> None:
    bill = _bill(total_value=64.0, line_items=[_line_item(unit_price=8.0, total=64.0)])
    assert matches_record(bill, "$8000")
    assert not matches_record(bill, "$9000")
