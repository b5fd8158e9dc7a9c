"""Facet values, counts and selection filtering."""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone

from record_search.types import (
    DocumentRecord,
    FacetValue,
    FinancialRecord,
    OrganizationRecord,
    PersonRecord,
    SearchRecord,
)

GROUP_BY = "groupBy"

FACET_KEYS: tuple[str, ...] = (
    "entityType",
    "project",
    "status",
    "documentType",
    "client",
    "issuedDate",
    "totalValue",
    "personType",
    "contactOrganization",
    "organizationType",
    "tradeFocus",
    "costCodeCategory",
    "costCode",
)

GROUP_BY_OPTIONS: tuple[str, ...] = ("None", "Type", "Project", "Status", "Client")

FacetSelections = dict[str, set[str]]

_ISSUED_DATE_BUCKETS = (
    (7, "Last 7 days"),
    (30, "Last 30 days"),
    (90, "Last 3 months"),
    (180, "Last 6 months"),
    (365, "Last year"),
    (730, "Last 2 years"),
)


def bucket_total_value(total: float) -> str:
    if total < 10_000:
        return "< $10k"
    if total < 50_000:
        return "$10k–$50k"
    if total < 100_000:
        return "$50k–$100k"
    return "$100k+"


def bucket_issued_date(issued: datetime, now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    if issued.tzinfo is None:
        issued = issued.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    days = (now - issued).days
    for limit, label in _ISSUED_DATE_BUCKETS:
        if days <= limit:
            return label
    return "Older than 2 years"


def _mode(values: list[str]) -> str | None:
    if not values:
        return None
    return Counter(values).most_common(1)[0][0]


def _line_item_cost_code_category(record: FinancialRecord) -> str | None:
    return _mode(
        [
            item.cost_code_category_name or item.cost_code_category
            for item in record.line_items
            if item.cost_code_category_name or item.cost_code_category
        ]
    )


def _line_item_cost_code(record: FinancialRecord) -> str | None:
    return _mode(
        [
            item.cost_code_name or item.cost_code
            for item in record.line_items
            if item.cost_code_name or item.cost_code
        ]
    )


def get_facet_value(
    record: SearchRecord, key: str, *, now: datetime | None = None
) -> str | None:
    """The single facet value a record contributes for `key`, if any."""
    value: str | None = None
    if key == "entityType":
        value = record.entity_type.value
    elif key == "project":
        value = record.project
    elif key == "status":
        value = record.status
    elif key == "client":
        value = record.client
    elif key == "documentType":
        if isinstance(record, DocumentRecord):
            value = record.document_type
    elif key == "issuedDate":
        if isinstance(record, FinancialRecord):
            value = bucket_issued_date(record.issued_date, now)
    elif key == "totalValue":
        if isinstance(record, FinancialRecord):
            value = bucket_total_value(record.total_value)
    elif key == "personType":
        if isinstance(record, PersonRecord):
            value = record.person_type.value
    elif key == "contactOrganization":
        if isinstance(record, PersonRecord):
            value = record.associated_organization
    elif key == "organizationType":
        if isinstance(record, OrganizationRecord):
            value = record.organization_type.value
    elif key == "tradeFocus":
        if isinstance(record, (PersonRecord, OrganizationRecord)):
            value = record.trade_focus
    elif key == "costCodeCategory":
        if isinstance(record, FinancialRecord):
            value = _line_item_cost_code_category(record)
    elif key == "costCode":
        if isinstance(record, FinancialRecord):
            value = _line_item_cost_code(record)
    return value or None


def compute_facets(
    records: list[SearchRecord], *, now: datetime | None = None
) -> dict[str, list[FacetValue]]:
    """Count facet values over an already-filtered result set.

    Each facet's values are ordered by descending count, then alphabetically.
    Facets with no observed values are omitted. The `groupBy` facet lists the
    grouping options, each counted as the full result size.
    """
    counters: dict[str, Counter[str]] = {key: Counter() for key in FACET_KEYS}
    for record in records:
        for key in FACET_KEYS:
            value = get_facet_value(record, key, now=now)
            if value is not None:
                counters[key][value] += 1

    facets: dict[str, list[FacetValue]] = {}
    for key in FACET_KEYS:
        counter = counters[key]
        if not counter:
            continue
        ordered = sorted(counter.items(), key=lambda item: (-item[1], item[0]))
        facets[key] = [FacetValue(key=key, value=value, count=count) for value, count in ordered]

    facets[GROUP_BY] = [
        FacetValue(key=GROUP_BY, value=option, count=len(records)) for option in GROUP_BY_OPTIONS
    ]
    return facets


def matches_selections(
    record: SearchRecord,
    selections: FacetSelections | None,
    *,
    now: datetime | None = None,
) -> bool:
    """OR within a facet key, AND across keys; `groupBy` never filters."""
    if not selections:
        return True
    for key, values in selections.items():
        if key == GROUP_BY or not values:
            continue
        value = get_facet_value(record, key, now=now)
        if value is None or value not in values:
            return False
    return True


def selected_group_by(selections: FacetSelections | None) -> str | None:
    if not selections:
        return None
    values = selections.get(GROUP_BY)
    if not values:
        return None
    return sorted(values)[0]
