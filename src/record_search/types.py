"""Shared domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Union

MetadataValue = Union[str, int, float, bool, None]


class EntityType(str, Enum):
    DOCUMENT = "Document"
    CLIENT_INVOICE = "ClientInvoice"
    PURCHASE_ORDER = "PurchaseOrder"
    BILL = "Bill"
    RECEIPT = "Receipt"
    PAYMENT = "Payment"
    PERSON = "Person"
    ORGANIZATION = "Organization"
    BUILDERTREND = "Buildertrend"
    DAILY_LOG = "DailyLog"


FINANCIAL_ENTITY_TYPES = frozenset(
    {
        EntityType.CLIENT_INVOICE,
        EntityType.PURCHASE_ORDER,
        EntityType.BILL,
        EntityType.RECEIPT,
        EntityType.PAYMENT,
    }
)

_ENTITY_LABELS: dict[EntityType, tuple[str, str]] = {
    EntityType.DOCUMENT: ("Document", "Documents"),
    EntityType.DAILY_LOG: ("Daily Log", "Daily Logs"),
    EntityType.CLIENT_INVOICE: ("Client Invoice", "Client Invoices"),
    EntityType.PURCHASE_ORDER: ("Purchase Order", "Purchase Orders"),
    EntityType.BILL: ("Bill", "Bills"),
    EntityType.RECEIPT: ("Receipt", "Receipts"),
    EntityType.PAYMENT: ("Payment", "Payments"),
    EntityType.PERSON: ("Person", "People"),
    EntityType.ORGANIZATION: ("Organization", "Organizations"),
    EntityType.BUILDERTREND: ("Buildertrend", "Buildertrend"),
}


def format_entity_type(entity_type: EntityType, *, plural: bool = False) -> str:
    singular, plural_label = _ENTITY_LABELS.get(
        entity_type, (entity_type.value, entity_type.value)
    )
    return plural_label if plural else singular


class LineItemType(str, Enum):
    MATERIAL = "Material"
    LABOR = "Labor"
    SUBCONTRACTOR = "Subcontractor"
    OTHER = "Other"
    EQUIPMENT = "Equipment"


class PersonType(str, Enum):
    CLIENT = "Client"
    CONTACT = "Contact"


class OrganizationType(str, Enum):
    SUBCONTRACTOR = "Subcontractor"
    VENDOR = "Vendor"


MONETARY = "monetary"
NON_MONETARY = "non-monetary"

# Which line-item fields hold currency amounts, keyed by LineItem attribute.
DEFAULT_LINE_ITEM_FIELD_METADATA: dict[str, str] = {
    "title": NON_MONETARY,
    "description": NON_MONETARY,
    "quantity": NON_MONETARY,
    "unit_of_measure": NON_MONETARY,
    "unit_price": MONETARY,
    "total": MONETARY,
    "item_type": NON_MONETARY,
}

DEFAULT_RECORD_FIELD_METADATA: dict[str, str] = {
    "title": NON_MONETARY,
    "summary": NON_MONETARY,
    "total_value": MONETARY,
}


@dataclass(slots=True, frozen=True)
class LineItem:
    """A priced line on a financial record."""

    line_item_id: str
    title: str
    description: str
    quantity: float
    unit_of_measure: str
    unit_price: float
    total: float
    item_type: LineItemType = LineItemType.OTHER
    cost_code: str | None = None
    cost_code_name: str | None = None
    cost_code_category: str | None = None
    cost_code_category_name: str | None = None
    field_metadata: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_LINE_ITEM_FIELD_METADATA)
    )

    def is_monetary_field(self, name: str) -> bool:
        return self.field_metadata.get(name, DEFAULT_LINE_ITEM_FIELD_METADATA.get(name)) == MONETARY


@dataclass(slots=True, frozen=True, kw_only=True)
class RecordBase:
    """Fields shared by every searchable record."""

    id: str
    title: str
    summary: str = ""
    project: str = ""
    client: str = ""
    status: str = ""
    tags: list[str] = field(default_factory=list)
    metadata: dict[str, MetadataValue] = field(default_factory=dict)
    updated_at: datetime
    created_at: datetime | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class DocumentRecord(RecordBase):
    document_type: str = ""
    author: str = ""
    entity_type: EntityType = field(default=EntityType.DOCUMENT, init=False)


@dataclass(slots=True, frozen=True, kw_only=True)
class FinancialRecord(RecordBase):
    """Invoices, purchase orders, bills, receipts and payments."""

    entity_type: EntityType
    total_value: float
    issued_date: datetime
    due_date: datetime | None = None
    line_items: list[LineItem] = field(default_factory=list)
    field_metadata: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_RECORD_FIELD_METADATA)
    )

    def __post_init__(self) -> None:
        if self.entity_type not in FINANCIAL_ENTITY_TYPES:
            raise ValueError(f"Not a financial entity type: {self.entity_type}")

    def is_monetary_field(self, name: str) -> bool:
        return self.field_metadata.get(name, DEFAULT_RECORD_FIELD_METADATA.get(name)) == MONETARY


@dataclass(slots=True, frozen=True, kw_only=True)
class PersonRecord(RecordBase):
    person_type: PersonType = PersonType.CONTACT
    job_title: str = ""
    associated_organization: str | None = None
    email: str = ""
    phone: str = ""
    location: str = ""
    trade_focus: str | None = None
    entity_type: EntityType = field(default=EntityType.PERSON, init=False)


@dataclass(slots=True, frozen=True, kw_only=True)
class OrganizationRecord(RecordBase):
    organization_type: OrganizationType = OrganizationType.VENDOR
    trade_focus: str = ""
    service_area: str = ""
    primary_contact: str = ""
    phone: str = ""
    email: str = ""
    website: str | None = None
    entity_type: EntityType = field(default=EntityType.ORGANIZATION, init=False)


@dataclass(slots=True, frozen=True, kw_only=True)
class BuildertrendRecord(RecordBase):
    """Quick-navigation entry, matched only by an exact trigger phrase."""

    path: str = ""
    description: str = ""
    icon: str = ""
    url: str = ""
    trigger_queries: list[str] = field(default_factory=list)
    entity_type: EntityType = field(default=EntityType.BUILDERTREND, init=False)


@dataclass(slots=True, frozen=True)
class WeatherConditions:
    description: str
    temperature_current: float | None = None
    temperature_low: float | None = None
    temperature_unit: str = "F"
    wind_speed: float | None = None
    wind_unit: str = "mph"
    humidity: float | None = None
    precipitation_total: float | None = None
    precipitation_unit: str = "in"


@dataclass(slots=True, frozen=True)
class StructuredNotes:
    progress: str | None = None
    issues: str | None = None
    materials_delivered: str | None = None
    additional: str | None = None

    def values(self) -> list[str]:
        return [
            note
            for note in (self.progress, self.issues, self.materials_delivered, self.additional)
            if note
        ]


@dataclass(slots=True, frozen=True, kw_only=True)
class DailyLogRecord(RecordBase):
    log_date: datetime | None = None
    author: str = ""
    weather: WeatherConditions | None = None
    weather_notes: str | None = None
    notes: StructuredNotes = field(default_factory=StructuredNotes)
    attachments: list[str] = field(default_factory=list)
    entity_type: EntityType = field(default=EntityType.DAILY_LOG, init=False)


SearchRecord = Union[
    DocumentRecord,
    FinancialRecord,
    PersonRecord,
    OrganizationRecord,
    BuildertrendRecord,
    DailyLogRecord,
]


class BooleanOperator(str, Enum):
    AND = "AND"
    OR = "OR"
    NOT = "NOT"


@dataclass(slots=True, frozen=True)
class SimpleQuery:
    text: str


@dataclass(slots=True, frozen=True)
class BooleanQuery:
    operator: BooleanOperator
    left: "ParsedQuery"
    right: "ParsedQuery | None" = None


ParsedQuery = Union[SimpleQuery, BooleanQuery]


@dataclass(slots=True, frozen=True)
class PriceRange:
    min: float
    max: float

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


@dataclass(slots=True)
class FacetValue:
    key: str
    value: str
    count: int


@dataclass(slots=True)
class SearchGroup:
    """A display partition of matched records."""

    key: str
    title: str
    items: list[SearchRecord]
    entity_type: EntityType | None = None


@dataclass(slots=True)
class SearchResponse:
    query: str
    total_results: int
    records: list[SearchRecord]
    scores: dict[str, float]
    facets: dict[str, list[FacetValue]]
    groups: list[SearchGroup]
    limited_groups: list[SearchGroup]
    is_grouped: bool
    is_monetary: bool
    elapsed_ms: float = 0.0
