"""Corpus loading and normalization into typed records."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from record_search.types import (
    DEFAULT_LINE_ITEM_FIELD_METADATA,
    DEFAULT_RECORD_FIELD_METADATA,
    FINANCIAL_ENTITY_TYPES,
    BuildertrendRecord,
    DailyLogRecord,
    DocumentRecord,
    EntityType,
    FinancialRecord,
    LineItem,
    LineItemType,
    OrganizationRecord,
    OrganizationType,
    PersonRecord,
    PersonType,
    SearchRecord,
    StructuredNotes,
    WeatherConditions,
)

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Corpus field name -> LineItem attribute, for fieldMetadata maps.
_LINE_ITEM_FIELD_NAMES = {
    "lineItemTitle": "title",
    "lineItemDescription": "description",
    "lineItemQuantity": "quantity",
    "lineItemQuantityUnitOfMeasure": "unit_of_measure",
    "lineItemUnitPrice": "unit_price",
    "lineItemTotal": "total",
    "lineItemType": "item_type",
}
_RECORD_FIELD_NAMES = {"title": "title", "summary": "summary", "totalValue": "total_value"}


class CorpusError(ValueError):
    """Raised for a corpus entry that cannot be turned into a record."""


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp (a trailing `Z` is accepted) as UTC-aware."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _number(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _optional_number(value: Any) -> float | None:
    if value is None:
        return None
    return _number(value)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _field_metadata(raw: Any, names: dict[str, str], defaults: dict[str, str]) -> dict[str, str]:
    metadata = dict(defaults)
    if isinstance(raw, dict):
        for key, flag in raw.items():
            name = names.get(key, key)
            if name in metadata and flag in ("monetary", "non-monetary"):
                metadata[name] = flag
    return metadata


def _line_item_type(value: Any) -> LineItemType:
    try:
        return LineItemType(value)
    except ValueError:
        logger.debug("Unknown line item type %r, treating as Other", value)
        return LineItemType.OTHER


def normalize_line_item(raw: dict[str, Any]) -> LineItem:
    return LineItem(
        line_item_id=_text(raw.get("lineItemId")),
        title=_text(raw.get("lineItemTitle")),
        description=_text(raw.get("lineItemDescription")),
        quantity=_number(raw.get("lineItemQuantity")),
        unit_of_measure=_text(raw.get("lineItemQuantityUnitOfMeasure")),
        unit_price=_number(raw.get("lineItemUnitPrice")),
        total=_number(raw.get("lineItemTotal")),
        item_type=_line_item_type(raw.get("lineItemType")),
        cost_code=raw.get("costCode"),
        cost_code_name=raw.get("costCodeName"),
        cost_code_category=raw.get("costCodeCategory"),
        cost_code_category_name=raw.get("costCodeCategoryName"),
        field_metadata=_field_metadata(
            raw.get("fieldMetadata"), _LINE_ITEM_FIELD_NAMES, DEFAULT_LINE_ITEM_FIELD_METADATA
        ),
    )


def _weather(raw: Any) -> WeatherConditions | None:
    if not isinstance(raw, dict):
        return None
    temperature = _mapping(raw.get("temperature"))
    wind = _mapping(raw.get("wind"))
    precipitation = _mapping(raw.get("precipitation"))
    return WeatherConditions(
        description=_text(raw.get("description")),
        temperature_current=_optional_number(temperature.get("current")),
        temperature_low=_optional_number(temperature.get("low")),
        temperature_unit=_text(temperature.get("unit") or "F"),
        wind_speed=_optional_number(wind.get("speed")),
        wind_unit=_text(wind.get("unit") or "mph"),
        humidity=_optional_number(raw.get("humidity")),
        precipitation_total=_optional_number(precipitation.get("total")),
        precipitation_unit=_text(precipitation.get("unit") or "in"),
    )


def normalize_record(raw: dict[str, Any]) -> SearchRecord:
    """Coerce one corpus entry into its typed record variant."""
    record_id = raw.get("id")
    if not record_id:
        raise CorpusError("record is missing an id")
    try:
        entity_type = EntityType(raw.get("entityType"))
    except ValueError as exc:
        raise CorpusError(f"unknown entityType {raw.get('entityType')!r} for {record_id}") from exc

    metadata = {
        str(key): value
        for key, value in _mapping(raw.get("metadata")).items()
        if value is None or isinstance(value, (str, int, float, bool))
    }
    base: dict[str, Any] = {
        "id": str(record_id),
        "title": _text(raw.get("title")),
        "summary": _text(raw.get("summary")),
        "project": _text(raw.get("project")),
        "client": _text(raw.get("client")),
        "status": _text(raw.get("status")),
        "tags": [str(tag) for tag in raw.get("tags") or []],
        "metadata": metadata,
        "updated_at": parse_timestamp(raw.get("updatedAt")) or _EPOCH,
        "created_at": parse_timestamp(raw.get("createdAt")),
    }

    if entity_type in FINANCIAL_ENTITY_TYPES:
        return FinancialRecord(
            **base,
            entity_type=entity_type,
            total_value=_number(raw.get("totalValue")),
            issued_date=parse_timestamp(raw.get("issuedDate")) or base["updated_at"],
            due_date=parse_timestamp(raw.get("dueDate")),
            line_items=[
                normalize_line_item(item)
                for item in raw.get("lineItems") or []
                if isinstance(item, dict)
            ],
            field_metadata=_field_metadata(
                raw.get("fieldMetadata"), _RECORD_FIELD_NAMES, DEFAULT_RECORD_FIELD_METADATA
            ),
        )
    if entity_type is EntityType.DOCUMENT:
        return DocumentRecord(
            **base,
            document_type=_text(raw.get("documentType")),
            author=_text(raw.get("author")),
        )
    if entity_type is EntityType.PERSON:
        return PersonRecord(
            **base,
            person_type=PersonType(raw.get("personType") or PersonType.CONTACT.value),
            job_title=_text(raw.get("jobTitle")),
            associated_organization=raw.get("associatedOrganization"),
            email=_text(raw.get("email")),
            phone=_text(raw.get("phone")),
            location=_text(raw.get("location")),
            trade_focus=raw.get("tradeFocus"),
        )
    if entity_type is EntityType.ORGANIZATION:
        return OrganizationRecord(
            **base,
            organization_type=OrganizationType(
                raw.get("organizationType") or OrganizationType.VENDOR.value
            ),
            trade_focus=_text(raw.get("tradeFocus")),
            service_area=_text(raw.get("serviceArea")),
            primary_contact=_text(raw.get("primaryContact")),
            phone=_text(raw.get("phone")),
            email=_text(raw.get("email")),
            website=raw.get("website"),
        )
    if entity_type is EntityType.BUILDERTREND:
        return BuildertrendRecord(
            **base,
            path=_text(raw.get("path")),
            description=_text(raw.get("description")),
            icon=_text(raw.get("icon")),
            url=_text(raw.get("url")),
            trigger_queries=[str(trigger) for trigger in raw.get("triggerQueries") or []],
        )

    notes = _mapping(raw.get("structuredNotes"))
    return DailyLogRecord(
        **base,
        log_date=parse_timestamp(raw.get("logDate")),
        author=_text(raw.get("author")),
        weather=_weather(raw.get("weatherConditions")),
        weather_notes=raw.get("weatherNotes"),
        notes=StructuredNotes(
            progress=notes.get("progress"),
            issues=notes.get("issues"),
            materials_delivered=notes.get("materialsDelivered"),
            additional=notes.get("additional"),
        ),
        attachments=[str(item) for item in raw.get("attachments") or []],
    )


def normalize_corpus(payload: Any) -> list[SearchRecord]:
    """Normalize a decoded corpus; malformed entries are skipped."""
    if not isinstance(payload, list):
        logger.warning("Corpus payload is %s, expected a list", type(payload).__name__)
        return []

    records: list[SearchRecord] = []
    for index, raw in enumerate(payload):
        if not isinstance(raw, dict):
            logger.warning("Skipping corpus entry %d: not an object", index)
            continue
        try:
            records.append(normalize_record(raw))
        except (ValueError, TypeError) as exc:
            logger.warning("Skipping corpus entry %d: %s", index, exc)
    return records


def load_corpus(path: str | Path) -> list[SearchRecord]:
    """Load a JSON corpus file. Load failures yield zero records."""
    file_path = Path(path)
    try:
        payload = json.loads(file_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning("Could not load corpus from %s: %s", file_path, exc)
        return []

    records = normalize_corpus(payload)
    logger.info("Loaded %d records from %s", len(records), file_path)
    return records
