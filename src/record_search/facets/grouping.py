"""Partitioning matched records into display groups."""

from __future__ import annotations

import logging

from record_search.config import GroupLimitConfig
from record_search.types import EntityType, SearchGroup, SearchRecord, format_entity_type

logger = logging.getLogger(__name__)

ENTITY_GROUP_ORDER: tuple[EntityType, ...] = (
    EntityType.BUILDERTREND,
    EntityType.DOCUMENT,
    EntityType.DAILY_LOG,
    EntityType.PERSON,
    EntityType.ORGANIZATION,
    EntityType.CLIENT_INVOICE,
    EntityType.PURCHASE_ORDER,
    EntityType.BILL,
    EntityType.RECEIPT,
    EntityType.PAYMENT,
)

# groupBy option -> (record attribute, dimension label)
_DIMENSIONS = {
    "project": ("project", "Project"),
    "status": ("status", "Status"),
    "client": ("client", "Client"),
}


def is_grouped(group_by: str | None) -> bool:
    return bool(group_by) and group_by.lower() in _DIMENSIONS


def build_groups(records: list[SearchRecord], group_by: str | None = None) -> list[SearchGroup]:
    """Partition records by entity type, or by project/status/client.

    Record order inside each group follows the input order.
    """
    dimension = _DIMENSIONS.get((group_by or "").lower())
    if dimension is None:
        return _group_by_entity_type(records)

    attribute, label = dimension
    missing = f"No {label}"
    buckets: dict[str, list[SearchRecord]] = {}
    for record in records:
        key = getattr(record, attribute) or missing
        buckets.setdefault(key, []).append(record)

    ordered = sorted(
        (key for key in buckets if key != missing), key=lambda key: key.casefold()
    )
    if missing in buckets:
        ordered.append(missing)
    return [SearchGroup(key=key, title=key, items=buckets[key]) for key in ordered]


def _group_by_entity_type(records: list[SearchRecord]) -> list[SearchGroup]:
    buckets: dict[EntityType, list[SearchRecord]] = {}
    for record in records:
        buckets.setdefault(record.entity_type, []).append(record)

    listed = [entity for entity in ENTITY_GROUP_ORDER if entity in buckets]
    unlisted = sorted(
        (entity for entity in buckets if entity not in ENTITY_GROUP_ORDER),
        key=lambda entity: entity.value,
    )
    return [
        SearchGroup(
            key=entity.value,
            title=format_entity_type(entity, plural=True),
            items=buckets[entity],
            entity_type=entity,
        )
        for entity in listed + unlisted
    ]


def apply_group_limits(
    groups: list[SearchGroup], limits: GroupLimitConfig | None = None
) -> list[SearchGroup]:
    """Truncate each group to its cap and drop groups left empty."""
    limits = limits or GroupLimitConfig()
    limited: list[SearchGroup] = []
    for group in groups:
        cap = limits.limit_for(group.key)
        items = group.items[:cap]
        if not items:
            logger.debug("Dropping empty group %s (cap=%d)", group.key, cap)
            continue
        limited.append(
            SearchGroup(key=group.key, title=group.title, items=items, entity_type=group.entity_type)
        )
    return limited
