"""Facet aggregation, selection filtering and result grouping."""

from record_search.facets.facets import (
    FACET_KEYS,
    GROUP_BY,
    FacetSelections,
    compute_facets,
    get_facet_value,
    matches_selections,
    selected_group_by,
)
from record_search.facets.grouping import apply_group_limits, build_groups, is_grouped

__all__ = [
    "FACET_KEYS",
    "GROUP_BY",
    "FacetSelections",
    "apply_group_limits",
    "build_groups",
    "compute_facets",
    "get_facet_value",
    "is_grouped",
    "matches_selections",
    "selected_group_by",
]
