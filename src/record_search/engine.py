"""Search engine facade: filter, score, sort, facet, group and highlight."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterator

from record_search.config import GroupLimitConfig, HighlightConfig, SearchConfig
from record_search.facets.facets import FacetSelections, compute_facets, matches_selections, selected_group_by
from record_search.facets.grouping import apply_group_limits, build_groups, is_grouped
from record_search.highlight.highlighter import Highlighter, HighlightMode
from record_search.highlight.snippets import HighlightMatch, context_snippet, find_best_match
from record_search.ingest.corpus import load_corpus
from record_search.matching.matcher import matches_record
from record_search.matching.scorer import score_records
from record_search.matching.sorting import SortOption, sort_by_recency, sort_by_relevance, sort_records
from record_search.obs.tracing import Timer
from record_search.query.monetary import parse_monetary_query
from record_search.settings import RecordSearchSettings
from record_search.types import SearchRecord, SearchResponse

logger = logging.getLogger(__name__)


def _no_yield() -> None:
    return None


class SearchEngine:
    """Runs queries over a resident, already-normalized record list.

    The engine never mutates records. Its only mutable state is the
    highlighter's render cache and the async request sequence.
    """

    def __init__(
        self,
        records: list[SearchRecord],
        *,
        search_config: SearchConfig | None = None,
        group_limits: GroupLimitConfig | None = None,
        highlighter: Highlighter | None = None,
        yield_hook: Callable[[], None] | None = None,
    ) -> None:
        self.records = list(records)
        self.search_config = search_config or SearchConfig()
        self.group_limits = group_limits or GroupLimitConfig()
        self.highlighter = highlighter or Highlighter(HighlightConfig())
        self.yield_hook = yield_hook or _no_yield
        self._by_id = {record.id: record for record in self.records}
        self._sequence = 0
        if not self.records:
            logger.warning("Search engine started with an empty corpus")

    @classmethod
    def from_settings(cls, settings: RecordSearchSettings) -> "SearchEngine":
        return cls(
            load_corpus(settings.corpus_path),
            search_config=settings.to_search_config(),
            group_limits=settings.to_group_limit_config(),
            highlighter=Highlighter(settings.to_highlight_config()),
        )

    def get_record(self, record_id: str) -> SearchRecord:
        record = self._by_id.get(record_id)
        if record is None:
            raise KeyError(f"Record not found: {record_id}")
        return record

    def search(
        self,
        query: str,
        selections: FacetSelections | None = None,
        group_by: str | None = None,
        sort: SortOption | str | None = None,
    ) -> SearchResponse:
        with Timer() as timer:
            matched: list[SearchRecord] = []
            for batch in self._batches():
                matched.extend(self._filter_batch(batch, query, selections))
                self.yield_hook()
            response = self._build_response(query, matched, selections, group_by, sort)
        response.elapsed_ms = timer.elapsed_ms
        self._log_search(response)
        return response

    async def search_async(
        self,
        query: str,
        selections: FacetSelections | None = None,
        group_by: str | None = None,
        sort: SortOption | str | None = None,
    ) -> SearchResponse | None:
        """Like `search`, yielding to the event loop between batches.

        Returns None when a newer `search_async` call started before this one
        finished; the caller should drop the stale request.
        """
        self._sequence += 1
        token = self._sequence
        with Timer() as timer:
            matched: list[SearchRecord] = []
            for batch in self._batches():
                matched.extend(self._filter_batch(batch, query, selections))
                await asyncio.sleep(0)
                if token != self._sequence:
                    logger.debug("Discarding stale search %d for %r", token, query)
                    return None
            response = self._build_response(query, matched, selections, group_by, sort)
        response.elapsed_ms = timer.elapsed_ms
        self._log_search(response)
        return response

    def highlight(self, text: str, query: str, mode: HighlightMode | str = HighlightMode.TEXT) -> str:
        return self.highlighter.highlight(text, query, mode)

    def best_match(self, record_id: str, query: str) -> HighlightMatch | None:
        return find_best_match(self.get_record(record_id), query, self.highlighter)

    def snippet(self, record_id: str, query: str) -> str | None:
        """Highlighted context window from the record's best matching field."""
        match = self.best_match(record_id, query)
        if match is None:
            return None
        return context_snippet(
            match,
            query,
            self.highlighter,
            max_length=self.highlighter.config.snippet_max_length,
        )

    def _batches(self) -> Iterator[list[SearchRecord]]:
        size = self.search_config.batch_size
        for start in range(0, len(self.records), size):
            yield self.records[start : start + size]

    @staticmethod
    def _filter_batch(
        batch: list[SearchRecord], query: str, selections: FacetSelections | None
    ) -> list[SearchRecord]:
        return [
            record
            for record in batch
            if matches_record(record, query) and matches_selections(record, selections)
        ]

    def _build_response(
        self,
        query: str,
        matched: list[SearchRecord],
        selections: FacetSelections | None,
        group_by: str | None,
        sort: SortOption | str | None,
    ) -> SearchResponse:
        scores = score_records(matched, query)
        if query.strip():
            ordered = sort_by_relevance(matched, scores)
        else:
            ordered = sort_by_recency(matched)
        ordered = sort_records(ordered, sort or self.search_config.default_sort)

        group_by = group_by or selected_group_by(selections)
        groups = build_groups(ordered, group_by)
        return SearchResponse(
            query=query,
            total_results=len(ordered),
            records=ordered,
            scores=scores,
            facets=compute_facets(ordered),
            groups=groups,
            limited_groups=apply_group_limits(groups, self.group_limits),
            is_grouped=is_grouped(group_by),
            is_monetary=parse_monetary_query(query).is_monetary,
        )

    @staticmethod
    def _log_search(response: SearchResponse) -> None:
        logger.debug(
            "search query=%r results=%d elapsed_ms=%.2f",
            response.query,
            response.total_results,
            response.elapsed_ms,
        )
