"""FastAPI entrypoint for search/highlight/trace endpoints."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from record_search.engine import SearchEngine
from record_search.highlight.highlighter import HighlightMode
from record_search.matching.sorting import SortOption
from record_search.obs.logging import setup_logging
from record_search.obs.tracing import TraceStore
from record_search.query.boolean import is_boolean_query
from record_search.query.tokenizer import is_query_too_short
from record_search.settings import get_settings
from record_search.types import SearchGroup, SearchRecord, SearchResponse


class SearchRequest(BaseModel):
    query: str = ""
    selections: dict[str, list[str]] = Field(default_factory=dict)
    group_by: str | None = None
    sort: SortOption = SortOption.RELEVANCE


class HighlightRequest(BaseModel):
    text: str
    query: str
    mode: HighlightMode = HighlightMode.TEXT


def _record_payload(record: SearchRecord, score: float) -> dict[str, Any]:
    payload = asdict(record)
    payload["score"] = score
    return payload


def _group_payload(group: SearchGroup) -> dict[str, Any]:
    return {
        "key": group.key,
        "title": group.title,
        "entity_type": group.entity_type,
        "record_ids": [record.id for record in group.items],
    }


def _search_payload(response: SearchResponse, trace_id: str) -> dict[str, Any]:
    return {
        "query": response.query,
        "total_results": response.total_results,
        "is_monetary": response.is_monetary,
        "is_grouped": response.is_grouped,
        "records": [
            _record_payload(record, response.scores.get(record.id, 0.0))
            for record in response.records
        ],
        "facets": {
            key: [{"value": facet.value, "count": facet.count} for facet in values]
            for key, values in response.facets.items()
        },
        "groups": [_group_payload(group) for group in response.groups],
        "limited_groups": [_group_payload(group) for group in response.limited_groups],
        "elapsed_ms": response.elapsed_ms,
        "trace_id": trace_id,
    }


def create_app(engine: SearchEngine | None = None, trace_store: TraceStore | None = None) -> FastAPI:
    """Build the host app; without an engine one is loaded from settings."""
    if engine is None:
        settings = get_settings()
        setup_logging(settings)
        engine = SearchEngine.from_settings(settings)
    traces = trace_store or TraceStore()

    app = FastAPI(title="Record Search", version="0.1.0")

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "record_count": len(engine.records),
            "highlight_cache_entries": len(engine.highlighter.cache),
            "trace_count": len(traces.list_recent(limit=traces.max_records)),
        }

    @app.post("/search")
    def search(request: SearchRequest) -> dict[str, Any]:
        if is_query_too_short(request.query, engine.search_config.min_query_length):
            raise HTTPException(
                status_code=422,
                detail=f"Query must be at least {engine.search_config.min_query_length} characters",
            )
        selections = {key: set(values) for key, values in request.selections.items()}
        response = engine.search(
            request.query,
            selections=selections,
            group_by=request.group_by,
            sort=request.sort,
        )
        record = traces.create_record(
            query=request.query,
            total_results=response.total_results,
            is_monetary=response.is_monetary,
            is_boolean=is_boolean_query(request.query),
            latency_ms=response.elapsed_ms,
        )
        return _search_payload(response, record.trace_id)

    @app.post("/highlight")
    def highlight(request: HighlightRequest) -> dict[str, Any]:
        return {"html": engine.highlight(request.text, request.query, request.mode)}

    @app.get("/records/{record_id}/snippet")
    def snippet(record_id: str, query: str) -> dict[str, Any]:
        try:
            match = engine.best_match(record_id, query)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        if match is None:
            return {"record_id": record_id, "field": None, "snippet": None}
        return {
            "record_id": record_id,
            "field": match.field,
            "snippet": engine.snippet(record_id, query),
        }

    @app.get("/traces")
    def list_traces(limit: int = 20) -> dict[str, Any]:
        return {"items": [asdict(record) for record in traces.list_recent(limit=limit)]}

    @app.get("/traces/{trace_id}")
    def trace_detail(trace_id: str) -> dict[str, Any]:
        try:
            record = traces.get(trace_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return asdict(record)

    @app.get("/metrics")
    def metrics() -> dict[str, Any]:
        return traces.summary()

    return app


app = create_app()
