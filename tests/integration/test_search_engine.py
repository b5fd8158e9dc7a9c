import asyncio
from datetime import datetime, timezone

from record_search.config import GroupLimitConfig, SearchConfig
from record_search.engine import SearchEngine
from record_search.facets.facets import GROUP_BY
from record_search.ingest.corpus import normalize_corpus


def _corpus() -> list:
    return normalize_corpus(
        [
            {
                "id": "bill-946",
                "entityType": "Bill",
                "title": "Interior finishing bill",
                "summary": "Second floor drywall",
                "project": "Maple Street Remodel",
                "client": "Hartley Family",
                "status": "Open",
                "updatedAt": "2024-05-01T00:00:00Z",
                "totalValue": 946,
                "issuedDate": "2024-04-28T00:00:00Z",
                "lineItems": [
                    {
                        "lineItemId": "li-1",
                        "lineItemTitle": "Drywall install",
                        "lineItemDescription": "Hang and tape",
                        "lineItemQuantity": 22,
                        "lineItemUnitPrice": 43,
                        "lineItemTotal": 946,
                        "lineItemType": "Labor",
                    }
                ],
            },
            {
                "id": "inv-1500",
                "entityType": "ClientInvoice",
                "title": "Roof replacement invoice",
                "summary": "Progress billing for roofing",
                "project": "Oak Avenue Addition",
                "client": "Nguyen",
                "status": "Paid",
                "updatedAt": "2024-05-03T00:00:00Z",
                "totalValue": 1500,
                "issuedDate": "2024-05-02T00:00:00Z",
                "lineItems": [],
            },
            {
                "id": "doc-roof",
                "entityType": "Document",
                "title": "Roof inspection report",
                "summary": "North slope shingles",
                "project": "Oak Avenue Addition",
                "status": "Final",
                "updatedAt": "2024-05-05T00:00:00Z",
                "documentType": "Report",
            },
            {
                "id": "doc-plan",
                "entityType": "Document",
                "title": "Kitchen plan",
                "summary": "Cabinet layout",
                "project": "Maple Street Remodel",
                "status": "Draft",
                "updatedAt": "2024-05-07T00:00:00Z",
                "documentType": "Drawing",
            },
            {
                "id": "bt-schedule",
                "entityType": "Buildertrend",
                "title": "Schedule",
                "updatedAt": "2024-01-01T00:00:00Z",
                "triggerQueries": ["schedule"],
            },
        ]
    )


def test_empty_query_returns_all_but_shortcuts_by_recency() -> None:
    engine = SearchEngine(_corpus())
    response = engine.search("")
    assert [r.id for r in response.records] == ["doc-plan", "doc-roof", "inv-1500", "bill-946"]
    assert response.total_results == 4
    assert not response.is_monetary


def test_text_query_ranks_by_score() -> None:
    engine = SearchEngine(_corpus())
    response = engine.search("roof")
    assert [r.id for r in response.records] == ["inv-1500", "doc-roof"]
    # Title and summary both contain "roof" on the invoice.
    assert response.scores["inv-1500"] == 210.0
    assert response.scores["doc-roof"] == 175.0


def test_explicit_monetary_search() -> None:
    engine = SearchEngine(_corpus())
    response = engine.search("$946")
    assert response.is_monetary
    assert [r.id for r in response.records] == ["bill-946"]
    assert engine.search("$22").total_results == 0


def test_range_search() -> None:
    engine = SearchEngine(_corpus())
    assert [r.id for r in engine.search("$1000-$2000").records] == ["inv-1500"]


def test_trigger_phrase_returns_shortcut() -> None:
    engine = SearchEngine(_corpus())
    assert [r.id for r in engine.search("Schedule").records] == ["bt-schedule"]


def test_selections_filter_and_group_by() -> None:
    engine = SearchEngine(_corpus())
    response = engine.search(
        "",
        selections={"project": {"Maple Street Remodel"}, GROUP_BY: {"Status"}},
    )
    assert {r.id for r in response.records} == {"bill-946", "doc-plan"}
    assert response.is_grouped
    assert [g.key for g in response.groups] == ["Draft", "Open"]
    assert [f.value for f in response.facets["project"]] == ["Maple Street Remodel"]


def test_group_limits_apply_to_limited_groups_only() -> None:
    engine = SearchEngine(_corpus(), group_limits=GroupLimitConfig(default_limit=1))
    response = engine.search("")
    documents = next(g for g in response.groups if g.key == "Document")
    limited = next(g for g in response.limited_groups if g.key == "Document")
    assert len(documents.items) == 2
    assert [r.id for r in limited.items] == ["doc-plan"]
    assert not response.is_grouped


def test_sort_option_reorders_results() -> None:
    engine = SearchEngine(_corpus())
    response = engine.search("", sort="most_recent")
    assert response.records[0].id == "doc-plan"


def test_yield_hook_called_per_batch() -> None:
    calls: list[int] = []
    engine = SearchEngine(
        _corpus(),
        search_config=SearchConfig(batch_size=2),
        yield_hook=lambda: calls.append(1),
    )
    engine.search("roof")
    assert len(calls) == 3


def test_search_async_discards_stale_requests() -> None:
    engine = SearchEngine(_corpus(), search_config=SearchConfig(batch_size=1))

    async def run() -> tuple:
        return await asyncio.gather(engine.search_async("roof"), engine.search_async("kitchen"))

    stale, latest = asyncio.run(run())
    assert stale is None
    assert latest is not None
    assert [r.id for r in latest.records] == ["doc-plan"]


def test_highlight_and_snippet() -> None:
    engine = SearchEngine(_corpus())
    assert engine.highlight("Roof report", "roof") == '<mark class="search-highlight">Roof</mark> report'
    assert engine.snippet("doc-roof", "shingles") == 'North slope <mark class="search-highlight">shingles</mark>'
    assert engine.snippet("doc-roof", "gutter") is None


def test_engine_with_empty_corpus() -> None:
    response = SearchEngine([]).search("anything")
    assert response.total_results == 0
    assert response.groups == []
    assert list(response.facets) == [GROUP_BY]


def test_updated_at_is_timezone_aware() -> None:
    for record in _corpus():
        assert record.updated_at.tzinfo is not None
        assert record.updated_at <= datetime.now(timezone.utc)
