from fastapi.testclient import TestClient

from record_search.api.main import create_app
from record_search.engine import SearchEngine
from record_search.ingest.corpus import normalize_corpus

_CORPUS = [
    {
        "id": "bill-946",
        "entityType": "Bill",
        "title": "Interior finishing bill",
        "summary": "Second floor drywall",
        "project": "Maple Street Remodel",
        "status": "Open",
        "updatedAt": "2024-05-01T00:00:00Z",
        "totalValue": 946,
        "issuedDate": "2024-04-28T00:00:00Z",
        "lineItems": [
            {
                "lineItemId": "li-1",
                "lineItemTitle": "Drywall install",
                "lineItemQuantity": 22,
                "lineItemUnitPrice": 43,
                "lineItemTotal": 946,
                "lineItemType": "Labor",
            }
        ],
    },
    {
        "id": "doc-roof",
        "entityType": "Document",
        "title": "Roof inspection report",
        "summary": "North slope shingles",
        "project": "Oak Avenue Addition",
        "status": "Final",
        "updatedAt": "2024-05-05T00:00:00Z",
    },
]


def _client() -> TestClient:
    engine = SearchEngine(normalize_corpus(_CORPUS))
    return TestClient(create_app(engine))


def test_api_search_trace_metrics() -> None:
    client = _client()

    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["record_count"] == 2

    search_resp = client.post("/search", json={"query": "$946"})
    assert search_resp.status_code == 200
    payload = search_resp.json()
    assert payload["total_results"] == 1
    assert payload["is_monetary"]
    assert payload["records"][0]["id"] == "bill-946"
    assert payload["records"][0]["entity_type"] == "Bill"
    assert payload["records"][0]["score"] > 0
    assert payload["facets"]["entityType"] == [{"value": "Bill", "count": 1}]
    assert payload["limited_groups"][0]["record_ids"] == ["bill-946"]

    trace_resp = client.get(f"/traces/{payload['trace_id']}")
    assert trace_resp.status_code == 200
    assert trace_resp.json()["is_monetary"]

    client.post("/search", json={"query": "roof OR drywall", "selections": {"status": ["Final"]}})
    traces = client.get("/traces").json()["items"]
    assert [trace["is_boolean"] for trace in traces] == [False, True]

    metrics = client.get("/metrics").json()
    assert metrics["total_requests"] == 2
    assert metrics["monetary_requests"] == 1


def test_api_rejects_too_short_query() -> None:
    client = _client()
    assert client.post("/search", json={"query": "$5"}).status_code == 422
    assert client.post("/search", json={"query": ""}).status_code == 200
    assert client.post("/search", json={"query": "x", "sort": "sideways"}).status_code == 422


def test_api_highlight_and_snippet() -> None:
    client = _client()

    resp = client.post("/highlight", json={"text": "Total $946.00", "query": "$946", "mode": "monetary"})
    assert resp.status_code == 200
    assert resp.json()["html"] == 'Total <mark class="monetary-highlight-exact">$946.00</mark>'

    snippet = client.get("/records/doc-roof/snippet", params={"query": "shingles"})
    assert snippet.status_code == 200
    assert snippet.json()["field"] == "summary"

    assert client.get("/records/missing/snippet", params={"query": "roof"}).status_code == 404
    assert client.get("/traces/missing").status_code == 404
