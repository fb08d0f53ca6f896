"""
Property-based tests for history record operations.

Covers ordering, pagination, round-trip completeness, filtering and
idempotent deletion through the HTTP API.
"""

from contextlib import contextmanager

import pytest
from hypothesis import given, strategies as st, settings
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from rest_tester.main import app
from rest_tester.config import get_settings
from rest_tester.database import Base, get_db


# Test database setup
TEST_DATABASE_URL = "sqlite:///./test_history_properties.db"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False}
)

TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

PAGE_SIZE = get_settings().history_page_size


def override_get_db():
    """Override database dependency for testing."""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_test_client():
    """Context manager to create a test client with fresh database."""
    Base.metadata.create_all(bind=test_engine)
    app.dependency_overrides[get_db] = override_get_db

    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        Base.metadata.drop_all(bind=test_engine)
        app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client():
    """Create a test client with fresh database for each test."""
    with get_test_client() as test_client:
        yield test_client


def make_record(record_id: str, timestamp: int, method: str = "GET", url: str | None = None, **extra) -> dict:
    record = {
        "id": record_id,
        "method": method,
        "url": url or f"https://example.com/items/{record_id}",
        "headers": {},
        "timestamp": timestamp,
        "response": {
            "status": 200,
            "statusText": "OK",
            "data": {"id": record_id},
            "headers": {"content-type": "application/json"},
            "duration": 12,
        },
    }
    record.update(extra)
    return record


# Strategies for generating valid history data
http_method_strategy = st.sampled_from(["GET", "POST", "PUT", "DELETE"])

url_strategy = st.text(
    alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyz0123456789-._~:/?#[]@!$&'()*+,;="),
    min_size=1,
    max_size=60
).map(lambda s: f"https://example.com/{s}")

header_strategy = st.dictionaries(
    keys=st.text(alphabet="abcdefghijklmnopqrstuvwxyz-", min_size=1, max_size=12),
    values=st.text(min_size=0, max_size=20),
    max_size=4
)

json_value_strategy = st.recursive(
    st.none() | st.booleans() | st.integers(min_value=-10**6, max_value=10**6) | st.text(max_size=20),
    lambda children: st.lists(children, max_size=3) | st.dictionaries(st.text(max_size=8), children, max_size=3),
    max_leaves=8
)

response_strategy = st.fixed_dictionaries({
    "status": st.sampled_from([0, 200, 201, 204, 400, 404, 500, 502]),
    "statusText": st.sampled_from(["OK", "Created", "Not Found", "Network Error"]),
    "data": json_value_strategy,
    "headers": header_strategy,
    "duration": st.integers(min_value=0, max_value=60000),
})


class TestHistoryOrdering:
    """History lists are ordered by timestamp, newest first."""

    @given(timestamps=st.lists(st.integers(min_value=0, max_value=2**41), min_size=2, max_size=8, unique=True))
    @settings(max_examples=20, deadline=None)
    def test_list_ordered_by_timestamp_descending(self, timestamps: list[int]):
        with get_test_client() as client:
            for i, ts in enumerate(timestamps):
                assert client.post("/history", json=make_record(f"rec-{i}", ts)).status_code == 201

            response = client.get("/history", params={"page": 1})
            assert response.status_code == 200
            returned = [item["timestamp"] for item in response.json()["items"]]

            assert returned == sorted(timestamps, reverse=True)[:PAGE_SIZE]

    def test_three_records_newest_first(self, client):
        for record_id, ts in (("t1", 1000), ("t2", 2000), ("t3", 3000)):
            client.post("/history", json=make_record(record_id, ts))

        items = client.get("/history").json()["items"]

        assert [item["id"] for item in items] == ["t3", "t2", "t1"]

    def test_equal_timestamps_keep_insertion_order(self, client):
        for record_id in ("first", "second", "third"):
            client.post("/history", json=make_record(record_id, 5000))
        client.post("/history", json=make_record("newer", 6000))

        items = client.get("/history").json()["items"]

        assert [item["id"] for item in items] == ["newer", "first", "second", "third"]


class TestHistoryPagination:
    """Pages are fixed-size slices of the ordered history."""

    def test_twenty_five_records_span_three_pages(self, client):
        for i in range(25):
            client.post("/history", json=make_record(f"rec-{i:02d}", 1000 + i))

        first = client.get("/history", params={"page": 1}).json()
        third = client.get("/history", params={"page": 3}).json()

        assert PAGE_SIZE == 10
        assert len(first["items"]) == 10
        assert first["total"] == 25
        assert first["page"] == 1
        assert first["pageSize"] == 10
        assert first["totalPages"] == 3
        assert first["items"][0]["id"] == "rec-24"
        assert len(third["items"]) == 5
        assert third["items"][-1]["id"] == "rec-00"

    @pytest.mark.parametrize("page", [0, -1, -50])
    def test_non_positive_page_is_first_page(self, client, page):
        for i in range(12):
            client.post("/history", json=make_record(f"rec-{i}", 1000 + i))

        response = client.get("/history", params={"page": page}).json()

        assert response["page"] == 1
        assert response["items"] == client.get("/history", params={"page": 1}).json()["items"]

    def test_empty_store(self, client):
        response = client.get("/history").json()

        assert response["items"] == []
        assert response["total"] == 0
        assert response["totalPages"] == 0

    def test_page_past_end_is_empty(self, client):
        client.post("/history", json=make_record("only", 1000))

        response = client.get("/history", params={"page": 4}).json()

        assert response["items"] == []
        assert response["total"] == 1


class TestHistoryRoundTrip:
    """A stored record comes back exactly as submitted."""

    @given(
        method=http_method_strategy,
        url=url_strategy,
        headers=header_strategy,
        body=st.one_of(st.none(), st.text(st.characters(exclude_characters="\x00"), max_size=200)),
        response=st.one_of(st.none(), response_strategy)
    )
    @settings(max_examples=25, deadline=None)
    def test_created_record_listed_unchanged(self, method, url, headers, body, response):
        record = {
            "id": "round-trip",
            "method": method,
            "url": url,
            "headers": headers,
            "body": body,
            "timestamp": 1700000000000,
            "response": response,
        }
        with get_test_client() as client:
            created = client.post("/history", json=record)
            assert created.status_code == 201
            assert created.json() == {"success": True, "id": "round-trip"}

            items = client.get("/history").json()["items"]

            assert items == [record]
            assert client.get("/history/round-trip").json() == record

    def test_missing_id_and_timestamp_are_generated(self, client):
        created = client.post("/history", json={"method": "GET", "url": "https://example.com"})
        assert created.status_code == 201
        record_id = created.json()["id"]

        stored = client.get(f"/history/{record_id}").json()

        assert stored["id"] == record_id
        assert stored["timestamp"] > 0
        assert stored["response"] is None

    def test_identical_requests_are_not_deduplicated(self, client):
        payload = {"method": "GET", "url": "https://example.com", "timestamp": 1000}
        client.post("/history", json=payload)
        client.post("/history", json=payload)

        assert client.get("/history").json()["total"] == 2

    def test_duplicate_id_is_rejected(self, client):
        client.post("/history", json=make_record("same", 1000))

        response = client.post("/history", json=make_record("same", 2000))

        assert response.status_code == 409
        assert response.json()["error_code"] == "DUPLICATE_RECORD"
        assert client.get("/history").json()["total"] == 1


class TestHistoryFiltering:
    """Filters apply to the whole history before pagination."""

    def test_search_is_case_insensitive_substring(self, client):
        client.post("/history", json=make_record("a", 1000, url="https://api.example.com/Users/1"))
        client.post("/history", json=make_record("b", 2000, url="https://api.example.com/orders"))

        items = client.get("/history", params={"search": "users"}).json()["items"]

        assert [item["id"] for item in items] == ["a"]

    def test_search_treats_wildcards_literally(self, client):
        client.post("/history", json=make_record("a", 1000, url="https://example.com/100%"))
        client.post("/history", json=make_record("b", 2000, url="https://example.com/1000"))

        items = client.get("/history", params={"search": "0%"}).json()["items"]

        assert [item["id"] for item in items] == ["a"]

    def test_method_filter_counts_across_all_pages(self, client):
        for i in range(15):
            client.post("/history", json=make_record(f"get-{i}", 1000 + i, method="GET"))
        for i in range(12):
            client.post("/history", json=make_record(f"post-{i}", 5000 + i, method="POST"))

        page_one = client.get("/history", params={"method": "get"}).json()
        page_two = client.get("/history", params={"method": "GET", "page": 2}).json()

        assert page_one["total"] == 15
        assert page_one["totalPages"] == 2
        assert all(item["method"] == "GET" for item in page_one["items"] + page_two["items"])
        assert len(page_two["items"]) == 5

    def test_all_method_filter_matches_everything(self, client):
        client.post("/history", json=make_record("a", 1000, method="PUT"))
        client.post("/history", json=make_record("b", 2000, method="DELETE"))

        assert client.get("/history", params={"method": "ALL"}).json()["total"] == 2

    def test_combined_filters(self, client):
        client.post("/history", json=make_record("a", 1000, method="POST", url="https://x.io/users"))
        client.post("/history", json=make_record("b", 2000, method="GET", url="https://x.io/users"))
        client.post("/history", json=make_record("c", 3000, method="POST", url="https://x.io/orders"))

        items = client.get("/history", params={"method": "POST", "search": "users"}).json()["items"]

        assert [item["id"] for item in items] == ["a"]


class TestHistoryDeletion:
    """Deleting is idempotent for single records and for the whole history."""

    def test_delete_one_removes_only_that_record(self, client):
        client.post("/history", json=make_record("keep", 1000))
        client.post("/history", json=make_record("drop", 2000))

        response = client.delete("/history/drop")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert [item["id"] for item in client.get("/history").json()["items"]] == ["keep"]

    def test_delete_unknown_id_succeeds(self, client):
        client.post("/history", json=make_record("keep", 1000))

        response = client.delete("/history/does-not-exist")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert client.get("/history").json()["total"] == 1

    def test_delete_all_twice(self, client):
        for i in range(3):
            client.post("/history", json=make_record(f"rec-{i}", 1000 + i))

        first = client.delete("/history")
        assert first.json() == {"success": True}
        assert client.get("/history").json()["total"] == 0

        second = client.delete("/history")
        assert second.status_code == 200
        assert second.json() == {"success": True}
        assert client.get("/history").json()["total"] == 0

    def test_get_deleted_record_is_not_found(self, client):
        client.post("/history", json=make_record("gone", 1000))
        client.delete("/history/gone")

        response = client.get("/history/gone")

        assert response.status_code == 404
        assert response.json()["error_code"] == "RESOURCE_NOT_FOUND"
