"""Tests for the Starlette application built by server.app.create_app."""

from __future__ import annotations

from decimal import Decimal

import pytest
from starlette.testclient import TestClient

from catalogo_query.config import QueryDefaults, Settings
from catalogo_query.exceptions import RelationStoreError, SinkError
from catalogo_query.relations import InMemoryRelationStore, Relations
from catalogo_query.server.app import create_app
from catalogo_query.snapshot import JsonFileSink


class _FailingStore:
    def read_relations(self) -> Relations:
        raise RelationStoreError("connection refused")


class _FailingSink:
    location = "/readonly/esiti.json"

    def store(self, bundle):
        raise SinkError("read-only filesystem", location=self.location)

    def load(self):
        raise SinkError("permission denied", location=self.location)


@pytest.fixture
def sink(tmp_path) -> JsonFileSink:
    return JsonFileSink(tmp_path / "storage" / "esiti.json")


@pytest.fixture
def client(store, sink) -> TestClient:
    return TestClient(create_app(store, sink))


class TestRedirects:
    """Short paths redirect to the API."""

    def test_root_redirects_to_q1(self, client):
        response = client.get("/", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "/q1"

    def test_short_path_keeps_query_string(self, client):
        response = client.get("/q3?colore=verde", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "/api/q3?colore=verde"

    def test_short_path_without_query_string(self, client):
        response = client.get("/q10", follow_redirects=False)
        assert response.headers["location"] == "/api/q10"

    def test_unknown_short_path(self, client):
        assert client.get("/q11", follow_redirects=False).status_code == 404

    def test_following_root_lands_on_q1(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["query"] == 1


class TestQueryEndpoints:
    """/api/qN."""

    def test_q1(self, client):
        response = client.get("/api/q1")
        assert response.status_code == 200
        assert response.json() == {
            "query": 1,
            "data": [{"pnome": "Bolt"}, {"pnome": "Nut"}, {"pnome": "Screw"}, {"pnome": "Washer"}],
        }

    def test_q3_default_colour(self, client):
        body = client.get("/api/q3").json()
        assert body["colore"] == "rosso"
        assert body["data"] == [{"fnome": "Acme"}, {"fnome": "Bravo"}]

    def test_q3_explicit_colour(self, client):
        body = client.get("/api/q3", params={"colore": "verde"}).json()
        assert body == {"query": 3, "colore": "verde", "data": [{"fnome": "Acme"}]}

    def test_q8_reports_both_colours(self, client):
        body = client.get("/api/q8", params={"colore1": "verde", "colore2": "blu"}).json()
        assert body["colore1"] == "verde"
        assert body["colore2"] == "blu"
        assert body["data"] == [{"fid": 1}, {"fid": 3}]

    def test_q10_non_numeric_threshold(self, client):
        body = client.get("/api/q10", params={"min_fornitori": "abc"}).json()
        assert body["min_fornitori"] == 2
        assert len(body["data"]) == 5

    def test_q10_low_threshold_clamped(self, client):
        body = client.get("/api/q10", params={"min_fornitori": "1"}).json()
        assert body["min_fornitori"] == 2

    def test_q6_rows(self, client):
        data = client.get("/api/q6").json()["data"]
        assert data[0] == {"pid": 10, "pnome": "Bolt", "fnome": "Acme", "costo": 10.0}
        assert len(data) == 7

    def test_decimal_costs_are_numbers(self, sink):
        relations = Relations.from_rows(
            suppliers=[(1, "Acme")],
            parts=[(10, "Bolt", "rosso")],
            catalog=[(1, 10, Decimal("1.20"))],
        )
        client = TestClient(create_app(InMemoryRelationStore(relations), sink))
        assert client.get("/api/q6").json()["data"][0]["costo"] == 1.2
        esiti = client.get("/api/esiti").json()
        assert esiti["data"]["results"]["q6"][0]["costo"] == 1.2

    def test_uppercase_label(self, client):
        assert client.get("/api/Q2").json()["query"] == 2

    def test_unknown_label(self, client):
        response = client.get("/api/q11")
        assert response.status_code == 404
        assert "q11" in response.json()["error"]

    def test_store_failure(self, sink):
        client = TestClient(create_app(_FailingStore(), sink))
        response = client.get("/api/q1")
        assert response.status_code == 503
        assert "connection refused" in response.json()["error"]


class TestPagination:
    def test_page_size(self, client):
        body = client.get("/api/q6", params={"page_size": 3}).json()
        assert [r["pid"] for r in body["data"]] == [10, 10, 11]

    def test_second_page(self, client):
        body = client.get("/api/q6", params={"page": 2, "page_size": 3}).json()
        assert [r["pid"] for r in body["data"]] == [12, 13, 13]

    def test_page_past_end(self, client):
        body = client.get("/api/q6", params={"page": 10, "page_size": 3}).json()
        assert body["data"] == []

    def test_configured_default_page_size(self, store, sink):
        client = TestClient(create_app(store, sink, Settings(page_size=2)))
        assert len(client.get("/api/q6").json()["data"]) == 2


class TestEsiti:
    """/api/esiti and /api/esiti/saved."""

    def test_saved_before_generation(self, client, sink):
        response = client.get("/api/esiti/saved")
        assert response.status_code == 404
        assert response.json() == {"message": "File JSON non ancora generato", "path": sink.location}

    def test_generate_then_read(self, client, sink):
        response = client.get("/api/esiti", params={"colore": "verde"})
        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Esiti generati e salvati su file JSON"
        assert body["saved_to"] == sink.location
        assert list(body["data"]) == ["generated_at", "results", "parameters"]
        assert body["data"]["parameters"]["colore"] == "verde"
        assert body["data"]["results"]["q3"] == [{"fnome": "Acme"}]

        saved = client.get("/api/esiti/saved")
        assert saved.status_code == 200
        assert saved.json()["data"] == body["data"]

    def test_bundle_not_paginated(self, store, sink):
        client = TestClient(create_app(store, sink, Settings(page_size=1)))
        body = client.get("/api/esiti").json()
        assert len(body["data"]["results"]["q6"]) == 7

    def test_store_failure(self, sink):
        client = TestClient(create_app(_FailingStore(), sink))
        response = client.get("/api/esiti")
        assert response.status_code == 503
        assert response.json()["message"] == "Esiti non generati"

    def test_sink_failure_still_returns_data(self, store):
        client = TestClient(create_app(store, _FailingSink()))
        response = client.get("/api/esiti")
        assert response.status_code == 500
        body = response.json()
        assert body["message"] == "Esiti generati ma non salvati"
        assert "read-only filesystem" in body["error"]
        assert body["data"]["results"]["q1"][0] == {"pnome": "Bolt"}

    def test_unreadable_saved_file(self, store):
        client = TestClient(create_app(store, _FailingSink()))
        response = client.get("/api/esiti/saved")
        assert response.status_code == 500
        assert response.json()["error"] == "permission denied"


class TestSettingsDefaults:
    def test_configured_query_defaults(self, store, sink):
        settings = Settings(defaults=QueryDefaults(colore="verde"))
        client = TestClient(create_app(store, sink, settings))
        assert client.get("/api/q7").json() == {"query": 7, "colore": "verde", "data": [{"fid": 5}]}


class TestHealth:
    def test_health(self, store, sink):
        client = TestClient(create_app(store, sink))
        assert client.get("/health").json() == {"status": "ok"}

    def test_health_without_data(self, sink):
        client = TestClient(create_app(InMemoryRelationStore(), sink))
        assert client.get("/health").status_code == 200
