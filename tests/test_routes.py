"""Tests for the HTTP service."""

import pytest
from fastapi.testclient import TestClient

from src.main import app


@pytest.fixture
def client():
    with TestClient(app) as client:
        yield client


SCENARIO = {
    "units": [
        {
            "name": "ConfigA",
            "trigger": {"type": "type_present", "type_name": "com.example.TypeFoo"},
            "imports": ["ConfigB"],
        },
        {"name": "ConfigB", "kind": "configuration"},
    ],
    "records": [
        {"unit": "ConfigA", "requests": [{"type": "com.example.TypeX", "access": ["PUBLIC_METHODS"]}]},
        {"unit": "ConfigB", "requests": [{"type": "com.example.TypeX", "access": ["PUBLIC_CONSTRUCTORS"]}]},
    ],
}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


class TestResolveEndpoint:
    def test_resolves_inline_database(self, client):
        response = client.post(
            "/hints/resolve",
            json={"facts": {"types": ["com.example.TypeFoo", "com.example.TypeX"]}, "database": SCENARIO},
        )
        assert response.status_code == 200
        body = response.json()

        assert body["access"] == [
            {
                "type": "com.example.TypeX",
                "access": ["PUBLIC_CONSTRUCTORS", "PUBLIC_METHODS"],
                "units": ["ConfigA", "ConfigB"],
            }
        ]
        assert body["active_units"] == [
            {"unit": "ConfigA", "reason": "condition", "via": None},
            {"unit": "ConfigB", "reason": "imported", "via": "ConfigA"},
        ]
        assert body["diagnostics"] == []

    def test_trigger_absent(self, client):
        response = client.post(
            "/hints/resolve", json={"facts": {"types": ["com.example.TypeX"]}, "database": SCENARIO}
        )
        assert response.json()["access"] == []

    def test_malformed_record_reported_not_rejected(self, client):
        database = {"records": [{"unit": "A", "requests": []}, {"unit": "B", "requests": [{"type": "a.X"}]}]}
        response = client.post("/hints/resolve", json={"facts": {"types": ["a.X"]}, "database": database})

        assert response.status_code == 200
        body = response.json()
        assert [e["type"] for e in body["access"]] == ["a.X"]
        assert body["diagnostics"][0]["kind"] == "malformed_hint_record"

    def test_with_builtin_sources(self, client):
        response = client.post(
            "/hints/resolve",
            json={"facts": {"types": ["javax.xml.parsers.SAXParserFactory"]}, "sources": ["spring-xml"]},
        )
        types = [e["type"] for e in response.json()["access"]]
        assert "javax.xml.parsers.SAXParserFactory" in types

    def test_unknown_source_rejected(self, client):
        response = client.post("/hints/resolve", json={"facts": {}, "sources": ["spring-nope"]})
        assert response.status_code == 400
        assert "Unknown hint source" in response.json()["detail"]

    def test_invalid_facts_rejected(self, client):
        response = client.post("/hints/resolve", json={"facts": {"properties": {"k": 1}}})
        assert response.status_code == 422


def test_list_sources(client):
    response = client.get("/hints/sources")
    assert response.status_code == 200
    names = [s["name"] for s in response.json()]
    assert names == ["spring-core", "spring-xml", "spring-jackson", "spring-webmvc"]
