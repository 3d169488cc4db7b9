"""Tests for the HTTP service."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from clearurls.main import app
from clearurls.rules import load_embedded_rules


@pytest.fixture(scope="module")
def client() -> Iterator[TestClient]:
    """Client with the lifespan run, so the cleaner is loaded."""
    with TestClient(app) as test_client:
        yield test_client


class TestCleanEndpoint:
    def test_cleans(self, client: TestClient) -> None:
        resp = client.post("/clean", json={"url": "https://deezer.com/track/891177062?utm_source=deezer"})
        assert resp.status_code == 200
        assert resp.json() == {
            "url": "https://deezer.com/track/891177062?utm_source=deezer",
            "cleaned": "https://deezer.com/track/891177062",
            "changed": True,
        }

    def test_unchanged(self, client: TestClient) -> None:
        resp = client.post("/clean", json={"url": "https://papers.ssrn.com/sol3/papers.cfm?abstract_id=1144182"})
        assert resp.status_code == 200
        assert resp.json()["changed"] is False

    def test_cleaning_error(self, client: TestClient) -> None:
        resp = client.post("/clean", json={"url": "https://google.co.uk/url?foo=bar&q=http%F0"})
        assert resp.status_code == 422
        body = resp.json()
        assert body["detail"] == "URL could not be cleaned."
        assert body["error"].startswith("percent decoding resulted in non-UTF-8 bytes")

    def test_relative_url(self, client: TestClient) -> None:
        resp = client.post("/clean", json={"url": "/just/a/path?utm_source=x"})
        assert resp.status_code == 422
        assert resp.json()["error"] == "error parsing url: relative URL without a base"

    def test_empty_url_rejected(self, client: TestClient) -> None:
        resp = client.post("/clean", json={"url": ""})
        assert resp.status_code == 422


class TestBatchEndpoints:
    def test_text(self, client: TestClient) -> None:
        resp = client.post("/clean/text", json={"text": "Read http://example.com?utm_source=1 now"})
        assert resp.status_code == 200
        assert resp.json() == {"text": "Read http://example.com/ now"}

    def test_text_errors(self, client: TestClient) -> None:
        resp = client.post(
            "/clean/text",
            json={"text": "ok http://example.com/ bad https://google.com/url?q=http%F0"},
        )
        assert resp.status_code == 422
        body = resp.json()
        assert body["detail"] == "Some URLs could not be cleaned."
        assert len(body["errors"]) == 1

    def test_html(self, client: TestClient) -> None:
        resp = client.post("/clean/html", json={"html": '<a href="https://goodreads.com?qid=1">Goodreads</a>'})
        assert resp.status_code == 200
        assert resp.json() == {"html": '<a href="https://goodreads.com/">Goodreads</a>'}

    def test_html_errors(self, client: TestClient) -> None:
        resp = client.post("/clean/html", json={"html": '<img src="ftp://example.%com">'})
        assert resp.status_code == 422
        assert resp.json()["errors"] == ["error parsing url: invalid domain character"]


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "ok"
        assert body["providers"] == len(load_embedded_rules().providers)
        assert body["uptime_seconds"] >= 0
