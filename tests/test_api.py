"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from dnav import __version__
from dnav.api.app import create_app
from dnav.extract.pipeline import NO_CANDIDATES_WARNING, NO_TEXT_WARNING

from tests.conftest import COMMITMENT_SENTENCE


@pytest.fixture
def client(temp_dir, monkeypatch) -> TestClient:
    """Create a test client isolated from any local dnav.yaml."""
    monkeypatch.chdir(temp_dir)
    return TestClient(create_app())


@pytest.fixture
def report_payload(report_pages) -> dict:
    return {
        "documents": [
            {
                "name": "report.pdf",
                "pages": [{"page": p.page, "text": p.text} for p in report_pages],
            }
        ]
    }


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "version": __version__}


class TestExtractEndpoint:
    """Tests for POST /decision-candidates/extract."""

    def test_report(self, client: TestClient, report_payload: dict) -> None:
        response = client.post("/decision-candidates/extract", json=report_payload)

        assert response.status_code == 200
        data = response.json()
        assert [c["evidence"]["page"] for c in data["candidates"]] == [1, 2]
        assert all(c["strength"] == "hard" for c in data["candidates"])
        assert data["candidates"][0]["evidence"]["location_hint"] == "report.pdf, page 1"
        assert data["warnings"] == []
        assert data["stats"]["pages_parsed"] == 3

    def test_memo_only(self, client: TestClient) -> None:
        response = client.post("/decision-candidates/extract", json={"memo": COMMITMENT_SENTENCE})

        assert response.status_code == 200
        candidate = response.json()["candidates"][0]
        assert candidate["evidence"]["file_name"] == "memo"
        assert candidate["category"] == "Operations"

    def test_max_candidates(self, client: TestClient, report_payload: dict) -> None:
        response = client.post("/decision-candidates/extract", json={**report_payload, "max_candidates": 1})

        assert response.status_code == 200
        assert len(response.json()["candidates"]) == 1

    def test_high_min_score(self, client: TestClient, report_payload: dict) -> None:
        """A threshold nothing reaches comes back as a warning, not an error."""
        response = client.post("/decision-candidates/extract", json={**report_payload, "min_score": 100})

        assert response.status_code == 200
        assert response.json()["candidates"] == []
        assert response.json()["warnings"] == [NO_CANDIDATES_WARNING]

    def test_empty_request(self, client: TestClient) -> None:
        response = client.post("/decision-candidates/extract", json={})

        assert response.status_code == 200
        assert response.json()["warnings"] == [NO_TEXT_WARNING]

    def test_rejects_page_zero(self, client: TestClient) -> None:
        payload = {"documents": [{"name": "a.pdf", "pages": [{"page": 0, "text": "text"}]}]}
        response = client.post("/decision-candidates/extract", json=payload)
        assert response.status_code == 422

    def test_rejects_zero_max_candidates(self, client: TestClient) -> None:
        response = client.post("/decision-candidates/extract", json={"memo": "x", "max_candidates": 0})
        assert response.status_code == 422


class TestDistillEndpoint:
    """Tests for POST /sources/distill."""

    def test_report(self, client: TestClient, report_payload: dict) -> None:
        response = client.post("/sources/distill", json={**report_payload, "memo": "We will hire in Q2 2026."})

        assert response.status_code == 200
        chunks = response.json()["chunks"]
        assert [c["source_id"] for c in chunks] == ["report.pdf", "memo"]
        assert (chunks[0]["page_start"], chunks[0]["page_end"]) == (1, 3)
        assert chunks[1]["page_start"] is None

    def test_rejects_small_chunks(self, client: TestClient) -> None:
        response = client.post("/sources/distill", json={"memo": "text", "max_chunk_chars": 10})
        assert response.status_code == 422
