"""
Tests for the HTTP API.
"""
import pytest
from fastapi.testclient import TestClient

import backend.main as service
from statement_parser import TextExtractionError

STATEMENT = b"AXIS BANK\nCard No: XXXX XXXX XXXX 4321\n05/03/2024 SWIGGY ORDER 450.00 Dr\n"


@pytest.fixture
def client():
    return TestClient(service.app)


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"ok": True}


class TestParseEndpoint:

    def test_parses_upload(self, client):
        response = client.post(
            "/api/parse",
            files={"pdf": ("statement.txt", STATEMENT, "text/plain")},
            data={"bank": "axis"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["bankSelected"] == "axis"
        assert body["bankUsed"] == "axis"
        assert body["parsed"]["cardEnding"] == "4321"
        assert body["textSample"].startswith("AXIS BANK")

    def test_no_file(self, client):
        response = client.post("/api/parse", data={"bank": "axis"})
        assert response.status_code == 400

    def test_no_text(self, client):
        response = client.post("/api/parse", files={"pdf": ("empty.txt", b"", "text/plain")})
        assert response.status_code == 422

    def test_temp_file_removed(self, client, monkeypatch):
        seen = []

        def fake_load_text(path, lang="eng"):
            seen.append(path)
            assert path.exists()
            return STATEMENT.decode()

        monkeypatch.setattr(service, "load_text", fake_load_text)
        response = client.post("/api/parse", files={"pdf": ("statement.pdf", b"%PDF-1.4", "application/pdf")})
        assert response.status_code == 200
        assert seen and not seen[0].exists()
        assert seen[0].suffix == ".pdf"

    def test_parser_failure(self, client, monkeypatch):
        def broken(text, bank_hint=None):
            raise RuntimeError("boom")

        monkeypatch.setattr(service, "parse", broken)
        response = client.post("/api/parse", files={"pdf": ("statement.txt", STATEMENT, "text/plain")})
        assert response.status_code == 500
        assert "boom" in response.json()["detail"]

    def test_extraction_error_maps_to_422(self, client, monkeypatch):
        def failing(path, lang="eng"):
            raise TextExtractionError("scanned and OCR missing")

        monkeypatch.setattr(service, "load_text", failing)
        response = client.post("/api/parse", files={"pdf": ("scan.pdf", b"%PDF-1.4", "application/pdf")})
        assert response.status_code == 422
