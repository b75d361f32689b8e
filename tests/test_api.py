# tests/test_api.py

import pytest
from fastapi.testclient import TestClient

from voucher_scan.api import server
from voucher_scan.config.settings import Settings
from voucher_scan.ingestion.downloader import DocumentDownloadError
from voucher_scan.ocr.ocr_text import OcrTimeoutError


@pytest.fixture
def client(monkeypatch):
    settings = Settings(_env_file=None, gemini_api_key="")
    monkeypatch.setattr(server, "get_settings", lambda: settings)
    return TestClient(server.app)


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "ai_available": False}


def test_extract_amount_from_text(client):
    resp = client.post("/extract-amount", json={"text": "Subtotal 10.75\nTotal 11.61\nCash 20.00"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["is_success"] is True
    assert body["data"]["amount"] == pytest.approx(11.61)
    assert body["data"]["method"] == "traditional"
    assert body["data"]["stage"] == "header_lookahead"
    assert body["data"]["candidates"]


def test_extract_amount_empty_text(client):
    resp = client.post("/extract-amount", json={"text": ""})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["amount"] is None
    assert data["confidence"] == 0


def test_ai_method_without_key_is_rejected(client):
    resp = client.post("/extract-amount", json={"text": "Total 5", "method": "ai-ocr"})
    assert resp.status_code == 400


def test_failed_is_not_a_method(client):
    resp = client.post("/extract-amount", json={"text": "Total 5", "method": "failed"})
    assert resp.status_code == 400


def test_unknown_method_is_invalid(client):
    resp = client.post("/extract-amount", json={"text": "Total 5", "method": "magic"})
    assert resp.status_code == 422


def test_voucher_unsupported_extension(client):
    resp = client.post("/extract-voucher-data", json={"document": "https://example.com/bill.pdf"})
    assert resp.status_code == 400
    assert "Unsupported file type" in resp.json()["detail"]


def test_voucher_pipeline(client, monkeypatch):
    monkeypatch.setattr(server, "download_document", lambda url, base_dir, timeout: ("id", base_dir + "/id.png"))
    monkeypatch.setattr(
        server, "process_voucher",
        lambda path, extractor, settings: {"amount": 44800.0, "currency": "EGP", "file": "id.png"},
    )
    resp = client.post("/extract-voucher-data", json={"document": "https://example.com/v.png"})
    assert resp.status_code == 200
    assert resp.json() == {
        "is_success": True,
        "data": {"amount": 44800.0, "currency": "EGP", "file": "id.png"},
    }


def test_voucher_download_error(client, monkeypatch):
    def fail(url, base_dir, timeout):
        raise DocumentDownloadError("Status=404")

    monkeypatch.setattr(server, "download_document", fail)
    resp = client.post("/extract-voucher-data", json={"document": "https://example.com/v.png"})
    assert resp.status_code == 400


def test_voucher_ocr_timeout(client, monkeypatch):
    def slow(path, extractor, settings):
        raise OcrTimeoutError("OCR timed out after 30s")

    monkeypatch.setattr(server, "download_document", lambda url, base_dir, timeout: ("id", base_dir + "/id.png"))
    monkeypatch.setattr(server, "process_voucher", slow)
    resp = client.post("/extract-voucher-data", json={"document": "https://example.com/v.png"})
    assert resp.status_code == 504


def test_voucher_unexpected_error(client, monkeypatch):
    def broken(path, extractor, settings):
        raise ValueError("bad image")

    monkeypatch.setattr(server, "download_document", lambda url, base_dir, timeout: ("id", base_dir + "/id.png"))
    monkeypatch.setattr(server, "process_voucher", broken)
    resp = client.post("/extract-voucher-data", json={"document": "https://example.com/v.png"})
    assert resp.status_code == 200
    assert resp.json() == {"is_success": False, "message": "bad image"}
