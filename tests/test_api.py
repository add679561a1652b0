"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient
from starlette.datastructures import UploadFile as StarletteUploadFile

from card_handoff.api.app import create_app
from card_handoff.config import Settings
from card_handoff.containers import AppContainer
from tests.conftest import JPEG_BYTES, FakeClock, FakeRecognizer


def _scan(client: TestClient, session_id: str | None, content: bytes = JPEG_BYTES):
    data = {"sessionId": session_id} if session_id else {}
    return client.post(
        "/api/scan",
        data=data,
        files={"cardImage": ("card-scan.jpg", content, "image/jpeg")},
    )


def test_full_handoff_flow(container: AppContainer, clock: FakeClock) -> None:
    client = TestClient(create_app(container))

    created = client.post("/api/session")
    assert created.status_code == 200
    body = created.json()
    assert body["ok"] is True
    assert body["expiresInSec"] == 300
    assert body["mobileUrl"].startswith("https://cards.example.com/scanner.html?")
    assert body["desktopUrl"].endswith("&autopoll=1")
    assert body["qrCode"]
    session_id = body["sessionId"]

    pending = client.get("/api/get-data", params={"sessionId": session_id})
    assert pending.json() == {"ok": True, "status": "pending"}

    scanned = _scan(client, session_id)
    assert scanned.status_code == 200
    assert scanned.json() == {
        "ok": True,
        "message": "Card scanned successfully",
        "data": {
            "maskedCardNumber": "•••• •••• •••• 1111",
            "cardholderName": "JOHN MICHAEL SMITH",
            "expiryDate": "09/26",
            "cardType": "VISA",
        },
    }
    assert "cardNumber" not in scanned.json()["data"]

    ready = client.get("/api/get-data", params={"sessionId": session_id}).json()
    assert ready["status"] == "ready"
    assert ready["data"]["cardNumber"] == "4111111111111111"
    assert ready["data"]["maskedCardNumber"].endswith("1111")
    assert ready["data"]["cardType"] == "VISA"
    assert ready["data"]["deliveredAt"] is not None

    clock.advance(5)
    again = client.get("/api/get-data", params={"sessionId": session_id}).json()
    assert again["data"]["deliveredAt"] == ready["data"]["deliveredAt"]

    clock.advance(301)
    expired = client.get("/api/get-data", params={"sessionId": session_id})
    assert expired.status_code == 410
    assert expired.json()["ok"] is False
    gone = client.get("/api/get-data", params={"sessionId": session_id})
    assert gone.status_code == 404


def test_scan_reads_at_most_one_byte_past_the_upload_limit(
    container: AppContainer,
    recognizer: FakeRecognizer,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    container.handoff_coordinator.max_upload_bytes = 1024
    read_sizes: list[int] = []
    original_read = StarletteUploadFile.read

    async def recording_read(self: StarletteUploadFile, size: int = -1) -> bytes:
        data = await original_read(self, size)
        read_sizes.append(len(data))
        return data

    monkeypatch.setattr(StarletteUploadFile, "read", recording_read)
    client = TestClient(create_app(container))
    session_id = client.post("/api/session").json()["sessionId"]

    response = _scan(client, session_id, JPEG_BYTES + bytes(2 * 1024 * 1024))

    assert response.status_code == 400
    assert response.json() == {
        "ok": False,
        "error": "Image is too large.",
        "category": "input",
    }
    assert read_sizes == [1025]
    assert recognizer.calls == []


def test_scan_error_categories(
    container: AppContainer, recognizer: FakeRecognizer
) -> None:
    client = TestClient(create_app(container))
    session_id = client.post("/api/session").json()["sessionId"]

    missing = _scan(client, None)
    assert missing.status_code == 400
    assert missing.json() == {
        "ok": False,
        "error": "Missing sessionId",
        "category": "input",
    }

    unknown = _scan(client, "does-not-exist")
    assert unknown.status_code == 404
    assert unknown.json()["category"] == "not_found"

    no_file = client.post("/api/scan", data={"sessionId": session_id})
    assert no_file.status_code == 400

    recognizer.text = "NOTHING USEFUL HERE"
    unreadable = _scan(client, session_id)
    assert unreadable.status_code == 422
    assert unreadable.json()["category"] == "extraction_failed"

    recognizer.error = RuntimeError("backend down")
    upstream = _scan(client, session_id)
    assert upstream.status_code == 502
    assert upstream.json()["category"] == "upstream_failed"


def test_scan_rejects_unsupported_file_type(container: AppContainer) -> None:
    client = TestClient(create_app(container))
    session_id = client.post("/api/session").json()["sessionId"]

    response = client.post(
        "/api/scan",
        data={"sessionId": session_id},
        files={"cardImage": ("card.txt", b"hello", "text/plain")},
    )

    assert response.status_code == 400
    assert "Unsupported file type" in response.json()["error"]


def test_get_data_requires_session_id(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/api/get-data")

    assert response.status_code == 400
    assert response.json()["ok"] is False


def test_api_health_reports_sessions(container: AppContainer) -> None:
    client = TestClient(create_app(container))
    client.post("/api/session")

    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {
        "ok": True,
        "service": "card-scanner",
        "activeSessions": 1,
        "publicBaseUrl": "https://cards.example.com",
    }
    assert response.headers["cache-control"] == "no-store"


def test_session_creation_fails_without_public_url_in_production(
    container: AppContainer,
) -> None:
    container.settings = Settings(environment="production", public_base_url=None)
    client = TestClient(create_app(container))

    response = client.post("/api/session", headers={"x-forwarded-proto": "https"})

    assert response.status_code == 500
    assert "PUBLIC_BASE_URL" in response.json()["error"]
    assert container.session_registry.active_count() == 0


def test_production_redirects_plain_http(container: AppContainer) -> None:
    container.settings = Settings(
        environment="production", public_base_url="https://cards.example.com"
    )
    client = TestClient(create_app(container), follow_redirects=False)

    response = client.get("/api/health", headers={"x-forwarded-proto": "http"})

    assert response.status_code == 308
    assert response.headers["location"].startswith("https://")


def test_pages_are_served(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    desktop = client.get("/")
    scanner = client.get("/scanner.html")
    scanner_alias = client.get("/scanner")

    assert desktop.status_code == 200
    assert "/api/session" in desktop.text
    assert scanner.status_code == 200
    assert "/api/scan" in scanner.text
    assert "getUserMedia" in scanner.text
    assert "setInterval(scanOnce" in scanner.text
    assert "result.status === 422" in scanner.text
    assert scanner_alias.text == scanner.text


def test_lifespan_starts_and_stops_sweep(container: AppContainer) -> None:
    app = create_app(container)

    with TestClient(app) as client:
        assert client.get("/health").json() == {"status": "ok"}
        assert container.session_registry._sweep_task is not None

    assert container.session_registry._sweep_task is None
