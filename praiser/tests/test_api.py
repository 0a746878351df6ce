"""Tests for the HTTP layer — app wiring, chat, person info, settings, uploads.

Uses httpx.AsyncClient with ASGITransport. Service singletons in deps.py
are swapped per test via monkeypatch; storage lives under tmp_path.
"""

import dataclasses
import json
import logging

import httpx
import pytest
from httpx import ASGITransport

import praiser.config as config_module
from praiser.ai.errors import ProviderCallError
from praiser.api import deps
from praiser.api.chat import STUB_TRANSCRIPT
from praiser.config import get_settings
from praiser.hooks.auth import StaticAdminAuth
from praiser.hooks.storage import JsonFileStore, LocalFileStorage
from praiser.main import app
from praiser.models import FALLBACK_MODELS

CANDIDATES = list(FALLBACK_MODELS)
ADMIN_HEADERS = {"X-Admin-User": "admin", "X-Admin-Password": "s3cret"}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def client() -> httpx.AsyncClient:
    """Async test client wired to the app."""
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    return httpx.AsyncClient(transport=transport, base_url="http://test")


@pytest.fixture
def use_stub(monkeypatch: pytest.MonkeyPatch):
    """Returns a setter that toggles PRAISER_USE_GROQ_STUB for the app."""

    def _set(enabled: bool) -> None:
        settings = dataclasses.replace(get_settings(), use_groq_stub=enabled)
        monkeypatch.setattr(config_module, "_settings", settings)

    _set(False)
    return _set


@pytest.fixture
def services(monkeypatch: pytest.MonkeyPatch, tmp_path, use_stub):
    """Points storage and admin singletons at tmp_path / known credentials."""
    monkeypatch.setattr(deps, "_file_storage", LocalFileStorage(tmp_path / "uploads"))
    monkeypatch.setattr(deps, "_document_store", JsonFileStore(tmp_path))
    monkeypatch.setattr(deps, "_admin_auth", StaticAdminAuth("admin", "s3cret"))
    return tmp_path


@pytest.fixture
def install_engine(monkeypatch: pytest.MonkeyPatch, make_engine, services):
    """Installs a MockProvider-backed engine; returns the provider."""

    def _install(**provider_kwargs):
        engine, provider = make_engine(models=CANDIDATES, **provider_kwargs)
        monkeypatch.setattr(deps, "_praise_engine", engine)
        return provider

    return _install


def _praise_body(**overrides) -> dict:
    body = {
        "messages": [{"role": "user", "content": "Tell me about Alex"}],
        "personInfo": {"name": "Alex", "extraInfo": "", "images": []},
        "praiseVolume": 50,
    }
    body.update(overrides)
    return body


# ---------------------------------------------------------------------------
# App wiring
# ---------------------------------------------------------------------------


class TestApp:
    @pytest.mark.asyncio
    async def test_health(self, client: httpx.AsyncClient) -> None:
        async with client:
            resp = await client.get("/api/v1/health")
        assert resp.status_code == 200
        assert resp.json() == {"ok": True, "data": {"status": "healthy"}, "error": None}

    @pytest.mark.asyncio
    async def test_unknown_route_is_enveloped(self, client: httpx.AsyncClient) -> None:
        async with client:
            resp = await client.get("/api/v1/nope")
        assert resp.status_code == 404
        assert resp.json()["ok"] is False
        assert resp.json()["error"]["code"] == "HTTP_ERROR"

    @pytest.mark.asyncio
    async def test_request_logging(self, client: httpx.AsyncClient, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="praiser"):
            async with client:
                await client.get("/api/v1/health")
        assert any("GET /api/v1/health 200" in record.getMessage() for record in caplog.records)


# ---------------------------------------------------------------------------
# POST /groq/praise
# ---------------------------------------------------------------------------


class TestPraiseRoute:
    @pytest.mark.asyncio
    async def test_success_uses_camel_case(self, client, install_engine) -> None:
        install_engine(outcomes=[json.dumps({"message": "Alex shines!"})])

        async with client:
            resp = await client.post("/api/v1/groq/praise", json=_praise_body())

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["assistantMessage"] == "Alex shines!"
        assert data["separateImageMessage"] is None
        assert data["model"] == CANDIDATES[0]

    @pytest.mark.asyncio
    async def test_volume_out_of_range_never_reaches_provider(self, client, install_engine) -> None:
        provider = install_engine()

        async with client:
            resp = await client.post("/api/v1/groq/praise", json=_praise_body(praiseVolume=101))

        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_empty_messages_rejected(self, client, install_engine) -> None:
        provider = install_engine()
        async with client:
            resp = await client.post("/api/v1/groq/praise", json=_praise_body(messages=[]))
        assert resp.status_code == 422
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_over_capacity_is_503(self, client, install_engine) -> None:
        install_engine(outcomes=[ProviderCallError("over capacity", status_code=503)])

        async with client:
            resp = await client.post("/api/v1/groq/praise", json=_praise_body())

        assert resp.status_code == 503
        error = resp.json()["error"]
        assert error["code"] == "MODELS_OVER_CAPACITY"
        assert error["retry_after"] == 30

    @pytest.mark.asyncio
    async def test_fatal_is_500_with_details(self, client, install_engine) -> None:
        install_engine(outcomes=[ProviderCallError("Invalid API Key", status_code=401)])

        async with client:
            resp = await client.post("/api/v1/groq/praise", json=_praise_body())

        assert resp.status_code == 500
        error = resp.json()["error"]
        assert error["code"] == "PRAISE_FAILED"
        assert error["details"] == "Invalid API Key"

    @pytest.mark.asyncio
    async def test_no_engine_is_503(self, client, services, monkeypatch) -> None:
        monkeypatch.setattr(deps, "_praise_engine", None)
        async with client:
            resp = await client.post("/api/v1/groq/praise", json=_praise_body())
        assert resp.status_code == 503
        assert resp.json()["error"]["code"] == "SERVICE_UNAVAILABLE"

    @pytest.mark.asyncio
    async def test_engine_is_injected(self, client, services, make_engine, monkeypatch) -> None:
        monkeypatch.setattr(deps, "_praise_engine", None)
        engine, provider = make_engine(
            models=CANDIDATES, outcomes=[json.dumps({"message": "Injected!"})],
        )
        app.dependency_overrides[deps.get_chat_engine] = lambda: engine
        try:
            async with client:
                resp = await client.post("/api/v1/groq/praise", json=_praise_body())
        finally:
            app.dependency_overrides.clear()

        assert resp.status_code == 200
        assert resp.json()["data"]["assistantMessage"] == "Injected!"
        assert len(provider.calls) == 1

    @pytest.mark.asyncio
    async def test_padded_name_is_trimmed_in_stub(self, client, services, use_stub) -> None:
        use_stub(True)
        body = _praise_body(personInfo={"name": "  Alex ", "extraInfo": "", "images": []})
        async with client:
            resp = await client.post("/api/v1/groq/praise", json=body)
        assert resp.json()["data"]["assistantMessage"].startswith("Wow, Alex sounds")

    @pytest.mark.asyncio
    async def test_stub_mode_with_person(self, client, services, use_stub) -> None:
        use_stub(True)
        async with client:
            resp = await client.post("/api/v1/groq/praise", json=_praise_body())
        assert resp.status_code == 200
        assert "Alex sounds absolutely incredible" in resp.json()["data"]["assistantMessage"]

    @pytest.mark.asyncio
    async def test_stub_mode_without_person(self, client, services, use_stub) -> None:
        use_stub(True)
        async with client:
            resp = await client.post(
                "/api/v1/groq/praise", json=_praise_body(personInfo=None),
            )
        assert resp.json()["data"]["assistantMessage"].startswith("I'd love to praise someone!")


# ---------------------------------------------------------------------------
# POST /groq/transcribe
# ---------------------------------------------------------------------------


class TestTranscribeRoute:
    @pytest.mark.asyncio
    async def test_transcribes(self, client, install_engine) -> None:
        install_engine(transcript="γεια σου")
        async with client:
            resp = await client.post(
                "/api/v1/groq/transcribe",
                files={"audio": ("voice.webm", b"\x1aE\xdf\xa3", "audio/webm")},
            )
        assert resp.status_code == 200
        assert resp.json()["data"] == {"text": "γεια σου"}

    @pytest.mark.asyncio
    async def test_missing_audio_is_400(self, client, install_engine) -> None:
        install_engine()
        async with client:
            resp = await client.post("/api/v1/groq/transcribe", data={"other": "x"})
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "AUDIO_REQUIRED"

    @pytest.mark.asyncio
    async def test_stub_transcript(self, client, services, use_stub) -> None:
        use_stub(True)
        async with client:
            resp = await client.post(
                "/api/v1/groq/transcribe",
                files={"audio": ("voice.webm", b"\x00", "audio/webm")},
            )
        assert resp.json()["data"] == {"text": STUB_TRANSCRIPT}

    @pytest.mark.asyncio
    async def test_no_engine_is_503(self, client, services, monkeypatch) -> None:
        monkeypatch.setattr(deps, "_praise_engine", None)
        async with client:
            resp = await client.post(
                "/api/v1/groq/transcribe",
                files={"audio": ("voice.webm", b"\x00", "audio/webm")},
            )
        assert resp.status_code == 503
        assert resp.json()["error"]["code"] == "SERVICE_UNAVAILABLE"


# ---------------------------------------------------------------------------
# Person info / settings / admin
# ---------------------------------------------------------------------------


class TestPersonInfoRoutes:
    @pytest.mark.asyncio
    async def test_absent_is_null(self, client, services) -> None:
        async with client:
            resp = await client.get("/api/v1/person-info")
        assert resp.json()["data"] == {"personInfo": None}

    @pytest.mark.asyncio
    async def test_save_then_load(self, client, services) -> None:
        person = {"name": "Mike", "extraInfo": "Drummer", "images": [], "videos": [], "urls": []}
        async with client:
            saved = await client.post("/api/v1/person-info", json={"personInfo": person})
            resp = await client.get("/api/v1/person-info")
        assert saved.status_code == 200
        assert resp.json()["data"]["personInfo"] == person

    @pytest.mark.asyncio
    async def test_unreadable_is_null(self, client, services) -> None:
        (services / "person-info.json").write_text("{broken", encoding="utf-8")
        async with client:
            resp = await client.get("/api/v1/person-info")
        assert resp.status_code == 200
        assert resp.json()["data"] == {"personInfo": None}


class TestSettingsRoutes:
    @pytest.mark.asyncio
    async def test_get_is_open(self, client, services) -> None:
        async with client:
            resp = await client.get("/api/v1/settings")
        assert resp.status_code == 200
        assert resp.json()["data"] == {"settings": None}

    @pytest.mark.asyncio
    async def test_post_requires_admin(self, client, services) -> None:
        async with client:
            resp = await client.post("/api/v1/settings", json={"settings": {"theme": "gold"}})
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_post_missing_settings_is_400(self, client, services) -> None:
        async with client:
            resp = await client.post("/api/v1/settings", json={}, headers=ADMIN_HEADERS)
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_admin_save_then_load(self, client, services) -> None:
        async with client:
            await client.post(
                "/api/v1/settings", json={"settings": {"theme": "gold"}}, headers=ADMIN_HEADERS,
            )
            resp = await client.get("/api/v1/settings")
        assert resp.json()["data"] == {"settings": {"theme": "gold"}}

    @pytest.mark.asyncio
    async def test_login(self, client, services) -> None:
        async with client:
            ok = await client.post(
                "/api/v1/admin/login", json={"username": "admin", "password": "s3cret"},
            )
            bad = await client.post(
                "/api/v1/admin/login", json={"username": "admin", "password": "guess"},
            )
        assert ok.status_code == 200
        assert bad.status_code == 401


# ---------------------------------------------------------------------------
# Uploads / media
# ---------------------------------------------------------------------------


class TestUploadRoutes:
    @pytest.mark.asyncio
    async def test_upload_then_serve(self, client, services) -> None:
        async with client:
            resp = await client.post(
                "/api/v1/upload",
                files={"file": ("alex.png", b"\x89PNG-data", "image/png")},
                data={"type": "image"},
            )
            data = resp.json()["data"]
            served = await client.get(data["url"])

        assert resp.status_code == 200
        assert data["name"] == "alex.png"
        assert data["type"] == "image/png"
        assert data["filename"].endswith(".png")
        assert data["url"] == f"/api/v1/media/image/{data['filename']}"
        assert served.status_code == 200
        assert served.content == b"\x89PNG-data"

    @pytest.mark.asyncio
    async def test_mime_mismatch_is_400(self, client, services) -> None:
        async with client:
            resp = await client.post(
                "/api/v1/upload",
                files={"file": ("clip.mp4", b"\x00", "video/mp4")},
                data={"type": "image"},
            )
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "INVALID_FILE"

    @pytest.mark.asyncio
    async def test_missing_file_is_400(self, client, services) -> None:
        async with client:
            resp = await client.post("/api/v1/upload", data={"type": "image"})
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_media_is_404(self, client, services) -> None:
        async with client:
            resp = await client.get("/api/v1/media/image/missing.png")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "MEDIA_NOT_FOUND"
