"""Tests for the FastAPI web service."""

from __future__ import annotations

from pathlib import Path

import pytest

try:
    from httpx import AsyncClient, ASGITransport
    _HAS_HTTPX = True
except ImportError:
    _HAS_HTTPX = False

from styledmarkup.server import IMAGE_DIR_ENV, app

FIXTURE_DIR = Path(__file__).parent / "fixtures"
SAMPLE_XML = FIXTURE_DIR / "sample.xml"

pytestmark = pytest.mark.skipif(not _HAS_HTTPX, reason="httpx not installed")


@pytest.fixture
def client():
    """Create an async test client."""
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test")


@pytest.fixture(autouse=True)
def no_image_dir(monkeypatch):
    monkeypatch.delenv(IMAGE_DIR_ENV, raising=False)


@pytest.mark.asyncio
class TestHealthEndpoint:

    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert "version" in data


@pytest.mark.asyncio
class TestPresetsEndpoint:

    async def test_list_presets(self, client):
        resp = await client.get("/presets")
        assert resp.status_code == 200
        data = resp.json()
        assert "default" in data["presets"]
        assert set(data["descriptions"]) == set(data["presets"])


@pytest.mark.asyncio
class TestResolveEndpoint:

    async def test_resolve_json(self, client):
        resp = await client.post("/resolve", data={"markup": "Plain <b>bold</b>"})
        assert resp.status_code == 200
        runs = resp.json()["runs"]
        assert [run["text"] for run in runs] == ["Plain ", "bold"]
        assert runs[1]["style"]["font"]["name"] == "Georgia-Bold"

    async def test_resolve_html(self, client):
        resp = await client.post(
            "/resolve",
            data={"markup": "<number>1<ordinal>st</ordinal></number>", "preset": "ordinals", "format": "html"},
        )
        assert resp.status_code == 200
        assert "text/html" in resp.headers["content-type"]
        assert "ordinal" in resp.text

    async def test_resolve_text(self, client):
        resp = await client.post("/resolve", data={"markup": "a<sm:emDash/>b", "format": "text"})
        assert resp.status_code == 200
        assert resp.text == "a—b"

    async def test_resolve_markdown(self, client):
        resp = await client.post(
            "/resolve",
            data={"markup": "- one\n- two\n", "preset": "markdown", "markdown": "true", "format": "text"},
        )
        assert resp.status_code == 200
        assert resp.text.count("•") == 2

    async def test_malformed_markup(self, client):
        resp = await client.post("/resolve", data={"markup": "<b>open"})
        assert resp.status_code == 422
        assert "Malformed markup" in resp.json()["detail"]

    async def test_unknown_preset(self, client):
        resp = await client.post("/resolve", data={"markup": "x", "preset": "nope"})
        assert resp.status_code == 422

    async def test_unknown_format(self, client):
        resp = await client.post("/resolve", data={"markup": "x", "format": "pdf"})
        assert resp.status_code == 422

    async def test_missing_image(self, client):
        resp = await client.post("/resolve", data={"markup": "<racket/>", "preset": "quote"})
        assert resp.status_code == 422
        assert "Tennis Racket" in resp.json()["detail"]

    async def test_image_directory(self, client, tmp_path, monkeypatch):
        (tmp_path / "Tennis Racket.png").write_bytes(b"\x89PNG\r\n\x1a\n")
        monkeypatch.setenv(IMAGE_DIR_ENV, str(tmp_path))
        resp = await client.post("/resolve", data={"markup": "<racket/>", "preset": "quote"})
        assert resp.status_code == 200
        assert resp.json()["runs"][0]["kind"] == "image"


@pytest.mark.asyncio
class TestConvertFileEndpoint:

    async def test_convert_file_upload(self, client):
        resp = await client.post(
            "/convert",
            files={"file": ("test.xml", b"Hello <b>world</b>", "application/xml")},
            data={"preset": "default"},
        )
        assert resp.status_code == 200
        assert "text/html" in resp.headers["content-type"]
        assert "world" in resp.text

    async def test_convert_json(self, client):
        resp = await client.post(
            "/convert",
            files={"file": ("test.xml", b"<i>x</i>", "application/xml")},
            data={"format": "json"},
        )
        assert resp.status_code == 200
        assert resp.json()[0]["text"] == "x"

    async def test_content_disposition_header(self, client):
        resp = await client.post(
            "/convert",
            files={"file": ("myfile.xml", b"<b>Hello</b>", "application/xml")},
        )
        assert resp.status_code == 200
        assert "myfile.html" in resp.headers.get("content-disposition", "")

    async def test_bad_encoding(self, client):
        resp = await client.post(
            "/convert",
            files={"file": ("test.xml", "<b>café</b>".encode("latin-1"), "application/xml")},
        )
        assert resp.status_code == 422

    async def test_convert_sample_fixture(self, client):
        resp = await client.post(
            "/convert",
            files={"file": ("sample.xml", SAMPLE_XML.read_bytes(), "application/xml")},
        )
        assert resp.status_code == 200
        assert len(resp.content) > 0


@pytest.mark.asyncio
class TestWebUI:

    async def test_index_returns_html(self, client):
        resp = await client.get("/")
        assert resp.status_code == 200
        assert "text/html" in resp.headers.get("content-type", "")

    async def test_index_contains_key_elements(self, client):
        resp = await client.get("/")
        html = resp.text
        assert "<textarea" in html
        assert "<select" in html
        assert "<button" in html

    async def test_index_contains_fetch_call(self, client):
        resp = await client.get("/")
        assert "fetch(" in resp.text
