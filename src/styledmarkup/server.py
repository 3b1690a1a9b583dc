"""FastAPI web service for styling markup.

Endpoints::

    GET  /              Web UI (single-page HTML).
    GET  /health        Health check.
    GET  /presets       List available rule-set presets.
    POST /resolve       Send markup text, receive runs as JSON or HTML.
    POST /convert       Upload a markup file, receive the rendered file.

Images for image insertions are served from ``STYLEDMARKUP_IMAGE_DIR``.

Run::

    uvicorn styledmarkup.server:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import HTMLResponse, JSONResponse, Response

from styledmarkup import __version__
from styledmarkup.converter import Converter
from styledmarkup.errors import MarkupParseError, ResourceNotFoundError
from styledmarkup.renderer import Renderer, get_renderer, run_to_dict
from styledmarkup.resources import DirectoryImageLoader, ImageLoader
from styledmarkup.runs import StyledRun
from styledmarkup.style_manager import StyleManager

app = FastAPI(
    title="styledmarkup",
    description="Rule-based styling of XML-like markup",
    version=__version__,
)

IMAGE_DIR_ENV = "STYLEDMARKUP_IMAGE_DIR"

_STATIC_DIR = Path(__file__).parent / "static"
try:
    _INDEX_HTML = (_STATIC_DIR / "index.html").read_text(encoding="utf-8")
except FileNotFoundError:
    _INDEX_HTML = "<html><body><h1>styledmarkup</h1><p>Web UI not found.</p></body></html>"


def _content_disposition(filename: str) -> str:
    """Build Content-Disposition header, RFC 5987 for non-ASCII names."""
    try:
        filename.encode("ascii")
        return f'attachment; filename="{filename}"'
    except UnicodeEncodeError:
        encoded = quote(filename)
        return f"attachment; filename*=UTF-8''{encoded}"


def _image_loader() -> Optional[ImageLoader]:
    image_dir = os.environ.get(IMAGE_DIR_ENV)
    return DirectoryImageLoader(image_dir) if image_dir else None


def _converter(preset: str, markdown: bool) -> Converter:
    try:
        return Converter(style_preset=preset, markdown=markdown, image_loader=_image_loader())
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


def _renderer(fmt: str) -> Renderer:
    try:
        return get_renderer(fmt)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


def _resolve(converter: Converter, text: str) -> list[StyledRun]:
    try:
        return converter.resolve_text(text)
    except (MarkupParseError, ResourceNotFoundError) as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@app.get("/", response_class=HTMLResponse)
async def index() -> HTMLResponse:
    """Serve the web UI."""
    return HTMLResponse(content=_INDEX_HTML)


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


@app.get("/presets")
async def list_presets() -> dict[str, object]:
    """List available rule-set presets with their descriptions."""
    return {"presets": StyleManager.PRESETS, "descriptions": StyleManager.describe_presets()}


@app.post("/resolve")
async def resolve_text(
    markup: str = Form(...),
    preset: str = Form("default"),
    fmt: str = Form("json", alias="format"),
    markdown: bool = Form(False),
) -> Response:
    """Style raw markup text.

    - **markup**: markup (or Markdown) source text
    - **preset**: rule-set preset name
    - **format**: ``json``, ``html`` or ``text``
    """
    renderer = _renderer(fmt)
    runs = _resolve(_converter(preset, markdown), markup)
    if fmt == "json":
        return JSONResponse({"runs": [run_to_dict(run) for run in runs]})
    return Response(content=renderer.render(runs), media_type=renderer.media_type)


@app.post("/convert")
async def convert_file(
    file: UploadFile = File(...),
    preset: str = Form("default"),
    fmt: str = Form("html", alias="format"),
    markdown: bool = Form(False),
    encoding: str = Form("utf-8"),
) -> Response:
    """Upload a markup file and receive the rendered output back.

    - **file**: markup file (.xml, .txt or .md)
    - **preset**: rule-set preset name
    - **format**: ``html``, ``json`` or ``text``
    """
    raw = await file.read()
    try:
        text = raw.decode(encoding)
    except (UnicodeDecodeError, LookupError) as exc:
        raise HTTPException(status_code=422, detail=f"Cannot decode upload: {exc}") from exc

    renderer = _renderer(fmt)
    rendered = renderer.render(_resolve(_converter(preset, markdown), text))

    filename = (file.filename or "document.xml").rsplit(".", 1)[0] + renderer.suffix
    return Response(
        content=rendered,
        media_type=renderer.media_type,
        headers={"Content-Disposition": _content_disposition(filename)},
    )
