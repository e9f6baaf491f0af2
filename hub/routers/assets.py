"""Served paths referenced in broadcast payloads (scripts, stylesheet, assets)."""

import logging
from pathlib import Path

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["assets"])

STATIC_DIR = Path(__file__).resolve().parent.parent.parent / "static"


def _not_found(what: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"{what} not found")


@router.get("/script/{name}.js")
async def plugin_script(name: str, request: Request):
    """Serve the stored script of a plugin."""
    path = request.app.state.plugins.script_path(name)
    if path is None:
        raise _not_found(f"Script '{name}'")
    return FileResponse(path, media_type="text/javascript")


@router.get("/custom/style.css")
async def custom_style(request: Request):
    """Serve the custom stylesheet, if one is set."""
    path = request.app.state.styles.style_path()
    if path is None:
        raise _not_found("Stylesheet")
    return FileResponse(path, media_type="text/css")


@router.get("/plugin/{name}/{filename}")
async def plugin_asset(name: str, filename: str, request: Request):
    """Serve a static file shipped inside a plugin directory."""
    path = request.app.state.plugins.asset_path(name, filename)
    if path is None:
        raise _not_found(f"Asset '{name}/{filename}'")
    return FileResponse(path)


@router.get("/")
async def display_page():
    """Serve the display page."""
    page = STATIC_DIR / "display.html"
    if page.exists():
        return FileResponse(page)
    return {"message": "Display hub", "socket": "/"}


@router.get("/edit")
async def editor_page():
    """Serve the editor page."""
    page = STATIC_DIR / "edit.html"
    if page.exists():
        return FileResponse(page)
    return {"message": "Display hub editor", "socket": "/"}
