"""Static builder page."""

from functools import lru_cache
from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter()

BUILDER_HTML_PATH = Path(__file__).parent.parent / "static" / "builder.html"


@lru_cache(maxsize=1)
def load_builder_html() -> str:
    return BUILDER_HTML_PATH.read_text(encoding="utf-8")


@router.get("/", response_class=HTMLResponse)
@router.get("/builder", response_class=HTMLResponse)
def builder_page() -> HTMLResponse:
    """Serve the board builder page."""
    return HTMLResponse(load_builder_html())
