import logging
from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from roomcast.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["landing"])


@router.get("/", include_in_schema=False)
def landing_page() -> Response:
    try:
        content = Path(settings.INDEX_FILE).read_text(encoding="utf-8")
    except OSError as exc:
        logger.error("Error reading %s: %s", settings.INDEX_FILE, exc)
        return PlainTextResponse("Error loading page", status_code=500)
    return HTMLResponse(content)
