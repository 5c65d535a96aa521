"""
Paste routes.
Handles create, fetch (API), and view (HTML) operations.
"""
import logging
import secrets
import string
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse

from pastebin.clock import Clock
from pastebin.config import Settings
from pastebin.database import PasteStore
from pastebin.errors import PersistenceError
from pastebin.models import PasteCreate, PasteResponse, PasteView
from pastebin.templating import templates

router = APIRouter()
logger = logging.getLogger(__name__)

PASTE_ID_ALPHABET = string.ascii_letters + string.digits + "-_"
PASTE_ID_LENGTH = 10

NOT_FOUND_DETAIL = "Paste not found or no longer available"


def get_store(request: Request) -> PasteStore:
    return request.app.state.store


def get_clock(request: Request) -> Clock:
    return request.app.state.clock_provider(request)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def generate_paste_id() -> str:
    """Short random id, safe to embed in a URL."""
    return "".join(secrets.choice(PASTE_ID_ALPHABET) for _ in range(PASTE_ID_LENGTH))


def build_base_url(request: Request, settings: Settings) -> str:
    """
    Public base URL for share links.

    APP_DOMAIN wins when configured; otherwise forwarding headers set by a
    proxy, falling back to the request's own scheme and Host header.
    """
    if settings.APP_DOMAIN:
        return settings.APP_DOMAIN.rstrip("/")

    protocol = request.headers.get("x-forwarded-proto") or request.url.scheme
    host = request.headers.get("x-forwarded-host") or request.headers.get("host") or request.url.netloc
    return f"{protocol}://{host}"


@router.post("/api/pastes", response_model=PasteResponse, status_code=201)
def create_paste(
    paste: PasteCreate,
    request: Request,
    store: PasteStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
    settings: Settings = Depends(get_app_settings),
) -> PasteResponse:
    """
    Create a new paste.

    Args:
        paste: Paste data (content, optional ttl_seconds, optional max_views)
        request: HTTP request context

    Returns:
        Paste ID and shareable URL

    Raises:
        HTTPException: If the expiry is out of range (400) or the paste
            could not be stored (500)
    """
    paste_id = generate_paste_id()

    now = clock()
    expires_at = None
    if paste.ttl_seconds is not None:
        try:
            expires_at = now + timedelta(seconds=paste.ttl_seconds)
        except OverflowError:
            raise HTTPException(status_code=400, detail="ttl_seconds is too large")

    try:
        store.create_paste(
            paste_id=paste_id,
            content=paste.content,
            expires_at=expires_at,
            remaining_views=paste.max_views,
            created_at=now,
        )
    except PersistenceError:
        logger.exception(f"Error creating paste {paste_id}")
        raise HTTPException(
            status_code=500,
            detail="Failed to create paste",
        )

    url = f"{build_base_url(request, settings)}/p/{paste_id}"
    logger.info(f"Created paste {paste_id} (ttl={paste.ttl_seconds}, max_views={paste.max_views})")

    return PasteResponse(id=paste_id, url=url)


@router.get("/api/pastes/{paste_id}", response_model=PasteView)
def fetch_paste(
    paste_id: str,
    store: PasteStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
) -> PasteView:
    """
    Fetch a paste (API endpoint).
    Each fetch consumes one view.

    Raises:
        HTTPException: 400 if the id is blank, 404 if the paste is not found,
            expired, or out of views
    """
    if not paste_id.strip():
        raise HTTPException(status_code=400, detail="Paste ID is required")

    paste = store.fetch_and_decrement(paste_id, clock())
    if paste is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)

    return PasteView.from_paste(paste)


@router.get("/p/{paste_id}", response_class=HTMLResponse)
def view_paste(
    paste_id: str,
    request: Request,
    store: PasteStore = Depends(get_store),
    clock: Clock = Depends(get_clock),
):
    """
    View a paste as HTML.
    Each view consumes one view, same as the API.

    Returns:
        HTML page with paste content, or the 404 page
    """
    try:
        paste = store.fetch_and_decrement(paste_id, clock())
    except PersistenceError:
        logger.exception(f"Error loading paste {paste_id} for viewing")
        paste = None

    if paste is None:
        return _render_404_page(request)

    return templates.TemplateResponse(request, "paste.html", {"paste": paste})


def _render_404_page(request: Request):
    """Render a 404 error page."""
    return templates.TemplateResponse(request, "not_found.html", {}, status_code=404)
