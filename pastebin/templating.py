"""
Jinja2 templates for the HTML pages (autoescaping is on for .html files).
"""
from datetime import datetime
from pathlib import Path
from typing import Optional

from fastapi.templating import Jinja2Templates

TEMPLATES_DIR = Path(__file__).parent / "templates"
STATIC_DIR = Path(__file__).parent / "static"


def views_badge(remaining_views: int) -> str:
    """e.g. '1 view remaining', '3 views remaining'."""
    suffix = "" if remaining_views == 1 else "s"
    return f"{remaining_views} view{suffix} remaining"


def expiry_badge(expires_at: Optional[datetime]) -> str:
    if expires_at is None:
        return ""
    return f"Expires: {expires_at:%Y-%m-%d %H:%M:%S} UTC"


templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["views_badge"] = views_badge
templates.env.filters["expiry_badge"] = expiry_badge
