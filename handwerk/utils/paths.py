# handwerk/utils/paths.py
import os
import re
import uuid
from datetime import datetime, timezone
from fastapi import Request
from handwerk.config import get_settings

def abs_url(request: Request, path_or_url: str) -> str:
    if path_or_url.startswith("http://") or path_or_url.startswith("https://"):
        return path_or_url
    base = str(request.base_url).rstrip("/")
    return f"{base}/{path_or_url.lstrip('/')}"

def ensure_dirs():
    os.makedirs(get_settings().STATIC_DIR, exist_ok=True)

def slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower().strip()).strip("-")

def safe_filename(name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9._-]", "_", name or "file")

def object_path(filename: str) -> str:
    """``YYYY-MM-DD/<uuid>-<filename>`` key for a new storage object."""
    day = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    return f"{day}/{uuid.uuid4()}-{safe_filename(filename)}"
