from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse, JSONResponse

from ..config import Settings
from .dependencies import get_app_settings

INDEX_FILE = "index.html"

router = APIRouter(tags=["site"])


def resolve_site_file(static_dir: str, path: str) -> Path | None:
    """
    Map a request path to a file under the site root.

    Existing files are served as-is; anything else, including paths that
    would escape the root, falls back to the index page.
    """
    root = Path(static_dir).resolve()
    if path:
        try:
            candidate = (root / path).resolve()
            if candidate.is_file() and root in candidate.parents:
                return candidate
        except (ValueError, OSError):
            pass  # null bytes or unusable names fall back to the index
    index = root / INDEX_FILE
    return index if index.is_file() else None


# Registered last: catches every GET no other route handled.
@router.get("/{full_path:path}", include_in_schema=False)
def site(full_path: str, settings: Settings = Depends(get_app_settings)):
    target = resolve_site_file(settings.static_dir, full_path)
    if target is None:
        return JSONResponse(status_code=404, content={"error": "Not found"})
    return FileResponse(target)
