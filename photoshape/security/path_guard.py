from __future__ import annotations

import re
from pathlib import Path

from photoshape.config import settings


_SAFE_SEGMENT_PATTERN = re.compile(r"[A-Za-z0-9._-]+")


def validate_segment(raw: str) -> str:
    """Return `raw` if it is a usable single path segment (session id, file name)."""
    if not _SAFE_SEGMENT_PATTERN.fullmatch(raw) or set(raw) == {"."}:
        raise ValueError(f"invalid path segment {raw!r}: only letters, digits, '.', '_' and '-' are allowed")
    return raw


def _storage_root() -> Path:
    return Path(settings.storage_root).resolve()


def _is_under_root(path: Path, root: Path) -> bool:
    try:
        path.relative_to(root)
        return True
    except ValueError:
        return False


def ensure_under_storage_root(path: Path) -> Path:
    resolved = path.resolve()
    if not _is_under_root(resolved, _storage_root()):
        raise ValueError(f"path outside storage root: {path}")
    return resolved


def ensure_safe_output_path(path: Path) -> Path:
    resolved = ensure_under_storage_root(path)
    resolved.parent.mkdir(parents=True, exist_ok=True)
    return resolved
