from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path

from photoshape.config import settings
from photoshape.security.path_guard import (
    ensure_safe_output_path,
    ensure_under_storage_root,
    validate_segment,
)


logger = logging.getLogger(__name__)

ORIGINAL_FILE_NAME = "original.png"


@dataclass(slots=True)
class StoredFile:
    file_id: str
    path: Path
    url: str


def session_folder_id(session_id: str) -> str:
    return f"{settings.customizer_folder}/{validate_segment(session_id)}"


def _session_dir(session_id: str) -> Path:
    return ensure_under_storage_root(Path(settings.storage_root) / session_folder_id(session_id))


def public_url(file_id: str) -> str:
    # file_id is "<folder>/<session>/<name>"; the route serves /<session>/<name>
    relative = file_id.split("/", 1)[1]
    return f"{settings.public_base_url.rstrip('/')}/{relative}"


def save_session_file(session_id: str, file_name: str, data: bytes) -> StoredFile:
    """Write (or replace) one file in the session folder."""
    file_id = f"{session_folder_id(session_id)}/{validate_segment(file_name)}"
    destination = ensure_safe_output_path(Path(settings.storage_root) / file_id)
    # one temp file per writer; concurrent uploads to the same name must not share it
    tmp = destination.with_name(f".{destination.name}.{uuid.uuid4().hex}.tmp")
    try:
        tmp.write_bytes(data)
        tmp.replace(destination)
    finally:
        tmp.unlink(missing_ok=True)
    return StoredFile(file_id=file_id, path=destination, url=public_url(file_id))


def resolve_session_file(session_id: str, file_name: str) -> Path:
    path = ensure_under_storage_root(_session_dir(session_id) / validate_segment(file_name))
    if not path.is_file():
        raise FileNotFoundError(f"file not found: {session_folder_id(session_id)}/{file_name}")
    return path


def delete_session_files(session_id: str) -> int:
    root = _session_dir(session_id)
    if not root.is_dir():
        return 0

    deleted = 0
    for entry in sorted(root.iterdir()):
        if entry.is_file():
            entry.unlink()
            deleted += 1
    try:
        root.rmdir()
    except OSError:
        logger.warning("session folder not empty after cleanup: %s", root)
    return deleted
