import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status
from fastapi.responses import FileResponse

from photoshape.config import settings
from photoshape.customizer.codec import decode_source
from photoshape.customizer.errors import (
    EmptyVisibleRegionError,
    ImageDecodeError,
    ImageEncodeError,
    InvalidParameterError,
    UnsupportedShapeError,
)
from photoshape.customizer.masks import MaskCache
from photoshape.customizer.pipeline import run_customization, validate_parameters
from photoshape.customizer.types import CanvasSpec, PanZoomSpec, ShapeKind
from photoshape.schemas import (
    CustomizationUploadData,
    CustomizationUploadResponse,
    SessionCleanupResponse,
    SessionInfoResponse,
)
from photoshape.storage.local import (
    ORIGINAL_FILE_NAME,
    delete_session_files,
    resolve_session_file,
    save_session_file,
    session_folder_id,
)


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customizer", tags=["customizer"])

_ALLOWED_CONTENT_TYPES = {"image/png", "image/jpeg"}


def get_mask_cache(request: Request) -> MaskCache:
    return request.app.state.mask_cache


def _require_session_id(session_id: str | None) -> str:
    if session_id is None or not session_id.strip():
        raise HTTPException(status_code=400, detail="Session ID is required")
    session_id = session_id.strip()
    try:
        session_folder_id(session_id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid session ID: {exc}") from exc
    return session_id


def _parse_float(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"{name} must be a number, got {raw!r}") from exc


@router.post("/upload", response_model=CustomizationUploadResponse, status_code=status.HTTP_201_CREATED)
def upload_customized_image(
    file: UploadFile | None = File(default=None),
    session: str | None = Form(default=None),
    x: str | None = Form(default=None),
    y: str | None = Form(default=None),
    zoom: str | None = Form(default=None),
    shape: str | None = Form(default=None),
    mask_cache: MaskCache = Depends(get_mask_cache),
) -> CustomizationUploadResponse:
    session_id = _require_session_id(session)
    if not x or not y or not zoom or not shape:
        raise HTTPException(status_code=400, detail="Missing required fields: x, y, zoom, shape")
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")
    if file.content_type not in _ALLOWED_CONTENT_TYPES:
        raise HTTPException(status_code=400, detail="Only PNG and JPG files are allowed")

    center_x = _parse_float("x", x)
    center_y = _parse_float("y", y)
    zoom_value = _parse_float("zoom", zoom)

    try:
        data = file.file.read(settings.max_upload_bytes + 1)
    finally:
        file.file.close()
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="File too large")

    logger.info("upload received for session %s (shape=%s, %d bytes)", session_id, shape, len(data))

    try:
        shape_kind = ShapeKind.parse(shape)
        if settings.strict_parameters:
            validate_parameters(center_x, center_y, zoom_value)
        pan_zoom = PanZoomSpec(center_x_percent=center_x, center_y_percent=center_y, zoom=zoom_value)
        canvas = CanvasSpec(width=settings.canvas_width, height=settings.canvas_height)
        source = decode_source(data)
        result = run_customization(source, canvas, pan_zoom, shape_kind, mask_cache=mask_cache)
    except (InvalidParameterError, UnsupportedShapeError, ImageDecodeError, EmptyVisibleRegionError) as exc:
        logger.warning("customization rejected for session %s: %s", session_id, exc)
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ImageEncodeError as exc:
        logger.error("customization failed for session %s: %s", session_id, exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    original = save_session_file(session_id, ORIGINAL_FILE_NAME, data)
    shaped = save_session_file(session_id, f"{shape_kind.value}.png", result.png_bytes)
    logger.info("stored %s and %s", original.file_id, shaped.file_id)

    return CustomizationUploadResponse(
        data=CustomizationUploadData(
            original_file_id=original.file_id,
            shaped_file_id=shaped.file_id,
            original_url=original.url,
            shaped_url=shaped.url,
            shape=shape_kind.value,
            width=result.width,
            height=result.height,
            session_id_used=session_id,
        )
    )


@router.delete("/cleanup/{session_id}", response_model=SessionCleanupResponse)
def cleanup_session(session_id: str) -> SessionCleanupResponse:
    session_id = _require_session_id(session_id)
    deleted = delete_session_files(session_id)
    logger.info("deleted %d files from session %s", deleted, session_id)
    if deleted == 0:
        return SessionCleanupResponse(message="No files to delete", files_deleted=0)
    return SessionCleanupResponse(
        message=f"Session cleanup completed. {deleted} files deleted.",
        files_deleted=deleted,
    )


@router.post("/session/{session_id}", response_model=SessionInfoResponse)
def get_session_info(session_id: str) -> SessionInfoResponse:
    session_id = _require_session_id(session_id)
    return SessionInfoResponse(session_id=session_id, folder_path=session_folder_id(session_id))


@router.get("/files/{session_id}/{file_name}", response_class=FileResponse, include_in_schema=False)
def download_session_file(session_id: str, file_name: str) -> FileResponse:
    session_id = _require_session_id(session_id)
    try:
        path = resolve_session_file(session_id, file_name)
    except (ValueError, FileNotFoundError) as exc:
        raise HTTPException(status_code=404, detail="File not found") from exc
    return FileResponse(path=path, filename=path.name, media_type="image/png")
