from __future__ import annotations

from collections.abc import Awaitable

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.responses import Response

from portrait_studio.application.dtos.common_dto import ErrorResponse
from portrait_studio.application.dtos.session_dto import (
    ClothingRequest,
    EditRequest,
    FilterRequest,
    SessionResponse,
)
from portrait_studio.application.services.edit_session_service import EditSessionService
from portrait_studio.domain.entities.edit_session import SessionSnapshot
from portrait_studio.domain.entities.image_blob import ImageBlob
from portrait_studio.domain.errors import NoImageError, SessionBusyError
from portrait_studio.infrastructure.api.dependencies import get_session_service, get_settings
from portrait_studio.infrastructure.config.settings import Settings

router = APIRouter(
    prefix="/session",
    tags=["Edit Session"],
    responses={
        400: {"model": ErrorResponse, "description": "Bad Request - No image uploaded or invalid input"},
        409: {"model": ErrorResponse, "description": "Conflict - Another upload or edit is still in progress"},
        422: {"description": "Validation Error - Invalid request format"},
    },
)

_OPERATION_NOTE = """
    Failures of the editing service are not HTTP errors: the response is the
    session snapshot with `last_error` set and the previous image kept.
    """


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, SessionBusyError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.message)
    if isinstance(exc, NoImageError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


async def _run(operation: Awaitable[SessionSnapshot]) -> SessionResponse:
    try:
        snapshot = await operation
    except (SessionBusyError, NoImageError, ValueError) as exc:
        raise _http_error(exc) from exc
    return SessionResponse.from_snapshot(snapshot)


@router.get(
    "",
    response_model=SessionResponse,
    summary="Get Session",
    description="""
    Read-only snapshot of the edit session: processing status, the original
    and current images, the last error and the edit history.
    """,
    response_description="Current session state",
)
async def get_session(
    include_images: bool = Query(True, description="Embed image content as data URLs"),
    service: EditSessionService = Depends(get_session_service),
):
    """Return the session snapshot."""
    return SessionResponse.from_snapshot(service.snapshot(), include_images=include_images)


@router.post(
    "/upload",
    response_model=SessionResponse,
    summary="Upload Photo",
    description="""
    Upload a portrait. The photo is resized so its longer side fits the
    configured limit and re-encoded as JPEG; it becomes both the original and
    the current image, replacing any previous photo and history.
    """ + _OPERATION_NOTE,
    response_description="Session state after the upload",
)
async def upload_photo(
    file: UploadFile = File(..., description="Image file to upload"),
    service: EditSessionService = Depends(get_session_service),
    settings: Settings = Depends(get_settings),
):
    """Normalize an uploaded photo and start a new editing epoch."""
    # one byte past the limit is enough for the size guard to reject it
    data = await file.read(settings.max_upload_bytes + 1)
    raw = ImageBlob(data=data, mime_type=file.content_type or "application/octet-stream")
    return await _run(service.upload(raw))


@router.post(
    "/edits",
    response_model=SessionResponse,
    summary="Apply Edit",
    description="""
    Send a free-form instruction to the editing service.
    """ + _OPERATION_NOTE,
    response_description="Session state after the edit",
)
async def apply_edit(
    body: EditRequest,
    service: EditSessionService = Depends(get_session_service),
):
    """Apply a free-form edit."""
    return await _run(service.apply_edit(body.instruction))


@router.post(
    "/edits/remove-background",
    response_model=SessionResponse,
    summary="Remove Background",
    description="Replace the background with plain studio white." + _OPERATION_NOTE,
)
async def remove_background(service: EditSessionService = Depends(get_session_service)):
    """Remove the photo background."""
    return await _run(service.remove_background())


@router.post(
    "/edits/clothing",
    response_model=SessionResponse,
    summary="Change Outfit",
    description="""
    Dress the subject in a catalog outfit (`option_id`) or a free-text
    description (`text`). The face is kept unchanged.
    """ + _OPERATION_NOTE,
    responses={404: {"description": "Not Found - Unknown outfit id"}},
)
async def apply_clothing(
    body: ClothingRequest,
    service: EditSessionService = Depends(get_session_service),
):
    """Change the subject's clothes."""
    if body.option_id:
        option = service.catalog.find_clothing(body.option_id)
        if option is None:
            raise HTTPException(status_code=404, detail=f"Unknown outfit: {body.option_id}")
        return await _run(service.apply_clothing(option))
    return await _run(service.apply_clothing(body.text))


@router.post(
    "/edits/filter",
    response_model=SessionResponse,
    summary="Apply Filter",
    description="Apply a catalog filter (`filter_id`) or a free-text look (`prompt`)." + _OPERATION_NOTE,
    responses={404: {"description": "Not Found - Unknown filter id"}},
)
async def apply_filter(
    body: FilterRequest,
    service: EditSessionService = Depends(get_session_service),
):
    """Apply a look to the photo."""
    if body.filter_id:
        look = service.catalog.find_filter(body.filter_id)
        if look is None:
            raise HTTPException(status_code=404, detail=f"Unknown filter: {body.filter_id}")
        return await _run(service.apply_filter(look))
    return await _run(service.apply_filter(body.prompt))


@router.post(
    "/edits/enhance",
    response_model=SessionResponse,
    summary="Enhance Photo",
    description="Sharpen, relight and clean up the photo." + _OPERATION_NOTE,
)
async def enhance(service: EditSessionService = Depends(get_session_service)):
    """Enhance the photo."""
    return await _run(service.enhance())


@router.post(
    "/edits/passport",
    response_model=SessionResponse,
    summary="Passport Photo",
    description="Light-blue background, formal attire and a straight head pose." + _OPERATION_NOTE,
)
async def passport_photo(service: EditSessionService = Depends(get_session_service)):
    """Turn the photo into a passport-style portrait."""
    return await _run(service.passport_photo())


@router.post(
    "/revert",
    response_model=SessionResponse,
    summary="Revert To Original",
    description="Make the normalized upload the current image again. No remote call is made.",
)
async def revert(service: EditSessionService = Depends(get_session_service)):
    """Discard edits and show the original again."""
    try:
        snapshot = service.revert_to_original()
    except (SessionBusyError, NoImageError) as exc:
        raise _http_error(exc) from exc
    return SessionResponse.from_snapshot(snapshot)


@router.post(
    "/reset",
    response_model=SessionResponse,
    summary="Reset Session",
    description="""
    Clear both images, the error and the history. Always allowed; a pending
    edit is not aborted but its result is discarded when it arrives.
    """,
)
async def reset(service: EditSessionService = Depends(get_session_service)):
    """Start over."""
    return SessionResponse.from_snapshot(service.reset())


@router.delete(
    "/error",
    response_model=SessionResponse,
    summary="Dismiss Error",
    description="Clear the last error message. Nothing else changes.",
)
async def dismiss_error(service: EditSessionService = Depends(get_session_service)):
    """Hide the last error."""
    return SessionResponse.from_snapshot(service.dismiss_error())


@router.get(
    "/images/{which}",
    summary="Get Session Image",
    description="Raw bytes of the `original` or `current` image.",
    responses={
        200: {"content": {"image/*": {}}, "description": "Image file content"},
        404: {"description": "Not Found - No such image in the session"},
    },
)
async def get_image(which: str, service: EditSessionService = Depends(get_session_service)):
    """Serve one of the session images."""
    snapshot = service.snapshot()
    if which not in ("original", "current"):
        raise HTTPException(status_code=404, detail=f"Unknown image: {which}")
    blob = snapshot.original if which == "original" else snapshot.current
    if blob is None:
        raise HTTPException(status_code=404, detail="No image uploaded")
    return Response(content=blob.data, media_type=blob.mime_type)


@router.get(
    "/export",
    summary="Export Photo",
    description="Download the current image in its current encoding.",
    responses={200: {"content": {"image/*": {}}, "description": "Image file download"}},
)
async def export(service: EditSessionService = Depends(get_session_service)):
    """Download the current image as a file."""
    try:
        blob = service.export()
    except NoImageError as exc:
        raise _http_error(exc) from exc
    return Response(
        content=blob.data,
        media_type=blob.mime_type,
        headers={"Content-Disposition": f'attachment; filename="portrait-export.{blob.extension}"'},
    )
