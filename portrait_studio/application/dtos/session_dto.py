from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from portrait_studio.domain.entities.edit_session import SessionSnapshot
from portrait_studio.domain.entities.image_blob import ImageBlob


class ImageMetadata(BaseModel):
    """Metadata (and optionally content) of one session image."""
    mime_type: str = Field(..., description="MIME type of the image", example="image/jpeg")
    width: int | None = Field(None, description="Width of the image in pixels", example=1080)
    height: int | None = Field(None, description="Height of the image in pixels", example=1440)
    file_size: int = Field(..., description="Size of the encoded image in bytes", example=284113)
    data_url: str | None = Field(None, description="Base64 data URL of the image content")


class ErrorDetail(BaseModel):
    """Failure of the last upload or edit."""
    kind: str = Field(..., description="Error category", example="refusal")
    message: str = Field(..., description="Message to show to the user")


class HistoryItem(BaseModel):
    """One successful edit or revert in the current session."""
    id: str = Field(..., description="Unique identifier of the history entry")
    operation: str = Field(..., description="Operation type", example="edit")
    instruction: str | None = Field(None, description="Instruction sent to the editing service")
    source: str = Field(..., description="Image the edit was built from", example="current")
    width: int | None = Field(None, description="Width of the resulting image")
    height: int | None = Field(None, description="Height of the resulting image")
    elapsed_seconds: float | None = Field(None, description="Duration of the remote call")
    created_at: datetime = Field(..., description="ISO timestamp when the operation finished")


class SessionResponse(BaseModel):
    """Read-only snapshot of the edit session."""
    status: str = Field(..., description="Processing phase", example="idle")
    generation: int = Field(..., description="Session epoch, bumped by every upload and reset", ge=0)
    has_image: bool = Field(..., description="Whether an image has been uploaded")
    original: ImageMetadata | None = Field(None, description="The normalized upload")
    current: ImageMetadata | None = Field(None, description="The latest result")
    last_error: ErrorDetail | None = Field(None, description="Failure of the last operation, if any")
    history: list[HistoryItem] = Field(default_factory=list, description="Edits applied since the upload")

    @classmethod
    def from_snapshot(cls, snapshot: SessionSnapshot, include_images: bool = True) -> SessionResponse:
        def _image(blob: ImageBlob | None) -> ImageMetadata | None:
            if blob is None:
                return None
            return ImageMetadata(
                mime_type=blob.mime_type,
                width=blob.width,
                height=blob.height,
                file_size=blob.size,
                data_url=blob.to_data_url() if include_images else None,
            )

        error = snapshot.last_error
        return cls(
            status=snapshot.status.value,
            generation=snapshot.generation,
            has_image=snapshot.has_image,
            original=_image(snapshot.original),
            current=_image(snapshot.current),
            last_error=ErrorDetail(kind=error.kind, message=error.message) if error else None,
            history=[
                HistoryItem(
                    id=h.id,
                    operation=h.operation_type,
                    instruction=h.instruction,
                    source=h.source,
                    width=h.width,
                    height=h.height,
                    elapsed_seconds=h.elapsed_seconds,
                    created_at=h.created_at,
                )
                for h in snapshot.history
            ],
        )


class EditRequest(BaseModel):
    """Free-form edit instruction."""
    instruction: str = Field(
        ...,
        description="Natural-language description of the edit",
        example="Remove the glasses",
        min_length=1,
    )


class ClothingRequest(BaseModel):
    """Outfit change: a catalog option id or a free-text description."""
    option_id: str | None = Field(None, description="Catalog outfit id", example="navy_suit")
    text: str | None = Field(None, description="Free-text outfit description", example="a red hoodie")

    @model_validator(mode="after")
    def _exactly_one(self) -> ClothingRequest:
        if bool(self.option_id) == bool(self.text and self.text.strip()):
            raise ValueError("Provide exactly one of option_id or text")
        return self


class FilterRequest(BaseModel):
    """Look/filter: a catalog filter id or a free-text prompt."""
    filter_id: str | None = Field(None, description="Catalog filter id", example="cinematic")
    prompt: str | None = Field(None, description="Free-text look description")

    @model_validator(mode="after")
    def _exactly_one(self) -> FilterRequest:
        if bool(self.filter_id) == bool(self.prompt and self.prompt.strip()):
            raise ValueError("Provide exactly one of filter_id or prompt")
        return self
