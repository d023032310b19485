from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime

from portrait_studio.application.use_cases.apply_edit import ApplyEditUseCase
from portrait_studio.application.use_cases.upload_image import UploadImageUseCase
from portrait_studio.domain.entities.edit_history import EditHistoryEntry
from portrait_studio.domain.entities.edit_session import (
    EditSession,
    ErrorInfo,
    SessionSnapshot,
    SessionStatus,
)
from portrait_studio.domain.entities.image_blob import ImageBlob
from portrait_studio.domain.entities.prompt_catalog import (
    ClothingOption,
    FilterOption,
    PromptCatalog,
)
from portrait_studio.domain.errors import (
    NoImageError,
    ServiceRefusalError,
    SessionBusyError,
    StudioError,
)

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "The edit failed unexpectedly. Please try again."


def describe_error(exc: BaseException) -> ErrorInfo:
    """Turn an operation failure into the message shown to the user.

    Refusals are surfaced verbatim because they explain why the model
    declined; every other kind gets its fixed, actionable message.
    """
    if isinstance(exc, ServiceRefusalError):
        return ErrorInfo(kind=exc.kind, message=exc.message or exc.user_message)
    if isinstance(exc, StudioError):
        return ErrorInfo(kind=exc.kind, message=exc.user_message)
    return ErrorInfo(kind="unexpected", message=GENERIC_FAILURE)


@dataclass
class EditSessionService:
    """
    Sequences uploads and edits against one EditSession.

    Rules:
    - at most one upload or edit runs at a time; a second call while busy is
      rejected with SessionBusyError, never queued
    - a failed operation leaves the images untouched and sets ``last_error``
    - every operation records the session generation when it starts; if a
      reset or new upload happened meanwhile, its completion is discarded
    """

    session: EditSession
    upload_uc: UploadImageUseCase
    edit_uc: ApplyEditUseCase
    catalog: PromptCatalog

    def snapshot(self) -> SessionSnapshot:
        return self.session.snapshot()

    # --------- core operations ---------
    async def upload(self, raw: ImageBlob) -> SessionSnapshot:
        if self.session.is_busy:
            raise SessionBusyError()
        generation = self.session.begin(SessionStatus.NORMALIZING, new_generation=True)
        try:
            image = await self.upload_uc.execute(raw)
        except Exception as exc:
            self._record_failure(generation, "upload", exc)
        else:
            if self._is_live(generation):
                self.session.set_images(image)
            else:
                logger.info("Discarding upload result from stale generation %d", generation)
        finally:
            self._finish(generation, SessionStatus.NORMALIZING)
        return self.snapshot()

    async def apply_edit(self, instruction: str) -> SessionSnapshot:
        # all checks run before the first await, so a concurrent second call
        # is rejected synchronously
        if self.session.is_busy:
            raise SessionBusyError()
        if not self.session.has_image:
            raise NoImageError()
        instruction = (instruction or "").strip()
        if not instruction:
            raise ValueError("Instruction must not be empty")

        original = self.session.original
        current = self.session.current
        generation = self.session.begin(SessionStatus.EDITING)
        logger.info("Edit started (generation %d): %s", generation, instruction)
        try:
            result = await self.edit_uc.execute(original, current, instruction)
        except Exception as exc:
            self._record_failure(generation, "edit", exc)
        else:
            if self._is_live(generation):
                self.session.current = result.image
                self.session.history.append(
                    EditHistoryEntry(
                        id=uuid.uuid4().hex,
                        operation_type="edit",
                        instruction=instruction,
                        source=result.source.value,
                        created_at=datetime.now(UTC),
                        width=result.image.width,
                        height=result.image.height,
                        elapsed_seconds=result.elapsed_seconds,
                    )
                )
                logger.info("Edit finished in %.2fs", result.elapsed_seconds)
            else:
                logger.info("Discarding edit result from stale generation %d", generation)
        finally:
            self._finish(generation, SessionStatus.EDITING)
        return self.snapshot()

    def reset(self) -> SessionSnapshot:
        # an in-flight request is not aborted; its completion is dropped
        self.session.clear()
        logger.info("Session reset (generation %d)", self.session.generation)
        return self.snapshot()

    def dismiss_error(self) -> SessionSnapshot:
        self.session.last_error = None
        return self.snapshot()

    def revert_to_original(self) -> SessionSnapshot:
        if self.session.is_busy:
            raise SessionBusyError()
        if not self.session.has_image:
            raise NoImageError()
        original = self.session.original
        self.session.current = original
        self.session.last_error = None
        self.session.history.append(
            EditHistoryEntry(
                id=uuid.uuid4().hex,
                operation_type="revert",
                instruction=None,
                source="original",
                created_at=datetime.now(UTC),
                width=original.width,
                height=original.height,
            )
        )
        return self.snapshot()

    def export(self) -> ImageBlob:
        if self.session.current is None:
            raise NoImageError()
        return self.session.current

    # --------- canned edits ---------
    async def remove_background(self) -> SessionSnapshot:
        return await self.apply_edit(self.catalog.instructions.background_removal)

    async def apply_clothing(self, outfit: ClothingOption | str) -> SessionSnapshot:
        if isinstance(outfit, str) and not outfit.strip():
            raise ValueError("Outfit description must not be empty")
        return await self.apply_edit(self.catalog.clothing_instruction(outfit))

    async def apply_filter(self, look: FilterOption | str) -> SessionSnapshot:
        if isinstance(look, str) and not look.strip():
            raise ValueError("Filter prompt must not be empty")
        return await self.apply_edit(self.catalog.filter_instruction(look))

    async def enhance(self) -> SessionSnapshot:
        return await self.apply_edit(self.catalog.instructions.enhance)

    async def passport_photo(self) -> SessionSnapshot:
        return await self.apply_edit(self.catalog.instructions.passport)

    # --------- helpers ---------
    def _is_live(self, generation: int) -> bool:
        return self.session.generation == generation

    def _record_failure(self, generation: int, operation: str, exc: Exception) -> None:
        if not self._is_live(generation):
            logger.info(
                "Discarding %s failure from stale generation %d: %s", operation, generation, exc
            )
            return
        if isinstance(exc, StudioError):
            logger.warning("%s failed (%s): %s", operation.capitalize(), exc.kind, exc.message)
        else:
            logger.exception("%s failed unexpectedly", operation.capitalize())
        self.session.last_error = describe_error(exc)

    def _finish(self, generation: int, status: SessionStatus) -> None:
        if self._is_live(generation) and self.session.status is status:
            self.session.status = SessionStatus.IDLE
