from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Protocol

from portrait_studio.domain.entities.edit_session import EditBasePolicy
from portrait_studio.domain.entities.image_blob import ImageBlob


class EditGateway(Protocol):
    async def edit_image(self, image: ImageBlob, instruction: str) -> ImageBlob: ...


@dataclass(frozen=True)
class EditResult:
    image: ImageBlob
    source: EditBasePolicy
    elapsed_seconds: float


@dataclass
class ApplyEditUseCase:
    gateway: EditGateway
    base_policy: EditBasePolicy = EditBasePolicy.CURRENT

    def select_source(
        self, original: ImageBlob, current: ImageBlob | None
    ) -> tuple[ImageBlob, EditBasePolicy]:
        if self.base_policy is EditBasePolicy.ORIGINAL or current is None:
            return original, EditBasePolicy.ORIGINAL
        return current, EditBasePolicy.CURRENT

    async def execute(
        self, original: ImageBlob, current: ImageBlob | None, instruction: str
    ) -> EditResult:
        """
        Send one edit request built from the policy-selected base image.

        With ``EditBasePolicy.CURRENT`` edits compound on the latest result;
        with ``EditBasePolicy.ORIGINAL`` each edit starts again from the upload,
        which avoids quality loss from repeated re-encoding.

        Gateway errors propagate unchanged.
        """
        source, which = self.select_source(original, current)
        started = time.perf_counter()
        image = await self.gateway.edit_image(source, instruction)
        return EditResult(
            image=image, source=which, elapsed_seconds=time.perf_counter() - started
        )
