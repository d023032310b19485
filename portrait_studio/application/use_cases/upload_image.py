from __future__ import annotations

import asyncio
from dataclasses import dataclass

from portrait_studio.domain.entities.image_blob import ImageBlob
from portrait_studio.domain.errors import FileTooLargeError
from portrait_studio.domain.services.normalizer_service import ImageNormalizer


@dataclass
class UploadImageUseCase:
    normalizer: ImageNormalizer
    max_dimension: int
    max_upload_bytes: int | None = None

    async def execute(self, raw: ImageBlob) -> ImageBlob:
        """
        Turn a user-selected file into the session's base image.

        The size guard runs before any decode attempt. Decoding and resizing
        are CPU bound, so they run in a worker thread and the event loop keeps
        serving requests meanwhile.

        Raises:
            FileTooLargeError: the raw file exceeds ``max_upload_bytes``
            DecodeError: the file is not a readable image
        """
        if self.max_upload_bytes is not None and raw.size > self.max_upload_bytes:
            raise FileTooLargeError(raw.size, self.max_upload_bytes)
        return await asyncio.to_thread(self.normalizer.normalize, raw, self.max_dimension)
