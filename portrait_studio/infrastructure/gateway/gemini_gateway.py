"""Edit gateway backed by Google's Gemini image model.

One call is one ``generate_content`` request carrying the image and the
instruction; the first inline image in the first candidate is the result.
No retries and no streaming: retrying is the caller's decision.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from portrait_studio.domain.entities.image_blob import ImageBlob
from portrait_studio.domain.errors import (
    AuthError,
    ConfigurationError,
    EmptyResponseError,
    RateLimitError,
    ServiceRefusalError,
    StudioError,
    TransportError,
)
from portrait_studio.domain.services.normalizer_service import read_dimensions
from portrait_studio.infrastructure.config.settings import DEFAULT_MODEL, Settings

logger = logging.getLogger(__name__)

_INVALID_KEY_MARKERS = ("API_KEY_INVALID", "API key not valid", "API key expired")


class GeminiEditGateway:
    def __init__(self, settings: Settings, client: Any | None = None) -> None:
        # resolved once; a missing key only fails when an edit is attempted
        self.api_key = settings.api_key.strip() if settings.has_credential else None
        self.model = settings.gemini_model or DEFAULT_MODEL
        self.timeout = settings.edit_timeout_seconds
        self._client = client

    @property
    def configured(self) -> bool:
        return self.api_key is not None

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def edit_image(self, image: ImageBlob, instruction: str) -> ImageBlob:
        if not self.configured:
            raise ConfigurationError("Gemini API key is missing. Set GEMINI_API_KEY.")

        contents = types.Content(
            role="user",
            parts=[
                types.Part.from_bytes(data=image.data, mime_type=image.mime_type),
                types.Part.from_text(text=instruction),
            ],
        )
        started = time.perf_counter()
        try:
            call = self._get_client().aio.models.generate_content(
                model=self.model, contents=contents
            )
            if self.timeout is not None:
                response = await asyncio.wait_for(call, timeout=self.timeout)
            else:
                response = await call
        except asyncio.TimeoutError as exc:
            raise TransportError(f"Edit request timed out after {self.timeout:g}s") from exc
        except genai_errors.APIError as exc:
            raise _map_api_error(exc) from exc
        except (httpx.HTTPError, OSError) as exc:
            raise TransportError(f"Edit request failed: {exc}") from exc

        logger.info(
            "Gemini %s answered in %.2fs", self.model, time.perf_counter() - started
        )
        return parse_response(response)


def _map_api_error(exc: genai_errors.APIError) -> StudioError:
    code = getattr(exc, "code", None)
    message = getattr(exc, "message", None) or str(exc)
    detail = f"Gemini API error {code}: {message}"
    if code in (401, 403):
        return AuthError(detail)
    if code == 429:
        return RateLimitError(detail)
    if code == 400 and any(marker in message for marker in _INVALID_KEY_MARKERS):
        return AuthError(detail)
    return TransportError(detail)


def parse_response(response: Any) -> ImageBlob:
    """Extract the edited image from a ``generate_content`` response.

    Raises:
        EmptyResponseError: no candidate, or a candidate without parts
        ServiceRefusalError: blocked prompt, or a text-only answer (text kept verbatim)
        DecodeError: the inline payload is not a readable image
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        feedback = getattr(response, "prompt_feedback", None)
        block_reason = getattr(feedback, "block_reason", None) if feedback else None
        if block_reason:
            reason = getattr(feedback, "block_reason_message", None) or _enum_name(block_reason)
            raise ServiceRefusalError(f"Request blocked: {reason}")
        raise EmptyResponseError("No output generated from the model")

    candidate = candidates[0]
    content = getattr(candidate, "content", None)
    parts = (getattr(content, "parts", None) if content is not None else None) or []
    if not parts:
        finish = getattr(candidate, "finish_reason", None)
        suffix = f" (finish reason: {_enum_name(finish)})" if finish else ""
        raise EmptyResponseError(f"The model returned an empty candidate{suffix}")

    # the image part may come after explanatory text
    texts: list[str] = []
    for part in parts:
        inline = getattr(part, "inline_data", None)
        if inline is not None and getattr(inline, "data", None):
            data = inline.data
            width, height, detected = read_dimensions(data)
            return ImageBlob(
                data=data,
                mime_type=getattr(inline, "mime_type", None) or detected,
                width=width,
                height=height,
            )
        text = getattr(part, "text", None)
        if text:
            texts.append(text)

    if texts:
        raise ServiceRefusalError("\n".join(texts).strip())
    raise EmptyResponseError("No image data found in the model response")


def _enum_name(value: Any) -> str:
    return str(getattr(value, "name", value))
