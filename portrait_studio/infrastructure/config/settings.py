from __future__ import annotations

import os
from dataclasses import dataclass

from portrait_studio.domain.entities.edit_session import EditBasePolicy
from portrait_studio.domain.errors import ConfigurationError

DEFAULT_MODEL = "gemini-2.5-flash-image"
DEFAULT_MAX_DIMENSION = 1080
DEFAULT_JPEG_QUALITY = 95
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024
DEFAULT_EDIT_TIMEOUT_SECONDS = 120.0


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    api_key: str | None = None
    gemini_model: str = DEFAULT_MODEL
    max_image_dimension: int = DEFAULT_MAX_DIMENSION
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    # None disables the timeout
    edit_timeout_seconds: float | None = DEFAULT_EDIT_TIMEOUT_SECONDS
    edit_base_policy: EditBasePolicy = EditBasePolicy.CURRENT
    tone_boost: bool = False
    prompt_catalog_path: str | None = None
    log_level: str = "INFO"

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    @classmethod
    def from_env(cls) -> Settings:
        api_key = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY") or None

        max_dim = _int_env("MAX_IMAGE_DIMENSION", DEFAULT_MAX_DIMENSION)
        if max_dim <= 0:
            raise ConfigurationError("MAX_IMAGE_DIMENSION must be > 0")
        max_upload = _int_env("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES)
        if max_upload <= 0:
            raise ConfigurationError("MAX_UPLOAD_BYTES must be > 0")

        timeout = _float_env("EDIT_TIMEOUT_SECONDS", DEFAULT_EDIT_TIMEOUT_SECONDS)

        policy_raw = os.getenv("EDIT_BASE_POLICY", EditBasePolicy.CURRENT.value).strip().lower()
        try:
            policy = EditBasePolicy(policy_raw)
        except ValueError as exc:
            raise ConfigurationError(
                f"EDIT_BASE_POLICY must be 'current' or 'original', got {policy_raw!r}"
            ) from exc

        return cls(
            api_key=api_key,
            gemini_model=os.getenv("GEMINI_MODEL", DEFAULT_MODEL),
            max_image_dimension=max_dim,
            jpeg_quality=_int_env("JPEG_QUALITY", DEFAULT_JPEG_QUALITY),
            max_upload_bytes=max_upload,
            edit_timeout_seconds=timeout if timeout > 0 else None,
            edit_base_policy=policy,
            tone_boost=os.getenv("NORMALIZE_TONE_BOOST", "0") == "1",
            prompt_catalog_path=os.getenv("PROMPT_CATALOG_PATH") or None,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
