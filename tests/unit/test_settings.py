import pytest

from portrait_studio.domain.entities.edit_session import EditBasePolicy
from portrait_studio.domain.errors import ConfigurationError
from portrait_studio.infrastructure.config.settings import (
    DEFAULT_MAX_DIMENSION,
    DEFAULT_MODEL,
    Settings,
)

ENV_VARS = [
    "GEMINI_API_KEY", "API_KEY", "GEMINI_MODEL", "MAX_IMAGE_DIMENSION", "JPEG_QUALITY",
    "MAX_UPLOAD_BYTES", "EDIT_TIMEOUT_SECONDS", "EDIT_BASE_POLICY", "NORMALIZE_TONE_BOOST",
    "PROMPT_CATALOG_PATH", "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    s = Settings.from_env()
    assert s.api_key is None
    assert not s.has_credential
    assert s.gemini_model == DEFAULT_MODEL
    assert s.max_image_dimension == DEFAULT_MAX_DIMENSION
    assert s.jpeg_quality == 95
    assert s.edit_timeout_seconds == 120.0
    assert s.edit_base_policy is EditBasePolicy.CURRENT
    assert s.tone_boost is False
    assert s.prompt_catalog_path is None
    assert s.log_level == "INFO"


def test_api_key_fallback(monkeypatch):
    monkeypatch.setenv("API_KEY", "fallback")
    assert Settings.from_env().api_key == "fallback"
    monkeypatch.setenv("GEMINI_API_KEY", "primary")
    assert Settings.from_env().api_key == "primary"


def test_overrides(monkeypatch):
    monkeypatch.setenv("MAX_IMAGE_DIMENSION", "512")
    monkeypatch.setenv("EDIT_BASE_POLICY", "Original")
    monkeypatch.setenv("NORMALIZE_TONE_BOOST", "1")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    s = Settings.from_env()
    assert s.max_image_dimension == 512
    assert s.edit_base_policy is EditBasePolicy.ORIGINAL
    assert s.tone_boost is True
    assert s.log_level == "DEBUG"


def test_zero_timeout_disables_it(monkeypatch):
    monkeypatch.setenv("EDIT_TIMEOUT_SECONDS", "0")
    assert Settings.from_env().edit_timeout_seconds is None


@pytest.mark.parametrize(
    "name, value",
    [
        ("MAX_IMAGE_DIMENSION", "big"),
        ("MAX_IMAGE_DIMENSION", "0"),
        ("MAX_UPLOAD_BYTES", "-1"),
        ("EDIT_TIMEOUT_SECONDS", "soon"),
        ("EDIT_BASE_POLICY", "latest"),
    ],
)
def test_invalid_values_raise(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigurationError):
        Settings.from_env()


def test_blank_key_is_not_a_credential():
    assert not Settings(api_key="   ").has_credential
    assert Settings(api_key="abc").has_credential
