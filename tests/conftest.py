import asyncio
import io
import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image

# Ensure project root is on sys.path so 'portrait_studio' is importable during tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# never pick up a real key from the developer's shell
os.environ.pop("GEMINI_API_KEY", None)
os.environ.pop("API_KEY", None)

from portrait_studio.domain.entities.image_blob import ImageBlob  # noqa: E402
from portrait_studio.infrastructure.config.settings import Settings  # noqa: E402


def make_image_bytes(w=4, h=4, color=(128, 64, 32), fmt="PNG", mode="RGB") -> bytes:
    if mode == "RGBA" and len(color) == 3:
        color = (*color, 0)
    img = Image.new(mode, (w, h), color)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def make_blob(w=4, h=4, color=(128, 64, 32), fmt="PNG") -> ImageBlob:
    mime = "image/png" if fmt == "PNG" else "image/jpeg"
    return ImageBlob(data=make_image_bytes(w, h, color, fmt), mime_type=mime, width=w, height=h)


class FakeGateway:
    """Stands in for the Gemini gateway; records calls and can block on a gate."""

    def __init__(self) -> None:
        self.calls: list[tuple[ImageBlob, str]] = []
        self.result: ImageBlob | None = make_blob(8, 6, (10, 200, 10))
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None

    async def edit_image(self, image: ImageBlob, instruction: str) -> ImageBlob:
        self.calls.append((image, instruction))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def settings() -> Settings:
    return Settings(api_key="test-key", max_image_dimension=1024, max_upload_bytes=5 * 1024 * 1024)


@pytest.fixture()
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture()
def session_service(settings, fake_gateway):
    from portrait_studio.infrastructure.api.dependencies import build_session_service

    return build_session_service(settings, gateway=fake_gateway)


@pytest.fixture()
def client(settings, fake_gateway) -> TestClient:
    # lazy import after env configured
    from portrait_studio.main import create_app

    app = create_app(settings=settings, gateway=fake_gateway)
    return TestClient(app)
