from __future__ import annotations

from fastapi import Request

from portrait_studio.application.services.edit_session_service import EditSessionService
from portrait_studio.application.use_cases.apply_edit import ApplyEditUseCase, EditGateway
from portrait_studio.application.use_cases.upload_image import UploadImageUseCase
from portrait_studio.domain.entities.edit_session import EditSession
from portrait_studio.domain.entities.prompt_catalog import PromptCatalog
from portrait_studio.domain.services.normalizer_service import ImageNormalizer
from portrait_studio.domain.services.processing_service import ProcessingService
from portrait_studio.infrastructure.catalog.default_catalog import load_catalog
from portrait_studio.infrastructure.config.settings import Settings
from portrait_studio.infrastructure.gateway.gemini_gateway import GeminiEditGateway


def build_session_service(
    settings: Settings,
    gateway: EditGateway | None = None,
    catalog: PromptCatalog | None = None,
) -> EditSessionService:
    normalizer = ImageNormalizer(
        quality=settings.jpeg_quality,
        tone_boost=settings.tone_boost,
        processing=ProcessingService(),
    )
    return EditSessionService(
        session=EditSession(),
        upload_uc=UploadImageUseCase(
            normalizer=normalizer,
            max_dimension=settings.max_image_dimension,
            max_upload_bytes=settings.max_upload_bytes,
        ),
        edit_uc=ApplyEditUseCase(
            gateway=gateway if gateway is not None else GeminiEditGateway(settings),
            base_policy=settings.edit_base_policy,
        ),
        catalog=catalog if catalog is not None else load_catalog(settings.prompt_catalog_path),
    )


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_service(request: Request) -> EditSessionService:
    return request.app.state.session_service


def get_catalog(request: Request) -> PromptCatalog:
    return request.app.state.session_service.catalog
