from __future__ import annotations

import logging

from fastapi import FastAPI

from portrait_studio.application.dtos.common_dto import HealthResponse, RootResponse
from portrait_studio.application.use_cases.apply_edit import EditGateway
from portrait_studio.domain.entities.prompt_catalog import PromptCatalog
from portrait_studio.infrastructure.api.dependencies import build_session_service
from portrait_studio.infrastructure.api.middlewares import add_default_middlewares
from portrait_studio.infrastructure.api.routes.catalog_routes import router as catalog_router
from portrait_studio.infrastructure.api.routes.session_routes import router as session_router
from portrait_studio.infrastructure.config.settings import Settings

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    gateway: EditGateway | None = None,
    catalog: PromptCatalog | None = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="Portrait Studio Backend",
        version="0.1.0",
        description="""
        ## Portrait Studio API

        AI photo editing for portraits. The server keeps one editing session:
        a photo is uploaded, resized and re-encoded locally, then edited by
        natural-language instructions sent to Google's Gemini image model.

        ### Features
        - **Upload**: decode, bound to a maximum dimension, re-encode as JPEG
        - **Edits**: free-form instructions plus canned edits (background
          removal, outfits, filters, enhancement, passport photo)
        - **Safety of state**: one operation at a time; a failed edit keeps
          the previous image
        - **Export**: download the current image

        ### Error Responses
        - **400 Bad Request**: No photo uploaded yet, or invalid input
        - **404 Not Found**: Unknown catalog entry or image
        - **409 Conflict**: Another upload or edit is still running
        - **422 Unprocessable Entity**: Validation error in request body

        Failures of the editing service itself are reported in the session's
        `last_error` field, not as HTTP errors.
        """,
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )
    app.state.settings = settings
    app.state.session_service = build_session_service(settings, gateway=gateway, catalog=catalog)
    if not settings.has_credential:
        logger.warning("No Gemini API key configured - edits will fail until GEMINI_API_KEY is set")
    add_default_middlewares(app)

    @app.get(
        "/",
        response_model=RootResponse,
        summary="API Root",
        description="Get basic information about the Portrait Studio API",
        response_description="API information including status and version",
    )
    def root():
        """Get API root information."""
        return {"status": "ok", "service": "portrait-studio", "version": app.version}

    @app.get(
        "/health",
        response_model=HealthResponse,
        summary="Health Check",
        description="Check if the API service is running and whether the editing service is configured",
        response_description="Health status of the API service",
    )
    def health():
        """Check API health status."""
        return {"status": "healthy", "gateway_configured": settings.has_credential}

    app.include_router(session_router)
    app.include_router(catalog_router)
    return app


app = create_app()
