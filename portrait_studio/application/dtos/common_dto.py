"""Common DTOs for API responses and error handling."""
from __future__ import annotations

from pydantic import BaseModel, Field

from portrait_studio.domain.entities.prompt_catalog import ClothingOption, FilterOption


class ErrorResponse(BaseModel):
    """Standard error response model."""
    detail: str = Field(..., description="Error message describing what went wrong")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Health status", example="healthy")
    gateway_configured: bool = Field(..., description="Whether an editing service credential is set")


class RootResponse(BaseModel):
    """Root endpoint response model."""
    status: str = Field(..., description="API status", example="ok")
    service: str = Field(..., description="Service name", example="portrait-studio")
    version: str = Field(..., description="API version", example="0.1.0")


class CatalogResponse(BaseModel):
    """Canned outfits and filters offered to the user."""
    clothing: list[ClothingOption] = Field(..., description="Outfit options across all tabs")
    filters: list[FilterOption] = Field(..., description="Filter presets")
