from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from portrait_studio.application.dtos.common_dto import CatalogResponse
from portrait_studio.domain.entities.prompt_catalog import ClothingOption, PromptCatalog
from portrait_studio.infrastructure.api.dependencies import get_catalog

router = APIRouter(prefix="/catalog", tags=["Prompt Catalog"])


@router.get(
    "",
    response_model=CatalogResponse,
    summary="Get Catalog",
    description="All canned outfits and filters the client can offer.",
)
async def get_catalog_entries(catalog: PromptCatalog = Depends(get_catalog)):
    """List outfits and filters."""
    return CatalogResponse(clothing=catalog.clothing, filters=catalog.filters)


@router.get(
    "/clothing",
    response_model=list[ClothingOption],
    summary="List Outfits",
    description="Outfits for one catalog tab, e.g. `male` or `female`.",
)
async def list_clothing(
    gender: str = Query(..., description="Catalog tab, e.g. male"),
    catalog: PromptCatalog = Depends(get_catalog),
):
    """List outfits for a tab."""
    return catalog.clothing_for(gender)
