from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from portrait_studio.domain.entities.prompt_catalog import (
    ClothingOption,
    FilterOption,
    InstructionTemplates,
    PromptCatalog,
)
from portrait_studio.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_INSTRUCTIONS = InstructionTemplates(
    background_removal=(
        "Remove the background perfectly. Make the background pure solid studio white. "
        "Keep the person high-definition."
    ),
    clothing=(
        "IDENTITY PROTECTION: DO NOT CHANGE THE FACE. Change clothes to {outfit}. "
        "Fit the new clothes perfectly to the body shape while keeping the head and "
        "face exactly as it is."
    ),
    filter="{prompt}. Do not alter the person's identity.",
    enhance=(
        "Deep Neural Enhancement: Increase image resolution to 4K quality, sharpen all "
        "details, fix skin textures without altering the person's face structure. "
        "Improve lighting and colors to a professional level."
    ),
    passport=(
        "IDENTITY PRESERVED PASSPORT PHOTO: Change background to professional light blue. "
        "Change attire to a high-quality formal navy suit and white shirt. Align the head "
        "straight. Keep facial features 100% original."
    ),
)

DEFAULT_CLOTHING = [
    ClothingOption(id="navy_suit", label="Navy Suit", gender="male",
                   prompt="a tailored navy blue business suit with a white shirt and a dark tie"),
    ClothingOption(id="black_tuxedo", label="Black Tuxedo", gender="male",
                   prompt="a classic black tuxedo with a white dress shirt and a black bow tie"),
    ClothingOption(id="casual_denim", label="Denim Jacket", gender="male",
                   prompt="a casual blue denim jacket over a plain white t-shirt"),
    ClothingOption(id="kurta", label="Kurta", gender="male",
                   prompt="a traditional cream silk kurta with subtle embroidery"),
    ClothingOption(id="blazer_female", label="Business Blazer", gender="female",
                   prompt="a fitted charcoal business blazer over a white silk blouse"),
    ClothingOption(id="evening_gown", label="Evening Gown", gender="female",
                   prompt="an elegant floor-length emerald evening gown"),
    ClothingOption(id="saree", label="Saree", gender="female",
                   prompt="a red silk saree with golden border draped traditionally"),
    ClothingOption(id="summer_dress", label="Summer Dress", gender="female",
                   prompt="a light floral summer dress with short sleeves"),
]

DEFAULT_FILTERS = [
    FilterOption(id="cinematic", label="Cinematic",
                 prompt="Apply a cinematic color grade with teal shadows and warm highlights"),
    FilterOption(id="black_white", label="B&W",
                 prompt="Convert the photo to a rich high-contrast black and white portrait"),
    FilterOption(id="vintage", label="Vintage",
                 prompt="Give the photo a warm vintage film look with soft grain"),
    FilterOption(id="studio_light", label="Studio Light",
                 prompt="Relight the portrait with soft professional studio lighting"),
]


def default_catalog() -> PromptCatalog:
    return PromptCatalog(
        clothing=list(DEFAULT_CLOTHING),
        filters=list(DEFAULT_FILTERS),
        instructions=DEFAULT_INSTRUCTIONS,
    )


def load_catalog(path: str | None) -> PromptCatalog:
    """Load a catalog JSON file, or the built-in catalog when ``path`` is empty.

    The file may omit ``instructions``; the built-in templates are used then.
    """
    if not path:
        return default_catalog()
    file = Path(path)
    try:
        payload = json.loads(file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Cannot read prompt catalog {file}: {exc}") from exc
    if isinstance(payload, dict):
        payload.setdefault("instructions", DEFAULT_INSTRUCTIONS.model_dump())
    try:
        catalog = PromptCatalog.model_validate(payload)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid prompt catalog {file}: {exc}") from exc
    logger.info(
        "Loaded prompt catalog from %s (%d outfits, %d filters)",
        file, len(catalog.clothing), len(catalog.filters),
    )
    return catalog
