from __future__ import annotations

from string import Formatter

from pydantic import BaseModel, Field, field_validator


def _check_placeholders(template: str, expected: set[str]) -> str:
    try:
        found = {name for _, name, _, _ in Formatter().parse(template) if name is not None}
    except ValueError as exc:
        raise ValueError(f"Malformed template: {exc}") from exc
    if found != expected:
        wanted = ", ".join(f"{{{n}}}" for n in sorted(expected))
        raise ValueError(f"Template must contain exactly {wanted}, found {sorted(found)}")
    return template


class ClothingOption(BaseModel):
    """One outfit the user can try on."""
    id: str = Field(..., description="Stable identifier of the outfit", example="navy_suit")
    label: str = Field(..., description="Display name", example="Navy Suit")
    gender: str = Field(..., description="Catalog tab the outfit belongs to", example="male")
    prompt: str = Field(..., description="Outfit description inserted into the clothing instruction")


class FilterOption(BaseModel):
    """One look/filter preset."""
    id: str = Field(..., description="Stable identifier of the filter", example="cinematic")
    label: str = Field(..., description="Display name", example="Cinematic")
    prompt: str = Field(..., description="Instruction describing the look")


class InstructionTemplates(BaseModel):
    """Fixed instruction texts sent for the canned edits.

    ``clothing`` must contain exactly the ``{outfit}`` placeholder and ``filter``
    exactly ``{prompt}``; the other texts are sent as they are.
    """
    background_removal: str
    clothing: str
    filter: str
    enhance: str
    passport: str

    @field_validator("clothing")
    @classmethod
    def _outfit_placeholder(cls, value: str) -> str:
        return _check_placeholders(value, {"outfit"})

    @field_validator("filter")
    @classmethod
    def _prompt_placeholder(cls, value: str) -> str:
        return _check_placeholders(value, {"prompt"})


class PromptCatalog(BaseModel):
    clothing: list[ClothingOption] = Field(default_factory=list)
    filters: list[FilterOption] = Field(default_factory=list)
    instructions: InstructionTemplates

    def find_clothing(self, option_id: str) -> ClothingOption | None:
        return next((o for o in self.clothing if o.id == option_id), None)

    def find_filter(self, filter_id: str) -> FilterOption | None:
        return next((f for f in self.filters if f.id == filter_id), None)

    def clothing_for(self, gender: str) -> list[ClothingOption]:
        return [o for o in self.clothing if o.gender == gender.lower()]

    def clothing_instruction(self, outfit: ClothingOption | str) -> str:
        text = outfit if isinstance(outfit, str) else outfit.prompt
        return self.instructions.clothing.format(outfit=text.strip())

    def filter_instruction(self, look: FilterOption | str) -> str:
        text = look if isinstance(look, str) else look.prompt
        return self.instructions.filter.format(prompt=text.strip().rstrip("."))
