from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class EditHistoryEntry:
    id: str
    operation_type: str  # "edit" or "revert"
    instruction: str | None
    source: str  # which image the edit was built from: "original" or "current"
    created_at: datetime
    width: int | None = None  # dimensions of the resulting image
    height: int | None = None
    elapsed_seconds: float | None = None
