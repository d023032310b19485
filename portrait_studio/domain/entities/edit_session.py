from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from portrait_studio.domain.entities.edit_history import EditHistoryEntry
from portrait_studio.domain.entities.image_blob import ImageBlob


class SessionStatus(str, Enum):
    IDLE = "idle"
    NORMALIZING = "normalizing"
    EDITING = "editing"


class EditBasePolicy(str, Enum):
    """Which image an edit is built from.

    CURRENT compounds edits on top of the latest result; ORIGINAL reapplies
    every edit onto the pristine upload.
    """

    CURRENT = "current"
    ORIGINAL = "original"


@dataclass(frozen=True)
class ErrorInfo:
    kind: str
    message: str


@dataclass(frozen=True)
class SessionSnapshot:
    original: ImageBlob | None
    current: ImageBlob | None
    status: SessionStatus
    last_error: ErrorInfo | None
    generation: int
    history: tuple[EditHistoryEntry, ...] = ()

    @property
    def has_image(self) -> bool:
        return self.current is not None


@dataclass
class EditSession:
    """Mutable aggregate root for one editing session.

    ``original`` and ``current`` are set and cleared together. ``generation``
    increases on every upload and reset so late completions from a previous
    epoch can be recognised and dropped.
    """

    original: ImageBlob | None = None
    current: ImageBlob | None = None
    status: SessionStatus = SessionStatus.IDLE
    last_error: ErrorInfo | None = None
    generation: int = 0
    history: list[EditHistoryEntry] = field(default_factory=list)

    @property
    def is_busy(self) -> bool:
        return self.status is not SessionStatus.IDLE

    @property
    def has_image(self) -> bool:
        return self.original is not None

    def begin(self, status: SessionStatus, *, new_generation: bool = False) -> int:
        if new_generation:
            self.generation += 1
        self.status = status
        self.last_error = None
        return self.generation

    def set_images(self, image: ImageBlob) -> None:
        self.original = image
        self.current = image
        self.history.clear()

    def clear(self) -> None:
        self.original = None
        self.current = None
        self.last_error = None
        self.history.clear()
        self.status = SessionStatus.IDLE
        self.generation += 1

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            original=self.original,
            current=self.current,
            status=self.status,
            last_error=self.last_error,
            generation=self.generation,
            history=tuple(self.history),
        )
