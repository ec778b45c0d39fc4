from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class ClothToolError(Exception):
    """Base class for intake and archive failures."""


@dataclass
class ArchiveError(ClothToolError):
    message: str
    path: Path | None = None

    def __str__(self) -> str:  # pragma: no cover - formatting
        loc = f" ({self.path})" if self.path else ""
        return f"{self.message}{loc}"


class CorruptArchiveError(ArchiveError):
    """Decoded bytes are not a well formed project archive."""


@dataclass
class StagingError(ClothToolError):
    kind: str
    message: str

    def __str__(self) -> str:  # pragma: no cover - formatting
        return f"[{self.kind}] {self.message}"
