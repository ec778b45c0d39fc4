"""Per-operation temporary directories.

Import and export each own one fixed directory under the temp root. Export
wipes its directory before reuse. Import keeps earlier build directories,
since loaded addons still point into them, and only discards its own failed
build; everything is removed by ``cleanup_all`` at start-up.
"""
from __future__ import annotations

import logging
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from .errors import StagingError

logger = logging.getLogger(__name__)

STAGING_DIR_NAMES: Dict[str, str] = {
    "import": "clothtool_import",
    "export": "clothtool_export",
}


def default_temp_root() -> Path:
    return Path(tempfile.gettempdir())


@dataclass
class StagingArea:
    kind: str
    temp_root: Path

    def __post_init__(self) -> None:
        if self.kind not in STAGING_DIR_NAMES:
            raise StagingError(self.kind, "unknown staging kind")
        self.temp_root = Path(self.temp_root)

    @property
    def path(self) -> Path:
        return self.temp_root / STAGING_DIR_NAMES[self.kind]

    def prepare(self) -> Path:
        """Clear a stale directory of this kind and create a fresh one."""
        if self.path.exists():
            logger.debug(f"Clearing stale {self.kind} staging directory {self.path}")
            self.cleanup()
        try:
            self.path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StagingError(self.kind, f"cannot create {self.path}: {e}") from e
        return self.path

    def ensure(self) -> Path:
        """Create the directory if needed, keeping whatever is already there."""
        try:
            self.path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StagingError(self.kind, f"cannot create {self.path}: {e}") from e
        return self.path

    def discard(self, entry: Path) -> None:
        """Remove one entry of this directory, e.g. a failed build."""
        entry = Path(entry)
        if entry.parent != self.path:
            raise StagingError(self.kind, f"{entry} is not inside {self.path}")
        if not entry.exists():
            return
        try:
            shutil.rmtree(entry)
        except OSError as e:
            raise StagingError(self.kind, f"cannot remove {entry}: {e}") from e

    def cleanup(self) -> None:
        if not self.path.exists():
            return
        try:
            shutil.rmtree(self.path)
        except OSError as e:
            raise StagingError(self.kind, f"cannot remove {self.path}: {e}") from e


def staging_area(kind: str, temp_root: Optional[Path] = None) -> StagingArea:
    return StagingArea(kind=kind, temp_root=temp_root or default_temp_root())


def cleanup_all(temp_root: Optional[Path] = None) -> None:
    """Remove leftovers of every kind, e.g. at start-up."""
    for kind in STAGING_DIR_NAMES:
        staging_area(kind, temp_root).cleanup()
