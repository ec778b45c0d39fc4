from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, List, Protocol

from .drawables import find_drawables_async
from .identity import extract_short_name

logger = logging.getLogger(__name__)


@dataclass
class Addon:
    name: str
    meta_path: Path
    drawables: List[Path] = field(default_factory=list)


@dataclass
class ProjectState:
    """The project currently open in the tool.

    Intake operations receive it explicitly and mutate it only after the
    user confirmed.
    """
    project_name: str = ""
    is_external: bool = False
    addons: List[Addon] = field(default_factory=list)
    has_unsaved_changes: bool = False

    def clear(self) -> None:
        self.project_name = ""
        self.is_external = False
        self.addons.clear()
        self.has_unsaved_changes = False

    @property
    def drawable_count(self) -> int:
        return sum(len(a.drawables) for a in self.addons)


class AddonLoader(Protocol):
    def load_addon(
        self, state: ProjectState, meta_path: Path, should_set_project_name: bool = False
    ) -> Awaitable[None]: ...


class AddonManager:
    """Minimal addon loader: records each descriptor and its drawables.

    Full .meta parsing lives in the editor; this keeps the intake pipeline
    usable from the command line and in tests.
    """

    async def load_addon(
        self, state: ProjectState, meta_path: Path, should_set_project_name: bool = False
    ) -> None:
        meta_path = Path(meta_path)
        drawables = await find_drawables_async(meta_path)
        addon = Addon(name=meta_path.stem, meta_path=meta_path, drawables=drawables)
        state.addons.append(addon)
        if should_set_project_name and not state.project_name:
            state.project_name = extract_short_name(meta_path.stem)
        logger.info(f"Loaded addon {addon.name} with {len(drawables)} drawable(s)")
