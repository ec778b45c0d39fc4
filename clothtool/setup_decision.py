"""Project setup confirmation, without any windowing code.

``ProjectSetupRequest`` describes what the user is asked; a presenter (the
CLI prompt or the Qt dialog in ``editor``) fills in a
``ProjectSetupDecision``. Name legality and the overwrite check live here so
they can be tested on their own.
"""
from __future__ import annotations

import inspect
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Optional, Protocol, Union

from .identity import ProjectIdentitySuggestion

# Windows file name rules; the projects folder is shared with the desktop app
INVALID_NAME_CHARS = set('<>:"/\\|?*') | {chr(i) for i in range(32)}


def is_valid_project_name(name: Optional[str]) -> bool:
    if not name or not name.strip():
        return False
    return not any(ch in INVALID_NAME_CHARS for ch in name)


def project_exists(projects_folder: Optional[Path], name: str) -> bool:
    if not projects_folder or not name or not name.strip():
        return False
    return (Path(projects_folder) / name.strip()).exists()


def drawable_count_message(drawable_count: int, descriptor_count: int) -> str:
    if descriptor_count > 1:
        return f"Found {drawable_count} drawable(s) in {descriptor_count} .meta files"
    return f"Found {drawable_count} drawable(s)"


@dataclass
class ProjectSetupDecision:
    project_name: str
    is_self_contained: bool = True
    confirmed: bool = False

    @classmethod
    def cancelled(cls) -> "ProjectSetupDecision":
        return cls(project_name="", is_self_contained=True, confirmed=False)


@dataclass
class ProjectSetupRequest:
    title: str
    confirm_text: str
    suggested_name: str = ""
    is_self_contained: bool = True
    show_drawable_count: bool = False
    drawable_count_message: str = ""
    projects_folder: Optional[Path] = None

    @classmethod
    def for_new_project(cls, projects_folder: Optional[Path] = None) -> "ProjectSetupRequest":
        return cls(
            title="Create New Project",
            confirm_text="Create",
            is_self_contained=True,
            projects_folder=projects_folder,
        )

    @classmethod
    def for_open_addon(
        cls, suggestion: ProjectIdentitySuggestion, projects_folder: Optional[Path] = None
    ) -> "ProjectSetupRequest":
        # existing addons default to referencing their files in place
        return cls(
            title="Open Existing Addon",
            confirm_text="Open",
            suggested_name=suggestion.suggested_name,
            is_self_contained=False,
            show_drawable_count=True,
            drawable_count_message=drawable_count_message(
                suggestion.drawable_count, suggestion.descriptor_count
            ),
            projects_folder=projects_folder,
        )

    def is_valid(self, name: str) -> bool:
        return is_valid_project_name(name)

    def conflicts(self, name: str) -> bool:
        return project_exists(self.projects_folder, name)

    def overwrite_warning(self, name: str) -> Optional[str]:
        if not self.conflicts(name):
            return None
        return f'A project named "{name}" already exists. Continuing will overwrite it.'

    def decide(
        self, name: str, is_self_contained: bool, overwrite_confirmed: bool = False
    ) -> ProjectSetupDecision:
        """Turn the presenter's inputs into a decision.

        An illegal name, or an existing project the user did not agree to
        overwrite, gives an unconfirmed decision.
        """
        name = (name or "").strip()
        confirmed = self.is_valid(name) and (overwrite_confirmed or not self.conflicts(name))
        return ProjectSetupDecision(
            project_name=name, is_self_contained=is_self_contained, confirmed=confirmed
        )


MaybeAwaitable = Union[Any, Awaitable[Any]]


class Confirmer(Protocol):
    def confirm(self, request: ProjectSetupRequest) -> MaybeAwaitable: ...

    def acknowledge(self, title: str, message: str) -> MaybeAwaitable: ...


class AutoConfirmer:
    """Accepts every request with the suggested values (batch mode)."""

    def __init__(self, is_self_contained: Optional[bool] = None, overwrite: bool = False):
        self.is_self_contained = is_self_contained
        self.overwrite = overwrite

    def confirm(self, request: ProjectSetupRequest) -> ProjectSetupDecision:
        contained = request.is_self_contained if self.is_self_contained is None else self.is_self_contained
        return request.decide(request.suggested_name, contained, overwrite_confirmed=self.overwrite)

    def acknowledge(self, title: str, message: str) -> None:
        return None


async def resolve(value: MaybeAwaitable) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value
