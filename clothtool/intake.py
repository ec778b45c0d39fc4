"""
Project Intake - 项目导入流程

Entry points used by the editor and the CLI:

- ``open_addons``    validate .meta files, suggest a project identity, ask for
                     confirmation, then replace the project with them
- ``add_addons``     validate and append .meta files to the open project
- ``new_project``    confirm a name and start an empty project
- ``import_project`` unpack a ``.gctproject`` and load its descriptors
- ``export_project`` pack a built project tree into a ``.gctproject``

Every entry point returns an ``IntakeOutcome``; per-file problems are logged
and skipped, aggregate problems come back as a status.

Phases of one operation::

    IDLE -> CANDIDATES_SELECTED -> VALIDATED -> IDENTITY_SUGGESTED
         -> AWAITING_CONFIRMATION -> CONFIRMED -> LOADING -> LOADED
                                  \\-> CANCELLED -> IDLE
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from .archiver import ProjectArchiver, with_project_extension
from .drawables import count_drawables_async
from .errors import ArchiveError, CorruptArchiveError, StagingError
from .identity import AddonIdentity, ProjectIdentitySuggestion, identity_for
from .meta_validator import filter_valid_async, validate_async
from .project import AddonLoader, ProjectState
from .setup_decision import (
    AutoConfirmer,
    Confirmer,
    ProjectSetupDecision,
    ProjectSetupRequest,
    is_valid_project_name,
    resolve,
)
from .staging import staging_area

logger = logging.getLogger(__name__)

DESCRIPTOR_EXTENSION = ".meta"
DESCRIPTOR_GENDER_MARKERS = ("mp_m_freemode", "mp_f_freemode")


# ============================================================================
# Outcomes
# ============================================================================

class IntakePhase(Enum):
    IDLE = auto()
    CANDIDATES_SELECTED = auto()
    VALIDATED = auto()
    IDENTITY_SUGGESTED = auto()
    AWAITING_CONFIRMATION = auto()
    CONFIRMED = auto()
    LOADING = auto()
    LOADED = auto()
    CANCELLED = auto()


class IntakeStatus(Enum):
    SUCCESS = "success"
    CANCELLED = "cancelled"
    BUSY = "busy"
    NO_VALID_DESCRIPTORS = "no_valid_descriptors"
    NO_DRAWABLES = "no_drawables"
    INVALID_PROJECT_NAME = "invalid_project_name"
    CORRUPT_ARCHIVE = "corrupt_archive"
    ARCHIVE_ERROR = "archive_error"
    NO_DESCRIPTORS_IN_ARCHIVE = "no_descriptors_in_archive"


@dataclass
class IntakeOutcome:
    status: IntakeStatus
    message: str = ""
    suggestion: Optional[ProjectIdentitySuggestion] = None
    decision: Optional[ProjectSetupDecision] = None
    loaded: List[Path] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)
    output: Optional[Path] = None

    @property
    def ok(self) -> bool:
        return self.status is IntakeStatus.SUCCESS


@dataclass
class DescriptorScan:
    path: Path
    identity: AddonIdentity
    drawable_count: int


NO_VALID_MESSAGE = "No valid .meta files were selected."
NO_DRAWABLES_TITLE = "No Drawables Found"
NO_DRAWABLES_MESSAGE = (
    "No drawable files (.ydd) were found for the selected .meta file(s).\n\n"
    "Please make sure the .ydd files are in the same directory or subdirectories as the .meta file."
)


def find_project_descriptors(root: Path) -> List[Path]:
    """Top-level descriptors of an unpacked project (no recursion)."""
    found = []
    for p in Path(root).iterdir():
        if not p.is_file() or p.suffix.lower() != DESCRIPTOR_EXTENSION:
            continue
        name = p.name.lower()
        if any(marker in name for marker in DESCRIPTOR_GENDER_MARKERS):
            found.append(p)
    return sorted(found)


# ============================================================================
# Workflow
# ============================================================================

class ProjectIntakeWorkflow:
    """
    Runs one intake operation at a time against a ``ProjectState``.

    Usage:
        workflow = ProjectIntakeWorkflow(AddonManager(), confirmer=CliConfirmer())
        state = ProjectState()
        outcome = await workflow.open_addons(state, [Path("mp_m_freemode_01_tshirt.meta")])
        if outcome.ok:
            print(state.project_name)
    """

    def __init__(
        self,
        addon_manager: AddonLoader,
        confirmer: Optional[Confirmer] = None,
        archiver: Optional[ProjectArchiver] = None,
        temp_root: Optional[Path] = None,
        projects_folder: Optional[Path] = None,
    ):
        self.addon_manager = addon_manager
        self.confirmer = confirmer or AutoConfirmer()
        self.archiver = archiver or ProjectArchiver()
        self.temp_root = temp_root
        self.projects_folder = projects_folder
        self.phase = IntakePhase.IDLE
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def _busy_outcome(self) -> IntakeOutcome:
        logger.warning("Intake operation rejected: another one is still running")
        return IntakeOutcome(IntakeStatus.BUSY, "Another project operation is still running.")

    # ------------------------------------------------------------------
    # scanning
    # ------------------------------------------------------------------

    async def _scan_one(self, path: Path) -> Optional[DescriptorScan]:
        if not await validate_async(path):
            return None
        count = await count_drawables_async(path)
        return DescriptorScan(path=path, identity=identity_for(path), drawable_count=count)

    async def scan_descriptors(self, paths: Iterable[Path]) -> Tuple[List[DescriptorScan], List[Path]]:
        """Validate and count every candidate concurrently.

        Results keep the order of ``paths``.
        """
        candidates = [Path(p) for p in paths]
        results = await asyncio.gather(*(self._scan_one(p) for p in candidates))
        scans = [r for r in results if r is not None]
        skipped = [p for p, r in zip(candidates, results) if r is None]
        return scans, skipped

    @staticmethod
    def suggest(scans: List[DescriptorScan]) -> ProjectIdentitySuggestion:
        return ProjectIdentitySuggestion.from_counts(
            (s.identity for s in scans), (s.drawable_count for s in scans)
        )

    # ------------------------------------------------------------------
    # open
    # ------------------------------------------------------------------

    async def open_addons(
        self, state: ProjectState, paths: Iterable[Path], should_set_project_name: bool = False
    ) -> IntakeOutcome:
        if self._lock.locked():
            return self._busy_outcome()
        async with self._lock:
            try:
                return await self._open(state, paths, should_set_project_name)
            except BaseException:
                self.phase = IntakePhase.IDLE
                raise

    async def _open(
        self, state: ProjectState, paths: Iterable[Path], should_set_project_name: bool
    ) -> IntakeOutcome:
        self.phase = IntakePhase.CANDIDATES_SELECTED
        scans, skipped = await self.scan_descriptors(paths)
        self.phase = IntakePhase.VALIDATED

        if not scans:
            self.phase = IntakePhase.IDLE
            return IntakeOutcome(IntakeStatus.NO_VALID_DESCRIPTORS, NO_VALID_MESSAGE, skipped=skipped)

        suggestion = self.suggest(scans)
        self.phase = IntakePhase.IDENTITY_SUGGESTED
        logger.info(
            f"Suggested project '{suggestion.suggested_name}': "
            f"{suggestion.drawable_count} drawable(s) in {suggestion.descriptor_count} .meta file(s)"
        )

        if suggestion.drawable_count == 0:
            await resolve(self.confirmer.acknowledge(NO_DRAWABLES_TITLE, NO_DRAWABLES_MESSAGE))
            self.phase = IntakePhase.IDLE
            return IntakeOutcome(
                IntakeStatus.NO_DRAWABLES, NO_DRAWABLES_MESSAGE, suggestion=suggestion, skipped=skipped
            )

        request = ProjectSetupRequest.for_open_addon(suggestion, self.projects_folder)
        self.phase = IntakePhase.AWAITING_CONFIRMATION
        decision: ProjectSetupDecision = await resolve(self.confirmer.confirm(request))

        if decision is None or not decision.confirmed:
            self.phase = IntakePhase.CANCELLED
            logger.info("Opening addon cancelled")
            self.phase = IntakePhase.IDLE
            return IntakeOutcome(
                IntakeStatus.CANCELLED, "Cancelled.", suggestion=suggestion, decision=decision, skipped=skipped
            )
        if not is_valid_project_name(decision.project_name):
            self.phase = IntakePhase.IDLE
            return IntakeOutcome(
                IntakeStatus.INVALID_PROJECT_NAME,
                f"Invalid project name: {decision.project_name!r}",
                suggestion=suggestion,
                decision=decision,
                skipped=skipped,
            )

        self.phase = IntakePhase.CONFIRMED
        state.clear()
        state.is_external = not decision.is_self_contained

        self.phase = IntakePhase.LOADING
        loaded: List[Path] = []
        for scan in scans:
            await self.addon_manager.load_addon(state, scan.path, should_set_project_name)
            loaded.append(scan.path)

        state.project_name = decision.project_name.strip()
        state.has_unsaved_changes = True
        self.phase = IntakePhase.LOADED

        project_type = "Self-contained" if decision.is_self_contained else "External"
        logger.info(f"{project_type} addon loaded as '{state.project_name}'")
        return IntakeOutcome(
            IntakeStatus.SUCCESS,
            f"{project_type} addon loaded",
            suggestion=suggestion,
            decision=decision,
            loaded=loaded,
            skipped=skipped,
        )

    # ------------------------------------------------------------------
    # add
    # ------------------------------------------------------------------

    async def add_addons(
        self, state: ProjectState, paths: Iterable[Path], should_set_project_name: bool = False
    ) -> IntakeOutcome:
        if self._lock.locked():
            return self._busy_outcome()
        async with self._lock:
            try:
                return await self._add(state, paths, should_set_project_name)
            except BaseException:
                self.phase = IntakePhase.IDLE
                raise

    async def _add(
        self, state: ProjectState, paths: Iterable[Path], should_set_project_name: bool
    ) -> IntakeOutcome:
        self.phase = IntakePhase.CANDIDATES_SELECTED
        valid, skipped = await filter_valid_async(paths)
        self.phase = IntakePhase.VALIDATED
        if not valid:
            self.phase = IntakePhase.IDLE
            return IntakeOutcome(IntakeStatus.NO_VALID_DESCRIPTORS, NO_VALID_MESSAGE, skipped=skipped)

        # adding needs no project-level confirmation
        self.phase = IntakePhase.LOADING
        for path in valid:
            await self.addon_manager.load_addon(state, path, should_set_project_name)
        state.has_unsaved_changes = True
        self.phase = IntakePhase.LOADED
        logger.info(f"Added {len(valid)} addon(s), skipped {len(skipped)}")
        return IntakeOutcome(IntakeStatus.SUCCESS, f"Added {len(valid)} addon(s)", loaded=valid, skipped=skipped)

    # ------------------------------------------------------------------
    # new
    # ------------------------------------------------------------------

    async def new_project(self, state: ProjectState) -> IntakeOutcome:
        """Ask for a name and storage mode, then start an empty project."""
        if self._lock.locked():
            return self._busy_outcome()
        async with self._lock:
            try:
                return await self._new(state)
            except BaseException:
                self.phase = IntakePhase.IDLE
                raise

    async def _new(self, state: ProjectState) -> IntakeOutcome:
        self.phase = IntakePhase.AWAITING_CONFIRMATION
        request = ProjectSetupRequest.for_new_project(self.projects_folder)
        decision: ProjectSetupDecision = await resolve(self.confirmer.confirm(request))
        if decision is None or not decision.confirmed:
            self.phase = IntakePhase.IDLE
            return IntakeOutcome(IntakeStatus.CANCELLED, "Cancelled.", decision=decision)
        if not is_valid_project_name(decision.project_name):
            self.phase = IntakePhase.IDLE
            return IntakeOutcome(
                IntakeStatus.INVALID_PROJECT_NAME,
                f"Invalid project name: {decision.project_name!r}",
                decision=decision,
            )

        state.clear()
        state.project_name = decision.project_name.strip()
        state.is_external = not decision.is_self_contained
        state.has_unsaved_changes = True
        self.phase = IntakePhase.LOADED
        logger.info(f"Created project '{state.project_name}'")
        return IntakeOutcome(IntakeStatus.SUCCESS, f"Project {state.project_name} created", decision=decision)

    # ------------------------------------------------------------------
    # import / export
    # ------------------------------------------------------------------

    async def import_project(
        self, state: ProjectState, project_file: Path, set_project_name: bool = False
    ) -> IntakeOutcome:
        if self._lock.locked():
            return self._busy_outcome()
        async with self._lock:
            try:
                return await self._import(state, Path(project_file), set_project_name)
            except BaseException:
                self.phase = IntakePhase.IDLE
                raise

    async def _import(self, state: ProjectState, project_file: Path, set_project_name: bool) -> IntakeOutcome:
        self.phase = IntakePhase.CANDIDATES_SELECTED
        logger.info(f"Started importing {project_file.name}")
        staging = staging_area("import", self.temp_root)
        try:
            root = await asyncio.to_thread(staging.ensure)
        except StagingError as e:
            self.phase = IntakePhase.IDLE
            return IntakeOutcome(IntakeStatus.ARCHIVE_ERROR, str(e))

        project_name = project_file.stem
        build_path = root / f"{project_name}_{time.time_ns()}"
        try:
            await self.archiver.import_archive_async(project_file, build_path, work_dir=root)
        except CorruptArchiveError as e:
            logger.error(f"Import of {project_file} failed: {e}")
            await asyncio.to_thread(staging.discard, build_path)
            self.phase = IntakePhase.IDLE
            return IntakeOutcome(IntakeStatus.CORRUPT_ARCHIVE, str(e))
        except ArchiveError as e:
            logger.error(f"Import of {project_file} failed: {e}")
            await asyncio.to_thread(staging.discard, build_path)
            self.phase = IntakePhase.IDLE
            return IntakeOutcome(IntakeStatus.ARCHIVE_ERROR, str(e))

        descriptors = await asyncio.to_thread(find_project_descriptors, build_path)
        self.phase = IntakePhase.VALIDATED
        if not descriptors:
            logger.error(f"No meta files found in project file {project_file}")
            await asyncio.to_thread(staging.discard, build_path)
            self.phase = IntakePhase.IDLE
            return IntakeOutcome(
                IntakeStatus.NO_DESCRIPTORS_IN_ARCHIVE, "No .meta files found in the project file."
            )

        self.phase = IntakePhase.LOADING
        if set_project_name:
            state.project_name = project_name
        for meta in descriptors:
            await self.addon_manager.load_addon(state, meta)
        state.has_unsaved_changes = True
        self.phase = IntakePhase.LOADED
        logger.info(f"Project {project_name} imported with {len(descriptors)} addon(s)")
        return IntakeOutcome(
            IntakeStatus.SUCCESS, f"Project {project_name} imported", loaded=descriptors, output=build_path
        )

    async def export_project(self, build_directory: Path, destination: Path) -> IntakeOutcome:
        """Pack an already built project tree into a ``.gctproject`` file."""
        if self._lock.locked():
            return self._busy_outcome()
        async with self._lock:
            destination = with_project_extension(destination)
            staging = staging_area("export", self.temp_root)
            try:
                work = await asyncio.to_thread(staging.prepare)
                await self.archiver.export_async(Path(build_directory), destination, work_dir=work)
            except (ArchiveError, StagingError) as e:
                logger.error(f"Export to {destination} failed: {e}")
                return IntakeOutcome(IntakeStatus.ARCHIVE_ERROR, str(e))
            finally:
                await asyncio.to_thread(staging.cleanup)
            return IntakeOutcome(IntakeStatus.SUCCESS, f"Project exported to {destination}", output=destination)
