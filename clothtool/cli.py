from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import config as config_io
from .intake import IntakeOutcome, ProjectIntakeWorkflow
from .project import AddonManager, ProjectState
from .setup_decision import AutoConfirmer, ProjectSetupDecision, ProjectSetupRequest
from .staging import cleanup_all

logger = logging.getLogger(__name__)


class CliConfirmer:
    """Asks the project setup questions on the terminal."""

    def __init__(self, name: Optional[str] = None, self_contained: Optional[bool] = None):
        self.name = name
        self.self_contained = self_contained

    async def _ask(self, prompt: str) -> str:
        try:
            return (await asyncio.to_thread(input, prompt)).strip()
        except EOFError:
            return ""

    async def confirm(self, request: ProjectSetupRequest) -> ProjectSetupDecision:
        print(request.title)
        if request.show_drawable_count:
            print(f"  {request.drawable_count_message}")
        name = self.name
        if name is None:
            answer = await self._ask(f"Project name [{request.suggested_name}]: ")
            name = answer or request.suggested_name
        if not request.is_valid(name):
            print(f"Invalid project name: {name!r}")
            return ProjectSetupDecision.cancelled()

        contained = self.self_contained
        if contained is None:
            default = "y" if request.is_self_contained else "n"
            answer = await self._ask(f"Copy assets into the project (self-contained)? [{default}] ")
            contained = (answer or default).lower().startswith("y")

        overwrite = False
        warning = request.overwrite_warning(name)
        if warning:
            print(warning)
            overwrite = (await self._ask("Overwrite? [y/N] ")).lower().startswith("y")
            if not overwrite:
                return ProjectSetupDecision.cancelled()

        answer = await self._ask(f"{request.confirm_text} '{name}'? [Y/n] ")
        if answer and not answer.lower().startswith("y"):
            return ProjectSetupDecision.cancelled()
        return request.decide(name, contained, overwrite_confirmed=overwrite)

    def acknowledge(self, title: str, message: str) -> None:
        print(f"{title}: {message}")


def _print_outcome(outcome: IntakeOutcome) -> None:
    for path in outcome.skipped:
        print(f"Skipped: {path}")
    if outcome.message:
        print(outcome.message)


def _print_state(state: ProjectState) -> None:
    kind = "external" if state.is_external else "self-contained"
    print(f"Project: {state.project_name or '<unnamed>'} ({kind})")
    for addon in state.addons:
        print(f"  {addon.name}: {len(addon.drawables)} drawable(s)")


def _configure(args: argparse.Namespace, cfg: dict) -> int:
    changes = {
        "projects_folder": args.projects_folder,
        "temp_root": args.temp_root,
        "log_level": args.log_level.upper() if args.log_level else None,
    }
    changes = {k: v for k, v in changes.items() if v is not None}
    if changes:
        cfg.update(changes)
        if not config_io.save_config(cfg, Path(args.config) if args.config else None):
            return 1
    for key, value in cfg.items():
        print(f"{key} = {value}")
    return 0


def _setup_logging(level: str, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, str(level).upper(), logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )


async def _run(args: argparse.Namespace, cfg: dict) -> int:
    self_contained = getattr(args, "self_contained", None)
    if getattr(args, "yes", False):
        confirmer = AutoConfirmer(is_self_contained=self_contained)
    else:
        confirmer = CliConfirmer(name=getattr(args, "name", None), self_contained=self_contained)
    workflow = ProjectIntakeWorkflow(
        AddonManager(),
        confirmer=confirmer,
        temp_root=config_io.temp_root(cfg),
        projects_folder=config_io.projects_folder(cfg),
    )
    state = ProjectState()

    if args.cmd == "open":
        outcome = await workflow.open_addons(state, [Path(p) for p in args.meta])
        _print_outcome(outcome)
        if outcome.ok and args.add:
            added = await workflow.add_addons(state, [Path(p) for p in args.add])
            _print_outcome(added)
        if outcome.ok:
            _print_state(state)
        return 0 if outcome.ok else 1

    if args.cmd == "scan":
        scans, skipped = await workflow.scan_descriptors([Path(p) for p in args.meta])
        for path in skipped:
            print(f"Skipped: {path}")
        for scan in scans:
            print(f"{scan.path.name}: {scan.identity.short_name} ({scan.drawable_count} drawable(s))")
        if not scans:
            return 1
        suggestion = workflow.suggest(scans)
        print(f"Suggested name: {suggestion.suggested_name}")
        print(f"Drawables: {suggestion.drawable_count} in {suggestion.descriptor_count} .meta file(s)")
        return 0

    if args.cmd == "import":
        outcome = await workflow.import_project(state, Path(args.project), set_project_name=True)
        _print_outcome(outcome)
        if outcome.ok:
            print(f"Extracted to: {outcome.output}")
            _print_state(state)
        return 0 if outcome.ok else 1

    if args.cmd == "export":
        outcome = await workflow.export_project(Path(args.build_dir), Path(args.output))
        _print_outcome(outcome)
        return 0 if outcome.ok else 1

    return 0


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="clothtool", description="Clothing addon project intake")
    parser.add_argument("--config", type=str, default=None, help="Path to config JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="cmd")

    def add_confirm_flags(p: argparse.ArgumentParser) -> None:
        p.add_argument("-y", "--yes", action="store_true", help="Accept suggested values without prompting")
        group = p.add_mutually_exclusive_group()
        group.add_argument("--self-contained", dest="self_contained", action="store_true", default=None,
                           help="Copy assets into the project")
        group.add_argument("--external", dest="self_contained", action="store_false",
                           help="Reference assets in place")

    p_open = sub.add_parser("open", help="Open existing addon(s) from .meta files")
    p_open.add_argument("meta", nargs="+", help=".meta descriptor files")
    p_open.add_argument("--name", type=str, default=None, help="Project name (skips the prompt)")
    p_open.add_argument("--add", nargs="*", default=[], help="More .meta files to add afterwards")
    add_confirm_flags(p_open)

    p_scan = sub.add_parser("scan", help="Show the suggested identity without loading")
    p_scan.add_argument("meta", nargs="+", help=".meta descriptor files")

    p_import = sub.add_parser("import", help="Import a .gctproject file")
    p_import.add_argument("project", type=str, help="Project file")
    add_confirm_flags(p_import)

    p_export = sub.add_parser("export", help="Pack a built project directory")
    p_export.add_argument("build_dir", type=str, help="Built project directory")
    p_export.add_argument("output", type=str, help="Destination .gctproject file")

    sub.add_parser("clean", help="Remove leftover temporary directories")

    p_config = sub.add_parser("config", help="Show or change the saved settings")
    p_config.add_argument("--projects-folder", type=str, default=None, help="Folder holding named projects")
    p_config.add_argument("--temp-root", type=str, default=None, help="Parent of the temporary directories")
    p_config.add_argument("--log-level", type=str, default=None, help="DEBUG, INFO, WARNING or ERROR")

    args = parser.parse_args(list(argv) if argv is not None else sys.argv[1:])
    cfg = config_io.load_config(Path(args.config) if args.config else None)
    _setup_logging(cfg.get("log_level", "INFO"), args.verbose)

    if not args.cmd:
        parser.print_help()
        return 2

    if args.cmd == "clean":
        cleanup_all(config_io.temp_root(cfg))
        print("Temporary directories removed")
        return 0

    if args.cmd == "config":
        return _configure(args, cfg)

    return asyncio.run(_run(args, cfg))


if __name__ == "__main__":
    raise SystemExit(main())
