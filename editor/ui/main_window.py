from __future__ import annotations

from pathlib import Path
from typing import Awaitable, Callable, List, Optional

from PySide6.QtGui import QAction
from PySide6.QtWidgets import (
    QFileDialog,
    QLabel,
    QMainWindow,
    QMessageBox,
)

from clothtool.intake import IntakeOutcome, IntakeStatus, ProjectIntakeWorkflow
from clothtool.project import AddonManager, ProjectState
from editor.ui.intake_worker import IntakeWorker
from editor.ui.project_setup_dialog import QtConfirmer

APP_TITLE = "Cloth Addon Tool"
META_FILTER = "Meta files (*.meta)"
PROJECT_FILTER = "Cloth project (*.gctproject)"


class MainWindow(QMainWindow):
    def __init__(self, temp_root: Optional[Path] = None, projects_folder: Optional[Path] = None) -> None:
        super().__init__()
        self.setWindowTitle(APP_TITLE)
        self.resize(800, 500)

        self.state = ProjectState()
        self.workflow = ProjectIntakeWorkflow(
            AddonManager(),
            confirmer=QtConfirmer(self),
            temp_root=temp_root,
            projects_folder=projects_folder,
        )
        self._worker: Optional[IntakeWorker] = None
        self._actions: List[QAction] = []

        self._summary = QLabel()
        self.setCentralWidget(self._summary)
        self._build_menu()
        self._refresh()

    def _build_menu(self) -> None:
        file_menu = self.menuBar().addMenu("File")
        for text, slot in (
            ("New Project...", self._new_project),
            ("Open Addon...", self._open_addon),
            ("Add Addon...", self._add_addon),
            ("Import Project...", self._import_project),
            ("Export Project...", self._export_project),
            ("Close Project", self._close_project),
        ):
            action = QAction(text, self)
            action.triggered.connect(slot)
            file_menu.addAction(action)
            self._actions.append(action)

    @property
    def busy(self) -> bool:
        return self._worker is not None

    def _start(self, make_coro: Callable[[], Awaitable[IntakeOutcome]]) -> None:
        if self.busy:
            self.statusBar().showMessage("Another project operation is still running.", 5000)
            return
        worker = IntakeWorker(make_coro, self)
        worker.outcome_ready.connect(self._report)
        worker.failed.connect(self._report_failure)
        worker.finished.connect(self._on_worker_finished)
        self._worker = worker
        for action in self._actions:
            action.setEnabled(False)
        self.statusBar().showMessage("Working...")
        worker.start()

    def _on_worker_finished(self) -> None:
        if self._worker is not None:
            self._worker.deleteLater()
        self._worker = None
        for action in self._actions:
            action.setEnabled(True)
        self._refresh()

    def _report(self, outcome: IntakeOutcome) -> None:
        if outcome.ok:
            self.statusBar().showMessage(outcome.message, 5000)
        elif outcome.status in (IntakeStatus.CANCELLED, IntakeStatus.NO_DRAWABLES):
            # the user has already seen these
            self.statusBar().clearMessage()
        else:
            self.statusBar().clearMessage()
            QMessageBox.critical(self, "Error", outcome.message)

    def _report_failure(self, message: str) -> None:
        self.statusBar().clearMessage()
        QMessageBox.critical(self, "Error", message)

    def _pick_meta_files(self, title: str) -> List[Path]:
        paths, _ = QFileDialog.getOpenFileNames(self, title, str(Path.cwd()), META_FILTER)
        return [Path(p) for p in paths]

    def _new_project(self) -> None:
        self._start(lambda: self.workflow.new_project(self.state))

    def _open_addon(self) -> None:
        paths = self._pick_meta_files("Select .meta file(s)")
        if paths:
            self._start(lambda: self.workflow.open_addons(self.state, paths))

    def _add_addon(self) -> None:
        paths = self._pick_meta_files("Select .meta file(s) to add")
        if paths:
            self._start(lambda: self.workflow.add_addons(self.state, paths))

    def _import_project(self) -> None:
        path_str, _ = QFileDialog.getOpenFileName(self, "Import project", str(Path.cwd()), PROJECT_FILTER)
        if path_str:
            self._start(lambda: self.workflow.import_project(self.state, Path(path_str), set_project_name=True))

    def _export_project(self) -> None:
        build_dir = QFileDialog.getExistingDirectory(self, "Select built project directory", str(Path.cwd()))
        if not build_dir:
            return
        name = self.state.project_name.strip() or "project"
        path_str, _ = QFileDialog.getSaveFileName(
            self, "Export project", str(Path.cwd() / f"{name}.gctproject"), PROJECT_FILTER
        )
        if path_str:
            self._start(lambda: self.workflow.export_project(Path(build_dir), Path(path_str)))

    def _close_project(self) -> None:
        self.state.clear()
        self._refresh()

    def _refresh(self) -> None:
        if not self.state.project_name and not self.state.addons:
            self._summary.setText("Use File > New Project, Open Addon or Import Project.")
            self.setWindowTitle(APP_TITLE)
            return
        kind = "External" if self.state.is_external else "Self-contained"
        lines = [f"<b>Project:</b> {self.state.project_name} ({kind})"]
        for addon in self.state.addons:
            lines.append(f"{addon.name}: {len(addon.drawables)} drawable(s)")
        self._summary.setText("<br>".join(lines))
        self.setWindowTitle(f"{APP_TITLE} - {self.state.project_name}")
