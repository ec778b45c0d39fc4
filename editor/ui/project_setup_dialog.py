from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QObject, Qt, QThread, Signal, Slot
from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QLabel,
    QLineEdit,
    QMessageBox,
    QRadioButton,
    QVBoxLayout,
    QWidget,
)

from clothtool.setup_decision import ProjectSetupDecision, ProjectSetupRequest


class ProjectSetupDialog(QDialog):
    """Renders a ``ProjectSetupRequest``; the decision itself comes from the request."""

    def __init__(self, request: ProjectSetupRequest, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.request = request
        self.decision = ProjectSetupDecision.cancelled()
        self.setWindowTitle(request.title)
        self.setModal(True)

        layout = QVBoxLayout(self)
        layout.addWidget(QLabel("Project name:"))
        self.name_edit = QLineEdit(request.suggested_name)
        layout.addWidget(self.name_edit)

        self.warning_label = QLabel()
        self.warning_label.setWordWrap(True)
        self.warning_label.setStyleSheet("color: #d08000;")
        layout.addWidget(self.warning_label)

        self.self_contained_radio = QRadioButton("Self-contained (copy assets into the project)")
        self.external_radio = QRadioButton("External (reference assets in place)")
        self.self_contained_radio.setChecked(request.is_self_contained)
        self.external_radio.setChecked(not request.is_self_contained)
        layout.addWidget(self.self_contained_radio)
        layout.addWidget(self.external_radio)

        self.count_label = QLabel(request.drawable_count_message)
        self.count_label.setVisible(request.show_drawable_count)
        layout.addWidget(self.count_label)

        self.buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Cancel)
        self.confirm_button = self.buttons.addButton(request.confirm_text, QDialogButtonBox.ButtonRole.AcceptRole)
        self.buttons.accepted.connect(self._confirm)
        self.buttons.rejected.connect(self._cancel)
        layout.addWidget(self.buttons)

        self.name_edit.textChanged.connect(self._on_name_changed)
        self._on_name_changed(self.name_edit.text())
        self.name_edit.selectAll()
        self.name_edit.setFocus()

    @property
    def project_name(self) -> str:
        return self.name_edit.text()

    @property
    def is_self_contained(self) -> bool:
        return self.self_contained_radio.isChecked()

    def _on_name_changed(self, text: str) -> None:
        self.confirm_button.setEnabled(self.request.is_valid(text))
        warning = self.request.overwrite_warning(text)
        self.warning_label.setText(warning or "")
        self.warning_label.setVisible(bool(warning))

    def _ask_overwrite(self) -> bool:
        answer = QMessageBox.warning(
            self,
            "Project Already Exists",
            f'A project named "{self.project_name}" already exists.\n\n'
            "Do you want to overwrite it? This cannot be undone.",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        return answer == QMessageBox.StandardButton.Yes

    def _confirm(self) -> None:
        name = self.project_name
        if not self.request.is_valid(name):
            return
        overwrite = False
        if self.request.conflicts(name):
            overwrite = self._ask_overwrite()
            if not overwrite:
                return
        self.decision = self.request.decide(name, self.is_self_contained, overwrite_confirmed=overwrite)
        self.accept()

    def _cancel(self) -> None:
        self.decision = ProjectSetupDecision.cancelled()
        self.reject()

    @staticmethod
    def ask(request: ProjectSetupRequest, parent: Optional[QWidget] = None) -> ProjectSetupDecision:
        dialog = ProjectSetupDialog(request, parent)
        dialog.exec()
        return dialog.decision


class QtConfirmer(QObject):
    """Shows the setup dialog and warnings on the GUI thread.

    The workflow runs on an ``IntakeWorker`` thread; calls made from there are
    forwarded through blocking queued signals so every widget is created on
    the thread that owns ``parent``.
    """

    _confirm_requested = Signal(object)
    _acknowledge_requested = Signal(str, str)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._widget = parent
        self._decision = ProjectSetupDecision.cancelled()
        self._confirm_requested.connect(self._show_dialog, Qt.ConnectionType.BlockingQueuedConnection)
        self._acknowledge_requested.connect(self._show_warning, Qt.ConnectionType.BlockingQueuedConnection)

    def _on_owner_thread(self) -> bool:
        return QThread.currentThread() == self.thread()

    @Slot(object)
    def _show_dialog(self, request: ProjectSetupRequest) -> None:
        self._decision = ProjectSetupDialog.ask(request, self._widget)

    @Slot(str, str)
    def _show_warning(self, title: str, message: str) -> None:
        QMessageBox.warning(self._widget, title, message)

    def confirm(self, request: ProjectSetupRequest) -> ProjectSetupDecision:
        if self._on_owner_thread():
            self._show_dialog(request)
        else:
            self._confirm_requested.emit(request)
        return self._decision

    def acknowledge(self, title: str, message: str) -> None:
        if self._on_owner_thread():
            self._show_warning(title, message)
        else:
            self._acknowledge_requested.emit(title, message)
