"""
Tests for the Qt project setup dialog (offscreen).
"""
import os
import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
QtWidgets = pytest.importorskip("PySide6.QtWidgets")


@pytest.fixture(scope="module")
def qapp():
    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication([])
    yield app


def open_request(projects_folder=None):
    from clothtool.identity import ProjectIdentitySuggestion
    from clothtool.setup_decision import ProjectSetupRequest

    return ProjectSetupRequest.for_open_addon(ProjectIdentitySuggestion("tshirt", 3, 2), projects_folder)


class TestProjectSetupDialog:

    def test_initial_state(self, qapp):
        from editor.ui.project_setup_dialog import ProjectSetupDialog

        dialog = ProjectSetupDialog(open_request())

        assert dialog.windowTitle() == "Open Existing Addon"
        assert dialog.name_edit.text() == "tshirt"
        assert dialog.external_radio.isChecked()
        assert not dialog.is_self_contained
        assert dialog.count_label.text() == "Found 3 drawable(s) in 2 .meta files"
        assert dialog.confirm_button.text() == "Open"
        assert dialog.confirm_button.isEnabled()

    def test_invalid_name_disables_confirm(self, qapp):
        from editor.ui.project_setup_dialog import ProjectSetupDialog

        dialog = ProjectSetupDialog(open_request())
        dialog.name_edit.setText("a:b")
        assert not dialog.confirm_button.isEnabled()
        dialog.name_edit.setText("   ")
        assert not dialog.confirm_button.isEnabled()

    def test_confirm_builds_decision(self, qapp):
        from editor.ui.project_setup_dialog import ProjectSetupDialog

        dialog = ProjectSetupDialog(open_request())
        dialog.name_edit.setText("shirts")
        dialog.self_contained_radio.setChecked(True)
        dialog._confirm()

        assert dialog.decision.confirmed
        assert dialog.decision.project_name == "shirts"
        assert dialog.decision.is_self_contained is True

    def test_existing_project_warns(self, qapp, tmp_path, monkeypatch):
        from editor.ui.project_setup_dialog import ProjectSetupDialog

        (tmp_path / "tshirt").mkdir()
        dialog = ProjectSetupDialog(open_request(tmp_path))
        assert "already exists" in dialog.warning_label.text()

        monkeypatch.setattr(dialog, "_ask_overwrite", lambda: False)
        dialog._confirm()
        assert not dialog.decision.confirmed

        monkeypatch.setattr(dialog, "_ask_overwrite", lambda: True)
        dialog._confirm()
        assert dialog.decision.confirmed

    def test_cancel(self, qapp):
        from editor.ui.project_setup_dialog import ProjectSetupDialog

        dialog = ProjectSetupDialog(open_request())
        dialog._cancel()
        assert not dialog.decision.confirmed
