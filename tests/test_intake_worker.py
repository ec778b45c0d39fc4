"""
Tests for running workflow operations off the GUI thread.
"""
import os
import threading
import time
import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
QtWidgets = pytest.importorskip("PySide6.QtWidgets")


@pytest.fixture(scope="module")
def qapp():
    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication([])
    yield app


def wait_for(app, worker, timeout=10.0):
    """Pump GUI events until the worker thread is done."""
    deadline = time.monotonic() + timeout
    while not worker.isFinished() and time.monotonic() < deadline:
        app.processEvents()
        time.sleep(0.01)
    app.processEvents()
    return worker.isFinished()


class TestIntakeWorker:

    def test_outcome_is_delivered(self, qapp):
        from clothtool.intake import IntakeOutcome, IntakeStatus
        from editor.ui.intake_worker import IntakeWorker

        threads = []

        async def operation():
            threads.append(threading.get_ident())
            return IntakeOutcome(IntakeStatus.SUCCESS, "done")

        results = []
        worker = IntakeWorker(operation)
        worker.outcome_ready.connect(results.append)
        worker.start()

        assert wait_for(qapp, worker)
        assert [r.message for r in results] == ["done"]
        assert threads and threads[0] != threading.main_thread().ident

    def test_exception_is_reported(self, qapp):
        from editor.ui.intake_worker import IntakeWorker

        async def operation():
            raise RuntimeError("loader exploded")

        errors = []
        worker = IntakeWorker(operation)
        worker.failed.connect(errors.append)
        worker.start()

        assert wait_for(qapp, worker)
        assert errors == ["loader exploded"]


class TestQtConfirmerThreads:

    def test_dialog_runs_on_gui_thread(self, qapp, monkeypatch):
        from clothtool.identity import ProjectIdentitySuggestion
        from clothtool.intake import IntakeOutcome, IntakeStatus
        from clothtool.setup_decision import ProjectSetupRequest
        from editor.ui import project_setup_dialog
        from editor.ui.intake_worker import IntakeWorker

        shown_on = []

        def fake_ask(request, parent=None):
            shown_on.append(threading.get_ident())
            return request.decide("shirts", False)

        monkeypatch.setattr(project_setup_dialog.ProjectSetupDialog, "ask", staticmethod(fake_ask))
        confirmer = project_setup_dialog.QtConfirmer()
        request = ProjectSetupRequest.for_open_addon(ProjectIdentitySuggestion("tshirt", 1, 1))
        decisions = []

        async def operation():
            decisions.append(confirmer.confirm(request))
            return IntakeOutcome(IntakeStatus.SUCCESS)

        worker = IntakeWorker(operation)
        worker.start()

        assert wait_for(qapp, worker)
        assert shown_on == [threading.main_thread().ident]
        assert decisions[0].confirmed
        assert decisions[0].project_name == "shirts"

    def test_direct_call_on_gui_thread(self, qapp, monkeypatch):
        from clothtool.identity import ProjectIdentitySuggestion
        from clothtool.setup_decision import ProjectSetupRequest
        from editor.ui import project_setup_dialog

        monkeypatch.setattr(
            project_setup_dialog.ProjectSetupDialog, "ask",
            staticmethod(lambda request, parent=None: request.decide("tshirt", True)),
        )
        confirmer = project_setup_dialog.QtConfirmer()
        request = ProjectSetupRequest.for_open_addon(ProjectIdentitySuggestion("tshirt", 1, 1))

        decision = confirmer.confirm(request)
        assert decision.confirmed
        assert decision.is_self_contained is True
