from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from PySide6.QtCore import QObject, QThread, Signal

from clothtool.intake import IntakeOutcome

logger = logging.getLogger(__name__)


class IntakeWorker(QThread):
    """Runs one workflow coroutine on its own event loop, off the GUI thread."""

    outcome_ready = Signal(object)
    failed = Signal(str)

    def __init__(self, make_coro: Callable[[], Awaitable[IntakeOutcome]], parent: Optional[QObject] = None):
        super().__init__(parent)
        self._make_coro = make_coro

    def run(self) -> None:
        try:
            outcome = asyncio.run(self._make_coro())
        except Exception as e:
            logger.exception("Project operation failed")
            self.failed.emit(str(e))
            return
        self.outcome_ready.emit(outcome)
