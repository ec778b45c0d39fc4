from __future__ import annotations

import logging
import sys

from PySide6.QtWidgets import QApplication

from clothtool import config as config_io
from clothtool.staging import cleanup_all
from editor.ui.main_window import MainWindow


def run(argv: list[str] | None = None) -> int:
    argv = argv or sys.argv
    cfg = config_io.load_config()
    logging.basicConfig(level=getattr(logging, str(cfg.get("log_level", "INFO")).upper(), logging.INFO))
    # leftovers from the previous session
    cleanup_all(config_io.temp_root(cfg))
    app = QApplication(argv)
    win = MainWindow(temp_root=config_io.temp_root(cfg), projects_folder=config_io.projects_folder(cfg))
    win.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(run())
