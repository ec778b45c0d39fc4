from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

CONFIG_ENV = "CLOTHTOOL_CONFIG"

DEFAULTS = {
    "projects_folder": "",
    "temp_root": "",
    "log_level": "INFO",
}


def config_path() -> Path:
    override = os.environ.get(CONFIG_ENV)
    if override:
        return Path(override)
    return Path.home() / ".clothtool" / "config.json"


def load_config(path: Optional[Path] = None) -> dict:
    p = Path(path) if path else config_path()
    cfg = dict(DEFAULTS)
    if not p.exists():
        return cfg
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable config {p}: {e}")
        return cfg
    if isinstance(data, dict):
        # known keys only
        cfg.update({k: v for k, v in data.items() if k in DEFAULTS})
    return cfg


def save_config(cfg: dict, path: Optional[Path] = None) -> bool:
    p = Path(path) if path else config_path()
    data = dict(DEFAULTS)
    data.update({k: v for k, v in cfg.items() if k in DEFAULTS})
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    except OSError as e:
        logger.error(f"Failed to save config {p}: {e}")
        return False
    return True


def _optional_path(value) -> Optional[Path]:
    if isinstance(value, str) and value.strip():
        return Path(value).expanduser()
    return None


def projects_folder(cfg: dict) -> Optional[Path]:
    return _optional_path(cfg.get("projects_folder"))


def temp_root(cfg: dict) -> Optional[Path]:
    return _optional_path(cfg.get("temp_root"))
