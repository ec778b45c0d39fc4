"""
Drawable Counter - 模型文件统计

A descriptor such as ``mp_m_freemode_01_tshirt.meta`` owns every ``.ydd``
below its directory whose name looks like::

    mp_m_freemode_01[_p]_<anything>tshirt^<trailer>.ydd

Matching is case-insensitive.
"""
from __future__ import annotations

import asyncio
import logging
import os
import re
from pathlib import Path
from typing import List, Pattern

logger = logging.getLogger(__name__)

MALE_TOKEN = "mp_m_freemode_01"
FEMALE_TOKEN = "mp_f_freemode_01"
DRAWABLE_EXTENSION = ".ydd"


def gender_token_for(stem: str) -> str:
    # 只有两种性别: 不是男性即视为女性
    if MALE_TOKEN in stem.lower():
        return MALE_TOKEN
    return FEMALE_TOKEN


def name_without_gender(stem: str) -> str:
    token = gender_token_for(stem)
    return re.sub(re.escape(token), "", stem, flags=re.IGNORECASE).lstrip("_")


def drawable_pattern(stem: str) -> Pattern[str]:
    token = gender_token_for(stem)
    name = name_without_gender(stem)
    return re.compile(rf"^{re.escape(token)}(_p)?.*?{re.escape(name)}\^", re.IGNORECASE)


def _raise(err: OSError) -> None:
    raise err


def iter_drawable_files(root: Path):
    for dirpath, _dirnames, filenames in os.walk(root, onerror=_raise):
        for filename in filenames:
            if filename.lower().endswith(DRAWABLE_EXTENSION):
                yield Path(dirpath) / filename


def find_drawables(descriptor_path: Path) -> List[Path]:
    """Return the drawable files belonging to ``descriptor_path``, sorted.

    Filesystem errors while walking the descriptor's directory are logged
    and yield an empty list for this descriptor only.
    """
    descriptor_path = Path(descriptor_path)
    pattern = drawable_pattern(descriptor_path.stem)
    root = descriptor_path.parent
    try:
        matches = [p for p in iter_drawable_files(root) if pattern.match(p.name)]
    except OSError as e:
        logger.warning(f"Drawable search failed for {descriptor_path}: {e}")
        return []
    return sorted(matches)


def count_drawables(descriptor_path: Path) -> int:
    return len(find_drawables(descriptor_path))


async def find_drawables_async(descriptor_path: Path) -> List[Path]:
    return await asyncio.to_thread(find_drawables, descriptor_path)


async def count_drawables_async(descriptor_path: Path) -> int:
    return len(await find_drawables_async(descriptor_path))


__all__ = [
    "MALE_TOKEN",
    "FEMALE_TOKEN",
    "gender_token_for",
    "name_without_gender",
    "drawable_pattern",
    "find_drawables",
    "count_drawables",
    "find_drawables_async",
    "count_drawables_async",
]
