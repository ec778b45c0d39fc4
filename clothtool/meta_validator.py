"""Descriptor (.meta) validation.

A descriptor is accepted when one of its first two lines carries the
``ShopPedApparel`` marker. Everything after line two is left to the addon
loader.
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

import aiofiles

logger = logging.getLogger(__name__)

MARKER = "ShopPedApparel"
HEADER_LINES = 2


def header_is_valid(lines: Sequence[Optional[str]]) -> bool:
    return any(line is not None and MARKER in line for line in lines[:HEADER_LINES])


def read_header(path: Path) -> List[str]:
    lines: List[str] = []
    with open(path, "r", encoding="utf-8") as f:
        for _ in range(HEADER_LINES):
            line = f.readline()
            if not line:
                break
            lines.append(line)
    return lines


async def read_header_async(path: Path) -> List[str]:
    lines: List[str] = []
    async with aiofiles.open(path, mode="r", encoding="utf-8") as f:
        for _ in range(HEADER_LINES):
            line = await f.readline()
            if not line:
                break
            lines.append(line)
    return lines


def validate(path: Path) -> bool:
    path = Path(path)
    try:
        lines = read_header(path)
    except (OSError, UnicodeDecodeError) as e:
        logger.info(f"Skipped file {path}: cannot read header ({e})")
        return False
    if not header_is_valid(lines):
        logger.info(f"Skipped file {path} as it is probably not a correct .meta file")
        return False
    return True


async def validate_async(path: Path) -> bool:
    path = Path(path)
    try:
        lines = await read_header_async(path)
    except (OSError, UnicodeDecodeError) as e:
        logger.info(f"Skipped file {path}: cannot read header ({e})")
        return False
    if not header_is_valid(lines):
        logger.info(f"Skipped file {path} as it is probably not a correct .meta file")
        return False
    return True


def filter_valid(paths: Iterable[Path]) -> Tuple[List[Path], List[Path]]:
    """Split ``paths`` into (valid, skipped), keeping the input order."""
    valid: List[Path] = []
    skipped: List[Path] = []
    for p in paths:
        p = Path(p)
        (valid if validate(p) else skipped).append(p)
    return valid, skipped


async def filter_valid_async(paths: Iterable[Path]) -> Tuple[List[Path], List[Path]]:
    candidates = [Path(p) for p in paths]
    results = await asyncio.gather(*(validate_async(p) for p in candidates))
    valid = [p for p, ok in zip(candidates, results) if ok]
    skipped = [p for p, ok in zip(candidates, results) if not ok]
    return valid, skipped


__all__ = [
    "MARKER",
    "header_is_valid",
    "validate",
    "validate_async",
    "filter_valid",
    "filter_valid_async",
]
