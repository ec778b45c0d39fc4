"""Addon identity: short names from descriptor file names and the merged
project name suggested to the user."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List

# first match wins
NAME_PREFIXES = (
    "mp_m_freemode_01_",
    "mp_f_freemode_01_",
    "mp_m_",
    "mp_f_",
)

MIN_PREFIX_LENGTH = 3


@dataclass(frozen=True)
class AddonIdentity:
    short_name: str
    source_file_name: str


def extract_short_name(stem: str) -> str:
    lowered = stem.lower()
    for prefix in NAME_PREFIXES:
        if lowered.startswith(prefix):
            # a bare prefix ("mp_m_") has no short name of its own
            return stem[len(prefix):] or stem
    return stem


def identity_for(path: Path) -> AddonIdentity:
    path = Path(path)
    return AddonIdentity(short_name=extract_short_name(path.stem), source_file_name=path.name)


def unique_names(names: Iterable[str]) -> List[str]:
    """Case-insensitive de-duplication; the first spelling seen is kept."""
    seen = set()
    out: List[str] = []
    for name in names:
        key = name.lower()
        if key in seen:
            continue
        seen.add(key)
        out.append(name)
    return out


def find_common_prefix(strings: List[str]) -> str:
    if not strings:
        return ""
    prefix = strings[0]
    for s in strings[1:]:
        while not s.lower().startswith(prefix.lower()):
            prefix = prefix[:-1]
            if not prefix:
                return ""
    return prefix


def suggest_project_name(names: Iterable[str]) -> str:
    distinct = unique_names(names)
    if not distinct:
        return ""
    if len(distinct) == 1:
        return distinct[0]
    prefix = find_common_prefix(distinct).rstrip("_")
    if len(prefix) >= MIN_PREFIX_LENGTH:
        return prefix
    return distinct[0]


@dataclass
class ProjectIdentitySuggestion:
    suggested_name: str
    drawable_count: int = 0
    descriptor_count: int = 0

    @classmethod
    def from_counts(cls, identities: Iterable[AddonIdentity], counts: Iterable[int]) -> "ProjectIdentitySuggestion":
        identities = list(identities)
        return cls(
            suggested_name=suggest_project_name(i.short_name for i in identities),
            drawable_count=sum(counts),
            descriptor_count=len(identities),
        )


__all__ = [
    "AddonIdentity",
    "ProjectIdentitySuggestion",
    "extract_short_name",
    "identity_for",
    "find_common_prefix",
    "suggest_project_name",
]
