"""
Project Archiver - 项目打包

A project file (``.gctproject``) is a ZIP archive of a built project tree
with the whole byte stream passed through the XOR obfuscation::

    build/                      project.gctproject
    ├── mp_m_freemode_01_x.meta   ->  xor(zip(build/))
    └── stream/...

Export and import both go through a temporary ``.zip``; it is always
removed, and a failed step never leaves half-written output behind.
"""
from __future__ import annotations

import asyncio
import logging
import os
import shutil
import tempfile
import zipfile
import zlib
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Optional

from .errors import ArchiveError, CorruptArchiveError
from .obfuscation import OBFUSCATION_KEY, xor_file

logger = logging.getLogger(__name__)

PROJECT_EXTENSION = ".gctproject"
# 交换格式, 速度优先
FASTEST_COMPRESSION = 1


def _safe_member_name(name: str) -> bool:
    p = PurePosixPath(name.replace("\\", "/"))
    if p.is_absolute() or not p.parts:
        return False
    if ".." in p.parts:
        return False
    return not p.parts[0].endswith(":")


def _remove_quietly(path: Path) -> None:
    try:
        if path.is_dir():
            shutil.rmtree(path)
        elif path.exists():
            path.unlink()
    except OSError as e:
        logger.warning(f"Could not remove temporary {path}: {e}")


class ProjectArchiver:
    """
    Directory <-> obfuscated archive file.

    Usage:
        archiver = ProjectArchiver()
        archiver.export(Path("build/my_addon"), Path("my_addon.gctproject"))
        archiver.import_archive(Path("my_addon.gctproject"), Path("restored"))
    """

    def __init__(
        self,
        key: bytes = OBFUSCATION_KEY,
        compresslevel: int = FASTEST_COMPRESSION,
        work_dir: Optional[Path] = None,
    ):
        self.key = key
        self.compresslevel = compresslevel
        self.work_dir = Path(work_dir) if work_dir else None

    def _temp_dir(self, work_dir: Optional[Path] = None) -> Path:
        base = Path(work_dir) if work_dir else (self.work_dir or Path(tempfile.gettempdir()))
        base.mkdir(parents=True, exist_ok=True)
        return Path(tempfile.mkdtemp(prefix="gct_", dir=base))

    # ------------------------------------------------------------------
    # export
    # ------------------------------------------------------------------

    def _write_zip(self, source_dir: Path, zip_path: Path, exclude: Iterable[Path] = ()) -> int:
        # the output and work files may live inside the tree being packed
        skip = {Path(p).resolve() for p in exclude}
        count = 0
        with zipfile.ZipFile(
            zip_path,
            "w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=self.compresslevel,
            strict_timestamps=False,
        ) as zf:
            for dirpath, dirnames, filenames in os.walk(source_dir):
                base = Path(dirpath)
                rel_dir = base.relative_to(source_dir)
                # 保留空目录
                if not dirnames and not filenames and rel_dir != Path("."):
                    zf.writestr(rel_dir.as_posix() + "/", b"")
                dirnames[:] = sorted(d for d in dirnames if (base / d).resolve() not in skip)
                filenames = [f for f in filenames if (base / f).resolve() not in skip]
                for filename in sorted(filenames):
                    file_path = base / filename
                    zf.write(file_path, (rel_dir / filename).as_posix())
                    count += 1
        return count

    def export(
        self, source_directory: Path, destination_file: Path, work_dir: Optional[Path] = None
    ) -> Path:
        source_directory = Path(source_directory)
        destination_file = Path(destination_file)
        if not source_directory.is_dir():
            raise ArchiveError("Source directory does not exist", source_directory)

        destination_file.parent.mkdir(parents=True, exist_ok=True)
        tmp_dir = self._temp_dir(work_dir)
        zip_path = tmp_dir / f"{destination_file.stem}.zip"
        partial = destination_file.with_name(destination_file.name + ".part")
        try:
            count = self._write_zip(source_directory, zip_path, exclude=(tmp_dir, destination_file, partial))
            xor_file(zip_path, partial, self.key)
            os.replace(partial, destination_file)
        except (OSError, zipfile.BadZipFile) as e:
            _remove_quietly(partial)
            raise ArchiveError(f"Export failed: {e}", destination_file) from e
        finally:
            _remove_quietly(tmp_dir)

        logger.info(f"Exported {count} file(s) from {source_directory} to {destination_file}")
        return destination_file

    # ------------------------------------------------------------------
    # import
    # ------------------------------------------------------------------

    def _check_archive(self, zip_path: Path, source_file: Path) -> None:
        if not zipfile.is_zipfile(zip_path):
            raise CorruptArchiveError("Not a valid project file", source_file)
        try:
            with zipfile.ZipFile(zip_path) as zf:
                bad = zf.testzip()
                names = zf.namelist()
        except (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError) as e:
            raise CorruptArchiveError(f"Project file is corrupted: {e}", source_file) from e
        if bad is not None:
            raise CorruptArchiveError(f"Project file is corrupted at entry {bad!r}", source_file)
        unsafe = [n for n in names if not _safe_member_name(n)]
        if unsafe:
            raise CorruptArchiveError(f"Project file has unsafe entry {unsafe[0]!r}", source_file)

    def import_archive(
        self, source_file: Path, destination_directory: Path, work_dir: Optional[Path] = None
    ) -> List[Path]:
        """Unpack ``source_file`` into ``destination_directory``.

        The archive is decoded, verified and extracted in a private temporary
        directory first; the destination is only touched once everything
        succeeded. Returns the top-level entries created in the destination.
        """
        source_file = Path(source_file)
        destination_directory = Path(destination_directory)
        if not source_file.is_file():
            raise ArchiveError("Project file does not exist", source_file)

        tmp_dir = self._temp_dir(work_dir)
        zip_path = tmp_dir / f"{source_file.stem}.zip"
        extract_dir = tmp_dir / "extracted"
        try:
            xor_file(source_file, zip_path, self.key)
            self._check_archive(zip_path, source_file)
            try:
                with zipfile.ZipFile(zip_path) as zf:
                    zf.extractall(extract_dir)
            except (zipfile.BadZipFile, zlib.error, EOFError) as e:
                raise CorruptArchiveError(f"Project file is corrupted: {e}", source_file) from e
            _remove_quietly(zip_path)

            extract_dir.mkdir(exist_ok=True)
            entries = sorted(extract_dir.iterdir())
            destination_directory.mkdir(parents=True, exist_ok=True)
            clashes = [e.name for e in entries if (destination_directory / e.name).exists()]
            if clashes:
                raise ArchiveError(f"Destination already contains {clashes[0]!r}", destination_directory)
            moved: List[Path] = []
            for entry in entries:
                target = destination_directory / entry.name
                shutil.move(str(entry), str(target))
                moved.append(target)
        except OSError as e:
            raise ArchiveError(f"Import failed: {e}", source_file) from e
        finally:
            _remove_quietly(tmp_dir)

        logger.info(f"Imported {source_file} into {destination_directory}")
        return moved

    async def export_async(
        self, source_directory: Path, destination_file: Path, work_dir: Optional[Path] = None
    ) -> Path:
        return await asyncio.to_thread(self.export, source_directory, destination_file, work_dir)

    async def import_archive_async(
        self, source_file: Path, destination_directory: Path, work_dir: Optional[Path] = None
    ) -> List[Path]:
        return await asyncio.to_thread(self.import_archive, source_file, destination_directory, work_dir)


def with_project_extension(path: Path) -> Path:
    path = Path(path)
    return path if path.suffix else path.with_suffix(PROJECT_EXTENSION)


def export_project(source_directory: Path, destination_file: Path) -> Path:
    return ProjectArchiver().export(source_directory, destination_file)


def import_project(source_file: Path, destination_directory: Path) -> List[Path]:
    return ProjectArchiver().import_archive(source_file, destination_directory)
