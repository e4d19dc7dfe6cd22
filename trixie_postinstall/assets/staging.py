from __future__ import annotations

import filecmp
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .names import resolve_collision_free, sanitize_base_name

logger = logging.getLogger(__name__)

CopyFn = Callable[[Path, Path], None]


@dataclass(frozen=True)
class StagedAsset:
    """One file on its way into a flat destination folder."""

    source: Path
    base_name: str
    extension: str

    @classmethod
    def for_source(cls, source: str | Path, base_name: Optional[str] = None) -> "StagedAsset":
        src = Path(source)
        return cls(
            source=src,
            base_name=sanitize_base_name(base_name if base_name is not None else src.stem),
            extension=src.suffix,
        )

    @property
    def file_name(self) -> str:
        return f"{self.base_name}{self.extension}"


@dataclass(frozen=True)
class StagedFile:
    source: Path
    destination: Path
    copied: bool


def _copy_bytes(src: Path, dst: Path) -> None:
    shutil.copyfile(src, dst)


def _discard_partial(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove partial copy %s: %s", path, e)


def _same_content(a: Path, b: Path) -> bool:
    try:
        return b.is_file() and filecmp.cmp(a, b, shallow=False)
    except OSError:
        return False


def stage_file(
    asset: StagedAsset,
    dest_dir: str | Path,
    *,
    copy: Optional[CopyFn] = None,
    skip_identical: bool = False,
) -> StagedFile:
    """Copy one asset into dest_dir without ever overwriting an existing file.

    With skip_identical, a destination that already holds the same bytes under
    the preferred name counts as done, so repeated installs converge instead
    of accumulating -1, -2 copies. OSError from the copy propagates; whatever
    the failed copy left at the destination is removed first.
    """

    d = Path(dest_dir)
    if skip_identical:
        preferred = d / asset.file_name
        if _same_content(asset.source, preferred):
            logger.debug("Already staged: %s", preferred)
            return StagedFile(source=asset.source, destination=preferred, copied=False)

    dst = resolve_collision_free(d, asset.base_name, asset.extension)
    try:
        (copy or _copy_bytes)(asset.source, dst)
    except BaseException:
        _discard_partial(dst)
        raise
    logger.debug("Staged %s -> %s", asset.source, dst)
    return StagedFile(source=asset.source, destination=dst, copied=True)
