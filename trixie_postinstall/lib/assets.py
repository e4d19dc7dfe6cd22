from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Sequence

from ..assets.staging import StagedAsset, StagedFile, stage_file
from .system import System

logger = logging.getLogger(__name__)


def find_files(src: str | Path, extensions: Iterable[str], *, recursive: bool) -> List[Path]:
    """Sorted files under src whose extension matches (case-insensitive)."""

    s = Path(src)
    exts = {e.lower() for e in extensions}
    candidates = s.rglob("*") if recursive else s.iterdir()
    return sorted(p for p in candidates if p.is_file() and p.suffix.lower() in exts)


def install_flat(system: System, files: Sequence[Path], dst: str | Path, *, mode: str = "0644") -> List[StagedFile]:
    """Copy files into a root-owned flat folder, never overwriting.

    A file already present with identical bytes is left alone, so running the
    same install twice does not produce -1 copies. Per-file failures are
    logged and skipped.
    """

    d = Path(dst)
    if not d.is_dir():
        system.make_dirs(d)
        if system.dry_run:
            for f in files:
                logger.info("Would install %s -> %s", f, d)
            return []

    out: List[StagedFile] = []
    for f in files:
        asset = StagedAsset.for_source(f)
        try:
            staged = stage_file(
                asset,
                d,
                copy=lambda s, t: system.install_file(s, t, mode=mode),
                skip_identical=True,
            )
        except (OSError, RuntimeError) as e:
            logger.warning("Could not install %s into %s: %s", f, d, e)
            continue
        out.append(staged)
    return out
