from __future__ import annotations

import logging
import tempfile
import zipfile
from pathlib import Path

import requests

from .. import __version__

logger = logging.getLogger(__name__)

USER_AGENT = f"trixie-postinstall/{__version__}"


def download_file(url: str, dest: str | Path, *, timeout: float = 60.0, chunk_size: int = 1 << 16) -> Path:
    """Stream url into dest. The file only appears once the download is complete."""

    target = Path(dest)
    target.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Downloading %s -> %s", url, target)

    with tempfile.NamedTemporaryFile(dir=target.parent, delete=False, suffix=".part") as tmp:
        tmp_path = Path(tmp.name)

    try:
        with requests.get(url, stream=True, timeout=timeout, headers={"User-Agent": USER_AGENT}) as response:
            response.raise_for_status()
            size = 0
            with tmp_path.open("wb") as f:
                for chunk in response.iter_content(chunk_size=chunk_size):
                    if chunk:
                        f.write(chunk)
                        size += len(chunk)
        tmp_path.replace(target)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

    logger.info("Downloaded %d bytes", size)
    return target


def extract_zip(archive: str | Path, out_dir: str | Path) -> Path:
    """Extract archive and return its single top-level directory (or out_dir)."""

    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(archive) as zf:
        zf.extractall(out)

    children = [c for c in out.iterdir()]
    dirs = [c for c in children if c.is_dir()]
    if len(children) == 1 and dirs:
        return dirs[0]
    return out
