"""Collision-safe destination names for flat output folders.

Two operations:
- sanitize_base_name: turn an arbitrary display name into a file name that is
  valid on NTFS/FAT as well as ext4 (the collector writes on Windows, the
  provisioner reads on Linux)
- resolve_collision_free: pick ``base.ext`` or the first free ``base-N.ext``

Neither function copies anything. Resolution is not atomic; a single writer
per destination folder is assumed.
"""

from __future__ import annotations

import re
import unicodedata
from pathlib import Path

PLACEHOLDER_NAME = "Unnamed"
MAX_BASE_NAME_LENGTH = 240

# Reserved on Windows; "/" and "\" double as path separators everywhere.
FORBIDDEN_CHARS = frozenset('<>:"/\\|?*')

_WHITESPACE = re.compile(r"\s+")


def _strip_trailing(name: str) -> str:
    return name.rstrip(". ")


def sanitize_base_name(name: str) -> str:
    # Cc covers C0/C1 controls, Cf covers bidi overrides/isolates and other
    # invisible format characters.
    kept = "".join(
        ch
        for ch in name
        if unicodedata.category(ch) not in {"Cc", "Cf"} and ch not in FORBIDDEN_CHARS
    )
    out = _strip_trailing(_WHITESPACE.sub(" ", kept).strip())
    if len(out) > MAX_BASE_NAME_LENGTH:
        out = _strip_trailing(out[:MAX_BASE_NAME_LENGTH])
    return out or PLACEHOLDER_NAME


def resolve_collision_free(directory: str | Path, base_name: str, extension: str) -> Path:
    """Return a path in directory that does not exist right now.

    extension includes its leading dot (or is empty) and is kept verbatim.
    The directory is created when missing.
    """

    d = Path(directory)
    d.mkdir(parents=True, exist_ok=True)

    base = sanitize_base_name(base_name)
    candidate = d / f"{base}{extension}"
    n = 0
    while candidate.exists():
        n += 1
        candidate = d / f"{base}-{n}{extension}"
    return candidate
