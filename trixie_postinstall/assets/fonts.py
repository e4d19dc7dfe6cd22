"""Human-readable names for font files, derived from their name tables.

Cloud font caches store files under opaque identifiers, so the collector
renames them ``Family-Face.ext``. Metadata comes from fontTools; any failure
to read it is an expected outcome and yields ``None``, in which case the
original file name is used instead.
"""

from __future__ import annotations

import importlib.util
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from .names import sanitize_base_name

logger = logging.getLogger(__name__)

# OpenType name IDs
FAMILY = 1
SUBFAMILY = 2
TYPO_FAMILY = 16
TYPO_SUBFAMILY = 17

WINDOWS_PLATFORM = 3
WINDOWS_EN_US = 0x409

GENERIC_STYLES = frozenset({"regular", "italic", "bold", "bold italic", "normal"})
BOLD_WEIGHT = 700


@dataclass(frozen=True)
class FontDescriptor:
    family: str
    face_label: Optional[str] = None


def metadata_available() -> bool:
    """Can font name tables be read on this system?"""

    return importlib.util.find_spec("fontTools") is not None


def canonical_face(weight: int, italic: bool) -> str:
    bold = weight >= BOLD_WEIGHT
    if bold and italic:
        return "BoldItalic"
    if bold:
        return "Bold"
    if italic:
        return "Italic"
    return "Regular"


def normalize_face_label(raw_style: Optional[str], weight: int = 400, italic: bool = False) -> str:
    """Map a font's style string to the label used in exported file names.

    Generic styles carry no more information than weight and slant, so they
    are re-derived from those into Regular/Bold/Italic/BoldItalic. Named
    styles (Semibold, Light Condensed, ...) are kept, whitespace-normalized.
    """

    style = " ".join((raw_style or "").split())
    if not style or style.lower() in GENERIC_STYLES:
        return canonical_face(weight, italic)
    return style.replace("Bold Italic", "BoldItalic")


def _pick_name(name_table, name_ids: Iterable[int]) -> Optional[str]:
    records = list(name_table.names)

    def decoded(rec) -> Optional[str]:
        try:
            s = rec.toUnicode().strip()
        except (UnicodeDecodeError, ValueError):
            return None
        return s or None

    # Windows/en-US first: that is the name the OS itself shows.
    for name_id in name_ids:
        for rec in records:
            if rec.nameID == name_id and rec.platformID == WINDOWS_PLATFORM and rec.langID == WINDOWS_EN_US:
                s = decoded(rec)
                if s:
                    return s
    # Then any platform/language.
    for name_id in name_ids:
        for rec in records:
            if rec.nameID == name_id:
                s = decoded(rec)
                if s:
                    return s
    return None


def read_font_descriptor(path: str | Path) -> Optional[FontDescriptor]:
    """Read family and face label from a TrueType/OpenType file.

    Returns None when the file has no usable names or fontTools is missing.
    """

    try:
        from fontTools.ttLib import TTFont

        with TTFont(str(path), lazy=True) as font:
            if "name" not in font:
                return None
            names = font["name"]
            family = _pick_name(names, (FAMILY, TYPO_FAMILY))
            if not family:
                return None
            raw_style = _pick_name(names, (SUBFAMILY, TYPO_SUBFAMILY))

            weight = 400
            italic = False
            if "OS/2" in font:
                os2 = font["OS/2"]
                weight = int(getattr(os2, "usWeightClass", 400) or 400)
                italic = bool(getattr(os2, "fsSelection", 0) & 0x01)
            elif "head" in font:
                italic = bool(font["head"].macStyle & 0x02)
    except Exception as e:
        logger.debug("No font metadata for %s: %s", path, e)
        return None

    return FontDescriptor(family=family, face_label=normalize_face_label(raw_style, weight, italic))


def derive_font_base_name(path: str | Path, descriptor: Optional[FontDescriptor]) -> str:
    if descriptor is None:
        return sanitize_base_name(Path(path).stem)
    face = descriptor.face_label
    if not face or face == "Regular":
        face = "Regular"
    return sanitize_base_name(f"{descriptor.family}-{face}")
