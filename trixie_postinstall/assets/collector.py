"""Export fonts, wallpapers and the account picture from a Windows install.

Output layout (consumed by the provisioning steps)::

    <output>/Fonts/Cloud Fonts/*.{ttf,otf}
    <output>/Fonts/Windows Fonts/*.{ttf,otf,ttc,otc,fon,fnt}
    <output>/Wallpaper/*.{jpg,jpeg,png,bmp,jfif,webp}
    <output>/User Profile Photo/user.png

Every leaf folder is flat and names are unique. Sources are only read.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from .fonts import derive_font_base_name, read_font_descriptor
from .fonts import metadata_available as font_metadata_available
from .staging import StagedAsset, StagedFile, stage_file

logger = logging.getLogger(__name__)

NAMING_FONT_METADATA = "font-metadata"
NAMING_FILENAME = "filename"

CLOUD_FONT_EXTENSIONS = frozenset({".ttf", ".otf"})
WINDOWS_FONT_EXTENSIONS = frozenset({".ttf", ".otf", ".ttc", ".otc", ".fon", ".fnt"})
WALLPAPER_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".bmp", ".jfif", ".webp"})


@dataclass(frozen=True)
class Category:
    name: str
    sources: Tuple[Path, ...]
    destination: str
    extensions: frozenset
    recursive: bool
    naming: str = NAMING_FILENAME
    # Restrict to these file names (case-insensitive); empty means any.
    file_names: frozenset = frozenset()

    def accepts(self, path: Path) -> bool:
        if path.suffix.lower() not in self.extensions:
            return False
        return not self.file_names or path.name.lower() in self.file_names


@dataclass
class CategoryReport:
    category: str
    copied: List[StagedFile] = field(default_factory=list)
    failed: List[Tuple[Path, str]] = field(default_factory=list)
    missing_sources: List[Path] = field(default_factory=list)

    @property
    def skipped(self) -> bool:
        return not self.copied and not self.failed and bool(self.missing_sources)


def _env_path(env: Mapping[str, str], var: str, default: str) -> Path:
    return Path(env.get(var) or default)


def default_categories(env: Optional[Mapping[str, str]] = None) -> List[Category]:
    """Standard Windows 10/11 locations, resolved from the environment."""

    env = os.environ if env is None else env
    windir = _env_path(env, "WINDIR", r"C:\Windows")
    local = _env_path(env, "LOCALAPPDATA", str(Path.home() / "AppData" / "Local"))
    programdata = _env_path(env, "PROGRAMDATA", r"C:\ProgramData")

    return [
        Category(
            name="cloud-fonts",
            sources=(local / "Microsoft" / "FontCache" / "4" / "CloudFonts",),
            destination="Fonts/Cloud Fonts",
            extensions=CLOUD_FONT_EXTENSIONS,
            recursive=True,
            naming=NAMING_FONT_METADATA,
        ),
        Category(
            name="windows-fonts",
            sources=(windir / "Fonts", local / "Microsoft" / "Windows" / "Fonts"),
            destination="Fonts/Windows Fonts",
            extensions=WINDOWS_FONT_EXTENSIONS,
            recursive=False,
        ),
        Category(
            name="wallpapers",
            sources=(windir / "Web",),
            destination="Wallpaper",
            extensions=WALLPAPER_EXTENSIONS,
            recursive=True,
        ),
        Category(
            name="profile-photo",
            sources=(programdata / "Microsoft" / "User Account Pictures",),
            destination="User Profile Photo",
            extensions=frozenset({".png"}),
            recursive=False,
            file_names=frozenset({"user.png"}),
        ),
    ]


def with_source_overrides(categories: Sequence[Category], overrides: Mapping[str, Sequence[str]]) -> List[Category]:
    out = []
    for c in categories:
        if c.name in overrides:
            c = replace(c, sources=tuple(Path(s) for s in overrides[c.name]))
        out.append(c)
    return out


def iter_eligible(root: Path, category: Category) -> Iterator[Path]:
    """Yield matching files under root in a stable order."""

    if category.recursive:
        candidates: Iterable[Path] = root.rglob("*")
    else:
        candidates = root.iterdir()
    for p in sorted(candidates, key=lambda x: str(x).lower()):
        if p.is_file() and category.accepts(p):
            yield p


class AssetCollector:
    """Copy eligible files from each category's sources into output_root.

    metadata_available is checked once here (is fontTools importable) unless
    given; without it cloud fonts keep their original file names.
    """

    def __init__(self, output_root: str | Path, *, metadata_available: Optional[bool] = None) -> None:
        self.output_root = Path(output_root)
        if metadata_available is None:
            metadata_available = font_metadata_available()
        self.metadata_available = metadata_available
        if not self.metadata_available:
            logger.warning("Font metadata unavailable; cloud fonts keep their cache file names")

    def base_name_for(self, path: Path, category: Category) -> str:
        if category.naming == NAMING_FONT_METADATA and self.metadata_available:
            descriptor = read_font_descriptor(path)
            if descriptor is None:
                logger.warning("No usable font metadata in %s; keeping its file name", path)
            return derive_font_base_name(path, descriptor)
        return derive_font_base_name(path, None)

    def collect_category(self, category: Category) -> CategoryReport:
        report = CategoryReport(category=category.name)
        dest_dir = self.output_root / category.destination

        for root in category.sources:
            if not root.is_dir():
                logger.warning("Source not found: %s (skipping %s)", root, category.name)
                report.missing_sources.append(root)
                continue

            logger.info("Collecting %s from %s", category.name, root)
            try:
                files = list(iter_eligible(root, category))
            except OSError as e:
                logger.warning("Cannot list %s: %s", root, e)
                report.failed.append((root, str(e)))
                continue

            for src in files:
                asset = StagedAsset.for_source(src, self.base_name_for(src, category))
                try:
                    report.copied.append(stage_file(asset, dest_dir))
                except OSError as e:
                    logger.warning("Copy failed: %s -> %s/%s: %s", src, dest_dir, asset.file_name, e)
                    report.failed.append((src, str(e)))

        logger.info(
            "%s: %d copied, %d failed",
            category.name,
            len(report.copied),
            len(report.failed),
        )
        return report

    def collect_all(self, categories: Sequence[Category]) -> Dict[str, CategoryReport]:
        return {c.name: self.collect_category(c) for c in categories}