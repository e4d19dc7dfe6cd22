from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from ..assets.staging import StagedFile
from ..lib.assets import find_files, install_flat
from ..pipeline import StepContext

logger = logging.getLogger(__name__)

WALLPAPER_EXTENSIONS = (".jpg", ".jpeg", ".jfif", ".png", ".webp", ".bmp", ".tif", ".tiff")
BACKGROUND_SCHEMA = "org.gnome.desktop.background"


def pick_wallpapers(dest: Path, staged: List[StagedFile], light: str, dark: str) -> tuple[Optional[Path], Optional[Path]]:
    """Choose light/dark wallpapers.

    Windows 11 ships img0.jpg (light) and img19.jpg (dark). When those are
    absent, fall back to the first and last file in sorted source order. That
    fallback is a heuristic: nothing guarantees the first file is actually a
    light image.
    """

    if not staged:
        return None, None
    light_path = dest / light
    dark_path = dest / dark
    if not light_path.exists():
        light_path = staged[0].destination
        logger.warning("%s not found; using %s as light wallpaper.", light, light_path.name)
    if not dark_path.exists():
        dark_path = staged[-1].destination
        logger.warning("%s not found; using %s as dark wallpaper.", dark, dark_path.name)
    return light_path, dark_path


class InstallWallpapersStep:
    step_id = "08_wallpapers"
    number = 8
    name = "wallpapers"
    title = "Install wallpapers + set background"

    def run(self, ctx: StepContext) -> None:
        src = ctx.config.assets_dir / "Wallpaper"
        dst = ctx.config.wallpapers_destination
        if not src.is_dir():
            logger.warning("Source not found: %s", src)
            return

        files = find_files(src, WALLPAPER_EXTENSIONS, recursive=False)
        if not files:
            logger.warning("No image files found in: %s", src)
            return

        staged = install_flat(ctx.system, files, dst)
        logger.info("Installed %d wallpapers to %s.", sum(1 for s in staged if s.copied), dst)

        light, dark = pick_wallpapers(dst, staged, ctx.config.wallpaper_light, ctx.config.wallpaper_dark)
        if light is None or dark is None:
            return

        gs = ctx.gsettings
        if not gs.available():
            logger.warning("gsettings not available; skipped setting GNOME backgrounds.")
            return
        gs.ensure(BACKGROUND_SCHEMA, "picture-uri", light.absolute().as_uri())
        gs.ensure(BACKGROUND_SCHEMA, "picture-uri-dark", dark.absolute().as_uri())
        gs.ensure(BACKGROUND_SCHEMA, "picture-options", "zoom")
        logger.info("GNOME wallpapers set: light -> %s, dark -> %s.", light.name, dark.name)
