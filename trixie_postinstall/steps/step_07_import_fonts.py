from __future__ import annotations

import logging

from ..lib.assets import find_files, install_flat
from ..pipeline import StepContext

logger = logging.getLogger(__name__)

FONT_EXTENSIONS = (".ttf", ".otf", ".ttc", ".otc", ".fnt", ".fon")

# (folder under <assets>/Fonts, folder under the system font dir)
FONT_SETS = (
    ("Cloud Fonts", "WindowsCloud"),
    ("Windows Fonts", "Windows"),
)


class ImportWindowsFontsStep:
    step_id = "07_import_fonts"
    number = 7
    name = "fonts"
    title = "Import Windows fonts to system"

    def run(self, ctx: StepContext) -> None:
        system = ctx.system
        fonts_root = ctx.config.assets_dir / "Fonts"
        dst_base = ctx.config.fonts_destination

        installed = 0
        for src_name, dst_name in FONT_SETS:
            src = fonts_root / src_name
            if not src.is_dir():
                logger.warning("Source not found: %s (skipping %s)", src, src_name)
                continue
            files = find_files(src, FONT_EXTENSIONS, recursive=True)
            if not files:
                logger.warning("No font files found in: %s", src)
                continue
            staged = install_flat(system, files, dst_base / dst_name)
            copied = sum(1 for s in staged if s.copied)
            installed += copied
            logger.info("%s: %d copied, %d already present.", src_name, copied, len(staged) - copied)

        if not installed:
            return
        if system.which("fc-cache") is None:
            logger.warning("fc-cache not found; install 'fontconfig' if fonts are not visible.")
            return
        system.run(["fc-cache", "-f"], privileged=True)
        logger.info("Font cache updated.")
