from __future__ import annotations

import logging
import re
import tempfile
from pathlib import Path
from typing import Optional

from ..errors import StepFailed
from ..lib.download import download_file, extract_zip
from ..pipeline import StepContext

logger = logging.getLogger(__name__)

ARCHIVE_NAME = "Win11-icon-theme-main.zip"
_WIN11_NAME = re.compile(r"^\s*Name=.*Win\s*11", re.IGNORECASE | re.MULTILINE)


def find_theme_dir(icons_root: Path, preferred: str) -> Optional[str]:
    """Installed theme directory: preferred if present, else one whose
    index.theme names it like "Win 11"."""

    if (icons_root / preferred).is_dir():
        return preferred
    for index in sorted(icons_root.glob("*/index.theme")):
        try:
            text = index.read_text(encoding="utf-8", errors="replace")
        except OSError:
            continue
        if _WIN11_NAME.search(text):
            return index.parent.name
    return None


class InstallIconThemeStep:
    step_id = "09_icon_theme"
    number = 9
    name = "icons"
    title = "Install Win11 icon theme (system)"

    def __init__(self, icons_root: str | Path = "/usr/share/icons") -> None:
        self.icons_root = Path(icons_root)

    def _archive(self, ctx: StepContext) -> Path:
        archive = ctx.config.linux_dir / ARCHIVE_NAME
        if archive.is_file():
            logger.info("Using existing archive: %s", archive)
            return archive
        logger.info("No local archive found. Downloading...")
        return download_file(ctx.config.icons_url, archive)

    def _install(self, ctx: StepContext, archive: Path, theme: str) -> None:
        with tempfile.TemporaryDirectory(prefix="win11-icons.") as tmp:
            root = extract_zip(archive, tmp)
            if not (root / "install.sh").is_file():
                raise StepFailed(f"install.sh not found in {root}")
            logger.info("Running theme installer as root...")
            ctx.system.run(
                ["bash", "./install.sh", "--dest", str(self.icons_root), "--name", theme],
                privileged=True,
                cwd=str(root),
                interactive=True,
            )
        logger.info("Icon theme installed.")

    def run(self, ctx: StepContext) -> None:
        theme = ctx.config.icons_theme_name
        if (self.icons_root / theme / "index.theme").is_file():
            logger.info("Icon theme %s already installed.", theme)
        else:
            self._install(ctx, self._archive(ctx), theme)

        chosen = find_theme_dir(self.icons_root, theme) or theme
        if ctx.gsettings.available():
            ctx.gsettings.ensure("org.gnome.desktop.interface", "icon-theme", chosen)
            logger.info("GNOME icon theme set to '%s'.", chosen)
        else:
            logger.warning("gsettings not available; skipped setting icon theme.")

        # The theme's installer usually refreshes these itself.
        if ctx.system.which("gtk-update-icon-cache"):
            for d in sorted(self.icons_root.glob(f"{theme}*")):
                if d.is_dir():
                    ctx.system.run(["gtk-update-icon-cache", "-f", str(d)], privileged=True, check=False)
