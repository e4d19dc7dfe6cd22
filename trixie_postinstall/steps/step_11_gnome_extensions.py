from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from ..config import load_manifest
from ..lib.apt import apt_install
from ..lib.download import download_file, extract_zip
from ..pipeline import StepContext

logger = logging.getLogger(__name__)

SYSTEM_EXTENSIONS = Path("/usr/share/gnome-shell/extensions")
ARCMENU_UUID = "arcmenu@arcmenu.com"


class GnomeExtensionsStep:
    step_id = "11_gnome_extensions"
    number = 11
    name = "extensions"
    title = "GNOME extensions + Manager + Tweaks"

    def __init__(self, system_extensions: str | Path = SYSTEM_EXTENSIONS) -> None:
        self.system_extensions = Path(system_extensions)

    def _user_extensions(self) -> Path:
        return Path.home() / ".local" / "share" / "gnome-shell" / "extensions"

    def is_installed(self, uuid: str) -> bool:
        return (self._user_extensions() / uuid).is_dir() or (self.system_extensions / uuid).is_dir()

    def _install_arcmenu(self, ctx: StepContext) -> None:
        target = self.system_extensions / ARCMENU_UUID
        if target.is_dir():
            logger.info("ArcMenu already present at %s.", target)
            return

        logger.info("Installing ArcMenu from GNOME Extensions...")
        archive = ctx.config.linux_dir / "arcmenu.zip"
        if not archive.is_file():
            download_file(ctx.config.arcmenu_url, archive)
        with tempfile.TemporaryDirectory(prefix="arcmenu.") as tmp:
            extract_zip(archive, tmp)
            ctx.system.make_dirs(target)
            ctx.system.run(["cp", "-r", "--", f"{tmp}/.", str(target)], privileged=True)
        # Extension files must be readable by the gnome-shell of every user.
        ctx.system.run(["chmod", "-R", "a+rX", str(target)], privileged=True)
        logger.info("ArcMenu installed to %s.", target)

    def _offer_logout(self, ctx: StepContext) -> None:
        if not ctx.config.offer_logout or not ctx.ask("Log off now to apply changes?", False):
            logger.info("OK, not logging off now. Changes will apply next time you log in.")
            return
        system = ctx.system
        if system.which("gnome-session-quit"):
            system.run(["gnome-session-quit", "--logout", "--no-prompt"])
        elif os.environ.get("XDG_SESSION_ID") and system.which("loginctl"):
            system.run(["loginctl", "terminate-session", os.environ["XDG_SESSION_ID"]])
        else:
            logger.warning("Could not determine a safe logout method; please log out from the system menu.")

    def run(self, ctx: StepContext) -> None:
        apt_install(ctx.system, list(load_manifest("packages")["extensions"]), update=True)
        self._install_arcmenu(ctx)

        gs = ctx.gsettings
        if gs.available():
            wanted = [u for u in load_manifest("desktop")["extensions"] if self.is_installed(u)]
            added = gs.ensure_in_array("org.gnome.shell", "enabled-extensions", wanted)
            logger.info("Extensions enabled: %s", ", ".join(added) if added else "none new")
            gs.ensure("org.gnome.mutter", "experimental-features", [])
            logger.info("Tip: use Extension Manager and GNOME Tweaks to customise behaviour.")
        else:
            logger.warning("gsettings not available; skipping auto-enable. Extensions are installed.")

        self._offer_logout(ctx)
