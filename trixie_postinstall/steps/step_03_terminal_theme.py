from __future__ import annotations

import logging
from typing import Optional

from ..config import load_manifest
from ..pipeline import StepContext

logger = logging.getLogger(__name__)

PROFILES_LIST = "org.gnome.Terminal.ProfilesList"
PROFILE_SCHEMA = "org.gnome.Terminal.Legacy.Profile"
PROFILES_BASE = "/org/gnome/terminal/legacy/profiles:/"


def profile_path(uuid: str) -> str:
    return f"{PROFILES_BASE}:{uuid}/"


class TerminalThemeStep:
    step_id = "03_terminal_theme"
    number = 3
    name = "terminal-theme"
    title = "GNOME Terminal white on black"

    def _target_profile(self, ctx: StepContext) -> Optional[str]:
        gs = ctx.gsettings
        uuids = [u for u in (gs.get(PROFILES_LIST, "list") or []) if u]
        if not uuids:
            return None
        # A fresh install has a single profile literally called "Unnamed".
        for u in uuids:
            name = gs.get(PROFILE_SCHEMA, "visible-name", path=profile_path(u))
            if str(name).strip().lower() == "unnamed":
                return u
        default = gs.get(PROFILES_LIST, "default")
        return str(default) if default else None

    def run(self, ctx: StepContext) -> None:
        gs = ctx.gsettings
        if not gs.available():
            logger.warning("gsettings not found; skipping terminal theme.")
            return

        target = self._target_profile(ctx)
        if not target:
            logger.warning("No GNOME Terminal profiles found.")
            return

        theme = load_manifest("desktop")["terminal"]
        path = profile_path(target)
        gs.ensure(PROFILE_SCHEMA, "visible-name", "Default", path=path)
        gs.ensure(PROFILES_LIST, "default", target)
        gs.ensure(PROFILE_SCHEMA, "use-theme-colors", False, path=path)
        gs.ensure(PROFILE_SCHEMA, "foreground-color", theme["foreground"], path=path)
        gs.ensure(PROFILE_SCHEMA, "background-color", theme["background"], path=path)
        gs.ensure(PROFILE_SCHEMA, "bold-color-same-as-fg", True, path=path)
        gs.ensure(PROFILE_SCHEMA, "palette", list(theme["palette"]), path=path)
        logger.info("GNOME Terminal profile %s set.", target)
