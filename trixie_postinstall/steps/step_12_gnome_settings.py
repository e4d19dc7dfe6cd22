from __future__ import annotations

import logging
from pathlib import Path

from ..config import load_manifest
from ..errors import StepFailed
from ..pipeline import StepContext

logger = logging.getLogger(__name__)


class GnomeSettingsStep:
    step_id = "12_gnome_settings"
    number = 12
    name = "gnome-settings"
    title = "Apply custom GNOME settings (dconf)"

    def _load_dconf(self, ctx: StepContext, dumps: list) -> None:
        if ctx.system.which("dconf") is None:
            logger.warning("dconf not available; skipping extension setting imports.")
            return
        for entry in dumps:
            path = ctx.config.linux_dir / entry["file"]
            if not path.is_file():
                logger.warning("dconf dump not found: %s", path)
                continue
            logger.info("Importing %s -> %s", path.name, entry["prefix"])
            r = ctx.system.run(
                ["dconf", "load", entry["prefix"]],
                input_text=path.read_text(encoding="utf-8"),
                check=False,
            )
            if not r.ok:
                logger.warning("Import of %s failed (continuing): %s", path.name, r.stderr.strip())

    def run(self, ctx: StepContext) -> None:
        desktop = load_manifest("desktop")
        self._load_dconf(ctx, list(desktop.get("dconf") or []))

        gs = ctx.gsettings
        if not gs.available():
            raise StepFailed("gsettings not available; cannot apply GNOME tweaks.")

        failures = 0
        for schema, key, value in desktop.get("settings") or []:
            try:
                gs.ensure(schema, key, value)
            except RuntimeError as e:
                failures += 1
                logger.warning("%s %s failed: %s", schema, key, e)

        cursor = desktop.get("cursor_theme")
        cursor_file = Path("/usr/share/icons") / str(cursor) / "cursor.theme"
        if cursor and ctx.system.which("update-alternatives") and ctx.system.exists(cursor_file):
            ctx.system.run(
                ["update-alternatives", "--set", "x-cursor-theme", str(cursor_file)],
                privileged=True,
                check=False,
            )

        logger.info("GNOME settings applied (%d failed).", failures)
