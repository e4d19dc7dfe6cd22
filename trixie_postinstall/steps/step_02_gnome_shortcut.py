from __future__ import annotations

import logging

from ..pipeline import StepContext

logger = logging.getLogger(__name__)

SCHEMA = "org.gnome.settings-daemon.plugins.media-keys"
BINDING_SCHEMA = f"{SCHEMA}.custom-keybinding"
KEY = "custom-keybindings"
BINDING_PATH = "/org/gnome/settings-daemon/plugins/media-keys/custom-keybindings/custom-terminal/"

TERMINAL = "/usr/bin/gnome-terminal"
ACCEL = "<Primary><Alt>t"


class GnomeShortcutStep:
    step_id = "02_gnome_shortcut"
    number = 2
    name = "shortcut"
    title = "GNOME Terminal shortcut (Ctrl+Alt+T)"

    def run(self, ctx: StepContext) -> None:
        gs = ctx.gsettings
        if not gs.available():
            logger.warning("gsettings not found; skipping shortcut.")
            return
        if not ctx.system.exists(TERMINAL):
            logger.warning("Not found: %s", TERMINAL)
            return

        if gs.ensure_in_array(SCHEMA, KEY, [BINDING_PATH]):
            logger.info("Registered custom keybinding %s", BINDING_PATH)

        gs.ensure(BINDING_SCHEMA, "name", "Terminal", path=BINDING_PATH)
        gs.ensure(BINDING_SCHEMA, "command", TERMINAL, path=BINDING_PATH)
        gs.ensure(BINDING_SCHEMA, "binding", ACCEL, path=BINDING_PATH)
        logger.info("Shortcut set: %s -> %s", ACCEL, TERMINAL)
