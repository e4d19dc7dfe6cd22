from __future__ import annotations

import logging
from datetime import datetime

from ..lib.apt import apt_update, apt_upgrade, debian_stanzas, render_deb822
from ..pipeline import StepContext

logger = logging.getLogger(__name__)

LEGACY_LIST = "/etc/apt/sources.list"
DEB822_FILE = "/etc/apt/sources.list.d/debian.sources"


class UpdateSourcesStep:
    step_id = "04_sources"
    number = 4
    name = "sources"
    title = "Update Debian sources (Deb822)"

    def run(self, ctx: StepContext) -> None:
        system = ctx.system
        cfg = ctx.config

        if system.exists(LEGACY_LIST):
            backup = f"{LEGACY_LIST}.bak.{datetime.now().astimezone().isoformat(timespec='seconds')}"
            system.run(["mv", "-n", LEGACY_LIST, backup], privileged=True)
            logger.info("Backed up %s to %s", LEGACY_LIST, backup)

        wanted = render_deb822(
            debian_stanzas(
                suite=cfg.debian_suite,
                mirror=cfg.debian_mirror,
                security_mirror=cfg.debian_security_mirror,
                components=cfg.debian_components,
            )
        )
        if system.read_text(DEB822_FILE) == wanted:
            logger.info("%s already up to date.", DEB822_FILE)
        else:
            system.write_text(DEB822_FILE, wanted, mode="0644")
            logger.info("Installed %s", DEB822_FILE)

        logger.info("Running apt update/upgrade...")
        apt_update(system)
        apt_upgrade(system)
        logger.info("APT cache updated and system upgraded.")
