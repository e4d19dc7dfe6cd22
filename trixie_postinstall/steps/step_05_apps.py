from __future__ import annotations

import logging

from ..config import load_manifest
from ..lib.apt import apt_install
from ..pipeline import StepContext

logger = logging.getLogger(__name__)


class InstallAppsStep:
    step_id = "05_apps"
    number = 5
    name = "apps"
    title = "Install handy apps"

    def run(self, ctx: StepContext) -> None:
        packages = list(load_manifest("packages")["apps"])
        installed = apt_install(ctx.system, packages)
        if installed:
            logger.info("Apps installed: %s", ", ".join(installed))
