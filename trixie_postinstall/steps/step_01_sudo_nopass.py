from __future__ import annotations

import logging

from ..errors import AccountNotFound, RebootRequired
from ..lib.command import fmt_argv
from ..pipeline import StepContext

logger = logging.getLogger(__name__)

DROPIN = "/etc/sudoers.d/sudogroup"
RULE = "%sudo ALL=(ALL:ALL) NOPASSWD: ALL"


def _dropin_script() -> str:
    q = fmt_argv
    return " && ".join(
        [
            f"printf '%s\\n' {q([RULE])} > {q([DROPIN])}",
            f"chmod 0440 {q([DROPIN])}",
            f"chown root:root {q([DROPIN])}",
            f"/usr/sbin/visudo -cf {q([DROPIN])}",
            "/usr/sbin/visudo -c",
        ]
    )


class SudoNoPasswordStep:
    """Passwordless sudo for group 'sudo' and the desktop user in it.

    Runs through su: until this step has worked there may be no usable sudo.
    """

    step_id = "01_sudo_nopass"
    number = 1
    name = "sudo"
    title = "Add user to passwordless sudo"

    def run(self, ctx: StepContext) -> None:
        system = ctx.system
        logger.info("You may be prompted for the ROOT (administrator) password.")

        if system.which("sudo") is None:
            system.run(["sh", "-c", "apt update && apt install -y sudo"], privileged=True, via="su")

        if system.exists(DROPIN):
            logger.info("sudoers drop-in already present.")
        else:
            system.run(["sh", "-c", _dropin_script()], privileged=True, via="su")
            logger.info("sudoers drop-in installed and validated.")

        uid = ctx.config.user_uid
        user = system.lookup_user(uid)
        if user is None:
            raise AccountNotFound(f"No user with UID {uid} found. Cannot add to sudo group.")

        if "sudo" in system.user_groups(user.name):
            logger.info("User %s is already in group sudo.", user.name)
            return

        logger.info("Adding %s to group sudo...", user.name)
        system.run(["/usr/sbin/usermod", "-aG", "sudo", user.name], privileged=True, via="su")

        # Group membership only applies to new sessions; later steps need it.
        if ctx.ask("Reboot now to apply group changes?", False):
            system.run(["/sbin/reboot"], privileged=True, via="su")
            raise RebootRequired("Rebooting to apply group changes.", exit_code=0)
        raise RebootRequired("Reboot declined. Please reboot manually before continuing.")
