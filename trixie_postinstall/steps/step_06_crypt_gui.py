from __future__ import annotations

import logging
from typing import Callable

from ..lib.apt import apt_install
from ..lib.shellvars import ShellVarsFile, ensure_line
from ..pipeline import StepContext

logger = logging.getLogger(__name__)

GRUB_DEFAULT = "/etc/default/grub"
INITRAMFS_MODULES = "/etc/initramfs-tools/modules"
CRYPTSETUP_HOOK = "/etc/cryptsetup-initramfs/conf-hook"

GRUB_TIMEOUT = "3"


def edit_grub_defaults(text: str) -> str:
    """GRUB_TIMEOUT=3 and "quiet splash" on the default kernel command line."""

    f = ShellVarsFile.parse(text)
    f.set("GRUB_TIMEOUT", GRUB_TIMEOUT)
    f.ensure_token("GRUB_CMDLINE_LINUX_DEFAULT", "quiet")
    f.ensure_token("GRUB_CMDLINE_LINUX_DEFAULT", "splash", after="quiet")
    return f.render()


def edit_cryptsetup_hook(text: str) -> str:
    f = ShellVarsFile.parse(text)
    f.set("CRYPTSETUP", "y")
    f.set("PLYMOUTH", "y")
    return f.render()


def _update_file(ctx: StepContext, path: str, edit: Callable[[str], str]) -> bool:
    current = ctx.system.read_text(path)
    updated = edit(current or "")
    if updated == current:
        logger.info("%s already configured.", path)
        return False
    ctx.system.write_text(path, updated, mode="0644")
    logger.info("Updated %s", path)
    return True


class CryptGuiStep:
    """Graphical passphrase prompt at boot (Plymouth) for encrypted installs."""

    step_id = "06_crypt_gui"
    number = 6
    name = "crypt-gui"
    title = "Crypt GUI (Plymouth + GRUB tweaks)"

    def _plymouth_theme(self, ctx: StepContext) -> str:
        # bgrt shows the firmware vendor logo; it needs EFI with a BGRT table.
        if ctx.system.is_dir("/sys/firmware/efi") and ctx.system.exists("/sys/firmware/acpi/tables/BGRT"):
            return "bgrt"
        return "spinner"

    def run(self, ctx: StepContext) -> None:
        system = ctx.system
        apt_install(system, ["plymouth-themes"], update=True)

        initramfs_changed = False
        theme = self._plymouth_theme(ctx)
        current = system.query(["plymouth-set-default-theme"]).stdout.strip()
        if current != theme:
            system.run(["plymouth-set-default-theme", theme], privileged=True)
            logger.info("Plymouth theme: %s -> %s", current or "(none)", theme)
            initramfs_changed = True

        initramfs_changed |= _update_file(ctx, INITRAMFS_MODULES, lambda t: ensure_line(t, "plymouth"))
        initramfs_changed |= _update_file(ctx, CRYPTSETUP_HOOK, edit_cryptsetup_hook)
        grub_changed = _update_file(ctx, GRUB_DEFAULT, edit_grub_defaults)

        if initramfs_changed:
            system.run(["update-initramfs", "-u", "-k", "all"], privileged=True, interactive=True)
        if grub_changed:
            system.run(["update-grub"], privileged=True, interactive=True)
        logger.info("Crypt GUI configured.")
