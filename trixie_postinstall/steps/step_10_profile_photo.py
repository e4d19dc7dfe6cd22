from __future__ import annotations

import filecmp
import logging
from pathlib import Path

from ..errors import StepFailed
from ..lib.keyfile import KeyFile
from ..pipeline import StepContext

logger = logging.getLogger(__name__)

ACCOUNTS_ROOT = Path("/var/lib/AccountsService")


def set_user_icon(text: str, icon_path: str) -> str:
    kf = KeyFile.parse(text)
    kf.set("User", "Icon", icon_path)
    return kf.render()


class SetProfilePhotoStep:
    step_id = "10_profile_photo"
    number = 10
    name = "profile-photo"
    title = "Set user profile photo"

    def __init__(self, accounts_root: str | Path = ACCOUNTS_ROOT) -> None:
        self.accounts_root = Path(accounts_root)

    def run(self, ctx: StepContext) -> None:
        system = ctx.system
        img = ctx.config.assets_dir / "User Profile Photo" / "user.png"
        if not img.is_file():
            raise StepFailed(f"Profile image not found: {img}")

        user = system.lookup_user(ctx.config.user_uid)
        if user is None:
            raise StepFailed(f"No user with UID {ctx.config.user_uid} found. Cannot set profile photo.")

        icon_path = self.accounts_root / "icons" / user.name
        user_record = self.accounts_root / "users" / user.name

        try:
            same = icon_path.is_file() and filecmp.cmp(img, icon_path, shallow=False)
        except OSError:
            same = False
        if same:
            logger.info("Profile photo already installed at %s", icon_path)
        else:
            system.install_file(img, icon_path, mode="0644")
            system.run(["chown", "root:root", str(icon_path)], privileged=True)

        current = system.read_text(user_record, privileged=True)
        updated = set_user_icon(current or "", str(icon_path))
        if updated != current:
            system.write_text(user_record, updated, mode="0644")
            system.run(["chown", "root:root", str(user_record)], privileged=True)

        logger.info("Profile photo set for %s. Log out and back in to see it.", user.name)
