from __future__ import annotations

import grp
import logging
import os
import pwd
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from .command import CmdResult, as_root, run_cmd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserAccount:
    name: str
    uid: int
    home: str


class System:
    """Every side effect a provisioning step is allowed to have.

    Steps never call subprocess or write outside the invoking user's reach
    directly; they go through an instance of this class so tests can swap in
    a recording fake.
    """

    def __init__(self, *, dry_run: bool = False) -> None:
        self.dry_run = dry_run

    def is_root(self) -> bool:
        return os.geteuid() == 0

    def run(
        self,
        argv: Sequence[str],
        *,
        privileged: bool = False,
        via: str = "sudo",
        check: bool = True,
        input_text: Optional[str] = None,
        cwd: Optional[str] = None,
        env: Optional[dict[str, str]] = None,
        interactive: bool = False,
    ) -> CmdResult:
        argv_list = list(argv)
        if privileged and not self.is_root():
            argv_list = as_root(argv_list, via=via)
            # su prompts for the root password on the terminal.
            interactive = interactive or via == "su"
        return run_cmd(
            argv_list,
            check=check,
            env=env,
            cwd=cwd,
            input_text=input_text,
            dry_run=self.dry_run,
            interactive=interactive and input_text is None,
        )

    def query(self, argv: Sequence[str]) -> CmdResult:
        """Run a read-only command, even in dry-run mode.

        A command that is not installed gives a failed result (127).
        """

        argv_list = list(argv)
        try:
            return run_cmd(argv_list, check=False)
        except FileNotFoundError as e:
            logger.debug("Not installed: %s (%s)", argv_list[0], e)
            return CmdResult(argv=argv_list, returncode=127, stdout="", stderr=str(e))

    def which(self, cmd: str) -> Optional[str]:
        return shutil.which(cmd)

    def exists(self, path: str | Path) -> bool:
        return Path(path).exists()

    def is_dir(self, path: str | Path) -> bool:
        return Path(path).is_dir()

    def read_text(self, path: str | Path, *, privileged: bool = False) -> Optional[str]:
        """Return file contents, or None if the file does not exist."""

        p = Path(path)
        if not privileged or self.is_root():
            if not p.exists():
                return None
            return p.read_text(encoding="utf-8")

        found = run_cmd(as_root(["test", "-f", str(p)]), check=False)
        if found.returncode != 0:
            return None
        return run_cmd(as_root(["cat", str(p)])).stdout

    def write_text(
        self,
        path: str | Path,
        content: str,
        *,
        mode: str = "0644",
        privileged: bool = True,
        via: str = "sudo",
    ) -> None:
        p = str(path)
        parent = str(Path(path).parent)
        if not privileged:
            if self.dry_run:
                logger.info("Would write %s", p)
                return
            Path(parent).mkdir(parents=True, exist_ok=True)
            Path(p).write_text(content, encoding="utf-8")
            os.chmod(p, int(mode, 8))
            return

        self.run(["install", "-d", "-m", "0755", parent], privileged=True, via=via)
        self.run(["tee", p], privileged=True, via=via, input_text=content)
        self.run(["chmod", mode, p], privileged=True, via=via)

    def install_file(self, src: str | Path, dst: str | Path, *, mode: str = "0644") -> None:
        """Copy file bytes into a root-owned location, creating parents."""

        self.run(["install", "-D", "-m", mode, "--", str(src), str(dst)], privileged=True)

    def make_dirs(self, path: str | Path, *, mode: str = "0755") -> None:
        self.run(["install", "-d", "-m", mode, str(path)], privileged=True)

    def lookup_user(self, uid: int) -> Optional[UserAccount]:
        try:
            entry = pwd.getpwuid(uid)
        except KeyError:
            return None
        return UserAccount(name=entry.pw_name, uid=entry.pw_uid, home=entry.pw_dir)

    def user_groups(self, username: str) -> list[str]:
        try:
            primary = grp.getgrgid(pwd.getpwnam(username).pw_gid).gr_name
        except KeyError:
            primary = None
        groups = [g.gr_name for g in grp.getgrall() if username in g.gr_mem]
        if primary and primary not in groups:
            groups.insert(0, primary)
        return groups
