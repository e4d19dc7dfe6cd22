from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Mapping, Sequence

logger = logging.getLogger(__name__)

# su -c runs a login-less root shell; sbin is not always on its PATH.
SU_PATH = "PATH=/usr/sbin:/usr/bin:/sbin:/bin"


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def as_root(argv: Sequence[str], *, via: str = "sudo") -> list[str]:
    """Wrap argv so it runs as root.

    via="sudo" is the normal path. via="su" asks for the root password and is
    only needed before the user has working sudo rights.
    """

    if via == "sudo":
        return ["sudo", *argv]
    if via == "su":
        return ["su", "-c", f"{SU_PATH}; {fmt_argv(argv)}"]
    raise ValueError(f"Unknown privilege method: {via}")


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    env: Mapping[str, str] | None = None,
    cwd: str | None = None,
    input_text: str | None = None,
    dry_run: bool = False,
    interactive: bool = False,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - Captures stdout/stderr unless interactive (password prompts, apt progress).
    - dry_run logs but does not execute.
    """

    argv_list = list(argv)
    logger.info("CMD %s", fmt_argv(argv_list))

    if dry_run:
        return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

    pipe = None if interactive else subprocess.PIPE
    p = subprocess.run(
        argv_list,
        input=input_text,
        text=True,
        stdout=pipe,
        stderr=pipe,
        cwd=cwd,
        env=dict(os.environ, **(env or {})),
    )

    stdout = p.stdout or ""
    stderr = p.stderr or ""
    if stdout:
        logger.debug("STDOUT %s", stdout.strip())
    if stderr:
        logger.debug("STDERR %s", stderr.strip())

    if check and p.returncode != 0:
        raise RuntimeError(f"Command failed ({p.returncode}): {fmt_argv(argv_list)}\n{stderr}")

    return CmdResult(argv=argv_list, returncode=p.returncode, stdout=stdout, stderr=stderr)
