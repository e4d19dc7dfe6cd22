from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, List, Optional, Sequence

from .config import PostinstallConfig, load_config
from .errors import FatalError, PreconditionAborted
from .lib.gsettings import GSettings
from .lib.osrelease import OsIdentity, read_os_identity
from .lib.system import System
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import QUIT_ALIASES, Step, StepContext, run_choices
from .steps import (
    CryptGuiStep,
    GnomeExtensionsStep,
    GnomeSettingsStep,
    GnomeShortcutStep,
    ImportWindowsFontsStep,
    InstallAppsStep,
    InstallIconThemeStep,
    InstallWallpapersStep,
    SetProfilePhotoStep,
    SudoNoPasswordStep,
    TerminalThemeStep,
    UpdateSourcesStep,
)

logger = logging.getLogger(__name__)

TARGET_OS_ID = "debian"
TARGET_CODENAME = "trixie"

InputFn = Callable[[str], str]


def build_steps() -> List[Step]:
    return [
        SudoNoPasswordStep(),
        GnomeShortcutStep(),
        TerminalThemeStep(),
        UpdateSourcesStep(),
        InstallAppsStep(),
        CryptGuiStep(),
        ImportWindowsFontsStep(),
        InstallWallpapersStep(),
        InstallIconThemeStep(),
        SetProfilePhotoStep(),
        GnomeExtensionsStep(),
        GnomeSettingsStep(),
    ]


def make_ask(input_fn: InputFn = input) -> Callable[[str, bool], bool]:
    """Yes/no prompt; empty answer or EOF means the default."""

    def ask(question: str, default: bool) -> bool:
        hint = "Y/n" if default else "y/N"
        try:
            answer = input_fn(f"{question} [{hint}]: ")
        except EOFError:
            return default
        answer = answer.strip().lower()
        if not answer:
            return default
        return answer.startswith("y")

    return ask


def preflight_os_check(
    ask: Callable[[str, bool], bool],
    *,
    assume_yes: bool = False,
    identity: Optional[OsIdentity] = None,
) -> None:
    ident = identity or read_os_identity()
    if ident.matches(TARGET_OS_ID, TARGET_CODENAME):
        logger.info("Detected Debian Trixie.")
        return
    logger.warning("This tool is designed for Debian Trixie. Detected: %s.", ident.describe())
    if assume_yes or ask("Do you want to continue anyway?", False):
        return
    raise PreconditionAborted("Aborting.")


def render_menu(steps: Sequence[Step]) -> str:
    lines = ["Post-install helper - choose an option:", ""]
    for s in steps:
        lines.append(f" {s.number:>2}) {s.title:<42} [{s.number}/12]")
    lines.append("  a) Run ALL steps in order")
    lines.append("  q) Quit")
    return "\n".join(lines)


def interactive_loop(
    catalogue: Sequence[Step],
    ctx: StepContext,
    input_fn: InputFn = input,
    out: Callable[[str], None] = print,
) -> int:
    status = 0
    while True:
        out(render_menu(catalogue))
        try:
            choice = input_fn("Select: ").strip()
        except EOFError:
            break
        if choice.lower() in QUIT_ALIASES:
            break
        if run_choices([choice], catalogue, ctx).failed:
            status = 1
        out("")
        if not ctx.ask("Do you want to choose another option?", True):
            break
    logger.info("All done. You can re-run this any time; steps are idempotent.")
    return status


def run(
    step_ids: Sequence[str],
    *,
    config: PostinstallConfig,
    assume_yes: bool = False,
    input_fn: InputFn = input,
    system: Optional[System] = None,
    catalogue: Optional[Sequence[Step]] = None,
) -> int:
    """Preflight, then run the requested steps or the interactive menu."""

    system = system or System(dry_run=config.dry_run)
    ask = make_ask(input_fn)
    ctx = StepContext(system=system, config=config, gsettings=GSettings(system), ask=ask)
    catalogue = list(catalogue) if catalogue is not None else build_steps()

    try:
        preflight_os_check(ask, assume_yes=assume_yes)
        if not step_ids:
            return interactive_loop(catalogue, ctx, input_fn=input_fn)
        result = run_choices(step_ids, catalogue, ctx)
    except FatalError as e:
        if e.exit_code:
            logger.error("%s", e)
        else:
            logger.info("%s", e)
        return e.exit_code

    if result.unknown:
        logger.warning("Unknown choices: %s", ", ".join(result.unknown))
    if result.failed:
        logger.warning("Failed steps: %s", ", ".join(step_id for step_id, _ in result.failed))
    return 0 if result.ok else 1


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(
        prog="trixie-postinstall",
        description="Apply post-install steps to a Debian Trixie GNOME desktop.",
    )
    p.add_argument("steps", nargs="*", help="Step numbers (1-12), names, 'all', or 'q' to stop. Omit for the menu.")
    p.add_argument("--config", default=None, help="YAML config file")
    p.add_argument("--assets", default=None, help="Folder exported by trixie-collect (default: ./Windows)")
    p.add_argument("--linux-dir", default=None, help="Folder with archives and dconf dumps (default: ./Linux)")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to the log file")
    p.add_argument("--dry-run", action="store_true", help="Log commands instead of running them")
    p.add_argument("--yes", action="store_true", help="Continue even if this is not Debian Trixie")
    p.add_argument("-v", "--verbose", action="store_true")

    args = p.parse_args(argv)

    configure_logging(log_path=args.log, level=logging.DEBUG if args.verbose else logging.INFO)

    config = load_config(args.config).with_overrides(assets_dir=args.assets, linux_dir=args.linux_dir)
    if args.dry_run:
        config = PostinstallConfig(raw={**config.raw, "dry_run": True})

    return run(args.steps, config=config, assume_yes=args.yes)


if __name__ == "__main__":
    sys.exit(main())
