from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Protocol, Sequence, Tuple

from .config import PostinstallConfig
from .errors import FatalError, UnknownStepError
from .lib.gsettings import GSettings
from .lib.system import System

logger = logging.getLogger(__name__)

AskFn = Callable[[str, bool], bool]

ALL_ALIASES = frozenset({"a", "all"})
QUIT_ALIASES = frozenset({"q", "quit"})


@dataclass
class StepContext:
    system: System
    config: PostinstallConfig
    gsettings: GSettings
    ask: AskFn


class Step(Protocol):
    """A single idempotent provisioning step."""

    step_id: str
    number: int
    name: str
    title: str

    def run(self, ctx: StepContext) -> None:
        ...


@dataclass
class RunResult:
    ran: List[str] = field(default_factory=list)
    failed: List[Tuple[str, str]] = field(default_factory=list)
    unknown: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed and not self.unknown


def resolve_steps(identifiers: Iterable[str], catalogue: Sequence[Step]) -> List[Step]:
    """Map identifiers (1-12, step names, "all"/"a") to steps, keeping order."""

    by_key = {}
    for step in catalogue:
        by_key[str(step.number)] = step
        by_key[step.name] = step
        by_key[step.step_id] = step

    out: List[Step] = []
    for ident in identifiers:
        key = ident.strip().lower()
        if key in ALL_ALIASES:
            out.extend(catalogue)
        elif key in by_key:
            out.append(by_key[key])
        else:
            raise UnknownStepError(f"Unknown choice: {ident}")
    return out


def run_steps(steps: Sequence[Step], ctx: StepContext) -> RunResult:
    """Run steps in order; report and continue past failures.

    FatalError stops the run and propagates. Nothing is rolled back: each
    step's own idempotency is what makes a re-run safe.
    """

    result = RunResult()
    total = len(steps)
    for i, step in enumerate(steps, start=1):
        logger.info("[%d/12] %s", step.number, step.title)
        try:
            step.run(ctx)
        except FatalError:
            raise
        except Exception as e:
            logger.error("Step %s failed: %s", step.step_id, e)
            logger.debug("Step %s traceback", step.step_id, exc_info=True)
            result.failed.append((step.step_id, str(e)))
        else:
            result.ran.append(step.step_id)
        logger.debug("Finished %s (%d of %d requested)", step.step_id, i, total)
    return result


def run_choices(identifiers: Iterable[str], catalogue: Sequence[Step], ctx: StepContext) -> RunResult:
    """Run each choice in turn, like picking them one by one from the menu.

    An unknown choice is logged and recorded; the next one still runs.
    "q" ends processing and later choices are ignored.
    """

    result = RunResult()
    for ident in identifiers:
        if ident.strip().lower() in QUIT_ALIASES:
            logger.info("Quit requested; ignoring remaining choices.")
            break
        try:
            steps = resolve_steps([ident], catalogue)
        except UnknownStepError as e:
            logger.error("%s", e)
            result.unknown.append(ident)
            continue
        partial = run_steps(steps, ctx)
        result.ran.extend(partial.ran)
        result.failed.extend(partial.failed)
    return result
