from __future__ import annotations


class PostinstallError(RuntimeError):
    pass


class StepFailed(PostinstallError):
    """A step could not reach its target state; the run continues."""


class UnknownStepError(PostinstallError, ValueError):
    pass


class FatalError(PostinstallError):
    """Stops the whole run with a dedicated exit status."""

    exit_code = 1

    def __init__(self, message: str, *, exit_code: int | None = None) -> None:
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class PreconditionAborted(FatalError):
    exit_code = 2


class AccountNotFound(FatalError):
    exit_code = 40


class RebootRequired(FatalError):
    exit_code = 50
