"""Exception types raised by the generation pipeline"""

from typing import Any, Optional


class ChroniclerError(Exception):
    """Base class for pipeline errors"""


class PhasePreconditionError(ChroniclerError, ValueError):
    """A phase was invoked without the upstream output it depends on"""

    def __init__(self, phase: str, missing: str):
        self.phase = phase
        self.missing = missing
        super().__init__(f"{phase} phase requires {missing} in context")


class PromptSubmissionError(ChroniclerError, RuntimeError):
    """The injected prompt capability failed at the transport level"""


class PipelineRunError(ChroniclerError, RuntimeError):
    """A phase failed and the run was aborted"""

    def __init__(self, phase: str, cause: Exception, context: Optional[Any] = None):
        self.phase = phase
        self.cause = cause
        # Partially accumulated context, kept for debugging only
        self.context = context
        super().__init__(f"Phase {phase} failed: {summarize_error(cause)}")


def summarize_error(error: BaseException) -> str:
    """One-line description of an exception for logs and batch results"""
    message = str(error).strip()
    if message:
        return message
    return error.__class__.__name__
