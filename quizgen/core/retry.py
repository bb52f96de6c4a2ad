"""
Retry state machine for structured extraction.

States:
    Attempting(index, feedback) -> another model call is due
    Succeeded(result, attempts) -> terminal, result is returned
    Exhausted(last_error, attempts) -> terminal, caller gets an error

``advance`` is the only transition. It never raises and holds no state,
so the retry contract can be tested without a model.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union

from quizgen.core.format_instructions import format_feedback


@dataclass(frozen=True)
class Attempting:
    index: int = 0
    feedback: str = ""


@dataclass(frozen=True)
class Succeeded:
    result: Any
    attempts: int


@dataclass(frozen=True)
class Exhausted:
    last_error: str
    feedback: str
    attempts: int


RetryState = Union[Attempting, Succeeded, Exhausted]


@dataclass(frozen=True)
class AttemptOutcome:
    """Result of one extraction attempt: a value or an error message."""
    ok: bool
    result: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, result: Any) -> "AttemptOutcome":
        return cls(ok=True, result=result)

    @classmethod
    def failure(cls, error: str) -> "AttemptOutcome":
        return cls(ok=False, error=error)


def advance(state: Attempting, outcome: AttemptOutcome, max_attempts: int) -> RetryState:
    """Move from an attempt to the next state given its outcome."""
    attempts = state.index + 1

    if outcome.ok:
        return Succeeded(result=outcome.result, attempts=attempts)

    feedback = format_feedback(outcome.error or "")
    if attempts >= max_attempts:
        return Exhausted(last_error=outcome.error or "", feedback=feedback, attempts=attempts)

    return Attempting(index=attempts, feedback=feedback)


def is_terminal(state: RetryState) -> bool:
    return not isinstance(state, Attempting)
