"""Explicit results of a single reviewer pass."""

from dataclasses import dataclass, field
from typing import Generic, TypeVar, Union

from contracts import PassStatus, ReviewCancelled, TokenUsage

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """The pass produced a validated finding."""
    value: T
    raw_text: str = ""
    usage: TokenUsage = field(default_factory=TokenUsage)


@dataclass(frozen=True)
class ParseError:
    """The model answered but nothing usable could be read from it.

    `partial` is set when JSON was recovered but carried none of the expected keys.
    """
    raw_text: str
    reason: str
    partial: bool = False
    usage: TokenUsage = field(default_factory=TokenUsage)


@dataclass(frozen=True)
class ProviderError:
    """The inference call itself failed or was cancelled."""
    cause: Exception
    usage: TokenUsage = field(default_factory=TokenUsage)

    @property
    def cancelled(self) -> bool:
        return isinstance(self.cause, ReviewCancelled)


@dataclass(frozen=True)
class Skipped:
    """The pass had nothing to work on and never called the model."""
    reason: str
    usage: TokenUsage = field(default_factory=TokenUsage)


PassOutcome = Union[Ok, ParseError, ProviderError, Skipped]


def status_of(outcome: PassOutcome) -> PassStatus:
    """Map an outcome to the status reported on the aggregate result."""
    if isinstance(outcome, Ok):
        return PassStatus.OK
    if isinstance(outcome, ParseError):
        return PassStatus.PARTIAL_DATA if outcome.partial else PassStatus.PARSE_ERROR
    if isinstance(outcome, Skipped):
        return PassStatus.SKIPPED
    if outcome.cancelled:
        return PassStatus.CANCELLED
    return PassStatus.PROVIDER_ERROR
