"""Exception types shared across the package."""

from __future__ import annotations


class NewswatchError(Exception):
    """Base class for all newswatch errors."""


class UpstreamUnavailable(NewswatchError):
    """An upstream could not produce a usable result.

    Raised inside clients and parsers only; ``fetchers.http.guarded`` turns it
    into the unavailable sentinel before it reaches a caller.
    """

    def __init__(self, upstream: str, reason: str) -> None:
        super().__init__(f"{upstream}: {reason}")
        self.upstream = upstream
        self.reason = reason


class AIUnavailable(UpstreamUnavailable):
    """An AI backend failed or returned no usable structured output."""


class ValidationError(NewswatchError):
    """User input rejected before any upstream call is made."""


class VerificationFailed(NewswatchError):
    """Claim verification produced no result. There is no fallback for this path."""
