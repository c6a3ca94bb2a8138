#!/usr/bin/env python3
"""
Matching error hierarchy.

Scorer-level errors are caught by the scoring service and turned into
degraded or skipped matches; they never reach a driver or company as a raw
error. Scheduler and rollout errors are handled at their own seams.
"""

from typing import Optional


class MatchingError(Exception):
    """Base exception for the matching engine."""
    pass


class SignalUnavailable(MatchingError):
    """The semantic signal could not be produced for a pair.

    ``reason`` is one of: empty_input, provider_absent, provider_error, timeout.
    """

    def __init__(self, reason: str, detail: Optional[str] = None):
        self.reason = reason
        self.detail = detail
        message = f"Semantic signal unavailable: {reason}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class InvalidCandidate(MatchingError):
    """Required identity fields (driver id, job id, candidate id) are missing."""
    pass


class QueueClaimConflict(MatchingError):
    """Another worker claimed the queue entry first."""
    pass


class BatchFetchFailure(MatchingError):
    """Inputs for a recompute batch could not be loaded."""
    pass


class ConfigUnavailable(MatchingError):
    """The rollout configuration could not be fetched."""
    pass
