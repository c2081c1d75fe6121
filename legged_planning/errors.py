"""Exceptions raised by the planning core."""

from typing import Optional


class PlanningError(Exception):
    """Base class for recoverable planning failures."""


class ProjectionError(PlanningError):
    """A configuration could not be computed at a requested path parameter."""

    def __init__(self, message: str, time: Optional[float] = None):
        super().__init__(message)
        self.time = time


class CompositionError(PlanningError):
    """Two paths could not be joined (discontinuity or size mismatch)."""


class NoFeasibleTransitionError(PlanningError):
    """The first transition of a state sequence has no feasible path."""
