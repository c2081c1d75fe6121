"""Contact generation and dynamic shortcut optimization for legged locomotion."""

from .config import ContactModel, PlannerParameters, ShortcutParameters
from .errors import (
    CompositionError,
    NoFeasibleTransitionError,
    PlanningError,
    ProjectionError,
)

__all__ = [
    'ContactModel',
    'PlannerParameters',
    'ShortcutParameters',
    'CompositionError',
    'NoFeasibleTransitionError',
    'PlanningError',
    'ProjectionError',
]
