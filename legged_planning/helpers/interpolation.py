"""Whole-body interpolation of a contact sequence.

Every transition between two consecutive states is planned independently,
in its own worker thread and with its own planning context, then the
transitions are concatenated into a single path.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, List, Optional, Protocol, Sequence

from legged_planning.errors import NoFeasibleTransitionError, PlanningError
from legged_planning.high_level_planners.contact_generation.data_types import State
from .path_optimizers.path_vector import Path, PathVector, SubchainPath
from .path_optimizers.planner_interface import PathOptimizer

logger = logging.getLogger(__name__)


class TransitionPlanner(Protocol):
    """Planner of the whole-body motion between two contact states."""

    def plan(self, context: Any, start: State, goal: State) -> Optional[PathVector]:
        """Path from ``start`` to ``goal``, or None if no transition was found.

        Args:
            context: Private planning context of the calling worker.
            start: State at the beginning of the transition.
            goal: State at the end of the transition.
        """
        ...


def check_path(valid: Sequence[bool]) -> int:
    """Number of leading transitions that succeeded.

    Raises:
        NoFeasibleTransitionError: If the first transition failed.
    """
    num_valid = len(valid)
    for i, ok in enumerate(valid):
        if not ok:
            num_valid = i
            break
    if num_valid == 0:
        raise NoFeasibleTransitionError("No path found at state 0")
    if num_valid != len(valid):
        logger.warning("No path found at state %d, keeping the first %d transitions", num_valid, num_valid)
    return num_valid


def concatenate_and_resize(paths: Sequence[PathVector], num_valid: int, drop_last_dof: bool = True) -> Path:
    """Concatenate the first ``num_valid`` transitions.

    Args:
        paths: One path vector per transition.
        num_valid: Number of leading transitions to keep.
        drop_last_dof: Remove the trailing (time) dof of the result.

    Returns:
        Path vector holding one element per transition, wrapped in a
        SubchainPath when ``drop_last_dof`` is set.
    """
    complete = PathVector(paths[0].output_size)
    for i in range(num_valid):
        complete.append_path(paths[i])
    if drop_last_dof:
        return SubchainPath(complete, 0, complete.output_size - 1)
    return complete


def _interpolate_transition(
    index: int,
    start: State,
    goal: State,
    transition_planner: TransitionPlanner,
    context_factory: Callable[[], Any],
    optimizer_factory: Optional[Callable[[Any], PathOptimizer]],
    num_optimizations: int,
) -> Optional[PathVector]:
    context = context_factory()
    try:
        path = transition_planner.plan(context, start, goal)
        if path is None:
            return None
        if optimizer_factory is not None and num_optimizations > 0:
            optimizer = optimizer_factory(context)
            for _ in range(num_optimizations):
                path = optimizer.optimize(path)
    except PlanningError as e:
        logger.warning("Transition %d failed: %s", index, e)
        return None
    return path


def interpolate_states(
    states: Sequence[State],
    transition_planner: TransitionPlanner,
    context_factory: Callable[[], Any],
    optimizer_factory: Optional[Callable[[Any], PathOptimizer]] = None,
    num_optimizations: int = 0,
    max_workers: Optional[int] = None,
    drop_last_dof: bool = True,
) -> Path:
    """Interpolate a sequence of contact states into one path.

    A transition whose planner or optimizer raises a PlanningError counts as
    failed, like a transition without path.

    Args:
        states: At least two consecutive contact states.
        transition_planner: Planner of each transition.
        context_factory: Builds a fresh planning context for every transition.
        optimizer_factory: Builds a path optimizer from a planning context.
        num_optimizations: Number of optimizer passes per transition.
        max_workers: Thread pool size. None uses the executor default.
        drop_last_dof: Remove the trailing (time) dof of the result.

    Returns:
        Path through every transition up to the first failed one.

    Raises:
        NoFeasibleTransitionError: If the first transition failed.
    """
    if len(states) < 2:
        raise ValueError("At least two states are required to interpolate")
    num_transitions = len(states) - 1

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [
            executor.submit(
                _interpolate_transition,
                i,
                states[i],
                states[i + 1],
                transition_planner,
                context_factory,
                optimizer_factory,
                num_optimizations,
            )
            for i in range(num_transitions)
        ]
        results: List[Optional[PathVector]] = [future.result() for future in futures]

    num_valid = check_path([path is not None for path in results])
    return concatenate_and_resize(results, num_valid, drop_last_dof)
