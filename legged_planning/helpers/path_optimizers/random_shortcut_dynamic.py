"""Random shortcut optimizer for kinodynamic paths.

Each round samples two parameters ``t1 < t2`` on the current path, splits it
into three segments and tries to replace every segment with a direct
kinodynamic steer between its endpoints. A replacement is kept only if it is
strictly shorter than the segment it replaces and valid. Valid replacements
are also tried in an oriented variant (heading following the direction of
travel); when a segment is replaced by its oriented variant, the adjacent
segments are re-steered so that the orientation stays continuous.
"""

import logging
from collections import deque
from typing import Callable, Dict, List, Optional

import numpy as np

from legged_planning.config import PlannerParameters
from legged_planning.errors import CompositionError, ProjectionError
from .path_vector import CONTINUITY_TOLERANCE, Path, PathVector, path_length
from .planner_interface import PathOptimizer, Problem
from .steering import SteerFunction

logger = logging.getLogger(__name__)


class DynamicShortcutOptimizer:
    """Shorten a kinodynamic path by random shortcuts.

    The optimizer stops when the relative length improvement over the last
    ``number_of_loops`` rounds drops below ``convergence_tolerance``, after
    ``max_rounds`` rounds, or when the projection error budget is exhausted.
    Endpoints are never modified and the returned path is never longer than
    the input.
    """

    def __init__(
        self,
        problem: Problem,
        parameters: Optional[PlannerParameters] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """Initialize the optimizer.

        Args:
            problem: Collaborators (validators, steering method, projector).
            parameters: Planner parameters. Read from ``problem.parameters`` if None.
            rng: Random generator used to sample shortcut parameters.
        """
        self.problem = problem
        if parameters is None:
            parameters = PlannerParameters.from_problem_parameters(problem.parameters)
        self.parameters = parameters
        self.rng = rng if rng is not None else np.random.default_rng()
        self.steer = SteerFunction(
            problem, parameters.contact_model, parameters.shortcut.endpoint_tolerance
        )
        self.statistics: Dict[str, object] = {}

    @classmethod
    def create(cls, problem: Problem, seed: Optional[int] = None) -> 'DynamicShortcutOptimizer':
        return cls(problem, rng=np.random.default_rng(seed))

    def _validate(self, path: Path) -> bool:
        valid, _, _ = self.problem.path_validator.validate(path)
        return bool(valid)

    def _steer_valid(self, q1: np.ndarray, q2: np.ndarray) -> Optional[Path]:
        path = self.steer(q1, q2)
        if path is None or not self._validate(path):
            return None
        return path

    def _retarget_start(self, segment: Path, replaced: bool, start: np.ndarray) -> Optional[Path]:
        """Make ``segment`` start at ``start``.

        A replaced segment is a single steered path and is steered again. An
        original segment is a path vector: only its first element is
        re-steered.
        """
        if replaced:
            return self._steer_valid(start, segment.end())
        head = self._steer_valid(start, segment.path_at_rank(0).end())
        if head is None:
            return None
        vector = PathVector(segment.output_size)
        vector.append_path(head)
        for rank in range(1, segment.number_paths()):
            vector.append_path(segment.path_at_rank(rank))
        return vector

    def _retarget_end(self, segment: Path, replaced: bool, end: np.ndarray) -> Optional[Path]:
        """Make ``segment`` end at ``end``; see ``_retarget_start``."""
        if replaced:
            return self._steer_valid(segment.initial(), end)
        last = segment.number_paths() - 1
        tail = self._steer_valid(segment.path_at_rank(last).initial(), end)
        if tail is None:
            return None
        vector = PathVector(segment.output_size)
        for rank in range(last):
            vector.append_path(segment.path_at_rank(rank))
        vector.append_path(tail)
        return vector

    def _shortcut_round(self, current: PathVector, t: List[float], q: List[np.ndarray]) -> PathVector:
        """Build the candidate path of one round.

        Raises:
            ProjectionError: If an original segment cannot be extracted.
            CompositionError: If the chosen segments do not join.
        """
        valid = [False] * 3
        oriented_valid = [False] * 3
        oriented: List[Optional[Path]] = [None] * 3
        result_paths: List[Path] = []

        for i in range(3):
            original = current.extract(t[i], t[i + 1])
            straight = self.steer(q[i], q[i + 1])
            # a kinodynamic steer is not guaranteed to be shorter than the current segment
            if straight is not None and straight.length() < path_length(original, re_estimate=True):
                valid[i] = self._validate(straight)
            if valid[i]:
                result_paths.append(straight)
                oriented[i] = self.problem.steering_method.oriented(straight)
                if oriented[i] is not None:
                    oriented_valid[i] = self._validate(oriented[i])
            else:
                result_paths.append(original)

        logger.debug("t0 = %f ; t1 = %f ; t2 = %f ; t3 = %f", *t)
        for name, i in (('first', 0), ('mid', 1), ('last', 2)):
            logger.debug("%s segment : oriented : %s ; valid : %s", name, oriented_valid[i], valid[i])

        if oriented_valid[1]:
            # mid segment oriented: both neighbours must be adjusted to its new orientation
            if oriented_valid[0]:
                first = oriented[0]
            else:
                first = self._retarget_end(result_paths[0], valid[0], oriented[1].initial())
            last = None
            if first is not None:
                if oriented_valid[2]:
                    last = oriented[2]
                else:
                    last = self._retarget_start(result_paths[2], valid[2], oriented[1].end())
            logger.debug("Mid segment oriented, neighbours adjusted : %s", last is not None)
            if last is not None:
                result_paths = [first, oriented[1], last]
        else:
            if oriented_valid[0]:
                mid = self._retarget_start(result_paths[1], valid[1], oriented[0].end())
                if mid is not None:
                    logger.debug("First segment oriented, mid segment adjusted")
                    result_paths[0] = oriented[0]
                    result_paths[1] = mid
                    valid[1] = not isinstance(mid, PathVector)
            if oriented_valid[2]:
                mid = self._retarget_end(result_paths[1], valid[1], oriented[2].initial())
                if mid is not None:
                    logger.debug("Last segment oriented, mid segment adjusted")
                    result_paths[1] = mid
                    result_paths[2] = oriented[2]

        result = PathVector(current.output_size)
        for segment in result_paths:
            if isinstance(segment, PathVector):
                result.concatenate(segment)
            else:
                result.append_path(segment)
        return result

    def optimize(self, path: Path) -> PathVector:
        """Return a path with the same endpoints, no longer than ``path``.

        Args:
            path: Valid path to shorten. Paths other than a PathVector are
                  wrapped in a one-element PathVector first.

        Returns:
            The best path found; ``path`` itself (wrapped if needed) if no
            round completed.
        """
        if not isinstance(path, PathVector):
            vector = PathVector(path.output_size)
            vector.append_path(path)
            path = vector

        shortcut = self.parameters.shortcut
        if path.duration <= 0.0:
            self.statistics = {'rounds': 0, 'projection_errors': shortcut.projection_error_budget, 'converged': True}
            return path

        n = shortcut.number_of_loops
        lengths = deque([np.inf] * (n - 1), maxlen=n)
        lengths.append(path_length(path))
        projection_errors = shortcut.projection_error_budget
        rounds = 0
        finished = False

        q0 = path.initial()
        q3 = path.end()
        current = path

        while not finished and projection_errors > 0 and rounds < shortcut.max_rounds:
            t0, t3 = current.time_range
            t1, t2 = np.sort(self.rng.uniform(t0, t3, size=2))
            if not t0 < t1 < t2 < t3:
                projection_errors -= 1
                continue
            q1, success = current(t1)
            if not success:
                logger.debug("Configuration at param %f could not be projected", t1)
                projection_errors -= 1
                continue
            q2, success = current(t2)
            if not success:
                logger.debug("Configuration at param %f could not be projected", t2)
                projection_errors -= 1
                continue

            rounds += 1
            try:
                candidate = self._shortcut_round(current, [t0, t1, t2, t3], [q0, q1, q2, q3])
            except (CompositionError, ProjectionError) as e:
                logger.debug("Caught exception with times %f and %f: %s", t1, t2, e)
                projection_errors -= 1
                candidate = None

            if candidate is not None and self._accept(candidate, current, q0, q3):
                current = candidate

            lengths.append(path_length(current))
            finished = (lengths[0] - lengths[-1]) <= shortcut.convergence_tolerance * lengths[-1]
            logger.debug("length = %f", lengths[-1])

        self.statistics = {'rounds': rounds, 'projection_errors': projection_errors, 'converged': finished}
        return current

    def _accept(self, candidate: PathVector, current: PathVector, q0: np.ndarray, q3: np.ndarray) -> bool:
        if not (np.allclose(candidate.initial(), q0, rtol=0.0, atol=CONTINUITY_TOLERANCE)
                and np.allclose(candidate.end(), q3, rtol=0.0, atol=CONTINUITY_TOLERANCE)):
            logger.debug("Candidate changed the path endpoints, round discarded")
            return False
        return path_length(candidate) <= path_length(current)


PATH_OPTIMIZERS: Dict[str, Callable[..., PathOptimizer]] = {
    'RandomShortcutDynamic': DynamicShortcutOptimizer.create,
}


def create_path_optimizer(name: str, problem: Problem, **kwargs) -> PathOptimizer:
    """Instantiate a registered path optimizer by name.

    Args:
        name: Key in ``PATH_OPTIMIZERS``.
        problem: Problem handed to the optimizer factory.
        **kwargs: Extra factory arguments (e.g. ``seed``).
    """
    if name not in PATH_OPTIMIZERS:
        raise ValueError(f"Unknown path optimizer: {name}")
    return PATH_OPTIMIZERS[name](problem, **kwargs)
