"""Time-parameterized paths in configuration space.

Every path is defined over ``[0, duration]``. Evaluating a path returns the
configuration together with a success flag; a flag set to False means the
configuration could not be computed (e.g. a projection did not converge).
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np

from legged_planning.errors import CompositionError, ProjectionError

# Junctions of consecutive paths must match up to this distance.
CONTINUITY_TOLERANCE = 1e-8


class Path:
    """Base class of configuration-space paths."""

    def __call__(self, t: float) -> Tuple[np.ndarray, bool]:
        raise NotImplementedError

    @property
    def duration(self) -> float:
        raise NotImplementedError

    @property
    def time_range(self) -> Tuple[float, float]:
        return 0.0, self.duration

    @property
    def output_size(self) -> int:
        return len(self.initial())

    def length(self) -> float:
        return self.duration

    def initial(self) -> np.ndarray:
        return self.configuration_at(0.0)

    def end(self) -> np.ndarray:
        return self.configuration_at(self.duration)

    def configuration_at(self, t: float) -> np.ndarray:
        """Configuration at ``t``; raises ProjectionError if it cannot be computed."""
        configuration, success = self(t)
        if not success:
            raise ProjectionError(f"Configuration at param {t} could not be projected", time=t)
        return configuration

    def extract(self, t0: float, t1: float) -> 'Path':
        raise NotImplementedError

    def _check_interval(self, t0: float, t1: float) -> Tuple[float, float]:
        eps = 1e-12 * max(1.0, self.duration)
        if t0 > t1 or t0 < -eps or t1 > self.duration + eps:
            raise ValueError(f"Invalid interval [{t0}, {t1}] for a path of duration {self.duration}")
        return max(t0, 0.0), min(t1, self.duration)


class LinearPath(Path):
    """Straight interpolation between two configurations.

    Args:
        initial: Start configuration.
        end: End configuration.
        duration: Time length of the path. Defaults to the euclidean distance
                  between the two configurations.
    """

    def __init__(self, initial: np.ndarray, end: np.ndarray, duration: Optional[float] = None):
        self._initial = np.array(initial, dtype=float)
        self._end = np.array(end, dtype=float)
        if self._initial.shape != self._end.shape:
            raise ValueError("Initial and end configurations must have the same size")
        if duration is None:
            duration = float(np.linalg.norm(self._end - self._initial))
        if duration < 0.0:
            raise ValueError(f"duration must be non-negative, got {duration}")
        self._duration = float(duration)

    @property
    def duration(self) -> float:
        return self._duration

    def __call__(self, t: float) -> Tuple[np.ndarray, bool]:
        if self._duration == 0.0:
            return self._initial.copy(), True
        s = min(max(t / self._duration, 0.0), 1.0)
        return self._initial + s * (self._end - self._initial), True

    def initial(self) -> np.ndarray:
        return self._initial.copy()

    def end(self) -> np.ndarray:
        return self._end.copy()

    def extract(self, t0: float, t1: float) -> 'LinearPath':
        t0, t1 = self._check_interval(t0, t1)
        return LinearPath(self.configuration_at(t0), self.configuration_at(t1), t1 - t0)


class PathVector(Path):
    """Concatenation of paths, evaluated one after the other."""

    def __init__(self, output_size: int):
        self._output_size = output_size
        self._paths: List[Path] = []

    @classmethod
    def from_waypoints(
        cls,
        waypoints: Sequence[np.ndarray],
        durations: Optional[Sequence[float]] = None
    ) -> 'PathVector':
        """Piecewise linear path through ``waypoints``.

        Args:
            waypoints: At least two configurations.
            durations: Optional duration of each piece (len(waypoints) - 1).

        Returns:
            PathVector with one LinearPath per consecutive pair of waypoints.
        """
        if len(waypoints) < 2:
            raise ValueError("At least two waypoints are required")
        if durations is not None and len(durations) != len(waypoints) - 1:
            raise ValueError("durations must have one entry per path piece")
        vector = cls(len(waypoints[0]))
        for i in range(len(waypoints) - 1):
            duration = None if durations is None else durations[i]
            vector.append_path(LinearPath(waypoints[i], waypoints[i + 1], duration))
        return vector

    @property
    def output_size(self) -> int:
        return self._output_size

    @property
    def duration(self) -> float:
        return float(sum(path.duration for path in self._paths))

    def number_paths(self) -> int:
        return len(self._paths)

    def path_at_rank(self, rank: int) -> Path:
        return self._paths[rank]

    def append_path(self, path: Path) -> None:
        """Append ``path`` as a single element.

        Raises:
            CompositionError: If sizes differ or ``path`` does not start where
                              this vector ends.
        """
        if path.output_size != self._output_size:
            raise CompositionError(
                f"Cannot append a path of size {path.output_size} to a vector of size {self._output_size}"
            )
        if self._paths:
            gap = np.linalg.norm(self.end() - path.initial())
            if gap > CONTINUITY_TOLERANCE:
                raise CompositionError(f"Discontinuity of {gap:.3e} when appending path")
        self._paths.append(path)

    def concatenate(self, other: 'PathVector') -> None:
        """Append every element of ``other``."""
        for rank in range(other.number_paths()):
            self.append_path(other.path_at_rank(rank))

    def initial(self) -> np.ndarray:
        if not self._paths:
            raise ValueError("Empty path vector has no initial configuration")
        return self._paths[0].initial()

    def end(self) -> np.ndarray:
        if not self._paths:
            raise ValueError("Empty path vector has no end configuration")
        return self._paths[-1].end()

    def _locate(self, t: float) -> Tuple[int, float]:
        start = 0.0
        for rank, path in enumerate(self._paths):
            if t <= start + path.duration or rank == len(self._paths) - 1:
                return rank, t - start
            start += path.duration
        raise ValueError("Empty path vector cannot be evaluated")

    def __call__(self, t: float) -> Tuple[np.ndarray, bool]:
        rank, local_t = self._locate(t)
        path = self._paths[rank]
        return path(min(max(local_t, 0.0), path.duration))

    def extract(self, t0: float, t1: float) -> 'PathVector':
        """Sub-path over ``[t0, t1]`` as a new PathVector.

        Raises:
            ProjectionError: If a boundary configuration cannot be computed.
        """
        t0, t1 = self._check_interval(t0, t1)
        result = PathVector(self._output_size)
        if t0 == t1:
            rank, local_t = self._locate(t0)
            result.append_path(self._paths[rank].extract(local_t, local_t))
            return result

        start = 0.0
        for path in self._paths:
            end = start + path.duration
            lower, upper = max(t0, start), min(t1, end)
            if upper > lower:
                if lower == start and upper == end:
                    result.append_path(path)
                else:
                    result.append_path(path.extract(lower - start, upper - start))
            start = end
        return result


class SubchainPath(Path):
    """View of a path restricted to the dofs ``[start, stop)``."""

    def __init__(self, path: Path, start: int, stop: int):
        if not 0 <= start < stop <= path.output_size:
            raise ValueError(f"Invalid dof interval [{start}, {stop}) for size {path.output_size}")
        self.path = path
        self.start = start
        self.stop = stop

    @property
    def duration(self) -> float:
        return self.path.duration

    @property
    def output_size(self) -> int:
        return self.stop - self.start

    def length(self) -> float:
        return self.path.length()

    def __call__(self, t: float) -> Tuple[np.ndarray, bool]:
        configuration, success = self.path(t)
        return configuration[self.start:self.stop], success

    def extract(self, t0: float, t1: float) -> 'SubchainPath':
        return SubchainPath(self.path.extract(t0, t1), self.start, self.stop)


def path_length(path: PathVector, re_estimate: bool = False) -> float:
    """Length of a path vector.

    Args:
        path: Path vector to measure.
        re_estimate: If True, measure the vector as a whole; otherwise sum the
                     lengths of its elements.
    """
    if re_estimate:
        return path.length()
    return float(sum(path.path_at_rank(i).length() for i in range(path.number_paths())))
