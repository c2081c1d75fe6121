"""Unit tests for time-parameterized paths."""

import pytest
import numpy as np
from legged_planning.errors import CompositionError, ProjectionError
from legged_planning.helpers.path_optimizers.path_vector import (
    LinearPath,
    PathVector,
    SubchainPath,
    path_length,
)


class BrokenPath(LinearPath):
    """Linear path that cannot be evaluated strictly inside its time range."""

    def __call__(self, t):
        configuration, _ = super().__call__(t)
        return configuration, t <= 0.0 or t >= self.duration


@pytest.fixture
def l_path():
    """Two unit segments turning a right angle, (0,0) -> (1,0) -> (1,1)."""
    return PathVector.from_waypoints([np.array([0.0, 0.0]), np.array([1.0, 0.0]), np.array([1.0, 1.0])])


class TestLinearPath:
    """Tests for LinearPath."""

    def test_default_duration(self):
        """Duration defaults to the distance between the endpoints."""
        path = LinearPath(np.array([0.0, 0.0]), np.array([3.0, 4.0]))

        assert path.duration == pytest.approx(5.0)
        assert path.length() == pytest.approx(5.0)
        assert path.time_range == (0.0, pytest.approx(5.0))

    def test_evaluation(self):
        """Configurations are interpolated linearly and clipped to the range."""
        path = LinearPath(np.array([0.0, 0.0]), np.array([2.0, 0.0]), duration=4.0)

        q, ok = path(1.0)
        assert ok
        assert np.allclose(q, [0.5, 0.0])
        assert np.allclose(path(10.0)[0], [2.0, 0.0])

    def test_zero_duration(self):
        """A zero-duration path stays at its initial configuration."""
        path = LinearPath(np.array([1.0]), np.array([1.0]))

        assert path.duration == 0.0
        assert np.allclose(path(0.0)[0], [1.0])

    def test_invalid(self):
        """Mismatched sizes and negative durations are rejected."""
        with pytest.raises(ValueError):
            LinearPath(np.zeros(2), np.zeros(3))
        with pytest.raises(ValueError):
            LinearPath(np.zeros(2), np.ones(2), duration=-1.0)

    def test_extract(self):
        """Extraction keeps the time scale."""
        path = LinearPath(np.array([0.0]), np.array([4.0]))
        sub = path.extract(1.0, 3.0)

        assert sub.duration == pytest.approx(2.0)
        assert np.allclose(sub.initial(), [1.0])
        assert np.allclose(sub.end(), [3.0])

    def test_extract_out_of_range(self):
        """Intervals outside the time range are rejected."""
        path = LinearPath(np.array([0.0]), np.array([1.0]))
        with pytest.raises(ValueError):
            path.extract(0.5, 2.0)

    def test_configuration_at_failure(self):
        """A failed evaluation raises ProjectionError carrying the time."""
        path = BrokenPath(np.array([0.0]), np.array([1.0]))
        with pytest.raises(ProjectionError) as excinfo:
            path.configuration_at(0.5)
        assert excinfo.value.time == 0.5


class TestPathVector:
    """Tests for PathVector composition and evaluation."""

    def test_from_waypoints(self, l_path):
        """One element per consecutive pair of waypoints."""
        assert l_path.number_paths() == 2
        assert l_path.output_size == 2
        assert l_path.duration == pytest.approx(2.0)
        assert np.allclose(l_path.initial(), [0.0, 0.0])
        assert np.allclose(l_path.end(), [1.0, 1.0])

    def test_from_waypoints_durations(self):
        """Explicit durations are used per element."""
        path = PathVector.from_waypoints([np.zeros(1), np.ones(1)], durations=[3.0])

        assert path.duration == pytest.approx(3.0)
        with pytest.raises(ValueError):
            PathVector.from_waypoints([np.zeros(1), np.ones(1)], durations=[1.0, 2.0])
        with pytest.raises(ValueError):
            PathVector.from_waypoints([np.zeros(1)])

    def test_evaluation_across_elements(self, l_path):
        """Evaluation walks the elements in order."""
        assert np.allclose(l_path(0.5)[0], [0.5, 0.0])
        assert np.allclose(l_path(1.0)[0], [1.0, 0.0])
        assert np.allclose(l_path(1.5)[0], [1.0, 0.5])

    def test_append_discontinuous(self, l_path):
        """Appending a path that does not start at the end raises CompositionError."""
        with pytest.raises(CompositionError, match="Discontinuity"):
            l_path.append_path(LinearPath(np.array([5.0, 5.0]), np.array([6.0, 6.0])))

    def test_append_wrong_size(self, l_path):
        """Appending a path of another size raises CompositionError."""
        with pytest.raises(CompositionError, match="size"):
            l_path.append_path(LinearPath(np.array([1.0, 1.0, 0.0]), np.array([2.0, 1.0, 0.0])))

    def test_concatenate(self, l_path):
        """Concatenation appends every element of the other vector."""
        other = PathVector.from_waypoints([np.array([1.0, 1.0]), np.array([0.0, 1.0]), np.array([0.0, 0.0])])
        l_path.concatenate(other)

        assert l_path.number_paths() == 4
        assert np.allclose(l_path.end(), [0.0, 0.0])

    def test_empty(self):
        """An empty vector has no endpoints."""
        path = PathVector(2)

        assert path.duration == 0.0
        with pytest.raises(ValueError):
            path.initial()
        with pytest.raises(ValueError):
            path.end()

    def test_extract_reuses_whole_elements(self, l_path):
        """Fully covered elements are kept as they are."""
        sub = l_path.extract(0.0, 1.5)

        assert sub.number_paths() == 2
        assert sub.path_at_rank(0) is l_path.path_at_rank(0)
        assert sub.duration == pytest.approx(1.5)
        assert np.allclose(sub.end(), [1.0, 0.5])

    def test_extract_inside_element(self, l_path):
        """An interval inside one element yields a single piece."""
        sub = l_path.extract(1.25, 1.75)

        assert sub.number_paths() == 1
        assert np.allclose(sub.initial(), [1.0, 0.25])
        assert np.allclose(sub.end(), [1.0, 0.75])

    def test_extract_zero_length(self, l_path):
        """A zero-length interval yields a single zero-duration piece."""
        sub = l_path.extract(0.5, 0.5)

        assert sub.number_paths() == 1
        assert sub.duration == 0.0
        assert np.allclose(sub.initial(), [0.5, 0.0])

    def test_extract_unprojectable(self):
        """Extracting at a time that cannot be evaluated raises ProjectionError."""
        vector = PathVector(1)
        vector.append_path(BrokenPath(np.array([0.0]), np.array([1.0])))
        with pytest.raises(ProjectionError):
            vector.extract(0.25, 1.0)


class TestSubchainPath:
    """Tests for SubchainPath."""

    def test_dof_range(self):
        """Only the selected dofs are exposed."""
        path = LinearPath(np.array([0.0, 1.0, 2.0]), np.array([1.0, 2.0, 3.0]))
        sub = SubchainPath(path, 0, 2)

        assert sub.output_size == 2
        assert sub.duration == path.duration
        assert np.allclose(sub.end(), [1.0, 2.0])
        assert np.allclose(sub.extract(0.0, path.duration / 2).end(), [0.5, 1.5])

    def test_invalid_range(self):
        """Dof ranges must lie inside the path."""
        path = LinearPath(np.zeros(2), np.ones(2))
        with pytest.raises(ValueError):
            SubchainPath(path, 1, 3)
        with pytest.raises(ValueError):
            SubchainPath(path, 1, 1)


class TestPathLength:
    """Tests for path_length."""

    def test_sum_of_elements(self, l_path):
        """Length is the sum of the element lengths."""
        assert path_length(l_path) == pytest.approx(2.0)

    def test_re_estimate(self):
        """Re-estimating measures the vector as a whole."""
        path = PathVector.from_waypoints([np.zeros(1), np.ones(1), np.zeros(1)], durations=[2.0, 3.0])

        assert path_length(path, re_estimate=True) == pytest.approx(5.0)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
