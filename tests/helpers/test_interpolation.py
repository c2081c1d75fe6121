"""Tests for the parallel interpolation of contact sequences."""

import logging
from concurrent.futures import ThreadPoolExecutor

import pytest
import numpy as np
from legged_planning.errors import CompositionError, NoFeasibleTransitionError, PlanningError
from legged_planning.helpers.interpolation import check_path, concatenate_and_resize, interpolate_states
from legged_planning.helpers.path_optimizers import PathVector, SubchainPath
from legged_planning.high_level_planners.contact_generation.data_types import State


class FakeTransitionPlanner:
    """Straight transitions; the given indices return no path or raise."""

    def __init__(self, states, failing=(), raising=()):
        self.index = {id(state): i for i, state in enumerate(states)}
        self.failing = set(failing)
        self.raising = set(raising)
        self.contexts = []

    def plan(self, context, start, goal):
        self.contexts.append(context)
        if self.index[id(start)] in self.raising:
            raise PlanningError(f"planner crashed at {self.index[id(start)]}")
        if self.index[id(start)] in self.failing:
            return None
        return PathVector.from_waypoints([start.configuration, goal.configuration])


class CountingOptimizer:
    def __init__(self, calls):
        self.calls = calls

    def optimize(self, path):
        self.calls.append(path)
        return path


@pytest.fixture
def states():
    """Four states walking forward; the last dof is time."""
    return [State(configuration=np.array([0.1 * i, 0.0, 0.3, float(i)])) for i in range(4)]


class TestCheckPath:
    """Tests for check_path."""

    def test_all_valid(self):
        """Every transition is kept when all succeeded."""
        assert check_path([True, True, True]) == 3

    def test_prefix(self, caplog):
        """Transitions after the first failure are dropped with a warning."""
        with caplog.at_level(logging.WARNING):
            assert check_path([True, True, False, True]) == 2
        assert "No path found at state 2" in caplog.text

    def test_first_transition_failed(self):
        """A failed first transition is an error."""
        with pytest.raises(NoFeasibleTransitionError):
            check_path([False, True])


class TestConcatenateAndResize:
    """Tests for concatenate_and_resize."""

    def test_one_element_per_transition(self, states):
        """Transitions are appended as single elements."""
        paths = [
            PathVector.from_waypoints([states[i].configuration, states[i + 1].configuration])
            for i in range(3)
        ]
        result = concatenate_and_resize(paths, 3)

        assert isinstance(result, SubchainPath)
        assert result.output_size == 3
        assert result.path.number_paths() == 3

    def test_discontinuous_transitions(self, states):
        """Transitions that do not join raise CompositionError."""
        paths = [
            PathVector.from_waypoints([states[0].configuration, states[1].configuration]),
            PathVector.from_waypoints([states[2].configuration, states[3].configuration]),
        ]
        with pytest.raises(CompositionError):
            concatenate_and_resize(paths, 2)


class TestInterpolateStates:
    """Tests for interpolate_states."""

    def test_continuous_result(self, states):
        """N transitions give one path with N - 1 junctions at the shared states."""
        planner = FakeTransitionPlanner(states)
        result = interpolate_states(states, planner, context_factory=object)

        complete = result.path
        assert complete.number_paths() == 3
        for i in range(2):
            junction = complete.path_at_rank(i).end()
            assert np.allclose(junction, states[i + 1].configuration)
            assert np.allclose(complete.path_at_rank(i + 1).initial(), junction)
        assert np.allclose(result.initial(), states[0].configuration[:3])
        assert np.allclose(result.end(), states[-1].configuration[:3])

    def test_private_contexts(self, states):
        """Every transition is planned with its own context."""
        planner = FakeTransitionPlanner(states)
        interpolate_states(states, planner, context_factory=object, max_workers=2)

        assert len(planner.contexts) == 3
        assert len({id(context) for context in planner.contexts}) == 3

    def test_keep_time_dof(self, states):
        """The full configuration can be kept."""
        result = interpolate_states(states, FakeTransitionPlanner(states), context_factory=object, drop_last_dof=False)

        assert isinstance(result, PathVector)
        assert result.output_size == 4

    def test_optimizer_passes(self, states):
        """Each transition is optimized the requested number of times."""
        calls = []
        interpolate_states(
            states,
            FakeTransitionPlanner(states),
            context_factory=object,
            optimizer_factory=lambda context: CountingOptimizer(calls),
            num_optimizations=2,
        )

        assert len(calls) == 6

    def test_truncated_after_failure(self, states, caplog):
        """A failed transition truncates the result to the preceding ones."""
        planner = FakeTransitionPlanner(states, failing=[1])
        with caplog.at_level(logging.WARNING):
            result = interpolate_states(states, planner, context_factory=object)

        assert result.path.number_paths() == 1
        assert np.allclose(result.end(), states[1].configuration[:3])
        assert "No path found at state 1" in caplog.text

    def test_planning_error_truncates(self, states, caplog):
        """A transition raising a planning error is dropped like a failed one."""
        planner = FakeTransitionPlanner(states, raising=[2])
        with caplog.at_level(logging.WARNING):
            result = interpolate_states(states, planner, context_factory=object)

        assert result.path.number_paths() == 2
        assert np.allclose(result.end(), states[2].configuration[:3])
        assert "Transition 2 failed" in caplog.text
        assert "planner crashed at 2" in caplog.text

    def test_planning_error_in_first_transition(self, states):
        """A planning error in the first transition leaves nothing to keep."""
        with pytest.raises(NoFeasibleTransitionError):
            interpolate_states(states, FakeTransitionPlanner(states, raising=[0]), context_factory=object)

    def test_default_pool_size(self, states, monkeypatch):
        """Without max_workers the executor picks its own bounded pool size."""
        sizes = []

        class RecordingExecutor(ThreadPoolExecutor):
            def __init__(self, max_workers=None):
                sizes.append(max_workers)
                super().__init__(max_workers=max_workers)

        monkeypatch.setattr('legged_planning.helpers.interpolation.ThreadPoolExecutor', RecordingExecutor)
        interpolate_states(states, FakeTransitionPlanner(states), context_factory=object)

        assert sizes == [None]

    def test_first_failure(self, states):
        """A failed first transition raises NoFeasibleTransitionError."""
        with pytest.raises(NoFeasibleTransitionError):
            interpolate_states(states, FakeTransitionPlanner(states, failing=[0]), context_factory=object)

    def test_requires_two_states(self, states):
        """At least one transition is needed."""
        with pytest.raises(ValueError):
            interpolate_states(states[:1], FakeTransitionPlanner(states), context_factory=object)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
