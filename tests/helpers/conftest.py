"""Fake collaborators shared by the path optimization tests."""

import pytest
import numpy as np
from legged_planning.helpers.path_optimizers import LinearPath, PathVector, Problem
from legged_planning.high_level_planners.contact_generation.data_types import (
    ContactPlacement,
    StabilityReport,
    ValidationReport,
)


class FakeConfigValidator:
    """Report a fixed set of contacts and record how it was driven."""

    def __init__(self, contacts=None, error=None):
        self.contacts = contacts or {}
        self.error = error
        self.calls = []

    def validate(self, configuration):
        self.calls.append('validate')
        if self.error is not None:
            raise self.error
        return ValidationReport(valid=True, contacts=dict(self.contacts))

    def compute_all_contacts(self, enabled):
        self.calls.append(('compute_all_contacts', enabled))

    def randomize_collision_pairs(self):
        self.calls.append('randomize_collision_pairs')


class FakeOracle:
    def __init__(self, stable=True):
        self.stable = stable
        self.calls = 0

    def evaluate(self, state, contact_model):
        self.calls += 1
        return StabilityReport(stable=self.stable, robustness=1.0)


class FakeSteering:
    """Straight-line steering; oriented variants are copies of the steered path."""

    def __init__(self, orient=False, drift=None, fail=False):
        self.orient = orient
        self.drift = drift
        self.fail = fail
        self.nodes = []
        self.oriented_paths = []

    def steer(self, node, target):
        self.nodes.append(node)
        if self.fail:
            return None
        end = np.asarray(target, dtype=float)
        if self.drift is not None:
            end = end + self.drift
        return LinearPath(node.configuration, end)

    def oriented(self, path):
        if not self.orient:
            return None
        oriented = LinearPath(path.initial(), path.end(), path.duration)
        self.oriented_paths.append(oriented)
        return oriented


class FakePathValidator:
    def __init__(self, valid=None):
        self.valid = valid or (lambda path: True)
        self.calls = 0

    def validate(self, path):
        self.calls += 1
        ok = bool(self.valid(path))
        return ok, path if ok else None, None


class FakePathProjector:
    """Shift the end of every path by ``offset``, or fail."""

    def __init__(self, success=True, offset=None):
        self.success = success
        self.offset = offset

    def apply(self, path):
        if not self.success:
            return False, None
        if self.offset is None:
            return True, path
        return True, LinearPath(path.initial(), path.end() + self.offset)


PARAMETERS = {'sizeFootX': 0.2, 'sizeFootY': 0.1, 'friction': 0.6}


@pytest.fixture
def make_problem():
    """Factory of problems whose collaborators can be overridden."""
    def _make(**overrides):
        kwargs = dict(
            config_validator=FakeConfigValidator(),
            path_validator=FakePathValidator(),
            steering_method=FakeSteering(),
            stability_oracle=FakeOracle(),
            path_projector=None,
            parameters=dict(PARAMETERS),
        )
        kwargs.update(overrides)
        return Problem(**kwargs)
    return _make


@pytest.fixture
def fakes():
    """Fake collaborator classes, for tests needing custom behaviour."""
    class Fakes:
        ConfigValidator = FakeConfigValidator
        Oracle = FakeOracle
        Steering = FakeSteering
        PathValidator = FakePathValidator
        PathProjector = FakePathProjector
        Placement = ContactPlacement
    return Fakes


@pytest.fixture
def zigzag_path():
    """Zigzag through five waypoints, much longer than the straight line."""
    waypoints = [
        np.array([0.0, 0.0, 0.3]),
        np.array([0.5, 0.5, 0.3]),
        np.array([1.0, 0.0, 0.3]),
        np.array([1.5, 0.5, 0.3]),
        np.array([2.0, 0.0, 0.3]),
    ]
    return PathVector.from_waypoints(waypoints)
