"""Contact-aware kinodynamic steering between two configurations."""

import logging
from typing import Optional

import numpy as np

from legged_planning.config import ContactModel
from .contact_node import ContactNode
from .path_vector import Path
from .planner_interface import Problem

logger = logging.getLogger(__name__)


class SteerFunction:
    """Build a dynamically feasible local path ``q1 -> q2``.

    The contacts active at ``q1`` are recomputed by the configuration
    validator and annotated by the stability oracle before the steering
    method is called, so that the local path respects the dynamics those
    contacts allow.
    """

    def __init__(self, problem: Problem, contact_model: ContactModel, endpoint_tolerance: float = 1e-9):
        self.problem = problem
        self.contact_model = contact_model
        self.endpoint_tolerance = endpoint_tolerance

    def make_node(self, configuration: np.ndarray) -> ContactNode:
        """Contact node anchored at ``configuration``."""
        validator = self.problem.config_validator
        validator.randomize_collision_pairs()
        validator.compute_all_contacts(True)
        try:
            report = validator.validate(configuration)
        finally:
            validator.compute_all_contacts(False)
        return ContactNode.from_validation_report(
            configuration, report, self.contact_model, self.problem.stability_oracle
        )

    def _matches(self, a: np.ndarray, b: np.ndarray) -> bool:
        return bool(np.allclose(a, b, rtol=0.0, atol=self.endpoint_tolerance))

    def __call__(self, q1: np.ndarray, q2: np.ndarray) -> Optional[Path]:
        """Steer from ``q1`` to ``q2``.

        Returns:
            The (projected) path, or None if steering failed, drifted from the
            requested endpoints, or could not be projected.
        """
        node = self.make_node(q1)
        path = self.problem.steering_method.steer(node, q2)
        if path is None:
            return None
        if not (self._matches(path.initial(), q1) and self._matches(path.end(), q2)):
            logger.debug("Steering method drifted from the requested endpoints, path rejected")
            return None
        projector = self.problem.path_projector
        if projector is None:
            return path
        success, projected = projector.apply(path)
        if success:
            return projected
        return None
