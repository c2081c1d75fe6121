"""Interface protocols for path optimization collaborators."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol, Tuple

import numpy as np

from legged_planning.high_level_planners.contact_generation.planner_interface import (
    ConfigValidator,
    StabilityOracle,
)
from .contact_node import ContactNode
from .path_vector import Path, PathVector


class SteeringMethod(Protocol):
    """Dynamics-bounded local steering between configurations."""

    def steer(self, node: ContactNode, target: np.ndarray) -> Optional[Path]:
        """Direct path from ``node.configuration`` to ``target``, or None if none exists."""
        ...

    def oriented(self, path: Path) -> Optional[Path]:
        """Copy of ``path`` whose heading follows the direction of travel.

        Returns None when ``path`` was not produced by this steering method.
        """
        ...


class PathValidator(Protocol):
    """Collision and dynamic feasibility check of a whole path."""

    def validate(self, path: Path) -> Tuple[bool, Optional[Path], Any]:
        """Return (valid, valid_prefix, report)."""
        ...


class PathProjector(Protocol):
    """Re-projection of a path onto the constraint manifold."""

    def apply(self, path: Path) -> Tuple[bool, Optional[Path]]:
        """Return (success, projected_path)."""
        ...


class PathOptimizer(Protocol):
    """Any strategy refining a path while keeping its endpoints."""

    def optimize(self, path: Path) -> PathVector:
        ...


@dataclass
class Problem:
    """Collaborators and parameters shared by the path optimizers.

    Attributes:
        config_validator: Configuration validator, used to list contacts.
        path_validator: Validator of candidate paths.
        steering_method: Kinodynamic steering method.
        stability_oracle: Equilibrium test used to annotate steering nodes.
        path_projector: Optional path projector applied after steering.
        parameters: Flat problem parameters (``sizeFootX``, ``friction``, ...).
    """
    config_validator: ConfigValidator
    path_validator: PathValidator
    steering_method: SteeringMethod
    stability_oracle: StabilityOracle
    path_projector: Optional[PathProjector] = None
    parameters: Dict[str, Any] = field(default_factory=dict)
