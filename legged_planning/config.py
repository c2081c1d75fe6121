"""Planner parameters.

Parameters are plain dataclasses. ``PlannerParameters.from_problem_parameters``
builds them from a flat problem-parameter dictionary using the key names the
planning problem exposes (``sizeFootX``, ``sizeFootY``, ``friction``,
``tryJump``, ``PathOptimizersNumberOfLoops``, ``mass``).
"""

import logging
import warnings
from dataclasses import dataclass, field
from typing import Dict, Tuple

logger = logging.getLogger(__name__)


@dataclass
class ContactModel:
    """Contact and dynamics model handed to the stability oracle.

    Attributes:
        friction: Coulomb friction coefficient of every contact.
        size_foot_x: Half length of a rectangular foot along its x axis (meters).
        size_foot_y: Half width of a rectangular foot along its y axis (meters).
        rectangular_contact: True for rectangular feet, False for point contacts.
        mass: Total robot mass (kg).
    """
    friction: float = 0.5
    size_foot_x: float = 0.0
    size_foot_y: float = 0.0
    rectangular_contact: bool = False
    mass: float = 1.0

    def __post_init__(self):
        if self.friction <= 0.0:
            raise ValueError(f"friction must be positive, got {self.friction}")
        if self.mass <= 0.0:
            raise ValueError(f"mass must be positive, got {self.mass}")
        if self.size_foot_x < 0.0 or self.size_foot_y < 0.0:
            raise ValueError("Foot half sizes must be non-negative")
        if self.rectangular_contact and (self.size_foot_x == 0.0 or self.size_foot_y == 0.0):
            raise ValueError("Rectangular contact requires non-zero foot half sizes")

    @property
    def half_extents(self) -> Tuple[float, float]:
        return self.size_foot_x, self.size_foot_y


@dataclass
class ShortcutParameters:
    """Budgets of the dynamic shortcut optimizer.

    Attributes:
        max_rounds: Hard cap on the number of shortcut rounds.
        number_of_loops: Size of the sliding window of path lengths used by the
                         convergence test.
        projection_error_budget: Number of failed samplings / compositions
                                 tolerated before giving up.
        convergence_tolerance: Relative length improvement under which the
                               optimizer stops.
        endpoint_tolerance: Absolute tolerance when comparing path endpoints.
        try_jump: Forwarded to the steering method through the problem
                  parameters; unused by the optimizer loop itself.
    """
    max_rounds: int = 100
    number_of_loops: int = 100
    projection_error_budget: int = 100
    convergence_tolerance: float = 1e-4
    endpoint_tolerance: float = 1e-9
    try_jump: bool = False

    def __post_init__(self):
        if self.max_rounds < 0:
            raise ValueError(f"max_rounds must be non-negative, got {self.max_rounds}")
        if self.number_of_loops < 2:
            raise ValueError(f"number_of_loops must be at least 2, got {self.number_of_loops}")
        if self.projection_error_budget < 1:
            raise ValueError("projection_error_budget must be a positive integer")


@dataclass
class PlannerParameters:
    """Bundle of every tunable used by the planning core."""
    contact_model: ContactModel = field(default_factory=ContactModel)
    shortcut: ShortcutParameters = field(default_factory=ShortcutParameters)

    @classmethod
    def from_problem_parameters(cls, parameters: Dict) -> 'PlannerParameters':
        """Build parameters from a problem-parameter dictionary.

        Foot sizes are given as full lengths and stored as half sizes. When
        they are missing, contacts are modelled as points.

        Args:
            parameters: Flat dictionary of problem parameters.

        Returns:
            PlannerParameters with defaults for every missing key.
        """
        if 'sizeFootX' in parameters and 'sizeFootY' in parameters:
            size_x = float(parameters['sizeFootX']) / 2.
            size_y = float(parameters['sizeFootY']) / 2.
            rectangular = True
        else:
            warnings.warn(
                "Size of foot not defined, using point contacts (size 0).",
                UserWarning
            )
            size_x = 0.0
            size_y = 0.0
            rectangular = False

        if 'friction' in parameters:
            friction = float(parameters['friction'])
        else:
            friction = 0.5
            logger.info("friction not defined, using %.2f as default", friction)

        contact_model = ContactModel(
            friction=friction,
            size_foot_x=size_x,
            size_foot_y=size_y,
            rectangular_contact=rectangular,
            mass=float(parameters.get('mass', 1.0)),
        )
        shortcut = ShortcutParameters(
            number_of_loops=int(parameters.get('PathOptimizersNumberOfLoops', 100)),
            try_jump=bool(parameters.get('tryJump', False)),
        )
        logger.debug("tryJump in random shortcut = %s", shortcut.try_jump)
        return cls(contact_model=contact_model, shortcut=shortcut)
