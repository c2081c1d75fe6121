"""Interface protocols for the collaborators of contact generation.

The planning core never implements kinematics, collision checking or
equilibrium computation. It drives objects satisfying these protocols.
"""

from typing import Protocol, Sequence

import numpy as np

from legged_planning.config import ContactModel
from .data_types import ContactPlacement, ProjectionReport, StabilityReport, State, ValidationReport


class ConfigValidator(Protocol):
    """Collision (and optionally contact) validation of configurations."""

    def validate(self, configuration: np.ndarray) -> ValidationReport:
        """Check a configuration.

        Args:
            configuration: Full configuration vector.

        Returns:
            ValidationReport; in "compute all contacts" mode its ``contacts``
            lists every contact found at the configuration.
        """
        ...

    def compute_all_contacts(self, enabled: bool) -> None:
        """Toggle exhaustive contact reporting in ``validate``."""
        ...

    def randomize_collision_pairs(self) -> None:
        """Shuffle the internal order in which collision pairs are checked."""
        ...


class StabilityOracle(Protocol):
    """Static / dynamic equilibrium test of a contact set."""

    def evaluate(self, state: State, contact_model: ContactModel) -> StabilityReport:
        """Decide whether the active contacts of ``state`` can support the robot.

        Args:
            state: State whose active contacts and configuration are evaluated.
            contact_model: Friction, foot geometry and mass.

        Returns:
            StabilityReport with the stability verdict and supporting dynamics.
        """
        ...


class ContactProjector(Protocol):
    """Kinematic projection under contact constraints."""

    def project_to_root_configuration(self, state: State, target: np.ndarray) -> ProjectionReport:
        """Move the root to ``target`` while keeping every contact of ``state`` fixed.

        Args:
            state: State whose contacts must be maintained.
            target: Target root configuration.

        Returns:
            ProjectionReport whose result keeps the contacts of ``state``.
        """
        ...

    def project_effector(self, state: State, limb: str, placement: ContactPlacement) -> ProjectionReport:
        """Place ``limb`` at ``placement`` with the root and other contacts fixed.

        Args:
            state: Current state.
            limb: Limb to put in contact.
            placement: Requested position / orientation of the end-effector.

        Returns:
            ProjectionReport whose result has ``limb`` in contact at ``placement``.
        """
        ...


class CandidateSampler(Protocol):
    """Spatial index of admissible contact placements."""

    def query(self, limb: str, position: np.ndarray, state: State) -> Sequence[ContactPlacement]:
        """Return placements near ``position`` for ``limb``, best first."""
        ...
