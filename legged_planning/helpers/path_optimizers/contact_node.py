"""Contact-annotated configuration used as the start of a kinodynamic steer."""

from dataclasses import dataclass

import numpy as np

from legged_planning.config import ContactModel
from legged_planning.high_level_planners.contact_generation.data_types import (
    StabilityReport,
    State,
    ValidationReport,
)
from legged_planning.high_level_planners.contact_generation.geometry_utils import foot_support_points
from legged_planning.high_level_planners.contact_generation.planner_interface import StabilityOracle


@dataclass
class ContactNode:
    """Configuration with the contacts active at it and their stability.

    Attributes:
        configuration: Configuration the node is anchored at.
        state: Contacts found by the validator at ``configuration``.
        stability: Oracle verdict for those contacts.
        support_points: (k, 3) support points of every contact, four per
                        rectangular foot or one per point contact.
    """
    configuration: np.ndarray
    state: State
    stability: StabilityReport
    support_points: np.ndarray

    @classmethod
    def from_validation_report(
        cls,
        configuration: np.ndarray,
        report: ValidationReport,
        contact_model: ContactModel,
        stability_oracle: StabilityOracle,
    ) -> 'ContactNode':
        """Fill a node from the contacts reported by a configuration validator.

        Args:
            configuration: Configuration that was validated.
            report: Validation report computed in "all contacts" mode.
            contact_model: Friction, foot geometry and mass.
            stability_oracle: Oracle computing the stability annotation.

        Returns:
            ContactNode anchored at ``configuration``.
        """
        state = State(
            configuration=configuration,
            contact_positions={limb: c.position for limb, c in report.contacts.items()},
            contact_rotations={limb: c.rotation for limb, c in report.contacts.items()},
            contact_normals={limb: c.normal for limb, c in report.contacts.items()},
        )
        stability = stability_oracle.evaluate(state, contact_model)
        state = state.with_stability(stability.stable)

        half_x, half_y = contact_model.half_extents
        points = [
            foot_support_points(
                state.contact_positions[limb],
                state.contact_rotations[limb],
                half_x,
                half_y,
                rectangular=contact_model.rectangular_contact,
            )
            for limb in state.contact_order
        ]
        support_points = np.vstack(points) if points else np.zeros((0, 3))
        return cls(
            configuration=np.array(configuration, dtype=float),
            state=state,
            stability=stability,
            support_points=support_points,
        )
