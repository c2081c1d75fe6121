"""Per-step scratch context for contact generation."""

from collections import deque
from itertools import combinations
from typing import Deque, Optional

import numpy as np

from legged_planning.config import ContactModel
from .data_types import State
from .planner_interface import CandidateSampler, ConfigValidator, ContactProjector, StabilityOracle


def maintain_contacts_combinatorial(state: State, max_contact_breaks: Optional[int] = None) -> Deque[State]:
    """Queue of states retaining subsets of the contacts of ``state``.

    Subsets are ordered by number of broken contacts, fewest first. Within a
    given number of breaks the oldest contacts are broken first.

    Args:
        state: State whose contacts are candidates for being maintained.
        max_contact_breaks: Maximum number of contacts a candidate may break.
                            None allows breaking every contact.

    Returns:
        candidates: Deque of states, each holding one retained subset.
    """
    order = state.contact_order
    max_breaks = len(order) if max_contact_breaks is None else min(max_contact_breaks, len(order))
    candidates = deque()
    for num_breaks in range(max_breaks + 1):
        for broken in combinations(order, num_breaks):
            candidate = state
            for limb in broken:
                candidate = candidate.without_contact(limb)
            candidates.append(candidate)
    return candidates


class ContactGenHelper:
    """Mutable context of one contact generation step.

    Built from the previous state and the target root configuration, then
    consumed by ``one_step`` and discarded.
    """

    def __init__(
        self,
        previous_state: State,
        target: np.ndarray,
        projector: ContactProjector,
        config_validator: ConfigValidator,
        stability_oracle: StabilityOracle,
        candidate_sampler: CandidateSampler,
        contact_model: Optional[ContactModel] = None,
        check_stability: bool = True,
        max_contact_breaks: Optional[int] = None,
    ):
        """Initialize the helper.

        Args:
            previous_state: State reached at the previous step (read-only).
            target: Target root configuration for this step.
            projector: Kinematic projection capability.
            config_validator: Collision validation of configurations.
            stability_oracle: Equilibrium test of contact sets.
            candidate_sampler: Source of nearby contact placements.
            contact_model: Friction, foot geometry and mass. Defaults to ContactModel().
            check_stability: If False, any collision-free contact set is accepted.
            max_contact_breaks: Maximum number of contacts broken by a candidate.
        """
        self.previous_state = previous_state
        self.working_state = previous_state
        self.target = np.asarray(target, dtype=float)
        self.projector = projector
        self.config_validator = config_validator
        self.stability_oracle = stability_oracle
        self.candidate_sampler = candidate_sampler
        self.contact_model = contact_model or ContactModel()
        self.check_stability = check_stability
        self.max_contact_breaks = max_contact_breaks
        self.candidates = maintain_contacts_combinatorial(previous_state, max_contact_breaks)

    @property
    def root_displacement(self) -> np.ndarray:
        return self.target[:3] - self.previous_state.root_position

    def contact_target(self, limb: str) -> np.ndarray:
        """Requested position of a previously active contact after the root motion."""
        return self.previous_state.contact_positions[limb] + self.root_displacement
