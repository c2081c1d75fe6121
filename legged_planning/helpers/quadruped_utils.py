"""Conversion between gym_quadruped leg containers and contact states."""

from typing import Optional, Sequence

import numpy as np
from gym_quadruped.utils.quadruped_utils import LegsAttr

from legged_planning.high_level_planners.contact_generation.data_types import ContactPlacement, State

LEGS_ORDER = ('FL', 'FR', 'RL', 'RR')


def state_from_legs_attr(
    feet_positions: LegsAttr,
    current_contact: np.ndarray,
    configuration: np.ndarray,
    legs_order: Sequence[str] = LEGS_ORDER,
) -> State:
    """Build a contact state from the feet of a quadruped.

    Args:
        feet_positions: World-frame position of every foot.
        current_contact: (4,) binary contact flags, in ``legs_order``.
        configuration: Robot configuration; the base position comes first.
        legs_order: Leg names matching ``current_contact``.

    Returns:
        State whose active contacts are the legs flagged in contact, with
        upward contact normals.
    """
    if len(current_contact) != len(legs_order):
        raise ValueError("current_contact must have one flag per leg")
    state = State(configuration=configuration)
    for leg, in_contact in zip(legs_order, current_contact):
        if in_contact:
            state = state.with_contact(leg, ContactPlacement(position=np.asarray(feet_positions[leg], dtype=float)))
    return state


def legs_attr_from_state(
    state: State,
    default: Optional[np.ndarray] = None,
    legs_order: Sequence[str] = LEGS_ORDER,
) -> LegsAttr:
    """Feet positions of ``state`` as a LegsAttr.

    Legs without contact are set to ``default`` (None if not given).
    """
    positions = {
        leg: state.contact_positions[leg].copy() if state.in_contact(leg) else default
        for leg in legs_order
    }
    return LegsAttr(**positions)
