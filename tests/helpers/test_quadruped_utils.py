"""Tests for the gym_quadruped LegsAttr adapter."""

import pytest
import numpy as np

pytest.importorskip("gym_quadruped")

from gym_quadruped.utils.quadruped_utils import LegsAttr  # noqa: E402
from legged_planning.helpers.quadruped_utils import legs_attr_from_state, state_from_legs_attr  # noqa: E402


@pytest.fixture
def feet_positions():
    return LegsAttr(
        FL=np.array([0.2, 0.1, 0.0]),
        FR=np.array([0.2, -0.1, 0.0]),
        RL=np.array([-0.2, 0.1, 0.0]),
        RR=np.array([-0.2, -0.1, 0.0]),
    )


class TestQuadrupedAdapter:
    """Tests for conversions between LegsAttr and State."""

    def test_state_from_contacts(self, feet_positions):
        """Only legs flagged in contact become active contacts."""
        state = state_from_legs_attr(feet_positions, np.array([1, 0, 0, 1]), np.array([0.0, 0.0, 0.3]))

        assert state.contact_order == ('FL', 'RR')
        assert np.allclose(state.contact_positions['RR'], [-0.2, -0.1, 0.0])
        assert np.allclose(state.root_position, [0.0, 0.0, 0.3])

    def test_contact_flag_count(self, feet_positions):
        """One contact flag per leg is required."""
        with pytest.raises(ValueError):
            state_from_legs_attr(feet_positions, np.array([1, 1]), np.zeros(3))

    def test_round_trip_positions(self, feet_positions):
        """Swing legs take the default value."""
        state = state_from_legs_attr(feet_positions, np.array([1, 1, 1, 0]), np.zeros(3))
        legs = legs_attr_from_state(state, default=np.full(3, np.nan))

        assert np.allclose(legs.FL, feet_positions.FL)
        assert np.allclose(legs['RL'], feet_positions.RL)
        assert np.all(np.isnan(legs.RR))


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
