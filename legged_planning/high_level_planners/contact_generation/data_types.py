"""Data types for contact generation."""

from dataclasses import dataclass, field, replace
from enum import IntEnum
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

import numpy as np

from .geometry_utils import point_in_box, point_in_circle

# Contact poses closer than this are considered identical.
POSITION_TOLERANCE = 1e-9

_UP = np.array([0.0, 0.0, 1.0])


def _frozen_array(value) -> np.ndarray:
    array = np.array(value, dtype=float)
    array.setflags(write=False)
    return array


class ContactComputationStatus(IntEnum):
    NO_CONTACT = 0
    STABLE_CONTACT = 1
    UNSTABLE_CONTACT = 2


@dataclass(frozen=True, eq=False)
class ContactPlacement:
    """Candidate pose for one end-effector.

    Attributes:
        position: (3,) contact position in world frame.
        normal: (3,) surface normal at the contact.
        rotation: (3, 3) end-effector orientation in world frame.
        surface_id: Index of the surface the placement lies on, if known.
    """
    position: np.ndarray
    normal: np.ndarray = field(default_factory=lambda: _UP.copy())
    rotation: np.ndarray = field(default_factory=lambda: np.eye(3))
    surface_id: Optional[int] = None

    def __post_init__(self):
        object.__setattr__(self, 'position', _frozen_array(self.position))
        object.__setattr__(self, 'normal', _frozen_array(self.normal))
        object.__setattr__(self, 'rotation', _frozen_array(self.rotation))
        if self.position.shape != (3,) or self.normal.shape != (3,):
            raise ValueError("Contact position and normal must have shape (3,)")
        if self.rotation.shape != (3, 3):
            raise ValueError("Contact rotation must have shape (3, 3)")


@dataclass
class ContactSurface:
    """Admissible contact patch (e.g. a stepping stone top).

    Attributes:
        center: (3,) center of the patch in world frame.
        normal: (3,) outward normal of the patch.
        radius: Radius for circular patches (meters). None if using box.
        box_half_size: (dx, dy) half-size for box patches (meters). None if using circle.
        region_type: 'circle' or 'box'.
    """
    center: np.ndarray
    normal: np.ndarray = field(default_factory=lambda: _UP.copy())
    radius: Optional[float] = None
    box_half_size: Optional[Tuple[float, float]] = None
    region_type: str = 'circle'

    def __post_init__(self):
        if self.region_type not in ('circle', 'box'):
            raise ValueError(f"Unknown region type: {self.region_type}")
        if self.region_type == 'circle' and self.radius is None:
            raise ValueError("Circle region requires radius")
        if self.region_type == 'box' and self.box_half_size is None:
            raise ValueError("Box region requires box_half_size")
        self.center = np.asarray(self.center, dtype=float)
        self.normal = np.asarray(self.normal, dtype=float)

    def contains(self, point: np.ndarray) -> bool:
        if self.region_type == 'circle':
            return point_in_circle(point, self.center, self.radius)
        return point_in_box(point, self.center, self.box_half_size)


@dataclass(frozen=True, eq=False)
class State:
    """Immutable snapshot of a robot state and its active contacts.

    Attributes:
        configuration: Full configuration vector, root position first.
        contact_positions: Limb name -> (3,) contact position.
        contact_rotations: Limb name -> (3, 3) contact orientation.
        contact_normals: Limb name -> (3,) surface normal at the contact.
        contact_order: Active limbs, in the order their contacts were created.
        stable: Whether the contact set was found to be stable.
    """
    configuration: np.ndarray
    contact_positions: Mapping[str, np.ndarray] = field(default_factory=dict)
    contact_rotations: Mapping[str, np.ndarray] = field(default_factory=dict)
    contact_normals: Mapping[str, np.ndarray] = field(default_factory=dict)
    contact_order: Tuple[str, ...] = ()
    stable: bool = False

    def __post_init__(self):
        positions = {limb: _frozen_array(p) for limb, p in self.contact_positions.items()}
        if set(self.contact_rotations) - set(positions) or set(self.contact_normals) - set(positions):
            raise ValueError("Contact rotations and normals require a contact position")
        rotations = {
            limb: _frozen_array(self.contact_rotations.get(limb, np.eye(3))) for limb in positions
        }
        normals = {
            limb: _frozen_array(self.contact_normals.get(limb, _UP)) for limb in positions
        }
        order = tuple(self.contact_order) if self.contact_order else tuple(positions)
        if len(order) != len(set(order)) or set(order) != set(positions):
            raise ValueError("contact_order must list every active contact exactly once")

        object.__setattr__(self, 'configuration', _frozen_array(self.configuration))
        object.__setattr__(self, 'contact_positions', MappingProxyType(positions))
        object.__setattr__(self, 'contact_rotations', MappingProxyType(rotations))
        object.__setattr__(self, 'contact_normals', MappingProxyType(normals))
        object.__setattr__(self, 'contact_order', order)

    @property
    def active_contacts(self) -> Tuple[str, ...]:
        return self.contact_order

    @property
    def nb_contacts(self) -> int:
        return len(self.contact_order)

    @property
    def root_position(self) -> np.ndarray:
        return self.configuration[:3]

    def in_contact(self, limb: str) -> bool:
        return limb in self.contact_positions

    def placement(self, limb: str) -> ContactPlacement:
        return ContactPlacement(
            position=self.contact_positions[limb],
            normal=self.contact_normals[limb],
            rotation=self.contact_rotations[limb],
        )

    def _same_position(self, limb: str, other: 'State') -> bool:
        return bool(np.allclose(
            self.contact_positions[limb], other.contact_positions[limb],
            rtol=0.0, atol=POSITION_TOLERANCE,
        ))

    def fixed_contacts(self, previous: 'State') -> List[str]:
        """Limbs in contact in both states at the same position."""
        return [
            limb for limb in self.contact_order
            if previous.in_contact(limb) and self._same_position(limb, previous)
        ]

    def contact_breaks(self, previous: 'State') -> List[str]:
        """Limbs in contact in ``previous`` that are free or have moved here."""
        return [
            limb for limb in previous.contact_order
            if not self.in_contact(limb) or not self._same_position(limb, previous)
        ]

    def contact_creations(self, previous: 'State') -> List[str]:
        """Limbs in contact here that were free or elsewhere in ``previous``."""
        return [
            limb for limb in self.contact_order
            if not previous.in_contact(limb) or not self._same_position(limb, previous)
        ]

    def with_contact(self, limb: str, placement: ContactPlacement) -> 'State':
        """Return a copy where ``limb`` is in contact at ``placement``.

        A limb already in contact keeps its rank in the creation order.
        """
        positions = dict(self.contact_positions)
        rotations = dict(self.contact_rotations)
        normals = dict(self.contact_normals)
        positions[limb] = placement.position
        rotations[limb] = placement.rotation
        normals[limb] = placement.normal
        order = self.contact_order if limb in self.contact_order else self.contact_order + (limb,)
        return replace(
            self,
            contact_positions=positions,
            contact_rotations=rotations,
            contact_normals=normals,
            contact_order=order,
            stable=False,
        )

    def without_contact(self, limb: str) -> 'State':
        positions = {k: v for k, v in self.contact_positions.items() if k != limb}
        rotations = {k: v for k, v in self.contact_rotations.items() if k != limb}
        normals = {k: v for k, v in self.contact_normals.items() if k != limb}
        return replace(
            self,
            contact_positions=positions,
            contact_rotations=rotations,
            contact_normals=normals,
            contact_order=tuple(l for l in self.contact_order if l != limb),
            stable=False,
        )

    def with_configuration(self, configuration: np.ndarray) -> 'State':
        return replace(self, configuration=configuration)

    def with_stability(self, stable: bool) -> 'State':
        return replace(self, stable=stable)


class StateArena:
    """Append-only store of states indexed by step id.

    Parent links are kept as indices so that a plan sequence can be walked
    without holding references between states.
    """

    def __init__(self, initial_state: Optional[State] = None):
        self._states: List[State] = []
        self._parents: List[Optional[int]] = []
        if initial_state is not None:
            self.add(initial_state)

    def add(self, state: State, parent: Optional[int] = None) -> int:
        if parent is not None and not 0 <= parent < len(self._states):
            raise IndexError(f"Unknown parent step {parent}")
        self._states.append(state)
        self._parents.append(parent)
        return len(self._states) - 1

    def parent(self, step_id: int) -> Optional[int]:
        return self._parents[step_id]

    def lineage(self, step_id: int) -> List[int]:
        """Step ids from the root of the arena down to ``step_id``."""
        chain = []
        current = step_id
        while current is not None:
            chain.append(current)
            current = self._parents[current]
        return chain[::-1]

    def states(self, step_ids: List[int]) -> List[State]:
        return [self._states[i] for i in step_ids]

    def __getitem__(self, step_id: int) -> State:
        return self._states[step_id]

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[State]:
        return iter(self._states)


@dataclass(frozen=True)
class ProjectionReport:
    """Outcome of a projection. ``result`` is meaningless when ``success`` is False."""
    success: bool = False
    result: Optional[State] = None
    status: ContactComputationStatus = ContactComputationStatus.NO_CONTACT


@dataclass(frozen=True)
class ContactReport(ProjectionReport):
    """Projection report annotated with how the contact set changed.

    Instances are built by ``generate_contact_report``; the flags are derived
    from the previous and resulting states and cannot be passed to the
    constructor.
    """
    contact_maintained: bool = field(default=False, init=False)
    multiple_breaks: bool = field(default=False, init=False)
    contact_created: bool = field(default=False, init=False)
    repositioned_in_place: bool = field(default=False, init=False)

    @classmethod
    def with_flags(
        cls,
        parent: ProjectionReport,
        result: State,
        contact_maintained: bool,
        multiple_breaks: bool,
        contact_created: bool,
        repositioned_in_place: bool,
    ) -> 'ContactReport':
        report = cls(success=parent.success, result=result, status=parent.status)
        object.__setattr__(report, 'contact_maintained', contact_maintained)
        object.__setattr__(report, 'multiple_breaks', multiple_breaks)
        object.__setattr__(report, 'contact_created', contact_created)
        object.__setattr__(report, 'repositioned_in_place', repositioned_in_place)
        return report


@dataclass
class ValidationReport:
    """Configuration validation outcome.

    Attributes:
        valid: Whether the configuration passed every check.
        contacts: Limb name -> placement of every contact the validator found.
        message: Human readable reason for a failure.
    """
    valid: bool
    contacts: Dict[str, ContactPlacement] = field(default_factory=dict)
    message: str = ''


@dataclass
class StabilityReport:
    """Stability oracle outcome.

    Attributes:
        stable: Whether the contacts can sustain the robot.
        robustness: Oracle-specific margin, larger is more robust.
        dynamics: Optional matrices describing the admissible dynamics
                  (e.g. the H, h of the contact wrench cone).
    """
    stable: bool
    robustness: float = 0.0
    dynamics: Optional[Tuple[np.ndarray, np.ndarray]] = None
