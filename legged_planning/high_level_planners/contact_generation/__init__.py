"""Contact generation: choose the next contact set of a legged robot."""

from .algorithm import (
    gen_contact_from_one_maintain_combinatorial,
    gen_contacts,
    generate_contact_report,
    generate_contact_sequence,
    handle_failure,
    maintain_contacts,
    one_step,
    reposition_contacts,
)
from .candidate_sampler import SurfaceCandidateSampler, build_contact_surface_grid
from .contact_helper import ContactGenHelper, maintain_contacts_combinatorial
from .data_types import (
    ContactComputationStatus,
    ContactPlacement,
    ContactReport,
    ContactSurface,
    ProjectionReport,
    StabilityReport,
    State,
    StateArena,
    ValidationReport,
)
from .planner_interface import CandidateSampler, ConfigValidator, ContactProjector, StabilityOracle

__all__ = [
    'gen_contact_from_one_maintain_combinatorial',
    'gen_contacts',
    'generate_contact_report',
    'generate_contact_sequence',
    'handle_failure',
    'maintain_contacts',
    'one_step',
    'reposition_contacts',
    'SurfaceCandidateSampler',
    'build_contact_surface_grid',
    'ContactGenHelper',
    'maintain_contacts_combinatorial',
    'ContactComputationStatus',
    'ContactPlacement',
    'ContactReport',
    'ContactSurface',
    'ProjectionReport',
    'StabilityReport',
    'State',
    'StateArena',
    'ValidationReport',
    'CandidateSampler',
    'ConfigValidator',
    'ContactProjector',
    'StabilityOracle',
]
