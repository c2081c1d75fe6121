"""Contact generation for one planning step.

``one_step`` walks the maintained-contact combinatorials of a
``ContactGenHelper`` (fewest broken contacts first). For each one it projects
the robot to the target root configuration while holding the retained
contacts, then tries to recreate the broken contacts on nearby placements
until the resulting contact set is stable. When every combinatorial fails,
the previous contacts are repositioned in place without moving the root.
"""

import logging
from itertools import combinations
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .contact_helper import ContactGenHelper
from .data_types import (
    POSITION_TOLERANCE,
    ContactComputationStatus,
    ContactReport,
    ProjectionReport,
    State,
    StateArena,
)

logger = logging.getLogger(__name__)

HelperFactory = Callable[[State, np.ndarray], ContactGenHelper]


def generate_contact_report(
    parent: ProjectionReport,
    helper: ContactGenHelper,
    repositioned_in_place: bool = False,
) -> ContactReport:
    """Annotate a projection report with how the contact set changed.

    Args:
        parent: Report of the last projection.
        helper: Context holding the previous state.
        repositioned_in_place: Whether the result comes from the reposition fallback.

    Returns:
        ContactReport carrying the flags derived from previous and result states.
    """
    previous = helper.previous_state
    result = parent.result if parent.result is not None else previous
    return ContactReport.with_flags(
        parent,
        result,
        # Kept as "every previous contact is still fixed".
        contact_created=len(result.fixed_contacts(previous)) == previous.nb_contacts,
        multiple_breaks=len(result.contact_breaks(previous)) > 1,
        repositioned_in_place=repositioned_in_place,
        contact_maintained=not repositioned_in_place and not result.contact_creations(previous),
    )


def _is_collision_free(helper: ContactGenHelper, state: State) -> bool:
    report = helper.config_validator.validate(state.configuration)
    if not report.valid:
        logger.debug("Configuration in collision: %s", report.message)
    return report.valid


def _check_stability(helper: ContactGenHelper, state: State) -> Tuple[bool, State]:
    if not helper.check_stability:
        return True, state
    report = helper.stability_oracle.evaluate(state, helper.contact_model)
    return report.stable, state.with_stability(report.stable)


def maintain_contacts(helper: ContactGenHelper) -> ProjectionReport:
    """Return the first maintained-contact combinatorial that projects to the target.

    Candidates are consumed from ``helper.candidates``. A candidate succeeds
    when the projection to the target root configuration succeeds and the
    projected configuration is collision free.

    Args:
        helper: Step context; its candidate queue is consumed.

    Returns:
        Successful ProjectionReport, or a failed one whose result is the
        previous state.
    """
    report = ProjectionReport(result=helper.previous_state)
    while helper.candidates and not report.success:
        candidate = helper.candidates.popleft()
        logger.debug("Trying to maintain contacts %s", list(candidate.active_contacts))
        report = helper.projector.project_to_root_configuration(candidate, helper.target)
        if report.success and not _is_collision_free(helper, report.result):
            report = ProjectionReport(success=False, result=report.result, status=report.status)

    if not report.success:
        return ProjectionReport(success=False, result=helper.previous_state, status=report.status)
    return report


def _generate_contact(
    helper: ContactGenHelper,
    state: State,
    limb: str,
    position: np.ndarray,
    exclude: Optional[np.ndarray] = None,
) -> ProjectionReport:
    """Put ``limb`` in contact on the first collision-free placement near ``position``."""
    for placement in helper.candidate_sampler.query(limb, position, state):
        if exclude is not None and np.allclose(placement.position, exclude, rtol=0.0, atol=POSITION_TOLERANCE):
            continue
        report = helper.projector.project_effector(state, limb, placement)
        if report.success and _is_collision_free(helper, report.result):
            return report
    return ProjectionReport(result=state)


def _place_contacts(helper: ContactGenHelper, state: State, limbs: Iterable[str]) -> Optional[State]:
    for limb in limbs:
        report = _generate_contact(helper, state, limb, helper.contact_target(limb))
        if not report.success:
            logger.debug("No contact found for %s", limb)
            return None
        state = report.result
    return state


def gen_contacts(helper: ContactGenHelper) -> ProjectionReport:
    """Recreate the contacts broken by the working state.

    Subsets of the broken limbs are tried from the largest to the smallest;
    the first subset whose placements are collision free and stable wins.
    The working state itself (no new contact) is tried last.

    Args:
        helper: Step context; ``working_state`` holds the maintained contacts.

    Returns:
        ProjectionReport with status STABLE_CONTACT on success, UNSTABLE_CONTACT
        if placements were found but none was stable, NO_CONTACT otherwise.
    """
    working = helper.working_state
    broken = working.contact_breaks(helper.previous_state)
    status = ContactComputationStatus.NO_CONTACT

    for num_created in range(len(broken), 0, -1):
        for limbs in combinations(broken, num_created):
            state = _place_contacts(helper, working, limbs)
            if state is None:
                continue
            stable, state = _check_stability(helper, state)
            if stable:
                return ProjectionReport(True, state, ContactComputationStatus.STABLE_CONTACT)
            status = ContactComputationStatus.UNSTABLE_CONTACT

    stable, state = _check_stability(helper, working)
    if stable:
        return ProjectionReport(True, state, ContactComputationStatus.STABLE_CONTACT)
    if working.nb_contacts > 0:
        status = ContactComputationStatus.UNSTABLE_CONTACT
    return ProjectionReport(False, state, status)


def reposition_contacts(helper: ContactGenHelper) -> ProjectionReport:
    """Move one active contact of the working state without moving the root.

    Each active limb is removed in turn and put back on the nearest other
    collision-free placement; the first stable result is returned.

    Args:
        helper: Step context; ``working_state`` holds the contacts to reposition.

    Returns:
        ProjectionReport; on failure its result is the previous state.
    """
    current = helper.working_state
    for limb in current.contact_order:
        position = current.contact_positions[limb]
        report = _generate_contact(helper, current.without_contact(limb), limb, position, exclude=position)
        if not report.success:
            continue
        stable, state = _check_stability(helper, report.result)
        if stable:
            logger.debug("Repositioned contact %s in place", limb)
            return ProjectionReport(True, state, ContactComputationStatus.STABLE_CONTACT)
    return ProjectionReport(success=False, result=helper.previous_state)


def gen_contact_from_one_maintain_combinatorial(helper: ContactGenHelper) -> ProjectionReport:
    # retrieve the first feasible maintain combinatorial, then generate contacts for it
    report = maintain_contacts(helper)
    if report.success:
        helper.working_state = report.result
        return gen_contacts(helper)
    return report


def handle_failure(helper: ContactGenHelper) -> ContactReport:
    """Fallback once every combinatorial failed: reposition contacts in place."""
    helper.working_state = helper.previous_state
    report = reposition_contacts(helper)
    return generate_contact_report(report, helper, repositioned_in_place=True)


def one_step(helper: ContactGenHelper) -> ContactReport:
    """Compute the next contact configuration.

    Args:
        helper: Fresh step context.

    Returns:
        ContactReport. ``success`` False means no feasible transition exists
        from the previous state; the caller must replan or abort.
    """
    while True:
        report = gen_contact_from_one_maintain_combinatorial(helper)
        if report.success or not helper.candidates:
            break
    if not report.success:
        logger.debug("All maintain combinatorials failed, repositioning contacts")
        return handle_failure(helper)
    return generate_contact_report(report, helper)


def generate_contact_sequence(
    arena: StateArena,
    targets: Sequence[np.ndarray],
    helper_factory: HelperFactory,
) -> List[ContactReport]:
    """Chain ``one_step`` over a sequence of root targets.

    Successful results are appended to ``arena`` as children of the state they
    were generated from. The chain stops at the first failed step.

    Args:
        arena: Arena whose last state is the starting state.
        targets: Target root configurations, one per step.
        helper_factory: Builds a ContactGenHelper from (previous_state, target).

    Returns:
        reports: One ContactReport per attempted step.
    """
    if len(arena) == 0:
        raise ValueError("arena must contain an initial state")
    reports: List[ContactReport] = []
    step = len(arena) - 1
    for target in targets:
        report = one_step(helper_factory(arena[step], target))
        reports.append(report)
        if not report.success:
            logger.warning("No feasible contacts after step %d, stopping", step)
            break
        step = arena.add(report.result, parent=step)
    return reports
