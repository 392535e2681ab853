from __future__ import annotations

import logging
from typing import Sequence

from instance_construction_engine.internal.candidates import ConstructionCandidate
from instance_construction_engine.model.policy import ConstructionPolicy
from instance_construction_engine.model.problems import (
    MissingParameter,
    UncheckedAssignment,
    UnknownData,
)


def disqualification_reason(
    candidate: ConstructionCandidate, policy: ConstructionPolicy
) -> str | None:
    """
    Returns why `candidate` cannot be selected under `policy`, or None when it
    is eligible. A missing parameter disqualifies whatever the policy says.
    """
    if candidate.has_problem(MissingParameter):
        return "missing parameters"
    if not policy.ignore_unknown_data and candidate.has_problem(UnknownData):
        return "unknown data"
    if not policy.ignore_unchecked_assignments and candidate.has_problem(
        UncheckedAssignment
    ):
        return "unchecked assignments"
    return None


def is_eligible(candidate: ConstructionCandidate, policy: ConstructionPolicy) -> bool:
    return disqualification_reason(candidate, policy) is None


def _rank(candidate: ConstructionCandidate) -> tuple[int, int]:
    return len(candidate.problems), len(candidate.property_assignments)


def select_candidate(
    candidates: Sequence[ConstructionCandidate], policy: ConstructionPolicy
) -> ConstructionCandidate | None:
    """
    Picks the best eligible candidate.

    Fewer problems win; on equal problem counts the candidate that leaves fewer
    items to property assignment wins. Remaining ties go to the candidate that
    comes first in constructor declaration order.

    Returns:
        The selected candidate, or None when no candidate is eligible.
    """
    eligible: list[ConstructionCandidate] = []
    for candidate in candidates:
        reason = disqualification_reason(candidate, policy)
        if reason is not None:
            logging.debug(
                f"candidate disqualified: {candidate.constructor.signature_text} ({reason})"
            )
            continue
        eligible.append(candidate)

    if not eligible:
        return None

    best = min(eligible, key=_rank)
    logging.debug(f"candidate selected: {best.constructor.signature_text}")
    return best
