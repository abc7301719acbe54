"""
Resume review status transitions.

The whole rule set lives in one table keyed by
``(current, requested, actor_role, job_expired)``. Statuses only move
forward: ``pending`` can become ``shortlisted`` or ``rejected`` and nothing
ever goes back to ``pending`` or crosses between the two final states.
Agencies lose every transition once the job deadline has passed; admins are
never gated by the deadline.
"""
import itertools
from typing import Dict, Tuple

from portal.errors import IllegalTransition, JobExpired
from portal.models.resume import PENDING, REJECTED, RESUME_STATUSES, SHORTLISTED
from portal.models.user import ADMIN, AGENCY

ALLOW = "allow"
NOOP = "noop"
ILLEGAL = "illegal"
EXPIRED = "expired"

FORWARD = {
    (PENDING, SHORTLISTED),
    (PENDING, REJECTED),
}


def _outcome(current: str, requested: str, role: str, job_expired: bool) -> str:
    if role == AGENCY and job_expired:
        return EXPIRED
    if current == requested:
        return NOOP
    if (current, requested) in FORWARD:
        return ALLOW
    return ILLEGAL


TRANSITIONS: Dict[Tuple[str, str, str, bool], str] = {
    key: _outcome(*key)
    for key in itertools.product(RESUME_STATUSES, RESUME_STATUSES, (ADMIN, AGENCY), (False, True))
}


def decide(current: str, requested: str, actor_role: str, job_expired: bool) -> str:
    try:
        return TRANSITIONS[(current, requested, actor_role, bool(job_expired))]
    except KeyError:
        raise IllegalTransition(
            f"Unknown transition {current!r} -> {requested!r} for role {actor_role!r}"
        )


def check(current: str, requested: str, actor_role: str, job_expired: bool) -> str:
    """Return ALLOW or NOOP, raise for anything else."""
    outcome = decide(current, requested, actor_role, job_expired)
    if outcome == EXPIRED:
        raise JobExpired()
    if outcome == ILLEGAL:
        if requested == PENDING:
            raise IllegalTransition("Cannot move resume back to pending once it is shortlisted or rejected.")
        raise IllegalTransition(f"Cannot move resume from {current} to {requested}.")
    return outcome
