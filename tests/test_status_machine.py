"""
Tests for the resume status transition table.
"""
import itertools

import pytest

from portal.errors import IllegalTransition, JobExpired
from portal.models.resume import PENDING, REJECTED, RESUME_STATUSES, SHORTLISTED
from portal.services import status_machine
from portal.services.status_machine import ALLOW, EXPIRED, ILLEGAL, NOOP, TRANSITIONS


def test_table_covers_every_combination():
    assert len(TRANSITIONS) == len(RESUME_STATUSES) ** 2 * 2 * 2


@pytest.mark.parametrize("role", ["admin", "agency"])
def test_forward_moves_allowed(role):
    assert status_machine.decide(PENDING, SHORTLISTED, role, False) == ALLOW
    assert status_machine.decide(PENDING, REJECTED, role, False) == ALLOW


@pytest.mark.parametrize("current, requested", [
    (SHORTLISTED, REJECTED),
    (REJECTED, SHORTLISTED),
    (SHORTLISTED, PENDING),
    (REJECTED, PENDING),
])
@pytest.mark.parametrize("role", ["admin", "agency"])
def test_backward_and_sideways_moves_illegal(current, requested, role):
    assert status_machine.decide(current, requested, role, False) == ILLEGAL
    with pytest.raises(IllegalTransition):
        status_machine.check(current, requested, role, False)


@pytest.mark.parametrize("status", RESUME_STATUSES)
def test_self_transition_is_noop(status):
    assert status_machine.check(status, status, "admin", False) == NOOP
    assert status_machine.check(status, status, "admin", True) == NOOP
    assert status_machine.check(status, status, "agency", False) == NOOP


def test_agency_blocked_on_expired_job_in_every_direction():
    for current, requested in itertools.product(RESUME_STATUSES, RESUME_STATUSES):
        assert status_machine.decide(current, requested, "agency", True) == EXPIRED
    with pytest.raises(JobExpired):
        status_machine.check(PENDING, SHORTLISTED, "agency", True)


def test_admin_ignores_deadline():
    assert status_machine.check(PENDING, SHORTLISTED, "admin", True) == ALLOW
    with pytest.raises(IllegalTransition):
        status_machine.check(SHORTLISTED, PENDING, "admin", True)


def test_no_path_ever_returns_to_pending():
    for current in (SHORTLISTED, REJECTED):
        for role, expired in itertools.product(("admin", "agency"), (False, True)):
            assert TRANSITIONS[(current, PENDING, role, expired)] in (ILLEGAL, EXPIRED)


def test_unknown_role_rejected():
    with pytest.raises(IllegalTransition):
        status_machine.check(PENDING, SHORTLISTED, "candidate", False)
