"""Tests for the per-service staff overrides session."""

import pytest

from pricing_engine.exceptions import DraftStateError
from pricing_engine.models import StaffOverrideData
from pricing_engine.services.drafts import DraftStatus
from pricing_engine.services.staff_overrides import ServiceStaffOverridesDraft


@pytest.fixture
def members():
    return [
        StaffOverrideData(
            user_id=7,
            first_name="Ana",
            last_name="Pop",
            custom_price_minor=1500,
            inherited_price_minor=1000,
            inherited_duration_minutes=60,
        ),
        StaffOverrideData(
            user_id=8,
            first_name="Ion",
            last_name="Dan",
            custom_duration_minutes=30,
            inherited_price_minor=1000,
            inherited_duration_minutes=60,
        ),
    ]


@pytest.fixture
def session(members):
    draft = ServiceStaffOverridesDraft(location_id=10, service_id=1)
    draft.open(members)
    return draft


def test_parent_effective_values_supersede_fetched(members):
    draft = ServiceStaffOverridesDraft(location_id=10, service_id=1)
    draft.open(members, effective_price_minor=1200)
    assert all(member.inherited_price_minor == 1200 for member in draft.members)
    assert all(member.inherited_duration_minutes == 60 for member in draft.members)
    assert draft.is_dirty is False


def test_update_and_revert(session):
    session.update_member(7, 1800, None)
    assert session.is_dirty is True
    assert [member.user_id for member in session.changed_members()] == [7]

    session.update_member(7, 1500, None)
    assert session.is_dirty is False

    session.revert_member(8)
    assert session.members[1].is_custom is False
    assert session.is_dirty is True


def test_payload_contains_changed_members_collapsed(session):
    session.update_member(7, 1000, 45)
    session.revert_member(8)
    payload = session.build_payload()
    assert [(u.user_id, u.custom_price_minor, u.custom_duration_minutes) for u in payload.staff_overrides] == [
        (7, None, 45),
        (8, None, None),
    ]


def test_cancel_restores_original(session, members):
    session.update_member(7, 9999, None)
    session.cancel()
    assert session.status is DraftStatus.CLOSED
    assert session.members == members


def test_save_lifecycle(session):
    session.update_member(8, None, 60)
    payload = session.begin_save()
    session.complete_save(payload, success=False)
    assert session.status is DraftStatus.EDITING
    assert session.is_dirty is True

    payload = session.begin_save()
    session.complete_save(payload)
    assert session.status is DraftStatus.CLOSED
    assert session.members[1].custom_duration_minutes is None


def test_unknown_member(session):
    with pytest.raises(DraftStateError):
        session.update_member(42, 1, 1)
