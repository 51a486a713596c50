from datetime import datetime, timezone

import pytest

from app.db.enums import ApprovalStatus, OnboardingStatus
from app.services import (
    approval_service,
    onboarding_session_service,
    onboarding_store,
    submission_service,
)
from app.services.approval_service import ApprovalNotFoundError, ApprovalStateError
from app.services.errors import NotFoundError
from app.services.submission_service import SubmissionBlockedError

NOW = datetime(2026, 3, 2, 15, 30, 0, 125000, tzinfo=timezone.utc)


def test_submit_moves_to_pending_approval_and_locks(db, location, lead, complete_onboarding):
    result = submission_service.submit_onboarding(db, location.id, lead.id, now=NOW)

    assert result["status"] == OnboardingStatus.PENDING_APPROVAL
    assert result["payload_valid"] is True
    assert result["payload_errors"] == []
    assert result["payload"].timestamp == "2026-03-02T15:30:00.125Z"

    onboarding = onboarding_store.get_onboarding(db, location.id)
    assert onboarding.status == OnboardingStatus.PENDING_APPROVAL.value
    assert onboarding.submitted_at is not None

    session = onboarding_store.get_session(db, location.id)
    assert session.status == OnboardingStatus.PENDING_APPROVAL.value
    assert session.is_locked is True


def test_cannot_submit_twice(db, location, lead, complete_onboarding):
    submission_service.submit_onboarding(db, location.id, lead.id)
    with pytest.raises(SubmissionBlockedError) as exc_info:
        submission_service.submit_onboarding(db, location.id, lead.id)
    assert exc_info.value.reasons == ["Session is locked"]


def test_blocked_submission_changes_nothing(db, location, lead):
    with pytest.raises(SubmissionBlockedError) as exc_info:
        submission_service.submit_onboarding(db, location.id, lead.id)
    assert "Onboarding data not found" in exc_info.value.reasons
    assert onboarding_store.get_onboarding(db, location.id) is None
    assert onboarding_store.get_session(db, location.id).is_locked is False


def test_unsupported_phone_blocks_submission_until_approved(
    db, location, lead, complete_onboarding, add_phone
):
    phone = add_phone(location, brand="OTHER", model="Grandstream GXP", extension="150")
    reasons = onboarding_session_service.can_submit(db, location.id)["reasons"]
    assert "Pending approvals required (1 approval(s) pending)" in reasons

    approval = approval_service.get_pending_approvals(db, location.id)[0]
    approval_service.approve(db, approval.id, lead.id, comments="Customer is buying a T54W")
    # Still unsupported on the device itself
    reasons = onboarding_session_service.can_submit(db, location.id)["reasons"]
    assert reasons == ["Device OTHER Grandstream GXP is not supported and must be replaced or approved"]
    assert phone.is_unsupported is True


def test_transition_to_completed_stamps_and_locks(db, location, lead, complete_onboarding):
    onboarding = submission_service.transition_status(
        db, location.id, OnboardingStatus.COMPLETED, lead.id, now=NOW
    )
    assert onboarding.status == "COMPLETED"
    assert onboarding.completed_at is not None
    assert onboarding_store.get_session(db, location.id).is_locked is True


def test_transition_without_onboarding(db, location):
    with pytest.raises(NotFoundError):
        submission_service.transition_status(db, location.id, OnboardingStatus.APPROVED)


def test_all_locations_completed(db, account, location, second_location, lead, onboarding_fields):
    assert submission_service.check_all_locations_completed(db, account.id) is False

    for loc in (location, second_location):
        onboarding_store.upsert_onboarding(db, loc.id, onboarding_fields)
    submission_service.transition_status(db, location.id, OnboardingStatus.COMPLETED, lead.id)
    assert submission_service.check_all_locations_completed(db, account.id) is False

    submission_service.transition_status(db, second_location.id, OnboardingStatus.COMPLETED, lead.id)
    assert submission_service.check_all_locations_completed(db, account.id) is True


def test_account_without_locations_is_not_completed(db, other_account):
    assert submission_service.check_all_locations_completed(db, other_account.id) is False


# =============================================================================
# Approval lifecycle
# =============================================================================

def test_rejection_blocks_location(db, location, lead, complete_onboarding, add_phone):
    add_phone(location, brand="OTHER", model="Grandstream GXP", extension="150")
    approval = approval_service.get_pending_approvals(db, location.id)[0]

    approval = approval_service.reject(db, approval.id, lead.id, comments="Not financed")
    submission_service.on_approval_resolved(db, approval, lead.id)

    assert approval.status == ApprovalStatus.REJECTED.value
    assert approval.resolved_by == lead.id
    assert approval.comments == "Not financed"
    assert onboarding_store.get_onboarding(db, location.id).status == "BLOCKED"
    session = onboarding_store.get_session(db, location.id)
    assert session.status == "BLOCKED"
    assert session.is_locked is True


def test_later_approval_reopens_blocked_location(db, location, lead, complete_onboarding, add_phone):
    add_phone(location, brand="OTHER", model="Grandstream GXP", extension="150")
    add_phone(location, brand="OTHER", model="Cisco 8841", extension="151")
    first, second = approval_service.get_pending_approvals(db, location.id)

    submission_service.on_approval_resolved(db, approval_service.reject(db, first.id, lead.id), lead.id)
    submission_service.on_approval_resolved(db, approval_service.approve(db, second.id, lead.id), lead.id)

    assert onboarding_store.get_onboarding(db, location.id).status == "IN_PROGRESS"
    session = onboarding_store.get_session(db, location.id)
    assert session.status == "IN_PROGRESS"
    assert session.is_locked is False


def test_approval_leaves_unblocked_location_alone(db, location, lead, complete_onboarding):
    approval = approval_service.request_approval(
        db, "CREDIT_APPROVAL", location_id=location.id, entity_id="acct", requested_by=lead.id
    )
    submission_service.on_approval_resolved(db, approval_service.approve(db, approval.id, lead.id), lead.id)
    assert onboarding_store.get_session(db, location.id).status == "IN_PROGRESS"


def test_resolved_approval_cannot_be_resolved_again(db, location, lead):
    approval = approval_service.request_approval(
        db, "PROVISIONING", location_id=location.id, entity_id=location.id, requested_by=lead.id
    )
    approval_service.approve(db, approval.id, lead.id)
    with pytest.raises(ApprovalStateError, match="is not pending \\(status: APPROVED\\)"):
        approval_service.reject(db, approval.id, lead.id)


def test_unknown_approval(db):
    with pytest.raises(ApprovalNotFoundError, match="Approval missing not found"):
        approval_service.approve(db, "missing", "lead")


def test_phone_purchase_pricing_details(db, location, lead):
    approval = approval_service.request_phone_purchase(
        db,
        phone_id="phone-1",
        location_id=location.id,
        brand="OTHER",
        model="Cisco 8841",
        requested_by=lead.id,
        quantity=3,
        unit_price=120.0,
    )
    assert approval.details == {
        "brand": "OTHER",
        "model": "Cisco 8841",
        "quantity": 3,
        "unit_price": 120.0,
        "total_price": 360.0,
    }
