from app.db.models import LocationOnboarding
from app.services import (
    account_warnings_service,
    approval_service,
    onboarding_store,
    progress_service,
    submission_service,
)
from app.services.account_warnings_service import is_call_flow_incomplete


def _onboarding(**fields) -> LocationOnboarding:
    return LocationOnboarding(id="onboarding-loc", location_id="loc", **fields)


def test_call_flow_completeness():
    assert is_call_flow_incomplete(None) is False
    assert is_call_flow_incomplete(_onboarding(has_ivr=False)) is True
    assert is_call_flow_incomplete(_onboarding(has_ivr=False, direct_ring_extensions=["101"])) is False
    assert is_call_flow_incomplete(_onboarding(has_ivr=True, ivr_options=[])) is True
    assert is_call_flow_incomplete(
        _onboarding(has_ivr=True, ivr_options=[{"option_number": "1", "targets": []}])
    ) is True
    assert is_call_flow_incomplete(
        _onboarding(has_ivr=True, ivr_options=[{"option_number": "1", "targets": [{"user_id": "u"}]}])
    ) is False


def test_location_without_onboarding_has_no_warnings(db, location):
    assert account_warnings_service.calculate_location_warnings(db, location.id) == (
        account_warnings_service.default_location_warnings(location.id)
    )


def test_complete_location_is_clean(db, location, complete_onboarding):
    warnings = account_warnings_service.calculate_location_warnings(db, location.id)
    assert warnings["blockers"] == {"pending_approvals": 0, "has_unsupported_phones": False}
    assert warnings["warnings"] == {"missing_devices": False, "incomplete_call_flow": False}


def test_location_blockers_and_warnings(db, location, add_phone, onboarding_fields):
    onboarding_store.upsert_onboarding(
        db,
        location.id,
        {**onboarding_fields, "has_ivr": True, "ivr_options": []},
    )
    add_phone(location, brand="OTHER", model="Grandstream GXP")

    warnings = account_warnings_service.calculate_location_warnings(db, location.id)
    assert warnings["blockers"] == {"pending_approvals": 1, "has_unsupported_phones": True}
    assert warnings["warnings"] == {"missing_devices": False, "incomplete_call_flow": True}


def test_manual_entry_without_phones_is_missing_devices(db, location, onboarding_fields):
    onboarding_store.upsert_onboarding(db, location.id, onboarding_fields)
    warnings = account_warnings_service.calculate_location_warnings(db, location.id)
    assert warnings["warnings"]["missing_devices"] is True


def test_warning_errors_fall_back_to_defaults(db, location, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("database went away")

    monkeypatch.setattr(approval_service, "count_pending_approvals", boom)
    assert account_warnings_service.calculate_location_warnings(db, location.id) == (
        account_warnings_service.default_location_warnings(location.id)
    )


def test_account_rollup(
    db, account, location, second_location, foreign_location, add_phone, onboarding_fields
):
    # Location 1: unsupported phone with a pending approval
    onboarding_store.upsert_onboarding(db, location.id, onboarding_fields)
    add_phone(location, brand="OTHER", model="Grandstream GXP")
    # Location 2: buying through the catalog but nothing selected, no call flow targets
    onboarding_store.upsert_onboarding(
        db,
        second_location.id,
        {
            **onboarding_fields,
            "device_ownership": "NOT_OWNED",
            "buy_phones_through_voicestack": True,
            "direct_ring_users": [],
        },
    )
    # Another account's problems never leak in
    onboarding_store.upsert_onboarding(db, foreign_location.id, {"has_ivr": True})

    summary = account_warnings_service.calculate_account_warnings(db, account.id)
    assert summary["account_id"] == account.id
    assert summary["blockers"] == {"pending_approvals": 1, "locations_with_unsupported_phones": 1}
    assert summary["warnings"] == {
        "locations_missing_devices": 1,
        "locations_with_incomplete_call_flow": 1,
    }
    assert [loc["location_id"] for loc in summary["locations"]] == [location.id, second_location.id]


def test_empty_account(db, other_account):
    summary = account_warnings_service.calculate_account_warnings(db, other_account.id)
    assert summary["locations"] == []
    assert summary["blockers"]["pending_approvals"] == 0


# =============================================================================
# Progress
# =============================================================================

def test_location_progress_counts_required_steps(db, location, complete_onboarding):
    assert progress_service.calculate_location_progress(db, location.id) == {
        "completed_steps": 7,
        "total_steps": 7,
        "percentage": 100,
    }


def test_location_progress_partial(db, location):
    onboarding_store.upsert_session(
        db, location.id, {"completed_steps": ["BASIC_DETAILS", "PHONE_SYSTEM", "REVIEW"]}
    )
    progress = progress_service.calculate_location_progress(db, location.id)
    assert progress["completed_steps"] == 2
    assert progress["percentage"] == 29


def test_account_progress(db, account, location, second_location, lead, onboarding_fields):
    onboarding_store.upsert_onboarding(db, location.id, onboarding_fields)
    submission_service.transition_status(db, location.id, "COMPLETED", lead.id)
    assert progress_service.calculate_account_progress(db, account.id) == {
        "completed_steps": 1,
        "total_steps": 2,
        "percentage": 50,
    }
