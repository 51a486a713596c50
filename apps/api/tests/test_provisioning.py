from datetime import datetime, timedelta, timezone

import pytest

from app.db.models import Phone, User
from app.services import onboarding_store, provisioning_service
from app.services.provisioning_service import ProvisioningNotFoundError, format_timestamp, split_name

NOW = datetime(2026, 5, 1, 9, 0, 0, tzinfo=timezone.utc)


def test_format_timestamp():
    assert format_timestamp(NOW) == "2026-05-01T09:00:00.000Z"
    # Naive values are taken as UTC
    assert format_timestamp(datetime(2026, 5, 1, 9, 0, 0, 999999)) == "2026-05-01T09:00:00.999Z"
    offset = datetime(2026, 5, 1, 11, 0, tzinfo=timezone(timedelta(hours=2)))
    assert format_timestamp(offset) == "2026-05-01T09:00:00.000Z"


def test_split_name():
    assert split_name("Dana Mae Smith") == ("Dana", "Mae Smith")
    assert split_name("Cher") == ("Cher", "")
    assert split_name("   ") == ("", "")


def test_generate_requires_onboarding(db, location):
    with pytest.raises(ProvisioningNotFoundError, match="Onboarding not found"):
        provisioning_service.generate(db, location.id)
    with pytest.raises(ProvisioningNotFoundError, match="Location nowhere not found"):
        provisioning_service.generate(db, "nowhere")


def test_payload_wire_format(db, account, location, customer, complete_onboarding):
    payload = provisioning_service.generate(db, location.id, now=NOW).to_wire()

    assert payload["locationId"] == location.id
    assert payload["locationName"] == "Main Office"
    assert payload["accountId"] == account.id
    assert payload["accountName"] == "Bright Smiles Dental"
    assert payload["timestamp"] == "2026-05-01T09:00:00.000Z"
    assert payload["version"] == "1.0.0"

    assert payload["location"] == {
        "name": "Main Office",
        "address": {"line1": "100 Main St", "city": "Austin", "state": "TX", "zipcode": "78701"},
    }
    assert payload["contacts"]["primary"] == {
        "name": "Dana Smith",
        "email": "dana@brightsmiles.test",
        "phone": "512-555-0100",
        "preferredContactMedium": "EMAIL",
    }
    assert payload["phoneSystem"] == {
        "type": "VOIP",
        "voipProvider": "RingCentral",
        "callForwardingSupported": True,
        "fax": {"usesFax": False, "wantsFaxInVoiceStack": True},
    }

    [device] = payload["devices"]
    assert device["brand"] == "YEALINK"
    assert device["model"] == "T46S"
    assert device["ownership"] == "OWNED"
    assert device["assignmentType"] == "ASSIGNED_TO_USER"
    assert device["macAddress"] == "00:15:65:AA:BB:CC"
    assert device["extension"] == "101"
    assert device["assignedUser"] == {
        "firstName": "Dana",
        "lastName": "Mae Smith",
        "email": "dana@brightsmiles.test",
    }
    assert "serialNumber" not in device

    assert payload["users"] == [
        {"firstName": "Dana", "lastName": "Mae Smith", "email": "dana@brightsmiles.test", "extension": "101"}
    ]
    assert payload["extensions"] == [
        {"extension": "101", "assignedTo": "user", "userId": customer.id, "deviceId": device["id"]}
    ]
    assert payload["workingHours"] == [
        {"day": "MONDAY", "isOpen": True, "openTime": "08:00", "closeTime": "12:00"},
        {"day": "MONDAY", "isOpen": True, "openTime": "13:00", "closeTime": "17:00"},
        {"day": "SUNDAY", "isOpen": False},
    ]
    assert payload["callFlow"] == {
        "greetingMessage": "Thanks for calling Bright Smiles",
        "hasIVR": False,
        "directRouting": {"ringType": "users", "targets": [{"userId": customer.id}]},
        "voicemail": {"script": "Please leave a message", "sharedUsers": []},
    }
    assert payload["metadata"] == {
        "totalDevices": 1,
        "generatedAt": "2026-05-01T09:00:00.000Z",
    }


def test_extension_assignee_wire_values(db, location, complete_onboarding, add_phone):
    add_phone(location, assignment_type="ASSIGNED_TO_EXTENSION", extension="102")
    add_phone(location, assignment_type="ASSIGNED_TO_EXTENSION", extension=None)

    payload = provisioning_service.generate(db, location.id, now=NOW).to_wire()
    assert [(e["extension"], e["assignedTo"]) for e in payload["extensions"]] == [
        ("101", "user"),
        ("102", "device"),
    ]
    assert payload["metadata"]["totalDevices"] == 3


def test_first_phone_wins_for_user_extension(db, location, customer, complete_onboarding, add_phone):
    add_phone(location, assignment_type="ASSIGNED_TO_USER", assigned_user_id=customer.id, extension="150")

    payload = provisioning_service.generate(db, location.id, now=NOW).to_wire()
    assert payload["users"] == [
        {"firstName": "Dana", "lastName": "Mae Smith", "email": "dana@brightsmiles.test", "extension": "101"}
    ]
    second = next(d for d in payload["devices"] if d.get("extension") == "150")
    assert second["assignedUser"] == {
        "firstName": "Dana",
        "lastName": "Mae Smith",
        "email": "dana@brightsmiles.test",
    }


def test_device_with_unresolved_user_omits_assignee():
    phone = Phone(
        id="phone-1",
        brand="YEALINK",
        model="T46S",
        ownership="OWNED",
        assignment_type="ASSIGNED_TO_USER",
        assigned_user_id="removed-user",
        extension="151",
    )
    device = provisioning_service._build_device(phone, {}).to_wire()
    assert "assignedUser" not in device
    assert device["extension"] == "151"


def test_ivr_call_flow(db, location, customer, complete_onboarding):
    onboarding_store.upsert_onboarding(
        db,
        location.id,
        {
            "has_ivr": True,
            "ivr_script": "Press 1 for scheduling, 2 for billing",
            "ivr_retry_attempts": 2,
            "ivr_wait_time": 5,
            "ivr_after_retries_target": "101",
            "ivr_options": [
                {
                    "option_number": "1",
                    "label": "Scheduling",
                    "ring_type": "users",
                    "targets": [{"user_id": customer.id}],
                },
                {
                    "option_number": "2",
                    "label": "Billing",
                    "ring_type": "extensions",
                    "targets": [{"extension": "101"}],
                },
            ],
        },
    )

    call_flow = provisioning_service.generate(db, location.id, now=NOW).to_wire()["callFlow"]
    assert call_flow["hasIVR"] is True
    assert "directRouting" not in call_flow
    assert call_flow["ivr"]["script"] == "Press 1 for scheduling, 2 for billing"
    assert call_flow["ivr"]["options"] == [
        {
            "optionNumber": "1",
            "script": "Scheduling",
            "ringType": "users",
            "targets": [{"userId": customer.id}],
            "retryAttempts": 2,
            "waitTime": 5,
            "afterRetriesTarget": "101",
            "voicemailScript": "Please leave a message",
        },
        {
            "optionNumber": "2",
            "script": "Billing",
            "ringType": "extensions",
            "targets": [{"extension": "101"}],
            "retryAttempts": 2,
            "waitTime": 5,
            "afterRetriesTarget": "101",
            "voicemailScript": "Please leave a message",
        },
    ]


def test_direct_routing_extensions_only(db, location, complete_onboarding):
    onboarding_store.upsert_onboarding(
        db, location.id, {"direct_ring_users": [], "direct_ring_extensions": ["101", "102"]}
    )
    call_flow = provisioning_service.generate(db, location.id, now=NOW).to_wire()["callFlow"]
    assert call_flow["directRouting"] == {
        "ringType": "extensions",
        "targets": [{"extension": "101"}, {"extension": "102"}],
    }


def test_generation_is_deterministic(db, location, complete_onboarding):
    first = provisioning_service.generate(db, location.id, now=NOW).to_wire()
    second = provisioning_service.generate(db, location.id, now=NOW).to_wire()
    assert first == second


def test_validate_reports_structural_gaps(db, location, onboarding_fields):
    onboarding_store.upsert_onboarding(
        db, location.id, {**onboarding_fields, "poc_email": None, "phone_system_type": None}
    )
    result = provisioning_service.generate_and_validate(db, location.id, now=NOW)
    assert result["valid"] is False
    assert result["errors"] == [
        "Primary contact email is required",
        "At least one device is required",
        "Phone system type is required",
    ]


def test_submitted_at_is_carried_in_metadata(db, location, lead, complete_onboarding):
    onboarding_store.upsert_onboarding(db, location.id, {"submitted_at": NOW - timedelta(hours=1)})
    metadata = provisioning_service.generate(db, location.id, now=NOW).to_wire()["metadata"]
    assert metadata["submittedAt"] == "2026-05-01T08:00:00.000Z"


def test_user_lookup_uses_user_records(db, location, customer, complete_onboarding):
    db.get(User, customer.id).name = "Dana"
    db.commit()
    [user] = provisioning_service.generate(db, location.id, now=NOW).to_wire()["users"]
    assert (user["firstName"], user["lastName"]) == ("Dana", "")
