import pytest

from app.services import onboarding_store


async def _request(client, location, headers, entity_id="phone-1"):
    resp = await client.post(
        "/approvals",
        json={
            "type": "PHONE_PURCHASE",
            "location_id": location.id,
            "entity_id": entity_id,
            "details": {"brand": "OTHER", "model": "Cisco 8841"},
        },
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.mark.asyncio
async def test_request_and_list(client, location, customer, customer_headers):
    approval = await _request(client, location, customer_headers)
    assert approval["status"] == "PENDING"
    assert approval["requested_by"] == customer.id

    resp = await client.get(f"/approvals?location_id={location.id}&status=PENDING")
    assert [a["id"] for a in resp.json()] == [approval["id"]]

    resp = await client.get(f"/approvals/{approval['id']}")
    assert resp.status_code == 200
    assert resp.json()["details"]["model"] == "Cisco 8841"


@pytest.mark.asyncio
async def test_request_for_unknown_location(client, customer_headers):
    resp = await client.post(
        "/approvals",
        json={"type": "PHONE_PURCHASE", "location_id": "nowhere", "entity_id": "x"},
        headers=customer_headers,
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_get_missing_approval(client):
    resp = await client.get("/approvals/does-not-exist")
    assert resp.status_code == 404

    resp = await client.post(
        "/approvals/does-not-exist/approve",
        headers={"X-Actor-Id": "lead", "X-Actor-Role": "IMPLEMENTATION_LEAD"},
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_only_leads_resolve(client, location, customer_headers):
    approval = await _request(client, location, customer_headers)
    resp = await client.post(f"/approvals/{approval['id']}/approve", headers=customer_headers)
    assert resp.status_code == 403
    resp = await client.post(f"/approvals/{approval['id']}/reject", headers=customer_headers)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_approve_once(client, lead, location, customer_headers, lead_headers):
    approval = await _request(client, location, customer_headers)

    resp = await client.post(
        f"/approvals/{approval['id']}/approve",
        json={"comments": "ok to buy"},
        headers=lead_headers,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "APPROVED"
    assert data["resolved_by"] == lead.id
    assert data["comments"] == "ok to buy"
    assert data["resolved_at"] is not None

    resp = await client.post(f"/approvals/{approval['id']}/reject", headers=lead_headers)
    assert resp.status_code == 409

    resp = await client.get(f"/approvals?location_id={location.id}&status=PENDING")
    assert resp.json() == []
    resp = await client.get(f"/approvals?location_id={location.id}&status=APPROVED")
    assert len(resp.json()) == 1


@pytest.mark.asyncio
async def test_reject_blocks_location(client, db, location, complete_onboarding, customer_headers, lead_headers):
    approval = await _request(client, location, customer_headers)

    resp = await client.post(f"/approvals/{approval['id']}/reject", headers=lead_headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "REJECTED"

    session = (await client.get(f"/onboarding/{location.id}/session")).json()
    assert session["status"] == "BLOCKED"
    assert session["is_locked"] is True
    assert onboarding_store.get_onboarding(db, location.id).status == "BLOCKED"


@pytest.mark.asyncio
async def test_approve_reopens_blocked_location(
    client, location, complete_onboarding, customer_headers, lead_headers
):
    first = await _request(client, location, customer_headers, entity_id="phone-1")
    second = await _request(client, location, customer_headers, entity_id="phone-2")

    await client.post(f"/approvals/{first['id']}/reject", headers=lead_headers)
    resp = await client.post(f"/approvals/{second['id']}/approve", headers=lead_headers)
    assert resp.status_code == 200

    session = (await client.get(f"/onboarding/{location.id}/session")).json()
    assert session["status"] == "IN_PROGRESS"
    assert session["is_locked"] is False
