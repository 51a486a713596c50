import json

import pytest
from click.testing import CliRunner

from app import cli as cli_module
from app.db.enums import Role
from app.db.models import Account, Location, User


@pytest.fixture
def runner(monkeypatch, engine, session_factory):
    monkeypatch.setattr(cli_module, "SessionLocal", session_factory)
    monkeypatch.setattr(cli_module, "engine", engine)
    return CliRunner()


def test_init_db(runner):
    result = runner.invoke(cli_module.cli, ["init-db"])
    assert result.exit_code == 0
    assert "location_onboardings" in result.output


def test_create_account_and_location(runner, db):
    result = runner.invoke(
        cli_module.cli,
        ["create-account", "--name", "Smile Dental", "--lead-email", "Pat@Example.com", "--lead-name", "Pat Lee"],
    )
    assert result.exit_code == 0, result.output
    assert "✓ Created account: Smile Dental" in result.output

    account = db.query(Account).filter(Account.name == "Smile Dental").one()
    lead = db.query(User).filter(User.email == "pat@example.com").one()
    assert lead.role == Role.IMPLEMENTATION_LEAD.value
    assert account.created_by == lead.id

    result = runner.invoke(
        cli_module.cli,
        [
            "create-location",
            "--account-id", account.id,
            "--name", "Main Office",
            "--address", "1 Main St",
            "--city", "Austin",
            "--state", "TX",
            "--zipcode", "78701",
        ],
    )
    assert result.exit_code == 0, result.output
    assert db.query(Location).filter(Location.account_id == account.id).count() == 1


def test_create_account_duplicate_lead(runner, lead):
    result = runner.invoke(
        cli_module.cli,
        ["create-account", "--name", "Again", "--lead-email", lead.email, "--lead-name", "Lee"],
    )
    assert f"❌ User already exists: {lead.email}" in result.output


def test_create_location_unknown_account(runner):
    result = runner.invoke(
        cli_module.cli,
        [
            "create-location",
            "--account-id", "missing",
            "--name", "X",
            "--address", "1 Main St",
            "--city", "Austin",
            "--state", "TX",
            "--zipcode", "78701",
        ],
    )
    assert "❌ Account not found: missing" in result.output


def test_generate_payload(runner, tmp_path, location, complete_onboarding):
    output = tmp_path / "payload.json"
    result = runner.invoke(
        cli_module.cli, ["generate-payload", "--location-id", location.id, "--output", str(output)]
    )
    assert result.exit_code == 0, result.output
    assert "✓ Payload is valid" in result.output

    payload = json.loads(output.read_text())
    assert payload["locationId"] == location.id
    assert payload["callFlow"]["greetingMessage"] == "Thanks for calling Bright Smiles"


def test_generate_payload_unknown_location(runner):
    result = runner.invoke(cli_module.cli, ["generate-payload", "--location-id", "missing"])
    assert "❌ Location missing not found" in result.output


def test_account_warnings(runner, account, location, add_phone):
    add_phone(location, brand="OTHER", model="Cisco 8841")
    result = runner.invoke(cli_module.cli, ["account-warnings", "--account-id", account.id])
    assert result.exit_code == 0, result.output
    assert "Pending approvals: 1" in result.output
    assert "Locations with unsupported phones: 1" in result.output
