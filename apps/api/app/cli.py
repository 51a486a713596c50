"""CLI tools for VoiceStack onboarding administration."""

import json

import click

from app.db.base import Base
from app.db.enums import ProductType, Role
from app.db.models import Account, Location, User
from app.db.session import SessionLocal, engine


@click.group()
def cli():
    """VoiceStack onboarding CLI tools."""
    pass


@cli.command()
def init_db():
    """
    Create all tables directly from the models.

    Intended for local SQLite databases; use alembic for anything shared.

    Example:
        python -m app.cli init-db
    """
    import app.db.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    click.echo(f"✓ Created tables: {', '.join(sorted(Base.metadata.tables))}")


@cli.command()
@click.option("--name", required=True, help="Account name")
@click.option(
    "--product-type",
    type=click.Choice([p.value for p in ProductType]),
    default=ProductType.VOICESTACK.value,
    show_default=True,
)
@click.option("--lead-email", required=True, help="Implementation lead email address")
@click.option("--lead-name", required=True, help="Implementation lead display name")
def create_account(name: str, product_type: str, lead_email: str, lead_name: str):
    """
    Create an account and its implementation lead.

    Example:
        python -m app.cli create-account --name "Smile Dental" --lead-email "lead@example.com" --lead-name "Pat Lee"
    """
    db = SessionLocal()
    try:
        existing = db.query(User).filter(User.email == lead_email.lower()).first()
        if existing:
            click.echo(f"❌ User already exists: {lead_email}")
            return

        lead = User(email=lead_email.lower(), name=lead_name, role=Role.IMPLEMENTATION_LEAD.value)
        db.add(lead)
        db.flush()

        account = Account(name=name, product_type=product_type, created_by=lead.id)
        db.add(account)
        db.commit()

        click.echo(f"✓ Created account: {name}")
        click.echo(f"  ID: {account.id}")
        click.echo(f"✓ Created implementation lead {lead_email} ({lead.id})")

    except Exception as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
    finally:
        db.close()


@cli.command()
@click.option("--account-id", required=True, help="Account ID")
@click.option("--name", required=True, help="Location name")
@click.option("--address", required=True, help="Street address")
@click.option("--city", required=True)
@click.option("--state", required=True)
@click.option("--zipcode", required=True)
def create_location(account_id: str, name: str, address: str, city: str, state: str, zipcode: str):
    """
    Add a location to an account.

    Example:
        python -m app.cli create-location --account-id "..." --name "Main Office" \\
            --address "1 Main St" --city "Austin" --state "TX" --zipcode "78701"
    """
    db = SessionLocal()
    try:
        account = db.get(Account, account_id)
        if not account:
            click.echo(f"❌ Account not found: {account_id}")
            return

        location = Location(
            account_id=account.id,
            name=name,
            address_line1=address,
            city=city,
            state=state,
            zipcode=zipcode,
        )
        db.add(location)
        db.commit()

        click.echo(f"✓ Created location: {name}")
        click.echo(f"  ID: {location.id}")

    except Exception as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
    finally:
        db.close()


@cli.command()
@click.option("--location-id", required=True, help="Location ID")
@click.option("--output", type=click.Path(dir_okay=False, writable=True), default=None,
              help="Write the payload to a file instead of stdout")
def generate_payload(location_id: str, output: str | None):
    """
    Build and validate the provisioning payload for a location.

    Example:
        python -m app.cli generate-payload --location-id "..." --output payload.json
    """
    from app.services import provisioning_service
    from app.services.provisioning_service import ProvisioningNotFoundError

    db = SessionLocal()
    try:
        result = provisioning_service.generate_and_validate(db, location_id)
        body = json.dumps(result["payload"].to_wire(), indent=2)
        if output:
            with open(output, "w") as f:
                f.write(body)
            click.echo(f"✓ Wrote payload to {output}")
        else:
            click.echo(body)

        if result["valid"]:
            click.echo("✓ Payload is valid", err=True)
        else:
            click.echo("❌ Payload has validation errors:", err=True)
            for error in result["errors"]:
                click.echo(f"  - {error}", err=True)

    except ProvisioningNotFoundError as e:
        click.echo(f"❌ {e}")
    finally:
        db.close()


@cli.command()
@click.option("--account-id", required=True, help="Account ID")
def account_warnings(account_id: str):
    """
    Print blockers and warnings for every location in an account.

    Example:
        python -m app.cli account-warnings --account-id "..."
    """
    from app.services import account_warnings_service

    db = SessionLocal()
    try:
        if not db.get(Account, account_id):
            click.echo(f"❌ Account not found: {account_id}")
            return

        summary = account_warnings_service.calculate_account_warnings(db, account_id)
        blockers = summary["blockers"]
        warnings = summary["warnings"]
        click.echo(f"Account {account_id}")
        click.echo(f"  Pending approvals: {blockers['pending_approvals']}")
        click.echo(f"  Locations with unsupported phones: {blockers['locations_with_unsupported_phones']}")
        click.echo(f"  Locations missing devices: {warnings['locations_missing_devices']}")
        click.echo(f"  Locations with incomplete call flow: {warnings['locations_with_incomplete_call_flow']}")
    finally:
        db.close()


if __name__ == "__main__":
    cli()
