"""
Test configuration and fixtures.

Provides:
- In-memory SQLite database per test (tables created from the models)
- Account / location / user fixtures
- A fully answered onboarding ready for submission
- HTTPX AsyncClient with actor headers
"""
import os
from dataclasses import dataclass
from typing import AsyncGenerator, Generator

# Must be set before the app (and its settings/limiter) is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TESTING"] = "1"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.core.constants import REQUIRED_SUBMISSION_STEPS
from app.core.deps import ACTOR_ID_HEADER, ACTOR_ROLE_HEADER, get_db
from app.db.base import Base
from app.db.enums import OnboardingStatus, Role
from app.db.models import Account, Location, LocationOnboarding, Phone, User
from app.services import onboarding_store, phone_service


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def engine() -> Generator[Engine, None, None]:
    """Fresh in-memory database shared by every connection in the test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture(scope="function")
def db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Database session; app code may commit freely."""
    session = session_factory()
    yield session
    session.close()


# =============================================================================
# Tenant Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def account(db: Session) -> Account:
    account = Account(name="Bright Smiles Dental")
    db.add(account)
    db.commit()
    return account


@pytest.fixture(scope="function")
def other_account(db: Session) -> Account:
    account = Account(name="Other Practice")
    db.add(account)
    db.commit()
    return account


@pytest.fixture(scope="function")
def lead(db: Session, account: Account) -> User:
    user = User(
        email="lead@voicestack.test",
        name="Lee Lead",
        role=Role.IMPLEMENTATION_LEAD.value,
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture(scope="function")
def customer(db: Session, account: Account) -> User:
    user = User(
        email="dana@brightsmiles.test",
        name="Dana Mae Smith",
        role=Role.CUSTOMER.value,
        account_id=account.id,
    )
    db.add(user)
    db.commit()
    return user


def _make_location(db: Session, account: Account, name: str) -> Location:
    location = Location(
        account_id=account.id,
        name=name,
        address_line1="100 Main St",
        city="Austin",
        state="TX",
        zipcode="78701",
    )
    db.add(location)
    db.commit()
    return location


@pytest.fixture(scope="function")
def location(db: Session, account: Account) -> Location:
    return _make_location(db, account, "Main Office")


@pytest.fixture(scope="function")
def second_location(db: Session, account: Account) -> Location:
    return _make_location(db, account, "North Office")


@pytest.fixture(scope="function")
def foreign_location(db: Session, other_account: Account) -> Location:
    return _make_location(db, other_account, "Elsewhere")


# =============================================================================
# Onboarding Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def onboarding_fields(customer: User) -> dict:
    """Answers that pass every submission check (phones added separately)."""
    return {
        "status": OnboardingStatus.IN_PROGRESS.value,
        "poc_name": "Dana Smith",
        "poc_email": "dana@brightsmiles.test",
        "poc_phone": "512-555-0100",
        "preferred_contact_medium": "EMAIL",
        "phone_system_type": "VOIP",
        "phone_system_voip_type": "RingCentral",
        "call_forwarding_supported": True,
        "uses_fax": False,
        "wants_fax_in_voicestack": True,
        "device_ownership": "OWNED",
        "has_yealink_or_polycom": True,
        "total_devices": 1,
        "working_hours": [
            {"day_of_week": "MONDAY", "is_open": True, "open_time": "08:00", "close_time": "12:00"},
            {"day_of_week": "MONDAY", "is_open": True, "open_time": "13:00", "close_time": "17:00"},
            {"day_of_week": "SUNDAY", "is_open": False, "open_time": None, "close_time": None},
        ],
        "greeting_message": "Thanks for calling Bright Smiles",
        "has_ivr": False,
        "direct_ring_users": [customer.id],
        "voicemail_script": "Please leave a message",
    }


@pytest.fixture(scope="function")
def add_phone(db: Session):
    """Factory: create a phone through the phone service (defaults to a supported handset)."""
    def _add(location: Location, **fields) -> Phone:
        data = {
            "brand": "YEALINK",
            "model": "T46S",
            "assignment_type": "ASSIGNED_TO_EXTENSION",
            "extension": "101",
            "device_types": ["DESKPHONE"],
        }
        data.update(fields)
        return phone_service.create_phone(db, location.id, data)["phone"]

    return _add


@pytest.fixture(scope="function")
def complete_onboarding(
    db: Session,
    location: Location,
    customer: User,
    onboarding_fields: dict,
    add_phone,
) -> LocationOnboarding:
    """Fully answered onboarding with one user-assigned phone and every required step done."""
    onboarding = onboarding_store.upsert_onboarding(db, location.id, onboarding_fields)
    add_phone(
        location,
        assignment_type="ASSIGNED_TO_USER",
        assigned_user_id=customer.id,
        mac_address="00:15:65:AA:BB:CC",
    )
    onboarding_store.upsert_session(
        db,
        location.id,
        {
            "completed_steps": list(REQUIRED_SUBMISSION_STEPS),
            "current_step": "REVIEW",
            "status": OnboardingStatus.IN_PROGRESS,
            "is_locked": False,
        },
    )
    return onboarding


# =============================================================================
# Client Fixtures
# =============================================================================

@dataclass
class ActorHeaders:
    """Headers identifying the caller to the API."""
    user_id: str
    role: Role

    def as_dict(self) -> dict[str, str]:
        return {ACTOR_ID_HEADER: self.user_id, ACTOR_ROLE_HEADER: self.role.value}


@pytest.fixture(scope="function")
def lead_headers(lead: User) -> dict[str, str]:
    return ActorHeaders(user_id=lead.id, role=Role.IMPLEMENTATION_LEAD).as_dict()


@pytest.fixture(scope="function")
def customer_headers(customer: User) -> dict[str, str]:
    return ActorHeaders(user_id=customer.id, role=Role.CUSTOMER).as_dict()


@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient bound to the test database."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
