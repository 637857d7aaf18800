"""
Global pytest configuration and fixtures for all tests.

The environment is set before any ``adwise`` import so module-level config
picks up the test values.
"""
import itertools
import os
from datetime import date
from unittest.mock import Mock

import pytest

os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["REQUIRE_NOC_BEFORE_PAYMENT"] = "true"
os.environ["AI_API_KEY"] = ""
os.environ["TOMTOM_API_KEY"] = ""
os.environ["RAZORPAY_KEY_ID"] = ""
os.environ["RAZORPAY_KEY_SECRET"] = ""

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from adwise.core.principal import Principal  # noqa: E402
from adwise.database.database import Base, get_db  # noqa: E402
from adwise.database.models import Billboard, Profile  # noqa: E402
from adwise.services.booking_service import BookingLifecycleManager  # noqa: E402
from adwise.services.payment_service import PaymentGatewayAdapter, compute_signature  # noqa: E402
from adwise.services.repository import MarketplaceRepository  # noqa: E402
from adwise.services.traffic_service import TrafficClient  # noqa: E402

TEST_KEY_ID = "rzp_test_key"
TEST_KEY_SECRET = "rzp_test_secret"

SCENARIO_START = date(2024, 9, 1)
SCENARIO_END = date(2024, 9, 11)


def sign(order_id: str, payment_id: str, secret: str = TEST_KEY_SECRET) -> str:
    return compute_signature(order_id, payment_id, secret)


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def repository(db_session):
    return MarketplaceRepository(db_session)


# ============================================================================
# Profiles and inventory
# ============================================================================


def make_profile(session, role: str, email: str, **extra) -> Profile:
    profile = Profile(email=email, password="not-a-real-hash", role=role, **extra)
    session.add(profile)
    session.commit()
    return profile


@pytest.fixture
def owner(db_session) -> Principal:
    profile = make_profile(db_session, "owner", "owner@example.com", full_name="Olivia Owner")
    return Principal.for_role(profile.id, profile.role, email=profile.email)


@pytest.fixture
def other_owner(db_session) -> Principal:
    profile = make_profile(db_session, "owner", "rival@example.com")
    return Principal.for_role(profile.id, profile.role, email=profile.email)


@pytest.fixture
def customer(db_session) -> Principal:
    profile = make_profile(
        db_session, "customer", "customer@example.com", full_name="Chris Customer", company_name="Acme Foods"
    )
    return Principal.for_role(profile.id, profile.role, email=profile.email)


@pytest.fixture
def other_customer(db_session) -> Principal:
    profile = make_profile(db_session, "customer", "someone@example.com")
    return Principal.for_role(profile.id, profile.role, email=profile.email)


@pytest.fixture
def billboard(db_session, owner) -> Billboard:
    board = Billboard(
        owner_id=owner.profile_id,
        title="MG Road Junction",
        location="MG Road, Bengaluru",
        latitude=12.9756,
        longitude=77.6050,
        width=12,
        height=6,
        price_per_month=50000,
        traffic_score="high",
        daily_impressions=20000,
        is_available=True,
    )
    db_session.add(board)
    db_session.commit()
    return board


# ============================================================================
# Gateway fakes
# ============================================================================


@pytest.fixture
def razorpay_client():
    """Stand-in for razorpay.Client that echoes the order payload back."""
    counter = itertools.count(1)

    def _create(payload):
        return {
            "id": f"order_TEST{next(counter)}",
            "entity": "order",
            "amount": payload["amount"],
            "currency": payload["currency"],
            "receipt": payload["receipt"],
            "status": "created",
        }

    client = Mock()
    client.order.create.side_effect = _create
    return client


@pytest.fixture
def gateway(razorpay_client):
    return PaymentGatewayAdapter(key_id=TEST_KEY_ID, key_secret=TEST_KEY_SECRET, client=razorpay_client)


@pytest.fixture
def manager(repository, gateway):
    return BookingLifecycleManager(repository, gateway, require_noc_before_payment=True, currency="INR")


# ============================================================================
# HTTP client
# ============================================================================


@pytest.fixture
def client(session_factory, gateway):
    from adwise.deps import get_payment_gateway, get_rate_limit_redis, get_traffic_client
    from adwise.main import app

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_traffic_client] = lambda: TrafficClient(api_key="")
    app.dependency_overrides[get_rate_limit_redis] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


def register_and_login(client, email: str, role: str, password: str = "secret123", **extra) -> dict:
    response = client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "role": role, **extra},
    )
    assert response.status_code == 201, response.text
    token = client.post("/api/auth/login", data={"username": email, "password": password}).json()["access_token"]
    return {"Authorization": f"Bearer {token}"}
