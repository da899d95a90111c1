"""
Shared fixtures for the tutor scheduling test suite.

Every test gets its own in-memory SQLite database so services can commit
and roll back freely without leaking state between tests.
"""

from typing import Any, Callable, Dict

from fastapi.testclient import TestClient
import pytest
from sqlalchemy.orm import Session, sessionmaker

from tutorbooking.api.dependencies.database import get_db
from tutorbooking.auth import get_password_hash
from tutorbooking.core.clock import FixedClock
from tutorbooking.core.config import settings
from tutorbooking.core.enums import RoleName
from tutorbooking.database import Base, build_engine
import tutorbooking.models  # noqa: F401
from tutorbooking.models.tutor_profile import TutorProfile
from tutorbooking.models.user import User
from tutorbooking.services.availability_service import AvailabilityRosterService
from tutorbooking.services.booking_service import TutorBookingService

from helpers import NOW, TUTOR_RATE, at


@pytest.fixture(scope="function")
def engine():
    test_engine = build_engine("sqlite+pysqlite:///:memory:")
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture(scope="function")
def db(engine) -> Session:
    """Session configured like the application's SessionLocal."""
    TestingSession = sessionmaker(
        autocommit=False, autoflush=False, bind=engine, expire_on_commit=False
    )
    session = TestingSession()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


def _create_tutor(db: Session, email: str, display_name: str, rate: int) -> TutorProfile:
    user = User(
        email=email,
        hashed_password=get_password_hash("Password123!"),
        first_name=display_name.split()[0],
        last_name=display_name.split()[-1],
        role=RoleName.INSTRUCTOR.value,
        is_active=True,
    )
    db.add(user)
    db.flush()
    profile = TutorProfile(
        user_id=user.id,
        display_name=display_name,
        hourly_rate_amount=rate,
        hourly_rate_currency="USD",
    )
    db.add(profile)
    db.commit()
    return profile


@pytest.fixture
def tutor_profile(db: Session) -> TutorProfile:
    return _create_tutor(db, "sarah.chen@example.com", "Sarah Chen", TUTOR_RATE)


@pytest.fixture
def tutor_user_id(tutor_profile: TutorProfile) -> str:
    return tutor_profile.user_id


@pytest.fixture
def other_tutor_profile(db: Session) -> TutorProfile:
    return _create_tutor(db, "michael.r@example.com", "Michael Rodriguez", 8000)


@pytest.fixture
def booking_service(db: Session, clock: FixedClock) -> TutorBookingService:
    return TutorBookingService(db, clock=clock)


@pytest.fixture
def roster_service(db: Session, clock: FixedClock) -> AvailabilityRosterService:
    return AvailabilityRosterService(db, clock=clock)


@pytest.fixture
def booking_payload() -> Callable[..., Dict[str, Any]]:
    """Factory for create payloads; keyword overrides replace defaults."""

    def _payload(**overrides: Any) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "learner_email": "ada@example.com",
            "learner_first_name": "Ada",
            "learner_last_name": "Lovelace",
            "scheduled_start": at(10),
            "scheduled_end": at(11),
        }
        payload.update(overrides)
        return payload

    return _payload


@pytest.fixture
def client(db: Session):
    """TestClient whose requests share the test session."""
    from tutorbooking.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()
    test_client.close()


@pytest.fixture
def auth_headers(tutor_user_id: str) -> Dict[str, str]:
    return {settings.instructor_id_header: tutor_user_id}


@pytest.fixture
def lenient_status(monkeypatch):
    monkeypatch.setattr(settings, "booking_lenient_status", True)

