"""
Pytest configuration and shared fixtures
"""
import os

# the app lifespan runs init_db(); keep it off the on-disk default database
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
from decimal import Decimal

from frontdesk.database import Base, get_db
from frontdesk.models import ontology
from frontdesk.models.ontology import User, UserRole, RoomCategory, Room, ExtraService
from frontdesk.security.auth import get_password_hash, create_access_token
from frontdesk.main import app


@pytest.fixture(scope="function")
def db_engine():
    """In-memory database engine"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Database session"""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture(scope="function")
def client(db_session):
    """Test client bound to the in-memory session"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ============== Users and tokens ==============

def _make_user(db_session, username, name, role):
    user = User(
        username=username,
        password_hash=get_password_hash("123456"),
        name=name,
        role=role,
        is_active=True
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def manager(db_session):
    return _make_user(db_session, "manager", "Maria Manager", UserRole.MANAGER)


@pytest.fixture
def receptionist(db_session):
    return _make_user(db_session, "front1", "Felix Front", UserRole.RECEPTIONIST)


@pytest.fixture
def guest_user(db_session):
    return _make_user(db_session, "guest1", "Gina Guest", UserRole.GUEST)


@pytest.fixture
def other_guest(db_session):
    return _make_user(db_session, "guest2", "Otto Other", UserRole.GUEST)


@pytest.fixture
def manager_auth_headers(manager):
    return {"Authorization": f"Bearer {create_access_token(manager.id, manager.role)}"}


@pytest.fixture
def receptionist_auth_headers(receptionist):
    return {"Authorization": f"Bearer {create_access_token(receptionist.id, receptionist.role)}"}


@pytest.fixture
def guest_auth_headers(guest_user):
    return {"Authorization": f"Bearer {create_access_token(guest_user.id, guest_user.role)}"}


# ============== Catalog ==============

@pytest.fixture
def sample_category(db_session):
    """Standard room category: 100.00 per night, up to 4 guests"""
    category = RoomCategory(
        name="Standard",
        description="Standard double room",
        price_per_night=Decimal("100.00"),
        max_occupancy=4
    )
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture
def suite_category(db_session):
    category = RoomCategory(
        name="Suite",
        price_per_night=Decimal("250.00"),
        max_occupancy=2
    )
    db_session.add(category)
    db_session.commit()
    db_session.refresh(category)
    return category


@pytest.fixture
def sample_room(db_session, sample_category):
    """Room 101, the only room of the Standard category unless more are added"""
    room = Room(room_number="101", floor=1, category_id=sample_category.id)
    db_session.add(room)
    db_session.commit()
    db_session.refresh(room)
    return room


@pytest.fixture
def sample_room_102(db_session, sample_category):
    room = Room(room_number="102", floor=1, category_id=sample_category.id)
    db_session.add(room)
    db_session.commit()
    db_session.refresh(room)
    return room


@pytest.fixture
def suite_room(db_session, suite_category):
    room = Room(room_number="301", floor=3, category_id=suite_category.id)
    db_session.add(room)
    db_session.commit()
    db_session.refresh(room)
    return room


@pytest.fixture
def breakfast(db_session):
    """Per-person extra"""
    extra = ExtraService(name="Breakfast", price=Decimal("15.00"), category="food", per_person=True)
    db_session.add(extra)
    db_session.commit()
    db_session.refresh(extra)
    return extra


@pytest.fixture
def parking(db_session):
    extra = ExtraService(name="Parking", price=Decimal("20.00"), category="transport")
    db_session.add(extra)
    db_session.commit()
    db_session.refresh(extra)
    return extra


@pytest.fixture
def spa(db_session):
    extra = ExtraService(name="Spa access", price=Decimal("35.50"), category="wellness")
    db_session.add(extra)
    db_session.commit()
    db_session.refresh(extra)
    return extra
