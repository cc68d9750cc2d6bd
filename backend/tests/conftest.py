import os

# Must be set before jarimae.config is first read
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import date, time, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import jarimae.models  # noqa: F401
from jarimae.core.database import Base, get_db
from jarimae.core.security import get_password_hash
from jarimae.main import app
from jarimae.models.business_hour import BusinessHour
from jarimae.models.reservation import Reservation, ReservationStatus
from jarimae.models.store import Store, StoreStatus
from jarimae.models.user import User, UserRole
from jarimae.services.schedule import day_of_week

PASSWORD = "password123"


def next_weekday(dow: int) -> date:
    """First date after today falling on the given Sunday-based weekday."""
    d = date.today() + timedelta(days=1)
    while day_of_week(d) != dow:
        d += timedelta(days=1)
    return d


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role: UserRole = UserRole.CUSTOMER, email: str = None) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"{role.value.lower()}{counter['n']}@example.com",
            name=f"{role.value.title()} {counter['n']}",
            role=role,
            password_hash=get_password_hash(PASSWORD),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_store(db, make_user):
    """Active store open 10:00-22:00 every day unless told otherwise."""

    def _make(
        capacity: int = 10,
        average_meal_duration: int = 90,
        open_time: time = time(10, 0),
        close_time: time = time(22, 0),
        closed_days=(),
        status: StoreStatus = StoreStatus.ACTIVE,
        accepts_reservations: bool = True,
        owner: User = None,
    ) -> Store:
        owner = owner or make_user(UserRole.OWNER)
        store = Store(
            owner_id=owner.id,
            name="Test Bistro",
            phone="02-123-4567",
            address="1 Test Street, Seoul",
            capacity=capacity,
            average_meal_duration=average_meal_duration,
            accepts_reservations=accepts_reservations,
            status=status,
        )
        store.business_hours = [
            BusinessHour(day_of_week=d, open_time=open_time, close_time=close_time, is_closed=d in closed_days)
            for d in range(7)
        ]
        db.add(store)
        db.commit()
        db.refresh(store)
        return store
    return _make


@pytest.fixture
def add_reservation(db, make_user):
    """Insert a ledger row directly, bypassing admission."""

    def _add(
        store: Store,
        reservation_date: date,
        reservation_time: time,
        party_size: int,
        estimated_duration: int = 90,
        status: ReservationStatus = ReservationStatus.PENDING,
        customer: User = None,
        contact_name: str = "Guest",
        contact_phone: str = "010-0000-0000",
    ) -> Reservation:
        customer = customer or make_user(UserRole.CUSTOMER)
        reservation = Reservation(
            store_id=store.id,
            customer_id=customer.id,
            reservation_date=reservation_date,
            reservation_time=reservation_time,
            party_size=party_size,
            estimated_duration=estimated_duration,
            status=status,
            contact_name=contact_name,
            contact_phone=contact_phone,
        )
        db.add(reservation)
        db.commit()
        db.refresh(reservation)
        return reservation
    return _add


def login(client: TestClient, email: str, password: str = PASSWORD) -> dict:
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
