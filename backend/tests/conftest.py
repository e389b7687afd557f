"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tailorshop.core.rbac import UserRole
from tailorshop.core.security import create_access_token, get_password_hash
from tailorshop.db.base import Base
from tailorshop.db.session import get_db
from tailorshop.main import app
# Import all models to ensure they're registered with Base.metadata
from tailorshop.models import *
from tailorshop.services.notification_service import get_order_notifier
from tailorshop.services.post_commit import Actor

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


class RecordingNotifier:
    """Stands in for OrderNotifier; records every call instead of sending."""

    def __init__(self, fail: bool = False):
        self.calls = []
        self.fail = fail

    async def _record(self, kind, *args):
        self.calls.append((kind, *args))
        if self.fail:
            raise RuntimeError(f"{kind} delivery failed")
        return []

    async def order_created(self, customer, order):
        return await self._record("order_created", customer, order)

    async def order_status_changed(self, customer, order):
        return await self._record("order_status_changed", customer, order)

    async def order_ready(self, customer, order):
        return await self._record("order_ready", customer, order)

    async def job_assigned(self, employee, order):
        return await self._record("job_assigned", employee, order)

    async def low_stock(self, material, admins):
        return await self._record("low_stock", material, admins)

    def kinds(self):
        return [call[0] for call in self.calls]


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def failing_notifier() -> RecordingNotifier:
    return RecordingNotifier(fail=True)


@pytest.fixture(scope="function")
def client(db_session: Session, notifier: RecordingNotifier) -> Generator[TestClient, None, None]:
    """Create a test client with database and notifier overrides."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_order_notifier] = lambda: notifier
    # Disable rate limiting during tests to avoid flaky failures
    from tailorshop.core.rate_limit import limiter
    limiter.enabled = False
    # Don't raise server exceptions so we can test error status codes
    yield TestClient(app, raise_server_exceptions=False)
    limiter.enabled = True
    app.dependency_overrides.clear()


def _make_user(db_session: Session, email: str, role: UserRole, name: str, phone: str = None) -> User:
    user = User(
        email=email,
        password_hash=get_password_hash("testpass123"),
        role=role,
        name=name,
        phone=phone,
        is_active=True,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def _headers_for(user: User) -> dict:
    token = create_access_token(
        data={"sub": str(user.id), "email": user.email, "role": user.role.value}
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_user(db_session: Session) -> User:
    return _make_user(db_session, "admin@example.com", UserRole.ADMIN, "Admin", "+94770000001")


@pytest.fixture
def manager_user(db_session: Session) -> User:
    return _make_user(db_session, "manager@example.com", UserRole.MANAGER, "Manager")


@pytest.fixture
def tailor_user(db_session: Session) -> User:
    return _make_user(db_session, "tailor@example.com", UserRole.TAILOR, "Tailor")


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return _headers_for(admin_user)


@pytest.fixture
def manager_headers(manager_user: User) -> dict:
    return _headers_for(manager_user)


@pytest.fixture
def auth_headers(tailor_user: User) -> dict:
    """Headers for a regular (non-elevated) staff member."""
    return _headers_for(tailor_user)


@pytest.fixture
def actor(tailor_user: User) -> Actor:
    return Actor(user_id=tailor_user.id, name=tailor_user.name, ip_address="127.0.0.1")


@pytest.fixture
def customer(db_session: Session) -> Customer:
    customer = Customer(
        first_name="Nimal",
        last_name="Perera",
        nic="901234567V",
        phone="+94771234567",
        email="nimal@example.com",
        address="12 Galle Road, Colombo",
    )
    db_session.add(customer)
    db_session.commit()
    db_session.refresh(customer)
    return customer


@pytest.fixture
def shirt_template(db_session: Session) -> ItemType:
    item_type = ItemType(name="Shirt", fields=["Neck", "Chest", "Sleeve"])
    db_session.add(item_type)
    db_session.commit()
    db_session.refresh(item_type)
    return item_type


@pytest.fixture
def style(db_session: Session, shirt_template: ItemType) -> Style:
    style = Style(name="Slim Fit Shirt", category="Shirt", base_price=3500, image="/img/slim.png")
    db_session.add(style)
    db_session.commit()
    db_session.refresh(style)
    return style


@pytest.fixture
def fabric(db_session: Session) -> Material:
    material = Material(
        name="Blue Linen",
        type=MaterialType.FABRIC,
        quantity=100,
        unit=MaterialUnit.METERS,
        cost_per_unit=850,
        low_stock_threshold=10,
        sku="MAT-FABRIC-1",
    )
    db_session.add(material)
    db_session.commit()
    db_session.refresh(material)
    return material


@pytest.fixture
def buttons(db_session: Session) -> Material:
    material = Material(
        name="Pearl Buttons",
        type=MaterialType.BUTTON,
        quantity=5,
        unit=MaterialUnit.PIECES,
        cost_per_unit=20,
        low_stock_threshold=2,
        sku="MAT-BUTTON-1",
    )
    db_session.add(material)
    db_session.commit()
    db_session.refresh(material)
    return material


@pytest.fixture
def delivery_date() -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=14)
