import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["SQLITE_URL"] = "sqlite://"
os.environ["LOG_FILE"] = ""
os.environ.pop("ADMIN_EMAIL", None)
os.environ.pop("POSTGRES_HOST", None)

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.database import Base, get_db
from storefront.exceptions import EmailError
from storefront.main import app
from storefront.models.catalog import Category, Product
from storefront.models.orders import Order, OrderStatus
from storefront.models.users import Role
from storefront.repositories.otp import OTPRepository
from storefront.repositories.users import UserDirectory
from storefront.services.otp import OTPService
from storefront.utils.clock import get_clock
from storefront.utils.email import get_email_sender
from storefront.utils.security import create_user_token

SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEFAULT_PASSWORD = "secret123"


class FrozenClock:
    """Clock that only moves when a test advances it"""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs):
        self.current += timedelta(**kwargs)


class RecordingSender:
    """Email sender that keeps the codes instead of mailing them"""

    def __init__(self):
        self.sent = []
        self.fail = False

    def _record(self, email, purpose, code):
        if self.fail:
            raise EmailError("Failed to send email: connection refused")
        self.sent.append({"email": email, "purpose": purpose, "code": code})
        return True

    def send_verification_otp(self, email, code, display_name):
        return self._record(email, "email_verification", code)

    def send_password_reset_otp(self, email, code):
        return self._record(email, "password_reset", code)

    def last_code(self, email, purpose=None):
        for message in reversed(self.sent):
            if message["email"] == email and (purpose is None or message["purpose"] == purpose):
                return message["code"]
        return None


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def clock():
    return FrozenClock(datetime(2026, 1, 15, 12, 0, 0))


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def otp_service(db, sender, clock):
    return OTPService(OTPRepository(db), UserDirectory(db), sender, clock)


@pytest.fixture
def client(db, sender, clock):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_sender] = lambda: sender
    app.dependency_overrides[get_clock] = lambda: clock
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make_user(email="buyer@example.com", role=Role.BUYER, verified=True,
                   password=DEFAULT_PASSWORD, display_name="Test User"):
        return UserDirectory(db).create(
            email=email,
            display_name=display_name,
            password=password,
            phone_number="01012345678",
            role=role,
            is_email_verified=verified,
        )
    return _make_user


def auth_headers(user):
    return {"Authorization": f"Bearer {create_user_token(user)}"}


@pytest.fixture
def admin(make_user):
    return make_user(email="admin@example.com", role=Role.ADMIN, display_name="Admin")


@pytest.fixture
def buyer(make_user):
    return make_user()


@pytest.fixture
def category(db):
    category = Category(name="Basic Building Materials", description="Cement, bricks, steel")
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


@pytest.fixture
def make_product(db, category):
    def _make_product(name="Portland Cement 50kg", price=95.5, stock=40):
        product = Product(name=name, description="Bag", price=price, stock=stock, category_id=category.id)
        db.add(product)
        db.commit()
        db.refresh(product)
        return product
    return _make_product


def make_order(db, user, total, order_date):
    """Insert an order directly, bypassing the cart"""
    order = Order(
        user_id=user.id,
        order_date=order_date,
        total_price=total,
        status=OrderStatus.PENDING,
        shipping_first_name="Omar",
        shipping_last_name="Hassan",
        shipping_street="12 Nile St",
        shipping_city="Cairo",
        shipping_state="Cairo",
        shipping_zip_code="11511",
        shipping_country="Egypt",
    )
    db.add(order)
    db.commit()
    return order
