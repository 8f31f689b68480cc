# tests/conftest.py - Shared fixtures: an in-memory store, services and an API client
import os

os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PAYSTACK_SECRET_KEY"] = "sk_test_secret"

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from schooldesk.core.db import build_engine, get_db
from schooldesk.main import app
from schooldesk.models import Base
from schooldesk.schemas.coupon import CouponCreate
from schooldesk.schemas.fee import FeeRecordCreate
from schooldesk.schemas.student import StudentCreate
from schooldesk.services.coupon_service import CouponService
from schooldesk.services.fee_service import FeeService
from schooldesk.services.student_service import StudentService

TERM = "1st Term"
YEAR = "2024/2025"


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session):
    def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_student(session):
    counter = iter(range(1, 10_000))

    def _make(first_name="Ada", last_name="Obi", class_name="JSS 1", status="active"):
        student = StudentService(session).create_student(StudentCreate(
            admission_number=f"ADM{next(counter):04d}",
            first_name=first_name,
            last_name=last_name,
            class_name=class_name,
        ))
        if status != "active":
            student.status = status
            session.commit()
        return student

    return _make


@pytest.fixture
def make_fee(session, make_student):
    def _make(amount=5_000_000, student=None, fee_type="Tuition", due_date=None, term=TERM, academic_year=YEAR):
        student = student or make_student()
        return FeeService(session).create_fee_record(FeeRecordCreate(
            student_id=student.id,
            fee_type=fee_type,
            amount=amount,
            due_date=due_date or date.today() + timedelta(days=30),
            term=term,
            academic_year=academic_year,
        ))

    return _make


@pytest.fixture
def make_coupon(session):
    def _make(code="WELCOME10", discount_type="percentage", discount_value=10, max_uses=10, expiry_date=None, **extra):
        return CouponService(session).create_coupon(CouponCreate(
            code=code,
            discount_type=discount_type,
            discount_value=discount_value,
            max_uses=max_uses,
            expiry_date=expiry_date or date.today() + timedelta(days=30),
            **extra,
        ))

    return _make
