"""Shared test fixtures and configuration."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-do-not-use")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import Callable

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config.database import Base, get_db
from app.main import app
from app.shared.database.models import User
from app.shared.services.file_storage_service import file_storage_service

from .helpers import EXPENSES_URL, auth_headers, expense_form, invoice_file


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    """Point invoice storage at a per-test directory."""
    path = tmp_path / "invoices"
    monkeypatch.setattr(file_storage_service, "upload_dir", path)
    return path


@pytest.fixture
def client(session_factory, upload_dir):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _make_user(db, name: str, email: str, role: str, is_active: bool = True, **extra) -> User:
    user = User(
        name=name,
        email=email,
        password_hash=extra.pop("password_hash", "not-a-real-hash"),
        role=role,
        is_active=is_active,
        **extra,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def employee(db_session) -> User:
    return _make_user(db_session, "Emma Employee", "emma@example.com", "Employee",
                      department="Sales", employee_id="EMP-001")


@pytest.fixture
def other_employee(db_session) -> User:
    return _make_user(db_session, "Oscar Other", "oscar@example.com", "Employee")


@pytest.fixture
def manager(db_session) -> User:
    return _make_user(db_session, "Mark Manager", "mark@example.com", "Manager")


@pytest.fixture
def finance(db_session) -> User:
    return _make_user(db_session, "Fiona Finance", "fiona@example.com", "Finance")


@pytest.fixture
def inactive_employee(db_session) -> User:
    return _make_user(db_session, "Ivan Inactive", "ivan@example.com", "Employee", is_active=False)


@pytest.fixture
def submit(client) -> Callable:
    """Submit an expense as `user` and return the response."""
    def _submit(user: User, files=None, **form_overrides):
        return client.post(
            EXPENSES_URL,
            data=expense_form(**form_overrides),
            files=invoice_file() if files is None else files,
            headers=auth_headers(user),
        )
    return _submit
