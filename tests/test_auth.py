"""Tests for token authentication, role checks and login."""

from datetime import timedelta

import pytest
from jose import jwt

from app.config.settings import settings
from app.core.auth.dependencies import role_allowed, can_access_expense
from app.core.auth.schemas import UserRole
from app.core.auth.service import AuthService
from app.shared.database.models import Expense, User

from .helpers import EXPENSES_URL, auth_headers, make_token


class TestRoleAllowed:
    def test_member_role(self):
        assert role_allowed([UserRole.MANAGER, UserRole.FINANCE], "Finance")

    def test_non_member_role(self):
        assert not role_allowed([UserRole.MANAGER, UserRole.FINANCE], "Employee")

    def test_unknown_role(self):
        assert not role_allowed([UserRole.EMPLOYEE], "Admin")

    def test_plain_strings(self):
        assert role_allowed(["Employee"], "Employee")


class TestCanAccessExpense:
    def test_reviewer_sees_everything(self):
        assert can_access_expense(User(id=2, role="Manager"), Expense(submitted_by=1))
        assert can_access_expense(User(id=3, role="Finance"), Expense(submitted_by=1))

    def test_employee_owner_only(self):
        assert can_access_expense(User(id=1, role="Employee"), Expense(submitted_by=1))
        assert not can_access_expense(User(id=4, role="Employee"), Expense(submitted_by=1))


class TestAuthentication:
    def test_missing_token(self, client):
        response = client.get(f"{EXPENSES_URL}/my")
        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized, no token"

    def test_malformed_header(self, client, employee):
        response = client.get(f"{EXPENSES_URL}/my", headers={"Authorization": f"Token {make_token(employee)}"})
        assert response.status_code == 401

    def test_invalid_token(self, client):
        response = client.get(f"{EXPENSES_URL}/my", headers={"Authorization": "Bearer not.a.token"})
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_expired_token(self, client, employee):
        token = make_token(employee, expires_delta=timedelta(minutes=-5))
        response = client.get(f"{EXPENSES_URL}/my", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_unknown_user(self, client):
        token = AuthService.create_access_token({"user_id": 9999, "email": "ghost@example.com", "role": "Employee"})
        response = client.get(f"{EXPENSES_URL}/my", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized, user not found"

    def test_token_with_only_user_id(self, client, employee):
        token = AuthService.create_access_token({"user_id": employee.id})
        response = client.get(f"{EXPENSES_URL}/my", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200

    def test_token_without_user_id(self, client, employee):
        token = jwt.encode({"email": employee.email}, settings.secret_key, algorithm=settings.algorithm)
        response = client.get(f"{EXPENSES_URL}/my", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_deactivated_account(self, client, inactive_employee):
        response = client.get(f"{EXPENSES_URL}/my", headers=auth_headers(inactive_employee))
        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized, account is deactivated"

    def test_unauthenticated_before_role_check(self, client):
        response = client.put(f"{EXPENSES_URL}/1/status", json={"status": "Approved"})
        assert response.status_code == 401


class TestRoleChecks:
    def test_manager_cannot_list_own(self, client, manager):
        response = client.get(f"{EXPENSES_URL}/my", headers=auth_headers(manager))
        assert response.status_code == 403

    def test_employee_cannot_list_all(self, client, employee):
        response = client.get(EXPENSES_URL, headers=auth_headers(employee))
        assert response.status_code == 403
        assert "Employee" in response.json()["message"]

    def test_employee_cannot_review(self, client, employee):
        response = client.put(
            f"{EXPENSES_URL}/1/status", json={"status": "Approved"}, headers=auth_headers(employee)
        )
        assert response.status_code == 403

    def test_finance_cannot_submit(self, client, finance):
        response = client.post(EXPENSES_URL, data={"title": "x"}, headers=auth_headers(finance))
        assert response.status_code == 403


class TestLogin:
    def _create(self, db_session, is_active=True):
        user = User(
            name="Lena Login",
            email="lena@example.com",
            password_hash=AuthService.get_password_hash("secret123"),
            role="Employee",
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        return user

    def test_login_json_and_me(self, client, db_session):
        self._create(db_session)
        response = client.post("/api/v1/auth/login-json", json={"email": "lena@example.com", "password": "secret123"})
        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["user"]["role"] == "Employee"

        me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert me.status_code == 200
        assert me.json()["email"] == "lena@example.com"

    def test_login_form(self, client, db_session):
        self._create(db_session)
        response = client.post("/api/v1/auth/login", data={"username": "lena@example.com", "password": "secret123"})
        assert response.status_code == 200
        assert AuthService.verify_token(response.json()["access_token"])["email"] == "lena@example.com"

    def test_wrong_password(self, client, db_session):
        self._create(db_session)
        response = client.post("/api/v1/auth/login-json", json={"email": "lena@example.com", "password": "wrong-pass"})
        assert response.status_code == 401

    def test_deactivated_login(self, client, db_session):
        self._create(db_session, is_active=False)
        response = client.post("/api/v1/auth/login-json", json={"email": "lena@example.com", "password": "secret123"})
        assert response.status_code == 401


def test_create_access_token_requires_user_id():
    with pytest.raises(ValueError):
        AuthService.create_access_token({"email": "x@example.com"})
