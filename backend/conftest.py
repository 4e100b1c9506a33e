"""
Root conftest.py — shared fixtures for the entire test suite.

Provides:
  - ``api_client`` fixture returning a DRF ``APIClient``.
  - ``create_user`` factory fixture for creating test users of any type.
  - ``auth_client`` helper that authenticates the client as a user (JWT).
  - Municipal fixtures: ``office``, ``category``, ``citizen``, ``pro``,
    ``staff_factory``, ``maintainer``, ``report_factory``.
"""

from __future__ import annotations

import pytest
from rest_framework.test import APIClient


@pytest.fixture()
def api_client() -> APIClient:
    """Unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture()
def create_user(db):
    """
    Factory fixture that creates a user with sensible defaults.

    Usage::

        def test_something(create_user):
            citizen = create_user(username="alice")
            staff = create_user(
                user_type=UserType.TECHNICAL_STAFF_MEMBER,
                offices=[office],
            )
    """
    from accounts.models import User, UserType

    _counter = 0

    def _factory(
        *,
        username: str | None = None,
        password: str = "TestPass123!",
        email: str | None = None,
        user_type: str = UserType.CITIZEN,
        offices=(),
        is_active: bool = True,
        **kwargs,
    ) -> User:
        nonlocal _counter
        _counter += 1
        if username is None:
            username = f"testuser{_counter}"
        if email is None:
            email = f"{username}@test.local"

        user = User.objects.create_user(
            username=username,
            password=password,
            email=email,
            first_name=kwargs.pop("first_name", "Test"),
            last_name=kwargs.pop("last_name", f"User{_counter}"),
            user_type=user_type,
            is_active=is_active,
            **kwargs,
        )
        if offices:
            user.offices.set(offices)
        return user

    return _factory


@pytest.fixture()
def auth_client(api_client):
    """
    Returns a helper that authenticates ``api_client`` as the given user
    with a valid JWT access token and returns the client.

    Usage::

        def test_protected(auth_client, citizen):
            client = auth_client(citizen)
            resp = client.get("/api/reports/mine/")
            assert resp.status_code == 200
    """
    from rest_framework_simplejwt.tokens import AccessToken

    def _authenticate(user) -> APIClient:
        token = AccessToken.for_user(user)
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        return api_client

    return _authenticate


# ── Municipal fixtures ───────────────────────────────────────────────


@pytest.fixture()
def office(db):
    from accounts.models import Office

    return Office.objects.create(name="Roads Maintenance")


@pytest.fixture()
def company(db):
    from accounts.models import Company

    return Company.objects.create(name="Asphalt & Co.")


@pytest.fixture()
def category(office, company):
    from reports.models import Category

    category = Category.objects.create(name="Roads and Urban Furnishings", office=office)
    category.companies.add(company)
    return category


@pytest.fixture()
def citizen(create_user):
    return create_user(username="citizen")


@pytest.fixture()
def pro(create_user):
    from accounts.models import UserType

    return create_user(username="pro", user_type=UserType.PUBLIC_RELATIONS_OFFICER)


@pytest.fixture()
def staff_factory(create_user, office):
    """Creates technical staff members of ``office`` (or another office)."""
    from accounts.models import UserType

    def _factory(*, offices=None, **kwargs):
        return create_user(
            user_type=UserType.TECHNICAL_STAFF_MEMBER,
            offices=offices if offices is not None else [office],
            **kwargs,
        )

    return _factory


@pytest.fixture()
def maintainer(create_user, company):
    from accounts.models import UserType

    return create_user(
        username="maintainer",
        user_type=UserType.EXTERNAL_MAINTAINER,
        company=company,
    )


@pytest.fixture()
def report_factory(citizen, category):
    """
    Creates reports directly in the database, in any status.

    ``assigned_to`` is required for every status except PendingApproval
    and Rejected; ``rejection_reason`` for Rejected.
    """
    from reports.models import Report, ReportStatus

    def _factory(**kwargs):
        defaults = {
            "title": "Pothole",
            "description": "Deep pothole in front of number 12.",
            "category": category,
            "images": ["https://img.example/pothole.jpg"],
            "latitude": 45.07,
            "longitude": 7.68,
            "status": ReportStatus.PENDING_APPROVAL,
            "created_by": citizen,
        }
        defaults.update(kwargs)
        return Report.objects.create(**defaults)

    return _factory
