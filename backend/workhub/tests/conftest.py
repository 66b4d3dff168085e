"""
Pytest configuration and fixtures for backend testing.

Provides an in-memory database, the FastAPI test client, action
collaborators, authentication tokens and multi-tenant test data.
"""
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Callable, Dict, Generator, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from workhub.actions.base import ActionServices
from workhub.api.main import create_app
from workhub.auth.jwt_handler import AccessCodeHandler, JWTHandler
from workhub.database.connection import Database
from workhub.database.models import Client, ClientContact, Project, Tenant, User, UserRole
from workhub.invalidation import RouteInvalidator
from workhub.validation.time_entries import TimeEntryRules

TODAY = date(2025, 3, 14)
NOW = datetime(2025, 3, 14, 17, 30, tzinfo=timezone.utc)
PORTAL_ACCESS_CODE = "PORTAL42"


@pytest.fixture
def database() -> Generator[Database, None, None]:
    """Fresh in-memory database per test."""
    database = Database("sqlite://")
    database.create_tables()
    yield database
    database.drop_tables()
    database.dispose()


@pytest.fixture
def db_session(database: Database) -> Generator[Session, None, None]:
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def invalidator() -> RouteInvalidator:
    return RouteInvalidator()


@pytest.fixture
def rules() -> TimeEntryRules:
    """Default rules, independent of the environment."""
    return TimeEntryRules()


@pytest.fixture
def today() -> Callable[[], date]:
    return lambda: TODAY


@pytest.fixture
def now() -> Callable[[], datetime]:
    return lambda: NOW


@pytest.fixture
def services(db_session, invalidator, rules, today, now) -> ActionServices:
    return ActionServices(db_session, invalidator=invalidator, rules=rules, today=today, now=now)


@pytest.fixture
def client(database, invalidator, rules, today, now) -> Generator[TestClient, None, None]:
    """FastAPI test client bound to the test database."""
    app = create_app(database=database, invalidator=invalidator, rules=rules, today=today, now=now)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def fresh_session(database: Database) -> Generator[Session, None, None]:
    """Separate session for asserting on what requests committed."""
    session = database.session()
    try:
        yield session
    finally:
        session.close()


# Multi-tenant data

@pytest.fixture
def company(db_session) -> Tenant:
    tenant = Tenant(name="Acme Consulting", domain="acme.test", settings={})
    db_session.add(tenant)
    db_session.commit()
    return tenant


@pytest.fixture
def other_company(db_session) -> Tenant:
    tenant = Tenant(name="Globex", domain="globex.test", settings={})
    db_session.add(tenant)
    db_session.commit()
    return tenant


@pytest.fixture
def make_user(db_session) -> Callable[..., User]:
    def _make_user(tenant, role: UserRole, name: str, active: bool = True,
                   department: Optional[str] = None) -> User:
        user = User(
            tenant_id=tenant.id if tenant is not None else None,
            email=f"{name.lower().replace(' ', '.')}@example.com",
            name=name,
            role=role,
            department=department,
            active=active,
        )
        db_session.add(user)
        db_session.commit()
        return user
    return _make_user


@pytest.fixture
def admin(company, make_user) -> User:
    return make_user(company, UserRole.ADMIN, "Ada Admin")


@pytest.fixture
def manager(company, make_user) -> User:
    return make_user(company, UserRole.MANAGER, "Max Manager", department="Engineering")


@pytest.fixture
def worker(company, make_user) -> User:
    return make_user(company, UserRole.WORKER, "Wendy Worker", department="Engineering")


@pytest.fixture
def coworker(company, make_user) -> User:
    return make_user(company, UserRole.WORKER, "Carl Coworker", department="Engineering")


@pytest.fixture
def sales_manager(company, make_user) -> User:
    return make_user(company, UserRole.MANAGER, "Sam Sales", department="Sales")


@pytest.fixture
def foreign_admin(other_company, make_user) -> User:
    return make_user(other_company, UserRole.ADMIN, "Frank Foreign")


@pytest.fixture
def superadmin(make_user) -> User:
    return make_user(None, UserRole.SUPERADMIN, "Sue Super")


@pytest.fixture
def customer(db_session, company) -> Client:
    record = Client(tenant_id=company.id, name="Initech", contact_email="it@initech.test")
    db_session.add(record)
    db_session.commit()
    return record


@pytest.fixture
def project(db_session, company, customer) -> Project:
    record = Project(tenant_id=company.id, client_id=customer.id, code="WEB",
                     name="Website relaunch", hourly_rate=Decimal("80.00"))
    db_session.add(record)
    db_session.commit()
    return record


@pytest.fixture
def inactive_project(db_session, company) -> Project:
    record = Project(tenant_id=company.id, code="OLD", name="Archived work", active=False)
    db_session.add(record)
    db_session.commit()
    return record


@pytest.fixture
def foreign_project(db_session, other_company) -> Project:
    record = Project(tenant_id=other_company.id, code="GLX", name="Globex internal")
    db_session.add(record)
    db_session.commit()
    return record


@pytest.fixture
def contact(db_session, customer) -> ClientContact:
    record = ClientContact(
        client_id=customer.id,
        name="Peter Portal",
        email="peter@initech.test",
        access_code_hash=AccessCodeHandler.hash_code(PORTAL_ACCESS_CODE),
    )
    db_session.add(record)
    db_session.commit()
    return record


# Tokens

def token_for(user: User) -> str:
    return JWTHandler.create_user_token(user.id, user.tenant_id, user.role.value)


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(worker) -> Dict[str, str]:
    return bearer(token_for(worker))


@pytest.fixture
def coworker_headers(coworker) -> Dict[str, str]:
    return bearer(token_for(coworker))


@pytest.fixture
def manager_headers(manager) -> Dict[str, str]:
    return bearer(token_for(manager))


@pytest.fixture
def sales_manager_headers(sales_manager) -> Dict[str, str]:
    return bearer(token_for(sales_manager))


@pytest.fixture
def admin_auth_headers(admin) -> Dict[str, str]:
    return bearer(token_for(admin))


@pytest.fixture
def different_tenant_headers(foreign_admin) -> Dict[str, str]:
    return bearer(token_for(foreign_admin))


@pytest.fixture
def superadmin_headers(superadmin) -> Dict[str, str]:
    return bearer(token_for(superadmin))


@pytest.fixture
def portal_headers(contact) -> Dict[str, str]:
    return bearer(JWTHandler.create_portal_token(contact.id, contact.client_id, contact.name))
