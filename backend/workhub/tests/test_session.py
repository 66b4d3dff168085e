"""
Session resolution tests for staff and client-portal tokens.
"""
import uuid
from datetime import timedelta

import pytest

from workhub.auth.jwt_handler import JWTHandler
from workhub.auth.session import PortalSessionResolver, SessionResolver
from workhub.database.models import UserRole
from workhub.errors import MissingTenant, Unauthenticated

from .conftest import token_for


class TestSessionResolver:

    def test_resolves_identity_from_database(self, db_session, worker, company):
        identity = SessionResolver(db_session).resolve(token_for(worker))
        assert identity.id == worker.id
        assert identity.role == UserRole.WORKER
        assert identity.company_id == company.id
        assert identity.is_active
        assert identity.department == "Engineering"

    @pytest.mark.parametrize("token", [None, "", "not-a-jwt"])
    def test_missing_or_invalid_token(self, db_session, token):
        with pytest.raises(Unauthenticated):
            SessionResolver(db_session).resolve(token)

    def test_expired_token(self, db_session, worker):
        token = JWTHandler.create_user_token(worker.id, worker.tenant_id, worker.role.value,
                                             expires_delta=timedelta(seconds=-1))
        with pytest.raises(Unauthenticated):
            SessionResolver(db_session).resolve(token)

    def test_unknown_user(self, db_session, company):
        token = JWTHandler.create_user_token(uuid.uuid4(), company.id, "worker")
        with pytest.raises(Unauthenticated):
            SessionResolver(db_session).resolve(token)

    def test_inactive_user(self, db_session, worker):
        token = token_for(worker)
        worker.active = False
        db_session.commit()
        with pytest.raises(Unauthenticated):
            SessionResolver(db_session).resolve(token)

    def test_role_changes_apply_to_existing_tokens(self, db_session, worker):
        token = token_for(worker)
        worker.role = UserRole.MANAGER
        db_session.commit()
        assert SessionResolver(db_session).resolve(token).role == UserRole.MANAGER

    def test_user_without_company(self, db_session, make_user):
        orphan = make_user(None, UserRole.WORKER, "Otto Orphan")
        with pytest.raises(MissingTenant):
            SessionResolver(db_session).resolve(token_for(orphan))

    def test_superadmin_without_company(self, db_session, superadmin):
        identity = SessionResolver(db_session).resolve(token_for(superadmin))
        assert identity.is_superadmin
        assert identity.company_id is None

    def test_portal_token_is_not_a_staff_session(self, db_session, contact):
        token = JWTHandler.create_portal_token(contact.id, contact.client_id, contact.name)
        with pytest.raises(Unauthenticated):
            SessionResolver(db_session).resolve(token)


class TestPortalSessionResolver:

    def test_resolves_client_identity(self, db_session, contact, company):
        token = JWTHandler.create_portal_token(contact.id, contact.client_id, contact.name)
        identity = PortalSessionResolver(db_session).resolve(token)
        assert identity.role == UserRole.CLIENT
        assert identity.client_id == contact.client_id
        assert identity.company_id == company.id

    def test_expired_token_is_anonymous(self, db_session, contact):
        token = JWTHandler.create_portal_token(contact.id, contact.client_id, contact.name,
                                               expires_delta=timedelta(seconds=-1))
        assert PortalSessionResolver(db_session).resolve(token) is None

    def test_staff_token_is_anonymous(self, db_session, worker):
        assert PortalSessionResolver(db_session).resolve(token_for(worker)) is None

    def test_client_mismatch_is_anonymous(self, db_session, contact):
        token = JWTHandler.create_portal_token(contact.id, uuid.uuid4(), contact.name)
        assert PortalSessionResolver(db_session).resolve(token) is None

    def test_inactive_contact_is_anonymous(self, db_session, contact):
        token = JWTHandler.create_portal_token(contact.id, contact.client_id, contact.name)
        contact.active = False
        db_session.commit()
        assert PortalSessionResolver(db_session).resolve(token) is None
