"""
Team management tests.
"""
from fastapi import status

from workhub.database.models import AuditRecord

from .test_base import BaseAPITest

BASE_URL = "/api/v1/teams/"


class TestTeams(BaseAPITest):

    def create_team(self, client, headers, name="Delivery", **extra):
        response = client.post(BASE_URL, json={"name": name, **extra}, headers=headers)
        return self.assert_success_response(response, status.HTTP_201_CREATED)

    def test_admin_creates_team(self, client, admin_auth_headers, manager, company, invalidator, fresh_session):
        team = self.create_team(client, admin_auth_headers, manager_id=str(manager.id))
        assert team["tenant_id"] == str(company.id)
        assert team["manager_id"] == str(manager.id)
        assert team["members"] == []
        assert invalidator.revision("/admin/teams") == 1
        assert fresh_session.query(AuditRecord).filter(
            AuditRecord.entity_type == "Team", AuditRecord.operation == "CREATE").count() == 1

    def test_duplicate_name_conflicts(self, client, admin_auth_headers):
        self.create_team(client, admin_auth_headers)
        response = client.post(BASE_URL, json={"name": "Delivery"}, headers=admin_auth_headers)
        self.assert_conflict(response, "DUPLICATE_TEAM")

    def test_worker_cannot_create_but_can_list(self, client, admin_auth_headers, auth_headers, fresh_session):
        self.create_team(client, admin_auth_headers)
        self.assert_forbidden(client.post(BASE_URL, json={"name": "Rogue"}, headers=auth_headers))
        assert fresh_session.query(AuditRecord).filter(AuditRecord.operation == "DENIED_CREATE").count() == 1

        teams = self.assert_success_response(client.get(BASE_URL, headers=auth_headers))
        assert [team["name"] for team in teams] == ["Delivery"]

    def test_manager_from_other_company_is_rejected(self, client, admin_auth_headers, foreign_admin):
        response = client.post(BASE_URL, json={"name": "Mixed", "manager_id": str(foreign_admin.id)},
                               headers=admin_auth_headers)
        self.assert_not_found(response)

    def test_membership(self, client, admin_auth_headers, worker, foreign_admin):
        team = self.create_team(client, admin_auth_headers)
        members_url = f"{BASE_URL}{team['id']}/members"

        added = self.assert_success_response(
            client.post(members_url, json={"user_id": str(worker.id)}, headers=admin_auth_headers))
        assert [member["id"] for member in added["members"]] == [str(worker.id)]

        self.assert_conflict(
            client.post(members_url, json={"user_id": str(worker.id)}, headers=admin_auth_headers),
            "ALREADY_MEMBER")
        self.assert_not_found(
            client.post(members_url, json={"user_id": str(foreign_admin.id)}, headers=admin_auth_headers))

        removed = self.assert_success_response(
            client.delete(f"{members_url}/{worker.id}", headers=admin_auth_headers))
        assert removed["members"] == []
        self.assert_not_found(client.delete(f"{members_url}/{worker.id}", headers=admin_auth_headers))

    def test_update_and_delete(self, client, admin_auth_headers, fresh_session):
        team = self.create_team(client, admin_auth_headers)
        updated = self.assert_success_response(
            client.put(f"{BASE_URL}{team['id']}", json={"description": "Client delivery"},
                       headers=admin_auth_headers))
        assert updated["description"] == "Client delivery"
        assert updated["name"] == "Delivery"

        self.assert_success_response(client.delete(f"{BASE_URL}{team['id']}", headers=admin_auth_headers))
        assert self.assert_success_response(client.get(BASE_URL, headers=admin_auth_headers)) == []
        assert fresh_session.query(AuditRecord).filter(AuditRecord.operation == "DELETE").count() == 1

    def test_other_company_cannot_see_team(self, client, admin_auth_headers, different_tenant_headers):
        team = self.create_team(client, admin_auth_headers)
        assert self.assert_success_response(client.get(BASE_URL, headers=different_tenant_headers)) == []
        self.assert_not_found(client.delete(f"{BASE_URL}{team['id']}", headers=different_tenant_headers))

    def test_superadmin_needs_company_to_create(self, client, superadmin_headers):
        response = client.post(BASE_URL, json={"name": "Nowhere"}, headers=superadmin_headers)
        self.assert_error_response(response, status.HTTP_403_FORBIDDEN, "MISSING_TENANT")
