"""
Client, project and client portal tests.
"""
from fastapi import status

from workhub.database.models import ClientContact

from .conftest import NOW, PORTAL_ACCESS_CODE
from .test_base import BaseAPITest


class TestClientsAndProjects(BaseAPITest):

    def test_create_client_and_project(self, client, manager_headers, company):
        created = self.assert_success_response(
            client.post("/api/v1/clients/", json={"name": "Hooli", "contact_email": "ops@hooli.test"},
                        headers=manager_headers), status.HTTP_201_CREATED)
        assert created["tenant_id"] == str(company.id)

        project = self.assert_success_response(
            client.post("/api/v1/projects/", json={"code": "HOO", "name": "Hooli app",
                                                   "client_id": created["id"]},
                        headers=manager_headers), status.HTTP_201_CREATED)
        assert project["active"] is True

        self.assert_conflict(
            client.post("/api/v1/projects/", json={"code": "HOO", "name": "Duplicate"}, headers=manager_headers),
            "DUPLICATE_PROJECT_CODE")

    def test_invalid_contact_email(self, client, manager_headers):
        response = client.post("/api/v1/clients/", json={"name": "Bad", "contact_email": "invalid-email"},
                               headers=manager_headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_worker_cannot_create_projects(self, client, auth_headers):
        self.assert_forbidden(client.post("/api/v1/projects/", json={"code": "X", "name": "X"},
                                          headers=auth_headers))

    def test_deactivated_project_blocks_new_entries(self, client, admin_auth_headers, auth_headers, project):
        data = self.assert_success_response(
            client.patch(f"/api/v1/projects/{project.id}/status", json={"active": False},
                         headers=admin_auth_headers))
        assert data["active"] is False

        active = self.assert_success_response(
            client.get("/api/v1/projects/", params={"active": True}, headers=auth_headers))
        assert active == []

    def test_projects_are_company_scoped(self, client, different_tenant_headers, project):
        assert self.assert_success_response(client.get("/api/v1/projects/", headers=different_tenant_headers)) == []


class TestClientPortal(BaseAPITest):

    def test_contact_access_code_is_shown_once(self, client, admin_auth_headers, customer, fresh_session):
        data = self.assert_success_response(
            client.post(f"/api/v1/clients/{customer.id}/contacts",
                        json={"name": "Joanna", "email": "Joanna@Initech.test"},
                        headers=admin_auth_headers), status.HTTP_201_CREATED)
        assert len(data["access_code"]) == 8

        stored = fresh_session.query(ClientContact).filter(ClientContact.email == "joanna@initech.test").one()
        assert stored.access_code_hash != data["access_code"]

        login = client.post("/api/v1/portal/login",
                            json={"email": "joanna@initech.test", "access_code": data["access_code"]})
        self.assert_success_response(login)

    def test_login_and_dashboard(self, client, contact, customer, project, inactive_project, fresh_session):
        login = self.assert_success_response(
            client.post("/api/v1/portal/login", json={"email": contact.email, "access_code": PORTAL_ACCESS_CODE}))
        assert login["token_type"] == "bearer"
        assert login["expires_in"] == 24 * 3600
        last_login = fresh_session.get(ClientContact, contact.id).last_login
        assert last_login.isoformat().startswith(NOW.strftime("%Y-%m-%dT%H:%M:%S"))

        headers = {"Authorization": f"Bearer {login['access_token']}"}
        dashboard = self.assert_success_response(client.get("/api/v1/portal/dashboard", headers=headers))
        assert dashboard["client_id"] == str(customer.id)
        assert [p["code"] for p in dashboard["projects"]] == ["WEB"]

    def test_wrong_access_code(self, client, contact):
        response = client.post("/api/v1/portal/login", json={"email": contact.email, "access_code": "WRONG"})
        self.assert_unauthorized(response)

    def test_dashboard_requires_portal_token(self, client, auth_headers):
        self.assert_unauthorized(client.get("/api/v1/portal/dashboard"))
        self.assert_unauthorized(client.get("/api/v1/portal/dashboard", headers=auth_headers))

    def test_portal_token_cannot_reach_staff_endpoints(self, client, portal_headers):
        self.assert_unauthorized(client.get("/api/v1/projects/", headers=portal_headers))
        self.assert_unauthorized(client.get("/api/v1/teams/", headers=portal_headers))
