"""
Company settings tests.
"""
from decimal import Decimal

from fastapi import status

from workhub.database.models import AuditRecord

from .test_base import BaseAPITest

BASE_URL = "/api/v1/settings/"


class TestSettings(BaseAPITest):

    def test_read_effective_rules(self, client, auth_headers, company):
        data = self.assert_success_response(client.get(BASE_URL, headers=auth_headers))
        assert data["tenant_id"] == str(company.id)
        assert Decimal(data["time_entry_rules"]["daily_hours_ceiling"]) == Decimal("12")
        assert data["time_entry_rules"]["hard_daily_cap"] is False

    def test_admin_updates_settings(self, client, admin_auth_headers, invalidator, fresh_session):
        response = client.patch(BASE_URL, json={
            "domain": "acme.example",
            "preferences": {"currency": "EUR", "time_entries": {"hard_daily_cap": True}},
            "time_entries": {"daily_hours_ceiling": "8"},
        }, headers=admin_auth_headers)

        data = self.assert_success_response(response)
        assert data["domain"] == "acme.example"
        assert data["settings"]["currency"] == "EUR"
        assert Decimal(data["time_entry_rules"]["daily_hours_ceiling"]) == Decimal("8")
        assert data["time_entry_rules"]["hard_daily_cap"] is False
        assert invalidator.revision("/admin/settings") == 1
        assert fresh_session.query(AuditRecord).filter(AuditRecord.entity_type == "Tenant").count() == 1

    def test_overrides_are_merged(self, client, admin_auth_headers):
        client.patch(BASE_URL, json={"time_entries": {"daily_hours_ceiling": "8"}}, headers=admin_auth_headers)
        data = self.assert_success_response(
            client.patch(BASE_URL, json={"time_entries": {"future_grace_days": 2}}, headers=admin_auth_headers))
        assert data["settings"]["time_entries"] == {"daily_hours_ceiling": "8", "future_grace_days": 2}

    def test_out_of_range_override_is_invalid(self, client, admin_auth_headers):
        response = client.patch(BASE_URL, json={"time_entries": {"max_hours_per_entry": "30"}},
                                headers=admin_auth_headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_manager_cannot_update(self, client, manager_headers):
        self.assert_forbidden(client.patch(BASE_URL, json={"domain": "x.test"}, headers=manager_headers))

    def test_name_clash_conflicts(self, client, admin_auth_headers, other_company):
        self.assert_conflict(client.patch(BASE_URL, json={"name": other_company.name},
                                          headers=admin_auth_headers))
