"""
Quote tests: numbering, Decimal totals, lifecycle and ownership.
"""
from datetime import date
from decimal import Decimal

import pytest
from fastapi import status

from workhub.actions.quotes import line_totals
from workhub.database.models import Client, Quote, QuoteStatus
from workhub.schemas.quotes import QuoteItemRequest

from .conftest import NOW
from .test_base import BaseAPITest

BASE_URL = "/api/v1/quotes/"


def quote_payload(customer):
    return {
        "client_id": str(customer.id),
        "valid_until": "2025-04-30",
        "notes": "Phase one",
        "items": [
            {"description": "Design", "quantity": "10", "unit_price": "80", "tax_rate": "21"},
            {"description": "Hosting", "quantity": "1", "unit_price": "19.99", "tax_rate": "21"},
        ],
    }


def test_line_totals_round_to_cents():
    subtotal, tax, total = line_totals(QuoteItemRequest(
        description="Hosting", quantity=Decimal("1"), unit_price=Decimal("19.99"), tax_rate=Decimal("21")))
    assert subtotal == Decimal("19.99")
    assert tax == Decimal("4.20")
    assert total == Decimal("24.19")


class TestQuotes(BaseAPITest):

    def create_quote(self, client, headers, customer):
        response = client.post(BASE_URL, json=quote_payload(customer), headers=headers)
        return self.assert_success_response(response, status.HTTP_201_CREATED)

    def test_numbering_and_totals(self, client, auth_headers, customer, invalidator):
        first = self.create_quote(client, auth_headers, customer)
        second = self.create_quote(client, auth_headers, customer)

        assert first["number"] == "QUO-2025-001"
        assert second["number"] == "QUO-2025-002"
        assert first["status"] == "draft"
        assert Decimal(first["subtotal"]) == Decimal("819.99")
        assert Decimal(first["tax_amount"]) == Decimal("172.20")
        assert Decimal(first["total"]) == Decimal("992.19")
        assert [item["position"] for item in first["items"]] == [0, 1]
        assert invalidator.revision("/quotes") == 2

    def test_numbering_is_per_company(self, client, auth_headers, different_tenant_headers, customer,
                                      db_session, other_company):
        foreign_customer = Client(tenant_id=other_company.id, name="Umbrella")
        db_session.add(foreign_customer)
        db_session.commit()

        self.create_quote(client, auth_headers, customer)
        foreign = self.create_quote(client, different_tenant_headers, foreign_customer)
        assert foreign["number"] == "QUO-2025-001"

    def test_numbering_continues_past_999(self, client, auth_headers, company, worker, customer,
                                          db_session):
        for number in ("QUO-2025-998", "QUO-2025-999", "QUO-2025-1000"):
            db_session.add(Quote(tenant_id=company.id, client_id=customer.id, number=number,
                                 status=QuoteStatus.DRAFT, valid_until=date(2025, 4, 30),
                                 created_by_id=worker.id))
        db_session.commit()

        quote = self.create_quote(client, auth_headers, customer)
        assert quote["number"] == "QUO-2025-1001"

    def test_client_must_belong_to_company(self, client, different_tenant_headers, customer):
        self.assert_not_found(client.post(BASE_URL, json=quote_payload(customer),
                                          headers=different_tenant_headers))

    def test_at_least_one_item(self, client, auth_headers, customer):
        payload = {**quote_payload(customer), "items": []}
        response = client.post(BASE_URL, json=payload, headers=auth_headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_lifecycle(self, client, auth_headers, manager_headers, customer):
        quote = self.create_quote(client, auth_headers, customer)
        url = f"{BASE_URL}{quote['id']}/status"

        self.assert_conflict(client.post(url, json={"status": "accepted"}, headers=manager_headers),
                             "INVALID_TRANSITION")
        sent = self.assert_success_response(client.post(url, json={"status": "sent"}, headers=auth_headers))
        assert sent["sent_at"].startswith(NOW.strftime("%Y-%m-%dT%H:%M:%S"))
        accepted = self.assert_success_response(
            client.post(url, json={"status": "accepted"}, headers=manager_headers))
        assert accepted["accepted_at"] is not None
        self.assert_conflict(client.post(url, json={"status": "converted"}, headers=manager_headers),
                             "INVALID_TRANSITION")
        self.assert_conflict(client.post(url, json={"status": "sent"}, headers=manager_headers),
                             "INVALID_TRANSITION")

    @pytest.mark.parametrize("final", ["rejected", "expired"])
    def test_sent_quote_can_close(self, client, auth_headers, customer, final):
        quote = self.create_quote(client, auth_headers, customer)
        url = f"{BASE_URL}{quote['id']}/status"
        client.post(url, json={"status": "sent"}, headers=auth_headers)
        closed = self.assert_success_response(client.post(url, json={"status": final}, headers=auth_headers))
        assert closed["status"] == final

    def test_workers_only_see_and_change_own_quotes(self, client, auth_headers, coworker_headers,
                                                     manager_headers, customer):
        quote = self.create_quote(client, auth_headers, customer)
        self.create_quote(client, coworker_headers, customer)

        assert len(self.assert_success_response(client.get(BASE_URL, headers=auth_headers))) == 1
        assert len(self.assert_success_response(client.get(BASE_URL, headers=manager_headers))) == 2
        self.assert_forbidden(client.post(f"{BASE_URL}{quote['id']}/status", json={"status": "sent"},
                                          headers=coworker_headers))
        self.assert_forbidden(client.delete(f"{BASE_URL}{quote['id']}", headers=coworker_headers))

    def test_only_drafts_can_be_deleted(self, client, auth_headers, customer):
        draft = self.create_quote(client, auth_headers, customer)
        sent = self.create_quote(client, auth_headers, customer)
        client.post(f"{BASE_URL}{sent['id']}/status", json={"status": "sent"}, headers=auth_headers)

        self.assert_conflict(client.delete(f"{BASE_URL}{sent['id']}", headers=auth_headers), "QUOTE_LOCKED")
        self.assert_success_response(client.delete(f"{BASE_URL}{draft['id']}", headers=auth_headers))
        remaining = self.assert_success_response(client.get(BASE_URL, headers=auth_headers))
        assert [quote["id"] for quote in remaining] == [sent["id"]]
