"""
Invoice tests: converting accepted quotes, numbering and listing.
"""
from decimal import Decimal
from uuid import UUID

from fastapi import status

from workhub.database.models import AuditRecord, Invoice, Quote, QuoteStatus

from .conftest import NOW
from .test_base import BaseAPITest
from .test_quotes import quote_payload

QUOTES_URL = "/api/v1/quotes/"
BASE_URL = "/api/v1/invoices/"


class InvoiceTest(BaseAPITest):

    def accepted_quote(self, client, headers, customer):
        quote = self.assert_success_response(
            client.post(QUOTES_URL, json=quote_payload(customer), headers=headers), status.HTTP_201_CREATED)
        url = f"{QUOTES_URL}{quote['id']}/status"
        client.post(url, json={"status": "sent"}, headers=headers)
        client.post(url, json={"status": "accepted"}, headers=headers)
        return quote

    def convert(self, client, headers, quote, due_date="2025-04-13"):
        return client.post(f"{QUOTES_URL}{quote['id']}/convert", json={"due_date": due_date}, headers=headers)


class TestConvertQuote(InvoiceTest):

    def test_accepted_quote_becomes_invoice(self, client, manager_headers, customer, fresh_session,
                                            invalidator):
        quote = self.accepted_quote(client, manager_headers, customer)
        invoice = self.assert_success_response(self.convert(client, manager_headers, quote),
                                               status.HTTP_201_CREATED)

        assert invoice["number"] == "INV-2025-001"
        assert invoice["status"] == "draft"
        assert invoice["quote_id"] == quote["id"]
        assert invoice["date"] == "2025-03-14"
        assert invoice["due_date"] == "2025-04-13"
        assert Decimal(invoice["total"]) == Decimal("992.19")
        assert Decimal(invoice["balance"]) == Decimal("992.19")
        assert Decimal(invoice["paid_amount"]) == Decimal("0")
        assert [item["description"] for item in invoice["items"]] == ["Design", "Hosting"]
        assert invalidator.revision("/invoices") == 1

        stored = fresh_session.get(Quote, UUID(quote["id"]))
        assert stored.status == QuoteStatus.CONVERTED
        assert stored.converted_at.isoformat().startswith(NOW.strftime("%Y-%m-%dT%H:%M:%S"))

        created = fresh_session.query(AuditRecord).filter(AuditRecord.entity_type == "Invoice").one()
        assert created.operation == "CREATE"
        assert created.entity_id == invoice["id"]
        assert created.snapshot["converted_from_quote"] == quote["number"]
        updated = fresh_session.query(AuditRecord).filter(
            AuditRecord.entity_type == "Quote", AuditRecord.details == "accepted -> converted").one()
        assert updated.snapshot["converted_to_invoice"] == invoice["id"]

    def test_invoices_are_numbered_in_sequence(self, client, manager_headers, customer):
        first = self.accepted_quote(client, manager_headers, customer)
        second = self.accepted_quote(client, manager_headers, customer)
        numbers = [self.assert_success_response(self.convert(client, manager_headers, quote),
                                                status.HTTP_201_CREATED)["number"]
                   for quote in (first, second)]
        assert numbers == ["INV-2025-001", "INV-2025-002"]

    def test_only_accepted_quotes_convert(self, client, manager_headers, customer, fresh_session):
        draft = self.assert_success_response(
            client.post(QUOTES_URL, json=quote_payload(customer), headers=manager_headers),
            status.HTTP_201_CREATED)
        self.assert_conflict(self.convert(client, manager_headers, draft), "INVALID_TRANSITION")
        assert fresh_session.query(Invoice).count() == 0

    def test_quote_converts_once(self, client, manager_headers, customer, fresh_session):
        quote = self.accepted_quote(client, manager_headers, customer)
        self.convert(client, manager_headers, quote)
        self.assert_conflict(self.convert(client, manager_headers, quote), "INVALID_TRANSITION")
        assert fresh_session.query(Invoice).count() == 1

    def test_due_date_before_issue_date(self, client, manager_headers, customer):
        quote = self.accepted_quote(client, manager_headers, customer)
        self.assert_rejected(self.convert(client, manager_headers, quote, due_date="2025-03-13"),
                             "INVALID_DUE_DATE")

    def test_workers_cannot_convert(self, client, auth_headers, customer, fresh_session):
        quote = self.accepted_quote(client, auth_headers, customer)
        self.assert_forbidden(self.convert(client, auth_headers, quote))
        assert fresh_session.get(Quote, UUID(quote["id"])).status == QuoteStatus.ACCEPTED

    def test_other_company_cannot_convert(self, client, manager_headers, different_tenant_headers,
                                          customer):
        quote = self.accepted_quote(client, manager_headers, customer)
        self.assert_not_found(self.convert(client, different_tenant_headers, quote))


class TestListInvoices(InvoiceTest):

    def test_company_invoices_are_listed(self, client, manager_headers, different_tenant_headers,
                                         auth_headers, customer):
        quote = self.accepted_quote(client, manager_headers, customer)
        self.convert(client, manager_headers, quote)

        invoices = self.assert_success_response(client.get(BASE_URL, headers=manager_headers))
        assert [invoice["number"] for invoice in invoices] == ["INV-2025-001"]
        assert self.assert_success_response(client.get(BASE_URL, params={"status": "paid"},
                                                       headers=manager_headers)) == []
        assert self.assert_success_response(client.get(BASE_URL, headers=different_tenant_headers)) == []
        self.assert_forbidden(client.get(BASE_URL, headers=auth_headers))
