"""
Invoice actions.

Invoices are numbered INV-<year>-<NNN> per company. Converting an accepted
quote copies its lines and totals into a draft invoice and marks the quote
CONVERTED in the same commit.
"""
from decimal import Decimal
from typing import Optional
from uuid import UUID

from ..audit.recorder import AuditOperation, snapshot_of
from ..auth.permissions import Operation, PermissionScope
from ..database.models import Invoice, InvoiceItem, InvoiceStatus, Quote, QuoteStatus
from ..errors import Conflict, ValidationFailed
from ..schemas.invoices import InvoiceResponse, QuoteConvertRequest
from .base import ActionResult, ActionServices
from .quotes import DUPLICATE_NUMBER, INVALID_TRANSITION, next_document_number, quote_snapshot

RESOURCE = "invoices"
ENTITY = "Invoice"
ROUTES = ("/quotes", "/invoices")

INVALID_DUE_DATE = "INVALID_DUE_DATE"


def invoice_snapshot(invoice: Invoice) -> dict:
    snapshot = snapshot_of(invoice)
    snapshot["items"] = [snapshot_of(item) for item in invoice.items]
    return snapshot


# PUBLIC_INTERFACE
def convert_quote(services: ActionServices, token: Optional[str], quote_id: UUID,
                  request: QuoteConvertRequest) -> ActionResult:
    """
    Turn an accepted quote into a draft invoice.

    Args:
        services: Request collaborators
        token: Session token
        quote_id: Quote to convert
        request: Invoice due date

    Returns:
        ActionResult: The new invoice
    """
    with services.action(token, "convert_quote") as action:
        identity = action.resolve()
        quote = action.load(Quote, quote_id)
        action.authorize(RESOURCE, Operation.CREATE,
                         PermissionScope(company_id=quote.tenant_id), entity_id=quote.id)
        if quote.status != QuoteStatus.ACCEPTED:
            raise Conflict(f"Only accepted quotes can be converted, this one is {quote.status.value}",
                           INVALID_TRANSITION)

        issued = services.today()
        if request.due_date < issued:
            raise ValidationFailed([INVALID_DUE_DATE], message="The due date cannot be before the issue date")

        number = next_document_number(action, Invoice, quote.tenant_id, f"INV-{issued.year}-")
        invoice = Invoice(
            tenant_id=quote.tenant_id,
            client_id=quote.client_id,
            quote_id=quote.id,
            number=number,
            status=InvoiceStatus.DRAFT,
            date=issued,
            due_date=request.due_date,
            notes=quote.notes,
            terms=quote.terms,
            subtotal=quote.subtotal,
            tax_amount=quote.tax_amount,
            total=quote.total,
            paid_amount=Decimal("0"),
            balance=quote.total,
            created_by_id=identity.id,
            items=[
                InvoiceItem(
                    description=item.description,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    tax_rate=item.tax_rate,
                    subtotal=item.subtotal,
                    tax_amount=item.tax_amount,
                    total=item.total,
                    position=item.position,
                )
                for item in quote.items
            ],
        )
        quote.status = QuoteStatus.CONVERTED
        quote.converted_at = services.now()

        action.persist(invoice, quote,
                       conflict=Conflict("Invoice number already taken, retry", DUPLICATE_NUMBER))

        converted = quote_snapshot(quote)
        converted["converted_to_invoice"] = str(invoice.id)
        action.record(AuditOperation.UPDATE, "Quote", quote.id, converted,
                      details=f"{QuoteStatus.ACCEPTED.value} -> {QuoteStatus.CONVERTED.value}",
                      tenant_id=quote.tenant_id)
        created = invoice_snapshot(invoice)
        created["converted_from_quote"] = quote.number
        action.record(AuditOperation.CREATE, ENTITY, invoice.id, created, tenant_id=invoice.tenant_id)
        action.invalidate(*ROUTES)
        return action.succeed(InvoiceResponse.model_validate(invoice))
    return action.result


# PUBLIC_INTERFACE
def list_invoices(services: ActionServices, token: Optional[str],
                  status: Optional[InvoiceStatus] = None,
                  client_id: Optional[UUID] = None) -> ActionResult:
    """Invoices of the caller's company, newest first."""
    with services.action(token, "list_invoices") as action:
        action.resolve()
        action.authorize(RESOURCE, Operation.READ)
        query = action.query(Invoice)
        if status:
            query = query.filter(Invoice.status == status)
        if client_id:
            query = query.filter(Invoice.client_id == client_id)
        invoices = query.order_by(Invoice.created_at.desc()).all()
        return action.succeed([InvoiceResponse.model_validate(invoice) for invoice in invoices])
    return action.result
