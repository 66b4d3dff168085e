"""
Quote actions.

Quotes are numbered QUO-<year>-<NNN> per company. Line and document totals
are computed with Decimal and rounded to cents. An accepted quote becomes
CONVERTED only by converting it to an invoice (see actions.invoices).
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional, Tuple
from uuid import UUID

from sqlalchemy import func

from ..audit.recorder import AuditOperation, snapshot_of
from ..auth.permissions import Access, Operation, PermissionScope
from ..database.models import Client, Quote, QuoteItem, QuoteStatus
from ..errors import Conflict
from ..schemas.quotes import QuoteCreateRequest, QuoteItemRequest, QuoteResponse
from .base import ActionResult, ActionScope, ActionServices

RESOURCE = "quotes"
ENTITY = "Quote"
ROUTES = ("/quotes",)

INVALID_TRANSITION = "INVALID_TRANSITION"
QUOTE_LOCKED = "QUOTE_LOCKED"
DUPLICATE_NUMBER = "DUPLICATE_NUMBER"

CENT = Decimal("0.01")

TRANSITIONS: Dict[QuoteStatus, Tuple[QuoteStatus, ...]] = {
    QuoteStatus.DRAFT: (QuoteStatus.SENT,),
    QuoteStatus.SENT: (QuoteStatus.ACCEPTED, QuoteStatus.REJECTED, QuoteStatus.EXPIRED),
    QuoteStatus.ACCEPTED: (),
    QuoteStatus.REJECTED: (),
    QuoteStatus.EXPIRED: (),
    QuoteStatus.CONVERTED: (),
}

TIMESTAMPS = {
    QuoteStatus.SENT: "sent_at",
    QuoteStatus.ACCEPTED: "accepted_at",
    QuoteStatus.REJECTED: "rejected_at",
}


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def line_totals(item: QuoteItemRequest) -> Tuple[Decimal, Decimal, Decimal]:
    """Subtotal, tax and total of one quote line."""
    subtotal = _money(item.quantity * item.unit_price)
    tax_amount = _money(subtotal * item.tax_rate / Decimal("100"))
    return subtotal, tax_amount, subtotal + tax_amount


def next_document_number(action: ActionScope, model, company_id: UUID, prefix: str) -> str:
    """
    Next <prefix><NNN> number of a company.

    Sequences are zero padded to three digits and keep growing past 999, so
    the highest number is the longest one, then the greatest string.
    """
    last = action.db.query(model).filter(
        model.tenant_id == company_id,
        model.number.startswith(prefix),
    ).order_by(func.length(model.number).desc(), model.number.desc()).first()
    sequence = int(last.number.rsplit("-", 1)[1]) + 1 if last else 1
    return f"{prefix}{sequence:03d}"


def _owner_scope(quote: Quote) -> PermissionScope:
    return PermissionScope(company_id=quote.tenant_id, owner_id=quote.created_by_id)


def quote_snapshot(quote: Quote) -> dict:
    snapshot = snapshot_of(quote)
    snapshot["items"] = [snapshot_of(item) for item in quote.items]
    return snapshot


# PUBLIC_INTERFACE
def list_quotes(services: ActionServices, token: Optional[str],
                status: Optional[QuoteStatus] = None,
                client_id: Optional[UUID] = None) -> ActionResult:
    """Quotes of the company; callers with OWN access only see their own."""
    with services.action(token, "list_quotes") as action:
        identity = action.resolve()
        access = action.authorize(RESOURCE, Operation.READ)
        query = action.query(Quote)
        if access == Access.OWN:
            query = query.filter(Quote.created_by_id == identity.id)
        if status:
            query = query.filter(Quote.status == status)
        if client_id:
            query = query.filter(Quote.client_id == client_id)
        quotes = query.order_by(Quote.created_at.desc()).all()
        return action.succeed([QuoteResponse.model_validate(quote) for quote in quotes])
    return action.result


# PUBLIC_INTERFACE
def create_quote(services: ActionServices, token: Optional[str],
                 request: QuoteCreateRequest) -> ActionResult:
    """
    Create a draft quote for a client of the caller's company.

    Args:
        services: Request collaborators
        token: Session token
        request: Quote header and lines

    Returns:
        ActionResult: The numbered quote with computed totals
    """
    with services.action(token, "create_quote") as action:
        identity = action.resolve()
        company_id = action.company_id()
        action.authorize(RESOURCE, Operation.CREATE, PermissionScope(company_id=company_id))
        client = action.load(Client, request.client_id)

        items = []
        subtotal = tax_amount = Decimal("0")
        for position, line in enumerate(request.items):
            line_subtotal, line_tax, line_total = line_totals(line)
            subtotal += line_subtotal
            tax_amount += line_tax
            items.append(QuoteItem(
                description=line.description,
                quantity=line.quantity,
                unit_price=line.unit_price,
                tax_rate=line.tax_rate,
                subtotal=line_subtotal,
                tax_amount=line_tax,
                total=line_total,
                position=position,
            ))

        number = next_document_number(action, Quote, company_id, f"QUO-{services.today().year}-")
        quote = Quote(
            tenant_id=company_id,
            client_id=client.id,
            number=number,
            status=QuoteStatus.DRAFT,
            valid_until=request.valid_until,
            notes=request.notes,
            terms=request.terms,
            subtotal=subtotal,
            tax_amount=tax_amount,
            total=subtotal + tax_amount,
            created_by_id=identity.id,
            items=items,
        )
        action.persist(quote, conflict=Conflict("Quote number already taken, retry", DUPLICATE_NUMBER))
        action.record(AuditOperation.CREATE, ENTITY, quote.id, quote_snapshot(quote))
        action.invalidate(*ROUTES)
        return action.succeed(QuoteResponse.model_validate(quote))
    return action.result


# PUBLIC_INTERFACE
def update_quote_status(services: ActionServices, token: Optional[str], quote_id: UUID,
                        status: QuoteStatus) -> ActionResult:
    """Move a quote along its lifecycle, stamping the time of each step once."""
    with services.action(token, "update_quote_status") as action:
        action.resolve()
        quote = action.load(Quote, quote_id)
        action.authorize(RESOURCE, Operation.UPDATE, _owner_scope(quote), entity_id=quote.id)

        previous = quote.status
        if status not in TRANSITIONS[previous]:
            hint = " (convert it to an invoice instead)" if status == QuoteStatus.CONVERTED else ""
            raise Conflict(f"Cannot transition from {previous.value} to {status.value}{hint}",
                           INVALID_TRANSITION)
        quote.status = status
        stamp = TIMESTAMPS.get(status)
        if stamp and getattr(quote, stamp) is None:
            setattr(quote, stamp, services.now())

        action.persist(quote)
        action.record(AuditOperation.UPDATE, ENTITY, quote.id, quote_snapshot(quote),
                      details=f"{previous.value} -> {status.value}", tenant_id=quote.tenant_id)
        action.invalidate(*ROUTES)
        return action.succeed(QuoteResponse.model_validate(quote))
    return action.result


# PUBLIC_INTERFACE
def delete_quote(services: ActionServices, token: Optional[str], quote_id: UUID) -> ActionResult:
    """Delete a quote that is still a draft."""
    with services.action(token, "delete_quote") as action:
        action.resolve()
        quote = action.load(Quote, quote_id)
        action.authorize(RESOURCE, Operation.DELETE, _owner_scope(quote), entity_id=quote.id)
        if quote.status != QuoteStatus.DRAFT:
            raise Conflict("Only draft quotes can be deleted", QUOTE_LOCKED)

        snapshot = quote_snapshot(quote)
        deleted_id, tenant_id = quote.id, quote.tenant_id
        action.remove(quote)
        action.record(AuditOperation.DELETE, ENTITY, deleted_id, snapshot, tenant_id=tenant_id)
        action.invalidate(*ROUTES)
        return action.succeed({"id": deleted_id})
    return action.result
