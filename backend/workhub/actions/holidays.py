"""
Holiday actions.

A holiday either belongs to one company or, without a company, applies to
every company. Only SUPERADMIN may manage global holidays.
"""
from typing import Optional
from uuid import UUID

from ..audit.recorder import AuditOperation, snapshot_of
from ..auth.permissions import Operation, PermissionScope
from ..database.models import Holiday
from ..errors import Conflict
from ..schemas.holidays import HolidayCreateRequest, HolidayResponse, HolidayUpdateRequest
from .base import ActionResult, ActionScope, ActionServices

RESOURCE = "holidays"
ENTITY = "Holiday"
ROUTES = ("/superadmin/holidays", "/control-horas")

DUPLICATE_HOLIDAY = "DUPLICATE_HOLIDAY"


def _to_response(holiday: Holiday) -> HolidayResponse:
    return HolidayResponse(
        id=holiday.id,
        date=holiday.date,
        name=holiday.name,
        type=holiday.type,
        year=holiday.year,
        tenant_id=holiday.tenant_id,
        is_global=holiday.tenant_id is None,
    )


def _scope_of(tenant_id: Optional[UUID]) -> PermissionScope:
    if tenant_id is None:
        return PermissionScope.global_()
    return PermissionScope(company_id=tenant_id)


def _duplicate() -> Conflict:
    return Conflict("A holiday already exists on this date", DUPLICATE_HOLIDAY)


def _ensure_free_date(action: ActionScope, tenant_id: Optional[UUID], day):
    # NULL tenant ids never collide in the unique constraint, so check here.
    query = action.db.query(Holiday).filter(Holiday.date == day)
    if tenant_id is None:
        query = query.filter(Holiday.tenant_id.is_(None))
    else:
        query = query.filter(Holiday.tenant_id == tenant_id)
    if query.first() is not None:
        raise _duplicate()


# PUBLIC_INTERFACE
def list_holidays(services: ActionServices, token: Optional[str],
                  year: Optional[int] = None) -> ActionResult:
    """Global holidays plus the caller's company holidays, by date."""
    with services.action(token, "list_holidays") as action:
        action.resolve()
        action.authorize(RESOURCE, Operation.READ)
        query = action.query(Holiday, shared=True)
        if year is not None:
            query = query.filter(Holiday.year == year)
        holidays = query.order_by(Holiday.date).all()
        return action.succeed([_to_response(holiday) for holiday in holidays])
    return action.result


# PUBLIC_INTERFACE
def create_holiday(services: ActionServices, token: Optional[str],
                   request: HolidayCreateRequest) -> ActionResult:
    with services.action(token, "create_holiday") as action:
        action.resolve()
        tenant_id = None if request.is_global else action.company_id()
        action.authorize(RESOURCE, Operation.CREATE, _scope_of(tenant_id))
        _ensure_free_date(action, tenant_id, request.date)

        holiday = Holiday(
            tenant_id=tenant_id,
            date=request.date,
            name=request.name,
            type=request.type,
            year=request.date.year,
        )
        action.persist(holiday, conflict=_duplicate())
        action.record(AuditOperation.CREATE, ENTITY, holiday.id, snapshot_of(holiday))
        action.invalidate(*ROUTES)
        return action.succeed(_to_response(holiday))
    return action.result


# PUBLIC_INTERFACE
def update_holiday(services: ActionServices, token: Optional[str], holiday_id: UUID,
                   request: HolidayUpdateRequest) -> ActionResult:
    with services.action(token, "update_holiday") as action:
        action.resolve()
        holiday = action.load(Holiday, holiday_id, shared=True)
        action.authorize(RESOURCE, Operation.UPDATE, _scope_of(holiday.tenant_id),
                         entity_id=holiday.id)

        if request.name is not None:
            holiday.name = request.name
        if request.type is not None:
            holiday.type = request.type

        action.persist(holiday)
        action.record(AuditOperation.UPDATE, ENTITY, holiday.id, snapshot_of(holiday),
                      tenant_id=holiday.tenant_id)
        action.invalidate(*ROUTES)
        return action.succeed(_to_response(holiday))
    return action.result


# PUBLIC_INTERFACE
def delete_holiday(services: ActionServices, token: Optional[str], holiday_id: UUID) -> ActionResult:
    with services.action(token, "delete_holiday") as action:
        action.resolve()
        holiday = action.load(Holiday, holiday_id, shared=True)
        action.authorize(RESOURCE, Operation.DELETE, _scope_of(holiday.tenant_id),
                         entity_id=holiday.id)

        snapshot = snapshot_of(holiday)
        deleted_id, tenant_id = holiday.id, holiday.tenant_id
        action.remove(holiday)
        action.record(AuditOperation.DELETE, ENTITY, deleted_id, snapshot, tenant_id=tenant_id)
        action.invalidate(*ROUTES)
        return action.succeed({"id": deleted_id})
    return action.result
