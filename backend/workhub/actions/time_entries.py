"""
Time-entry actions.

Booking, editing, deleting, submitting, reviewing and listing hours. Entries
are always booked for the caller and move draft -> submitted -> approved or
rejected. Approved entries are locked for everyone but administrators, and
editing a rejected entry sends it back to draft.
"""
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import or_, select

from ..audit.recorder import AuditOperation, snapshot_of
from ..auth.permissions import Access, Operation, PermissionScope
from ..database.models import Project, TimeEntry, TimeEntryStatus, User
from ..errors import Conflict, NotFound, ValidationFailed
from ..schemas.time_entries import (
    TimeEntriesListResponse, TimeEntryCreateRequest, TimeEntryResponse, TimeEntryUpdateRequest
)
from ..validation.time_entries import OVERLAPPING_ENTRY, TimeEntryDraft, describe, quantize_hours
from .base import ActionResult, ActionScope, ActionServices

RESOURCE = "timeentries"
ENTITY = "TimeEntry"
ROUTES = ("/hours", "/control-horas")

ENTRY_LOCKED = "ENTRY_LOCKED"
INVALID_STATUS = "INVALID_STATUS"
REASON_REQUIRED = "REJECTION_REASON_REQUIRED"


def _overlap_conflict() -> Conflict:
    return Conflict(describe(OVERLAPPING_ENTRY), OVERLAPPING_ENTRY)


def _entries_for_day(action: ActionScope, user_id: UUID, day: date) -> List[TimeEntry]:
    return action.query(TimeEntry).filter(
        TimeEntry.user_id == user_id,
        TimeEntry.date == day,
    ).all()


def _load_entries(action: ActionScope, entry_ids: Iterable[UUID],
                  owner_id: Optional[UUID] = None) -> List[TimeEntry]:
    """Entries of the caller's company in the requested order; any miss is NotFound."""
    wanted = list(dict.fromkeys(entry_ids))
    query = action.query(TimeEntry).filter(TimeEntry.id.in_(wanted))
    if owner_id is not None:
        query = query.filter(TimeEntry.user_id == owner_id)
    found = {entry.id: entry for entry in query.all()}
    for entry_id in wanted:
        if entry_id not in found:
            raise NotFound(ENTITY, entry_id)
    return [found[entry_id] for entry_id in wanted]


def _owner_scope(entry: TimeEntry) -> PermissionScope:
    return PermissionScope(company_id=entry.tenant_id, owner_id=entry.user_id,
                           department=entry.user.department)


def _ensure_unlocked(action: ActionScope, entry: TimeEntry):
    if entry.status == TimeEntryStatus.APPROVED and not action.identity.is_admin:
        raise Conflict("Approved entries can only be changed by an administrator", ENTRY_LOCKED)


def _record_all(action: ActionScope, entries: List[TimeEntry], details: str):
    for entry in entries:
        action.record(AuditOperation.UPDATE, ENTITY, entry.id, snapshot_of(entry),
                      details=details, tenant_id=entry.tenant_id)


# PUBLIC_INTERFACE
def save_time_entry(services: ActionServices, token: Optional[str],
                    request: TimeEntryCreateRequest) -> ActionResult:
    """
    Book hours for the caller.

    Args:
        services: Request collaborators
        token: Session token
        request: Entry to create

    Returns:
        ActionResult: Saved entry and validation warnings, or the rejection
    """
    with services.action(token, "save_time_entry") as action:
        identity = action.resolve()
        action.authorize(RESOURCE, Operation.CREATE)
        project = action.load(Project, request.project_id)

        draft = TimeEntryDraft(
            user_id=identity.id,
            project_id=project.id,
            date=request.date,
            hours=request.hours,
            start_time=request.start_time,
            end_time=request.end_time,
        )
        existing = _entries_for_day(action, identity.id, request.date)
        outcome = services.validator_for(project.tenant_id).validate(draft, existing, project)
        action.check(outcome)

        entry = TimeEntry(
            tenant_id=project.tenant_id,
            user_id=identity.id,
            project_id=project.id,
            date=request.date,
            start_time=request.start_time,
            end_time=request.end_time,
            hours=quantize_hours(request.hours),
            notes=request.notes,
            status=TimeEntryStatus.DRAFT,
        )
        action.persist(entry, conflict=_overlap_conflict())
        action.record(AuditOperation.CREATE, ENTITY, entry.id, snapshot_of(entry),
                      tenant_id=entry.tenant_id)
        action.invalidate(*ROUTES)
        return action.succeed(TimeEntryResponse.model_validate(entry), outcome.warnings)
    return action.result


# PUBLIC_INTERFACE
def update_time_entry(services: ActionServices, token: Optional[str], entry_id: UUID,
                      request: TimeEntryUpdateRequest) -> ActionResult:
    """Change an entry; the merged result is validated like a new booking."""
    with services.action(token, "update_time_entry") as action:
        action.resolve()
        entry = action.load(TimeEntry, entry_id, label=ENTITY)
        action.authorize(RESOURCE, Operation.UPDATE, _owner_scope(entry), entity_id=entry.id)
        _ensure_unlocked(action, entry)

        changes = request.model_dump(exclude_unset=True)
        project = action.load(Project, changes.get("project_id") or entry.project_id)
        draft = TimeEntryDraft(
            user_id=entry.user_id,
            project_id=project.id,
            date=changes.get("date") or entry.date,
            hours=changes["hours"] if changes.get("hours") is not None else entry.hours,
            start_time=changes["start_time"] if "start_time" in changes else entry.start_time,
            end_time=changes["end_time"] if "end_time" in changes else entry.end_time,
            entry_id=entry.id,
        )
        existing = _entries_for_day(action, entry.user_id, draft.date)
        outcome = services.validator_for(entry.tenant_id).validate(draft, existing, project)
        action.check(outcome)

        entry.project_id = draft.project_id
        entry.date = draft.date
        entry.hours = quantize_hours(draft.hours)
        entry.start_time = draft.start_time
        entry.end_time = draft.end_time
        if "notes" in changes:
            entry.notes = changes["notes"]
        if entry.status == TimeEntryStatus.REJECTED:
            entry.status = TimeEntryStatus.DRAFT
            entry.reviewed_by_id = None
            entry.reviewed_at = None
            entry.rejection_reason = None

        action.persist(entry, conflict=_overlap_conflict())
        action.record(AuditOperation.UPDATE, ENTITY, entry.id, snapshot_of(entry),
                      tenant_id=entry.tenant_id)
        action.invalidate(*ROUTES)
        return action.succeed(TimeEntryResponse.model_validate(entry), outcome.warnings)
    return action.result


# PUBLIC_INTERFACE
def delete_time_entry(services: ActionServices, token: Optional[str], entry_id: UUID) -> ActionResult:
    """Delete an entry the caller may remove."""
    with services.action(token, "delete_time_entry") as action:
        action.resolve()
        entry = action.load(TimeEntry, entry_id, label=ENTITY)
        action.authorize(RESOURCE, Operation.DELETE, _owner_scope(entry), entity_id=entry.id)
        _ensure_unlocked(action, entry)

        snapshot = snapshot_of(entry)
        deleted_id, tenant_id = entry.id, entry.tenant_id
        action.remove(entry)
        action.record(AuditOperation.DELETE, ENTITY, deleted_id, snapshot, tenant_id=tenant_id)
        action.invalidate(*ROUTES)
        return action.succeed({"id": deleted_id})
    return action.result


# PUBLIC_INTERFACE
def submit_time_entries(services: ActionServices, token: Optional[str],
                        entry_ids: List[UUID]) -> ActionResult:
    """
    Send the caller's draft entries for approval.

    Args:
        services: Request collaborators
        token: Session token
        entry_ids: Entries to submit; all must be the caller's drafts

    Returns:
        ActionResult: The submitted entries
    """
    with services.action(token, "submit_time_entries") as action:
        identity = action.resolve()
        action.authorize(RESOURCE, Operation.UPDATE,
                         PermissionScope(company_id=identity.company_id, owner_id=identity.id))
        entries = _load_entries(action, entry_ids, owner_id=identity.id)
        for entry in entries:
            if entry.status != TimeEntryStatus.DRAFT:
                raise Conflict(f"Only draft entries can be submitted, {entry.id} is {entry.status.value}",
                               INVALID_STATUS)

        submitted_at = services.now()
        for entry in entries:
            entry.status = TimeEntryStatus.SUBMITTED
            entry.submitted_at = submitted_at
        action.persist(*entries)
        _record_all(action, entries, "SUBMITTED")
        action.invalidate(*ROUTES)
        return action.succeed([TimeEntryResponse.model_validate(entry) for entry in entries])
    return action.result


# PUBLIC_INTERFACE
def review_time_entries(services: ActionServices, token: Optional[str], entry_ids: List[UUID],
                        approve: bool, reason: Optional[str] = None) -> ActionResult:
    """
    Approve or reject submitted entries as one unit.

    Nobody reviews their own entries, and managers only review entries of
    their department. Rejecting requires a reason, which is stored on every
    rejected entry. If any entry fails a check, none is changed.
    """
    with services.action(token, "review_time_entries") as action:
        identity = action.resolve()
        reason = (reason or "").strip()
        if not approve and not reason:
            raise ValidationFailed([REASON_REQUIRED], message="A rejection reason is required")

        entries = _load_entries(action, entry_ids)
        for entry in entries:
            action.authorize(RESOURCE, Operation.APPROVE, _owner_scope(entry), entity_id=entry.id)
            if entry.status != TimeEntryStatus.SUBMITTED:
                raise Conflict(f"Only submitted entries can be reviewed, {entry.id} is {entry.status.value}",
                               INVALID_STATUS)

        reviewed_at = services.now()
        for entry in entries:
            entry.status = TimeEntryStatus.APPROVED if approve else TimeEntryStatus.REJECTED
            entry.rejection_reason = None if approve else reason
            entry.reviewed_by_id = identity.id
            entry.reviewed_at = reviewed_at
        action.persist(*entries)
        _record_all(action, entries, "APPROVED" if approve else "REJECTED")
        action.invalidate(*ROUTES)
        return action.succeed([TimeEntryResponse.model_validate(entry) for entry in entries])
    return action.result


# PUBLIC_INTERFACE
def review_time_entry(services: ActionServices, token: Optional[str], entry_id: UUID,
                      approve: bool, reason: Optional[str] = None) -> ActionResult:
    """Single-entry form of review_time_entries."""
    result = review_time_entries(services, token, [entry_id], approve, reason)
    if result.success:
        result.data = result.data[0]
    return result


# PUBLIC_INTERFACE
def list_time_entries(services: ActionServices, token: Optional[str],
                      user_id: Optional[UUID] = None, project_id: Optional[UUID] = None,
                      date_from: Optional[date] = None, date_to: Optional[date] = None,
                      status: Optional[TimeEntryStatus] = None) -> ActionResult:
    """
    List entries visible to the caller.

    Callers with OWN read access only ever see their own entries, managers
    see their own and their department's; asking for anyone else's entries
    is denied.
    """
    with services.action(token, "list_time_entries") as action:
        identity = action.resolve()
        scope = None
        if user_id:
            target = action.query(User).filter(User.id == user_id).first()
            scope = PermissionScope(owner_id=user_id, department=target.department if target else None)
        access = action.authorize(RESOURCE, Operation.READ, scope)

        query = action.query(TimeEntry)
        if access == Access.OWN:
            query = query.filter(TimeEntry.user_id == identity.id)
        elif access == Access.DEPARTMENT:
            visible = TimeEntry.user_id == identity.id
            if identity.department is not None:
                colleagues = select(User.id).where(User.department == identity.department)
                visible = or_(visible, TimeEntry.user_id.in_(colleagues))
            query = query.filter(visible)
        elif user_id:
            query = query.filter(TimeEntry.user_id == user_id)
        if project_id:
            query = query.filter(TimeEntry.project_id == project_id)
        if date_from:
            query = query.filter(TimeEntry.date >= date_from)
        if date_to:
            query = query.filter(TimeEntry.date <= date_to)
        if status:
            query = query.filter(TimeEntry.status == status)

        entries = query.order_by(TimeEntry.date.desc(), TimeEntry.start_time).all()
        total_hours = sum((Decimal(str(e.hours)) for e in entries), Decimal("0"))
        return action.succeed(TimeEntriesListResponse(
            entries=[TimeEntryResponse.model_validate(e) for e in entries],
            total=len(entries),
            total_hours=total_hours,
        ))
    return action.result
