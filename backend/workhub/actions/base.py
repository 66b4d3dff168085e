"""
Shared machinery for action orchestrators.

Actions are written as a single pass inside an ActionScope:

    with services.action(token, "save_time_entry") as action:
        identity = action.resolve()
        action.authorize("timeentries", Operation.CREATE)
        ...
        return action.succeed(data, warnings)
    return action.result

Any WorkHubError raised inside the block ends the action with a failure
result; database and unexpected errors are logged and reported generically.
"""
import logging
from datetime import date, datetime
from typing import Any, Callable, Iterable, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..audit.recorder import AuditOperation, AuditRecorder
from ..auth.permissions import Access, Operation, PermissionGate, PermissionScope
from ..auth.session import Identity, PortalSessionResolver, SessionResolver
from ..database.models import Tenant, utcnow
from ..errors import (
    Conflict, Forbidden, InternalError, MissingTenant, NotFound, PersistenceError,
    Unauthenticated, ValidationFailed, WorkHubError
)
from ..invalidation import RouteInvalidator
from ..validation.time_entries import TimeEntryRules, TimeEntryValidator, ValidationResult

logger = logging.getLogger(__name__)


class ActionResult(BaseModel):
    """Uniform outcome of an action."""
    success: bool = Field(..., description="Whether the action was applied")
    data: Any = Field(None, description="Resulting entity on success")
    error: Optional[str] = Field(None, description="Human readable failure message")
    code: Optional[str] = Field(None, description="Failure category")
    errors: List[str] = Field(default_factory=list, description="Business-rule error codes")
    warnings: List[str] = Field(default_factory=list, description="Non-blocking warnings")

    @classmethod
    def saved(cls, data: Any = None, warnings: Iterable[str] = ()) -> "ActionResult":
        return cls(success=True, data=data, warnings=list(warnings))

    @classmethod
    def failure(cls, exc: WorkHubError) -> "ActionResult":
        return cls(
            success=False,
            error=exc.message,
            code=exc.code,
            errors=list(exc.errors),
            warnings=list(getattr(exc, "warnings", ())),
        )


class ActionServices:
    """
    Collaborators shared by the actions of one request.

    Args:
        db: Request database session
        invalidator: Process-wide route invalidator
        gate: Permission gate
        rules: Default time-entry rules, before tenant overrides
        today: Clock used for date based rules
        now: Clock used for timestamps set by actions
    """

    def __init__(self, db: Session, invalidator: Optional[RouteInvalidator] = None,
                 gate: Optional[PermissionGate] = None, rules: Optional[TimeEntryRules] = None,
                 today: Callable[[], date] = date.today,
                 now: Callable[[], datetime] = utcnow):
        self.db = db
        self.invalidator = invalidator or RouteInvalidator()
        self.gate = gate or PermissionGate()
        self.rules = rules or TimeEntryRules.from_env()
        self.today = today
        self.now = now
        self.resolver = SessionResolver(db)
        self.portal_resolver = PortalSessionResolver(db)
        self.recorder = AuditRecorder(db)

    def action(self, token: Optional[str], name: str) -> "ActionScope":
        return ActionScope(self, token, name)

    def rules_for(self, company_id: Optional[UUID]) -> TimeEntryRules:
        """Default rules with the company's `time_entries` settings applied."""
        if company_id is None:
            return self.rules
        tenant = self.db.get(Tenant, company_id)
        overrides = (tenant.settings or {}).get("time_entries") if tenant else None
        return self.rules.with_overrides(overrides)

    def validator_for(self, company_id: Optional[UUID]) -> TimeEntryValidator:
        return TimeEntryValidator(self.rules_for(company_id), today=self.today)


class ActionScope:
    """One action invocation; see the module docstring for the pattern."""

    def __init__(self, services: ActionServices, token: Optional[str], name: str):
        self.services = services
        self.db = services.db
        self.token = token
        self.name = name
        self.identity: Optional[Identity] = None
        self.result: Optional[ActionResult] = None

    def __enter__(self) -> "ActionScope":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            return False
        if not issubclass(exc_type, Exception):
            return False

        self.db.rollback()
        if isinstance(exc, WorkHubError):
            logger.info(f"Action {self.name} rejected: {exc.code} {exc.message}")
            self.result = ActionResult.failure(exc)
        elif isinstance(exc, SQLAlchemyError):
            logger.error(f"Action {self.name} failed in the database", exc_info=exc)
            self.result = ActionResult.failure(PersistenceError())
        else:
            logger.error(f"Action {self.name} failed unexpectedly", exc_info=exc)
            self.result = ActionResult.failure(InternalError())
        return True

    # Session & permission

    def resolve(self) -> Identity:
        """Resolve the staff identity behind the token."""
        self.identity = self.services.resolver.resolve(self.token)
        return self.identity

    def resolve_portal(self) -> Identity:
        """Resolve a client-portal identity; anonymous callers are rejected."""
        identity = self.services.portal_resolver.resolve(self.token)
        if identity is None:
            raise Unauthenticated("Portal session missing or expired")
        self.identity = identity
        return identity

    def authorize(self, resource: str, operation: Operation,
                  scope: Optional[PermissionScope] = None, entity_id: Any = None) -> Access:
        """Ask the gate; denials are logged and recorded before re-raising."""
        try:
            return self.services.gate.check(self.identity, resource, operation, scope)
        except Forbidden as exc:
            logger.warning(
                f"Denied {self.identity.role.value} {self.identity.id} "
                f"{Operation(operation).value} on {resource}: {exc.message}"
            )
            self.services.recorder.record_denied(self.identity, resource, operation,
                                                 entity_id=entity_id, reason=exc.message)
            raise

    def company_id(self) -> UUID:
        """Company of the caller; tenant-bound writes need one."""
        if self.identity.company_id is None:
            raise MissingTenant()
        return self.identity.company_id

    # Loading

    def query(self, model, shared: bool = False):
        """Query over model restricted to the caller's company.

        With shared=True rows without a company (global rows) are included.
        SUPERADMIN callers without a company see every row.
        """
        query = self.db.query(model)
        company_id = self.identity.company_id
        if company_id is None and self.identity.is_superadmin:
            return query
        if shared:
            return query.filter(or_(model.tenant_id == company_id, model.tenant_id.is_(None)))
        return query.filter(model.tenant_id == company_id)

    def load(self, model, entity_id: Any, shared: bool = False, label: Optional[str] = None):
        """Fetch one row of the caller's company or raise NotFound."""
        label = label or model.__name__
        if entity_id is None:
            raise NotFound(label)
        instance = self.query(model, shared=shared).filter(model.id == entity_id).first()
        if instance is None:
            raise NotFound(label, entity_id)
        return instance

    # Validation

    def check(self, outcome: ValidationResult):
        """Raise ValidationFailed when the validator found blocking errors."""
        if not outcome.valid:
            raise ValidationFailed(outcome.errors, message="; ".join(outcome.messages()),
                                   warnings=outcome.warnings)

    # Persistence

    def persist(self, *instances, conflict: Optional[Conflict] = None):
        """Add and commit instances, then refresh them."""
        for instance in instances:
            self.db.add(instance)
        self._commit(conflict)
        for instance in instances:
            self.db.refresh(instance)

    def remove(self, instance, conflict: Optional[Conflict] = None):
        self.db.delete(instance)
        self._commit(conflict)

    def _commit(self, conflict: Optional[Conflict]):
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.info(f"Action {self.name} hit a constraint: {exc.orig}")
            raise conflict or Conflict()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Action {self.name} could not commit")
            raise PersistenceError()

    # After the write

    def record(self, operation: AuditOperation, entity_type: str, entity_id: Any,
               snapshot: Any = None, details: Optional[str] = None,
               tenant_id: Optional[UUID] = None):
        return self.services.recorder.record(
            operation, entity_type, entity_id, self.identity.id, snapshot=snapshot,
            tenant_id=tenant_id or self.identity.company_id, details=details,
        )

    def invalidate(self, *route_paths: str):
        for route_path in route_paths:
            try:
                self.services.invalidator.invalidate(route_path)
            except Exception:
                logger.exception(f"Failed to invalidate {route_path} after {self.name}")

    def succeed(self, data: Any = None, warnings: Iterable[str] = ()) -> ActionResult:
        self.result = ActionResult.saved(data, warnings)
        return self.result
