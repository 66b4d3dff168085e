"""
Audit recorder.

Writes AuditRecord rows after a mutation has been committed, and records
permission denials. A failing audit write is logged and rolled back on its
own; it never undoes or fails the mutation it describes.
"""
import enum
import logging
from typing import Any, List, Optional
from uuid import UUID

from fastapi.encoders import jsonable_encoder
from sqlalchemy import desc, inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..database.models import AuditRecord

logger = logging.getLogger(__name__)


class AuditOperation(str, enum.Enum):
    """Mutation kinds recorded in the trail."""
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


def snapshot_of(instance) -> dict:
    """Column values of an ORM instance as JSON-safe data."""
    state = inspect(instance)
    values = {attr.key: getattr(instance, attr.key) for attr in state.mapper.column_attrs}
    return jsonable_encoder(values)


class AuditRecorder:
    """Append-only writer and reader for audit records."""

    def __init__(self, db: Session):
        self.db = db

    def record(self, operation: AuditOperation, entity_type: str, entity_id: Any,
               actor_id: UUID, snapshot: Optional[Any] = None,
               tenant_id: Optional[UUID] = None, details: Optional[str] = None) -> Optional[AuditRecord]:
        """
        Persist one audit record.

        Args:
            operation: CREATE, UPDATE or DELETE
            entity_type: Entity name, e.g. "TimeEntry"
            entity_id: Primary key of the entity
            actor_id: Identity that performed the change
            snapshot: Resulting state of the entity (JSON-encodable)
            tenant_id: Company the entity belongs to
            details: Free-text note

        Returns:
            Optional[AuditRecord]: The stored record, None if the write failed
        """
        operation = operation.value if isinstance(operation, AuditOperation) else str(operation)
        return self._write(AuditRecord(
            tenant_id=tenant_id,
            actor_id=actor_id,
            operation=operation,
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            snapshot=jsonable_encoder(snapshot) if snapshot is not None else None,
            details=details,
        ))

    def record_denied(self, identity, resource: str, operation: str,
                      entity_id: Any = None, reason: Optional[str] = None) -> Optional[AuditRecord]:
        """Record a request the permission gate refused."""
        operation = getattr(operation, "value", operation)
        return self._write(AuditRecord(
            tenant_id=identity.company_id,
            actor_id=identity.id,
            operation=f"DENIED_{str(operation).upper()}",
            entity_type=resource,
            entity_id=str(entity_id) if entity_id is not None else None,
            details=reason,
        ))

    def list(self, tenant_id: Optional[UUID], entity_type: Optional[str] = None,
             entity_id: Optional[str] = None, limit: int = 100) -> List[AuditRecord]:
        """Most recent records first; tenant_id None lists every tenant."""
        query = self.db.query(AuditRecord)
        if tenant_id is not None:
            query = query.filter(AuditRecord.tenant_id == tenant_id)
        if entity_type:
            query = query.filter(AuditRecord.entity_type == entity_type)
        if entity_id:
            query = query.filter(AuditRecord.entity_id == str(entity_id))
        return query.order_by(desc(AuditRecord.timestamp)).limit(limit).all()

    def _write(self, record: AuditRecord) -> Optional[AuditRecord]:
        try:
            self.db.add(record)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(
                f"Failed to write audit record {record.operation} "
                f"{record.entity_type}:{record.entity_id} by {record.actor_id}"
            )
            return None
        return record
