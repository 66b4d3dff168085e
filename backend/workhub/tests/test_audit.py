"""
Audit recorder tests.

Audit records are append-only, and a failing audit write never undoes or
fails the mutation it describes.
"""
import logging
import uuid
from datetime import time
from decimal import Decimal
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from workhub.actions.time_entries import save_time_entry
from workhub.audit.recorder import AuditOperation, AuditRecorder
from workhub.database.models import AuditRecord, AuditRecordImmutable, TimeEntry
from workhub.schemas.time_entries import TimeEntryCreateRequest

from .conftest import TODAY, token_for


class TestAuditRecorder:

    def test_record_and_list(self, db_session, company, worker):
        recorder = AuditRecorder(db_session)
        entity_id = uuid.uuid4()
        record = recorder.record(AuditOperation.CREATE, "TimeEntry", entity_id, worker.id,
                                 snapshot={"hours": Decimal("4")}, tenant_id=company.id)
        assert record is not None
        assert record.operation == "CREATE"
        assert record.snapshot == {"hours": 4.0}

        records = recorder.list(company.id, entity_type="TimeEntry", entity_id=str(entity_id))
        assert [r.id for r in records] == [record.id]
        assert recorder.list(uuid.uuid4()) == []

    def test_records_cannot_be_updated(self, db_session, company, worker):
        record = AuditRecorder(db_session).record(AuditOperation.DELETE, "Team", uuid.uuid4(),
                                                  worker.id, tenant_id=company.id)
        record.details = "rewritten"
        with pytest.raises(AuditRecordImmutable):
            db_session.commit()
        db_session.rollback()

    def test_records_cannot_be_deleted(self, db_session, company, worker):
        record = AuditRecorder(db_session).record(AuditOperation.DELETE, "Team", uuid.uuid4(),
                                                  worker.id, tenant_id=company.id)
        db_session.delete(record)
        with pytest.raises(AuditRecordImmutable):
            db_session.commit()
        db_session.rollback()

    def test_failed_write_is_logged_not_raised(self, db_session, caplog):
        with caplog.at_level(logging.ERROR):
            record = AuditRecorder(db_session).record(AuditOperation.CREATE, "Team", uuid.uuid4(), None)
        assert record is None
        assert "Failed to write audit record" in caplog.text


def test_audit_failure_does_not_fail_the_mutation(services, db_session, worker, project,
                                                  fresh_session, caplog):
    broken = Mock(spec=Session)
    broken.commit.side_effect = OperationalError("INSERT INTO audit_records", {}, Exception("disk full"))
    services.recorder.db = broken

    request = TimeEntryCreateRequest(project_id=project.id, date=TODAY, hours=Decimal("4"),
                                     start_time=time(9), end_time=time(13))
    with caplog.at_level(logging.ERROR):
        result = save_time_entry(services, token_for(worker), request)

    assert result.success
    broken.rollback.assert_called_once()
    assert "Failed to write audit record" in caplog.text
    assert fresh_session.query(TimeEntry).count() == 1
    assert fresh_session.query(AuditRecord).count() == 0
