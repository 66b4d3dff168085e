"""
Action scope tests: how failures inside an action become results.
"""
import logging
from datetime import time
from decimal import Decimal
from unittest.mock import Mock

from sqlalchemy.exc import OperationalError

from workhub.actions.teams import create_team
from workhub.actions.time_entries import save_time_entry
from workhub.schemas.teams import TeamCreateRequest
from workhub.schemas.time_entries import TimeEntryCreateRequest

from .conftest import TODAY, token_for


def test_database_errors_are_reported_generically(services, caplog):
    with caplog.at_level(logging.ERROR):
        with services.action(None, "broken") as action:
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))
    assert action.result.code == "PERSISTENCE_ERROR"
    assert "locked" not in action.result.error
    assert "Action broken failed in the database" in caplog.text


def test_unexpected_errors_are_reported_generically(services):
    with services.action(None, "buggy") as action:
        raise RuntimeError("boom")
    assert action.result.code == "INTERNAL_ERROR"
    assert action.result.error == "Internal server error"


def test_denials_are_logged(services, worker, caplog):
    with caplog.at_level(logging.WARNING):
        result = create_team(services, token_for(worker), TeamCreateRequest(name="Rogue"))
    assert result.code == "FORBIDDEN"
    assert f"Denied worker {worker.id} create on teams" in caplog.text


def test_invalidation_failure_does_not_fail_the_action(services, worker, project, caplog):
    services.invalidator = Mock()
    services.invalidator.invalidate.side_effect = RuntimeError("cache offline")
    request = TimeEntryCreateRequest(project_id=project.id, date=TODAY, hours=Decimal("4"),
                                     start_time=time(9), end_time=time(13))

    with caplog.at_level(logging.ERROR):
        result = save_time_entry(services, token_for(worker), request)

    assert result.success
    assert "Failed to invalidate /hours" in caplog.text
