"""
Application-level tests: health checks, error envelope and route
invalidation.
"""
from fastapi import status

from workhub.actions.base import ActionResult
from workhub.errors import ERROR_STATUS, Conflict, ValidationFailed
from workhub.invalidation import RouteInvalidator


def test_health(client):
    assert client.get("/").json()["status"] == "operational"
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["database"] == "connected"


def test_unauthenticated_envelope(client):
    response = client.get("/api/v1/teams/")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert response.json() == {
        "success": False,
        "error": "Not authenticated",
        "code": "UNAUTHENTICATED",
        "errors": [],
        "warnings": [],
    }


def test_error_status_mapping():
    assert ERROR_STATUS == {
        "UNAUTHENTICATED": 401,
        "MISSING_TENANT": 403,
        "FORBIDDEN": 403,
        "NOT_FOUND": 404,
        "VALIDATION_FAILED": 422,
        "CONFLICT": 409,
        "PERSISTENCE_ERROR": 500,
        "INTERNAL_ERROR": 500,
    }


def test_failure_results_carry_codes_and_warnings():
    result = ActionResult.failure(ValidationFailed(["INVALID_HOURS"], warnings=["DAILY_LIMIT_EXCEEDED"]))
    assert not result.success
    assert result.code == "VALIDATION_FAILED"
    assert result.errors == ["INVALID_HOURS"]
    assert result.warnings == ["DAILY_LIMIT_EXCEEDED"]

    conflict = ActionResult.failure(Conflict("Taken", "DUPLICATE_TEAM"))
    assert conflict.error == "Taken"
    assert conflict.errors == ["DUPLICATE_TEAM"]


def test_route_revisions():
    invalidator = RouteInvalidator()
    assert invalidator.revision("/hours") == 0
    assert invalidator.invalidate("/hours") == 1
    assert invalidator.invalidate("/hours") == 2
    assert invalidator.revision("/admin/teams") == 0
