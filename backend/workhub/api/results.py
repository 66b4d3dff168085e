"""
Translate action results into HTTP responses.
"""
from fastapi import Request, status
from fastapi.responses import JSONResponse

from ..actions.base import ActionResult
from ..errors import ERROR_STATUS
from ..schemas.common import ErrorResponse


class ActionFailed(Exception):
    """Raised by routes for a failed action; rendered by action_failed_handler."""

    def __init__(self, result: ActionResult):
        super().__init__(result.error)
        self.result = result


def unwrap(result: ActionResult) -> dict:
    """Success envelope of a result, or raise ActionFailed."""
    if not result.success:
        raise ActionFailed(result)
    return {"success": True, "data": result.data, "warnings": result.warnings}


async def action_failed_handler(request: Request, exc: ActionFailed) -> JSONResponse:
    result = exc.result
    body = ErrorResponse(
        error=result.error or "Request failed",
        code=result.code or "ERROR",
        errors=result.errors,
        warnings=result.warnings,
    )
    headers = {"WWW-Authenticate": "Bearer"} if result.code == "UNAUTHENTICATED" else None
    return JSONResponse(
        status_code=ERROR_STATUS.get(result.code, status.HTTP_400_BAD_REQUEST),
        content=body.model_dump(),
        headers=headers,
    )
