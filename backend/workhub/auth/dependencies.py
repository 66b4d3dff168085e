"""
Request dependencies for FastAPI endpoints.

Provides the request database session, the bearer token and the action
collaborators. Identity resolution itself happens inside the actions.
"""
from typing import Generator, Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from ..actions.base import ActionServices
from ..database.connection import session_scope

security = HTTPBearer(auto_error=False)


# PUBLIC_INTERFACE
def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Yield a session from the application's database handle.

    Args:
        request: Incoming request

    Yields:
        Session: SQLAlchemy database session
    """
    yield from session_scope(request.app.state.database)


# PUBLIC_INTERFACE
def get_token(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> Optional[str]:
    """Bearer token of the request, None when absent."""
    if credentials is None:
        return None
    return credentials.credentials


# PUBLIC_INTERFACE
def get_action_services(request: Request, db: Session = Depends(get_db)) -> ActionServices:
    """Collaborators for the actions of one request."""
    return ActionServices(
        db,
        invalidator=request.app.state.invalidator,
        rules=request.app.state.time_entry_rules,
        today=request.app.state.today,
        now=request.app.state.now,
    )
