from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import Callable, Optional
from fastapi import FastAPI, Request, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import os
import logging

from .. import __version__
from ..database.connection import Database
from ..database.models import utcnow
from ..invalidation import RouteInvalidator
from ..validation.time_entries import TimeEntryRules
from .results import ActionFailed, action_failed_handler
from .routes import (
    audit, chat, holidays, invoices, portal, projects, quotes, settings, teams, time_entries
)

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

OPENAPI_TAGS = [
    {"name": "Time Entries", "description": "Booking, editing and reviewing hours"},
    {"name": "Teams", "description": "Team management and membership"},
    {"name": "Settings", "description": "Company settings and time-entry rules"},
    {"name": "Holidays", "description": "Global and company holidays"},
    {"name": "Quotes", "description": "Quotes and their lifecycle"},
    {"name": "Invoices", "description": "Invoices converted from accepted quotes"},
    {"name": "Clients", "description": "Clients and portal contacts"},
    {"name": "Projects", "description": "Projects hours are booked on"},
    {"name": "Chat", "description": "Internal chat with cursor based polling"},
    {"name": "Client Portal", "description": "Access-code login and client dashboard"},
    {"name": "Audit", "description": "Append-only audit trail"},
    {"name": "Health", "description": "Liveness and database connectivity"},
]


# PUBLIC_INTERFACE
def create_app(database: Optional[Database] = None, invalidator: Optional[RouteInvalidator] = None,
               rules: Optional[TimeEntryRules] = None,
               today: Callable[[], date] = date.today,
               now: Callable[[], datetime] = utcnow) -> FastAPI:
    """
    Build the WorkHub API.

    The database handle and route invalidator are created once here and
    shared by every request through app.state.

    Args:
        database: Database handle, built from DATABASE_URL when omitted
        invalidator: Route invalidator
        rules: Default time-entry rules, read from the environment when omitted
        today: Clock for date based rules
        now: Clock for timestamps set by actions

    Returns:
        FastAPI: Configured application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting up WorkHub API...")
        try:
            app.state.database.create_tables()
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            raise
        yield
        logger.info("Shutting down WorkHub API...")
        app.state.database.dispose()

    app = FastAPI(
        title="WorkHub API",
        description="Multi-tenant business management API: time tracking, teams, holidays, "
                    "quotes, client portal and internal chat.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
    )
    app.state.database = database or Database()
    app.state.invalidator = invalidator or RouteInvalidator()
    app.state.time_entry_rules = rules or TimeEntryRules.from_env()
    app.state.today = today
    app.state.now = now

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=os.getenv("ALLOWED_ORIGINS", "*").split(","),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ActionFailed, action_failed_handler)

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler for unhandled errors."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": "Internal server error", "code": "INTERNAL_ERROR",
                     "errors": [], "warnings": []}
        )

    # Health check endpoint
    @app.get("/", tags=["Health"])
    def health_check():
        """Basic API status and version information."""
        return {
            "message": "WorkHub API is healthy",
            "version": __version__,
            "status": "operational"
        }

    @app.get("/health", tags=["Health"])
    def detailed_health_check():
        """Health status including database connectivity."""
        try:
            connected = app.state.database.ping()
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            connected = False
        if not connected:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Service unhealthy - database connection failed"
            )
        return {
            "status": "healthy",
            "version": __version__,
            "database": "connected",
        }

    # Include routers
    app.include_router(time_entries.router, prefix="/api/v1")
    app.include_router(teams.router, prefix="/api/v1")
    app.include_router(settings.router, prefix="/api/v1")
    app.include_router(holidays.router, prefix="/api/v1")
    app.include_router(quotes.router, prefix="/api/v1")
    app.include_router(invoices.router, prefix="/api/v1")
    app.include_router(projects.clients_router, prefix="/api/v1")
    app.include_router(projects.projects_router, prefix="/api/v1")
    app.include_router(chat.router, prefix="/api/v1")
    app.include_router(portal.router, prefix="/api/v1")
    app.include_router(audit.router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "workhub.api.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=True,
        log_level="info"
    )
