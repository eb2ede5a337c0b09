"""
FastAPI application for the insurance contract client.

The application owns the single `Session`, the activity log and the command
dispatcher; routers reach them through `app.state`.
"""
import logging
import os
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from insurance_client.core.activity_log import ActivityLog
from insurance_client.core.config import Settings
from insurance_client.core.session import Session
from insurance_client.routes.admin import router as admin_router
from insurance_client.routes.holder import router as holder_router
from insurance_client.schemas.insurance_schema import ActivityEntryResponse
from insurance_client.services.blockchain import create_session
from insurance_client.services.command_dispatcher import CommandDispatcher


PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
templates = Jinja2Templates(directory=os.path.join(PROJECT_ROOT, "templates"))


def create_app(settings: Optional[Settings] = None, session: Optional[Session] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Runtime settings; read from the environment when omitted.
        session: Pre-built session; built from `settings` when omitted.
    """
    settings = settings or Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    session = session or create_session(settings)
    activity_log = ActivityLog()

    app = FastAPI(
        title="Insurance Contract Client",
        description="Policyholder and insurer commands against a deployed insurance contract",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.activity_log = activity_log
    app.state.dispatcher = CommandDispatcher(session, activity_log, settings)

    app.include_router(holder_router)
    app.include_router(admin_router)

    @app.get("/", response_class=HTMLResponse)
    async def dashboard(request: Request):
        """
        Serve the dashboard with connection state and the activity feed.
        """
        dispatcher: CommandDispatcher = request.app.state.dispatcher
        return templates.TemplateResponse(
            request,
            "dashboard.html",
            {
                "session": dispatcher.session,
                "entries": request.app.state.activity_log.entries,
            },
        )

    @app.get("/health")
    def health(request: Request):
        """
        Application health check endpoint.
        """
        session = request.app.state.dispatcher.session
        return {
            "status": "healthy",
            "service": "insurance_contract_client",
            "wallet_configured": session.wallet is not None,
            "connected": session.is_connected,
        }

    @app.get("/api/activity", response_model=List[ActivityEntryResponse])
    def activity(request: Request) -> List[ActivityEntryResponse]:
        """
        The session's activity feed, most recent first.
        """
        return [
            ActivityEntryResponse(timestamp=entry.timestamp, severity=entry.severity, message=entry.message)
            for entry in request.app.state.activity_log.entries
        ]

    return app


app = create_app()
