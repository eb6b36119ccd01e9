from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from servicedesk.api.routes import register_exception_handlers, router as api_router
from servicedesk.core.config import AppConfig, get_settings
from servicedesk.core.logging import setup_logging
from servicedesk.services.tickets import get_ticket_store


def create_app(settings: AppConfig | None = None) -> FastAPI:
    """Build the API with its own ticket store; run with ``uvicorn --factory``."""
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="Service Desk Ticket Tracker", version="0.1.0")
    app.state.settings = settings
    app.state.store = get_ticket_store(settings)

    app.include_router(api_router)
    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app
