"""Alphacore API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map AlphacoreError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py (three layers: domain,
      validation, catch-all)
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from alphacore.api.error_handlers import register_error_handlers
from alphacore.api.routes import (
    activity_log, auth, categories, cron, dashboard, health, invoices, labels,
    project_members, projects, report_schedules, task_comments, tasks,
    transactions, users,
)
from alphacore.config import get_settings
from alphacore.infrastructure.database import init_db
from alphacore.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    if not settings.cron_secret:
        logger.warning("CRON_SECRET is not set: cron endpoints will reject every call")
    if not settings.smtp_host:
        logger.warning("SMTP_HOST is not set: report emails will fail")
    logger.info("Alphacore API started")
    yield
    logger.info("Alphacore API shutting down")


app = FastAPI(
    title="Alphacore API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

for module in (
    health, auth, users, categories, transactions, invoices, projects,
    project_members, tasks, task_comments, labels, activity_log, dashboard,
    report_schedules, cron,
):
    app.include_router(module.router)

# Static files: built SPA served in production.
# Mounted AFTER API routes so /api/v1/* takes precedence;
# html=True serves index.html for unknown routes.
if os.path.isdir("static"):
    app.mount("/", StaticFiles(directory="static", html=True), name="static")
