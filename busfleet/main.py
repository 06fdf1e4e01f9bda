# busfleet/main.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv
from fastapi import FastAPI

# root .env first, then busfleet/.env without overriding
load_dotenv(find_dotenv(usecwd=True))
load_dotenv(Path(__file__).resolve().parent / ".env", override=False)

from busfleet.api import health  # noqa: E402
from busfleet.api.v1 import buses, documents, drivers, equipment, incidents, reports  # noqa: E402
from busfleet.core.config import Settings, get_settings  # noqa: E402
from busfleet.core.errors import register_exception_handlers  # noqa: E402
from busfleet.core.logconfig import configure_logging  # noqa: E402
from busfleet.middleware.request_logging import RequestLoggingMiddleware  # noqa: E402
from busfleet.services.bootstrap import bootstrap  # noqa: E402
from busfleet.storage.factory import open_storage  # noqa: E402
from busfleet.worker.scheduler import make_scheduler, run_daily_expiry_check  # noqa: E402

log = logging.getLogger("busfleet")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title="Bus Fleet", version="1.0.0")
    app.state.settings = settings
    app.state.scheduler = None

    register_exception_handlers(app)
    app.add_middleware(RequestLoggingMiddleware)

    # ---------------------------
    # ROUTER MOUNT
    # ---------------------------
    for module in (buses, incidents, equipment, reports, documents, drivers):
        app.include_router(module.router, prefix="/api/v1")
    app.include_router(health.router, prefix="/api")

    @app.on_event("startup")
    def _startup():
        engine = None
        if settings.STORAGE_BACKEND == "sql":
            from busfleet.db.session import engine

        with open_storage(settings) as storage:
            bootstrap(storage, settings, engine)

        if settings.ENABLE_SCHEDULER:
            app.state.scheduler = make_scheduler(settings)
            app.state.scheduler.start()
            log.info(
                "expiry scheduler started (%02d:%02d %s)",
                settings.APP_SCHEDULER_HOUR,
                settings.APP_SCHEDULER_MINUTE,
                settings.APP_TIMEZONE,
            )
            run_daily_expiry_check(settings)

    @app.on_event("shutdown")
    def _shutdown():
        sched = app.state.scheduler
        if sched:
            sched.shutdown(wait=False)
            app.state.scheduler = None

    return app


app = create_app()
