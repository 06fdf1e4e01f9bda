# busfleet/worker/scheduler.py
from __future__ import annotations

import logging
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from busfleet.core.config import Settings, get_settings
from busfleet.services.alerts import send_expiry_alert
from busfleet.services.expiry import get_expiring_documents
from busfleet.storage.factory import open_storage

log = logging.getLogger("busfleet.scheduler")


def run_daily_expiry_check(settings: Optional[Settings] = None) -> int:
    """
    Scan documents, send (or log) the alert. Returns the number of documents
    needing attention; 0 if the run failed.
    """
    settings = settings or get_settings()
    try:
        with open_storage(settings) as storage:
            docs = get_expiring_documents(storage)
    except Exception:
        log.exception("daily expiry check failed")
        return 0

    if not docs:
        log.info("daily expiry check: no documents close to expiry")
        return 0

    send_expiry_alert(docs, settings)
    return len(docs)


def make_scheduler(settings: Optional[Settings] = None) -> BackgroundScheduler:
    """
    BackgroundScheduler with the daily expiry job at
    APP_SCHEDULER_HOUR:APP_SCHEDULER_MINUTE in APP_TIMEZONE.
    """
    settings = settings or get_settings()
    sched = BackgroundScheduler(timezone=settings.APP_TIMEZONE)
    sched.add_job(
        run_daily_expiry_check,
        CronTrigger(hour=settings.APP_SCHEDULER_HOUR, minute=settings.APP_SCHEDULER_MINUTE),
        id="daily_expiry_check",
        replace_existing=True,
    )
    return sched
