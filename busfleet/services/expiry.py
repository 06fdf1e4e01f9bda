# busfleet/services/expiry.py
from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Dict, List, Optional

from busfleet.core.enums import DOC_ALERT_DAYS
from busfleet.core.timeutils import utcnow
from busfleet.storage.base import Storage

log = logging.getLogger("busfleet.expiry")

_SECONDS_PER_DAY = 86400


def days_left(expires_at: datetime, now: datetime) -> int:
    """Whole days until expiry, rounded up; zero or negative once expired."""
    return math.ceil((expires_at - now).total_seconds() / _SECONDS_PER_DAY)


def get_expiring_documents(storage: Storage, *, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """
    Documents inside their alert window (already expired ones included),
    most urgent first.

    Stateless: nothing is marked as alerted, so repeated calls over the same
    data return the same list.
    """
    now = now or utcnow()
    bus_numbers: Dict[int, str] = {}
    driver_names: Dict[int, Optional[str]] = {}

    out: List[Dict[str, Any]] = []
    for doc in storage.list_documents_with_expiry():
        threshold = DOC_ALERT_DAYS.get(doc.doc_type)
        if threshold is None or doc.expires_at is None:
            continue

        left = days_left(doc.expires_at, now)
        if left > threshold:
            continue

        if doc.bus_id not in bus_numbers:
            bus = storage.get_bus(doc.bus_id)
            bus_numbers[doc.bus_id] = bus.bus_number if bus else str(doc.bus_id)

        driver_name = None
        if doc.driver_id:
            if doc.driver_id not in driver_names:
                driver = storage.get_driver(doc.driver_id)
                driver_names[doc.driver_id] = driver.name if driver else None
            driver_name = driver_names[doc.driver_id]

        out.append(
            {
                "document_id": doc.id,
                "bus_number": bus_numbers[doc.bus_id],
                "doc_type": doc.doc_type,
                "file_name": doc.file_name,
                "expires_at": doc.expires_at,
                "days_left": left,
                "driver_name": driver_name,
            }
        )

    out.sort(key=lambda d: d["days_left"])
    log.debug("expiry scan at %s: %d document(s) need attention", now.isoformat(), len(out))
    return out
