# busfleet/services/reporting.py
from __future__ import annotations

import calendar
import logging
from collections import Counter
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Union

from busfleet.core.enums import CAMERA_CHANNEL_LABELS, CAMERA_CHANNELS
from busfleet.core.timeutils import iso_week_number, month_bounds, utcnow, week_bounds
from busfleet.models import Incident
from busfleet.storage.base import Storage

log = logging.getLogger("busfleet.reports")

WEEKLY_TOP_BUSES = 5
MONTHLY_TOP_BUSES = 6


# -----------------------------
# Helpers
# -----------------------------
def _histogram(incidents: Iterable[Incident], attr: str) -> Dict[str, int]:
    out: Dict[str, int] = {}
    for i in incidents:
        key = getattr(i, attr)
        out[key] = out.get(key, 0) + 1
    return out


def _most_affected_buses(
    storage: Storage, incidents: List[Incident], top: int
) -> List[Dict[str, Any]]:
    """
    Incident count per bus, highest first, truncated to `top`.
    Equal counts keep first-seen order (the sort is stable).
    """
    counts: Dict[int, int] = {}
    for i in incidents:
        counts[i.bus_id] = counts.get(i.bus_id, 0) + 1

    rows = []
    for bus_id, count in counts.items():
        bus = storage.get_bus(bus_id)
        rows.append({"bus_number": bus.bus_number if bus else str(bus_id), "count": count})

    rows.sort(key=lambda r: r["count"], reverse=True)
    return rows[:top]


def _resolved_count(incidents: Iterable[Incident]) -> int:
    return sum(1 for i in incidents if i.status == "resolved")


# -----------------------------
# Dashboard
# -----------------------------
def get_dashboard_stats(storage: Storage, *, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Live counters. resolved_this_week is keyed on resolved_at inside the
    current Monday..Sunday week; incidents_by_type buckets active incidents
    by equipment type.
    """
    now = now or utcnow()
    week_start, week_end = week_bounds(now)

    active = storage.list_incidents(exclude_status="resolved")
    resolved_this_week = storage.incidents_resolved_between(week_start, week_end)

    return {
        "total_buses": storage.count_buses(),
        "active_incidents": len(active),
        "resolved_this_week": len(resolved_this_week),
        "pending_repairs": sum(1 for i in active if i.status == "pending"),
        "incidents_by_type": _histogram(active, "equipment_type"),
    }


# -----------------------------
# Weekly / monthly
# -----------------------------
def get_weekly_report(
    storage: Storage, any_date: Optional[Union[date, datetime]] = None
) -> Dict[str, Any]:
    """
    Incidents reported in the Monday..Sunday week containing `any_date`.
    resolved_incidents counts those resolved at any time, not just this week.
    """
    week_start, week_end = week_bounds(any_date or utcnow())
    incidents = storage.incidents_reported_between(week_start, week_end)

    log.debug("weekly report %s..%s: %d incidents", week_start, week_end, len(incidents))
    return {
        "week_start": week_start,
        "week_end": week_end,
        "total_incidents": len(incidents),
        "resolved_incidents": _resolved_count(incidents),
        "incidents_by_type": _histogram(incidents, "incident_type"),
        "incidents_by_equipment": _histogram(incidents, "equipment_type"),
        "most_affected_buses": _most_affected_buses(storage, incidents, WEEKLY_TOP_BUSES),
    }


def get_monthly_report(
    storage: Storage, any_date: Optional[Union[date, datetime]] = None
) -> Dict[str, Any]:
    """
    Same histograms as the weekly report over the calendar month, plus a
    trend keyed by ISO week-of-year (not week-of-month), ascending.
    """
    month_start, month_end = month_bounds(any_date or utcnow())
    incidents = storage.incidents_reported_between(month_start, month_end)

    trend = Counter(iso_week_number(i.reported_at) for i in incidents)
    weekly_trend = [{"week": week, "count": trend[week]} for week in sorted(trend)]

    log.debug("monthly report %s: %d incidents", month_start.strftime("%Y-%m"), len(incidents))
    return {
        "month": calendar.month_name[month_start.month],
        "year": month_start.year,
        "total_incidents": len(incidents),
        "resolved_incidents": _resolved_count(incidents),
        "incidents_by_type": _histogram(incidents, "incident_type"),
        "incidents_by_equipment": _histogram(incidents, "equipment_type"),
        "weekly_trend": weekly_trend,
        "most_affected_buses": _most_affected_buses(storage, incidents, MONTHLY_TOP_BUSES),
    }


# -----------------------------
# Live camera grid
# -----------------------------
def get_camera_status(storage: Storage) -> List[Dict[str, Any]]:
    """
    One entry per bus (bus-number order) with exactly ch1..ch4; a missing
    status row reads as 'operational'.
    """
    by_bus: Dict[int, Dict[str, str]] = {}
    for row in storage.list_statuses(equipment_type="camera"):
        if row.camera_channel:
            by_bus.setdefault(row.bus_id, {})[row.camera_channel] = row.status

    out = []
    for bus in storage.list_buses():
        slots = by_bus.get(bus.id, {})
        out.append(
            {
                "bus_id": bus.id,
                "bus_number": bus.bus_number,
                "plate": bus.plate,
                "cameras": [
                    {
                        "channel": ch,
                        "label": CAMERA_CHANNEL_LABELS[ch],
                        "status": slots.get(ch, "operational"),
                    }
                    for ch in CAMERA_CHANNELS
                ],
            }
        )
    return out
