# busfleet/api/v1/reports.py
from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from busfleet.api.deps import get_storage
from busfleet.core.timeutils import parse_iso_week, parse_year_month
from busfleet.schemas.document import ExpiringDocument
from busfleet.schemas.reports import DashboardStats, MonthlyReport, WeeklyReport
from busfleet.services.expiry import get_expiring_documents
from busfleet.services.reporting import (
    get_dashboard_stats,
    get_monthly_report,
    get_weekly_report,
)
from busfleet.storage.base import Storage

router = APIRouter(tags=["reports"])


@router.get("/dashboard", response_model=DashboardStats)
def dashboard(storage: Storage = Depends(get_storage)):
    return get_dashboard_stats(storage)


@router.get("/reports/weekly", response_model=WeeklyReport)
def weekly_report(
    week: Optional[str] = Query(None, description="ISO week, e.g. 2026-W07"),
    day: Optional[date] = Query(None, alias="date", description="Any day inside the week"),
    storage: Storage = Depends(get_storage),
):
    target = day
    if week:
        try:
            target = parse_iso_week(week)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid week (expected YYYY-Www)")
    return get_weekly_report(storage, target)


@router.get("/reports/monthly", response_model=MonthlyReport)
def monthly_report(
    month: Optional[str] = Query(None, description="Month as YYYY-MM"),
    storage: Storage = Depends(get_storage),
):
    target = None
    if month:
        try:
            target = parse_year_month(month)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid month (expected YYYY-MM)")
    return get_monthly_report(storage, target)


@router.get("/documents/expiring", response_model=List[ExpiringDocument])
def expiring_documents(storage: Storage = Depends(get_storage)):
    return get_expiring_documents(storage)
