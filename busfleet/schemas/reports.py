# busfleet/schemas/reports.py
from datetime import datetime
from typing import Dict, List

from busfleet.schemas.common import CamelModel


class DashboardStats(CamelModel):
    total_buses: int
    active_incidents: int
    resolved_this_week: int
    pending_repairs: int
    # equipment_type -> count, active incidents only
    incidents_by_type: Dict[str, int]


class BusCount(CamelModel):
    bus_number: str
    count: int


class WeekCount(CamelModel):
    week: int  # ISO week-of-year
    count: int


class WeeklyReport(CamelModel):
    week_start: datetime
    week_end: datetime
    total_incidents: int
    resolved_incidents: int
    incidents_by_type: Dict[str, int]
    incidents_by_equipment: Dict[str, int]
    most_affected_buses: List[BusCount]


class MonthlyReport(CamelModel):
    month: str
    year: int
    total_incidents: int
    resolved_incidents: int
    incidents_by_type: Dict[str, int]
    incidents_by_equipment: Dict[str, int]
    weekly_trend: List[WeekCount]
    most_affected_buses: List[BusCount]
