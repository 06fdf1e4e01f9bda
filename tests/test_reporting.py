from datetime import date, datetime, timedelta

from busfleet.core.timeutils import month_bounds, week_bounds
from busfleet.services.incidents import report_incident, update_incident_status
from busfleet.services.reporting import (
    get_camera_status,
    get_dashboard_stats,
    get_monthly_report,
    get_weekly_report,
)

from conftest import NOW


def _report(storage, bus_id, when, equipment="gps", kind="faulty", channels=None):
    payload = {"busId": bus_id, "equipmentType": equipment, "incidentType": kind}
    if channels:
        payload["cameraChannels"] = channels
    return report_incident(storage, payload, now=when)


def test_week_bounds_are_monday_to_sunday_inclusive():
    start, end = week_bounds(date(2026, 2, 11))
    assert start == datetime(2026, 2, 9, 0, 0, 0)
    assert end == datetime(2026, 2, 15, 23, 59, 59, 999999)

    # A Sunday belongs to the week that started the previous Monday
    assert week_bounds(date(2026, 2, 15))[0] == datetime(2026, 2, 9)


def test_month_bounds_cover_whole_month():
    start, end = month_bounds(date(2026, 12, 17))
    assert start == datetime(2026, 12, 1)
    assert end == datetime(2026, 12, 31, 23, 59, 59, 999999)


def test_sunday_night_incident_stays_in_its_week(storage, make_bus):
    bus = make_bus("1")
    _report(storage, bus.id, datetime(2026, 2, 15, 23, 59, 59))
    _report(storage, bus.id, datetime(2026, 2, 16, 0, 0, 0))

    this_week = get_weekly_report(storage, date(2026, 2, 11))
    next_week = get_weekly_report(storage, date(2026, 2, 16))
    assert this_week["total_incidents"] == 1
    assert next_week["total_incidents"] == 1
    assert this_week["week_start"] == datetime(2026, 2, 9)


def test_weekly_report_histograms_and_resolved(storage, make_bus):
    bus = make_bus("1")
    a = _report(storage, bus.id, NOW, equipment="camera", kind="faulty", channels=["ch1", "ch2"])
    _report(storage, bus.id, NOW, equipment="gps", kind="loose_cable")
    update_incident_status(storage, a[0].id, "resolved", now=NOW + timedelta(days=30))

    r = get_weekly_report(storage, NOW)
    assert r["total_incidents"] == 3
    # Counted by status, not by when they were resolved
    assert r["resolved_incidents"] == 1
    assert r["incidents_by_type"] == {"faulty": 2, "loose_cable": 1}
    assert r["incidents_by_equipment"] == {"camera": 2, "gps": 1}
    assert r["most_affected_buses"] == [{"bus_number": "1", "count": 3}]


def test_weekly_top_buses_limited_to_five(storage, make_bus):
    for n in range(1, 8):
        bus = make_bus(str(n))
        for _ in range(n):
            _report(storage, bus.id, NOW)

    top = get_weekly_report(storage, NOW)["most_affected_buses"]
    assert [b["bus_number"] for b in top] == ["7", "6", "5", "4", "3"]
    assert [b["count"] for b in top] == [7, 6, 5, 4, 3]


def test_top_buses_ties_keep_first_seen_order(storage, make_bus):
    b1 = make_bus("20")
    b2 = make_bus("10")
    _report(storage, b1.id, NOW)
    _report(storage, b2.id, NOW + timedelta(minutes=1))

    top = get_weekly_report(storage, NOW)["most_affected_buses"]
    assert [b["bus_number"] for b in top] == ["20", "10"]


def test_monthly_weekly_trend_uses_iso_weeks(storage, make_bus):
    bus = make_bus("1")
    # 2026-06-01 is a Monday
    first_monday = datetime(2026, 6, 1, 9, 0)
    for week, count in ((0, 6), (1, 5), (2, 4)):
        for k in range(count):
            _report(storage, bus.id, first_monday + timedelta(weeks=week, hours=k))

    r = get_monthly_report(storage, date(2026, 6, 15))
    w = first_monday.isocalendar()[1]
    assert r["total_incidents"] == 15
    assert r["weekly_trend"] == [
        {"week": w, "count": 6},
        {"week": w + 1, "count": 5},
        {"week": w + 2, "count": 4},
    ]
    assert r["month"] == "June"
    assert r["year"] == 2026


def test_monthly_report_window_and_top_six(storage, make_bus):
    for n in range(1, 9):
        bus = make_bus(str(n))
        for _ in range(n):
            _report(storage, bus.id, datetime(2026, 6, 10))
    outside = make_bus("99")
    _report(storage, outside.id, datetime(2026, 5, 31, 23, 59, 59))
    _report(storage, outside.id, datetime(2026, 7, 1, 0, 0, 0))

    r = get_monthly_report(storage, date(2026, 6, 1))
    assert r["total_incidents"] == sum(range(1, 9))
    assert len(r["most_affected_buses"]) == 6
    assert r["most_affected_buses"][0] == {"bus_number": "8", "count": 8}
    assert "99" not in [b["bus_number"] for b in r["most_affected_buses"]]


def test_empty_month_report(storage):
    r = get_monthly_report(storage, date(2026, 1, 1))
    assert r["total_incidents"] == 0
    assert r["weekly_trend"] == []
    assert r["most_affected_buses"] == []
    assert r["incidents_by_type"] == {}


def test_dashboard_stats(storage, make_bus):
    b1 = make_bus("1")
    make_bus("2")
    cams = _report(storage, b1.id, NOW, equipment="camera", channels=["ch1", "ch2"])
    (gps,) = _report(storage, b1.id, NOW, equipment="gps")
    (dvr,) = _report(storage, b1.id, NOW, equipment="dvr")

    update_incident_status(storage, gps.id, "in_progress")
    update_incident_status(storage, dvr.id, "resolved", now=NOW)
    # Resolved last week: not counted in resolved_this_week
    (old,) = _report(storage, b1.id, NOW - timedelta(days=14), equipment="cable")
    update_incident_status(storage, old.id, "resolved", now=NOW - timedelta(days=7))

    stats = get_dashboard_stats(storage, now=NOW)
    assert stats["total_buses"] == 2
    assert stats["active_incidents"] == 3
    assert stats["pending_repairs"] == 2
    assert stats["resolved_this_week"] == 1
    assert stats["incidents_by_type"] == {"camera": 2, "gps": 1}
    assert len(cams) == 2


def test_camera_status_grid(storage, make_bus):
    b10 = make_bus("10", "AB-1234")
    make_bus("9")
    _report(storage, b10.id, NOW, equipment="camera", kind="replacement", channels=["ch4"])

    grid = get_camera_status(storage)
    assert [g["bus_number"] for g in grid] == ["9", "10"]
    ten = grid[1]
    assert ten["plate"] == "AB-1234"
    assert [c["channel"] for c in ten["cameras"]] == ["ch1", "ch2", "ch3", "ch4"]
    assert [c["label"] for c in ten["cameras"]] == ["Frontal", "Puerta", "Camello", "Pasajeros"]
    assert [c["status"] for c in ten["cameras"]] == [
        "operational",
        "operational",
        "operational",
        "misaligned",
    ]
