import gc
import threading

import pytest

from busfleet.core.errors import ValidationFailure
from busfleet.services import status_projector
from busfleet.services.incidents import report_incident, update_incident_status
from busfleet.services.status_projector import channel_locks, status_for_incident_type
from busfleet.storage.memory import MemoryStorage

from conftest import NOW


def _camera(storage, bus_id, channel):
    return storage.find_status(bus_id, "camera", channel)


@pytest.mark.parametrize(
    "incident_type,expected",
    [
        ("faulty", "faulty"),
        ("misaligned", "misaligned"),
        ("loose_cable", "misaligned"),
        ("replacement", "misaligned"),
    ],
)
def test_status_collapse(incident_type, expected):
    assert status_for_incident_type(incident_type) == expected


def test_new_bus_has_four_operational_channels(storage, make_bus):
    bus = make_bus("7")
    rows = storage.list_statuses(bus_id=bus.id, equipment_type="camera")
    assert sorted(r.camera_channel for r in rows) == ["ch1", "ch2", "ch3", "ch4"]
    assert {r.status for r in rows} == {"operational"}
    assert all(r.last_incident_id is None for r in rows)


def test_camera_fan_out_marks_each_channel(storage, make_bus):
    bus = make_bus("12")
    created = report_incident(
        storage,
        {
            "busId": bus.id,
            "equipmentType": "camera",
            "incidentType": "faulty",
            "cameraChannels": ["ch1", "ch3"],
            "description": "sin imagen",
            "reporter": "Juan",
        },
        now=NOW,
    )

    assert [i.camera_channel for i in created] == ["ch1", "ch3"]
    assert {i.status for i in created} == {"pending"}
    assert {i.description for i in created} == {"sin imagen"}

    ch1 = _camera(storage, bus.id, "ch1")
    ch3 = _camera(storage, bus.id, "ch3")
    assert (ch1.status, ch1.last_incident_id) == ("faulty", created[0].id)
    assert (ch3.status, ch3.last_incident_id) == ("faulty", created[1].id)
    assert _camera(storage, bus.id, "ch2").status == "operational"
    assert _camera(storage, bus.id, "ch4").status == "operational"


def test_duplicate_channels_collapse(storage, make_bus):
    bus = make_bus("3")
    created = report_incident(
        storage,
        {
            "bus_id": bus.id,
            "equipment_type": "camera",
            "incident_type": "misaligned",
            "camera_channels": ["ch2", "ch2", "ch4"],
        },
        now=NOW,
    )
    assert [i.camera_channel for i in created] == ["ch2", "ch4"]


def test_resolve_restores_operational_and_keeps_history(storage, make_bus):
    bus = make_bus("12")
    (incident,) = report_incident(
        storage,
        {"busId": bus.id, "equipmentType": "camera", "incidentType": "loose_cable", "cameraChannels": ["ch2"]},
        now=NOW,
    )
    assert _camera(storage, bus.id, "ch2").status == "misaligned"

    resolved = update_incident_status(storage, incident.id, "resolved", "ajustada", now=NOW)
    assert resolved.status == "resolved"
    assert resolved.resolved_at == NOW
    assert resolved.resolution_notes == "ajustada"

    row = _camera(storage, bus.id, "ch2")
    assert row.status == "operational"
    assert row.last_incident_id == incident.id


def test_resolved_at_is_stamped_once(storage, make_bus):
    bus = make_bus("5")
    (incident,) = report_incident(
        storage, {"busId": bus.id, "equipmentType": "gps", "incidentType": "faulty"}, now=NOW
    )
    first = update_incident_status(storage, incident.id, "resolved", now=NOW)
    stamp = first.resolved_at

    later = NOW.replace(day=20)
    again = update_incident_status(storage, incident.id, "resolved", now=later)
    assert again.resolved_at == stamp

    reopened = update_incident_status(storage, incident.id, "in_progress", now=later)
    assert reopened.status == "in_progress"
    assert reopened.resolved_at == stamp


def test_in_progress_does_not_touch_projection(storage, make_bus):
    bus = make_bus("8")
    (incident,) = report_incident(
        storage,
        {"busId": bus.id, "equipmentType": "camera", "incidentType": "faulty", "cameraChannels": ["ch1"]},
        now=NOW,
    )
    update_incident_status(storage, incident.id, "in_progress")
    assert _camera(storage, bus.id, "ch1").status == "faulty"


def test_last_write_wins_on_shared_channel(storage, make_bus):
    bus = make_bus("9")
    (a,) = report_incident(
        storage,
        {"busId": bus.id, "equipmentType": "camera", "incidentType": "faulty", "cameraChannels": ["ch1"]},
        now=NOW,
    )
    (b,) = report_incident(
        storage,
        {"busId": bus.id, "equipmentType": "camera", "incidentType": "misaligned", "cameraChannels": ["ch1"]},
        now=NOW,
    )
    row = _camera(storage, bus.id, "ch1")
    assert (row.status, row.last_incident_id) == ("misaligned", b.id)

    # Resolving the older one still clears the channel while b stays open
    update_incident_status(storage, a.id, "resolved", now=NOW)
    assert _camera(storage, bus.id, "ch1").status == "operational"
    assert storage.get_incident(b.id).status == "pending"


def test_non_camera_incident_has_no_channel_and_no_projection(storage, make_bus):
    bus = make_bus("10")
    (incident,) = report_incident(
        storage,
        {
            "busId": bus.id,
            "equipmentType": "dvr",
            "incidentType": "faulty",
            "cameraChannels": ["ch1"],
        },
        now=NOW,
    )
    assert incident.camera_channel is None
    assert storage.find_status(bus.id, "dvr", None) is None
    assert {r.status for r in storage.list_statuses(bus_id=bus.id)} == {"operational"}


def test_camera_without_channels_creates_single_unprojected_incident(storage, make_bus):
    bus = make_bus("11")
    created = report_incident(
        storage, {"busId": bus.id, "equipmentType": "camera", "incidentType": "faulty"}, now=NOW
    )
    assert len(created) == 1
    assert created[0].camera_channel is None
    assert {r.status for r in storage.list_statuses(bus_id=bus.id)} == {"operational"}


def test_missing_status_row_is_skipped(storage, make_bus):
    bus = make_bus("14")
    row = _camera(storage, bus.id, "ch4")
    with storage.transaction():
        storage.update_status(row.id, equipment_type="gone")

    (incident,) = report_incident(
        storage,
        {"busId": bus.id, "equipmentType": "camera", "incidentType": "faulty", "cameraChannels": ["ch4"]},
        now=NOW,
    )
    assert storage.get_incident(incident.id) is not None
    assert _camera(storage, bus.id, "ch4") is None


def test_two_channel_report_then_resolve_one(storage, make_bus):
    bus = make_bus("101")
    created = report_incident(
        storage,
        {"busId": bus.id, "equipmentType": "camera", "incidentType": "faulty", "cameraChannels": ["ch1", "ch3"]},
        now=NOW,
    )
    assert len(created) == 2
    states = {r.camera_channel: r.status for r in storage.list_statuses(bus_id=bus.id)}
    assert states == {"ch1": "faulty", "ch2": "operational", "ch3": "faulty", "ch4": "operational"}

    ch1_incident = next(i for i in created if i.camera_channel == "ch1")
    update_incident_status(storage, ch1_incident.id, "resolved", now=NOW)

    states = {r.camera_channel: r.status for r in storage.list_statuses(bus_id=bus.id)}
    assert states["ch1"] == "operational"
    assert states["ch3"] == "faulty"


@pytest.mark.parametrize(
    "field,value",
    [("equipmentType", "radio"), ("incidentType", "broken"), ("cameraChannels", ["ch9"])],
)
def test_bad_enum_rejected_before_write(storage, make_bus, field, value):
    bus = make_bus("15")
    payload = {
        "busId": bus.id,
        "equipmentType": "camera",
        "incidentType": "faulty",
        "cameraChannels": ["ch1"],
    }
    payload[field] = value

    with pytest.raises(ValidationFailure) as exc:
        report_incident(storage, payload, now=NOW)

    assert exc.value.errors
    assert storage.list_incidents() == []
    assert {r.status for r in storage.list_statuses(bus_id=bus.id)} == {"operational"}


def test_bad_status_rejected(storage, make_bus):
    bus = make_bus("16")
    (incident,) = report_incident(
        storage,
        {"busId": bus.id, "equipmentType": "camera", "incidentType": "faulty", "cameraChannels": ["ch2"]},
        now=NOW,
    )

    with pytest.raises(ValidationFailure) as exc:
        update_incident_status(storage, incident.id, "done", now=NOW)

    assert exc.value.errors
    stored = storage.get_incident(incident.id)
    assert stored.status == "pending"
    assert stored.resolved_at is None
    assert _camera(storage, bus.id, "ch2").status == "faulty"


def test_channel_lock_covers_the_whole_report():
    storage = MemoryStorage()
    with storage.transaction():
        bus = storage.create_bus("17")

    done = threading.Event()

    def report():
        report_incident(
            storage,
            {"busId": bus.id, "equipmentType": "camera", "incidentType": "faulty", "cameraChannels": ["ch1"]},
            now=NOW,
        )
        done.set()

    with channel_locks(bus.id, ["ch1"]):
        worker = threading.Thread(target=report)
        worker.start()
        assert not done.wait(0.2)
        assert storage.list_incidents() == []

    worker.join(timeout=5)
    assert done.is_set()
    assert _camera(storage, bus.id, "ch1").status == "faulty"


def test_channel_locks_are_released_and_forgotten():
    with channel_locks(99, ["ch2", None, "ch1", "ch2"]):
        assert {(99, "ch1"), (99, "ch2")} <= set(status_projector._locks.keys())
    gc.collect()
    assert not [k for k in status_projector._locks.keys() if k[0] == 99]
