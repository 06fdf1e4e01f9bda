import pytest

from busfleet.core.errors import Conflict, NotFound
from busfleet.schemas.bus import BusCreate, BusUpdate
from busfleet.services import buses as bus_service
from busfleet.services.incidents import report_incident
from busfleet.storage.base import bus_number_sort_key

from conftest import NOW


def test_bus_number_ordering_is_numeric_aware(storage, make_bus):
    for number in ("10", "2", "B-1", "101", "1", "A-7", "9x"):
        make_bus(number)
    assert [b.bus_number for b in storage.list_buses()] == [
        "1",
        "2",
        "9x",
        "10",
        "101",
        "A-7",
        "B-1",
    ]


def test_sort_key_ties_break_lexically():
    assert bus_number_sort_key("7") < bus_number_sort_key("7A")
    assert bus_number_sort_key("007") < bus_number_sort_key("7")
    assert bus_number_sort_key("100") < bus_number_sort_key("Z")


def test_create_bus_rejects_duplicate_number(storage):
    bus_service.create_bus(storage, BusCreate(bus_number="5"))
    with pytest.raises(Conflict):
        bus_service.create_bus(storage, BusCreate(bus_number="5"))
    assert storage.count_buses() == 1


def test_update_bus(storage, make_bus):
    bus = make_bus("5")
    make_bus("6")
    updated = bus_service.update_bus(storage, bus.id, BusUpdate(plate="XY-99"))
    assert (updated.bus_number, updated.plate) == ("5", "XY-99")

    with pytest.raises(Conflict):
        bus_service.update_bus(storage, bus.id, BusUpdate(bus_number="6"))
    with pytest.raises(NotFound):
        bus_service.update_bus(storage, 999, BusUpdate(plate="x"))


def test_delete_bus_cascades(storage, make_bus):
    bus = make_bus("5")
    keep = make_bus("6")
    report_incident(
        storage,
        {"busId": bus.id, "equipmentType": "camera", "incidentType": "faulty", "cameraChannels": ["ch1"]},
        now=NOW,
    )
    report_incident(storage, {"busId": keep.id, "equipmentType": "gps", "incidentType": "faulty"}, now=NOW)
    with storage.transaction():
        driver = storage.create_driver(name="Ana")
        storage.assign_driver(bus.id, driver.id, "titular")
        storage.create_document(
            bus_id=bus.id, doc_type="chasis", file_name="c.pdf", file_path="/c.pdf"
        )

    bus_service.delete_bus(storage, bus.id)

    assert storage.get_bus(bus.id) is None
    assert storage.list_statuses(bus_id=bus.id) == []
    assert storage.list_incidents(bus_id=bus.id) == []
    assert storage.list_documents(bus.id) == []
    assert storage.list_bus_drivers(bus.id) == []
    # Other buses and the driver itself are untouched
    assert len(storage.list_incidents(bus_id=keep.id)) == 1
    assert len(storage.list_statuses(bus_id=keep.id)) == 4
    assert storage.get_driver(driver.id) is not None

    with pytest.raises(NotFound):
        bus_service.delete_bus(storage, bus.id)


def test_import_skips_existing_and_repeated(storage, make_bus):
    make_bus("1")
    result = bus_service.import_buses(
        storage,
        [
            BusCreate(bus_number="1"),
            BusCreate(bus_number="2", plate="AA-11"),
            BusCreate(bus_number="3"),
            BusCreate(bus_number="2"),
        ],
    )
    assert [b.bus_number for b in result["created"]] == ["2", "3"]
    assert result["skipped"] == ["1", "2"]
    assert storage.count_buses() == 3
    assert len(storage.list_statuses(bus_id=result["created"][0].id)) == 4


def test_transaction_rolls_back_on_error(storage, make_bus):
    bus = make_bus("1")
    with pytest.raises(RuntimeError):
        with storage.transaction():
            storage.create_bus("2")
            storage.update_bus(bus.id, plate="CHANGED")
            raise RuntimeError("boom")

    assert storage.get_bus_by_number("2") is None
    assert storage.get_bus(bus.id).plate is None
    assert storage.count_buses() == 1


def test_report_on_missing_bus_writes_nothing(storage):
    with pytest.raises(NotFound):
        report_incident(
            storage, {"busId": 42, "equipmentType": "gps", "incidentType": "faulty"}, now=NOW
        )
    assert storage.list_incidents() == []


def test_list_incidents_filters_and_order(storage, make_bus):
    from datetime import timedelta

    bus = make_bus("1")
    other = make_bus("2")
    (old,) = report_incident(storage, {"busId": bus.id, "equipmentType": "gps", "incidentType": "faulty"}, now=NOW)
    (new,) = report_incident(
        storage, {"busId": bus.id, "equipmentType": "dvr", "incidentType": "faulty"}, now=NOW + timedelta(hours=1)
    )
    report_incident(storage, {"busId": other.id, "equipmentType": "gps", "incidentType": "faulty"}, now=NOW)

    assert [i.id for i in storage.list_incidents(bus_id=bus.id)] == [new.id, old.id]
    assert [i.id for i in storage.list_incidents(bus_id=bus.id, equipment_type="gps")] == [old.id]
    assert len(storage.list_incidents(limit=2)) == 2
    assert storage.list_incidents(status="resolved") == []


def test_upsert_status_inserts_then_overwrites(storage, make_bus):
    bus = make_bus("1")
    (incident,) = report_incident(
        storage, {"busId": bus.id, "equipmentType": "dvr", "incidentType": "faulty"}, now=NOW
    )
    with storage.transaction():
        row = storage.upsert_status(bus.id, "dvr", None, "faulty", incident.id)
    assert storage.find_status(bus.id, "dvr", None).id == row.id
    assert (row.status, row.last_incident_id) == ("faulty", incident.id)

    with storage.transaction():
        again = storage.upsert_status(bus.id, "dvr", None, "operational")
    assert again.id == row.id
    # last_incident_id is replaced, not kept
    assert (again.status, again.last_incident_id) == ("operational", None)
    assert len(storage.list_statuses(bus_id=bus.id)) == 5


def test_document_lookup_and_delete(storage, make_bus):
    bus = make_bus("1")
    with storage.transaction():
        doc = storage.create_document(
            bus_id=bus.id, doc_type="chasis", file_name="c.pdf", file_path="/c.pdf"
        )
    assert storage.get_document(doc.id).file_name == "c.pdf"
    assert storage.list_documents_with_expiry() == []

    with storage.transaction():
        assert storage.delete_document(doc.id) is True
    assert storage.get_document(doc.id) is None
    with storage.transaction():
        assert storage.delete_document(doc.id) is False
