# busfleet/storage/memory.py
from __future__ import annotations

import itertools
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Type

from busfleet.core.enums import CAMERA_CHANNELS
from busfleet.core.timeutils import utcnow
from busfleet.models import (
    ALL_MODELS,
    Bus,
    BusDocument,
    BusDriver,
    Driver,
    EquipmentStatus,
    Incident,
    User,
)
from busfleet.storage.base import Storage, sort_buses


def _columns(model: Type) -> List[str]:
    return [c.key for c in model.__table__.columns]


class MemoryStorage(Storage):
    """
    Dict-backed storage holding transient model instances. Used by tests and
    by STORAGE_BACKEND=memory.

    `transaction()` snapshots every table on entry and restores it if the
    block raises. One re-entrant lock serializes transactions.
    """

    def __init__(self) -> None:
        self._tables: Dict[Type, Dict[int, Any]] = {m: {} for m in ALL_MODELS}
        self._ids = {m: itertools.count(1) for m in ALL_MODELS}
        self._lock = threading.RLock()
        self._depth = 0

    # --- internals -------------------------------------------------------

    def _insert(self, model: Type, **fields) -> Any:
        obj = model(**fields)
        obj.id = next(self._ids[model])
        self._tables[model][obj.id] = obj
        return obj

    def _rows(self, model: Type) -> List[Any]:
        return list(self._tables[model].values())

    def _snapshot(self) -> Dict[Type, Dict[int, Dict[str, Any]]]:
        return {
            model: {
                pk: {col: getattr(obj, col) for col in _columns(model)}
                for pk, obj in rows.items()
            }
            for model, rows in self._tables.items()
        }

    def _restore(self, snap: Dict[Type, Dict[int, Dict[str, Any]]]) -> None:
        # Rebuild in place so references held by callers keep their old values
        for model, rows in snap.items():
            table: Dict[int, Any] = {}
            for pk, values in rows.items():
                obj = self._tables[model].get(pk)
                if obj is None:
                    obj = model()
                for col, val in values.items():
                    setattr(obj, col, val)
                table[pk] = obj
            self._tables[model] = table

    @contextmanager
    def transaction(self) -> Iterator["MemoryStorage"]:
        with self._lock:
            outermost = self._depth == 0
            snap = self._snapshot() if outermost else None
            self._depth += 1
            try:
                yield self
            except Exception:
                if outermost:
                    self._restore(snap)
                raise
            finally:
                self._depth -= 1

    def ping(self) -> None:
        return None

    # --- buses -----------------------------------------------------------

    def list_buses(self) -> List[Bus]:
        return sort_buses(self._rows(Bus))

    def get_bus(self, bus_id: int) -> Optional[Bus]:
        return self._tables[Bus].get(bus_id)

    def get_bus_by_number(self, bus_number: str) -> Optional[Bus]:
        for b in self._rows(Bus):
            if b.bus_number == bus_number:
                return b
        return None

    def create_bus(self, bus_number: str, plate: Optional[str] = None) -> Bus:
        if self.get_bus_by_number(bus_number) is not None:
            # Same failure mode as the unique index on buses.bus_number
            raise ValueError(f"bus_number {bus_number!r} already exists")
        now = utcnow()
        bus = self._insert(Bus, bus_number=bus_number, plate=plate or None, created_at=now)
        for channel in CAMERA_CHANNELS:
            self._insert(
                EquipmentStatus,
                bus_id=bus.id,
                equipment_type="camera",
                camera_channel=channel,
                status="operational",
                last_incident_id=None,
                updated_at=now,
            )
        return bus

    def update_bus(self, bus_id: int, **fields) -> Optional[Bus]:
        bus = self.get_bus(bus_id)
        if not bus:
            return None
        for k, v in fields.items():
            setattr(bus, k, v)
        return bus

    def delete_bus(self, bus_id: int) -> bool:
        if bus_id not in self._tables[Bus]:
            return False
        for model in (BusDocument, EquipmentStatus, BusDriver, Incident):
            table = self._tables[model]
            for pk in [pk for pk, row in table.items() if row.bus_id == bus_id]:
                del table[pk]
        del self._tables[Bus][bus_id]
        return True

    def count_buses(self) -> int:
        return len(self._tables[Bus])

    # --- incidents -------------------------------------------------------

    def create_incident(self, **fields) -> Incident:
        values = {col: None for col in _columns(Incident) if col != "id"}
        values.update(status="pending", reported_at=utcnow())
        values.update(fields)
        return self._insert(Incident, **values)

    def get_incident(self, incident_id: int) -> Optional[Incident]:
        return self._tables[Incident].get(incident_id)

    def update_incident(self, incident_id: int, **fields) -> Optional[Incident]:
        obj = self.get_incident(incident_id)
        if not obj:
            return None
        for k, v in fields.items():
            setattr(obj, k, v)
        return obj

    def list_incidents(
        self,
        *,
        status: Optional[str] = None,
        equipment_type: Optional[str] = None,
        bus_id: Optional[int] = None,
        limit: Optional[int] = None,
        exclude_status: Optional[str] = None,
    ) -> List[Incident]:
        rows = self._rows(Incident)
        if status:
            rows = [i for i in rows if i.status == status]
        if exclude_status:
            rows = [i for i in rows if i.status != exclude_status]
        if equipment_type:
            rows = [i for i in rows if i.equipment_type == equipment_type]
        if bus_id is not None:
            rows = [i for i in rows if i.bus_id == bus_id]

        rows.sort(key=lambda i: (i.reported_at, i.id), reverse=True)
        if limit:
            rows = rows[:limit]
        return rows

    def incidents_reported_between(self, start: datetime, end: datetime) -> List[Incident]:
        rows = [i for i in self._rows(Incident) if start <= i.reported_at <= end]
        rows.sort(key=lambda i: (i.reported_at, i.id))
        return rows

    def incidents_resolved_between(self, start: datetime, end: datetime) -> List[Incident]:
        rows = [
            i
            for i in self._rows(Incident)
            if i.status == "resolved" and i.resolved_at is not None and start <= i.resolved_at <= end
        ]
        rows.sort(key=lambda i: (i.resolved_at, i.id))
        return rows

    # --- equipment status ------------------------------------------------

    def find_status(
        self, bus_id: int, equipment_type: str, camera_channel: Optional[str]
    ) -> Optional[EquipmentStatus]:
        channel = camera_channel or None
        for row in self._rows(EquipmentStatus):
            if (
                row.bus_id == bus_id
                and row.equipment_type == equipment_type
                and row.camera_channel == channel
            ):
                return row
        return None

    def upsert_status(
        self,
        bus_id: int,
        equipment_type: str,
        camera_channel: Optional[str],
        status: str,
        last_incident_id: Optional[int] = None,
    ) -> EquipmentStatus:
        row = self.find_status(bus_id, equipment_type, camera_channel)
        if row is None:
            row = self._insert(
                EquipmentStatus,
                bus_id=bus_id,
                equipment_type=equipment_type,
                camera_channel=camera_channel or None,
            )
        row.status = status
        row.last_incident_id = last_incident_id
        row.updated_at = utcnow()
        return row

    def update_status(self, status_id: int, **fields) -> Optional[EquipmentStatus]:
        row = self._tables[EquipmentStatus].get(status_id)
        if not row:
            return None
        for k, v in fields.items():
            setattr(row, k, v)
        row.updated_at = utcnow()
        return row

    def list_statuses(
        self, *, bus_id: Optional[int] = None, equipment_type: Optional[str] = None
    ) -> List[EquipmentStatus]:
        rows = self._rows(EquipmentStatus)
        if bus_id is not None:
            rows = [r for r in rows if r.bus_id == bus_id]
        if equipment_type:
            rows = [r for r in rows if r.equipment_type == equipment_type]
        rows.sort(key=lambda r: (r.bus_id, r.id))
        return rows

    # --- documents -------------------------------------------------------

    def create_document(self, **fields) -> BusDocument:
        values = {col: None for col in _columns(BusDocument) if col != "id"}
        values["uploaded_at"] = utcnow()
        values.update(fields)
        return self._insert(BusDocument, **values)

    def get_document(self, document_id: int) -> Optional[BusDocument]:
        return self._tables[BusDocument].get(document_id)

    def delete_document(self, document_id: int) -> bool:
        return self._tables[BusDocument].pop(document_id, None) is not None

    def list_documents(self, bus_id: int) -> List[BusDocument]:
        rows = [d for d in self._rows(BusDocument) if d.bus_id == bus_id]
        rows.sort(key=lambda d: (d.uploaded_at, d.id), reverse=True)
        return rows

    def list_documents_with_expiry(self) -> List[BusDocument]:
        rows = [d for d in self._rows(BusDocument) if d.expires_at is not None]
        rows.sort(key=lambda d: (d.expires_at, d.id))
        return rows

    # --- drivers ---------------------------------------------------------

    def create_driver(self, **fields) -> Driver:
        values = {col: None for col in _columns(Driver) if col != "id"}
        values["created_at"] = utcnow()
        values.update(fields)
        return self._insert(Driver, **values)

    def get_driver(self, driver_id: int) -> Optional[Driver]:
        return self._tables[Driver].get(driver_id)

    def list_drivers(self) -> List[Driver]:
        return sorted(self._rows(Driver), key=lambda d: (d.name, d.id))

    def assign_driver(self, bus_id: int, driver_id: int, role: str) -> BusDriver:
        for row in self._rows(BusDriver):
            if row.bus_id == bus_id and row.driver_id == driver_id:
                row.role = role
                return row
        return self._insert(BusDriver, bus_id=bus_id, driver_id=driver_id, role=role)

    def list_bus_drivers(self, bus_id: int) -> List[BusDriver]:
        rows = [r for r in self._rows(BusDriver) if r.bus_id == bus_id]
        rows.sort(key=lambda r: r.id)
        return rows

    # --- users -----------------------------------------------------------

    def get_user_by_username(self, username: str) -> Optional[User]:
        for u in self._rows(User):
            if u.username == username:
                return u
        return None

    def create_user(self, **fields) -> User:
        values = {"role": "technician", "is_active": True, "created_at": utcnow()}
        values.update(fields)
        return self._insert(User, **values)
