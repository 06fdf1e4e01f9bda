# busfleet/storage/sql.py
from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from busfleet.core.enums import CAMERA_CHANNELS
from busfleet.core.timeutils import utcnow
from busfleet.models import (
    Bus,
    BusDocument,
    BusDriver,
    Driver,
    EquipmentStatus,
    Incident,
    User,
)
from busfleet.storage.base import Storage, sort_buses


class SqlStorage(Storage):
    """
    SQLAlchemy-backed storage over one Session.

    Methods only flush; `transaction()` owns commit/rollback. Reads see
    flushed-but-uncommitted rows of the same session.
    """

    def __init__(self, db: Session):
        self.db = db
        self._depth = 0

    @contextmanager
    def transaction(self) -> Iterator["SqlStorage"]:
        # Nested use joins the outer unit of work
        self._depth += 1
        try:
            yield self
            if self._depth == 1:
                self.db.commit()
        except Exception:
            if self._depth == 1:
                self.db.rollback()
            raise
        finally:
            self._depth -= 1

    def ping(self) -> None:
        self.db.execute(text("SELECT 1"))

    # --- buses -----------------------------------------------------------

    def list_buses(self) -> List[Bus]:
        return sort_buses(self.db.query(Bus).all())

    def get_bus(self, bus_id: int) -> Optional[Bus]:
        return self.db.get(Bus, bus_id)

    def get_bus_by_number(self, bus_number: str) -> Optional[Bus]:
        return self.db.query(Bus).filter(Bus.bus_number == bus_number).first()

    def create_bus(self, bus_number: str, plate: Optional[str] = None) -> Bus:
        now = utcnow()
        bus = Bus(bus_number=bus_number, plate=plate or None, created_at=now)
        self.db.add(bus)
        self.db.flush()

        # Default projection: four camera channels, all operational
        for channel in CAMERA_CHANNELS:
            self.db.add(
                EquipmentStatus(
                    bus_id=bus.id,
                    equipment_type="camera",
                    camera_channel=channel,
                    status="operational",
                    updated_at=now,
                )
            )
        self.db.flush()
        return bus

    def update_bus(self, bus_id: int, **fields) -> Optional[Bus]:
        bus = self.db.get(Bus, bus_id)
        if not bus:
            return None
        for k, v in fields.items():
            setattr(bus, k, v)
        self.db.flush()
        return bus

    def delete_bus(self, bus_id: int) -> bool:
        bus = self.db.get(Bus, bus_id)
        if not bus:
            return False

        # Children first; do not rely on the dialect honouring ON DELETE CASCADE
        self.db.query(BusDocument).filter(BusDocument.bus_id == bus_id).delete(
            synchronize_session="fetch"
        )
        self.db.query(EquipmentStatus).filter(EquipmentStatus.bus_id == bus_id).delete(
            synchronize_session="fetch"
        )
        self.db.query(BusDriver).filter(BusDriver.bus_id == bus_id).delete(
            synchronize_session="fetch"
        )
        self.db.query(Incident).filter(Incident.bus_id == bus_id).delete(
            synchronize_session="fetch"
        )
        self.db.delete(bus)
        self.db.flush()
        return True

    def count_buses(self) -> int:
        return self.db.query(Bus).count()

    # --- incidents -------------------------------------------------------

    def create_incident(self, **fields) -> Incident:
        fields.setdefault("reported_at", utcnow())
        fields.setdefault("status", "pending")
        obj = Incident(**fields)
        self.db.add(obj)
        self.db.flush()
        return obj

    def get_incident(self, incident_id: int) -> Optional[Incident]:
        return self.db.get(Incident, incident_id)

    def update_incident(self, incident_id: int, **fields) -> Optional[Incident]:
        obj = self.db.get(Incident, incident_id)
        if not obj:
            return None
        for k, v in fields.items():
            setattr(obj, k, v)
        self.db.flush()
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
        q = self.db.query(Incident)
        if status:
            q = q.filter(Incident.status == status)
        if exclude_status:
            q = q.filter(Incident.status != exclude_status)
        if equipment_type:
            q = q.filter(Incident.equipment_type == equipment_type)
        if bus_id is not None:
            q = q.filter(Incident.bus_id == bus_id)

        q = q.order_by(Incident.reported_at.desc(), Incident.id.desc())
        if limit:
            q = q.limit(limit)
        return q.all()

    def incidents_reported_between(self, start: datetime, end: datetime) -> List[Incident]:
        return (
            self.db.query(Incident)
            .filter(Incident.reported_at >= start, Incident.reported_at <= end)
            .order_by(Incident.reported_at.asc(), Incident.id.asc())
            .all()
        )

    def incidents_resolved_between(self, start: datetime, end: datetime) -> List[Incident]:
        return (
            self.db.query(Incident)
            .filter(
                Incident.status == "resolved",
                Incident.resolved_at >= start,
                Incident.resolved_at <= end,
            )
            .order_by(Incident.resolved_at.asc(), Incident.id.asc())
            .all()
        )

    # --- equipment status ------------------------------------------------

    def find_status(
        self, bus_id: int, equipment_type: str, camera_channel: Optional[str]
    ) -> Optional[EquipmentStatus]:
        q = self.db.query(EquipmentStatus).filter(
            EquipmentStatus.bus_id == bus_id,
            EquipmentStatus.equipment_type == equipment_type,
        )
        if camera_channel:
            q = q.filter(EquipmentStatus.camera_channel == camera_channel)
        else:
            q = q.filter(EquipmentStatus.camera_channel.is_(None))
        return q.first()

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
            row = EquipmentStatus(
                bus_id=bus_id,
                equipment_type=equipment_type,
                camera_channel=camera_channel or None,
            )
            self.db.add(row)
        row.status = status
        row.last_incident_id = last_incident_id
        row.updated_at = utcnow()
        self.db.flush()
        return row

    def update_status(self, status_id: int, **fields) -> Optional[EquipmentStatus]:
        row = self.db.get(EquipmentStatus, status_id)
        if not row:
            return None
        for k, v in fields.items():
            setattr(row, k, v)
        row.updated_at = utcnow()
        self.db.flush()
        return row

    def list_statuses(
        self, *, bus_id: Optional[int] = None, equipment_type: Optional[str] = None
    ) -> List[EquipmentStatus]:
        q = self.db.query(EquipmentStatus)
        if bus_id is not None:
            q = q.filter(EquipmentStatus.bus_id == bus_id)
        if equipment_type:
            q = q.filter(EquipmentStatus.equipment_type == equipment_type)
        return q.order_by(EquipmentStatus.bus_id.asc(), EquipmentStatus.id.asc()).all()

    # --- documents -------------------------------------------------------

    def create_document(self, **fields) -> BusDocument:
        fields.setdefault("uploaded_at", utcnow())
        obj = BusDocument(**fields)
        self.db.add(obj)
        self.db.flush()
        return obj

    def get_document(self, document_id: int) -> Optional[BusDocument]:
        return self.db.get(BusDocument, document_id)

    def delete_document(self, document_id: int) -> bool:
        obj = self.db.get(BusDocument, document_id)
        if not obj:
            return False
        self.db.delete(obj)
        self.db.flush()
        return True

    def list_documents(self, bus_id: int) -> List[BusDocument]:
        return (
            self.db.query(BusDocument)
            .filter(BusDocument.bus_id == bus_id)
            .order_by(BusDocument.uploaded_at.desc(), BusDocument.id.desc())
            .all()
        )

    def list_documents_with_expiry(self) -> List[BusDocument]:
        return (
            self.db.query(BusDocument)
            .filter(BusDocument.expires_at.isnot(None))
            .order_by(BusDocument.expires_at.asc(), BusDocument.id.asc())
            .all()
        )

    # --- drivers ---------------------------------------------------------

    def create_driver(self, **fields) -> Driver:
        fields.setdefault("created_at", utcnow())
        obj = Driver(**fields)
        self.db.add(obj)
        self.db.flush()
        return obj

    def get_driver(self, driver_id: int) -> Optional[Driver]:
        return self.db.get(Driver, driver_id)

    def list_drivers(self) -> List[Driver]:
        return self.db.query(Driver).order_by(Driver.name.asc(), Driver.id.asc()).all()

    def assign_driver(self, bus_id: int, driver_id: int, role: str) -> BusDriver:
        row = (
            self.db.query(BusDriver)
            .filter(BusDriver.bus_id == bus_id, BusDriver.driver_id == driver_id)
            .first()
        )
        if row is None:
            row = BusDriver(bus_id=bus_id, driver_id=driver_id, role=role)
            self.db.add(row)
        else:
            row.role = role
        self.db.flush()
        return row

    def list_bus_drivers(self, bus_id: int) -> List[BusDriver]:
        return (
            self.db.query(BusDriver)
            .filter(BusDriver.bus_id == bus_id)
            .order_by(BusDriver.id.asc())
            .all()
        )

    # --- users -----------------------------------------------------------

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def create_user(self, **fields) -> User:
        fields.setdefault("created_at", utcnow())
        obj = User(**fields)
        self.db.add(obj)
        self.db.flush()
        return obj
