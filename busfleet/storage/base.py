# busfleet/storage/base.py
from __future__ import annotations

import re
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional, Sequence, Tuple

from busfleet.models import (
    Bus,
    BusDocument,
    BusDriver,
    Driver,
    EquipmentStatus,
    Incident,
    User,
)

_NUMERIC_PREFIX = re.compile(r"^\s*[+-]?\d+")


def bus_number_sort_key(bus_number: str) -> Tuple[int, int, str]:
    """
    Numeric-looking numbers first (by value, leading-integer parse),
    non-numeric after; ties broken lexically.
    """
    raw = bus_number or ""
    m = _NUMERIC_PREFIX.match(raw)
    if m:
        return (0, int(m.group(0)), raw)
    return (1, 0, raw)


def sort_buses(buses: Sequence[Bus]) -> List[Bus]:
    return sorted(buses, key=lambda b: bus_number_sort_key(b.bus_number))


class Storage(ABC):
    """
    Capability set shared by the persistent and in-memory backends.

    Mutations are only durable once the enclosing `transaction()` exits
    cleanly; an exception inside it leaves the previous state untouched.
    """

    # --- unit of work ----------------------------------------------------
    @abstractmethod
    @contextmanager
    def transaction(self) -> Iterator["Storage"]:
        ...

    @abstractmethod
    def ping(self) -> None:
        """Raise if the backend is unreachable."""

    # --- buses -----------------------------------------------------------
    @abstractmethod
    def list_buses(self) -> List[Bus]: ...

    @abstractmethod
    def get_bus(self, bus_id: int) -> Optional[Bus]: ...

    @abstractmethod
    def get_bus_by_number(self, bus_number: str) -> Optional[Bus]: ...

    @abstractmethod
    def create_bus(self, bus_number: str, plate: Optional[str] = None) -> Bus:
        """Create a bus and seed ch1..ch4 camera status rows as operational."""

    @abstractmethod
    def update_bus(self, bus_id: int, **fields) -> Optional[Bus]: ...

    @abstractmethod
    def delete_bus(self, bus_id: int) -> bool:
        """Delete a bus with its documents, status rows, assignments and incidents."""

    @abstractmethod
    def count_buses(self) -> int: ...

    # --- incidents -------------------------------------------------------
    @abstractmethod
    def create_incident(self, **fields) -> Incident: ...

    @abstractmethod
    def get_incident(self, incident_id: int) -> Optional[Incident]: ...

    @abstractmethod
    def update_incident(self, incident_id: int, **fields) -> Optional[Incident]: ...

    @abstractmethod
    def list_incidents(
        self,
        *,
        status: Optional[str] = None,
        equipment_type: Optional[str] = None,
        bus_id: Optional[int] = None,
        limit: Optional[int] = None,
        exclude_status: Optional[str] = None,
    ) -> List[Incident]:
        """Newest first (reported_at desc, id desc)."""

    @abstractmethod
    def incidents_reported_between(self, start: datetime, end: datetime) -> List[Incident]:
        """Inclusive window on reported_at; oldest first, id as tie-break."""

    @abstractmethod
    def incidents_resolved_between(self, start: datetime, end: datetime) -> List[Incident]:
        """status='resolved' and resolved_at inside the inclusive window."""

    # --- equipment status ------------------------------------------------
    @abstractmethod
    def find_status(
        self, bus_id: int, equipment_type: str, camera_channel: Optional[str]
    ) -> Optional[EquipmentStatus]: ...

    @abstractmethod
    def upsert_status(
        self,
        bus_id: int,
        equipment_type: str,
        camera_channel: Optional[str],
        status: str,
        last_incident_id: Optional[int] = None,
    ) -> EquipmentStatus:
        """Insert or overwrite a slot; last_incident_id is replaced (None clears it)."""

    @abstractmethod
    def update_status(self, status_id: int, **fields) -> Optional[EquipmentStatus]:
        """Patch a status row and refresh updated_at."""

    @abstractmethod
    def list_statuses(
        self, *, bus_id: Optional[int] = None, equipment_type: Optional[str] = None
    ) -> List[EquipmentStatus]: ...

    # --- documents -------------------------------------------------------
    @abstractmethod
    def create_document(self, **fields) -> BusDocument: ...

    @abstractmethod
    def get_document(self, document_id: int) -> Optional[BusDocument]: ...

    @abstractmethod
    def delete_document(self, document_id: int) -> bool: ...

    @abstractmethod
    def list_documents(self, bus_id: int) -> List[BusDocument]: ...

    @abstractmethod
    def list_documents_with_expiry(self) -> List[BusDocument]: ...

    # --- drivers ---------------------------------------------------------
    @abstractmethod
    def create_driver(self, **fields) -> Driver: ...

    @abstractmethod
    def get_driver(self, driver_id: int) -> Optional[Driver]: ...

    @abstractmethod
    def list_drivers(self) -> List[Driver]: ...

    @abstractmethod
    def assign_driver(self, bus_id: int, driver_id: int, role: str) -> BusDriver: ...

    @abstractmethod
    def list_bus_drivers(self, bus_id: int) -> List[BusDriver]: ...

    # --- users -----------------------------------------------------------
    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]: ...

    @abstractmethod
    def create_user(self, **fields) -> User: ...
