# busfleet/services/buses.py
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List

from busfleet.core.errors import Conflict, NotFound
from busfleet.models import Bus
from busfleet.schemas.bus import BusCreate, BusUpdate
from busfleet.storage.base import Storage

log = logging.getLogger("busfleet.buses")


def create_bus(storage: Storage, payload: BusCreate) -> Bus:
    with storage.transaction():
        if storage.get_bus_by_number(payload.bus_number) is not None:
            raise Conflict(f"Bus {payload.bus_number} already exists")
        bus = storage.create_bus(payload.bus_number, payload.plate)
    log.info("bus created id=%s number=%s", bus.id, bus.bus_number)
    return bus


def update_bus(storage: Storage, bus_id: int, payload: BusUpdate) -> Bus:
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    with storage.transaction():
        bus = storage.get_bus(bus_id)
        if bus is None:
            raise NotFound("bus", bus_id)

        new_number = data.get("bus_number")
        if new_number and new_number != bus.bus_number:
            other = storage.get_bus_by_number(new_number)
            if other is not None:
                raise Conflict(f"Bus {new_number} already exists")

        bus = storage.update_bus(bus_id, **data)
    return bus


def delete_bus(storage: Storage, bus_id: int) -> None:
    with storage.transaction():
        if not storage.delete_bus(bus_id):
            raise NotFound("bus", bus_id)
    log.info("bus %s deleted with its documents, equipment status and incidents", bus_id)


def import_buses(storage: Storage, rows: Iterable[BusCreate]) -> Dict[str, List[Any]]:
    """
    Bulk create. Numbers that already exist (or repeat within the batch) are
    skipped, not updated.
    """
    created: List[Bus] = []
    skipped: List[str] = []
    with storage.transaction():
        for row in rows:
            if storage.get_bus_by_number(row.bus_number) is not None:
                skipped.append(row.bus_number)
                continue
            created.append(storage.create_bus(row.bus_number, row.plate))

    log.info("bus import: %d created, %d skipped", len(created), len(skipped))
    return {"created": created, "skipped": skipped}
