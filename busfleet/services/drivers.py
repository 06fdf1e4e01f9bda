# busfleet/services/drivers.py
from __future__ import annotations

from typing import Any, Dict, List

from busfleet.core.errors import Conflict, NotFound
from busfleet.models import Driver
from busfleet.schemas.driver import BusDriverAssign, DriverCreate
from busfleet.storage.base import Storage


def create_driver(storage: Storage, payload: DriverCreate) -> Driver:
    with storage.transaction():
        if payload.rut and any(d.rut == payload.rut for d in storage.list_drivers()):
            raise Conflict(f"Driver with RUT {payload.rut} already exists")
        return storage.create_driver(name=payload.name, rut=payload.rut, phone=payload.phone)


def bus_drivers(storage: Storage, bus_id: int) -> List[Dict[str, Any]]:
    if storage.get_bus(bus_id) is None:
        raise NotFound("bus", bus_id)
    out = []
    for row in storage.list_bus_drivers(bus_id):
        driver = storage.get_driver(row.driver_id)
        out.append(
            {
                "id": row.id,
                "bus_id": row.bus_id,
                "driver_id": row.driver_id,
                "role": row.role,
                "driver_name": driver.name if driver else None,
            }
        )
    return out


def assign_driver(storage: Storage, bus_id: int, payload: BusDriverAssign) -> Dict[str, Any]:
    with storage.transaction():
        if storage.get_bus(bus_id) is None:
            raise NotFound("bus", bus_id)
        driver = storage.get_driver(payload.driver_id)
        if driver is None:
            raise NotFound("driver", payload.driver_id)
        row = storage.assign_driver(bus_id, payload.driver_id, payload.role)

    return {
        "id": row.id,
        "bus_id": row.bus_id,
        "driver_id": row.driver_id,
        "role": row.role,
        "driver_name": driver.name,
    }
