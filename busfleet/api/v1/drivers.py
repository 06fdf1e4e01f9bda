# busfleet/api/v1/drivers.py
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from busfleet.api.deps import get_storage
from busfleet.schemas.driver import BusDriverAssign, BusDriverOut, DriverCreate, DriverOut
from busfleet.services import drivers as driver_service
from busfleet.storage.base import Storage

router = APIRouter(tags=["drivers"])


@router.get("/drivers", response_model=List[DriverOut])
def list_drivers(storage: Storage = Depends(get_storage)):
    return storage.list_drivers()


@router.post("/drivers", response_model=DriverOut, status_code=status.HTTP_201_CREATED)
def create_driver(payload: DriverCreate, storage: Storage = Depends(get_storage)):
    return driver_service.create_driver(storage, payload)


@router.get("/buses/{bus_id}/drivers", response_model=List[BusDriverOut])
def list_bus_drivers(bus_id: int, storage: Storage = Depends(get_storage)):
    return driver_service.bus_drivers(storage, bus_id)


@router.post(
    "/buses/{bus_id}/drivers",
    response_model=BusDriverOut,
    status_code=status.HTTP_201_CREATED,
)
def assign_driver(bus_id: int, payload: BusDriverAssign, storage: Storage = Depends(get_storage)):
    """Assign (or re-role) a driver on a bus as titular or relevo."""
    return driver_service.assign_driver(storage, bus_id, payload)
