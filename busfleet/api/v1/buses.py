# busfleet/api/v1/buses.py
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from busfleet.api.deps import get_storage
from busfleet.schemas.bus import BusCreate, BusImport, BusImportResult, BusOut, BusUpdate
from busfleet.services import buses as bus_service
from busfleet.storage.base import Storage

router = APIRouter(prefix="/buses", tags=["buses"])


@router.get("", response_model=List[BusOut])
def list_buses(storage: Storage = Depends(get_storage)):
    return storage.list_buses()


@router.post("", response_model=BusOut, status_code=status.HTTP_201_CREATED)
def create_bus(payload: BusCreate, storage: Storage = Depends(get_storage)):
    """Create a bus; its four camera channels start as operational."""
    return bus_service.create_bus(storage, payload)


@router.post("/import", response_model=BusImportResult, status_code=status.HTTP_201_CREATED)
def import_buses(payload: BusImport, storage: Storage = Depends(get_storage)):
    return bus_service.import_buses(storage, payload.buses)


@router.get("/{bus_id}", response_model=BusOut)
def get_bus(bus_id: int, storage: Storage = Depends(get_storage)):
    bus = storage.get_bus(bus_id)
    if not bus:
        raise HTTPException(status_code=404, detail="Bus not found")
    return bus


@router.patch("/{bus_id}", response_model=BusOut)
def update_bus(bus_id: int, payload: BusUpdate, storage: Storage = Depends(get_storage)):
    return bus_service.update_bus(storage, bus_id, payload)


@router.delete("/{bus_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_bus(bus_id: int, storage: Storage = Depends(get_storage)) -> Response:
    bus_service.delete_bus(storage, bus_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
