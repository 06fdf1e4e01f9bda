# busfleet/api/v1/equipment.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from busfleet.api.deps import get_storage
from busfleet.schemas.equipment_status import BusCameraStatus, EquipmentStatusOut
from busfleet.services.reporting import get_camera_status
from busfleet.storage.base import Storage

router = APIRouter(tags=["equipment"])


@router.get("/equipment-status", response_model=List[EquipmentStatusOut])
def list_equipment_status(
    bus_id: Optional[int] = Query(None, alias="busId"),
    storage: Storage = Depends(get_storage),
):
    return storage.list_statuses(bus_id=bus_id)


@router.get("/camera-status", response_model=List[BusCameraStatus])
def camera_status(storage: Storage = Depends(get_storage)):
    """Four channels per bus, in ch1..ch4 order."""
    return get_camera_status(storage)
