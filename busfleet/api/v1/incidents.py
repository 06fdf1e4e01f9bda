# busfleet/api/v1/incidents.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from busfleet.api.deps import get_storage
from busfleet.schemas.incident import (
    EquipmentType,
    IncidentOut,
    IncidentReport,
    IncidentStatus,
    IncidentStatusUpdate,
)
from busfleet.services.incidents import report_incident, update_incident_status
from busfleet.storage.base import Storage

router = APIRouter(prefix="/incidents", tags=["incidents"])


# ---------------------------
# CREATE
# ---------------------------
@router.post("", response_model=List[IncidentOut], status_code=status.HTTP_201_CREATED)
def create_incident(payload: IncidentReport, storage: Storage = Depends(get_storage)):
    """
    Report a problem. Camera reports with several channels create one
    incident per channel, so the response is always a list.
    """
    return report_incident(storage, payload)


# ---------------------------
# LIST / FILTER
# ---------------------------
@router.get("", response_model=List[IncidentOut])
def list_incidents(
    status_f: Optional[IncidentStatus] = Query(None, alias="status"),
    equipment_type: Optional[EquipmentType] = Query(None, alias="equipmentType"),
    bus_id: Optional[int] = Query(None, alias="busId"),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    storage: Storage = Depends(get_storage),
):
    return storage.list_incidents(
        status=status_f,
        equipment_type=equipment_type,
        bus_id=bus_id,
        limit=limit,
    )


# ---------------------------
# READ (by id)
# ---------------------------
@router.get("/{incident_id}", response_model=IncidentOut)
def get_incident(incident_id: int, storage: Storage = Depends(get_storage)):
    obj = storage.get_incident(incident_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Incident not found")
    return obj


# ---------------------------
# UPDATE (status / resolution notes)
# ---------------------------
@router.patch("/{incident_id}", response_model=IncidentOut)
def patch_incident(
    incident_id: int,
    payload: IncidentStatusUpdate,
    storage: Storage = Depends(get_storage),
):
    return update_incident_status(
        storage,
        incident_id,
        status=payload.status,
        resolution_notes=payload.resolution_notes,
    )
