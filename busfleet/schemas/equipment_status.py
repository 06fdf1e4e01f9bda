# busfleet/schemas/equipment_status.py
from datetime import datetime
from typing import List, Optional

from busfleet.schemas.common import CamelModel


class EquipmentStatusOut(CamelModel):
    id: int
    bus_id: int
    equipment_type: str
    camera_channel: Optional[str] = None
    status: str
    last_incident_id: Optional[int] = None
    updated_at: Optional[datetime] = None


class CameraSlot(CamelModel):
    channel: str
    label: str
    status: str


class BusCameraStatus(CamelModel):
    bus_id: int
    bus_number: str
    plate: Optional[str] = None
    cameras: List[CameraSlot]
