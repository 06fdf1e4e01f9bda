# busfleet/schemas/incident.py
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, conint, constr

from busfleet.schemas.common import CamelModel

# Allowed enums
EquipmentType = Literal["camera", "dvr", "gps", "hard_drive", "cable"]
IncidentType = Literal["misaligned", "loose_cable", "faulty", "replacement"]
IncidentStatus = Literal["pending", "in_progress", "resolved"]
CameraChannel = Literal["ch1", "ch2", "ch3", "ch4"]


class IncidentReport(CamelModel):
    """
    One form submission. With equipment_type='camera' and N channels selected
    it produces N incidents (one per channel).
    """

    bus_id: conint(ge=1) = Field(..., description="Bus the equipment belongs to")
    equipment_type: EquipmentType
    incident_type: IncidentType
    camera_channels: Optional[List[CameraChannel]] = Field(
        default=None, description="Only used when equipment_type is 'camera'"
    )
    description: Optional[str] = None
    reporter: Optional[constr(strip_whitespace=True, max_length=255)] = None


class IncidentStatusUpdate(CamelModel):
    status: Optional[IncidentStatus] = None
    resolution_notes: Optional[str] = None


class IncidentOut(CamelModel):
    id: int
    bus_id: int
    equipment_type: str
    incident_type: str
    camera_channel: Optional[str] = None
    status: str
    description: Optional[str] = None
    resolution_notes: Optional[str] = None
    reporter: Optional[str] = None
    reported_at: datetime
    resolved_at: Optional[datetime] = None
