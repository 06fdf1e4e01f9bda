# busfleet/models/incident.py
from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text

from busfleet.core.timeutils import utcnow
from busfleet.db.base import Base


class Incident(Base):
    """
    One reported problem with one piece of equipment on one bus.

    - camera_channel is only meaningful for equipment_type='camera' (ch1..ch4).
    - reported_at is set at creation and never changes.
    - resolved_at is set once, when status first becomes 'resolved', and is
      never cleared afterwards.
    """

    __tablename__ = "incidents"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # No ON DELETE here: deleting a bus removes its incidents explicitly
    bus_id = Column(Integer, ForeignKey("buses.id"), nullable=False, index=True)

    # Classification
    # equipment_type: camera | dvr | gps | hard_drive | cable
    equipment_type = Column(String(20), nullable=False, index=True)
    # incident_type: misaligned | loose_cable | faulty | replacement
    incident_type = Column(String(20), nullable=False, index=True)
    camera_channel = Column(String(5), nullable=True)

    # Workflow
    # status: pending | in_progress | resolved
    status = Column(String(20), nullable=False, default="pending", index=True)

    # Content
    description = Column(Text, nullable=True)
    resolution_notes = Column(Text, nullable=True)
    reporter = Column(String(255), nullable=True)

    reported_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    resolved_at = Column(DateTime, nullable=True, index=True)

    def __repr__(self) -> str:
        return (
            f"<Incident id={self.id} bus={self.bus_id} equipment={self.equipment_type!r} "
            f"type={self.incident_type!r} channel={self.camera_channel!r} status={self.status!r}>"
        )


Index("ix_incidents_bus_status", Incident.bus_id, Incident.status)
Index("ix_incidents_status_resolved", Incident.status, Incident.resolved_at)
