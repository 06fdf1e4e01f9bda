# busfleet/models/equipment_status.py
from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint

from busfleet.core.timeutils import utcnow
from busfleet.db.base import Base


class EquipmentStatus(Base):
    """
    Current operational state of one (bus, equipment type, camera channel).

    Only camera channels are ever projected; buses are seeded with ch1..ch4.
    last_incident_id points at the incident that last degraded the channel and
    is kept when the channel goes back to operational.
    """

    __tablename__ = "equipment_status"

    id = Column(Integer, primary_key=True, autoincrement=True)

    bus_id = Column(
        Integer,
        ForeignKey("buses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    equipment_type = Column(String(20), nullable=False)
    camera_channel = Column(String(5), nullable=True)

    # status: operational | misaligned | faulty
    status = Column(String(20), nullable=False, default="operational")
    last_incident_id = Column(
        Integer, ForeignKey("incidents.id", ondelete="SET NULL"), nullable=True
    )

    updated_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint(
            "bus_id", "equipment_type", "camera_channel", name="uq_equipment_status_slot"
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<EquipmentStatus bus={self.bus_id} {self.equipment_type}/{self.camera_channel} "
            f"status={self.status!r} last_incident={self.last_incident_id}>"
        )
