# busfleet/models/bus.py
from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String

from busfleet.core.timeutils import utcnow
from busfleet.db.base import Base


class Bus(Base):
    """
    A fleet bus. `bus_number` is human-assigned and unique; it usually looks
    numeric and is ordered numerically in listings.

    Owns its documents, equipment-status rows and driver assignments
    (ON DELETE CASCADE). Incidents are removed explicitly by the delete path.
    """

    __tablename__ = "buses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    bus_number = Column(String(50), nullable=False, unique=True, index=True)
    plate = Column(String(20), nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Bus id={self.id} number={self.bus_number!r} plate={self.plate!r}>"
