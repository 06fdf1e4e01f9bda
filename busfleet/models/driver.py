# busfleet/models/driver.py
from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint

from busfleet.core.timeutils import utcnow
from busfleet.db.base import Base


class Driver(Base):
    __tablename__ = "drivers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    rut = Column(String(20), nullable=True, unique=True)  # national id
    phone = Column(String(50), nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)


class BusDriver(Base):
    """Assignment of a driver to a bus (role: titular | relevo)."""

    __tablename__ = "bus_drivers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    bus_id = Column(
        Integer, ForeignKey("buses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    driver_id = Column(
        Integer, ForeignKey("drivers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role = Column(String(20), nullable=False, default="titular")

    __table_args__ = (UniqueConstraint("bus_id", "driver_id", name="uq_bus_driver"),)
