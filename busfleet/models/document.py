# busfleet/models/document.py
from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text

from busfleet.core.timeutils import utcnow
from busfleet.db.base import Base


class BusDocument(Base):
    """
    Compliance document metadata for a bus (file bytes live elsewhere).
    Optionally tied to a driver (licence, id card).
    """

    __tablename__ = "bus_documents"

    id = Column(Integer, primary_key=True, autoincrement=True)

    bus_id = Column(
        Integer, ForeignKey("buses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    driver_id = Column(
        Integer, ForeignKey("drivers.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # doc_type: permiso_circulacion | revision_tecnica | chasis | licencia_conducir | cedula_conductor
    doc_type = Column(String(50), nullable=False, index=True)
    file_name = Column(String(255), nullable=False)
    file_path = Column(Text, nullable=False)
    notes = Column(Text, nullable=True)

    uploaded_at = Column(DateTime, nullable=False, default=utcnow)
    expires_at = Column(DateTime, nullable=True, index=True)


Index("ix_bus_documents_type_expiry", BusDocument.doc_type, BusDocument.expires_at)
