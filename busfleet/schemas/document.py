# busfleet/schemas/document.py
from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field, conint, constr

from busfleet.schemas.common import CamelModel

DocType = Literal[
    "permiso_circulacion",
    "revision_tecnica",
    "chasis",
    "licencia_conducir",
    "cedula_conductor",
]


class DocumentCreate(CamelModel):
    """Metadata of an already-stored file."""

    doc_type: DocType
    file_name: constr(strip_whitespace=True, min_length=1, max_length=255)
    file_path: constr(strip_whitespace=True, min_length=1) = Field(
        ..., description="Path/URL where the file storage put the bytes"
    )
    driver_id: Optional[conint(ge=1)] = None
    expires_at: Optional[datetime] = None
    notes: Optional[str] = None


class DocumentOut(CamelModel):
    id: int
    bus_id: int
    driver_id: Optional[int] = None
    doc_type: str
    file_name: str
    file_path: str
    notes: Optional[str] = None
    uploaded_at: datetime
    expires_at: Optional[datetime] = None


class ExpiringDocument(CamelModel):
    document_id: int
    bus_number: str
    doc_type: str
    file_name: str
    expires_at: datetime
    days_left: int
    driver_name: Optional[str] = None
