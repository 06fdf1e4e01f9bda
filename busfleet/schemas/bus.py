# busfleet/schemas/bus.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field, constr

from busfleet.schemas.common import CamelModel


class BusCreate(CamelModel):
    bus_number: constr(strip_whitespace=True, min_length=1, max_length=50) = Field(
        ..., description="Human-assigned bus number (unique)"
    )
    plate: Optional[constr(strip_whitespace=True, max_length=20)] = None


class BusUpdate(CamelModel):
    bus_number: Optional[constr(strip_whitespace=True, min_length=1, max_length=50)] = None
    plate: Optional[constr(strip_whitespace=True, max_length=20)] = None


class BusOut(CamelModel):
    id: int
    bus_number: str
    plate: Optional[str] = None
    created_at: Optional[datetime] = None


class BusImport(CamelModel):
    buses: List[BusCreate] = Field(default_factory=list)


class BusImportResult(CamelModel):
    created: List[BusOut]
    skipped: List[str] = Field(
        default_factory=list, description="Bus numbers that already existed"
    )
