# busfleet/schemas/driver.py
from __future__ import annotations

from typing import Literal, Optional

from pydantic import conint, constr

from busfleet.schemas.common import CamelModel

DriverRole = Literal["titular", "relevo"]


class DriverCreate(CamelModel):
    name: constr(strip_whitespace=True, min_length=1, max_length=255)
    rut: Optional[constr(strip_whitespace=True, max_length=20)] = None
    phone: Optional[constr(strip_whitespace=True, max_length=50)] = None


class DriverOut(CamelModel):
    id: int
    name: str
    rut: Optional[str] = None
    phone: Optional[str] = None


class BusDriverAssign(CamelModel):
    driver_id: conint(ge=1)
    role: DriverRole = "titular"


class BusDriverOut(CamelModel):
    id: int
    bus_id: int
    driver_id: int
    role: str
    driver_name: Optional[str] = None
