# busfleet/models/__init__.py
from busfleet.db.base import Base  # noqa: F401

from .bus import Bus  # noqa: F401
from .incident import Incident  # noqa: F401
from .equipment_status import EquipmentStatus  # noqa: F401
from .driver import Driver, BusDriver  # noqa: F401
from .document import BusDocument  # noqa: F401
from .user import User  # noqa: F401

# Memory storage snapshots/restores these tables in this order
ALL_MODELS = (Bus, Incident, EquipmentStatus, Driver, BusDriver, BusDocument, User)
