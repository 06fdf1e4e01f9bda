# busfleet/services/status_projector.py
"""
Keeps the equipment_status projection in step with the incident lifecycle.

Only camera incidents with a channel are projected:
  - creation marks the channel 'faulty' (incident_type == 'faulty') or
    'misaligned' (every other incident type) and records the incident id;
  - resolution puts the channel back to 'operational' and keeps
    last_incident_id as history.

There is no reference counting: resolving one of several open incidents on
the same channel still marks it operational (last write wins).

Callers hold `channel_locks()` around the whole `storage.transaction()`, so
read, write and commit for one (bus, channel) slot are serialized within this
process. Other processes sharing the database are not covered.
"""
from __future__ import annotations

import logging
import threading
import weakref
from contextlib import ExitStack, contextmanager
from typing import Iterable, Iterator, Optional

from busfleet.models import EquipmentStatus, Incident
from busfleet.storage.base import Storage

log = logging.getLogger("busfleet.projector")

# Entries disappear once no caller holds the lock (deleted buses included)
_locks: "weakref.WeakValueDictionary" = weakref.WeakValueDictionary()
_locks_guard = threading.Lock()


def _lock_for(bus_id: int, channel: str) -> threading.Lock:
    with _locks_guard:
        lock = _locks.get((bus_id, channel))
        if lock is None:
            lock = threading.Lock()
            _locks[(bus_id, channel)] = lock
        return lock


@contextmanager
def channel_locks(bus_id: int, channels: Iterable[Optional[str]]) -> Iterator[None]:
    """Hold the locks of every given channel on a bus; None entries are ignored."""
    with ExitStack() as stack:
        # Sorted acquisition keeps two multi-channel reports from deadlocking
        for channel in sorted({ch for ch in channels if ch}):
            stack.enter_context(_lock_for(bus_id, channel))
        yield


def status_for_incident_type(incident_type: str) -> str:
    # Four incident types collapse onto two degraded states
    return "faulty" if incident_type == "faulty" else "misaligned"


def _is_projected(incident: Incident) -> bool:
    return incident.equipment_type == "camera" and bool(incident.camera_channel)


def apply_incident_created(storage: Storage, incident: Incident) -> Optional[EquipmentStatus]:
    if not _is_projected(incident):
        return None

    row = storage.find_status(incident.bus_id, "camera", incident.camera_channel)
    if row is None:
        log.debug(
            "no status row for bus=%s channel=%s; skipping projection of incident %s",
            incident.bus_id,
            incident.camera_channel,
            incident.id,
        )
        return None

    new_status = status_for_incident_type(incident.incident_type)
    log.info(
        "bus=%s %s: %s -> %s (incident %s)",
        incident.bus_id,
        incident.camera_channel,
        row.status,
        new_status,
        incident.id,
    )
    return storage.update_status(row.id, status=new_status, last_incident_id=incident.id)


def apply_incident_resolved(storage: Storage, incident: Incident) -> Optional[EquipmentStatus]:
    if not _is_projected(incident):
        return None

    row = storage.find_status(incident.bus_id, "camera", incident.camera_channel)
    if row is None:
        log.debug(
            "no status row for bus=%s channel=%s; resolution of incident %s not projected",
            incident.bus_id,
            incident.camera_channel,
            incident.id,
        )
        return None

    log.info(
        "bus=%s %s: %s -> operational (incident %s resolved)",
        incident.bus_id,
        incident.camera_channel,
        row.status,
        incident.id,
    )
    return storage.update_status(row.id, status="operational")
