# busfleet/services/incidents.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from busfleet.core.enums import INCIDENT_STATUSES
from busfleet.core.errors import NotFound, ValidationFailure
from busfleet.core.timeutils import utcnow
from busfleet.models import Incident
from busfleet.schemas.incident import IncidentReport
from busfleet.services.status_projector import (
    apply_incident_created,
    apply_incident_resolved,
    channel_locks,
)
from busfleet.storage.base import Storage

log = logging.getLogger("busfleet.incidents")


def _validate_report(payload: Union[IncidentReport, Dict[str, Any]]) -> IncidentReport:
    if isinstance(payload, IncidentReport):
        return payload
    try:
        return IncidentReport.model_validate(payload)
    except ValidationError as e:
        raise ValidationFailure(e.errors(include_url=False, include_context=False))


def report_incident(
    storage: Storage,
    payload: Union[IncidentReport, Dict[str, Any]],
    *,
    now: Optional[datetime] = None,
) -> List[Incident]:
    """
    Persist one reported problem and update the camera projection.

    Camera reports fan out to one incident per selected channel, all sharing
    description/reporter/types. Everything is written in a single transaction.
    """
    data = _validate_report(payload)
    reported_at = now or utcnow()

    channels: List[Optional[str]] = [None]
    if data.equipment_type == "camera" and data.camera_channels:
        channels = list(dict.fromkeys(data.camera_channels))

    created: List[Incident] = []
    with channel_locks(data.bus_id, channels), storage.transaction():
        if storage.get_bus(data.bus_id) is None:
            raise NotFound("bus", data.bus_id)

        for channel in channels:
            incident = storage.create_incident(
                bus_id=data.bus_id,
                equipment_type=data.equipment_type,
                incident_type=data.incident_type,
                camera_channel=channel,
                status="pending",
                description=data.description or None,
                reporter=data.reporter or None,
                resolution_notes=None,
                reported_at=reported_at,
                resolved_at=None,
            )
            apply_incident_created(storage, incident)
            created.append(incident)

    log.info(
        "reported %d incident(s) bus=%s equipment=%s type=%s channels=%s",
        len(created),
        data.bus_id,
        data.equipment_type,
        data.incident_type,
        [i.camera_channel for i in created],
    )
    return created


def update_incident_status(
    storage: Storage,
    incident_id: int,
    status: Optional[str] = None,
    resolution_notes: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
) -> Incident:
    """
    Change status and/or resolution notes.

    The first transition into 'resolved' stamps resolved_at and resets the
    camera channel; resolving again leaves resolved_at as it was.
    """
    if status is not None and status not in INCIDENT_STATUSES:
        raise ValidationFailure(
            [
                {
                    "type": "literal_error",
                    "loc": ["status"],
                    "msg": f"Input should be one of {', '.join(INCIDENT_STATUSES)}",
                    "input": status,
                }
            ]
        )

    # bus and channel never change after creation, so the slot is known up front
    target = storage.get_incident(incident_id)
    if target is None:
        raise NotFound("incident", incident_id)

    with channel_locks(target.bus_id, [target.camera_channel]), storage.transaction():
        current = storage.get_incident(incident_id)
        if current is None:
            raise NotFound("incident", incident_id)

        updates: Dict[str, Any] = {}
        if status is not None:
            updates["status"] = status
        if resolution_notes is not None:
            updates["resolution_notes"] = resolution_notes

        resolving = status == "resolved" and current.resolved_at is None
        if resolving:
            updates["resolved_at"] = now or utcnow()

        before = current.status
        updated = storage.update_incident(incident_id, **updates)
        if resolving:
            apply_incident_resolved(storage, updated)

    if before != updated.status:
        log.info("incident %s: %s -> %s", incident_id, before, updated.status)
    return updated
