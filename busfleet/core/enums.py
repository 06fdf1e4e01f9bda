from typing import Dict, Tuple

INCIDENT_STATUSES: Tuple[str, ...] = ("pending", "in_progress", "resolved")

CAMERA_CHANNELS: Tuple[str, ...] = ("ch1", "ch2", "ch3", "ch4")
CAMERA_CHANNEL_LABELS: Dict[str, str] = {
    "ch1": "Frontal",
    "ch2": "Puerta",
    "ch3": "Camello",
    "ch4": "Pasajeros",
}

DOC_TYPE_LABELS: Dict[str, str] = {
    "permiso_circulacion": "Permiso de Circulación",
    "revision_tecnica": "Revisión Técnica",
    "chasis": "Información de Chasis",
    "licencia_conducir": "Licencia de Conducir",
    "cedula_conductor": "Cédula del Conductor",
}

# Days before expiry at which a document starts alerting.
# Types not listed here never alert.
DOC_ALERT_DAYS: Dict[str, int] = {
    "revision_tecnica": 5,
    "licencia_conducir": 30,
    "cedula_conductor": 30,
}
