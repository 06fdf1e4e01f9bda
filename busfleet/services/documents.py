# busfleet/services/documents.py
from __future__ import annotations

from busfleet.core.errors import NotFound
from busfleet.core.timeutils import to_naive_utc
from busfleet.models import BusDocument
from busfleet.schemas.document import DocumentCreate
from busfleet.storage.base import Storage


def register_document(storage: Storage, bus_id: int, payload: DocumentCreate) -> BusDocument:
    with storage.transaction():
        if storage.get_bus(bus_id) is None:
            raise NotFound("bus", bus_id)
        if payload.driver_id and storage.get_driver(payload.driver_id) is None:
            raise NotFound("driver", payload.driver_id)

        return storage.create_document(
            bus_id=bus_id,
            driver_id=payload.driver_id,
            doc_type=payload.doc_type,
            file_name=payload.file_name,
            file_path=payload.file_path,
            notes=payload.notes,
            expires_at=to_naive_utc(payload.expires_at),
        )


def delete_document(storage: Storage, document_id: int) -> None:
    with storage.transaction():
        if not storage.delete_document(document_id):
            raise NotFound("document", document_id)
