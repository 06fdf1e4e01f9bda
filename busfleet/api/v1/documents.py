# busfleet/api/v1/documents.py
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from busfleet.api.deps import get_storage
from busfleet.schemas.document import DocumentCreate, DocumentOut
from busfleet.services.documents import delete_document, register_document
from busfleet.storage.base import Storage

router = APIRouter(tags=["documents"])


@router.get("/buses/{bus_id}/documents", response_model=List[DocumentOut])
def list_bus_documents(bus_id: int, storage: Storage = Depends(get_storage)):
    if storage.get_bus(bus_id) is None:
        raise HTTPException(status_code=404, detail="Bus not found")
    return storage.list_documents(bus_id)


@router.post(
    "/buses/{bus_id}/documents",
    response_model=DocumentOut,
    status_code=status.HTTP_201_CREATED,
)
def create_bus_document(
    bus_id: int, payload: DocumentCreate, storage: Storage = Depends(get_storage)
):
    """Register metadata for a file already placed in document storage."""
    return register_document(storage, bus_id, payload)


@router.delete("/documents/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_document(document_id: int, storage: Storage = Depends(get_storage)) -> Response:
    delete_document(storage, document_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
