"""Service layer utilities for the practice records API."""

from practice_api.services.documents import (
    as_reference_ids,
    create_document,
    delete_document,
    list_documents,
    load_document,
    parse_document_id,
    resolve_references,
    serialize_medication,
    serialize_patient,
    serialize_visit,
    update_document,
)

__all__ = [
    "as_reference_ids",
    "create_document",
    "delete_document",
    "list_documents",
    "load_document",
    "parse_document_id",
    "resolve_references",
    "serialize_medication",
    "serialize_patient",
    "serialize_visit",
    "update_document",
]
