"""Persistence helpers shared by the patient, visit and medication routers."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timezone
from typing import Any, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from practice_api.models import Medication, Patient, Visit
from practice_api.models.base import Base, utcnow

DocumentT = TypeVar("DocumentT", bound=Base)


def ensure_utc(value: datetime) -> datetime:
    """Coerce a datetime into UTC timezone-aware form."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _isoformat(value: datetime | None) -> str | None:
    if value is None:
        return None
    return ensure_utc(value).isoformat().replace("+00:00", "Z")


def parse_document_id(raw_id: str | UUID) -> UUID | None:
    """Return the identifier as a UUID, or None when it is not well formed."""

    if isinstance(raw_id, UUID):
        return raw_id
    try:
        return UUID(str(raw_id))
    except (TypeError, ValueError):
        return None


def as_reference_ids(ids: Iterable[UUID | str]) -> list[str]:
    """Normalize referenced identifiers to the strings stored in list columns."""

    return [str(value) for value in ids]


def list_documents(db: Session, model: type[DocumentT]) -> Sequence[DocumentT]:
    """Return every record of ``model`` in creation order."""

    stmt = select(model).order_by(model.created_at)
    return db.execute(stmt).scalars().all()


def load_document(
    db: Session, model: type[DocumentT], raw_id: str | UUID
) -> DocumentT | None:
    """Fetch a record by id, treating a malformed id the same as a missing one."""

    document_id = parse_document_id(raw_id)
    if document_id is None:
        return None
    return db.get(model, document_id)


def create_document(
    db: Session, model: type[DocumentT], values: Mapping[str, Any]
) -> DocumentT:
    """Insert a new record; id and timestamps are assigned here, never by the caller."""

    document = model(**values)
    db.add(document)
    db.flush()
    return document


def update_document(
    db: Session, document: DocumentT, values: Mapping[str, Any]
) -> DocumentT:
    """Merge ``values`` into the record, leaving other fields untouched."""

    for field, value in values.items():
        setattr(document, field, value)
    document.updated_at = utcnow()
    db.flush()
    return document


def delete_document(db: Session, document: DocumentT) -> DocumentT:
    """Hard delete the record. References held by other records are left dangling."""

    db.delete(document)
    db.flush()
    return document


def resolve_references(
    db: Session, model: type[DocumentT], ids: Sequence[str]
) -> list[DocumentT]:
    """Load the records behind a list of references.

    The result follows the order of ``ids``; references that are malformed or
    point to records that no longer exist are dropped.
    """

    parsed = [parse_document_id(value) for value in ids]
    wanted = {value for value in parsed if value is not None}
    if not wanted:
        return []

    stmt = select(model).where(model.id.in_(list(wanted)))
    found = {document.id: document for document in db.execute(stmt).scalars()}
    return [found[value] for value in parsed if value in found]


def _timestamps(document: Base) -> dict[str, str | None]:
    return {
        "createdAt": _isoformat(document.created_at),
        "updatedAt": _isoformat(document.updated_at),
    }


def serialize_medication(medication: Medication) -> dict[str, Any]:
    """Return a JSON-friendly representation of a medication."""

    return {
        "_id": str(medication.id),
        "name": medication.name,
        "dose": medication.dose,
        "packageSize": medication.package_size,
        **_timestamps(medication),
    }


def serialize_visit(
    visit: Visit, *, medications: Sequence[Medication] | None = None
) -> dict[str, Any]:
    """Return a JSON-friendly representation of a visit.

    When ``medications`` is given, it replaces the prescribed medication ids.
    """

    prescribed: list[Any]
    if medications is None:
        prescribed = list(visit.prescribed_medication or [])
    else:
        prescribed = [serialize_medication(medication) for medication in medications]

    return {
        "_id": str(visit.id),
        "reasonOfVisit": visit.reason_of_visit,
        "consult": visit.consult,
        "dateOfVisit": _isoformat(visit.date_of_visit),
        "patient": str(visit.patient_id),
        "prescribedMedication": prescribed,
        **_timestamps(visit),
    }


def serialize_patient(
    patient: Patient, *, visits: Sequence[Visit] | None = None
) -> dict[str, Any]:
    """Return a JSON-friendly representation of a patient.

    When ``visits`` is given, it replaces the visit ids. The visits themselves
    are not expanded any further.
    """

    visit_values: list[Any]
    if visits is None:
        visit_values = list(patient.visits or [])
    else:
        visit_values = [serialize_visit(visit) for visit in visits]

    return {
        "_id": str(patient.id),
        "firstName": patient.first_name,
        "lastName": patient.last_name,
        "address": patient.address,
        "dateOfBirth": _isoformat(patient.date_of_birth),
        "visits": visit_values,
        **_timestamps(patient),
    }
