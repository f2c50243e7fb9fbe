from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import Field
from sqlalchemy.orm import Session

from practice_api.db.session import get_db
from practice_api.models import Patient, Visit
from practice_api.routes.common import (
    DocumentPayload,
    TrimmedStr,
    UtcDatetime,
    bind_resource,
    get_or_404,
    persistence_errors,
)
from practice_api.services import (
    as_reference_ids,
    create_document,
    delete_document,
    list_documents,
    resolve_references,
    serialize_patient,
    update_document,
)

RESOURCE = "patient"

logger = logging.getLogger(__name__)

router = APIRouter(tags=[RESOURCE], dependencies=[Depends(bind_resource(RESOURCE))])


class PatientCreate(DocumentPayload):
    first_name: TrimmedStr
    last_name: TrimmedStr
    address: TrimmedStr
    date_of_birth: UtcDatetime | None = None
    visits: list[UUID] = Field(default_factory=list)


class PatientUpdate(DocumentPayload):
    first_name: TrimmedStr | None = None
    last_name: TrimmedStr | None = None
    address: TrimmedStr | None = None
    date_of_birth: UtcDatetime | None = None
    visits: list[UUID] | None = None


@router.get("")
def list_patients(db: Session = Depends(get_db)) -> list[dict[str, Any]]:
    """Return every patient; visits stay as ids."""

    with persistence_errors(db, resource=RESOURCE, operation="GET"):
        return [serialize_patient(patient) for patient in list_documents(db, Patient)]


@router.post("", status_code=status.HTTP_200_OK)
def create_patient(
    payload: PatientCreate,
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Register a new patient."""

    values = payload.model_dump(exclude_none=True)
    values["visits"] = as_reference_ids(payload.visits)

    with persistence_errors(
        db,
        resource=RESOURCE,
        operation="POST",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
    ):
        patient = create_document(db, Patient, values)
        body = serialize_patient(patient)
        db.commit()

    logger.info("patient created", extra={"document_id": body["_id"]})
    return body


@router.get("/{patient_id}")
def get_patient(patient_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    """Return a patient with its visits expanded one level."""

    with persistence_errors(db, resource=RESOURCE, operation="GET"):
        patient = get_or_404(db, Patient, patient_id, resource=RESOURCE, operation="GET")
        visits = resolve_references(db, Visit, patient.visits)
        return serialize_patient(patient, visits=visits)


@router.put("/{patient_id}")
def update_patient(
    patient_id: str,
    payload: PatientUpdate,
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Merge the given fields into a patient."""

    values = payload.model_dump(exclude_unset=True, exclude_none=True)
    if payload.visits is not None:
        values["visits"] = as_reference_ids(payload.visits)

    with persistence_errors(db, resource=RESOURCE, operation="PUT"):
        patient = get_or_404(db, Patient, patient_id, resource=RESOURCE, operation="PUT")
        update_document(db, patient, values)
        body = serialize_patient(patient)
        db.commit()

    return body


@router.delete("/{patient_id}")
def delete_patient(patient_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    """Delete a patient. Visits referencing it are kept."""

    with persistence_errors(db, resource=RESOURCE, operation="DELETE"):
        patient = get_or_404(
            db, Patient, patient_id, resource=RESOURCE, operation="DELETE"
        )
        body = serialize_patient(patient)
        delete_document(db, patient)
        db.commit()

    logger.info("patient deleted", extra={"document_id": body["_id"]})
    return body
