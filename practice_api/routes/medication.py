from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from practice_api.db.session import get_db
from practice_api.models import Medication
from practice_api.routes.common import (
    DocumentPayload,
    RequiredStr,
    TrimmedStr,
    bind_resource,
    get_or_404,
    persistence_errors,
)
from practice_api.services import (
    create_document,
    delete_document,
    list_documents,
    serialize_medication,
    update_document,
)

RESOURCE = "medication"

logger = logging.getLogger(__name__)

router = APIRouter(tags=[RESOURCE], dependencies=[Depends(bind_resource(RESOURCE))])


class MedicationCreate(DocumentPayload):
    name: TrimmedStr
    dose: RequiredStr
    package_size: TrimmedStr


class MedicationUpdate(DocumentPayload):
    name: TrimmedStr | None = None
    dose: RequiredStr | None = None
    package_size: TrimmedStr | None = None


@router.get("")
def list_medications(db: Session = Depends(get_db)) -> list[dict[str, Any]]:
    """Return every medication."""

    with persistence_errors(db, resource=RESOURCE, operation="GET"):
        return [
            serialize_medication(medication)
            for medication in list_documents(db, Medication)
        ]


@router.post("", status_code=status.HTTP_200_OK)
def create_medication(
    payload: MedicationCreate,
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Add a medication to the catalogue."""

    with persistence_errors(
        db,
        resource=RESOURCE,
        operation="POST",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
    ):
        medication = create_document(db, Medication, payload.model_dump())
        body = serialize_medication(medication)
        db.commit()

    logger.info("medication created", extra={"document_id": body["_id"]})
    return body


@router.get("/{medication_id}")
def get_medication(medication_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    with persistence_errors(db, resource=RESOURCE, operation="GET"):
        medication = get_or_404(
            db, Medication, medication_id, resource=RESOURCE, operation="GET"
        )
        return serialize_medication(medication)


@router.put("/{medication_id}")
def update_medication(
    medication_id: str,
    payload: MedicationUpdate,
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    values = payload.model_dump(exclude_unset=True, exclude_none=True)

    with persistence_errors(db, resource=RESOURCE, operation="PUT"):
        medication = get_or_404(
            db, Medication, medication_id, resource=RESOURCE, operation="PUT"
        )
        update_document(db, medication, values)
        body = serialize_medication(medication)
        db.commit()

    return body


@router.delete("/{medication_id}")
def delete_medication(
    medication_id: str, db: Session = Depends(get_db)
) -> dict[str, Any]:
    """Delete a medication. Visits prescribing it keep the dangling id."""

    with persistence_errors(db, resource=RESOURCE, operation="DELETE"):
        medication = get_or_404(
            db, Medication, medication_id, resource=RESOURCE, operation="DELETE"
        )
        body = serialize_medication(medication)
        delete_document(db, medication)
        db.commit()

    logger.info("medication deleted", extra={"document_id": body["_id"]})
    return body
