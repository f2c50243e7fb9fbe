from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import Field
from sqlalchemy.orm import Session

from practice_api.db.session import get_db
from practice_api.models import Medication, Visit
from practice_api.routes.common import (
    DocumentPayload,
    RequiredStr,
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
    serialize_visit,
    update_document,
)

RESOURCE = "visit"

logger = logging.getLogger(__name__)

router = APIRouter(tags=[RESOURCE], dependencies=[Depends(bind_resource(RESOURCE))])


class VisitCreate(DocumentPayload):
    reason_of_visit: RequiredStr
    consult: RequiredStr
    patient_id: UUID = Field(alias="patient")
    date_of_visit: UtcDatetime | None = None
    prescribed_medication: list[UUID] = Field(default_factory=list)


class VisitUpdate(DocumentPayload):
    reason_of_visit: RequiredStr | None = None
    consult: RequiredStr | None = None
    patient_id: UUID | None = Field(default=None, alias="patient")
    date_of_visit: UtcDatetime | None = None
    prescribed_medication: list[UUID] | None = None


@router.get("")
def list_visits(db: Session = Depends(get_db)) -> list[dict[str, Any]]:
    """Return every visit; prescribed medication stays as ids."""

    with persistence_errors(db, resource=RESOURCE, operation="GET"):
        return [serialize_visit(visit) for visit in list_documents(db, Visit)]


@router.post("", status_code=status.HTTP_200_OK)
def create_visit(
    payload: VisitCreate,
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Record a visit.

    The referenced patient is neither checked nor updated: its ``visits``
    list only changes through a patient update.
    """

    values = payload.model_dump(exclude_none=True)
    values["prescribed_medication"] = as_reference_ids(payload.prescribed_medication)

    with persistence_errors(
        db,
        resource=RESOURCE,
        operation="POST",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
    ):
        visit = create_document(db, Visit, values)
        body = serialize_visit(visit)
        db.commit()

    logger.info(
        "visit created",
        extra={"document_id": body["_id"], "patient_id": body["patient"]},
    )
    return body


@router.get("/{visit_id}")
def get_visit(visit_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    """Return a visit with its prescribed medication expanded."""

    with persistence_errors(db, resource=RESOURCE, operation="GET"):
        visit = get_or_404(db, Visit, visit_id, resource=RESOURCE, operation="GET")
        medications = resolve_references(db, Medication, visit.prescribed_medication)
        return serialize_visit(visit, medications=medications)


@router.put("/{visit_id}")
def update_visit(
    visit_id: str,
    payload: VisitUpdate,
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    values = payload.model_dump(exclude_unset=True, exclude_none=True)
    if payload.prescribed_medication is not None:
        values["prescribed_medication"] = as_reference_ids(
            payload.prescribed_medication
        )

    with persistence_errors(db, resource=RESOURCE, operation="PUT"):
        visit = get_or_404(db, Visit, visit_id, resource=RESOURCE, operation="PUT")
        update_document(db, visit, values)
        body = serialize_visit(visit)
        db.commit()

    return body


@router.delete("/{visit_id}")
def delete_visit(visit_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    with persistence_errors(db, resource=RESOURCE, operation="DELETE"):
        visit = get_or_404(db, Visit, visit_id, resource=RESOURCE, operation="DELETE")
        body = serialize_visit(visit)
        delete_document(db, visit)
        db.commit()

    logger.info("visit deleted", extra={"document_id": body["_id"]})
    return body
