"""Error mapping and request plumbing shared by the resource routers."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import HTTPException, Request, status
from pydantic import AfterValidator, BaseModel, ConfigDict, StringConstraints
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from practice_api.logging_utils import set_resource_context
from practice_api.services.documents import DocumentT, ensure_utc, load_document

logger = logging.getLogger(__name__)

# Required strings must be non-empty; trimmed ones are stripped first.
RequiredStr = Annotated[str, StringConstraints(min_length=1)]
TrimmedStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
# Offsets are converted and naive values read as UTC before anything is stored.
UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]


class DocumentPayload(BaseModel):
    """Request body accepting the camelCase field names of the JSON documents."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def bind_resource(resource: str) -> Callable[[Request], Awaitable[None]]:
    """Build a router dependency tagging the request and log context with ``resource``."""

    async def _bind(request: Request) -> None:
        request.state.resource = resource
        set_resource_context(resource)

    return _bind


def get_or_404(
    db: Session,
    model: type[DocumentT],
    document_id: str | UUID,
    *,
    resource: str,
    operation: str,
) -> DocumentT:
    """Return the record or raise a 404, also for ids that are not well formed."""

    document = load_document(db, model, document_id)
    if document is None:
        logger.info(
            "document not found",
            extra={
                "resource": resource,
                "operation": operation,
                "document_id": str(document_id),
            },
        )
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource.capitalize()} not found",
        )
    return document


@contextmanager
def persistence_errors(
    db: Session,
    *,
    resource: str,
    operation: str,
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
) -> Iterator[None]:
    """Roll back and translate database errors into an HTTP error response."""

    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(
            "persistence failure",
            extra={"resource": resource, "operation": operation},
        )
        detail = (
            "Unprocessable entity"
            if status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
            else "Internal server error"
        )
        raise HTTPException(status_code=status_code, detail=detail) from exc
