from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from practice_api.models.base import Base, DocumentMixin, TimestampMixin, utcnow


class Visit(Base, DocumentMixin, TimestampMixin):
    """A consultation of one patient, with the medication prescribed during it."""

    __tablename__ = "visits"

    reason_of_visit: Mapped[str] = mapped_column(Text, nullable=False)
    consult: Mapped[str] = mapped_column(Text, nullable=False)
    date_of_visit: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    patient_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    prescribed_medication: Mapped[list[str]] = mapped_column(
        JSON, default=list, nullable=False
    )
