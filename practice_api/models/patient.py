from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from practice_api.models.base import Base, DocumentMixin, TimestampMixin, utcnow


class Patient(Base, DocumentMixin, TimestampMixin):
    """Patient record holding the ids of its visits."""

    __tablename__ = "patients"

    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(String(512), nullable=False)
    date_of_birth: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    # Visit ids in the order they were given; not a foreign key.
    visits: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
