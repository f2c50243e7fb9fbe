from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from practice_api.models.base import Base, DocumentMixin, TimestampMixin


class Medication(Base, DocumentMixin, TimestampMixin):
    """Medication that can be prescribed during a visit."""

    __tablename__ = "medications"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    dose: Mapped[str] = mapped_column(String(255), nullable=False)
    package_size: Mapped[str] = mapped_column(String(255), nullable=False)
