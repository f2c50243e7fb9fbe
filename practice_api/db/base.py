"""Import SQLAlchemy models so ``Base.metadata`` knows every table."""

from sqlalchemy.engine import Engine

from practice_api.models.base import Base
from practice_api.models import Medication, Patient, Visit  # noqa: F401


def init_db(bind: Engine) -> None:
    """Create any missing tables on the given engine."""

    Base.metadata.create_all(bind=bind)


__all__ = [
    "Base",
    "Medication",
    "Patient",
    "Visit",
    "init_db",
]
