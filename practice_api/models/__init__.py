"""SQLAlchemy models for the practice records API."""

from practice_api.models.medication import Medication
from practice_api.models.patient import Patient
from practice_api.models.visit import Visit

__all__ = [
    "Medication",
    "Patient",
    "Visit",
]
