from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from practice_api.core.config import settings
from practice_api.db.base import init_db
from practice_api.db.session import SessionLocal, engine
from practice_api.logging_utils import configure_logging, set_resource_context
from practice_api.models import Medication, Patient, Visit
from practice_api.services import as_reference_ids

logger = logging.getLogger(__name__)

MEDICATIONS: list[tuple[str, str, str]] = [
    ("Ibuprofen", "120mg", "10 tablets"),
    ("Paracetamol", "500mg", "20 tablets"),
    ("Melatonin", "3mg", "30 tablets"),
]

PATIENTS: list[tuple[str, str, str, datetime]] = [
    ("John", "Doe", "Homestead 120", datetime(1990, 10, 2, 10, 40, 30, tzinfo=timezone.utc)),
    ("Sara", "McHue", "Homestead 125", datetime(1993, 1, 2, 11, 23, 0, tzinfo=timezone.utc)),
]

# (patient last name, reason, consult, prescribed medication names)
VISITS: list[tuple[str, str, str, tuple[str, ...]]] = [
    (
        "Doe",
        "Headaches, unable to sleep",
        "Take more sleep, using prescribed pills",
        ("Ibuprofen", "Melatonin"),
    ),
    (
        "McHue",
        "Pain in chest, difficult to breathe.",
        "Sent to hospital for more detailed checkup",
        (),
    ),
]


def ensure_medications(session: Session) -> dict[str, Medication]:
    set_resource_context("medication")
    created = 0
    medications: dict[str, Medication] = {}
    for name, dose, package_size in MEDICATIONS:
        medication = (
            session.execute(
                select(Medication).where(Medication.name == name)
            ).scalars().first()
        )
        if not medication:
            medication = Medication(name=name, dose=dose, package_size=package_size)
            session.add(medication)
            session.flush()
            created += 1
        medications[name] = medication

    logger.info(
        "ensured medications",
        extra={"created_count": created, "total": len(medications)},
    )
    return medications


def ensure_patients(session: Session) -> dict[str, Patient]:
    set_resource_context("patient")
    created = 0
    patients: dict[str, Patient] = {}
    for first_name, last_name, address, date_of_birth in PATIENTS:
        patient = (
            session.execute(
                select(Patient).where(
                    Patient.first_name == first_name,
                    Patient.last_name == last_name,
                )
            ).scalars().first()
        )
        if not patient:
            patient = Patient(
                first_name=first_name,
                last_name=last_name,
                address=address,
                date_of_birth=date_of_birth,
            )
            session.add(patient)
            session.flush()
            created += 1
        patients[last_name] = patient

    logger.info(
        "ensured patients",
        extra={"created_count": created, "total": len(patients)},
    )
    return patients


def ensure_visits(
    session: Session,
    patients: dict[str, Patient],
    medications: dict[str, Medication],
) -> list[Visit]:
    """Create the demo visits and list each one on its patient."""

    set_resource_context("visit")
    created = 0
    visits: list[Visit] = []
    for last_name, reason, consult, prescribed in VISITS:
        patient = patients[last_name]
        visit = (
            session.execute(
                select(Visit).where(
                    Visit.patient_id == patient.id,
                    Visit.reason_of_visit == reason,
                )
            ).scalars().first()
        )
        if not visit:
            visit = Visit(
                patient_id=patient.id,
                reason_of_visit=reason,
                consult=consult,
                prescribed_medication=as_reference_ids(
                    medications[name].id for name in prescribed
                ),
            )
            session.add(visit)
            session.flush()
            created += 1

        visit_id = str(visit.id)
        if visit_id not in (patient.visits or []):
            patient.visits = [*(patient.visits or []), visit_id]
        visits.append(visit)

    session.flush()
    logger.info("ensured visits", extra={"created_count": created, "total": len(visits)})
    return visits


def seed_records(session: Session) -> None:
    """Populate demo records; running it again adds nothing new."""

    medications = ensure_medications(session)
    patients = ensure_patients(session)
    ensure_visits(session, patients, medications)


def seed() -> None:
    configure_logging(settings.log_level.upper())
    logger.info("starting seed process")

    if settings.create_schema:
        init_db(engine)

    session = SessionLocal()
    try:
        seed_records(session)
        session.commit()
        logger.info("seed complete")
    except Exception:
        session.rollback()
        logger.exception("seed failed")
        raise
    finally:
        session.close()


if __name__ == "__main__":  # pragma: no cover - script entrypoint
    seed()
