import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("CREATE_SCHEMA", "false")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from practice_api.db.base import Base, init_db  # noqa: E402
from practice_api.db.session import get_db  # noqa: E402
from practice_api.main import app  # noqa: E402


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def create_patient(client):
    def _create(**overrides):
        payload = {"firstName": "John", "lastName": "Doe", "address": "Homestead 120"}
        payload.update(overrides)
        response = client.post("/api/patient", json=payload)
        assert response.status_code == 200, response.text
        return response.json()

    return _create


@pytest.fixture()
def create_medication(client):
    def _create(**overrides):
        payload = {"name": "Ibuprofen", "dose": "120mg", "packageSize": "10 tablets"}
        payload.update(overrides)
        response = client.post("/api/medication", json=payload)
        assert response.status_code == 200, response.text
        return response.json()

    return _create


@pytest.fixture()
def create_visit(client):
    def _create(patient_id, **overrides):
        payload = {
            "reasonOfVisit": "Headaches, unable to sleep",
            "consult": "Take more sleep, using prescribed pills",
            "patient": patient_id,
        }
        payload.update(overrides)
        response = client.post("/api/visit", json=payload)
        assert response.status_code == 200, response.text
        return response.json()

    return _create
