from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlalchemy.exc import OperationalError

from practice_api.routes import medication as medication_routes
from practice_api.services import documents


def test_create_medication_assigns_id_and_timestamps(client):
    response = client.post(
        "/api/medication",
        json={"name": "  Ibuprofen ", "dose": "120mg", "packageSize": " 10 tablets "},
    )

    assert response.status_code == 200
    body = response.json()
    assert UUID(body["_id"])
    assert body["name"] == "Ibuprofen"
    assert body["dose"] == "120mg"
    assert body["packageSize"] == "10 tablets"
    assert body["createdAt"]
    assert body["updatedAt"]


def test_create_medication_without_name_is_rejected(client):
    response = client.post(
        "/api/medication", json={"dose": "120mg", "packageSize": "10 tablets"}
    )

    assert response.status_code == 422


def test_create_medication_with_blank_name_is_rejected(client):
    response = client.post(
        "/api/medication", json={"name": "   ", "dose": "120mg", "packageSize": "10"}
    )

    assert response.status_code == 422


def test_client_supplied_id_is_ignored(client):
    forced_id = str(uuid4())
    response = client.post(
        "/api/medication",
        json={"_id": forced_id, "name": "Ibuprofen", "dose": "1", "packageSize": "2"},
    )

    assert response.status_code == 200
    assert response.json()["_id"] != forced_id


def test_list_medications(client, create_medication):
    first = create_medication(name="Ibuprofen")
    second = create_medication(name="Paracetamol")

    response = client.get("/api/medication")

    assert response.status_code == 200
    assert [item["_id"] for item in response.json()] == [first["_id"], second["_id"]]


def test_list_medications_empty(client):
    response = client.get("/api/medication")

    assert response.status_code == 200
    assert response.json() == []


def test_get_medication(client, create_medication):
    created = create_medication()

    response = client.get(f"/api/medication/{created['_id']}")

    assert response.status_code == 200
    assert response.json() == created


def test_get_medication_malformed_id_is_not_found(client):
    response = client.get("/api/medication/59d8c84406b5eb5738f33f26")

    assert response.status_code == 404
    assert response.json() == {"detail": "Medication not found"}


def test_get_medication_unknown_id_is_not_found(client):
    response = client.get(f"/api/medication/{uuid4()}")

    assert response.status_code == 404


def test_update_medication_merges_fields(client, create_medication, monkeypatch):
    created = create_medication()
    later = datetime(2030, 1, 1, tzinfo=timezone.utc)
    monkeypatch.setattr(documents, "utcnow", lambda: later)

    response = client.put(f"/api/medication/{created['_id']}", json={"dose": "200mg"})

    assert response.status_code == 200
    body = response.json()
    assert body["dose"] == "200mg"
    assert body["name"] == created["name"]
    assert body["packageSize"] == created["packageSize"]
    assert body["createdAt"] == created["createdAt"]
    assert body["updatedAt"] == "2030-01-01T00:00:00Z"

    fetched = client.get(f"/api/medication/{created['_id']}").json()
    assert fetched["dose"] == "200mg"


def test_update_with_empty_body_refreshes_updated_at(client, create_medication, monkeypatch):
    created = create_medication()
    later = datetime(2031, 6, 1, 12, 0, tzinfo=timezone.utc)
    monkeypatch.setattr(documents, "utcnow", lambda: later)

    response = client.put(f"/api/medication/{created['_id']}", json={})

    assert response.status_code == 200
    assert response.json()["updatedAt"] == "2031-06-01T12:00:00Z"
    assert response.json()["name"] == created["name"]


def test_update_medication_unknown_id_is_not_found(client):
    assert client.put(f"/api/medication/{uuid4()}", json={"dose": "1"}).status_code == 404
    assert client.put("/api/medication/nope", json={"dose": "1"}).status_code == 404


def test_delete_medication_twice(client, create_medication):
    created = create_medication()

    first = client.delete(f"/api/medication/{created['_id']}")
    second = client.delete(f"/api/medication/{created['_id']}")

    assert first.status_code == 200
    assert first.json() == created
    assert second.status_code == 404
    assert client.get(f"/api/medication/{created['_id']}").status_code == 404


def test_persistence_failure_maps_to_server_error(client, monkeypatch, caplog):
    def broken(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is gone"))

    monkeypatch.setattr(medication_routes, "list_documents", broken)

    response = client.get("/api/medication")

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
    failures = [r for r in caplog.records if r.getMessage() == "persistence failure"]
    assert failures
    assert failures[0].resource == "medication"
    assert failures[0].operation == "GET"


def _raise_operational_error(*args, **kwargs):
    raise OperationalError("UPDATE medications", {}, Exception("database is gone"))


def _logged_failure(caplog):
    record = next(r for r in caplog.records if r.getMessage() == "persistence failure")
    return record.resource, record.operation


def test_update_failure_maps_to_server_error(client, create_medication, monkeypatch, caplog):
    created = create_medication()
    monkeypatch.setattr(medication_routes, "update_document", _raise_operational_error)

    response = client.put(f"/api/medication/{created['_id']}", json={"dose": "1g"})

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}
    assert _logged_failure(caplog) == ("medication", "PUT")


def test_delete_failure_maps_to_server_error(client, create_medication, monkeypatch, caplog):
    created = create_medication()
    monkeypatch.setattr(medication_routes, "delete_document", _raise_operational_error)

    response = client.delete(f"/api/medication/{created['_id']}")

    assert response.status_code == 500
    assert _logged_failure(caplog) == ("medication", "DELETE")
    assert client.get(f"/api/medication/{created['_id']}").status_code == 200


def test_rejected_insert_is_unprocessable(client, monkeypatch, caplog):
    monkeypatch.setattr(medication_routes, "create_document", _raise_operational_error)

    response = client.post(
        "/api/medication", json={"name": "Ibuprofen", "dose": "1", "packageSize": "2"}
    )

    assert response.status_code == 422
    assert response.json() == {"detail": "Unprocessable entity"}
    assert _logged_failure(caplog) == ("medication", "POST")
