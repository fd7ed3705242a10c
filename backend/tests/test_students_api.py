import uuid
from collections.abc import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from students_api.config import Settings
from students_api.errors import StorageError
from students_api.main import create_app
from students_api.routes.students import get_student_repository
from tests.factories import make_payload


def _create(client: TestClient, **fields) -> dict:
    resp = client.post("/Students", json=make_payload(**fields))
    assert resp.status_code == 201
    return resp.json()


def test_list_empty(client: TestClient) -> None:
    resp = client.get("/Students")
    assert resp.status_code == 200
    assert resp.json() == []


def test_create_returns_generated_id_and_location(client: TestClient) -> None:
    resp = client.post("/Students", json=make_payload())
    assert resp.status_code == 201

    body = resp.json()
    assert uuid.UUID(body["id"])
    assert body["firstName"] == "Ada"
    assert body["lastName"] == "Lovelace"
    assert body["program"] == "Computer Science"
    assert resp.headers["location"].endswith(f"/Students/{body['id']}")


def test_created_student_resolves_by_id(client: TestClient) -> None:
    created = _create(client, first_name="Alan", last_name="Turing", program=None)

    resp = client.get(f"/Students/{created['id']}")
    assert resp.status_code == 200
    assert resp.json() == {
        "id": created["id"],
        "firstName": "Alan",
        "lastName": "Turing",
        "program": None,
    }


def test_create_generates_unique_ids(client: TestClient) -> None:
    first = _create(client)
    second = _create(client)
    assert first["id"] != second["id"]


def test_create_accepts_camel_case_and_missing_program(client: TestClient) -> None:
    resp = client.post("/Students", json={"firstName": "Grace", "lastName": "Hopper"})
    assert resp.status_code == 201
    assert resp.json()["program"] is None


@pytest.mark.parametrize(
    "payload",
    [
        {"firstname": "Grace", "LASTNAME": "Hopper", "program": "Navy"},
        {"first_name": "Grace", "last_name": "Hopper", "Program": "Navy"},
        {"FIRSTNAME": "Grace", "LastName": "Hopper", "PROGRAM": "Navy", "Unknown": 1},
    ],
)
def test_create_matches_field_names_case_insensitively(client: TestClient, payload: dict) -> None:
    resp = client.post("/Students", json=payload)
    assert resp.status_code == 201
    body = resp.json()
    assert (body["firstName"], body["lastName"], body["program"]) == ("Grace", "Hopper", "Navy")


@pytest.mark.parametrize(
    "payload",
    [
        {"LastName": "Lovelace", "Program": "CS"},
        {"FirstName": "Ada", "Program": "CS"},
        {"FirstName": "", "LastName": "Lovelace"},
        {"FirstName": "Ada", "LastName": "   "},
        {"FirstName": None, "LastName": "Lovelace"},
        {},
    ],
)
def test_create_missing_required_field_is_rejected(client: TestClient, payload: dict) -> None:
    resp = client.post("/Students", json=payload)
    assert resp.status_code == 400
    assert "detail" in resp.json()
    assert client.get("/Students").json() == []


def test_create_malformed_json_is_rejected(client: TestClient) -> None:
    resp = client.post(
        "/Students",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400


def test_list_returns_all_created(client: TestClient) -> None:
    ids = {_create(client, first_name=f"Student{i}")["id"] for i in range(5)}

    resp = client.get("/Students")
    assert resp.status_code == 200
    assert {s["id"] for s in resp.json()} == ids


def test_get_unknown_id_returns_null(client: TestClient) -> None:
    resp = client.get(f"/Students/{uuid.uuid4()}")
    assert resp.status_code == 200
    assert resp.json() is None


def test_get_malformed_id_is_rejected(client: TestClient) -> None:
    resp = client.get("/Students/not-a-uuid")
    assert resp.status_code == 400


def test_update_overwrites_all_fields(client: TestClient) -> None:
    created = _create(client)

    resp = client.put(
        f"/Students/{created['id']}",
        json={"FirstName": "Augusta", "LastName": "King"},
    )
    assert resp.status_code == 200
    assert resp.json() == {
        "id": created["id"],
        "firstName": "Augusta",
        "lastName": "King",
        "program": None,
    }

    fetched = client.get(f"/Students/{created['id']}").json()
    assert fetched["firstName"] == "Augusta"
    assert fetched["lastName"] == "King"
    assert fetched["program"] is None


def test_update_malformed_id_is_rejected(client: TestClient) -> None:
    existing = _create(client)

    resp = client.put("/Students/not-a-uuid", json=make_payload(first_name="Changed"))
    assert resp.status_code == 400
    assert client.get("/Students").json() == [existing]


def test_update_missing_required_field_is_rejected(client: TestClient) -> None:
    created = _create(client)

    resp = client.put(f"/Students/{created['id']}", json={"FirstName": "Only"})
    assert resp.status_code == 400
    assert client.get(f"/Students/{created['id']}").json() == created


def test_update_unknown_id_returns_404_and_leaves_others(client: TestClient) -> None:
    existing = _create(client)

    resp = client.put(f"/Students/{uuid.uuid4()}", json=make_payload(first_name="Ghost"))
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Student not found"}
    assert client.get("/Students").json() == [existing]


def test_delete_removes_student(client: TestClient) -> None:
    created = _create(client)
    other = _create(client, first_name="Alan", last_name="Turing")

    resp = client.delete(f"/Students/{created['id']}")
    assert resp.status_code == 202
    assert resp.content == b""

    assert client.get(f"/Students/{created['id']}").json() is None
    assert client.get("/Students").json() == [other]


def test_delete_unknown_id_returns_404_and_leaves_others(client: TestClient) -> None:
    existing = _create(client)

    resp = client.delete(f"/Students/{uuid.uuid4()}")
    assert resp.status_code == 404
    assert client.get("/Students").json() == [existing]


def test_delete_malformed_id_is_rejected(client: TestClient) -> None:
    resp = client.delete("/Students/12345")
    assert resp.status_code == 400


def test_responses_carry_request_id(client: TestClient) -> None:
    first = client.get("/Students")
    second = client.get("/Students")
    assert first.headers["x-request-id"]
    assert first.headers["x-request-id"] != second.headers["x-request-id"]


def test_health_and_root(client: TestClient) -> None:
    assert client.get("/health").json()["status"] == "healthy"
    assert client.get("/").json()["endpoints"]["list"] == "GET /Students"


def test_openapi_documents_status_codes(client: TestClient) -> None:
    paths = client.get("/openapi.json").json()["paths"]

    assert {"400", "500"} <= set(paths["/Students"]["post"]["responses"])
    assert {"201", "404"} <= set(paths["/Students/{student_id}"]["put"]["responses"])
    assert {"202", "404"} <= set(paths["/Students/{student_id}"]["delete"]["responses"])
    assert "500" in paths["/Students"]["get"]["responses"]


# ── Upsert mode ──────────────────────────────────────────────

@pytest.fixture
def upsert_client() -> Generator[TestClient]:
    app = create_app(Settings(database_url="sqlite://", log_level="WARNING", put_upsert=True))
    with TestClient(app) as test_client:
        yield test_client


def test_upsert_creates_unknown_id(upsert_client: TestClient) -> None:
    student_id = str(uuid.uuid4())

    resp = upsert_client.put(f"/Students/{student_id}", json=make_payload(program="Physics"))
    assert resp.status_code == 201
    assert resp.json()["id"] == student_id
    assert resp.headers["location"].endswith(f"/Students/{student_id}")

    fetched = upsert_client.get(f"/Students/{student_id}").json()
    assert fetched["program"] == "Physics"


def test_upsert_updates_existing_id(upsert_client: TestClient) -> None:
    created = upsert_client.post("/Students", json=make_payload()).json()

    resp = upsert_client.put(f"/Students/{created['id']}", json=make_payload(program="Physics"))
    assert resp.status_code == 200
    assert resp.json()["program"] == "Physics"
    assert len(upsert_client.get("/Students").json()) == 1


# ── Storage failures ─────────────────────────────────────────

class FailingRepository:
    def _fail(self, *args, **kwargs):
        raise StorageError("test", RuntimeError("database unavailable"))

    list = get_by_id = add = update = remove = commit = refresh = _fail


@pytest.fixture
def failing_client(app: FastAPI) -> Generator[TestClient]:
    app.dependency_overrides[get_student_repository] = FailingRepository
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.mark.parametrize(
    ("method", "path", "body"),
    [
        ("GET", "/Students", None),
        ("GET", f"/Students/{uuid.uuid4()}", None),
        ("POST", "/Students", make_payload()),
        ("PUT", f"/Students/{uuid.uuid4()}", make_payload()),
        ("DELETE", f"/Students/{uuid.uuid4()}", None),
    ],
)
def test_storage_failure_returns_500(failing_client: TestClient, method: str, path: str,
                                     body: dict | None) -> None:
    resp = failing_client.request(method, path, json=body)
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Internal error"}


def test_missing_table_returns_500() -> None:
    app = create_app(Settings(database_url="sqlite://", log_level="WARNING", create_tables=False))
    with TestClient(app) as test_client:
        resp = test_client.get("/Students")
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Internal error"}
