import uuid
from fastapi.testclient import TestClient

JSONAPI = "application/vnd.api+json"


def test_create_model_json(client: TestClient, requester_id):
    response = client.post("/api/v1/models", json={"id": "m-1", "name": "widget", "tags": "red::green"})

    assert response.status_code == 201
    assert response.headers["content-type"] == "application/json"
    assert response.json() == {"id": "m-1", "name": "widget", "tags": ["red", "green"], "owner_id": requester_id}


def test_create_model_generates_id(client: TestClient):
    response = client.post("/api/v1/models", json={"name": "widget"})

    assert response.status_code == 201
    uuid.UUID(response.json()["id"])
    assert response.json()["tags"] == []


def test_create_model_duplicate_is_409(client: TestClient):
    assert client.post("/api/v1/models", json={"id": "dup", "name": "a"}).status_code == 201

    response = client.post("/api/v1/models", json={"id": "dup", "name": "b"})
    assert response.status_code == 409
    assert response.text == "Model dup already exists"


def test_create_model_validation(client: TestClient):
    response = client.post("/api/v1/models", json={"id": "m-2"})
    assert response.status_code == 400
    assert response.text == "name is required"

    response = client.post("/api/v1/models", json={"name": "x; DROP TABLE model"})
    assert response.status_code == 400


def test_create_model_rejects_unknown_fields(client: TestClient):
    response = client.post("/api/v1/models", json={"name": "widget", "colour": "blue"})
    assert response.status_code == 400


def test_create_model_negotiated_jsonapi(client: TestClient, requester_id):
    body = '{"data": {"type": "models", "id": "m-3", "attributes": {"name": "gadget", "tags": "a::b"}}}'
    response = client.post("/api/v1/models/negotiated", content=body, headers={"Content-Type": JSONAPI})

    assert response.status_code == 201
    assert response.headers["content-type"] == JSONAPI
    assert response.json() == {
        "data": {
            "type": "models",
            "id": "m-3",
            "attributes": {"name": "gadget", "tags": ["a", "b"], "owner_id": requester_id},
        }
    }


def test_create_model_negotiated_json(client: TestClient):
    response = client.post("/api/v1/models/negotiated", json={"id": "m-4", "name": "gizmo"})

    assert response.status_code == 201
    assert response.json()["name"] == "gizmo"


def test_create_model_negotiated_unsupported_type(client: TestClient):
    response = client.post("/api/v1/models/negotiated", content=b"name=gizmo",
                           headers={"Content-Type": "application/x-www-form-urlencoded"})

    assert response.status_code == 400
    assert response.text == "Content-Type header is not json or jsonapi standard"


def test_list_models_for_requester(client: TestClient, requester_id):
    client.post("/api/v1/models", json={"id": "l-1", "name": "one"})
    client.post("/api/v1/models", json={"id": "l-2", "name": "two"})
    client.post("/api/v1/models", json={"id": "l-3", "name": "other"}, headers={"X-Requester-Id": str(uuid.uuid4())})

    response = client.get("/api/v1/models")

    assert response.status_code == 200
    assert sorted(m["id"] for m in response.json()) == ["l-1", "l-2"]

    response = client.get("/api/v1/models", headers={"Accept": JSONAPI})
    assert response.headers["content-type"] == JSONAPI
    assert sorted(r["id"] for r in response.json()["data"]) == ["l-1", "l-2"]


def test_get_model(client: TestClient):
    client.post("/api/v1/models", json={"id": "g-1", "name": "found"})

    response = client.get("/api/v1/models/g-1")
    assert response.status_code == 200
    assert response.json()["name"] == "found"


def test_get_model_not_found(client: TestClient):
    response = client.get("/api/v1/models/missing")
    assert response.status_code == 404
    assert response.text == "Model not found"


def test_trace_id_echoed(client: TestClient):
    response = client.get("/api/v1/health", headers={"X-Request-Id": "trace-abc"})
    assert response.headers["X-Request-Id"] == "trace-abc"
