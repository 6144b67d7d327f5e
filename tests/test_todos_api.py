from fastapi.testclient import TestClient
from fakes import AIRTABLE_SETTINGS, FakeAirtable, make_settings

from todo_providers.db import InMemoryKeyValueStore
from todo_providers.main import app, create_app
from todo_providers.providers import AirtableProvider, LocalStorageProvider
from todo_providers.settings import Settings

client = TestClient(app)


def fresh_client(**settings_overrides):
    settings = make_settings(**settings_overrides)
    provider = LocalStorageProvider(InMemoryKeyValueStore())
    return TestClient(create_app(settings, provider=provider))


def create_todo_payload(title="Test Task", description="Do something", status=None):
    payload = {"title": title, "description": description}
    if status is not None:
        payload["status"] = status
    return payload


def assert_todo_shape(todo: dict):
    for key in ["id", "title", "status", "user_id", "created_at", "updated_at"]:
        assert key in todo
    assert "description" in todo
    assert isinstance(todo["id"], str) and todo["id"]
    assert isinstance(todo["title"], str)
    assert todo["status"] in ("pending", "completed")


class TestHealth:
    def test_health_check(self):
        res = client.get("/")
        assert res.status_code == 200
        data = res.json()
        assert data["message"] == "Healthy"
        assert data["backend"] == "local"


class TestTodosCRUD:
    def test_create_todo_minimal(self):
        res = client.post("/api/v1/todos/", json={"title": "Buy milk"})
        assert res.status_code == 201
        todo = res.json()
        assert_todo_shape(todo)
        assert todo["title"] == "Buy milk"
        assert todo["description"] is None
        assert todo["status"] == "pending"
        assert todo["user_id"] == ""

    def test_create_uses_user_header(self):
        res = client.post("/api/v1/todos/", json={"title": "Mine"}, headers={"X-User-Id": "u1"})
        assert res.status_code == 201
        assert res.json()["user_id"] == "u1"

    def test_list_contains_created(self):
        api = fresh_client()
        created = api.post("/api/v1/todos/", json=create_todo_payload(title="Read book")).json()
        second = api.post("/api/v1/todos/", json=create_todo_payload(title="Walk dog")).json()

        res = api.get("/api/v1/todos/")
        assert res.status_code == 200
        data = res.json()
        assert data["total"] == 2
        assert [t["id"] for t in data["items"]] == [second["id"], created["id"]]

    def test_put_replace_todo(self):
        api = fresh_client()
        tid = api.post("/api/v1/todos/", json=create_todo_payload(title="Initial", description="A", status="completed")).json()["id"]

        res_put = api.put(f"/api/v1/todos/{tid}", json={"title": "Replaced"})
        assert res_put.status_code == 200
        updated = res_put.json()
        assert updated["id"] == tid
        assert updated["title"] == "Replaced"
        assert updated["description"] is None
        assert updated["status"] == "pending"

        res_put_nf = api.put("/api/v1/todos/424242", json={"title": "Nope"})
        assert res_put_nf.status_code == 404
        assert res_put_nf.json()["detail"] == "Todo 424242 not found"

    def test_patch_partial_update(self):
        api = fresh_client()
        tid = api.post("/api/v1/todos/", json=create_todo_payload(title="Partial", description="X")).json()["id"]

        res_patch = api.patch(f"/api/v1/todos/{tid}", json={"title": "Partial Updated", "status": "completed"})
        assert res_patch.status_code == 200
        patched = res_patch.json()
        assert patched["id"] == tid
        assert patched["title"] == "Partial Updated"
        assert patched["status"] == "completed"
        # description should remain unchanged
        assert patched["description"] == "X"

        res_clear = api.patch(f"/api/v1/todos/{tid}", json={"description": None})
        assert res_clear.json()["description"] is None
        assert res_clear.json()["title"] == "Partial Updated"

        res_patch_nf = api.patch("/api/v1/todos/123456", json={"title": "Nope"})
        assert res_patch_nf.status_code == 404

    def test_delete_todo(self):
        api = fresh_client()
        tid = api.post("/api/v1/todos/", json=create_todo_payload(title="ToDelete")).json()["id"]

        res_del = api.delete(f"/api/v1/todos/{tid}")
        assert res_del.status_code == 204
        assert res_del.text == ""

        assert tid not in [t["id"] for t in api.get("/api/v1/todos/").json()["items"]]
        res_del_again = api.delete(f"/api/v1/todos/{tid}")
        assert res_del_again.status_code == 404


class TestBackendErrors:
    def test_backend_failure_is_bad_gateway(self):
        fake = FakeAirtable()
        fake.fail_with = 429
        provider = AirtableProvider(
            AIRTABLE_SETTINGS["airtable_api_key"],
            AIRTABLE_SETTINGS["airtable_base_id"],
            AIRTABLE_SETTINGS["airtable_table_id"],
            client=fake.client(),
        )
        api = TestClient(create_app(make_settings(**AIRTABLE_SETTINGS), provider=provider))

        res = api.get("/api/v1/todos/", headers={"X-User-Id": "u1"})
        assert res.status_code == 502
        assert "Rate limit exceeded" in res.json()["detail"]

    def test_unconfigured_client_is_service_unavailable(self):
        provider = AirtableProvider("your-api-key", "appX", "tblY")
        api = TestClient(create_app(make_settings(), provider=provider))
        res = api.post("/api/v1/todos/", json={"title": "x"})
        assert res.status_code == 503
        assert res.json()["detail"] == "Airtable is not configured. Please complete the setup wizard."


class TestProviderStatus:
    def test_reports_active_provider(self):
        res = fresh_client().get("/api/v1/provider")
        assert res.status_code == 200
        data = res.json()
        assert data["provider"] == "local"
        assert data["configured"] == {"supabase": False, "airtable": False, "local": True}
        assert data["connection"] == {"ok": True, "error": None}


class TestBasicAuth:
    def test_username_becomes_user_id(self):
        api = fresh_client(enable_basic_auth=True, basic_auth_username="alice", basic_auth_password="s3cret")
        assert api.post("/api/v1/todos/", json={"title": "x"}).status_code == 401
        assert api.post("/api/v1/todos/", json={"title": "x"}, auth=("alice", "wrong")).status_code == 401

        res = api.post("/api/v1/todos/", json={"title": "x"}, auth=("alice", "s3cret"))
        assert res.status_code == 201
        assert res.json()["user_id"] == "alice"


class TestValidationErrors:
    def test_create_validation_error_title_empty(self):
        res = client.post("/api/v1/todos/", json={"title": "  ", "description": "x"})
        assert res.status_code == 422
        body = res.json()
        assert body.get("error") == "ValidationError"
        assert body.get("message") == "Request validation failed"
        assert isinstance(body.get("detail"), list)

    def test_patch_rejects_unknown_status(self):
        tid = client.post("/api/v1/todos/", json={"title": "Status check"}).json()["id"]
        res = client.patch(f"/api/v1/todos/{tid}", json={"status": "archived"})
        assert res.status_code == 422
        assert res.json().get("error") == "ValidationError"

    def test_patch_rejects_null_title(self):
        tid = client.post("/api/v1/todos/", json={"title": "Keep title"}).json()["id"]
        res = client.patch(f"/api/v1/todos/{tid}", json={"title": None})
        assert res.status_code == 422


def test_settings_default_cors():
    assert Settings().cors_allow_origins == ["*"]
    assert Settings().cors_allow_origins is not Settings().cors_allow_origins
