import json

import pytest
from fakes import AIRTABLE_BASE, AIRTABLE_SETTINGS, AIRTABLE_TABLE, AIRTABLE_TOKEN, FakeAirtable, make_settings, run

from todo_providers.errors import BackendOperationError, ConfigurationError, RecordMappingError
from todo_providers.models import TodoStatus
from todo_providers.providers.airtable import AirtableProvider, record_to_todo, user_formula
from todo_providers.schemas import TodoCreate, TodoUpdate


def make_provider(fake):
    return AirtableProvider(AIRTABLE_TOKEN, AIRTABLE_BASE, AIRTABLE_TABLE, client=fake.client())


def seed_many(fake, count, user_id="u1"):
    return [
        fake.seed({"Title": f"Task {i}", "Status": "pending", "UserId": user_id,
                   "CreatedAt": f"2025-02-01T00:00:{i:02d}.000Z"})
        for i in range(count)
    ]


class TestPagination:
    def test_drains_every_page(self):
        fake = FakeAirtable(page_size=3)
        ids = seed_many(fake, 8)
        seed_many(fake, 2, user_id="someone-else")

        result = run(make_provider(fake).get_todos("u1"))

        assert result.error is None
        returned = [t.id for t in result.todos]
        assert len(returned) == 8
        assert len(set(returned)) == 8
        assert set(returned) == set(ids)
        # 8 matching records at 3 per page
        assert len(fake.requests) == 3

    def test_sorted_newest_first_across_pages(self):
        fake = FakeAirtable(page_size=2)
        seed_many(fake, 5)
        todos = run(make_provider(fake).get_todos("u1")).todos
        stamps = [t.created_at for t in todos]
        assert stamps == sorted(stamps, reverse=True)

    def test_list_query_parameters(self):
        fake = FakeAirtable()
        run(make_provider(fake).get_todos("u1"))
        params = fake.requests[0].url.params
        assert params["filterByFormula"] == '{UserId} = "u1"'
        assert params["sort[0][field]"] == "CreatedAt"
        assert params["sort[0][direction]"] == "desc"
        assert "offset" not in params

    def test_failed_page_returns_empty_list_and_error(self):
        fake = FakeAirtable(page_size=2)
        seed_many(fake, 5)
        provider = make_provider(fake)
        fake.fail_with = 500
        result = run(provider.get_todos("u1"))
        assert result.todos == []
        assert isinstance(result.error, BackendOperationError)


class TestWrites:
    def test_create_sends_defaults_and_timestamps(self, fake_airtable, airtable_provider):
        run(airtable_provider.create_todo(TodoCreate(title="Buy milk"), "u1"))
        fields = json.loads(fake_airtable.requests[0].content)["records"][0]["fields"]
        assert fields["Title"] == "Buy milk"
        assert fields["Status"] == "pending"
        assert fields["Description"] == ""
        assert fields["UserId"] == "u1"
        assert fields["CreatedAt"] == fields["UpdatedAt"]
        assert fields["CreatedAt"].endswith("Z")

    def test_update_never_rewrites_owner_and_stamps_updated_at(self, fake_airtable, airtable_provider):
        todo = run(airtable_provider.create_todo(TodoCreate(title="Buy milk"), "u1")).todo
        run(airtable_provider.update_todo(todo.id, TodoUpdate(status="completed")))

        body = json.loads(fake_airtable.requests[-1].content)
        fields = body["records"][0]["fields"]
        assert body["records"][0]["id"] == todo.id
        assert set(fields) == {"Status", "UpdatedAt"}
        assert fake_airtable.records[todo.id]["fields"]["UserId"] == "u1"

    def test_delete_uses_record_id(self, fake_airtable, airtable_provider):
        todo = run(airtable_provider.create_todo(TodoCreate(title="Buy milk"), "u1")).todo
        result = run(airtable_provider.delete_todo(todo.id))
        assert result.error is None
        request = fake_airtable.requests[-1]
        assert request.method == "DELETE"
        assert request.url.params.get_list("records[]") == [todo.id]

    def test_rate_limit_is_reported_without_retry(self, fake_airtable, airtable_provider):
        fake_airtable.fail_with = 429
        result = run(airtable_provider.create_todo(TodoCreate(title="Buy milk"), "u1"))
        assert result.todo is None
        assert isinstance(result.error, BackendOperationError)
        assert result.error.status_code == 429
        assert "Rate limit exceeded" in result.error.message
        assert len(fake_airtable.requests) == 1


class TestRecordMapping:
    def test_tolerates_missing_optional_fields(self):
        todo = record_to_todo({"id": "rec1", "createdTime": "2025-01-01T00:00:00.000Z", "fields": {"Title": "Bare"}})
        assert todo.title == "Bare"
        assert todo.description is None
        assert todo.status == TodoStatus.PENDING
        assert todo.user_id == ""
        assert todo.created_at == "2025-01-01T00:00:00.000Z"
        assert todo.updated_at is None

    def test_missing_title_is_a_mapping_error(self):
        with pytest.raises(RecordMappingError):
            record_to_todo({"id": "rec1", "fields": {"Status": "pending"}})

    def test_blank_title_is_a_mapping_error(self):
        with pytest.raises(RecordMappingError):
            record_to_todo({"id": "rec1", "fields": {"Title": "   "}})

    def test_unknown_status_is_a_mapping_error(self):
        with pytest.raises(RecordMappingError):
            record_to_todo({"id": "rec1", "fields": {"Title": "x", "Status": "archived"}})

    def test_malformed_record_surfaces_as_error_envelope(self, fake_airtable, airtable_provider):
        fake_airtable.records["recBroken"] = {"id": "recBroken", "fields": {"UserId": "u1"}}
        result = run(airtable_provider.get_todos("u1"))
        assert result.todos == []
        assert isinstance(result.error, RecordMappingError)

    def test_formula_escapes_quotes(self):
        assert user_formula('a"b\\c') == '{UserId} = "a\\"b\\\\c"'

    def test_quoted_user_id_round_trips_through_filter(self, airtable_provider):
        run(airtable_provider.create_todo(TodoCreate(title="odd owner"), 'o"neil'))
        todos = run(airtable_provider.get_todos('o"neil')).todos
        assert [t.title for t in todos] == ["odd owner"]


class TestConfiguration:
    def test_from_settings_requires_configuration(self):
        with pytest.raises(ConfigurationError) as exc_info:
            AirtableProvider.from_settings(make_settings(airtable_api_key="your-api-key",
                                                         airtable_base_id=AIRTABLE_BASE,
                                                         airtable_table_id=AIRTABLE_TABLE))
        assert "setup wizard" in str(exc_info.value)

    def test_from_settings_when_configured(self):
        provider = AirtableProvider.from_settings(make_settings(**AIRTABLE_SETTINGS))
        assert provider.kind == "airtable"

    def test_unconfigured_client_returns_configuration_error(self, fake_airtable):
        provider = AirtableProvider(AIRTABLE_TOKEN, AIRTABLE_BASE, "your-table-id", client=fake_airtable.client())
        result = run(provider.get_todos("u1"))
        assert isinstance(result.error, ConfigurationError)
        assert result.error.message == "Airtable table ID is not configured."
        assert fake_airtable.requests == []
