import os

import pytest

# Keep the module-level app in todo_providers.main on the in-memory local store and
# off any real backend that may be configured in the developer's environment.
os.environ["LOCAL_STORE_BACKEND"] = "memory"
for _name in (
    "SUPABASE_URL",
    "SUPABASE_PUBLISHABLE_KEY",
    "SUPABASE_ANON_KEY",
    "AIRTABLE_API_KEY",
    "AIRTABLE_BASE_ID",
    "AIRTABLE_TABLE_ID",
    "ENABLE_BASIC_AUTH",
):
    os.environ.pop(_name, None)

from fakes import (  # noqa: E402
    AIRTABLE_BASE,
    AIRTABLE_TABLE,
    AIRTABLE_TOKEN,
    SUPABASE_KEY,
    SUPABASE_URL,
    FakeAirtable,
    FakePostgrest,
    TickingClock,
)
from todo_providers.db import InMemoryKeyValueStore  # noqa: E402
from todo_providers.providers import AirtableProvider, LocalStorageProvider, SupabaseProvider  # noqa: E402
from todo_providers.providers import airtable as airtable_module  # noqa: E402
from todo_providers.providers import local as local_module  # noqa: E402


@pytest.fixture
def ticking_clock(monkeypatch):
    """Client-stamped providers get strictly increasing timestamps, so creation order is observable."""
    clock = TickingClock()
    monkeypatch.setattr(airtable_module, "utc_now_iso", clock)
    monkeypatch.setattr(local_module, "utc_now_iso", clock)
    return clock


@pytest.fixture
def fake_postgrest():
    return FakePostgrest()


@pytest.fixture
def fake_airtable():
    return FakeAirtable()


@pytest.fixture
def supabase_provider(fake_postgrest):
    return SupabaseProvider(SUPABASE_URL, SUPABASE_KEY, client=fake_postgrest.client())


@pytest.fixture
def airtable_provider(fake_airtable, ticking_clock):
    return AirtableProvider(AIRTABLE_TOKEN, AIRTABLE_BASE, AIRTABLE_TABLE, client=fake_airtable.client())


@pytest.fixture
def local_provider(ticking_clock):
    return LocalStorageProvider(InMemoryKeyValueStore())


@pytest.fixture(params=["supabase", "airtable", "local"])
def any_provider(request):
    """Each CRUD contract test runs once per backend."""
    return request.getfixturevalue(f"{request.param}_provider")
