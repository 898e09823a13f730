"""
Tests for CollectionStore reload semantics.
"""

import asyncio

import pytest

from saltware.exceptions import StoreError
from saltware.models.domain.content import CollectionKind, Stat
from saltware.repositories import ContentRepository
from saltware.services.collection_store import CollectionStore


class GatedRepository:
    """Repository whose list() blocks until released, to interleave reloads"""

    kind = CollectionKind.STATS

    def __init__(self):
        self.calls = []

    async def list(self):
        release = asyncio.get_running_loop().create_future()
        self.calls.append(release)
        outcome = await release
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


async def _settle():
    for _ in range(3):
        await asyncio.sleep(0)


@pytest.fixture
def stats_repo(admin_store):
    return ContentRepository(CollectionKind.STATS, admin_store)


@pytest.mark.asyncio
async def test_starts_empty_and_unloaded(stats_repo):
    store = CollectionStore(stats_repo)
    assert store.items == ()
    assert len(store) == 0
    assert not store.loaded


@pytest.mark.asyncio
async def test_reload_replaces_list(supabase, stats_repo):
    supabase.seed("stats", value="10+", label="Years", sort_order=2)
    supabase.seed("stats", value="50+", label="Projects", sort_order=1)
    store = CollectionStore(stats_repo)

    assert await store.reload() is True

    assert store.loaded
    assert [s.label for s in store] == ["Projects", "Years"]


@pytest.mark.asyncio
async def test_failed_reload_keeps_previous_list(supabase, stats_repo):
    supabase.seed("stats", value="50+", label="Projects", sort_order=1)
    store = CollectionStore(stats_repo)
    await store.reload()

    supabase.offline = True
    with pytest.raises(StoreError):
        await store.reload()

    assert [s.label for s in store.items] == ["Projects"]


@pytest.mark.asyncio
async def test_find_by_id(supabase, stats_repo):
    row = supabase.seed("stats", value="5", label="Offices", sort_order=1)
    store = CollectionStore(stats_repo)
    await store.reload()

    assert store.find(row["id"]).label == "Offices"
    with pytest.raises(KeyError):
        store.find("missing")


@pytest.mark.asyncio
async def test_subscribers_see_applied_reloads(supabase, stats_repo):
    supabase.seed("stats", value="1", label="One", sort_order=1)
    store = CollectionStore(stats_repo)
    seen = []
    unsubscribe = store.subscribe(seen.append)

    await store.reload()
    unsubscribe()
    await store.reload()

    assert len(seen) == 1
    assert seen[0][0].label == "One"


@pytest.mark.asyncio
async def test_response_after_detach_is_discarded():
    repo = GatedRepository()
    store = CollectionStore(repo)

    pending = asyncio.create_task(store.reload())
    await _settle()
    store.detach()
    repo.calls[0].set_result([Stat(id="1", value="9", label="Late", sort_order=1)])

    assert await pending is False
    assert store.items == ()


@pytest.mark.asyncio
async def test_failure_after_detach_is_swallowed():
    repo = GatedRepository()
    store = CollectionStore(repo)

    pending = asyncio.create_task(store.reload())
    await _settle()
    store.detach()
    repo.calls[0].set_result(StoreError("gone", collection="stats", operation="list"))

    assert await pending is False


@pytest.mark.asyncio
async def test_latest_reload_wins():
    repo = GatedRepository()
    store = CollectionStore(repo)

    first = asyncio.create_task(store.reload())
    await _settle()
    second = asyncio.create_task(store.reload())
    await _settle()

    repo.calls[1].set_result([Stat(id="new", value="2", label="Newer", sort_order=1)])
    assert await second is True
    repo.calls[0].set_result([Stat(id="old", value="1", label="Older", sort_order=1)])
    assert await first is False

    assert [s.id for s in store.items] == ["new"]


@pytest.mark.asyncio
async def test_superseded_failure_is_dropped():
    repo = GatedRepository()
    store = CollectionStore(repo)

    first = asyncio.create_task(store.reload())
    await _settle()
    second = asyncio.create_task(store.reload())
    await _settle()

    repo.calls[0].set_result(StoreError("timeout", collection="stats", operation="list"))
    assert await first is False
    repo.calls[1].set_result([Stat(id="new", value="2", label="Newer", sort_order=1)])
    assert await second is True

    assert [s.id for s in store.items] == ["new"]
