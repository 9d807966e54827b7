"""
Concurrency tests for MockResourceStore.

Creates and deletes against one mock instance must not lose updates or race
on index-based removal.
"""
import asyncio
from concurrent.futures import ThreadPoolExecutor

import pytest

from cloudhandle.schemas.resources import IID, SecurityInfo, SecurityReqInfo
from cloudhandle.services.handlers.mock import MockResourceStore, MockSecurityHandler
from cloudhandle.shared.core.exceptions import ResourceConflictError


def _insert(store: MockResourceStore, name: str) -> SecurityInfo:
    return store.insert(
        "security", "m1", name, lambda _seq: SecurityInfo(iid=IID(name_id=name, system_id=name))
    )


def test_concurrent_inserts_of_distinct_names_all_land(store):
    names = [f"sg-{i}" for i in range(200)]

    with ThreadPoolExecutor(max_workers=16) as pool:
        list(pool.map(lambda n: _insert(store, n), names))

    stored = [r.iid.name_id for r in store.list("security", "m1")]
    assert sorted(stored) == sorted(names)


def test_concurrent_inserts_of_same_name_yield_one_success(store):
    def attempt(_i: int) -> bool:
        try:
            _insert(store, "sg-race")
            return True
        except ResourceConflictError:
            return False

    with ThreadPoolExecutor(max_workers=16) as pool:
        outcomes = list(pool.map(attempt, range(50)))

    assert outcomes.count(True) == 1
    assert len(store.list("security", "m1")) == 1


def test_concurrent_deletes_remove_exactly_their_targets(store):
    names = [f"sg-{i}" for i in range(100)]
    for name in names:
        _insert(store, name)
    doomed = names[::2]

    with ThreadPoolExecutor(max_workers=16) as pool:
        results = list(pool.map(lambda n: store.delete("security", "m1", n), doomed + doomed))

    assert results.count(True) == len(doomed)
    assert [r.iid.name_id for r in store.list("security", "m1")] == names[1::2]


@pytest.mark.asyncio
async def test_gathered_handler_creates_are_all_visible(store):
    handler = MockSecurityHandler("m1", store=store)

    await asyncio.gather(
        *(handler.create_security(SecurityReqInfo(iid=IID(name_id=f"sg-{i}"))) for i in range(25))
    )

    assert len(await handler.list_security()) == 25
