"""Call Store - the same behavior over every persistence backend.

Tests cover:
    - recent() newest first with a limit; search() oldest first, ASCII case-insensitive
    - by_id() returns the deserialized result, or ResourceNotFoundError
    - query() rejects anything but a single SELECT before touching the backend
    - Concurrent saves get distinct, increasing ids
"""

import asyncio

import pytest

from callhub.core.errors import (
    PersistenceError, QueryForbiddenError, ResourceNotFoundError,
)
from callhub.infrastructure.call_store import CallStore, is_read_only_query
from callhub.infrastructure.database import (
    AsyncEngineBackend, SyncEngineBackend, VolatileBackend,
)


@pytest.fixture(params=["volatile", "sync", "async"])
async def any_store(request, tmp_path):
    if request.param == "volatile":
        backend = VolatileBackend()
    elif request.param == "sync":
        backend = await SyncEngineBackend.open(f"sqlite:///{tmp_path / 'sync.db'}")
    else:
        backend = await AsyncEngineBackend.open(
            f"sqlite+aiosqlite:///{tmp_path / 'async.db'}",
        )
    store = CallStore(backend)
    yield store
    await store.close()


@pytest.fixture
async def sql_store(tmp_path):
    backend = await AsyncEngineBackend.open(
        f"sqlite+aiosqlite:///{tmp_path / 'query.db'}",
    )
    store = CallStore(backend)
    yield store
    await store.close()


async def test_save_and_fetch_by_id(any_store):
    record_id = await any_store.save('cat.walk("tomy")', {"steps": 3})

    record = await any_store.by_id(record_id)
    assert record.call_string == 'cat.walk("tomy")'
    assert record.result == {"steps": 3}


async def test_none_result_round_trips(any_store):
    record_id = await any_store.save("quiet.noop()", None)
    assert (await any_store.by_id(record_id)).result is None


async def test_missing_id_raises(any_store):
    with pytest.raises(ResourceNotFoundError):
        await any_store.by_id(404)


async def test_recent_is_newest_first_and_limited(any_store):
    for i in range(5):
        await any_store.save(f"calc.add({i}, 1)", i + 1)

    records = await any_store.recent(3)
    assert [r.result for r in records] == [5, 4, 3]
    assert records[0].id > records[1].id > records[2].id


async def test_recent_on_empty_store(any_store):
    assert await any_store.recent() == []


@pytest.mark.parametrize("limit", [0, -1])
async def test_non_positive_limit_returns_nothing(any_store, limit):
    for i in range(3):
        await any_store.save(f"cat.walk({i})", i)
    assert await any_store.recent(limit) == []


async def test_search_matches_call_or_result(any_store):
    await any_store.save("cat.walk(tomy)", {"cat": "tomy"})
    await any_store.save("calc.add(1, 2)", 3)
    await any_store.save("cat.meow()", "Meow from TOMY")

    records = await any_store.search("Tomy")
    assert [r.call_string for r in records] == ["cat.walk(tomy)", "cat.meow()"]


async def test_search_folds_ascii_only(any_store):
    await any_store.save("cat.meow()", "Meow from TÖMY")

    assert len(await any_store.search("tÖmy")) == 1
    assert await any_store.search("tömy") == []


async def test_search_percent_is_literal(any_store):
    await any_store.save("calc.describe(50%)", "50%")
    await any_store.save("calc.add(5, 0)", 5)
    assert [r.result for r in await any_store.search("%")] == ["50%"]


async def test_count(any_store):
    assert await any_store.count() == 0
    await any_store.save("cat.walk(a)", 1)
    await any_store.save("cat.walk(b)", 2)
    assert await any_store.count() == 2


async def test_concurrent_saves_get_distinct_ids(any_store):
    ids = await asyncio.gather(*(
        any_store.save(f"cat.walk({i})", i) for i in range(10)
    ))
    assert len(set(ids)) == 10
    assert await any_store.count() == 10


async def test_non_select_query_is_forbidden(any_store):
    await any_store.save("cat.walk(a)", 1)
    with pytest.raises(QueryForbiddenError):
        await any_store.query("DELETE FROM calls")
    assert await any_store.count() == 1


async def test_select_query_returns_rows(sql_store):
    await sql_store.save("cat.walk(a)", 1)
    await sql_store.save("cat.walk(b)", 2)

    rows = await sql_store.query("SELECT id, call_string FROM calls ORDER BY id")
    assert rows == [
        {"id": 1, "call_string": "cat.walk(a)"},
        {"id": 2, "call_string": "cat.walk(b)"},
    ]


async def test_invalid_select_is_persistence_error(sql_store):
    with pytest.raises(PersistenceError):
        await sql_store.query("SELECT * FROM no_such_table")


async def test_volatile_backend_has_no_sql():
    store = CallStore(VolatileBackend())
    with pytest.raises(PersistenceError):
        await store.query("SELECT 1")


async def test_file_backed_rows_survive_reopen(tmp_path):
    url = f"sqlite:///{tmp_path / 'persist.db'}"
    first = CallStore(await SyncEngineBackend.open(url))
    await first.save("cat.walk(tomy)", {"steps": 3})
    await first.close()

    second = CallStore(await SyncEngineBackend.open(url))
    try:
        assert [r.result for r in await second.recent()] == [{"steps": 3}]
    finally:
        await second.close()


@pytest.mark.parametrize("sql, allowed", [
    ("SELECT * FROM calls", True),
    ("  select id from calls;", True),
    ("SELECT 1; SELECT 2", False),
    ("DELETE FROM calls", False),
    ("DROP TABLE calls", False),
    ("selection", False),
    ("", False),
])
def test_is_read_only_query(sql, allowed):
    assert is_read_only_query(sql) is allowed
