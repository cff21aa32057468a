from dataclasses import replace

import pytest
from sqlalchemy.exc import IntegrityError

from radioguide.database import session_scope
from radioguide.services.ingest_types import ProgramRecord
from radioguide.services.program_query_service import (
    broadcast_day_window,
    count_programs,
    delete_expired_programs,
    find_program_at,
    get_station_day,
)
from radioguide.services.program_store import ProgramStore
from radioguide.utils.temporal_types import DateOnly


def _record(prog_id: str, ft: str, to: str, station_id: str = "S1", title: str = "") -> ProgramRecord:
    return ProgramRecord(station_id=station_id, prog_id=prog_id, ft=ft, to=to, title=title)


async def _seed(store: ProgramStore) -> None:
    # Previous broadcast day, then 2025-01-01 05:00 to 29:00; day ends are extended
    for record in [
        _record("S1_20241231120000", "20241231120000", "20241231290000"),
        _record("S1_A_20250101050000", "20250101050000", "20250101120000", title="A"),
        _record("S1_B_20250101120000", "20250101120000", "20250101290000", title="B"),
        _record("S1_C_20250102050000", "20250102050000", "20250102080000", title="C"),
        _record("S2_X_20250101050000", "20250101050000", "20250101290000", station_id="S2"),
    ]:
        await store.insert(record)


@pytest.mark.asyncio
async def test_insert_and_find(store: ProgramStore) -> None:
    record = _record("S1_A_20250101050000", "20250101050000", "20250101120000", title="A")

    assert await store.insert(record) == record
    assert await store.find_one({"prog_id": record.prog_id}) == record
    assert await store.find_one({"prog_id": "missing"}) is None
    assert await store.find({"station_id": "S1"}) == [record]


@pytest.mark.asyncio
async def test_find_keeps_insertion_order(store: ProgramStore) -> None:
    await _seed(store)
    found = await store.find({"station_id": "S1"})
    assert [record.ft for record in found] == [
        "20241231120000",
        "20250101050000",
        "20250101120000",
        "20250102050000",
    ]


@pytest.mark.asyncio
async def test_count_and_remove(store: ProgramStore) -> None:
    await _seed(store)

    assert await store.count() == 5
    assert await store.count({"station_id": "S1"}) == 4

    assert await store.remove({"station_id": "S1"}, multi=False) == 1
    assert await store.count({"station_id": "S1"}) == 3
    assert await store.find_one({"prog_id": "S1_20241231120000"}) is None

    assert await store.remove({"station_id": "S1"}) == 3
    assert await store.remove({"station_id": "S1"}) == 0
    assert await store.count() == 1


@pytest.mark.asyncio
async def test_duplicate_program_id_is_rejected(store: ProgramStore) -> None:
    record = _record("S1_A_20250101050000", "20250101050000", "20250101120000")
    await store.insert(record)

    with pytest.raises(IntegrityError):
        await store.insert(record)
    assert await store.count() == 1


@pytest.mark.asyncio
async def test_unknown_query_field(store: ProgramStore) -> None:
    with pytest.raises(ValueError):
        await store.find({"channel": "S1"})
    with pytest.raises(ValueError):
        await store.ensure_index("channel")


@pytest.mark.asyncio
async def test_ensure_index_is_idempotent(store: ProgramStore) -> None:
    await store.ensure_default_indexes()
    await store.ensure_index("title")
    await store.ensure_index("title")


@pytest.mark.asyncio
async def test_unique_index_after_plain_index(store: ProgramStore) -> None:
    await store.ensure_index("img")
    await store.ensure_index("img", unique=True)

    await store.insert(replace(_record("S1_A", "20250101050000", "20250101120000"), img="a.jpg"))
    with pytest.raises(IntegrityError):
        await store.insert(replace(_record("S1_B", "20250101120000", "20250101290000"), img="a.jpg"))


def test_broadcast_day_window() -> None:
    assert broadcast_day_window(DateOnly.from_components(2025, 1, 1)) == (
        "20250101050000",
        "20250102050001",
    )


@pytest.mark.asyncio
async def test_get_station_day(store: ProgramStore) -> None:
    await _seed(store)

    async with session_scope() as session:
        records = await get_station_day(session, "S1", DateOnly.from_components(2025, 1, 1))

    # Programs touching either boundary belong to both days
    assert [record.prog_id for record in records] == [
        "S1_20241231120000",
        "S1_A_20250101050000",
        "S1_B_20250101120000",
        "S1_C_20250102050000",
    ]


@pytest.mark.asyncio
async def test_find_program_at(store: ProgramStore) -> None:
    await _seed(store)

    async with session_scope() as session:
        airing = await find_program_at(session, "S1", "20250101120000")
        late_night = await find_program_at(session, "S1", "20250102013000")
        nothing = await find_program_at(session, "S1", "20250102090000")

    assert airing is not None and airing.title == "B"
    assert late_night is not None and late_night.title == "B"
    assert late_night.to == "20250101290000"
    assert nothing is None


@pytest.mark.asyncio
async def test_delete_expired_and_count(store: ProgramStore) -> None:
    await _seed(store)

    async with session_scope() as session:
        assert await count_programs(session) == 5
        assert await count_programs(session, "S2") == 1
        deleted = await delete_expired_programs(session, "20250102050000")

    assert deleted == 2
    assert await store.count() == 3
    assert await store.find_one({"title": "A"}) is None
