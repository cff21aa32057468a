import asyncio
from pathlib import Path

import pytest

from radioguide.config import settings
from radioguide.services.ingest_coordinator import IngestCoordinator, IngestInProgressError
from radioguide.services.ingest_service import (
    MalformedFeedError,
    ProgramIngestor,
    ingest_feed_file,
    run_ingestion,
)
from radioguide.services.ingest_types import (
    DateBlock,
    FeedPayload,
    ProgramRecord,
    RawProgramEntry,
    StationFeed,
)
from radioguide.services.program_store import ProgramStore
from radioguide.utils.temporal_types import InvalidTimeTokenError


class _ListStore:
    def __init__(self, fail_after: int | None = None) -> None:
        self.records: list[ProgramRecord] = []
        self._fail_after = fail_after

    async def insert(self, record: ProgramRecord) -> ProgramRecord:
        if self._fail_after is not None and len(self.records) >= self._fail_after:
            raise RuntimeError("store unavailable")
        self.records.append(record)
        return record


def _station(station_id: str, *blocks: tuple[str, list[tuple[str, str, str]]]) -> StationFeed:
    return StationFeed(
        station_id=station_id,
        blocks=[
            DateBlock(
                date=block_date,
                programs=[
                    RawProgramEntry(
                        station_id=station_id,
                        program_id=program_id,
                        start_token=start,
                        end_token=end,
                        title=f"Title {program_id}",
                    )
                    for program_id, start, end in programs
                ],
            )
            for block_date, programs in blocks
        ],
    )


@pytest.mark.asyncio
async def test_single_program_becomes_three_record_timeline() -> None:
    store = _ListStore()
    payload = FeedPayload(stations=[_station("S1", ("20250101", [("P1", "100000", "120000")]))])

    processed = await ProgramIngestor(store).ingest(payload)

    assert processed == {"S1"}
    assert [(record.ft, record.to) for record in store.records] == [
        ("20250101000000", "20250101100000"),
        ("20250101100000", "20250101120000"),
        ("20250101120000", "20250101290000"),
    ]
    assert [record.title for record in store.records] == ["", "Title P1", ""]
    assert {record.station_id for record in store.records} == {"S1"}


@pytest.mark.asyncio
async def test_leading_filler_can_be_disabled() -> None:
    store = _ListStore()
    payload = FeedPayload(stations=[_station("S1", ("20250101", [("P1", "100000", "120000")]))])

    await ProgramIngestor(store, day_start=None).ingest(payload)

    assert [record.ft for record in store.records] == ["20250101100000", "20250101120000"]


@pytest.mark.asyncio
async def test_seconds_fill_applied_to_short_tokens() -> None:
    store = _ListStore()
    payload = FeedPayload(stations=[_station("S1", ("20250101", [("P1", "1000", "1200")]))])

    await ProgramIngestor(
        store, start_seconds_fill="05", end_seconds_fill="29", day_start=None
    ).ingest(payload)

    assert (store.records[0].ft, store.records[0].to) == ("20250101100005", "20250101120029")


@pytest.mark.asyncio
async def test_skip_set_is_respected() -> None:
    store = _ListStore()
    payload = FeedPayload(stations=[
        _station("S1", ("20250101", [("P1", "050000", "290000")])),
        _station("S2", ("20250101", [("P2", "050000", "290000")])),
    ])

    processed = await ProgramIngestor(store).ingest(payload, {"S1"})

    assert processed == {"S2"}
    assert {record.station_id for record in store.records} == {"S2"}


@pytest.mark.asyncio
async def test_blocks_are_filled_separately_and_concatenated() -> None:
    store = _ListStore()
    payload = FeedPayload(stations=[
        _station(
            "S1",
            ("20250101", [("A", "050000", "250000")]),
            ("20250102", [("B", "050000", "120000")]),
        )
    ])

    await ProgramIngestor(store).ingest(payload)

    assert [(record.title, record.ft, record.to) for record in store.records] == [
        ("", "20250101000000", "20250101050000"),
        ("Title A", "20250101050000", "20250102010000"),
        ("", "20250102010000", "20250101290000"),
        ("", "20250102000000", "20250102050000"),
        ("Title B", "20250102050000", "20250102120000"),
        ("", "20250102120000", "20250102290000"),
    ]


@pytest.mark.asyncio
async def test_missing_station_container_is_fatal() -> None:
    store = _ListStore()
    with pytest.raises(MalformedFeedError):
        await ProgramIngestor(store).ingest(FeedPayload(stations=None))
    assert store.records == []


@pytest.mark.asyncio
async def test_conversion_error_aborts_the_run() -> None:
    store = _ListStore()
    payload = FeedPayload(stations=[
        _station("S1", ("20250101", [("P1", "050000", "290000")])),
        _station("S2", ("20250101", [("P2", "050000", "310000")])),
    ])

    with pytest.raises(InvalidTimeTokenError):
        await ProgramIngestor(store).ingest(payload)

    # The first station was already committed; nothing of the second one
    assert {record.station_id for record in store.records} == {"S1"}


@pytest.mark.asyncio
async def test_store_failure_leaves_an_ordered_prefix() -> None:
    store = _ListStore(fail_after=1)
    payload = FeedPayload(stations=[_station("S1", ("20250101", [("P1", "100000", "120000")]))])

    with pytest.raises(RuntimeError):
        await ProgramIngestor(store).ingest(payload)

    assert [record.ft for record in store.records] == ["20250101000000"]


@pytest.mark.asyncio
async def test_stations_without_programs_are_not_reported() -> None:
    store = _ListStore()
    payload = FeedPayload(stations=[
        StationFeed(station_id="EMPTY", blocks=[DateBlock(date="20250101")]),
        _station("", ("20250101", [("P1", "050000", "290000")])),
    ])

    assert await ProgramIngestor(store).ingest(payload) == set()
    assert store.records == []


@pytest.mark.asyncio
async def test_run_ingestion_persists_feed(
    store: ProgramStore, sample_feed: str, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(settings, "day_start_token", "000000")
    processed = await run_ingestion(sample_feed, store=store)

    assert processed == {"TBS", "QRR"}
    tbs = await store.find({"station_id": "TBS"})
    assert [record.title for record in tbs] == ["", "Morning Show", ""]
    assert tbs[1].pfm == "DJ Alice"
    assert tbs[-1].to == "20250101290000"
    # All Day already reaches 29:00, only the leading filler is added
    assert await store.count({"station_id": "QRR"}) == 2


@pytest.mark.asyncio
async def test_run_ingestion_rejects_feed_without_stations(store: ProgramStore) -> None:
    with pytest.raises(MalformedFeedError):
        await run_ingestion("<radiko/>", store=store)
    assert await store.count() == 0


@pytest.mark.asyncio
async def test_ingest_feed_file(store: ProgramStore, sample_feed: str, tmp_path: Path) -> None:
    feed_path = tmp_path / "feed.xml"
    feed_path.write_text(sample_feed, encoding="utf-8")

    processed = await ingest_feed_file(feed_path, {"QRR"}, store=store)

    assert processed == {"TBS"}
    assert await store.count({"station_id": "QRR"}) == 0


@pytest.mark.asyncio
async def test_coordinator_rejects_concurrent_runs() -> None:
    coordinator = IngestCoordinator()
    release = asyncio.Event()
    started = asyncio.Event()

    async def _slow_run() -> str:
        started.set()
        await release.wait()
        return "done"

    first = asyncio.create_task(coordinator.execute(_slow_run))
    await started.wait()

    assert coordinator.is_ingesting()
    with pytest.raises(IngestInProgressError):
        await coordinator.execute(_slow_run)

    release.set()
    assert await first == "done"
    assert not coordinator.is_ingesting()
