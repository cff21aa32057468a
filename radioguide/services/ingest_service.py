"""
Feed Ingestion Service

Threads decoded feed records through time conversion and gap filling and
commits each station's timeline to the program store in order.
"""
from __future__ import annotations

import logging
from collections.abc import Set
from pathlib import Path
from typing import Protocol

from radioguide.config import settings
from radioguide.services.feed_parser_service import parse_program_feed_async
from radioguide.services.gap_filler import fill_program_gaps
from radioguide.services.ingest_coordinator import get_ingest_coordinator
from radioguide.services.ingest_types import (
    ConvertedProgram,
    DateBlock,
    FeedPayload,
    ProgramRecord,
    StationFeed,
)
from radioguide.services.program_store import ProgramStore
from radioguide.utils.broadcast_time import (
    DEFAULT_DAY_START_TOKEN,
    END_SECONDS_FILL,
    START_SECONDS_FILL,
    convert_broadcast_time,
)
from radioguide.utils.file_operations import read_feed_file
from radioguide.utils.logging_helpers import (
    log_ingest_end,
    log_ingest_start,
    log_section_end,
    log_section_start,
    log_station_processing,
    log_timeline_summary,
)
from radioguide.utils.temporal_parser import parse_date_only


logger = logging.getLogger(__name__)


class MalformedFeedError(ValueError):
    """Raised when a feed payload has no station container"""
    pass


class RecordSink(Protocol):
    async def insert(self, record: ProgramRecord) -> ProgramRecord: ...


class ProgramIngestor:
    """Normalizes decoded stations and commits their timelines sequentially."""

    def __init__(
        self,
        store: RecordSink,
        *,
        start_seconds_fill: str = START_SECONDS_FILL,
        end_seconds_fill: str = END_SECONDS_FILL,
        day_start: str | None = DEFAULT_DAY_START_TOKEN,
    ) -> None:
        self._store = store
        self._start_fill = start_seconds_fill
        self._end_fill = end_seconds_fill
        self._day_start = day_start

    def convert_block(self, block: DateBlock) -> list[ConvertedProgram]:
        """Resolve every entry's start and end on the block's nominal date."""
        broadcast_date = parse_date_only(block.date)
        return [
            ConvertedProgram(
                entry=entry,
                ft=convert_broadcast_time(entry.start_token, broadcast_date, self._start_fill),
                to=convert_broadcast_time(entry.end_token, broadcast_date, self._end_fill),
            )
            for entry in block.programs
        ]

    def build_station_records(self, station: StationFeed) -> list[ProgramRecord]:
        """Gap-filled records for every date block of a station, in block order."""
        records: list[ProgramRecord] = []
        for block in station.blocks:
            if not block.programs:
                logger.debug("Station %s has no programs for %s", station.station_id, block.date)
                continue
            records.extend(
                fill_program_gaps(
                    station.station_id,
                    block.date,
                    self.convert_block(block),
                    day_start=self._day_start,
                )
            )
        return records

    async def ingest(self, payload: FeedPayload, skip_stations: Set[str] = frozenset()) -> set[str]:
        """
        Commit the timelines of every station not in skip_stations.

        Args:
            payload: Decoded feed
            skip_stations: Station ids already processed by an earlier run

        Returns:
            Ids of stations whose records were all committed

        Raises:
            MalformedFeedError: If the payload has no station container
            TemporalValueError: If any time token or date cannot be converted
            IntegrityError: If the store rejects a record
        """
        if payload is None or payload.stations is None:
            raise MalformedFeedError("Invalid feed format: station container not found")

        stations = payload.stations
        processed: set[str] = set()

        for index, station in enumerate(stations, start=1):
            station_id = station.station_id
            if not station_id:
                logger.debug("Skipping station %s/%s without an id", index, len(stations))
                continue
            if station_id in skip_stations:
                logger.info("Skipping already processed station %s", station_id)
                continue

            log_station_processing(logger, index, len(stations), station_id)
            records = self.build_station_records(station)
            if not records:
                logger.info("Station %s has no programs to store", station_id)
                continue

            for record in records:
                await self._store.insert(record)

            fillers = sum(1 for record in records if record.is_filler)
            log_timeline_summary(logger, station_id, len(records) - fillers, fillers)
            processed.add(station_id)

        logger.info("Ingested %s of %s stations", len(processed), len(stations))
        return processed


async def run_ingestion(
    content: bytes | str,
    skip_stations: Set[str] = frozenset(),
    *,
    store: RecordSink | None = None,
) -> set[str]:
    """
    Decode raw feed XML and ingest it while holding the ingestion lock.

    Raises:
        IngestInProgressError: If another run is active
        MalformedFeedError, TemporalValueError, etree.XMLSyntaxError: see ProgramIngestor.ingest
    """
    async def _run() -> set[str]:
        log_ingest_start(logger)
        log_section_start(logger, "Feed parsing")
        payload = await parse_program_feed_async(
            content,
            parse_timeout_seconds=settings.feed_parse_timeout_sec,
        )
        log_section_end(logger, "Feed parsing")
        ingestor = ProgramIngestor(
            store or ProgramStore(),
            start_seconds_fill=settings.start_seconds_fill,
            end_seconds_fill=settings.end_seconds_fill,
            day_start=settings.day_start_token,
        )
        processed = await ingestor.ingest(payload, skip_stations)
        log_ingest_end(logger)
        return processed

    return await get_ingest_coordinator().execute(_run)


async def ingest_feed_file(
    file_path: Path | str,
    skip_stations: Set[str] = frozenset(),
    *,
    store: RecordSink | None = None,
) -> set[str]:
    """Read a feed file from disk and ingest it."""
    content = await read_feed_file(file_path)
    return await run_ingestion(content, skip_stations, store=store)
