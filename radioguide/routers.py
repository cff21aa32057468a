from datetime import datetime, timezone
from typing import Annotated
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from lxml import etree # type: ignore
import logging

from radioguide.config import settings
from radioguide.database import get_db
from radioguide.schemas import (
    ExpiredResponse,
    IngestResponse,
    NowPlayingResponse,
    ProgramResponse,
    ScheduleResponse,
)
from radioguide.services import (
    count_programs,
    delete_expired_programs,
    find_program_at,
    get_station_day,
    run_ingestion,
)
from radioguide.services.ingest_coordinator import IngestInProgressError, get_ingest_coordinator
from radioguide.utils.broadcast_clock import BroadcastClock
from radioguide.utils.broadcast_time import time_span_seconds
from radioguide.utils.temporal_parser import try_parse_date_only


logger = logging.getLogger(__name__)

main_router = APIRouter()


def get_broadcast_clock() -> BroadcastClock:
    """Broadcast clock built from the configured timezone and stream delay"""
    return BroadcastClock(settings.broadcast_timezone, settings.stream_delay_sec)


@main_router.get("/")
async def root() -> dict:
    """Root endpoint with service information"""
    return {
        "service": "Radio Guide Service",
        "version": "0.1.0",
        "endpoints": {
            "ingest": "/ingest - Ingest a program guide feed (POST, XML body)",
            "schedule": "/stations/{station_id}/schedule - Programs of a broadcast day",
            "now": "/stations/{station_id}/now - Program airing now",
            "expired": "/programs/expired - Remove finished programs (DELETE)",
            "health": "/health - Health check"
        }
    }


@main_router.get("/health")
async def health_check() -> dict:
    """Health check endpoint"""
    return {
        "status": "ok",
        "ingesting": get_ingest_coordinator().is_ingesting(),
    }


@main_router.post("/ingest", response_model=IngestResponse)
async def ingest_feed(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    skip: Annotated[list[str] | None, Query(description="Station IDs already processed")] = None,
) -> IngestResponse:
    """
    Ingest a program guide feed posted as the request body

    Stations listed in `skip` are left untouched.
    """
    body = await request.body()
    logger.info(f"Feed ingestion requested via API ({len(body)} bytes, {len(skip or [])} skipped stations)")

    try:
        processed = await run_ingestion(body, set(skip or []))
    except IngestInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except (ValueError, etree.XMLSyntaxError) as exc:
        logger.error(f"Feed rejected: {exc}")
        raise HTTPException(status_code=422, detail=str(exc))
    except Exception as exc:
        logger.error(f"Unexpected error during feed ingestion: {exc}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(exc))

    return IngestResponse(
        timestamp=datetime.now(timezone.utc).isoformat(),
        processed_stations=sorted(processed),
        programs_total=await count_programs(db),
    )


@main_router.get("/stations/{station_id}/schedule", response_model=ScheduleResponse)
async def get_schedule(
    station_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    clock: Annotated[BroadcastClock, Depends(get_broadcast_clock)],
    date: Annotated[str | None, Query(description="Broadcast date, yyyyMMdd")] = None,
) -> ScheduleResponse:
    """Programs of one station for a broadcast day (default: today's broadcast date)"""
    token = date or clock.current_broadcast_date()
    broadcast_date = try_parse_date_only(token)
    if broadcast_date is None:
        raise HTTPException(status_code=422, detail=f"Invalid broadcast date: {token}")

    records = await get_station_day(db, station_id, broadcast_date)
    return ScheduleResponse(
        station_id=station_id,
        date=broadcast_date.to_date_string(),
        total_programs=len(records),
        programs=[ProgramResponse.from_record(record) for record in records],
    )


@main_router.get("/stations/{station_id}/now", response_model=NowPlayingResponse)
async def get_now_playing(
    station_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    clock: Annotated[BroadcastClock, Depends(get_broadcast_clock)],
) -> NowPlayingResponse:
    """Program airing on a station at the current broadcast time"""
    now = clock.current_broadcast_time()
    record = await find_program_at(db, station_id, now)
    if record is None:
        raise HTTPException(status_code=404, detail=f"No program airing on {station_id} at {now}")

    return NowPlayingResponse(
        station_id=station_id,
        broadcast_time=now,
        remaining_seconds=time_span_seconds(now, record.to),
        program=ProgramResponse.from_record(record),
    )


@main_router.delete("/programs/expired", response_model=ExpiredResponse)
async def remove_expired_programs(
    db: Annotated[AsyncSession, Depends(get_db)],
    clock: Annotated[BroadcastClock, Depends(get_broadcast_clock)],
) -> ExpiredResponse:
    """Remove programs that ended before the current broadcast time"""
    before = clock.current_broadcast_time()
    deleted = await delete_expired_programs(db, before)
    await db.commit()
    return ExpiredResponse(before=before, deleted=deleted)
