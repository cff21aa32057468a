"""
Program Query Service

Read-side operations over stored timelines: a station's broadcast day, the
program airing at a given moment, expiry and counts.
"""
import logging

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from radioguide.models import Program
from radioguide.services.ingest_types import ProgramRecord
from radioguide.services.program_store import to_record
from radioguide.utils.broadcast_time import BROADCAST_DAY_START_HOUR, convert_broadcast_time
from radioguide.utils.temporal_types import DateOnly, DateTimeString

logger = logging.getLogger(__name__)


def broadcast_day_window(broadcast_date: DateOnly) -> tuple[DateTimeString, DateTimeString]:
    """
    Normalized [start, end) of a broadcast day

    The day runs from 05:00:00 on the nominal date up to and including
    05:00:00 the next morning, so a program starting exactly at the boundary
    is listed on both days.
    """
    start = convert_broadcast_time(f"{BROADCAST_DAY_START_HOUR:02d}0000", broadcast_date, "00")
    end = convert_broadcast_time(f"{BROADCAST_DAY_START_HOUR + 24:02d}0001", broadcast_date, "00")
    return start, end


async def get_station_day(
    db: AsyncSession,
    station_id: str,
    broadcast_date: DateOnly
) -> list[ProgramRecord]:
    """
    Get every program of a station that intersects a broadcast day

    Args:
        db: Database session
        station_id: Station ID
        broadcast_date: Nominal broadcast date

    Returns:
        Records ordered by start then end time
    """
    start, end = broadcast_day_window(broadcast_date)
    logger.debug(f"Fetching schedule for {station_id}: {start} to {end}")

    stmt = (
        select(Program)
        .where(
            Program.station_id == station_id,
            Program.ft < end,
            Program.to_instant >= start,
        )
        .order_by(Program.ft, Program.to_instant)
    )

    result = await db.execute(stmt)
    return [to_record(row) for row in result.scalars().all()]


async def find_program_at(
    db: AsyncSession,
    station_id: str,
    at: DateTimeString
) -> ProgramRecord | None:
    """
    Find the program airing on a station at a given moment

    Args:
        db: Database session
        station_id: Station ID
        at: Normalized yyyyMMddHHmmss

    Returns:
        The record with ft <= at < end (normalized), or None
    """
    stmt = (
        select(Program)
        .where(
            Program.station_id == station_id,
            Program.ft <= at,
            Program.to_instant > at,
        )
        .order_by(Program.ft.desc())
        .limit(1)
    )

    result = await db.execute(stmt)
    row = result.scalars().first()
    if row is None:
        logger.info(f"No program found for {station_id} at {at}")
        return None
    return to_record(row)


async def delete_expired_programs(db: AsyncSession, before: DateTimeString) -> int:
    """
    Delete programs that ended before the given moment.

    Args:
        db: Database session
        before: Remove programs whose normalized end is earlier than this value

    Returns:
        Number of deleted programs
    """
    result = await db.execute(
        select(func.count(Program.id)).where(Program.to_instant < before)
    )
    deleted_count = result.scalar_one_or_none() or 0

    await db.execute(delete(Program).where(Program.to_instant < before))

    logger.info("Deleted %s expired programs (to < %s)", deleted_count, before)
    return deleted_count


async def count_programs(db: AsyncSession, station_id: str | None = None) -> int:
    """Count stored programs, optionally for a single station"""
    stmt = select(func.count(Program.id))
    if station_id is not None:
        stmt = stmt.where(Program.station_id == station_id)
    result = await db.execute(stmt)
    return result.scalar_one_or_none() or 0
