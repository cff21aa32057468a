"""
Program gap filling

Turns one station's programs for one date block into a contiguous timeline
that runs up to the end of the extended broadcast day (29:00:00).
"""
import logging
from collections.abc import Sequence

from radioguide.services.ingest_types import (
    ConvertedProgram,
    ProgramRecord,
    filler_program_id,
    program_id_for,
)
from radioguide.utils.broadcast_time import (
    convert_broadcast_time,
    extended_boundary,
    extended_boundary_instant,
)
from radioguide.utils.temporal_parser import parse_date_only
from radioguide.utils.temporal_types import DateOnly, DateTimeString


logger = logging.getLogger(__name__)


def make_filler(station_id: str, ft: DateTimeString, to: DateTimeString) -> ProgramRecord:
    """Empty record covering [ft, to)."""
    return ProgramRecord(
        station_id=station_id,
        prog_id=filler_program_id(station_id, ft),
        ft=ft,
        to=to,
    )


def to_record(station_id: str, program: ConvertedProgram) -> ProgramRecord:
    entry = program.entry
    return ProgramRecord(
        station_id=station_id,
        prog_id=program_id_for(station_id, entry.program_id, program.ft),
        ft=program.ft,
        to=program.to,
        title=entry.title,
        info=entry.info,
        pfm=entry.pfm,
        img=entry.img,
    )


def fill_program_gaps(
    station_id: str,
    broadcast_date: DateOnly | str,
    programs: Sequence[ConvertedProgram],
    *,
    day_start: str | None = None,
) -> list[ProgramRecord]:
    """
    Build a gapless timeline from programs in feed order.

    Programs are not re-sorted. Whenever the previous program ends strictly
    before the next one starts, a filler record covers the hole; after the
    last program a filler runs to 29:00:00 of the block's date. That final
    end keeps its extended form (yyyyMMdd290000); every other timestamp is
    normalized.

    Args:
        station_id: Station the programs belong to
        broadcast_date: Nominal date of the block (DateOnly or yyyyMMdd)
        programs: Converted programs in feed order
        day_start: Optional extended-clock token (e.g. "050000"); when set, a
            leading filler covers [day_start, first program start)

    Returns:
        Ordered records; empty if the block has no programs
    """
    if not programs:
        return []

    if not isinstance(broadcast_date, DateOnly):
        broadcast_date = parse_date_only(broadcast_date)

    previous_end: DateTimeString | None = None
    if day_start is not None:
        previous_end = convert_broadcast_time(day_start, broadcast_date, "00")

    timeline: list[ProgramRecord] = []
    for program in programs:
        if previous_end is not None and previous_end < program.ft:
            timeline.append(make_filler(station_id, previous_end, program.ft))
        timeline.append(to_record(station_id, program))
        previous_end = program.to

    boundary = extended_boundary(broadcast_date)
    if previous_end < extended_boundary_instant(broadcast_date):
        timeline.append(make_filler(station_id, previous_end, boundary))

    logger.debug(
        "Filled %s: %s programs -> %s records (boundary %s)",
        station_id,
        len(programs),
        len(timeline),
        boundary,
    )
    return timeline
