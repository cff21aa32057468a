"""
Shared dataclasses used across the feed ingestion pipeline.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from radioguide.utils.temporal_types import DateTimeString


@dataclass(slots=True)
class RawProgramEntry:
    """One program as decoded from the feed, before time normalization."""
    station_id: str
    program_id: str
    start_token: str
    end_token: str
    title: str = ""
    info: str = ""
    pfm: str = ""
    img: str = ""
    duration: str = ""


@dataclass(slots=True)
class DateBlock:
    """Programs filed under one nominal broadcast date (yyyyMMdd)."""
    date: str
    programs: list[RawProgramEntry] = field(default_factory=list)


@dataclass(slots=True)
class StationFeed:
    """A station and its date blocks in feed order."""
    station_id: str
    blocks: list[DateBlock] = field(default_factory=list)


@dataclass(slots=True)
class FeedPayload:
    """Structurally decoded feed; stations is None when the station container is missing."""
    stations: list[StationFeed] | None


@dataclass(frozen=True, slots=True)
class ConvertedProgram:
    """A feed entry with its start and end resolved to normalized timestamps."""
    entry: RawProgramEntry
    ft: DateTimeString
    to: DateTimeString


@dataclass(frozen=True, slots=True)
class ProgramRecord:
    """Normalized program row handed to persistence; never mutated afterwards."""
    station_id: str
    prog_id: str
    ft: DateTimeString
    to: DateTimeString
    title: str = ""
    info: str = ""
    pfm: str = ""
    img: str = ""

    @property
    def is_filler(self) -> bool:
        return self.prog_id == filler_program_id(self.station_id, self.ft)


def program_id_for(station_id: str, source_program_id: str, ft: str) -> str:
    return f"{station_id}_{source_program_id}_{ft}"


def filler_program_id(station_id: str, ft: str) -> str:
    return f"{station_id}_{ft}"


RECORD_FIELDS = ("station_id", "prog_id", "ft", "to", "title", "info", "pfm", "img")


__all__ = [
    "RawProgramEntry",
    "DateBlock",
    "StationFeed",
    "FeedPayload",
    "ConvertedProgram",
    "ProgramRecord",
    "program_id_for",
    "filler_program_id",
    "RECORD_FIELDS",
]
