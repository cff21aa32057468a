from pydantic import BaseModel, Field

from radioguide.services.ingest_types import ProgramRecord
from radioguide.utils.broadcast_time import to_extended_timestamp


class ProgramResponse(BaseModel):
    """Single program of a station timeline"""
    prog_id: str = Field(..., description="Program ID unique within the store")
    station_id: str
    ft: str = Field(..., description="Start, normalized yyyyMMddHHmmss")
    to: str = Field(..., description="End, normalized yyyyMMddHHmmss")
    ft_extended: str = Field(..., description="Start on the extended (05:00-29:00) clock")
    to_extended: str = Field(..., description="End on the extended (05:00-29:00) clock")
    title: str
    info: str
    pfm: str = Field(..., description="Performers / personalities")
    img: str = Field(..., description="Image URL")

    @classmethod
    def from_record(cls, record: ProgramRecord) -> "ProgramResponse":
        return cls(
            prog_id=record.prog_id,
            station_id=record.station_id,
            ft=record.ft,
            to=record.to,
            ft_extended=to_extended_timestamp(record.ft),
            to_extended=to_extended_timestamp(record.to),
            title=record.title,
            info=record.info,
            pfm=record.pfm,
            img=record.img,
        )


class IngestResponse(BaseModel):
    """Outcome of a feed ingestion run"""
    timestamp: str
    processed_stations: list[str] = Field(..., description="Stations whose timelines were fully committed")
    programs_total: int = Field(..., description="Programs in the store after the run")


class ScheduleResponse(BaseModel):
    """A station's programs for one broadcast day"""
    station_id: str
    date: str = Field(..., description="Nominal broadcast date, yyyyMMdd")
    total_programs: int
    programs: list[ProgramResponse]


class NowPlayingResponse(BaseModel):
    """Program airing at the current broadcast time"""
    station_id: str
    broadcast_time: str
    remaining_seconds: int
    program: ProgramResponse


class ExpiredResponse(BaseModel):
    """Outcome of removing finished programs"""
    before: str
    deleted: int
