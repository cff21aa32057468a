"""
SQLAlchemy ORM Models for the Radio Guide Service

This module defines the database model for normalized station programs.
"""
from datetime import datetime, timezone
from sqlalchemy import Integer, String, Text, DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models"""
    pass


class Program(Base):
    """One record of a station's normalized timeline (real program or filler)"""
    __tablename__ = "programs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    station_id: Mapped[str] = mapped_column(String, nullable=False)
    prog_id: Mapped[str] = mapped_column(String, nullable=False)
    # yyyyMMddHHmmss
    ft: Mapped[str] = mapped_column(String(14), nullable=False)
    # Final filler of a day keeps its extended end (yyyyMMdd290000)
    to: Mapped[str] = mapped_column(String(14), nullable=False)
    # Normalized end used for time-ordered lookups
    to_instant: Mapped[str] = mapped_column(String(14), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String, nullable=False, default="")
    info: Mapped[str] = mapped_column(Text, nullable=False, default="")
    pfm: Mapped[str] = mapped_column(String, nullable=False, default="")
    img: Mapped[str] = mapped_column(String, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(timezone.utc))

    def __repr__(self) -> str:
        return f"<Program(prog_id={self.prog_id}, station={self.station_id}, ft={self.ft}, to={self.to})>"
