"""
Program persistence

Document-style operations over the programs table: insert, find by example,
remove, count and index management. Every insert runs in its own transaction
so a committed record is durable before the next one is issued.
"""
import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import delete, func, select, text
from sqlalchemy.exc import IntegrityError

from radioguide.database import session_scope
from radioguide.models import Program
from radioguide.services.ingest_types import RECORD_FIELDS, ProgramRecord
from radioguide.utils.broadcast_time import normalize_extended_timestamp


logger = logging.getLogger(__name__)

Query = Mapping[str, Any]


def _build_filters(query: Query | None) -> list:
    """Translate a query-by-example mapping into column equality filters."""
    filters = []
    for field_name, value in (query or {}).items():
        if field_name not in RECORD_FIELDS:
            raise ValueError(f"Unknown program field in query: {field_name}")
        filters.append(getattr(Program, field_name) == value)
    return filters


def to_record(row: Program) -> ProgramRecord:
    """Convert an ORM row into an immutable ProgramRecord"""
    return ProgramRecord(**{field_name: getattr(row, field_name) for field_name in RECORD_FIELDS})


class ProgramStore:
    """Document-style store for normalized program records"""

    async def insert(self, record: ProgramRecord) -> ProgramRecord:
        """
        Insert a single record and commit it.

        Args:
            record: Record to persist

        Returns:
            The committed record as read back from the row

        Raises:
            IntegrityError: If a unique index (prog_id) is violated
        """
        row = Program(
            **{field_name: getattr(record, field_name) for field_name in RECORD_FIELDS},
            to_instant=normalize_extended_timestamp(record.to),
        )
        try:
            async with session_scope() as session:
                session.add(row)
                await session.flush()
        except IntegrityError:
            logger.warning("Insert rejected for program %s (station %s)", record.prog_id, record.station_id)
            raise
        return to_record(row)

    async def find_one(self, query: Query) -> ProgramRecord | None:
        """Return the first record matching every field in query, or None"""
        async with session_scope() as session:
            result = await session.execute(
                select(Program).where(*_build_filters(query)).order_by(Program.id).limit(1)
            )
            row = result.scalars().first()
        return to_record(row) if row is not None else None

    async def find(self, query: Query) -> list[ProgramRecord]:
        """Return all matching records in insertion order"""
        async with session_scope() as session:
            result = await session.execute(
                select(Program).where(*_build_filters(query)).order_by(Program.id)
            )
            rows = result.scalars().all()
        return [to_record(row) for row in rows]

    async def remove(self, query: Query, *, multi: bool = True) -> int:
        """
        Delete matching records.

        Args:
            query: Query-by-example filter
            multi: Remove every match when True, only the first otherwise

        Returns:
            Number of removed records
        """
        filters = _build_filters(query)
        async with session_scope() as session:
            if multi:
                result = await session.execute(select(func.count(Program.id)).where(*filters))
                removed = result.scalar_one_or_none() or 0
                await session.execute(delete(Program).where(*filters))
            else:
                result = await session.execute(
                    select(Program.id).where(*filters).order_by(Program.id).limit(1)
                )
                row_id = result.scalar_one_or_none()
                removed = 0
                if row_id is not None:
                    await session.execute(delete(Program).where(Program.id == row_id))
                    removed = 1

        logger.info("Removed %s programs matching %s", removed, dict(query))
        return removed

    async def count(self, query: Query | None = None) -> int:
        """Count records matching query (all records when query is empty)"""
        async with session_scope() as session:
            result = await session.execute(
                select(func.count(Program.id)).where(*_build_filters(query))
            )
            return result.scalar_one_or_none() or 0

    async def ensure_index(self, field_name: str, *, unique: bool = False) -> None:
        """Create an index on a record field if it does not exist yet"""
        if field_name not in RECORD_FIELDS:
            raise ValueError(f"Cannot index unknown program field: {field_name}")

        # Separate names so a plain index never satisfies a unique request
        kind = "UNIQUE INDEX" if unique else "INDEX"
        index_name = f"{'uq' if unique else 'idx'}_programs_{field_name}"
        async with session_scope() as session:
            await session.execute(
                text(f'CREATE {kind} IF NOT EXISTS {index_name} ON programs ("{field_name}")')
            )
        logger.debug("Ensured %s on programs.%s", kind.lower(), field_name)

    async def ensure_default_indexes(self) -> None:
        """Unique program ids plus lookup indexes on station and time columns"""
        await self.ensure_index("prog_id", unique=True)
        await self.ensure_index("station_id")
        await self.ensure_index("ft")
        await self.ensure_index("to")
