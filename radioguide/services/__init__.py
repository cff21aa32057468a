"""
Services package for the Radio Guide Service

This package contains all business logic and service layer components.
"""
from radioguide.services.program_query_service import (
    count_programs,
    delete_expired_programs,
    find_program_at,
    get_station_day,
)
from radioguide.services.ingest_service import ingest_feed_file, run_ingestion
from radioguide.services.feed_parser_service import parse_program_feed

__all__ = [
    'count_programs',
    'delete_expired_programs',
    'find_program_at',
    'get_station_day',
    'ingest_feed_file',
    'run_ingestion',
    'parse_program_feed',
]
