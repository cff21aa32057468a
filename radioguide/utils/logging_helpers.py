"""
Structured logging helpers for consistent log formatting.
"""
import logging
from datetime import datetime, timezone


def log_section_start(logger: logging.Logger, section_name: str) -> None:
    """
    Log the start of a processing section.

    Args:
        logger: Logger instance
        section_name: Name of the section being started
    """
    logger.info(f"Starting: {section_name}")


def log_section_end(logger: logging.Logger, section_name: str) -> None:
    """
    Log the end of a processing section.

    Args:
        logger: Logger instance
        section_name: Name of the section being ended
    """
    logger.info(f"Completed: {section_name}")


def log_station_processing(logger: logging.Logger, idx: int, total: int, station_id: str) -> None:
    """
    Log station processing header.

    Args:
        logger: Logger instance
        idx: Current station index (1-based)
        total: Total number of stations in the feed
        station_id: Station being processed
    """
    logger.info(f"Processing station {idx}/{total}: {station_id}")


def log_ingest_start(logger: logging.Logger) -> None:
    """Log feed ingestion start."""
    logger.info(f"Feed ingestion started at {datetime.now(timezone.utc).isoformat()}")


def log_ingest_end(logger: logging.Logger) -> None:
    """Log feed ingestion end."""
    logger.info(f"Feed ingestion completed at {datetime.now(timezone.utc).isoformat()}")


def log_timeline_summary(
    logger: logging.Logger,
    station_id: str,
    programs_count: int,
    filler_count: int
) -> None:
    """
    Log the shape of a station's normalized timeline.

    Args:
        logger: Logger instance
        station_id: Station the timeline belongs to
        programs_count: Number of records taken from the feed
        filler_count: Number of synthesized gap records
    """
    logger.info(
        f"Timeline for {station_id}: {programs_count} programs, {filler_count} fillers"
    )
