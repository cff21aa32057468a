"""
Program guide feed decoder

Maps the feed XML onto station -> date block -> program entry dataclasses.
Time tokens are passed through untouched; normalization happens later.

Expected shape:

    <radiko>
      <stations>
        <station id="TBS">
          <progs>
            <date>20250101</date>
            <prog id="123" ftl="0500" tol="0600" dur="3600">
              <title/><info/><pfm/><img/>
            </prog>
          </progs>
        </station>
      </stations>
    </radiko>
"""
import asyncio
import logging
from typing import Optional

from lxml import etree # type: ignore

from radioguide.services.ingest_types import DateBlock, FeedPayload, RawProgramEntry, StationFeed

logger = logging.getLogger(__name__)


def parse_program_feed(content: bytes | str) -> FeedPayload:
    """
    Decode feed XML into a FeedPayload

    Args:
        content: Raw feed XML

    Returns:
        FeedPayload; stations is None if the document has no <stations> container

    Raises:
        etree.XMLSyntaxError: If XML is malformed
    """
    if isinstance(content, str):
        content = content.encode("utf-8")

    try:
        root = etree.fromstring(content)
        logger.debug(f"  XML document loaded (root tag: {root.tag})")
    except etree.XMLSyntaxError as e:
        logger.error(f"  XML parsing error: {e}")
        raise

    stations_elem = root if root.tag == 'stations' else root.find('stations')
    if stations_elem is None:
        logger.warning(f"Feed has no <stations> container (root tag: {root.tag})")
        return FeedPayload(stations=None)

    stations = [_parse_station(station) for station in stations_elem.findall('station')]

    program_count = sum(len(block.programs) for station in stations for block in station.blocks)
    logger.info(f"Feed decoding complete: {len(stations)} stations, {program_count} programs")

    return FeedPayload(stations=stations)


def _parse_station(station: etree._Element) -> StationFeed:
    """Extract one station and its date blocks"""
    station_id = (station.get('id') or '').strip()
    if not station_id:
        logger.debug("Station with missing ID attribute will be ignored")

    blocks = []
    for progs in station.findall('progs'):
        block_date = _get_text(progs, 'date', default='') or ''
        programs = [_parse_program(station_id, prog) for prog in progs.findall('prog')]
        blocks.append(DateBlock(date=block_date, programs=programs))

    return StationFeed(station_id=station_id, blocks=blocks)


def _parse_program(station_id: str, prog: etree._Element) -> RawProgramEntry:
    """Parse single prog element"""
    # ftl/tol carry the extended-clock time of day; ft/to are full calendar
    # timestamps and are not read
    start_token = prog.get('ftl') or ''
    end_token = prog.get('tol') or ''

    return RawProgramEntry(
        station_id=station_id,
        program_id=prog.get('id') or '',
        start_token=start_token.strip(),
        end_token=end_token.strip(),
        title=_get_text(prog, 'title', default='') or '',
        info=_get_text(prog, 'info', default='') or '',
        pfm=_get_text(prog, 'pfm', default='') or '',
        img=_get_text(prog, 'img', default='') or '',
        duration=prog.get('dur') or '',
    )


def _get_text(element: etree._Element, tag: str, default: Optional[str] = None) -> Optional[str]:
    """Safely extract text from XML element"""
    child = element.find(tag)
    if child is None or not child.text:
        return default
    return child.text.strip()


async def parse_program_feed_async(
    content: bytes | str,
    *,
    parse_timeout_seconds: int | None = None
) -> FeedPayload:
    """
    Decode feed XML in the thread pool with timeout protection.

    Keyword Args:
        parse_timeout_seconds: Timeout in seconds for parsing (0/None disables timeout)

    Raises:
        ValueError: If parsing times out
        etree.XMLSyntaxError: If XML is malformed
    """
    effective_timeout = parse_timeout_seconds if parse_timeout_seconds and parse_timeout_seconds > 0 else None
    timeout_display = f"{effective_timeout}s" if effective_timeout else "disabled"

    loop = asyncio.get_running_loop()
    logger.debug("Offloading feed parsing to thread pool executor (timeout: %s)...", timeout_display)
    parse_task = loop.run_in_executor(None, parse_program_feed, content)

    try:
        if effective_timeout:
            return await asyncio.wait_for(parse_task, timeout=effective_timeout)
        return await parse_task
    except asyncio.TimeoutError:
        logger.error("Feed parsing timed out after %s", timeout_display)
        raise ValueError("Feed parsing timed out - document may be too large or malformed")
