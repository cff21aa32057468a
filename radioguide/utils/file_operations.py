"""
File operation utilities

Reads program guide feed files from local disk without blocking the event loop.
"""
import logging
from pathlib import Path

import aiofiles


logger = logging.getLogger(__name__)


async def read_feed_file(file_path: Path | str) -> bytes:
    """
    Read a feed file asynchronously

    Args:
        file_path: Path to the feed XML file

    Returns:
        Raw file contents

    Raises:
        FileNotFoundError: If the file doesn't exist
        OSError: If the file can't be read
    """
    if isinstance(file_path, str):
        file_path = Path(file_path)

    logger.info(f"Reading feed file {file_path}...")

    async with aiofiles.open(file_path, 'rb') as f:
        content = await f.read()

    logger.info(f"Read {len(content) / 1024:.1f} KB from {file_path}")
    return content
