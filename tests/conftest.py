from pathlib import Path

import pytest
import pytest_asyncio

from radioguide.database import close_db, init_db
from radioguide.services.ingest_coordinator import reset_ingest_coordinator
from radioguide.services.program_store import ProgramStore


SAMPLE_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<radiko>
  <ttl>1800</ttl>
  <stations>
    <station id="TBS">
      <name>TBS Radio</name>
      <progs>
        <date>20250101</date>
        <prog id="1001" ftl="100000" tol="120000" dur="7200">
          <title>Morning Show</title>
          <info>News &amp; Talk</info>
          <pfm>DJ Alice</pfm>
          <img>http://example.com/a.jpg</img>
        </prog>
      </progs>
    </station>
    <station id="QRR">
      <progs>
        <date>20250101</date>
        <prog id="2001" ftl="050000" tol="290000">
          <title>All Day</title>
        </prog>
      </progs>
    </station>
  </stations>
</radiko>
"""


@pytest_asyncio.fixture
async def database(tmp_path: Path):
    reset_ingest_coordinator()
    await init_db(str(tmp_path / "programs.db"))
    yield
    await close_db()
    reset_ingest_coordinator()


@pytest_asyncio.fixture
async def store(database) -> ProgramStore:
    program_store = ProgramStore()
    await program_store.ensure_default_indexes()
    return program_store


@pytest.fixture
def sample_feed() -> str:
    return SAMPLE_FEED
