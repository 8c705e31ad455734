"""
Shared fixtures: in-memory fakes for the Fetcher and CaseStore ports.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Dict, List

import pytest

from snapshot_loader.application.domain import CaseStore, CountryCases, Fetcher
from snapshot_loader.application.exceptions import FetchError, PersistenceError

URL_TEMPLATE = "https://reports.example.test/daily/{file_name}"

SAMPLE_CSV = (
    "Country_Region,Confirmed,Deaths,Recovered,Active,Last_Update\n"
    "USA,100,5,-50,45,2021-01-01 04:00:00\n"
    "Italy,abc,2,10,18,2021-01-01 04:00:00\n"
)


class FakeFetcher(Fetcher):
    """Serves reports by file name; anything else fails after a partial write."""

    def __init__(self, reports: Dict[str, str] | None = None):
        self.reports = reports or {}
        self.urls: List[str] = []

    async def fetch(self, url: str, destination: Path):
        self.urls.append(url)
        file_name = url.rsplit("/", 1)[-1]
        if file_name not in self.reports:
            destination.write_text("partial")
            raise FetchError(f"404 for {url}")
        destination.write_text(self.reports[file_name])


class FakeStore(CaseStore):
    """Records every call made on the store."""

    def __init__(self, fail_on_insert: bool = False, fail_on_connect: bool = False):
        self.fail_on_insert = fail_on_insert
        self.fail_on_connect = fail_on_connect
        self.calls: List[str] = []
        self.records: List[CountryCases] = []

    async def connect(self):
        self.calls.append("connect")
        if self.fail_on_connect:
            raise PersistenceError("server unreachable")

    async def drop_collection(self):
        self.calls.append("drop")
        self.records.clear()

    async def insert(self, record: CountryCases):
        self.calls.append("insert")
        if self.fail_on_insert:
            raise PersistenceError("insert rejected")
        self.records.append(record)

    async def close(self):
        self.calls.append("close")


@pytest.fixture()
def staging_dir(tmp_path: Path) -> Path:
    return tmp_path / "staging"


@pytest.fixture()
def today() -> date:
    return date(2021, 1, 3)


@pytest.fixture()
def store() -> FakeStore:
    return FakeStore()
