"""
This module defines the core domain models for the application.

These classes represent the pure, technology-agnostic entities and data
structures that the application's business logic operates on, together
with the ports the infrastructure layer implements.
"""

import dataclasses
from datetime import datetime
from pathlib import Path

from abc import ABC, abstractmethod
from typing import Dict, List, Optional


# --- Domain Models ---

@dataclasses.dataclass(frozen=True)
class Snapshot:
    """A daily report that was found and downloaded to the staging area."""

    date_label: str
    path: Path
    content: str


@dataclasses.dataclass(frozen=True)
class CaseRow:
    """
    One parsed line of a daily report.

    Count fields hold the raw text of the cell. Cleaning them into integers
    is the aggregator's job, so nothing is lost or rejected at parse time.
    """

    country: str
    confirmed: str
    deaths: str
    recovered: str
    active: str
    last_update: str


@dataclasses.dataclass
class CountryCases:
    """Running case totals for one country (or the worldwide aggregate)."""

    name: str
    last_updated_by_source_at: Optional[datetime] = None
    confirmed: int = 0
    deaths: int = 0
    recovered: int = 0
    active: int = 0

    def add(self, confirmed: int, deaths: int, recovered: int, active: int):
        """Increment all four counters. Counts must be non-negative."""
        if min(confirmed, deaths, recovered, active) < 0:
            raise ValueError(f"Negative count for {self.name}")
        self.confirmed += confirmed
        self.deaths += deaths
        self.recovered += recovered
        self.active += active


@dataclasses.dataclass
class RunContext:
    """Run-scoped state handed from one pipeline stage to the next."""

    snapshot: Optional[Snapshot] = None
    rows: List[CaseRow] = dataclasses.field(default_factory=list)
    countries: Dict[str, CountryCases] = dataclasses.field(
        default_factory=dict
    )


# --- Ports (Interfaces) ---

class Fetcher(ABC):
    """A port for downloading a remote snapshot file."""

    @abstractmethod
    async def fetch(self, url: str, destination: Path):
        """
        Downloads the resource at `url` to `destination`.
        Raises FetchError on failure, leaving nothing at `destination`.
        """
        pass


class RowParser(ABC):
    """A port for turning raw snapshot content into rows."""

    @abstractmethod
    def parse(self, content: str) -> List[CaseRow]:
        """
        Parses the content, header first, into rows in input order.
        Raises MalformedInputError if the header is unusable.
        """
        pass


class CaseStore(ABC):
    """A port for the document store that receives the aggregated records."""

    @abstractmethod
    async def connect(self):
        pass

    @abstractmethod
    async def drop_collection(self):
        """Removes the records written by the previous run."""
        pass

    @abstractmethod
    async def insert(self, record: CountryCases):
        pass

    @abstractmethod
    async def close(self):
        pass
