"""
Finding the most recent published snapshot by probing backward in time.
"""

import logging
from datetime import date, timedelta
from pathlib import Path
from typing import Callable, Iterator, Optional

from .domain import Fetcher, Snapshot
from .exceptions import FetchError, MalformedInputError, NotFoundError

DATE_LABEL_FORMAT = "%m-%d-%Y"


def date_label(day: date) -> str:
    """Format a day the way the remote source names its files."""
    return day.strftime(DATE_LABEL_FORMAT)


def candidate_dates(start: date, max_lookback_days: int) -> Iterator[date]:
    """Yield `start` and the days before it, newest first."""
    for offset in range(max_lookback_days):
        yield start - timedelta(days=offset)


class SnapshotLocator:
    """Probes one day at a time until a snapshot can be downloaded."""

    def __init__(
        self,
        fetcher: Fetcher,
        url_template: str,
        staging_dir: Path,
        max_lookback_days: int = 90,
        today: Callable[[], date] = date.today,
    ):
        """Initializes the locator with its fetcher and source policy."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.fetcher = fetcher
        self.url_template = url_template
        self.staging_dir = Path(staging_dir)
        self.max_lookback_days = max_lookback_days
        self.today = today

    def _url_for(self, file_name: str) -> str:
        return self.url_template.format(file_name=file_name)

    async def _try_fetch(self, day: date) -> Optional[Snapshot]:
        """Attempt one candidate day, cleaning up after a failure."""
        label = date_label(day)
        file_name = f"{label}.csv"
        destination = self.staging_dir / file_name

        try:
            await self.fetcher.fetch(self._url_for(file_name), destination)
        except FetchError as e:
            destination.unlink(missing_ok=True)
            self.logger.info(f"No snapshot for {label}: {e}")
            return None

        self.logger.info(f"Download completed: {file_name}")
        try:
            content = destination.read_text(encoding="utf-8-sig")
        except UnicodeDecodeError as e:
            raise MalformedInputError(f"{file_name} is not UTF-8 text") from e
        return Snapshot(date_label=label, path=destination, content=content)

    async def locate(self, max_lookback_days: Optional[int] = None) -> Snapshot:
        """
        Return the most recent snapshot within the lookback window.

        Candidates are tried strictly one after the other and the first
        successful download wins.

        Args:
            max_lookback_days: Number of days to try, today included.
                Defaults to the value the locator was built with.

        Returns:
            The downloaded Snapshot.

        Raises:
            NotFoundError: If every candidate day failed.
        """

        if max_lookback_days is None:
            max_lookback_days = self.max_lookback_days

        self.staging_dir.mkdir(parents=True, exist_ok=True)

        for day in candidate_dates(self.today(), max_lookback_days):
            snapshot = await self._try_fetch(day)
            if snapshot is not None:
                return snapshot

        raise NotFoundError(max_lookback_days)
