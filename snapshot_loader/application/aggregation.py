"""
Folding parsed report rows into per-country and worldwide case totals.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Dict, Iterable, Sequence

from .domain import CaseRow, CountryCases
from .exceptions import (
    EmptySnapshotError,
    InternalConsistencyError,
    MalformedInputError,
)

WORLDWIDE = "Worldwide"

_LEADING_INTEGER = re.compile(r"\s*([+-]?\d+)")


def clean_count(value: str) -> int:
    """
    Turn a raw count cell into a non-negative integer.

    The leading integer of the cell is used; a cell without one counts as 0.
    A negative count is a data-entry sign error and its sign is dropped.
    """
    match = _LEADING_INTEGER.match(value or "")
    if match is None:
        return 0
    return abs(int(match.group(1)))


def parse_last_update(value: str) -> datetime:
    """
    Parse a report's update time as a UTC timestamp with whole seconds.

    Times without an offset are taken to be UTC already.
    """
    try:
        parsed = datetime.fromisoformat(value.strip())
    except (AttributeError, ValueError) as e:
        raise MalformedInputError(
            f"Unparsable last update time: {value!r}"
        ) from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    else:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.replace(microsecond=0)


class Aggregator:
    """Builds one accumulator per country plus the worldwide aggregate."""

    def __init__(self, worldwide_name: str = WORLDWIDE):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.worldwide_name = worldwide_name

    def _create_countries(
        self, rows: Sequence[CaseRow]
    ) -> Dict[str, CountryCases]:
        """Create a zeroed accumulator for every name, sharing one timestamp."""
        names = {row.country for row in rows}
        names.add(self.worldwide_name)
        last_updated = parse_last_update(rows[0].last_update)
        return {
            name: CountryCases(name=name, last_updated_by_source_at=last_updated)
            for name in names
        }

    def _fold(self, countries: Dict[str, CountryCases], rows: Iterable[CaseRow]):
        worldwide = countries[self.worldwide_name]
        for row in rows:
            country = countries.get(row.country)
            if country is None:
                raise InternalConsistencyError(
                    f"No accumulator for country {row.country!r}"
                )

            counts = (
                clean_count(row.confirmed),
                clean_count(row.deaths),
                clean_count(row.recovered),
                clean_count(row.active),
            )
            country.add(*counts)
            worldwide.add(*counts)

    def aggregate(self, rows: Sequence[CaseRow]) -> Dict[str, CountryCases]:
        """
        Aggregate report rows into case totals keyed by country name.

        Every row is added to its own country and to the worldwide entry,
        so the worldwide counters always equal the sum over all countries.

        Args:
            rows: Parsed report rows, in any order.

        Returns:
            A mapping of country name to its totals, worldwide included.

        Raises:
            EmptySnapshotError: If there are no rows to aggregate.
            MalformedInputError: If the first row's update time is unusable.
        """

        if not rows:
            raise EmptySnapshotError("Snapshot contains no data rows")

        countries = self._create_countries(rows)
        self._fold(countries, rows)

        self.logger.info(
            f"Aggregated {len(rows)} rows into {len(countries) - 1} countries."
        )
        return countries
