"""CSV implementation of the RowParser port."""

import io
import logging
from typing import Dict, List, Mapping

import pandas
from pydantic import ValidationError

from ..application.domain import CaseRow, RowParser
from ..application.exceptions import MalformedInputError

from .csv_models import CsvCaseRecord

DEFAULT_COLUMNS = {
    "country": "Country_Region",
    "confirmed": "Confirmed",
    "deaths": "Deaths",
    "recovered": "Recovered",
    "active": "Active",
    "last_update": "Last_Update",
}


class CsvRowParser(RowParser):
    """A parser that reads a daily report with a header line."""

    def __init__(self, columns: Mapping[str, str] = None):
        """
        Initializes the parser.

        Args:
            columns: Maps each CsvCaseRecord field to its source column
                     name. Fields left out use DEFAULT_COLUMNS.
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        columns = columns or {}
        self.columns: Dict[str, str] = {
            field: columns.get(field, DEFAULT_COLUMNS[field])
            for field in CsvCaseRecord.model_fields
        }

    def _read_frame(self, content: str) -> pandas.DataFrame:
        """Read the whole report as text, keeping blank cells as ''."""
        try:
            frame = pandas.read_csv(
                io.StringIO(content),
                dtype=str,
                index_col=False,
                keep_default_na=False,
            )
        except (pandas.errors.EmptyDataError, pandas.errors.ParserError) as e:
            raise MalformedInputError(f"Unable to parse snapshot: {e}") from e
        return frame.fillna("")

    def _check_columns(self, frame: pandas.DataFrame):
        """Fail fast when the source layout no longer has a needed column."""
        missing = [
            column for column in self.columns.values()
            if column not in frame.columns
        ]
        if missing:
            raise MalformedInputError(
                f"Snapshot header is missing columns: {', '.join(missing)}"
            )

    def _map_to_domain(self, dto: CsvCaseRecord) -> CaseRow:
        """Maps a single CSV DTO to a domain model."""
        return CaseRow(
            country=dto.country,
            confirmed=dto.confirmed,
            deaths=dto.deaths,
            recovered=dto.recovered,
            active=dto.active,
            last_update=dto.last_update,
        )

    def parse(self, content: str) -> List[CaseRow]:
        """
        Parse report content into rows, preserving input order.

        Args:
            content: The full text of the report, header line first.

        Returns:
            One CaseRow per data line.

        Raises:
            MalformedInputError: If the content is empty, is not CSV, or
                                 lacks one of the configured columns.
        """

        frame = self._read_frame(content)
        self._check_columns(frame)

        renamed = frame.rename(
            columns={source: field for field, source in self.columns.items()}
        )
        try:
            dtos = [
                CsvCaseRecord.model_validate(record)
                for record in renamed[list(self.columns)].to_dict("records")
            ]
        except ValidationError as e:
            raise MalformedInputError(f"Invalid snapshot record: {e}") from e

        rows = [self._map_to_domain(dto) for dto in dtos]
        self.logger.info(f"Parsed {len(rows)} rows.")
        return rows
