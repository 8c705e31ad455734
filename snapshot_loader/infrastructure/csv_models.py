"""
Pydantic model for validating the records of a daily report CSV.

The model is the contract between the CSV layout and the application core:
the parser renames the configured source columns to these field names
before validating each record.
"""

from pydantic import BaseModel, ConfigDict


class CsvCaseRecord(BaseModel):
    """
    Represents one line of a daily report.

    Every field is kept as text. Reports routinely carry blank or
    non-numeric counts, and cleaning those is left to the aggregator.
    """

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    country: str
    confirmed: str
    deaths: str
    recovered: str
    active: str
    last_update: str
