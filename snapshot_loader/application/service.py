"""
The core application service, containing pure business logic.

This module defines the orchestrator (SnapshotPipeline) that finds the
latest daily report, aggregates it and replaces the stored records with
the new totals.
"""

import asyncio
import logging
from typing import Dict, Optional

from tqdm.contrib.logging import logging_redirect_tqdm

from .aggregation import Aggregator
from .domain import CaseStore, CountryCases, RowParser, RunContext
from .locator import SnapshotLocator


class SnapshotPipeline:
    """Runs Locate -> Parse -> Aggregate -> Persist, strictly in order."""

    def __init__(
        self,
        locator: SnapshotLocator,
        parser: RowParser,
        aggregator: Aggregator,
        store: CaseStore,
        max_lookback_days: Optional[int] = None,
    ):
        """Initializes the pipeline with necessary dependencies (ports)."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.locator = locator
        self.parser = parser
        self.aggregator = aggregator
        self.store = store
        self.max_lookback_days = max_lookback_days

    async def _persist(self, countries: Dict[str, CountryCases]):
        """Replace the stored records with the new totals."""
        try:
            await self.store.connect()
            await self.store.drop_collection()
            for record in countries.values():
                await self.store.insert(record)
        finally:
            await self.store.close()

    async def run(self) -> RunContext:
        """
        Executes one full run.

        Any error aborts the remaining stages, so nothing is written to the
        store unless the snapshot was found, parsed and aggregated.

        Returns:
            The run context holding the snapshot, rows and totals.

        Raises:
            LoaderError: Any subclass, raised by the stage that failed.
        """

        context = RunContext()

        self.logger.info("Downloading data...")
        with logging_redirect_tqdm():
            context.snapshot = await self.locator.locate(self.max_lookback_days)

        # Step 1: Parse (Snapshot -> rows)
        context.rows = await asyncio.to_thread(
            self.parser.parse, context.snapshot.content
        )

        # Step 2: Aggregate (rows -> totals)
        context.countries = self.aggregator.aggregate(context.rows)

        # Step 3: Persist (totals -> store)
        self.logger.info("Saving data to database...")
        await self._persist(context.countries)

        self.logger.info(
            f"Finished: saved {len(context.countries)} records from "
            f"{context.snapshot.date_label}"
        )
        return context
