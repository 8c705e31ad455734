"""
Dependency Injection container for the snapshot_loader component.

This container uses the `dependency-injector` library to wire together all
the components of the application, such as services and infrastructure adapters,
based on the application's configuration.
"""

from dependency_injector import containers, providers
import httpx

from ..application.aggregation import Aggregator
from ..application.domain import CaseStore, Fetcher, RowParser
from ..application.locator import SnapshotLocator
from ..application.service import SnapshotPipeline
from ..settings import settings

from .csv_parser import CsvRowParser
from .downloader import HttpFetcher
from .mongo_store import MongoCaseStore


class Container(containers.DeclarativeContainer):
    """DI container for wiring the application components."""

    config = providers.Object(settings)

    http_client = providers.Singleton(httpx.AsyncClient, follow_redirects=True)

    fetcher: providers.Factory[Fetcher] = providers.Factory(
        HttpFetcher,
        client=http_client,
        timeout=config().loader.timeout,
        chunk_size=config().loader.downloader.chunk_size,
        retry_attempts=config().loader.retry.attempts,
        retry_min_wait=config().loader.retry.min_wait,
        retry_max_wait=config().loader.retry.max_wait,
    )

    locator = providers.Factory(
        SnapshotLocator,
        fetcher=fetcher,
        url_template=config().loader.url_template,
        staging_dir=config().paths.staging_dir,
        max_lookback_days=config().loader.max_lookback_days,
    )

    parser: providers.Factory[RowParser] = providers.Factory(
        CsvRowParser,
        columns=config().loader.columns,
    )

    aggregator = providers.Factory(
        Aggregator,
        worldwide_name=config().loader.worldwide_name,
    )

    store: providers.Factory[CaseStore] = providers.Factory(
        MongoCaseStore,
        uri=config().mongo.uri,
        database=config().mongo.database,
        collection=config().mongo.collection,
        timeout=config().mongo.timeout,
    )

    pipeline = providers.Factory(
        SnapshotPipeline,
        locator=locator,
        parser=parser,
        aggregator=aggregator,
        store=store,
    )
