"""MongoDB implementation of the CaseStore port."""

import logging
from typing import Any, Dict, Optional

from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from ..application.domain import CaseStore, CountryCases
from ..application.exceptions import ConfigurationError, PersistenceError


class MongoCaseStore(CaseStore):
    """A store that keeps one document per country in a MongoDB collection."""

    def __init__(
        self,
        uri: str,
        database: str,
        collection: str,
        timeout: float = 10,
    ):
        """
        Initializes the store adapter. No connection is made until connect().

        Raises:
            ConfigurationError: If the URI or a name is missing.
        """
        if not uri or not database or not collection:
            raise ConfigurationError(
                "MongoDB uri, database and collection must all be set. "
                "Please check your config files."
            )

        self.logger = logging.getLogger(self.__class__.__name__)
        self.uri = uri
        self.database_name = database
        self.collection_name = collection
        self.timeout = timeout
        self.client: Optional[AsyncMongoClient] = None

    @property
    def _collection(self):
        if self.client is None:
            raise PersistenceError("Store is not connected")
        return self.client[self.database_name][self.collection_name]

    @staticmethod
    def _to_document(record: CountryCases) -> Dict[str, Any]:
        """Maps a domain model to the stored document."""
        return {
            "country": record.name,
            "confirmed": record.confirmed,
            "deaths": record.deaths,
            "recovered": record.recovered,
            "active": record.active,
            "last_updated_by_source_at": record.last_updated_by_source_at,
        }

    async def connect(self):
        """Open the client and make sure the server answers."""
        self.client = AsyncMongoClient(
            self.uri,
            serverSelectionTimeoutMS=int(self.timeout * 1000),
            tz_aware=True,
        )
        try:
            await self.client.admin.command("ping")
        except PyMongoError as e:
            raise PersistenceError(f"Unable to connect to MongoDB: {e}") from e
        self.logger.info(
            f"Connected to {self.database_name}.{self.collection_name}"
        )

    async def drop_collection(self):
        try:
            await self._collection.drop()
        except PyMongoError as e:
            raise PersistenceError(
                f"Failed to drop {self.collection_name}: {e}"
            ) from e

    async def insert(self, record: CountryCases):
        try:
            await self._collection.insert_one(self._to_document(record))
        except PyMongoError as e:
            raise PersistenceError(
                f"Failed to insert record for {record.name}: {e}"
            ) from e

    async def close(self):
        if self.client is not None:
            await self.client.close()
            self.client = None
