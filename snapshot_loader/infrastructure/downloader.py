"""HTTP implementation of the Fetcher port."""

import asyncio
import contextlib
import logging
from pathlib import Path
from typing import AsyncGenerator, Generator, Optional

import httpx
from tqdm import tqdm

from ..application.domain import Fetcher
from ..application.exceptions import FetchError

from .decorators import transport_retry


class HttpFetcher(Fetcher):
    """A fetcher that streams files via HTTP atomically."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        timeout: float,
        chunk_size: int,
        retry_attempts: int = 3,
        retry_min_wait: float = 1,
        retry_max_wait: float = 10,
    ):
        """Initializes the fetcher adapter."""
        self.logger = logging.getLogger(self.__class__.__name__)
        self.client = client
        self.timeout = timeout
        self.chunk_size = chunk_size
        self._stream_from_network = transport_retry(
            retry_attempts, retry_min_wait, retry_max_wait
        )(self._stream_from_network)

    @contextlib.contextmanager
    def _atomic_target(self, destination: Path) -> Generator[Path, None, None]:
        """Provides a temporary '.part' path and ensures cleanup."""
        part_path = destination.with_suffix(destination.suffix + ".part")
        destination.parent.mkdir(parents=True, exist_ok=True)
        try:
            yield part_path
        finally:
            part_path.unlink(missing_ok=True)

    async def _stream_chunks(
        self, response: httpx.Response, target_file: Path,
    ):
        """Produce byte chunks from a response and write them to a file."""
        with open(target_file, "wb") as f:
            async for chunk in response.aiter_bytes(self.chunk_size):
                await asyncio.to_thread(f.write, chunk)
                yield len(chunk)

    async def _consume_stream_with_progress(
        self,
        stream: AsyncGenerator[int, None],
        total_size: Optional[int],
        desc: str,
    ):
        """Consume the byte stream to update a TQDM progress bar."""

        with tqdm(
            total=total_size, unit="B", unit_scale=True, desc=desc
        ) as progress_bar:
            async for progress in stream:
                progress_bar.update(progress)

        if total_size and progress_bar.n != total_size:
            raise FetchError(
                f"Size mismatch: {progress_bar.n} != {total_size}"
            )

    @staticmethod
    def _content_length(response: httpx.Response) -> Optional[int]:
        value = response.headers.get("Content-Length")
        # Compressed bodies are decoded, so the header no longer matches.
        if value is None or response.headers.get("Content-Encoding"):
            return None
        try:
            return int(value)
        except ValueError:
            return None

    async def _stream_from_network(self, url: str, target_file: Path):
        """Manage the network request and the streaming process."""
        async with self.client.stream(
            "GET", url, timeout=self.timeout
        ) as response:
            response.raise_for_status()
            stream = self._stream_chunks(response, target_file)
            await self._consume_stream_with_progress(
                stream, self._content_length(response), target_file.name
            )

    async def fetch(self, url: str, destination: Path):
        """
        Download a file to its destination, or leave nothing behind.

        This is the public method that fulfills the Fetcher port contract.
        The body is streamed to a '.part' file that only becomes the
        destination once it was written completely.

        Args:
            url: The remote resource to download.
            destination: The final desired path for the file.

        Raises:
            FetchError: If the request, the streaming or the write fails.
        """

        self.logger.debug(f"Fetching {url}")
        try:
            with self._atomic_target(destination) as part_path:
                await self._stream_from_network(url, part_path)
                part_path.replace(destination)
        except (httpx.HTTPError, OSError) as e:
            raise FetchError(f"Failed to download {url}: {e}") from e
