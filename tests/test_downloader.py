"""
Tests for the HTTP fetcher, served by httpx.MockTransport.
"""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from snapshot_loader.application.exceptions import FetchError
from snapshot_loader.infrastructure.downloader import HttpFetcher

from conftest import SAMPLE_CSV

URL = "https://reports.example.test/daily/01-01-2021.csv"


def make_fetcher(handler) -> HttpFetcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpFetcher(client=client, timeout=5, chunk_size=16)


class TestHttpFetcher:
    async def test_writes_body_to_destination(self, tmp_path: Path) -> None:
        fetcher = make_fetcher(
            lambda request: httpx.Response(200, content=SAMPLE_CSV.encode())
        )
        destination = tmp_path / "01-01-2021.csv"

        await fetcher.fetch(URL, destination)

        assert destination.read_text() == SAMPLE_CSV
        assert [p.name for p in tmp_path.iterdir()] == ["01-01-2021.csv"]

    async def test_requests_given_url(self, tmp_path: Path) -> None:
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, content=b"a,b\n")

        await make_fetcher(handler).fetch(URL, tmp_path / "x.csv")

        assert seen == [URL]

    @pytest.mark.parametrize("status", [403, 404, 500])
    async def test_status_error_raises_and_cleans_up(
        self, tmp_path: Path, status: int
    ) -> None:
        fetcher = make_fetcher(lambda request: httpx.Response(status))
        destination = tmp_path / "01-01-2021.csv"

        with pytest.raises(FetchError):
            await fetcher.fetch(URL, destination)

        assert list(tmp_path.iterdir()) == []

    async def test_status_error_is_not_retried(self, tmp_path: Path) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(404)

        with pytest.raises(FetchError):
            await make_fetcher(handler).fetch(URL, tmp_path / "x.csv")

        assert len(calls) == 1

    async def test_truncated_body_raises(self, tmp_path: Path) -> None:
        fetcher = make_fetcher(
            lambda request: httpx.Response(
                200, content=b"abc", headers={"Content-Length": "10"}
            )
        )
        destination = tmp_path / "01-01-2021.csv"

        with pytest.raises(FetchError, match="Size mismatch"):
            await fetcher.fetch(URL, destination)

        assert list(tmp_path.iterdir()) == []

    async def test_malformed_content_length_is_ignored(
        self, tmp_path: Path
    ) -> None:
        fetcher = make_fetcher(
            lambda request: httpx.Response(
                200, content=b"a,b\n", headers={"Content-Length": "many"}
            )
        )
        destination = tmp_path / "01-01-2021.csv"

        await fetcher.fetch(URL, destination)

        assert destination.read_text() == "a,b\n"

    async def test_transport_error_is_retried_then_raised(
        self, tmp_path: Path
    ) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        fetcher = HttpFetcher(
            client=client,
            timeout=5,
            chunk_size=16,
            retry_attempts=2,
            retry_min_wait=0,
            retry_max_wait=0,
        )

        with pytest.raises(FetchError, match="connection refused"):
            await fetcher.fetch(URL, tmp_path / "01-01-2021.csv")

        assert len(calls) == 2
        assert list(tmp_path.iterdir()) == []

    async def test_unwritable_destination_raises(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        fetcher = make_fetcher(lambda request: httpx.Response(200, content=b"x"))

        with pytest.raises(FetchError):
            await fetcher.fetch(URL, blocker / "01-01-2021.csv")
