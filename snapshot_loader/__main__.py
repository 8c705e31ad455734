"""
Entry point for the snapshot_loader component.
"""

import argparse
import asyncio
import logging
import sys

from .application.exceptions import LoaderError
from .infrastructure.containers import Container

logger = logging.getLogger(__name__)


def setup_logging(level: str):
    """Applies basic logging configuration."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def run_application(container: Container) -> int:
    """Runs the pipeline once and returns the process exit status."""

    try:
        pipeline = container.pipeline()
        await pipeline.run()
    except LoaderError as e:
        logger.error(f"An application error occurred: {e}")
        return 1
    finally:
        await container.http_client().aclose()

    return 0


def main():
    parser = argparse.ArgumentParser(
        description=(
            "Download the latest daily case report, aggregate it per "
            "country and replace the stored records."
        )
    )
    parser.parse_args()

    container = Container()
    setup_logging(level=container.config().logging.level)

    sys.exit(asyncio.run(run_application(container)))


if __name__ == "__main__":
    main()
