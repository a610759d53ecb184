"""
Catalog refresh job.

Fetches the cosmetics catalog the resolver matches report tokens against,
then parses the saved file and builds an index from it so a truncated or
malformed download fails here rather than at service startup.

    python -m lockerscope.jobs.download_catalog [output_path]
"""

import asyncio
import logging
import sys
from pathlib import Path

from lockerscope.services.catalog_database import (
    download_catalog,
    get_catalog_index,
    load_catalog,
)
from lockerscope.services.catalog_index import CatalogIndex

logger = logging.getLogger(__name__)


async def run_download(output_path: Path | None = None) -> int:
    """
    Refresh the local catalog file.

    Args:
        output_path: Where to save the catalog. Defaults to settings.catalog_path

    Returns:
        Number of usable catalog records in the saved file

    Raises:
        CatalogDownloadError: If the catalog service can't be reached
        ValueError: If the saved file isn't a usable catalog
    """
    try:
        path = await download_catalog(output_path)
    except Exception as e:
        logger.error("CATALOG_REFRESH_FAILED", extra={"stage": "download", "error": str(e)})
        raise

    try:
        records = load_catalog(path)
        index = CatalogIndex.build(records)
    except ValueError as e:
        logger.error("CATALOG_REFRESH_FAILED", extra={"stage": "parse", "error": str(e)})
        raise

    # An index cached by this process is stale now
    get_catalog_index.cache_clear()

    logger.info(
        "CATALOG_REFRESHED",
        extra={"path": str(path), "records": len(records), "ids": len(index)},
    )
    return len(records)


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    output_path = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    asyncio.run(run_download(output_path))


if __name__ == "__main__":
    main()
