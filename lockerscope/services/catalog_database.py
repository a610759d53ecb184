"""
Catalog database service.

Downloads, loads and caches the cosmetics catalog payload.
"""

import json
import logging
from datetime import date, datetime
from functools import lru_cache
from pathlib import Path
from typing import Any

import httpx

from lockerscope.config import settings
from lockerscope.models.catalog import DEFAULT_RARITY, CatalogRecord
from lockerscope.models.failure import CatalogDownloadError
from lockerscope.services.catalog_index import CatalogIndex

logger = logging.getLogger(__name__)

USER_AGENT = "LockerScope/1.0"


async def download_catalog(
    output_path: Path | None = None,
    client: httpx.AsyncClient | None = None,
) -> Path:
    """
    Download the latest cosmetics catalog.

    Args:
        output_path: Where to save the file. Defaults to settings.catalog_path
        client: Optional httpx client for connection reuse

    Returns:
        Path to downloaded file.

    Raises:
        CatalogDownloadError: If the request fails or returns an error status
    """
    if output_path is None:
        output_path = settings.catalog_path

    output_path.parent.mkdir(parents=True, exist_ok=True)
    url = settings.catalog_url

    try:
        if client is not None:
            response = await client.get(url)
        else:
            async with httpx.AsyncClient(
                timeout=60.0,
                headers={"User-Agent": USER_AGENT},
                follow_redirects=True,
            ) as owned_client:
                response = await owned_client.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise CatalogDownloadError(url, f"HTTP {e.response.status_code}") from e
    except httpx.RequestError as e:
        raise CatalogDownloadError(url, str(e)) from e

    output_path.write_bytes(response.content)
    return output_path


def _parse_date(value: Any) -> date | None:
    """Parse an ISO-8601 date or timestamp, None if unparseable."""
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        return None


def _flatten_images(images: Any) -> dict[str, str]:
    """
    Flatten the catalog image block to kind -> URL.

    Nested blocks (e.g. {"lego": {"large": ...}}) become "lego.large".
    Null entries are dropped.
    """
    refs: dict[str, str] = {}
    if not isinstance(images, dict):
        return refs

    for kind, value in images.items():
        if isinstance(value, str) and value:
            refs[kind] = value
        elif isinstance(value, dict):
            for sub_kind, sub_value in value.items():
                if isinstance(sub_value, str) and sub_value:
                    refs[f"{kind}.{sub_kind}"] = sub_value

    return refs


def parse_catalog_entry(entry: dict[str, Any]) -> CatalogRecord | None:
    """
    Convert one catalog payload entry to a CatalogRecord.

    Returns None for entries without an id. Every other field is optional.
    """
    item_id = entry.get("id")
    if not item_id:
        return None

    item_type = entry.get("type") or {}
    rarity = entry.get("rarity") or {}
    rarity_value = rarity.get("value") if isinstance(rarity, dict) else None

    history = entry.get("shopHistory") or []
    dates = sorted(d for d in (_parse_date(v) for v in history) if d is not None)

    name = entry.get("name")

    return CatalogRecord(
        id=str(item_id),
        category_code=str(item_type.get("backendValue", "")) if isinstance(item_type, dict) else "",
        display_name=str(name) if name else None,
        rarity_code=str(rarity_value).lower() if rarity_value else DEFAULT_RARITY,
        history_dates=tuple(dates),
        image_refs=tuple(_flatten_images(entry.get("images")).items()),
    )


def parse_catalog_payload(payload: Any) -> list[CatalogRecord]:
    """
    Parse a catalog payload into records.

    Accepts the API envelope ({"data": [...]}) or a bare list.
    """
    entries = payload.get("data", []) if isinstance(payload, dict) else payload
    if not isinstance(entries, list):
        raise ValueError("Catalog payload has no entry list")

    records: list[CatalogRecord] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        record = parse_catalog_entry(entry)
        if record is not None:
            records.append(record)

    return records


def load_catalog(path: Path | None = None) -> list[CatalogRecord]:
    """
    Load catalog records from file.

    Args:
        path: Path to JSON file. Defaults to settings.catalog_path

    Returns:
        List of catalog records in payload order.

    Raises:
        FileNotFoundError: If catalog file doesn't exist
        ValueError: If the file is not valid JSON
    """
    if path is None:
        path = settings.catalog_path

    if not path.exists():
        raise FileNotFoundError(
            f"Catalog not found at {path}. "
            "Run `python -m lockerscope.jobs.download_catalog` first."
        )

    try:
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Catalog file at {path} is corrupted: {e}") from e

    records = parse_catalog_payload(payload)
    logger.info("Loaded %d catalog records from %s", len(records), path)
    return records


@lru_cache(maxsize=1)
def get_catalog_index() -> CatalogIndex:
    """
    Get cached catalog index.

    Built from settings.catalog_path on first use.

    Raises:
        FileNotFoundError: If catalog file doesn't exist
        ValueError: If the catalog file is corrupted
    """
    return CatalogIndex.build(load_catalog())
