from typing import List, Optional

import httpx
from loguru import logger

from ietf_groups.models.collection import GroupCollection
from ietf_groups.models.group import Group
from .ietf_scraper import IetfScraper
from .irtf_scraper import IrtfScraper


async def fetch_ietf(client: Optional[httpx.AsyncClient] = None, **kwargs) -> List[Group]:
    """Fetch IETF groups only."""
    async with IetfScraper(client, **kwargs) as scraper:
        return await scraper.fetch()


async def fetch_irtf(client: Optional[httpx.AsyncClient] = None, **kwargs) -> List[Group]:
    """Fetch IRTF groups only."""
    async with IrtfScraper(client, **kwargs) as scraper:
        return await scraper.fetch()


async def fetch_all(
    client: Optional[httpx.AsyncClient] = None,
    include_ietf: bool = True,
    include_irtf: bool = True,
    **kwargs,
) -> GroupCollection:
    """Fetch IETF then IRTF groups into one collection, in that order."""
    logger.info("Starting to fetch IETF and IRTF group data...")
    groups: List[Group] = []

    if include_ietf:
        ietf_groups = await fetch_ietf(client, **kwargs)
        logger.info(f"Fetched {len(ietf_groups)} IETF groups")
        groups.extend(ietf_groups)

    if include_irtf:
        irtf_groups = await fetch_irtf(client, **kwargs)
        logger.info(f"Fetched {len(irtf_groups)} IRTF groups")
        groups.extend(irtf_groups)

    logger.info(f"Total: {len(groups)} groups")
    return GroupCollection(groups=groups)
