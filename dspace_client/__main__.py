"""
Command-line smoke check: connect to the configured DSpace API, print the
repository summary and the first author browse entries.
"""

import asyncio

from loguru import logger

from dspace_client.repository import DSpaceRepository
from dspace_client.services.errors import ServiceError


async def main() -> None:
    logger.info("Starting DSpace client...")

    async with DSpaceRepository.from_settings() as repo:
        summary = await repo.statistics.get_repository_summary()
        logger.info(
            f"Repository: {summary.communities} communities, "
            f"{summary.collections} collections, {summary.items} items"
        )

        try:
            authors = await repo.browse.by_index("author", size=10)
        except ServiceError as e:
            logger.error(f"Author browse failed: {e}")
        else:
            logger.info(f"Authors resolved via {authors.source}:")
            for entry in authors.entries:
                logger.info(f"  - {entry.label} ({entry.count})")

        logger.info(f"Cache status: {repo.cache_status()}")


if __name__ == "__main__":
    asyncio.run(main())
