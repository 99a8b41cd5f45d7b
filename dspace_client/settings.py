import os
from datetime import timedelta

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


class Settings(BaseModel):
    # DSpace REST API
    api_url: str = Field(
        default="http://localhost:8080/server/api", alias="DSPACE_API_URL"
    )
    request_timeout: float = Field(default=30.0, alias="DSPACE_REQUEST_TIMEOUT")
    debug: bool = Field(default=False, alias="DSPACE_DEBUG")

    # Cache TTLs (seconds)
    facets_ttl: int = Field(default=10 * 60, alias="CACHE_FACETS_TTL")
    search_ttl: int = Field(default=2 * 60, alias="CACHE_SEARCH_TTL")
    item_ttl: int = Field(default=5 * 60, alias="CACHE_ITEM_TTL")
    stats_ttl: int = Field(default=15 * 60, alias="CACHE_STATS_TTL")

    # Cache housekeeping
    cache_sweep_interval: int = Field(default=60, alias="CACHE_SWEEP_INTERVAL")
    cache_max_size: int | None = Field(default=None, alias="CACHE_MAX_SIZE")

    def cache_ttls(self) -> dict[str, timedelta]:
        """TTL per cache store name."""
        return {
            "facets": timedelta(seconds=self.facets_ttl),
            "search": timedelta(seconds=self.search_ttl),
            "items": timedelta(seconds=self.item_ttl),
            "stats": timedelta(seconds=self.stats_ttl),
        }


def load_settings() -> Settings:
    """Build settings from the process environment (after .env is loaded)."""
    return Settings.model_validate(
        {
            name: value
            for name, value in os.environ.items()
            if name.startswith(("DSPACE_", "CACHE_"))
        }
    )


global_settings = load_settings()
