"""
Process-wide state shared by every filing request.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .cache import FilingCache
from .config import SecFilingsConfig
from .directory import EntityDirectory
from .edgar_client import EdgarClient
from .resolver import EntityResolver
from .utils import RateLimiter


logger = logging.getLogger(__name__)


@dataclass
class FilingContext:
    """
    Owns the EDGAR client (and its rate gate), the ticker directory and the
    filing cache. Build one per process and pass it to every request.
    """
    client: EdgarClient
    directory: EntityDirectory
    cache: FilingCache
    self_hosted: bool = False

    @property
    def resolver(self) -> EntityResolver:
        return EntityResolver(self.client, self.directory)

    @classmethod
    def create(
        cls,
        config: Optional[SecFilingsConfig] = None,
        self_hosted: bool = False,
        client: Optional[EdgarClient] = None,
    ) -> "FilingContext":
        """
        Build a context from ``config``.

        Args:
            config: Settings; read from the environment when omitted
            self_hosted: Whether on-disk persistence is permitted
            client: Pre-built client, mainly for tests
        """
        config = config or SecFilingsConfig.from_env()
        client = client or EdgarClient(
            user_agent=config.user_agent,
            rate_limiter=RateLimiter(min_interval=config.min_request_interval),
        )
        directory = EntityDirectory(
            client,
            snapshot_path=config.ticker_snapshot_path if self_hosted else None,
        )
        cache = FilingCache(config.cache_dir, enabled=self_hosted)
        logger.info(
            "Created filing context (self_hosted=%s, cache_dir=%s)",
            self_hosted,
            config.cache_dir,
        )
        return cls(client=client, directory=directory, cache=cache, self_hosted=self_hosted)

    async def aclose(self) -> None:
        await self.client.close()

    async def __aenter__(self) -> "FilingContext":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
