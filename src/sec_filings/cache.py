"""
On-disk cache of resolved filings.

One JSON file per filing, named by :func:`build_cache_key`. The cache is a
capability: when disabled every read misses and every write is skipped.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import aiofiles

from .models import ResolvedFiling


logger = logging.getLogger(__name__)


@dataclass
class CachedFiling:
    """A filing read back from disk."""
    filing: ResolvedFiling
    path: Path
    fetched_at: Optional[str] = None


class FilingCache:
    """Read-through/write-through store for :class:`ResolvedFiling` payloads."""

    def __init__(self, root: Path, enabled: bool = False):
        self.root = Path(root)
        self.enabled = enabled

    def path_for(self, key: str) -> Path:
        return self.root / f"{key}.json"

    async def read(self, key: str) -> Optional[CachedFiling]:
        """
        Return the stored filing for ``key``, or None on a miss.

        Unreadable or malformed files count as misses.
        """
        if not self.enabled:
            return None

        path = self.path_for(key)
        if not path.exists():
            return None

        try:
            async with aiofiles.open(path, 'r', encoding='utf-8') as f:
                data = json.loads(await f.read())
            filing = ResolvedFiling.from_dict(data)
        except (OSError, ValueError, TypeError, KeyError, AttributeError) as e:
            logger.warning(f"Failed to read cached filing {path}: {e}")
            return None

        logger.info(f"Cache hit for {key}")
        return CachedFiling(filing=filing, path=path, fetched_at=data.get("fetchedAt"))

    async def write(self, key: str, filing: ResolvedFiling) -> Optional[Path]:
        """
        Persist ``filing`` under ``key`` and return the file path.

        The stored copy is marked ``cached`` and stamped with ``fetchedAt``.
        """
        if not self.enabled:
            return None

        payload = filing.to_dict()
        payload["metadata"]["cached"] = True
        payload["metadata"].pop("cachePath", None)
        payload["fetchedAt"] = datetime.now(timezone.utc).isoformat()

        self.root.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        async with aiofiles.open(path, 'w', encoding='utf-8') as f:
            await f.write(json.dumps(payload, indent=2, ensure_ascii=False))

        logger.info(f"Cached filing {key} at {path}")
        return path
