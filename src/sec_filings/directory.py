"""
Public company ticker directory with on-disk memoization.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import aiofiles

from .edgar_client import EdgarClient
from .models import EntityRecord
from .utils import normalize_ticker


logger = logging.getLogger(__name__)


class EntityDirectory:
    """
    Ticker → company mapping loaded once per directory instance.

    When ``snapshot_path`` is set, a JSON snapshot on disk is preferred over
    the network and refreshed after every network load. Once loaded, the
    mapping is never refreshed for the lifetime of the object.
    """

    def __init__(self, client: EdgarClient, snapshot_path: Optional[Path] = None):
        self.client = client
        self.snapshot_path = Path(snapshot_path) if snapshot_path else None
        self._entries: Optional[Dict[str, EntityRecord]] = None

    @property
    def loaded(self) -> bool:
        return self._entries is not None

    async def load(self) -> Dict[str, EntityRecord]:
        """Return the directory keyed by uppercased ticker."""

        if self._entries is not None:
            return self._entries

        entries = await self._read_snapshot()
        if entries is None:
            entries = await self._fetch()
            await self._write_snapshot(entries)

        self._entries = entries
        return entries

    async def lookup_ticker(self, ticker: str) -> Optional[EntityRecord]:
        entries = await self.load()
        return entries.get(normalize_ticker(ticker))

    async def _fetch(self) -> Dict[str, EntityRecord]:
        logger.info("Loading company ticker directory from EDGAR")
        data = await self.client.get_company_tickers()
        return self._index(data.values() if isinstance(data, dict) else data)

    @staticmethod
    def _index(rows) -> Dict[str, EntityRecord]:
        entries: Dict[str, EntityRecord] = {}
        for row in rows:
            ticker_value = (row.get('ticker') or '').strip()
            if not ticker_value or row.get('cik_str') in (None, ''):
                continue
            record = EntityRecord.from_dict(row)
            entries[normalize_ticker(ticker_value)] = record
        return entries

    async def _read_snapshot(self) -> Optional[Dict[str, EntityRecord]]:
        if self.snapshot_path is None or not self.snapshot_path.exists():
            return None

        try:
            async with aiofiles.open(self.snapshot_path, 'r', encoding='utf-8') as f:
                raw: Dict[str, Any] = json.loads(await f.read())
            entries = self._index(raw.values())
        except (OSError, ValueError, TypeError, AttributeError, KeyError) as e:
            logger.warning(f"Discarding unreadable ticker snapshot {self.snapshot_path}: {e}")
            return None

        logger.debug(f"Loaded {len(entries)} tickers from {self.snapshot_path}")
        return entries

    async def _write_snapshot(self, entries: Dict[str, EntityRecord]) -> None:
        if self.snapshot_path is None:
            return

        self.snapshot_path.parent.mkdir(parents=True, exist_ok=True)
        payload = {ticker: record.to_dict() for ticker, record in entries.items()}
        async with aiofiles.open(self.snapshot_path, 'w', encoding='utf-8') as f:
            await f.write(json.dumps(payload, indent=2))
        logger.info(f"Saved ticker directory snapshot to {self.snapshot_path}")
