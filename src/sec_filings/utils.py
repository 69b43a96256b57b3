"""
Utility functions for the SEC filing resolver.
"""

import asyncio
import re
import time
from typing import Awaitable, Callable, Optional


def strip_cik(cik: str) -> str:
    """
    Normalize a CIK to its canonical form (digits only, no leading zeros).

    Args:
        cik: CIK string in any format ("0000320193", "CIK320193", 320193)

    Returns:
        CIK without leading zeros, e.g. "320193"

    Raises:
        ValueError: If the value contains no usable digits
    """
    cik_clean = re.sub(r"\D", "", str(cik))

    try:
        return str(int(cik_clean))
    except ValueError:
        raise ValueError(f"Invalid CIK format: {cik}")


def normalize_cik(cik: str) -> str:
    """
    Normalize CIK to the zero-padded 10 digit form used by data.sec.gov.

    Args:
        cik: CIK string in any format

    Returns:
        Normalized CIK string
    """
    return strip_cik(cik).zfill(10)


def normalize_ticker(ticker: str) -> str:
    """
    Normalize ticker symbol to uppercase.

    Args:
        ticker: Ticker symbol

    Returns:
        Normalized ticker symbol
    """
    return ticker.upper().strip()


def accession_plain(accession: str) -> str:
    """Return an accession number without dashes."""
    return accession.replace("-", "")


def build_cache_key(cik: str, accession: str) -> str:
    """Cache key for a filing: ``{cik without zeros}-{accession without dashes}``."""
    return f"{strip_cik(cik)}-{accession_plain(accession)}"


def build_archive_base(cik: str, accession: str) -> str:
    """Return the EDGAR archive folder URL for a filing."""
    return f"https://www.sec.gov/Archives/edgar/data/{strip_cik(cik)}/{accession_plain(accession)}"


class RateLimiter:
    """
    Minimum-interval gate shared by every outbound EDGAR request.

    The gate spaces the *start* of consecutive requests by at least
    ``min_interval`` seconds. Waiting happens with ``await`` so other
    coroutines keep running while a caller is parked at the gate.
    """

    def __init__(
        self,
        min_interval: float = 0.15,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        self.min_interval = min_interval
        self._clock = clock or time.monotonic
        self._sleep = sleep or asyncio.sleep
        self._last_request: Optional[float] = None
        self._lock = asyncio.Lock()

    @property
    def last_request(self) -> Optional[float]:
        return self._last_request

    async def wait_if_needed(self) -> None:
        """
        Suspend until the minimum interval since the last dispatch has passed.
        """
        async with self._lock:
            if self._last_request is not None:
                elapsed = self._clock() - self._last_request
                if elapsed < self.min_interval:
                    await self._sleep(self.min_interval - elapsed)

            self._last_request = self._clock()
