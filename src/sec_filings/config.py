"""
Configuration for the SEC filing resolver.
"""

import os
from dataclasses import dataclass
from pathlib import Path


DEFAULT_USER_AGENT = "sec-filings/0.1 (sec-filings-ingest@example.com)"
DEFAULT_CACHE_DIR = Path(".local-data") / "sec-filings"
DEFAULT_MIN_REQUEST_INTERVAL = 0.15


def get_user_agent() -> str:
    """
    Get appropriate User-Agent header for SEC requests.
    SEC requires identification in User-Agent; ``SEC_API_USER_AGENT`` overrides it.

    Returns:
        User-Agent string
    """
    return os.getenv("SEC_API_USER_AGENT") or DEFAULT_USER_AGENT


@dataclass(frozen=True)
class SecFilingsConfig:
    """Settings shared by every component of a :class:`FilingContext`."""
    user_agent: str = DEFAULT_USER_AGENT
    cache_dir: Path = DEFAULT_CACHE_DIR
    min_request_interval: float = DEFAULT_MIN_REQUEST_INTERVAL

    @property
    def ticker_snapshot_path(self) -> Path:
        return self.cache_dir / "company-tickers.json"

    @classmethod
    def from_env(cls) -> "SecFilingsConfig":
        cache_dir = os.getenv("SEC_FILINGS_CACHE_DIR")
        return cls(
            user_agent=get_user_agent(),
            cache_dir=Path(cache_dir) if cache_dir else Path.cwd() / DEFAULT_CACHE_DIR,
        )
