"""Shared fakes for exercising the filing resolver without network access."""

import json
from typing import Any, Dict, List, Optional, Tuple

import pytest

from sec_filings.cache import FilingCache
from sec_filings.context import FilingContext
from sec_filings.directory import EntityDirectory
from sec_filings.edgar_client import EdgarClient
from sec_filings.utils import RateLimiter


class FakeResponse:
    """Minimal stand-in for ``aiohttp.ClientResponse``."""

    def __init__(self, status: int, body: str, error: Optional[Exception] = None):
        self.status = status
        self._body = body
        self._error = error

    async def text(self, errors: str = "strict") -> str:
        return self._body

    async def __aenter__(self) -> "FakeResponse":
        if self._error is not None:
            raise self._error
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None


class FakeSession:
    """
    Routes GET requests by URL substring.

    Each route maps to ``(status, body)``, a dict/list (served as JSON with 200),
    a plain string (served with 200) or an exception instance (raised).
    Unrouted URLs answer 404.
    """

    def __init__(self, routes: Optional[Dict[str, Any]] = None):
        self.routes: Dict[str, Any] = dict(routes or {})
        self.calls: List[Tuple[str, Dict[str, str]]] = []
        self.closed = False

    def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> FakeResponse:
        self.calls.append((url, dict(headers or {})))
        for fragment, answer in self.routes.items():
            if fragment in url:
                return self._respond(answer)
        return FakeResponse(404, "Not Found")

    @staticmethod
    def _respond(answer: Any) -> FakeResponse:
        if isinstance(answer, Exception):
            return FakeResponse(0, "", error=answer)
        if isinstance(answer, tuple):
            status, body = answer
            return FakeResponse(status, body if isinstance(body, str) else json.dumps(body))
        if isinstance(answer, (dict, list)):
            return FakeResponse(200, json.dumps(answer))
        return FakeResponse(200, answer)

    def urls(self) -> List[str]:
        return [url for url, _ in self.calls]

    def count(self, fragment: str) -> int:
        return sum(1 for url in self.urls() if fragment in url)

    async def close(self) -> None:
        self.closed = True


def submissions_payload(name: str, rows: List[Tuple[str, str, str, str, str]]) -> Dict[str, Any]:
    """Build a submissions document from (form, accession, filed, report, primary) rows."""
    return {
        "name": name,
        "filings": {
            "recent": {
                "form": [row[0] for row in rows],
                "accessionNumber": [row[1] for row in rows],
                "filingDate": [row[2] for row in rows],
                "reportDate": [row[3] for row in rows],
                "primaryDocument": [row[4] for row in rows],
            }
        },
    }


@pytest.fixture
def make_client():
    """Return a factory building an EdgarClient over a FakeSession."""

    def factory(routes: Optional[Dict[str, Any]] = None) -> EdgarClient:
        return EdgarClient(
            user_agent="sec-filings-tests tests@example.com",
            rate_limiter=RateLimiter(min_interval=0),
            session=FakeSession(routes),
        )

    return factory


@pytest.fixture
def make_context(make_client, tmp_path):
    """Return a factory building a FilingContext over a FakeSession."""

    def factory(routes: Optional[Dict[str, Any]] = None, self_hosted: bool = False) -> FilingContext:
        client = make_client(routes)
        snapshot = tmp_path / "company-tickers.json" if self_hosted else None
        return FilingContext(
            client=client,
            directory=EntityDirectory(client, snapshot_path=snapshot),
            cache=FilingCache(tmp_path / "filings", enabled=self_hosted),
            self_hosted=self_hosted,
        )

    return factory
