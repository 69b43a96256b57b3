"""
EDGAR API client for SEC data access.

Handles communication with the SEC EDGAR hosts including:
- The public ticker registry
- Submission histories
- Filing archive documents and folder indexes
- Full-text and company search
- Rate limiting and identification headers
"""

import asyncio
import json
import logging
import re
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import aiohttp

from .config import get_user_agent
from .exceptions import EdgarError, FetchFailure
from .utils import RateLimiter, build_archive_base, normalize_cik


logger = logging.getLogger(__name__)

ACCEPT_JSON = "application/json"
ACCEPT_HTML = "text/html"
ACCEPT_XML = "text/xml"
ACCEPT_ATOM = "application/atom+xml"

_ACCESSION = re.compile(r"\b(\d{10})-?(\d{2})-?(\d{6})\b")
_INDEX_SUFFIX = re.compile(r"-index\.html?$", re.IGNORECASE)


def _content_fields(entry: ET.Element) -> Dict[str, str]:
    """Flatten the <content> block of a browse-edgar entry to {local tag name: text}."""
    fields: Dict[str, str] = {}
    for element in entry.iter():
        tag = element.tag.rsplit("}", 1)[-1].lower() if isinstance(element.tag, str) else ""
        if tag and element.text and element.text.strip():
            fields.setdefault(tag, element.text.strip())
    return fields


def _atom_accession(content: Dict[str, str], href: str) -> str:
    """
    Accession number of a browse-edgar entry, dashed.

    Taken from the <accession-number> content field (EDGAR has also served it
    misspelled as <accession-nunber>), else from the "-index.htm" file name,
    else from the undashed archive folder in the link.
    """
    value = content.get("accession-number") or content.get("accession-nunber")
    if not value and href:
        parts = [part for part in href.split("/") if part]
        if parts:
            value = _INDEX_SUFFIX.sub("", parts[-1]) if _INDEX_SUFFIX.search(parts[-1]) else ""
        if not value and len(parts) > 1:
            value = parts[-2]
    match = _ACCESSION.fullmatch(value or "")
    if not match:
        return ""
    return "-".join(match.groups())


class EdgarClient:
    """
    Client for accessing the SEC EDGAR hosts.

    Every request passes through one :class:`RateLimiter`, so a single client
    instance must be shared by everything that talks to EDGAR in a process.
    """

    BASE_URL = "https://www.sec.gov"
    DATA_URL = "https://data.sec.gov"
    EFTS_URL = "https://efts.sec.gov/LATEST/search-index"
    ARCHIVES_URL = f"{BASE_URL}/Archives/edgar/data"
    BODY_PREVIEW_LENGTH = 140

    def __init__(
        self,
        user_agent: Optional[str] = None,
        rate_limiter: Optional[RateLimiter] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize EDGAR client.

        Args:
            user_agent: Custom user agent string (SEC requires identification)
            rate_limiter: Shared gate; a 150ms gate is created when omitted
            session: Optional aiohttp session, created lazily when omitted
        """
        self.user_agent = user_agent or get_user_agent()
        self.rate_limiter = rate_limiter or RateLimiter()
        self._session = session
        self._owns_session = session is None

        self.headers = {
            'User-Agent': self.user_agent,
            'Accept-Encoding': 'gzip, deflate',
        }

        logger.info(f"Initialized EDGAR client with User-Agent: {self.user_agent}")

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "EdgarClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def fetch(self, url: str, accept: str = ACCEPT_JSON) -> str:
        """
        Make a rate-limited GET request and return the body text.

        Args:
            url: URL to request
            accept: Value for the Accept header

        Returns:
            Response body

        Raises:
            FetchFailure: If EDGAR answers with a non-2xx status
            EdgarError: If the request cannot be completed
        """
        await self.rate_limiter.wait_if_needed()
        session = await self._get_session()
        headers = {**self.headers, 'Accept': accept}

        try:
            logger.debug(f"Making request to: {url}")
            async with session.get(url, headers=headers) as response:
                body = await response.text(errors="replace")
                if not 200 <= response.status < 300:
                    logger.error(f"Request failed for {url}: HTTP {response.status}")
                    raise FetchFailure(response.status, body[:self.BODY_PREVIEW_LENGTH], url)
                return body

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Request failed for {url}: {e}")
            raise EdgarError(f"Failed to fetch {url}: {e}") from e

    async def fetch_json(self, url: str) -> Any:
        body = await self.fetch(url, accept=ACCEPT_JSON)
        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise EdgarError(f"Invalid JSON from {url}: {e}") from e

    async def get_company_tickers(self) -> Dict[str, Any]:
        """Fetch the public ticker registry (keyed by row index)."""
        return await self.fetch_json(f"{self.BASE_URL}/files/company_tickers.json")

    async def get_company_submissions(self, cik: str) -> Dict[str, Any]:
        """Get submission metadata for a company via the structured submissions API."""

        cik = normalize_cik(cik)
        logger.info(f"Getting submissions for CIK: {cik}")

        try:
            return await self.fetch_json(f"{self.DATA_URL}/submissions/CIK{cik}.json")
        except FetchFailure as e:
            if e.status != 404:
                raise
            logger.warning(
                "Submissions endpoint returned 404 for CIK %s; falling back to legacy feed",
                cik
            )
            return await self._get_company_submissions_atom(cik)

    async def _get_company_submissions_atom(self, cik: str) -> Dict[str, Any]:
        """Fallback to the legacy ATOM feed when the submissions API is unavailable."""

        atom_url = (
            f"{self.BASE_URL}/cgi-bin/browse-edgar?action=getcompany&CIK={cik}"
            "&type=&dateb=&owner=exclude&count=100&output=atom"
        )
        atom_text = await self.fetch(atom_url, accept=ACCEPT_ATOM)

        try:
            return self._parse_atom_feed(atom_text, cik)
        except ET.ParseError as e:
            logger.error(f"Failed to parse ATOM submissions for CIK {cik}: {e}")
            raise EdgarError(f"Failed to fetch submissions for CIK {cik}: {e}") from e

    def _parse_atom_feed(self, atom_text: str, cik: str) -> Dict[str, Any]:
        """Convert a browse-edgar ATOM feed into the submissions JSON shape."""

        root = ET.fromstring(atom_text)
        ns = '{http://www.w3.org/2005/Atom}'

        filings: List[Dict[str, str]] = []

        for entry in root.findall(f'.//{ns}entry'):
            title_elem = entry.find(f'.//{ns}title')
            link_elem = entry.find(f'.//{ns}link')
            updated_elem = entry.find(f'.//{ns}updated')

            if title_elem is None or link_elem is None:
                continue

            title = title_elem.text or ''
            href = link_elem.get('href', '')
            content = _content_fields(entry)

            filing_date = content.get('filing-date', '')
            if not filing_date and updated_elem is not None and updated_elem.text:
                filing_date = updated_elem.text.split('T')[0]

            accession = _atom_accession(content, href)

            form = ''
            for category in entry.findall(f'.//{ns}category'):
                term = (category.get('term') or '').strip()
                label = (category.get('label') or '').lower()
                if not term:
                    continue
                if label and 'form' not in label:
                    continue
                form = term.upper()
                if form:
                    break

            if not form:
                title_upper = title.upper()
                for candidate in ('13F-HR/A', '13F-HR', '10-K/A', '10-K'):
                    if candidate in title_upper:
                        form = candidate
                        break

            filings.append({
                'accessionNumber': accession,
                'filingDate': filing_date,
                'reportDate': '',
                'form': form,
                # The feed only links the index page; the primary document is
                # looked up from the filing index when needed.
                'primaryDocument': '',
            })

        return {
            'cik': cik,
            'filings': {
                'recent': {
                    key: [filing[key] for filing in filings]
                    for key in ('accessionNumber', 'filingDate', 'reportDate', 'form', 'primaryDocument')
                }
            }
        }

    async def get_filing_index(self, cik: str, accession_number: str) -> Dict[str, Any]:
        """Fetch the ``index.json`` listing of a filing's archive folder."""
        return await self.fetch_json(f"{build_archive_base(cik, accession_number)}/index.json")

    async def full_text_search(self, query: str, form_type: Optional[str] = None) -> Dict[str, Any]:
        """Query EDGAR full-text search for filings mentioning ``query``."""

        params = {"q": f'"{query}"'}
        if form_type:
            params["forms"] = form_type
        return await self.fetch_json(f"{self.EFTS_URL}?{urlencode(params)}")

    async def company_search_atom(self, name: str, form_type: Optional[str] = None) -> str:
        """Run the browse-edgar company search and return the raw ATOM payload."""

        params = {
            "company": name,
            "CIK": "",
            "dateb": "",
            "owner": "include",
            "count": "10",
            "search_text": "",
            "action": "getcompany",
            "output": "atom",
        }
        if form_type:
            params["type"] = form_type
        return await self.fetch(
            f"{self.BASE_URL}/cgi-bin/browse-edgar?{urlencode(params)}",
            accept=ACCEPT_ATOM,
        )
