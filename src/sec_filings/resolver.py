"""
Entity resolution: ticker, CIK, or free-text name → CIK.

Strategies are tried in a fixed order and the first success wins:

1. A supplied CIK is authoritative.
2. A supplied ticker is looked up in the public ticker directory.
3. Name search (:meth:`EntityResolver.search_by_name`):
   a. curated known-filer aliases (no network),
   b. fuzzy match against directory titles,
   c. the browse-edgar company search, then EDGAR full-text search,
      optionally verifying that the candidate files the requested form.
"""

import logging
import math
import re
from typing import Any, Dict, Iterable, Optional, Tuple

from .directory import EntityDirectory
from .edgar_client import EdgarClient
from .exceptions import EdgarError, ResolutionFailure
from .known_filers import lookup_known_filer
from .models import FORM_13F, EntityRecord, ResolvedEntity
from .utils import normalize_ticker, strip_cik


logger = logging.getLogger(__name__)

MIN_FUZZY_SCORE = 3

_DISPLAY_NAME_CIK = re.compile(r"\(CIK\s*0*(\d+)\)", re.IGNORECASE)
_ACCESSION_TOKEN = re.compile(r"\b(\d{10})-\d{2}-\d{6}\b")
_ATOM_CIK = re.compile(r"<cik>0*(\d+)</cik>", re.IGNORECASE)
_ATOM_NAME = re.compile(r"<conformed-name>(.*?)</conformed-name>", re.IGNORECASE | re.DOTALL)


def match_directory_title(
    query: str,
    records: Iterable[EntityRecord],
) -> Tuple[Optional[EntityRecord], float]:
    """
    Find the directory entry whose title best overlaps ``query``.

    Exact case-insensitive equality scores ``inf`` and ends the scan. Otherwise
    a title containing the query scores ``len(query)`` and a query containing
    the title scores ``len(title)``. The best entry is replaced only by a
    strictly higher score, so ties keep the first entry seen.

    Returns:
        (best entry or None, its score); callers apply ``MIN_FUZZY_SCORE``
    """
    search_term = query.lower().strip()
    best_match: Optional[EntityRecord] = None
    best_score: float = 0

    for record in records:
        title = record.title.lower()
        if not title:
            continue
        if title == search_term:
            return record, math.inf
        if search_term in title and len(search_term) > best_score:
            best_match, best_score = record, len(search_term)
        if title in search_term and len(title) > best_score:
            best_match, best_score = record, len(title)

    return best_match, best_score


def candidate_from_search_hit(hit: Dict[str, Any]) -> Optional[Tuple[str, Optional[str]]]:
    """
    Pull a CIK (and display name, when present) out of a full-text search hit.

    Preference order: the ``(CIK ##########)`` token in ``display_names``, the
    filer prefix of an accession-number token, then the raw ``ciks`` field.
    """
    source = hit.get("_source") or {}
    display_names = source.get("display_names") or []
    display = display_names[0] if display_names else None
    name = re.split(r"\s*\(", display, maxsplit=1)[0].strip() if display else None

    if display:
        match = _DISPLAY_NAME_CIK.search(display)
        if match:
            return match.group(1), name or None

    for token in (hit.get("_id"), source.get("adsh")):
        match = _ACCESSION_TOKEN.search(token or "")
        if match:
            return strip_cik(match.group(1)), name or None

    ciks = source.get("ciks") or []
    if ciks:
        digits = re.sub(r"\D", "", str(ciks[0])).lstrip("0")
        if digits:
            return digits, name or None

    return None


class EntityResolver:
    """Resolve loose identifiers to CIKs using the directory and EDGAR search."""

    def __init__(self, client: EdgarClient, directory: EntityDirectory):
        self.client = client
        self.directory = directory

    async def resolve(
        self,
        ticker: Optional[str] = None,
        cik: Optional[str] = None,
        company_name: Optional[str] = None,
        form_type: Optional[str] = None,
    ) -> ResolvedEntity:
        """
        Resolve any combination of ticker, CIK and company name.

        Raises:
            ResolutionFailure: If no strategy produced a CIK
        """
        ticker_upper = normalize_ticker(ticker) if ticker else None

        if cik:
            try:
                return ResolvedEntity(cik=strip_cik(cik), ticker=ticker_upper)
            except ValueError:
                raise ResolutionFailure(str(cik))

        if ticker_upper:
            try:
                match = await self.directory.lookup_ticker(ticker_upper)
            except EdgarError as e:
                logger.warning(f"Ticker directory unavailable while resolving {ticker_upper}: {e}")
                match = None
            if match:
                logger.info(f"Resolved ticker {ticker_upper} via directory: {match}")
                return ResolvedEntity(
                    cik=match.cik,
                    ticker=normalize_ticker(match.ticker or ticker_upper),
                    company_name=match.title,
                )

        query = company_name or ticker
        if query:
            found = await self.search_by_name(query, form_type)
            if found:
                return ResolvedEntity(cik=found.cik, ticker=ticker_upper, company_name=found.company_name)

        if not query:
            raise ResolutionFailure(None, "No ticker, CIK, or company name was supplied.")
        raise ResolutionFailure(query)

    async def search_by_name(self, name: str, form_type: Optional[str] = None) -> Optional[ResolvedEntity]:
        """
        Search for a company by name.

        Returns:
            ResolvedEntity with ``cik`` and ``company_name``, or None when every
            strategy is exhausted
        """
        search_term = name.lower().strip()
        if len(search_term) < 2:
            return None

        if form_type in (None, FORM_13F):
            known = lookup_known_filer(search_term)
            if known:
                alias, entry = known
                logger.info(f"Resolved {name!r} via known-13F map (alias {alias!r}): CIK {entry.cik}")
                return ResolvedEntity(cik=entry.cik, company_name=entry.name)

        try:
            directory = await self.directory.load()
            best_match, best_score = match_directory_title(search_term, directory.values())
            if best_match and best_score >= MIN_FUZZY_SCORE:
                logger.info(
                    f"Found company by name in ticker directory: {name!r} → "
                    f"{best_match.title} (ticker {best_match.ticker}, CIK {best_match.cik})"
                )
                return ResolvedEntity(cik=best_match.cik, company_name=best_match.title)
        except EdgarError as e:
            logger.warning(f"Ticker directory name search failed: {e}")

        for strategy in (self._search_company_atom, self._search_full_text):
            try:
                candidate = await strategy(name, form_type)
            except EdgarError as e:
                logger.warning(f"{strategy.__name__.lstrip('_')} failed for {name!r}: {e}")
                continue
            if candidate is None:
                continue
            if await self._files_form(candidate, form_type):
                return candidate

        logger.info(f"No CIK found for {name!r}")
        return None

    async def _search_full_text(self, name: str, form_type: Optional[str]) -> Optional[ResolvedEntity]:
        payload = await self.client.full_text_search(name, form_type)
        hits = (payload.get("hits") or {}).get("hits") or []
        for hit in hits:
            found = candidate_from_search_hit(hit)
            if found:
                cik, display_name = found
                return ResolvedEntity(cik=cik, company_name=display_name or name)
        return None

    async def _search_company_atom(self, name: str, form_type: Optional[str]) -> Optional[ResolvedEntity]:
        xml = await self.client.company_search_atom(name, form_type)
        cik_match = _ATOM_CIK.search(xml)
        if not cik_match:
            return None
        name_match = _ATOM_NAME.search(xml)
        company_name = name_match.group(1).strip() if name_match else name
        return ResolvedEntity(cik=cik_match.group(1), company_name=company_name)

    async def _files_form(self, candidate: ResolvedEntity, form_type: Optional[str]) -> bool:
        """
        Check that ``candidate`` has filed ``form_type`` at least once.

        A failed verification request accepts the candidate as best effort.
        """
        if not form_type:
            logger.info(f"Resolved via EDGAR search: CIK {candidate.cik} ({candidate.company_name})")
            return True

        try:
            submissions = await self.client.get_company_submissions(candidate.cik)
        except EdgarError as e:
            logger.warning(f"Could not verify CIK {candidate.cik} files {form_type}, using as-is: {e}")
            return True

        forms = ((submissions.get("filings") or {}).get("recent") or {}).get("form") or []
        if any(str(form).startswith(form_type) for form in forms):
            logger.info(f"Resolved + validated CIK {candidate.cik} ({candidate.company_name}) for {form_type}")
            return True

        logger.warning(f"CIK {candidate.cik} ({candidate.company_name}) does not file {form_type}")
        return False
