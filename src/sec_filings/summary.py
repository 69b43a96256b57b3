"""Service layer assembling filing summaries from resolution, selection, extraction and cache."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from .context import FilingContext
from .edgar_client import ACCEPT_HTML, ACCEPT_XML
from .exceptions import EdgarError, InformationTableError, NoFilingFound
from .filing_search import select_filing, select_primary_document
from .information_table import parse_information_table, select_information_table
from .models import (
    FORM_10K,
    FORM_13F,
    FilingEntry,
    FilingMetadata,
    FilingRequest,
    HoldingsDegraded,
    HoldingsExtracted,
    HoldingsOutcome,
    HoldingsStats,
    ResolvedFiling,
    sort_holdings,
)
from .sections import extract_sections, html_to_text
from .utils import build_archive_base, build_cache_key


logger = logging.getLogger(__name__)


class FilingSummaryService:
    """Resolve, locate, extract and cache one filing per request."""

    def __init__(self, context: FilingContext) -> None:
        self.context = context

    async def fetch_summary(self, request: FilingRequest) -> ResolvedFiling:
        """Return the summary for ``request``.

        Raises:
            ResolutionFailure: The identifier could not be resolved.
            NoFilingFound: The entity has no filing matching the filters.
            EdgarError: A request on the essential path failed.
        """

        form_type = request.form_type
        company = await self.context.resolver.resolve(
            ticker=request.ticker,
            cik=request.cik,
            company_name=request.company_name,
            form_type=form_type,
        )
        logger.info(
            "Resolved %s to CIK %s (%s)",
            request.query_term,
            company.cik,
            company.company_name or "name unknown",
        )

        submissions = await self.context.client.get_company_submissions(company.cik)
        filing = select_filing(submissions, form_type, request.filing_date, request.filing_year)
        if filing is None:
            raise NoFilingFound(
                cik=company.cik,
                form_type=form_type,
                company_name=company.company_name or submissions.get("name"),
                ticker=company.ticker,
                filing_date=request.filing_date,
                filing_year=request.filing_year,
            )

        cache_key = build_cache_key(company.cik, filing.accession_number)
        cached = await self.context.cache.read(cache_key)
        if cached is not None:
            summary = cached.filing.narrowed(request.include_sections, request.limit_holdings)
            summary.metadata.cached = True
            summary.metadata.cache_path = str(cached.path)
            return summary

        if not filing.primary_document:
            filing = await self.resolve_primary_document(company.cik, filing)

        base_path = build_archive_base(company.cik, filing.accession_number)
        primary_url = f"{base_path}/{filing.primary_document}"

        sections = {}
        if form_type == FORM_10K:
            primary_html = await self.context.client.fetch(primary_url, accept=ACCEPT_HTML)
            sections = extract_sections(html_to_text(primary_html))
            logger.info("Extracted %d sections from %s", len(sections), primary_url)

        holdings = None
        holdings_stats: Optional[HoldingsStats] = None
        information_table_url = None
        if form_type == FORM_13F:
            outcome = await self.fetch_holdings(company.cik, filing)
            information_table_url = outcome.information_table_url
            if isinstance(outcome, HoldingsExtracted):
                holdings = sort_holdings(outcome.holdings)
                if holdings:
                    holdings_stats = HoldingsStats.from_holdings(holdings)
            else:
                logger.warning("Holdings unavailable for %s: %s", cache_key, outcome.reason)

        summary = ResolvedFiling(
            metadata=FilingMetadata(
                company_name=submissions.get("name") or company.company_name or "Unknown",
                ticker=company.ticker,
                cik=company.cik,
                form_type=form_type,
                accession_number=filing.accession_number,
                filing_date=filing.filing_date,
                report_date=filing.report_date,
                primary_document_url=primary_url,
                information_table_url=information_table_url,
                cached=False,
            ),
            sections=sections,
            holdings=holdings,
            holdings_stats=holdings_stats,
        )

        await self.context.cache.write(cache_key, summary)
        return summary.narrowed(request.include_sections, request.limit_holdings)

    async def resolve_primary_document(self, cik: str, filing: FilingEntry) -> FilingEntry:
        """Fill in the primary document of a filing from its ``index.json``.

        Rows from the Atom fallback carry no primary document. A 10-K cannot be
        summarised without one, so index failures propagate for that form.
        """

        is_13f = filing.form_type.startswith(FORM_13F)
        try:
            index = await self.context.client.get_filing_index(cik, filing.accession_number)
        except EdgarError:
            if is_13f:
                logger.warning("No filing index for %s; primary document unknown", filing.accession_number)
                return filing
            raise

        items = ((index or {}).get("directory") or {}).get("item") or []
        name = select_primary_document(items, FORM_13F if is_13f else FORM_10K)
        if name is None:
            if is_13f:
                return filing
            raise EdgarError(f"No primary document in the filing index of {filing.accession_number}")

        logger.info("Primary document of %s is %s", filing.accession_number, name)
        return replace(filing, primary_document=name)

    async def fetch_holdings(self, cik: str, filing: FilingEntry) -> HoldingsOutcome:
        """Locate and parse the information table of a 13F filing.

        Never raises for upstream or parse problems; those come back as
        :class:`HoldingsDegraded` with the reason.
        """

        base_path = build_archive_base(cik, filing.accession_number)

        try:
            index = await self.context.client.get_filing_index(cik, filing.accession_number)
        except EdgarError as exc:
            return HoldingsDegraded(reason=f"filing index unavailable: {exc}")

        items = ((index or {}).get("directory") or {}).get("item") or []
        table_item = select_information_table(items, filing.primary_document)
        if table_item is None:
            return HoldingsDegraded(reason="no information table in filing index")

        table_url = f"{base_path}/{table_item['name']}"
        try:
            xml = await self.context.client.fetch(table_url, accept=ACCEPT_XML)
        except EdgarError as exc:
            return HoldingsDegraded(
                reason=f"information table unavailable: {exc}",
                information_table_url=table_url,
            )

        try:
            holdings = parse_information_table(xml)
        except InformationTableError as exc:
            return HoldingsDegraded(reason=str(exc), information_table_url=table_url)

        logger.info("Parsed %d holdings from %s", len(holdings), table_url)
        return HoldingsExtracted(holdings=holdings, information_table_url=table_url)


async def fetch_filing_summary(request: FilingRequest, context: FilingContext) -> ResolvedFiling:
    """Convenience wrapper around :meth:`FilingSummaryService.fetch_summary`."""

    return await FilingSummaryService(context).fetch_summary(request)
