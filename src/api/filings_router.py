"""FastAPI router exposing the `/filings` endpoints."""

from __future__ import annotations

import logging
import os
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, Request

from sec_filings import (
    EdgarError,
    FilingContext,
    FilingRequest,
    NoFilingFound,
    ResolutionFailure,
    fetch_filing_summary,
)
from sec_filings.models import DEFAULT_LIMIT_HOLDINGS, FORM_10K


router = APIRouter(prefix="/filings", tags=["filings"])
logger = logging.getLogger(__name__)

SELF_HOSTED_ENV = "SEC_FILINGS_SELF_HOSTED"


def self_hosted_from_env() -> bool:
    """Return True when ``SEC_FILINGS_SELF_HOSTED`` enables on-disk persistence."""

    return os.getenv(SELF_HOSTED_ENV, "").strip().lower() in {"1", "true", "yes", "on"}


def get_context(request: Request) -> FilingContext:
    """Return the application's filing context, building it on first use."""

    state = request.app.state
    if getattr(state, "filing_context", None) is None:
        state.filing_context = FilingContext.create(
            config=getattr(state, "filing_config", None),
            self_hosted=self_hosted_from_env(),
        )
    return state.filing_context


def _to_http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, (ResolutionFailure, NoFilingFound)):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, EdgarError):
        return HTTPException(status_code=502, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


@router.get("/summary")
async def filing_summary(
    request: Request,
    ticker: Optional[str] = Query(None),
    cik: Optional[str] = Query(None),
    company_name: Optional[str] = Query(None, alias="companyName"),
    form_type: str = Query(FORM_10K, alias="formType"),
    filing_date: Optional[str] = Query(None, alias="filingDate"),
    filing_year: Optional[int] = Query(None, alias="filingYear"),
    include_sections: Optional[List[str]] = Query(None, alias="includeSections"),
    limit_holdings: int = Query(DEFAULT_LIMIT_HOLDINGS, alias="limitHoldings", ge=0, le=500),
):
    """Return the resolved filing summary for the requested company."""

    logger.info(
        "Summary request ticker=%s cik=%s companyName=%s formType=%s",
        ticker,
        cik,
        company_name,
        form_type,
    )
    try:
        filing_request = FilingRequest(
            ticker=ticker,
            cik=cik,
            company_name=company_name,
            form_type=form_type,
            filing_date=filing_date,
            filing_year=filing_year,
            include_sections=include_sections,
            limit_holdings=limit_holdings,
        )
        summary = await fetch_filing_summary(filing_request, get_context(request))
    except (ResolutionFailure, NoFilingFound, EdgarError, ValueError) as exc:
        logger.info("Summary request failed: %s", exc)
        raise _to_http_error(exc) from exc

    logger.info(
        "Returning %s %s for CIK %s (cached=%s)",
        summary.metadata.form_type,
        summary.metadata.accession_number,
        summary.metadata.cik,
        summary.metadata.cached,
    )
    return summary.to_dict()


@router.get("/resolve")
async def resolve_entity(
    request: Request,
    ticker: Optional[str] = Query(None),
    cik: Optional[str] = Query(None),
    company_name: Optional[str] = Query(None, alias="companyName"),
    form_type: Optional[str] = Query(None, alias="formType"),
):
    """Resolve an identifier to its EDGAR entity without fetching a filing."""

    try:
        entity = await get_context(request).resolver.resolve(
            ticker=ticker,
            cik=cik,
            company_name=company_name,
            form_type=form_type,
        )
    except (ResolutionFailure, EdgarError) as exc:
        raise _to_http_error(exc) from exc

    return entity.to_dict()
