"""
SEC Filing Resolver Module

Resolves a company reference (ticker, CIK, or free-form name) to an EDGAR
entity, locates its most relevant 10-K or 13F-HR filing, and extracts the
narrative sections or the institutional holdings from it.
"""

__version__ = "0.1.0"
__author__ = "sec-filings"

from .cache import FilingCache
from .config import SecFilingsConfig
from .context import FilingContext
from .edgar_client import EdgarClient
from .exceptions import (
    EdgarError,
    FetchFailure,
    InformationTableError,
    NoFilingFound,
    ResolutionFailure,
    SecFilingError,
)
from .models import FilingRequest, ResolvedEntity, ResolvedFiling
from .resolver import EntityResolver
from .summary import FilingSummaryService, fetch_filing_summary

__all__ = [
    "FilingCache",
    "SecFilingsConfig",
    "FilingContext",
    "EdgarClient",
    "EdgarError",
    "FetchFailure",
    "InformationTableError",
    "NoFilingFound",
    "ResolutionFailure",
    "SecFilingError",
    "FilingRequest",
    "ResolvedEntity",
    "ResolvedFiling",
    "EntityResolver",
    "FilingSummaryService",
    "fetch_filing_summary",
]
