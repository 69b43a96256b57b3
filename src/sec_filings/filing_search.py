"""
Filing selection over an entity's submission history.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from .models import FORM_13F, FilingEntry


logger = logging.getLogger(__name__)

_EXHIBIT_NAME = re.compile(r"exhibit|(^|[_\-.x])ex-?\d|^R\d+\.htm$", re.IGNORECASE)
_HTML_NAME = re.compile(r"\.html?$", re.IGNORECASE)


def target_forms(form_type: str) -> List[str]:
    """Form strings accepted for a requested form type (13F-HR includes its amendment)."""
    if form_type == FORM_13F:
        return [FORM_13F, f"{FORM_13F}/A"]
    return [form_type]


def parse_submission_entries(submissions: Optional[Dict[str, Any]]) -> List[FilingEntry]:
    """
    Convert the columnar ``filings.recent`` block into FilingEntry rows.

    Upstream ordering is preserved (newest first on data.sec.gov).
    """
    recent = ((submissions or {}).get('filings') or {}).get('recent') or {}
    forms = recent.get('form') or []

    accessions = recent.get('accessionNumber') or []
    dates = recent.get('filingDate') or []
    report_dates = recent.get('reportDate') or []
    primary_docs = recent.get('primaryDocument') or []

    def column(values: List[Any], i: int) -> Optional[str]:
        return values[i] if i < len(values) and values[i] else None

    entries = []
    for i, form in enumerate(forms):
        entries.append(FilingEntry(
            form_type=form,
            accession_number=column(accessions, i) or '',
            filing_date=column(dates, i) or '',
            report_date=column(report_dates, i),
            primary_document=column(primary_docs, i) or '',
        ))
    return entries


def select_filing(
    submissions: Optional[Dict[str, Any]],
    form_type: str,
    filing_date: Optional[str] = None,
    filing_year: Optional[int] = None,
) -> Optional[FilingEntry]:
    """
    Pick the first filing matching every supplied filter.

    Args:
        submissions: data.sec.gov submissions payload
        form_type: Requested form ("10-K", "13F-HR")
        filing_date: Exact filing date; only the first 10 characters are compared
        filing_year: Matches when either the filing year or the report year equals it

    Returns:
        The first matching FilingEntry in upstream order, or None
    """
    recent = ((submissions or {}).get('filings') or {}).get('recent')
    if not recent or not recent.get('form'):
        return None

    forms = target_forms(form_type)
    normalized_date = filing_date[:10] if filing_date else None

    for entry in parse_submission_entries(submissions):
        if entry.form_type not in forms or not entry.accession_number:
            continue
        if normalized_date and entry.filing_date != normalized_date:
            continue
        if filing_year and filing_year not in (entry.filing_year, entry.report_year):
            continue
        logger.debug(f"Selected {entry.form_type} {entry.accession_number} filed {entry.filing_date}")
        return entry

    return None


def select_primary_document(items: List[Dict[str, Any]], form_type: str) -> Optional[str]:
    """
    Name of the primary document among a filing's ``index.json`` items.

    Used when the submission row did not carry one. 13F-HR filings use
    ``primary_doc.xml``; for a 10-K the largest HTML file that is neither an
    index page nor an exhibit is taken.
    """
    names = [item.get('name') or '' for item in items]

    if form_type == FORM_13F:
        return 'primary_doc.xml' if 'primary_doc.xml' in names else None

    def size_of(item: Dict[str, Any]) -> int:
        size = str(item.get('size') or '').strip()
        return int(size) if size.isdigit() else 0

    candidates = [
        item for item in items
        if _HTML_NAME.search(item.get('name') or '')
        and '-index' not in item.get('name')
        and not _EXHIBIT_NAME.search(item.get('name'))
    ]
    if not candidates:
        return None
    return max(candidates, key=size_of)['name']
