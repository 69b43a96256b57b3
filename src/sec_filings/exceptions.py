"""Exceptions raised by the SEC filing resolver."""

from typing import Optional


class SecFilingError(Exception):
    """Base exception for filing resolution errors."""
    pass


class EdgarError(SecFilingError):
    """Raised when a request to EDGAR cannot be completed."""
    pass


class FetchFailure(EdgarError):
    """EDGAR answered with a non-success HTTP status."""

    def __init__(self, status: int, body_preview: str, url: Optional[str] = None):
        self.status = status
        self.body_preview = body_preview
        self.url = url
        super().__init__(f"SEC request failed ({status}): {body_preview}")


class ResolutionFailure(SecFilingError):
    """No resolution strategy produced a CIK for the supplied identifier."""

    def __init__(self, query: Optional[str], message: Optional[str] = None):
        self.query = query
        if message is None:
            message = (
                f'Unable to resolve "{query}" to a CIK. '
                "Provide a valid ticker, CIK, or company name."
            )
        super().__init__(message)


class NoFilingFound(SecFilingError):
    """The entity resolved, but none of its submissions match the filters."""

    def __init__(
        self,
        cik: str,
        form_type: str,
        company_name: Optional[str] = None,
        ticker: Optional[str] = None,
        filing_date: Optional[str] = None,
        filing_year: Optional[int] = None,
    ):
        self.cik = cik
        self.form_type = form_type
        self.company_name = company_name
        self.ticker = ticker
        self.filing_date = filing_date
        self.filing_year = filing_year

        identity = ", ".join(
            part for part in (
                company_name,
                f"ticker {ticker}" if ticker else None,
                f"CIK {cik}",
            ) if part
        )
        year_note = f" for year {filing_year}" if filing_year else ""
        date_note = f" filed on {filing_date[:10]}" if filing_date else ""
        super().__init__(
            f"No {form_type} filing found for {identity}{year_note}{date_note}. "
            f"This entity (CIK {cik}) may not file {form_type} forms. "
            "Do NOT retry with the same entity; try a different company name, ticker, or CIK."
        )


class InformationTableError(SecFilingError):
    """A 13F information table could not be parsed."""
    pass
