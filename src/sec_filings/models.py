"""
Data models for the SEC filing resolver.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional, Union


FORM_10K = "10-K"
FORM_13F = "13F-HR"
SUPPORTED_FORM_TYPES = (FORM_10K, FORM_13F)

SECTION_KEYS = (
    "business_overview",
    "risk_factors",
    "mdna",
    "liquidity_and_market_risk",
    "financial_statements",
)

DEFAULT_LIMIT_HOLDINGS = 25


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


@dataclass(frozen=True)
class EntityRecord:
    """A company from the public ticker directory."""
    cik: str
    title: str
    ticker: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"cik_str": int(self.cik), "ticker": self.ticker, "title": self.title}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EntityRecord":
        return cls(
            cik=str(int(data["cik_str"])),
            ticker=data.get("ticker"),
            title=data.get("title") or "",
        )

    def __str__(self) -> str:
        if self.ticker:
            return f"{self.ticker} ({self.title})"
        return f"{self.title} (CIK: {self.cik})"


@dataclass(frozen=True)
class OverrideEntry:
    """A curated alias target in the known-filer table."""
    cik: str
    name: str


@dataclass(frozen=True)
class ResolvedEntity:
    """Result of entity resolution."""
    cik: str
    ticker: Optional[str] = None
    company_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"cik": self.cik, "ticker": self.ticker, "companyName": self.company_name}


@dataclass(frozen=True)
class FilingEntry:
    """One row of an entity's submission history."""
    form_type: str
    accession_number: str
    filing_date: str
    primary_document: str
    report_date: Optional[str] = None

    @property
    def filing_year(self) -> Optional[int]:
        return _year_of(self.filing_date)

    @property
    def report_year(self) -> Optional[int]:
        return _year_of(self.report_date)


def _year_of(value: Optional[str]) -> Optional[int]:
    if not value or len(value) < 4 or not value[:4].isdigit():
        return None
    return int(value[:4])


@dataclass
class FilingMetadata:
    """Descriptive metadata for a resolved filing."""
    company_name: str
    cik: str
    form_type: str
    accession_number: str
    filing_date: str
    primary_document_url: str
    ticker: Optional[str] = None
    report_date: Optional[str] = None
    information_table_url: Optional[str] = None
    cached: bool = False
    cache_path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "companyName": self.company_name,
            "ticker": self.ticker,
            "cik": self.cik,
            "formType": self.form_type,
            "accessionNumber": self.accession_number,
            "filingDate": self.filing_date,
            "reportDate": self.report_date,
            "primaryDocumentUrl": self.primary_document_url,
            "informationTableUrl": self.information_table_url,
            "cached": self.cached,
            "cachePath": self.cache_path,
        })

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FilingMetadata":
        return cls(
            company_name=data["companyName"],
            cik=str(data["cik"]),
            form_type=data["formType"],
            accession_number=data["accessionNumber"],
            filing_date=data["filingDate"],
            primary_document_url=data["primaryDocumentUrl"],
            ticker=data.get("ticker"),
            report_date=data.get("reportDate"),
            information_table_url=data.get("informationTableUrl"),
            cached=bool(data.get("cached", False)),
            cache_path=data.get("cachePath"),
        )


@dataclass
class VotingAuthority:
    sole: Optional[float] = None
    shared: Optional[float] = None
    none: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({"sole": self.sole, "shared": self.shared, "none": self.none})


@dataclass
class HoldingRecord:
    """One position from a 13F information table (value in thousands of USD)."""
    name_of_issuer: Optional[str] = None
    title_of_class: Optional[str] = None
    cusip: Optional[str] = None
    value: Optional[float] = None
    shares: Optional[float] = None
    share_type: Optional[str] = None
    investment_discretion: Optional[str] = None
    put_call: Optional[str] = None
    other_manager: Optional[str] = None
    voting_authority: Optional[VotingAuthority] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "nameOfIssuer": self.name_of_issuer,
            "titleOfClass": self.title_of_class,
            "cusip": self.cusip,
            "value": self.value,
            "shares": self.shares,
            "shareType": self.share_type,
            "investmentDiscretion": self.investment_discretion,
            "putCall": self.put_call,
            "otherManager": self.other_manager,
            "votingAuthority": self.voting_authority.to_dict() if self.voting_authority else None,
        })

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HoldingRecord":
        voting = data.get("votingAuthority")
        return cls(
            name_of_issuer=data.get("nameOfIssuer"),
            title_of_class=data.get("titleOfClass"),
            cusip=data.get("cusip"),
            value=data.get("value"),
            shares=data.get("shares"),
            share_type=data.get("shareType"),
            investment_discretion=data.get("investmentDiscretion"),
            put_call=data.get("putCall"),
            other_manager=data.get("otherManager"),
            voting_authority=VotingAuthority(**voting) if isinstance(voting, dict) else None,
        )


@dataclass(frozen=True)
class HoldingsStats:
    total_positions: int
    total_value_millions: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalPositions": self.total_positions,
            "totalValueMillions": self.total_value_millions,
        }

    @classmethod
    def from_holdings(cls, holdings: List[HoldingRecord]) -> "HoldingsStats":
        total_value = sum(holding.value or 0 for holding in holdings)
        return cls(
            total_positions=len(holdings),
            total_value_millions=round(total_value / 1000, 2),
        )


def sort_holdings(holdings: Iterable[HoldingRecord]) -> List[HoldingRecord]:
    """Return holdings ordered by value, largest first (missing values count as 0)."""
    return sorted(holdings, key=lambda holding: holding.value or 0, reverse=True)


@dataclass
class ResolvedFiling:
    """A located filing with its extracted content; the unit of caching."""
    metadata: FilingMetadata
    sections: Dict[str, str] = field(default_factory=dict)
    holdings: Optional[List[HoldingRecord]] = None
    holdings_stats: Optional[HoldingsStats] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "metadata": self.metadata.to_dict(),
            "sections": dict(self.sections),
            "holdings": [h.to_dict() for h in self.holdings] if self.holdings is not None else None,
            "holdingsStats": self.holdings_stats.to_dict() if self.holdings_stats else None,
        })

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResolvedFiling":
        holdings = data.get("holdings")
        stats = data.get("holdingsStats")
        return cls(
            metadata=FilingMetadata.from_dict(data["metadata"]),
            sections=dict(data.get("sections") or {}),
            holdings=[HoldingRecord.from_dict(h) for h in holdings] if holdings is not None else None,
            holdings_stats=HoldingsStats(
                total_positions=int(stats["totalPositions"]),
                total_value_millions=float(stats["totalValueMillions"]),
            ) if stats else None,
        )

    def narrowed(
        self,
        include_sections: Optional[Iterable[str]] = None,
        limit_holdings: Optional[int] = None,
    ) -> "ResolvedFiling":
        """
        Return a copy restricted to ``include_sections`` and the top
        ``limit_holdings`` positions. The receiver is left untouched.
        """
        sections = dict(self.sections)
        wanted = list(include_sections or [])
        if wanted:
            sections = {key: text for key, text in sections.items() if key in wanted}

        holdings = self.holdings
        if holdings is not None:
            holdings = sort_holdings(holdings)
            if limit_holdings is not None and limit_holdings > 0:
                holdings = holdings[:limit_holdings]

        return replace(self, metadata=replace(self.metadata), sections=sections, holdings=holdings)


@dataclass
class FilingRequest:
    """Inbound request for a filing summary."""
    ticker: Optional[str] = None
    cik: Optional[str] = None
    company_name: Optional[str] = None
    form_type: str = FORM_10K
    filing_date: Optional[str] = None
    filing_year: Optional[int] = None
    include_sections: Optional[List[str]] = None
    limit_holdings: int = DEFAULT_LIMIT_HOLDINGS

    def __post_init__(self):
        if self.form_type not in SUPPORTED_FORM_TYPES:
            raise ValueError(
                f"Unsupported form type {self.form_type!r}; expected one of {', '.join(SUPPORTED_FORM_TYPES)}"
            )
        unknown = [key for key in self.include_sections or [] if key not in SECTION_KEYS]
        if unknown:
            raise ValueError(f"Unknown section keys: {', '.join(unknown)}")
        if self.cik is not None:
            self.cik = str(self.cik)

    @property
    def query_term(self) -> Optional[str]:
        return self.company_name or self.ticker or self.cik

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FilingRequest":
        """Build a request from the camelCase payload used by callers."""
        year = data.get("filingYear")
        limit = data.get("limitHoldings")
        return cls(
            ticker=data.get("ticker") or None,
            cik=data.get("cik") or None,
            company_name=data.get("companyName") or None,
            form_type=data.get("formType") or FORM_10K,
            filing_date=data.get("filingDate") or None,
            filing_year=int(year) if year else None,
            include_sections=list(data.get("includeSections") or []) or None,
            limit_holdings=int(limit) if limit is not None else DEFAULT_LIMIT_HOLDINGS,
        )


@dataclass(frozen=True)
class HoldingsExtracted:
    """The 13F information table was located and parsed."""
    holdings: List[HoldingRecord]
    information_table_url: str


@dataclass(frozen=True)
class HoldingsDegraded:
    """The 13F information table could not be produced; ``reason`` says why."""
    reason: str
    information_table_url: Optional[str] = None


HoldingsOutcome = Union[HoldingsExtracted, HoldingsDegraded]
