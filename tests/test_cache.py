"""Tests for the on-disk filing cache."""

import asyncio
import json

from sec_filings.cache import FilingCache
from sec_filings.models import FilingMetadata, HoldingRecord, ResolvedFiling


def make_filing(**overrides) -> ResolvedFiling:
    metadata = FilingMetadata(
        company_name="Apple Inc.",
        ticker="AAPL",
        cik="320193",
        form_type="10-K",
        accession_number="0000320193-23-000106",
        filing_date="2023-11-03",
        report_date="2023-09-30",
        primary_document_url="https://www.sec.gov/Archives/edgar/data/320193/000032019323000106/aapl-20230930.htm",
    )
    fields = {
        "metadata": metadata,
        "sections": {
            "business_overview": "Item 1. Business Phones.",
            "risk_factors": "Item 1A. Risk Factors Many.",
            "mdna": "Item 7. Results.",
        },
    }
    fields.update(overrides)
    return ResolvedFiling(**fields)


def test_round_trip_then_narrow_to_one_section(tmp_path):
    cache = FilingCache(tmp_path, enabled=True)
    filing = make_filing()

    async def scenario():
        path = await cache.write("320193-000032019323000106", filing)
        cached = await cache.read("320193-000032019323000106")
        return path, cached

    path, cached = asyncio.run(scenario())

    assert path == tmp_path / "320193-000032019323000106.json"
    assert cached.path == path
    assert cached.fetched_at
    assert cached.filing.metadata.cached is True
    assert cached.filing.sections == filing.sections

    narrowed = cached.filing.narrowed(["risk_factors"])
    assert narrowed.sections == {"risk_factors": "Item 1A. Risk Factors Many."}
    assert len(cached.filing.sections) == 3


def test_written_payload_shape(tmp_path):
    cache = FilingCache(tmp_path, enabled=True)
    filing = make_filing()
    filing.metadata.cache_path = "/stale/path.json"

    path = asyncio.run(cache.write("key", filing))
    payload = json.loads(path.read_text())

    assert payload["metadata"]["cached"] is True
    assert "cachePath" not in payload["metadata"]
    assert payload["metadata"]["accessionNumber"] == "0000320193-23-000106"
    assert "fetchedAt" in payload
    assert filing.metadata.cached is False


def test_holdings_survive_round_trip(tmp_path):
    cache = FilingCache(tmp_path, enabled=True)
    filing = make_filing(sections={}, holdings=[
        HoldingRecord(name_of_issuer="SMALL", value=5),
        HoldingRecord(name_of_issuer="BIG", value=50),
    ])

    async def scenario():
        await cache.write("holdings", filing)
        return await cache.read("holdings")

    cached = asyncio.run(scenario())

    assert [h.name_of_issuer for h in cached.filing.holdings] == ["SMALL", "BIG"]
    assert [h.value for h in cached.filing.narrowed(limit_holdings=1).holdings] == [50]


def test_disabled_cache_never_touches_disk(tmp_path):
    cache = FilingCache(tmp_path / "filings", enabled=False)

    async def scenario():
        path = await cache.write("key", make_filing())
        return path, await cache.read("key")

    path, cached = asyncio.run(scenario())

    assert path is None
    assert cached is None
    assert not (tmp_path / "filings").exists()


def test_corrupt_entry_is_a_miss(tmp_path):
    cache = FilingCache(tmp_path, enabled=True)
    cache.path_for("broken").write_text("{\"metadata\": ")
    cache.path_for("incomplete").write_text(json.dumps({"metadata": {"cik": "1"}}))

    assert asyncio.run(cache.read("broken")) is None
    assert asyncio.run(cache.read("incomplete")) is None
    assert asyncio.run(cache.read("absent")) is None
