"""Tests for EDGAR ATOM feed parsing and filing filtering."""

from sec_filings.edgar_client import EdgarClient
from sec_filings.filing_search import select_filing


ATOM_FEED_SAMPLE = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Company Filings</title>
  <entry>
    <title>10-K/A - Tesla, Inc.</title>
    <category term="10-K/A" label="form type" />
    <link rel="alternate" href="https://www.sec.gov/Archives/edgar/data/0001318605/0000950170-23-004105/0000950170-23-004105-index.htm" />
    <updated>2023-02-13T12:00:00-04:00</updated>
  </entry>
  <entry>
    <title>10-K - Tesla, Inc.</title>
    <category term="10-K" label="form type" />
    <link rel="alternate" href="https://www.sec.gov/Archives/edgar/data/0001318605/0000950170-23-001234/0000950170-23-001234-index.htm" />
    <updated>2023-01-31T12:00:00-04:00</updated>
  </entry>
</feed>
"""

COMPANY_FEED = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <entry>
    <category label="form type" scheme="https://www.sec.gov/" term="10-K" />
    <content type="text/xml">
      <accession-number>0000320193-23-000106</accession-number>
      <filing-date>2023-11-03</filing-date>
      <filing-href>https://www.sec.gov/Archives/edgar/data/320193/000032019323000106/0000320193-23-000106-index.htm</filing-href>
      <filing-type>10-K</filing-type>
    </content>
    <id>urn:tag:sec.gov,2008:accession-number=0000320193-23-000106</id>
    <link href="https://www.sec.gov/Archives/edgar/data/320193/000032019323000106/0000320193-23-000106-index.htm" rel="alternate" type="text/html" />
    <title>10-K  - Annual report [Section 13 and 15(d), not S-K Item 405]</title>
    <updated>2023-11-02T18:01:36-04:00</updated>
  </entry>
</feed>
"""

LINK_ONLY_FEED = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <entry>
    <title>10-K - Apple Inc.</title>
    <link rel="alternate" href="https://www.sec.gov/Archives/edgar/data/320193/000032019322000108/0000320193-22-000108-index.htm" />
    <updated>2022-10-28T06:01:14-04:00</updated>
  </entry>
  <entry>
    <title>10-K - Apple Inc.</title>
    <link rel="alternate" href="https://www.sec.gov/Archives/edgar/data/320193/000032019321000105/" />
    <updated>2021-10-29T06:01:10-04:00</updated>
  </entry>
  <entry>
    <title>10-K - Apple Inc.</title>
    <link rel="alternate" href="https://www.sec.gov/cgi-bin/browse-edgar?action=getcompany" />
    <updated>2020-10-30T06:01:00-04:00</updated>
  </entry>
</feed>
"""

TITLE_ONLY_FEED = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <entry>
    <title>13F-HR/A - Example Capital</title>
    <link rel="alternate" href="https://www.sec.gov/Archives/edgar/data/1234567/0001234567-24-000009/0001234567-24-000009-index.htm" />
    <updated>2024-05-01T09:00:00-04:00</updated>
  </entry>
</feed>
"""


def test_parse_atom_feed_preserves_amendment_form():
    """Ensure the ATOM parser distinguishes between base and amended forms."""
    client = EdgarClient()

    submissions = client._parse_atom_feed(ATOM_FEED_SAMPLE, cik="0001318605")

    forms = submissions["filings"]["recent"]["form"]
    assert forms[0] == "10-K/A"
    assert forms[1] == "10-K"


def test_select_filing_excludes_amendments_from_atom_feed():
    """A 10-K request skips the newer 10-K/A entry."""
    client = EdgarClient()

    submissions = client._parse_atom_feed(ATOM_FEED_SAMPLE, cik="0001318605")
    filing = select_filing(submissions, "10-K")

    assert filing is not None
    assert filing.form_type == "10-K"
    assert filing.accession_number == "0000950170-23-001234"
    assert filing.filing_date == "2023-01-31"
    assert filing.primary_document == ""


def test_parse_atom_feed_falls_back_to_title_for_form():
    client = EdgarClient()

    submissions = client._parse_atom_feed(TITLE_ONLY_FEED, cik="1234567")

    recent = submissions["filings"]["recent"]
    assert recent["form"] == ["13F-HR/A"]
    assert recent["reportDate"] == [""]
    assert select_filing(submissions, "13F-HR").form_type == "13F-HR/A"


def test_accession_and_date_come_from_entry_content():
    client = EdgarClient()

    submissions = client._parse_atom_feed(COMPANY_FEED, cik="320193")

    recent = submissions["filings"]["recent"]
    assert recent["accessionNumber"] == ["0000320193-23-000106"]
    assert recent["filingDate"] == ["2023-11-03"]
    assert recent["form"] == ["10-K"]
    assert recent["primaryDocument"] == [""]


def test_accession_from_undashed_archive_links():
    """Real archive folders drop the dashes; the accession still comes back dashed."""
    client = EdgarClient()

    submissions = client._parse_atom_feed(LINK_ONLY_FEED, cik="320193")

    accessions = submissions["filings"]["recent"]["accessionNumber"]
    assert accessions == ["0000320193-22-000108", "0000320193-21-000105", ""]


def test_entries_without_accession_are_never_selected():
    client = EdgarClient()

    submissions = client._parse_atom_feed(LINK_ONLY_FEED, cik="320193")

    assert select_filing(submissions, "10-K", filing_year=2020) is None
    assert select_filing(submissions, "10-K", filing_year=2021).accession_number == "0000320193-21-000105"
