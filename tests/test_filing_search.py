"""Tests for choosing a filing from a submission history."""

from conftest import submissions_payload
from sec_filings.filing_search import (
    parse_submission_entries,
    select_filing,
    select_primary_document,
    target_forms,
)


SUBMISSIONS = submissions_payload("Example Corp", [
    ("10-Q", "0000001234-24-000030", "2024-05-01", "2024-03-31", "q1.htm"),
    ("10-K/A", "0000001234-24-000020", "2024-04-15", "2023-12-31", "k-amend.htm"),
    ("10-K", "0000001234-24-000010", "2024-02-20", "2023-12-31", "k2023.htm"),
    ("13F-HR/A", "0000001234-24-000005", "2024-02-10", "2023-12-31", "primary_doc.xml"),
    ("10-K", "0000001234-23-000010", "2023-02-21", "2022-12-31", "k2022.htm"),
    ("13F-HR", "0000001234-23-000005", "2023-11-14", "2023-09-30", "primary_doc.xml"),
])


def test_target_forms_include_13f_amendments_only():
    assert target_forms("13F-HR") == ["13F-HR", "13F-HR/A"]
    assert target_forms("10-K") == ["10-K"]


def test_latest_10k_skips_amendment():
    filing = select_filing(SUBMISSIONS, "10-K")

    assert filing.accession_number == "0000001234-24-000010"
    assert filing.primary_document == "k2023.htm"
    assert filing.report_date == "2023-12-31"


def test_selection_is_idempotent():
    first = select_filing(SUBMISSIONS, "10-K", filing_year=2023)
    second = select_filing(SUBMISSIONS, "10-K", filing_year=2023)

    assert first == second


def test_year_matches_filing_or_report_year():
    # Filed in 2023: the 2022 annual report.
    by_filing_year = select_filing(SUBMISSIONS, "10-K", filing_year=2022)
    assert by_filing_year.accession_number == "0000001234-23-000010"

    by_either = select_filing(SUBMISSIONS, "10-K", filing_year=2023)
    assert by_either.accession_number == "0000001234-24-000010"


def test_filing_date_compares_day_only():
    filing = select_filing(SUBMISSIONS, "10-K", filing_date="2023-02-21T00:00:00Z")

    assert filing.accession_number == "0000001234-23-000010"
    assert select_filing(SUBMISSIONS, "10-K", filing_date="2023-02-22") is None


def test_13f_selection_accepts_amendment():
    filing = select_filing(SUBMISSIONS, "13F-HR")

    assert filing.form_type == "13F-HR/A"


def test_missing_history_returns_none():
    assert select_filing({}, "10-K") is None
    assert select_filing({"filings": {"recent": {"form": []}}}, "10-K") is None
    assert select_filing(None, "10-K") is None


def test_ragged_columns_do_not_fail():
    submissions = {"filings": {"recent": {
        "form": ["10-K", "10-K"],
        "accessionNumber": ["0000001234-24-000010"],
        "filingDate": ["2024-02-20"],
    }}}

    entries = parse_submission_entries(submissions)

    assert len(entries) == 2
    assert entries[1].accession_number == ""
    assert entries[1].report_date is None


TEN_K_INDEX_ITEMS = [
    {"name": "0000320193-23-000106-index.htm", "size": ""},
    {"name": "0000320193-23-000106-index-headers.html", "size": ""},
    {"name": "aapl-20230930.htm", "size": "1503422"},
    {"name": "a10-kexhibit4119.htm", "size": "20111"},
    {"name": "aapl-20230930xex21.htm", "size": "3900"},
    {"name": "ex-31_1.htm", "size": "9000"},
    {"name": "R2.htm", "size": "60000"},
    {"name": "aapl-20230930_htm.xml", "size": "2100000"},
]


def test_primary_document_is_largest_non_exhibit_html():
    assert select_primary_document(TEN_K_INDEX_ITEMS, "10-K") == "aapl-20230930.htm"


def test_primary_document_for_13f_is_primary_doc_xml():
    items = [{"name": "infotable.xml", "size": "9000"}, {"name": "primary_doc.xml", "size": "3000"}]

    assert select_primary_document(items, "13F-HR") == "primary_doc.xml"
    assert select_primary_document(items[:1], "13F-HR") is None


def test_primary_document_missing_from_index():
    assert select_primary_document([{"name": "0000320193-23-000106-index.htm"}], "10-K") is None
    assert select_primary_document([], "10-K") is None


def test_rows_without_accession_are_skipped():
    submissions = {"filings": {"recent": {
        "form": ["10-K", "10-K"],
        "accessionNumber": ["", "0000001234-23-000010"],
        "filingDate": ["2024-02-20", "2023-02-21"],
    }}}

    assert select_filing(submissions, "10-K").accession_number == "0000001234-23-000010"
