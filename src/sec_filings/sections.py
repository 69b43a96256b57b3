"""
Narrative section extraction for 10-K filings.

The primary document is flattened to a single line of text, then each Item
heading is located with a regular expression. A section runs from its heading
to the first heading of the following Item, or to the end of the document.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, Optional, Pattern

from lxml import etree, html


logger = logging.getLogger(__name__)

_BYTE_ORDER_MARK = "\ufeff"
_XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")
_LONG_WHITESPACE = re.compile(r"\s{3,}")


@dataclass(frozen=True)
class SectionPattern:
    key: str
    label: str
    pattern: Pattern[str]
    next: Optional[Pattern[str]] = None


def _compile(expr: str) -> Pattern[str]:
    return re.compile(expr, re.IGNORECASE)


SECTION_PATTERNS = (
    SectionPattern(
        key="business_overview",
        label="Item 1. Business",
        pattern=_compile(r"item\s+1\.\s*business"),
        next=_compile(r"item\s+1a\."),
    ),
    SectionPattern(
        key="risk_factors",
        label="Item 1A. Risk Factors",
        pattern=_compile(r"item\s+1a\."),
        next=_compile(r"item\s+1b\.|item\s+2\."),
    ),
    SectionPattern(
        key="mdna",
        label="Item 7. Management's Discussion and Analysis",
        pattern=_compile(r"item\s+7\."),
        next=_compile(r"item\s+7a\."),
    ),
    SectionPattern(
        key="liquidity_and_market_risk",
        label="Item 7A. Quantitative and Qualitative Disclosures About Market Risk",
        pattern=_compile(r"item\s+7a\."),
        next=_compile(r"item\s+8\."),
    ),
    SectionPattern(
        key="financial_statements",
        label="Item 8. Financial Statements and Supplementary Data",
        pattern=_compile(r"item\s+8\."),
        next=_compile(r"item\s+9\."),
    ),
)


def html_to_text(markup: str) -> str:
    """
    Flatten an HTML document to plain text.

    Script and style blocks (and comments) are dropped with their content;
    every other tag becomes a word break and whitespace runs collapse to a
    single space. A leading byte order mark and XML declaration are removed
    first; lxml rejects str input that declares an encoding.
    """
    markup = (markup or "").lstrip(_BYTE_ORDER_MARK + " \t\r\n")
    markup = _XML_DECLARATION.sub("", markup, count=1)
    if not markup.strip():
        return ""

    try:
        root = html.fromstring(markup)
    except (etree.ParserError, ValueError) as e:
        logger.warning(f"Could not parse HTML document: {e}")
        return ""

    etree.strip_elements(root, etree.Comment, "script", "style", with_tail=False)
    text = " ".join(root.itertext())
    return _WHITESPACE.sub(" ", text).strip()


def extract_sections(text: str) -> Dict[str, str]:
    """
    Split flattened 10-K text into the standard Item sections.

    Sections whose heading does not appear are omitted.
    """
    sections: Dict[str, str] = {}

    for section in SECTION_PATTERNS:
        match = section.pattern.search(text)
        if not match:
            continue

        start = match.start()
        end = len(text)
        if section.next is not None:
            next_match = section.next.search(text, match.end())
            if next_match:
                end = next_match.start()

        snippet = _LONG_WHITESPACE.sub(" ", text[start:end]).strip()
        sections[section.key] = snippet

    logger.debug(f"Extracted sections: {', '.join(sections) or 'none'}")
    return sections
