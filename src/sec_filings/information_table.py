"""
13F information table parsing.

Filers are inconsistent about tag casing (``nameOfIssuer`` vs ``nameofIssuer``,
``votingAuthority`` vs ``votingauthority``) and namespaces, so every lookup
goes through lowercased local tag names.
"""

import logging
import math
import re
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional, Union

from .exceptions import InformationTableError
from .models import HoldingRecord, VotingAuthority


logger = logging.getLogger(__name__)

_INFO_TABLE_NAME = re.compile(r"infotable|informationtable", re.IGNORECASE)
_13F_NAME = re.compile(r"13f", re.IGNORECASE)

Number = Union[int, float]


def _local_name(tag: Any) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1].lower()


def _child(element: Optional[ET.Element], name: str) -> Optional[ET.Element]:
    if element is None:
        return None
    wanted = name.lower()
    for child in element:
        if _local_name(child.tag) == wanted:
            return child
    return None


def _text(element: Optional[ET.Element], name: str) -> Optional[str]:
    child = _child(element, name)
    if child is None or child.text is None:
        return None
    value = child.text.strip()
    return value or None


def to_number(value: Optional[str]) -> Optional[Number]:
    """Parse a numeric cell; blanks, garbage and non-finite values become None."""
    if value is None:
        return None
    try:
        number = float(value.replace(",", ""))
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def _nonzero(value: Optional[str]) -> Optional[Number]:
    number = to_number(value)
    return number or None


def _parse_row(row: ET.Element) -> HoldingRecord:
    amount = _child(row, "shrsOrPrnAmt")
    voting = _child(row, "votingAuthority")

    return HoldingRecord(
        name_of_issuer=_text(row, "nameOfIssuer"),
        title_of_class=_text(row, "titleOfClass"),
        cusip=_text(row, "cusip"),
        value=to_number(_text(row, "value")),
        shares=to_number(_text(amount, "sshPrnamt")),
        share_type=_text(amount, "sshPrnamtType"),
        investment_discretion=_text(row, "investmentDiscretion"),
        put_call=_text(row, "putCall"),
        other_manager=_text(row, "otherManager"),
        voting_authority=VotingAuthority(
            sole=_nonzero(_text(voting, "Sole")),
            shared=_nonzero(_text(voting, "Shared")),
            none=_nonzero(_text(voting, "None")),
        ) if voting is not None else None,
    )


def parse_information_table(xml: Union[str, bytes]) -> List[HoldingRecord]:
    """
    Parse a 13F information table into holding records, in document order.

    Accepts both the standalone ``informationTable`` document and tables
    embedded in an ``edgarSubmission``.

    Raises:
        InformationTableError: If the document is not well-formed XML
    """
    try:
        root = ET.fromstring(xml.strip())
    except ET.ParseError as e:
        raise InformationTableError(f"Malformed information table: {e}") from e

    rows = [element for element in root.iter() if _local_name(element.tag) == "infotable"]
    holdings = [_parse_row(row) for row in rows]
    logger.debug(f"Parsed {len(holdings)} information table rows")
    return holdings


def select_information_table(
    items: List[Dict[str, Any]],
    primary_document: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """
    Choose the information table file from a filing's ``index.json`` items.

    Order of preference:
    1. a name containing "infotable" or "informationtable"
    2. a ``.xml`` name containing "13f" other than the primary document
    3. the largest ``.xml`` file that is neither the primary document nor an index
    """
    for item in items:
        if _INFO_TABLE_NAME.search(item.get("name") or ""):
            return item

    for item in items:
        name = item.get("name") or ""
        if _13F_NAME.search(name) and name.endswith(".xml") and name != primary_document:
            return item

    candidates = [
        item for item in items
        if (item.get("name") or "").endswith(".xml")
        and item.get("name") != primary_document
        and "-index" not in item.get("name")
    ]
    if not candidates:
        return None

    def size_of(item: Dict[str, Any]) -> float:
        return to_number(str(item.get("size") or "")) or 0

    return sorted(candidates, key=size_of, reverse=True)[0]
