"""
Curated aliases for well-known 13F filers.

Institutional managers are often missing from the public ticker file (they
are not exchange-listed) or share a name with an unrelated EDGAR registrant,
e.g. Vanguard's 13F filer is CIK 102909 while CIK 735286 is a transfer-agent
entity. Aliases are lowercase and may span several words.
"""

from typing import Optional, Tuple

from .models import OverrideEntry


_VANGUARD = OverrideEntry(cik="102909", name="VANGUARD GROUP INC")
_BLACKROCK = OverrideEntry(cik="1364742", name="BlackRock Finance, Inc.")
_STATE_STREET = OverrideEntry(cik="93751", name="STATE STREET CORP")
_FMR = OverrideEntry(cik="315066", name="FMR LLC")
_BERKSHIRE = OverrideEntry(cik="1067983", name="BERKSHIRE HATHAWAY INC")
_CITADEL = OverrideEntry(cik="1423053", name="CITADEL ADVISORS LLC")
_BRIDGEWATER = OverrideEntry(cik="1350694", name="Bridgewater Associates, LP")
_TWO_SIGMA = OverrideEntry(cik="1179392", name="TWO SIGMA INVESTMENTS, LP")
_RENAISSANCE = OverrideEntry(cik="1037389", name="RENAISSANCE TECHNOLOGIES LLC")
_DE_SHAW = OverrideEntry(cik="1009207", name="D. E. Shaw & Co., Inc.")
_MILLENNIUM = OverrideEntry(cik="1273087", name="MILLENNIUM MANAGEMENT LLC")
_POINT72 = OverrideEntry(cik="1603466", name="Point72 Asset Management, L.P.")
_AQR = OverrideEntry(cik="1167557", name="AQR CAPITAL MANAGEMENT LLC")
_TIGER_GLOBAL = OverrideEntry(cik="1167483", name="TIGER GLOBAL MANAGEMENT LLC")
_BAUPOST = OverrideEntry(cik="1061768", name="BAUPOST GROUP LLC/MA")
_THIRD_POINT = OverrideEntry(cik="1040273", name="Third Point LLC")
_LONE_PINE = OverrideEntry(cik="1061165", name="LONE PINE CAPITAL LLC")
_PERSHING_SQUARE = OverrideEntry(cik="1336528", name="Pershing Square Capital Management, L.P.")
_SOROS = OverrideEntry(cik="1029160", name="SOROS FUND MANAGEMENT LLC")
_COATUE = OverrideEntry(cik="1135730", name="COATUE MANAGEMENT LLC")
_VIKING = OverrideEntry(cik="1103804", name="VIKING GLOBAL INVESTORS LP")
_ELLIOTT = OverrideEntry(cik="1791786", name="Elliott Investment Management L.P.")
_GREENLIGHT = OverrideEntry(cik="1079114", name="GREENLIGHT CAPITAL INC")
_PAULSON = OverrideEntry(cik="1035674", name="PAULSON & CO. INC.")


KNOWN_13F_FILERS = {
    "vanguard": _VANGUARD,
    "vanguard group": _VANGUARD,
    "vanguard group inc": _VANGUARD,
    "the vanguard group": _VANGUARD,

    "blackrock": _BLACKROCK,
    "blackrock inc": _BLACKROCK,
    "blackrock finance": _BLACKROCK,

    "state street": _STATE_STREET,
    "state street corp": _STATE_STREET,
    "state street corporation": _STATE_STREET,

    "fidelity": _FMR,
    "fmr": _FMR,
    "fmr llc": _FMR,
    "fidelity management": _FMR,
    "fidelity investments": _FMR,

    "berkshire hathaway": _BERKSHIRE,
    "berkshire hathaway inc": _BERKSHIRE,
    "berkshire": _BERKSHIRE,

    "citadel": _CITADEL,
    "citadel advisors": _CITADEL,
    "citadel advisors llc": _CITADEL,

    "bridgewater": _BRIDGEWATER,
    "bridgewater associates": _BRIDGEWATER,

    "two sigma": _TWO_SIGMA,
    "two sigma investments": _TWO_SIGMA,

    "renaissance": _RENAISSANCE,
    "renaissance technologies": _RENAISSANCE,
    "renaissance tech": _RENAISSANCE,
    "rentec": _RENAISSANCE,

    "de shaw": _DE_SHAW,
    "d.e. shaw": _DE_SHAW,
    "d e shaw": _DE_SHAW,

    "millennium": _MILLENNIUM,
    "millennium management": _MILLENNIUM,

    "point72": _POINT72,
    "point72 asset management": _POINT72,

    "aqr": _AQR,
    "aqr capital": _AQR,
    "aqr capital management": _AQR,

    "tiger global": _TIGER_GLOBAL,
    "tiger global management": _TIGER_GLOBAL,

    "baupost": _BAUPOST,
    "baupost group": _BAUPOST,

    "third point": _THIRD_POINT,
    "third point llc": _THIRD_POINT,

    "lone pine": _LONE_PINE,
    "lone pine capital": _LONE_PINE,

    "pershing square": _PERSHING_SQUARE,
    "pershing square capital": _PERSHING_SQUARE,

    "soros": _SOROS,
    "soros fund management": _SOROS,

    "coatue": _COATUE,
    "coatue management": _COATUE,

    "viking global": _VIKING,
    "viking global investors": _VIKING,

    "elliott": _ELLIOTT,
    "elliott management": _ELLIOTT,
    "elliott investment management": _ELLIOTT,

    "greenlight": _GREENLIGHT,
    "greenlight capital": _GREENLIGHT,

    "paulson": _PAULSON,
    "paulson & co": _PAULSON,
}


def lookup_known_filer(name: str) -> Optional[Tuple[str, OverrideEntry]]:
    """
    Match ``name`` against the alias table.

    Tries the whole lowercased name first, then drops trailing words one at a
    time ("vanguard group inc latest 13f" → "vanguard group inc" → ...).

    Returns:
        (matched alias, entry) or None
    """
    words = name.lower().split()
    for length in range(len(words), 0, -1):
        alias = " ".join(words[:length])
        entry = KNOWN_13F_FILERS.get(alias)
        if entry is not None:
            return alias, entry
    return None
