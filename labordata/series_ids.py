"""
labordata/series_ids.py

Series Identifier Codec.

BLS addresses every statistic with a fixed-width string. The layout depends on
the survey, which is named by the first two characters:

  OE  OEWS wages/employment  OE + S/U + area type + area(7) + industry(6)
                             + occupation(6) + measure(2)           25 chars
  JT  JOLTS                  JT + S/U + industry(6) + state(2) + area(5)
                             + size class(2) + element(2) + L/R     21 chars
  LN  CPS (household)        LN + S/U + series code(8)              11 chars
  LA  LAUS                   LA + S/U + area(15) + measure(2)       20 chars
  CU  CPI-U                  CU + S/U + periodicity + area(4) + item

decode() never raises: anything it cannot place comes back as Unparseable.
Every parsed variant has encode(), and encode(decode(x)) == x for well-formed x.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Union

from labordata.areas import AreaResolver, StaticAreaResolver
from labordata.config import CROSS_INDUSTRY_CODE, NATIONAL_AREA_CODE, OES_MEASURES

logger = logging.getLogger(__name__)

AREA_SCOPES = ("N", "S", "M")

_SCOPED_AREA = re.compile(r"^([NSM])(\d{1,10})$")


# ---------------------------------------------------------------------
# Geography
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class Geography:
    scope: str  # "N", "S" or "M"
    code: str   # 7 digits

    @property
    def area_code(self) -> str:
        return f"{self.scope}{self.code}"

    @property
    def is_national(self) -> bool:
        return self.scope == "N"


NATIONAL = Geography("N", NATIONAL_AREA_CODE)


def _seven_digits(digits: str) -> Optional[str]:
    trimmed = digits.lstrip("0") or "0"
    if len(trimmed) > 7:
        return None
    return trimmed.zfill(7)


def normalize_geography(
    value: Optional[str], resolver: Optional[AreaResolver] = None
) -> Geography:
    """
    Normalise any accepted geography spelling into a scope-prefixed Geography.

    Accepted inputs:
    - None, "", "national", "US"                -> national
    - bare 2-character code: "06" or "CA"         -> state
    - scope-prefixed: "S0600000", "M0035620", "M0000035620"
    - raw numeric: "0000000" (national), "6" (state FIPS), "35620" (metro CBSA)
    - metro key: "NEW_YORK"

    Geography the resolver cannot place falls back to national scope.
    """
    if value is None:
        return NATIONAL
    text = value.strip()
    if not text or text.upper() in ("NATIONAL", "US", "USA"):
        return NATIONAL

    resolver = resolver or StaticAreaResolver()

    if len(text) == 2 and text.isalpha():
        try:
            return normalize_geography(resolver.resolve_state(text), resolver)
        except Exception as e:
            logger.warning("No area code for state %r (%s); using national scope", text, e)
            return NATIONAL

    match = _SCOPED_AREA.match(text.upper())
    if match:
        scope, digits = match.groups()
        if scope == "N":
            return NATIONAL
        if scope == "S":
            # S + FIPS + zero fill; the FIPS code is always the first two digits
            fips = digits[:2] if len(digits) >= 2 else digits.zfill(2)
            return Geography("S", f"{fips}00000")
        code = _seven_digits(digits)
        if code is not None:
            return Geography("M", code)

    if text.isdigit():
        if set(text) == {"0"}:
            return NATIONAL
        if len(text) <= 2:
            return Geography("S", f"{text.zfill(2)}00000")
        code = _seven_digits(text)
        if code is not None:
            return Geography("M", code)

    try:
        metro = resolver.resolve_metro(text)
    except Exception as e:
        logger.warning("Metro lookup for %r failed (%s); using national scope", text, e)
        return NATIONAL
    if metro:
        return normalize_geography(metro, resolver)

    logger.warning("Unrecognised geography %r; using national scope", text)
    return NATIONAL


# ---------------------------------------------------------------------
# Occupation / industry helpers
# ---------------------------------------------------------------------
def normalize_occupation(code: str) -> str:
    """
    "15-1252", "151252", "15-1252.00" (O*NET) -> "151252".

    Short codes are right-padded with zeros to 6 digits ("15" -> "150000").
    """
    soc = (code or "").strip().split(".")[0].replace("-", "").replace(" ", "")
    if not soc.isdigit() or len(soc) > 6:
        raise ValueError(f"Invalid occupation code: {code!r}")
    return soc.ljust(6, "0")


def format_soc(code: str) -> str:
    """Format "151252" as "15-1252"; anything unexpected comes back unchanged."""
    cleaned = code.replace("-", "")
    if len(cleaned) >= 6:
        return f"{cleaned[:2]}-{cleaned[2:6]}"
    return code


def normalize_industry(code: Optional[str]) -> str:
    industry = (code or CROSS_INDUSTRY_CODE).strip()
    if not industry.isdigit() or len(industry) > 6:
        raise ValueError(f"Invalid industry code: {code!r}")
    return industry.zfill(6)


# ---------------------------------------------------------------------
# Parsed identifiers
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class OesSeriesId:
    occupation: str
    measure: str
    area_type: str = "N"
    area: str = NATIONAL_AREA_CODE
    industry: str = CROSS_INDUSTRY_CODE
    seasonal: str = "U"

    survey = "OE"

    @property
    def geography(self) -> Geography:
        return Geography(self.area_type, self.area)

    def encode(self) -> str:
        return (
            f"OE{self.seasonal}{self.area_type}{self.area}"
            f"{self.industry}{self.occupation}{self.measure}"
        )


@dataclass(frozen=True)
class JoltsSeriesId:
    element: str
    rate_level: str
    industry: str = CROSS_INDUSTRY_CODE
    state: str = "00"
    area: str = "00000"
    size_class: str = "00"
    seasonal: str = "S"

    survey = "JT"

    def encode(self) -> str:
        return (
            f"JT{self.seasonal}{self.industry}{self.state}{self.area}"
            f"{self.size_class}{self.element}{self.rate_level}"
        )


@dataclass(frozen=True)
class CpsSeriesId:
    series_code: str
    seasonal: str = "S"

    survey = "LN"

    def encode(self) -> str:
        return f"LN{self.seasonal}{self.series_code}"


@dataclass(frozen=True)
class LausSeriesId:
    area: str
    measure: str
    seasonal: str = "S"

    survey = "LA"

    def encode(self) -> str:
        return f"LA{self.seasonal}{self.area}{self.measure}"


@dataclass(frozen=True)
class CpiSeriesId:
    item: str
    area: str = "0000"
    periodicity: str = "R"
    seasonal: str = "S"

    survey = "CU"

    def encode(self) -> str:
        return f"CU{self.seasonal}{self.periodicity}{self.area}{self.item}"


@dataclass(frozen=True)
class Unparseable:
    raw: str
    reason: str


ParsedSeriesId = Union[OesSeriesId, JoltsSeriesId, CpsSeriesId, LausSeriesId, CpiSeriesId]


# ---------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------
def encode_oes(
    occupation: str,
    measure: str,
    geography: Union[Geography, str, None] = None,
    industry: Optional[str] = None,
    *,
    resolver: Optional[AreaResolver] = None,
) -> str:
    """
    Build an OES series ID.

    Parameters
    ----------
    occupation:
        SOC code in any common spelling ("15-1252", "151252", "15-1252.00").
    measure:
        Two-digit OES data type code (see config.OES_MEASURES).
    geography:
        Geography or any string normalize_geography accepts. Defaults to national.
    industry:
        NAICS-based OES industry code. Defaults to cross-industry.
    """
    if measure not in OES_MEASURES:
        raise ValueError(f"Unknown OES measure code: {measure!r}")
    if not isinstance(geography, Geography):
        geography = normalize_geography(geography, resolver)
    return OesSeriesId(
        occupation=normalize_occupation(occupation),
        measure=measure,
        area_type=geography.scope,
        area=geography.code,
        industry=normalize_industry(industry),
    ).encode()


def build_jolts_id(
    element: str = "JO",
    rate_level: str = "L",
    industry: Optional[str] = None,
    seasonally_adjusted: bool = True,
) -> str:
    return JoltsSeriesId(
        element=element,
        rate_level=rate_level,
        industry=normalize_industry(industry),
        seasonal="S" if seasonally_adjusted else "U",
    ).encode()


def build_lns_id(series_code: str, seasonally_adjusted: bool = True) -> str:
    if len(series_code) != 8 or not series_code.isalnum():
        raise ValueError(f"CPS series codes are 8 characters: {series_code!r}")
    return CpsSeriesId(series_code=series_code,
                       seasonal="S" if seasonally_adjusted else "U").encode()


def build_laus_id(fips: str, measure: str = "03", seasonally_adjusted: bool = True) -> str:
    # State areas: "ST" + FIPS + 11 zeros
    area = f"ST{fips.zfill(2)}{'0' * 11}"
    return LausSeriesId(area=area, measure=measure,
                        seasonal="S" if seasonally_adjusted else "U").encode()


def build_cpi_id(item: str = "SA0", area: str = "0000", seasonally_adjusted: bool = True) -> str:
    return CpiSeriesId(item=item, area=area,
                       seasonal="S" if seasonally_adjusted else "U").encode()


# ---------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------
def _decode_oes(sid: str) -> Union[OesSeriesId, Unparseable]:
    if len(sid) != 25:
        return Unparseable(sid, f"OES series IDs are 25 characters, got {len(sid)}")
    parsed = OesSeriesId(
        seasonal=sid[2],
        area_type=sid[3],
        area=sid[4:11],
        industry=sid[11:17],
        occupation=sid[17:23],
        measure=sid[23:25],
    )
    if parsed.area_type not in AREA_SCOPES:
        return Unparseable(sid, f"Unknown OES area type {parsed.area_type!r}")
    if not (parsed.area + parsed.occupation + parsed.measure).isdigit():
        return Unparseable(sid, "OES area, occupation and measure must be numeric")
    if not parsed.industry.isalnum():
        return Unparseable(sid, "OES industry code must be alphanumeric")
    return parsed


def _decode_jolts(sid: str) -> Union[JoltsSeriesId, Unparseable]:
    if len(sid) != 21:
        return Unparseable(sid, f"JOLTS series IDs are 21 characters, got {len(sid)}")
    parsed = JoltsSeriesId(
        seasonal=sid[2],
        industry=sid[3:9],
        state=sid[9:11],
        area=sid[11:16],
        size_class=sid[16:18],
        element=sid[18:20],
        rate_level=sid[20],
    )
    if parsed.rate_level not in ("L", "R"):
        return Unparseable(sid, f"JOLTS rate/level flag must be L or R, got {parsed.rate_level!r}")
    if not parsed.element.isalpha():
        return Unparseable(sid, "JOLTS data element must be alphabetic")
    return parsed


def _decode_cps(sid: str) -> Union[CpsSeriesId, Unparseable]:
    if len(sid) != 11:
        return Unparseable(sid, f"CPS series IDs are 11 characters, got {len(sid)}")
    if not sid[3:].isalnum():
        return Unparseable(sid, "CPS series code must be alphanumeric")
    return CpsSeriesId(seasonal=sid[2], series_code=sid[3:])


def _decode_laus(sid: str) -> Union[LausSeriesId, Unparseable]:
    if len(sid) != 20:
        return Unparseable(sid, f"LAUS series IDs are 20 characters, got {len(sid)}")
    if not sid[18:].isdigit():
        return Unparseable(sid, "LAUS measure code must be numeric")
    return LausSeriesId(seasonal=sid[2], area=sid[3:18], measure=sid[18:20])


def _decode_cpi(sid: str) -> Union[CpiSeriesId, Unparseable]:
    if len(sid) < 9:
        return Unparseable(sid, "CPI series IDs need an item code after the area")
    return CpiSeriesId(seasonal=sid[2], periodicity=sid[3], area=sid[4:8], item=sid[8:])


_DECODERS = {
    "OE": _decode_oes,
    "JT": _decode_jolts,
    "LN": _decode_cps,
    "LA": _decode_laus,
    "CU": _decode_cpi,
}


def decode(series_id: object) -> Union[ParsedSeriesId, Unparseable]:
    """Parse a series ID into its components, or Unparseable. Never raises."""
    if not isinstance(series_id, str) or len(series_id) < 3:
        return Unparseable(str(series_id), "Series ID is too short")
    if series_id != series_id.strip() or not series_id.isalnum():
        return Unparseable(series_id, "Series IDs are alphanumeric with no whitespace")

    decoder = _DECODERS.get(series_id[:2])
    if decoder is None:
        return Unparseable(series_id, f"Unknown survey prefix {series_id[:2]!r}")
    if series_id[2] not in ("S", "U"):
        return Unparseable(series_id, f"Seasonal flag must be S or U, got {series_id[2]!r}")
    return decoder(series_id)
