"""
labordata/areas.py

Area Code Resolver: turns human geography into BLS area codes.

Area codes are scope-prefixed, 8 characters long:
- "N0000000"  national
- "S0600000"  state (S + 2-digit FIPS + 00000)
- "M0035620"  metropolitan area (M + CBSA code left-padded to 7 digits)

The tables below cover the 50 states, DC and territories, plus the largest
metropolitan statistical areas. The codec only needs the two resolve_*
functions, so any object with the same methods can be swapped in.
"""

from __future__ import annotations

from typing import Optional, Protocol

NATIONAL_AREA = "N0000000"

# Two-letter postal abbreviation -> (FIPS code, name)
STATE_FIPS: dict[str, tuple[str, str]] = {
    "AL": ("01", "Alabama"),
    "AK": ("02", "Alaska"),
    "AZ": ("04", "Arizona"),
    "AR": ("05", "Arkansas"),
    "CA": ("06", "California"),
    "CO": ("08", "Colorado"),
    "CT": ("09", "Connecticut"),
    "DE": ("10", "Delaware"),
    "DC": ("11", "District of Columbia"),
    "FL": ("12", "Florida"),
    "GA": ("13", "Georgia"),
    "HI": ("15", "Hawaii"),
    "ID": ("16", "Idaho"),
    "IL": ("17", "Illinois"),
    "IN": ("18", "Indiana"),
    "IA": ("19", "Iowa"),
    "KS": ("20", "Kansas"),
    "KY": ("21", "Kentucky"),
    "LA": ("22", "Louisiana"),
    "ME": ("23", "Maine"),
    "MD": ("24", "Maryland"),
    "MA": ("25", "Massachusetts"),
    "MI": ("26", "Michigan"),
    "MN": ("27", "Minnesota"),
    "MS": ("28", "Mississippi"),
    "MO": ("29", "Missouri"),
    "MT": ("30", "Montana"),
    "NE": ("31", "Nebraska"),
    "NV": ("32", "Nevada"),
    "NH": ("33", "New Hampshire"),
    "NJ": ("34", "New Jersey"),
    "NM": ("35", "New Mexico"),
    "NY": ("36", "New York"),
    "NC": ("37", "North Carolina"),
    "ND": ("38", "North Dakota"),
    "OH": ("39", "Ohio"),
    "OK": ("40", "Oklahoma"),
    "OR": ("41", "Oregon"),
    "PA": ("42", "Pennsylvania"),
    "RI": ("44", "Rhode Island"),
    "SC": ("45", "South Carolina"),
    "SD": ("46", "South Dakota"),
    "TN": ("47", "Tennessee"),
    "TX": ("48", "Texas"),
    "UT": ("49", "Utah"),
    "VT": ("50", "Vermont"),
    "VA": ("51", "Virginia"),
    "WA": ("53", "Washington"),
    "WV": ("54", "West Virginia"),
    "WI": ("55", "Wisconsin"),
    "WY": ("56", "Wyoming"),
    "AS": ("60", "American Samoa"),
    "GU": ("66", "Guam"),
    "MP": ("69", "Northern Mariana Islands"),
    "PR": ("72", "Puerto Rico"),
    "VI": ("78", "Virgin Islands"),
}

# Metro key -> (CBSA code, name)
MAJOR_MSAS: dict[str, tuple[str, str]] = {
    "NEW_YORK": ("35620", "New York-Newark-Jersey City, NY-NJ-PA"),
    "LOS_ANGELES": ("31080", "Los Angeles-Long Beach-Anaheim, CA"),
    "CHICAGO": ("16980", "Chicago-Naperville-Elgin, IL-IN-WI"),
    "DALLAS": ("19100", "Dallas-Fort Worth-Arlington, TX"),
    "HOUSTON": ("26420", "Houston-The Woodlands-Sugar Land, TX"),
    "WASHINGTON_DC": ("47900", "Washington-Arlington-Alexandria, DC-VA-MD-WV"),
    "PHILADELPHIA": ("37980", "Philadelphia-Camden-Wilmington, PA-NJ-DE-MD"),
    "MIAMI": ("33100", "Miami-Fort Lauderdale-Pompano Beach, FL"),
    "ATLANTA": ("12060", "Atlanta-Sandy Springs-Alpharetta, GA"),
    "PHOENIX": ("38060", "Phoenix-Mesa-Chandler, AZ"),
    "BOSTON": ("14460", "Boston-Cambridge-Newton, MA-NH"),
    "SAN_FRANCISCO": ("41860", "San Francisco-Oakland-Berkeley, CA"),
    "RIVERSIDE": ("40140", "Riverside-San Bernardino-Ontario, CA"),
    "DETROIT": ("19820", "Detroit-Warren-Dearborn, MI"),
    "SEATTLE": ("42660", "Seattle-Tacoma-Bellevue, WA"),
    "MINNEAPOLIS": ("33460", "Minneapolis-St. Paul-Bloomington, MN-WI"),
    "SAN_DIEGO": ("41740", "San Diego-Chula Vista-Carlsbad, CA"),
    "TAMPA": ("45300", "Tampa-St. Petersburg-Clearwater, FL"),
    "DENVER": ("19740", "Denver-Aurora-Lakewood, CO"),
    "ST_LOUIS": ("41180", "St. Louis, MO-IL"),
    "BALTIMORE": ("12580", "Baltimore-Columbia-Towson, MD"),
    "ORLANDO": ("36740", "Orlando-Kissimmee-Sanford, FL"),
    "CHARLOTTE": ("16740", "Charlotte-Concord-Gastonia, NC-SC"),
    "SAN_ANTONIO": ("41700", "San Antonio-New Braunfels, TX"),
    "PORTLAND": ("38900", "Portland-Vancouver-Hillsboro, OR-WA"),
    "SACRAMENTO": ("40900", "Sacramento-Roseville-Folsom, CA"),
    "PITTSBURGH": ("38300", "Pittsburgh, PA"),
    "LAS_VEGAS": ("29820", "Las Vegas-Henderson-Paradise, NV"),
    "AUSTIN": ("12420", "Austin-Round Rock-Georgetown, TX"),
    "CINCINNATI": ("17140", "Cincinnati, OH-KY-IN"),
}

_FIPS_TO_NAME = {fips: name for fips, name in STATE_FIPS.values()}
_CBSA_TO_NAME = {code: name for code, name in MAJOR_MSAS.values()}


class AreaResolver(Protocol):
    def resolve_state(self, abbrev: str) -> str: ...

    def resolve_metro(self, key: str) -> Optional[str]: ...


def state_area_code(fips: str) -> str:
    return f"S{fips.zfill(2)}00000"


def metro_area_code(cbsa: str) -> str:
    return f"M{cbsa.zfill(7)}"


class StaticAreaResolver:
    """Resolver backed by the STATE_FIPS and MAJOR_MSAS tables."""

    def resolve_state(self, abbrev: str) -> str:
        """Return the state area code; raises KeyError for unknown abbreviations."""
        try:
            fips, _ = STATE_FIPS[abbrev.strip().upper()]
        except KeyError:
            raise KeyError(f"Unknown state abbreviation: {abbrev}") from None
        return state_area_code(fips)

    def resolve_metro(self, key: str) -> Optional[str]:
        msa = MAJOR_MSAS.get(key.strip().upper().replace(" ", "_"))
        if msa is None:
            return None
        return metro_area_code(msa[0])


def state_name(abbrev: str) -> Optional[str]:
    entry = STATE_FIPS.get(abbrev.strip().upper())
    return entry[1] if entry else None


def area_name(area_code: str) -> str:
    """Human-readable name for a scope-prefixed area code (falls back to the code)."""
    if not area_code or area_code.startswith("N"):
        return "National"
    if area_code.startswith("S"):
        return _FIPS_TO_NAME.get(area_code[1:3], area_code)
    if area_code.startswith("M"):
        return _CBSA_TO_NAME.get(area_code[1:].lstrip("0").zfill(5), area_code)
    return area_code
