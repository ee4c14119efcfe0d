"""
labordata/config.py

This file is the "single source of truth" for:

1) Where we send BLS requests and how large a request may be
2) How long each kind of cached result stays fresh
3) The OES measure codes we combine into wage and employment records
4) The national series we track for exports (SERIES_META keys)

Important vocabulary:
- "OEU..." series are Occupational Employment and Wage Statistics (OEWS/OES)
- "JTS..." series are Job Openings and Labor Turnover (JOLTS)
- "LNS..." series are from the Household Survey (CPS)
- "LAS..." series are Local Area Unemployment Statistics (LAUS)
- "CUS..." series are the Consumer Price Index (CPI-U)

Series IDs are *exactly* as defined by BLS.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# Public API endpoints.
# - v2 supports higher limits with an API key
# - v1 is older but can be used without registration
BLS_ENDPOINTS = {
    "v2": "https://api.bls.gov/publicAPI/v2/timeseries/data/",
    "v1": "https://api.bls.gov/publicAPI/v1/timeseries/data/",
}

# BLS rejects requests with more than 50 series (v2, registered).
MAX_SERIES_PER_REQUEST = 50

# Default request window: five years back through the current year.
DEFAULT_YEARS_BACK = 5

# ---------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------
CACHE_PREFIX = "bls_cache"

# Bump when the shape of any cached record changes.
CACHE_VERSION = 1

HOUR_S = 60 * 60
DAY_S = 24 * HOUR_S

# TTL per data domain (seconds). OES estimates are published once a year, the
# monthly surveys (JOLTS, CPS, CPI) move much faster.
CACHE_TTL_S: dict[str, int] = {
    "oes_wages": 7 * DAY_S,
    "oes_employment": 7 * DAY_S,
    "market_data": 7 * DAY_S,
    "regional_compare": 7 * DAY_S,
    "career_outlook": 7 * DAY_S,
    "jolts_openings": 12 * HOUR_S,
    "lns_unemployment": 12 * HOUR_S,
    "lau_unemployment": 12 * HOUR_S,
    "cpi_current": 12 * HOUR_S,
    "snapshot": 12 * HOUR_S,
}

# ---------------------------------------------------------------------
# Geography / industry defaults
# ---------------------------------------------------------------------
NATIONAL_AREA_CODE = "0000000"
CROSS_INDUSTRY_CODE = "000000"

# ---------------------------------------------------------------------
# OES measure (data type) codes
# ---------------------------------------------------------------------
# Fields:
# - name:   Human-readable description
# - ladder: "annual" / "hourly" for wage measures, None otherwise
# - field:  WageLadder / EmploymentData attribute the value lands in
OES_MEASURES: dict[str, dict[str, Optional[str]]] = {
    "01": {"name": "Employment", "ladder": None, "field": "employment"},
    "02": {"name": "Employment percent relative standard error", "ladder": None, "field": None},
    "03": {"name": "Hourly mean wage", "ladder": "hourly", "field": "mean"},
    "04": {"name": "Annual mean wage", "ladder": "annual", "field": "mean"},
    "05": {"name": "Wage percent relative standard error", "ladder": None, "field": None},
    "06": {"name": "Hourly 10th percentile wage", "ladder": "hourly", "field": "percentile10"},
    "07": {"name": "Hourly 25th percentile wage", "ladder": "hourly", "field": "percentile25"},
    "08": {"name": "Hourly median wage", "ladder": "hourly", "field": "median"},
    "09": {"name": "Hourly 75th percentile wage", "ladder": "hourly", "field": "percentile75"},
    "10": {"name": "Hourly 90th percentile wage", "ladder": "hourly", "field": "percentile90"},
    "11": {"name": "Annual 10th percentile wage", "ladder": "annual", "field": "percentile10"},
    "12": {"name": "Annual 25th percentile wage", "ladder": "annual", "field": "percentile25"},
    "13": {"name": "Annual median wage", "ladder": "annual", "field": "median"},
    "14": {"name": "Annual 75th percentile wage", "ladder": "annual", "field": "percentile75"},
    "15": {"name": "Annual 90th percentile wage", "ladder": "annual", "field": "percentile90"},
    "16": {"name": "Employment per 1,000 jobs", "ladder": None, "field": "employment_per_1000"},
    "17": {"name": "Location quotient", "ladder": None, "field": "location_quotient"},
}

WAGE_MEASURES = [code for code, meta in OES_MEASURES.items() if meta["ladder"]]
EMPLOYMENT_MEASURES = ["01", "16", "17"]

# JOLTS data elements fetched for the openings record, as (element, rate/level).
JOLTS_ELEMENTS = [
    ("JO", "L"), ("JO", "R"),
    ("HI", "L"), ("HI", "R"),
    ("QU", "L"), ("QU", "R"),
    ("TS", "L"), ("TS", "R"),
    ("LD", "L"), ("LD", "R"),
]

# LAUS measure codes.
LAUS_MEASURES = {
    "03": "unemployment_rate",
    "04": "unemployed",
    "05": "employed",
    "06": "labor_force",
}

# SOC major groups (first two digits of the SOC code).
SOC_MAJOR_GROUPS = {
    "11": "Management",
    "13": "Business and Financial Operations",
    "15": "Computer and Mathematical",
    "17": "Architecture and Engineering",
    "19": "Life, Physical, and Social Science",
    "21": "Community and Social Service",
    "23": "Legal",
    "25": "Educational Instruction and Library",
    "27": "Arts, Design, Entertainment, Sports, and Media",
    "29": "Healthcare Practitioners and Technical",
    "31": "Healthcare Support",
    "33": "Protective Service",
    "35": "Food Preparation and Serving Related",
    "37": "Building and Grounds Cleaning and Maintenance",
    "39": "Personal Care and Service",
    "41": "Sales and Related",
    "43": "Office and Administrative Support",
    "45": "Farming, Fishing, and Forestry",
    "47": "Construction and Extraction",
    "49": "Installation, Maintenance, and Repair",
    "51": "Production",
    "53": "Transportation and Material Moving",
}

# Approximate national median wage across all occupations (career outlook).
ALL_OCCUPATIONS_MEDIAN_WAGE = 48_000

# Shown with RATE_LIMITED errors. A hint for people, not a backoff contract.
RATE_LIMIT_RETRY_HINT = "BLS API rate limit exceeded. Please try again in a few minutes."

# BLS error message fragments mapped to something a person can act on.
BLS_ERROR_MESSAGES = {
    "REQUEST_FAILED_INVALID_SERIES_ID": "One or more series IDs are invalid.",
    "REQUEST_FAILED_INVALID_YEAR": "The year range is invalid for the requested series.",
    "REQUEST_FAILED_TOO_MANY_SERIES": "Too many series requested. Maximum is 50 series per request.",
    "REQUEST_FAILED_TOO_MANY_YEARS": "The year range exceeds the maximum allowed (20 years).",
    "REQUEST_FAILED_REGISTRATION_KEY_INVALID": "API authentication failed. Please try again later.",
    "REQUEST_FAILED_DAILY_THRESHOLD_EXCEEDED": "Daily request limit reached. Please try again tomorrow.",
    "REQUEST_NOT_PROCESSED": "The BLS API could not process this request. Please try again.",
}

# ---------------------------------------------------------------------
# Tracked national series (CLI "series" export)
# ---------------------------------------------------------------------
# Fields:
# - name:   What users see in exports
# - unit:   Human-readable unit label
# - type:   "level" for counts/amounts, "rate" for percent rates
# - source: A short tag describing the BLS program
SERIES_META: dict[str, dict[str, str]] = {
    "LNS14000000": {
        "name": "Unemployment rate (U-3)",
        "unit": "Percent",
        "type": "rate",
        "source": "CPS",
    },
    "LNS11300000": {
        "name": "Labor force participation rate",
        "unit": "Percent",
        "type": "rate",
        "source": "CPS",
    },
    "LNS12000000": {
        "name": "Employed persons",
        "unit": "Thousands of persons",
        "type": "level",
        "source": "CPS",
    },
    "JTS000000000000000JOL": {
        "name": "Job openings: Total nonfarm",
        "unit": "Thousands",
        "type": "level",
        "source": "JOLTS",
    },
    "JTS000000000000000QUR": {
        "name": "Quits rate: Total nonfarm",
        "unit": "Percent",
        "type": "rate",
        "source": "JOLTS",
    },
    "CUSR0000SA0": {
        "name": "CPI-U: All items",
        "unit": "Index 1982-84=100",
        "type": "level",
        "source": "CPI",
    },
}


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str]
    endpoint: str
    via_proxy: bool
    cache_path: Path
    timeout_s: float


def load_settings() -> Settings:
    """
    Read runtime settings from environment variables.

    - BLS_API_KEY (optional): v2 registration key, only sent directly to BLS
    - LABORDATA_ENDPOINT (optional): proxy URL fronting the BLS API
    - LABORDATA_API_VERSION: "v2" (default) or "v1" when no proxy is set
    - LABORDATA_CACHE_PATH: JSON file backing the local cache
    - LABORDATA_TIMEOUT_S: HTTP timeout handed to requests
    """
    proxy = os.getenv("LABORDATA_ENDPOINT")
    api_version = os.getenv("LABORDATA_API_VERSION", "v2")
    if api_version not in BLS_ENDPOINTS:
        raise ValueError(f"LABORDATA_API_VERSION must be one of {list(BLS_ENDPOINTS)}")

    default_cache = Path.home() / ".cache" / "labordata" / "bls_cache.json"
    return Settings(
        api_key=os.getenv("BLS_API_KEY") or None,
        endpoint=proxy or BLS_ENDPOINTS[api_version],
        via_proxy=bool(proxy),
        cache_path=Path(os.getenv("LABORDATA_CACHE_PATH", str(default_cache))),
        timeout_s=float(os.getenv("LABORDATA_TIMEOUT_S", "30")),
    )
