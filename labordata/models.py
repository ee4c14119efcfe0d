"""
labordata/models.py

Typed records produced by the fetcher and the composite assemblers.

Every record is a frozen dataclass. Records round-trip through plain JSON
(to_dict / from_dict) so the cache can store them; field names in the JSON
form are the attribute names.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, is_dataclass
from datetime import datetime
from typing import Any, NamedTuple, Optional, Union, get_args, get_origin, get_type_hints

from labordata.config import DEFAULT_YEARS_BACK


def _build(tp: Any, value: Any) -> Any:
    if value is None:
        return None
    origin = get_origin(tp)
    if origin is Union:
        inner = [arg for arg in get_args(tp) if arg is not type(None)]
        return _build(inner[0], value)
    if origin is list:
        (item_type,) = get_args(tp)
        return [_build(item_type, item) for item in value]
    if is_dataclass(tp):
        return tp.from_dict(value)
    return value


class Record:
    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        hints = get_type_hints(cls)
        kwargs = {
            f.name: _build(hints[f.name], data[f.name])
            for f in fields(cls)
            if f.name in data
        }
        return cls(**kwargs)


# ---------------------------------------------------------------------
# Raw series
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class YearRange(Record):
    start: int
    end: int

    @classmethod
    def default(cls) -> "YearRange":
        """DEFAULT_YEARS_BACK years back through the current year."""
        this_year = datetime.now().year
        return cls(start=this_year - DEFAULT_YEARS_BACK, end=this_year)


@dataclass(frozen=True)
class DataPoint(Record):
    year: int
    period: str          # "M01".."M12", "M13" (annual average), "A01", ...
    period_name: str
    value: Optional[float]
    footnotes: list[str] = field(default_factory=list)
    latest: bool = False
    pct_changes: dict[str, float] = field(default_factory=dict)

    @property
    def sort_key(self) -> tuple[int, str]:
        return (self.year, self.period)

    @property
    def label(self) -> str:
        """Period label: 2024-03 for monthly periods, 2024 otherwise."""
        if self.period.startswith("M") and self.period[1:].isdigit() and self.period != "M13":
            return f"{self.year}-{self.period[1:].zfill(2)}"
        return str(self.year)

    @property
    def month(self) -> Optional[int]:
        if self.period.startswith("M") and self.period[1:].isdigit():
            month = int(self.period[1:])
            return month if 1 <= month <= 12 else None
        return None


@dataclass(frozen=True)
class SeriesRecord(Record):
    series_id: str
    points: list[DataPoint]
    catalog: dict[str, Any] = field(default_factory=dict)

    def sorted_points(self) -> list[DataPoint]:
        """Newest first: year descending, then period string descending."""
        return sorted(self.points, key=lambda p: p.sort_key, reverse=True)

    def most_recent(self) -> Optional[DataPoint]:
        ordered = self.sorted_points()
        return ordered[0] if ordered else None

    def latest_value(self) -> Optional[float]:
        point = self.most_recent()
        return point.value if point else None

    def month_over_month(self) -> float:
        """Difference of the two most recent points (0 when either is missing)."""
        ordered = self.sorted_points()
        if len(ordered) < 2 or ordered[0].value is None or ordered[1].value is None:
            return 0.0
        return ordered[0].value - ordered[1].value

    @property
    def title(self) -> Optional[str]:
        return self.catalog.get("occupation_title") or self.catalog.get("series_title")


# ---------------------------------------------------------------------
# Wages / employment (OES)
# ---------------------------------------------------------------------
class Percentiles(NamedTuple):
    p10: float
    p25: float
    p50: float
    p75: float
    p90: float


@dataclass(frozen=True)
class WageLadder(Record):
    percentile10: Optional[float] = None
    percentile25: Optional[float] = None
    median: Optional[float] = None
    percentile75: Optional[float] = None
    percentile90: Optional[float] = None
    mean: Optional[float] = None

    def percentiles(self) -> Optional[Percentiles]:
        """The five-point ladder, or None when any percentile is suppressed."""
        values = (self.percentile10, self.percentile25, self.median,
                  self.percentile75, self.percentile90)
        if any(v is None for v in values):
            return None
        return Percentiles(*values)

    def is_monotonic(self) -> bool:
        """True when the present percentiles never decrease."""
        present = [v for v in (self.percentile10, self.percentile25, self.median,
                               self.percentile75, self.percentile90) if v is not None]
        return all(a <= b for a, b in zip(present, present[1:]))


@dataclass(frozen=True)
class WageDistribution(Record):
    soc_code: str
    occupation_title: str
    area_code: str
    area_name: str
    period: str
    annual: WageLadder
    hourly: WageLadder


@dataclass(frozen=True)
class EmploymentData(Record):
    soc_code: str
    occupation_title: str
    area_code: str
    area_name: str
    period: str
    employment: Optional[float] = None
    employment_per_1000: Optional[float] = None
    location_quotient: Optional[float] = None


@dataclass(frozen=True)
class OccupationMarketData(Record):
    soc_code: str
    occupation_title: str
    occupation_group: str
    wages: WageDistribution
    employment: EmploymentData
    data_as_of: str


# ---------------------------------------------------------------------
# Monthly surveys
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class JoltsData(Record):
    period: str
    year: int
    month: Optional[int]
    industry_code: str
    industry_name: str
    job_openings: Optional[float] = None
    job_openings_rate: Optional[float] = None
    hires: Optional[float] = None
    hires_rate: Optional[float] = None
    quits: Optional[float] = None
    quits_rate: Optional[float] = None
    total_separations: Optional[float] = None
    total_separations_rate: Optional[float] = None
    layoffs: Optional[float] = None
    layoffs_rate: Optional[float] = None
    seasonally_adjusted: bool = True


@dataclass(frozen=True)
class UnemploymentData(Record):
    area_code: str
    area_name: str
    geographic_level: str   # "national" or "state"
    period: str
    year: int
    month: Optional[int]
    unemployment_rate: float = 0.0
    labor_force: float = 0.0
    employed: float = 0.0
    unemployed: float = 0.0
    participation_rate: Optional[float] = None
    employment_change: float = 0.0
    unemployment_rate_change: float = 0.0
    seasonally_adjusted: bool = True


@dataclass(frozen=True)
class CpiData(Record):
    period: str
    year: int
    month: Optional[int]
    item_code: str
    item_description: str
    area: str
    index_value: float
    percent_change_1m: Optional[float] = None
    percent_change_12m: Optional[float] = None
    seasonally_adjusted: bool = True


@dataclass(frozen=True)
class MarketSnapshot(Record):
    period: str
    unemployment_rate: float
    unemployment_rate_change: float
    total_employment: float
    employment_change: float
    labor_force_participation: float
    job_openings: float          # thousands
    quits_rate: float
    inflation: float             # year-over-year, percent
    temperature: str             # "hot" / "warm" / "cool"
    highlights: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------
# Regional comparison
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseRegion(Record):
    area_code: str
    area_name: str
    median_wage: float
    employment: float


@dataclass(frozen=True)
class RegionalWage(Record):
    area_code: str
    area_name: str
    median_wage: float
    wage_difference: float
    wage_difference_percent: float


@dataclass(frozen=True)
class RegionalComparison(Record):
    soc_code: str
    occupation_title: str
    base_region: BaseRegion
    comparisons: list[RegionalWage]
    national_median_wage: float


# ---------------------------------------------------------------------
# Career outlook
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class SalaryLevels(Record):
    entry_level: float
    mid_career: float
    experienced: float
    comparison: str   # "above_average" / "average" / "below_average"


@dataclass(frozen=True)
class JobAvailability(Record):
    current_openings: str   # "high" / "moderate" / "low"
    annual_openings: int
    competition: str        # "moderate" / "high"


@dataclass(frozen=True)
class OutlookFactor(Record):
    factor: str
    impact: str             # "positive" / "neutral"
    description: str


@dataclass(frozen=True)
class CareerOutlook(Record):
    soc_code: str
    occupation_title: str
    outlook: str
    outlook_score: int
    salary: SalaryLevels
    job_availability: JobAvailability
    factors: list[OutlookFactor]
    assessed_at: str
