"""
labordata/analytics.py

Pure derived numbers: nothing here touches the network or the cache.

- percentile_rank / gauge_position / offer_assessment: place a salary on a
  BLS wage ladder
- market_temperature / snapshot_highlights: classify the national snapshot
- score_outlook / outlook_band and friends: the career outlook heuristics
- wage_difference: regional deltas against a base region
"""

from __future__ import annotations

import numpy as np

from labordata.config import ALL_OCCUPATIONS_MEDIAN_WAGE
from labordata.models import (
    JobAvailability,
    OutlookFactor,
    Percentiles,
    SalaryLevels,
    WageLadder,
)

# Above p90 the rank is extrapolated across this fraction of p90.
DEFAULT_TOP_BAND_WIDTH = 0.2


def _ladder(percentiles: Percentiles) -> tuple[float, ...]:
    values = tuple(percentiles)
    if any(v is None for v in values):
        raise ValueError("Percentile ladder is incomplete")
    if any(b < a for a, b in zip(values, values[1:])):
        raise ValueError(f"Percentile ladder is not non-decreasing: {values}")
    if values[0] <= 0:
        raise ValueError("Percentile ladder must be positive")
    return values


def percentile_rank(
    value: float,
    percentiles: Percentiles,
    *,
    width: float = DEFAULT_TOP_BAND_WIDTH,
) -> float:
    """
    Estimate where value sits in the wage distribution (1..99).

    Linear between the published points (0 at $0, then 10/25/50/75/90 at
    p10..p90). Above p90 the rank keeps climbing by 10 points per
    width * p90 dollars and is capped at 99.
    """
    p10, p25, p50, p75, p90 = _ladder(percentiles)
    if value > p90:
        rank = 90 + 10 * (value - p90) / (p90 * width)
    else:
        rank = float(np.interp(value, [0, p10, p25, p50, p75, p90], [0, 10, 25, 50, 75, 90]))
    return float(min(99.0, max(1.0, rank)))


def gauge_position(value: float, percentiles: Percentiles) -> float:
    """Map p10..p90 onto 0..100 (p10=0, p25=25, p50=50, p75=75, p90=100)."""
    ladder = _ladder(percentiles)
    position = np.interp(value, ladder, [0, 25, 50, 75, 100])
    return float(np.clip(position, 0, 100))


def offer_assessment(rank: float) -> str:
    if rank < 25:
        return "Below Market"
    if rank < 50:
        return "Competitive"
    if rank < 75:
        return "Above Average"
    return "Excellent"


# ---------------------------------------------------------------------
# National snapshot
# ---------------------------------------------------------------------
def market_temperature(unemployment_rate: float, job_openings: float) -> str:
    """job_openings is in thousands, as JOLTS publishes it."""
    if unemployment_rate < 4.5 and job_openings > 7000:
        return "hot"
    if unemployment_rate > 6 or job_openings < 4000:
        return "cool"
    return "warm"


def snapshot_highlights(temperature: str, inflation: float, quits_rate: float) -> list[str]:
    highlights = []
    if temperature == "hot":
        highlights.append("Low unemployment indicates tight labor market")
        highlights.append("High job openings suggest employer demand exceeds supply")
    elif temperature == "cool":
        highlights.append("Elevated unemployment or few openings signal a slack labor market")
    else:
        highlights.append("Labor market conditions are balanced")

    if inflation > 3:
        highlights.append(f"Inflation at {inflation:.1f}% may impact real wages")
    if quits_rate > 2.5:
        highlights.append("High quit rate suggests worker confidence in job prospects")
    return highlights


# ---------------------------------------------------------------------
# Career outlook
# ---------------------------------------------------------------------
def score_outlook(median_wage: float, employment: float) -> int:
    score = 50
    if median_wage > 100_000:
        score += 15
    elif median_wage > 70_000:
        score += 10
    elif median_wage > 50_000:
        score += 5

    if employment > 500_000:
        score += 10
    elif employment > 100_000:
        score += 5

    return int(min(100, max(0, score)))


def outlook_band(score: float) -> str:
    if score >= 75:
        return "excellent"
    if score >= 60:
        return "good"
    if score >= 40:
        return "fair"
    if score >= 25:
        return "limited"
    return "declining"


def salary_comparison(median_wage: float, reference: float = ALL_OCCUPATIONS_MEDIAN_WAGE) -> str:
    if median_wage > reference * 1.25:
        return "above_average"
    if median_wage < reference * 0.85:
        return "below_average"
    return "average"


def salary_levels(annual: WageLadder, median_wage: float) -> SalaryLevels:
    """Entry/mid/experienced estimates; missing percentiles fall back to the median."""
    return SalaryLevels(
        entry_level=annual.percentile10 or annual.percentile25 or median_wage * 0.7,
        mid_career=annual.median or median_wage,
        experienced=annual.percentile90 or annual.percentile75 or median_wage * 1.4,
        comparison=salary_comparison(median_wage),
    )


def job_availability(employment: float, score: int) -> JobAvailability:
    if employment > 200_000:
        openings = "high"
    elif employment > 50_000:
        openings = "moderate"
    else:
        openings = "low"
    return JobAvailability(
        current_openings=openings,
        # roughly 5% of the employment base turns over each year
        annual_openings=int(round(employment * 0.05)),
        competition="moderate" if score > 60 else "high",
    )


def outlook_factors(median_wage: float, employment: float) -> list[OutlookFactor]:
    wage_factor = OutlookFactor(
        factor="Current wage levels",
        impact="positive" if median_wage > 60_000 else "neutral",
        description=(
            "Above-average compensation attracts qualified candidates"
            if median_wage > 60_000
            else "Wages are competitive with similar occupations"
        ),
    )
    employment_factor = OutlookFactor(
        factor="Employment base",
        impact="positive" if employment > 100_000 else "neutral",
        description=(
            "Large employment base offers many opportunities"
            if employment > 100_000
            else "Moderate employment levels provide steady opportunities"
        ),
    )
    return [wage_factor, employment_factor]


# ---------------------------------------------------------------------
# Regional comparison
# ---------------------------------------------------------------------
def wage_difference(median_wage: float, base_wage: float) -> tuple[float, float]:
    """(absolute, percent) difference from base_wage; percent is 0 when base is 0."""
    diff = median_wage - base_wage
    percent = (diff / base_wage) * 100 if base_wage else 0.0
    return diff, percent

