"""Unit tests for the pure analytics helpers."""

import numpy as np
import pytest

from labordata import analytics
from labordata.models import Percentiles, WageLadder

LADDER = Percentiles(p10=60_000, p25=80_000, p50=100_000, p75=130_000, p90=160_000)


@pytest.mark.unit
@pytest.mark.parametrize(
    "value, expected",
    [(60_000, 10), (80_000, 25), (100_000, 50), (130_000, 75), (160_000, 90)],
)
def test_percentile_rank_hits_published_points(value, expected):
    assert analytics.percentile_rank(value, LADDER) == pytest.approx(expected)


@pytest.mark.unit
def test_percentile_rank_interpolates_within_bracket():
    assert analytics.percentile_rank(90_000, LADDER) == pytest.approx(37.5)


@pytest.mark.unit
def test_percentile_rank_is_monotonic():
    ranks = [analytics.percentile_rank(v, LADDER) for v in np.linspace(0, 250_000, 200)]
    assert all(a <= b for a, b in zip(ranks, ranks[1:]))
    assert min(ranks) >= 1
    assert max(ranks) <= 99


@pytest.mark.unit
def test_percentile_rank_below_p10():
    assert analytics.percentile_rank(30_000, LADDER) == pytest.approx(5)
    assert analytics.percentile_rank(0, LADDER) == 1


@pytest.mark.unit
def test_percentile_rank_above_p90():
    # 10% above p90 with the default 0.2 width is halfway to 100
    assert analytics.percentile_rank(176_000, LADDER) == pytest.approx(95)
    assert analytics.percentile_rank(1_000_000, LADDER) == 99


@pytest.mark.unit
def test_percentile_rank_width_is_tunable():
    assert analytics.percentile_rank(168_000, LADDER, width=0.1) == pytest.approx(95)


@pytest.mark.unit
def test_percentile_rank_rejects_incomplete_ladder():
    with pytest.raises(ValueError):
        analytics.percentile_rank(50_000, Percentiles(None, 80_000, 100_000, 130_000, 160_000))


@pytest.mark.unit
def test_percentile_rank_rejects_out_of_order_ladder():
    with pytest.raises(ValueError):
        analytics.percentile_rank(50_000, Percentiles(90_000, 80_000, 100_000, 130_000, 160_000))


@pytest.mark.unit
def test_gauge_position():
    assert analytics.gauge_position(60_000, LADDER) == 0
    assert analytics.gauge_position(100_000, LADDER) == pytest.approx(50)
    assert analytics.gauge_position(145_000, LADDER) == pytest.approx(87.5)
    assert analytics.gauge_position(160_000, LADDER) == 100
    assert analytics.gauge_position(10_000, LADDER) == 0
    assert analytics.gauge_position(500_000, LADDER) == 100


@pytest.mark.unit
@pytest.mark.parametrize(
    "rank, label",
    [(10, "Below Market"), (25, "Competitive"), (49.9, "Competitive"),
     (50, "Above Average"), (75, "Excellent"), (99, "Excellent")],
)
def test_offer_assessment(rank, label):
    assert analytics.offer_assessment(rank) == label


@pytest.mark.unit
@pytest.mark.parametrize(
    "rate, openings, expected",
    [
        (4.0, 8_000, "hot"),
        (4.5, 8_000, "warm"),
        (4.0, 7_000, "warm"),
        (5.0, 5_000, "warm"),
        (6.5, 8_000, "cool"),
        (5.0, 3_500, "cool"),
    ],
)
def test_market_temperature(rate, openings, expected):
    assert analytics.market_temperature(rate, openings) == expected


@pytest.mark.unit
def test_snapshot_highlights():
    hot = analytics.snapshot_highlights("hot", inflation=3.4, quits_rate=2.7)
    assert "Low unemployment indicates tight labor market" in hot
    assert "Inflation at 3.4% may impact real wages" in hot
    assert any("quit rate" in h for h in hot)

    warm = analytics.snapshot_highlights("warm", inflation=2.0, quits_rate=2.0)
    assert warm == ["Labor market conditions are balanced"]


@pytest.mark.unit
@pytest.mark.parametrize(
    "median, employment, score",
    [
        (130_000, 600_000, 75),
        (80_000, 200_000, 65),
        (100_000, 500_000, 65),
        (55_000, 50_000, 55),
        (40_000, 50_000, 50),
    ],
)
def test_score_outlook(median, employment, score):
    assert analytics.score_outlook(median, employment) == score


@pytest.mark.unit
@pytest.mark.parametrize(
    "score, band",
    [(100, "excellent"), (75, "excellent"), (74, "good"), (60, "good"), (59, "fair"),
     (40, "fair"), (39, "limited"), (25, "limited"), (24, "declining"), (0, "declining")],
)
def test_outlook_band(score, band):
    assert analytics.outlook_band(score) == band


@pytest.mark.unit
def test_salary_levels_fall_back_to_median():
    levels = analytics.salary_levels(WageLadder(median=100_000), 100_000)
    assert levels.entry_level == pytest.approx(70_000)
    assert levels.mid_career == 100_000
    assert levels.experienced == pytest.approx(140_000)
    assert levels.comparison == "above_average"


@pytest.mark.unit
def test_salary_levels_prefer_published_percentiles():
    ladder = WageLadder(percentile10=50_000, percentile25=60_000, median=75_000,
                        percentile75=90_000, percentile90=110_000)
    levels = analytics.salary_levels(ladder, 75_000)
    assert (levels.entry_level, levels.experienced) == (50_000, 110_000)


@pytest.mark.unit
@pytest.mark.parametrize(
    "median, expected",
    [(61_000, "above_average"), (60_000, "average"), (40_800, "average"), (40_000, "below_average")],
)
def test_salary_comparison(median, expected):
    assert analytics.salary_comparison(median) == expected


@pytest.mark.unit
def test_job_availability():
    availability = analytics.job_availability(300_000, score=70)
    assert availability.current_openings == "high"
    assert availability.annual_openings == 15_000
    assert availability.competition == "moderate"

    assert analytics.job_availability(60_000, score=60).current_openings == "moderate"
    assert analytics.job_availability(10_000, score=60).competition == "high"


@pytest.mark.unit
def test_outlook_factors():
    wage, employment = analytics.outlook_factors(65_000, 90_000)
    assert wage.impact == "positive"
    assert employment.impact == "neutral"


@pytest.mark.unit
def test_wage_difference():
    assert analytics.wage_difference(110_000, 100_000) == (10_000, pytest.approx(10.0))
    assert analytics.wage_difference(80_000, 100_000) == (-20_000, pytest.approx(-20.0))
    assert analytics.wage_difference(50_000, 0) == (50_000, 0.0)
