"""
labordata/service.py

Composite Assemblers: turn domain questions into series IDs, go through the
cache, fetch on a miss, and build typed records.

Every public coroutine returns a Result. The shape is always the same:

    ids -> cache.get -> fetcher.fetch_series (miss) -> parse -> cache.put -> Result

Failures from the fetcher pass through unchanged. The composites that fan out
(snapshot, regional comparison) turn failed sub-fetches into warnings and
only fail when nothing usable came back; such degraded results are not cached.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from labordata import analytics
from labordata.areas import AreaResolver, StaticAreaResolver, area_name, state_name
from labordata.bls_api import BlsFetcher, RequestsTransport
from labordata.cache import CacheDomain, CacheStore, JsonFileStorage, build_cache_key, ttl_for
from labordata.config import (
    EMPLOYMENT_MEASURES,
    JOLTS_ELEMENTS,
    LAUS_MEASURES,
    OES_MEASURES,
    SOC_MAJOR_GROUPS,
    WAGE_MEASURES,
    Settings,
)
from labordata.errors import ErrorCode, FetchError, Result
from labordata.models import (
    BaseRegion,
    CareerOutlook,
    CpiData,
    EmploymentData,
    JoltsData,
    MarketSnapshot,
    OccupationMarketData,
    RegionalComparison,
    RegionalWage,
    SeriesRecord,
    UnemploymentData,
    WageDistribution,
    WageLadder,
    YearRange,
)
from labordata.series_ids import (
    Geography,
    build_cpi_id,
    build_jolts_id,
    build_laus_id,
    encode_oes,
    format_soc,
    normalize_geography,
    normalize_industry,
    normalize_occupation,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# National CPS series (household survey). Counts are published in thousands.
CPS_UNEMPLOYMENT_RATE = "LNS14000000"
CPS_EMPLOYED = "LNS12000000"
CPS_UNEMPLOYED = "LNS13000000"
CPS_LABOR_FORCE = "LNS11000000"
CPS_PARTICIPATION_RATE = "LNS11300000"
CPS_SERIES = [
    CPS_UNEMPLOYMENT_RATE,
    CPS_EMPLOYED,
    CPS_UNEMPLOYED,
    CPS_LABOR_FORCE,
    CPS_PARTICIPATION_RATE,
]
CPS_THOUSANDS = 1000

JOLTS_FIELDS = {
    "JO": "job_openings",
    "HI": "hires",
    "QU": "quits",
    "TS": "total_separations",
    "LD": "layoffs",
}


async def settle(*coros: Awaitable[Result[Any]]) -> list[Result[Any]]:
    """
    Run sub-fetches concurrently and wait for all of them.

    A sub-fetch that raises is turned into an UNKNOWN_ERROR result for that
    sub-fetch only; the others are not cancelled.
    """
    outcomes = await asyncio.gather(*coros, return_exceptions=True)
    settled: list[Result[Any]] = []
    for outcome in outcomes:
        if isinstance(outcome, Exception):
            logger.warning("Sub-fetch raised %s: %s", type(outcome).__name__, outcome)
            settled.append(Result.fail(ErrorCode.UNKNOWN_ERROR, str(outcome) or type(outcome).__name__))
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            settled.append(outcome)
    return settled


def _latest_point_label(records: list[SeriesRecord]) -> tuple[str, int, Optional[int]]:
    """(label, year, month) of the newest point across records."""
    newest = None
    for record in records:
        point = record.most_recent()
        if point is not None and (newest is None or point.sort_key > newest.sort_key):
            newest = point
    if newest is None:
        return "", 0, None
    return newest.label, newest.year, newest.month


def _latest(records: dict[str, SeriesRecord], series_id: str) -> Optional[float]:
    record = records.get(series_id)
    return record.latest_value() if record else None


def _change(records: dict[str, SeriesRecord], series_id: str) -> float:
    record = records.get(series_id)
    return record.month_over_month() if record else 0.0


def _twelve_month_change(record: SeriesRecord) -> Optional[float]:
    """BLS-calculated 12-month change, or computed from the same period a year earlier."""
    latest = record.most_recent()
    if latest is None:
        return None
    if "12" in latest.pct_changes:
        return latest.pct_changes["12"]
    for point in record.points:
        if point.year == latest.year - 1 and point.period == latest.period:
            if point.value and latest.value is not None:
                return (latest.value - point.value) / point.value * 100
    return None


class LaborMarketService:
    """
    Public entry point for everything above the raw fetcher.

    Parameters
    ----------
    fetcher:
        A BlsFetcher (or anything with the same fetch_series coroutine).
    cache:
        CacheStore. Defaults to an in-memory store.
    resolver:
        Area Code Resolver used to normalise geography.
    year_range:
        Year window for every fetch. Defaults to YearRange.default() per call.
    """

    def __init__(
        self,
        fetcher: BlsFetcher,
        cache: Optional[CacheStore] = None,
        resolver: Optional[AreaResolver] = None,
        year_range: Optional[YearRange] = None,
    ):
        self.fetcher = fetcher
        self.cache = cache if cache is not None else CacheStore()
        self.resolver = resolver or StaticAreaResolver()
        self.year_range = year_range

    @classmethod
    def from_settings(cls, settings: Settings) -> "LaborMarketService":
        transport = RequestsTransport(timeout_s=settings.timeout_s)
        fetcher = BlsFetcher(
            transport,
            endpoint=settings.endpoint,
            api_key=settings.api_key,
            via_proxy=settings.via_proxy,
        )
        return cls(fetcher, CacheStore(JsonFileStorage(settings.cache_path)))

    # ------------------------------------------------------------------
    # plumbing
    # ------------------------------------------------------------------
    def _from_cache(self, key: str, load: Callable[[Any], T]) -> Optional[T]:
        payload = self.cache.get(key)
        if payload is None:
            return None
        try:
            return load(payload)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Cached payload for %s does not fit its record (%s); refetching", key, e)
            return None

    def _store(self, key: str, domain: str, record: Any) -> None:
        self.cache.put(key, record.to_dict(), ttl_for(domain))

    async def _fetch(self, series_ids: list[str]) -> Result[dict[str, SeriesRecord]]:
        result = await self.fetcher.fetch_series(series_ids, self.year_range)
        if not result.success:
            return result
        return Result.ok({r.series_id: r for r in result.data}, result.warnings)

    def _geography(self, geography: Union[Geography, str, None]) -> Geography:
        if isinstance(geography, Geography):
            return geography
        return normalize_geography(geography, self.resolver)

    # ------------------------------------------------------------------
    # OES
    # ------------------------------------------------------------------
    async def get_occupation_wages(
        self, occupation: str, geography: Union[Geography, str, None] = None
    ) -> Result[WageDistribution]:
        """Annual and hourly wage ladders for an occupation in one area."""
        try:
            soc = normalize_occupation(occupation)
        except ValueError as e:
            return Result.fail(ErrorCode.INVALID_SERIES_ID, str(e))
        geo = self._geography(geography)

        key = build_cache_key(CacheDomain.OES_WAGES, soc, geo.area_code)
        cached = self._from_cache(key, WageDistribution.from_dict)
        if cached is not None:
            return Result.ok(cached)

        ids = {encode_oes(soc, measure, geo): measure for measure in WAGE_MEASURES}
        fetched = await self._fetch(list(ids))
        if not fetched.success:
            return Result.from_error(fetched.error)
        records = fetched.data

        ladders: dict[str, dict[str, Optional[float]]] = {"annual": {}, "hourly": {}}
        for series_id, measure in ids.items():
            meta = OES_MEASURES[measure]
            ladders[meta["ladder"]][meta["field"]] = _latest(records, series_id)

        annual = WageLadder(**ladders["annual"])
        hourly = WageLadder(**ladders["hourly"])
        for name, ladder in (("annual", annual), ("hourly", hourly)):
            if not ladder.is_monotonic():
                logger.warning("%s wage ladder for %s in %s is out of order: %s",
                               name.capitalize(), soc, geo.area_code, ladder)

        period, _, _ = _latest_point_label(list(records.values()))
        wages = WageDistribution(
            soc_code=format_soc(soc),
            occupation_title=self._title(records.values(), soc),
            area_code=geo.area_code,
            area_name=area_name(geo.area_code),
            period=period,
            annual=annual,
            hourly=hourly,
        )
        self._store(key, CacheDomain.OES_WAGES, wages)
        return Result.ok(wages, fetched.warnings)

    async def get_occupation_employment(
        self, occupation: str, geography: Union[Geography, str, None] = None
    ) -> Result[EmploymentData]:
        try:
            soc = normalize_occupation(occupation)
        except ValueError as e:
            return Result.fail(ErrorCode.INVALID_SERIES_ID, str(e))
        geo = self._geography(geography)

        key = build_cache_key(CacheDomain.OES_EMPLOYMENT, soc, geo.area_code)
        cached = self._from_cache(key, EmploymentData.from_dict)
        if cached is not None:
            return Result.ok(cached)

        ids = {encode_oes(soc, measure, geo): measure for measure in EMPLOYMENT_MEASURES}
        fetched = await self._fetch(list(ids))
        if not fetched.success:
            return Result.from_error(fetched.error)
        records = fetched.data

        values = {OES_MEASURES[m]["field"]: _latest(records, sid) for sid, m in ids.items()}
        period, _, _ = _latest_point_label(list(records.values()))
        employment = EmploymentData(
            soc_code=format_soc(soc),
            occupation_title=self._title(records.values(), soc),
            area_code=geo.area_code,
            area_name=area_name(geo.area_code),
            period=period,
            **values,
        )
        self._store(key, CacheDomain.OES_EMPLOYMENT, employment)
        return Result.ok(employment, fetched.warnings)

    @staticmethod
    def _title(records, soc: str) -> str:
        for record in records:
            if record.title:
                return record.title
        return f"Occupation {format_soc(soc)}"

    # ------------------------------------------------------------------
    # Monthly surveys
    # ------------------------------------------------------------------
    async def get_job_openings(self, industry: Optional[str] = None) -> Result[JoltsData]:
        """JOLTS levels and rates for an industry (default: total nonfarm)."""
        try:
            industry_code = normalize_industry(industry)
        except ValueError as e:
            return Result.fail(ErrorCode.INVALID_SERIES_ID, str(e))

        key = build_cache_key(CacheDomain.JOLTS_OPENINGS, industry_code)
        cached = self._from_cache(key, JoltsData.from_dict)
        if cached is not None:
            return Result.ok(cached)

        ids = {build_jolts_id(el, rl, industry_code): (el, rl) for el, rl in JOLTS_ELEMENTS}
        fetched = await self._fetch(list(ids))
        if not fetched.success:
            return Result.from_error(fetched.error)
        records = fetched.data

        values = {}
        for series_id, (element, rate_level) in ids.items():
            field_name = JOLTS_FIELDS[element] + ("_rate" if rate_level == "R" else "")
            values[field_name] = _latest(records, series_id)

        period, year, month = _latest_point_label(list(records.values()))
        if industry_code == "000000":
            industry_name = "Total nonfarm"
        else:
            industry_name = next(
                (r.catalog.get("industry") for r in records.values() if r.catalog.get("industry")),
                industry_code,
            )
        openings = JoltsData(
            period=period,
            year=year,
            month=month,
            industry_code=industry_code,
            industry_name=industry_name,
            **values,
        )
        self._store(key, CacheDomain.JOLTS_OPENINGS, openings)
        return Result.ok(openings, fetched.warnings)

    async def get_national_unemployment(self) -> Result[UnemploymentData]:
        """Headline CPS numbers; counts are converted from thousands to persons."""
        key = build_cache_key(CacheDomain.LNS_UNEMPLOYMENT, "national")
        cached = self._from_cache(key, UnemploymentData.from_dict)
        if cached is not None:
            return Result.ok(cached)

        fetched = await self._fetch(CPS_SERIES)
        if not fetched.success:
            return Result.from_error(fetched.error)
        records = fetched.data

        period, year, month = _latest_point_label([records[s] for s in CPS_SERIES if s in records])
        unemployment = UnemploymentData(
            area_code="N0000000",
            area_name="National",
            geographic_level="national",
            period=period,
            year=year,
            month=month,
            unemployment_rate=_latest(records, CPS_UNEMPLOYMENT_RATE) or 0.0,
            labor_force=(_latest(records, CPS_LABOR_FORCE) or 0.0) * CPS_THOUSANDS,
            employed=(_latest(records, CPS_EMPLOYED) or 0.0) * CPS_THOUSANDS,
            unemployed=(_latest(records, CPS_UNEMPLOYED) or 0.0) * CPS_THOUSANDS,
            participation_rate=_latest(records, CPS_PARTICIPATION_RATE),
            employment_change=_change(records, CPS_EMPLOYED) * CPS_THOUSANDS,
            unemployment_rate_change=_change(records, CPS_UNEMPLOYMENT_RATE),
        )
        self._store(key, CacheDomain.LNS_UNEMPLOYMENT, unemployment)
        return Result.ok(unemployment, fetched.warnings)

    async def get_state_unemployment(self, state: str) -> Result[UnemploymentData]:
        """LAUS numbers for a state, by postal abbreviation ("CA")."""
        try:
            area_code = self.resolver.resolve_state(state)
        except Exception as e:
            return Result.fail(ErrorCode.INVALID_SERIES_ID, str(e.args[0]) if e.args else type(e).__name__)
        fips = area_code[1:3]

        key = build_cache_key(CacheDomain.LAU_UNEMPLOYMENT, fips)
        cached = self._from_cache(key, UnemploymentData.from_dict)
        if cached is not None:
            return Result.ok(cached)

        ids = {build_laus_id(fips, measure): name for measure, name in LAUS_MEASURES.items()}
        fetched = await self._fetch(list(ids))
        if not fetched.success:
            return Result.from_error(fetched.error)
        records = fetched.data
        by_name = {name: sid for sid, name in ids.items()}

        period, year, month = _latest_point_label(list(records.values()))
        unemployment = UnemploymentData(
            area_code=area_code,
            area_name=state_name(state) or area_name(area_code),
            geographic_level="state",
            period=period,
            year=year,
            month=month,
            unemployment_rate=_latest(records, by_name["unemployment_rate"]) or 0.0,
            labor_force=_latest(records, by_name["labor_force"]) or 0.0,
            employed=_latest(records, by_name["employed"]) or 0.0,
            unemployed=_latest(records, by_name["unemployed"]) or 0.0,
            employment_change=_change(records, by_name["employed"]),
            unemployment_rate_change=_change(records, by_name["unemployment_rate"]),
        )
        self._store(key, CacheDomain.LAU_UNEMPLOYMENT, unemployment)
        return Result.ok(unemployment, fetched.warnings)

    async def get_current_cpi(self) -> Result[CpiData]:
        """CPI-U all items, U.S. city average, seasonally adjusted."""
        key = build_cache_key(CacheDomain.CPI_CURRENT, "all_items")
        cached = self._from_cache(key, CpiData.from_dict)
        if cached is not None:
            return Result.ok(cached)

        series_id = build_cpi_id()
        fetched = await self._fetch([series_id])
        if not fetched.success:
            return Result.from_error(fetched.error)
        record = fetched.data.get(series_id)
        latest = record.most_recent() if record else None
        if latest is None or latest.value is None:
            return Result.fail(ErrorCode.NO_DATA_AVAILABLE, "No CPI value published",
                               failed_series=[series_id])

        cpi = CpiData(
            period=latest.label,
            year=latest.year,
            month=latest.month,
            item_code="SA0",
            item_description="All items",
            area="U.S. city average",
            index_value=latest.value,
            percent_change_1m=latest.pct_changes.get("1"),
            percent_change_12m=_twelve_month_change(record),
        )
        self._store(key, CacheDomain.CPI_CURRENT, cpi)
        return Result.ok(cpi, fetched.warnings)

    async def get_inflation_rate(self) -> Result[float]:
        """Year-over-year CPI-U change in percent."""
        cpi = await self.get_current_cpi()
        if not cpi.success:
            return Result.from_error(cpi.error)
        if cpi.data.percent_change_12m is None:
            return Result.fail(ErrorCode.NO_DATA_AVAILABLE, "No 12-month CPI change available")
        return Result.ok(cpi.data.percent_change_12m, cpi.warnings)

    # ------------------------------------------------------------------
    # Composites
    # ------------------------------------------------------------------
    async def get_labor_market_snapshot(self) -> Result[MarketSnapshot]:
        """
        National snapshot from CPS, JOLTS and CPI, fetched concurrently.

        A failed source becomes a warning and zeroes its fields; the call only
        fails when all three sources failed.
        """
        key = build_cache_key(CacheDomain.SNAPSHOT, "national")
        cached = self._from_cache(key, MarketSnapshot.from_dict)
        if cached is not None:
            return Result.ok(cached)

        unemployment, jolts, cpi = await settle(
            self.get_national_unemployment(),
            self.get_job_openings(),
            self.get_current_cpi(),
        )

        if not (unemployment.success or jolts.success or cpi.success):
            first = unemployment.error
            details = "; ".join(r.error.message for r in (unemployment, jolts, cpi))
            return Result.from_error(FetchError(
                code=first.code,
                message=f"Unable to fetch any labor market data: {details}",
                api_messages=[m for r in (unemployment, jolts, cpi) for m in r.error.api_messages],
                failed_series=[s for r in (unemployment, jolts, cpi) for s in r.error.failed_series],
                status=first.status,
            ))

        warnings: list[str] = []
        period = ""
        rate = rate_change = employed = employment_change = participation = 0.0
        if unemployment.success:
            u = unemployment.data
            period = u.period
            rate, rate_change = u.unemployment_rate, u.unemployment_rate_change
            employed, employment_change = u.employed, u.employment_change
            participation = u.participation_rate or 0.0
            warnings.extend(unemployment.warnings)
        else:
            warnings.append(f"Unable to fetch unemployment data: {unemployment.error.message}")

        openings = quits_rate = 0.0
        if jolts.success:
            openings = jolts.data.job_openings or 0.0
            quits_rate = jolts.data.quits_rate or 0.0
            period = period or jolts.data.period
            warnings.extend(jolts.warnings)
        else:
            warnings.append(f"Unable to fetch JOLTS data: {jolts.error.message}")

        inflation = 0.0
        if cpi.success:
            inflation = cpi.data.percent_change_12m or 0.0
            period = period or cpi.data.period
            warnings.extend(cpi.warnings)
        else:
            warnings.append(f"Unable to fetch CPI data: {cpi.error.message}")

        temperature = analytics.market_temperature(rate, openings)
        snapshot = MarketSnapshot(
            period=period or "Current",
            unemployment_rate=rate,
            unemployment_rate_change=rate_change,
            total_employment=employed,
            employment_change=employment_change,
            labor_force_participation=participation,
            job_openings=openings,
            quits_rate=quits_rate,
            inflation=inflation,
            temperature=temperature,
            highlights=analytics.snapshot_highlights(temperature, inflation, quits_rate),
        )

        if all(r.success for r in (unemployment, jolts, cpi)):
            self._store(key, CacheDomain.SNAPSHOT, snapshot)
        else:
            logger.warning("Snapshot assembled with missing sources: %s", warnings)
        return Result.ok(snapshot, warnings)

    async def get_occupation_market_data(
        self, occupation: str, geography: Union[Geography, str, None] = None
    ) -> Result[OccupationMarketData]:
        """Wages and employment together; both must succeed."""
        try:
            soc = normalize_occupation(occupation)
        except ValueError as e:
            return Result.fail(ErrorCode.INVALID_SERIES_ID, str(e))
        geo = self._geography(geography)

        key = build_cache_key(CacheDomain.MARKET_DATA, soc, geo.area_code)
        cached = self._from_cache(key, OccupationMarketData.from_dict)
        if cached is not None:
            return Result.ok(cached)

        wages, employment = await settle(
            self.get_occupation_wages(soc, geo),
            self.get_occupation_employment(soc, geo),
        )
        for part in (wages, employment):
            if not part.success:
                return Result.from_error(part.error)

        market = OccupationMarketData(
            soc_code=wages.data.soc_code,
            occupation_title=wages.data.occupation_title,
            occupation_group=SOC_MAJOR_GROUPS.get(soc[:2], "Unknown"),
            wages=wages.data,
            employment=employment.data,
            data_as_of=wages.data.period or employment.data.period,
        )
        self._store(key, CacheDomain.MARKET_DATA, market)
        return Result.ok(market, wages.warnings + employment.warnings)

    async def compare_regional_wages(
        self, occupation: str, area_codes: list[str]
    ) -> Result[RegionalComparison]:
        """
        Median annual wage in each area, relative to the first area that
        returned data. Failed areas are dropped and named in warnings.
        """
        if not area_codes:
            return Result.fail(ErrorCode.INVALID_SERIES_ID, "At least one area code is required")
        try:
            soc = normalize_occupation(occupation)
        except ValueError as e:
            return Result.fail(ErrorCode.INVALID_SERIES_ID, str(e))
        geos = [self._geography(code) for code in area_codes]

        key = build_cache_key(CacheDomain.REGIONAL_COMPARE, soc,
                              ",".join(g.area_code for g in geos))
        cached = self._from_cache(key, RegionalComparison.from_dict)
        if cached is not None:
            return Result.ok(cached)

        national, *regional = await settle(
            self.get_occupation_wages(soc),
            *(self.get_occupation_wages(soc, geo) for geo in geos),
        )

        warnings: list[str] = []
        usable: list[WageDistribution] = []
        for raw_code, result in zip(area_codes, regional):
            if not result.success:
                warnings.append(f"Failed to fetch data for area {raw_code}: {result.error.message}")
            elif result.data.annual.median is None:
                warnings.append(f"No median wage published for area {raw_code}")
            else:
                usable.append(result.data)

        if not usable:
            return Result.fail(
                ErrorCode.NO_DATA_AVAILABLE,
                "No wage data available for any requested area",
                failed_series=list(area_codes),
            )

        base, *others = usable
        base_median = base.annual.median

        employment = await self.get_occupation_employment(soc, base.area_code)
        if employment.success:
            base_employment = employment.data.employment or 0.0
        else:
            base_employment = 0.0
            warnings.append(f"Employment unavailable for area {base.area_code}: "
                            f"{employment.error.message}")

        if national.success and national.data.annual.median is not None:
            national_median = national.data.annual.median
        else:
            national_median = base_median
            warnings.append("National median wage unavailable; using the base region")

        comparisons = []
        for wages in others:
            diff, percent = analytics.wage_difference(wages.annual.median, base_median)
            comparisons.append(RegionalWage(
                area_code=wages.area_code,
                area_name=wages.area_name,
                median_wage=wages.annual.median,
                wage_difference=diff,
                wage_difference_percent=percent,
            ))

        comparison = RegionalComparison(
            soc_code=base.soc_code,
            occupation_title=base.occupation_title,
            base_region=BaseRegion(
                area_code=base.area_code,
                area_name=base.area_name,
                median_wage=base_median,
                employment=base_employment,
            ),
            comparisons=comparisons,
            national_median_wage=national_median,
        )
        if warnings:
            logger.warning("Regional comparison for %s is partial: %s", soc, warnings)
        else:
            self._store(key, CacheDomain.REGIONAL_COMPARE, comparison)
        return Result.ok(comparison, warnings)

    async def get_career_outlook(self, occupation: str) -> Result[CareerOutlook]:
        """Heuristic 0-100 outlook from national wages and employment."""
        try:
            soc = normalize_occupation(occupation)
        except ValueError as e:
            return Result.fail(ErrorCode.INVALID_SERIES_ID, str(e))

        key = build_cache_key(CacheDomain.CAREER_OUTLOOK, soc)
        cached = self._from_cache(key, CareerOutlook.from_dict)
        if cached is not None:
            return Result.ok(cached)

        market = await self.get_occupation_market_data(soc)
        if not market.success:
            return Result.from_error(market.error)

        annual = market.data.wages.annual
        if annual.median is None:
            return Result.fail(ErrorCode.NO_DATA_AVAILABLE,
                               f"No median wage published for {format_soc(soc)}")
        median = annual.median
        employment = market.data.employment.employment or 0.0

        score = analytics.score_outlook(median, employment)
        outlook = CareerOutlook(
            soc_code=market.data.soc_code,
            occupation_title=market.data.occupation_title,
            outlook=analytics.outlook_band(score),
            outlook_score=score,
            salary=analytics.salary_levels(annual, median),
            job_availability=analytics.job_availability(employment, score),
            factors=analytics.outlook_factors(median, employment),
            assessed_at=datetime.fromtimestamp(self.cache.clock(), tz=timezone.utc).isoformat(),
        )
        self._store(key, CacheDomain.CAREER_OUTLOOK, outlook)
        return Result.ok(outlook, market.warnings)

    def clear_cache(self) -> int:
        """Drop every cached entry so the next call refetches."""
        return self.cache.clear_all()
