"""
labordata/bls_api.py

Remote Fetcher for the BLS Public Data API.

Why this file exists:
- Keeps API request/response parsing isolated from the rest of the project
- Turns every failure into a typed FetchError instead of an exception
- Can be tested with a fake transport, without touching the network

Main outputs:
- BlsFetcher.fetch_series(...): Result[list[SeriesRecord]]
- records_to_frame(...): long/tidy pandas format (one row per series per month)
- records_to_wide(...): wide format (one row per month, one column per series)

Notes about BLS API responses:
- BLS returns monthly data labeled "M01" .. "M12".
- Some series include annual averages labeled "M13".
- The JSON shape differs between the direct API (v1/v2 use "Results" and
  "message") and our proxy ("results" and "messages"), so normalize_envelope
  maps both onto one Envelope before anything else looks at the payload.
- The fetcher does not cache and does not retry. Both belong to callers.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

import pandas as pd
import requests

from labordata.config import (
    BLS_ENDPOINTS,
    BLS_ERROR_MESSAGES,
    MAX_SERIES_PER_REQUEST,
    RATE_LIMIT_RETRY_HINT,
)
from labordata.errors import ErrorCode, Result, TransportError
from labordata.models import DataPoint, SeriesRecord, YearRange

logger = logging.getLogger(__name__)

FAILED_STATUSES = ("REQUEST_FAILED", "REQUEST_NOT_PROCESSED")

# BLS placeholders for suppressed or unavailable estimates.
MISSING_VALUES = ("", "-", "*", "#", "(NA)")


# ---------------------------------------------------------------------
# Transport
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class HttpResponse:
    status_code: int
    text: str


class Transport(Protocol):
    async def post(self, url: str, payload: dict[str, Any]) -> HttpResponse: ...


class RequestsTransport:
    """
    POSTs JSON with a requests.Session.

    requests is blocking, so each call runs in a worker thread; concurrent
    fetches from the assemblers still overlap.
    """

    def __init__(self, session: Optional[requests.Session] = None, timeout_s: float = 30):
        self.session = session or requests.Session()
        self.timeout_s = timeout_s

    def _post_blocking(self, url: str, payload: dict[str, Any]) -> HttpResponse:
        headers = {"Content-type": "application/json"}
        try:
            resp = self.session.post(url, json=payload, headers=headers, timeout=self.timeout_s)
        except requests.RequestException as e:
            raise TransportError(f"Unable to reach {url}: {e}") from e
        return HttpResponse(status_code=resp.status_code, text=resp.text)

    async def post(self, url: str, payload: dict[str, Any]) -> HttpResponse:
        return await asyncio.to_thread(self._post_blocking, url, payload)


# ---------------------------------------------------------------------
# Envelope normalisation
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class Envelope:
    succeeded: bool
    status: Optional[str]
    series: list[dict[str, Any]] = field(default_factory=list)
    messages: list[str] = field(default_factory=list)
    error: Optional[str] = None


def _extract_series_list(results: Any) -> list[dict[str, Any]]:
    """
    Extract the list of series objects from the results block.

    BLS docs/examples show slightly different shapes across endpoints and versions:
      - {"series": [...]}
      - [{"series": [...]}]
    """
    if isinstance(results, dict):
        return list(results.get("series", []) or [])
    if isinstance(results, list) and results and isinstance(results[0], dict):
        return list(results[0].get("series", []) or [])
    return []


def _message_texts(raw: Any) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        return [raw] if raw else []
    texts = []
    for m in raw:
        if isinstance(m, dict):
            m = m.get("message") or m.get("text")
        if m:
            texts.append(str(m))
    return texts


def normalize_envelope(body: Any) -> Envelope:
    """
    Map a proxy-shaped or provider-shaped response body onto an Envelope.

    Proxy:    {"success", "status", "results", "messages", "error"}
    Provider: {"status", "Results", "message"}

    Raises ValueError when the body is not a JSON object.
    """
    if not isinstance(body, dict):
        raise ValueError(f"Expected a JSON object, got {type(body).__name__}")

    status = body.get("status")
    results = body.get("results")
    if results is None:
        results = body.get("Results")
    raw_messages = body.get("messages")
    if raw_messages is None:
        raw_messages = body.get("message")

    succeeded = body.get("success") is not False and status not in FAILED_STATUSES
    return Envelope(
        succeeded=succeeded,
        status=status,
        series=_extract_series_list(results),
        messages=_message_texts(raw_messages),
        error=body.get("error") if isinstance(body.get("error"), str) else None,
    )


def friendly_api_message(messages: list[str], fallback: str = "BLS API request failed") -> str:
    """Map BLS error fragments onto a message a person can act on."""
    joined = " ".join(messages)
    for fragment, friendly in BLS_ERROR_MESSAGES.items():
        if fragment in joined:
            return friendly
    return joined or fallback


# ---------------------------------------------------------------------
# Series parsing
# ---------------------------------------------------------------------
def parse_bls_value(value: Any) -> Optional[float]:
    """BLS values are strings like "1,234.5"; placeholders become None."""
    if value is None:
        return None
    text = str(value).strip()
    if text in MISSING_VALUES:
        return None
    try:
        return float(text.replace(",", ""))
    except ValueError:
        return None


def _parse_pct_changes(calculations: Any) -> dict[str, float]:
    if not isinstance(calculations, dict):
        return {}
    changes = {}
    for horizon, raw in (calculations.get("pct_changes") or {}).items():
        parsed = parse_bls_value(raw)
        if parsed is not None:
            changes[str(horizon)] = parsed
    return changes


def parse_series(raw: dict[str, Any]) -> SeriesRecord:
    points: list[DataPoint] = []
    for item in raw.get("data", []) or []:
        # Example fields: year, period, periodName, value, footnotes, latest, calculations
        try:
            year = int(item["year"])
            period = str(item["period"])
        except (KeyError, TypeError, ValueError):
            continue

        # Footnotes: list of dicts like {"code":"...","text":"..."}.
        footnotes = [fn["text"] for fn in item.get("footnotes", []) or [] if fn and fn.get("text")]

        points.append(
            DataPoint(
                year=year,
                period=period,
                period_name=str(item.get("periodName", period)),
                value=parse_bls_value(item.get("value")),
                footnotes=footnotes,
                latest=str(item.get("latest", "")).lower() == "true",
                pct_changes=_parse_pct_changes(item.get("calculations")),
            )
        )
    catalog = raw.get("catalog") if isinstance(raw.get("catalog"), dict) else {}
    return SeriesRecord(series_id=str(raw.get("seriesID", "")), points=points, catalog=catalog)


# ---------------------------------------------------------------------
# Fetcher
# ---------------------------------------------------------------------
class BlsFetcher:
    """
    Single network-facing entry point.

    Parameters
    ----------
    transport:
        Anything with an async post(url, payload) -> HttpResponse.
        Defaults to RequestsTransport.
    endpoint:
        BLS endpoint or proxy URL. Defaults to the v2 endpoint.
    api_key:
        BLS registration key. Only sent when via_proxy is False (the proxy
        keeps its own key server-side).
    """

    def __init__(
        self,
        transport: Optional[Transport] = None,
        endpoint: Optional[str] = None,
        api_key: Optional[str] = None,
        *,
        via_proxy: bool = False,
    ):
        self.transport = transport or RequestsTransport()
        self.endpoint = endpoint or BLS_ENDPOINTS["v2"]
        self.api_key = api_key
        self.via_proxy = via_proxy

    def build_payload(self, series_ids: list[str], year_range: YearRange) -> dict[str, Any]:
        # BLS expects a JSON POST body with string years.
        payload: dict[str, Any] = {
            "seriesid": list(series_ids),
            "startyear": str(year_range.start),
            "endyear": str(year_range.end),
            "catalog": True,
            "calculations": True,
            "annualaverage": True,
        }
        if self.api_key and not self.via_proxy:
            payload["registrationkey"] = self.api_key
        return payload

    async def fetch_series(
        self,
        series_ids: list[str],
        year_range: Optional[YearRange] = None,
    ) -> Result[list[SeriesRecord]]:
        """
        Fetch a batch of series.

        Returns a successful Result with every series that has data points
        (empty series are listed in warnings), or a failed Result whose
        error.code is one of the ErrorCode values.
        """
        year_range = year_range or YearRange.default()

        if not series_ids:
            return Result.fail(ErrorCode.INVALID_SERIES_ID, "No series IDs provided")
        if len(series_ids) > MAX_SERIES_PER_REQUEST:
            return Result.fail(
                ErrorCode.INVALID_SERIES_ID,
                f"Maximum {MAX_SERIES_PER_REQUEST} series IDs allowed per request",
                failed_series=series_ids,
            )
        if year_range.start > year_range.end:
            return Result.fail(
                ErrorCode.INVALID_DATE_RANGE,
                "Start year must be less than or equal to end year",
            )

        logger.info("Fetching %d series (%d-%d)", len(series_ids), year_range.start, year_range.end)

        try:
            resp = await self.transport.post(self.endpoint, self.build_payload(series_ids, year_range))
        except (TransportError, requests.RequestException, OSError, asyncio.TimeoutError) as e:
            logger.warning("Network error fetching %d series: %s", len(series_ids), e)
            return Result.fail(
                ErrorCode.NETWORK_ERROR,
                "Network error: Unable to reach BLS API",
                failed_series=series_ids,
            )
        except Exception as e:
            logger.exception("Unexpected transport failure")
            return Result.fail(ErrorCode.UNKNOWN_ERROR, str(e) or type(e).__name__,
                               failed_series=series_ids)

        try:
            return self._interpret(resp, series_ids)
        except Exception as e:
            logger.exception("Unexpected failure interpreting BLS response")
            return Result.fail(ErrorCode.UNKNOWN_ERROR, str(e) or type(e).__name__,
                               failed_series=series_ids)

    def _interpret(self, resp: HttpResponse, series_ids: list[str]) -> Result[list[SeriesRecord]]:
        if resp.status_code == 429:
            return Result.fail(ErrorCode.RATE_LIMITED, RATE_LIMIT_RETRY_HINT,
                               failed_series=series_ids, status=429)

        if not 200 <= resp.status_code < 300:
            detail = None
            try:
                body = json.loads(resp.text)
                detail = body.get("error") if isinstance(body, dict) else None
            except ValueError:
                pass
            return Result.fail(
                ErrorCode.API_ERROR,
                detail or f"API request failed with status {resp.status_code}",
                failed_series=series_ids,
                status=resp.status_code,
            )

        try:
            envelope = normalize_envelope(json.loads(resp.text))
        except ValueError as e:
            return Result.fail(ErrorCode.PARSE_ERROR, f"Could not parse BLS response: {e}",
                               failed_series=series_ids, status=resp.status_code)

        logger.debug("BLS envelope: status=%s series=%d messages=%d",
                     envelope.status, len(envelope.series), len(envelope.messages))

        if not envelope.succeeded:
            return Result.fail(
                ErrorCode.API_ERROR,
                envelope.error or friendly_api_message(envelope.messages),
                api_messages=envelope.messages,
                failed_series=series_ids,
                status=resp.status_code,
            )

        records = [parse_series(raw) for raw in envelope.series]
        with_data = [r for r in records if r.points]
        without_data = [r.series_id for r in records if not r.points]

        if not with_data:
            return Result.fail(
                ErrorCode.NO_DATA_AVAILABLE,
                "No data available for the requested series",
                api_messages=envelope.messages,
                failed_series=series_ids,
            )

        warnings = []
        if without_data:
            warnings.append(f"No data returned for series: {', '.join(without_data)}")
        return Result.ok(with_data, warnings)


# ---------------------------------------------------------------------
# pandas exports
# ---------------------------------------------------------------------
def records_to_frame(records: list[SeriesRecord]) -> pd.DataFrame:
    """
    Tidy/long DataFrame with monthly observations.

    Columns:
      - date (Timestamp at first day of the month)
      - series_id
      - value (float)
      - footnotes (comma-separated string; may be empty)

    Filters to monthly periods M01..M12, drops unparseable values, and sorts by
    [series_id, date].
    """
    rows: list[dict[str, Any]] = []
    for record in records:
        for point in record.points:
            # We only want monthly values: M01..M12.
            if point.month is None or point.value is None:
                continue
            rows.append(
                {
                    "date": pd.Timestamp(year=point.year, month=point.month, day=1),
                    "series_id": record.series_id,
                    "value": point.value,
                    "footnotes": ", ".join(point.footnotes),
                }
            )

    df = pd.DataFrame(rows, columns=["date", "series_id", "value", "footnotes"])
    return df.sort_values(["series_id", "date"]).reset_index(drop=True)


def records_to_wide(records: list[SeriesRecord]) -> pd.DataFrame:
    """
    Wide format:

      date | SERIES1 | SERIES2 | ... (one column per series_id)
    """
    tidy = records_to_frame(records)
    wide = (
        tidy.pivot(index="date", columns="series_id", values="value")
        .sort_index()
        .reset_index()
    )
    wide.columns.name = None  # cleaner header for CSV
    return wide
