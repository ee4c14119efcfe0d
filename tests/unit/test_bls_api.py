"""Unit tests for BlsFetcher: validation, envelopes and failure classification."""

import asyncio
import json

import pytest
import requests

from labordata.bls_api import (
    HttpResponse,
    normalize_envelope,
    parse_bls_value,
    records_to_frame,
    records_to_wide,
)
from labordata.config import RATE_LIMIT_RETRY_HINT
from labordata.errors import BLSError, ErrorCode, TransportError
from labordata.models import YearRange

UNEMPLOYMENT = "LNS14000000"
OPENINGS = "JTS000000000000000JOL"


def fetch(fetcher, series_ids, year_range=YearRange(2023, 2024)):
    return asyncio.run(fetcher.fetch_series(series_ids, year_range))


@pytest.mark.unit
def test_empty_request_fails_without_io(make_fetcher):
    fetcher, transport = make_fetcher(lambda payload: pytest.fail("no request expected"))
    result = fetch(fetcher, [])
    assert not result.success
    assert result.error.code == ErrorCode.INVALID_SERIES_ID
    assert transport.calls == []


@pytest.mark.unit
def test_more_than_fifty_series_fails_without_io(make_fetcher):
    fetcher, transport = make_fetcher(lambda payload: pytest.fail("no request expected"))
    result = fetch(fetcher, [f"LNS1400000{i % 10}" for i in range(51)])
    assert result.error.code == ErrorCode.INVALID_SERIES_ID
    assert transport.calls == []


@pytest.mark.unit
def test_inverted_year_range_fails_without_io(make_fetcher):
    fetcher, transport = make_fetcher(lambda payload: pytest.fail("no request expected"))
    result = fetch(fetcher, [UNEMPLOYMENT], YearRange(2024, 2020))
    assert result.error.code == ErrorCode.INVALID_DATE_RANGE
    assert transport.calls == []


@pytest.mark.unit
def test_payload_includes_key_only_when_direct(make_fetcher, bls):
    def handler(payload):
        return bls.response([bls.series(UNEMPLOYMENT, [(2024, "M01", "3.7")])])

    direct, direct_transport = make_fetcher(handler, api_key="secret")
    fetch(direct, [UNEMPLOYMENT])
    payload = direct_transport.calls[0]
    assert payload["registrationkey"] == "secret"
    assert payload["seriesid"] == [UNEMPLOYMENT]
    assert (payload["startyear"], payload["endyear"]) == ("2023", "2024")
    assert payload["catalog"] and payload["calculations"] and payload["annualaverage"]

    proxied, proxy_transport = make_fetcher(handler, api_key="secret", via_proxy=True,
                                            endpoint="https://proxy.example/api/labor-market")
    fetch(proxied, [UNEMPLOYMENT])
    assert "registrationkey" not in proxy_transport.calls[0]


@pytest.mark.unit
def test_direct_envelope_is_parsed(make_fetcher, bls):
    fetcher, _ = make_fetcher(lambda p: bls.response([
        bls.series(UNEMPLOYMENT, [(2024, "M02", "3.9"), (2024, "M01", "3.7")]),
    ]))
    result = fetch(fetcher, [UNEMPLOYMENT])
    assert result.success
    assert result.warnings == []
    (record,) = result.data
    assert record.series_id == UNEMPLOYMENT
    assert record.latest_value() == 3.9
    assert record.month_over_month() == pytest.approx(0.2)


@pytest.mark.unit
def test_proxy_envelope_is_parsed(make_fetcher, bls):
    body = {
        "success": True,
        "status": "REQUEST_SUCCEEDED",
        "results": {"series": [bls.series(OPENINGS, [(2024, "M03", "8,488")])]},
        "messages": [],
    }
    fetcher, _ = make_fetcher(lambda p: HttpResponse(200, json.dumps(body)))
    result = fetch(fetcher, [OPENINGS])
    assert result.success
    assert result.data[0].latest_value() == 8488.0


@pytest.mark.unit
def test_results_as_list_is_accepted():
    envelope = normalize_envelope({
        "status": "REQUEST_SUCCEEDED",
        "Results": [{"series": [{"seriesID": UNEMPLOYMENT, "data": []}]}],
        "message": "Series does not exist for Series X",
    })
    assert envelope.succeeded
    assert envelope.series[0]["seriesID"] == UNEMPLOYMENT
    assert envelope.messages == ["Series does not exist for Series X"]


@pytest.mark.unit
def test_normalize_envelope_rejects_non_objects():
    with pytest.raises(ValueError):
        normalize_envelope(["not", "an", "object"])


@pytest.mark.unit
def test_rate_limit(make_fetcher):
    fetcher, _ = make_fetcher(lambda p: HttpResponse(429, "Too Many Requests"))
    result = fetch(fetcher, [UNEMPLOYMENT])
    assert result.error.code == ErrorCode.RATE_LIMITED
    assert result.error.message == RATE_LIMIT_RETRY_HINT
    assert result.error.status == 429


@pytest.mark.unit
def test_server_error_keeps_status(make_fetcher):
    fetcher, _ = make_fetcher(lambda p: HttpResponse(503, "<html>maintenance</html>"))
    result = fetch(fetcher, [UNEMPLOYMENT])
    assert result.error.code == ErrorCode.API_ERROR
    assert result.error.status == 503
    assert "503" in result.error.message


@pytest.mark.unit
def test_proxy_error_body_message_is_used(make_fetcher):
    fetcher, _ = make_fetcher(lambda p: HttpResponse(502, json.dumps({"success": False, "error": "Upstream down"})))
    result = fetch(fetcher, [UNEMPLOYMENT])
    assert result.error.code == ErrorCode.API_ERROR
    assert result.error.message == "Upstream down"


@pytest.mark.unit
@pytest.mark.parametrize(
    "exc",
    [
        TransportError("connection refused"),
        requests.ConnectionError("dns failure"),
        requests.Timeout(),
        ConnectionError("refused"),
        TimeoutError("read timed out"),
        OSError("network unreachable"),
        asyncio.TimeoutError(),
    ],
)
def test_transport_failures_are_network_errors(make_fetcher, exc):
    def handler(payload):
        raise exc

    fetcher, _ = make_fetcher(handler)
    result = fetch(fetcher, [UNEMPLOYMENT])
    assert result.error.code == ErrorCode.NETWORK_ERROR
    assert result.error.failed_series == [UNEMPLOYMENT]


@pytest.mark.unit
def test_unexpected_exception_is_unknown_error(make_fetcher):
    def handler(payload):
        raise RuntimeError("boom")

    fetcher, _ = make_fetcher(handler)
    result = fetch(fetcher, [UNEMPLOYMENT])
    assert result.error.code == ErrorCode.UNKNOWN_ERROR
    assert "boom" in result.error.message


@pytest.mark.unit
def test_undecodable_body_is_parse_error(make_fetcher):
    fetcher, _ = make_fetcher(lambda p: HttpResponse(200, "<html>not json</html>"))
    result = fetch(fetcher, [UNEMPLOYMENT])
    assert result.error.code == ErrorCode.PARSE_ERROR


@pytest.mark.unit
def test_request_failed_maps_friendly_message(make_fetcher, bls):
    raw = "REQUEST_FAILED_DAILY_THRESHOLD_EXCEEDED: daily threshold for total number of requests"
    fetcher, _ = make_fetcher(lambda p: bls.response([], status="REQUEST_NOT_PROCESSED", message=[raw]))
    result = fetch(fetcher, [UNEMPLOYMENT])
    assert result.error.code == ErrorCode.API_ERROR
    assert result.error.message == "Daily request limit reached. Please try again tomorrow."
    assert result.error.api_messages == [raw]


@pytest.mark.unit
def test_proxy_success_false_is_api_error(make_fetcher):
    body = {"success": False, "status": "REQUEST_SUCCEEDED", "results": None, "error": "Invalid request"}
    fetcher, _ = make_fetcher(lambda p: HttpResponse(200, json.dumps(body)))
    result = fetch(fetcher, [UNEMPLOYMENT])
    assert result.error.code == ErrorCode.API_ERROR
    assert result.error.message == "Invalid request"


@pytest.mark.unit
def test_empty_series_become_warnings(make_fetcher, bls):
    fetcher, _ = make_fetcher(lambda p: bls.response([
        bls.series(UNEMPLOYMENT, [(2024, "M01", "3.7")]),
        bls.series(OPENINGS, []),
    ]))
    result = fetch(fetcher, [UNEMPLOYMENT, OPENINGS])
    assert result.success
    assert [r.series_id for r in result.data] == [UNEMPLOYMENT]
    assert len(result.warnings) == 1
    assert OPENINGS in result.warnings[0]


@pytest.mark.unit
def test_all_series_empty_is_no_data(make_fetcher, bls):
    fetcher, _ = make_fetcher(lambda p: bls.response([bls.series(UNEMPLOYMENT, [])]))
    result = fetch(fetcher, [UNEMPLOYMENT])
    assert result.error.code == ErrorCode.NO_DATA_AVAILABLE
    with pytest.raises(BLSError):
        result.unwrap()


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw, expected",
    [("1,234.5", 1234.5), ("3.7", 3.7), ("-", None), ("*", None), ("#", None), ("", None), (None, None)],
)
def test_parse_bls_value(raw, expected):
    assert parse_bls_value(raw) == expected


@pytest.mark.unit
def test_placeholder_values_parse_as_none(make_fetcher, bls):
    fetcher, _ = make_fetcher(lambda p: bls.response([
        bls.series(UNEMPLOYMENT, [(2024, "M02", "-"), (2024, "M01", "3.7")]),
    ]))
    record = fetch(fetcher, [UNEMPLOYMENT]).data[0]
    assert record.latest_value() is None
    assert record.month_over_month() == 0.0


@pytest.mark.unit
def test_records_to_frame_and_wide(make_fetcher, bls):
    fetcher, _ = make_fetcher(lambda p: bls.response([
        bls.series(UNEMPLOYMENT, [(2024, "M13", "3.8"), (2024, "M02", "3.9"), (2024, "M01", "3.7")]),
        bls.series(OPENINGS, [(2024, "M01", "8,800")]),
    ]))
    records = fetch(fetcher, [UNEMPLOYMENT, OPENINGS]).data

    tidy = records_to_frame(records)
    assert list(tidy.columns) == ["date", "series_id", "value", "footnotes"]
    assert len(tidy) == 3  # M13 annual average dropped
    assert tidy.iloc[0]["series_id"] == OPENINGS

    wide = records_to_wide(records)
    assert list(wide.columns) == ["date", OPENINGS, UNEMPLOYMENT]
    assert len(wide) == 2
    assert wide[UNEMPLOYMENT].tolist() == [3.7, 3.9]
