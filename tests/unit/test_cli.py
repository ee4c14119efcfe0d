"""Unit tests for the labordata command line."""

import json

import pytest

from labordata import cli
from labordata.bls_api import HttpResponse
from labordata.service import LaborMarketService


@pytest.fixture
def offline_service(monkeypatch, make_service, bls):
    """Route the CLI's service through the fake transport."""

    def install(handler):
        service, transport = make_service(handler)
        monkeypatch.setattr(LaborMarketService, "from_settings", classmethod(lambda cls, settings: service))
        return service, transport

    return install


@pytest.mark.unit
def test_decode_prints_components(capsys):
    assert cli.main(["decode", "LNS14000000"]) == 0
    parsed = json.loads(capsys.readouterr().out)
    assert parsed == {"survey": "LN", "series_code": "14000000", "seasonal": "S"}


@pytest.mark.unit
def test_decode_reports_unparseable(capsys):
    assert cli.main(["decode", "garbage"]) == 1
    assert "[error] garbage" in capsys.readouterr().err


@pytest.mark.unit
def test_wages_with_offer(offline_service, bls, capsys):
    ladder = {"11": "60000", "12": "80000", "13": "100000", "14": "130000", "15": "160000"}

    def handler(payload):
        return bls.response([
            bls.series(sid, [(2024, "A01", ladder[sid[-2:]])] if sid[-2:] in ladder else [])
            for sid in payload["seriesid"]
        ])

    offline_service(handler)
    assert cli.main(["wages", "15-1252", "--offer", "100000"]) == 0

    out = capsys.readouterr().out
    assert '"median": 100000.0' in out
    assert "50th percentile (Above Average)" in out


@pytest.mark.unit
def test_wages_offer_with_unordered_ladder_warns(offline_service, bls, capsys):
    ladder = {"11": "60000", "12": "50000", "13": "100000", "14": "130000", "15": "160000"}

    def handler(payload):
        return bls.response([
            bls.series(sid, [(2024, "A01", ladder[sid[-2:]])] if sid[-2:] in ladder else [])
            for sid in payload["seriesid"]
        ])

    offline_service(handler)
    assert cli.main(["wages", "15-1252", "--offer", "100000"]) == 0

    captured = capsys.readouterr()
    assert "[warn] Cannot rank the offer" in captured.err
    assert "percentile (" not in captured.out


@pytest.mark.unit
def test_failures_exit_non_zero(offline_service, capsys):
    offline_service(lambda payload: HttpResponse(429, ""))
    assert cli.main(["outlook", "15-1252"]) == 1
    assert "RATE_LIMITED" in capsys.readouterr().err


@pytest.mark.unit
def test_clear_cache(offline_service, cache, capsys):
    offline_service(lambda payload: HttpResponse(500, ""))
    cache.put("bls_cache:snapshot:national", {}, ttl=60)

    assert cli.main(["clear-cache"]) == 0
    assert "Removed 1 cached entries." in capsys.readouterr().out


@pytest.mark.unit
def test_series_end_year_alone_sets_the_range(offline_service, bls, tmp_path, capsys):
    _, transport = offline_service(
        lambda payload: bls.response([bls.series(sid, [(2020, "M01", "3.5")]) for sid in payload["seriesid"]])
    )
    out = tmp_path / "series.csv"

    assert cli.main(["series", "--series", "LNS14000000", "--end-year", "2020", "--out", str(out)]) == 0

    (payload,) = transport.calls
    assert payload["startyear"] == "2015"
    assert payload["endyear"] == "2020"
    assert out.exists()
    assert json.loads((tmp_path / "build_info.json").read_text())["n_rows"] == 1
