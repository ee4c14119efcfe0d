"""Shared fakes for the unit tests: transport, clock and BLS response bodies."""

import json

import pytest

from labordata.bls_api import BlsFetcher, HttpResponse
from labordata.cache import CacheStore, MemoryStorage
from labordata.models import YearRange
from labordata.service import LaborMarketService


class FakeTransport:
    """Answers every POST with handler(payload); records the payloads it saw."""

    def __init__(self, handler):
        self.handler = handler
        self.calls = []

    async def post(self, url, payload):
        self.calls.append(payload)
        return self.handler(payload)


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def make_series(series_id, points, catalog=None):
    """points: iterable of (year, period, value) with value as BLS sends it (a string)."""
    data = [
        {
            "year": str(year),
            "period": period,
            "periodName": period,
            "value": value,
            "footnotes": [{}],
        }
        for year, period, value in points
    ]
    series = {"seriesID": series_id, "data": data}
    if catalog:
        series["catalog"] = catalog
    return series


def make_response(series, *, status="REQUEST_SUCCEEDED", message=None, http_status=200):
    body = {
        "status": status,
        "responseTime": 12,
        "message": message or [],
        "Results": {"series": series},
    }
    return HttpResponse(http_status, json.dumps(body))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def cache(storage, clock):
    return CacheStore(storage, clock=clock)


@pytest.fixture
def bls():
    """Builders for BLS response bodies: bls.series(...), bls.response(...)."""

    class Builders:
        series = staticmethod(make_series)
        response = staticmethod(make_response)

    return Builders


@pytest.fixture
def make_fetcher():
    def factory(handler, **kwargs):
        transport = FakeTransport(handler)
        return BlsFetcher(transport, **kwargs), transport

    return factory


@pytest.fixture
def make_service(cache):
    def factory(handler):
        transport = FakeTransport(handler)
        service = LaborMarketService(
            BlsFetcher(transport),
            cache,
            year_range=YearRange(2022, 2024),
        )
        return service, transport

    return factory
