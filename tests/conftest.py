"""Shared fixtures for the facility finder test suite.

FakeSession stands in for aiohttp.ClientSession: each request consumes the
next scripted FakeResponse, which can carry a status, a JSON body, a JSON
decoding error, a transport error raised on enter, or a delay.
"""

import asyncio

import pytest

from data_sources.mirror_config import MirrorConfig

MIRRORS = [
    "https://mirror-1.test/api/interpreter",
    "https://mirror-2.test/api/interpreter",
    "https://mirror-3.test/api/interpreter",
]

ORIGIN = (40.7128, -74.0060)


class FakeResponse:
    def __init__(self, status=200, json_data=None, json_error=None, error=None, delay=0.0):
        self.status = status
        self._json_data = json_data
        self._json_error = json_error
        self._error = error
        self._delay = delay

    async def json(self, content_type="application/json"):
        if self._json_error is not None:
            raise self._json_error
        return self._json_data

    async def __aenter__(self):
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    def __init__(self, responses):
        self._responses = list(responses)
        self.calls = []
        self.closed = False

    def _next(self, method, url, kwargs):
        self.calls.append((method, url, kwargs))
        if not self._responses:
            raise AssertionError(f"unexpected {method} {url}")
        return self._responses.pop(0)

    def post(self, url, **kwargs):
        return self._next("POST", url, kwargs)

    def get(self, url, **kwargs):
        return self._next("GET", url, kwargs)

    async def close(self):
        self.closed = True

    @property
    def urls(self):
        return [url for _, url, _ in self.calls]


def overpass_payload(*elements):
    return {"version": 0.6, "generator": "Overpass API", "elements": list(elements)}


def node(element_id, lat, lon, **tags):
    return {"type": "node", "id": element_id, "lat": lat, "lon": lon, "tags": tags}


def way(element_id, lat, lon, **tags):
    return {"type": "way", "id": element_id, "center": {"lat": lat, "lon": lon}, "tags": tags}


@pytest.fixture
def mirror_config():
    return MirrorConfig(endpoints=list(MIRRORS), attempt_timeout=0.2, connect_timeout=0.1)


@pytest.fixture
def sample_payload():
    lat, lon = ORIGIN
    return overpass_payload(
        node(1, lat + 0.02, lon, amenity="pharmacy", name="Far Pharmacy"),
        node(2, lat + 0.001, lon, amenity="hospital", name="Near Hospital", emergency="yes"),
        way(3, lat + 0.01, lon, healthcare="clinic", name="Middle Clinic"),
        node(4, lat + 0.005, lon, amenity="clinic"),
    )
