"""Pytest configuration and fixtures for OpenRTB inspector tests."""

import copy
import json
from typing import Callable

import pytest

from ortb_inspector.engines.analyzer import BidRequestAnalyzer
from ortb_inspector.storage.memory_backend import InMemoryResultCache


SITE_BANNER_REQUEST = {
    "id": "req-site-001",
    "at": 1,
    "tmax": 300,
    "cur": ["USD"],
    "imp": [
        {
            "id": "1",
            "tagid": "homepage-top",
            "banner": {"w": 300, "h": 250, "format": [{"w": 300, "h": 250}]},
            "bidfloor": 0.5,
            "bidfloorcur": "USD",
            "secure": 1,
        }
    ],
    "site": {
        "id": "site-001",
        "domain": "example.com",
        "page": "https://www.example.com/news/article",
        "publisher": {"id": "pub-001"},
    },
    "device": {
        "ua": "Mozilla/5.0 (Windows NT 10.0; Win64; x64)",
        "ip": "203.0.113.10",
        "devicetype": 2,
        "os": "Windows",
        "geo": {"country": "USA", "lat": 40.71, "lon": -74.0},
    },
    "user": {"id": "user-001"},
    "source": {
        "tid": "tid-001",
        "schain": {
            "complete": 1,
            "ver": "1.0",
            "nodes": [{"asi": "exchange.com", "sid": "pub-001", "hp": 1}],
        },
    },
    "regs": {"coppa": 0, "gdpr": 0, "us_privacy": "1YNN"},
}


CTV_APP_REQUEST = {
    "id": "req-ctv-001",
    "at": 1,
    "tmax": 500,
    "cur": ["USD"],
    "imp": [
        {
            "id": "1",
            "tagid": "ctv-preroll",
            "video": {
                "mimes": ["video/mp4"],
                "minduration": 5,
                "maxduration": 30,
                "protocols": [2, 3, 7],
                "w": 1920,
                "h": 1080,
                "pos": 7,
                "plcmt": 1,
                "linearity": 1,
                "startdelay": 0,
            },
            "bidfloor": 12.0,
            "bidfloorcur": "USD",
        }
    ],
    "app": {
        "id": "app-001",
        "name": "Stream TV",
        "bundle": "com.example.streamtv",
        "storeurl": "https://play.google.com/store/apps/details?id=com.example.streamtv",
        "publisher": {"id": "pub-009"},
        "content": {"genre": "Drama", "livestream": 0},
    },
    "device": {
        "ua": "Roku/DVP-9.10",
        "ip": "198.51.100.7",
        "devicetype": 3,
        "make": "Roku",
        "model": "Ultra",
        "os": "Roku",
        "ifa": "6d92078a-8246-4ba4-ae5b-76104861e7dc",
        "ext": {"ifa_type": "rida"},
        "geo": {"country": "USA"},
    },
    "user": {"id": "user-009"},
    "source": {
        "tid": "tid-009",
        "schain": {
            "complete": 1,
            "ver": "1.0",
            "nodes": [{"asi": "exchange.com", "sid": "pub-009", "hp": 1}],
        },
    },
}


@pytest.fixture
def site_request() -> dict:
    """A well-formed web banner request that triggers no issues."""
    return copy.deepcopy(SITE_BANNER_REQUEST)


@pytest.fixture
def ctv_request() -> dict:
    """A well-formed Connected TV video request that triggers no issues."""
    return copy.deepcopy(CTV_APP_REQUEST)


@pytest.fixture
def to_text() -> Callable[[object], str]:
    """Serialize a request the way a caller would paste it."""
    return json.dumps


@pytest.fixture
def analyzer() -> BidRequestAnalyzer:
    """Create an analyzer without a result cache."""
    return BidRequestAnalyzer()


@pytest.fixture
def cached_analyzer() -> BidRequestAnalyzer:
    """Create an analyzer with a small LRU result cache."""
    return BidRequestAnalyzer(cache=InMemoryResultCache(max_entries=8))
