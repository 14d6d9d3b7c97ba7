from __future__ import annotations

import json

import pytest
import requests

from inventory_monitor.scraper import Listing, OptionRecord


def make_response(status_code: int = 200, body: bytes | str | dict | None = None) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status_code
    if isinstance(body, dict):
        body = json.dumps(body)
    if isinstance(body, str):
        body = body.encode("utf-8")
    resp._content = body or b""
    return resp


class FakeSession:
    """Stands in for requests.Session; records calls, replays queued outcomes."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls: list[tuple[str, str, dict]] = []
        self.closed = False

    def _next(self, method, url, kwargs):
        self.calls.append((method, url, kwargs))
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def get(self, url, **kwargs):
        return self._next("GET", url, kwargs)

    def post(self, url, **kwargs):
        return self._next("POST", url, kwargs)

    def close(self):
        self.closed = True


def make_item(**overrides) -> dict:
    item = {
        "VIN": "5YJ3E7EB0NF000001",
        "Price": 25000,
        "Odometer": 41234,
        "PAINT": ["Pearl White Multi-Coat"],
        "INTERIOR": ["Black", "Premium"],
        "TRIM": ["LRAWD"],
        "Model": "m3",
        "City": "Nürnberg",
        "Year": 2022,
        "OptionCodeData": [
            {"code": "$MT328", "group": "TRIM", "value": "", "name": "Long Range AWD"},
            {"code": "SPECS_RANGE", "group": "SPECS_RANGE", "value": "602", "name": "Range"},
        ],
        "ADL_OPTS": ["TOWING_PACKAGE"],
        "SomethingNew": {"ignored": True},
    }
    item.update(overrides)
    return item


def make_listing(vin: str = "V1", price: float = 25000, **kwargs) -> Listing:
    return Listing(vin=vin, price=price, **kwargs)


@pytest.fixture
def no_sleep(monkeypatch):
    """Skip the back-off waits between retry attempts."""
    import time
    monkeypatch.setattr(time, "sleep", lambda seconds: None)


__all__ = ["FakeSession", "make_response", "make_item", "make_listing", "OptionRecord"]
