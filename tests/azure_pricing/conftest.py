"""
Shared fakes for client, transport and pagination tests.

FakeSession stands in for aiohttp.ClientSession: it records every request
and answers from a scripted list of outcomes (responses or exceptions) or
from a responder callable. No network is used.
"""

import inspect
import json
from types import SimpleNamespace
from typing import Any

import pytest

BASE_URL = "https://prices.example.com/api/retail/prices"


class FakeContent:
    """Minimal aiohttp StreamReader: chunked reads over a fixed body."""

    def __init__(self, body: bytes):
        self._body = body
        self._pos = 0
        self.bytes_read = 0

    async def read(self, n: int = -1) -> bytes:
        if n < 0:
            n = len(self._body) - self._pos
        chunk = self._body[self._pos : self._pos + n]
        self._pos += len(chunk)
        self.bytes_read += len(chunk)
        return chunk


class FakeResponse:
    def __init__(
        self,
        status: int = 200,
        body: bytes | str | dict | None = None,
        headers: dict[str, str] | None = None,
    ):
        if isinstance(body, dict):
            body = json.dumps(body)
        if isinstance(body, str):
            body = body.encode()
        self.status = status
        self.headers = dict(headers or {})
        self.content = FakeContent(body or b"")
        self.released = False

    def release(self) -> None:
        self.released = True


class FakeSession:
    """
    Scripted stand-in for aiohttp.ClientSession.

    outcomes: consumed in order; the last one repeats once the rest are used.
    responder: called as responder(url, call_number) and may return an
        awaitable; takes precedence over outcomes.
    """

    def __init__(self, outcomes: list[Any] | None = None, responder=None):
        self._outcomes = list(outcomes or [])
        self._responder = responder
        self.requests: list[SimpleNamespace] = []
        self.returned: list[FakeResponse] = []
        self.closed = False

    async def request(self, method, url, headers=None, timeout=None):
        self.requests.append(
            SimpleNamespace(
                method=method,
                url=str(url),
                headers=dict(headers or {}),
                timeout=timeout,
            )
        )
        if self._responder is not None:
            outcome = self._responder(str(url), len(self.requests))
            if inspect.isawaitable(outcome):
                outcome = await outcome
        elif len(self._outcomes) > 1:
            outcome = self._outcomes.pop(0)
        else:
            outcome = self._outcomes[0]

        if isinstance(outcome, BaseException):
            raise outcome
        self.returned.append(outcome)
        return outcome

    @property
    def urls(self) -> list[str]:
        return [r.url for r in self.requests]

    async def close(self) -> None:
        self.closed = True


def page_body(items: list[dict] | None = None, next_link: str = "") -> dict:
    """Retail Prices API page envelope."""
    items = items or []
    return {
        "BillingCurrency": "USD",
        "CustomerEntityId": "Default",
        "CustomerEntityType": "Retail",
        "Items": items,
        "NextPageLink": next_link or None,
        "Count": len(items),
    }


def price_item(**overrides) -> dict:
    item = {
        "currencyCode": "USD",
        "tierMinimumUnits": 0.0,
        "retailPrice": 0.0104,
        "unitPrice": 0.0104,
        "armRegionName": "eastus",
        "location": "US East",
        "effectiveStartDate": "2021-06-01T00:00:00Z",
        "meterId": "000a794b-bdb0-58be-a0cd-0c3a0f222923",
        "meterName": "B1s",
        "productId": "DZH318Z0BQPS",
        "skuId": "DZH318Z0BQPS/00TG",
        "productName": "Virtual Machines BS Series",
        "skuName": "B1s",
        "serviceName": "Virtual Machines",
        "serviceId": "DZH313Z7MMC8",
        "serviceFamily": "Compute",
        "unitOfMeasure": "1 Hour",
        "type": "Consumption",
        "isPrimaryMeterRegion": True,
        "armSkuName": "Standard_B1s",
    }
    item.update(overrides)
    return item


def zero_backoff(min_wait, max_wait, attempt, response=None) -> float:
    return 0.0


@pytest.fixture
def make_response():
    return FakeResponse


@pytest.fixture
def make_session():
    return FakeSession


@pytest.fixture
def page():
    return page_body


@pytest.fixture
def item():
    return price_item


@pytest.fixture
def no_backoff():
    return zero_backoff


@pytest.fixture
def base_url():
    return BASE_URL
