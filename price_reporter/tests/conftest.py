"""Shared test doubles for sources, chain clients and signers."""

from __future__ import annotations

import pytest
from eth_account import Account

from price_reporter.src.ChainClient import ChainClient
from price_reporter.src.errors import NetworkError, SourceUnavailable
from price_reporter.src.fetchers import PriceSource
from price_reporter.src.FixedPointPrice import FixedPointPrice
from price_reporter.src.ReportPayload import SubmissionStatus
from price_reporter.src.RetryPolicy import RetryPolicy
from price_reporter.src.Signer import KeystoreSigner


class FakeSource(PriceSource):
    """Source returning a fixed price, or failing a number of times first."""

    name = "fake"

    def __init__(self, label: str, price: str | None = None, failures: int = 0):
        super().__init__()
        self.label = label
        self.price = FixedPointPrice.parse(price) if price is not None else None
        self.failures = failures
        self.calls = 0

    async def fetch(self) -> FixedPointPrice:
        self.calls += 1
        if self.price is None or self.calls <= self.failures:
            raise SourceUnavailable(f"{self.label} is down")
        return self.price


class FakeChainClient(ChainClient):
    """In-memory chain that records submissions."""

    def __init__(self, height: int = 1000, height_failures: int = 0, submit_error: bool = False):
        self.height = height
        self.height_failures = height_failures
        self.submit_error = submit_error
        self.height_calls = 0
        self.submitted: list[bytes] = []

    def get_height(self) -> int:
        self.height_calls += 1
        if self.height_calls <= self.height_failures:
            raise NetworkError("height unavailable")
        return self.height

    def submit(self, envelope: bytes) -> SubmissionStatus:
        if self.submit_error:
            raise NetworkError("submission rejected")
        self.submitted.append(envelope)
        return SubmissionStatus(hash=f"hash{len(self.submitted)}")


@pytest.fixture
def no_delay() -> RetryPolicy:
    return RetryPolicy(max_attempts=3, fixed_delay=0)


@pytest.fixture
def signer() -> KeystoreSigner:
    return KeystoreSigner(Account.create())


@pytest.fixture
def chain() -> FakeChainClient:
    return FakeChainClient()
