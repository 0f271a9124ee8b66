"""Unit tests for ScheduledReporter."""

import asyncio
import random
from unittest.mock import AsyncMock, patch

import pytest
from conftest import FakeChainClient

from price_reporter.src.errors import ConfigurationError, NetworkError, NoViableSources
from price_reporter.src.FixedPointPrice import FixedPointPrice
from price_reporter.src.Reporter import Reporter
from price_reporter.src.RetryPolicy import RetryPolicy
from price_reporter.src.ScheduledReporter import (
    ReporterState,
    ScheduleConfig,
    ScheduledReporter,
)
from price_reporter.src.Signer import KeystoreSigner
from price_reporter.src.WeightedAggregator import AggregationResult, Weights


class FakeAggregator:
    """Aggregator returning a fixed result or raising NoViableSources."""

    def __init__(self, price: str | None = "2.5"):
        self.price = price
        self.calls = 0
        self.timeouts: list = []

    async def aggregate_weights(self, weights, timeout=None) -> AggregationResult:
        self.calls += 1
        self.timeouts.append(timeout)
        if self.price is None:
            raise NoViableSources("nothing responded")
        return AggregationResult(price=FixedPointPrice.parse(self.price), total_weight=1.0)


def make_scheduled(
    chain: FakeChainClient,
    signer: KeystoreSigner,
    no_delay: RetryPolicy,
    aggregator: FakeAggregator | None = None,
    **kwargs,
) -> ScheduledReporter:
    kwargs.setdefault("schedule", ScheduleConfig(delay_mean=0, delay_std_dev=0, delay_floor=0))
    return ScheduledReporter(
        aggregator or FakeAggregator(),
        Reporter(chain, signer, no_delay),
        Weights(coingecko=1),
        rng=random.Random(1),
        **kwargs,
    )


class TestDelay:
    """Test delay sampling and clamping."""

    @pytest.mark.parametrize(
        ("sample", "expected"),
        [(20.0, 8), (3.0, 3), (-5.0, 0), (7.9, 7), (8.0, 8), (float("nan"), 0)],
    )
    def test_clamp(self, sample: float, expected: int) -> None:
        """Samples are clamped to min(floor, max(0, sample)) and truncated."""
        scheduled = ScheduledReporter(
            FakeAggregator(), None, Weights(), schedule=ScheduleConfig(15, 8, 8)
        )
        assert scheduled.compute_delay_minutes(sample) == expected

    def test_samples_within_bounds(self) -> None:
        scheduled = ScheduledReporter(
            FakeAggregator(), None, Weights(), rng=random.Random(7)
        )
        delays = [scheduled.next_delay_minutes() for _ in range(500)]
        assert all(0 <= delay <= 8 for delay in delays)
        assert all(isinstance(delay, int) for delay in delays)

    def test_default_schedule(self) -> None:
        schedule = ScheduleConfig()
        assert (schedule.delay_mean, schedule.delay_std_dev, schedule.delay_floor) == (15, 8, 8)

    @pytest.mark.parametrize(
        "kwargs",
        [{"delay_mean": -1}, {"delay_std_dev": float("nan")}, {"delay_floor": float("inf")}],
    )
    def test_invalid_schedule(self, kwargs: dict) -> None:
        with pytest.raises(ConfigurationError):
            ScheduleConfig(**kwargs)


class TestRunCycle:
    """Test a single aggregation and report cycle."""

    def test_reports_average_at_latest_height(
        self, chain: FakeChainClient, signer: KeystoreSigner, no_delay: RetryPolicy
    ) -> None:
        reports = []
        scheduled = make_scheduled(chain, signer, no_delay, on_report=reports.append)
        summary = asyncio.run(scheduled.run_cycle())

        assert summary.price == FixedPointPrice.parse("2.5")
        assert summary.block_height == 1000
        assert chain.submitted == [summary.envelope]
        assert reports == [summary]

    def test_fetch_timeout_passed_to_aggregator(
        self, chain: FakeChainClient, signer: KeystoreSigner, no_delay: RetryPolicy
    ) -> None:
        aggregator = FakeAggregator()
        scheduled = make_scheduled(chain, signer, no_delay, aggregator, fetch_timeout=3.0)
        asyncio.run(scheduled.run_cycle())
        assert aggregator.timeouts == [3.0]

    def test_height_lookup_retried(
        self, signer: KeystoreSigner, no_delay: RetryPolicy
    ) -> None:
        chain = FakeChainClient(height_failures=2)
        summary = asyncio.run(make_scheduled(chain, signer, no_delay).run_cycle())
        assert summary.block_height == 1000
        assert chain.height_calls == 3

    def test_no_viable_sources_propagates(
        self, chain: FakeChainClient, signer: KeystoreSigner, no_delay: RetryPolicy
    ) -> None:
        scheduled = make_scheduled(chain, signer, no_delay, FakeAggregator(price=None))
        with pytest.raises(NoViableSources):
            asyncio.run(scheduled.run_cycle())
        assert chain.submitted == []

    def test_submit_error_is_fatal_by_default(
        self, signer: KeystoreSigner, no_delay: RetryPolicy
    ) -> None:
        chain = FakeChainClient(submit_error=True)
        with pytest.raises(NetworkError):
            asyncio.run(make_scheduled(chain, signer, no_delay).run_cycle())

    def test_submit_error_tolerated(
        self, signer: KeystoreSigner, no_delay: RetryPolicy, caplog
    ) -> None:
        chain = FakeChainClient(submit_error=True)
        reports = []
        scheduled = make_scheduled(
            chain,
            signer,
            no_delay,
            continue_on_submit_error=True,
            on_report=reports.append,
        )
        assert asyncio.run(scheduled.run_cycle()) is None
        assert reports == []
        assert "Submission failed" in caplog.text


class TestRun:
    """Test the automation loop."""

    def test_max_cycles(
        self, chain: FakeChainClient, signer: KeystoreSigner, no_delay: RetryPolicy
    ) -> None:
        aggregator = FakeAggregator()
        scheduled = make_scheduled(chain, signer, no_delay, aggregator)
        asyncio.run(scheduled.run(max_cycles=3))

        assert scheduled.cycles == 3
        assert aggregator.calls == 3
        assert len(chain.submitted) == 3
        assert scheduled.state == ReporterState.IDLE

    def test_stop_event_already_set(
        self, chain: FakeChainClient, signer: KeystoreSigner, no_delay: RetryPolicy
    ) -> None:
        aggregator = FakeAggregator()
        scheduled = make_scheduled(chain, signer, no_delay, aggregator)

        async def run() -> None:
            stop = asyncio.Event()
            stop.set()
            await scheduled.run(stop_event=stop)

        asyncio.run(run())
        assert aggregator.calls == 0
        assert scheduled.cycles == 0

    def test_stop_event_wakes_sleep(
        self, chain: FakeChainClient, signer: KeystoreSigner, no_delay: RetryPolicy
    ) -> None:
        """Setting the stop event ends the loop during a long sleep."""
        scheduled = make_scheduled(
            chain,
            signer,
            no_delay,
            schedule=ScheduleConfig(delay_mean=60, delay_std_dev=0, delay_floor=60),
        )

        async def run() -> None:
            stop = asyncio.Event()
            scheduled.on_report = lambda summary: stop.set()
            await asyncio.wait_for(scheduled.run(stop_event=stop), timeout=5)

        asyncio.run(run())
        assert scheduled.cycles == 1
        assert scheduled.state == ReporterState.IDLE

    def test_sleeps_computed_delay(
        self, chain: FakeChainClient, signer: KeystoreSigner, no_delay: RetryPolicy
    ) -> None:
        """The loop sleeps the sampled number of whole minutes."""
        scheduled = make_scheduled(
            chain,
            signer,
            no_delay,
            schedule=ScheduleConfig(delay_mean=5, delay_std_dev=0, delay_floor=8),
        )
        with patch.object(scheduled, "_sleep", new=AsyncMock()) as sleep:
            asyncio.run(scheduled.run(max_cycles=2))

        assert sleep.await_count == 1
        assert sleep.call_args.args[1] == 300

    def test_error_ends_loop_and_resets_state(
        self, chain: FakeChainClient, signer: KeystoreSigner, no_delay: RetryPolicy
    ) -> None:
        scheduled = make_scheduled(chain, signer, no_delay, FakeAggregator(price=None))
        with pytest.raises(NoViableSources):
            asyncio.run(scheduled.run())
        assert scheduled.state == ReporterState.IDLE
        assert scheduled.cycles == 0
