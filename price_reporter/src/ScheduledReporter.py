"""ScheduledReporter: Unattended weighted-average reporting loop.

Each cycle aggregates the weighted sources, reports the result at the latest
block height and then sleeps for a randomized number of minutes drawn from a
normal distribution.

States::

    IDLE -> AGGREGATING -> REPORTING -> SLEEPING -> AGGREGATING -> ...

The loop runs until ``stop_event`` is set or ``max_cycles`` cycles are done.
NoViableSources and height lookup failures end the loop; a misconfigured
weight set or an unreachable chain will not fix itself.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import math
import random
from dataclasses import dataclass
from typing import Callable

from .errors import ConfigurationError, NetworkError
from .Reporter import Reporter, ReportSummary
from .WeightedAggregator import WeightedAggregator, Weights

logger = logging.getLogger(__name__)


class ReporterState(enum.Enum):
    IDLE = "idle"
    AGGREGATING = "aggregating"
    REPORTING = "reporting"
    SLEEPING = "sleeping"


@dataclass(frozen=True)
class ScheduleConfig:
    """Randomized delay parameters, in minutes.

    :ivar delay_mean: Mean of the delay distribution.
    :ivar delay_std_dev: Standard deviation of the delay distribution.
    :ivar delay_floor: Clamp applied to every sample as ``min(floor, sample)``.
    """

    delay_mean: float = 15
    delay_std_dev: float = 8
    delay_floor: float = 8

    def __post_init__(self) -> None:
        for name in ("delay_mean", "delay_std_dev", "delay_floor"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise ConfigurationError(
                    f"{name} must be a non-negative number of minutes, got {value}"
                )


class ScheduledReporter:
    """Drives Reporter in a loop with randomized pacing.

    :ivar aggregator: Weighted aggregator used every cycle.
    :ivar reporter: Reporter used to sign and submit.
    :ivar weights: Per-source weights.
    :ivar schedule: Delay configuration.
    :ivar state: Current loop state.
    :ivar cycles: Number of completed cycles.
    """

    def __init__(
        self,
        aggregator: WeightedAggregator,
        reporter: Reporter,
        weights: Weights,
        schedule: ScheduleConfig | None = None,
        rng: random.Random | None = None,
        on_report: Callable[[ReportSummary], None] | None = None,
        continue_on_submit_error: bool = False,
        fetch_timeout: float | None = None,
    ) -> None:
        """Initialize the scheduled reporter.

        :param aggregator: Weighted aggregator.
        :param reporter: Reporter holding the unlocked signer.
        :param weights: Per-source weights.
        :param schedule: Delay configuration (default: mean 15, std-dev 8, floor 8).
        :param rng: Random generator for delay sampling.
        :param on_report: Called with every completed report.
        :param continue_on_submit_error: Log submission failures and keep
            running instead of stopping the loop.
        :param fetch_timeout: Request timeout for each source.
        """
        self.aggregator = aggregator
        self.reporter = reporter
        self.weights = weights
        self.schedule = schedule or ScheduleConfig()
        self.rng = rng or random.Random()
        self.on_report = on_report
        self.continue_on_submit_error = continue_on_submit_error
        self.fetch_timeout = fetch_timeout

        self.state = ReporterState.IDLE
        self.cycles = 0

    def compute_delay_minutes(self, sample: float) -> int:
        """Clamp a sampled delay and truncate it to whole minutes.

        The clamp is ``min(floor, sample)``, so the floor caps the delay.
        Negative samples become 0.

        :param sample: Delay drawn from the distribution, in minutes.
        :returns: Whole minutes to sleep.
        """
        if math.isnan(sample):
            sample = 0.0
        minutes = min(self.schedule.delay_floor, max(0.0, sample))
        return int(minutes)

    def next_delay_minutes(self) -> int:
        """Draw the next delay from the configured normal distribution."""
        sample = self.rng.gauss(self.schedule.delay_mean, self.schedule.delay_std_dev)
        return self.compute_delay_minutes(sample)

    async def run_cycle(self) -> ReportSummary | None:
        """Aggregate, report and return the summary.

        :returns: The report summary, or None if a tolerated submission error occurred.
        :raises NoViableSources: If no weighted source responds.
        :raises NetworkError: If the height lookup fails (or submission, unless tolerated).
        """
        self.state = ReporterState.AGGREGATING
        result = await self.aggregator.aggregate_weights(
            self.weights, timeout=self.fetch_timeout
        )
        logger.info(
            f"Weighted average ${result.price} "
            f"(effective weight {result.total_weight:g}, excluded: {result.excluded or 'none'})"
        )

        self.state = ReporterState.REPORTING
        height = await self.reporter.resolve_height(retry=True)
        try:
            summary = await self.reporter.build_and_submit(result.price, height)
        except NetworkError as exc:
            if not self.continue_on_submit_error:
                raise
            logger.error(f"Submission failed, retrying next cycle: {exc}")
            return None

        if self.on_report is not None:
            self.on_report(summary)
        return summary

    async def run(
        self,
        stop_event: asyncio.Event | None = None,
        max_cycles: int | None = None,
    ) -> None:
        """Run report cycles until stopped.

        :param stop_event: Setting this event ends the loop, waking it from sleep.
        :param max_cycles: Optional number of cycles after which to stop.
        """
        stop_event = stop_event or asyncio.Event()
        logger.info(f"Starting oracle report automation with weights: {self.weights}")

        try:
            while not stop_event.is_set():
                await self.run_cycle()
                self.cycles += 1
                if max_cycles is not None and self.cycles >= max_cycles:
                    break

                self.state = ReporterState.SLEEPING
                delay = self.next_delay_minutes()
                logger.info(f"Next report will be in {delay} minutes")
                await self._sleep(stop_event, delay * 60)
        finally:
            self.state = ReporterState.IDLE

    async def _sleep(self, stop_event: asyncio.Event, seconds: float) -> None:
        """Wait for ``seconds`` or until ``stop_event`` is set, whichever is first."""
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass
