"""
Price Reporter - Weighted Oracle Price Reports

This module provides the pieces of an oracle price report:
- FixedPointPrice: Exact decimal prices and chain units
- fetchers: Per-upstream price sources
- RetryPolicy: Bounded fixed-delay retries
- WeightedAggregator: Weighted average with exclusion of failing sources
- Reporter: Build, sign and submit one report
- ScheduledReporter: Unattended loop with randomized pacing
"""

from .ChainClient import ChainClient
from .ChainClientApi import DEFAULT_API_URL, ChainClientApi
from .ChainClientLocalnet import ChainClientLocalnet
from .errors import (
    AuthenticationError,
    ConfigurationError,
    InvalidPriceFormat,
    NetworkError,
    NoViableSources,
    OracleError,
    PriceOverflow,
    SigningError,
    SourceError,
    SourceHTTPError,
    SourceSchemaError,
    SourceUnavailable,
)
from .FixedPointPrice import NUM_DECIMALS, FixedPointPrice
from .ReportPayload import ReportBuilder, ReportPayload, SignedReport, SubmissionStatus
from .Reporter import Reporter, ReportSummary
from .RetryPolicy import RetryPolicy, run_with_retry
from .ScheduledReporter import ReporterState, ScheduleConfig, ScheduledReporter
from .Signer import KeystoreSigner, Signer, Wallet
from .WeightedAggregator import AggregationResult, WeightedAggregator, Weights

__all__ = [
    "AggregationResult",
    "AuthenticationError",
    "ChainClient",
    "ChainClientApi",
    "ChainClientLocalnet",
    "ConfigurationError",
    "DEFAULT_API_URL",
    "FixedPointPrice",
    "InvalidPriceFormat",
    "KeystoreSigner",
    "NUM_DECIMALS",
    "NetworkError",
    "NoViableSources",
    "OracleError",
    "PriceOverflow",
    "ReportBuilder",
    "ReportPayload",
    "ReportSummary",
    "Reporter",
    "ReporterState",
    "RetryPolicy",
    "ScheduleConfig",
    "ScheduledReporter",
    "SignedReport",
    "Signer",
    "SigningError",
    "SourceError",
    "SourceHTTPError",
    "SourceSchemaError",
    "SourceUnavailable",
    "SubmissionStatus",
    "Wallet",
    "WeightedAggregator",
    "Weights",
    "run_with_retry",
]
