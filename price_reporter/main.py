#!/usr/bin/env python3
"""Price Reporter.

Builds HNT/USD oracle price reports from a literal price, a single price
source, or a weighted average of several sources, signs them with an encrypted
keystore and submits them to the chain.

See ``price-reporter --help`` for the available commands.
"""

import argparse
import asyncio
import getpass
import logging
import os
import signal
import sys

from .src import (
    DEFAULT_API_URL,
    ChainClient,
    ChainClientApi,
    ChainClientLocalnet,
    FixedPointPrice,
    KeystoreSigner,
    Reporter,
    ReportSummary,
    RetryPolicy,
    ScheduleConfig,
    ScheduledReporter,
    Wallet,
    WeightedAggregator,
    Weights,
)
from .src.fetchers import PriceSource, get_available_sources, resolve_price
from .src.render import OUTPUT_FORMATS, render_summary

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

NETWORKS = ("mainnet", "localnet")

LATEST_BLOCK = ("auto", "latest")


def parse_block(value: str) -> int | None:
    """Parse a ``--block`` argument: a height, or "auto"/"latest" for None."""
    if value in LATEST_BLOCK:
        return None
    try:
        height = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"block must be a height or one of {', '.join(LATEST_BLOCK)}"
        ) from None
    if height < 0:
        raise argparse.ArgumentTypeError("block height must not be negative")
    return height


def get_password() -> str:
    """Read the wallet password from WALLET_PASSWORD or prompt for it."""
    password = os.environ.get("WALLET_PASSWORD")
    if password:
        return password
    return getpass.getpass("Password: ")


def unlock_wallet(path: str) -> KeystoreSigner:
    """Load and decrypt the wallet at ``path``."""
    wallet = Wallet.load(path)
    return wallet.decrypt(get_password())


def build_chain_client(args: argparse.Namespace) -> ChainClient:
    """Create the chain client for the selected network."""
    if args.network == "localnet":
        return ChainClientLocalnet()
    return ChainClientApi(args.api_url, timeout=args.fetch_timeout)


def add_weight_arguments(parser: argparse.ArgumentParser) -> None:
    """Add one weight option per named price source."""
    for option, label in (
        ("--binance-us", "Binance US"),
        ("--binance-int", "Binance International"),
        ("--bilaxy", "Bilaxy"),
        ("--coingecko", "Coingecko"),
    ):
        parser.add_argument(
            option,
            type=float,
            default=0.0,
            help=f"Weight given for {label} price (default: 0, source skipped)",
        )


def weights_from_args(args: argparse.Namespace) -> Weights:
    return Weights(
        binance_us=args.binance_us,
        binance_int=args.binance_int,
        bilaxy=args.bilaxy,
        coingecko=args.coingecko,
    )


def print_summary(summary: ReportSummary, output_format: str) -> None:
    print(render_summary(summary, output_format))


async def run_report(args: argparse.Namespace, retry_policy: RetryPolicy) -> None:
    """Report a literal price or the quote of a single source."""
    signer = unlock_wallet(args.wallet)
    source = resolve_price(args.price, timeout=args.fetch_timeout)
    price: FixedPointPrice = await retry_policy.run(
        source.fetch, description=f"[{source.name}] fetch"
    )

    reporter = Reporter(build_chain_client(args), signer, retry_policy)
    summary = await reporter.build_and_submit(price, args.block, commit=args.commit)
    print_summary(summary, args.format)


async def run_report_weighted_average(
    args: argparse.Namespace, retry_policy: RetryPolicy
) -> None:
    """Report the weighted average of the named sources."""
    weights = weights_from_args(args)
    aggregator = WeightedAggregator(retry_policy)
    result = await aggregator.aggregate_weights(weights, timeout=args.fetch_timeout)

    chain_client = build_chain_client(args)
    block_height = args.block
    if block_height is None:
        block_height = await asyncio.to_thread(chain_client.get_height)

    print(f"Report price {result.price} @ block height {block_height}?")
    print("Enter password to confirm.")
    signer = unlock_wallet(args.wallet)

    reporter = Reporter(chain_client, signer, retry_policy)
    summary = await reporter.build_and_submit(result.price, block_height, commit=True)
    print_summary(summary, args.format)


async def run_automate(args: argparse.Namespace, retry_policy: RetryPolicy) -> None:
    """Report weighted averages forever with randomized delays."""
    weights = weights_from_args(args)
    schedule = ScheduleConfig(
        delay_mean=args.delay,
        delay_std_dev=args.std_dev,
        delay_floor=args.min,
    )

    print(f"Starting oracle report automation with the following weights:\n{weights}")
    print("Enter password to start utility.")
    signer = unlock_wallet(args.wallet)

    scheduled = ScheduledReporter(
        aggregator=WeightedAggregator(retry_policy),
        reporter=Reporter(build_chain_client(args), signer, retry_policy),
        weights=weights,
        schedule=schedule,
        on_report=lambda summary: print_summary(summary, args.format),
        continue_on_submit_error=args.keep_going,
        fetch_timeout=args.fetch_timeout,
    )

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGTERM, stop_event.set)
    except NotImplementedError:
        # Signal handlers are unavailable on some platforms (Windows)
        pass

    await scheduled.run(stop_event)


COMMANDS = {
    "report": run_report,
    "report-weighted-average": run_report_weighted_average,
    "automate": run_automate,
}


async def run_command(args: argparse.Namespace) -> None:
    retry_policy = RetryPolicy(
        max_attempts=args.retry_attempts,
        fixed_delay=args.retry_delay,
    )
    try:
        await COMMANDS[args.command](args, retry_policy)
    finally:
        # Clean up shared HTTP client
        await PriceSource.close_shared_client()


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    available_sources = get_available_sources()

    parser = argparse.ArgumentParser(
        prog="price-reporter",
        description="Price Reporter: Weighted HNT/USD oracle price reports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Available price sources:
  {', '.join(available_sources)} (binance is an alias of binance-us)

Examples:
  # Build (but do not submit) a report at the latest block
  price-reporter report --price 1.25 --block auto

  # Report the Binance US price and submit it
  price-reporter report --price binance-us --block auto --commit

  # Submit a weighted average of two sources
  price-reporter report-weighted-average --binance-us 2 --coingecko 1

  # Report every few minutes, unattended
  price-reporter automate --delay 15 --std-dev 8 --min 8 --coingecko 1

Environment variables (CLI args take precedence):
  WALLET, WALLET_PASSWORD, NETWORK, API_URL, RPC_URL, FETCH_TIMEOUT,
  RETRY_ATTEMPTS, RETRY_DELAY
""",
    )

    parser.add_argument(
        "--wallet",
        type=str,
        help="Path to the encrypted keystore (default: wallet.json)",
        default=os.environ.get("WALLET") or "wallet.json",
    )

    parser.add_argument(
        "--network",
        type=str,
        choices=NETWORKS,
        help="Network to report to (default: mainnet)",
        default=os.environ.get("NETWORK") or "mainnet",
    )

    parser.add_argument(
        "--api-url",
        dest="api_url",
        type=str,
        help=f"Blockchain API URL (default: {DEFAULT_API_URL})",
        default=os.environ.get("API_URL") or DEFAULT_API_URL,
    )

    parser.add_argument(
        "--format",
        type=str,
        choices=OUTPUT_FORMATS,
        help="Output format (default: table)",
        default="table",
    )

    parser.add_argument(
        "--fetch-timeout",
        dest="fetch_timeout",
        type=float,
        help="Timeout for individual requests in seconds (default: 10.0)",
        default=float(os.environ.get("FETCH_TIMEOUT") or "10.0"),
    )

    parser.add_argument(
        "--retry-attempts",
        dest="retry_attempts",
        type=int,
        help="Attempts per price fetch / height lookup (default: 10)",
        default=int(os.environ.get("RETRY_ATTEMPTS") or "10"),
    )

    parser.add_argument(
        "--retry-delay",
        dest="retry_delay",
        type=float,
        help="Seconds between attempts (default: 1.0)",
        default=float(os.environ.get("RETRY_DELAY") or "1.0"),
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    report = subparsers.add_parser(
        "report",
        help="Construct an oracle price report and optionally commit it",
    )
    report.add_argument(
        "--price",
        type=str,
        required=True,
        help="Price in USD, or one of the price sources "
        f"({', '.join(available_sources)}, binance)",
    )
    report.add_argument(
        "--block",
        type=parse_block,
        required=True,
        help='Block height to report at, or "auto"/"latest" for the latest block',
    )
    report.add_argument(
        "--commit",
        action="store_true",
        help="Commit the oracle price report to the chain",
    )

    weighted = subparsers.add_parser(
        "report-weighted-average",
        help="Report a weighted average of prices (weights are arbitrary floats)",
    )
    weighted.add_argument(
        "--block",
        type=parse_block,
        default=None,
        help="Block height to report at (default: latest)",
    )
    add_weight_arguments(weighted)

    automate = subparsers.add_parser(
        "automate",
        help="Report weighted averages repeatedly with randomized delays",
    )
    automate.add_argument(
        "--delay",
        type=float,
        default=15,
        help="Average delay between price submissions in minutes (default: 15)",
    )
    automate.add_argument(
        "--std-dev",
        dest="std_dev",
        type=float,
        default=8,
        help="Standard deviation of the delay in minutes (default: 8)",
    )
    automate.add_argument(
        "--min",
        type=float,
        default=8,
        help="Clamp applied to each sampled delay, min(min, sample) (default: 8)",
    )
    automate.add_argument(
        "--keep-going",
        dest="keep_going",
        action="store_true",
        help="Log failed submissions and continue instead of exiting",
    )
    add_weight_arguments(automate)

    return parser


def main() -> None:
    """Main entry point for the Price Reporter CLI."""
    parser = build_parser()
    args = parser.parse_args()

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    # Validate arguments
    if args.fetch_timeout <= 0:
        parser.error("--fetch-timeout must be positive")

    if args.retry_attempts < 1:
        parser.error("--retry-attempts must be at least 1")

    if args.retry_delay < 0:
        parser.error("--retry-delay must not be negative")

    logger.debug(f"Command: {args.command}, network: {args.network}")

    try:
        asyncio.run(run_command(args))
    except KeyboardInterrupt:
        logger.info("Shutting down...")
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
