"""Reporter: One end-to-end price report.

Resolves the block height, builds the payload, signs it and optionally submits
it. Chain client calls are blocking and run in a worker thread, so a slow
node does not stall the event loop. Signing and submission are never retried:
a signing failure points at the wallet, and resubmission must stay under
operator control.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from .ChainClient import ChainClient
from .errors import NetworkError
from .FixedPointPrice import FixedPointPrice
from .ReportPayload import ReportBuilder, ReportPayload, SubmissionStatus
from .RetryPolicy import RetryPolicy
from .Signer import Signer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReportSummary:
    """Render-ready result of a report.

    :ivar payload: Signed payload.
    :ivar envelope: Serialized signed envelope.
    :ivar status: Submission status, or None if the report was not committed.
    """

    payload: ReportPayload
    envelope: bytes
    status: SubmissionStatus | None = None

    @property
    def price(self) -> FixedPointPrice:
        return FixedPointPrice.from_chain_units(self.payload.price)

    @property
    def block_height(self) -> int:
        return self.payload.block_height


class Reporter:
    """Builds, signs and submits price reports.

    :ivar chain_client: Chain access for height lookups and submission.
    :ivar signer: Signing capability.
    :ivar retry_policy: Policy for height lookups when retrying is requested.
    """

    def __init__(
        self,
        chain_client: ChainClient,
        signer: Signer,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.chain_client = chain_client
        self.signer = signer
        self.retry_policy = retry_policy or RetryPolicy()

    async def resolve_height(
        self, block_height: int | None = None, retry: bool = False
    ) -> int:
        """Return the explicit height or ask the chain for the latest one.

        :param block_height: Explicit height, or None for the latest.
        :param retry: Wrap the chain lookup in the retry policy.
        :returns: Block height to report at.
        :raises NetworkError: If the height cannot be fetched.
        """
        if block_height is not None:
            return block_height
        if not retry:
            return await asyncio.to_thread(self.chain_client.get_height)
        try:
            return await self.retry_policy.run(
                lambda: asyncio.to_thread(self.chain_client.get_height),
                description="get_height",
            )
        except NetworkError:
            raise
        except Exception as exc:
            raise NetworkError(f"Failed to fetch block height: {exc}") from exc

    async def build_and_submit(
        self,
        price: FixedPointPrice,
        block_height: int | None = None,
        commit: bool = True,
        retry_height: bool = False,
    ) -> ReportSummary:
        """Run one report.

        :param price: Price to report.
        :param block_height: Explicit height, or None for the latest.
        :param commit: Submit the signed envelope (otherwise only build it).
        :param retry_height: Retry the height lookup under the retry policy.
        :returns: Summary of the report.
        :raises PriceOverflow: If the price does not fit into chain units.
        :raises SigningError: If signing fails.
        :raises NetworkError: If the height lookup or submission fails.
        """
        height = await self.resolve_height(block_height, retry=retry_height)
        payload = ReportBuilder.build(price, height, self.signer.public_key)
        signed = self.signer.sign(payload)
        reported = FixedPointPrice.from_chain_units(payload.price)

        status: SubmissionStatus | None = None
        if commit:
            status = await asyncio.to_thread(self.chain_client.submit, signed.envelope)
            logger.info(
                f"Submitted price ${reported} @ block {height}. Hash: {status.hash}"
            )
        else:
            logger.info(f"Built price ${reported} @ block {height} (not committed)")

        return ReportSummary(payload=signed.payload, envelope=signed.envelope, status=status)
