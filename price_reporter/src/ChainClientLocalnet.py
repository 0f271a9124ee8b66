"""ChainClientLocalnet: Chain client for a local development node."""

import logging
import os

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.middleware import SignAndSendRawMiddlewareBuilder

from .ChainClient import ChainClient
from .errors import NetworkError
from .ReportPayload import SubmissionStatus

logger = logging.getLogger(__name__)

# Well-known first account of local development nodes (anvil/hardhat).
LOCALNET_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"


class ChainClientLocalnet(ChainClient):
    """Chain client implementation for localnet development.

    Reports are posted as calldata of a zero-value transaction to the funding
    account itself, so they can be inspected with any block explorer.

    :ivar w3: Web3 instance for transaction submission.
    """

    def __init__(self, w3: Web3 | None = None) -> None:
        """Initialize the localnet client.

        :param w3: Optional Web3 instance. Creates default if not provided.
        """
        if w3 is None:
            rpc_url = os.environ.get("RPC_URL", "http://localhost:8545")
            w3 = Web3(Web3.HTTPProvider(rpc_url))
            account: LocalAccount = Account.from_key(LOCALNET_KEY)
            w3.middleware_onion.add(SignAndSendRawMiddlewareBuilder.build(account))
            w3.eth.default_account = account.address
        self.w3 = w3

    def get_height(self) -> int:
        """Return the latest block number of the node."""
        try:
            return int(self.w3.eth.block_number)
        except Exception as exc:
            raise NetworkError(f"Failed to fetch block number: {exc}") from exc

    def submit(self, envelope: bytes) -> SubmissionStatus:
        """Post the envelope as calldata and wait for the receipt.

        :param envelope: Serialized signed report.
        :returns: Status carrying the transaction hash.
        :raises NetworkError: If sending fails or the transaction reverts.
        """
        sender = self.w3.eth.default_account
        try:
            tx_hash = self.w3.eth.send_transaction(
                {"from": sender, "to": sender, "value": 0, "data": envelope}
            )
            tx_receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash)
        except Exception as exc:
            raise NetworkError(f"Failed to submit report: {exc}") from exc

        if tx_receipt["status"] != 1:
            raise NetworkError(f"Report transaction {tx_hash.hex()} failed")
        return SubmissionStatus(hash=tx_hash.hex())
