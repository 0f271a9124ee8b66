"""Signer: Wallet decryption and report signing.

The reporter only depends on the abstract :class:`Signer`. The concrete
implementation decrypts an Ethereum keystore file with eth_account and signs
the unsigned payload with EIP-191 personal-sign.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount

from .errors import AuthenticationError, ConfigurationError, SigningError
from .ReportPayload import ReportPayload, SignedReport

logger = logging.getLogger(__name__)


class Signer(ABC):
    """Abstract signing capability."""

    @property
    @abstractmethod
    def public_key(self) -> bytes:
        """Public key embedded into every payload."""
        pass

    @abstractmethod
    def sign(self, payload: ReportPayload) -> SignedReport:
        """Sign a payload.

        :param payload: Unsigned payload.
        :returns: Signed payload and its serialized envelope.
        :raises SigningError: If the payload cannot be signed.
        """
        pass


class KeystoreSigner(Signer):
    """Signs reports with a decrypted local account.

    :ivar account: Decrypted eth_account LocalAccount.
    """

    def __init__(self, account: LocalAccount) -> None:
        self.account = account

    @property
    def address(self) -> str:
        return self.account.address

    @property
    def public_key(self) -> bytes:
        return bytes.fromhex(self.account.address[2:])

    def sign(self, payload: ReportPayload) -> SignedReport:
        try:
            message = encode_defunct(primitive=payload.unsigned_bytes())
            signed = self.account.sign_message(message)
        except Exception as e:
            raise SigningError(f"Failed to sign report: {e}") from e

        signed_payload = payload.with_signature(bytes(signed.signature))
        return SignedReport(payload=signed_payload, envelope=signed_payload.to_envelope())


class Wallet:
    """Encrypted keystore file (Web3 Secret Storage format).

    :ivar path: Location of the keystore file.
    :ivar keystore: Parsed keystore JSON.
    """

    def __init__(self, keystore: dict, path: Path | None = None) -> None:
        self.keystore = keystore
        self.path = path

    @classmethod
    def load(cls, path: str | Path) -> Wallet:
        """Load a keystore file.

        :param path: Path to the keystore JSON.
        :returns: Wallet wrapping the keystore.
        :raises ConfigurationError: If the file is missing or not a keystore.
        """
        path = Path(path)
        try:
            with open(path, "r") as file:
                keystore = json.load(file)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Wallet file not found: {path}") from e
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Failed to read wallet {path}: {e}") from e

        if not isinstance(keystore, dict) or "crypto" not in keystore:
            raise ConfigurationError(f"{path} is not an encrypted keystore")
        return cls(keystore, path)

    def decrypt(self, password: str) -> KeystoreSigner:
        """Decrypt the keystore into a signer.

        :param password: Keystore password.
        :returns: Signer holding the decrypted account.
        :raises AuthenticationError: If the password is wrong or the keystore corrupt.
        """
        try:
            private_key = Account.decrypt(self.keystore, password)
        except (ValueError, KeyError, TypeError) as e:
            raise AuthenticationError(f"Failed to decrypt wallet: {e}") from e

        account: LocalAccount = Account.from_key(private_key)
        logger.info(f"Wallet unlocked for {account.address}")
        return KeystoreSigner(account)
