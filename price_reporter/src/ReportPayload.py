"""ReportPayload: The price oracle report and its signed envelope.

The payload is encoded as CBOR. The unsigned encoding (no signature field) is
what the reporter signs; the envelope carries every field plus the signature.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

import cbor2

from .FixedPointPrice import FixedPointPrice

# Transaction kind tag written into every envelope.
TXN_TYPE = "price_oracle_v1"


@dataclass(frozen=True)
class ReportPayload:
    """Price oracle report.

    :ivar price: Price in chain units (8 implied decimals).
    :ivar block_height: Block height the price is reported at.
    :ivar public_key: Reporter public key (address bytes).
    :ivar signature: Signature over ``unsigned_bytes()``, empty until signed.
    """

    price: int
    block_height: int
    public_key: bytes = b""
    signature: bytes = b""

    @property
    def is_signed(self) -> bool:
        return len(self.signature) > 0

    def _fields(self) -> dict:
        return {
            "type": TXN_TYPE,
            "public_key": self.public_key,
            "price": self.price,
            "block_height": self.block_height,
        }

    def unsigned_bytes(self) -> bytes:
        """Canonical CBOR encoding of the signable fields."""
        return cbor2.dumps(self._fields(), canonical=True)

    def with_signature(self, signature: bytes) -> ReportPayload:
        """Return a signed copy of this payload."""
        return replace(self, signature=bytes(signature))

    def to_envelope(self) -> bytes:
        """CBOR encoding of the full payload including the signature."""
        return cbor2.dumps({**self._fields(), "signature": self.signature}, canonical=True)

    @classmethod
    def from_envelope(cls, envelope: bytes) -> ReportPayload:
        """Decode an envelope produced by ``to_envelope()``.

        :raises ValueError: If the envelope is not a price oracle report.
        """
        data = cbor2.loads(envelope)
        if not isinstance(data, dict) or data.get("type") != TXN_TYPE:
            raise ValueError("Envelope is not a price oracle report")
        return cls(
            price=data["price"],
            block_height=data["block_height"],
            public_key=data["public_key"],
            signature=data["signature"],
        )


@dataclass(frozen=True)
class SignedReport:
    """Output of a Signer: the signed payload and its serialized envelope."""

    payload: ReportPayload
    envelope: bytes


@dataclass(frozen=True)
class SubmissionStatus:
    """Pending status returned by the chain after a submission.

    :ivar hash: Transaction hash or identifier.
    """

    hash: str


class ReportBuilder:
    """Builds unsigned report payloads."""

    @staticmethod
    def build(
        price: FixedPointPrice, block_height: int, public_key: bytes = b""
    ) -> ReportPayload:
        """Build an unsigned payload.

        :param price: Price to report.
        :param block_height: Block height to report at.
        :param public_key: Reporter public key.
        :returns: Unsigned ReportPayload.
        :raises PriceOverflow: If the price does not fit into chain units.
        """
        return ReportPayload(
            price=price.to_chain_units(),
            block_height=block_height,
            public_key=public_key,
        )
