"""ChainClientApi: Chain client for the public blockchain REST API."""

import base64
import logging
from typing import Any

import httpx

from .ChainClient import ChainClient
from .errors import NetworkError
from .ReportPayload import SubmissionStatus

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.helium.io"


class ChainClientApi(ChainClient):
    """Chain client talking to the blockchain API over HTTP.

    Endpoints:
        - GET  /v1/blocks/height            -> {"data": {"height": N}}
        - POST /v1/pending_transactions     {"txn": <base64>} -> {"data": {"hash": ...}}

    :ivar url: API base URL.
    :ivar timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        url: str = DEFAULT_API_URL,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the API client.

        :param url: API base URL.
        :param timeout: Request timeout in seconds.
        :param transport: Optional transport override.
        """
        self.url = url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _request(self, method: str, path: str, payload: Any = None) -> Any:
        """Send a request to the API and return the ``data`` member.

        :param method: HTTP method.
        :param path: API endpoint path.
        :param payload: Optional JSON payload.
        :returns: Decoded ``data`` member of the response.
        :raises NetworkError: On transport errors, non-2xx or malformed responses.
        """
        with httpx.Client(transport=self.transport, timeout=self.timeout) as client:
            try:
                logger.debug("%s %s", method, path)
                response = client.request(method, self.url + path, json=payload)
            except httpx.RequestError as exc:
                raise NetworkError(f"{method} {path} failed: {exc}") from exc

        logger.debug("Response: %s %s", response.status_code, response.reason_phrase)
        if not response.is_success:
            raise NetworkError(
                f"{method} {path} failed: {response.status_code} "
                f"{response.text[:200]}"
            )

        try:
            return response.json()["data"]
        except (ValueError, KeyError, TypeError) as exc:
            raise NetworkError(f"{method} {path} returned malformed data: {exc}") from exc

    def get_height(self) -> int:
        """Fetch the current block height from the API.

        :returns: Latest block height.
        """
        data = self._request("GET", "/v1/blocks/height")
        try:
            return int(data["height"])
        except (KeyError, ValueError, TypeError) as exc:
            raise NetworkError(f"Unexpected height response: {data!r}") from exc

    def submit(self, envelope: bytes) -> SubmissionStatus:
        """Submit a signed envelope as a pending transaction.

        :param envelope: Serialized signed report.
        :returns: Pending transaction status.
        """
        txn = base64.b64encode(envelope).decode("ascii")
        data = self._request("POST", "/v1/pending_transactions", {"txn": txn})
        try:
            return SubmissionStatus(hash=str(data["hash"]))
        except (KeyError, TypeError) as exc:
            raise NetworkError(f"Unexpected submission response: {data!r}") from exc
