"""Base price source interface and shared HTTP client management.

All price sources inherit from PriceSource and implement the fetch() method.
A shared httpx.AsyncClient is used across all sources to avoid connection overhead.

Sources never retry on their own; retrying is layered on top by RetryPolicy.

.. code-block:: python

    @register_source
    class MySource(PriceSource):
        name = "mysource"
        label = "My Source"

        async def fetch(self) -> FixedPointPrice:
            data = await self._get_json("https://api.example.com/hnt")
            return self._parse_field(data, "price")
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, ClassVar

import httpx

from ..errors import SourceHTTPError, SourceSchemaError, SourceUnavailable
from ..FixedPointPrice import FixedPointPrice

logger = logging.getLogger(__name__)


class PriceSource(ABC):
    """Abstract base class for price sources.

    Subclasses must implement:
        - name: Class variable identifying the source (e.g., "coingecko")
        - label: Human readable name used in log messages
        - fetch(): Async method returning the current quote

    :cvar name: Unique identifier for this source.
    :cvar label: Display name.
    :cvar DEFAULT_TIMEOUT: Default HTTP request timeout in seconds.
    :ivar timeout: Request timeout in seconds.
    """

    # Class-level shared HTTP client
    _shared_client: ClassVar[httpx.AsyncClient | None] = None

    name: ClassVar[str] = ""
    label: ClassVar[str] = ""

    DEFAULT_TIMEOUT = 10.0

    def __init__(self, timeout: float | None = None):
        """Initialize the source.

        :param timeout: Request timeout in seconds (default: 10).
        """
        self.timeout = timeout or self.DEFAULT_TIMEOUT

    def __str__(self) -> str:
        return self.label or self.name

    @classmethod
    def get_shared_client(cls) -> httpx.AsyncClient:
        """Get or create the shared HTTP client.

        The client is shared across all source instances to reuse connections.

        :returns: Shared httpx.AsyncClient instance.
        """
        if PriceSource._shared_client is None or PriceSource._shared_client.is_closed:
            PriceSource._shared_client = httpx.AsyncClient(
                timeout=httpx.Timeout(30.0, connect=10.0),
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
                follow_redirects=True,
            )
        return PriceSource._shared_client

    @classmethod
    async def close_shared_client(cls) -> None:
        """Close the shared HTTP client."""
        client = PriceSource._shared_client
        if client is not None and not client.is_closed:
            await client.aclose()
        PriceSource._shared_client = None

    @abstractmethod
    async def fetch(self) -> FixedPointPrice:
        """Fetch the current price.

        :returns: Quote rounded to 8 fractional digits.
        :raises SourceUnavailable: On network errors, timeouts or HTTP errors.
        :raises SourceSchemaError: If the response lacks the expected field.
        :raises InvalidPriceFormat: If the field is not a number.
        """
        pass

    async def _get(
        self,
        url: str,
        *,
        params: dict | None = None,
        headers: dict | None = None,
    ) -> httpx.Response:
        """Make an HTTP GET request using the shared client.

        :param url: Request URL.
        :param params: Optional query parameters.
        :param headers: Optional request headers.
        :returns: httpx.Response object.
        :raises SourceHTTPError: On non-2xx response.
        :raises SourceUnavailable: On network/timeout errors.
        """
        client = self.get_shared_client()
        try:
            response = await client.get(
                url,
                params=params,
                headers=headers,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise SourceUnavailable(f"[{self.name}] Request timeout: {e}") from e
        except httpx.RequestError as e:
            raise SourceUnavailable(f"[{self.name}] Request failed: {e}") from e

        if not response.is_success:
            logger.debug(
                "HTTP GET %s failed with status %s: %s",
                url,
                response.status_code,
                response.text[:200],
            )
            raise SourceHTTPError(response.status_code, response.text[:200])
        return response

    async def _get_json(self, url: str, *, params: dict | None = None) -> Any:
        """GET a JSON document, decoding numbers as Decimal.

        :param url: Request URL.
        :param params: Optional query parameters.
        :returns: Decoded JSON body.
        :raises SourceSchemaError: If the body is not valid JSON.
        """
        response = await self._get(url, params=params)
        try:
            return response.json(parse_float=Decimal)
        except ValueError as e:
            raise SourceSchemaError(f"[{self.name}] Response is not JSON: {e}") from e

    def _parse_field(
        self, data: Any, *path: str, require_string: bool = False
    ) -> FixedPointPrice:
        """Walk a JSON document and parse the price found at ``path``.

        :param data: Decoded JSON body.
        :param path: Keys leading to the price field.
        :param require_string: Reject values that are not JSON strings.
        :returns: Parsed price.
        :raises SourceSchemaError: If the field is missing or has the wrong type.
        """
        value = data
        for key in path:
            if not isinstance(value, dict) or key not in value:
                raise SourceSchemaError(
                    f"[{self.name}] Missing field {'.'.join(path)} in response"
                )
            value = value[key]

        if require_string and not isinstance(value, str):
            raise SourceSchemaError(
                f"[{self.name}] Field {'.'.join(path)} is not a string: {value!r}"
            )
        if isinstance(value, bool) or not isinstance(value, (str, int, Decimal)):
            raise SourceSchemaError(
                f"[{self.name}] Field {'.'.join(path)} is not a number: {value!r}"
            )
        return FixedPointPrice.parse(str(value))


# Registry of available sources (populated by subclass imports)
SOURCE_REGISTRY: dict[str, type[PriceSource]] = {}

# Names kept for backwards compatibility with older command lines.
SOURCE_ALIASES: dict[str, str] = {
    "binance": "binance-us",
}


def register_source(cls: type[PriceSource]) -> type[PriceSource]:
    """Decorator to register a source class in the global registry.

    :param cls: Source class to register.
    :returns: The registered class (unchanged).
    :raises ValueError: If source has no name defined.
    """
    if not cls.name:
        raise ValueError(f"Source {cls.__name__} must define a 'name' class variable")
    SOURCE_REGISTRY[cls.name] = cls
    return cls


def get_source(name: str, timeout: float | None = None) -> PriceSource:
    """Get a source instance by name (aliases included).

    Names are case-sensitive.

    :param name: Source name (e.g., "coingecko", "binance-us").
    :param timeout: Optional request timeout in seconds.
    :returns: Source instance.
    :raises ValueError: If source name is unknown.
    """
    name = SOURCE_ALIASES.get(name, name)
    if name not in SOURCE_REGISTRY:
        available = ", ".join(get_available_sources())
        raise ValueError(f"Unknown source '{name}'. Available: {available}")
    return SOURCE_REGISTRY[name](timeout=timeout)


def get_available_sources() -> list[str]:
    """Get list of available source names.

    :returns: Sorted list of registered source names.
    """
    return sorted(SOURCE_REGISTRY.keys())
