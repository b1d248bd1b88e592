"""HTTP quote service client.

Implements the quote source interface over a REST endpoint:

    GET {base_url}/quotes/{SYMBOL} -> {"symbol": "AAPL", "name": "Apple Inc.", "price": 150.0}

A 404 means the symbol is not listed and is reported as ``None`` like any
other quote source. Transient failures are retried with backoff.
"""

import logging
from typing import Any, Optional

import requests
from tenacity import (
    after_log,
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.models.quote import Quote, normalize_symbol

logger = logging.getLogger(__name__)


class NetworkError(Exception):
    """Raised when the quote service cannot be reached."""

    pass


class APIError(Exception):
    """Raised when the service returns a retryable error response (429, 5xx)."""

    pass


class ClientError(Exception):
    """Raised for non-retryable errors (400, 401, malformed payloads, etc.)."""

    pass


class QuoteAPIClient:
    """Quote source backed by an HTTP quote service.

    Each ``lookup`` is a fresh request; quotes are never cached, so two
    lookups may return different prices.
    """

    def __init__(self, base_url: str, timeout: int = 10):
        """
        Args:
            base_url: Service root, e.g. "https://quotes.example.com/v1"
            timeout: Request timeout in seconds (default: 10)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers["Accept"] = "application/json"

    def lookup(self, symbol: str) -> Optional[Quote]:
        """Fetch the current quote for a symbol.

        Returns:
            Quote or None if the service does not list the symbol

        Raises:
            NetworkError: If the service is unreachable after retries
            APIError: If the service keeps failing after retries
            ClientError: For non-retryable errors or malformed quotes
        """
        if not symbol or not symbol.strip():
            return None

        key = normalize_symbol(symbol)
        data = self._get(f"/quotes/{key}")
        if data is None:
            logger.info(f"Quote service does not list {key}")
            return None
        return self._parse_quote(key, data)

    def _parse_quote(self, symbol: str, data: Any) -> Quote:
        if not isinstance(data, dict):
            raise ClientError(f"Invalid quote payload for {symbol}: {data!r}")
        try:
            return Quote(
                symbol=data.get("symbol") or symbol,
                name=data.get("name") or symbol,
                price=float(data["price"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ClientError(f"Invalid quote payload for {symbol}: {e}") from e

    @retry(
        retry=retry_if_exception_type((NetworkError, APIError)),
        # ClientError is not retried
        stop=stop_after_attempt(5),
        wait=wait_exponential(multiplier=1, min=1, max=30),
        reraise=True,
        before_sleep=before_sleep_log(logger, logging.WARNING),
        after=after_log(logger, logging.DEBUG),
    )
    def _get(self, endpoint: str) -> Any:
        """GET an endpoint with retry logic.

        Returns:
            Response JSON, or None for 404
        """
        url = f"{self.base_url}{endpoint}"
        logger.debug(f"Making quote request: GET {endpoint}")

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise NetworkError(
                f"Request timeout for {endpoint} after {self.timeout}s"
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise NetworkError(f"Quote service not reachable at {self.base_url}") from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Network error for {endpoint}: {str(e)}") from e

        if response.status_code == 404:
            return None
        elif response.status_code == 429:
            raise APIError(f"Rate limit exceeded for {endpoint}")
        elif response.status_code >= 500:
            logger.warning(
                f"Server error {response.status_code} for {endpoint}, will retry"
            )
            raise APIError(f"Server error {response.status_code} for {endpoint}")
        elif response.status_code >= 400:
            raise ClientError(
                f"Client error {response.status_code} for {endpoint}: "
                f"{response.text[:200]}"
            )

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Invalid JSON response from {endpoint}: {str(e)}")
            raise ClientError(f"Invalid JSON response from {endpoint}: {str(e)}") from e
