"""
HTTP client for the Arbiscan contract ABI endpoint.

**Conceptual**: Arbiscan (an Etherscan-compatible block explorer) publishes
the ABI of every verified contract. The CLI fetches it once so the user can
pick any read function; the result is cached by the orchestration layer.

This is a thin client: it builds the request, maps HTTP and API-level
failures onto exceptions, and returns the ABI as a list of dicts. It does not
cache or write files.

**API shape** (module=contract, action=getabi):
    {"status": "1", "message": "OK", "result": "<ABI as a JSON string>"}
    {"status": "0", "message": "NOTOK", "result": "Contract source code not verified"}
"""

import json
from typing import Optional

import requests

from src.config.settings import ArbiscanSettings


class ArbiscanClientError(Exception):
    """
    Base exception for Arbiscan API client errors.

    Callers can catch ArbiscanClientError to handle all ABI-fetch failures,
    or the subclasses for finer handling.
    """
    pass


class ArbiscanAbiUnavailableError(ArbiscanClientError):
    """
    Raised when the API answers but has no ABI for the address.

    **Typical causes**: contract not verified, wrong address, invalid API key.

    **Recovery**: supply the ABI manually from a JSON file.
    """
    pass


class ArbiscanRateLimitError(ArbiscanClientError):
    """Raised on HTTP 429 or the API's "rate limit reached" message."""
    pass


class ArbiscanServerError(ArbiscanClientError):
    """Raised when Arbiscan returns a 5xx server error."""
    pass


class ArbiscanClient:
    """
    Thin HTTP client for Arbiscan's getabi endpoint.

    **Example usage**:
        >>> settings = ArbiscanSettings.from_env()
        >>> with ArbiscanClient(settings) as client:
        ...     abi = client.get_contract_abi("0x82C1...e399")
        >>> abi[0]["type"]
        'function'
    """

    def __init__(self, settings: ArbiscanSettings):
        self.settings = settings
        self.session = requests.Session()
        self.session.headers.update({
            "Accept": "application/json",
            "User-Agent": "stryke_rewards_lookup/1.0",
        })

    def get_contract_abi(self, address: str) -> list[dict]:
        """
        Fetch the verified ABI for `address`.

        Args:
            address: Contract address (any case).

        Returns:
            Parsed ABI (list of entry dicts).

        Raises:
            ValueError: If address is empty.
            ArbiscanAbiUnavailableError: API returned status != "1".
            ArbiscanRateLimitError: Rate limited.
            ArbiscanServerError: 5xx response.
            ArbiscanClientError: Other HTTP failures, bad JSON, or a malformed
                                 ABI payload.
            requests.Timeout: Request exceeded the configured timeout.
        """
        if not address or not address.strip():
            raise ValueError("Contract address cannot be empty")

        params = {
            "module": "contract",
            "action": "getabi",
            "address": address.strip(),
            "apikey": self.settings.api_key,
        }

        try:
            response = self.session.get(
                self.settings.base_url,
                params=params,
                timeout=self.settings.timeout_seconds,
            )

            if response.status_code == 429:
                raise ArbiscanRateLimitError(
                    f"Rate limit exceeded. Set ARBISCAN_API_KEY or slow down. Response: {response.text}"
                )

            if response.status_code >= 500:
                raise ArbiscanServerError(
                    f"Arbiscan server error (status {response.status_code}). "
                    f"Response: {response.text}"
                )

            if 400 <= response.status_code < 500:
                raise ArbiscanClientError(
                    f"Client error (status {response.status_code}). Response: {response.text}"
                )

            response.raise_for_status()

            try:
                data = response.json()
            except ValueError as e:
                raise ArbiscanClientError(
                    f"Failed to parse JSON response: {e}. Response: {response.text}"
                )

        except requests.Timeout as e:
            raise requests.Timeout(
                f"Request to Arbiscan timed out after {self.settings.timeout_seconds}s."
            ) from e

        except requests.ConnectionError as e:
            raise ArbiscanClientError(
                f"Failed to connect to Arbiscan at {self.settings.base_url}. "
                f"Check network connection and ARBISCAN_BASE_URL."
            ) from e

        except requests.RequestException as e:
            raise ArbiscanClientError(f"HTTP request failed: {e}") from e

        return self._parse_abi_payload(data)

    @staticmethod
    def _parse_abi_payload(data: dict) -> list[dict]:
        status = str(data.get("status", ""))
        message = str(data.get("message", ""))
        result: Optional[str] = data.get("result")

        if status != "1" or message != "OK":
            detail = result if isinstance(result, str) else message
            if detail and "rate limit" in detail.lower():
                raise ArbiscanRateLimitError(f"Rate limit reached: {detail}")
            raise ArbiscanAbiUnavailableError(f"Failed to fetch ABI: {message} ({detail})")

        try:
            abi = json.loads(result) if isinstance(result, str) else result
        except json.JSONDecodeError as e:
            raise ArbiscanClientError(f"ABI payload is not valid JSON: {e}")

        if not isinstance(abi, list):
            raise ArbiscanClientError(
                f"Expected ABI to be a list, got {type(abi).__name__}"
            )

        return abi

    def close(self):
        """Close the HTTP session."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
