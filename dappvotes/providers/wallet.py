"""Wallet bridge speaking EIP-1193 style JSON-RPC over HTTP."""

import logging
from typing import Any

import httpx

from dappvotes.core.exceptions import ChainConnectionError, TransactionError

logger = logging.getLogger(__name__)

# EIP-1193 "user rejected the request"
USER_REJECTED_CODE = 4001


class WalletBridge:
    """
    Client for a wallet endpoint that manages authorized accounts.

    The wallet signs transactions sent from its accounts, so the client never
    handles private keys. ``eth_accounts`` lists accounts the user already
    authorized; ``eth_requestAccounts`` asks the user to authorize one.
    """

    def __init__(self, url: str, timeout: float = 30.0) -> None:
        """
        Initialize the wallet bridge.

        Args:
            url: Wallet JSON-RPC endpoint.
            timeout: Request timeout in seconds.
        """
        self._url = url.rstrip("/")
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None
        self._next_id = 1

    @property
    def url(self) -> str:
        """Wallet endpoint URL."""
        return self._url

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                headers={"Content-Type": "application/json"},
            )
        return self._client

    async def request(self, method: str, params: list[Any] | None = None) -> Any:
        """
        Send a JSON-RPC request to the wallet.

        Raises:
            TransactionError: If the user rejected the request.
            ChainConnectionError: If the wallet is unreachable or errors out.
        """
        payload = {
            "jsonrpc": "2.0",
            "id": self._next_id,
            "method": method,
            "params": params or [],
        }
        self._next_id += 1

        logger.debug(f"[Wallet] {method} -> {self._url}")
        client = await self._get_client()
        try:
            response = await client.post(self._url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise ChainConnectionError(f"Wallet request {method} failed: {e}", self._url) from e
        except ValueError as e:
            raise ChainConnectionError(f"Wallet returned invalid JSON for {method}", self._url) from e

        error = data.get("error") if isinstance(data, dict) else None
        if isinstance(error, dict):
            message = str(error.get("message") or "unknown error")
            if error.get("code") == USER_REJECTED_CODE:
                raise TransactionError(f"user rejected the request: {message}")
            raise ChainConnectionError(f"Wallet error on {method}: {message}", self._url)

        if not isinstance(data, dict) or "result" not in data:
            raise ChainConnectionError(f"Unexpected wallet response for {method}", self._url)
        return data["result"]

    async def accounts(self) -> list[str]:
        """Accounts the user has already authorized."""
        result = await self.request("eth_accounts")
        return [str(account) for account in result or []]

    async def request_accounts(self) -> list[str]:
        """Ask the wallet to authorize an account."""
        result = await self.request("eth_requestAccounts")
        return [str(account) for account in result or []]

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
