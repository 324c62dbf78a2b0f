"""web3.py backed chain provider."""

import asyncio
import logging
from typing import Any, Awaitable, Sequence, TypeVar

from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import ContractLogicError, TimeExhausted, TransactionNotFound

from dappvotes.core.exceptions import (
    ChainConnectionError,
    CriticalError,
    DappVotesError,
    TransactionError,
    ViewFunctionError,
)
from dappvotes.core.provider import ChainProvider
from dappvotes.models.voting import BlockSummary, NodeTransaction, TransactionReceipt

logger = logging.getLogger(__name__)

T = TypeVar("T")

SELECTOR_NOT_RECOGNIZED = "selector was not recognized"


def translate_error(
    exc: BaseException,
    endpoint: str,
    function: str | None = None,
    write: bool = False,
) -> BaseException:
    """
    Map a web3/transport failure onto the DappVotes error hierarchy.

    Unknown failures are returned unchanged so the reporter can still
    classify them from their message.
    """
    if isinstance(exc, DappVotesError):
        return exc

    message = str(exc)
    if SELECTOR_NOT_RECOGNIZED in message:
        return ViewFunctionError(message, function)
    if "user rejected" in message.lower():
        return TransactionError(message)
    if isinstance(exc, (OSError, asyncio.TimeoutError)):
        return ChainConnectionError(f"Node unreachable: {message or type(exc).__name__}", endpoint)
    if isinstance(exc, ContractLogicError):
        if write:
            return TransactionError(message)
        return CriticalError(f"Call to {function} reverted: {message}")
    return exc


class Web3ChainProvider(ChainProvider):
    """
    Chain provider on top of ``AsyncWeb3`` and an HTTP JSON-RPC endpoint.

    The same class serves both the plain RPC node and a wallet endpoint;
    when talking to a wallet, ``send_function`` is signed by the wallet.
    """

    def __init__(self, url: str, timeout: float = 30.0, receipt_timeout: float = 120.0) -> None:
        """
        Initialize the provider.

        Args:
            url: JSON-RPC endpoint.
            timeout: Per-request timeout in seconds.
            receipt_timeout: Maximum wait for a transaction to be mined.
        """
        self._url = url
        self._timeout = timeout
        self._receipt_timeout = receipt_timeout
        self._w3 = AsyncWeb3(AsyncHTTPProvider(url))

    @property
    def endpoint(self) -> str:
        """JSON-RPC endpoint."""
        return self._url

    async def _guard(
        self,
        awaitable: Awaitable[T],
        function: str | None = None,
        write: bool = False,
    ) -> T:
        """Await a node call with a timeout and translated errors."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except Exception as e:
            translated = translate_error(e, self._url, function, write)
            if translated is e:
                raise
            raise translated from e

    def _contract(self, address: str, abi: list[dict[str, Any]]) -> Any:
        return self._w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(address),
            abi=abi,
        )

    async def get_code(self, address: str) -> bytes:
        """Fetch deployed bytecode."""
        code = await self._guard(
            self._w3.eth.get_code(AsyncWeb3.to_checksum_address(address))
        )
        return bytes(code)

    async def get_block_number(self) -> int:
        """Latest block height."""
        return int(await self._guard(self._w3.eth.block_number))

    async def get_block(self, number: int) -> BlockSummary:
        """Fetch a block with transaction hashes only."""
        block = await self._guard(self._w3.eth.get_block(number, full_transactions=False))
        return BlockSummary(
            number=int(block["number"]),
            timestamp=int(block["timestamp"]),
            transactions=[AsyncWeb3.to_hex(h) for h in block.get("transactions", [])],
        )

    async def get_transaction(self, tx_hash: str) -> NodeTransaction | None:
        """Fetch a transaction by hash."""
        try:
            tx = await self._guard(self._w3.eth.get_transaction(tx_hash))
        except TransactionNotFound:
            return None
        data = tx.get("input", b"")
        return NodeTransaction(
            hash=AsyncWeb3.to_hex(tx["hash"]),
            from_address=tx["from"],
            to_address=tx.get("to"),
            data=data if isinstance(data, str) else AsyncWeb3.to_hex(data),
            value=int(tx.get("value", 0)),
            gas_price=tx.get("gasPrice"),
            block_number=tx.get("blockNumber"),
        )

    async def get_transaction_receipt(self, tx_hash: str) -> TransactionReceipt | None:
        """Fetch a transaction receipt."""
        try:
            receipt = await self._guard(self._w3.eth.get_transaction_receipt(tx_hash))
        except TransactionNotFound:
            return None
        return self._to_receipt(tx_hash, receipt)

    async def call_function(
        self,
        address: str,
        abi: list[dict[str, Any]],
        function: str,
        args: Sequence[Any],
        sender: str,
    ) -> Any:
        """Execute a read-only contract call."""
        contract_fn = self._contract(address, abi).get_function_by_name(function)(*args)
        logger.debug(f"[Web3] call {function}{tuple(args)} from {sender}")
        return await self._guard(
            contract_fn.call({"from": AsyncWeb3.to_checksum_address(sender)}),
            function=function,
        )

    async def send_function(
        self,
        address: str,
        abi: list[dict[str, Any]],
        function: str,
        args: Sequence[Any],
        sender: str,
    ) -> str:
        """Submit a contract transaction signed by the wallet."""
        contract_fn = self._contract(address, abi).get_function_by_name(function)(*args)
        logger.info(f"[Web3] transact {function}{tuple(args)} from {sender}")
        tx_hash = await self._guard(
            contract_fn.transact({"from": AsyncWeb3.to_checksum_address(sender)}),
            function=function,
            write=True,
        )
        return AsyncWeb3.to_hex(tx_hash)

    async def wait_for_receipt(self, tx_hash: str) -> TransactionReceipt:
        """Wait until the transaction is mined."""
        try:
            receipt = await self._w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self._receipt_timeout
            )
        except TimeExhausted as e:
            raise TransactionError(
                f"Transaction {tx_hash} not mined after {self._receipt_timeout}s", tx_hash
            ) from e
        except Exception as e:
            translated = translate_error(e, self._url, write=True)
            if translated is e:
                raise
            raise translated from e
        return self._to_receipt(tx_hash, receipt)

    @staticmethod
    def _to_receipt(tx_hash: str, receipt: Any) -> TransactionReceipt:
        return TransactionReceipt(
            tx_hash=tx_hash,
            status=int(receipt.get("status", 0)) == 1,
            gas_used=int(receipt.get("gasUsed", 0)),
            block_number=receipt.get("blockNumber"),
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        provider = self._w3.provider
        if hasattr(provider, "disconnect"):
            await provider.disconnect()
