"""Abstract chain provider interface."""

from abc import ABC, abstractmethod
from typing import Any, Sequence

from dappvotes.models.voting import BlockSummary, NodeTransaction, TransactionReceipt


class ChainProvider(ABC):
    """Abstract base class for EVM node access.

    Implementations translate transport and node failures into the
    ``DappVotesError`` hierarchy so callers can match on error kinds.
    """

    @property
    @abstractmethod
    def endpoint(self) -> str:
        """URL of the node or wallet this provider talks to."""
        ...

    @abstractmethod
    async def get_code(self, address: str) -> bytes:
        """
        Fetch deployed bytecode.

        Args:
            address: Contract address.

        Returns:
            Bytecode, empty when nothing is deployed.
        """
        ...

    @abstractmethod
    async def get_block_number(self) -> int:
        """Latest block height."""
        ...

    @abstractmethod
    async def get_block(self, number: int) -> BlockSummary:
        """Fetch a block with its transaction hashes (not full objects)."""
        ...

    @abstractmethod
    async def get_transaction(self, tx_hash: str) -> NodeTransaction | None:
        """Fetch a transaction by hash, None if unknown."""
        ...

    @abstractmethod
    async def get_transaction_receipt(self, tx_hash: str) -> TransactionReceipt | None:
        """Fetch a mined transaction's receipt, None if not mined."""
        ...

    @abstractmethod
    async def call_function(
        self,
        address: str,
        abi: list[dict[str, Any]],
        function: str,
        args: Sequence[Any],
        sender: str,
    ) -> Any:
        """
        Execute a read-only contract call.

        Raises:
            ViewFunctionError: If the selector is unknown to the bytecode.
            ChainConnectionError: If the node is unreachable.
        """
        ...

    @abstractmethod
    async def send_function(
        self,
        address: str,
        abi: list[dict[str, Any]],
        function: str,
        args: Sequence[Any],
        sender: str,
    ) -> str:
        """
        Submit a state-changing contract call signed by ``sender``.

        Returns:
            The transaction hash.

        Raises:
            TransactionError: If the wallet rejects or the node refuses it.
        """
        ...

    @abstractmethod
    async def wait_for_receipt(self, tx_hash: str) -> TransactionReceipt:
        """Block until the transaction is mined and return its receipt."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the provider and release resources."""
        ...
