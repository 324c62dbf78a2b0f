"""Contract gateway: a verified, bound handle on the DappVotes contract."""

import logging
from typing import Any, Sequence

from eth_account import Account

from dappvotes.constants import ExecutionMode
from dappvotes.core.exceptions import ContractNotDeployedError, DappVotesError
from dappvotes.core.provider import ChainProvider
from dappvotes.models.voting import PollParams, TransactionReceipt
from dappvotes.providers.resolver import ProviderResolver

logger = logging.getLogger(__name__)


def is_empty_code(code: bytes | str | None) -> bool:
    """True for the ``no code`` sentinel returned at undeployed addresses."""
    if code is None:
        return True
    if isinstance(code, str):
        return code.lower() in ("", "0x")
    return len(code) == 0


class PendingTransaction:
    """A submitted write whose receipt can be awaited."""

    def __init__(self, provider: ChainProvider, tx_hash: str, function: str) -> None:
        self.provider = provider
        self.hash = tx_hash
        self.function = function

    async def wait(self) -> TransactionReceipt:
        """Block until the submitting block is mined."""
        receipt = await self.provider.wait_for_receipt(self.hash)
        logger.info(
            f"[Contract] {self.function} mined in block {receipt.block_number} "
            f"status={receipt.status} gas={receipt.gas_used}"
        )
        return receipt


class VotingContract:
    """DappVotes contract bound to a provider and a sender address."""

    def __init__(
        self,
        provider: ChainProvider,
        address: str,
        abi: list[dict[str, Any]],
        sender: str,
        wallet_backed: bool = False,
    ) -> None:
        self.provider = provider
        self.address = address
        self.abi = abi
        self.sender = sender
        self.wallet_backed = wallet_backed

    async def _call(self, function: str, *args: Any) -> Any:
        return await self.provider.call_function(self.address, self.abi, function, args, self.sender)

    async def _send(self, function: str, args: Sequence[Any]) -> PendingTransaction:
        tx_hash = await self.provider.send_function(
            self.address, self.abi, function, args, self.sender
        )
        return PendingTransaction(self.provider, tx_hash, function)

    async def get_polls(self) -> Any:
        return await self._call("getPolls")

    async def get_poll(self, poll_id: int) -> Any:
        return await self._call("getPoll", poll_id)

    async def get_contestants(self, poll_id: int) -> Any:
        return await self._call("getContestants", poll_id)

    async def create_poll(self, params: PollParams) -> PendingTransaction:
        return await self._send(
            "createPoll",
            (params.image, params.title, params.description, params.starts_at, params.ends_at),
        )

    async def update_poll(self, poll_id: int, params: PollParams) -> PendingTransaction:
        return await self._send(
            "updatePoll",
            (
                poll_id,
                params.image,
                params.title,
                params.description,
                params.starts_at,
                params.ends_at,
            ),
        )

    async def delete_poll(self, poll_id: int) -> PendingTransaction:
        return await self._send("deletePoll", (poll_id,))

    async def contest(self, poll_id: int, name: str, image: str) -> PendingTransaction:
        return await self._send("contest", (poll_id, name, image))

    async def vote(self, poll_id: int, contestant_id: int) -> PendingTransaction:
        return await self._send("vote", (poll_id, contestant_id))


class ContractGateway:
    """
    Wraps a resolved provider with the contract interface.

    In interactive mode every acquisition checks that bytecode is deployed at
    the contract address. Server mode builds the handle unconditionally.
    Failures are raised, never reported here; callers decide what the user
    sees.
    """

    def __init__(
        self,
        resolver: ProviderResolver,
        contract_address: str,
        abi: list[dict[str, Any]],
        execution_mode: ExecutionMode = ExecutionMode.SERVER,
    ) -> None:
        """
        Initialize the gateway.

        Args:
            resolver: Provider resolver.
            contract_address: Deployed DappVotes address.
            abi: Contract ABI.
            execution_mode: Interactive or server.
        """
        self._resolver = resolver
        self._address = contract_address
        self._abi = abi
        self._mode = execution_mode
        self._ephemeral_address: str | None = None

    @property
    def contract_address(self) -> str:
        return self._address

    @property
    def abi(self) -> list[dict[str, Any]]:
        return self._abi

    @property
    def resolver(self) -> ProviderResolver:
        return self._resolver

    def _read_only_sender(self) -> str:
        # Throwaway key pair, only used as the "from" of eth_call; never funded
        if self._ephemeral_address is None:
            self._ephemeral_address = Account.create().address
        return self._ephemeral_address

    async def get_contract(self) -> VotingContract:
        """
        Acquire a bound contract handle.

        Raises:
            ChainConnectionError: If the provider cannot be resolved.
            ContractNotDeployedError: If no bytecode lives at the address.
        """
        handle = await self._resolver.resolve()
        contract = VotingContract(
            provider=handle.provider,
            address=self._address,
            abi=self._abi,
            sender=handle.account or self._read_only_sender(),
            wallet_backed=handle.is_wallet,
        )

        if self._mode != ExecutionMode.INTERACTIVE:
            return contract

        try:
            code = await handle.provider.get_code(self._address)
        except DappVotesError as e:
            logger.error(f"[Gateway] Error verifying contract at {self._address}: {e}")
            raise

        if is_empty_code(code):
            logger.warning(f"[Gateway] No contract deployed at {self._address}")
            raise ContractNotDeployedError(self._address)

        return contract

    async def is_contract_deployed(self) -> bool:
        """Check for bytecode at the contract address without reporting."""
        if self._mode != ExecutionMode.INTERACTIVE:
            return True
        try:
            handle = await self._resolver.resolve()
            code = await handle.provider.get_code(self._address)
        except Exception as e:
            logger.error(f"[Gateway] Error checking contract deployment: {e}")
            return False
        return not is_empty_code(code)
