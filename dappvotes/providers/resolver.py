"""Provider resolution: wallet when authorized, RPC node otherwise."""

import logging
from dataclasses import dataclass
from typing import Callable

from dappvotes.constants import DEFAULT_RPC_URL, ErrorKind, ExecutionMode, HandleSource
from dappvotes.core.exceptions import ChainConnectionError, DappVotesError
from dappvotes.core.provider import ChainProvider
from dappvotes.providers.wallet import WalletBridge
from dappvotes.services.error_reporter import ErrorReporter

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[str], ChainProvider]


@dataclass(frozen=True)
class ProviderHandle:
    """A chain provider plus the account it is bound to, if any."""

    provider: ChainProvider
    source: HandleSource
    account: str | None = None

    @property
    def is_wallet(self) -> bool:
        return self.source == HandleSource.WALLET


class ProviderResolver:
    """
    Obtains a read/write handle to the chain.

    Interactive clients prefer the wallet when it has an authorized account;
    everything else goes to the configured RPC node. Server clients never
    contact the wallet.
    """

    def __init__(
        self,
        provider_factory: ProviderFactory,
        reporter: ErrorReporter,
        rpc_url: str = DEFAULT_RPC_URL,
        execution_mode: ExecutionMode = ExecutionMode.SERVER,
        wallet: WalletBridge | None = None,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            provider_factory: Builds a provider for an endpoint URL.
            reporter: Error reporter for connection failures.
            rpc_url: Fallback node URL.
            execution_mode: Interactive or server.
            wallet: Wallet bridge, only consulted in interactive mode.
        """
        self._factory = provider_factory
        self._reporter = reporter
        self._rpc_url = rpc_url or DEFAULT_RPC_URL
        self._mode = execution_mode
        self._wallet = wallet
        self._providers: dict[str, ChainProvider] = {}

    @property
    def wallet(self) -> WalletBridge | None:
        return self._wallet

    @property
    def is_interactive(self) -> bool:
        return self._mode == ExecutionMode.INTERACTIVE

    def _provider_for(self, url: str) -> ChainProvider:
        # Connections are reused per endpoint
        if url not in self._providers:
            self._providers[url] = self._factory(url)
        return self._providers[url]

    def rpc_handle(self) -> ProviderHandle:
        """Handle on the configured RPC node, no account."""
        return ProviderHandle(provider=self._provider_for(self._rpc_url), source=HandleSource.RPC)

    async def resolve(self) -> ProviderHandle:
        """
        Resolve a provider handle.

        Returns:
            A wallet-backed handle bound to the first authorized account, or
            an RPC-backed handle.

        Raises:
            ChainConnectionError: If the wallet could not be queried.
        """
        if not self.is_interactive or self._wallet is None:
            return self.rpc_handle()

        try:
            accounts = await self._wallet.accounts()
        except DappVotesError as e:
            self._reporter.report(e, ErrorKind.CONNECTION)
            raise ChainConnectionError(e.message, self._wallet.url) from e

        if accounts:
            logger.debug(f"[Resolver] Using wallet account {accounts[0]}")
            return ProviderHandle(
                provider=self._provider_for(self._wallet.url),
                source=HandleSource.WALLET,
                account=accounts[0],
            )

        logger.debug("[Resolver] No authorized wallet account, using RPC node")
        return self.rpc_handle()

    async def close(self) -> None:
        """Close every provider built so far."""
        for url, provider in list(self._providers.items()):
            try:
                await provider.close()
            except Exception as e:
                logger.warning(f"[Resolver] Failed to close provider {url}: {e}")
        self._providers.clear()
