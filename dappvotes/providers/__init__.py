"""Chain and wallet providers package."""

from dappvotes.providers.resolver import ProviderHandle, ProviderResolver
from dappvotes.providers.wallet import WalletBridge
from dappvotes.providers.web3_provider import Web3ChainProvider

__all__ = [
    "ProviderHandle",
    "ProviderResolver",
    "WalletBridge",
    "Web3ChainProvider",
]
