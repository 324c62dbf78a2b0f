"""Core module for base interfaces and abstractions."""

from dappvotes.core.cache import CacheBackend
from dappvotes.core.exceptions import (
    CacheError,
    ChainConnectionError,
    ContractNotDeployedError,
    CriticalError,
    DappVotesError,
    MalformedRecordError,
    TransactionError,
    ViewFunctionError,
    WalletNotConnectedError,
)
from dappvotes.core.provider import ChainProvider

__all__ = [
    "CacheBackend",
    "CacheError",
    "ChainConnectionError",
    "ChainProvider",
    "ContractNotDeployedError",
    "CriticalError",
    "DappVotesError",
    "MalformedRecordError",
    "TransactionError",
    "ViewFunctionError",
    "WalletNotConnectedError",
]
