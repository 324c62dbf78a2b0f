"""Custom exceptions for the DappVotes client."""

from dappvotes.constants import ErrorKind


class DappVotesError(Exception):
    """Base exception for all DappVotes errors."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or "DAPPVOTES_ERROR"
        super().__init__(self.message)


class ChainConnectionError(DappVotesError):
    """Raised when the node, wallet or contract cannot be reached."""

    kind = ErrorKind.CONNECTION

    def __init__(self, message: str, endpoint: str | None = None) -> None:
        self.endpoint = endpoint
        super().__init__(message, "CONNECTION_ERROR")


class ContractNotDeployedError(ChainConnectionError):
    """Raised when no bytecode lives at the contract address."""

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(f"Contract not deployed at {address}")
        self.code = "CONTRACT_NOT_DEPLOYED"


class WalletNotConnectedError(ChainConnectionError):
    """Raised when a write is attempted without an authorized wallet account."""

    def __init__(self, message: str = "Please connect a wallet") -> None:
        super().__init__(message)
        self.code = "WALLET_NOT_CONNECTED"


class TransactionError(DappVotesError):
    """Raised when a write is rejected by the user or reverted on chain."""

    kind = ErrorKind.TRANSACTION

    def __init__(self, message: str, tx_hash: str | None = None) -> None:
        self.tx_hash = tx_hash
        super().__init__(message, "TRANSACTION_ERROR")


class ViewFunctionError(DappVotesError):
    """Raised when the deployed bytecode does not know a read selector."""

    kind = ErrorKind.VIEW_FUNCTION

    def __init__(self, message: str, function: str | None = None) -> None:
        self.function = function
        super().__init__(message, "VIEW_FUNCTION_ERROR")


class CriticalError(DappVotesError):
    """Raised on integrity or otherwise unexpected failures."""

    kind = ErrorKind.CRITICAL

    def __init__(self, message: str) -> None:
        super().__init__(message, "CRITICAL_ERROR")


class MalformedRecordError(CriticalError):
    """Raised when an on-chain record field cannot be parsed."""

    def __init__(self, field: str, value: object) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Malformed value for '{field}': {value!r}")
        self.code = "MALFORMED_RECORD"


class CacheError(DappVotesError):
    """Raised when cache operations fail."""

    kind = ErrorKind.CONNECTION

    def __init__(self, message: str, operation: str | None = None) -> None:
        self.operation = operation
        super().__init__(message, "CACHE_ERROR")
