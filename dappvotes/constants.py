"""Client constants: execution modes, error kinds, cache keys and labels."""

from enum import Enum

DEFAULT_RPC_URL = "http://localhost:8545"
# First deployment address on a fresh Hardhat node
DEFAULT_CONTRACT_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"

CACHE_NAMESPACE = "dappvotes"
TIMESTAMP_SUFFIX = "_timestamp"

POLLS_CACHE_KEY = "polls"
POLL_CACHE_PREFIX = "poll_"
CONTESTANTS_CACHE_PREFIX = "contestants_"
TRANSACTIONS_CACHE_KEY = "transactions"

DEFAULT_ERROR_MESSAGE = "Something went wrong. Please try again."
UNKNOWN_TRANSACTION = "Unknown Transaction"

# Contract function name -> label shown in transaction history
TRANSACTION_LABELS: dict[str, str] = {
    "createPoll": "Poll Created",
    "updatePoll": "Poll Updated",
    "deletePoll": "Poll Deleted",
    "contestPoll": "Contestant Added",
    "contest": "Contestant Added",
    "vote": "Vote Cast",
}


class ExecutionMode(str, Enum):
    """Where the client runs: next to a wallet or on a server."""

    INTERACTIVE = "interactive"
    SERVER = "server"


class ErrorKind(str, Enum):
    """Failure taxonomy used by the error reporter."""

    CRITICAL = "CRITICAL"
    TRANSACTION = "TRANSACTION"
    CONNECTION = "CONNECTION"
    VIEW_FUNCTION = "VIEW_FUNCTION"
    UNKNOWN = "UNKNOWN"


class HandleSource(str, Enum):
    """Backing of a resolved provider handle."""

    WALLET = "wallet"
    RPC = "rpc"
