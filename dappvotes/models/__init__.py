"""Domain models package."""

from dappvotes.models.voting import (
    BlockSummary,
    Contestant,
    NodeTransaction,
    Poll,
    PollParams,
    TransactionReceipt,
    TransactionRecord,
    WriteResult,
    placeholder_poll,
    tally_matches,
)

__all__ = [
    "BlockSummary",
    "Contestant",
    "NodeTransaction",
    "Poll",
    "PollParams",
    "TransactionReceipt",
    "TransactionRecord",
    "WriteResult",
    "placeholder_poll",
    "tally_matches",
]
