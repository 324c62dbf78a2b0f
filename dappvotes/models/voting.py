"""Voting and chain domain models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Poll(BaseModel):
    """A votable election record with a fixed time window."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    image: str = ""
    title: str = ""
    description: str = ""
    votes: int = Field(default=0, ge=0)
    contestants: int = Field(default=0, ge=0)
    deleted: bool = False
    director: str = ""
    starts_at: int = Field(default=0, alias="startsAt")
    ends_at: int = Field(default=0, alias="endsAt")
    timestamp: int = 0
    voters: list[str] = Field(default_factory=list)
    avatars: list[str] = Field(default_factory=list)

    def has_voted(self, address: str) -> bool:
        """Check if an address has cast a vote in this poll."""
        return address.lower() in self.voters


class Contestant(BaseModel):
    """A candidate entry within a poll."""

    id: int
    image: str = ""
    name: str = ""
    voter: str = ""
    votes: int = Field(default=0, ge=0)
    voters: list[str] = Field(default_factory=list)


class PollParams(BaseModel):
    """Input for poll creation and update."""

    model_config = ConfigDict(populate_by_name=True)

    image: str
    title: str = Field(..., min_length=1)
    description: str
    starts_at: int = Field(..., ge=0, alias="startsAt")
    ends_at: int = Field(..., ge=0, alias="endsAt")

    @model_validator(mode="after")
    def check_window(self) -> "PollParams":
        """Reject windows that end before they start."""
        if self.starts_at >= self.ends_at:
            raise ValueError("startsAt must be earlier than endsAt")
        return self


class BlockSummary(BaseModel):
    """Block header fields the history scanner needs."""

    number: int
    timestamp: int
    transactions: list[str] = Field(default_factory=list)


class NodeTransaction(BaseModel):
    """Transaction as returned by the node."""

    hash: str
    from_address: str
    to_address: str | None = None
    data: str = "0x"
    value: int = 0
    gas_price: int | None = None
    block_number: int | None = None


class TransactionReceipt(BaseModel):
    """Mined transaction outcome."""

    tx_hash: str
    status: bool
    gas_used: int = 0
    block_number: int | None = None


class TransactionRecord(BaseModel):
    """A contract transaction surfaced in the history view."""

    model_config = ConfigDict(populate_by_name=True)

    hash: str
    block_number: int = Field(alias="blockNumber")
    timestamp: int
    from_address: str = Field(alias="from")
    to_address: str = Field(alias="to")
    transaction_type: str = Field(alias="transactionType")
    status: bool
    gas_used: str = Field(alias="gasUsed")
    gas_price: str = Field(alias="gasPrice")
    value: str


class WriteResult(BaseModel):
    """Outcome of a confirmed write plus the state re-read after settling."""

    tx_hash: str
    status: bool
    gas_used: int = 0
    block_number: int | None = None
    polls: list[Poll] | None = None
    poll: Poll | None = None
    contestants: list[Contestant] | None = None

    @classmethod
    def from_receipt(cls, receipt: TransactionReceipt, **refreshed: Any) -> "WriteResult":
        """Build a result from a receipt and the refreshed state."""
        return cls(
            tx_hash=receipt.tx_hash,
            status=receipt.status,
            gas_used=receipt.gas_used,
            block_number=receipt.block_number,
            **refreshed,
        )


def placeholder_poll(poll_id: int) -> Poll:
    """Clearly labeled stand-in for a poll that could not be loaded."""
    return Poll(
        id=poll_id,
        title="Unable to load poll",
        description="Poll data could not be loaded due to a contract error",
    )


def tally_matches(poll: Poll, contestants: list[Contestant]) -> bool:
    """Check that contestant votes add up to the poll's vote counter."""
    return sum(c.votes for c in contestants) == poll.votes
