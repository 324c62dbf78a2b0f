"""DappVotes chain client: polls, contestants and votes on the DappVotes contract."""

__version__ = "1.0.0"
