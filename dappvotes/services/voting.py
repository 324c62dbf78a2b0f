"""Voting service: cached, throttled reads and confirmed writes."""

import asyncio
import logging
from typing import Any, Awaitable, Callable

from dappvotes.constants import TRANSACTIONS_CACHE_KEY, ErrorKind
from dappvotes.core.exceptions import (
    DappVotesError,
    TransactionError,
    WalletNotConnectedError,
)
from dappvotes.models.voting import (
    Contestant,
    Poll,
    PollParams,
    TransactionRecord,
    WriteResult,
    placeholder_poll,
)
from dappvotes.providers.wallet import WalletBridge
from dappvotes.services.cache_store import CacheStore, contestants_key, poll_key, polls_key
from dappvotes.services.error_reporter import ErrorReporter, classify
from dappvotes.services.gateway import ContractGateway, PendingTransaction, VotingContract
from dappvotes.services.history_scanner import TransactionHistoryScanner, filter_by_address
from dappvotes.services.mapper import structure_contestants, structure_poll, structure_polls
from dappvotes.services.retry import RetryExecutor, Sleeper
from dappvotes.services.throttle import ThrottleGuard

logger = logging.getLogger(__name__)


class VotingService:
    """
    Public surface of the client.

    Reads never raise for chain failures: they fall back to stale cache and
    then to an empty or placeholder result. Writes always raise after the
    failure has been classified and reported.
    """

    def __init__(
        self,
        gateway: ContractGateway,
        cache: CacheStore,
        throttle: ThrottleGuard,
        retry: RetryExecutor,
        reporter: ErrorReporter,
        scanner: TransactionHistoryScanner,
        wallet: WalletBridge | None = None,
        throttle_interval_ms: int = 2_000,
        settle_delay_ms: int = 2_000,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        """
        Initialize the voting service.

        Args:
            gateway: Contract gateway.
            cache: Freshness-aware cache store.
            throttle: Throttle guard shared by every read.
            retry: Retry executor wrapping chain reads.
            reporter: Error reporter.
            scanner: Transaction history scanner.
            wallet: Wallet bridge for account discovery.
            throttle_interval_ms: Minimum interval between identical reads.
            settle_delay_ms: Pause after confirmation before re-reading.
            sleep: Async sleep, replaceable in tests.
        """
        self._gateway = gateway
        self._cache = cache
        self._throttle = throttle
        self._retry = retry
        self._reporter = reporter
        self._scanner = scanner
        self._wallet = wallet
        self._throttle_interval_ms = throttle_interval_ms
        self._settle_delay_ms = settle_delay_ms
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Wallet
    # ------------------------------------------------------------------

    async def connect_wallet(self) -> str:
        """Ask the wallet to authorize an account. Returns it, or ``""``."""
        if self._wallet is None:
            self._reporter.report("Please install a wallet", ErrorKind.CONNECTION)
            return ""
        try:
            accounts = await self._wallet.request_accounts()
        except Exception as e:
            self._reporter.report(e)
            return ""
        return accounts[0].lower() if accounts else ""

    async def check_wallet(self) -> str:
        """Return the already authorized account, or ``""``."""
        if self._wallet is None:
            self._reporter.report("Please install a wallet", ErrorKind.CONNECTION)
            return ""
        try:
            accounts = await self._wallet.accounts()
        except Exception as e:
            self._reporter.report(e)
            return ""
        if not accounts:
            self._reporter.report("Please connect wallet, no accounts found.")
            return ""
        return accounts[0].lower()

    async def is_contract_deployed(self) -> bool:
        """Check for bytecode at the contract address."""
        return await self._gateway.is_contract_deployed()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _report_read_failure(self, error: Exception, fallback_message: str) -> None:
        kind = classify(error, ErrorKind.CRITICAL)
        if kind == ErrorKind.VIEW_FUNCTION:
            self._reporter.report(error, ErrorKind.VIEW_FUNCTION)
            return
        self._reporter.report(error, kind)
        if kind != ErrorKind.CONNECTION:
            self._reporter.report(fallback_message, ErrorKind.CONNECTION)

    async def _fetch_polls(self) -> list[Poll]:
        async def operation() -> list[Poll]:
            contract = await self._gateway.get_contract()
            return structure_polls(await contract.get_polls())

        polls = await self._retry.run(operation)
        await self._cache.save(polls_key(), [p.model_dump(by_alias=True) for p in polls])
        return polls

    async def _fetch_poll(self, poll_id: int) -> Poll:
        async def operation() -> Poll:
            contract = await self._gateway.get_contract()
            return structure_poll(await contract.get_poll(poll_id))

        poll = await self._retry.run(operation)
        await self._cache.save(poll_key(poll_id), poll.model_dump(by_alias=True))
        return poll

    async def _fetch_contestants(self, poll_id: int) -> list[Contestant]:
        async def operation() -> list[Contestant]:
            contract = await self._gateway.get_contract()
            return structure_contestants(await contract.get_contestants(poll_id))

        contestants = await self._retry.run(operation)
        await self._cache.save(contestants_key(poll_id), [c.model_dump() for c in contestants])
        return contestants

    async def get_polls(self) -> list[Poll]:
        """List polls, newest first."""
        if not self._throttle.allow("getPolls", self._throttle_interval_ms):
            cached = await self._cache.load(polls_key())
            if cached is not None:
                logger.debug("[Voting] Returning cached polls due to throttling")
                return [Poll.model_validate(p) for p in cached]

        if not await self._gateway.is_contract_deployed():
            logger.warning("[Voting] Contract not deployed. Returning empty polls list.")
            self._reporter.report(
                "Smart contract not deployed. Please deploy the contract or check your connection.",
                ErrorKind.CONNECTION,
            )
            return []

        try:
            return await self._fetch_polls()
        except Exception as e:
            self._report_read_failure(
                e, "Failed to load polls. Please check your connection or contract deployment."
            )

        stale = await self._cache.load_stale(polls_key())
        if stale is not None:
            logger.info("[Voting] Returning stale cached polls after error")
            return [Poll.model_validate(p) for p in stale]
        return []

    async def get_poll(self, poll_id: int) -> Poll:
        """Fetch one poll, or a placeholder when it cannot be loaded."""
        key = poll_key(poll_id)
        if not self._throttle.allow(f"getPoll_{poll_id}", self._throttle_interval_ms):
            cached = await self._cache.load(key)
            if cached is not None:
                logger.debug(f"[Voting] Returning cached poll #{poll_id} due to throttling")
                return Poll.model_validate(cached)

        try:
            return await self._fetch_poll(poll_id)
        except Exception as e:
            self._report_read_failure(e, f"Failed to fetch poll #{poll_id}")

        stale = await self._cache.load_stale(key)
        if stale is not None:
            logger.info(f"[Voting] Returning stale cached poll #{poll_id} after error")
            return Poll.model_validate(stale)
        logger.info(f"[Voting] No cache for poll #{poll_id}, returning placeholder")
        return placeholder_poll(poll_id)

    async def get_contestants(self, poll_id: int) -> list[Contestant]:
        """List a poll's contestants, most votes first."""
        key = contestants_key(poll_id)
        if not self._throttle.allow(f"getContestants_{poll_id}", self._throttle_interval_ms):
            cached = await self._cache.load(key)
            if cached is not None:
                logger.debug(f"[Voting] Returning cached contestants for poll #{poll_id}")
                return [Contestant.model_validate(c) for c in cached]

        try:
            return await self._fetch_contestants(poll_id)
        except Exception as e:
            self._report_read_failure(e, f"Failed to fetch contestants for poll #{poll_id}")

        stale = await self._cache.load_stale(key)
        if stale is not None:
            logger.info(f"[Voting] Returning stale cached contestants for poll #{poll_id}")
            return [Contestant.model_validate(c) for c in stale]
        return []

    async def get_transaction_history(
        self,
        limit: int = 50,
        offset: int = 0,
        address: str | None = None,
    ) -> list[TransactionRecord]:
        """
        Contract transactions, newest block first.

        The full scan is cached for the freshness window; the address filter
        and pagination are applied to it afterwards. A scan that cannot reach
        the chain head is not cached and falls back to the last saved scan.
        """
        cached = await self._cache.load(TRANSACTIONS_CACHE_KEY)
        if cached is not None:
            records = [TransactionRecord.model_validate(r) for r in cached]
        else:
            try:
                records = await self._scanner.collect()
            except Exception as e:
                self._report_read_failure(e, "Failed to load transaction history")
                stale = await self._cache.load_stale(TRANSACTIONS_CACHE_KEY) or []
                records = [TransactionRecord.model_validate(r) for r in stale]
            else:
                await self._cache.save(
                    TRANSACTIONS_CACHE_KEY, [r.model_dump(by_alias=True) for r in records]
                )

        if address:
            records = filter_by_address(records, address)
        return records[offset : offset + limit]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def _writable_contract(self) -> VotingContract:
        contract = await self._gateway.get_contract()
        if not contract.wallet_backed:
            raise WalletNotConnectedError()
        return contract

    async def _confirm(self, pending: PendingTransaction) -> WriteResult:
        receipt = await pending.wait()
        if not receipt.status:
            raise TransactionError(f"Transaction {pending.hash} reverted", pending.hash)
        await self._sleep(self._settle_delay_ms / 1000)
        return WriteResult.from_receipt(receipt)

    async def _submit(
        self,
        action: str,
        write: Callable[[VotingContract], Awaitable[PendingTransaction]],
        refreshers: dict[str, Callable[[], Awaitable[Any]]],
    ) -> WriteResult:
        """
        Submit a write, wait for it to be mined, then re-read state.

        Each entry of ``refreshers`` fills the ``WriteResult`` field of the
        same name. A failed refresh leaves its field ``None``: the write is
        already mined, so it must not be reported as failed.
        """
        try:
            contract = await self._writable_contract()
            pending = await write(contract)
            logger.info(f"[Voting] {action} submitted: {pending.hash}")
            result = await self._confirm(pending)
        except Exception as e:
            self._report_write_failure(e)
            raise

        for field, fetch in refreshers.items():
            try:
                setattr(result, field, await fetch())
            except Exception as e:
                logger.warning(f"[Voting] {action} confirmed, refreshing {field} failed: {e}")
        return result

    def _report_write_failure(self, error: Exception) -> None:
        message = str(error)
        if "Already voted" in message:
            self._reporter.report("You have already voted in this poll", ErrorKind.TRANSACTION)
        elif isinstance(error, DappVotesError) or "user rejected" in message:
            self._reporter.report(error)
        else:
            self._reporter.report(error, ErrorKind.CRITICAL)

    async def create_poll(self, params: PollParams) -> WriteResult:
        """Create a poll, then re-read the poll list."""
        return await self._submit(
            "createPoll",
            lambda c: c.create_poll(params),
            {"polls": self._fetch_polls},
        )

    async def update_poll(self, poll_id: int, params: PollParams) -> WriteResult:
        """Update a poll, then re-read it and the poll list."""
        return await self._submit(
            "updatePoll",
            lambda c: c.update_poll(poll_id, params),
            {"poll": lambda: self._fetch_poll(poll_id), "polls": self._fetch_polls},
        )

    async def delete_poll(self, poll_id: int) -> WriteResult:
        """Soft-delete a poll, then re-read the poll list."""
        return await self._submit(
            "deletePoll",
            lambda c: c.delete_poll(poll_id),
            {"polls": self._fetch_polls},
        )

    async def contest_poll(self, poll_id: int, name: str, image: str) -> WriteResult:
        """Register a contestant, then re-read the contestant list."""
        return await self._submit(
            "contest",
            lambda c: c.contest(poll_id, name, image),
            {"contestants": lambda: self._fetch_contestants(poll_id)},
        )

    async def vote_candidate(self, poll_id: int, contestant_id: int) -> WriteResult:
        """Vote for a contestant, then re-read the poll and its contestants."""
        return await self._submit(
            "vote",
            lambda c: c.vote(poll_id, contestant_id),
            {
                "poll": lambda: self._fetch_poll(poll_id),
                "contestants": lambda: self._fetch_contestants(poll_id),
            },
        )
