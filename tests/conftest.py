"""Test configuration and fixtures."""

from typing import Any, AsyncGenerator, Callable, Sequence

import pytest
import pytest_asyncio

from dappvotes.abi import function_selectors, load_abi
from dappvotes.cache.memory import MemoryCacheBackend
from dappvotes.constants import DEFAULT_CONTRACT_ADDRESS, ErrorKind, ExecutionMode
from dappvotes.core.cache import CacheBackend
from dappvotes.core.exceptions import ChainConnectionError
from dappvotes.core.provider import ChainProvider
from dappvotes.models.voting import BlockSummary, NodeTransaction, TransactionReceipt
from dappvotes.providers.resolver import ProviderResolver
from dappvotes.services.cache_store import CacheStore
from dappvotes.services.error_reporter import ErrorReporter
from dappvotes.services.gateway import ContractGateway
from dappvotes.services.history_scanner import TransactionHistoryScanner
from dappvotes.services.retry import RetryExecutor
from dappvotes.services.throttle import ThrottleGuard
from dappvotes.services.voting import VotingService

CONTRACT = DEFAULT_CONTRACT_ADDRESS.lower()
ALICE = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
BOB = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, now: int = 1_700_000_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeSleeper:
    """Records requested sleeps instead of sleeping."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class FakeChainProvider(ChainProvider):
    """In-memory node with scripted contract responses."""

    def __init__(self, url: str = "http://localhost:8545") -> None:
        self.url = url
        self.code: bytes = b"\x60\x80\x60\x40"
        self.code_error: Exception | None = None
        self.block_number_error: Exception | None = None
        self.blocks: dict[int, BlockSummary] = {}
        self.failing_blocks: set[int] = set()
        self.transactions: dict[str, NodeTransaction] = {}
        self.receipts: dict[str, TransactionReceipt] = {}
        # function name -> value, exception, or Outcomes
        self.call_results: dict[str, Any] = {}
        self.calls: list[tuple[str, tuple[Any, ...], str]] = []
        self.sent: list[tuple[str, tuple[Any, ...], str]] = []
        self.send_error: Exception | None = None
        self.write_status = True
        self.closed = False

    @property
    def endpoint(self) -> str:
        return self.url

    async def get_code(self, address: str) -> bytes:
        if self.code_error:
            raise self.code_error
        return self.code

    async def get_block_number(self) -> int:
        if self.block_number_error:
            raise self.block_number_error
        return max(self.blocks, default=0)

    async def get_block(self, number: int) -> BlockSummary:
        if number in self.failing_blocks:
            raise ChainConnectionError(f"block {number} unavailable", self.url)
        return self.blocks.get(number, BlockSummary(number=number, timestamp=0))

    async def get_transaction(self, tx_hash: str) -> NodeTransaction | None:
        return self.transactions.get(tx_hash)

    async def get_transaction_receipt(self, tx_hash: str) -> TransactionReceipt | None:
        return self.receipts.get(tx_hash)

    async def call_function(
        self,
        address: str,
        abi: list[dict[str, Any]],
        function: str,
        args: Sequence[Any],
        sender: str,
    ) -> Any:
        self.calls.append((function, tuple(args), sender))
        result = self.call_results.get(function)
        if isinstance(result, Outcomes):
            result = result.next()
        if isinstance(result, Exception):
            raise result
        return result

    async def send_function(
        self,
        address: str,
        abi: list[dict[str, Any]],
        function: str,
        args: Sequence[Any],
        sender: str,
    ) -> str:
        if self.send_error:
            raise self.send_error
        self.sent.append((function, tuple(args), sender))
        return f"0x{len(self.sent):064x}"

    async def wait_for_receipt(self, tx_hash: str) -> TransactionReceipt:
        return TransactionReceipt(
            tx_hash=tx_hash,
            status=self.write_status,
            gas_used=21_000,
            block_number=len(self.sent),
        )

    def function_calls(self, function: str) -> int:
        return sum(1 for name, _, _ in self.calls if name == function)

    async def close(self) -> None:
        self.closed = True


class Outcomes:
    """Call results returned in order; the last one repeats."""

    def __init__(self, *outcomes: Any) -> None:
        self._outcomes = list(outcomes)

    def next(self) -> Any:
        if len(self._outcomes) > 1:
            return self._outcomes.pop(0)
        return self._outcomes[0]


class FakeWallet:
    """Wallet endpoint with a fixed list of authorized accounts."""

    def __init__(self, accounts: list[str] | None = None, url: str = "http://wallet.local") -> None:
        self.url = url
        self.authorized = list(accounts or [])
        self.error: Exception | None = None
        self.requested = 0
        self.closed = False

    async def accounts(self) -> list[str]:
        if self.error:
            raise self.error
        return list(self.authorized)

    async def request_accounts(self) -> list[str]:
        self.requested += 1
        if self.error:
            raise self.error
        return list(self.authorized)

    async def close(self) -> None:
        self.closed = True


def selector_for(abi: list[dict[str, Any]], name: str) -> str:
    return next(s for s, fn in function_selectors(abi).items() if fn == name)


def add_block(
    provider: FakeChainProvider,
    number: int,
    txs: list[tuple[str, str | None, str]],
    sender: str = ALICE,
) -> None:
    """Add a block whose transactions are (hash, to, data)."""
    provider.blocks[number] = BlockSummary(
        number=number,
        timestamp=1_700_000_000 + number,
        transactions=[h for h, _, _ in txs],
    )
    for tx_hash, to, data in txs:
        provider.transactions[tx_hash] = NodeTransaction(
            hash=tx_hash,
            from_address=sender,
            to_address=to,
            data=data,
            value=0,
            gas_price=1_000_000_000,
            block_number=number,
        )
        provider.receipts[tx_hash] = TransactionReceipt(
            tx_hash=tx_hash, status=True, gas_used=50_000, block_number=number
        )


def raw_poll(
    poll_id: int,
    timestamp: int = 1_700_000_000_000,
    votes: int | str = 0,
    voters: Sequence[str] = (),
    contestants: int = 0,
    director: str = ALICE,
    deleted: bool = False,
) -> tuple[Any, ...]:
    """Poll struct in ABI member order."""
    return (
        poll_id,
        f"https://img/{poll_id}.png",
        f"Poll {poll_id}",
        f"Description {poll_id}",
        votes,
        contestants,
        deleted,
        director,
        timestamp + 60_000,
        timestamp + 3_600_000,
        timestamp,
        list(voters),
        [],
    )


def raw_contestant(
    contestant_id: int,
    votes: int | str = 0,
    voter: str = ALICE,
    voters: Sequence[str] = (),
) -> tuple[Any, ...]:
    """Contestant struct in ABI member order."""
    return (
        contestant_id,
        f"https://img/c{contestant_id}.png",
        f"Contestant {contestant_id}",
        voter,
        votes,
        list(voters),
    )


@pytest.fixture
def abi() -> list[dict[str, Any]]:
    """Provide the bundled DappVotes ABI."""
    return load_abi()


@pytest.fixture
def clock() -> FakeClock:
    """Provide a manual clock shared by cache and throttle."""
    return FakeClock()


@pytest.fixture
def sleeper() -> FakeSleeper:
    """Provide a sleep recorder."""
    return FakeSleeper()


@pytest_asyncio.fixture
async def cache_backend() -> AsyncGenerator[CacheBackend, None]:
    """Provide a memory cache backend for tests."""
    cache = MemoryCacheBackend()
    yield cache
    await cache.close()


@pytest.fixture
def cache_store(cache_backend: CacheBackend, clock: FakeClock) -> CacheStore:
    """Provide a cache store on the manual clock."""
    return CacheStore(cache_backend, freshness_ms=30_000, clock=clock)


@pytest.fixture
def notifications() -> list[tuple[str, ErrorKind]]:
    """Collect user-facing notifications."""
    return []


@pytest.fixture
def reporter(notifications: list[tuple[str, ErrorKind]]) -> ErrorReporter:
    """Provide an error reporter that records notifications."""
    return ErrorReporter(
        notifier=lambda message, kind: notifications.append((message, kind)),
        development=True,
    )


@pytest.fixture
def provider() -> FakeChainProvider:
    """Provide a fake node."""
    return FakeChainProvider()


@pytest.fixture
def make_resolver(
    provider: FakeChainProvider,
    reporter: ErrorReporter,
) -> Callable[..., ProviderResolver]:
    """Build resolvers whose every endpoint maps to the fake node."""

    def build(
        execution_mode: ExecutionMode = ExecutionMode.SERVER,
        wallet: FakeWallet | None = None,
    ) -> ProviderResolver:
        return ProviderResolver(
            provider_factory=lambda url: provider,
            reporter=reporter,
            rpc_url="http://localhost:8545",
            execution_mode=execution_mode,
            wallet=wallet,  # type: ignore[arg-type]
        )

    return build


@pytest.fixture
def make_service(
    make_resolver: Callable[..., ProviderResolver],
    reporter: ErrorReporter,
    cache_store: CacheStore,
    clock: FakeClock,
    sleeper: FakeSleeper,
    abi: list[dict[str, Any]],
) -> Callable[..., VotingService]:
    """Build voting services on the fake node."""

    def build(
        execution_mode: ExecutionMode = ExecutionMode.SERVER,
        wallet: FakeWallet | None = None,
    ) -> VotingService:
        resolver = make_resolver(execution_mode, wallet)
        return VotingService(
            gateway=ContractGateway(
                resolver=resolver,
                contract_address=DEFAULT_CONTRACT_ADDRESS,
                abi=abi,
                execution_mode=execution_mode,
            ),
            cache=cache_store,
            throttle=ThrottleGuard(default_interval_ms=2_000, clock=clock),
            retry=RetryExecutor(max_attempts=3, delay_ms=1_000, sleep=sleeper),
            reporter=reporter,
            scanner=TransactionHistoryScanner(resolver, DEFAULT_CONTRACT_ADDRESS, abi),
            wallet=wallet,  # type: ignore[arg-type]
            throttle_interval_ms=2_000,
            settle_delay_ms=2_000,
            sleep=sleeper,
        )

    return build
