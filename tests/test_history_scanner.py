"""Tests for the transaction history scanner."""

from typing import Any, Callable

import pytest

from conftest import ALICE, BOB, CONTRACT, FakeChainProvider, add_block, selector_for

from dappvotes.constants import DEFAULT_CONTRACT_ADDRESS, UNKNOWN_TRANSACTION
from dappvotes.core.exceptions import ChainConnectionError
from dappvotes.models.voting import BlockSummary
from dappvotes.providers.resolver import ProviderResolver
from dappvotes.services.history_scanner import (
    TransactionHistoryScanner,
    filter_by_address,
    format_ether,
)


class TestTransactionHistoryScanner:
    """Tests for TransactionHistoryScanner."""

    @pytest.fixture
    def scanner(
        self,
        make_resolver: Callable[..., ProviderResolver],
        abi: list[dict[str, Any]],
    ) -> TransactionHistoryScanner:
        """Provide a scanner on the fake node."""
        return TransactionHistoryScanner(make_resolver(), DEFAULT_CONTRACT_ADDRESS, abi)

    @pytest.mark.asyncio
    async def test_collects_contract_transactions(
        self,
        scanner: TransactionHistoryScanner,
        provider: FakeChainProvider,
        abi: list[dict[str, Any]],
    ) -> None:
        """Test only contract-bound transactions are kept, newest block first."""
        vote = selector_for(abi, "vote") + "00" * 64
        create = selector_for(abi, "createPoll")
        add_block(provider, 1, [("0x01", CONTRACT, create)])
        add_block(provider, 2, [("0x02", BOB, "0x"), ("0x03", None, "0x6080")])
        add_block(provider, 3, [("0x04", DEFAULT_CONTRACT_ADDRESS, vote)])

        records = await scanner.scan()

        assert [r.hash for r in records] == ["0x04", "0x01"]
        assert [r.transaction_type for r in records] == ["Vote Cast", "Poll Created"]
        assert records[0].block_number == 3
        assert records[0].gas_used == "50000"
        assert records[0].value == "0.0"

    @pytest.mark.asyncio
    async def test_failing_block_is_skipped(
        self,
        scanner: TransactionHistoryScanner,
        provider: FakeChainProvider,
        abi: list[dict[str, Any]],
    ) -> None:
        """Test a block that fails to load does not abort the scan."""
        vote = selector_for(abi, "vote")
        for number in range(1, 6):
            add_block(provider, number, [(f"0x{number:02x}", CONTRACT, vote)])
        provider.failing_blocks.add(3)

        records = await scanner.scan()

        assert [r.block_number for r in records] == [5, 4, 2, 1]

    @pytest.mark.asyncio
    async def test_duplicate_hashes_counted_once(
        self,
        scanner: TransactionHistoryScanner,
        provider: FakeChainProvider,
        abi: list[dict[str, Any]],
    ) -> None:
        """Test a hash listed in two blocks yields one record."""
        vote = selector_for(abi, "vote")
        add_block(provider, 1, [("0xaa", CONTRACT, vote)])
        provider.blocks[2] = BlockSummary(number=2, timestamp=0, transactions=["0xaa"])

        assert len(await scanner.scan()) == 1

    @pytest.mark.asyncio
    async def test_pagination(
        self,
        scanner: TransactionHistoryScanner,
        provider: FakeChainProvider,
        abi: list[dict[str, Any]],
    ) -> None:
        """Test limit and offset slice the sorted result."""
        vote = selector_for(abi, "vote")
        for number in range(1, 8):
            add_block(provider, number, [(f"0x{number:02x}", CONTRACT, vote)])

        page = await scanner.scan(limit=2, offset=2)

        assert [r.block_number for r in page] == [5, 4]

    @pytest.mark.asyncio
    async def test_head_failure_returns_empty(
        self,
        scanner: TransactionHistoryScanner,
        provider: FakeChainProvider,
    ) -> None:
        """Test failing to read the chain head yields an empty history."""
        provider.block_number_error = ChainConnectionError("node down")

        assert await scanner.scan() == []

    @pytest.mark.asyncio
    async def test_collect_raises_when_head_unreachable(
        self,
        scanner: TransactionHistoryScanner,
        provider: FakeChainProvider,
    ) -> None:
        """Test collect lets the caller tell a failed scan from an empty chain."""
        provider.block_number_error = ChainConnectionError("node down")

        with pytest.raises(ChainConnectionError):
            await scanner.collect()

    @pytest.mark.asyncio
    async def test_empty_chain(self, scanner: TransactionHistoryScanner) -> None:
        """Test a chain with no blocks yields an empty history."""
        assert await scanner.scan() == []

    def test_transaction_labels(
        self,
        scanner: TransactionHistoryScanner,
        abi: list[dict[str, Any]],
    ) -> None:
        """Test selectors map to their human labels."""
        assert scanner.get_transaction_type(selector_for(abi, "contest")) == "Contestant Added"
        assert scanner.get_transaction_type(selector_for(abi, "deletePoll")) == "Poll Deleted"
        assert scanner.get_transaction_type(selector_for(abi, "updatePoll")) == "Poll Updated"
        assert scanner.get_transaction_type(selector_for(abi, "getPolls")) == "getPolls"
        assert scanner.get_transaction_type("0xdeadbeef") == UNKNOWN_TRANSACTION
        assert scanner.get_transaction_type("") == UNKNOWN_TRANSACTION


class TestHistoryHelpers:
    """Tests for history formatting and filtering helpers."""

    @pytest.mark.parametrize(
        "wei,expected",
        [(0, "0.0"), (10**18, "1.0"), (15 * 10**17, "1.5"), (100 * 10**18, "100.0"), (1, "0.000000000000000001")],
    )
    def test_format_ether(self, wei: int, expected: str) -> None:
        """Test wei amounts render in ether."""
        assert format_ether(wei) == expected

    @pytest.mark.asyncio
    async def test_filter_by_address(
        self,
        make_resolver: Callable[..., ProviderResolver],
        provider: FakeChainProvider,
        abi: list[dict[str, Any]],
    ) -> None:
        """Test the address filter matches sender substrings case-insensitively."""
        vote = selector_for(abi, "vote")
        add_block(provider, 1, [("0x01", CONTRACT, vote)], sender=ALICE)
        add_block(provider, 2, [("0x02", CONTRACT, vote)], sender=BOB)
        records = await TransactionHistoryScanner(make_resolver(), CONTRACT, abi).scan()

        assert [r.hash for r in filter_by_address(records, BOB[:10].upper())] == ["0x02"]
        assert len(filter_by_address(records, "  ")) == 2
        assert len(filter_by_address(records, CONTRACT)) == 2
