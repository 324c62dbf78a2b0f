"""Transaction history scanner over a low-volume chain."""

import logging
from decimal import Decimal
from typing import Any

from dappvotes.abi import decode_function_name, function_selectors
from dappvotes.constants import TRANSACTION_LABELS, UNKNOWN_TRANSACTION
from dappvotes.models.voting import TransactionRecord
from dappvotes.providers.resolver import ProviderResolver

logger = logging.getLogger(__name__)

WEI_PER_ETHER = Decimal(10) ** 18


def format_ether(wei: int) -> str:
    """Render a wei amount in ether, keeping at least one decimal."""
    ether = (Decimal(wei) / WEI_PER_ETHER).normalize()
    text = format(ether, "f")
    return text if "." in text else f"{text}.0"


def filter_by_address(records: list[TransactionRecord], query: str) -> list[TransactionRecord]:
    """Keep records whose sender or recipient contains ``query`` (case-insensitive)."""
    needle = query.strip().lower()
    if not needle:
        return list(records)
    return [
        r
        for r in records
        if needle in r.from_address.lower() or needle in r.to_address.lower()
    ]


class TransactionHistoryScanner:
    """
    Walks every block from 1 to the chain head and collects transactions
    sent to the contract.

    There is no index, so this is only meant for local or low-volume chains.
    Calls are sequential to keep the request rate against the node bounded.
    """

    def __init__(
        self,
        resolver: ProviderResolver,
        contract_address: str,
        abi: list[dict[str, Any]],
    ) -> None:
        """
        Initialize the scanner.

        Args:
            resolver: Provider resolver.
            contract_address: Address whose incoming transactions are kept.
            abi: Contract ABI used to decode call selectors.
        """
        self._resolver = resolver
        self._contract_address = contract_address.lower()
        self._selectors = function_selectors(abi)

    def get_transaction_type(self, data: str) -> str:
        """Human label for the function invoked by ``data``."""
        try:
            name = decode_function_name(data or "", self._selectors)
        except Exception as e:
            logger.error(f"[History] Error determining transaction type: {e}")
            return UNKNOWN_TRANSACTION
        if name is None:
            return UNKNOWN_TRANSACTION
        return TRANSACTION_LABELS.get(name, name)

    async def collect(self) -> list[TransactionRecord]:
        """
        Scan the whole chain.

        Returns:
            Contract transactions sorted by block number, newest first.
            Blocks or transactions that fail to load are skipped.

        Raises:
            Whatever resolving the provider or reading the chain head raised.
        """
        handle = await self._resolver.resolve()
        provider = handle.provider
        latest_block = await provider.get_block_number()

        logger.info(f"[History] Scanning blocks 1 to {latest_block}")
        transactions: list[TransactionRecord] = []
        processed_hashes: set[str] = set()

        for block_number in range(1, latest_block + 1):
            try:
                block = await provider.get_block(block_number)
            except Exception as e:
                logger.warning(f"[History] Error getting block {block_number}: {e}")
                continue

            for tx_hash in block.transactions:
                if tx_hash in processed_hashes:
                    continue
                processed_hashes.add(tx_hash)

                try:
                    tx = await provider.get_transaction(tx_hash)
                    if tx is None or not tx.to_address:
                        continue
                    if tx.to_address.lower() != self._contract_address:
                        continue

                    receipt = await provider.get_transaction_receipt(tx_hash)
                    if receipt is None:
                        continue

                    transaction_type = self.get_transaction_type(tx.data)
                    logger.debug(f"[History] Found transaction {tx.hash} type: {transaction_type}")
                    transactions.append(
                        TransactionRecord(
                            hash=tx.hash,
                            block_number=tx.block_number or block.number,
                            timestamp=block.timestamp,
                            from_address=tx.from_address,
                            to_address=tx.to_address,
                            transaction_type=transaction_type,
                            status=receipt.status,
                            gas_used=str(receipt.gas_used),
                            gas_price=str(tx.gas_price or 0),
                            value=format_ether(tx.value),
                        )
                    )
                except Exception as e:
                    logger.warning(f"[History] Error processing transaction {tx_hash}: {e}")

        logger.info(f"[History] Found {len(transactions)} total transactions")
        # Local chain timestamps are unreliable, order by block instead
        transactions.sort(key=lambda t: t.block_number, reverse=True)
        return transactions

    async def scan_all(self) -> list[TransactionRecord]:
        """Like ``collect``, but an unreachable chain yields an empty history."""
        try:
            return await self.collect()
        except Exception as e:
            logger.error(f"[History] Error fetching transaction history: {e}")
            return []

    async def scan(self, limit: int = 50, offset: int = 0) -> list[TransactionRecord]:
        """Scan the chain and return one page of the result."""
        transactions = await self.scan_all()
        return transactions[offset : offset + limit]
