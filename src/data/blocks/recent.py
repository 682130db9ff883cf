"""Queries for the most recent blocks and transactions at the chain head."""

import time

from src.data.blocks.models import BlockRecord, TransactionRecord, normalize_block
from src.data.blocks.provider import BlockProvider
from src.helpers.constants import RECENT_COUNT
from src.helpers.logging import get_logger


logger = get_logger(__name__)


async def get_latest_blocks(
    provider: BlockProvider, count: int = RECENT_COUNT
) -> list[BlockRecord]:
    """Get the most recent blocks as header-only records.

    Args:
        provider: Remote ledger adapter
        count: Number of blocks ending at the current height

    Returns:
        Records in ascending block order; blocks the provider does not return
        are left out
    """
    to_block = await provider.get_block_number()
    from_block = max(to_block - count + 1, 0)
    logger.info("Latest block: %d", to_block)

    start = time.monotonic()
    blocks: list[BlockRecord] = []
    for block_number in range(from_block, to_block + 1):
        raw = await provider.get_block(block_number)
        if raw is not None:
            blocks.append(normalize_block(raw, with_transactions=False))

    logger.info(
        "Downloaded the %d last blocks in %.3fs", len(blocks), time.monotonic() - start
    )
    return blocks


async def get_latest_transactions(
    provider: BlockProvider, count: int = RECENT_COUNT
) -> list[TransactionRecord]:
    """Get the first transactions of the block at the current height.

    Args:
        provider: Remote ledger adapter
        count: Maximum number of transactions

    Returns:
        Up to `count` transactions in block order
    """
    block_number = await provider.get_block_number()
    logger.info("Latest block: %d", block_number)

    start = time.monotonic()
    raw = await provider.get_block_with_transactions(block_number)
    if raw is None:
        return []

    block = normalize_block(raw, with_transactions=True)
    transactions = list(block.transactions[:count])

    logger.info(
        "Downloaded the last block (%d) with %d transactions in %.3fs",
        block_number,
        block.transaction_count,
        time.monotonic() - start,
    )
    return transactions


__all__ = ["get_latest_blocks", "get_latest_transactions"]
