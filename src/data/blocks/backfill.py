"""Backfill Ethereum blocks and their transactions over a block range.

Blocks are processed one at a time in ascending order:

1. Skip the block if the store already has it (no fetch is issued)
2. Fetch the full block from the provider, retrying transient failures
3. Normalize it and insert it in the store

Every block yields a BlockOutcome so a run that had to give up on some blocks
is visible in its BackfillSummary. Reruns over the same range only fetch the
blocks that are still missing.
"""

import asyncio
import time
from collections.abc import Callable
from enum import StrEnum
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field
from rich.console import Console

from src.data.blocks.models import BlockRecord, normalize_block
from src.data.blocks.provider import BlockProvider
from src.data.blocks.store import BlockStore
from src.helpers.backfill import BackfillBase
from src.helpers.config import CrawlerConfig
from src.helpers.constants import FETCH_RETRIES, RETRY_DELAY
from src.helpers.errors import TransientFetchError
from src.helpers.logging import get_logger
from src.helpers.progress import track_progress


logger = get_logger(__name__)

# Called with (block number, blocks per second) after each block
ProgressCallback = Callable[[int, float], None]


class BlockStatus(StrEnum):
    """Terminal outcome of one block number."""

    STORED = "stored"
    EXISTING = "existing"
    SKIPPED = "skipped"


class BlockOutcome(BaseModel):
    """What happened to one block number during a run."""

    block_number: int
    status: BlockStatus
    attempts: int = Field(default=0, description="Fetch calls issued")
    reason: str | None = Field(default=None, description="Why the block was skipped")

    model_config = ConfigDict(frozen=True)


class BackfillSummary(BaseModel):
    """Outcomes of a backfill run, in processing order."""

    from_block: int
    to_block: int
    outcomes: list[BlockOutcome] = Field(default_factory=list)
    elapsed: float = 0.0

    def _with_status(self, status: BlockStatus) -> list[BlockOutcome]:
        return [outcome for outcome in self.outcomes if outcome.status == status]

    @property
    def stored(self) -> list[BlockOutcome]:
        return self._with_status(BlockStatus.STORED)

    @property
    def existing(self) -> list[BlockOutcome]:
        return self._with_status(BlockStatus.EXISTING)

    @property
    def skipped(self) -> list[BlockOutcome]:
        return self._with_status(BlockStatus.SKIPPED)

    @property
    def is_complete(self) -> bool:
        """True when every block of the range is now stored."""
        return not self.skipped

    @property
    def blocks_per_second(self) -> float:
        if self.elapsed <= 0:
            return 0.0
        return len(self.outcomes) / self.elapsed


class BackfillBlocks(BackfillBase):
    """Sequential, resumable block range backfill."""

    def __init__(
        self,
        provider: BlockProvider,
        store: BlockStore,
        max_attempts: int = FETCH_RETRIES,
        retry_delay: float = RETRY_DELAY,
        console: Console | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        """Initialize backfill.

        Args:
            provider: Remote ledger adapter
            store: Block store adapter
            max_attempts: Fetch attempts per block before it is skipped
            retry_delay: Fixed delay between two attempts in seconds
            console: Console for the progress bar
            on_progress: Optional callback receiving (block number, blocks/s)
        """
        super().__init__(max_attempts, retry_delay, console)
        self.provider = provider
        self.store = store
        self.on_progress = on_progress

    @classmethod
    def from_config(
        cls,
        config: CrawlerConfig,
        provider: BlockProvider,
        store: BlockStore,
        **kwargs: Any,
    ) -> Self:
        """Build a backfill using the retry settings of a configuration."""
        return cls(
            provider,
            store,
            max_attempts=config.fetch_retries,
            retry_delay=config.retry_delay,
            **kwargs,
        )

    async def _fetch_and_store(self, block_number: int) -> BlockOutcome:
        last_error: TransientFetchError | None = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                raw = await self.provider.get_block_with_transactions(block_number)
            except TransientFetchError as e:
                last_error = e
                logger.warning(
                    "Error downloading block %d (attempt %d/%d): %s",
                    block_number,
                    attempt,
                    self.max_attempts,
                    e,
                )
                # Don't sleep after the last attempt
                if attempt < self.max_attempts:
                    await asyncio.sleep(self.retry_delay)
                continue

            if raw is None:
                logger.warning("Block %d not found, skipping", block_number)
                return BlockOutcome(
                    block_number=block_number,
                    status=BlockStatus.SKIPPED,
                    attempts=attempt,
                    reason="not found",
                )

            block = normalize_block(raw, with_transactions=True)
            if block.number is None:
                logger.warning("Block %d is still pending, skipping", block_number)
                return BlockOutcome(
                    block_number=block_number,
                    status=BlockStatus.SKIPPED,
                    attempts=attempt,
                    reason="pending",
                )

            await self.store.insert(block)
            logger.debug(
                "Stored block %d with %d transactions",
                block_number,
                block.transaction_count,
            )
            return BlockOutcome(
                block_number=block_number, status=BlockStatus.STORED, attempts=attempt
            )

        logger.warning(
            "Skipping block %d after %d failed attempts, it will not be stored: %s",
            block_number,
            self.max_attempts,
            last_error,
        )
        return BlockOutcome(
            block_number=block_number,
            status=BlockStatus.SKIPPED,
            attempts=self.max_attempts,
            reason=str(last_error),
        )

    async def process_block(self, block_number: int) -> BlockOutcome:
        """Store one block unless it is already stored.

        Raises:
            StoreQueryError: If the store fails; never retried
            NormalizationError: If the provider returned a malformed block
        """
        if await self.store.exists(block_number):
            return BlockOutcome(block_number=block_number, status=BlockStatus.EXISTING)
        return await self._fetch_and_store(block_number)

    async def run(self, from_block: int, to_block: int) -> BackfillSummary:
        """Backfill every block of the inclusive range [from_block, to_block].

        Args:
            from_block: First block number
            to_block: Last block number (inclusive)

        Returns:
            BackfillSummary with one outcome per block number
        """
        summary = BackfillSummary(from_block=from_block, to_block=to_block)
        if from_block > to_block:
            logger.info("Empty range %d..%d, nothing to download", from_block, to_block)
            return summary

        total = to_block - from_block + 1
        logger.info("Downloading %d blocks (%d to %d)", total, from_block, to_block)
        start = time.monotonic()

        with track_progress("Downloading", total, self.console) as (progress, task):
            for block_number in range(from_block, to_block + 1):
                outcome = await self.process_block(block_number)
                summary.outcomes.append(outcome)

                elapsed = time.monotonic() - start
                rate = len(summary.outcomes) / elapsed if elapsed > 0 else 0.0
                progress.update(
                    task,
                    advance=1,
                    description=f"{outcome.status.capitalize()}... Block {block_number}",
                )
                if self.on_progress is not None:
                    self.on_progress(block_number, rate)

        summary.elapsed = time.monotonic() - start
        logger.info(
            "Processed %d blocks in %.2fs (%.2f blocks/s): %d stored, %d existing, %d skipped",
            total,
            summary.elapsed,
            summary.blocks_per_second,
            len(summary.stored),
            len(summary.existing),
            len(summary.skipped),
        )
        if not summary.is_complete:
            logger.warning(
                "Incomplete run, blocks not stored: %s",
                ", ".join(str(outcome.block_number) for outcome in summary.skipped),
            )
        return summary

    async def download_history(self, from_block: int) -> BackfillSummary:
        """Backfill from a block up to the current chain height."""
        to_block = await self.provider.get_block_number()
        return await self.run(from_block, to_block)

    async def ensure_history(self, from_block: int) -> list[BlockRecord]:
        """Return every stored block, downloading history first if the store is empty."""
        blocks = await self.store.fetch_all()
        if blocks:
            return blocks

        logger.info("No data in database, downloading from block %d", from_block)
        await self.download_history(from_block)
        return await self.store.fetch_all()


__all__ = [
    "BackfillBlocks",
    "BackfillSummary",
    "BlockOutcome",
    "BlockStatus",
    "ProgressCallback",
]
