"""Block store: persistence of normalized blocks keyed by block number."""

from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from typing import Protocol

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from src.data.blocks.db import BlockDB, TransactionDB
from src.data.blocks.models import BlockRecord, TransactionRecord
from src.helpers.db import create_session_factory, create_tables
from src.helpers.errors import DuplicateBlockError, StoreQueryError
from src.helpers.logging import get_logger


logger = get_logger(__name__)


class BlockStore(Protocol):
    """Operations the crawler needs from a block store."""

    async def exists(self, block_number: int) -> bool: ...

    async def insert(self, block: BlockRecord) -> None: ...

    async def fetch(self, block_number: int) -> BlockRecord | None: ...

    async def fetch_all(self) -> list[BlockRecord]: ...

    async def delete_all(self) -> int: ...

    async def replace(self, block_number: int, block: BlockRecord) -> bool: ...


def _to_db(block: BlockRecord) -> BlockDB:
    return BlockDB(
        number=block.number,
        hash=block.hash,
        miner=block.miner,
        timestamp=block.timestamp,
        transaction_count=block.transaction_count,
        transactions=[
            TransactionDB(
                position=position,
                hash=tx.hash,
                from_address=tx.from_address,
                to_address=tx.to_address,
                value=tx.value,
                gas_price=tx.gas_price,
                gas=tx.gas,
            )
            for position, tx in enumerate(block.transactions)
        ],
    )


def _from_db(row: BlockDB) -> BlockRecord:
    return BlockRecord(
        number=row.number,
        hash=row.hash,
        miner=row.miner,
        timestamp=row.timestamp,
        transaction_count=row.transaction_count,
        transactions=tuple(
            TransactionRecord(
                hash=tx.hash,
                from_address=tx.from_address,
                to_address=tx.to_address,
                value=tx.value,
                gas_price=tx.gas_price,
                gas=tx.gas,
            )
            for tx in row.transactions
        ),
    )


class SqlBlockStore:
    """SQLAlchemy implementation of BlockStore.

    Each block is one row in `blocks`; its transactions live in
    `transactions`, ordered by their position in the block. Every
    SQLAlchemy failure surfaces as StoreQueryError.

    Example:
        ```python
        from src.helpers.db import create_db_engine

        store = SqlBlockStore(create_db_engine("sqlite+aiosqlite:///blocks.db"))
        await store.create_schema()
        if not await store.exists(17_000_000):
            await store.insert(block)
        ```
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self.session_factory = create_session_factory(engine)

    @asynccontextmanager
    async def _session(self, action: str) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                msg = f"Failed to {action}: {e}"
                raise StoreQueryError(msg) from e

    async def create_schema(self) -> None:
        """Create the blocks and transactions tables if they are missing."""
        try:
            await create_tables(self.engine)
        except SQLAlchemyError as e:
            msg = f"Failed to create tables: {e}"
            raise StoreQueryError(msg) from e

    async def exists(self, block_number: int) -> bool:
        """Check whether a block with this number is stored."""
        async with self._session(f"look up block {block_number}") as session:
            stmt = select(BlockDB.number).where(BlockDB.number == block_number)
            result = await session.execute(stmt.limit(1))
            return result.scalar_one_or_none() is not None

    async def insert(self, block: BlockRecord) -> None:
        """Insert a new block with its transactions.

        Raises:
            DuplicateBlockError: If the block number is already stored
            StoreQueryError: If the block has no number or the insert fails
        """
        if block.number is None:
            msg = "Cannot store a pending block without a number"
            raise StoreQueryError(msg)

        async with self._session(f"insert block {block.number}") as session:
            session.add(_to_db(block))
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise DuplicateBlockError(block.number) from e

    async def fetch(self, block_number: int) -> BlockRecord | None:
        """Fetch one block with its transactions."""
        async with self._session(f"fetch block {block_number}") as session:
            row = await session.get(BlockDB, block_number)
            return _from_db(row) if row is not None else None

    async def fetch_all(self) -> list[BlockRecord]:
        """Fetch every stored block."""
        async with self._session("fetch blocks") as session:
            result = await session.execute(select(BlockDB).order_by(BlockDB.number))
            rows: Sequence[BlockDB] = result.scalars().all()
            return [_from_db(row) for row in rows]

    async def delete_all(self) -> int:
        """Delete every block and transaction.

        Returns:
            Number of blocks removed
        """
        async with self._session("delete blocks") as session:
            await session.execute(delete(TransactionDB))
            result = await session.execute(delete(BlockDB))
            await session.commit()
            deleted = result.rowcount or 0  # type: ignore[attr-defined]
            logger.info("Deleted %d blocks", deleted)
            return deleted

    async def replace(self, block_number: int, block: BlockRecord) -> bool:
        """Replace the stored block with this number.

        Returns:
            True if a block was replaced, False if none was stored

        Raises:
            ValueError: If the new block carries a different number
        """
        if block.number != block_number:
            msg = f"Cannot replace block {block_number} with block {block.number}"
            raise ValueError(msg)

        async with self._session(f"replace block {block_number}") as session:
            existing = await session.get(BlockDB, block_number)
            if existing is None:
                return False

            await session.delete(existing)
            await session.flush()
            session.add(_to_db(block))
            await session.commit()
            return True


__all__ = ["BlockStore", "SqlBlockStore"]
