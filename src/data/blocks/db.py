"""Database models for blocks and transactions."""

from decimal import Decimal
from typing import Any

from sqlalchemy import BigInteger, Dialect, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator, TypeEngine

from src.helpers.db import Base


class Uint256(TypeDecorator[int]):
    """Unsigned 256-bit integer stored without loss of precision.

    PostgreSQL keeps it as NUMERIC(78, 0), wide enough for any uint256.
    SQLite converts NUMERIC values through floats, so every other dialect
    stores the decimal string instead.
    """

    impl = String(78)
    cache_ok = True

    def load_dialect_impl(self, dialect: Dialect) -> TypeEngine[Any]:
        if dialect.name == "postgresql":
            return dialect.type_descriptor(Numeric(78, 0))
        return dialect.type_descriptor(String(78))

    def process_bind_param(self, value: int | None, dialect: Dialect) -> Decimal | str | None:
        if value is None:
            return None
        if dialect.name == "postgresql":
            return Decimal(value)
        return str(value)

    def process_result_value(self, value: Any, dialect: Dialect) -> int | None:
        if value is None:
            return None
        return int(value)


class BlockDB(Base):
    """Ethereum block database model."""

    __tablename__ = "blocks"

    number: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    hash: Mapped[str | None] = mapped_column(String(66), index=True, nullable=True)
    miner: Mapped[str | None] = mapped_column(String(42), index=True, nullable=True)
    timestamp: Mapped[int] = mapped_column(Uint256, nullable=False)
    transaction_count: Mapped[int] = mapped_column(Integer, nullable=False)

    transactions: Mapped[list["TransactionDB"]] = relationship(
        back_populates="block",
        order_by="TransactionDB.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class TransactionDB(Base):
    """Ethereum transaction database model, ordered by position in its block."""

    __tablename__ = "transactions"

    block_number: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("blocks.number", ondelete="CASCADE"), primary_key=True
    )
    position: Mapped[int] = mapped_column(Integer, primary_key=True)
    hash: Mapped[str] = mapped_column(String(66), index=True, nullable=False)
    from_address: Mapped[str] = mapped_column(String(42), index=True, nullable=False)
    to_address: Mapped[str | None] = mapped_column(String(42), nullable=True)
    value: Mapped[int] = mapped_column(Uint256, nullable=False, doc="Wei")
    gas_price: Mapped[int | None] = mapped_column(
        Uint256, nullable=True, doc="Wei per gas unit"
    )
    gas: Mapped[int] = mapped_column(Uint256, nullable=False, doc="Gas limit")

    block: Mapped[BlockDB] = relationship(back_populates="transactions")


__all__ = ["BlockDB", "TransactionDB", "Uint256"]
