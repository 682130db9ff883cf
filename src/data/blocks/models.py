"""Pydantic models for Ethereum blocks and their transactions.

Raw models mirror the JSON-RPC objects returned by eth_getBlockByNumber
(hex-encoded quantities, camelCase keys). Records are the canonical,
immutable shape that is persisted and served: snake_case names and plain
integers, with no hex encoding.
"""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from src.helpers.errors import NormalizationError
from src.helpers.parsers import parse_hex_int, parse_optional_hex_int


class RawTransaction(BaseModel):
    """Transaction object embedded in a full JSON-RPC block."""

    hash: str = Field(..., description="Transaction hash")
    from_address: str = Field(..., description="Sender address", alias="from")
    to_address: str | None = Field(
        default=None, description="Recipient, None for contract creation", alias="to"
    )
    value: str = Field(..., description="Value in wei as hex string")
    gas_price: str | None = Field(
        default=None, description="Gas price in wei as hex string", alias="gasPrice"
    )
    gas: str = Field(..., description="Gas limit as hex string")

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class RawBlock(BaseModel):
    """Block object returned by eth_getBlockByNumber.

    `transactions` holds hashes for a header-only block and transaction
    objects for a full block.
    """

    number: str | None = Field(default=None, description="Block number as hex string")
    hash: str | None = Field(default=None, description="Block hash")
    miner: str | None = Field(default=None, description="Miner/author address")
    timestamp: str = Field(..., description="Block timestamp as hex string")
    transactions: list[RawTransaction | str] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class TransactionRecord(BaseModel):
    """Normalized transaction. Amounts are in wei."""

    hash: str
    from_address: str
    to_address: str | None = None
    value: int = Field(..., ge=0)
    gas_price: int | None = Field(default=None, ge=0)
    gas: int = Field(..., ge=0)

    model_config = ConfigDict(frozen=True)


class BlockRecord(BaseModel):
    """Normalized block.

    A header-only record has no transactions but still reports the on-chain
    transaction count.
    """

    number: int | None = Field(default=None, ge=0)
    hash: str | None = None
    miner: str | None = None
    timestamp: int = Field(..., ge=0)
    transaction_count: int = Field(..., ge=0)
    transactions: tuple[TransactionRecord, ...] = ()

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_transaction_count(self) -> Self:
        if self.transactions and len(self.transactions) != self.transaction_count:
            msg = (
                f"transaction_count={self.transaction_count} does not match "
                f"{len(self.transactions)} transactions"
            )
            raise ValueError(msg)
        return self


def normalize_transaction(raw: RawTransaction | dict[str, Any]) -> TransactionRecord:
    """Map a raw transaction field by field into a TransactionRecord.

    Raises:
        NormalizationError: If the raw transaction is malformed
    """
    try:
        tx = raw if isinstance(raw, RawTransaction) else RawTransaction.model_validate(raw)
        return TransactionRecord(
            hash=tx.hash,
            from_address=tx.from_address,
            to_address=tx.to_address,
            value=parse_hex_int(tx.value),
            gas_price=parse_optional_hex_int(tx.gas_price),
            gas=parse_hex_int(tx.gas),
        )
    except (ValidationError, ValueError) as e:
        msg = f"Malformed transaction: {e}"
        raise NormalizationError(msg) from e


def normalize_block(
    raw: RawBlock | dict[str, Any], *, with_transactions: bool
) -> BlockRecord:
    """Normalize a raw JSON-RPC block.

    The transaction count is taken from the raw collection before any
    transaction is normalized, so a header-only record keeps the true count.

    Args:
        raw: Raw block object (header-only or full)
        with_transactions: Populate the transaction list; requires a full block

    Returns:
        BlockRecord: Immutable normalized block

    Raises:
        NormalizationError: If the raw block is malformed, or if transactions
            are requested from a block that only carries hashes
    """
    try:
        block = raw if isinstance(raw, RawBlock) else RawBlock.model_validate(raw)
        number = parse_optional_hex_int(block.number)
        timestamp = parse_hex_int(block.timestamp)
    except (ValidationError, ValueError) as e:
        msg = f"Malformed block: {e}"
        raise NormalizationError(msg) from e

    transaction_count = len(block.transactions)

    transactions: list[TransactionRecord] = []
    if with_transactions:
        for item in block.transactions:
            if not isinstance(item, RawTransaction):
                msg = f"Block {number} carries transaction hashes, not objects"
                raise NormalizationError(msg)
            transactions.append(normalize_transaction(item))

    return BlockRecord(
        number=number,
        hash=block.hash,
        miner=block.miner,
        timestamp=timestamp,
        transaction_count=transaction_count,
        transactions=tuple(transactions),
    )


__all__ = [
    "BlockRecord",
    "RawBlock",
    "RawTransaction",
    "TransactionRecord",
    "normalize_block",
    "normalize_transaction",
]
