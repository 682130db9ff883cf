"""Tests for block models and normalization."""

import pytest

from pydantic import ValidationError

from src.data.blocks.models import (
    BlockRecord,
    RawBlock,
    TransactionRecord,
    normalize_block,
    normalize_transaction,
)
from src.helpers.errors import NormalizationError
from tests.fakes import block_hash, make_raw_block, make_raw_transaction, tx_hash


class TestNormalizeTransaction:
    """Tests for normalize_transaction function."""

    def test_maps_every_field(self) -> None:
        """Test that hex quantities are parsed and addresses kept."""
        tx = normalize_transaction(make_raw_transaction(100, 0))

        assert tx == TransactionRecord(
            hash=tx_hash(100, 0),
            from_address="0x" + "0" * 39 + "1",
            to_address="0x" + "0" * 39 + "2",
            value=10**18,
            gas_price=20 * 10**9,
            gas=21_000,
        )

    def test_contract_creation_has_no_recipient(self) -> None:
        """Test that a null recipient stays None."""
        raw = make_raw_transaction(100, 0)
        raw["to"] = None

        assert normalize_transaction(raw).to_address is None

    def test_missing_gas_price_is_none(self) -> None:
        """Test that a transaction without gasPrice is accepted."""
        raw = make_raw_transaction(100, 0)
        del raw["gasPrice"]

        assert normalize_transaction(raw).gas_price is None

    def test_missing_field_raises(self) -> None:
        """Test that a transaction without value raises NormalizationError."""
        raw = make_raw_transaction(100, 0)
        del raw["value"]

        with pytest.raises(NormalizationError, match="Malformed transaction"):
            normalize_transaction(raw)

    def test_invalid_hex_raises(self) -> None:
        """Test that an invalid quantity raises NormalizationError."""
        raw = make_raw_transaction(100, 0)
        raw["gas"] = "0xnothex"

        with pytest.raises(NormalizationError):
            normalize_transaction(raw)


class TestNormalizeBlock:
    """Tests for normalize_block function."""

    def test_full_block(self) -> None:
        """Test normalization of a block with its transactions."""
        block = normalize_block(make_raw_block(100, tx_count=3), with_transactions=True)

        assert block.number == 100
        assert block.hash == block_hash(100)
        assert block.miner == "0x95222290dd7278aa3ddd389cc1e1d165cc4bafe5"
        assert block.timestamp == 1_680_000_000 + 1_200
        assert block.transaction_count == 3
        assert [tx.hash for tx in block.transactions] == [
            tx_hash(100, 0),
            tx_hash(100, 1),
            tx_hash(100, 2),
        ]
        assert block.transactions[2].value == 3 * 10**18

    def test_header_only_keeps_transaction_count(self) -> None:
        """Test that a header-only record reports the on-chain count."""
        raw = make_raw_block(100, tx_count=5, full=False)
        block = normalize_block(raw, with_transactions=False)

        assert block.transaction_count == 5
        assert block.transactions == ()

    def test_full_block_without_transactions_flag(self) -> None:
        """Test that transaction objects are dropped when not requested."""
        block = normalize_block(make_raw_block(100, tx_count=2), with_transactions=False)

        assert block.transaction_count == 2
        assert block.transactions == ()

    def test_empty_block(self) -> None:
        """Test a block without transactions."""
        block = normalize_block(make_raw_block(100, tx_count=0), with_transactions=True)

        assert block.transaction_count == 0
        assert block.transactions == ()

    def test_pending_block_has_no_number(self) -> None:
        """Test that a pending block keeps null number, hash and miner."""
        raw = make_raw_block(100, tx_count=1)
        raw["number"] = None
        raw["hash"] = None
        raw["miner"] = None

        block = normalize_block(raw, with_transactions=True)

        assert block.number is None
        assert block.hash is None
        assert block.miner is None

    def test_accepts_raw_model(self) -> None:
        """Test that an already validated RawBlock is accepted."""
        raw = RawBlock.model_validate(make_raw_block(7, tx_count=1))

        assert normalize_block(raw, with_transactions=True).number == 7

    def test_transactions_from_hashes_raise(self) -> None:
        """Test that transactions cannot be built from transaction hashes."""
        raw = make_raw_block(100, tx_count=2, full=False)

        with pytest.raises(NormalizationError, match="transaction hashes"):
            normalize_block(raw, with_transactions=True)

    def test_missing_timestamp_raises(self) -> None:
        """Test that a block without timestamp raises NormalizationError."""
        raw = make_raw_block(100)
        del raw["timestamp"]

        with pytest.raises(NormalizationError, match="Malformed block"):
            normalize_block(raw, with_transactions=True)

    def test_malformed_transaction_raises(self) -> None:
        """Test that a malformed embedded transaction raises NormalizationError."""
        raw = make_raw_block(100, tx_count=1)
        del raw["transactions"][0]["hash"]

        with pytest.raises(NormalizationError):
            normalize_block(raw, with_transactions=True)


class TestBlockRecord:
    """Tests for BlockRecord model."""

    def test_record_is_frozen(self) -> None:
        """Test that a stored record cannot be modified."""
        block = normalize_block(make_raw_block(1), with_transactions=True)

        with pytest.raises(ValidationError):
            block.miner = "0x0"  # type: ignore[misc]

    def test_count_must_match_transactions(self) -> None:
        """Test that a populated transaction list must match the count."""
        tx = normalize_transaction(make_raw_transaction(1, 0))

        with pytest.raises(ValidationError, match="does not match"):
            BlockRecord(number=1, timestamp=0, transaction_count=2, transactions=(tx,))

    def test_negative_number_rejected(self) -> None:
        """Test that a negative block number is rejected."""
        with pytest.raises(ValidationError):
            BlockRecord(number=-1, timestamp=0, transaction_count=0)

    def test_json_round_trip_keeps_large_values(self) -> None:
        """Test that wei amounts above 2**64 survive serialization."""
        raw = make_raw_block(1, tx_count=1)
        raw["transactions"][0]["value"] = hex(2**200)
        block = normalize_block(raw, with_transactions=True)

        restored = BlockRecord.model_validate_json(block.model_dump_json())

        assert restored.transactions[0].value == 2**200
        assert restored == block
