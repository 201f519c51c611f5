"""
Tests for per-block event aggregation.
"""
from dataclasses import dataclass

import pytest
from hexbytes import HexBytes
from hypothesis import given, settings, strategies as st
from web3 import Web3

from hermez_sdk.eth.events import (
    EventBatch,
    EventKind,
    aggregate_events,
    decode_log,
    events_by_block,
)
from hermez_sdk.exceptions import BlockHashMismatchError, EventDecodeError

from conftest import BLOCK_HASH_1, BLOCK_HASH_2, CONTRACT_ADDRESS, TX_HASH, logs_by_topic, make_log

OWNER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


@dataclass
class Transfer:
    sender: str
    amount: int
    memo: str
    tx_hash: str


@dataclass
class Paused:
    pass


TRANSFER = EventKind(
    "transfer", "Transfer(address,uint256,string)", Transfer,
    (("sender", True), ("amount", False), ("memo", False)),
    tx_hash_field="tx_hash",
)
PAUSED = EventKind("paused", "Paused()", Paused, ())
KINDS = (TRANSFER, PAUSED)


def _transfer_log(amount, block_hash=BLOCK_HASH_1):
    return make_log(TRANSFER, {"sender": OWNER, "amount": amount, "memo": "hi"}, block_hash=block_hash)


class TestEventKind:

    def test_topic_is_signature_hash(self):
        assert TRANSFER.topic == Web3.to_hex(Web3.keccak(text="Transfer(address,uint256,string)"))

    def test_abi_types(self):
        assert TRANSFER.abi_types == ["address", "uint256", "string"]
        assert PAUSED.abi_types == []


class TestDecodeLog:

    def test_indexed_and_data_params(self):
        record = decode_log(TRANSFER, _transfer_log(5))
        assert record == Transfer(sender=OWNER, amount=5, memo="hi", tx_hash=TX_HASH)

    def test_no_params(self):
        assert decode_log(PAUSED, make_log(PAUSED, {})) == Paused()

    def test_wrong_topic(self):
        with pytest.raises(EventDecodeError):
            decode_log(PAUSED, _transfer_log(5))

    def test_missing_indexed_topic(self):
        log = _transfer_log(5)
        log["topics"] = log["topics"][:1]
        with pytest.raises(EventDecodeError):
            decode_log(TRANSFER, log)

    def test_truncated_data(self):
        log = _transfer_log(5)
        log["data"] = HexBytes(log["data"][:40])
        with pytest.raises(EventDecodeError):
            decode_log(TRANSFER, log)


class TestAggregateEvents:

    def test_empty(self):
        batch = aggregate_events(KINDS, [])
        assert batch.block_hash is None
        assert batch.is_empty()
        assert batch["transfer"] == []
        assert batch["paused"] == []

    def test_same_hash(self):
        batch = aggregate_events(KINDS, [
            ("transfer", "a", BLOCK_HASH_1),
            ("paused", "b", BLOCK_HASH_1),
        ])
        assert batch.block_hash == BLOCK_HASH_1
        assert batch["transfer"] == ["a"]
        assert batch["paused"] == ["b"]
        assert len(batch) == 2

    def test_mismatch(self):
        with pytest.raises(BlockHashMismatchError) as exc_info:
            aggregate_events(KINDS, [
                ("transfer", "a", BLOCK_HASH_1),
                ("paused", "b", BLOCK_HASH_2),
            ])
        assert exc_info.value.expected == BLOCK_HASH_1
        assert exc_info.value.got == BLOCK_HASH_2

    @settings(max_examples=50)
    @given(items=st.lists(st.tuples(st.sampled_from(["transfer", "paused"]), st.integers())))
    def test_order_preserved_per_kind(self, items):
        batch = aggregate_events(KINDS, [(name, value, BLOCK_HASH_1) for name, value in items])
        for name in ("transfer", "paused"):
            assert batch[name] == [value for n, value in items if n == name]
        assert isinstance(batch, EventBatch)


class TestEventsByBlock:

    def test_one_query_per_kind(self, mock_w3):
        events_by_block(mock_w3, CONTRACT_ADDRESS.lower(), KINDS, 42)
        assert mock_w3.eth.get_logs.call_count == 2
        filters = [c[0][0] for c in mock_w3.eth.get_logs.call_args_list]
        assert filters[0] == {
            "address": CONTRACT_ADDRESS,
            "topics": [TRANSFER.topic],
            "fromBlock": 42,
            "toBlock": 42,
        }
        assert filters[1]["topics"] == [PAUSED.topic]

    def test_no_events(self, mock_w3):
        batch, block_hash = events_by_block(mock_w3, CONTRACT_ADDRESS, KINDS, 42)
        assert block_hash is None
        assert batch.is_empty()

    def test_matching_hashes(self, mock_w3):
        logs = [_transfer_log(1), _transfer_log(2), make_log(PAUSED, {})]
        mock_w3.eth.get_logs.side_effect = logs_by_topic(logs)

        batch, block_hash = events_by_block(mock_w3, CONTRACT_ADDRESS, KINDS, 42)

        assert block_hash == BLOCK_HASH_1
        assert batch.block_hash == BLOCK_HASH_1
        assert [t.amount for t in batch["transfer"]] == [1, 2]
        assert batch["paused"] == [Paused()]

    def test_mismatched_hashes(self, mock_w3):
        logs = [_transfer_log(1, BLOCK_HASH_1), make_log(PAUSED, {}, block_hash=BLOCK_HASH_2)]
        mock_w3.eth.get_logs.side_effect = logs_by_topic(logs)

        with pytest.raises(BlockHashMismatchError):
            events_by_block(mock_w3, CONTRACT_ADDRESS, KINDS, 42)

    def test_mismatch_within_one_kind(self, mock_w3):
        logs = [_transfer_log(1, BLOCK_HASH_1), _transfer_log(2, BLOCK_HASH_2)]
        mock_w3.eth.get_logs.side_effect = logs_by_topic(logs)

        with pytest.raises(BlockHashMismatchError):
            events_by_block(mock_w3, CONTRACT_ADDRESS, KINDS, 42)
