"""
Pytest fixtures for the Hermez SDK tests.
"""
import pytest
from unittest.mock import MagicMock

from eth_abi import encode as abi_encode
from eth_account import Account
from hexbytes import HexBytes
from web3 import Web3

from hermez_sdk._rate_limited_log import reset_rate_limits
from hermez_sdk.babyjub import Point
from hermez_sdk.exceptions import InvalidFormatError

# Well-known development key (hardhat account #0); never holds real funds
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_CHAIN_ID = 1337
TEST_GAS_PRICE = 1_000_000_000
PROVER_URL = "http://prover.test"
CONTRACT_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"

BLOCK_HASH_1 = "0x" + "11" * 32
BLOCK_HASH_2 = "0x" + "22" * 32
TX_HASH = "0x" + "ab" * 32


@pytest.fixture(autouse=True)
def _reset_rate_limits():
    reset_rate_limits()
    yield
    reset_rate_limits()


@pytest.fixture
def test_account():
    return Account.from_key(TEST_PRIVATE_KEY)


@pytest.fixture
def mock_w3():
    """Web3 stand-in answering the node calls the clients make"""
    w3 = MagicMock()
    w3.eth.chain_id = TEST_CHAIN_ID
    w3.eth.gas_price = TEST_GAS_PRICE
    w3.eth.block_number = 100
    w3.eth.get_transaction_count.return_value = 7
    w3.eth.send_raw_transaction.return_value = HexBytes(TX_HASH)
    w3.eth.get_logs.return_value = []
    return w3


def make_log(kind, values, block_hash=BLOCK_HASH_1, tx_hash=TX_HASH):
    """
    Build a raw log for an event kind, the way a node returns it.

    Args:
        kind: EventKind describing the event
        values: Mapping of record field -> value
    """
    types = kind.abi_types
    topics = [HexBytes(kind.topic)]
    plain_types, plain_values = [], []
    for (name, indexed), abi_type in zip(kind.params, types):
        if indexed:
            topics.append(HexBytes(abi_encode([abi_type], [values[name]])))
        else:
            plain_types.append(abi_type)
            plain_values.append(values[name])
    data = abi_encode(plain_types, plain_values) if plain_types else b""
    return {
        "address": CONTRACT_ADDRESS,
        "topics": topics,
        "data": HexBytes(data),
        "blockHash": HexBytes(block_hash),
        "transactionHash": HexBytes(tx_hash),
    }


def logs_by_topic(logs):
    """get_logs side effect returning the logs whose first topic matches the filter"""
    def _get_logs(filter_params):
        topic = filter_params["topics"][0]
        return [log for log in logs if Web3.to_hex(log["topics"][0]) == topic]
    return _get_logs


def off_curve_compressed():
    """Compressed bytes of a y coordinate with no matching x on the curve"""
    for y in range(2, 200):
        comp = y.to_bytes(32, "little")
        try:
            Point.decompress(comp)
        except InvalidFormatError:
            return comp
    raise AssertionError("no off-curve y found")
