"""
Tests for EthereumClient authorized calls and read helpers.
"""
from datetime import datetime, timezone
from unittest.mock import MagicMock, PropertyMock

import pytest
import requests
from hexbytes import HexBytes
from hypothesis import given, settings, strategies as st
from web3.exceptions import Web3Exception

from hermez_sdk.config import EthereumConfig
from hermez_sdk.eth.client import EthereumClient, TransactOpts, increased_gas_price
from hermez_sdk.exceptions import NoAccountError, TransactionError
from hermez_sdk.models import SentTransaction

from conftest import BLOCK_HASH_1, BLOCK_HASH_2, CONTRACT_ADDRESS, TEST_CHAIN_ID, TEST_GAS_PRICE, TX_HASH


def _contract_function():
    fn = MagicMock()
    fn.build_transaction.side_effect = lambda params: {
        **params, "to": CONTRACT_ADDRESS, "data": "0x12345678"
    }
    return fn


class TestIncreasedGasPrice:

    def test_default_divisor(self):
        assert increased_gas_price(1000, 100) == 1010
        assert increased_gas_price(99, 100) == 99

    @pytest.mark.parametrize("divisor", [0, -5])
    def test_invalid_divisor(self, divisor):
        with pytest.raises(ValueError):
            increased_gas_price(1000, divisor)

    @settings(max_examples=50)
    @given(
        suggested=st.integers(min_value=0, max_value=10**30),
        divisor=st.integers(min_value=1, max_value=10**6),
    )
    def test_margin_property(self, suggested, divisor):
        price = increased_gas_price(suggested, divisor)
        assert price == suggested + suggested // divisor
        assert suggested <= price <= 2 * suggested


class TestCallAuth:

    def test_no_account_makes_no_network_call(self, mock_w3):
        gas_price = PropertyMock(return_value=TEST_GAS_PRICE)
        type(mock_w3.eth).gas_price = gas_price
        client = EthereumClient(mock_w3)
        build_fn = MagicMock()

        with pytest.raises(NoAccountError):
            client.call_auth(0, build_fn)
        gas_price.assert_not_called()
        build_fn.assert_not_called()

    def test_opts_built_from_suggested_price(self, mock_w3, test_account):
        client = EthereumClient(mock_w3, account=test_account)
        captured = {}

        def build_fn(w3, opts):
            captured["w3"] = w3
            captured["opts"] = opts
            return "result"

        assert client.call_auth(0, build_fn) == "result"
        opts = captured["opts"]
        assert captured["w3"] is mock_w3
        assert isinstance(opts, TransactOpts)
        assert opts.from_address == test_account.address
        assert opts.chain_id == TEST_CHAIN_ID
        assert opts.gas_price == TEST_GAS_PRICE + TEST_GAS_PRICE // 100
        assert opts.gas_limit == 300000
        assert opts.value == 0

    def test_gas_limit_override_and_config(self, mock_w3, test_account):
        config = EthereumConfig(call_gas_limit=123456, gas_price_div=10)
        client = EthereumClient(mock_w3, account=test_account, config=config)
        opts = client.call_auth(0, lambda w3, o: o)
        assert opts.gas_limit == 123456
        assert opts.gas_price == TEST_GAS_PRICE + TEST_GAS_PRICE // 10
        assert client.call_auth(50000, lambda w3, o: o).gas_limit == 50000

    def test_fresh_opts_per_call(self, mock_w3, test_account):
        client = EthereumClient(mock_w3, account=test_account)
        first = client.call_auth(0, lambda w3, o: o)
        mock_w3.eth.gas_price = 2 * TEST_GAS_PRICE
        second = client.call_auth(0, lambda w3, o: o)
        assert first is not second
        assert second.gas_price == 2 * TEST_GAS_PRICE + 2 * TEST_GAS_PRICE // 100

    def test_transport_error_wrapped(self, mock_w3, test_account):
        client = EthereumClient(mock_w3, account=test_account)
        type(mock_w3.eth).gas_price = PropertyMock(side_effect=requests.ConnectionError("node down"))
        with pytest.raises(TransactionError, match="node down"):
            client.call_auth(0, lambda w3, o: o)

    def test_web3_error_propagates(self, mock_w3, test_account):
        client = EthereumClient(mock_w3, account=test_account)
        error = Web3Exception("rpc failure")
        type(mock_w3.eth).gas_price = PropertyMock(side_effect=error)
        with pytest.raises(Web3Exception) as exc_info:
            client.call_auth(0, lambda w3, o: o)
        assert exc_info.value is error

    def test_build_fn_error_propagates(self, mock_w3, test_account):
        client = EthereumClient(mock_w3, account=test_account)

        def build_fn(w3, opts):
            raise RuntimeError("revert")

        with pytest.raises(RuntimeError, match="revert"):
            client.call_auth(0, build_fn)

    def test_transact_signs_and_sends(self, mock_w3, test_account):
        client = EthereumClient(mock_w3, account=test_account)
        fn = _contract_function()

        sent = client.call_auth(0, lambda w3, opts: opts.transact(w3, fn))

        assert isinstance(sent, SentTransaction)
        assert sent.tx_hash == TX_HASH
        assert sent.nonce == 7
        assert sent.from_address == test_account.address
        assert sent.gas_price == TEST_GAS_PRICE + TEST_GAS_PRICE // 100
        mock_w3.eth.get_transaction_count.assert_called_once_with(test_account.address, "pending")
        params = fn.build_transaction.call_args[0][0]
        assert params["chainId"] == TEST_CHAIN_ID
        assert params["nonce"] == 7
        assert params["value"] == 0
        raw = mock_w3.eth.send_raw_transaction.call_args[0][0]
        assert len(raw) > 0


class TestReadHelpers:

    def test_chain_id_fetched_once(self, mock_w3):
        client = EthereumClient(mock_w3)
        assert client.chain_id == TEST_CHAIN_ID

    def test_eth_address(self, mock_w3, test_account):
        assert EthereumClient(mock_w3, account=test_account).eth_address() == test_account.address
        with pytest.raises(NoAccountError):
            EthereumClient(mock_w3).eth_address()

    def test_last_block_and_nonce(self, mock_w3, test_account):
        client = EthereumClient(mock_w3)
        assert client.eth_last_block() == 100
        assert client.eth_pending_nonce_at(test_account.address.lower()) == 7
        mock_w3.eth.get_transaction_count.assert_called_with(test_account.address, "pending")

    def test_balance(self, mock_w3, test_account):
        mock_w3.eth.get_balance.return_value = 10**18
        assert EthereumClient(mock_w3).balance_at(test_account.address) == 10**18

    def test_block_by_number(self, mock_w3):
        mock_w3.eth.get_block.return_value = {
            "number": 5,
            "timestamp": 1600000000,
            "hash": HexBytes(BLOCK_HASH_1),
            "parentHash": HexBytes(BLOCK_HASH_2),
        }
        client = EthereumClient(mock_w3)

        block = client.eth_block_by_number(5)
        mock_w3.eth.get_block.assert_called_with(5)
        assert block.num == 5
        assert block.hash == BLOCK_HASH_1
        assert block.parent_hash == BLOCK_HASH_2
        assert block.timestamp == datetime.fromtimestamp(1600000000, tz=timezone.utc)

        client.eth_block_by_number(-1)
        mock_w3.eth.get_block.assert_called_with("latest")

    def test_read_only_call(self, mock_w3):
        client = EthereumClient(mock_w3)
        assert client.call(lambda w3: w3 is mock_w3)
