"""
EthereumClient - authorized and read-only calls against an Ethereum node.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Protocol, TypeVar

import requests
from hexbytes import HexBytes
from web3 import Web3
from web3.exceptions import Web3Exception

from ..config import DEFAULT_CALL_GAS_LIMIT, DEFAULT_GAS_PRICE_DIV, EthereumConfig
from ..exceptions import NoAccountError, TransactionError
from ..models import Block, SentTransaction

logger = logging.getLogger(__name__)

T = TypeVar('T')


class Signer(Protocol):
    """Protocol for transaction signers (eth_account LocalAccount satisfies it)"""
    address: str

    def sign_transaction(self, transaction_dict: Dict[str, Any]) -> Any:
        """Sign transaction and return signed tx object"""
        ...


def increased_gas_price(suggested: int, divisor: int) -> int:
    """
    Add a safety margin of suggested/divisor to a suggested gas price.

    Args:
        suggested: Gas price suggested by the node (wei)
        divisor: Margin divisor; 100 adds 1%

    Returns:
        suggested + suggested // divisor
    """
    if divisor <= 0:
        raise ValueError(f"Gas price divisor must be positive, got {divisor}")
    return suggested + suggested // divisor


def _to_hex(value: Any) -> str:
    return Web3.to_hex(HexBytes(value))


@dataclass
class TransactOpts:
    """
    Signing context of one authorized call.

    A fresh instance is created for every call so that no state leaks from
    one transaction into the next.
    """
    from_address: str
    signer: Signer
    chain_id: int
    gas_price: int
    gas_limit: int
    value: int = 0

    def tx_params(self, nonce: int) -> Dict[str, Any]:
        return {
            "from": self.from_address,
            "chainId": self.chain_id,
            "gas": self.gas_limit,
            "gasPrice": self.gas_price,
            "value": self.value,
            "nonce": nonce,
        }

    def transact(self, w3: Web3, contract_function: Any) -> SentTransaction:
        """
        Build, sign and broadcast a contract function call.

        Args:
            w3: Web3 instance connected to the node
            contract_function: Bound web3 ContractFunction (e.g.
                ``contract.functions.bid(slot, amount)``)

        Returns:
            The broadcast transaction
        """
        nonce = w3.eth.get_transaction_count(self.from_address, "pending")
        tx = contract_function.build_transaction(self.tx_params(nonce))
        signed_tx = self.signer.sign_transaction(tx)
        tx_hash = w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        return SentTransaction(
            tx_hash=_to_hex(tx_hash),
            from_address=self.from_address,
            nonce=nonce,
            gas=self.gas_limit,
            gas_price=self.gas_price,
        )


class EthereumClient:
    """
    Client for calling Smart Contract methods and reading blockchain data.

    The account is optional: without it the client works in read-only mode
    and every authorized call fails with NoAccountError.
    """

    def __init__(
        self,
        w3: Web3,
        account: Optional[Signer] = None,
        config: Optional[EthereumConfig] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the EthereumClient

        Args:
            w3: Web3 instance connected to the Ethereum node
            account: Signer for authorized calls (None for read-only mode)
            config: Gas parameters (defaults: call gas limit 300000, divisor 100)
            logger: Optional logger instance to use for debug/info logging
        """
        self.w3 = w3
        self.account = account
        self.config = config or EthereumConfig(
            call_gas_limit=DEFAULT_CALL_GAS_LIMIT,
            gas_price_div=DEFAULT_GAS_PRICE_DIV,
        )
        self.logger = logger or logging.getLogger(__name__)
        self.chain_id = self.eth_chain_id()

    @classmethod
    def from_rpc_url(
        cls,
        rpc_url: str,
        account: Optional[Signer] = None,
        config: Optional[EthereumConfig] = None,
        timeout: int = 30
    ) -> "EthereumClient":
        w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))
        return cls(w3, account=account, config=config)

    def eth_chain_id(self) -> int:
        return int(self.w3.eth.chain_id)

    def eth_address(self) -> str:
        """
        Get the address of the signing account

        Raises:
            NoAccountError: If the client is in read-only mode
        """
        if self.account is None:
            raise NoAccountError()
        return self.account.address

    def eth_suggest_gas_price(self) -> int:
        return int(self.w3.eth.gas_price)

    def new_auth(self, gas_limit: int = 0) -> TransactOpts:
        """
        Build the signing context for an authorized call.

        Args:
            gas_limit: Gas limit override; 0 uses the configured default

        Returns:
            TransactOpts with a gas price raised above the node suggestion

        Raises:
            NoAccountError: If no account is configured
            TransactionError: If the gas price cannot be fetched
        """
        if self.account is None:
            raise NoAccountError()

        try:
            suggested = self.eth_suggest_gas_price()
        except Web3Exception:
            raise
        except requests.RequestException as e:
            self.logger.error(f"Failed to fetch gas price: {e}")
            raise TransactionError(f"Failed to fetch gas price: {str(e)}") from e
        gas_price = increased_gas_price(suggested, self.config.gas_price_div)
        self.logger.debug(f"Transaction metadata gasPrice={gas_price} (suggested={suggested})")

        return TransactOpts(
            from_address=self.account.address,
            signer=self.account,
            chain_id=self.chain_id,
            gas_price=gas_price,
            gas_limit=gas_limit if gas_limit else self.config.call_gas_limit,
            value=0,
        )

    def call_auth(self, gas_limit: int, fn: Callable[[Web3, TransactOpts], T]) -> T:
        """
        Perform a Smart Contract method call that requires authorization.

        The call requires a valid account with Ether that can be spent
        during the call.

        Args:
            gas_limit: Gas limit override; 0 uses the configured default
            fn: Build function receiving the Web3 instance and the signing
                context; it encodes and broadcasts the specific call

        Returns:
            Whatever fn returns, normally a SentTransaction

        Raises:
            NoAccountError: If no account is configured (no network call is made)
            TransactionError: If the gas price cannot be fetched
        """
        auth = self.new_auth(gas_limit)
        result = fn(self.w3, auth)
        if isinstance(result, SentTransaction):
            self.logger.debug(f"Transaction {result.tx_hash} nonce={result.nonce}")
        return result

    def call(self, fn: Callable[[Web3], T]) -> T:
        """Perform a read only Smart Contract method call."""
        return fn(self.w3)

    def balance_at(self, address: str) -> int:
        return int(self.w3.eth.get_balance(Web3.to_checksum_address(address)))

    def eth_pending_nonce_at(self, address: str) -> int:
        return int(self.w3.eth.get_transaction_count(Web3.to_checksum_address(address), "pending"))

    def eth_transaction_receipt(self, tx_hash: str) -> Any:
        return self.w3.eth.get_transaction_receipt(tx_hash)

    def eth_last_block(self) -> int:
        """Get the number of the last block in the blockchain"""
        return int(self.w3.eth.block_number)

    def eth_block_by_number(self, number: int) -> Block:
        """
        Get the header summary of a block.

        Args:
            number: Block number, or -1 for the latest known block
        """
        block_id = "latest" if number == -1 else number
        header = self.w3.eth.get_block(block_id)
        return Block(
            num=int(header["number"]),
            timestamp=datetime.fromtimestamp(int(header["timestamp"]), tz=timezone.utc),
            hash=_to_hex(header["hash"]),
            parent_hash=_to_hex(header["parentHash"]),
        )
