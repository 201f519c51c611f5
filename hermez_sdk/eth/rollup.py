"""
Rollup contract events.
"""
from dataclasses import dataclass

from .events import ContractEventsClient, EventKind


@dataclass
class L1UserTx:
    to_forge_l1_txs_num: int
    position: int
    # Raw L1 transaction as packed by the contract
    l1_user_tx: bytes


@dataclass
class AddToken:
    token_address: str
    token_id: int


@dataclass
class ForgeBatch:
    batch_num: int
    eth_tx_hash: str


@dataclass
class UpdateForgeL1L2BatchTimeout:
    new_forge_l1_l2_batch_timeout: int


@dataclass
class UpdateFeeAddToken:
    new_fee_add_token: int


@dataclass
class Withdraw:
    idx: int
    num_exit_root: int
    instant_withdraw: bool
    tx_hash: str


ROLLUP_EVENT_KINDS = (
    EventKind("l1_user_tx", "L1UserTxEvent(uint64,uint8,bytes)", L1UserTx,
              (("to_forge_l1_txs_num", True), ("position", True), ("l1_user_tx", False))),
    EventKind("add_token", "AddToken(address,uint32)", AddToken,
              (("token_address", True), ("token_id", False))),
    EventKind("forge_batch", "ForgeBatch(uint64)", ForgeBatch,
              (("batch_num", True),), tx_hash_field="eth_tx_hash"),
    EventKind("update_forge_l1_l2_batch_timeout", "UpdateForgeL1L2BatchTimeout(uint8)",
              UpdateForgeL1L2BatchTimeout, (("new_forge_l1_l2_batch_timeout", False),)),
    EventKind("update_fee_add_token", "UpdateFeeAddToken(uint256)", UpdateFeeAddToken,
              (("new_fee_add_token", False),)),
    EventKind("withdraw", "WithdrawEvent(uint48,uint48,bool)", Withdraw,
              (("idx", True), ("num_exit_root", True), ("instant_withdraw", True)),
              tx_hash_field="tx_hash"),
)


class RollupClient(ContractEventsClient):
    """Client of the rollup contract"""

    EVENT_KINDS = ROLLUP_EVENT_KINDS
