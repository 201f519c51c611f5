"""
Withdrawal delayer contract events.
"""
from dataclasses import dataclass

from .events import ContractEventsClient, EventKind


@dataclass
class Deposit:
    owner: str
    token: str
    amount: int
    deposit_timestamp: int
    tx_hash: str


@dataclass
class Withdraw:
    token: str
    owner: str
    amount: int


@dataclass
class EmergencyModeEnabled:
    pass


@dataclass
class NewWithdrawalDelay:
    withdrawal_delay: int


@dataclass
class EscapeHatchWithdrawal:
    who: str
    to: str
    token: str
    amount: int


@dataclass
class NewHermezKeeperAddress:
    new_hermez_keeper_address: str


@dataclass
class NewWhiteHackGroupAddress:
    new_white_hack_group_address: str


@dataclass
class NewHermezGovernanceDAOAddress:
    new_hermez_governance_dao_address: str


WDELAYER_EVENT_KINDS = (
    EventKind("deposit", "Deposit(address,address,uint192,uint64)", Deposit,
              (("owner", True), ("token", True), ("amount", False), ("deposit_timestamp", False)),
              tx_hash_field="tx_hash"),
    EventKind("withdraw", "Withdraw(address,address,uint192)", Withdraw,
              (("token", True), ("owner", True), ("amount", False))),
    EventKind("emergency_mode_enabled", "EmergencyModeEnabled()", EmergencyModeEnabled, ()),
    EventKind("new_withdrawal_delay", "NewWithdrawalDelay(uint64)", NewWithdrawalDelay,
              (("withdrawal_delay", False),)),
    EventKind("escape_hatch_withdrawal", "EscapeHatchWithdrawal(address,address,address,uint256)",
              EscapeHatchWithdrawal,
              (("who", True), ("to", True), ("token", True), ("amount", False))),
    EventKind("new_hermez_keeper_address", "NewHermezKeeperAddress(address)", NewHermezKeeperAddress,
              (("new_hermez_keeper_address", False),)),
    EventKind("new_white_hack_group_address", "NewWhiteHackGroupAddress(address)",
              NewWhiteHackGroupAddress, (("new_white_hack_group_address", False),)),
    EventKind("new_hermez_governance_dao_address", "NewHermezGovernanceDAOAddress(address)",
              NewHermezGovernanceDAOAddress, (("new_hermez_governance_dao_address", False),)),
)


class WDelayerClient(ContractEventsClient):
    """Client of the withdrawal delayer contract"""

    EVENT_KINDS = WDELAYER_EVENT_KINDS
