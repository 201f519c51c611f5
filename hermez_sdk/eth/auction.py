"""
Auction contract events.
"""
from dataclasses import dataclass
from typing import List

from .events import ContractEventsClient, EventKind


@dataclass
class NewBid:
    slot: int
    bid_amount: int
    bidder: str


@dataclass
class NewSlotDeadline:
    new_slot_deadline: int


@dataclass
class NewClosedAuctionSlots:
    new_closed_auction_slots: int


@dataclass
class NewOutbidding:
    new_outbidding: int


@dataclass
class NewDonationAddress:
    new_donation_address: str


@dataclass
class NewBootCoordinator:
    new_boot_coordinator: str
    new_boot_coordinator_url: str


@dataclass
class NewOpenAuctionSlots:
    new_open_auction_slots: int


@dataclass
class NewAllocationRatio:
    # [burn, donation, governance], in per ten thousand
    new_allocation_ratio: List[int]


@dataclass
class SetCoordinator:
    bidder_address: str
    forger_address: str
    coordinator_url: str


@dataclass
class NewForgeAllocated:
    bidder: str
    forger: str
    slot_to_forge: int
    burn_amount: int
    donation_amount: int
    governance_amount: int


@dataclass
class NewDefaultSlotSetBid:
    slot_set: int
    new_initial_min_bid: int


@dataclass
class NewForge:
    forger: str
    slot_to_forge: int


@dataclass
class HEZClaimed:
    owner: str
    amount: int


AUCTION_EVENT_KINDS = (
    EventKind("new_bid", "NewBid(uint128,uint128,address)", NewBid,
              (("slot", True), ("bid_amount", False), ("bidder", True))),
    EventKind("new_slot_deadline", "NewSlotDeadline(uint8)", NewSlotDeadline,
              (("new_slot_deadline", False),)),
    EventKind("new_closed_auction_slots", "NewClosedAuctionSlots(uint16)", NewClosedAuctionSlots,
              (("new_closed_auction_slots", False),)),
    EventKind("new_outbidding", "NewOutbidding(uint16)", NewOutbidding,
              (("new_outbidding", False),)),
    EventKind("new_donation_address", "NewDonationAddress(address)", NewDonationAddress,
              (("new_donation_address", True),)),
    EventKind("new_boot_coordinator", "NewBootCoordinator(address,string)", NewBootCoordinator,
              (("new_boot_coordinator", True), ("new_boot_coordinator_url", False))),
    EventKind("new_open_auction_slots", "NewOpenAuctionSlots(uint16)", NewOpenAuctionSlots,
              (("new_open_auction_slots", False),)),
    EventKind("new_allocation_ratio", "NewAllocationRatio(uint16[3])", NewAllocationRatio,
              (("new_allocation_ratio", False),)),
    EventKind("set_coordinator", "SetCoordinator(address,address,string)", SetCoordinator,
              (("bidder_address", True), ("forger_address", True), ("coordinator_url", False))),
    EventKind("new_forge_allocated",
              "NewForgeAllocated(address,address,uint128,uint128,uint128,uint128)", NewForgeAllocated,
              (("bidder", True), ("forger", True), ("slot_to_forge", True),
               ("burn_amount", False), ("donation_amount", False), ("governance_amount", False))),
    EventKind("new_default_slot_set_bid", "NewDefaultSlotSetBid(uint128,uint128)", NewDefaultSlotSetBid,
              (("slot_set", False), ("new_initial_min_bid", False))),
    EventKind("new_forge", "NewForge(address,uint128)", NewForge,
              (("forger", True), ("slot_to_forge", True))),
    EventKind("hez_claimed", "HEZClaimed(address,uint128)", HEZClaimed,
              (("owner", True), ("amount", False))),
)


class AuctionClient(ContractEventsClient):
    """Client of the coordinator auction contract"""

    EVENT_KINDS = AUCTION_EVENT_KINDS
