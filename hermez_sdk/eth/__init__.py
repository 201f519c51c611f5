"""
Chain node clients: authorized calls and per-block contract events.
"""
from .auction import AuctionClient
from .client import EthereumClient, Signer, TransactOpts, increased_gas_price
from .events import (
    ContractEventsClient,
    EventBatch,
    EventKind,
    aggregate_events,
    decode_log,
    events_by_block,
)
from .rollup import RollupClient
from .wdelayer import WDelayerClient

__all__ = [
    "EthereumClient",
    "Signer",
    "TransactOpts",
    "increased_gas_price",
    "EventKind",
    "EventBatch",
    "decode_log",
    "aggregate_events",
    "events_by_block",
    "ContractEventsClient",
    "AuctionClient",
    "RollupClient",
    "WDelayerClient",
]
