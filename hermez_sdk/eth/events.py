"""
Block event aggregation.

A contract is described by a table of EventKind entries. For one block,
every kind is queried with its own ``eth_getLogs`` filter, each log is
decoded into the kind's record type, and the records are gathered into an
EventBatch. All logs of a batch must carry the same block hash; a
disagreement means the node answered the queries from different forks and
the whole batch is rejected.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Type

from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError
from hexbytes import HexBytes
from web3 import Web3

from ..exceptions import BlockHashMismatchError, EventDecodeError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventKind:
    """
    One event of a contract.

    Attributes:
        name: Key of the kind inside an EventBatch
        signature: Canonical Solidity signature, e.g. ``NewForge(address,uint128)``
        record: Dataclass built from the decoded parameters
        params: ``(field, indexed)`` pairs in signature order
        tx_hash_field: Record field receiving the log's transaction hash, if any
    """
    name: str
    signature: str
    record: Type
    params: Tuple[Tuple[str, bool], ...]
    tx_hash_field: Optional[str] = None

    @property
    def abi_types(self) -> List[str]:
        inner = self.signature[self.signature.index("(") + 1:-1]
        return [t for t in inner.split(",") if t]

    @property
    def topic(self) -> str:
        return Web3.to_hex(Web3.keccak(text=self.signature))


@dataclass
class EventBatch:
    """Decoded events of one contract in one block, grouped by kind"""
    events: Dict[str, List[Any]] = field(default_factory=dict)
    block_hash: Optional[str] = None

    def __getitem__(self, name: str) -> List[Any]:
        return self.events[name]

    def __len__(self) -> int:
        return sum(len(records) for records in self.events.values())

    def is_empty(self) -> bool:
        return len(self) == 0


def _hex(value: Any) -> str:
    return Web3.to_hex(HexBytes(value))


def _normalize_value(abi_type: str, value: Any) -> Any:
    if abi_type == "address":
        return Web3.to_checksum_address(value)
    if isinstance(value, tuple):
        return list(value)
    return value


def decode_log(kind: EventKind, log: Dict[str, Any]) -> Any:
    """
    Decode a raw log into the kind's record.

    Indexed parameters are read from topics 1..n, the others are ABI-decoded
    from the data field.

    Raises:
        EventDecodeError: If the log does not match the kind's layout
    """
    topics = [HexBytes(t) for t in log.get("topics", [])]
    if not topics or _hex(topics[0]) != kind.topic:
        raise EventDecodeError(f"Log is not a {kind.name} event")

    types = kind.abi_types
    if len(types) != len(kind.params):
        raise EventDecodeError(f"Event kind {kind.name} declares {len(kind.params)} params for {len(types)} types")

    indexed = [(name, t) for (name, is_indexed), t in zip(kind.params, types) if is_indexed]
    plain = [(name, t) for (name, is_indexed), t in zip(kind.params, types) if not is_indexed]
    if len(topics) - 1 != len(indexed):
        raise EventDecodeError(
            f"{kind.name} log has {len(topics) - 1} indexed topics, expected {len(indexed)}"
        )

    values: Dict[str, Any] = {}
    try:
        for (name, abi_type), topic in zip(indexed, topics[1:]):
            (value,) = abi_decode([abi_type], bytes(topic))
            values[name] = _normalize_value(abi_type, value)
        if plain:
            decoded = abi_decode([t for _, t in plain], bytes(HexBytes(log.get("data", b""))))
            for (name, abi_type), value in zip(plain, decoded):
                values[name] = _normalize_value(abi_type, value)
    except (DecodingError, ValueError, TypeError) as e:
        raise EventDecodeError(f"Failed to decode {kind.name} log: {e}") from e

    if kind.tx_hash_field:
        values[kind.tx_hash_field] = _hex(log["transactionHash"])
    return kind.record(**values)


def aggregate_events(
    kinds: Sequence[EventKind],
    decoded: Iterable[Tuple[str, Any, str]]
) -> EventBatch:
    """
    Group decoded events by kind, checking that they share one block hash.

    Args:
        kinds: Event table of the contract; every kind gets a (possibly empty) list
        decoded: ``(kind name, record, block hash)`` triples, in log order per kind

    Returns:
        EventBatch whose block_hash is None when no event was given

    Raises:
        BlockHashMismatchError: If a block hash differs from the first one seen
    """
    batch = EventBatch(events={kind.name: [] for kind in kinds})
    for name, record, block_hash in decoded:
        if batch.block_hash is None:
            batch.block_hash = block_hash
        elif block_hash != batch.block_hash:
            raise BlockHashMismatchError(expected=batch.block_hash, got=block_hash)
        batch.events[name].append(record)
    return batch


def events_by_block(
    w3: Web3,
    address: str,
    kinds: Sequence[EventKind],
    block_num: int
) -> Tuple[EventBatch, Optional[str]]:
    """
    Read every event of a contract emitted in one block.

    Args:
        w3: Web3 instance connected to the node
        address: Contract address
        kinds: Event table of the contract
        block_num: Block to read

    Returns:
        (batch, block_hash); block_hash is None when the block has no events
        of this contract
    """
    checksum_address = Web3.to_checksum_address(address)

    def _decoded():
        for kind in kinds:
            logs = w3.eth.get_logs({
                "address": checksum_address,
                "topics": [kind.topic],
                "fromBlock": block_num,
                "toBlock": block_num,
            })
            for log in logs:
                yield kind.name, decode_log(kind, log), _hex(log["blockHash"])

    batch = aggregate_events(kinds, _decoded())
    logger.debug(f"Block {block_num}: {len(batch)} events from {checksum_address}")
    return batch, batch.block_hash


class ContractEventsClient:
    """Base class for the clients of one deployed contract"""

    EVENT_KINDS: Tuple[EventKind, ...] = ()

    def __init__(self, client, address: str):
        """
        Args:
            client: EthereumClient used for chain access
            address: Deployed contract address
        """
        self.client = client
        self.address = Web3.to_checksum_address(address)

    @classmethod
    def event_kind(cls, name: str) -> EventKind:
        for kind in cls.EVENT_KINDS:
            if kind.name == name:
                return kind
        raise KeyError(name)

    def events_by_block(self, block_num: int) -> Tuple[EventBatch, Optional[str]]:
        """Read this contract's events of one block (see events_by_block)."""
        return events_by_block(self.client.w3, self.address, self.EVENT_KINDS, block_num)
