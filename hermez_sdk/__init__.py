"""
Hermez SDK - clients for the chain node and the proof server of a rollup node.
"""
from .codec import (
    bigint_from_base64,
    bigint_from_str,
    bigint_to_base64,
    bigint_to_str,
    hez_bjj,
    hez_bjj_to_compressed,
    hez_bjj_to_public_key,
    hez_eth_addr,
    hez_eth_addr_to_address,
)
from .config import ClientConfig, load_config
from .eth import AuctionClient, EthereumClient, RollupClient, WDelayerClient
from .exceptions import (
    BlockHashMismatchError,
    ChecksumMismatchError,
    CodecError,
    ConfigError,
    EventDecodeError,
    HermezError,
    InvalidEncodingError,
    InvalidFormatError,
    KeyStoreError,
    NoAccountError,
    TransactionError,
)
from .keystore import KeyStore
from .prover import MockProverClient, ProofServerClient, ProverPool
from .version import __version__

__all__ = [
    "EthereumClient",
    "AuctionClient",
    "RollupClient",
    "WDelayerClient",
    "ProofServerClient",
    "MockProverClient",
    "ProverPool",
    "KeyStore",
    "ClientConfig",
    "load_config",
    "hez_eth_addr",
    "hez_eth_addr_to_address",
    "hez_bjj",
    "hez_bjj_to_compressed",
    "hez_bjj_to_public_key",
    "bigint_to_base64",
    "bigint_from_base64",
    "bigint_to_str",
    "bigint_from_str",
    "HermezError",
    "NoAccountError",
    "TransactionError",
    "BlockHashMismatchError",
    "EventDecodeError",
    "CodecError",
    "InvalidFormatError",
    "ChecksumMismatchError",
    "InvalidEncodingError",
    "ConfigError",
    "KeyStoreError",
    "__version__",
]
