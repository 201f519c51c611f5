#!/usr/bin/env python3
"""
Example wiring the Hermez SDK clients from a TOML config.

Reads the events of the last block from the configured contracts, encodes a
few values with the hez: codec and runs one job through the prover pool
(a mock prover is used when no proof server is configured).
"""
import logging
import sys
import threading

from hermez_sdk import (
    AuctionClient,
    EthereumClient,
    HermezError,
    KeyStore,
    MockProverClient,
    ProofServerClient,
    ProverPool,
    RollupClient,
    WDelayerClient,
    hez_bjj,
    hez_eth_addr,
    load_config,
)
from hermez_sdk.babyjub import public_key_from_scalar

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def main():
    config = load_config()

    account = None
    if config.keystore.address and config.keystore.password:
        account = KeyStore(config.keystore.path).unlock(config.keystore.address, config.keystore.password)

    print("\n=== Hermez SDK Example ===\n")

    if config.ethereum.rpc_url:
        eth = EthereumClient.from_rpc_url(config.ethereum.rpc_url, account=account, config=config.ethereum)
        block_num = eth.eth_last_block()
        print(f"Chain {eth.chain_id}, last block {block_num}")

        contracts = [
            (AuctionClient, config.contracts.auction),
            (RollupClient, config.contracts.rollup),
            (WDelayerClient, config.contracts.wdelayer),
        ]
        for client_cls, address in contracts:
            if not address:
                continue
            batch, block_hash = client_cls(eth, address).events_by_block(block_num)
            print(f"{client_cls.__name__}: {len(batch)} events (block hash {block_hash})")

        if account is not None:
            print(f"Signing account: {hez_eth_addr(account.address)}")

    print(f"Example L2 key: {hez_bjj(public_key_from_scalar(42))}")

    pool = ProverPool()
    if config.provers:
        for prover_config in config.provers:
            pool.add(ProofServerClient.from_config(prover_config))
    else:
        pool.add(MockProverClient())

    cancel = threading.Event()
    with pool.borrow(cancel=cancel, timeout=10) as prover:
        prover.wait_ready(cancel=cancel, timeout=60)
        prover.calculate_proof({"example": True})
        proof, public_inputs = prover.get_proof(cancel=cancel, timeout=600)
    print(f"Proof pi_a: {proof.pi_a}, public inputs: {public_inputs}")


if __name__ == "__main__":
    try:
        main()
    except HermezError as e:
        logger.error(f"Example failed: {e}")
        sys.exit(1)
