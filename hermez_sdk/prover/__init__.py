"""
Proof server clients.
"""
from .client import ProofServerClient, ProverClient
from .exceptions import (
    JobInFlightError,
    ProofCancelledError,
    ProofDecodeError,
    ProofFailedError,
    ProofServerError,
    ProverConnectionError,
    ProverError,
    ProverTimeoutError,
    ServerUninitializedError,
)
from .mock import MockProverClient
from .models import Proof, ProverStatus, StatusResponse
from .pool import ProverPool

__all__ = [
    "ProverClient",
    "ProofServerClient",
    "MockProverClient",
    "ProverPool",
    "Proof",
    "ProverStatus",
    "StatusResponse",
    "ProverError",
    "ProverConnectionError",
    "ProverTimeoutError",
    "ProofServerError",
    "ServerUninitializedError",
    "ProofCancelledError",
    "ProofFailedError",
    "ProofDecodeError",
    "JobInFlightError",
]
