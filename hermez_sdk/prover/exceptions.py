"""
Exceptions for the prover module.
"""
from typing import Optional

from ..exceptions import HermezError


class ProverError(HermezError):
    """Base exception for proof server errors."""
    pass


class ProverConnectionError(ProverError):
    """Raised when the proof server cannot be reached."""
    pass


class ProverTimeoutError(ProverError):
    """Raised when a request or an overall wait exceeds its deadline."""
    pass


class ProofServerError(ProverError):
    """Raised when the proof server answers with an error response."""

    def __init__(self, status: str, msg: str, http_status: Optional[int] = None):
        self.status = status
        self.msg = msg
        self.http_status = http_status
        super().__init__(f"server proof status ({status}): {msg}")


class ServerUninitializedError(ProverError):
    """Raised when the proof server reports it has not been initialized."""

    def __init__(self, status: str):
        self.status = status
        super().__init__(f"Proof server is not initialized (status: {status})")


class ProofCancelledError(ProverError):
    """Raised when the caller cancels a wait."""
    pass


class ProofFailedError(ProverError):
    """Raised when the job resolved with a status other than success."""

    def __init__(self, status: str):
        self.status = status
        super().__init__(f"Proof job ended with status {status}, not success")


class ProofDecodeError(ProverError, ValueError):
    """Raised when a proof server response cannot be decoded."""
    pass


class JobInFlightError(ProverError):
    """Raised when a job is submitted while a previous one is unresolved."""
    pass
