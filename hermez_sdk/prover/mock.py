"""
In-process prover used in tests and when running without a proof server.
"""
import itertools
import logging
import threading
from typing import Any, List, Optional, Tuple

from .client import ProverClient
from .exceptions import JobInFlightError, ProofCancelledError
from .models import Proof, ProverStatus

logger = logging.getLogger(__name__)


class MockProverClient(ProverClient):
    """
    Prover that returns deterministic proofs after a fixed delay.

    Proof number ``n`` (counting from 1) uses ``i = n * 100`` as seed:
    ``pi_a = [i, i+1]``, ``pi_b = [[i+2, i+3], [i+4, i+5], [1, 0]]``,
    ``pi_c = [i+6, i+7]`` and public inputs ``[i+42]``.
    """

    def __init__(
        self,
        proof_delay: float = 0.5,
        cancel_delay: float = 0.08,
        ready_delay: float = 0.2
    ):
        self.proof_delay = proof_delay
        self.cancel_delay = cancel_delay
        self.ready_delay = ready_delay
        self._counter = itertools.count(1)
        self._lock = threading.Lock()
        self._job_in_flight = False
        self.submitted: List[Any] = []

    def _sleep(self, seconds: float, cancel: Optional[threading.Event]) -> None:
        if cancel is None:
            cancel = threading.Event()
        if cancel.wait(seconds):
            raise ProofCancelledError("Mock prover wait cancelled")

    def calculate_proof(self, zk_inputs: Any) -> None:
        with self._lock:
            if self._job_in_flight:
                raise JobInFlightError("Mock prover already has a job in flight")
            self._job_in_flight = True
            self.submitted.append(zk_inputs)

    def get_proof(
        self,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None
    ) -> Tuple[Proof, List[int]]:
        self._sleep(self.proof_delay, cancel)
        i = next(self._counter) * 100
        proof = Proof(
            pi_a=[str(i), str(i + 1), "1"],
            pi_b=[[str(i + 2), str(i + 3)], [str(i + 4), str(i + 5)], ["1", "0"]],
            pi_c=[str(i + 6), str(i + 7), "1"],
            protocol="groth",
        )
        with self._lock:
            self._job_in_flight = False
        logger.debug(f"Mock proof {i // 100} generated")
        return proof, [i + 42]

    def cancel(self) -> None:
        self._sleep(self.cancel_delay, None)
        with self._lock:
            self._job_in_flight = False

    def wait_ready(
        self,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None
    ) -> ProverStatus:
        self._sleep(self.ready_delay, cancel)
        return ProverStatus.READY
