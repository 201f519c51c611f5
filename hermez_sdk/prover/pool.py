"""
Pool of idle proof server clients.
"""
import logging
import queue
import threading
import time
from contextlib import contextmanager
from typing import Iterator, Optional

from .client import ProverClient
from .exceptions import ProofCancelledError, ProverError, ProverTimeoutError

logger = logging.getLogger(__name__)

# Upper bound of one blocking wait, so a cancel is noticed promptly
_CANCEL_CHECK_INTERVAL = 0.05


class ProverPool:
    """
    FIFO pool of provers ready to take a job.

    A prover taken with get() belongs to the caller until it is returned
    with add(); this keeps each proof server to one job at a time.
    """

    def __init__(self, maxsize: int = 0):
        """
        Args:
            maxsize: Most provers the pool holds (0 means unbounded)
        """
        self._idle: "queue.Queue[ProverClient]" = queue.Queue(maxsize=maxsize)

    def __len__(self) -> int:
        return self._idle.qsize()

    def add(self, prover: ProverClient) -> None:
        """
        Return a prover to the pool (or register a new one).

        Raises:
            ProverError: If the pool already holds maxsize provers
        """
        try:
            self._idle.put_nowait(prover)
        except queue.Full as e:
            raise ProverError(f"Prover pool is full ({self._idle.maxsize} provers)") from e

    def get(
        self,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None
    ) -> ProverClient:
        """
        Take the longest idle prover, waiting for one if none is idle.

        Args:
            cancel: Event that aborts the wait when set
            timeout: Overall wait limit in seconds

        Raises:
            ProofCancelledError: If cancel was set before a prover became idle
            ProverTimeoutError: If no prover became idle within timeout
        """
        deadline = time.monotonic() + timeout if timeout is not None else None
        while True:
            if cancel is not None and cancel.is_set():
                raise ProofCancelledError("Waiting for an idle prover was cancelled")
            wait = _CANCEL_CHECK_INTERVAL if cancel is not None else None
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise ProverTimeoutError(f"No idle prover after {timeout}s")
                wait = remaining if wait is None else min(wait, remaining)
            try:
                return self._idle.get(timeout=wait)
            except queue.Empty:
                continue

    @contextmanager
    def borrow(
        self,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None
    ) -> Iterator[ProverClient]:
        """
        Take an idle prover for the duration of a with block.

        The prover always goes back to the pool. If the block raises, the
        prover's job is cancelled first so the next user finds it free.
        """
        prover = self.get(cancel=cancel, timeout=timeout)
        try:
            yield prover
        except BaseException:
            try:
                prover.cancel()
            except ProverError as e:
                logger.warning(f"Could not cancel the job of a failed prover: {e}")
            raise
        finally:
            self.add(prover)
