"""
Client for the zero-knowledge proof server.

The server runs one job at a time and its protocol has no job identifiers:
a job is submitted with ``POST /input``, its progress is read with
``GET /status`` and it is aborted with ``POST /cancel``. A client instance
therefore tracks at most one job and refuses a second submission until the
first one is resolved.
"""
import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, List, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .._rate_limited_log import rate_limited_log
from ..config import DEFAULT_POLL_INTERVAL, ProverConfig
from .exceptions import (
    JobInFlightError,
    ProofCancelledError,
    ProofDecodeError,
    ProofFailedError,
    ProofServerError,
    ProverConnectionError,
    ProverTimeoutError,
    ServerUninitializedError,
)
from .models import Proof, ProverStatus, StatusResponse, parse_status, parse_success

logger = logging.getLogger(__name__)


class ProverClient(ABC):
    """
    Interface of a proof server client.

    Blocking methods accept ``cancel``, a threading.Event the caller sets to
    abandon the wait, and ``timeout``, an overall deadline in seconds.
    """

    @abstractmethod
    def calculate_proof(self, zk_inputs: Any) -> None:
        """
        Submit a job. Returns once the server has accepted the inputs.

        Raises:
            JobInFlightError: If a previous job of this client is unresolved
        """
        pass

    @abstractmethod
    def get_proof(
        self,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None
    ) -> Tuple[Proof, List[int]]:
        """
        Wait for the job to finish and return the proof and public inputs.

        Raises:
            ProofFailedError: If the job ended with a status other than success
            ProofCancelledError: If cancel was set while waiting
        """
        pass

    @abstractmethod
    def cancel(self) -> None:
        """Ask the server to abort the current job, without waiting for it"""
        pass

    @abstractmethod
    def wait_ready(
        self,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None
    ) -> ProverStatus:
        """
        Block until the server is ready to accept a job.

        Raises:
            ServerUninitializedError: If the server reports it is not initialized
            ProofCancelledError: If cancel was set while waiting
            ProverTimeoutError: If timeout elapsed first
        """
        pass


class ProofServerClient(ProverClient):
    """Proof server client over HTTP"""

    def __init__(
        self,
        url: str,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = 30,
        retry_count: int = 0,
        debug_inputs_dir: Optional[str] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the ProofServerClient

        Args:
            url: Base URL of the proof server
            poll_interval: Seconds between status polls
            timeout: Per-request HTTP timeout in seconds
            retry_count: Transport-level retries per request (0 disables)
            debug_inputs_dir: If set, every submitted input is also written there
            logger: Optional logger instance to use for debug/info logging
        """
        self.url = url.rstrip("/")
        self.poll_interval = poll_interval
        self.timeout = timeout
        self.debug_inputs_dir = Path(debug_inputs_dir) if debug_inputs_dir else None
        self.logger = logger or logging.getLogger(__name__)

        self._lock = threading.Lock()
        self._job_in_flight = False

        # Setup HTTP session with retries
        self.session = requests.Session()
        retries = Retry(
            total=retry_count,
            backoff_factor=0.5,
            status_forcelist=[502, 503, 504],
            allowed_methods=["GET"],
            raise_on_status=False,
            connect=retry_count,
            read=retry_count,
            other=retry_count
        )
        self.session.mount("http://", HTTPAdapter(max_retries=retries))
        self.session.mount("https://", HTTPAdapter(max_retries=retries))

    @classmethod
    def from_config(cls, config: ProverConfig) -> "ProofServerClient":
        return cls(
            config.url,
            poll_interval=config.poll_interval,
            timeout=config.timeout,
            retry_count=config.retry_count,
            debug_inputs_dir=config.debug_inputs_dir,
        )

    @property
    def job_in_flight(self) -> bool:
        with self._lock:
            return self._job_in_flight

    def _release_job(self) -> None:
        with self._lock:
            self._job_in_flight = False

    def _request(self, method: str, path: str, body: Any = None) -> requests.Response:
        url = f"{self.url}{path}"
        try:
            if method == "GET":
                response = self.session.get(url, timeout=self.timeout)
            else:
                response = self.session.post(url, json=body, timeout=self.timeout)
        except requests.Timeout as e:
            self.logger.error(f"Proof server request {method} {path} timed out: {e}")
            raise ProverTimeoutError(f"Proof server request {method} {path} timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            self.logger.error(f"Proof server request {method} {path} failed: {e}")
            raise ProverConnectionError(f"Proof server request failed: {str(e)}") from e

        if not 200 <= response.status_code < 300:
            try:
                err = response.json()
                status, msg = str(err["status"]), str(err["msg"])
            except (ValueError, KeyError, TypeError):
                status, msg = str(response.status_code), response.text
            self.logger.warning(f"Proof server error on {method} {path}: ({status}) {msg}")
            raise ProofServerError(status, msg, http_status=response.status_code)
        return response

    def status(self) -> StatusResponse:
        """Fetch the current server status"""
        response = self._request("GET", "/status")
        try:
            body = response.json()
        except ValueError as e:
            raise ProofDecodeError(f"Invalid JSON in status response: {e}") from e
        return parse_status(body)

    def _dump_inputs(self, zk_inputs: Any) -> None:
        now = time.time()
        name = f"zk-inputs-debug-request-{int(now)}.{int(now * 1000) % 1000:03d}.json"
        self.debug_inputs_dir.mkdir(parents=True, exist_ok=True)
        path = self.debug_inputs_dir / name
        with open(path, "w") as f:
            json.dump(zk_inputs, f, indent=2)
        self.logger.info(f"Debug proof inputs stored in {path}")

    def calculate_proof(self, zk_inputs: Any) -> None:
        with self._lock:
            if self._job_in_flight:
                raise JobInFlightError(f"Proof server {self.url} already has a job in flight")
            self._job_in_flight = True

        try:
            if self.debug_inputs_dir is not None:
                self._dump_inputs(zk_inputs)
            self._request("POST", "/input", zk_inputs)
        except Exception:
            self._release_job()
            raise
        self.logger.debug(f"Proof job submitted to {self.url}")

    def wait_ready(
        self,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None
    ) -> ProverStatus:
        cancel = cancel or threading.Event()
        deadline = time.monotonic() + timeout if timeout is not None else None

        while True:
            if cancel.is_set():
                raise ProofCancelledError("Waiting for the proof server was cancelled")

            status = self.status().status
            if status.is_ready():
                return status
            if not status.is_initialized() and status != ProverStatus.INITIALIZING:
                raise ServerUninitializedError(status.value)
            rate_limited_log(
                f"Proof server {self.url} not ready yet (status: {status.value})",
                level="debug", interval=30, logger_instance=self.logger,
            )

            wait = self.poll_interval
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise ProverTimeoutError(f"Proof server not ready after {timeout}s")
                wait = min(wait, remaining)
            if cancel.wait(wait):
                raise ProofCancelledError("Waiting for the proof server was cancelled")

    def get_proof(
        self,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None
    ) -> Tuple[Proof, List[int]]:
        try:
            self.wait_ready(cancel=cancel, timeout=timeout)
        except ServerUninitializedError:
            # A server that lost its initialization also lost the job
            self._release_job()
            raise
        status = self.status()
        if status.status != ProverStatus.SUCCESS:
            self._release_job()
            raise ProofFailedError(status.status.value)

        try:
            proof, public_inputs = parse_success(status)
        finally:
            self._release_job()
        self.logger.info(f"Proof received from {self.url} with {len(public_inputs)} public inputs")
        return proof, public_inputs

    def cancel(self) -> None:
        self._request("POST", "/cancel")
        self._release_job()
        self.logger.info(f"Proof job on {self.url} cancelled")

    def close(self) -> None:
        self.session.close()
