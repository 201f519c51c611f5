"""
Tests for the in-process mock prover and the prover pool.
"""
import threading
import time

import pytest

from hermez_sdk.prover import (
    JobInFlightError,
    MockProverClient,
    ProofCancelledError,
    ProofServerClient,
    ProverError,
    ProverPool,
    ProverStatus,
    ProverTimeoutError,
)

from conftest import PROVER_URL


@pytest.fixture
def mock_prover():
    return MockProverClient(proof_delay=0.01, cancel_delay=0.0, ready_delay=0.0)


class TestMockProver:

    def test_deterministic_proofs(self, mock_prover):
        mock_prover.calculate_proof({"n": 1})
        proof, public_inputs = mock_prover.get_proof()
        assert proof.pi_a == [100, 101]
        assert proof.pi_b == [[102, 103], [104, 105], [1, 0]]
        assert proof.pi_c == [106, 107]
        assert proof.protocol == "groth"
        assert public_inputs == [142]

        mock_prover.calculate_proof({"n": 2})
        proof, public_inputs = mock_prover.get_proof()
        assert proof.pi_a == [200, 201]
        assert public_inputs == [242]
        assert mock_prover.submitted == [{"n": 1}, {"n": 2}]

    def test_single_job(self, mock_prover):
        mock_prover.calculate_proof({})
        with pytest.raises(JobInFlightError):
            mock_prover.calculate_proof({})
        mock_prover.cancel()
        mock_prover.calculate_proof({})

    def test_wait_ready(self, mock_prover):
        assert mock_prover.wait_ready() == ProverStatus.READY

    def test_cancel_during_get_proof(self):
        prover = MockProverClient(proof_delay=5.0)
        cancel = threading.Event()
        threading.Timer(0.02, cancel.set).start()
        start = time.monotonic()
        with pytest.raises(ProofCancelledError):
            prover.get_proof(cancel=cancel)
        assert time.monotonic() - start < 5.0


class TestProverPool:

    def test_fifo(self, mock_prover):
        second = MockProverClient()
        pool = ProverPool()
        pool.add(mock_prover)
        pool.add(second)
        assert len(pool) == 2
        assert pool.get() is mock_prover
        assert pool.get() is second
        assert len(pool) == 0

    def test_holds_http_clients(self):
        pool = ProverPool()
        client = ProofServerClient(PROVER_URL)
        pool.add(client)
        assert pool.get(timeout=0.1) is client

    def test_full_pool_rejects_add(self, mock_prover):
        pool = ProverPool(maxsize=1)
        pool.add(mock_prover)
        with pytest.raises(ProverError, match="full"):
            pool.add(MockProverClient())
        assert len(pool) == 1

    def test_timeout_when_empty(self):
        with pytest.raises(ProverTimeoutError):
            ProverPool().get(timeout=0.05)

    def test_cancel_when_empty(self):
        cancel = threading.Event()
        threading.Timer(0.02, cancel.set).start()
        with pytest.raises(ProofCancelledError):
            ProverPool().get(cancel=cancel)

    def test_waits_for_returned_prover(self, mock_prover):
        pool = ProverPool()
        threading.Timer(0.02, pool.add, args=(mock_prover,)).start()
        assert pool.get(timeout=2.0) is mock_prover


class TestBorrow:

    def test_returns_prover_after_proof(self, mock_prover):
        pool = ProverPool()
        pool.add(mock_prover)
        with pool.borrow(timeout=1.0) as prover:
            prover.calculate_proof({"n": 1})
            prover.get_proof()
        assert len(pool) == 1
        assert pool.get() is mock_prover

    def test_failed_job_cancelled_before_return(self, mock_prover):
        pool = ProverPool()
        pool.add(mock_prover)
        cancel = threading.Event()
        with pytest.raises(ProofCancelledError):
            with pool.borrow(timeout=1.0) as prover:
                prover.calculate_proof({"n": 1})
                cancel.set()
                prover.get_proof(cancel=cancel)
        prover = pool.get(timeout=1.0)
        prover.calculate_proof({"n": 2})
        assert prover.submitted == [{"n": 1}, {"n": 2}]

    def test_http_prover_cancel_posted_on_failure(self, requests_mock):
        requests_mock.post(f"{PROVER_URL}/input", status_code=200)
        requests_mock.post(f"{PROVER_URL}/cancel", status_code=200)
        pool = ProverPool()
        pool.add(ProofServerClient(PROVER_URL, poll_interval=0.01))
        with pytest.raises(ValueError):
            with pool.borrow() as prover:
                prover.calculate_proof({"n": 1})
                raise ValueError("pipeline aborted")
        assert requests_mock.last_request.url == f"{PROVER_URL}/cancel"
        assert not pool.get().job_in_flight

    def test_cancel_failure_still_returns_prover(self, requests_mock):
        requests_mock.post(f"{PROVER_URL}/input", status_code=200)
        requests_mock.post(f"{PROVER_URL}/cancel", status_code=502, text="Bad Gateway")
        pool = ProverPool()
        pool.add(ProofServerClient(PROVER_URL))
        with pytest.raises(ValueError):
            with pool.borrow() as prover:
                prover.calculate_proof({"n": 1})
                raise ValueError("pipeline aborted")
        assert len(pool) == 1
