"""
Data models of the proof server protocol.
"""
import json
from enum import Enum
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..codec import bigint_from_str
from ..exceptions import InvalidEncodingError
from .exceptions import ProofDecodeError


class ProverStatus(str, Enum):
    """Status reported by the proof server"""
    ABORTED = "aborted"
    BUSY = "busy"
    FAILED = "failed"
    SUCCESS = "success"
    UNVERIFIED = "unverified"
    UNINITIALIZED = "uninitialized"
    UNDEFINED = "undefined"
    INITIALIZING = "initializing"
    READY = "ready"

    def is_initialized(self) -> bool:
        return self not in (ProverStatus.UNINITIALIZED, ProverStatus.UNDEFINED, ProverStatus.INITIALIZING)

    def is_ready(self) -> bool:
        """True when the server is idle and accepts a new job"""
        return self in (
            ProverStatus.ABORTED,
            ProverStatus.FAILED,
            ProverStatus.SUCCESS,
            ProverStatus.UNVERIFIED,
            ProverStatus.READY,
        )


def _decimal(value: Any) -> int:
    if not isinstance(value, str):
        raise ValueError(f"expected a decimal string, got {value!r}")
    try:
        n = bigint_from_str(value)
    except InvalidEncodingError as e:
        raise ValueError(str(e)) from e
    if n < 0:
        raise ValueError(f"proof element must be non-negative, got {value!r}")
    return n


def _affine(values: Any) -> List[int]:
    if not isinstance(values, (list, tuple)):
        raise ValueError("expected a list of decimal strings")
    points = [_decimal(v) for v in values]
    # snarkjs emits projective points; the z coordinate is always 1
    if len(points) == 3 and points[2] == 1:
        points = points[:2]
    if len(points) != 2:
        raise ValueError(f"expected 2 coordinates, got {len(values)}")
    return points


class Proof(BaseModel):
    """Groth16 proof as returned by the proof server"""
    pi_a: List[int]
    pi_b: List[List[int]]
    pi_c: List[int]
    protocol: str

    @field_validator("pi_a", "pi_c", mode="before")
    @classmethod
    def _check_point(cls, value: Any) -> List[int]:
        return _affine(value)

    @field_validator("pi_b", mode="before")
    @classmethod
    def _check_pi_b(cls, value: Any) -> List[List[int]]:
        if not isinstance(value, (list, tuple)) or len(value) != 3:
            raise ValueError("pi_b must have 3 rows")
        rows = []
        for row in value:
            if not isinstance(row, (list, tuple)) or len(row) != 2:
                raise ValueError("every pi_b row must have 2 elements")
            rows.append([_decimal(v) for v in row])
        return rows

    def to_wire(self) -> dict:
        """Proof payload with every big integer as a decimal string"""
        return {
            "pi_a": [str(v) for v in self.pi_a] + ["1"],
            "pi_b": [[str(v) for v in row] for row in self.pi_b],
            "pi_c": [str(v) for v in self.pi_c] + ["1"],
            "protocol": self.protocol,
        }


class StatusResponse(BaseModel):
    """Body of ``GET /status``"""
    model_config = ConfigDict(populate_by_name=True)

    status: ProverStatus
    proof: Optional[Any] = None
    pub_data: Optional[Any] = Field(None, alias="pubData")


def _embedded_json(value: Any, what: str) -> Any:
    if isinstance(value, (str, bytes)):
        try:
            return json.loads(value)
        except ValueError as e:
            raise ProofDecodeError(f"Invalid {what} JSON: {e}") from e
    return value


def parse_status(body: Any) -> StatusResponse:
    try:
        return StatusResponse.model_validate(body)
    except ValidationError as e:
        raise ProofDecodeError(f"Invalid status response: {e}") from e


def parse_proof(raw: Any) -> Proof:
    """
    Decode the proof payload of a success status.

    Args:
        raw: JSON string or already decoded object

    Raises:
        ProofDecodeError: If the payload is missing or an element is not a
            base-10 integer string
    """
    if raw is None or raw == "":
        raise ProofDecodeError("Success status without a proof")
    data = _embedded_json(raw, "proof")
    try:
        return Proof.model_validate(data)
    except ValidationError as e:
        raise ProofDecodeError(f"Invalid proof: {e}") from e


def parse_public_inputs(raw: Any) -> List[int]:
    """Decode the ``pubData`` list of decimal strings"""
    if raw is None or raw == "":
        return []
    data = _embedded_json(raw, "pubData")
    if not isinstance(data, list):
        raise ProofDecodeError(f"pubData must be a list, got {type(data).__name__}")
    try:
        return [_decimal(v) for v in data]
    except ValueError as e:
        raise ProofDecodeError(f"Invalid public input: {e}") from e


def parse_success(status: StatusResponse) -> Tuple[Proof, List[int]]:
    return parse_proof(status.proof), parse_public_inputs(status.pub_data)
