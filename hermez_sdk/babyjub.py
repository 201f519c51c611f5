"""
BabyJubJub curve arithmetic used for Hermez L2 public keys.

BabyJubJub is the twisted Edwards curve a*x^2 + y^2 = 1 + d*x^2*y^2 defined
over the scalar field of BN254. Public keys travel in a 32-byte compressed
form: y in little-endian with the sign of x stored in the top bit.
"""
from dataclasses import dataclass
from typing import Optional

from .exceptions import InvalidFormatError

# Field modulus (BN254 scalar field)
Q = 21888242871839275222246405745257275088548364400416034343698204186575808495617

# Curve coefficients
A = 168700
D = 168696

# Order of the prime subgroup generated by B8
SUBORDER = 2736030358979909402780800718157159386076813972158567259200215660948447373041

COMPRESSED_KEY_LEN = 32

_Q_HALF = (Q - 1) // 2


def _inv(value: int) -> int:
    return pow(value, -1, Q)


def _sqrt(n: int) -> Optional[int]:
    """
    Modular square root in the BN254 scalar field (Tonelli-Shanks).

    Returns:
        A root of n, or None when n is not a quadratic residue
    """
    n %= Q
    if n == 0:
        return 0
    if pow(n, (Q - 1) // 2, Q) != 1:
        return None

    # Q - 1 = t * 2^s with t odd
    s, t = 0, Q - 1
    while t % 2 == 0:
        t //= 2
        s += 1

    z = 2
    while pow(z, (Q - 1) // 2, Q) != Q - 1:
        z += 1

    m = s
    c = pow(z, t, Q)
    x = pow(n, (t + 1) // 2, Q)
    b = pow(n, t, Q)
    while b != 1:
        i, b2 = 0, b
        while b2 != 1:
            b2 = b2 * b2 % Q
            i += 1
        e = pow(c, 1 << (m - i - 1), Q)
        x = x * e % Q
        c = e * e % Q
        b = b * c % Q
        m = i
    return x


def _coord_sign(c: int) -> bool:
    return c > _Q_HALF


@dataclass(frozen=True)
class Point:
    """A point on BabyJubJub in affine coordinates."""
    x: int
    y: int

    def is_on_curve(self) -> bool:
        x2 = self.x * self.x % Q
        y2 = self.y * self.y % Q
        return (A * x2 + y2) % Q == (1 + D * x2 * y2) % Q

    def add(self, other: "Point") -> "Point":
        x1x2 = self.x * other.x % Q
        y1y2 = self.y * other.y % Q
        dxy = D * x1x2 * y1y2 % Q
        x3 = (self.x * other.y + self.y * other.x) * _inv(1 + dxy) % Q
        y3 = (y1y2 - A * x1x2) * _inv(1 - dxy) % Q
        return Point(x3, y3)

    def mul(self, scalar: int) -> "Point":
        result = IDENTITY
        addend = self
        k = scalar
        while k > 0:
            if k & 1:
                result = result.add(addend)
            addend = addend.add(addend)
            k >>= 1
        return result

    def compress(self) -> bytes:
        """
        Compress the point to its canonical 32-byte form.

        Returns:
            y as little-endian bytes, with the top bit set when x is "negative"
        """
        buf = bytearray(self.y.to_bytes(COMPRESSED_KEY_LEN, "little"))
        if _coord_sign(self.x):
            buf[31] |= 0x80
        return bytes(buf)

    @classmethod
    def decompress(cls, data: bytes) -> "Point":
        """
        Recover a point from its compressed form.

        Args:
            data: 32-byte compressed point

        Returns:
            The decompressed point

        Raises:
            InvalidFormatError: If the bytes do not describe a curve point
        """
        if len(data) != COMPRESSED_KEY_LEN:
            raise InvalidFormatError(
                f"Compressed point must be {COMPRESSED_KEY_LEN} bytes, got {len(data)}"
            )
        buf = bytearray(data)
        sign = bool(buf[31] & 0x80)
        buf[31] &= 0x7F
        y = int.from_bytes(bytes(buf), "little")
        if y >= Q:
            raise InvalidFormatError("Compressed point y coordinate is not in the field")

        y2 = y * y % Q
        denominator = (A - D * y2) % Q
        if denominator == 0:
            raise InvalidFormatError("Compressed point is not on the curve")
        x = _sqrt((1 - y2) * _inv(denominator))
        if x is None:
            raise InvalidFormatError("Compressed point is not on the curve")
        if sign != _coord_sign(x):
            x = (Q - x) % Q
        return cls(x, y)


IDENTITY = Point(0, 1)

# Generator of the prime subgroup
B8 = Point(
    5299619240641551281634865583518297030282874472190772894086521144482721001553,
    16950150798460657717958625567821834550301663161624707787222815936182638968203,
)


def public_key_from_scalar(scalar: int) -> Point:
    """Derive the public key point for a (reduced) private scalar."""
    return B8.mul(scalar % SUBORDER)
