"""
Textual encodings of chain-native values used by the Hermez API and storage.

Three value families are covered:

* big integers, persisted as base64 of their big-endian minimal bytes and
  shown to humans as base-10 strings,
* Ethereum addresses, shown as ``hez:0x...``,
* compressed BabyJubJub public keys, shown as ``hez:`` followed by the
  base64url (unpadded) encoding of the 32 key bytes plus a checksum byte.
"""
import base64
import binascii
import re
from typing import Tuple, Union

from web3 import Web3

from .babyjub import COMPRESSED_KEY_LEN, Point
from .exceptions import ChecksumMismatchError, InvalidEncodingError, InvalidFormatError

HEZ_PREFIX = "hez:"

# Widest integer the persisted form accepts
BIGINT_MAX_BYTES = 32

BJJ_DECODED_LEN = COMPRESSED_KEY_LEN + 1
BJJ_ENCODED_LEN = 44

_DECIMAL_RE = re.compile(r"^-?[0-9]+$")
_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_BJJ_ALPHABET_RE = re.compile(r"^[A-Za-z0-9_-]+$")
_IDX_RE = re.compile(r"^([^:]+):([0-9]+)$")
_BJJ_FORMAT_MSG = "invalid BJJ format. Must follow this regex: ^hez:[A-Za-z0-9_-]{44}$"


# ─────────────────────────────────────────────────────────────────────────
#  Big integers
# ─────────────────────────────────────────────────────────────────────────

def bigint_to_base64(value: int) -> str:
    """
    Encode a non-negative integer as base64 of its big-endian minimal bytes.

    Args:
        value: Integer to encode (0 <= value < 2**256)

    Returns:
        Standard base64 string (empty for 0)

    Raises:
        ValueError: If the integer is negative or wider than 32 bytes
    """
    if value < 0:
        raise ValueError(f"Cannot encode negative integer: {value}")
    length = (value.bit_length() + 7) // 8
    if length > BIGINT_MAX_BYTES:
        raise ValueError(f"Integer needs {length} bytes, maximum is {BIGINT_MAX_BYTES}")
    return base64.b64encode(value.to_bytes(length, "big")).decode("ascii")


def bigint_from_base64(text: str) -> int:
    """
    Decode a base64 big-endian integer.

    Raises:
        InvalidEncodingError: On malformed base64 or an oversized payload
    """
    try:
        raw = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidEncodingError(f"Invalid base64 big integer {text!r}: {e}") from e
    if len(raw) > BIGINT_MAX_BYTES:
        raise InvalidEncodingError(
            f"Big integer payload is {len(raw)} bytes, maximum is {BIGINT_MAX_BYTES}"
        )
    return int.from_bytes(raw, "big")


def bigint_to_str(value: int) -> str:
    return str(value)


def bigint_from_str(text: str) -> int:
    """
    Parse a base-10 integer string.

    Raises:
        InvalidEncodingError: If the text is not a base-10 integer
    """
    if not isinstance(text, str) or not _DECIMAL_RE.fullmatch(text):
        raise InvalidEncodingError(f"Invalid representation of a big integer: {text!r}")
    return int(text)


def bigint_str_to_base64(text: str) -> str:
    """Convert the human (base-10) form to the persisted (base64) form."""
    value = bigint_from_str(text)
    try:
        return bigint_to_base64(value)
    except ValueError as e:
        raise InvalidEncodingError(str(e)) from e


def base64_to_bigint_str(text: str) -> str:
    """Convert the persisted (base64) form to the human (base-10) form."""
    return bigint_to_str(bigint_from_base64(text))


# ─────────────────────────────────────────────────────────────────────────
#  Ethereum addresses
# ─────────────────────────────────────────────────────────────────────────

def hez_eth_addr(address: str) -> str:
    """
    Encode an Ethereum address as ``hez:0x...``.

    Raises:
        InvalidFormatError: If the address is not a 20-byte hex address
    """
    if not isinstance(address, str) or not _ADDRESS_RE.fullmatch(address):
        raise InvalidFormatError(f"Invalid Ethereum address: {address!r}")
    return HEZ_PREFIX + Web3.to_checksum_address(address)


def hez_eth_addr_to_address(text: str) -> str:
    """
    Decode a ``hez:0x...`` address.

    Returns:
        Checksummed Ethereum address

    Raises:
        InvalidFormatError: If the prefix is missing or the hex is malformed
    """
    if not isinstance(text, str) or not text.startswith(HEZ_PREFIX):
        raise InvalidFormatError(f"Address must start with {HEZ_PREFIX!r}: {text!r}")
    address = text[len(HEZ_PREFIX):]
    if not _ADDRESS_RE.fullmatch(address):
        raise InvalidFormatError(f"Invalid Ethereum address: {address!r}")
    return Web3.to_checksum_address(address)


# ─────────────────────────────────────────────────────────────────────────
#  BabyJubJub public keys
# ─────────────────────────────────────────────────────────────────────────

def _checksum(data: bytes) -> int:
    return sum(data) % 256


def hez_bjj(key: Union[Point, bytes]) -> str:
    """
    Encode a BabyJubJub public key as ``hez:<base64url(comp || checksum)>``.

    Args:
        key: Public key point, or its 32-byte compressed form

    Returns:
        The encoded key (48 characters including the prefix)
    """
    comp = key.compress() if isinstance(key, Point) else bytes(key)
    if len(comp) != COMPRESSED_KEY_LEN:
        raise InvalidFormatError(
            f"Compressed key must be {COMPRESSED_KEY_LEN} bytes, got {len(comp)}"
        )
    payload = comp + bytes([_checksum(comp)])
    encoded = base64.urlsafe_b64encode(payload).decode("ascii").rstrip("=")
    return HEZ_PREFIX + encoded


def hez_bjj_to_compressed(text: str) -> bytes:
    """
    Decode a ``hez:`` BabyJubJub string into the 32 compressed key bytes.

    Raises:
        InvalidFormatError: On a missing prefix or a length/alphabet error
        ChecksumMismatchError: If the trailing checksum byte does not match
    """
    if not isinstance(text, str) or not text.startswith(HEZ_PREFIX):
        raise InvalidFormatError(_BJJ_FORMAT_MSG)
    encoded = text[len(HEZ_PREFIX):]
    if len(encoded) != BJJ_ENCODED_LEN or not _BJJ_ALPHABET_RE.fullmatch(encoded):
        raise InvalidFormatError(_BJJ_FORMAT_MSG)
    try:
        # 44 chars carry 33 bytes; restore the padding the encoder stripped
        decoded = base64.urlsafe_b64decode(encoded + "=" * (-len(encoded) % 4))
    except (binascii.Error, ValueError) as e:
        raise InvalidFormatError(_BJJ_FORMAT_MSG) from e
    if len(decoded) != BJJ_DECODED_LEN:
        raise InvalidFormatError(_BJJ_FORMAT_MSG)

    comp, checksum = decoded[:COMPRESSED_KEY_LEN], decoded[COMPRESSED_KEY_LEN]
    if _checksum(comp) != checksum:
        raise ChecksumMismatchError("checksum verification failed")
    return comp


def hez_bjj_to_public_key(text: str) -> Point:
    """
    Decode a ``hez:`` BabyJubJub string into a curve point.

    Raises:
        InvalidFormatError: On malformed input or a point that is not on the curve
        ChecksumMismatchError: If the trailing checksum byte does not match
    """
    return Point.decompress(hez_bjj_to_compressed(text))


# ─────────────────────────────────────────────────────────────────────────
#  Account indexes
# ─────────────────────────────────────────────────────────────────────────

def hez_idx(token_symbol: str, idx: int) -> str:
    return f"{HEZ_PREFIX}{token_symbol}:{idx}"


def hez_idx_to_idx(text: str) -> Tuple[str, int]:
    """
    Parse ``hez:<token symbol>:<idx>``.

    Returns:
        Tuple of (token_symbol, idx)

    Raises:
        InvalidFormatError: If the string does not have that shape
    """
    if not isinstance(text, str) or not text.startswith(HEZ_PREFIX):
        raise InvalidFormatError(f"can not unmarshal {text!r} into an account index")
    match = _IDX_RE.fullmatch(text[len(HEZ_PREFIX):])
    if not match:
        raise InvalidFormatError(f"can not unmarshal {text!r} into an account index")
    return match.group(1), int(match.group(2))
