"""
Exceptions for the Hermez SDK.
"""
from typing import Optional


class HermezError(Exception):
    """Base exception for all Hermez SDK errors."""
    pass


class NoAccountError(HermezError):
    """Raised when an authorized call is attempted without a signing account."""

    def __init__(self, message: str = "Authorized calls can't be made when the account is None"):
        super().__init__(message)


class TransactionError(HermezError):
    """Raised when a transaction could not be prepared or sent."""
    pass


class BlockHashMismatchError(HermezError):
    """
    Raised when the logs returned for a single block number do not all
    share the same block hash.
    """

    def __init__(self, expected: str, got: str):
        self.expected = expected
        self.got = got
        super().__init__(f"Block hash mismatch in event log: expected {expected}, got {got}")


class EventDecodeError(HermezError):
    """Raised when a log cannot be decoded into its event record."""
    pass


class CodecError(HermezError, ValueError):
    """Base exception for codec decoding failures."""
    pass


class InvalidFormatError(CodecError):
    """Raised when an encoded value does not have the expected shape."""
    pass


class ChecksumMismatchError(CodecError):
    """Raised when the checksum byte of an encoded key does not match."""
    pass


class InvalidEncodingError(CodecError):
    """Raised when a big integer representation cannot be decoded."""
    pass


class ConfigError(HermezError):
    """Raised when configuration cannot be loaded or is invalid."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class KeyStoreError(HermezError):
    """Raised when a key cannot be found, unlocked or stored."""
    pass
