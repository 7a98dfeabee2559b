"""
Exception taxonomy for the BTHome v2 codec.

Every failure raised by the codec is a ``BTHomeError`` subclass carrying a
closed ``ErrorKind`` and a component-specific ``reason`` enum, so callers can
branch on structured data instead of parsing messages. The human-readable
message is kept stable for compatibility with existing consumers.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Top-level error families."""
    VALIDATION = "validation"
    ENCODE = "encode"
    DECODE = "decode"
    ENCRYPTION = "encryption"


class ValidationFailure(str, Enum):
    UNSUPPORTED_TYPE = "unsupported_type"
    INVALID_VALUE_TYPE = "invalid_value_type"
    OUT_OF_RANGE = "out_of_range"
    CONVERSION_FAILED = "conversion_failed"


class EncodeFailure(str, Enum):
    CONVERSION_FAILED = "conversion_failed"
    VALUE_OUT_OF_RANGE = "value_out_of_range"
    UNSUPPORTED_WIDTH = "unsupported_width"
    UNSUPPORTED_TYPE = "unsupported_type"


class DecodeFailure(str, Enum):
    EMPTY_PAYLOAD = "empty_payload"
    UNSUPPORTED_VERSION = "unsupported_version"
    INSUFFICIENT_DATA = "insufficient_data"
    MALFORMED_VARIABLE = "malformed_variable"
    MISSING_DATA = "missing_data"


class EncryptionFailure(str, Enum):
    INVALID_KEY = "invalid_key"
    INVALID_ADDRESS = "invalid_address"
    INVALID_COUNTER = "invalid_counter"
    INVALID_MIC = "invalid_mic"
    MISSING_PARAMETER = "missing_parameter"
    AUTHENTICATION_FAILED = "authentication_failed"


class BTHomeError(Exception):
    """
    Base class for all codec errors.

    Attributes:
        kind: The error family.
        reason: The component-specific failure reason.
        message: Human-readable description.
        context: Extra structured details (offending value, bounds, ...).
    """
    kind: ErrorKind

    def __init__(self, message: str, reason: Enum, context: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.reason = reason
        self.context = dict(context or {})

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(kind={self.kind.value!r}, reason={self.reason.value!r}, message={self.message!r})"


class ValidationError(BTHomeError):
    """Raised when a measurement is rejected before encoding."""
    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str,
        reason: ValidationFailure,
        context: Optional[dict[str, Any]] = None,
        index: Optional[int] = None,
    ) -> None:
        super().__init__(message, reason, context)
        self.index = index

    def at_index(self, index: int) -> "ValidationError":
        """Return a copy of this error tagged with its position in a measurement list."""
        return ValidationError(f"Measurement {index}: {self.message}", self.reason, self.context, index=index)


class EncodeError(BTHomeError):
    """Raised when a measurement cannot be packed into its wire form."""
    kind = ErrorKind.ENCODE


class DecodeError(BTHomeError):
    """Raised when a payload cannot be parsed. No partial result accompanies it."""
    kind = ErrorKind.DECODE


class EncryptionError(BTHomeError):
    """Raised for invalid encryption parameters (key, address, counter, MIC)."""
    kind = ErrorKind.ENCRYPTION


class AuthenticationError(EncryptionError):
    """Raised when AES-CCM authentication fails. Never accompanied by plaintext."""

    def __init__(self, message: str = "Authentication failed", context: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message, EncryptionFailure.AUTHENTICATION_FAILED, context)


__all__ = [
    "AuthenticationError",
    "BTHomeError",
    "DecodeError",
    "DecodeFailure",
    "EncodeError",
    "EncodeFailure",
    "EncryptionError",
    "EncryptionFailure",
    "ErrorKind",
    "ValidationError",
    "ValidationFailure",
]
