"""
Payload builder for BTHome v2 service data.

Builds payloads with the structure:
``[device info] [object id] [value] ...`` or, when encrypted,
``[device info] [ciphertext] [counter: 4 LE] [mic: 4]``.
"""
from __future__ import annotations

from typing import Iterable, Optional

from bthomecodec.crypto import encrypt
from bthomecodec.domain.measurement import Measurement
from bthomecodec.errors import EncryptionError, EncryptionFailure
from bthomecodec.logging import get_logger
from bthomecodec.parsing.values.codec import encode_value
from bthomecodec.validator import resolve_definition, validate_measurements

# Version 2 in bits 7-5.
DEVICE_INFO_BASE = 0x40
TRIGGER_FLAG = 0x10
ENCRYPTION_FLAG = 0x01

logger = get_logger(__name__)


def build_device_info(encrypted: bool = False, trigger_based: bool = False) -> int:
    device_info = DEVICE_INFO_BASE
    if trigger_based:
        device_info |= TRIGGER_FLAG
    if encrypted:
        device_info |= ENCRYPTION_FLAG
    return device_info


def encode_measurement(measurement: Measurement) -> bytes:
    """Encode one measurement as ``[object id][value bytes]``."""
    object_id, definition = resolve_definition(measurement)
    return bytes([object_id]) + encode_value(definition, measurement.value)


def encode_stream(measurements: Iterable[Measurement]) -> bytes:
    buf = bytearray()
    for measurement in measurements:
        buf.extend(encode_measurement(measurement))
    return bytes(buf)


def encode_validated(
    measurements: Iterable[Measurement],
    key: Optional[bytes] = None,
    address: Optional[bytes] = None,
    counter: Optional[int] = None,
    trigger_based: bool = False,
) -> bytes:
    """
    Encode measurements that have already been validated.

    Encryption is enabled by passing ``key``; ``address`` and ``counter`` are
    then required.

    Raises:
        EncodeError: If a value cannot be packed.
        EncryptionError: If encryption parameters are missing or invalid.
    """
    plaintext = encode_stream(measurements)
    if key is None:
        return bytes([build_device_info(False, trigger_based)]) + plaintext

    for name, value in (("MAC address", address), ("counter", counter)):
        if value is None:
            raise EncryptionError(
                f"Missing required {name} for encryption",
                EncryptionFailure.MISSING_PARAMETER,
                {"parameter": name},
            )
    device_info = build_device_info(True, trigger_based)
    ciphertext, mic = encrypt(plaintext, key, address, counter)
    logger.debug("encoded_encrypted", extra={"details": {"counter": counter, "length": len(ciphertext)}})
    return bytes([device_info]) + ciphertext + counter.to_bytes(4, "little") + mic


def encode(
    measurements: Iterable[Measurement],
    key: Optional[bytes] = None,
    address: Optional[bytes] = None,
    counter: Optional[int] = None,
    trigger_based: bool = False,
) -> bytes:
    """
    Validate and encode measurements into a BTHome v2 payload.

    Args:
        measurements: Measurements in the order they should appear on the wire.
        key: 16-byte key; when given the payload is encrypted.
        address: 6-byte device address (display order), required with ``key``.
        counter: 32-bit replay counter, required with ``key``.
        trigger_based: Set the trigger-based flag in the device-info byte.

    Returns:
        The complete payload bytes.

    Raises:
        ValidationError: For the first invalid measurement; nothing is encoded.
        EncryptionError: If encryption parameters are missing or invalid.
    """
    measurements = list(measurements)
    validate_measurements(measurements)
    return encode_validated(measurements, key=key, address=address, counter=counter, trigger_based=trigger_based)
