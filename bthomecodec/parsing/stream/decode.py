"""
Decoder for BTHome v2 payloads.

A payload is a device-info byte followed either by a plaintext stream of
``[object id][value]`` pairs (optionally preceded by the 6-byte device
address) or, when the encryption flag is set, by
``[ciphertext][counter: 4 LE][mic: 4]``. Encrypted payloads are only
decoded when a key and address are supplied; otherwise the envelope is
returned with no measurements.
"""
from __future__ import annotations

from typing import Any, Optional

from bthomecodec.core.binary import get_bit
from bthomecodec.crypto import decrypt
from bthomecodec.domain.measurement import DecodedData, Measurement
from bthomecodec.errors import DecodeError, DecodeFailure
from bthomecodec.logging import get_logger
from bthomecodec.objects import get_definition, get_registry
from bthomecodec.parsing.values.codec import decode_measurement, read_variable

BTHOME_VERSION = 2
VERSION_MASK = 0xE0
VERSION_SHIFT = 5
TRIGGER_BIT = 4
ENCRYPTION_BIT = 0

ADDRESS_LENGTH = 6
COUNTER_LENGTH = 4
MIC_LENGTH = 4

logger = get_logger(__name__)


def parse_device_info(device_info: int) -> tuple[int, bool, bool]:
    """
    Split the device-info byte into ``(version, trigger_based, encrypted)``.

    Raises:
        DecodeError: If the version is not 2.
    """
    version = (device_info & VERSION_MASK) >> VERSION_SHIFT
    if version != BTHOME_VERSION:
        raise DecodeError(
            f"Unsupported BTHome version: {version}",
            DecodeFailure.UNSUPPORTED_VERSION,
            {"device_info": device_info, "version": version},
        )
    return version, get_bit(device_info, TRIGGER_BIT), get_bit(device_info, ENCRYPTION_BIT)


def split_address(data: bytes) -> tuple[Optional[bytes], bytes]:
    """
    Detect a leading device address in a plaintext stream.

    The first six bytes are taken as an address only when the first byte is
    not a registered object id, the seventh byte is, and at least one byte
    follows it. A stream of six unregistered bytes followed by an unrelated
    registered id is indistinguishable from an address and is treated as one.
    """
    registry = get_registry()
    if len(data) < ADDRESS_LENGTH + 1 or data[0] in registry:
        return None, data
    if len(data) >= ADDRESS_LENGTH + 2 and data[ADDRESS_LENGTH] in registry:
        return bytes(data[:ADDRESS_LENGTH]), data[ADDRESS_LENGTH:]
    return None, data


def split_encrypted(data: bytes) -> tuple[bytes, Optional[int], Optional[bytes]]:
    """Split an encrypted tail into ``(ciphertext, counter, mic)``; short tails are all ciphertext."""
    if len(data) < COUNTER_LENGTH + MIC_LENGTH:
        return bytes(data), None, None
    end = len(data) - COUNTER_LENGTH - MIC_LENGTH
    counter = int.from_bytes(data[end:end + COUNTER_LENGTH], "little")
    return bytes(data[:end]), counter, bytes(data[end + COUNTER_LENGTH:])


def decode_stream(data: bytes) -> list[Measurement]:
    """
    Decode a plaintext object stream.

    An unregistered object id ends the stream: everything after it becomes a
    single ``"unknown"`` measurement and no further ids are parsed.

    Raises:
        DecodeError: If a value is truncated or an id has no data after it.
    """
    measurements: list[Measurement] = []
    rest = bytes(data)
    while rest:
        object_id, rest = rest[0], rest[1:]
        if not rest:
            raise DecodeError(
                "Object ID found but no measurement data",
                DecodeFailure.MISSING_DATA,
                {"object_id": object_id},
            )
        definition = get_definition(object_id)
        if definition is None:
            logger.info("decode_unknown_object", extra={"details": {"object_id": object_id, "remaining": len(rest), "unknown_payload": rest.hex()}})
            measurements.append(Measurement.unknown(rest))
            break
        if definition.is_variable:
            measurement, rest = read_variable(definition, rest)
            measurements.append(measurement)
            continue
        width = definition.width
        if len(rest) < width:
            raise DecodeError(
                f"Insufficient data for measurement (object_id: {object_id}, expected: {width}, available: {len(rest)})",
                DecodeFailure.INSUFFICIENT_DATA,
                {"object_id": object_id, "expected": width, "available": len(rest)},
            )
        measurements.append(decode_measurement(definition, rest[:width]))
        rest = rest[width:]
    return measurements


def _decode_encrypted(
    version: int,
    trigger_based: bool,
    payload: bytes,
    key: Optional[bytes],
    address: Optional[bytes],
) -> DecodedData:
    ciphertext, counter, mic = split_encrypted(payload)
    measurements: list[Measurement] = []
    if counter is not None and key is not None and address is not None:
        plaintext = decrypt(ciphertext, mic, key, address, counter)
        measurements = decode_stream(plaintext)
    return DecodedData(
        version=version,
        encrypted=True,
        trigger_based=trigger_based,
        measurements=tuple(measurements),
        ciphertext=ciphertext,
        counter=counter,
        mic=mic,
    )


def decode(data: bytes, key: Optional[bytes] = None, address: Optional[bytes] = None) -> DecodedData:
    """
    Decode a BTHome v2 payload.

    Args:
        data: The service data, starting with the device-info byte.
        key: 16-byte key for encrypted payloads.
        address: 6-byte device address (display order) for encrypted payloads.

    Returns:
        The decoded envelope. Encrypted payloads without key and address, or
        too short to carry a counter and MIC, decode to no measurements.

    Raises:
        DecodeError: If the payload is empty, has the wrong version, or is malformed.
        EncryptionError: If the key or address has the wrong size.
        AuthenticationError: If decryption fails authentication.
    """
    if not data:
        raise DecodeError("Invalid BTHome data format", DecodeFailure.EMPTY_PAYLOAD)
    data = bytes(data)
    device_info, payload = data[0], data[1:]
    try:
        version, trigger_based, encrypted = parse_device_info(device_info)
        if encrypted:
            return _decode_encrypted(version, trigger_based, payload, key, address)
        device_address, payload = split_address(payload)
        if device_address is not None:
            logger.debug("address_detected", extra={"details": {"address": device_address.hex()}})
        return DecodedData(
            version=version,
            encrypted=False,
            trigger_based=trigger_based,
            measurements=tuple(decode_stream(payload)),
            device_address=device_address,
        )
    except DecodeError as exc:
        logger.warning("decode_failed", extra={"details": {"reason": exc.reason.value, "length": len(data)}})
        raise


def decode_values(data: bytes, key: Optional[bytes] = None, address: Optional[bytes] = None) -> dict[str, Any]:
    """
    Decode a payload into a ``type -> value`` mapping.

    A type that occurs more than once maps to the list of its values in wire
    order. Encrypted payloads without a key decode to an empty mapping.
    """
    values: dict[str, Any] = {}
    counts: dict[str, int] = {}
    for measurement in decode(data, key=key, address=address).measurements:
        counts[measurement.type] = counts.get(measurement.type, 0) + 1
        if counts[measurement.type] == 1:
            values[measurement.type] = measurement.value
        elif counts[measurement.type] == 2:
            values[measurement.type] = [values[measurement.type], measurement.value]
        else:
            values[measurement.type].append(measurement.value)
    return values
