"""
Value codec for BTHome v2 objects.

Packs and unpacks one measurement's value against its ``ObjectDefinition``.
Fixed-width objects are little-endian integers scaled by the definition's
factor; a handful of types replace the scaling step with their own
interpretation, selected by type name from ``_SPECIAL_DECODERS`` and
``_SPECIAL_ENCODERS``. Variable-width objects (``text`` and ``raw``) are a
length byte followed by that many payload bytes.

Encoding rounds ``value / factor`` to the nearest integer, ties to even,
using the exact decimal quotient so that ``23.45 / 0.01`` is ``2345``.
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN
from numbers import Rational, Real
from typing import Any, Callable

from bthomecodec.core.binary import decode_integer, encode_integer
from bthomecodec.domain.measurement import (
    ButtonEvent,
    DimmerEvent,
    DimmerValue,
    FirmwareVersion,
    Measurement,
)
from bthomecodec.errors import DecodeError, DecodeFailure, EncodeError, EncodeFailure
from bthomecodec.objects import ObjectDefinition, is_binary_sensor

MAX_VARIABLE_LENGTH = 0xFF


def is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _exact_decimal(value: Any) -> Decimal:
    if isinstance(value, Rational):
        if isinstance(value, int):
            return Decimal(int(value))
        return Decimal(value.numerator) / Decimal(value.denominator)
    return Decimal(repr(float(value)))


def to_raw_integer(value: Any, factor: float) -> int:
    """
    Convert a physical value to its transmitted integer.

    Floats go through their shortest repr and other rationals (``Fraction``)
    through numerator and denominator, so the quotient is exact.

    Raises:
        EncodeError: If the value is not finite or not a number.
    """
    try:
        quotient = _exact_decimal(value) / _exact_decimal(factor)
        return int(quotient.to_integral_value(rounding=ROUND_HALF_EVEN))
    except (InvalidOperation, ValueError, OverflowError) as exc:
        raise EncodeError(
            f"Failed to convert value {value} with factor {factor}",
            EncodeFailure.CONVERSION_FAILED,
            {"value": value, "factor": factor},
        ) from exc


def scale(raw: int, definition: ObjectDefinition) -> int | float:
    if definition.factor == 1:
        return raw
    return round(raw * definition.factor, definition.decimals)


# --- decoding ---------------------------------------------------------------

def _decode_button(raw: int) -> ButtonEvent | int:
    return ButtonEvent.from_code(raw)


def _decode_dimmer(raw: int) -> DimmerValue:
    return DimmerValue(event=DimmerEvent.from_code(raw & 0xFF), steps=(raw >> 8) & 0xFF)


def _decode_firmware_32(raw: int) -> FirmwareVersion:
    return FirmwareVersion(
        major=(raw >> 24) & 0xFF,
        minor=(raw >> 16) & 0xFF,
        patch=(raw >> 8) & 0xFF,
        build=raw & 0xFF,
    )


def _decode_firmware_24(raw: int) -> FirmwareVersion:
    return FirmwareVersion(major=(raw >> 16) & 0xFF, minor=(raw >> 8) & 0xFF, patch=raw & 0xFF)


_SPECIAL_DECODERS: dict[str, Callable[[int], Any]] = {
    "button": _decode_button,
    "dimmer": _decode_dimmer,
    "firmware_version_uint32": _decode_firmware_32,
    "firmware_version_uint24": _decode_firmware_24,
}


def decode_value(definition: ObjectDefinition, data: bytes) -> Any:
    """Decode the value bytes of a fixed-width object."""
    raw = decode_integer(data, definition.signed, definition.width)
    if is_binary_sensor(definition.name):
        return raw != 0
    special = _SPECIAL_DECODERS.get(definition.name)
    if special is not None:
        return special(raw)
    return scale(raw, definition)


def decode_measurement(definition: ObjectDefinition, data: bytes) -> Measurement:
    return Measurement(
        type=definition.name,
        value=decode_value(definition, data),
        unit=definition.unit or None,
        object_id=definition.id,
    )


def read_variable(definition: ObjectDefinition, data: bytes) -> tuple[Measurement, bytes]:
    """
    Read one length-prefixed object from the front of ``data``.

    Returns:
        The decoded measurement and the bytes following it.

    Raises:
        DecodeError: If the payload is shorter than its length byte claims.
    """
    if definition.name not in ("text", "raw"):
        raise DecodeError(
            f"Unsupported variable-sized type: {definition.name}",
            DecodeFailure.MALFORMED_VARIABLE,
            {"object_id": definition.id},
        )
    if not data or len(data) - 1 < data[0]:
        raise DecodeError(
            f"Insufficient data for {definition.name}",
            DecodeFailure.MALFORMED_VARIABLE,
            {"object_id": definition.id, "available": max(len(data) - 1, 0)},
        )
    length = data[0]
    payload = bytes(data[1:1 + length])
    value: str | bytes = payload
    if definition.name == "text":
        try:
            value = payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(
                "Invalid UTF-8 in text",
                DecodeFailure.MALFORMED_VARIABLE,
                {"object_id": definition.id, "payload": payload.hex()},
            ) from exc
    measurement = Measurement(type=definition.name, value=value, unit=definition.unit or None, object_id=definition.id)
    return measurement, data[1 + length:]


# --- encoding ---------------------------------------------------------------

def _component(value: int, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= 0xFF:
        raise EncodeError(
            f"Value {value!r} out of range [0, 255] for {name}",
            EncodeFailure.VALUE_OUT_OF_RANGE,
            {"value": value, "min": 0, "max": 0xFF},
        )
    return value


def _encode_button(value: Any) -> int:
    if not isinstance(value, ButtonEvent):
        raise TypeError
    return value.code


def _encode_dimmer(value: Any) -> int:
    if isinstance(value, DimmerEvent):
        value = DimmerValue(event=value)
    if not isinstance(value, DimmerValue):
        raise TypeError
    return _component(value.event_code, "dimmer event") | (_component(value.steps, "dimmer steps") << 8)


def _encode_firmware_32(value: Any) -> int:
    if not isinstance(value, FirmwareVersion) or value.build is None:
        raise TypeError
    major, minor, patch, build = (_component(part, "firmware version") for part in value.components())
    return (major << 24) | (minor << 16) | (patch << 8) | build


def _encode_firmware_24(value: Any) -> int:
    if not isinstance(value, FirmwareVersion) or value.build is not None:
        raise TypeError
    major, minor, patch = (_component(part, "firmware version") for part in value.components())
    return (major << 16) | (minor << 8) | patch


_SPECIAL_ENCODERS: dict[str, Callable[[Any], int]] = {
    "button": _encode_button,
    "dimmer": _encode_dimmer,
    "firmware_version_uint32": _encode_firmware_32,
    "firmware_version_uint24": _encode_firmware_24,
}


def accepts_structured(definition: ObjectDefinition, value: Any) -> bool:
    """Whether ``value`` is the structured shape the type's special encoder takes."""
    encoder = _SPECIAL_ENCODERS.get(definition.name)
    if encoder is None:
        return False
    try:
        encoder(value)
    except TypeError:
        return False
    except EncodeError:
        return True
    return True


def to_wire_integer(definition: ObjectDefinition, value: Any) -> int:
    """
    Convert a value of any accepted shape to the integer sent on the wire.

    Raises:
        EncodeError: If the value has the wrong shape or cannot be converted.
    """
    if isinstance(value, bool):
        return int(value)
    if is_number(value):
        return to_raw_integer(value, definition.factor)
    encoder = _SPECIAL_ENCODERS.get(definition.name)
    if encoder is not None:
        try:
            return encoder(value)
        except TypeError:
            pass
    raise EncodeError(
        f"Cannot encode {type(value).__name__} value for type {definition.name}",
        EncodeFailure.UNSUPPORTED_TYPE,
        {"type": definition.name},
    )


def variable_payload(definition: ObjectDefinition, value: Any) -> bytes:
    if definition.name == "text" and isinstance(value, str):
        return value.encode("utf-8")
    if definition.name in ("text", "raw") and isinstance(value, (bytes, bytearray)):
        return bytes(value)
    raise EncodeError(
        f"Cannot encode {type(value).__name__} value for type {definition.name}",
        EncodeFailure.UNSUPPORTED_TYPE,
        {"type": definition.name},
    )


def encode_value(definition: ObjectDefinition, value: Any) -> bytes:
    """Encode a value into its wire bytes (without the object id)."""
    if definition.is_variable:
        payload = variable_payload(definition, value)
        if len(payload) > MAX_VARIABLE_LENGTH:
            raise EncodeError(
                f"Payload of {len(payload)} bytes too long for type {definition.name}",
                EncodeFailure.VALUE_OUT_OF_RANGE,
                {"length": len(payload), "max": MAX_VARIABLE_LENGTH},
            )
        return bytes([len(payload)]) + payload
    return encode_integer(to_wire_integer(definition, value), definition.signed, definition.width)
