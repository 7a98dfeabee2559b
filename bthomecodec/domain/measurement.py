"""
Value objects produced and consumed by the codec.

``Measurement`` is one typed reading; ``DecodedData`` is the envelope returned
by a decode call. Structured readings (button, dimmer, firmware version) use
the small records and enums defined here so that values keep a single,
closed set of shapes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

UNKNOWN_TYPE = "unknown"


class ButtonEvent(str, Enum):
    """Button events carried by object 0x3A."""
    NONE = "none"
    PRESS = "press"
    DOUBLE_PRESS = "double_press"
    TRIPLE_PRESS = "triple_press"
    LONG_PRESS = "long_press"
    LONG_DOUBLE_PRESS = "long_double_press"
    LONG_TRIPLE_PRESS = "long_triple_press"
    HOLD_PRESS = "hold_press"
    RELEASE = "release"

    @property
    def code(self) -> int:
        return _BUTTON_CODES[self]

    @classmethod
    def from_code(cls, code: int) -> Union["ButtonEvent", int]:
        """Map a wire byte to an event; unrecognised bytes are returned unchanged."""
        return _BUTTON_BY_CODE.get(code, code)


_BUTTON_CODES: dict[ButtonEvent, int] = {
    ButtonEvent.NONE: 0x00,
    ButtonEvent.PRESS: 0x01,
    ButtonEvent.DOUBLE_PRESS: 0x02,
    ButtonEvent.TRIPLE_PRESS: 0x03,
    ButtonEvent.LONG_PRESS: 0x04,
    ButtonEvent.LONG_DOUBLE_PRESS: 0x05,
    ButtonEvent.LONG_TRIPLE_PRESS: 0x06,
    ButtonEvent.HOLD_PRESS: 0x80,
    ButtonEvent.RELEASE: 0xFF,
}

_BUTTON_BY_CODE: dict[int, ButtonEvent] = {code: event for event, code in _BUTTON_CODES.items()}
# Older firmware reports hold as 0xFE.
_BUTTON_BY_CODE[0xFE] = ButtonEvent.HOLD_PRESS


class DimmerEvent(str, Enum):
    """Rotation events carried in the low byte of object 0x3C."""
    NONE = "none"
    ROTATE_LEFT = "rotate_left"
    ROTATE_RIGHT = "rotate_right"

    @property
    def code(self) -> int:
        return _DIMMER_CODES[self]

    @classmethod
    def from_code(cls, code: int) -> Union["DimmerEvent", int]:
        return _DIMMER_BY_CODE.get(code, code)


_DIMMER_CODES: dict[DimmerEvent, int] = {
    DimmerEvent.NONE: 0,
    DimmerEvent.ROTATE_LEFT: 1,
    DimmerEvent.ROTATE_RIGHT: 2,
}
_DIMMER_BY_CODE: dict[int, DimmerEvent] = {code: event for event, code in _DIMMER_CODES.items()}


@dataclass(frozen=True)
class DimmerValue:
    """
    A dimmer reading.

    Attributes:
        event: The rotation event, or the raw code if it is not recognised.
        steps: Number of detents rotated (0-255).
    """
    event: Union[DimmerEvent, int]
    steps: int = 0

    @property
    def event_code(self) -> int:
        return self.event.code if isinstance(self.event, DimmerEvent) else int(self.event)

    def as_dict(self) -> dict[str, Any]:
        event = self.event.value if isinstance(self.event, DimmerEvent) else self.event
        return {"event": event, "steps": self.steps}


@dataclass(frozen=True)
class FirmwareVersion:
    """
    A firmware version split into one-byte components.

    ``build`` is present for the 32-bit form and ``None`` for the 24-bit form.
    """
    major: int
    minor: int
    patch: int
    build: Optional[int] = None

    def components(self) -> tuple[int, ...]:
        if self.build is None:
            return (self.major, self.minor, self.patch)
        return (self.major, self.minor, self.patch, self.build)

    def as_dict(self) -> dict[str, Any]:
        data = {"major": self.major, "minor": self.minor, "patch": self.patch}
        if self.build is not None:
            data["build"] = self.build
        return data

    def __str__(self) -> str:
        return ".".join(str(part) for part in self.components())


MeasurementValue = Union[bool, int, float, ButtonEvent, DimmerValue, FirmwareVersion, str, bytes]


@dataclass(frozen=True)
class Measurement:
    """
    A single typed sensor reading.

    Attributes:
        type: Registry type name, or ``"unknown"`` for undecodable trailing data.
        value: The reading (number, bool, structured record, text or bytes).
        unit: Unit string copied from the registry or overridden by the caller.
        object_id: Explicit object id; when set, encoding uses it instead of
            the canonical id for ``type``.
        unknown_payload: Trailing bytes, only for the ``"unknown"`` type.
    """
    type: str
    value: Any
    unit: Optional[str] = None
    object_id: Optional[int] = None
    unknown_payload: Optional[bytes] = None

    @classmethod
    def unknown(cls, payload: bytes) -> "Measurement":
        return cls(type=UNKNOWN_TYPE, value=bytes(payload), unknown_payload=bytes(payload))

    @property
    def is_unknown(self) -> bool:
        return self.type == UNKNOWN_TYPE

    def as_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type, "value": _jsonable(self.value)}
        if self.unit:
            data["unit"] = self.unit
        if self.object_id is not None:
            data["object_id"] = self.object_id
        if self.unknown_payload is not None:
            data["unknown_payload"] = self.unknown_payload.hex()
        return data


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (DimmerValue, FirmwareVersion)):
        return value.as_dict()
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    return value


@dataclass(frozen=True)
class DecodedData:
    """
    Result of decoding one BTHome v2 payload.

    Attributes:
        version: Protocol version from the device-info byte (always 2).
        encrypted: Whether the encryption flag was set.
        trigger_based: Whether the trigger-based flag was set.
        measurements: Decoded readings in wire order. Empty for encrypted
            payloads decoded without a key.
        device_address: Six address bytes in on-wire order, if detected.
        ciphertext: Encrypted stream, only for encrypted payloads.
        counter: Little-endian replay counter, if the tail could be parsed.
        mic: Four-byte integrity tag, if the tail could be parsed.
    """
    version: int
    encrypted: bool
    trigger_based: bool
    measurements: tuple[Measurement, ...] = field(default_factory=tuple)
    device_address: Optional[bytes] = None
    ciphertext: Optional[bytes] = None
    counter: Optional[int] = None
    mic: Optional[bytes] = None

    @property
    def mac_address(self) -> Optional[str]:
        """The device address in display order (the wire carries it reversed)."""
        if self.device_address is None:
            return None
        return ":".join(f"{b:02X}" for b in reversed(self.device_address))

    def as_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "encrypted": self.encrypted,
            "trigger_based": self.trigger_based,
            "measurements": [m.as_dict() for m in self.measurements],
            "mac_address": self.mac_address,
            "ciphertext": self.ciphertext.hex() if self.ciphertext is not None else None,
            "counter": self.counter,
            "mic": self.mic.hex() if self.mic is not None else None,
        }
