"""
Chainable builder for BTHome v2 payloads.

Example::

    payload = (
        Packet()
        .add("temperature", 23.45)
        .add("motion", True)
        .serialize()
    )

A validation failure is remembered and later ``add`` calls are ignored;
``serialize`` raises the remembered error.
"""
from __future__ import annotations

from typing import Any, Optional

from bthomecodec.domain.measurement import Measurement
from bthomecodec.errors import ValidationError
from bthomecodec.objects import find_by_type
from bthomecodec.parsing.frames.builder import encode_validated
from bthomecodec.validator import validate_measurement


def measurement(type: str, value: Any, unit: Optional[str] = None, object_id: Optional[int] = None) -> Measurement:
    """
    Create and validate a measurement, filling the unit from the registry.

    Raises:
        ValidationError: If the type or value is invalid.
    """
    if unit is None:
        found = find_by_type(type)
        if found is not None:
            unit = found[1].unit or None
    created = Measurement(type=type, value=value, unit=unit, object_id=object_id)
    validate_measurement(created)
    return created


class Packet:
    def __init__(
        self,
        key: Optional[bytes] = None,
        address: Optional[bytes] = None,
        counter: Optional[int] = None,
        trigger_based: bool = False,
    ) -> None:
        self.key = key
        self.address = address
        self.counter = counter
        self.trigger_based = trigger_based
        self.measurements: list[Measurement] = []
        self.error: Optional[ValidationError] = None

    def add(self, type: str, value: Any, unit: Optional[str] = None, object_id: Optional[int] = None) -> "Packet":
        if self.error is not None:
            return self
        try:
            self.measurements.append(measurement(type, value, unit=unit, object_id=object_id))
        except ValidationError as exc:
            self.error = exc.at_index(len(self.measurements))
        return self

    def extend(self, measurements: list[Measurement]) -> "Packet":
        for item in measurements:
            if self.error is not None:
                break
            try:
                validate_measurement(item)
            except ValidationError as exc:
                self.error = exc.at_index(len(self.measurements))
                break
            self.measurements.append(item)
        return self

    def serialize(
        self,
        key: Optional[bytes] = None,
        address: Optional[bytes] = None,
        counter: Optional[int] = None,
    ) -> bytes:
        """
        Encode the accumulated measurements.

        Encryption parameters given here override the ones bound at construction.

        Raises:
            ValidationError: If any ``add`` call failed.
            EncryptionError: If encryption parameters are incomplete or invalid.
        """
        if self.error is not None:
            raise self.error
        return encode_validated(
            self.measurements,
            key=key if key is not None else self.key,
            address=address if address is not None else self.address,
            counter=counter if counter is not None else self.counter,
            trigger_based=self.trigger_based,
        )

    def __len__(self) -> int:
        return len(self.measurements)


__all__ = ["Packet", "measurement"]
