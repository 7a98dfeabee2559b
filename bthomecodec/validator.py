"""
Input validation for measurements about to be encoded.

Validation is fail-fast: ``validate_measurements`` stops at the first
invalid entry and reports its index, so no partial payload is ever built
from an invalid list.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable

from bthomecodec.core.binary import integer_bounds
from bthomecodec.domain.measurement import Measurement
from bthomecodec.errors import EncodeError, ValidationError, ValidationFailure
from bthomecodec.objects import ObjectDefinition, find_by_type, get_definition, is_binary_sensor
from bthomecodec.parsing.values.codec import (
    MAX_VARIABLE_LENGTH,
    accepts_structured,
    is_number,
    to_raw_integer,
    to_wire_integer,
    variable_payload,
)


def resolve_definition(measurement: Measurement) -> tuple[int, ObjectDefinition]:
    """
    Find the object id and definition a measurement encodes to.

    An explicit ``object_id`` takes precedence over the type name.

    Raises:
        ValidationError: If the type or explicit id is not registered.
    """
    if measurement.object_id is not None:
        definition = get_definition(measurement.object_id)
        if definition is None:
            raise ValidationError(
                f"Unsupported object id: 0x{measurement.object_id:02X}",
                ValidationFailure.UNSUPPORTED_TYPE,
                {"object_id": measurement.object_id},
            )
        return measurement.object_id, definition
    found = find_by_type(measurement.type)
    if found is None:
        raise ValidationError(
            f"Unsupported measurement type: {measurement.type}",
            ValidationFailure.UNSUPPORTED_TYPE,
            {"type": measurement.type},
        )
    return found


def _scaled(bound: int, factor: float) -> Decimal:
    return Decimal(bound) * Decimal(repr(factor))


def _check_value_type(measurement: Measurement, definition: ObjectDefinition) -> None:
    value = measurement.value
    if definition.is_variable:
        try:
            variable_payload(definition, value)
        except EncodeError:
            raise ValidationError(
                f"Value for {measurement.type} must be {'text or bytes' if definition.name == 'text' else 'bytes'}, "
                f"got: {value!r}",
                ValidationFailure.INVALID_VALUE_TYPE,
                {"type": measurement.type},
            ) from None
        return
    if isinstance(value, bool):
        if not is_binary_sensor(definition.name):
            raise ValidationError(
                f"Boolean values only allowed for binary sensors, got boolean for {measurement.type}",
                ValidationFailure.INVALID_VALUE_TYPE,
                {"type": measurement.type},
            )
        return
    if is_number(value) or accepts_structured(definition, value):
        return
    raise ValidationError(
        f"Value must be a number or boolean, got: {value!r}",
        ValidationFailure.INVALID_VALUE_TYPE,
        {"type": measurement.type},
    )


def _check_range(measurement: Measurement, definition: ObjectDefinition) -> None:
    value = measurement.value
    if definition.is_variable:
        length = len(variable_payload(definition, value))
        if length > MAX_VARIABLE_LENGTH:
            raise ValidationError(
                f"Payload length {length} out of range [0, {MAX_VARIABLE_LENGTH}] for type {measurement.type}",
                ValidationFailure.OUT_OF_RANGE,
                {"length": length, "max": MAX_VARIABLE_LENGTH},
            )
        return

    low, high = integer_bounds(definition.signed, definition.width)
    try:
        if is_number(value):
            raw = to_raw_integer(value, definition.factor)
        else:
            raw = to_wire_integer(definition, value)
    except EncodeError as exc:
        reason = ValidationFailure.CONVERSION_FAILED if is_number(value) else ValidationFailure.OUT_OF_RANGE
        raise ValidationError(
            f"Arithmetic error in value conversion for type {measurement.type}" if is_number(value) else exc.message,
            reason,
            {"type": measurement.type, "value": value},
        ) from exc

    if not low <= raw <= high:
        scale = definition.factor if is_number(value) else 1
        actual_min = _scaled(low, scale)
        actual_max = _scaled(high, scale)
        raise ValidationError(
            f"Value {value} out of range [{actual_min}, {actual_max}] for type {measurement.type}",
            ValidationFailure.OUT_OF_RANGE,
            {"type": measurement.type, "value": value, "min": actual_min, "max": actual_max},
        )


def validate_measurement(measurement: Any) -> None:
    """
    Validate a single measurement.

    Checks, in order: the type (or explicit object id) is registered, the
    value has an accepted shape for that type, and the transmitted integer
    fits the type's width and signedness.

    Raises:
        ValidationError: On the first failed check.
    """
    if not isinstance(measurement, Measurement):
        raise ValidationError(
            "Invalid measurement format - must be a Measurement",
            ValidationFailure.INVALID_VALUE_TYPE,
            {"got": type(measurement).__name__},
        )
    _, definition = resolve_definition(measurement)
    _check_value_type(measurement, definition)
    _check_range(measurement, definition)


def validate_measurements(measurements: Iterable[Measurement]) -> None:
    """
    Validate measurements in order, stopping at the first failure.

    Raises:
        ValidationError: With ``index`` set to the zero-based position of the
            offending measurement and the message prefixed accordingly.
    """
    for index, measurement in enumerate(measurements):
        try:
            validate_measurement(measurement)
        except ValidationError as exc:
            raise exc.at_index(index) from exc
