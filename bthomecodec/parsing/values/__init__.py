"""
Value codec for individual BTHome v2 objects.

Converts between a measurement's value and the bytes that follow its object
id: scaled little-endian integers, boolean sensors, button and dimmer
events, firmware versions, and length-prefixed text or raw data.
"""
from bthomecodec.parsing.values.codec import (
    decode_measurement,
    decode_value,
    encode_value,
    read_variable,
    scale,
    to_raw_integer,
    to_wire_integer,
    MAX_VARIABLE_LENGTH,
)

__all__ = [
    "decode_measurement",
    "decode_value",
    "encode_value",
    "read_variable",
    "scale",
    "to_raw_integer",
    "to_wire_integer",
    "MAX_VARIABLE_LENGTH",
]
