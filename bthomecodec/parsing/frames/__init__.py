"""
Payload builder for BTHome v2 service data.

Validates measurements, prepends the device-info byte and optionally wraps
the object stream in AES-CCM encryption.
"""
from bthomecodec.parsing.frames.builder import (
    build_device_info,
    encode,
    encode_measurement,
    encode_stream,
    encode_validated,
    DEVICE_INFO_BASE,
    ENCRYPTION_FLAG,
    TRIGGER_FLAG,
)

__all__ = [
    "build_device_info",
    "encode",
    "encode_measurement",
    "encode_stream",
    "encode_validated",
    "DEVICE_INFO_BASE",
    "ENCRYPTION_FLAG",
    "TRIGGER_FLAG",
]
