"""
Decoder for complete BTHome v2 payloads.

Parses the device-info byte, detects a leading device address in plaintext
payloads, decrypts encrypted payloads when a key is supplied, and walks the
object stream.
"""
from bthomecodec.parsing.stream.decode import (
    decode,
    decode_stream,
    decode_values,
    parse_device_info,
    split_address,
    split_encrypted,
    BTHOME_VERSION,
)

__all__ = [
    "decode",
    "decode_stream",
    "decode_values",
    "parse_device_info",
    "split_address",
    "split_encrypted",
    "BTHOME_VERSION",
]
