from bthomecodec.crypto import address_from_string, decrypt, encrypt, generate_key, key_from_hex, key_to_hex
from bthomecodec.domain import (
    ButtonEvent,
    DecodedData,
    DimmerEvent,
    DimmerValue,
    FirmwareVersion,
    Measurement,
)
from bthomecodec.domain.packet import Packet, measurement
from bthomecodec.errors import (
    AuthenticationError,
    BTHomeError,
    DecodeError,
    EncodeError,
    EncryptionError,
    ValidationError,
)
from bthomecodec.objects import find_by_type, get_all_definitions, get_definition, is_binary_sensor, supported_types
from bthomecodec.parsing.frames import encode, encode_validated
from bthomecodec.parsing.stream import decode, decode_values
from bthomecodec.validator import validate_measurement, validate_measurements
from importlib.metadata import PackageNotFoundError, version

__all__ = [
    "AuthenticationError",
    "BTHomeError",
    "ButtonEvent",
    "DecodeError",
    "DecodedData",
    "DimmerEvent",
    "DimmerValue",
    "EncodeError",
    "EncryptionError",
    "FirmwareVersion",
    "Measurement",
    "Packet",
    "ValidationError",
    "address_from_string",
    "decode",
    "decode_values",
    "decrypt",
    "encode",
    "encode_validated",
    "encrypt",
    "find_by_type",
    "generate_key",
    "get_all_definitions",
    "get_definition",
    "is_binary_sensor",
    "key_from_hex",
    "key_to_hex",
    "measurement",
    "supported_types",
    "validate_measurement",
    "validate_measurements",
]

try:
    __version__ = version("bthomecodec")
except PackageNotFoundError:
    __version__ = "0.0.0"
