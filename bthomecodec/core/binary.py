from __future__ import annotations

from bthomecodec.errors import EncodeError, EncodeFailure

MAX_WIDTH = 4

# (signed, width) -> (min, max) for the little-endian integers on the wire.
INTEGER_BOUNDS: dict[tuple[bool, int], tuple[int, int]] = {
    (False, 1): (0, 255),
    (True, 1): (-128, 127),
    (False, 2): (0, 65_535),
    (True, 2): (-32_768, 32_767),
    (False, 3): (0, 16_777_215),
    (True, 3): (-8_388_608, 8_388_607),
    (False, 4): (0, 4_294_967_295),
    (True, 4): (-2_147_483_648, 2_147_483_647),
}


def integer_bounds(signed: bool, width: int) -> tuple[int, int]:
    try:
        return INTEGER_BOUNDS[(bool(signed), width)]
    except KeyError:
        raise EncodeError(
            f"Unsupported integer size: {width}",
            EncodeFailure.UNSUPPORTED_WIDTH,
            {"width": width, "signed": signed},
        ) from None


def encode_integer(value: int, signed: bool, width: int) -> bytes:
    low, high = integer_bounds(signed, width)
    if not low <= value <= high:
        kind = "signed" if signed else "unsigned"
        raise EncodeError(
            f"Value {value} out of range for {kind} {width}-byte integer",
            EncodeFailure.VALUE_OUT_OF_RANGE,
            {"value": value, "min": low, "max": high},
        )
    return value.to_bytes(width, byteorder="little", signed=signed)


def decode_integer(data: bytes, signed: bool, width: int) -> int:
    integer_bounds(signed, width)
    if len(data) != width:
        raise ValueError(f"expected {width} bytes, got {len(data)}")
    return int.from_bytes(data, byteorder="little", signed=signed)


def get_bit(byte_value: int, bit_index: int) -> bool:
    if bit_index < 0 or bit_index > 7:
        raise ValueError("bit_index must be between 0 and 7")
    return bool(byte_value & (1 << bit_index))
