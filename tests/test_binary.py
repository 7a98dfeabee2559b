"""Tests for the little-endian integer codec and bounds table."""
import pytest

from bthomecodec.core.binary import (
    INTEGER_BOUNDS,
    decode_integer,
    encode_integer,
    get_bit,
    integer_bounds,
)
from bthomecodec.errors import EncodeError, EncodeFailure


def test_encode_little_endian():
    assert encode_integer(0x0929, False, 2) == bytes([0x29, 0x09])
    assert encode_integer(0x123456, False, 3) == bytes([0x56, 0x34, 0x12])
    assert encode_integer(0x12345678, False, 4) == bytes([0x78, 0x56, 0x34, 0x12])


def test_encode_signed():
    assert encode_integer(-1, True, 1) == b"\xff"
    assert encode_integer(-2, True, 2) == b"\xfe\xff"
    assert encode_integer(-8_388_608, True, 3) == b"\x00\x00\x80"


def test_decode_signed_and_unsigned():
    assert decode_integer(b"\xff", False, 1) == 255
    assert decode_integer(b"\xff", True, 1) == -1
    assert decode_integer(b"\x00\x80", True, 2) == -32768
    assert decode_integer(b"\xff\xff\xff", False, 3) == 16_777_215
    assert decode_integer(b"\xff\xff\xff\x7f", True, 4) == 2_147_483_647


@pytest.mark.parametrize("signed, width", sorted(INTEGER_BOUNDS))
def test_bounds_encode_at_limits(signed, width):
    low, high = integer_bounds(signed, width)
    assert decode_integer(encode_integer(low, signed, width), signed, width) == low
    assert decode_integer(encode_integer(high, signed, width), signed, width) == high
    with pytest.raises(EncodeError) as exc_info:
        encode_integer(high + 1, signed, width)
    assert exc_info.value.reason is EncodeFailure.VALUE_OUT_OF_RANGE
    with pytest.raises(EncodeError):
        encode_integer(low - 1, signed, width)


def test_out_of_range_message():
    with pytest.raises(EncodeError, match="Value 256 out of range for unsigned 1-byte integer"):
        encode_integer(256, False, 1)


def test_unsupported_width():
    with pytest.raises(EncodeError) as exc_info:
        encode_integer(1, False, 5)
    assert exc_info.value.reason is EncodeFailure.UNSUPPORTED_WIDTH
    with pytest.raises(EncodeError):
        decode_integer(b"\x00" * 8, False, 8)


def test_get_bit():
    assert get_bit(0x41, 0) is True
    assert get_bit(0x41, 4) is False
    assert get_bit(0x50, 4) is True
    with pytest.raises(ValueError):
        get_bit(0x01, 8)
