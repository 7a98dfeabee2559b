"""Tests for AES-CCM encryption (reference vector, round trips, tampering, parameter checks)."""
import pytest

from bthomecodec.crypto import (
    address_from_string,
    build_nonce,
    decrypt,
    encrypt,
    generate_key,
    key_from_hex,
    key_to_hex,
)
from bthomecodec.domain.measurement import Measurement
from bthomecodec.errors import AuthenticationError, EncryptionError, EncryptionFailure
from bthomecodec.parsing.frames import encode
from bthomecodec.parsing.stream import decode
from conftest import VECTOR_COUNTER, VECTOR_KEY, VECTOR_MAC, VECTOR_PLAINTEXT

VECTOR_PAYLOAD = bytes.fromhex("41 a4 72 66 c9 5f 73 00 11 22 33 78 23 72 14")


def test_build_nonce():
    nonce = build_nonce(VECTOR_MAC, VECTOR_COUNTER)
    assert nonce == bytes.fromhex("5448e68f80a5d2fc4100112233")
    assert len(nonce) == 13


def test_nonce_device_info_is_fixed():
    for counter in (0, 1, 0xFFFFFFFF):
        assert build_nonce(VECTOR_MAC, counter)[6:9] == b"\xd2\xfc\x41"


def test_trigger_based_packet_uses_fixed_nonce():
    counter = 5
    ciphertext, mic = encrypt(bytes([0x01, 0x64]), VECTOR_KEY, VECTOR_MAC, counter)
    payload = b"\x51" + ciphertext + counter.to_bytes(4, "little") + mic
    result = decode(payload, key=VECTOR_KEY, address=VECTOR_MAC)
    assert result.trigger_based
    assert [(m.type, m.value) for m in result.measurements] == [("battery", 100)]


def test_reference_vector_encrypt():
    ciphertext, mic = encrypt(VECTOR_PLAINTEXT, VECTOR_KEY, VECTOR_MAC, VECTOR_COUNTER)
    assert ciphertext == bytes.fromhex("a47266c95f73")
    assert mic == bytes.fromhex("78237214")


def test_reference_vector_decode():
    result = decode(VECTOR_PAYLOAD, key=VECTOR_KEY, address=VECTOR_MAC)
    assert result.encrypted
    assert result.counter == VECTOR_COUNTER
    assert result.mic == bytes.fromhex("78237214")
    assert [(m.type, m.value) for m in result.measurements] == [("temperature", 25.06), ("humidity", 50.55)]


def test_reference_vector_encode():
    measurements = [Measurement("temperature", 25.06), Measurement("humidity", 50.55)]
    assert encode(measurements, key=VECTOR_KEY, address=VECTOR_MAC, counter=VECTOR_COUNTER) == VECTOR_PAYLOAD


def test_key_without_address_is_locked():
    result = decode(VECTOR_PAYLOAD, key=VECTOR_KEY)
    assert result.measurements == ()
    assert result.ciphertext == bytes.fromhex("a47266c95f73")
    assert result.counter == VECTOR_COUNTER


@pytest.mark.parametrize("counter", [0, 1, 0xFF, 0xFFFFFFFF])
@pytest.mark.parametrize("size", [0, 1, 15, 16, 17, 50, 64])
def test_round_trip(counter, size):
    plaintext = bytes(range(size))
    ciphertext, mic = encrypt(plaintext, VECTOR_KEY, VECTOR_MAC, counter)
    assert len(ciphertext) == size
    assert len(mic) == 4
    assert decrypt(ciphertext, mic, VECTOR_KEY, VECTOR_MAC, counter) == plaintext


def test_tampering_any_bit_fails():
    ciphertext, mic = encrypt(VECTOR_PLAINTEXT, VECTOR_KEY, VECTOR_MAC, VECTOR_COUNTER)
    for index in range(len(ciphertext)):
        for bit in range(8):
            tampered = bytearray(ciphertext)
            tampered[index] ^= 1 << bit
            with pytest.raises(AuthenticationError):
                decrypt(bytes(tampered), mic, VECTOR_KEY, VECTOR_MAC, VECTOR_COUNTER)
    for index in range(len(mic)):
        tampered = bytearray(mic)
        tampered[index] ^= 0x01
        with pytest.raises(AuthenticationError):
            decrypt(ciphertext, bytes(tampered), VECTOR_KEY, VECTOR_MAC, VECTOR_COUNTER)


@pytest.mark.parametrize(
    "key, address, counter",
    [
        (bytes(16), VECTOR_MAC, VECTOR_COUNTER),
        (VECTOR_KEY, bytes(6), VECTOR_COUNTER),
        (VECTOR_KEY, VECTOR_MAC, VECTOR_COUNTER + 1),
    ],
)
def test_wrong_parameters_fail_authentication(key, address, counter):
    ciphertext, mic = encrypt(VECTOR_PLAINTEXT, VECTOR_KEY, VECTOR_MAC, VECTOR_COUNTER)
    with pytest.raises(AuthenticationError) as exc_info:
        decrypt(ciphertext, mic, key, address, counter)
    assert exc_info.value.reason is EncryptionFailure.AUTHENTICATION_FAILED


def test_decode_wrong_key():
    with pytest.raises(AuthenticationError):
        decode(VECTOR_PAYLOAD, key=bytes(16), address=VECTOR_MAC)


def test_parameter_errors_are_not_authentication_errors():
    ciphertext, mic = encrypt(VECTOR_PLAINTEXT, VECTOR_KEY, VECTOR_MAC, VECTOR_COUNTER)
    cases = [
        (lambda: decrypt(ciphertext, mic, bytes(15), VECTOR_MAC, 0), EncryptionFailure.INVALID_KEY),
        (lambda: decrypt(ciphertext, mic, VECTOR_KEY, bytes(5), 0), EncryptionFailure.INVALID_ADDRESS),
        (lambda: decrypt(ciphertext, mic, VECTOR_KEY, VECTOR_MAC, -1), EncryptionFailure.INVALID_COUNTER),
        (lambda: decrypt(ciphertext, mic[:3], VECTOR_KEY, VECTOR_MAC, 0), EncryptionFailure.INVALID_MIC),
        (lambda: encrypt(b"", VECTOR_KEY, VECTOR_MAC, 2**32), EncryptionFailure.INVALID_COUNTER),
    ]
    for call, reason in cases:
        with pytest.raises(EncryptionError) as exc_info:
            call()
        assert not isinstance(exc_info.value, AuthenticationError)
        assert exc_info.value.reason is reason


def test_key_length_message():
    with pytest.raises(EncryptionError, match="Invalid key length: expected 16 bytes, got 8"):
        encrypt(b"", bytes(8), VECTOR_MAC, 0)


def test_generate_key():
    first, second = generate_key(), generate_key()
    assert len(first) == 16
    assert first != second


def test_hex_helpers():
    assert key_from_hex("231d39c1d7cc1ab1aee224cd096db932") == VECTOR_KEY
    assert key_to_hex(VECTOR_KEY) == "231d39c1d7cc1ab1aee224cd096db932"
    with pytest.raises(EncryptionError):
        key_from_hex("abcd")
    with pytest.raises(EncryptionError):
        key_from_hex("zz" * 16)


def test_address_from_string():
    assert address_from_string("54:48:E6:8F:80:A5") == VECTOR_MAC
    assert address_from_string("5448e68f80a5") == VECTOR_MAC
    assert address_from_string("54-48-E6-8F-80-A5") == VECTOR_MAC
    with pytest.raises(EncryptionError):
        address_from_string("54:48:E6")
    with pytest.raises(EncryptionError):
        address_from_string("not an address")
