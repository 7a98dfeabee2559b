"""Tests for payload encoding (device info, ordering, explicit ids, encryption parameters)."""
import pytest

from bthomecodec.domain.measurement import ButtonEvent, DimmerEvent, DimmerValue, FirmwareVersion, Measurement
from bthomecodec.errors import EncryptionError, EncryptionFailure, ValidationError
from bthomecodec.parsing.frames import encode, encode_validated
from bthomecodec.parsing.frames.builder import build_device_info, encode_measurement
from bthomecodec.parsing.stream import decode


def test_build_device_info():
    assert build_device_info() == 0x40
    assert build_device_info(encrypted=True) == 0x41
    assert build_device_info(trigger_based=True) == 0x50
    assert build_device_info(True, True) == 0x51


def test_encode_temperature():
    assert encode([Measurement("temperature", 23.45)]) == bytes([0x40, 0x02, 0x29, 0x09])


def test_encode_binary_sensors():
    payload = encode([Measurement("motion", True), Measurement("door", False)])
    assert payload == bytes([0x40, 0x21, 0x01, 0x1A, 0x00])


def test_encode_empty():
    assert encode([]) == b"\x40"


def test_encode_preserves_order():
    payload = encode([Measurement("battery", 90), Measurement("packet_id", 3), Measurement("battery", 80)])
    assert payload == bytes([0x40, 0x01, 0x5A, 0x00, 0x03, 0x01, 0x50])


def test_encode_trigger_based():
    assert encode([Measurement("button", ButtonEvent.PRESS)], trigger_based=True) == bytes([0x50, 0x3A, 0x01])


def test_encode_explicit_object_id():
    assert encode_measurement(Measurement("mass", 10.5, object_id=0x07)) == bytes([0x07, 0x1A, 0x04])
    assert encode_measurement(Measurement("mass", 10.5)) == bytes([0x06, 0x1A, 0x04])


def test_encode_structured_values():
    payload = encode([
        Measurement("button", ButtonEvent.HOLD_PRESS),
        Measurement("dimmer", DimmerValue(DimmerEvent.ROTATE_RIGHT, 5)),
        Measurement("firmware_version_uint32", FirmwareVersion(1, 2, 3, 4)),
    ])
    assert payload == bytes([0x40, 0x3A, 0x80, 0x3C, 0x02, 0x05, 0xF1, 0x04, 0x03, 0x02, 0x01])


def test_encode_text_and_raw():
    payload = encode([Measurement("text", "abc"), Measurement("raw", b"\x01")])
    assert payload == bytes([0x40, 0x53, 0x03, 0x61, 0x62, 0x63, 0x54, 0x01, 0x01])


def test_encode_rejects_whole_list():
    with pytest.raises(ValidationError) as exc_info:
        encode([Measurement("temperature", 20), Measurement("battery", 256)])
    assert exc_info.value.index == 1
    assert exc_info.value.message == "Measurement 1: Value 256 out of range [0, 255] for type battery"


def test_encode_decode_agree():
    measurements = [
        Measurement("temperature", -12.5),
        Measurement("humidity", 45.67),
        Measurement("pressure", 1013.25),
        Measurement("window", True),
        Measurement("count_sint16", -300),
        Measurement("text", "ok"),
    ]
    decoded = decode(encode(measurements))
    assert [(m.type, m.value) for m in decoded.measurements] == [(m.type, m.value) for m in measurements]


@pytest.mark.parametrize(
    "kwargs, parameter",
    [
        ({"address": bytes(6)}, "counter"),
        ({"counter": 1}, "MAC address"),
    ],
)
def test_encrypt_missing_parameter(key, kwargs, parameter):
    with pytest.raises(EncryptionError) as exc_info:
        encode([Measurement("battery", 50)], key=key, **kwargs)
    assert exc_info.value.reason is EncryptionFailure.MISSING_PARAMETER
    assert exc_info.value.message == f"Missing required {parameter} for encryption"


def test_encrypt_invalid_key(mac):
    with pytest.raises(EncryptionError) as exc_info:
        encode_validated([Measurement("battery", 50)], key=b"short", address=mac, counter=1)
    assert exc_info.value.reason is EncryptionFailure.INVALID_KEY


def test_encrypt_invalid_counter(key, mac):
    with pytest.raises(EncryptionError) as exc_info:
        encode([Measurement("battery", 50)], key=key, address=mac, counter=2**32)
    assert exc_info.value.reason is EncryptionFailure.INVALID_COUNTER


def test_encrypted_layout(key, mac):
    payload = encode([Measurement("battery", 50)], key=key, address=mac, counter=0x01020304)
    assert payload[0] == 0x41
    # device info + 2 bytes of ciphertext + counter + MIC
    assert len(payload) == 1 + 2 + 4 + 4
    assert payload[3:7] == bytes([0x04, 0x03, 0x02, 0x01])


def test_encrypted_trigger_based(key, mac):
    payload = encode([Measurement("button", ButtonEvent.PRESS)], key=key, address=mac, counter=7, trigger_based=True)
    assert payload[0] == 0x51
    # the trigger flag is not part of the nonce
    plain = encode([Measurement("button", ButtonEvent.PRESS)], key=key, address=mac, counter=7)
    assert payload[1:] == plain[1:]
    result = decode(payload, key=key, address=mac)
    assert result.trigger_based
    assert result.measurements[0].value is ButtonEvent.PRESS
