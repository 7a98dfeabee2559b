"""
AES-CCM encryption for BTHome v2 payloads.

The nonce is 13 bytes: device address (6, display order), the BTHome
service UUID ``0xFCD2`` as sent on air (``D2 FC``), the fixed encrypted
device-info byte ``0x41``, and the 32-bit counter little-endian. The
trigger-based flag of the packet does not enter the nonce. The tag
(MIC) is 4 bytes and no associated data is used.
"""
import binascii
import re
from typing import Tuple

from Crypto.Cipher import AES
from Crypto.Random import get_random_bytes

from bthomecodec.errors import AuthenticationError, EncryptionError, EncryptionFailure
from bthomecodec.logging import get_logger

BTHOME_UUID = b"\xd2\xfc"
KEY_LENGTH = 16
ADDRESS_LENGTH = 6
COUNTER_LENGTH = 4
MIC_LENGTH = 4
NONCE_LENGTH = 13
# Version 2, encryption flag set.
ENCRYPTED_DEVICE_INFO = 0x41

logger = get_logger(__name__)

_ADDRESS_SEPARATORS = re.compile(r"[:\-.\s]")


def _check_key(key: bytes) -> None:
    if not isinstance(key, (bytes, bytearray)) or len(key) != KEY_LENGTH:
        got = len(key) if isinstance(key, (bytes, bytearray)) else type(key).__name__
        raise EncryptionError(
            f"Invalid key length: expected {KEY_LENGTH} bytes, got {got}",
            EncryptionFailure.INVALID_KEY,
        )


def _check_address(address: bytes) -> None:
    if not isinstance(address, (bytes, bytearray)) or len(address) != ADDRESS_LENGTH:
        got = len(address) if isinstance(address, (bytes, bytearray)) else type(address).__name__
        raise EncryptionError(
            f"Invalid MAC address length: expected {ADDRESS_LENGTH} bytes, got {got}",
            EncryptionFailure.INVALID_ADDRESS,
        )


def _check_counter(counter: int) -> None:
    if not isinstance(counter, int) or isinstance(counter, bool) or not 0 <= counter <= 0xFFFFFFFF:
        raise EncryptionError(
            f"Invalid counter: must be 32-bit unsigned integer (0-4294967295), got {counter}",
            EncryptionFailure.INVALID_COUNTER,
            {"counter": counter},
        )


def _check_mic(mic: bytes) -> None:
    if not isinstance(mic, (bytes, bytearray)) or len(mic) != MIC_LENGTH:
        got = len(mic) if isinstance(mic, (bytes, bytearray)) else type(mic).__name__
        raise EncryptionError(
            f"Invalid MIC length: expected {MIC_LENGTH} bytes, got {got}",
            EncryptionFailure.INVALID_MIC,
        )


def build_nonce(address: bytes, counter: int) -> bytes:
    _check_address(address)
    _check_counter(counter)
    return bytes(address) + BTHOME_UUID + bytes([ENCRYPTED_DEVICE_INFO]) + counter.to_bytes(COUNTER_LENGTH, "little")


def _cipher(key: bytes, nonce: bytes, length: int):
    return AES.new(bytes(key), AES.MODE_CCM, nonce=nonce, mac_len=MIC_LENGTH, msg_len=length, assoc_len=0)


def encrypt(
    plaintext: bytes,
    key: bytes,
    address: bytes,
    counter: int,
) -> Tuple[bytes, bytes]:
    """
    Encrypt a measurement stream.

    Args:
        plaintext: The object-id/value stream (without the device-info byte).
        key: 16-byte AES key.
        address: 6-byte device address in display order.
        counter: 32-bit replay counter.

    Returns:
        ``(ciphertext, mic)`` with a 4-byte MIC.

    Raises:
        EncryptionError: If the key, address or counter is invalid.
    """
    _check_key(key)
    nonce = build_nonce(address, counter)
    ciphertext, mic = _cipher(key, nonce, len(plaintext)).encrypt_and_digest(bytes(plaintext))
    return ciphertext, mic


def decrypt(
    ciphertext: bytes,
    mic: bytes,
    key: bytes,
    address: bytes,
    counter: int,
) -> bytes:
    """
    Decrypt and authenticate a measurement stream.

    Plaintext is only returned once the MIC has been verified.

    Raises:
        EncryptionError: If a parameter has the wrong size or range.
        AuthenticationError: If the MIC does not match (wrong key, address,
            counter, or tampered data).
    """
    _check_key(key)
    _check_mic(mic)
    nonce = build_nonce(address, counter)
    try:
        return _cipher(key, nonce, len(ciphertext)).decrypt_and_verify(bytes(ciphertext), bytes(mic))
    except ValueError as exc:
        logger.warning(
            "authentication_failed",
            extra={"details": {
                "counter": counter,
                "length": len(ciphertext),
                "ciphertext": bytes(ciphertext).hex(),
                "mic": bytes(mic).hex(),
            }},
        )
        raise AuthenticationError("AES-CCM decryption failed: MIC check failed", {"counter": counter}) from exc


def generate_key() -> bytes:
    return get_random_bytes(KEY_LENGTH)


def key_from_hex(hex_string: str) -> bytes:
    expected = KEY_LENGTH * 2
    cleaned = hex_string.strip()
    if len(cleaned) != expected:
        raise EncryptionError(
            f"Invalid hex key length: expected {expected} characters, got {len(cleaned)}",
            EncryptionFailure.INVALID_KEY,
        )
    try:
        return bytes.fromhex(cleaned)
    except ValueError:
        raise EncryptionError(f"Invalid hex string: {hex_string}", EncryptionFailure.INVALID_KEY) from None


def key_to_hex(key: bytes) -> str:
    return binascii.hexlify(bytes(key)).decode("ascii")


def address_from_string(address: str) -> bytes:
    """Parse ``"54:48:E6:8F:80:A5"`` (or bare hex) into 6 bytes in display order."""
    cleaned = _ADDRESS_SEPARATORS.sub("", address)
    try:
        raw = bytes.fromhex(cleaned)
    except ValueError:
        raise EncryptionError(f"Invalid MAC address: {address}", EncryptionFailure.INVALID_ADDRESS) from None
    _check_address(raw)
    return raw


__all__ = [
    "ADDRESS_LENGTH",
    "BTHOME_UUID",
    "ENCRYPTED_DEVICE_INFO",
    "KEY_LENGTH",
    "MIC_LENGTH",
    "address_from_string",
    "build_nonce",
    "decrypt",
    "encrypt",
    "generate_key",
    "key_from_hex",
    "key_to_hex",
]
