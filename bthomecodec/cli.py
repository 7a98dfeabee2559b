import argparse
import json
import sys
from typing import Any, Optional, Sequence

from bthomecodec.config import CodecSettings, get_settings
from bthomecodec.crypto import address_from_string, generate_key, key_from_hex, key_to_hex
from bthomecodec.domain.measurement import ButtonEvent, Measurement
from bthomecodec.errors import BTHomeError
from bthomecodec.objects import find_by_type, get_registry
from bthomecodec.parsing.frames import encode
from bthomecodec.parsing.stream import decode


def _parse_value(type_name: str, text: str) -> Any:
    found = find_by_type(type_name)
    name = found[1].name if found else type_name
    if name == "raw":
        return bytes.fromhex(text)
    if name == "text":
        return text
    if name == "button" and text in {event.value for event in ButtonEvent}:
        return ButtonEvent(text)
    lowered = text.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    try:
        return int(text, 0)
    except ValueError:
        return float(text)


def parse_assignment(assignment: str) -> Measurement:
    type_name, sep, text = assignment.partition("=")
    if not sep or not type_name:
        raise argparse.ArgumentTypeError(f"expected TYPE=VALUE, got {assignment!r}")
    try:
        value = _parse_value(type_name, text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid value for {type_name}: {text!r}") from exc
    return Measurement(type=type_name, value=value)


def _key(args: argparse.Namespace, settings: CodecSettings) -> Optional[bytes]:
    value = args.key or settings.encryption_key
    return key_from_hex(value) if value else None


def _address(args: argparse.Namespace, settings: CodecSettings) -> Optional[bytes]:
    value = args.address or settings.device_address
    return address_from_string(value) if value else None


def cmd_decode(args: argparse.Namespace, settings: CodecSettings) -> int:
    data = bytes.fromhex(args.payload.replace(" ", ""))
    decoded = decode(data, key=_key(args, settings), address=_address(args, settings))
    print(json.dumps(decoded.as_dict(), indent=2, ensure_ascii=False))
    return 0


def cmd_encode(args: argparse.Namespace, settings: CodecSettings) -> int:
    key = _key(args, settings) if args.encrypt else None
    address = _address(args, settings) if args.encrypt else None
    counter = args.counter if args.counter is not None else settings.counter
    payload = encode(
        args.measurements,
        key=key,
        address=address,
        counter=counter if key is not None else None,
        trigger_based=args.trigger,
    )
    print(payload.hex())
    return 0


def cmd_keygen(args: argparse.Namespace, settings: CodecSettings) -> int:
    print(key_to_hex(generate_key()))
    return 0


def cmd_types(args: argparse.Namespace, settings: CodecSettings) -> int:
    registry = get_registry()
    for definition in registry:
        kind = "binary" if registry.is_binary_sensor(definition.name) else str(definition.width)
        print(f"0x{definition.id:02X}  {definition.name:<28} {definition.unit or '-':<8} {definition.factor:<6} {kind}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bthomecodec", description="Encode and decode BTHome v2 payloads.")
    sub = parser.add_subparsers(dest="command", required=True)

    dec = sub.add_parser("decode", help="Decode a hex payload and print it as JSON.")
    dec.add_argument("payload", help="Service data as hex, starting with the device-info byte.")
    dec.add_argument("--key", help="Encryption key as 32 hex characters.")
    dec.add_argument("--address", help="Device MAC address, e.g. 54:48:E6:8F:80:A5.")
    dec.set_defaults(func=cmd_decode)

    enc = sub.add_parser("encode", help="Encode TYPE=VALUE measurements and print the payload as hex.")
    enc.add_argument("measurements", nargs="+", type=parse_assignment, metavar="TYPE=VALUE")
    enc.add_argument("--encrypt", action="store_true", help="Encrypt the payload.")
    enc.add_argument("--key", help="Encryption key as 32 hex characters.")
    enc.add_argument("--address", help="Device MAC address, e.g. 54:48:E6:8F:80:A5.")
    enc.add_argument("--counter", type=int, help="Replay counter (0-4294967295).")
    enc.add_argument("--trigger", action="store_true", help="Set the trigger-based flag.")
    enc.set_defaults(func=cmd_encode)

    keygen = sub.add_parser("keygen", help="Print a random 16-byte key as hex.")
    keygen.set_defaults(func=cmd_keygen)

    types = sub.add_parser("types", help="List the registered object types.")
    types.set_defaults(func=cmd_types)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return args.func(args, get_settings())
    except BTHomeError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
