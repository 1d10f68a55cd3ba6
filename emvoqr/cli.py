"""Command line front-end for the EMVO payload codec."""
from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from pydantic import ValidationError

from .config import get_settings
from .emvo_codec import parse_tree, verify_checksum
from .errors import CodecError
from .logging_conf import configure_logging
from .models import Record, default_record
from .schemas import record_from_json, record_to_json, tree_to_json
from .services.payloads import PayloadService

# option dest -> (Record attribute, nested attribute)
_FIELD_OPTIONS: dict[str, tuple[str, str | None]] = {
    "payload_format_indicator": ("payload_format_indicator", None),
    "point_of_initiation_method": ("point_of_initiation_method", None),
    "merchant_id": ("merchant_account_info", "merchant_id"),
    "secondary_id": ("merchant_account_info", "secondary_id"),
    "merchant_category_code": ("merchant_category_code", None),
    "transaction_currency": ("transaction_currency", None),
    "country_code": ("country_code", None),
    "merchant_name": ("merchant_name", None),
    "merchant_city": ("merchant_city", None),
    "language": ("additional_data", "language"),
    "description": ("additional_data", "description"),
    "location": ("additional_data", "location"),
}


def _read_text(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _apply_overrides(record: Record, args: argparse.Namespace) -> Record:
    for dest, (attr, nested) in _FIELD_OPTIONS.items():
        value = getattr(args, dest)
        if value is None:
            continue
        if nested is None:
            record = record.with_changes(**{attr: value})
        else:
            record = record.with_changes(**{attr: replace(getattr(record, attr), **{nested: value})})
    return record


def cmd_encode(args: argparse.Namespace) -> int:
    service = PayloadService(get_settings())
    record = record_from_json(_read_text(args.from_json)) if args.from_json else default_record(service.settings)
    result = service.generate(_apply_overrides(record, args))
    if args.tree:
        print(tree_to_json(result.tree))
    else:
        print(result.encoded.payload)
    return 0


def cmd_decode(args: argparse.Namespace) -> int:
    service = PayloadService(get_settings())
    result = service.parse(args.payload.strip(), verify=True if args.verify else None)
    print(record_to_json(result.record))
    if not result.checksum_valid:
        print("[WARN] checksum does not match payload", file=sys.stderr)
    return 0


def cmd_tree(args: argparse.Namespace) -> int:
    print(tree_to_json(parse_tree(args.payload.strip())))
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    ok = verify_checksum(args.payload.strip())
    print("OK" if ok else "MISMATCH")
    return 0 if ok else 1


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="emvoqr",
        description="Encode and decode EMVO merchant-presented QR payloads.",
    )
    sub = p.add_subparsers(dest="command", required=True)

    sp = sub.add_parser("encode", help="Encode a record (configured defaults unless overridden)")
    sp.add_argument("--from-json", metavar="PATH", help="Read the record as JSON from PATH ('-' for stdin)")
    sp.add_argument("--tree", action="store_true", help="Print the TLV tree as JSON instead of the payload")
    for dest in _FIELD_OPTIONS:
        sp.add_argument(f"--{dest.replace('_', '-')}", dest=dest, default=None)
    sp.set_defaults(func=cmd_encode)

    sp = sub.add_parser("decode", help="Decode a payload into a record (JSON)")
    sp.add_argument("payload")
    sp.add_argument("--verify", action="store_true", help="Fail when the CRC does not match")
    sp.set_defaults(func=cmd_decode)

    sp = sub.add_parser("tree", help="Print the TLV tree of a payload as JSON")
    sp.add_argument("payload")
    sp.set_defaults(func=cmd_tree)

    sp = sub.add_parser("verify", help="Check the trailing CRC of a payload")
    sp.add_argument("payload")
    sp.set_defaults(func=cmd_verify)

    return p


def main(argv: list[str] | None = None) -> int:
    configure_logging(get_settings())
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except CodecError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 2
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "<record>"
        print(f"[ERROR] ERR_BAD_RECORD: {location}: {first['msg']}", file=sys.stderr)
        return 2
    except (OSError, UnicodeDecodeError) as exc:
        print(f"[ERROR] cannot read record JSON: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
