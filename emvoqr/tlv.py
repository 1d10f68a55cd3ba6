"""Utility helpers to build and parse EMV-style TLV payloads."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator

from .errors import err_invalid_tag, err_length_overflow, err_malformed_length, err_truncated_value

HEADER_SIZE = 4
MAX_VALUE_LENGTH = 99

logger = logging.getLogger("emvoqr.tlv")


def _is_two_digits(text: str) -> bool:
    return len(text) == 2 and text.isascii() and text.isdigit()


@dataclass(frozen=True)
class TLVItem:
    tag: str
    value: str

    @property
    def length(self) -> int:
        return len(self.value)

    def serialize(self) -> str:
        return encode_tlv(self.tag, self.value)


def encode_tlv(tag: str, value: str) -> str:
    """Serialize a single field as ``tag + 2-digit length + value``.

    Length is the character count of ``value``, not its encoded byte count.
    """

    if not _is_two_digits(tag):
        raise err_invalid_tag(tag)
    length = len(value)
    if length > MAX_VALUE_LENGTH:
        raise err_length_overflow(tag, length)
    return f"{tag}{length:02d}{value}"


def decode_one(payload: str, offset: int = 0) -> tuple[TLVItem, int]:
    """Read one TLV field starting at ``offset``.

    Returns the item and the offset just past its value.
    """

    tag = payload[offset : offset + 2]
    raw_length = payload[offset + 2 : offset + HEADER_SIZE]
    if len(raw_length) < 2:
        raise err_truncated_value(tag, HEADER_SIZE, len(payload) - offset, offset)
    if not _is_two_digits(raw_length):
        raise err_malformed_length(tag, raw_length, offset)
    length = int(raw_length)
    value_start = offset + HEADER_SIZE
    value_end = value_start + length
    if value_end > len(payload):
        raise err_truncated_value(tag, length, len(payload) - value_start, offset)
    return TLVItem(tag=tag, value=payload[value_start:value_end]), value_end


def iter_tlv(payload: str) -> Iterator[TLVItem]:
    """Yield TLV items until fewer than a header's worth of characters remain."""

    idx = 0
    total = len(payload)
    while total - idx >= HEADER_SIZE:
        item, idx = decode_one(payload, idx)
        yield item
    if idx != total:
        logger.debug("dropping trailing fragment", extra={"fragment": payload[idx:], "offset": idx})


def decode_sequence(payload: str) -> list[TLVItem]:
    """Parse a TLV payload string into its ordered items."""

    return list(iter_tlv(payload))


def build_tlv(items: Iterable[TLVItem]) -> str:
    """Serialize iterable of TLV items into EMV string."""

    return "".join(item.serialize() for item in items)


def parse_tlv(payload: str) -> dict[str, str]:
    """Parse a TLV payload into a tag -> value mapping, last occurrence wins."""

    return {item.tag: item.value for item in iter_tlv(payload)}
