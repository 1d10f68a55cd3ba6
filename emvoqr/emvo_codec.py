"""EMVO merchant payload encoder and decoder."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from .crc import crc16_ccitt
from .errors import CodecError
from .models import COMPOSITE_TAGS, SUBTAG_DESCRIPTIONS, TAG_DESCRIPTIONS, AdditionalData, MerchantAccountInfo, Record, Tag
from .tlv import TLVItem, build_tlv, decode_sequence, encode_tlv, parse_tlv

CRC_PREFIX = f"{Tag.CRC.value}04"

logger = logging.getLogger("emvoqr.codec")


@dataclass(frozen=True)
class EncodedPayload:
    payload: str
    crc: str


@dataclass(frozen=True)
class TLVNode:
    tag: str
    value: str
    sub_tags: tuple["TLVNode", ...] = field(default=())
    name: str | None = None

    @property
    def length(self) -> int:
        return len(self.value)


def _merchant_account_items(info: MerchantAccountInfo) -> Iterable[TLVItem]:
    yield TLVItem(tag="00", value=info.merchant_id)
    yield TLVItem(tag="01", value=info.secondary_id)


def _additional_data_items(data: AdditionalData) -> Iterable[TLVItem]:
    yield TLVItem(tag="00", value=data.language)
    yield TLVItem(tag="01", value=data.description)
    yield TLVItem(tag="02", value=data.location)


def _top_level_items(record: Record) -> list[TLVItem]:
    # Emission order is fixed and part of the wire contract.
    return [
        TLVItem(tag=Tag.PAYLOAD_FORMAT_INDICATOR.value, value=record.payload_format_indicator),
        TLVItem(tag=Tag.POINT_OF_INITIATION_METHOD.value, value=record.point_of_initiation_method),
        TLVItem(tag=Tag.MERCHANT_ACCOUNT_INFO.value, value=build_tlv(_merchant_account_items(record.merchant_account_info))),
        TLVItem(tag=Tag.MERCHANT_CATEGORY_CODE.value, value=record.merchant_category_code),
        TLVItem(tag=Tag.TRANSACTION_CURRENCY.value, value=record.transaction_currency),
        TLVItem(tag=Tag.COUNTRY_CODE.value, value=record.country_code),
        TLVItem(tag=Tag.MERCHANT_NAME.value, value=record.merchant_name),
        TLVItem(tag=Tag.MERCHANT_CITY.value, value=record.merchant_city),
        TLVItem(tag=Tag.ADDITIONAL_DATA.value, value=build_tlv(_additional_data_items(record.additional_data))),
    ]


def encode_payload(record: Record) -> EncodedPayload:
    """Serialize ``record`` and compute CRC16-CCITT over ``body + "6304"``."""

    body = build_tlv(_top_level_items(record))
    crc = crc16_ccitt(f"{body}{CRC_PREFIX}")
    return EncodedPayload(payload=f"{body}{encode_tlv(Tag.CRC.value, crc)}", crc=crc)


def encode(record: Record) -> str:
    """Return the EMVO payload string for ``record``.

    The stored ``record.checksum`` is ignored; a fresh CRC is always appended.
    """

    return encode_payload(record).payload


def decode(payload: str) -> Record:
    """Parse ``payload`` into a :class:`Record`.

    Unknown tags are kept in ``Record.unknown_tags``. The CRC field is stored
    as-is and not verified; see :func:`verify_checksum`.
    """

    fields: dict[str, object] = {}
    unknown: dict[str, str] = {}
    for item in decode_sequence(payload):
        tag, value = item.tag, item.value
        if tag == Tag.PAYLOAD_FORMAT_INDICATOR.value:
            fields["payload_format_indicator"] = value
        elif tag == Tag.POINT_OF_INITIATION_METHOD.value:
            fields["point_of_initiation_method"] = value
        elif tag == Tag.MERCHANT_ACCOUNT_INFO.value:
            sub = parse_tlv(value)
            fields["merchant_account_info"] = MerchantAccountInfo(
                merchant_id=sub.get("00", ""),
                secondary_id=sub.get("01", ""),
            )
        elif tag == Tag.MERCHANT_CATEGORY_CODE.value:
            fields["merchant_category_code"] = value
        elif tag == Tag.TRANSACTION_CURRENCY.value:
            fields["transaction_currency"] = value
        elif tag == Tag.COUNTRY_CODE.value:
            fields["country_code"] = value
        elif tag == Tag.MERCHANT_NAME.value:
            fields["merchant_name"] = value
        elif tag == Tag.MERCHANT_CITY.value:
            fields["merchant_city"] = value
        elif tag == Tag.ADDITIONAL_DATA.value:
            sub = parse_tlv(value)
            fields["additional_data"] = AdditionalData(
                language=sub.get("00", ""),
                description=sub.get("01", ""),
                location=sub.get("02", ""),
            )
        elif tag == Tag.CRC.value:
            fields["checksum"] = value
        else:
            logger.debug("skipping unknown tag", extra={"tag": tag, "length": item.length})
            unknown[tag] = value
    return Record(unknown_tags=unknown, **fields)


def verify_checksum(payload: str) -> bool:
    """Check that ``payload`` ends with a CRC field matching its contents."""

    if len(payload) < len(CRC_PREFIX) + 4 or payload[-8:-4] != CRC_PREFIX:
        return False
    return crc16_ccitt(payload[:-4]) == payload[-4:]


def describe(record: Record) -> list[TLVNode]:
    """Return the TLV tree ``encode(record)`` emits, composites expanded."""

    nodes: list[TLVNode] = []
    for item in _top_level_items(record):
        nodes.append(_node(item.tag, item.value))
    nodes.append(TLVNode(tag=Tag.CRC.value, value=encode_payload(record).crc, name=TAG_DESCRIPTIONS[Tag.CRC.value]))
    return nodes


def parse_tree(payload: str) -> list[TLVNode]:
    """Parse any TLV payload into nodes, expanding tags 44 and 64."""

    return [_node(item.tag, item.value) for item in decode_sequence(payload)]


def _node(tag: str, value: str) -> TLVNode:
    name = TAG_DESCRIPTIONS.get(tag)
    if tag not in COMPOSITE_TAGS:
        return TLVNode(tag=tag, value=value, name=name)
    try:
        children = decode_sequence(value)
    except CodecError:
        return TLVNode(tag=tag, value=value, name=name)
    sub_names = SUBTAG_DESCRIPTIONS[tag]
    sub_tags = tuple(TLVNode(tag=c.tag, value=c.value, name=sub_names.get(c.tag)) for c in children)
    return TLVNode(tag=tag, value=value, sub_tags=sub_tags, name=name)
