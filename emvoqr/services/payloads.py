"""Payload generation and parsing services."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from ..config import Settings, settings as default_settings
from ..crc import crc16_ccitt
from ..emvo_codec import CRC_PREFIX, EncodedPayload, TLVNode, decode, describe, encode_payload, verify_checksum
from ..errors import CodecError, err_checksum_mismatch
from ..models import Record, default_record
from ..monitoring import observe_decode, observe_encode, record_codec_error

logger = logging.getLogger("emvoqr.service")


@dataclass(slots=True)
class GenerateResult:
    record: Record
    encoded: EncodedPayload
    tree: list[TLVNode]


@dataclass(slots=True)
class ParseResult:
    record: Record
    checksum_valid: bool


class PayloadService:
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or default_settings

    def generate(self, record: Record | None = None) -> GenerateResult:
        record = record if record is not None else default_record(self.settings)
        try:
            encoded = encode_payload(record)
        except CodecError as exc:
            self._report(exc, "encode")
            raise
        observe_encode(len(encoded.payload))
        logger.info(
            "payload encoded",
            extra={"merchant_id": record.merchant_id, "crc": encoded.crc, "payload_length": len(encoded.payload)},
        )
        return GenerateResult(record=record.with_changes(checksum=encoded.crc), encoded=encoded, tree=describe(record))

    def parse(self, payload: str, *, verify: bool | None = None) -> ParseResult:
        """Decode ``payload``; raise on CRC mismatch only when verification is on."""

        verify = self.settings.verify_checksum_on_parse if verify is None else verify
        try:
            record = decode(payload)
        except CodecError as exc:
            self._report(exc, "decode")
            raise
        checksum_valid = verify_checksum(payload)
        if verify and not checksum_valid:
            body = payload[:-4] if payload[-8:-4] == CRC_PREFIX else f"{payload}{CRC_PREFIX}"
            exc = err_checksum_mismatch(record.checksum, crc16_ccitt(body))
            self._report(exc, "decode")
            raise exc
        if record.unknown_tags:
            logger.info("payload carried unknown tags", extra={"tags": sorted(record.unknown_tags)})
        observe_decode(len(payload))
        logger.info(
            "payload decoded",
            extra={"merchant_id": record.merchant_id, "checksum_valid": checksum_valid},
        )
        return ParseResult(record=record, checksum_valid=checksum_valid)

    def _report(self, exc: CodecError, operation: str) -> None:
        logger.warning(
            "codec error",
            extra={"code": exc.code, "operation": operation, "tag": exc.tag, "offset": exc.offset},
        )
        record_codec_error(exc.code, operation)
