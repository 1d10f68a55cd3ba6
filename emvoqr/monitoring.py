"""Monitoring helpers and Prometheus metrics exporters."""
from __future__ import annotations

from typing import Final

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

_PAYLOADS_ENCODED_TOTAL: Final = Counter(
    "emvoqr_payloads_encoded_total",
    "Total payloads encoded",
)
_PAYLOADS_DECODED_TOTAL: Final = Counter(
    "emvoqr_payloads_decoded_total",
    "Total payloads decoded",
)
_PAYLOAD_LENGTH: Final = Histogram(
    "emvoqr_payload_length_chars",
    "Character length of encoded and decoded payloads",
    labelnames=("operation",),
    buckets=(32, 64, 128, 192, 256, 384, 512),
)
_CODEC_ERRORS_TOTAL: Final = Counter(
    "emvoqr_codec_errors_total",
    "Codec errors by code",
    labelnames=("code", "operation"),
)


def observe_encode(payload_length: int) -> None:
    _PAYLOADS_ENCODED_TOTAL.inc()
    _PAYLOAD_LENGTH.labels(operation="encode").observe(payload_length)


def observe_decode(payload_length: int) -> None:
    _PAYLOADS_DECODED_TOTAL.inc()
    _PAYLOAD_LENGTH.labels(operation="decode").observe(payload_length)


def record_codec_error(code: str, operation: str) -> None:
    _CODEC_ERRORS_TOTAL.labels(code=code, operation=operation).inc()


def metrics_payload() -> tuple[bytes, str]:
    """Return Prometheus exposition payload and content type."""

    return generate_latest(), CONTENT_TYPE_LATEST
