"""Codec error definitions."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class CodecError(Exception):
    code: str
    message: str
    tag: str | None = None
    offset: int | None = None

    def __str__(self) -> str:  # noqa: D401 override
        return f"{self.code}: {self.message}"


class LengthOverflow(CodecError):
    """A value is longer than the two-digit length header allows."""


class InvalidTag(CodecError):
    """A tag is not two decimal digits."""


class MalformedLength(CodecError):
    """A length header is not two decimal digits."""


class TruncatedValue(CodecError):
    """The input ends before the declared value does."""


class ChecksumMismatch(CodecError):
    """The stored CRC differs from the recomputed one."""


def err_length_overflow(tag: str, length: int) -> LengthOverflow:
    return LengthOverflow(
        code="ERR_LENGTH_OVERFLOW",
        message=f"Value for tag {tag} is {length} characters, maximum is 99",
        tag=tag,
    )


def err_invalid_tag(tag: str) -> InvalidTag:
    return InvalidTag(code="ERR_INVALID_TAG", message=f"Tag {tag!r} is not two decimal digits", tag=tag)


def err_malformed_length(tag: str, raw: str, offset: int) -> MalformedLength:
    return MalformedLength(
        code="ERR_MALFORMED_LENGTH",
        message=f"Length header {raw!r} for tag {tag!r} is not two decimal digits",
        tag=tag,
        offset=offset,
    )


def err_truncated_value(tag: str, expected: int, available: int, offset: int) -> TruncatedValue:
    return TruncatedValue(
        code="ERR_TRUNCATED_VALUE",
        message=f"Tag {tag!r} declares {expected} characters but only {available} remain",
        tag=tag,
        offset=offset,
    )


def err_checksum_mismatch(stored: str, expected: str) -> ChecksumMismatch:
    return ChecksumMismatch(
        code="ERR_CHECKSUM_MISMATCH",
        message=f"Stored CRC {stored or '<missing>'} does not match computed {expected}",
        tag="63",
    )
