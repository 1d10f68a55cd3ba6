"""Merchant payment record and tag table."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping

from .config import Settings, settings as default_settings


class Tag(str, enum.Enum):
    PAYLOAD_FORMAT_INDICATOR = "00"
    POINT_OF_INITIATION_METHOD = "01"
    MERCHANT_ACCOUNT_INFO = "44"
    MERCHANT_CATEGORY_CODE = "52"
    TRANSACTION_CURRENCY = "53"
    COUNTRY_CODE = "58"
    MERCHANT_NAME = "59"
    MERCHANT_CITY = "60"
    CRC = "63"
    ADDITIONAL_DATA = "64"


TAG_DESCRIPTIONS: dict[str, str] = {
    Tag.PAYLOAD_FORMAT_INDICATOR.value: "Payload Format Indicator",
    Tag.POINT_OF_INITIATION_METHOD.value: "Point of Initiation Method",
    Tag.MERCHANT_ACCOUNT_INFO.value: "Merchant Account Info",
    Tag.MERCHANT_CATEGORY_CODE.value: "Merchant Category Code",
    Tag.TRANSACTION_CURRENCY.value: "Transaction Currency",
    Tag.COUNTRY_CODE.value: "Country Code",
    Tag.MERCHANT_NAME.value: "Merchant Name",
    Tag.MERCHANT_CITY.value: "Merchant City",
    Tag.CRC.value: "CRC",
    Tag.ADDITIONAL_DATA.value: "Additional Data Template",
}

SUBTAG_DESCRIPTIONS: dict[str, dict[str, str]] = {
    Tag.MERCHANT_ACCOUNT_INFO.value: {"00": "Merchant Identifier", "01": "Secondary Identifier"},
    Tag.ADDITIONAL_DATA.value: {"00": "Language", "01": "Description", "02": "Location"},
}

COMPOSITE_TAGS = frozenset({Tag.MERCHANT_ACCOUNT_INFO.value, Tag.ADDITIONAL_DATA.value})


@dataclass(frozen=True)
class MerchantAccountInfo:
    """Tag 44: ``00`` merchant identifier, ``01`` secondary identifier."""

    merchant_id: str = ""
    secondary_id: str = ""


@dataclass(frozen=True)
class AdditionalData:
    """Tag 64: ``00`` language/country, ``01`` description, ``02`` location."""

    language: str = ""
    description: str = ""
    location: str = ""


@dataclass(frozen=True)
class Record:
    """Structured merchant-presented payment payload.

    Instances are immutable; use :meth:`with_changes` to derive an edited copy.
    ``unknown_tags`` holds top-level tags a decoder did not recognise. The
    encoder never emits them.
    """

    payload_format_indicator: str = ""
    point_of_initiation_method: str = ""
    merchant_account_info: MerchantAccountInfo = field(default_factory=MerchantAccountInfo)
    merchant_category_code: str = ""
    transaction_currency: str = ""
    country_code: str = ""
    merchant_name: str = ""
    merchant_city: str = ""
    additional_data: AdditionalData = field(default_factory=AdditionalData)
    checksum: str = ""
    unknown_tags: Mapping[str, str] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "unknown_tags", MappingProxyType(dict(self.unknown_tags)))

    @property
    def merchant_id(self) -> str:
        return self.merchant_account_info.merchant_id

    def with_changes(self, **changes: Any) -> "Record":
        return replace(self, **changes)


def default_record(settings: Settings | None = None) -> Record:
    """Build the sample merchant record from configured defaults."""

    defaults = (settings or default_settings).defaults
    return Record(
        payload_format_indicator=defaults.payload_format_indicator,
        point_of_initiation_method=defaults.point_of_initiation_method,
        merchant_account_info=MerchantAccountInfo(
            merchant_id=defaults.merchant_id,
            secondary_id=defaults.secondary_id,
        ),
        merchant_category_code=defaults.merchant_category_code,
        transaction_currency=defaults.transaction_currency,
        country_code=defaults.country_code,
        merchant_name=defaults.merchant_name,
        merchant_city=defaults.merchant_city,
        additional_data=AdditionalData(
            language=defaults.language,
            description=defaults.description,
            location=defaults.location,
        ),
    )
