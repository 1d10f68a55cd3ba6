"""Pydantic schemas for JSON export and import."""
from __future__ import annotations

from typing import Mapping, Sequence

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .emvo_codec import TLVNode
from .models import AdditionalData, MerchantAccountInfo, Record


class TLVNodeSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tag: str = Field(min_length=2, max_length=2)
    length: int = Field(ge=0, le=99)
    value: str
    name: str | None = None
    sub_tags: list[TLVNodeSchema] | None = Field(default=None, alias="subTags")

    @classmethod
    def from_node(cls, node: TLVNode) -> TLVNodeSchema:
        return cls(
            tag=node.tag,
            length=node.length,
            value=node.value,
            name=node.name,
            sub_tags=[cls.from_node(child) for child in node.sub_tags] if node.sub_tags else None,
        )


class MerchantAccountInfoSchema(BaseModel):
    merchant_id: str = ""
    secondary_id: str = ""


class AdditionalDataSchema(BaseModel):
    language: str = ""
    description: str = ""
    location: str = ""


class RecordSchema(BaseModel):
    payload_format_indicator: str = ""
    point_of_initiation_method: str = ""
    merchant_account_info: MerchantAccountInfoSchema = Field(default_factory=MerchantAccountInfoSchema)
    merchant_category_code: str = ""
    transaction_currency: str = ""
    country_code: str = ""
    merchant_name: str = ""
    merchant_city: str = ""
    additional_data: AdditionalDataSchema = Field(default_factory=AdditionalDataSchema)
    checksum: str = ""
    unknown_tags: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_record(cls, record: Record) -> RecordSchema:
        return cls(
            payload_format_indicator=record.payload_format_indicator,
            point_of_initiation_method=record.point_of_initiation_method,
            merchant_account_info=MerchantAccountInfoSchema(
                merchant_id=record.merchant_account_info.merchant_id,
                secondary_id=record.merchant_account_info.secondary_id,
            ),
            merchant_category_code=record.merchant_category_code,
            transaction_currency=record.transaction_currency,
            country_code=record.country_code,
            merchant_name=record.merchant_name,
            merchant_city=record.merchant_city,
            additional_data=AdditionalDataSchema(
                language=record.additional_data.language,
                description=record.additional_data.description,
                location=record.additional_data.location,
            ),
            checksum=record.checksum,
            unknown_tags=dict(record.unknown_tags),
        )

    def to_record(self) -> Record:
        return Record(
            payload_format_indicator=self.payload_format_indicator,
            point_of_initiation_method=self.point_of_initiation_method,
            merchant_account_info=MerchantAccountInfo(**self.merchant_account_info.model_dump()),
            merchant_category_code=self.merchant_category_code,
            transaction_currency=self.transaction_currency,
            country_code=self.country_code,
            merchant_name=self.merchant_name,
            merchant_city=self.merchant_city,
            additional_data=AdditionalData(**self.additional_data.model_dump()),
            checksum=self.checksum,
            unknown_tags=dict(self.unknown_tags),
        )


_TREE_ADAPTER = TypeAdapter(list[TLVNodeSchema])


def tree_to_json(nodes: Sequence[TLVNode], indent: int | None = 2) -> str:
    """Serialize a TLV tree with ``subTags`` keys, omitting empty children."""

    schemas = [TLVNodeSchema.from_node(node) for node in nodes]
    return _TREE_ADAPTER.dump_json(schemas, indent=indent, by_alias=True, exclude_none=True).decode("utf-8")


def record_to_json(record: Record, indent: int | None = 2) -> str:
    return RecordSchema.from_record(record).model_dump_json(indent=indent)


def record_from_json(data: str | bytes | Mapping[str, object]) -> Record:
    """Build a :class:`Record` from JSON text or an already-decoded mapping."""

    if isinstance(data, Mapping):
        return RecordSchema.model_validate(data).to_record()
    return RecordSchema.model_validate_json(data).to_record()
