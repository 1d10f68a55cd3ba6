"""Tests for the EMVO record codec."""
from concurrent.futures import ThreadPoolExecutor
from dataclasses import FrozenInstanceError

import pytest

from emvoqr.config import Settings
from emvoqr.crc import crc16_ccitt
from emvoqr.emvo_codec import decode, describe, encode, encode_payload, parse_tree, verify_checksum
from emvoqr.errors import LengthOverflow, MalformedLength, TruncatedValue
from emvoqr.models import AdditionalData, MerchantAccountInfo, Record, default_record

SAMPLE_BODY = (
    "000201"
    "010211"
    "4441"
    "0018com.konai.konacard"
    "0115410790020044601"
    "52043001"
    "5303410"
    "5802KR"
    "5904KONA"
    "6004KONA"
    "6420"
    "0002KO"
    "0103테스트"
    "0203경기도"
)


@pytest.fixture
def sample():
    return default_record(Settings())


def test_sample_payload_layout(sample):
    payload = encode(sample)
    assert payload.startswith("00020101021144")
    assert payload[: len(SAMPLE_BODY)] == SAMPLE_BODY
    assert payload[len(SAMPLE_BODY) : len(SAMPLE_BODY) + 4] == "6304"
    assert len(payload) == len(SAMPLE_BODY) + 8


def test_merchant_account_composite(sample):
    tree = describe(sample)
    account = next(node for node in tree if node.tag == "44")
    assert account.value == "0018com.konai.konacard0115410790020044601"
    assert [(sub.tag, sub.length) for sub in account.sub_tags] == [("00", 18), ("01", 15)]


def test_crc_covers_body_and_prefix(sample):
    encoded = encode_payload(sample)
    assert encoded.crc == crc16_ccitt(SAMPLE_BODY + "6304")
    assert encoded.payload.endswith("6304" + encoded.crc)
    assert verify_checksum(encoded.payload)


def test_encode_is_deterministic(sample):
    assert encode(sample) == encode(sample)


def test_encode_ignores_stored_checksum(sample):
    assert encode(sample.with_changes(checksum="0000")) == encode(sample)


def test_encode_ignores_unknown_tags(sample):
    assert encode(sample.with_changes(unknown_tags={"99": "abc"})) == encode(sample)


def test_round_trip(sample):
    payload = encode(sample)
    decoded = decode(payload)
    assert encode(decoded) == payload
    assert decoded == sample.with_changes(checksum=payload[-4:])


def test_round_trip_of_empty_record():
    payload = encode(Record())
    assert payload.startswith("000001004408000001005200")
    assert encode(decode(payload)) == payload


def test_decode_extracts_merchant_id():
    payload = "000201010211" "4441" "0018com.konai.konacard0115410790020044601" "5802KR"
    record = decode(payload)
    assert record.merchant_id == "com.konai.konacard"
    assert record.merchant_account_info.secondary_id == "410790020044601"
    assert record.point_of_initiation_method == "11"
    assert record.country_code == "KR"


def test_decode_missing_fields_default_to_empty():
    record = decode("5904KONA")
    assert record.merchant_name == "KONA"
    assert record.payload_format_indicator == ""
    assert record.merchant_account_info == MerchantAccountInfo()
    assert record.additional_data == AdditionalData()
    assert record.checksum == ""


def test_decode_missing_sub_tags_default_to_empty():
    record = decode("64060002KO")
    assert record.additional_data == AdditionalData(language="KO", description="", location="")


def test_decode_stores_checksum_without_verifying():
    record = decode("5904KONA6304ABCD")
    assert record.checksum == "ABCD"
    assert not verify_checksum("5904KONA6304ABCD")


def test_unknown_tag_does_not_disturb_following_tags():
    record = decode("000201" "9903abc" "5904KONA" "6004CITY")
    assert record.payload_format_indicator == "01"
    assert record.merchant_name == "KONA"
    assert record.merchant_city == "CITY"
    assert dict(record.unknown_tags) == {"99": "abc"}


def test_duplicate_tags_last_write_wins():
    assert decode("5904KONA5903ABC").merchant_name == "ABC"


def test_trailing_fragment_is_ignored():
    assert decode("5904KONA63").merchant_name == "KONA"


def test_decode_malformed_length_fails():
    with pytest.raises(MalformedLength):
        decode("00020159XXKONA")


def test_decode_truncated_value_fails():
    with pytest.raises(TruncatedValue):
        decode("0002015910KONA")


def test_decode_malformed_composite_fails():
    with pytest.raises(MalformedLength):
        decode("4404ABCD")


def test_field_of_100_characters_overflows(sample):
    with pytest.raises(LengthOverflow) as excinfo:
        encode(sample.with_changes(merchant_name="n" * 100))
    assert excinfo.value.tag == "59"


def test_field_of_99_characters_encodes(sample):
    payload = encode(sample.with_changes(merchant_city="c" * 99))
    assert "6099" + "c" * 99 in payload
    assert decode(payload).merchant_city == "c" * 99


def test_oversized_composite_overflows(sample):
    info = MerchantAccountInfo(merchant_id="m" * 80, secondary_id="410790020044601")
    with pytest.raises(LengthOverflow) as excinfo:
        encode(sample.with_changes(merchant_account_info=info))
    assert excinfo.value.tag == "44"


def test_verify_checksum_detects_tampering(sample):
    payload = encode(sample)
    assert verify_checksum(payload)
    assert not verify_checksum(payload.replace("5904KONA", "5904KONB"))
    assert not verify_checksum(payload[:-8])
    assert not verify_checksum("")


def test_describe_matches_encoded_order(sample):
    tree = describe(sample)
    assert [node.tag for node in tree] == ["00", "01", "44", "52", "53", "58", "59", "60", "64", "63"]
    additional = tree[8]
    assert [(sub.tag, sub.value) for sub in additional.sub_tags] == [("00", "KO"), ("01", "테스트"), ("02", "경기도")]
    assert tree[-1].value == encode(sample)[-4:]


def test_parse_tree_expands_composites(sample):
    tree = parse_tree(encode(sample))
    assert [node.tag for node in tree] == ["00", "01", "44", "52", "53", "58", "59", "60", "64", "63"]
    assert tree[2].sub_tags[0].value == "com.konai.konacard"
    assert tree[0].sub_tags == ()


def test_parse_tree_leaves_unparseable_composite_as_leaf():
    tree = parse_tree("4404ABCD5904KONA")
    assert tree[0].value == "ABCD"
    assert tree[0].sub_tags == ()
    assert tree[1].value == "KONA"


def test_record_is_immutable(sample):
    with pytest.raises(FrozenInstanceError):
        sample.merchant_name = "OTHER"
    edited = sample.with_changes(merchant_name="OTHER")
    assert sample.merchant_name == "KONA"
    assert edited.merchant_name == "OTHER"


def test_concurrent_encoding_is_consistent(sample):
    expected = encode(sample)
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: encode(sample), range(64)))
    assert set(results) == {expected}


def test_unknown_tags_cannot_be_changed_in_place():
    record = decode("5904KONA9903abc")
    with pytest.raises(TypeError):
        record.unknown_tags["99"] = "xyz"
    assert dict(record.unknown_tags) == {"99": "abc"}


def test_unknown_tags_are_copied_from_caller():
    source = {"99": "abc"}
    record = Record(unknown_tags=source)
    source["98"] = "late"
    assert dict(record.unknown_tags) == {"99": "abc"}
    assert dict(record.with_changes(merchant_name="X").unknown_tags) == {"99": "abc"}


def test_tree_nodes_are_named(sample):
    tree = describe(sample)
    assert tree[0].name == "Payload Format Indicator"
    assert tree[2].name == "Merchant Account Info"
    assert [sub.name for sub in tree[8].sub_tags] == ["Language", "Description", "Location"]
    assert tree[-1].name == "CRC"
    assert parse_tree("9903abc")[0].name is None


def test_lone_surrogate_is_hashed_as_replacement_character():
    payload = encode(Record(merchant_name="\ud800"))
    assert payload == encode(Record(merchant_name="\ud800"))
    assert payload[-4:] == encode(Record(merchant_name="\ufffd"))[-4:]
    assert verify_checksum(payload)
