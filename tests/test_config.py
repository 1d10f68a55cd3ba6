"""Tests for settings and sample record defaults."""
from emvoqr.config import Settings, get_settings
from emvoqr.models import default_record


def test_defaults_describe_sample_merchant():
    record = default_record(Settings())
    assert record.payload_format_indicator == "01"
    assert record.point_of_initiation_method == "11"
    assert record.merchant_id == "com.konai.konacard"
    assert record.merchant_account_info.secondary_id == "410790020044601"
    assert record.merchant_category_code == "3001"
    assert record.transaction_currency == "410"
    assert record.country_code == "KR"
    assert record.merchant_name == "KONA"
    assert record.merchant_city == "KONA"
    assert record.additional_data.description == "테스트"
    assert record.checksum == ""


def test_defaults_can_be_overridden():
    settings = Settings(defaults={"merchant_name": "SHOP", "location": "Seoul"})
    record = default_record(settings)
    assert record.merchant_name == "SHOP"
    assert record.additional_data.location == "Seoul"
    assert record.merchant_city == "KONA"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("EMVOQR_VERIFY_CHECKSUM_ON_PARSE", "true")
    monkeypatch.setenv("EMVOQR_LOGGING__LEVEL", "DEBUG")
    monkeypatch.setenv("EMVOQR_DEFAULTS__MERCHANT_CITY", "BUSAN")
    settings = Settings()
    assert settings.verify_checksum_on_parse is True
    assert settings.logging.level == "DEBUG"
    assert settings.defaults.merchant_city == "BUSAN"


def test_get_settings_is_memoized():
    assert get_settings() is get_settings()
