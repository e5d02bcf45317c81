"""
配置加载测试
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from startinfo.core.config import Settings, settings


def test_settings_are_loaded_from_environment():
    # conftest 在导入前设置了这些环境变量
    assert settings.AUTO_CREATE_TABLES is False
    assert settings.VERIFICATION_BASE_URL == "https://learn.example.com"


def test_environment_overrides_defaults(monkeypatch):
    monkeypatch.setenv("CERTIFICATE_TIMEZONE", "Asia/Shanghai")
    monkeypatch.setenv("DATABASE_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("MAX_ATTEMPTS", "10")

    overridden = Settings()

    assert overridden.CERTIFICATE_TIMEZONE == "Asia/Shanghai"
    assert overridden.DATABASE_TIMEOUT_SECONDS == 2.5
    assert overridden.MAX_ATTEMPTS == 10


def test_defaults():
    assert settings.API_V1_STR == "/api/v1"
    assert settings.CERTIFICATE_NUMBER_PREFIX == "CERT"
    assert settings.MAX_TIME_SPENT_SECONDS == 7 * 24 * 3600


@pytest.mark.parametrize("prefix", ["SI-CERT", "A" * 17, "", "cert no"])
def test_certificate_number_prefix_must_be_verifiable(monkeypatch, prefix):
    monkeypatch.setenv("CERTIFICATE_NUMBER_PREFIX", prefix)

    with pytest.raises(PydanticValidationError):
        Settings()


def test_alphanumeric_certificate_number_prefix_is_accepted(monkeypatch):
    monkeypatch.setenv("CERTIFICATE_NUMBER_PREFIX", "STARTINFO2024")

    assert Settings().CERTIFICATE_NUMBER_PREFIX == "STARTINFO2024"
