"""Tests for environment driven settings."""

from iEnhance.config import EnhanceSettings


def test_defaults():
    settings = EnhanceSettings.from_env({})
    assert settings == EnhanceSettings()
    assert settings.background_enabled
    assert settings.timeout == 30.0
    assert settings.quality == 95
    assert settings.thumbnail_quality == 80
    assert settings.start_method == "spawn"
    assert settings.log_level == "INFO"


def test_environment_overrides():
    settings = EnhanceSettings.from_env(
        {
            "IENHANCE_DISABLE_BACKGROUND": "TRUE",
            "IENHANCE_TIMEOUT_SECONDS": "2.5",
            "IENHANCE_QUALITY": "90",
            "IENHANCE_THUMBNAIL_QUALITY": "70",
            "IENHANCE_START_METHOD": "forkserver",
            "IENHANCE_LOG_LEVEL": "debug",
        }
    )
    assert not settings.background_enabled
    assert settings.timeout == 2.5
    assert settings.quality == 90
    assert settings.thumbnail_quality == 70
    assert settings.start_method == "forkserver"
    assert settings.log_level == "DEBUG"


def test_invalid_values_fall_back_to_defaults(caplog):
    settings = EnhanceSettings.from_env(
        {
            "IENHANCE_DISABLE_BACKGROUND": "nope",
            "IENHANCE_TIMEOUT_SECONDS": "soon",
            "IENHANCE_QUALITY": "150",
            "IENHANCE_THUMBNAIL_QUALITY": "x",
            "IENHANCE_LOG_LEVEL": "chatty",
        }
    )
    assert settings == EnhanceSettings()
    assert "IENHANCE_TIMEOUT_SECONDS" in caplog.text
    assert "IENHANCE_LOG_LEVEL" in caplog.text
