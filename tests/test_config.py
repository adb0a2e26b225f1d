import pytest

from image_proxy.config import DEFAULT_CACHE_MAX_AGE, DEFAULT_MAX_WIDTH, load_settings
from image_proxy.errors import ConfigError

from tests.conftest import SECRET


def test_missing_secret_is_config_error():
    with pytest.raises(ConfigError) as exc:
        load_settings()
    assert exc.value.status_code == 500
    assert "IMAGE_PROXY_SECRET" in exc.value.message


def test_short_secret_is_config_error(monkeypatch):
    monkeypatch.setenv("IMAGE_PROXY_SECRET", "x" * 31)
    with pytest.raises(ConfigError):
        load_settings()


def test_defaults(monkeypatch):
    monkeypatch.setenv("IMAGE_PROXY_SECRET", SECRET)
    settings = load_settings()
    assert settings.secret == SECRET
    assert settings.origin_allowlist is None
    assert settings.max_width == DEFAULT_MAX_WIDTH
    assert settings.cache_max_age == DEFAULT_CACHE_MAX_AGE
    assert settings.default_width == 1200
    assert settings.default_quality == 80


def test_allowed_origins_are_trimmed_and_lowercased(monkeypatch):
    monkeypatch.setenv("IMAGE_PROXY_SECRET", SECRET)
    monkeypatch.setenv("IMAGE_PROXY_ALLOWED_ORIGINS", " Example.COM, ,cdn.other.org ,")
    assert load_settings().origin_allowlist == ["example.com", "cdn.other.org"]


def test_blank_allowed_origins_means_unrestricted(monkeypatch):
    monkeypatch.setenv("IMAGE_PROXY_SECRET", SECRET)
    monkeypatch.setenv("IMAGE_PROXY_ALLOWED_ORIGINS", "   ")
    assert load_settings().origin_allowlist is None


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2048", 2048),
        ("100000", 8192),
        ("-5", 1),
        ("0", DEFAULT_MAX_WIDTH),
        ("wide", DEFAULT_MAX_WIDTH),
        ("", DEFAULT_MAX_WIDTH),
    ],
)
def test_max_width_is_clamped(monkeypatch, raw, expected):
    monkeypatch.setenv("IMAGE_PROXY_SECRET", SECRET)
    monkeypatch.setenv("IMAGE_PROXY_MAX_WIDTH", raw)
    assert load_settings().max_width == expected


@pytest.mark.parametrize(
    "raw, expected",
    [("3600", 3600), ("-1", 0), ("soon", DEFAULT_CACHE_MAX_AGE)],
)
def test_cache_max_age(monkeypatch, raw, expected):
    monkeypatch.setenv("IMAGE_PROXY_SECRET", SECRET)
    monkeypatch.setenv("IMAGE_PROXY_CACHE_MAX_AGE", raw)
    assert load_settings().cache_max_age == expected


def test_default_width_never_exceeds_max_width(monkeypatch):
    monkeypatch.setenv("IMAGE_PROXY_SECRET", SECRET)
    monkeypatch.setenv("IMAGE_PROXY_MAX_WIDTH", "800")
    assert load_settings().default_width == 800


def test_settings_are_resolved_fresh_each_call(monkeypatch):
    monkeypatch.setenv("IMAGE_PROXY_SECRET", SECRET)
    monkeypatch.setenv("IMAGE_PROXY_MAX_WIDTH", "500")
    assert load_settings().max_width == 500
    monkeypatch.setenv("IMAGE_PROXY_MAX_WIDTH", "600")
    assert load_settings().max_width == 600
