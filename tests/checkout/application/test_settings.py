"""Tests for environment-driven settings."""

import pytest
from checkout.settings import CheckoutSettings, get_settings, reset_settings


class TestSettingsFromEnvironment:
    def test_defaults(self, monkeypatch):
        for name in ("CHECKOUT_GATEWAY", "CHECKOUT_CURRENCY", "CHECKOUT_REFERENCE_PREFIX", "BANK_NAME"):
            monkeypatch.delenv(name, raising=False)

        settings = CheckoutSettings.from_env()

        assert settings.gateway == "fake"
        assert settings.currency == "NGN"
        assert settings.reference_prefix == "mmart"
        assert settings.bank_account.bank_name == "Monipoint Bank"

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("CHECKOUT_GATEWAY", "Paystack")
        monkeypatch.setenv("PAYSTACK_BASE_URL", "https://paystack.test/")
        monkeypatch.setenv("CHECKOUT_CURRENCY", "ghs")
        monkeypatch.setenv("GATEWAY_TIMEOUT_SECONDS", "2.5")
        monkeypatch.setenv("GATEWAY_VERIFY_MAX_ATTEMPTS", "0")
        monkeypatch.setenv("BANK_ACCOUNT_NUMBER", "0123456789")

        settings = CheckoutSettings.from_env()

        assert settings.gateway == "paystack"
        assert settings.paystack_base_url == "https://paystack.test"
        assert settings.currency == "GHS"
        assert settings.gateway_timeout_seconds == 2.5
        assert settings.verify_max_attempts == 1
        assert settings.bank_account.account_number == "0123456789"

    def test_get_settings_reads_environment_after_reset(self, monkeypatch):
        monkeypatch.setenv("CHECKOUT_REFERENCE_PREFIX", "shop")
        reset_settings()
        assert get_settings().reference_prefix == "shop"

    def test_hyphenated_reference_prefix_is_rejected(self, monkeypatch):
        monkeypatch.setenv("CHECKOUT_REFERENCE_PREFIX", "m-mart")
        with pytest.raises(ValueError):
            CheckoutSettings.from_env()


class TestSettingsValidation:
    def test_reference_prefix_must_be_a_single_token(self):
        with pytest.raises(ValueError):
            CheckoutSettings(reference_prefix="m-mart")

    def test_empty_reference_prefix_is_rejected(self):
        with pytest.raises(ValueError):
            CheckoutSettings(reference_prefix="")
