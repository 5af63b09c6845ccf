"""Runtime settings for the Checkout domain, read from environment variables.

Amounts are integer minor currency units throughout; the currency code here
is what gets sent to the gateway and stamped on every order.
"""

import os
import re
from dataclasses import dataclass

# Order references are split on hyphens, so the prefix must not contain one.
REFERENCE_PREFIX_PATTERN = re.compile(r"[A-Za-z0-9_]+")


def validate_reference_prefix(prefix: str) -> str:
    if not isinstance(prefix, str) or REFERENCE_PREFIX_PATTERN.fullmatch(prefix) is None:
        raise ValueError(f"Invalid order reference prefix {prefix!r}: use only letters, digits and underscores")
    return prefix


@dataclass(frozen=True)
class BankAccount:
    """Account customers pay into for the bank-transfer method."""

    bank_name: str
    account_name: str
    account_number: str
    receipt_whatsapp: str


@dataclass(frozen=True)
class CheckoutSettings:
    gateway: str = "fake"
    paystack_secret_key: str = ""
    paystack_base_url: str = "https://api.paystack.co"
    callback_url: str = "http://localhost:8000/checkout/verify"
    currency: str = "NGN"
    reference_prefix: str = "mmart"
    gateway_timeout_seconds: float = 10.0
    verify_max_attempts: int = 3
    bank_account: BankAccount = BankAccount(
        bank_name="Monipoint Bank",
        account_name="M-Mart",
        account_number="2345635643",
        receipt_whatsapp="09033483394",
    )

    def __post_init__(self) -> None:
        validate_reference_prefix(self.reference_prefix)

    @classmethod
    def from_env(cls) -> "CheckoutSettings":
        defaults = cls()
        env = os.environ
        return cls(
            gateway=env.get("CHECKOUT_GATEWAY", defaults.gateway).lower(),
            paystack_secret_key=env.get("PAYSTACK_SECRET_KEY", defaults.paystack_secret_key),
            paystack_base_url=env.get("PAYSTACK_BASE_URL", defaults.paystack_base_url).rstrip("/"),
            callback_url=env.get("CHECKOUT_CALLBACK_URL", defaults.callback_url),
            currency=env.get("CHECKOUT_CURRENCY", defaults.currency).upper(),
            reference_prefix=env.get("CHECKOUT_REFERENCE_PREFIX", defaults.reference_prefix),
            gateway_timeout_seconds=float(env.get("GATEWAY_TIMEOUT_SECONDS", defaults.gateway_timeout_seconds)),
            verify_max_attempts=max(1, int(env.get("GATEWAY_VERIFY_MAX_ATTEMPTS", defaults.verify_max_attempts))),
            bank_account=BankAccount(
                bank_name=env.get("BANK_NAME", defaults.bank_account.bank_name),
                account_name=env.get("BANK_ACCOUNT_NAME", defaults.bank_account.account_name),
                account_number=env.get("BANK_ACCOUNT_NUMBER", defaults.bank_account.account_number),
                receipt_whatsapp=env.get("BANK_RECEIPT_WHATSAPP", defaults.bank_account.receipt_whatsapp),
            ),
        )


_current_settings: CheckoutSettings | None = None


def get_settings() -> CheckoutSettings:
    """Return the active settings, loading them from the environment once."""
    global _current_settings
    if _current_settings is None:
        _current_settings = CheckoutSettings.from_env()
    return _current_settings


def set_settings(settings: CheckoutSettings) -> None:
    """Override the active settings (useful for tests)."""
    global _current_settings
    _current_settings = settings


def reset_settings() -> None:
    """Drop cached settings so the next read goes back to the environment."""
    global _current_settings
    _current_settings = None
