"""Typed results returned by the checkout services to the HTTP layer."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from urllib.parse import quote

from checkout.order.order import Order
from checkout.settings import BankAccount

CURRENCY_SYMBOLS = {"NGN": "₦", "USD": "$", "GBP": "£", "EUR": "€"}


def format_amount(amount_minor_units: int, currency: str) -> str:
    """Human-readable amount, e.g. ``₦10,150.00``."""
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    return f"{symbol}{Decimal(amount_minor_units) / 100:,.2f}"


def international_number(local_number: str, country_code: str = "234") -> str:
    """Turn a local number like ``09033483394`` into ``2349033483394``."""
    digits = "".join(ch for ch in local_number if ch.isdigit())
    if digits.startswith("0"):
        return f"{country_code}{digits[1:]}"
    return digits


class NextAction(Enum):
    REDIRECT = "redirect"
    BANK_TRANSFER = "bank_transfer"
    CONFIRMED = "confirmed"


class VerificationOutcome(Enum):
    VERIFIED = "verified"
    FAILED = "failed"
    PENDING = "pending"
    ALREADY_FINAL = "already_final"


@dataclass(frozen=True)
class BankTransferInstructions:
    bank_name: str
    account_name: str
    account_number: str
    amount: int
    currency: str
    reference: str
    whatsapp_number: str
    whatsapp_link: str

    @classmethod
    def for_order(cls, order: Order, account: BankAccount) -> "BankTransferInstructions":
        customer = order.customer
        receipt_message = (
            f"Hello {account.account_name}! I've made a bank transfer for my order.\n\n"
            f"Order ID: {order.reference}\n"
            f"Amount: {format_amount(order.pricing.total, order.pricing.currency)}\n"
            f"Name: {customer.name or ''}\n"
            f"Phone: {customer.phone or ''}\n\n"
            "I'm attaching my payment receipt."
        )
        return cls(
            bank_name=account.bank_name,
            account_name=account.account_name,
            account_number=account.account_number,
            amount=order.pricing.total,
            currency=order.pricing.currency,
            reference=order.reference,
            whatsapp_number=account.receipt_whatsapp,
            whatsapp_link=(
                f"https://wa.me/{international_number(account.receipt_whatsapp)}?text={quote(receipt_message)}"
            ),
        )


@dataclass(frozen=True)
class CheckoutResult:
    """What the customer should see or do after placing an order."""

    order: Order
    next_action: NextAction
    message: str
    redirect_url: str | None = None
    access_code: str | None = None
    bank_transfer: BankTransferInstructions | None = None


@dataclass(frozen=True)
class VerificationResult:
    """The order after a gateway return, and what the verification did to it."""

    order: Order
    outcome: VerificationOutcome
    message: str
