"""Paystack payment gateway adapter.

Talks to the Paystack transaction API over HTTPS with httpx:

- ``POST /transaction/initialize`` opens the hosted payment page
- ``GET /transaction/verify/{reference}`` reports the transaction status

Amounts are sent and received in kobo (minor units). Every request is
bounded by the configured timeout. Verification is retried on transient
failures; initialization never is.
"""

import time

import httpx

from checkout.errors import GatewayRejected, GatewayUnavailable
from checkout.gateway.port import InitializeResult, PaymentGateway, VerifyResult
from checkout.utils.logging import get_logger

logger = get_logger(__name__)


class PaystackGateway(PaymentGateway):
    """Production Paystack adapter."""

    def __init__(
        self,
        secret_key: str,
        base_url: str = "https://api.paystack.co",
        currency: str = "NGN",
        timeout: float = 10.0,
        verify_max_attempts: int = 3,
        retry_delay: float = 0.5,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not secret_key:
            raise ValueError("Paystack secret key is required")
        self.currency = currency
        self.verify_max_attempts = max(1, verify_max_attempts)
        self.retry_delay = retry_delay
        self._client = httpx.Client(
            base_url=base_url,
            headers={
                "Authorization": f"Bearer {secret_key}",
                "Content-Type": "application/json",
            },
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    # -------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------
    def _request(self, method: str, path: str, action: str, **kwargs) -> dict:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            raise GatewayUnavailable(f"Paystack timed out during {action}") from exc
        except httpx.TransportError as exc:
            raise GatewayUnavailable(f"Could not reach Paystack during {action}: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            # A list, string or null carries no status flag and is treated as a refusal below.
            body = {}
        message = body.get("message") or f"HTTP {response.status_code}"

        if response.status_code == 429 or response.status_code >= 500:
            raise GatewayUnavailable(
                f"Paystack unavailable during {action}: {message}", status_code=response.status_code
            )
        if response.status_code >= 400:
            raise GatewayRejected(f"Paystack rejected {action}: {message}", status_code=response.status_code)
        if not body.get("status") or not isinstance(body.get("data"), dict):
            raise GatewayRejected(f"Paystack rejected {action}: {message}", status_code=response.status_code)

        return body["data"]

    # -------------------------------------------------------------------
    # PaymentGateway
    # -------------------------------------------------------------------
    def initialize(
        self,
        email: str,
        amount_minor_units: int,
        reference: str,
        callback_url: str,
    ) -> InitializeResult:
        data = self._request(
            "POST",
            "/transaction/initialize",
            "initialize",
            json={
                "email": email,
                "amount": amount_minor_units,
                "reference": reference,
                "callback_url": callback_url,
                "currency": self.currency,
            },
        )
        if not data.get("authorization_url"):
            raise GatewayRejected("Paystack returned no authorization URL", reference=reference)

        return InitializeResult(
            redirect_url=data["authorization_url"],
            access_code=data.get("access_code", ""),
            reference=data.get("reference", reference),
        )

    def verify(self, reference: str) -> VerifyResult:
        attempt = 1
        while True:
            try:
                data = self._request("GET", f"/transaction/verify/{reference}", "verify")
                break
            except GatewayUnavailable as exc:
                if attempt >= self.verify_max_attempts:
                    raise
                logger.warning(
                    "paystack_verify_retry",
                    reference=reference,
                    attempt=attempt,
                    error=exc.message,
                )
                time.sleep(self.retry_delay * attempt)
                attempt += 1

        amount = data.get("amount")
        if amount is not None:
            try:
                amount = int(amount)
            except (TypeError, ValueError):
                raise GatewayRejected(
                    f"Paystack reported an unreadable amount {amount!r}", reference=reference
                ) from None

        return VerifyResult(
            provider_status=str(data.get("status", "")).lower(),
            amount_minor_units=amount,
            gateway_message=data.get("gateway_response"),
        )
