"""Configurable fake payment gateway for development and testing.

Simulates a hosted-redirect provider without any external calls. It can be
configured at runtime to approve, decline, leave transactions in progress
or be unreachable, and it records every call it receives.
"""

from uuid import uuid4

from checkout.errors import GatewayRejected, GatewayUnavailable
from checkout.gateway.port import InitializeResult, PaymentGateway, VerifyResult

_FAILURE_MODES = {None, "unavailable", "rejected"}


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self, checkout_url: str = "https://checkout.fake-gateway.test") -> None:
        self.checkout_url = checkout_url.rstrip("/")
        self.verify_status: str = "success"
        self.gateway_message: str = "Approved"
        self.initialize_failure: str | None = None
        self.verify_failure: str | None = None
        self.amount_overrides: dict[str, int] = {}
        self.calls: list[dict] = []
        self._initialized: dict[str, int] = {}

    def configure(
        self,
        verify_status: str = "success",
        gateway_message: str = "Approved",
        initialize_failure: str | None = None,
        verify_failure: str | None = None,
    ) -> None:
        """Configure gateway behavior at runtime.

        ``initialize_failure`` and ``verify_failure`` accept ``"unavailable"``
        or ``"rejected"`` to make the corresponding call raise.
        """
        if initialize_failure not in _FAILURE_MODES or verify_failure not in _FAILURE_MODES:
            raise ValueError("Failure mode must be None, 'unavailable' or 'rejected'")
        self.verify_status = verify_status
        self.gateway_message = gateway_message
        self.initialize_failure = initialize_failure
        self.verify_failure = verify_failure

    def report_amount(self, reference: str, amount_minor_units: int) -> None:
        """Make ``verify`` report a different amount than was initialized."""
        self.amount_overrides[reference] = amount_minor_units

    def calls_to(self, method: str) -> list[dict]:
        return [call for call in self.calls if call["method"] == method]

    def _fail(self, mode: str, action: str):
        if mode == "unavailable":
            raise GatewayUnavailable(f"Payment gateway unavailable during {action}")
        raise GatewayRejected(f"Payment gateway rejected {action}")

    def initialize(
        self,
        email: str,
        amount_minor_units: int,
        reference: str,
        callback_url: str,
    ) -> InitializeResult:
        self.calls.append(
            {
                "method": "initialize",
                "email": email,
                "amount_minor_units": amount_minor_units,
                "reference": reference,
                "callback_url": callback_url,
            }
        )
        if self.initialize_failure:
            self._fail(self.initialize_failure, "initialize")

        access_code = f"fake_ac_{uuid4().hex[:12]}"
        self._initialized[reference] = amount_minor_units
        return InitializeResult(
            redirect_url=f"{self.checkout_url}/{access_code}",
            access_code=access_code,
            reference=reference,
        )

    def verify(self, reference: str) -> VerifyResult:
        self.calls.append({"method": "verify", "reference": reference})
        if self.verify_failure:
            self._fail(self.verify_failure, "verify")

        if reference not in self._initialized and reference not in self.amount_overrides:
            raise GatewayRejected(f"Transaction reference not found: {reference}", reference=reference)

        return VerifyResult(
            provider_status=self.verify_status,
            amount_minor_units=self.amount_overrides.get(reference, self._initialized.get(reference)),
            gateway_message=self.gateway_message,
        )
