"""Payment gateway port (abstract interface).

The contract every hosted-redirect payment provider adapter implements.
Amounts cross this boundary as integer minor currency units.

Adapters raise ``GatewayUnavailable`` for transport failures, timeouts,
rate limiting and provider-side errors, and ``GatewayRejected`` when the
provider refuses the request.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

SUCCESS_STATUSES = frozenset({"success"})
FAILURE_STATUSES = frozenset({"failed", "abandoned", "reversed"})


@dataclass(frozen=True)
class InitializeResult:
    """A hosted payment session opened for one order reference."""

    redirect_url: str
    access_code: str
    reference: str


@dataclass(frozen=True)
class VerifyResult:
    """What the provider knows about a transaction."""

    provider_status: str
    amount_minor_units: int | None = None
    gateway_message: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.provider_status in SUCCESS_STATUSES

    @property
    def failed(self) -> bool:
        return self.provider_status in FAILURE_STATUSES


class PaymentGateway(ABC):
    """Abstract hosted-redirect payment gateway interface."""

    @abstractmethod
    def initialize(
        self,
        email: str,
        amount_minor_units: int,
        reference: str,
        callback_url: str,
    ) -> InitializeResult:
        """Open a hosted payment session. Must not be retried for the same reference."""
        ...

    @abstractmethod
    def verify(self, reference: str) -> VerifyResult:
        """Look up the transaction for ``reference``. Read-only and safe to retry."""
        ...
