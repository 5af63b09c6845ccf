"""Inputs the HTTP layer hands to the checkout services."""

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class CustomerInfo:
    email: str
    name: str | None = None
    phone: str | None = None

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class DeliveryDetails:
    """Opaque delivery choice, stored on the order as given."""

    address_ref: str | None = None
    method: str | None = None
