"""Payment-method catalog — read-only view over the payment settings store.

The checkout never falls back to a default method: an unknown or withdrawn
code is a hard stop.
"""

from protean.utils.globals import current_domain

from checkout.errors import PaymentMethodNotFound
from checkout.payment_method.fees import total_with_fee
from checkout.payment_method.payment_method import PaymentMethod


class PaymentMethodCatalog:
    def list_active(self) -> list[PaymentMethod]:
        """Return the methods currently offered, in display order."""
        return current_domain.repository_for(PaymentMethod).find_active()

    def get_by_code(self, code: str) -> PaymentMethod:
        """Return the active method with ``code`` or raise PaymentMethodNotFound."""
        if not code:
            raise PaymentMethodNotFound(code)

        method = current_domain.repository_for(PaymentMethod).find_by_code(code)
        if method is None or not method.active:
            raise PaymentMethodNotFound(code)
        return method

    def preview_fee(self, code: str, amount: int) -> dict:
        """Fee and total a customer would be charged for ``amount`` with ``code``."""
        method = self.get_by_code(code)
        fee, total = total_with_fee(method, amount)
        return {
            "method_code": method.code,
            "fee_type": method.fee_type,
            "fee_value": method.fee_value,
            "amount": amount,
            "fee": fee,
            "total": total,
        }
