"""Repository for the PaymentMethod aggregate — the payment settings store."""

from checkout.domain import checkout
from checkout.payment_method.payment_method import PaymentMethod


@checkout.repository(part_of=PaymentMethod)
class PaymentMethodRepository:
    def find_by_code(self, code: str) -> PaymentMethod | None:
        results = self._dao.query.filter(code=code).all()
        return results.items[0] if results.items else None

    def find_active(self) -> list[PaymentMethod]:
        methods = self._dao.query.filter(active=True).all().items
        return sorted(methods, key=lambda method: (method.position or 0, method.code))

    def find_all(self) -> list[PaymentMethod]:
        methods = self._dao.query.all().items
        return sorted(methods, key=lambda method: (method.position or 0, method.code))
