from checkout.domain import checkout
from checkout.order.order import Order

ORDER_SORTS = {
    "newest": "-created_at",
    "oldest": "created_at",
    "total_desc": "-pricing_total",
    "total_asc": "pricing_total",
}


@checkout.repository(part_of=Order)
class OrderRepository:
    def find_by_reference(self, reference: str) -> Order | None:
        results = self._dao.query.filter(reference=reference).all()
        return results.items[0] if results.items else None

    def search(
        self,
        customer_id=None,
        status=None,
        payment_status=None,
        created_from=None,
        created_to=None,
        sort="newest",
        offset=0,
        limit=20,
    ):
        """One page of orders matching every filter given, as a ResultSet."""
        query = self._dao.query
        if customer_id:
            query = query.filter(customer_id=customer_id)
        if status:
            query = query.filter(status=status)
        if payment_status:
            query = query.filter(payment_status=payment_status)
        if created_from:
            query = query.filter(created_at__gte=created_from)
        if created_to:
            query = query.filter(created_at__lte=created_to)
        return query.order_by(ORDER_SORTS[sort]).offset(offset).limit(limit).all()
