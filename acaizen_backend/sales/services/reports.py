# sales/services/reports.py

"""
SALES SUMMARY (PURE AGGREGATION)

Purpose:
- Aggregate a collection of SaleRecords into the numbers shown on the reports screen.
- No ORM access here: the view loads records, this module only filters and sums.

Filters (all optional, combined with AND):
- start_date / end_date   inclusive local dates
- payment_method          cash | card | pix ("all" or None disables)
- product_id              keep sales that contain at least one line of that product

Top products:
- Revenue is product price x quantity (add-ons are not attributed to products).
- Ranked by revenue, highest first; top 10.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from django.utils import timezone

from pos.services.cart import money
from sales.services.records import PaymentMethod, SaleRecord, coerce_payment_method

TOP_PRODUCTS_LIMIT = 10


@dataclass
class ProductSales:
    id: str
    name: str
    quantity: int = 0
    revenue: Decimal = Decimal("0.00")

    def to_payload(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "quantity": self.quantity,
            "revenue": f"{self.revenue:.2f}",
        }


@dataclass
class SalesSummary:
    total_sales: int = 0
    total_revenue: Decimal = Decimal("0.00")
    revenue_by_method: dict = field(default_factory=dict)
    sales_count_by_method: dict = field(default_factory=dict)
    items_sold: int = 0
    distinct_products: int = 0
    top_products: list = field(default_factory=list)

    @property
    def average_ticket(self) -> Decimal:
        if not self.total_sales:
            return Decimal("0.00")
        return money(self.total_revenue / self.total_sales)

    def to_payload(self) -> dict:
        return {
            "total_sales": self.total_sales,
            "total_revenue": f"{self.total_revenue:.2f}",
            "average_ticket": f"{self.average_ticket:.2f}",
            "revenue_by_method": {
                k: f"{v:.2f}" for k, v in self.revenue_by_method.items()
            },
            "sales_count_by_method": dict(self.sales_count_by_method),
            "items_sold": self.items_sold,
            "distinct_products": self.distinct_products,
            "top_products": [p.to_payload() for p in self.top_products],
        }


def _local_date(record: SaleRecord) -> date:
    dt = record.created_at_dt
    if timezone.is_aware(dt):
        dt = timezone.localtime(dt)
    return dt.date()


def filter_sales(
    records: Iterable[SaleRecord],
    *,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    payment_method: Optional[str] = None,
    product_id: Optional[str] = None,
) -> list[SaleRecord]:
    method = None if payment_method in (None, "", "all") else coerce_payment_method(payment_method)
    product_id = str(product_id) if product_id else None

    out = []
    for r in records:
        d = _local_date(r)
        if start_date and d < start_date:
            continue
        if end_date and d > end_date:
            continue
        if method and r.payment.method != method:
            continue
        if product_id and not any(i.product.id == product_id for i in r.items):
            continue
        out.append(r)
    return out


def summarize_sales(records: Iterable[SaleRecord], **filters) -> SalesSummary:
    sales = filter_sales(records, **filters)

    summary = SalesSummary(
        revenue_by_method={m: Decimal("0.00") for m in PaymentMethod.values},
        sales_count_by_method={m: 0 for m in PaymentMethod.values},
    )

    products: dict[str, ProductSales] = {}

    for sale in sales:
        method = sale.payment.method.value
        summary.total_sales += 1
        summary.total_revenue += sale.total
        summary.revenue_by_method[method] += sale.total
        summary.sales_count_by_method[method] += 1

        for item in sale.items:
            summary.items_sold += item.quantity
            row = products.get(item.product.id)
            if row is None:
                row = products[item.product.id] = ProductSales(
                    id=item.product.id, name=item.product.name
                )
            row.quantity += item.quantity
            row.revenue += money(item.product.price * item.quantity)

    summary.distinct_products = len(products)
    # stable sort keeps first-seen order for ties
    summary.top_products = sorted(
        products.values(), key=lambda p: p.revenue, reverse=True
    )[:TOP_PRODUCTS_LIMIT]

    return summary
