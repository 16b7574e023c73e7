# sales/tests/test_catalog_store.py

from __future__ import annotations

import uuid
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone

from pos.services.cart import CartAggregator, ProductSnapshot
from pos.services.exceptions import InvalidInputError, PersistenceError
from products.models import Addon, Category, Product
from sales.models import Sale
from sales.services.catalog_store import DjangoCatalogStore
from sales.services.records import PaymentDetails, SaleRecord

User = get_user_model()


class DjangoCatalogStoreTests(TestCase):
    """
    GUARANTEES:
    - Catalog reads return only active rows
    - Sales round-trip through the database unchanged
    - Stock decrement is floored at zero
    - Failures surface as PersistenceError
    """

    def setUp(self):
        self.store = DjangoCatalogStore()
        self.category = Category.objects.create(name="Açaí")
        self.product = Product.objects.create(
            name="Açaí 500ml", price=Decimal("22.90"), stock=5, category=self.category
        )
        Product.objects.create(name="Old cup", price=Decimal("1.00"), is_active=False)
        Addon.objects.create(name="Granola", price=Decimal("2.00"))
        self.cashier = User.objects.create_user(email="c@acaizen.test", password="x12345678")

    def _record(self, **overrides) -> SaleRecord:
        cart = CartAggregator()
        cart.add_to_cart(ProductSnapshot.from_model(self.product), 2)
        data = {
            "id": str(uuid.uuid4()),
            "items": cart.snapshot_items(),
            "total": cart.cart_total(),
            "payment": PaymentDetails(method="cash", amount="50.00", change="4.20"),
            "created_at": timezone.now().isoformat(),
            "customer_name": "Bia",
            "cashier_id": str(self.cashier.id),
        }
        data.update(overrides)
        return SaleRecord(**data)

    def test_catalog_reads(self):
        products = self.store.get_products()
        self.assertEqual([p.name for p in products], ["Açaí 500ml"])
        self.assertEqual(products[0].stock, 5)
        self.assertEqual(products[0].snapshot().price, Decimal("22.90"))

        self.assertEqual([c.name for c in self.store.get_categories()], ["Açaí"])
        self.assertEqual([a.name for a in self.store.get_addons()], ["Granola"])

    def test_create_and_read_back_sale(self):
        record = self._record()

        stored = self.store.create_sale(record)

        self.assertEqual(stored.id, record.id)
        self.assertEqual(stored.items, record.items)
        self.assertEqual(stored.total, Decimal("45.80"))
        self.assertEqual(stored.payment, record.payment)
        self.assertEqual(self.store.get_sale_by_id(record.id), stored)

    def test_duplicate_sale_id_is_persistence_error(self):
        record = self._record()
        self.store.create_sale(record)

        with self.assertRaises(PersistenceError):
            self.store.create_sale(record)
        self.assertEqual(Sale.objects.count(), 1)

    def test_unknown_sale_is_none(self):
        self.assertIsNone(self.store.get_sale_by_id(uuid.uuid4()))
        self.assertIsNone(self.store.get_sale_by_id("not-a-uuid"))

    def test_malformed_sale_row_is_persistence_error(self):
        record = self._record()
        self.store.create_sale(record)
        Sale.objects.filter(pk=record.id).update(items=[{"quantity": 1}])

        with self.assertRaises(PersistenceError):
            self.store.get_sale_by_id(record.id)

    def test_decrement_is_floored_at_zero(self):
        self.assertEqual(self.store.decrement_product_stock(self.product.id, 2), 3)
        self.assertEqual(self.store.decrement_product_stock(self.product.id, 10), 0)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 0)

    def test_decrement_unknown_product(self):
        with self.assertRaises(PersistenceError):
            self.store.decrement_product_stock(uuid.uuid4(), 1)
        with self.assertRaises(PersistenceError):
            self.store.decrement_product_stock("nope", 1)

    def test_update_product_stock(self):
        updated = self.store.update_product_stock(self.product.id, 42)
        self.assertEqual(updated.stock, 42)

        with self.assertRaises(InvalidInputError):
            self.store.update_product_stock(self.product.id, -1)
        with self.assertRaises(PersistenceError):
            self.store.update_product_stock(uuid.uuid4(), 1)


class SaleImmutabilityTests(TestCase):
    def setUp(self):
        product = Product.objects.create(name="Açaí 300ml", price=Decimal("14.90"), stock=3)
        cart = CartAggregator()
        cart.add_to_cart(ProductSnapshot.from_model(product), 1)
        self.record = DjangoCatalogStore().create_sale(
            SaleRecord(
                id=str(uuid.uuid4()),
                items=cart.snapshot_items(),
                total=cart.cart_total(),
                payment=PaymentDetails(method="pix", amount="14.90"),
                created_at=timezone.now().isoformat(),
            )
        )

    def test_sale_cannot_be_updated(self):
        sale = Sale.objects.get(pk=self.record.id)
        sale.total_amount = Decimal("1.00")

        with self.assertRaises(ValueError):
            sale.save()

        sale.refresh_from_db()
        self.assertEqual(sale.total_amount, Decimal("14.90"))

    def test_sale_cannot_be_deleted(self):
        sale = Sale.objects.get(pk=self.record.id)

        with self.assertRaises(ValueError):
            sale.delete()
        self.assertTrue(Sale.objects.filter(pk=self.record.id).exists())

    def test_record_round_trip(self):
        sale = Sale.objects.get(pk=self.record.id)
        record = sale.to_record()

        self.assertEqual(record.payment.method.value, "pix")
        self.assertIsNone(record.payment.change)
        self.assertIsNone(record.customer_name)
        self.assertIsNone(record.cashier_id)
