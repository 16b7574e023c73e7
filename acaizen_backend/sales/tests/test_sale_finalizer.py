# sales/tests/test_sale_finalizer.py

"""
SALE FINALIZER TESTS (no database)

The finalizer is exercised against InMemoryCatalogStore with a fixed clock
and id factory so every run produces the same records.
"""

from __future__ import annotations

from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

from django.test import SimpleTestCase

from pos.services.cart import AddonSnapshot, CartAddon, CartAggregator, ProductSnapshot
from pos.services.exceptions import (
    EmptyCartError,
    InsufficientPaymentError,
    InvalidInputError,
    PersistenceError,
)
from sales.services.catalog_store import CatalogProduct, InMemoryCatalogStore
from sales.services.records import PaymentDetails, PaymentMethod
from sales.services.sale_finalizer import SaleFinalizer, complete_sale

FIXED_NOW = datetime(2024, 5, 10, 15, 30, tzinfo=dt_timezone.utc)


def fixed_clock():
    return FIXED_NOW


def fixed_id():
    return "11111111-2222-3333-4444-555555555555"


ACAI = CatalogProduct(id="p-acai", name="Açaí 300ml", price="14.90", stock=10)
AGUA = CatalogProduct(id="p-agua", name="Água", price="3.00", stock=1)


class FailingCreateStore(InMemoryCatalogStore):
    def create_sale(self, sale):
        raise PersistenceError("database unavailable")


class CrashingCreateStore(InMemoryCatalogStore):
    def create_sale(self, sale):
        raise ConnectionError("socket closed")


class FlakyStockStore(InMemoryCatalogStore):
    def decrement_product_stock(self, product_id, quantity):
        if product_id == AGUA.id:
            raise PersistenceError("stock service timeout")
        return super().decrement_product_stock(product_id, quantity)


def example_cart() -> CartAggregator:
    cart = CartAggregator()
    cart.add_to_cart(ACAI.snapshot(), 2)
    cart.add_to_cart(AGUA.snapshot(), 1, note="sem gás")
    return cart


class SaleFinalizerTests(SimpleTestCase):
    def setUp(self):
        self.store = InMemoryCatalogStore(products=[ACAI, AGUA])

    def finalizer(self, cart, store=None):
        return SaleFinalizer(
            cart, store or self.store, clock=fixed_clock, id_factory=fixed_id
        )

    def test_cash_sale_computes_change_and_clears_cart(self):
        cart = example_cart()

        result = self.finalizer(cart).complete_sale(
            PaymentDetails.from_input("cash", "40.00")
        )

        sale = result.sale
        self.assertEqual(sale.total, Decimal("32.80"))
        self.assertEqual(sale.payment.change, Decimal("7.20"))
        self.assertEqual(len(sale.items), 2)
        self.assertEqual(sale.id, fixed_id())
        self.assertEqual(sale.created_at, FIXED_NOW.isoformat())
        self.assertTrue(cart.is_empty)
        self.assertFalse(result.has_stock_warnings)
        self.assertIs(self.store.get_sale_by_id(sale.id), sale)

    def test_exact_cash_payment_has_no_change(self):
        result = self.finalizer(example_cart()).complete_sale(
            PaymentDetails(method=PaymentMethod.CASH, amount="32.80")
        )
        self.assertIsNone(result.sale.payment.change)

    def test_non_cash_overpayment_has_no_change(self):
        for method in ("card", "pix"):
            store = InMemoryCatalogStore(products=[ACAI, AGUA])
            result = self.finalizer(example_cart(), store).complete_sale(
                PaymentDetails.from_input(method, "50.00")
            )
            self.assertIsNone(result.sale.payment.change)
            self.assertEqual(result.sale.payment.amount, Decimal("50.00"))

    def test_empty_cart_fails_without_side_effects(self):
        with self.assertRaises(EmptyCartError):
            self.finalizer(CartAggregator()).complete_sale(
                PaymentDetails.from_input("cash", "10.00")
            )
        self.assertEqual(self.store.sales, {})

    def test_insufficient_payment_keeps_cart(self):
        cart = example_cart()

        with self.assertRaises(InsufficientPaymentError):
            self.finalizer(cart).complete_sale(PaymentDetails.from_input("cash", "10.00"))

        self.assertEqual(len(cart), 2)
        self.assertEqual(self.store.sales, {})
        self.assertEqual(self.store.products[ACAI.id].stock, 10)

    def test_persistence_failure_leaves_cart_and_stock_untouched(self):
        for store_cls in (FailingCreateStore, CrashingCreateStore):
            store = store_cls(products=[ACAI, AGUA])
            cart = example_cart()
            before = cart.items

            with self.assertRaises(PersistenceError):
                self.finalizer(cart, store).complete_sale(
                    PaymentDetails.from_input("cash", "40.00")
                )

            self.assertEqual(cart.items, before)
            self.assertEqual(store.products[ACAI.id].stock, 10)
            self.assertEqual(store.products[AGUA.id].stock, 1)

    def test_stock_decremented_per_product_and_floored(self):
        cart = CartAggregator()
        cart.add_to_cart(AGUA.snapshot(), 2)
        cart.add_to_cart(AGUA.snapshot(), 1, note="gelada")
        cart.add_to_cart(ACAI.snapshot(), 3)

        self.finalizer(cart).complete_sale(PaymentDetails.from_input("pix", "60.00"))

        self.assertEqual(self.store.products[AGUA.id].stock, 0)
        self.assertEqual(self.store.products[ACAI.id].stock, 7)

    def test_stock_failure_is_a_warning_not_an_error(self):
        store = FlakyStockStore(products=[ACAI, AGUA])
        cart = example_cart()

        with self.assertLogs("sales.services.sale_finalizer", level="WARNING"):
            result = self.finalizer(cart, store).complete_sale(
                PaymentDetails.from_input("card", "32.80")
            )

        self.assertIn(result.sale.id, store.sales)
        self.assertTrue(cart.is_empty)
        self.assertEqual(len(result.stock_warnings), 1)
        warning = result.stock_warnings[0]
        self.assertEqual(warning.product_id, AGUA.id)
        self.assertEqual(warning.quantity, 1)
        self.assertIn("timeout", warning.message)
        self.assertEqual(store.products[ACAI.id].stock, 8)

    def test_sale_items_are_independent_of_cart(self):
        cart = CartAggregator()
        cart.add_to_cart(
            ACAI.snapshot(), 1, addons=[CartAddon(AddonSnapshot(id="a1", name="Granola", price="2.00"), 1)]
        )

        result = self.finalizer(cart).complete_sale(PaymentDetails.from_input("cash", "20.00"))
        cart.add_to_cart(AGUA.snapshot(), 1)

        self.assertEqual(len(result.sale.items), 1)
        self.assertEqual(result.sale.total, Decimal("16.90"))
        self.assertEqual(result.sale.payment.change, Decimal("3.10"))

    def test_customer_name_is_stripped(self):
        result = self.finalizer(example_cart()).complete_sale(
            PaymentDetails.from_input("cash", "32.80"), customer_name="  Ana  "
        )
        self.assertEqual(result.sale.customer_name, "Ana")

        blank = SaleFinalizer(example_cart(), InMemoryCatalogStore(products=[ACAI, AGUA])).complete_sale(
            PaymentDetails.from_input("cash", "32.80"), customer_name="   "
        )
        self.assertIsNone(blank.sale.customer_name)

    def test_module_level_complete_sale(self):
        cart = example_cart()
        result = complete_sale(
            cart,
            self.store,
            PaymentDetails.from_input("cash", "40.00"),
            cashier_id="cashier-1",
            clock=fixed_clock,
            id_factory=fixed_id,
        )
        self.assertEqual(result.sale.cashier_id, "cashier-1")
        self.assertTrue(cart.is_empty)


class PaymentDetailsTests(SimpleTestCase):
    def test_unknown_method_rejected(self):
        with self.assertRaises(InvalidInputError):
            PaymentDetails.from_input("cheque", "10.00")

    def test_negative_amount_rejected(self):
        with self.assertRaises(InvalidInputError):
            PaymentDetails.from_input("cash", "-1.00")

    def test_missing_amount_rejected(self):
        with self.assertRaises(InvalidInputError):
            PaymentDetails.from_input("cash", None)

    def test_method_is_case_insensitive(self):
        self.assertEqual(PaymentDetails.from_input(" PIX ", "1").method, PaymentMethod.PIX)

    def test_change_only_for_cash(self):
        with self.assertRaises(InvalidInputError):
            PaymentDetails(method="card", amount="10.00", change="1.00")
