# pos/tests/test_cart_api.py

"""
POS CART + CHECKOUT API TESTS

Run with:
    python manage.py test pos -v 2
"""

from __future__ import annotations

from decimal import Decimal
from unittest import mock

from django.contrib import admin
from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from permissions.roles import ROLE_CASHIER
from pos.admin import CartAdmin
from pos.models import Cart
from pos.services.exceptions import PersistenceError
from products.models import Addon, Category, Product
from sales.models import Sale
from sales.services.catalog_store import DjangoCatalogStore

User = get_user_model()


class POSApiTestBase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.cashier = User.objects.create_user(
            email="caixa@acaizen.test",
            password="password123",
            role=ROLE_CASHIER,
        )
        self.client.force_authenticate(user=self.cashier)

        self.acai = Category.objects.create(name="Açaí")
        self.bebidas = Category.objects.create(name="Bebidas")

        self.acai_300 = Product.objects.create(
            name="Açaí 300ml", price=Decimal("14.90"), stock=10, category=self.acai
        )
        self.agua = Product.objects.create(
            name="Água", price=Decimal("3.00"), stock=1, category=self.bebidas
        )

        self.granola = Addon.objects.create(name="Granola", price=Decimal("2.00"))
        self.nutella = Addon.objects.create(
            name="Nutella", price=Decimal("3.00"), category=self.acai
        )

    def add(self, product, quantity=1, addons=None, note=None):
        payload = {"product_id": str(product.id), "quantity": quantity}
        if addons is not None:
            payload["addons"] = addons
        if note is not None:
            payload["note"] = note
        return self.client.post(reverse("pos:add-cart-item"), payload, format="json")

    def assertErrorCode(self, res, http_status, code):
        self.assertEqual(res.status_code, http_status, res.data)
        self.assertEqual(res.data["error"]["code"], code)


class CartApiTests(POSApiTestBase):
    def test_get_cart_creates_empty_cart(self):
        res = self.client.get(reverse("pos:active-cart"))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["items"], [])
        self.assertEqual(res.data["total"], "0.00")
        self.assertTrue(Cart.objects.filter(user=self.cashier).exists())

    def test_add_and_merge_identical_lines(self):
        self.add(self.acai_300, 1)
        res = self.add(self.acai_300, 1)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(len(res.data["items"]), 1)
        self.assertEqual(res.data["items"][0]["quantity"], 2)
        self.assertEqual(res.data["items"][0]["subtotal"], "29.80")
        self.assertEqual(res.data["total"], "29.80")

    def test_add_with_addons_prices_line(self):
        res = self.add(
            self.acai_300,
            1,
            addons=[
                {"addon_id": str(self.granola.id), "quantity": 1},
                {"addon_id": str(self.nutella.id), "quantity": 2},
            ],
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        line = res.data["items"][0]
        self.assertEqual(line["index"], 0)
        self.assertEqual(line["addons_total"], "8.00")
        self.assertEqual(line["subtotal"], "22.90")

    def test_addon_from_other_category_rejected(self):
        res = self.add(self.agua, 1, addons=[{"addon_id": str(self.nutella.id)}])
        self.assertErrorCode(res, status.HTTP_400_BAD_REQUEST, "INVALID_INPUT")
        self.assertEqual(Cart.for_user(self.cashier).lines, [])

    def test_inactive_product_is_not_found(self):
        self.acai_300.is_active = False
        self.acai_300.save()

        res = self.add(self.acai_300, 1)
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_zero_quantity_is_invalid_input(self):
        res = self.add(self.acai_300, 0)
        self.assertErrorCode(res, status.HTTP_400_BAD_REQUEST, "INVALID_INPUT")

    def test_price_is_frozen_at_add_time(self):
        self.add(self.acai_300, 1)
        self.acai_300.price = Decimal("19.90")
        self.acai_300.save()

        res = self.client.get(reverse("pos:active-cart"))
        self.assertEqual(res.data["total"], "14.90")

    def test_update_and_remove_by_index(self):
        self.add(self.acai_300, 1)
        self.add(self.agua, 1, note="sem gás")

        res = self.client.patch(
            reverse("pos:update-cart-item", args=[0]), {"quantity": 3}, format="json"
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["items"][0]["quantity"], 3)
        self.assertEqual(res.data["total"], "47.70")

        res = self.client.delete(reverse("pos:remove-cart-item", args=[0]))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(len(res.data["items"]), 1)
        self.assertEqual(res.data["items"][0]["note"], "sem gás")

    def test_out_of_range_index(self):
        self.add(self.acai_300, 1)

        res = self.client.patch(
            reverse("pos:update-cart-item", args=[5]), {"quantity": 1}, format="json"
        )
        self.assertErrorCode(res, status.HTTP_404_NOT_FOUND, "OUT_OF_RANGE")

        res = self.client.delete(reverse("pos:remove-cart-item", args=[1]))
        self.assertErrorCode(res, status.HTTP_404_NOT_FOUND, "OUT_OF_RANGE")

    def test_clear_cart_twice(self):
        self.add(self.acai_300, 2)

        for _ in range(2):
            res = self.client.delete(reverse("pos:clear-cart"))
            self.assertEqual(res.status_code, status.HTTP_200_OK)
            self.assertEqual(res.data["items"], [])

    def test_requires_authentication(self):
        self.client.force_authenticate(user=None)
        res = self.client.get(reverse("pos:active-cart"))
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)


class CheckoutApiTests(POSApiTestBase):
    def checkout(self, method, amount, **extra):
        payload = {"payment_method": method, "amount": amount, **extra}
        return self.client.post(reverse("pos:checkout"), payload, format="json")

    def test_cash_checkout_returns_change_and_clears_cart(self):
        self.add(self.acai_300, 2)
        self.add(self.agua, 1, note="sem gás")

        res = self.checkout("cash", "40.00", customer_name="  Ana  ")

        self.assertEqual(res.status_code, status.HTTP_201_CREATED, res.data)
        self.assertEqual(res.data["change"], "7.20")
        self.assertEqual(res.data["stock_warnings"], [])

        sale = res.data["sale"]
        self.assertEqual(sale["total_amount"], "32.80")
        self.assertEqual(sale["change_amount"], "7.20")
        self.assertEqual(sale["customer_name"], "Ana")
        self.assertEqual(len(sale["items"]), 2)
        self.assertEqual(sale["cashier_id"], str(self.cashier.id))

        self.assertEqual(Sale.objects.count(), 1)
        self.assertEqual(Cart.for_user(self.cashier).lines, [])

        self.acai_300.refresh_from_db()
        self.agua.refresh_from_db()
        self.assertEqual(self.acai_300.stock, 8)
        self.assertEqual(self.agua.stock, 0)

    def test_card_checkout_has_no_change(self):
        self.add(self.acai_300, 1)

        res = self.checkout("card", "20.00")

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(res.data["change"])
        self.assertIsNone(res.data["sale"]["change_amount"])

    def test_stock_is_floored_at_zero(self):
        self.add(self.agua, 3)

        res = self.checkout("pix", "9.00")

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.agua.refresh_from_db()
        self.assertEqual(self.agua.stock, 0)

    def test_insufficient_payment_keeps_cart(self):
        self.add(self.acai_300, 2)
        self.add(self.agua, 1, note="sem gás")

        res = self.checkout("cash", "10.00")

        self.assertErrorCode(res, status.HTTP_400_BAD_REQUEST, "INSUFFICIENT_PAYMENT")
        self.assertEqual(len(Cart.for_user(self.cashier).lines), 2)
        self.assertEqual(Sale.objects.count(), 0)

    def test_empty_cart_checkout(self):
        res = self.checkout("cash", "10.00")

        self.assertErrorCode(res, status.HTTP_400_BAD_REQUEST, "EMPTY_CART")
        self.assertEqual(Sale.objects.count(), 0)

    def test_unknown_payment_method(self):
        self.add(self.acai_300, 1)

        res = self.checkout("cheque", "20.00")

        self.assertErrorCode(res, status.HTTP_400_BAD_REQUEST, "INVALID_INPUT")
        self.assertEqual(len(Cart.for_user(self.cashier).lines), 1)

    def test_persistence_failure_keeps_stored_cart(self):
        self.add(self.acai_300, 2)
        self.add(self.agua, 1, note="sem gás")
        lines_before = Cart.for_user(self.cashier).lines

        with mock.patch.object(
            DjangoCatalogStore,
            "create_sale",
            side_effect=PersistenceError("database unavailable"),
        ):
            res = self.checkout("cash", "40.00")

        self.assertErrorCode(res, status.HTTP_503_SERVICE_UNAVAILABLE, "PERSISTENCE_ERROR")
        self.assertEqual(Cart.for_user(self.cashier).lines, lines_before)
        self.assertEqual(Sale.objects.count(), 0)

        self.acai_300.refresh_from_db()
        self.assertEqual(self.acai_300.stock, 10)


class CartAdminTests(POSApiTestBase):
    def test_total_for_malformed_cart_does_not_raise(self):
        cart = Cart.for_user(self.cashier)
        Cart.objects.filter(pk=cart.pk).update(lines=[{"bogus": 1}])
        cart.refresh_from_db()

        self.assertEqual(CartAdmin(Cart, admin.site).total(cart), "(unreadable)")

    def test_total_for_readable_cart(self):
        self.add(self.acai_300, 2)
        cart = Cart.for_user(self.cashier)

        self.assertEqual(CartAdmin(Cart, admin.site).total(cart), Decimal("29.80"))
