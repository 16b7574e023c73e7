# products/tests/test_products.py

from decimal import Decimal
from io import StringIO

from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.test import TestCase

from products.models import Addon, Category, Product, eligible_addons_for


class ProductModelTests(TestCase):
    """
    Product model tests.

    GUARANTEES:
    - Products can be created safely
    - Price and stock are never negative
    """

    def setUp(self):
        self.acai = Category.objects.create(name="Açaí")

    def test_product_creation(self):
        product = Product.objects.create(
            name="Açaí 300ml",
            price=Decimal("14.90"),
            stock=20,
            category=self.acai,
        )

        self.assertEqual(product.name, "Açaí 300ml")
        self.assertTrue(product.is_active)
        self.assertEqual(list(self.acai.products.all()), [product])

    def test_product_price_is_non_negative(self):
        with self.assertRaises(ValidationError):
            Product.objects.create(name="Broken", price=Decimal("-1.00"))

    def test_product_stock_is_non_negative(self):
        with self.assertRaises(ValidationError):
            Product.objects.create(name="Broken", price=Decimal("1.00"), stock=-5)

    def test_category_name_is_required(self):
        with self.assertRaises(ValidationError):
            Category.objects.create(name="   ")

    def test_deleting_category_keeps_products(self):
        product = Product.objects.create(name="Açaí 500ml", price=Decimal("22.90"), category=self.acai)
        self.acai.delete()

        product.refresh_from_db()
        self.assertIsNone(product.category_id)


class AddonEligibilityTests(TestCase):
    """
    GUARANTEES:
    - Uncategorized add-ons fit every product
    - Categorized add-ons fit only products of that category
    - Inactive add-ons fit nothing
    """

    def setUp(self):
        self.acai = Category.objects.create(name="Açaí")
        self.bebidas = Category.objects.create(name="Bebidas")

        self.cup = Product.objects.create(name="Açaí 300ml", price=Decimal("14.90"), category=self.acai)
        self.water = Product.objects.create(name="Água", price=Decimal("3.00"), category=self.bebidas)
        self.loose = Product.objects.create(name="Brinde", price=Decimal("0.00"))

        self.granola = Addon.objects.create(name="Granola", price=Decimal("2.00"))
        self.nutella = Addon.objects.create(name="Nutella", price=Decimal("3.00"), category=self.acai)
        self.retired = Addon.objects.create(name="Paçoca", price=Decimal("1.50"), is_active=False)

    def test_eligible_addons_for_categorized_product(self):
        self.assertEqual(
            set(eligible_addons_for(self.cup)),
            {self.granola, self.nutella},
        )

    def test_eligible_addons_for_other_category(self):
        self.assertEqual(list(eligible_addons_for(self.water)), [self.granola])

    def test_uncategorized_product_only_gets_global_addons(self):
        self.assertEqual(list(eligible_addons_for(self.loose)), [self.granola])

    def test_is_eligible_for(self):
        self.assertTrue(self.nutella.is_eligible_for(self.cup))
        self.assertFalse(self.nutella.is_eligible_for(self.water))
        self.assertFalse(self.retired.is_eligible_for(self.cup))


class SeedCatalogCommandTests(TestCase):
    def test_seed_is_idempotent(self):
        call_command("seed_catalog", stdout=StringIO())
        counts = (Category.objects.count(), Product.objects.count(), Addon.objects.count())
        call_command("seed_catalog", stdout=StringIO())

        self.assertEqual(
            (Category.objects.count(), Product.objects.count(), Addon.objects.count()),
            counts,
        )
        self.assertTrue(Product.objects.filter(name="Açaí Tradicional 300ml").exists())
