from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from products.models import Addon, Category, Product

CATEGORIES = ["Açaí", "Bebidas", "Complementos", "Combos"]

# (name, category, price, description, stock)
PRODUCTS = [
    ("Açaí Tradicional 300ml", "Açaí", "14.90", "Açaí puro na tigela 300ml", 100),
    ("Açaí com Banana 300ml", "Açaí", "16.90", "Açaí com banana na tigela 300ml", 100),
    ("Açaí Especial 500ml", "Açaí", "22.90", "Açaí especial na tigela 500ml com frutas", 100),
    ("Refrigerante Lata", "Bebidas", "5.00", "Refrigerante em lata 350ml", 50),
    ("Água Mineral", "Bebidas", "3.00", "Água mineral sem gás 500ml", 50),
    ("Granola (Adicional)", "Complementos", "2.00", "Porção adicional de granola", 100),
    ("Leite Condensado (Adicional)", "Complementos", "3.00", "Porção adicional de leite condensado", 100),
    ("Combo Casal", "Combos", "39.90", "2 Açaís 300ml + 2 Águas", 50),
]

# (name, category or None, price)
ADDONS = [
    ("Granola", "Açaí", "2.00"),
    ("Leite Condensado", "Açaí", "3.00"),
    ("Banana", "Açaí", "2.50"),
    ("Leite em Pó", "Açaí", "2.50"),
    ("Gelo Extra", None, "0.00"),
]


class Command(BaseCommand):
    help = "Seed the initial açaí shop catalog (categories, products, add-ons). Idempotent."

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding catalog..."))

        # -------------------------------
        # CATEGORIES
        # -------------------------------
        category_objs = {}
        for name in CATEGORIES:
            obj, _ = Category.objects.get_or_create(name=name)
            category_objs[name] = obj

        # -------------------------------
        # PRODUCTS
        # -------------------------------
        created_products = 0
        for name, cat, price, description, stock in PRODUCTS:
            _, created = Product.objects.get_or_create(
                name=name,
                defaults={
                    "category": category_objs[cat],
                    "price": Decimal(price),
                    "description": description,
                    "stock": stock,
                },
            )
            created_products += int(created)

        # -------------------------------
        # ADD-ONS
        # -------------------------------
        created_addons = 0
        for name, cat, price in ADDONS:
            _, created = Addon.objects.get_or_create(
                name=name,
                defaults={
                    "category": category_objs[cat] if cat else None,
                    "price": Decimal(price),
                },
            )
            created_addons += int(created)

        self.stdout.write(
            self.style.SUCCESS(
                f"Catalog seeded: {len(category_objs)} categories, "
                f"{created_products} new products, {created_addons} new add-ons."
            )
        )
