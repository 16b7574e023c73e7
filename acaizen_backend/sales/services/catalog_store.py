# sales/services/catalog_store.py

"""
CATALOG / PERSISTENCE COLLABORATOR

Purpose:
- The one seam between checkout and storage. The finalizer receives a
  CatalogStore in its constructor and never touches the ORM itself.

Implementations:
- DjangoCatalogStore    ORM-backed (production)
- InMemoryCatalogStore  dict-backed (unit tests, local scripts)

Failure contract:
- Storage/database failures surface as PersistenceError.
- Rows that cannot be read back as valid records also surface as PersistenceError.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Iterable, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, transaction
from django.db.models import F, Value
from django.db.models.functions import Greatest
from django.utils import timezone

from pos.services.cart import AddonSnapshot, ProductSnapshot, money, to_int_qty
from pos.services.exceptions import InvalidInputError, PersistenceError
from sales.services.records import SaleRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogProduct:
    """Product as stored in the catalog, including its stock level."""

    id: str
    name: str
    price: Decimal
    stock: int = 0
    category_id: Optional[str] = None
    description: str = ""
    image: str = ""
    is_active: bool = True

    def __post_init__(self):
        object.__setattr__(self, "id", str(self.id))
        object.__setattr__(self, "price", money(self.price))
        if self.category_id is not None:
            object.__setattr__(self, "category_id", str(self.category_id))
        stock = int(self.stock)
        if stock < 0:
            raise InvalidInputError("stock cannot be negative")
        object.__setattr__(self, "stock", stock)

    @classmethod
    def from_model(cls, obj) -> "CatalogProduct":
        return cls(
            id=obj.id,
            name=obj.name,
            price=obj.price,
            stock=obj.stock,
            category_id=obj.category_id,
            description=obj.description or "",
            image=obj.image or "",
            is_active=obj.is_active,
        )

    def snapshot(self) -> ProductSnapshot:
        return ProductSnapshot(
            id=self.id, name=self.name, price=self.price, category_id=self.category_id
        )


@dataclass(frozen=True)
class CatalogCategory:
    id: str
    name: str


class CatalogStore(ABC):
    """Read the catalog, persist sales, adjust stock."""

    @abstractmethod
    def get_products(self) -> list[CatalogProduct]:
        ...

    @abstractmethod
    def get_categories(self) -> list[CatalogCategory]:
        ...

    @abstractmethod
    def get_addons(self) -> list[AddonSnapshot]:
        ...

    @abstractmethod
    def create_sale(self, sale: SaleRecord) -> SaleRecord:
        ...

    @abstractmethod
    def update_product_stock(self, product_id, new_stock) -> CatalogProduct:
        ...

    @abstractmethod
    def decrement_product_stock(self, product_id, quantity) -> int:
        ...

    @abstractmethod
    def get_sale_by_id(self, sale_id) -> Optional[SaleRecord]:
        ...


def _validate_stock_value(value, *, field_name: str) -> int:
    qty = to_int_qty(value, field_name=field_name)
    if qty < 0:
        raise InvalidInputError(f"{field_name} cannot be negative")
    return qty


# =====================================================
# ORM IMPLEMENTATION
# =====================================================

class DjangoCatalogStore(CatalogStore):
    def get_products(self) -> list[CatalogProduct]:
        from products.models import Product

        try:
            rows = list(Product.objects.filter(is_active=True).order_by("name"))
        except DatabaseError as exc:
            raise PersistenceError(f"Failed to load products: {exc}") from exc
        return [CatalogProduct.from_model(p) for p in rows]

    def get_categories(self) -> list[CatalogCategory]:
        from products.models import Category

        try:
            rows = list(Category.objects.order_by("name").values_list("id", "name"))
        except DatabaseError as exc:
            raise PersistenceError(f"Failed to load categories: {exc}") from exc
        return [CatalogCategory(id=str(pk), name=name) for pk, name in rows]

    def get_addons(self) -> list[AddonSnapshot]:
        from products.models import Addon

        try:
            rows = list(Addon.objects.filter(is_active=True).order_by("name"))
        except DatabaseError as exc:
            raise PersistenceError(f"Failed to load add-ons: {exc}") from exc
        return [AddonSnapshot.from_model(a) for a in rows]

    def create_sale(self, sale: SaleRecord) -> SaleRecord:
        from sales.models import Sale

        try:
            with transaction.atomic():
                row = Sale.from_record(sale)
                row.save(force_insert=True)
        except (DatabaseError, DjangoValidationError) as exc:
            logger.exception("Failed to persist sale %s", sale.id)
            raise PersistenceError(f"Failed to persist sale {sale.id}: {exc}") from exc

        return row.to_record()

    def update_product_stock(self, product_id, new_stock) -> CatalogProduct:
        from products.models import Product

        stock = _validate_stock_value(new_stock, field_name="stock")

        try:
            with transaction.atomic():
                product = Product.objects.select_for_update().get(pk=product_id)
                product.stock = stock
                product.save(update_fields=["stock", "updated_at"])
        except (Product.DoesNotExist, DjangoValidationError) as exc:
            raise PersistenceError(f"Unknown product {product_id}") from exc
        except DatabaseError as exc:
            raise PersistenceError(f"Failed to update stock for {product_id}: {exc}") from exc

        return CatalogProduct.from_model(product)

    def decrement_product_stock(self, product_id, quantity) -> int:
        from products.models import Product

        qty = _validate_stock_value(quantity, field_name="quantity")

        try:
            with transaction.atomic():
                updated = Product.objects.filter(pk=product_id).update(
                    stock=Greatest(F("stock") - qty, Value(0)),
                    updated_at=timezone.now(),
                )
                if not updated:
                    raise PersistenceError(f"Unknown product {product_id}")
                return Product.objects.values_list("stock", flat=True).get(pk=product_id)
        except DjangoValidationError as exc:
            raise PersistenceError(f"Unknown product {product_id}") from exc
        except DatabaseError as exc:
            raise PersistenceError(f"Failed to decrement stock for {product_id}: {exc}") from exc

    def get_sale_by_id(self, sale_id) -> Optional[SaleRecord]:
        from sales.models import Sale

        try:
            row = Sale.objects.filter(pk=sale_id).first()
        except DjangoValidationError:
            return None
        except DatabaseError as exc:
            raise PersistenceError(f"Failed to load sale {sale_id}: {exc}") from exc

        return row.to_record() if row is not None else None


# =====================================================
# IN-MEMORY IMPLEMENTATION
# =====================================================

class InMemoryCatalogStore(CatalogStore):
    def __init__(
        self,
        products: Iterable[CatalogProduct] = (),
        categories: Iterable[CatalogCategory] = (),
        addons: Iterable[AddonSnapshot] = (),
    ):
        self.products: dict[str, CatalogProduct] = {p.id: p for p in products}
        self.categories: dict[str, CatalogCategory] = {c.id: c for c in categories}
        self.addons: dict[str, AddonSnapshot] = {a.id: a for a in addons}
        self.sales: dict[str, SaleRecord] = {}

    def get_products(self) -> list[CatalogProduct]:
        return [p for p in self.products.values() if p.is_active]

    def get_categories(self) -> list[CatalogCategory]:
        return list(self.categories.values())

    def get_addons(self) -> list[AddonSnapshot]:
        return list(self.addons.values())

    def create_sale(self, sale: SaleRecord) -> SaleRecord:
        if sale.id in self.sales:
            raise PersistenceError(f"Sale {sale.id} already exists")
        self.sales[sale.id] = sale
        return sale

    def _get_product(self, product_id) -> CatalogProduct:
        try:
            return self.products[str(product_id)]
        except KeyError as exc:
            raise PersistenceError(f"Unknown product {product_id}") from exc

    def update_product_stock(self, product_id, new_stock) -> CatalogProduct:
        stock = _validate_stock_value(new_stock, field_name="stock")
        product = replace(self._get_product(product_id), stock=stock)
        self.products[product.id] = product
        return product

    def decrement_product_stock(self, product_id, quantity) -> int:
        qty = _validate_stock_value(quantity, field_name="quantity")
        current = self._get_product(product_id)
        product = replace(current, stock=max(0, current.stock - qty))
        self.products[product.id] = product
        return product.stock

    def get_sale_by_id(self, sale_id) -> Optional[SaleRecord]:
        return self.sales.get(str(sale_id))
