# pos/services/cart.py

"""
CART AGGREGATOR (POS CORE)

Purpose:
- Hold the in-progress transaction's line items (product + quantity + add-ons + note).
- Merge identical additions into one slot instead of duplicating rows.
- Derive the cart total from the line items on every read.

Rules:
- Money is Decimal, 2dp, ROUND_HALF_UP.
- Quantities are whole integer units >= 1 (line items AND add-ons).
- A line item carries a frozen snapshot of its product/add-on prices taken at add time.
- Two slots are "the same" iff product id, add-on multiset and note are all equal;
  add_to_cart never leaves two such slots side by side.
- update_cart_item does NOT re-merge an edited slot into an equal sibling.

This module has no Django dependency: the cart is a plain state object owned by
the caller (a view, a test, a session) and serialized with to_payload()/from_payload().
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Optional

from .exceptions import InvalidInputError, OutOfRangeError

TWOPLACES = Decimal("0.01")


def money(value) -> Decimal:
    if value is None or value == "":
        return Decimal("0.00")
    if isinstance(value, bool):
        raise InvalidInputError(f"Invalid monetary amount: {value!r}")
    try:
        return Decimal(str(value)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError) as exc:
        raise InvalidInputError(f"Invalid monetary amount: {value!r}") from exc


def to_int_qty(value, *, field_name: str = "quantity") -> int:
    if isinstance(value, bool):
        raise InvalidInputError(f"{field_name} must be a whole integer unit")

    if isinstance(value, int):
        return value

    if isinstance(value, str):
        s = value.strip()
        if s.lstrip("-").isdigit():
            return int(s)

    raise InvalidInputError(f"{field_name} must be a whole integer unit")


def _normalize_note(note) -> Optional[str]:
    if note is None:
        return None
    if not isinstance(note, str):
        raise InvalidInputError("note must be a string")
    return note if note.strip() else None


# =====================================================
# CATALOG SNAPSHOTS
# =====================================================

@dataclass(frozen=True)
class _CatalogSnapshot:
    id: str
    name: str
    price: Decimal
    category_id: Optional[str] = None

    def __post_init__(self):
        if self.id in (None, ""):
            raise InvalidInputError(f"{type(self).__name__}.id is required")

        price = money(self.price)
        if price < Decimal("0.00"):
            raise InvalidInputError(f"Price cannot be negative: {price}")

        object.__setattr__(self, "id", str(self.id))
        object.__setattr__(self, "name", str(self.name or ""))
        object.__setattr__(self, "price", price)
        if self.category_id not in (None, ""):
            object.__setattr__(self, "category_id", str(self.category_id))
        else:
            object.__setattr__(self, "category_id", None)

    @classmethod
    def from_model(cls, obj):
        """Snapshot any catalog object exposing id/name/price/category_id."""
        return cls(
            id=getattr(obj, "id", None),
            name=getattr(obj, "name", ""),
            price=getattr(obj, "price", None),
            category_id=getattr(obj, "category_id", None),
        )

    def to_payload(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": f"{self.price:.2f}",
            "category_id": self.category_id,
        }

    @classmethod
    def from_payload(cls, data):
        if not isinstance(data, dict):
            raise InvalidInputError(f"{cls.__name__} payload must be an object")
        if "id" not in data or "price" not in data:
            raise InvalidInputError(f"{cls.__name__} payload requires id and price")
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            price=data["price"],
            category_id=data.get("category_id"),
        )


class ProductSnapshot(_CatalogSnapshot):
    """Product as seen by the cart at the moment it was added."""


class AddonSnapshot(_CatalogSnapshot):
    """Add-on as seen by the cart at the moment it was attached."""


# =====================================================
# LINE ITEMS
# =====================================================

@dataclass(frozen=True)
class CartAddon:
    addon: AddonSnapshot
    quantity: int = 1

    def __post_init__(self):
        if not isinstance(self.addon, AddonSnapshot):
            raise InvalidInputError("CartAddon.addon must be an AddonSnapshot")
        qty = to_int_qty(self.quantity, field_name="addon quantity")
        if qty < 1:
            raise InvalidInputError("addon quantity must be at least 1")
        object.__setattr__(self, "quantity", qty)

    @property
    def subtotal(self) -> Decimal:
        return money(self.addon.price * Decimal(self.quantity))

    def to_payload(self) -> dict:
        return {"addon": self.addon.to_payload(), "quantity": self.quantity}

    @classmethod
    def from_payload(cls, data) -> "CartAddon":
        if not isinstance(data, dict) or "addon" not in data:
            raise InvalidInputError("CartAddon payload requires an addon")
        return cls(
            addon=AddonSnapshot.from_payload(data["addon"]),
            quantity=data.get("quantity", 1),
        )


@dataclass(frozen=True)
class CartLineItem:
    """
    One cart slot.

    Immutable: the aggregator replaces slots instead of mutating them, so a
    tuple of line items is already a safe snapshot.
    """

    product: ProductSnapshot
    quantity: int = 1
    addons: tuple = field(default_factory=tuple)
    note: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.product, ProductSnapshot):
            raise InvalidInputError("CartLineItem.product must be a ProductSnapshot")

        qty = to_int_qty(self.quantity)
        if qty < 1:
            raise InvalidInputError("quantity must be at least 1")

        addons = tuple(self.addons or ())
        for a in addons:
            if not isinstance(a, CartAddon):
                raise InvalidInputError("line item add-ons must be CartAddon values")

        object.__setattr__(self, "quantity", qty)
        object.__setattr__(self, "addons", addons)
        object.__setattr__(self, "note", _normalize_note(self.note))

    @property
    def merge_key(self) -> tuple:
        addon_multiset = tuple(sorted((a.addon.id, a.quantity) for a in self.addons))
        return (self.product.id, addon_multiset, self.note)

    @property
    def addons_total(self) -> Decimal:
        return money(sum((a.subtotal for a in self.addons), Decimal("0.00")))

    @property
    def subtotal(self) -> Decimal:
        # add-on quantities are independent of the line quantity
        return money(self.product.price * Decimal(self.quantity) + self.addons_total)

    def to_payload(self) -> dict:
        return {
            "product": self.product.to_payload(),
            "quantity": self.quantity,
            "addons": [a.to_payload() for a in self.addons],
            "note": self.note,
        }

    @classmethod
    def from_payload(cls, data) -> "CartLineItem":
        if not isinstance(data, dict) or "product" not in data:
            raise InvalidInputError("CartLineItem payload requires a product")
        raw_addons = data.get("addons") or []
        if not isinstance(raw_addons, list):
            raise InvalidInputError("CartLineItem.addons must be a list")
        return cls(
            product=ProductSnapshot.from_payload(data["product"]),
            quantity=data.get("quantity", 1),
            addons=tuple(CartAddon.from_payload(a) for a in raw_addons),
            note=data.get("note"),
        )


def _coerce_product(product) -> ProductSnapshot:
    if isinstance(product, ProductSnapshot):
        return product
    if product is None:
        raise InvalidInputError("product is required")
    return ProductSnapshot.from_model(product)


def _coerce_addons(addons: Optional[Iterable]) -> tuple:
    out = []
    for a in addons or ():
        if isinstance(a, CartAddon):
            out.append(a)
        elif isinstance(a, AddonSnapshot):
            out.append(CartAddon(addon=a, quantity=1))
        elif a is None:
            raise InvalidInputError("add-on cannot be null")
        else:
            out.append(CartAddon(addon=AddonSnapshot.from_model(a), quantity=1))
    return tuple(out)


# =====================================================
# AGGREGATOR
# =====================================================

class CartAggregator:
    """
    In-progress cart for one cashier session.

    Not thread-safe; a cart has a single writer.
    """

    def __init__(self, items: Iterable[CartLineItem] = ()):
        self._items: list[CartLineItem] = []
        for item in items:
            if not isinstance(item, CartLineItem):
                raise InvalidInputError("cart items must be CartLineItem values")
            self._items.append(item)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"<CartAggregator lines={len(self._items)} total={self.cart_total()}>"

    @property
    def items(self) -> tuple:
        return tuple(self._items)

    @property
    def is_empty(self) -> bool:
        return not self._items

    @property
    def item_count(self) -> int:
        # units across lines, not number of lines
        return sum(i.quantity for i in self._items)

    def _check_index(self, index) -> int:
        if isinstance(index, bool) or not isinstance(index, int):
            raise OutOfRangeError(f"Cart index must be an integer, got {index!r}")
        if index < 0 or index >= len(self._items):
            raise OutOfRangeError(
                f"Cart index {index} out of range (cart has {len(self._items)} items)"
            )
        return index

    def get_item(self, index) -> CartLineItem:
        return self._items[self._check_index(index)]

    # ---------------- mutations ----------------

    def add_to_cart(self, product, quantity=1, addons=(), note=None) -> CartLineItem:
        qty = to_int_qty(quantity)
        if qty < 1:
            raise InvalidInputError("quantity must be at least 1")

        candidate = CartLineItem(
            product=_coerce_product(product),
            quantity=qty,
            addons=_coerce_addons(addons),
            note=note,
        )

        key = candidate.merge_key
        for idx, existing in enumerate(self._items):
            if existing.merge_key == key:
                merged = replace(existing, quantity=existing.quantity + qty)
                self._items[idx] = merged
                return merged

        self._items.append(candidate)
        return candidate

    def update_cart_item(self, index, quantity, addons=None, note=None) -> CartLineItem:
        idx = self._check_index(index)
        qty = to_int_qty(quantity)
        if qty < 1:
            raise InvalidInputError("quantity must be at least 1")

        current = self._items[idx]
        changes = {"quantity": qty}
        if addons is not None:
            changes["addons"] = _coerce_addons(addons)
        if note is not None:
            changes["note"] = note

        updated = replace(current, **changes)
        self._items[idx] = updated
        return updated

    def remove_from_cart(self, index) -> CartLineItem:
        idx = self._check_index(index)
        return self._items.pop(idx)

    def clear_cart(self) -> None:
        self._items = []

    # ---------------- derived ----------------

    def cart_total(self) -> Decimal:
        return money(sum((i.subtotal for i in self._items), Decimal("0.00")))

    def snapshot_items(self) -> tuple:
        return tuple(self._items)

    def to_payload(self) -> list:
        return [i.to_payload() for i in self._items]

    @classmethod
    def from_payload(cls, payload) -> "CartAggregator":
        if payload in (None, ""):
            return cls()
        if not isinstance(payload, list):
            raise InvalidInputError("cart payload must be a list of line items")
        return cls(CartLineItem.from_payload(p) for p in payload)
