# pos/serializers/cart.py

"""
CART SERIALIZERS

Output:
- CartSerializer renders a CartAggregator (not a model): line items with their
  position index, per-line subtotals, unit count and the cart total.
- Money is rendered as 2dp strings.

Input:
- Shape-only checks (types, UUIDs). Value rules such as quantity >= 1 live in
  pos.services.cart so the API reports them with the INVALID_INPUT code.
"""

from rest_framework import serializers


class CartAddonSerializer(serializers.Serializer):
    addon_id = serializers.CharField(source="addon.id", read_only=True)
    name = serializers.CharField(source="addon.name", read_only=True)
    price = serializers.DecimalField(
        source="addon.price", max_digits=10, decimal_places=2, read_only=True
    )
    quantity = serializers.IntegerField(read_only=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)


class CartLineItemSerializer(serializers.Serializer):
    product_id = serializers.CharField(source="product.id", read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)
    category_id = serializers.CharField(
        source="product.category_id", read_only=True, allow_null=True
    )
    unit_price = serializers.DecimalField(
        source="product.price", max_digits=10, decimal_places=2, read_only=True
    )
    quantity = serializers.IntegerField(read_only=True)
    addons = CartAddonSerializer(many=True, read_only=True)
    addons_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    note = serializers.CharField(read_only=True, allow_null=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)


class CartSerializer(serializers.Serializer):
    items = serializers.SerializerMethodField()
    line_count = serializers.SerializerMethodField()
    item_count = serializers.IntegerField(read_only=True)
    total = serializers.SerializerMethodField()

    def get_items(self, cart):
        return [
            {"index": idx, **CartLineItemSerializer(item).data}
            for idx, item in enumerate(cart.items)
        ]

    def get_line_count(self, cart) -> int:
        return len(cart)

    def get_total(self, cart) -> str:
        return f"{cart.cart_total():.2f}"


# =====================================================
# INPUT
# =====================================================

class CartAddonInputSerializer(serializers.Serializer):
    addon_id = serializers.UUIDField()
    quantity = serializers.IntegerField(required=False, default=1)


class AddCartItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(required=False, default=1)
    addons = CartAddonInputSerializer(many=True, required=False, default=list)
    note = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, default=None, trim_whitespace=False
    )


class UpdateCartItemInputSerializer(serializers.Serializer):
    quantity = serializers.IntegerField()
    addons = CartAddonInputSerializer(many=True, required=False)
    note = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, trim_whitespace=False
    )


class CheckoutInputSerializer(serializers.Serializer):
    payment_method = serializers.CharField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    customer_name = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=255
    )
