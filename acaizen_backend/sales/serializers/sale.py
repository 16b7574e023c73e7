# sales/serializers/sale.py

from rest_framework import serializers

from pos.serializers.cart import CartLineItemSerializer
from sales.models import Sale


class SaleSerializer(serializers.ModelSerializer):
    """
    CANONICAL SALE SERIALIZER (READ-ONLY)

    - Used for receipts, sales history and the checkout response.
    - items are rendered from the stored line-item snapshot with per-line
      subtotals, exactly as they were priced at completion.
    - The row is read back through Sale.to_record(); a malformed snapshot
      raises PersistenceError instead of being rendered.
    """

    items = serializers.SerializerMethodField()
    item_count = serializers.SerializerMethodField()
    cashier_id = serializers.SerializerMethodField()
    cashier_name = serializers.SerializerMethodField()
    payment_method_label = serializers.CharField(
        source="get_payment_method_display", read_only=True
    )

    class Meta:
        model = Sale
        fields = [
            "id",
            "cashier_id",
            "cashier_name",
            "customer_name",
            "items",
            "item_count",
            "total_amount",
            "payment_method",
            "payment_method_label",
            "amount_tendered",
            "change_amount",
            "created_at",
        ]
        read_only_fields = fields

    def to_representation(self, instance: Sale):
        self._record = instance.to_record()
        return super().to_representation(instance)

    def get_items(self, obj: Sale):
        return CartLineItemSerializer(self._record.items, many=True).data

    def get_item_count(self, obj: Sale) -> int:
        return self._record.item_count

    def get_cashier_id(self, obj: Sale):
        return str(obj.user_id) if obj.user_id else None

    def get_cashier_name(self, obj: Sale):
        user = getattr(obj, "user", None)
        if user is None:
            return None
        full = f"{user.first_name or ''} {user.last_name or ''}".strip()
        return full or user.email
