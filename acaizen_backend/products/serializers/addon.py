# products/serializers/addon.py

from decimal import Decimal

from rest_framework import serializers

from products.models import Addon, Category


class AddonSerializer(serializers.ModelSerializer):
    """
    Add-on serializer.

    category is optional: NULL means the add-on fits any product.
    """

    category = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.all(),
        required=False,
        allow_null=True,
    )
    category_name = serializers.CharField(source="category.name", read_only=True, default=None)

    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0.00"))

    class Meta:
        model = Addon
        fields = [
            "id",
            "name",
            "price",
            "category",
            "category_name",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "category_name", "created_at", "updated_at"]

    def validate_name(self, value):
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("name is required")
        return value
