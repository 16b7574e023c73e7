# pos/views/api.py

"""
POS API VIEWS

Purpose:
- Cashier-scoped active cart lifecycle (one cart per cashier)
- Add/update/remove/clear line items (server-owned pricing)
- Checkout endpoint that finalizes the cart into a Sale via the sale finalizer

Hard rules:
- Prices are snapshotted from the catalog when an item is added; the client never sends prices.
- Cart semantics (merge, totals, index rules) belong to pos.services.cart.
  Views only load the cart, apply one operation and store it back.
- Domain errors are returned in the envelope {"error": {"code", "message"}}.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiExample, OpenApiTypes, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from permissions.roles import CAP_POS_SELL, HasCapability
from pos.models import Cart
from pos.serializers import (
    AddCartItemInputSerializer,
    CartSerializer,
    CheckoutInputSerializer,
    UpdateCartItemInputSerializer,
)
from pos.services.cart import AddonSnapshot, CartAddon, ProductSnapshot
from pos.services.exceptions import (
    EmptyCartError,
    InsufficientPaymentError,
    InvalidInputError,
    OutOfRangeError,
    PersistenceError,
    PosServiceError,
)
from products.models import Addon, Product
from sales.models import Sale
from sales.serializers import SaleSerializer
from sales.services.catalog_store import DjangoCatalogStore
from sales.services.records import PaymentDetails
from sales.services.sale_finalizer import SaleFinalizer

logger = logging.getLogger(__name__)


# =====================================================
# API ERROR NORMALIZATION
# =====================================================

ERROR_STATUS = {
    InvalidInputError: status.HTTP_400_BAD_REQUEST,
    OutOfRangeError: status.HTTP_404_NOT_FOUND,
    EmptyCartError: status.HTTP_400_BAD_REQUEST,
    InsufficientPaymentError: status.HTTP_400_BAD_REQUEST,
    PersistenceError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_response(*, code: str, message: str, http_status: int):
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


def service_error_response(exc: PosServiceError):
    http_status = status.HTTP_400_BAD_REQUEST
    for exc_type, mapped in ERROR_STATUS.items():
        if isinstance(exc, exc_type):
            http_status = mapped
            break
    return error_response(code=exc.code, message=str(exc), http_status=http_status)


class ServiceErrorMixin:
    """Render domain errors escaping a view as the error envelope."""

    def handle_exception(self, exc):
        if isinstance(exc, PosServiceError):
            if isinstance(exc, PersistenceError):
                logger.error("Unreadable stored data: %s", exc)
            return service_error_response(exc)
        return super().handle_exception(exc)


# =====================================================
# HELPERS
# =====================================================

def _get_cart(user) -> Cart:
    """Lock the cashier's cart row for the rest of the request transaction."""
    Cart.for_user(user)
    return Cart.objects.select_for_update().get(user=user)


def _resolve_addons(product: Product, entries) -> list[CartAddon]:
    """
    Turn [{addon_id, quantity}] into CartAddon snapshots.

    - Unknown/inactive add-on -> 404
    - Add-on restricted to another category -> InvalidInputError
    """
    out = []
    for entry in entries or []:
        addon = get_object_or_404(Addon, id=entry["addon_id"], is_active=True)
        if not addon.is_eligible_for(product):
            raise InvalidInputError(
                f"Add-on '{addon.name}' is not available for '{product.name}'."
            )
        out.append(
            CartAddon(
                addon=AddonSnapshot.from_model(addon),
                quantity=entry.get("quantity", 1),
            )
        )
    return out


def _cart_response(cart, http_status=status.HTTP_200_OK):
    return Response(CartSerializer(cart).data, status=http_status)


class POSBaseView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_POS_SELL


# =====================================================
# POS API VIEWS
# =====================================================

class POSHealthCheckView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = None

    @extend_schema(
        responses={200: OpenApiTypes.OBJECT},
        description="POS module health check",
    )
    def get(self, request):
        return Response(
            {
                "status": "ok",
                "module": "pos",
                "user": request.user.email,
                "role": request.user.role,
            }
        )


class ActiveCartView(POSBaseView):
    """
    Retrieve (or create) the authenticated cashier's cart.
    """

    serializer_class = CartSerializer

    @extend_schema(
        responses={200: CartSerializer},
        description="Get the active cart for the authenticated cashier",
    )
    def get(self, request):
        try:
            cart = Cart.for_user(request.user).load()
        except PosServiceError as exc:
            return service_error_response(exc)
        return _cart_response(cart)


class AddCartItemView(POSBaseView):
    """
    Add a product (with optional add-ons and note) to the cart.

    Money rule:
    - Product and add-on prices are read from the catalog and frozen in the line item.
    - An identical line (same product, add-ons and note) is merged by summing quantities.
    """

    serializer_class = CartSerializer

    @extend_schema(
        request=AddCartItemInputSerializer,
        responses={200: CartSerializer},
        description="Add a product to the active cart (merges with an identical line)",
        examples=[
            OpenApiExample(
                "Açaí with add-ons",
                value={
                    "product_id": "00000000-0000-0000-0000-000000000000",
                    "quantity": 1,
                    "addons": [
                        {"addon_id": "00000000-0000-0000-0000-000000000001", "quantity": 2}
                    ],
                    "note": "sem granola",
                },
                request_only=True,
            )
        ],
    )
    @transaction.atomic
    def post(self, request):
        serializer = AddCartItemInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        product = get_object_or_404(Product, id=data["product_id"], is_active=True)

        try:
            addons = _resolve_addons(product, data.get("addons"))
            row = _get_cart(request.user)
            cart = row.load()
            cart.add_to_cart(
                ProductSnapshot.from_model(product),
                quantity=data["quantity"],
                addons=addons,
                note=data.get("note"),
            )
            row.store(cart)
        except PosServiceError as exc:
            return service_error_response(exc)

        return _cart_response(cart)


class UpdateCartItemView(POSBaseView):
    """
    Replace quantity (and optionally add-ons / note) of the line at <index>.

    Rules:
    - The edited line is NOT merged into an identical sibling.
    - note "" clears the note; omitted/null keeps it.
    """

    serializer_class = CartSerializer

    @extend_schema(
        request=UpdateCartItemInputSerializer,
        responses={200: CartSerializer},
        description="Update a cart line by position",
    )
    @transaction.atomic
    def patch(self, request, index):
        serializer = UpdateCartItemInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            row = _get_cart(request.user)
            cart = row.load()

            addons = None
            if "addons" in data:
                current = cart.get_item(index)
                product = get_object_or_404(Product, id=current.product.id)
                addons = _resolve_addons(product, data["addons"])

            cart.update_cart_item(
                index,
                data["quantity"],
                addons=addons,
                note=data.get("note"),
            )
            row.store(cart)
        except PosServiceError as exc:
            return service_error_response(exc)

        return _cart_response(cart)


class RemoveCartItemView(POSBaseView):
    serializer_class = CartSerializer

    @extend_schema(
        responses={200: CartSerializer},
        description="Remove the cart line at <index>",
    )
    @transaction.atomic
    def delete(self, request, index):
        try:
            row = _get_cart(request.user)
            cart = row.load()
            cart.remove_from_cart(index)
            row.store(cart)
        except PosServiceError as exc:
            return service_error_response(exc)

        return _cart_response(cart)


class ClearCartView(POSBaseView):
    """
    Clear the cart. Clearing an empty cart is a no-op.
    """

    serializer_class = CartSerializer

    @extend_schema(
        responses={200: CartSerializer},
        description="Remove every line from the active cart",
    )
    @transaction.atomic
    def delete(self, request):
        try:
            row = _get_cart(request.user)
            cart = row.load()
            cart.clear_cart()
            row.store(cart)
        except PosServiceError as exc:
            return service_error_response(exc)

        return _cart_response(cart)


class CheckoutCartView(POSBaseView):
    """
    Finalize the active cart into an immutable Sale.

    - amount below the cart total -> INSUFFICIENT_PAYMENT, cart kept
    - cash overpayment -> change_amount on the sale
    - stock is decremented per product (floored at zero); failures come back as
      stock_warnings and do not fail the sale
    """

    serializer_class = SaleSerializer

    @extend_schema(
        request=CheckoutInputSerializer,
        responses={201: OpenApiTypes.OBJECT},
        description="Complete the sale for the active cart",
        examples=[
            OpenApiExample(
                "Cash payment",
                value={"payment_method": "cash", "amount": "50.00", "customer_name": "Ana"},
                request_only=True,
            )
        ],
    )
    @transaction.atomic
    def post(self, request):
        serializer = CheckoutInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            payment = PaymentDetails.from_input(data["payment_method"], data["amount"])
            row = _get_cart(request.user)
            cart = row.load()

            completed = SaleFinalizer(cart, DjangoCatalogStore()).complete_sale(
                payment,
                customer_name=data.get("customer_name"),
                cashier_id=request.user.pk,
            )
            row.store(cart)
        except PosServiceError as exc:
            return service_error_response(exc)

        sale = Sale.objects.select_related("user").get(pk=completed.sale.id)

        return Response(
            {
                "sale": SaleSerializer(sale).data,
                "change": (
                    f"{completed.sale.payment.change:.2f}"
                    if completed.sale.payment.change is not None
                    else None
                ),
                "stock_warnings": [w.to_payload() for w in completed.stock_warnings],
            },
            status=status.HTTP_201_CREATED,
        )
