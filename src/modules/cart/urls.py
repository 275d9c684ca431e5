"""Cart URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.cart.views import CartViewSet

cart = CartViewSet.as_view(
    {"get": "retrieve_cart", "post": "add_line", "delete": "clear"}
)
cart_line = CartViewSet.as_view({"patch": "update_line", "delete": "remove_line"})

urlpatterns = [
    path("cart/", cart, name="cart"),
    path("cart/lines/<uuid:line_id>/", cart_line, name="cart-line"),
]
