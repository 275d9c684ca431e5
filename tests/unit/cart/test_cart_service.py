"""CartService against the real repositories."""

from __future__ import annotations

import uuid
from decimal import Decimal

import pytest

from modules.cart.dtos import AddCartLineDTO, ColorDTO
from modules.cart.exceptions import CartLineNotFound
from modules.cart.models import Cart, CartLine
from modules.inventory import InsufficientStock
from modules.products.exceptions import ProductNotFound, ProductUnavailable
from modules.products.models import Product

pytestmark = pytest.mark.unit

BLACK = ColorDTO(name="Black", hex="#000000")
IVORY = ColorDTO(name="Ivory", hex="#FFFFF0")


def _add(service, user_id, product, quantity=1, size="M", color=None):
    return service.add_line(
        user_id,
        AddCartLineDTO(product_id=product.id, quantity=quantity, size=size, color=color),
    )


class TestAddLine:
    def test_creates_cart_lazily(self, cart_service, customer, product):
        assert not Cart.objects.filter(user_id=customer.user_id).exists()

        line = _add(cart_service, customer.user_id, product, quantity=2)

        assert line.quantity == 2
        assert Cart.objects.get(user_id=customer.user_id).lines.count() == 1

    def test_same_selection_is_merged(self, cart_service, customer, product):
        first = _add(cart_service, customer.user_id, product, 1, color=BLACK)
        second = _add(cart_service, customer.user_id, product, 2, color=BLACK)

        assert first.id == second.id
        assert CartLine.objects.get(id=first.id).quantity == 3

    def test_different_size_or_color_gets_its_own_line(self, cart_service, customer, product):
        _add(cart_service, customer.user_id, product, size="M", color=BLACK)
        _add(cart_service, customer.user_id, product, size="L", color=BLACK)
        _add(cart_service, customer.user_id, product, size="M", color=IVORY)
        _add(cart_service, customer.user_id, product, size="M")

        assert CartLine.objects.filter(cart__user_id=customer.user_id).count() == 4

    def test_missing_product(self, cart_service, customer):
        with pytest.raises(ProductNotFound):
            cart_service.add_line(
                customer.user_id, AddCartLineDTO(product_id=uuid.uuid4(), size="M")
            )

    def test_soft_deleted_product_is_missing(self, cart_service, customer, product):
        product.delete()

        with pytest.raises(ProductNotFound):
            _add(cart_service, customer.user_id, product)

    def test_inactive_product(self, cart_service, customer, make_product):
        with pytest.raises(ProductUnavailable):
            _add(cart_service, customer.user_id, make_product(status="inactive"))

    def test_quantity_above_stock(self, cart_service, customer, make_product):
        product = make_product(stock=2)

        with pytest.raises(InsufficientStock) as excinfo:
            _add(cart_service, customer.user_id, product, quantity=3)

        assert excinfo.value.product_name == product.name
        assert not CartLine.objects.exists()

    def test_merged_quantity_above_stock_leaves_line_unchanged(
        self, cart_service, customer, make_product
    ):
        product = make_product(stock=3)
        line = _add(cart_service, customer.user_id, product, quantity=2)

        with pytest.raises(InsufficientStock):
            _add(cart_service, customer.user_id, product, quantity=2)

        assert CartLine.objects.get(id=line.id).quantity == 2

    def test_adding_does_not_reserve_stock(self, cart_service, customer, make_product):
        product = make_product(stock=5)
        _add(cart_service, customer.user_id, product, quantity=4)

        product.refresh_from_db()
        assert product.stock_quantity == 5


class TestUpdateLine:
    def test_replaces_quantity(self, cart_service, customer, product):
        line = _add(cart_service, customer.user_id, product)

        updated = cart_service.update_line(customer.user_id, line.id, 4)

        assert updated.quantity == 4
        assert CartLine.objects.get(id=line.id).quantity == 4

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity_removes_line(self, cart_service, customer, product, quantity):
        line = _add(cart_service, customer.user_id, product)

        assert cart_service.update_line(customer.user_id, line.id, quantity) is None
        assert not CartLine.objects.filter(id=line.id).exists()

    def test_quantity_above_stock(self, cart_service, customer, make_product):
        product = make_product(stock=3)
        line = _add(cart_service, customer.user_id, product)

        with pytest.raises(InsufficientStock):
            cart_service.update_line(customer.user_id, line.id, 4)

        assert CartLine.objects.get(id=line.id).quantity == 1

    def test_deleted_product_drops_line_and_raises(self, cart_service, customer, product):
        line = _add(cart_service, customer.user_id, product)
        product.delete()

        with pytest.raises(ProductUnavailable):
            cart_service.update_line(customer.user_id, line.id, 2)

        assert not CartLine.objects.filter(id=line.id).exists()

    def test_unknown_line(self, cart_service, customer, product):
        _add(cart_service, customer.user_id, product)

        with pytest.raises(CartLineNotFound):
            cart_service.update_line(customer.user_id, uuid.uuid4(), 2)

    def test_user_without_cart(self, cart_service, customer):
        with pytest.raises(CartLineNotFound):
            cart_service.update_line(customer.user_id, uuid.uuid4(), 2)

    def test_cannot_touch_another_users_line(self, cart_service, customer, other_user, product):
        line = _add(cart_service, other_user.pk, product)

        with pytest.raises(CartLineNotFound):
            cart_service.update_line(customer.user_id, line.id, 3)


class TestRemoveAndClear:
    def test_remove_line(self, cart_service, customer, product):
        line = _add(cart_service, customer.user_id, product)

        cart_service.remove_line(customer.user_id, line.id)

        assert not CartLine.objects.filter(id=line.id).exists()

    def test_remove_unknown_line(self, cart_service, customer, product):
        _add(cart_service, customer.user_id, product)

        with pytest.raises(CartLineNotFound):
            cart_service.remove_line(customer.user_id, uuid.uuid4())

    def test_clear_empties_but_keeps_cart(self, cart_service, customer, make_product):
        _add(cart_service, customer.user_id, make_product())
        _add(cart_service, customer.user_id, make_product())

        cart_service.clear(customer.user_id)

        cart = Cart.objects.get(user_id=customer.user_id)
        assert cart.lines.count() == 0

    def test_clear_without_cart_is_noop(self, cart_service, customer):
        cart_service.clear(customer.user_id)

        assert not Cart.objects.filter(user_id=customer.user_id).exists()


class TestGetCart:
    def test_empty_cart(self, cart_service, customer):
        summary = cart_service.get_cart(customer.user_id)

        assert summary.is_empty
        assert summary.subtotal == Decimal("0.00")
        assert summary.item_count == 0
        assert summary.delivery_fee == Decimal("0.00")
        assert summary.free_delivery_remaining == Decimal("5000")

    def test_totals_use_current_prices(self, cart_service, customer, make_product):
        kurta = make_product(price="1000.00")
        shawl = make_product(price="1500.00")
        _add(cart_service, customer.user_id, kurta, quantity=2)
        _add(cart_service, customer.user_id, shawl, quantity=1)
        Product.objects.filter(id=kurta.id).update(price=Decimal("1200.00"))

        summary = cart_service.get_cart(customer.user_id)

        assert summary.subtotal == Decimal("3900.00")
        assert summary.item_count == 3
        assert summary.delivery_fee == Decimal("250")
        assert summary.free_delivery_remaining == Decimal("1100.00")

    def test_free_delivery_reached(self, cart_service, customer, make_product):
        _add(cart_service, customer.user_id, make_product(price="2500.00"), quantity=2)

        summary = cart_service.get_cart(customer.user_id)

        assert summary.delivery_fee == Decimal("0.00")
        assert summary.free_delivery_remaining == Decimal("0.00")

    def test_lines_keep_insertion_order(self, cart_service, customer, make_product):
        products = [make_product(name=name) for name in ("Zari", "Angrakha", "Kurta")]
        for product in products:
            _add(cart_service, customer.user_id, product)

        summary = cart_service.get_cart(customer.user_id)

        assert [line.product_id for line in summary.lines] == [p.id for p in products]

    def test_deleted_products_are_dropped(self, cart_service, customer, make_product):
        kept = make_product()
        gone = make_product()
        _add(cart_service, customer.user_id, kept)
        _add(cart_service, customer.user_id, gone)
        gone.delete()

        summary = cart_service.get_cart(customer.user_id)

        assert [line.product_id for line in summary.lines] == [kept.id]
        assert not CartLine.objects.filter(product=gone).exists()

    def test_hard_deleted_product_removes_its_lines(self, cart_service, customer, product):
        _add(cart_service, customer.user_id, product)
        product.hard_delete()

        assert cart_service.get_cart(customer.user_id).is_empty
