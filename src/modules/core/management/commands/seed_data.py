from __future__ import annotations

import random
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from modules.cart.dtos import AddCartLineDTO, ColorDTO
from modules.cart.repositories import CartDjangoRepository
from modules.cart.services import CartService
from modules.core.exceptions import DomainError
from modules.core.identity import Actor, Role
from modules.orders.constants import FULFILMENT_PATH, DeliveryOption, OrderStatus, PaymentMethod
from modules.orders.dtos import CheckoutDTO, ShippingAddressDTO
from modules.orders.models import Order
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.services import CheckoutService, OrderService
from modules.products.models import Product, ProductStatus
from modules.products.repositories import ProductDjangoRepository

SIZES = ["S", "M", "L", "XL"]
COLORS = [
    ColorDTO(name="Black", hex="#000000"),
    ColorDTO(name="Ivory", hex="#FFFFF0"),
    ColorDTO(name="Maroon", hex="#800000"),
]
CITIES = ["Karachi", "Lahore", "Islamabad", "Faisalabad"]


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def add_arguments(self, parser):
        parser.add_argument("--orders", type=int, default=30)

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        users_created = self._seed_users()
        products = self._seed_products()
        orders_created = self._seed_orders(options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={users_created}, "
                f"products={len(products)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self) -> int:
        User = get_user_model()
        created = 0
        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser("admin", password="admin123")
            created += 1
        if not User.objects.filter(username="operator").exists():
            User.objects.create_user("operator", password="operator123", is_staff=True)
            created += 1
        for username in ("ayesha", "bilal", "sana", "usman"):
            if not User.objects.filter(username=username).exists():
                User.objects.create_user(username, password=f"{username}123")
                created += 1
        return created

    def _seed_products(self) -> list[Product]:
        self.stdout.write("Creating products...")
        products: list[Product] = []
        catalog = [
            ("KRT-001", "Embroidered Lawn Kurta", Decimal("3499.00")),
            ("KRT-002", "Cotton Kurta", Decimal("2199.00")),
            ("KRT-003", "Silk Kurta", Decimal("5999.00")),
            ("SHL-001", "Pashmina Shawl", Decimal("7499.00")),
            ("SHL-002", "Wool Shawl", Decimal("2999.00")),
            ("DUP-001", "Chiffon Dupatta", Decimal("1299.00")),
            ("DUP-002", "Printed Dupatta", Decimal("899.00")),
            ("TRS-001", "Straight Trousers", Decimal("1499.00")),
            ("TRS-002", "Cigarette Pants", Decimal("1799.00")),
            ("WST-001", "Velvet Waistcoat", Decimal("4599.00")),
        ]
        for sku, name, price in catalog:
            product, _ = Product.objects.get_or_create(
                sku=sku,
                defaults={
                    "name": name,
                    "description": name,
                    "price": price,
                    "stock_quantity": random.randint(20, 120),
                    "images": [f"https://cdn.example.com/products/{sku.lower()}.jpg"],
                    "status": ProductStatus.ACTIVE,
                },
            )
            products.append(product)
        self.stdout.write(self.style.SUCCESS("Creating products... Done!"))
        return products

    def _seed_orders(self, count: int) -> int:
        """Place orders through the real cart and checkout services."""
        self.stdout.write("Creating orders...")
        if Order.objects.exists():
            self.stdout.write(self.style.WARNING("Skipping orders (already seeded)."))
            return 0

        User = get_user_model()
        customers = list(User.objects.filter(is_staff=False))
        operator = User.objects.filter(is_staff=True).first()
        product_ids = list(
            Product.objects.alive()
            .filter(status=ProductStatus.ACTIVE)
            .values_list("id", flat=True)
        )
        if not customers or not product_ids or operator is None:
            self.stdout.write(self.style.WARNING("Skipping orders (no users/products)."))
            return 0

        products = ProductDjangoRepository()
        orders = OrderDjangoRepository()
        carts = CartService(CartDjangoRepository(), products)
        checkout = CheckoutService(orders, CartDjangoRepository(), products)
        lifecycle = OrderService(orders)
        staff = Actor(user_id=operator.pk, role=Role.OPERATOR)

        created = 0
        for _ in range(count):
            customer = random.choice(customers)
            try:
                for product_id in random.sample(product_ids, k=random.randint(1, 3)):
                    carts.add_line(
                        customer.pk,
                        AddCartLineDTO(
                            product_id=product_id,
                            quantity=random.randint(1, 2),
                            size=random.choice(SIZES),
                            color=random.choice(COLORS),
                        ),
                    )
                order = checkout.checkout(
                    customer.pk,
                    CheckoutDTO(
                        shipping_address=ShippingAddressDTO(
                            label="Home",
                            street=f"House {random.randint(1, 300)}, Street {random.randint(1, 40)}",
                            city=random.choice(CITIES),
                            postal_code=f"{random.randint(10000, 79999)}",
                        ),
                        delivery_option=random.choice(DeliveryOption.values),
                        payment_method=random.choice(PaymentMethod.values),
                    ),
                )
            except DomainError as exc:
                carts.clear(customer.pk)
                self.stdout.write(self.style.WARNING(f"Skipped order: {exc.detail}"))
                continue

            target = random.choice([*FULFILMENT_PATH, OrderStatus.CANCELLED])
            if target != OrderStatus.PENDING:
                lifecycle.change_status(order.id, target, staff, notes="Seed data")
            created += 1

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return created
