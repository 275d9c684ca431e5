"""Django ORM implementation of the Product repository.

Follows the Null Object convention: missing products come back as ``None``
(or are absent from the mapping) and the service layer decides which domain
error that means.  Stock is never written here; see ``InventoryLedger``.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.core.retry import retry_on_transient_errors
from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    @retry_on_transient_errors()
    def get_by_id(self, id: str) -> Optional[Product]:
        """Live product by primary key; ``None`` for missing or invalid IDs."""
        try:
            return Product.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    @retry_on_transient_errors()
    def get_many(self, ids: Iterable[UUID]) -> Dict[UUID, Product]:
        products = Product.objects.alive().filter(id__in=list(ids))
        return {product.id: product for product in products}

    @transaction.atomic
    def save(self, entity: Product) -> Product:
        entity.save()
        logger.info("product.saved", product_id=str(entity.id), sku=entity.sku)
        return entity
