"""Product repository interface: the catalog lookup the core consumes."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Dict, Iterable
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    @abstractmethod
    def get_many(self, ids: Iterable[UUID]) -> Dict[UUID, Product]:
        """Live (not soft-deleted) products keyed by id; missing ids are absent."""
