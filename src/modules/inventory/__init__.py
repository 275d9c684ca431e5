"""Inventory ledger: the only writer of product stock."""

from modules.inventory.exceptions import InsufficientStock, InvalidQuantity
from modules.inventory.ledger import InventoryLedger

__all__ = ["InsufficientStock", "InvalidQuantity", "InventoryLedger"]
