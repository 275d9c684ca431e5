"""Caller identity as seen by the order-processing services.

Authentication itself is a collaborator (SimpleJWT + ``django.contrib.auth``);
services only need who is calling and in which role.  Operators are staff
users.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Role(str, Enum):
    CUSTOMER = "customer"
    OPERATOR = "operator"


@dataclass(frozen=True)
class Actor:
    user_id: int
    role: Role = Role.CUSTOMER

    @property
    def is_operator(self) -> bool:
        return self.role is Role.OPERATOR

    @classmethod
    def from_user(cls, user: Any) -> Actor:
        role = Role.OPERATOR if getattr(user, "is_staff", False) else Role.CUSTOMER
        return cls(user_id=user.pk, role=role)
