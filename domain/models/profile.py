"""
Profile domain model.

A profile is either a client, who funds contracts and pays for jobs,
or a contractor, who performs jobs and receives payment.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from domain.value_objects.money import Money
from shared.exceptions import DataValidationError


class ProfileType(str, Enum):
    """Marketplace roles."""
    CLIENT = "client"
    CONTRACTOR = "contractor"

    @classmethod
    def from_string(cls, value: str) -> ProfileType:
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise DataValidationError(f"Unknown profile type: {value}")


@dataclass(frozen=True)
class Profile:
    """Domain model for a marketplace participant."""

    id: int
    first_name: str
    last_name: str
    profession: str
    balance: Money
    type: ProfileType
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.balance.is_negative:
            raise DataValidationError(
                f"Profile {self.id} balance cannot be negative: {self.balance}"
            )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_client(self) -> bool:
        return self.type is ProfileType.CLIENT

    @property
    def is_contractor(self) -> bool:
        return self.type is ProfileType.CONTRACTOR

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "profession": self.profession,
            "balance": self.balance.to_string(),
            "type": self.type.value,
        }
