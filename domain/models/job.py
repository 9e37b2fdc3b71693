"""
Job domain model.

A job belongs to one contract and is settled exactly once.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from domain.value_objects.money import Money
from shared.exceptions import DataValidationError


@dataclass(frozen=True)
class Job:
    """Domain model for a unit of contracted work."""

    id: int
    description: str
    price: Money
    contract_id: int
    client_id: int
    contractor_id: int
    paid: bool = False
    payment_date: Optional[datetime] = None

    def __post_init__(self):
        if not self.price.is_positive:
            raise DataValidationError(f"Job {self.id} price must be positive: {self.price}")
        if self.paid != (self.payment_date is not None):
            raise DataValidationError(
                f"Job {self.id} paid flag and payment date disagree",
                details={"paid": self.paid, "payment_date": str(self.payment_date)},
            )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "description": self.description,
            "price": self.price.to_string(),
            "paid": self.paid,
            "paymentDate": self.payment_date.isoformat() if self.payment_date else None,
            "ContractId": self.contract_id,
        }
