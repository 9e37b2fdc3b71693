"""
Contract domain model.

A contract binds exactly one client to exactly one contractor.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from shared.exceptions import DataValidationError


class ContractStatus(str, Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    TERMINATED = "terminated"

    @classmethod
    def from_string(cls, value: str) -> ContractStatus:
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise DataValidationError(f"Unknown contract status: {value}")


@dataclass(frozen=True)
class Contract:
    """Domain model for a client/contractor agreement."""

    id: int
    terms: str
    status: ContractStatus
    client_id: int
    contractor_id: int

    @property
    def is_active(self) -> bool:
        return self.status is ContractStatus.IN_PROGRESS

    def involves(self, profile_id: int) -> bool:
        return profile_id in (self.client_id, self.contractor_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "terms": self.terms,
            "status": self.status.value,
            "ClientId": self.client_id,
            "ContractorId": self.contractor_id,
        }
