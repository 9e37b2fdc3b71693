"""
Reporting Service - earnings and spending rankings over a date range.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union
import logging

from domain.models import Profile, ProfileType
from domain.value_objects import DateRange, Money
from repositories.ledger_repository import LedgerRepository, PartyTotal
from shared.exceptions import DataValidationError, EntityNotFoundError, NoDataError

logger = logging.getLogger(__name__)

DEFAULT_BEST_CLIENTS_LIMIT = 2

DateLike = Union[str, date, datetime]


@dataclass(frozen=True)
class BestProfessionReport:
    contractor: Profile
    total_earned: Money

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profession": self.contractor.profession,
            "contractor": self.contractor.to_dict(),
            "totalEarned": self.total_earned.to_string(),
        }


@dataclass(frozen=True)
class ClientPayment:
    client_id: int
    full_name: str
    total_paid: Money

    def to_dict(self) -> Dict[str, Any]:
        return {
            "clientId": self.client_id,
            "fullName": self.full_name,
            "totalPaid": self.total_paid.to_string(),
        }


def rank_totals(totals: List[PartyTotal]) -> List[PartyTotal]:
    """Highest total first; equal totals go to the lowest party id."""
    return sorted(totals, key=lambda t: (-t.total.amount, t.party_id))


class ReportingService:
    """Read-only aggregation over paid jobs."""

    def __init__(self, ledger: LedgerRepository, default_limit: int = DEFAULT_BEST_CLIENTS_LIMIT):
        self.ledger = ledger
        self.default_limit = default_limit

    def best_profession(self, start: DateLike, end: DateLike) -> BestProfessionReport:
        """
        The contractor who earned the most from jobs paid in [start, end].

        Raises:
            NoDataError: No paid jobs in range
        """
        date_range = DateRange(start, end)
        totals = self.ledger.aggregate_paid_jobs_by_party(ProfileType.CONTRACTOR, date_range)
        if not totals:
            raise NoDataError("best_profession", date_range.start_date, date_range.end_date)

        best = rank_totals(totals)[0]
        contractor = self._profile(best.party_id)
        logger.debug(f"Best contractor {contractor.id} earned {best.total} in {date_range}")
        return BestProfessionReport(contractor=contractor, total_earned=best.total)

    def best_clients(
        self,
        start: DateLike,
        end: DateLike,
        limit: Optional[int] = None,
    ) -> List[ClientPayment]:
        """
        Clients who paid the most for jobs paid in [start, end].

        Returns at most `limit` entries, fewer when fewer clients paid.

        Raises:
            NoDataError: No paid jobs in range
        """
        limit = self.default_limit if limit is None else limit
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise DataValidationError(
                f"limit must be a positive integer: {limit}",
                code="invalid_limit",
                details={"limit": limit},
            )

        date_range = DateRange(start, end)
        totals = self.ledger.aggregate_paid_jobs_by_party(ProfileType.CLIENT, date_range)
        if not totals:
            raise NoDataError("best_clients", date_range.start_date, date_range.end_date)

        ranked = rank_totals(totals)[:limit]
        return [
            ClientPayment(
                client_id=entry.party_id,
                full_name=self._profile(entry.party_id).full_name,
                total_paid=entry.total,
            )
            for entry in ranked
        ]

    def _profile(self, profile_id: int) -> Profile:
        profile = self.ledger.find_profile(profile_id)
        if profile is None:
            raise EntityNotFoundError("Profile", profile_id)
        return profile
