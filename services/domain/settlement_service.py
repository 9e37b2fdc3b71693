"""
Settlement Service - atomic payment of a single job.

Paying a job moves its price from the client's balance to the
contractor's balance and marks the job paid. The three writes share one
ledger transaction: either all of them are committed or none are.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional
import logging

from core.db import utcnow
from domain.models import Job, Profile
from domain.value_objects import Money
from repositories.ledger_repository import LedgerRepository
from shared.exceptions import (
    AlreadyPaidError,
    EntityNotFoundError,
    ForbiddenRoleError,
    InsufficientFundsError,
    MarketplaceError,
    handle_exception,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettlementResult:
    """Outcome of a successful job payment."""
    job_id: int
    amount: Money
    client_id: int
    contractor_id: int
    paid_at: datetime
    client_balance: Money
    contractor_balance: Money

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "jobId": self.job_id,
            "amount": self.amount.to_string(),
            "clientId": self.client_id,
            "contractorId": self.contractor_id,
            "paymentDate": self.paid_at.isoformat(),
            "clientBalance": self.client_balance.to_string(),
            "contractorBalance": self.contractor_balance.to_string(),
        }


class SettlementService:
    """Domain service that settles jobs against a ledger store."""

    def __init__(
        self,
        ledger: LedgerRepository,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.ledger = ledger
        self._clock = clock or utcnow

    def pay_job(self, caller_profile_id: int, job_id: int) -> SettlementResult:
        """
        Pay for a job on behalf of the client who owns it.

        Args:
            caller_profile_id: Profile paying; must be the job's client
            job_id: Job to settle

        Returns:
            SettlementResult with both balances after the transfer

        Raises:
            ForbiddenRoleError: Caller is not a client
            EntityNotFoundError: Job missing or owned by another client
            AlreadyPaidError: Job was paid before (or by a concurrent call)
            InsufficientFundsError: Caller balance is below the job price
            StoreUnavailableError: The store failed; nothing was applied
        """
        caller = self._require_client(caller_profile_id)
        job = self._require_owned_job(caller, job_id)

        if job.paid:
            raise AlreadyPaidError(job.id)
        if caller.balance < job.price:
            raise InsufficientFundsError(caller.id, caller.balance, job.price)

        paid_at = self._clock()
        context = {"job_id": job.id, "client_id": caller.id, "contractor_id": job.contractor_id}
        try:
            with self.ledger.begin_transaction() as txn:
                # Row locks on server databases; lock order is job, then profiles by id
                self.ledger.lock_job(job.id, txn)
                for profile_id in sorted((caller.id, job.contractor_id)):
                    self.ledger.lock_profile(profile_id, txn)
                self.ledger.mark_job_paid(job.id, paid_at, txn)
                contractor_balance = self.ledger.adjust_balance(job.contractor_id, job.price, txn)
                client_balance = self.ledger.adjust_balance(caller.id, -job.price, txn)
                txn.commit()
        except MarketplaceError as e:
            # A concurrent payment can still win between validation and commit
            handle_exception(e, logger, context=context, reraise=True)

        logger.info(
            f"Settled job {job.id}: {job.price} from client {caller.id} "
            f"to contractor {job.contractor_id}"
        )
        return SettlementResult(
            job_id=job.id,
            amount=job.price,
            client_id=caller.id,
            contractor_id=job.contractor_id,
            paid_at=paid_at,
            client_balance=client_balance,
            contractor_balance=contractor_balance,
        )

    def _require_client(self, profile_id: int) -> Profile:
        profile = self.ledger.find_profile(profile_id)
        if profile is None:
            raise ForbiddenRoleError(profile_id, "client")
        if not profile.is_client:
            raise ForbiddenRoleError(profile_id, "client", profile.type.value)
        return profile

    def _require_owned_job(self, caller: Profile, job_id: int) -> Job:
        job = self.ledger.find_job(job_id)
        if job is None:
            raise EntityNotFoundError("Job", job_id, {"reason": "missing"})
        if job.client_id != caller.id:
            raise EntityNotFoundError("Job", job_id, {"reason": "not_owner"})
        return job
