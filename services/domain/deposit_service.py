"""
Deposit Service - bounded top-ups of client balances.

A client may deposit at most DEFAULT_DEPOSIT_CAP_RATIO times the total
price of their unpaid jobs, read fresh on every request.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Union
import logging

from domain.models import Profile
from domain.value_objects import Money, sum_money
from repositories.ledger_repository import LedgerRepository
from shared.exceptions import (
    DepositExceedsCapError,
    ForbiddenRoleError,
    NoOutstandingJobsError,
)

logger = logging.getLogger(__name__)

DEFAULT_DEPOSIT_CAP_RATIO = Decimal("1.25")


@dataclass(frozen=True)
class OutstandingBalance:
    """Unpaid work owed by a client."""
    client_id: int
    total: Money
    job_count: int


class DepositService:
    """
    Domain service enforcing the deposit cap.

    The outstanding total and the balance credit are not one transaction.
    A job created between the two can leave the cap one job stale; that
    window is accepted for a business-rule bound.
    """

    def __init__(
        self,
        ledger: LedgerRepository,
        cap_ratio: Union[Decimal, str] = DEFAULT_DEPOSIT_CAP_RATIO,
    ):
        self.ledger = ledger
        self.cap_ratio = Decimal(str(cap_ratio))

    def outstanding_total(self, client_id: int) -> OutstandingBalance:
        """Sum the prices of every unpaid job the client owes."""
        jobs = self.ledger.find_jobs_by_client_unpaid(client_id)
        return OutstandingBalance(
            client_id=client_id,
            total=sum_money(job.price for job in jobs),
            job_count=len(jobs),
        )

    def deposit(
        self,
        caller_profile_id: int,
        target_profile_id: int,
        amount: Union[Money, Decimal, str, int],
    ) -> Profile:
        """
        Credit a client's balance, bounded by their outstanding work.

        Raises:
            InvalidAmountError: Amount is not positive with at most two decimals
            ForbiddenRoleError: Target is missing or not a client
            NoOutstandingJobsError: Target has no unpaid jobs
            DepositExceedsCapError: Amount is above the cap
            StoreUnavailableError: The store failed
        """
        money = Money.parse_positive(amount.amount if isinstance(amount, Money) else amount)

        target = self.ledger.find_profile(target_profile_id)
        if target is None:
            raise ForbiddenRoleError(target_profile_id, "client")
        if not target.is_client:
            raise ForbiddenRoleError(target_profile_id, "client", target.type.value)

        outstanding = self.outstanding_total(target.id)
        if outstanding.job_count == 0:
            raise NoOutstandingJobsError(target.id)

        # Compared unrounded so 1.25 x 33.33 does not round the cap up
        cap = outstanding.total.amount * self.cap_ratio
        if money.amount > cap:
            raise DepositExceedsCapError(target.id, money, outstanding.total, cap)

        with self.ledger.begin_transaction() as txn:
            balance = self.ledger.adjust_balance(target.id, money, txn)
            txn.commit()

        logger.info(
            f"Deposited {money} to client {target.id} by profile {caller_profile_id} "
            f"(outstanding {outstanding.total}, cap {cap})"
        )
        return replace(target, balance=balance)
