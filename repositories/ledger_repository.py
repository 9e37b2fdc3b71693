"""
Ledger Repository for profile, contract and job persistence.

Reads return domain models, never live ORM rows. Writes that move money
go through a LedgerTransaction and are conditional UPDATEs, so two
concurrent writers racing on the same job or balance cannot both win.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Union
import logging

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from core.models import Contract as ContractRow
from core.models import Job as JobRow
from core.models import Profile as ProfileRow
from domain.models import Contract, ContractStatus, Job, Profile, ProfileType
from domain.value_objects import DateRange, Money
from repositories.base_repository import BaseRepository, translate_store_errors
from shared.exceptions import (
    AlreadyPaidError,
    EntityNotFoundError,
    InsufficientFundsError,
    StoreUnavailableError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PartyTotal:
    """Sum of paid job prices for one client or contractor."""
    party_id: int
    total: Money


def _unpaid():
    return or_(JobRow.paid.is_(None), JobRow.paid.is_(False))


def _involves(profile_id: int):
    return or_(ContractRow.client_id == profile_id, ContractRow.contractor_id == profile_id)


def _to_profile(row: ProfileRow) -> Profile:
    return Profile(
        id=row.id,
        first_name=row.first_name,
        last_name=row.last_name,
        profession=row.profession,
        balance=Money(row.balance),
        type=ProfileType.from_string(row.type),
        created_at=row.created_at_utc,
        updated_at=row.updated_at_utc,
    )


def _to_contract(row: ContractRow) -> Contract:
    return Contract(
        id=row.id,
        terms=row.terms,
        status=ContractStatus.from_string(row.status),
        client_id=row.client_id,
        contractor_id=row.contractor_id,
    )


def _to_job(row: JobRow, contract: ContractRow) -> Job:
    return Job(
        id=row.id,
        description=row.description,
        price=Money(row.price),
        contract_id=row.contract_id,
        client_id=contract.client_id,
        contractor_id=contract.contractor_id,
        paid=bool(row.paid),
        payment_date=row.payment_date,
    )


class LedgerTransaction:
    """
    Scoped unit of work over one session.

    Leaving the ``with`` block without calling ``commit()`` rolls back,
    including when an exception escapes the block.
    """

    def __init__(self, session: Session):
        self.session = session
        self._finished = False

    @property
    def active(self) -> bool:
        return not self._finished

    def commit(self) -> None:
        if self._finished:
            raise RuntimeError("Transaction already finished")
        with translate_store_errors("commit"):
            self.session.commit()
        self._finished = True

    def rollback(self) -> None:
        if self._finished:
            return
        self._finished = True
        with translate_store_errors("rollback"):
            self.session.rollback()

    def __enter__(self) -> LedgerTransaction:
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            if self.active:
                if exc_type is not None:
                    logger.debug(f"Rolling back after {exc_type.__name__}")
                self.rollback()
        finally:
            self.session.close()
        return False


class LedgerRepository(BaseRepository):
    """Repository for the marketplace ledger."""

    # =================== TRANSACTIONS ===================

    def begin_transaction(self) -> LedgerTransaction:
        """Open a transaction; use it as a context manager."""
        session = self.get_session()
        try:
            with translate_store_errors("begin_transaction"):
                self.apply_statement_timeout(session)
        except StoreUnavailableError:
            session.close()
            raise
        return LedgerTransaction(session)

    def lock_profile(self, profile_id: int, txn: LedgerTransaction) -> Optional[Profile]:
        """Read a profile inside `txn`, row-locked where the dialect supports it."""
        with translate_store_errors("lock_profile"):
            row = (
                txn.session.query(ProfileRow)
                .filter(ProfileRow.id == profile_id)
                .with_for_update()
                .first()
            )
            return _to_profile(row) if row is not None else None

    def lock_job(self, job_id: int, txn: LedgerTransaction) -> Optional[Job]:
        """Read a job inside `txn`, row-locked where the dialect supports it."""
        with translate_store_errors("lock_job"):
            row = (
                txn.session.query(JobRow, ContractRow)
                .join(ContractRow, JobRow.contract_id == ContractRow.id)
                .filter(JobRow.id == job_id)
                .with_for_update(of=JobRow)
                .first()
            )
            return _to_job(row[0], row[1]) if row is not None else None

    def adjust_balance(self, profile_id: int, delta: Money, txn: LedgerTransaction) -> Money:
        """
        Add `delta` (which may be negative) to a profile balance.

        A debit only applies while the balance stays non-negative.

        Returns:
            The balance after the update

        Raises:
            EntityNotFoundError: If the profile does not exist
            InsufficientFundsError: If a debit would overdraw the balance
        """
        session = txn.session
        with translate_store_errors("adjust_balance"):
            # SQLite stores NUMERIC as REAL; keep balances on whole cents
            new_balance = func.round(ProfileRow.balance + delta.amount, 2)
            query = session.query(ProfileRow).filter(ProfileRow.id == profile_id)
            if delta.is_negative:
                query = query.filter(new_balance >= 0)
            updated = query.update(
                {ProfileRow.balance: new_balance},
                synchronize_session=False,
            )
            balance = (
                session.query(ProfileRow.balance)
                .filter(ProfileRow.id == profile_id)
                .scalar()
            )

        if balance is None:
            raise EntityNotFoundError("Profile", profile_id)
        if not updated:
            raise InsufficientFundsError(profile_id, Money(balance), -delta)
        return Money(balance)

    def mark_job_paid(self, job_id: int, timestamp: datetime, txn: LedgerTransaction) -> None:
        """
        Flip a job from unpaid to paid.

        Raises:
            EntityNotFoundError: If the job does not exist
            AlreadyPaidError: If the job was already paid
        """
        session = txn.session
        with translate_store_errors("mark_job_paid"):
            updated = (
                session.query(JobRow)
                .filter(JobRow.id == job_id, _unpaid())
                .update(
                    {JobRow.paid: True, JobRow.payment_date: timestamp},
                    synchronize_session=False,
                )
            )
            if not updated:
                exists = (
                    session.query(JobRow.id).filter(JobRow.id == job_id).scalar()
                    is not None
                )

        if not updated:
            if not exists:
                raise EntityNotFoundError("Job", job_id)
            raise AlreadyPaidError(job_id)

    # =================== READS ===================

    def find_profile(self, profile_id: int) -> Optional[Profile]:
        def query_func(session: Session) -> Optional[Profile]:
            row = session.query(ProfileRow).filter(ProfileRow.id == profile_id).first()
            return _to_profile(row) if row is not None else None

        return self.execute_query(query_func, operation="find_profile")

    def find_job(self, job_id: int) -> Optional[Job]:
        def query_func(session: Session) -> Optional[Job]:
            row = (
                session.query(JobRow, ContractRow)
                .join(ContractRow, JobRow.contract_id == ContractRow.id)
                .filter(JobRow.id == job_id)
                .first()
            )
            return _to_job(row[0], row[1]) if row is not None else None

        return self.execute_query(query_func, operation="find_job")

    def find_jobs_by_client_unpaid(self, client_id: int) -> List[Job]:
        """Unpaid jobs on every contract where `client_id` is the client."""
        return self._unpaid_jobs(ContractRow.client_id == client_id, "find_jobs_by_client_unpaid")

    def find_jobs_by_contractor_unpaid(self, contractor_id: int) -> List[Job]:
        """Unpaid jobs on every contract where `contractor_id` is the contractor."""
        return self._unpaid_jobs(
            ContractRow.contractor_id == contractor_id, "find_jobs_by_contractor_unpaid"
        )

    def _unpaid_jobs(self, criterion, operation: str) -> List[Job]:
        def query_func(session: Session) -> List[Job]:
            rows = (
                session.query(JobRow, ContractRow)
                .join(ContractRow, JobRow.contract_id == ContractRow.id)
                .filter(criterion, _unpaid())
                .order_by(JobRow.id)
                .all()
            )
            return [_to_job(job, contract) for job, contract in rows]

        return self.execute_query(query_func, operation=operation)

    def find_contract_for_profile(self, contract_id: int, profile_id: int) -> Optional[Contract]:
        """A contract, only if `profile_id` is one of its parties."""
        def query_func(session: Session) -> Optional[Contract]:
            row = (
                session.query(ContractRow)
                .filter(ContractRow.id == contract_id, _involves(profile_id))
                .first()
            )
            return _to_contract(row) if row is not None else None

        return self.execute_query(query_func, operation="find_contract_for_profile")

    def list_active_contracts(self, profile_id: int) -> List[Contract]:
        """Non-terminated contracts where the profile is a party."""
        def query_func(session: Session) -> List[Contract]:
            rows = (
                session.query(ContractRow)
                .filter(
                    _involves(profile_id),
                    ContractRow.status != ContractStatus.TERMINATED.value,
                )
                .order_by(ContractRow.id)
                .all()
            )
            return [_to_contract(row) for row in rows]

        return self.execute_query(query_func, operation="list_active_contracts")

    def list_unpaid_jobs_for_profile(self, profile_id: int) -> List[Job]:
        """Unpaid jobs on in-progress contracts where the profile is a party."""
        return self._unpaid_jobs(
            (ContractRow.status == ContractStatus.IN_PROGRESS.value) & _involves(profile_id),
            "list_unpaid_jobs_for_profile",
        )

    def aggregate_paid_jobs_by_party(
        self,
        role: Union[ProfileType, str],
        date_range: DateRange,
    ) -> List[PartyTotal]:
        """
        Total paid job prices per client or contractor.

        Only jobs with ``paid = true`` and a payment date inside
        `date_range` (both ends inclusive) are counted. Rows come back
        ordered by total descending, then party id ascending.
        """
        if not isinstance(role, ProfileType):
            role = ProfileType.from_string(role)
        party_column = (
            ContractRow.client_id if role is ProfileType.CLIENT else ContractRow.contractor_id
        )
        lower, upper = date_range.timestamp_bounds()

        def query_func(session: Session) -> List[PartyTotal]:
            total = func.sum(JobRow.price)
            rows = (
                session.query(party_column.label("party_id"), total.label("total"))
                .select_from(JobRow)
                .join(ContractRow, JobRow.contract_id == ContractRow.id)
                .filter(
                    JobRow.paid.is_(True),
                    JobRow.payment_date >= lower,
                    JobRow.payment_date < upper,
                )
                .group_by(party_column)
                .order_by(total.desc(), party_column.asc())
                .all()
            )
            return [PartyTotal(party_id=int(r.party_id), total=Money(r.total)) for r in rows]

        return self.execute_query(query_func, operation="aggregate_paid_jobs_by_party")

    # =================== CREATION ===================

    def create_profile(
        self,
        first_name: str,
        last_name: str,
        profession: str,
        type: Union[ProfileType, str],
        balance: Union[Money, str, int] = 0,
    ) -> Profile:
        """Create a profile; used by seeding and fixtures."""
        profile_type = type if isinstance(type, ProfileType) else ProfileType.from_string(type)
        row = ProfileRow(
            first_name=first_name,
            last_name=last_name,
            profession=profession,
            type=profile_type.value,
            balance=Money(balance).amount,
        )
        return _to_profile(self._insert(row, "create_profile"))

    def create_contract(
        self,
        client_id: int,
        contractor_id: int,
        terms: str = "",
        status: Union[ContractStatus, str] = ContractStatus.NEW,
    ) -> Contract:
        """Create a contract between a client and a contractor."""
        contract_status = status if isinstance(status, ContractStatus) else ContractStatus.from_string(status)
        row = ContractRow(
            terms=terms,
            status=contract_status.value,
            client_id=client_id,
            contractor_id=contractor_id,
        )
        return _to_contract(self._insert(row, "create_contract"))

    def create_job(
        self,
        contract_id: int,
        price: Union[Money, str, int],
        description: str = "",
        payment_date: Optional[datetime] = None,
    ) -> Job:
        """Create a job; a payment date makes it a job that is already paid."""
        row = JobRow(
            description=description,
            price=Money(price).amount,
            contract_id=contract_id,
            paid=True if payment_date is not None else None,
            payment_date=payment_date,
        )
        self._insert(row, "create_job")
        job = self.find_job(row.id)
        if job is None:
            raise EntityNotFoundError("Job", row.id)
        return job

    def _insert(self, row, operation: str):
        session = self.get_session()
        try:
            with translate_store_errors(operation):
                session.add(row)
                session.commit()
                session.refresh(row)
            return row
        except StoreUnavailableError:
            session.rollback()
            raise
        finally:
            session.close()
