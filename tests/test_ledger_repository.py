"""Tests for the ledger store: transactions, conditional writes, aggregation."""

from datetime import datetime

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from domain.models import ContractStatus, ProfileType
from domain.value_objects import DateRange, Money
from repositories.ledger_repository import LedgerRepository, PartyTotal
from shared.exceptions import (
    AlreadyPaidError,
    EntityNotFoundError,
    InsufficientFundsError,
    StoreUnavailableError,
)


class TestTransactions:
    def test_leaving_without_commit_rolls_back(self, ledger, market) -> None:
        with ledger.begin_transaction() as txn:
            ledger.adjust_balance(market.client.id, Money("25"), txn)
        assert ledger.find_profile(market.client.id).balance == Money("100")

    def test_exception_inside_block_rolls_back(self, ledger, market) -> None:
        with pytest.raises(RuntimeError):
            with ledger.begin_transaction() as txn:
                ledger.mark_job_paid(market.job.id, datetime(2024, 1, 1), txn)
                raise RuntimeError("boom")
        assert ledger.find_job(market.job.id).paid is False

    def test_commit_persists_every_write(self, ledger, market) -> None:
        with ledger.begin_transaction() as txn:
            ledger.mark_job_paid(market.job.id, datetime(2024, 1, 1), txn)
            ledger.adjust_balance(market.contractor.id, Money("60"), txn)
            txn.commit()
        job = ledger.find_job(market.job.id)
        assert job.paid is True
        assert job.payment_date == datetime(2024, 1, 1)
        assert ledger.find_profile(market.contractor.id).balance == Money("70")

    def test_commit_twice_is_an_error(self, ledger) -> None:
        with ledger.begin_transaction() as txn:
            txn.commit()
            with pytest.raises(RuntimeError):
                txn.commit()


class TestConditionalWrites:
    def test_debit_cannot_overdraw(self, ledger, market) -> None:
        with ledger.begin_transaction() as txn:
            with pytest.raises(InsufficientFundsError):
                ledger.adjust_balance(market.client.id, Money("-100.01"), txn)
        assert ledger.find_profile(market.client.id).balance == Money("100")

    def test_debit_to_exactly_zero_is_allowed(self, ledger, market) -> None:
        with ledger.begin_transaction() as txn:
            balance = ledger.adjust_balance(market.client.id, Money("-100"), txn)
            txn.commit()
        assert balance == Money.zero()

    def test_balances_stay_on_whole_cents(self, ledger, market) -> None:
        profile = ledger.create_profile("Ada", "Lovelace", "Analyst", "client", balance="0.70")
        with ledger.begin_transaction() as txn:
            ledger.adjust_balance(profile.id, Money("-0.40"), txn)
            balance = ledger.adjust_balance(profile.id, Money("-0.30"), txn)
            txn.commit()
        assert balance == Money.zero()

        with ledger.begin_transaction() as txn:
            stored = txn.session.execute(
                text("SELECT balance FROM profile WHERE id = :id"), {"id": profile.id}
            ).scalar()
        assert stored == 0

    def test_adjust_unknown_profile(self, ledger) -> None:
        with ledger.begin_transaction() as txn:
            with pytest.raises(EntityNotFoundError):
                ledger.adjust_balance(999, Money("1"), txn)

    def test_job_is_marked_paid_only_once(self, ledger, market) -> None:
        with ledger.begin_transaction() as txn:
            ledger.mark_job_paid(market.job.id, datetime(2024, 1, 1), txn)
            txn.commit()
        with ledger.begin_transaction() as txn:
            with pytest.raises(AlreadyPaidError):
                ledger.mark_job_paid(market.job.id, datetime(2024, 1, 2), txn)
        assert ledger.find_job(market.job.id).payment_date == datetime(2024, 1, 1)

    def test_mark_unknown_job(self, ledger) -> None:
        with ledger.begin_transaction() as txn:
            with pytest.raises(EntityNotFoundError):
                ledger.mark_job_paid(999, datetime(2024, 1, 1), txn)

    def test_locked_reads_inside_transaction(self, ledger, market) -> None:
        with ledger.begin_transaction() as txn:
            assert ledger.lock_profile(market.client.id, txn).id == market.client.id
            assert ledger.lock_job(market.job.id, txn).contractor_id == market.contractor.id
            assert ledger.lock_job(999, txn) is None


class TestReads:
    def test_find_job_carries_contract_parties(self, ledger, market) -> None:
        job = ledger.find_job(market.job.id)
        assert job.client_id == market.client.id
        assert job.contractor_id == market.contractor.id
        assert job.price == Money("60")
        assert ledger.find_job(999) is None

    def test_unpaid_jobs_by_client_and_contractor(self, ledger, market) -> None:
        by_client = ledger.find_jobs_by_client_unpaid(market.client.id)
        assert [j.id for j in by_client] == [market.job.id, market.expensive_job.id]
        by_contractor = ledger.find_jobs_by_contractor_unpaid(market.contractor.id)
        assert {j.id for j in by_contractor} == {
            market.job.id, market.expensive_job.id, market.other_job.id
        }

    def test_contract_visible_only_to_its_parties(self, ledger, market) -> None:
        assert ledger.find_contract_for_profile(market.contract.id, market.client.id) is not None
        assert ledger.find_contract_for_profile(market.contract.id, market.contractor.id) is not None
        assert ledger.find_contract_for_profile(market.contract.id, market.other_client.id) is None

    def test_active_contracts_skip_terminated(self, ledger, market) -> None:
        contracts = ledger.list_active_contracts(market.client.id)
        assert [c.id for c in contracts] == [market.contract.id]
        assert all(c.status is not ContractStatus.TERMINATED for c in contracts)

    def test_unpaid_jobs_only_on_in_progress_contracts(self, ledger, market) -> None:
        new_contract = ledger.create_contract(
            market.client.id, market.second_contractor.id, "later", "new"
        )
        ledger.create_job(new_contract.id, "5", "not started")
        jobs = ledger.list_unpaid_jobs_for_profile(market.client.id)
        assert [j.id for j in jobs] == [market.job.id, market.expensive_job.id]


class TestAggregation:
    def test_only_paid_jobs_inside_range(self, ledger, market) -> None:
        ledger.create_job(market.contract.id, "10", "start day", payment_date=datetime(2020, 8, 10, 0, 0))
        ledger.create_job(market.contract.id, "20", "end day", payment_date=datetime(2020, 8, 15, 23, 59, 59))
        ledger.create_job(market.contract.id, "400", "day before", payment_date=datetime(2020, 8, 9, 23, 59, 59))
        ledger.create_job(market.contract.id, "800", "day after", payment_date=datetime(2020, 8, 16, 0, 0))

        totals = ledger.aggregate_paid_jobs_by_party(
            ProfileType.CONTRACTOR, DateRange("2020-08-10", "2020-08-15")
        )
        assert totals == [PartyTotal(party_id=market.contractor.id, total=Money("30"))]

    def test_grouped_by_client_and_ordered(self, ledger, market) -> None:
        paid_on = datetime(2020, 8, 12, 12, 0)
        ledger.create_job(market.contract.id, "40", "a", payment_date=paid_on)
        ledger.create_job(market.other_contract.id, "90", "b", payment_date=paid_on)

        totals = ledger.aggregate_paid_jobs_by_party("client", DateRange("2020-08-01", "2020-08-31"))
        assert [t.party_id for t in totals] == [market.other_client.id, market.client.id]
        assert totals[0].total == Money("90")

    def test_empty_range(self, ledger, market) -> None:
        assert ledger.aggregate_paid_jobs_by_party(
            ProfileType.CLIENT, DateRange("2020-01-01", "2020-01-31")
        ) == []


class TestStoreFailures:
    def test_no_database_configured(self) -> None:
        ledger = LedgerRepository(None)
        with pytest.raises(StoreUnavailableError):
            ledger.find_profile(1)

    def test_driver_errors_become_store_unavailable(self) -> None:
        def broken_factory():
            raise OperationalError("connect", {}, Exception("connection refused"))

        ledger = LedgerRepository(broken_factory)
        with pytest.raises(StoreUnavailableError) as excinfo:
            ledger.begin_transaction()
        assert isinstance(excinfo.value.original_exception, OperationalError)

    def test_query_errors_become_store_unavailable(self, engine, ledger) -> None:
        with engine.begin() as conn:
            conn.exec_driver_sql("DROP TABLE job")
        with pytest.raises(StoreUnavailableError):
            ledger.find_job(1)
