"""Tests for job settlement: validation order, conservation, all-or-nothing."""

from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError

from domain.value_objects import Money
from repositories.ledger_repository import LedgerRepository
from services.domain import SettlementService
from shared.exceptions import (
    AlreadyPaidError,
    EntityNotFoundError,
    ForbiddenRoleError,
    InsufficientFundsError,
    StoreUnavailableError,
)

PAID_AT = datetime(2024, 5, 1, 12, 0)


@pytest.fixture
def service(ledger) -> SettlementService:
    return SettlementService(ledger, clock=lambda: PAID_AT)


def _balances(ledger, *profiles):
    return [ledger.find_profile(p.id).balance for p in profiles]


class TestSuccessfulPayment:
    def test_client_pays_job(self, ledger, market, service) -> None:
        result = service.pay_job(market.client.id, market.job.id)

        assert result.amount == Money("60")
        assert result.client_balance == Money("40")
        assert result.contractor_balance == Money("70")
        assert _balances(ledger, market.client, market.contractor) == [Money("40"), Money("70")]

        job = ledger.find_job(market.job.id)
        assert job.paid is True
        assert job.payment_date == PAID_AT

    def test_money_is_conserved(self, ledger, market, service) -> None:
        before = _balances(ledger, market.client, market.contractor)
        service.pay_job(market.client.id, market.job.id)
        after = _balances(ledger, market.client, market.contractor)

        assert after[0] == before[0] - Money("60")
        assert after[1] == before[1] + Money("60")
        assert sum(b.amount for b in before) == sum(b.amount for b in after)

    def test_exact_balance_is_enough(self, ledger, market, service) -> None:
        job = ledger.create_job(market.contract.id, "100", "whole balance")
        result = service.pay_job(market.client.id, job.id)
        assert result.client_balance == Money.zero()

    def test_cent_amounts_settle_exactly(self, ledger, market, service) -> None:
        client = ledger.create_profile("Ada", "Lovelace", "Analyst", "client", balance="0.70")
        contract = ledger.create_contract(client.id, market.contractor.id, "notes", "in_progress")
        first = ledger.create_job(contract.id, "0.40", "first note")
        second = ledger.create_job(contract.id, "0.30", "second note")

        service.pay_job(client.id, first.id)
        result = service.pay_job(client.id, second.id)

        assert result.client_balance == Money.zero()
        assert result.contractor_balance == Money("10.70")

    def test_default_clock_is_naive_utc(self, ledger, market) -> None:
        before = datetime.now(timezone.utc).replace(tzinfo=None)
        result = SettlementService(ledger).pay_job(market.client.id, market.job.id)
        assert result.paid_at.tzinfo is None
        assert before <= result.paid_at <= datetime.now(timezone.utc).replace(tzinfo=None)

    def test_result_serializes(self, market, service) -> None:
        body = service.pay_job(market.client.id, market.job.id).to_dict()
        assert body["success"] is True
        assert body["amount"] == "60.00"
        assert body["paymentDate"] == PAID_AT.isoformat()


class TestRejectedPayment:
    def test_contractor_cannot_pay(self, market, service) -> None:
        with pytest.raises(ForbiddenRoleError):
            service.pay_job(market.contractor.id, market.job.id)

    def test_unknown_caller_cannot_pay(self, market, service) -> None:
        with pytest.raises(ForbiddenRoleError):
            service.pay_job(999, market.job.id)

    def test_missing_job(self, market, service) -> None:
        with pytest.raises(EntityNotFoundError) as excinfo:
            service.pay_job(market.client.id, 999)
        assert excinfo.value.details["reason"] == "missing"

    def test_job_of_another_client(self, ledger, market, service) -> None:
        with pytest.raises(EntityNotFoundError) as excinfo:
            service.pay_job(market.client.id, market.other_job.id)
        assert excinfo.value.details["reason"] == "not_owner"
        assert ledger.find_job(market.other_job.id).paid is False

    def test_second_payment_is_rejected_without_balance_change(self, ledger, market, service) -> None:
        service.pay_job(market.client.id, market.job.id)
        before = _balances(ledger, market.client, market.contractor)

        with pytest.raises(AlreadyPaidError):
            service.pay_job(market.client.id, market.job.id)
        assert _balances(ledger, market.client, market.contractor) == before

    def test_insufficient_funds_mutates_nothing(self, ledger, market, service) -> None:
        before = _balances(ledger, market.client, market.contractor)

        with pytest.raises(InsufficientFundsError):
            service.pay_job(market.client.id, market.expensive_job.id)

        assert _balances(ledger, market.client, market.contractor) == before
        job = ledger.find_job(market.expensive_job.id)
        assert job.paid is False
        assert job.payment_date is None


class FailingDebitLedger(LedgerRepository):
    """Store that loses its connection on the client debit step."""

    def adjust_balance(self, profile_id, delta, txn):
        if delta.is_negative:
            raise StoreUnavailableError(
                "adjust_balance",
                original_exception=OperationalError("UPDATE profile", {}, Exception("connection lost")),
            )
        return super().adjust_balance(profile_id, delta, txn)


class TestAtomicity:
    def test_store_failure_mid_transfer_rolls_back(self, ledger, market) -> None:
        failing = FailingDebitLedger(ledger.session_factory, timeout_seconds=1)
        service = SettlementService(failing, clock=lambda: PAID_AT)
        before = _balances(ledger, market.client, market.contractor)

        with pytest.raises(StoreUnavailableError):
            service.pay_job(market.client.id, market.job.id)

        assert _balances(ledger, market.client, market.contractor) == before
        assert ledger.find_job(market.job.id).paid is False

    def test_lost_race_on_same_job(self, ledger, market, service, monkeypatch) -> None:
        cheap_job = ledger.create_job(market.contract.id, "30", "small fix")
        stale_job = ledger.find_job(cheap_job.id)
        service.pay_job(market.client.id, cheap_job.id)
        after_first = _balances(ledger, market.client, market.contractor)

        # Second caller validated against the job before the first commit
        monkeypatch.setattr(ledger, "find_job", lambda job_id: stale_job)
        with pytest.raises(AlreadyPaidError):
            service.pay_job(market.client.id, cheap_job.id)

        monkeypatch.undo()
        assert _balances(ledger, market.client, market.contractor) == after_first

    def test_lost_race_on_balance(self, ledger, market, service, monkeypatch) -> None:
        second_job = ledger.create_job(market.contract.id, "50", "second")
        stale_client = ledger.find_profile(market.client.id)
        service.pay_job(market.client.id, market.job.id)
        after_first = _balances(ledger, market.client, market.contractor)

        # Balance read as 100 although the first payment left 40
        real_find_profile = ledger.find_profile
        monkeypatch.setattr(
            ledger,
            "find_profile",
            lambda pid: stale_client if pid == market.client.id else real_find_profile(pid),
        )
        with pytest.raises(InsufficientFundsError):
            service.pay_job(market.client.id, second_job.id)

        monkeypatch.undo()
        assert _balances(ledger, market.client, market.contractor) == after_first
        assert ledger.find_job(second_job.id).paid is False


class LockRecordingLedger(LedgerRepository):
    """Store that records the row locks taken inside a transaction."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.locks = []

    def lock_job(self, job_id, txn):
        self.locks.append(("job", job_id))
        return super().lock_job(job_id, txn)

    def lock_profile(self, profile_id, txn):
        self.locks.append(("profile", profile_id))
        return super().lock_profile(profile_id, txn)


class TestLocking:
    def test_rows_are_locked_before_writing(self, ledger, market) -> None:
        recording = LockRecordingLedger(ledger.session_factory, timeout_seconds=1)
        SettlementService(recording, clock=lambda: PAID_AT).pay_job(market.client.id, market.job.id)

        profile_ids = sorted((market.client.id, market.contractor.id))
        assert recording.locks == [
            ("job", market.job.id),
            ("profile", profile_ids[0]),
            ("profile", profile_ids[1]),
        ]

    def test_rejected_payment_takes_no_locks(self, ledger, market) -> None:
        recording = LockRecordingLedger(ledger.session_factory, timeout_seconds=1)
        with pytest.raises(InsufficientFundsError):
            SettlementService(recording).pay_job(market.client.id, market.expensive_job.id)
        assert recording.locks == []
