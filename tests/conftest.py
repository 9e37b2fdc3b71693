"""
Test Configuration and Fixtures

Every test gets its own in-memory SQLite ledger with a small marketplace
already loaded.
"""

import os
from types import SimpleNamespace

# Set test environment variables before importing app modules
os.environ.setdefault("MARKETPLACE_ENV", "testing")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest

from core.db import make_engine, make_session_factory
from core.persistence import init_db
from repositories.ledger_repository import LedgerRepository


@pytest.fixture
def engine():
    engine = make_engine("sqlite://", timeout_seconds=1)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def ledger(engine) -> LedgerRepository:
    return LedgerRepository(make_session_factory(engine), timeout_seconds=1)


@pytest.fixture
def market(ledger) -> SimpleNamespace:
    """
    Two clients, two contractors, three contracts, three unpaid jobs.

    client (100) --in_progress--> contractor (10): job 60, expensive_job 150
    client       --terminated---> second_contractor (0)
    other_client (500) --in_progress--> contractor: other_job 70
    """
    client = ledger.create_profile("Harry", "Potter", "Wizard", "client", balance="100")
    contractor = ledger.create_profile("Linus", "Torvalds", "Programmer", "contractor", balance="10")
    other_client = ledger.create_profile("Mr", "Robot", "Hacker", "client", balance="500")
    second_contractor = ledger.create_profile("Alan", "Turing", "Programmer", "contractor", balance="0")

    contract = ledger.create_contract(client.id, contractor.id, "build a site", "in_progress")
    terminated_contract = ledger.create_contract(
        client.id, second_contractor.id, "old work", "terminated"
    )
    other_contract = ledger.create_contract(other_client.id, contractor.id, "audit", "in_progress")

    job = ledger.create_job(contract.id, "60", "landing page")
    expensive_job = ledger.create_job(contract.id, "150", "checkout flow")
    other_job = ledger.create_job(other_contract.id, "70", "pentest")

    return SimpleNamespace(
        client=client,
        contractor=contractor,
        other_client=other_client,
        second_contractor=second_contractor,
        contract=contract,
        terminated_contract=terminated_contract,
        other_contract=other_contract,
        job=job,
        expensive_job=expensive_job,
        other_job=other_job,
    )
