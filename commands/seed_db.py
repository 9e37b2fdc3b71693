#!/usr/bin/env python3
"""
Seed Commands

CLI commands for resetting the database and loading the sample
marketplace used for manual testing.
"""

import sys
from datetime import datetime
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parents[1]
sys.path.insert(0, str(project_root))

import click
import logging

from config import get_config
from core.db import make_engine, make_session_factory
from core.persistence import reset_db
from repositories.ledger_repository import LedgerRepository


# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
_LOG = logging.getLogger(__name__)


SAMPLE_PROFILES = [
    ("Harry", "Potter", "Wizard", "client", "1150"),
    ("Mr", "Robot", "Hacker", "client", "231.11"),
    ("John", "Snow", "Knows nothing", "client", "451.3"),
    ("Ash", "Kethcum", "Pokemon master", "client", "1.3"),
    ("John", "Lenon", "Musician", "contractor", "64"),
    ("Linus", "Torvalds", "Programmer", "contractor", "1214"),
    ("Alan", "Turing", "Programmer", "contractor", "22"),
    ("Aragorn", "II Elessar Telcontarvalds", "Fighter", "contractor", "314"),
]

# (client index, contractor index, status), indexes into SAMPLE_PROFILES
SAMPLE_CONTRACTS = [
    (0, 4, "terminated"),
    (0, 5, "in_progress"),
    (1, 5, "in_progress"),
    (1, 6, "in_progress"),
    (2, 7, "new"),
    (2, 6, "in_progress"),
    (3, 6, "in_progress"),
    (3, 5, "in_progress"),
    (3, 7, "in_progress"),
]

# (contract index, price, paid on)
SAMPLE_JOBS = [
    (0, "200", None),
    (1, "201", None),
    (2, "202", None),
    (3, "200", None),
    (6, "200", None),
    (6, "2020", datetime(2020, 8, 15, 19, 11, 26)),
    (1, "200", datetime(2020, 8, 15, 19, 11, 26)),
    (2, "200", datetime(2020, 8, 16, 19, 11, 26)),
    (0, "200", datetime(2020, 8, 17, 19, 11, 26)),
    (4, "200", datetime(2020, 8, 17, 19, 11, 26)),
    (3, "21", datetime(2020, 8, 10, 19, 11, 26)),
    (3, "21", datetime(2020, 8, 15, 19, 11, 26)),
    (2, "121", datetime(2020, 8, 15, 19, 11, 26)),
    (2, "121", datetime(2020, 8, 14, 23, 11, 26)),
]


def seed_sample_marketplace(ledger: LedgerRepository) -> dict:
    """Insert the sample profiles, contracts and jobs; return counts."""
    profiles = [
        ledger.create_profile(first, last, profession, role, balance=balance)
        for first, last, profession, role, balance in SAMPLE_PROFILES
    ]
    contracts = [
        ledger.create_contract(
            client_id=profiles[client].id,
            contractor_id=profiles[contractor].id,
            terms="bla bla bla",
            status=status,
        )
        for client, contractor, status in SAMPLE_CONTRACTS
    ]
    jobs = [
        ledger.create_job(
            contract_id=contracts[contract].id,
            price=price,
            description="work",
            payment_date=paid_on,
        )
        for contract, price, paid_on in SAMPLE_JOBS
    ]
    return {"profiles": len(profiles), "contracts": len(contracts), "jobs": len(jobs)}


@click.command()
@click.option('--database-url', default=None, help='Override DATABASE_URL')
@click.option('--yes', is_flag=True, help='Do not ask before dropping tables')
def seed(database_url, yes):
    """Drop all tables and load the sample marketplace."""
    config = get_config()
    url = database_url or config.database.url
    if not yes:
        click.confirm(f"This drops every table in {url}. Continue?", abort=True)

    engine = make_engine(url, timeout_seconds=config.ledger.store_timeout_seconds)
    if engine is None:
        raise click.ClickException("No database configured")
    reset_db(engine)

    ledger = LedgerRepository(
        make_session_factory(engine),
        timeout_seconds=config.ledger.store_timeout_seconds,
    )
    counts = seed_sample_marketplace(ledger)
    _LOG.info(f"Seeded {counts}")
    click.echo(
        f"Seeded {counts['profiles']} profiles, {counts['contracts']} contracts, "
        f"{counts['jobs']} jobs"
    )


if __name__ == '__main__':
    seed()
