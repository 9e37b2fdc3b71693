"""
Domain Services - Pure business logic layer.

This module contains services that implement core business rules and domain logic,
independent of external concerns like HTTP frameworks. Each service is handed the
ledger store it works against.
"""

from services.domain.settlement_service import SettlementService, SettlementResult
from services.domain.deposit_service import (
    DEFAULT_DEPOSIT_CAP_RATIO,
    DepositService,
    OutstandingBalance,
)
from services.domain.reporting_service import (
    BestProfessionReport,
    ClientPayment,
    ReportingService,
)

__all__ = [
    "SettlementService",
    "SettlementResult",
    "DepositService",
    "OutstandingBalance",
    "DEFAULT_DEPOSIT_CAP_RATIO",
    "ReportingService",
    "BestProfessionReport",
    "ClientPayment",
]
