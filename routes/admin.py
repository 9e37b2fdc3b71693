from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request  # type: ignore

from repositories.ledger_repository import LedgerRepository
from services.domain import ReportingService
from utils.auth import get_ledger


router = APIRouter(prefix="/admin", tags=["admin"])


def get_reporting_service(
    request: Request,
    ledger: LedgerRepository = Depends(get_ledger),
) -> ReportingService:
    config = getattr(request.app.state, "config", None)
    if config is None:
        return ReportingService(ledger)
    return ReportingService(ledger, default_limit=config.ledger.best_clients_default_limit)


@router.get("/best-profession")
def best_profession(
    start: date = Query(..., description="First payment day, inclusive"),
    end: date = Query(..., description="Last payment day, inclusive"),
    service: ReportingService = Depends(get_reporting_service),
) -> dict:
    return service.best_profession(start, end).to_dict()


@router.get("/best-clients")
def best_clients(
    start: date = Query(..., description="First payment day, inclusive"),
    end: date = Query(..., description="Last payment day, inclusive"),
    limit: Optional[int] = Query(None, ge=1),
    service: ReportingService = Depends(get_reporting_service),
) -> list:
    return [c.to_dict() for c in service.best_clients(start, end, limit=limit)]
