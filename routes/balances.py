from decimal import Decimal

from fastapi import APIRouter, Depends, Path, Request  # type: ignore
from pydantic import BaseModel  # type: ignore

from domain.models import Profile
from repositories.ledger_repository import LedgerRepository
from services.domain import DEFAULT_DEPOSIT_CAP_RATIO, DepositService
from utils.auth import get_ledger, get_profile


router = APIRouter(prefix="/balances", tags=["balances"])


class DepositRequest(BaseModel):
    amount: Decimal


def get_deposit_service(
    request: Request,
    ledger: LedgerRepository = Depends(get_ledger),
) -> DepositService:
    config = getattr(request.app.state, "config", None)
    ratio = config.ledger.deposit_cap_ratio if config else DEFAULT_DEPOSIT_CAP_RATIO
    return DepositService(ledger, cap_ratio=ratio)


@router.post("/deposit/{user_id}")
def deposit(
    payload: DepositRequest,
    user_id: int = Path(..., gt=0),
    profile: Profile = Depends(get_profile),
    service: DepositService = Depends(get_deposit_service),
) -> dict:
    """Deposit into a client's balance; returns the updated profile."""
    return service.deposit(profile.id, user_id, payload.amount).to_dict()
