from fastapi import APIRouter, Depends, HTTPException  # type: ignore

from domain.models import Profile
from repositories.ledger_repository import LedgerRepository
from utils.auth import get_ledger, get_profile


router = APIRouter(prefix="/contracts", tags=["contracts"])


@router.get("/{contract_id}")
def get_contract(
    contract_id: int,
    profile: Profile = Depends(get_profile),
    ledger: LedgerRepository = Depends(get_ledger),
) -> dict:
    """Contract by id, only when the caller is one of its parties."""
    contract = ledger.find_contract_for_profile(contract_id, profile.id)
    if contract is None:
        raise HTTPException(404, "Not found")
    return contract.to_dict()


@router.get("")
def list_contracts(
    profile: Profile = Depends(get_profile),
    ledger: LedgerRepository = Depends(get_ledger),
) -> list:
    """Caller's contracts that are not terminated."""
    return [c.to_dict() for c in ledger.list_active_contracts(profile.id)]
