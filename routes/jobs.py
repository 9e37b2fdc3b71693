from fastapi import APIRouter, Depends, Path  # type: ignore

from domain.models import Profile
from repositories.ledger_repository import LedgerRepository
from services.domain import SettlementService
from utils.auth import get_ledger, get_profile


router = APIRouter(prefix="/jobs", tags=["jobs"])


def get_settlement_service(ledger: LedgerRepository = Depends(get_ledger)) -> SettlementService:
    return SettlementService(ledger)


@router.get("/unpaid")
def list_unpaid_jobs(
    profile: Profile = Depends(get_profile),
    ledger: LedgerRepository = Depends(get_ledger),
) -> list:
    """Unpaid jobs on the caller's in-progress contracts."""
    return [j.to_dict() for j in ledger.list_unpaid_jobs_for_profile(profile.id)]


@router.post("/{job_id}/pay")
def pay_job(
    job_id: int = Path(..., gt=0),
    profile: Profile = Depends(get_profile),
    service: SettlementService = Depends(get_settlement_service),
) -> dict:
    return service.pay_job(profile.id, job_id).to_dict()
