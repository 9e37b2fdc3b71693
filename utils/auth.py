from __future__ import annotations

from fastapi import Depends, HTTPException, Request  # type: ignore

from domain.models import Profile
from repositories.ledger_repository import LedgerRepository


def get_ledger(request: Request) -> LedgerRepository:
    ledger = getattr(request.app.state, "ledger", None)
    if ledger is None:
        raise HTTPException(503, "database unavailable")
    return ledger


def _profile_header(request: Request) -> str:
    config = getattr(request.app.state, "config", None)
    if config is None:
        return "profile_id"
    return config.auth.profile_header


def parse_profile_id(raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        value = int(raw.strip())
    except ValueError:
        return None
    return value if value > 0 else None


def get_profile(
    request: Request,
    ledger: LedgerRepository = Depends(get_ledger),
) -> Profile:
    """Resolve the caller from the profile header or reject with 401."""
    header = _profile_header(request)
    profile_id = parse_profile_id(request.headers.get(header))
    if profile_id is None:
        raise HTTPException(401, f"missing or invalid {header} header")
    profile = ledger.find_profile(profile_id)
    if profile is None:
        raise HTTPException(401, "unknown profile")
    request.state.profile = profile
    return profile
