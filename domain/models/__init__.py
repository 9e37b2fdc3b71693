"""Marketplace entities: profiles, the contracts between them and the jobs billed on those contracts."""

from domain.models.profile import Profile, ProfileType
from domain.models.contract import Contract, ContractStatus
from domain.models.job import Job

__all__ = [
    "Profile",
    "ProfileType",
    "Contract",
    "ContractStatus",
    "Job",
]
