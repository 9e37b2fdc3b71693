from sqlalchemy import (  # type: ignore
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Text,
)
from sqlalchemy.orm import relationship  # type: ignore

from core.db import Base, utcnow


class Contract(Base):
    __tablename__ = "contract"

    id = Column(Integer, primary_key=True, autoincrement=True)
    terms = Column(Text, nullable=False)
    status = Column(
        Enum("new", "in_progress", "terminated", name="contract_status"),
        nullable=False,
        default="new",
        index=True,
    )
    client_id = Column(Integer, ForeignKey("profile.id"), nullable=False, index=True)
    contractor_id = Column(Integer, ForeignKey("profile.id"), nullable=False, index=True)
    created_at_utc = Column(DateTime, nullable=False, default=utcnow)

    client = relationship(
        "Profile", foreign_keys=[client_id], back_populates="client_contracts"
    )
    contractor = relationship(
        "Profile", foreign_keys=[contractor_id], back_populates="contractor_contracts"
    )
    jobs = relationship("Job", back_populates="contract", cascade="all, delete-orphan")
