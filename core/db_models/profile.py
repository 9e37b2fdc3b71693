from sqlalchemy import (  # type: ignore
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import relationship  # type: ignore

from core.db import Base, utcnow


class Profile(Base):
    __tablename__ = "profile"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(128), nullable=False)
    last_name = Column(String(128), nullable=False)
    profession = Column(String(128), nullable=False)
    balance = Column(Numeric(12, 2), nullable=False, default=0)
    type = Column(
        Enum("client", "contractor", name="profile_type"),
        nullable=False,
        index=True,
    )
    created_at_utc = Column(DateTime, nullable=False, default=utcnow)
    updated_at_utc = Column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_profile_balance_non_negative"),
    )
    client_contracts = relationship(
        "Contract", foreign_keys="Contract.client_id", back_populates="client"
    )
    contractor_contracts = relationship(
        "Contract", foreign_keys="Contract.contractor_id", back_populates="contractor"
    )
