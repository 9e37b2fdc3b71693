from sqlalchemy import (  # type: ignore
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    Text,
)
from sqlalchemy.orm import relationship  # type: ignore

from core.db import Base, utcnow


class Job(Base):
    __tablename__ = "job"

    id = Column(Integer, primary_key=True, autoincrement=True)
    description = Column(Text, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    # NULL and False both mean unpaid
    paid = Column(Boolean, nullable=True, default=None)
    payment_date = Column(DateTime, nullable=True, index=True)
    contract_id = Column(Integer, ForeignKey("contract.id"), nullable=False, index=True)
    created_at_utc = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        CheckConstraint("price > 0", name="ck_job_price_positive"),
    )
    contract = relationship("Contract", back_populates="jobs")
