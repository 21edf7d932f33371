from sqlalchemy import Column, Integer, String, Text, Boolean, Enum, Index
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, SoftDeleteMixin
from app.models.enums.coal_grade import CoalGrade


class Contractor(Base, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "contractors"

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    code = Column(String(50), nullable=False, unique=True, index=True)
    contact_person = Column(Text, nullable=False)
    contract_number = Column(String(100), nullable=True)
    default_grade = Column(Enum(CoalGrade), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    stock_balances = relationship("StockBalance", back_populates="contractor", lazy="noload")

    __table_args__ = (Index("ix_contractor_active", "is_active"),)

    def __repr__(self):
        return f"<Contractor id={self.id} code={self.code} active={self.is_active}>"
