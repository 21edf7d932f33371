from sqlalchemy import Column, Integer, String, Text, Boolean, Numeric, CheckConstraint
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.models.base.mixins import TimestampMixin


class Jetty(Base, TimestampMixin):
    __tablename__ = "jetties"

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    code = Column(String(50), nullable=False, unique=True, index=True)
    capacity = Column(Numeric(14, 2), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    stock_balances = relationship("StockBalance", back_populates="jetty", lazy="noload")

    __table_args__ = (CheckConstraint("capacity > 0", name="ck_jetty_capacity_positive"),)

    def __repr__(self):
        return f"<Jetty id={self.id} code={self.code} active={self.is_active}>"
