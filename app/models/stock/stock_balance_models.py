from sqlalchemy import Column, Integer, ForeignKey, CheckConstraint, UniqueConstraint, Numeric, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.db import Base
from app.models.base.mixins import TimestampMixin


class StockBalance(Base, TimestampMixin):
    """One row per (contractor, jetty). Mutated only through version-checked updates; never deleted."""

    __tablename__ = "stock"

    id = Column(Integer, primary_key=True)
    contractor_id = Column(Integer, ForeignKey("contractors.id", ondelete="RESTRICT"), nullable=False, index=True)
    jetty_id = Column(Integer, ForeignKey("jetties.id", ondelete="RESTRICT"), nullable=False, index=True)
    tonnage = Column(Numeric(14, 2), nullable=False, default=0)
    last_updated = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    version = Column(Integer, nullable=False, default=1)

    contractor = relationship("Contractor", back_populates="stock_balances", lazy="noload")
    jetty = relationship("Jetty", back_populates="stock_balances", lazy="noload")
    adjustments = relationship("StockAdjustment", back_populates="stock", lazy="noload")

    __table_args__ = (
        UniqueConstraint("contractor_id", "jetty_id", name="uq_stock_contractor_jetty"),
        CheckConstraint("tonnage >= 0", name="ck_stock_tonnage_non_negative"),
        CheckConstraint("version >= 1", name="ck_stock_version_positive"),
    )

    def __repr__(self):
        return f"<StockBalance id={self.id} contractor_id={self.contractor_id} jetty_id={self.jetty_id} tonnage={self.tonnage} v={self.version}>"
