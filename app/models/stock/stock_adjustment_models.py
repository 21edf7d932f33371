from sqlalchemy import Column, Integer, Text, ForeignKey, CheckConstraint, Numeric, DateTime, Enum, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.db import Base
from app.models.enums.adjustment_reason import AdjustmentReason


class StockAdjustment(Base):
    """Append-only journal of manual corrections. Only the approval columns are ever written after insert."""

    __tablename__ = "stock_adjustments"

    id = Column(Integer, primary_key=True)
    stock_id = Column(Integer, ForeignKey("stock.id", ondelete="RESTRICT"), nullable=False, index=True)
    adjusted_by = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    previous_tonnage = Column(Numeric(14, 2), nullable=False)
    new_tonnage = Column(Numeric(14, 2), nullable=False)
    adjustment_amount = Column(Numeric(14, 2), nullable=False)
    reason = Column(Enum(AdjustmentReason), nullable=False)
    reason_description = Column(Text, nullable=False)
    reference_document = Column(Text, nullable=True)
    attachment = Column(Text, nullable=True)
    approved_by = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=True, index=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    stock = relationship("StockBalance", back_populates="adjustments", lazy="noload")

    __table_args__ = (
        CheckConstraint("new_tonnage >= 0", name="ck_stock_adjustment_new_non_negative"),
        CheckConstraint(
            "(approved_by IS NULL AND approved_at IS NULL) OR (approved_by IS NOT NULL AND approved_at IS NOT NULL)",
            name="ck_stock_adjustment_approval_pair",
        ),
        Index("ix_stock_adjustment_stock_created", "stock_id", "created_at"),
    )

    def __repr__(self):
        return f"<StockAdjustment id={self.id} stock_id={self.stock_id} amount={self.adjustment_amount} approved_by={self.approved_by}>"
