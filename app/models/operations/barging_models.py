from sqlalchemy import Column, Integer, String, Text, ForeignKey, CheckConstraint, Numeric, DateTime, Index
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.models.base.mixins import TimestampMixin


class BargingRecord(Base, TimestampMixin):
    """Coal outflow event (loaded onto a ship batch). APPEND-ONLY."""

    __tablename__ = "barging_records"

    id = Column(Integer, primary_key=True)
    date_time = Column(DateTime(timezone=True), nullable=False, index=True)
    contractor_id = Column(Integer, ForeignKey("contractors.id", ondelete="RESTRICT"), nullable=False, index=True)
    ship_batch_number = Column(String(100), nullable=False)
    tonnage = Column(Numeric(14, 2), nullable=False)
    jetty_id = Column(Integer, ForeignKey("jetties.id", ondelete="RESTRICT"), nullable=False, index=True)
    buyer = Column(Text, nullable=True)
    loading_document = Column(Text, nullable=True)
    operator_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    notes = Column(Text, nullable=True)

    contractor = relationship("Contractor", lazy="noload")
    jetty = relationship("Jetty", lazy="noload")
    operator = relationship("User", lazy="noload")

    __table_args__ = (
        CheckConstraint("tonnage > 0", name="ck_barging_tonnage_positive"),
        Index("ix_barging_contractor_jetty", "contractor_id", "jetty_id"),
    )

    def __repr__(self):
        return f"<BargingRecord id={self.id} ship_batch={self.ship_batch_number} tonnage={self.tonnage}>"
