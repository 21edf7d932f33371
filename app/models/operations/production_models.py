from sqlalchemy import Column, Integer, String, Text, ForeignKey, CheckConstraint, Numeric, DateTime, Enum, Index
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.models.base.mixins import TimestampMixin
from app.models.enums.coal_grade import CoalGrade


class ProductionRecord(Base, TimestampMixin):
    """Coal intake event (truck unloaded at a jetty). APPEND-ONLY."""

    __tablename__ = "production_records"

    id = Column(Integer, primary_key=True)
    date_time = Column(DateTime(timezone=True), nullable=False, index=True)
    contractor_id = Column(Integer, ForeignKey("contractors.id", ondelete="RESTRICT"), nullable=False, index=True)
    truck_number = Column(String(100), nullable=False)
    tonnage = Column(Numeric(14, 2), nullable=False)
    coal_grade = Column(Enum(CoalGrade), nullable=False)
    jetty_id = Column(Integer, ForeignKey("jetties.id", ondelete="RESTRICT"), nullable=False, index=True)
    document_photo = Column(Text, nullable=True)
    operator_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    notes = Column(Text, nullable=True)

    contractor = relationship("Contractor", lazy="noload")
    jetty = relationship("Jetty", lazy="noload")
    operator = relationship("User", lazy="noload")

    __table_args__ = (
        CheckConstraint("tonnage > 0", name="ck_production_tonnage_positive"),
        Index("ix_production_contractor_jetty", "contractor_id", "jetty_id"),
    )

    def __repr__(self):
        return f"<ProductionRecord id={self.id} truck={self.truck_number} tonnage={self.tonnage}>"
