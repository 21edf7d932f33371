from pydantic import BaseModel, Field
from typing import Optional
from decimal import Decimal
from datetime import datetime

from app.models.enums.adjustment_reason import AdjustmentReason


class StockAdjustmentCreateSchema(BaseModel):
    stock_id: int
    adjustment_amount: Decimal = Field(max_digits=14, decimal_places=2)
    reason: AdjustmentReason
    reason_description: str = Field(min_length=1)
    reference_document: Optional[str] = None
    attachment: Optional[str] = None
    adjusted_by: int


class StockAdjustmentOutSchema(BaseModel):
    id: int
    stock_id: int
    adjusted_by: int
    previous_tonnage: Decimal
    new_tonnage: Decimal
    adjustment_amount: Decimal
    reason: AdjustmentReason
    reason_description: str
    reference_document: Optional[str]
    attachment: Optional[str]
    approved_by: Optional[int]
    approved_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


class StockAdjustmentListItemSchema(StockAdjustmentOutSchema):
    adjusted_by_name: str
    approved_by_name: Optional[str] = None
    contractor_name: str
    jetty_name: str
