from pydantic import BaseModel, Field
from typing import Optional
from decimal import Decimal
from datetime import datetime


class BargingCreateSchema(BaseModel):
    date_time: datetime
    contractor_id: int
    ship_batch_number: str = Field(min_length=1, max_length=100)
    tonnage: Decimal = Field(max_digits=14, decimal_places=2)
    jetty_id: int
    buyer: Optional[str] = None
    loading_document: Optional[str] = None
    operator_id: int
    notes: Optional[str] = None


class BargingOutSchema(BaseModel):
    id: int
    date_time: datetime
    contractor_id: int
    ship_batch_number: str
    tonnage: Decimal
    jetty_id: int
    buyer: Optional[str]
    loading_document: Optional[str]
    operator_id: int
    notes: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class BargingCreatedSchema(BaseModel):
    record: BargingOutSchema
    stock_tonnage: Decimal
    stock_version: int
