from pydantic import BaseModel, Field
from typing import Optional
from decimal import Decimal
from datetime import datetime

from app.models.enums.coal_grade import CoalGrade


class ProductionCreateSchema(BaseModel):
    date_time: datetime
    contractor_id: int
    truck_number: str = Field(min_length=1, max_length=100)
    tonnage: Decimal = Field(max_digits=14, decimal_places=2)
    coal_grade: CoalGrade
    jetty_id: int
    document_photo: Optional[str] = None
    operator_id: int
    notes: Optional[str] = None


class ProductionOutSchema(BaseModel):
    id: int
    date_time: datetime
    contractor_id: int
    truck_number: str
    tonnage: Decimal
    coal_grade: CoalGrade
    jetty_id: int
    document_photo: Optional[str]
    operator_id: int
    notes: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class ProductionCreatedSchema(BaseModel):
    record: ProductionOutSchema
    stock_tonnage: Decimal
    stock_version: int
