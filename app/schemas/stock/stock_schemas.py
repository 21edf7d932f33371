from pydantic import BaseModel
from typing import Optional, List
from decimal import Decimal
from datetime import datetime


# ==============================
# LEDGER ROW
# ==============================
class StockBalanceSnapshot(BaseModel):
    """Point-in-time copy of a stock row; never tracks later writes."""

    id: int
    contractor_id: int
    jetty_id: int
    tonnage: Decimal
    last_updated: datetime
    version: int

    class Config:
        from_attributes = True
        frozen = True


# ==============================
# READ SIDE
# ==============================
class StockListItemSchema(StockBalanceSnapshot):
    contractor_name: str
    contractor_code: str
    jetty_name: str
    jetty_code: str


class JettyStockSchema(BaseModel):
    jetty_id: int
    jetty_name: str
    tonnage: Decimal
    last_updated: datetime


class ContractorStockSchema(BaseModel):
    contractor_id: int
    contractor_name: str
    contractor_code: str
    total_tonnage: Decimal
    jetties: List[JettyStockSchema]


class ContractorAtJettySchema(BaseModel):
    contractor_id: int
    contractor_name: str
    tonnage: Decimal
    last_updated: datetime


class JettyStockGroupSchema(BaseModel):
    jetty_id: int
    jetty_name: str
    jetty_code: str
    total_tonnage: Decimal
    contractors: List[ContractorAtJettySchema]


class StockTotalsSchema(BaseModel):
    total_tonnage: Decimal
    total_contractors: int
    total_jetties: int
    last_updated: Optional[datetime]


class StockAvailabilitySchema(BaseModel):
    valid: bool
    available_stock: Decimal
    message: Optional[str] = None
