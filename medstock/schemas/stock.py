"""Stock location and transfer schemas"""

from pydantic import BaseModel, Field, ConfigDict, StringConstraints
from typing import Annotated, Optional
from datetime import datetime


ProductName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=120)]


class StockRecordAdd(BaseModel):
    """Add quantity to a location; merges into an existing row with the same name"""
    name: ProductName
    quantity: int = Field(..., ge=1)
    category: Optional[str] = Field(None, max_length=60)

    model_config = {
        "json_schema_extra": {
            "example": {"name": "gauze", "quantity": 10, "category": "dressings"}
        }
    }


class StockRecordUpdate(BaseModel):
    name: ProductName
    quantity: int = Field(..., ge=0)
    category: Optional[str] = Field(None, max_length=60)


class StockRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    quantity: int
    category: Optional[str] = None
    entry_timestamp: datetime
    updated_timestamp: datetime


class StockAddResponse(BaseModel):
    message: str
    created: bool
    data: StockRecordResponse


class TransferRequest(BaseModel):
    """Move quantity from a principal record to the secondary location"""
    stock_record_id: int = Field(..., ge=1)
    quantity: int = Field(..., ge=1)
    request_key: Optional[str] = Field(None, min_length=1, max_length=64)

    model_config = {
        "json_schema_extra": {
            "example": {"stock_record_id": 1, "quantity": 30}
        }
    }


class TransferRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_name: str
    quantity: int
    category: Optional[str] = None
    transfer_timestamp: datetime
    request_key: Optional[str] = None


class TransferResponse(BaseModel):
    message: str
    principal: Optional[StockRecordResponse] = None
    principal_removed: bool = False
    secondary: StockRecordResponse
    transfer: TransferRecordResponse
    replayed: bool = False
