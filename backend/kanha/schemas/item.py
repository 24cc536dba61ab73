from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


class ItemCreate(BaseModel):
    # Taken from the token; accepted for clients that still send it
    user_id: Optional[int] = None
    cat_no: str = Field(..., min_length=1, max_length=25)
    product_name: str = Field(..., min_length=1, max_length=255)
    lot_no: Optional[str] = Field(None, max_length=25)
    hsn_no: Optional[str] = Field(None, max_length=25)
    quantity: int = Field(..., gt=0)
    w_rate: Optional[Decimal] = Field(None, ge=0)
    selling_price: Optional[Decimal] = Field(None, ge=0)
    mrp: Decimal = Field(..., gt=0)

    class Config:
        str_strip_whitespace = True


class ItemUpdate(BaseModel):
    """Partial update. Only fields present in the request are applied."""
    cat_no: Optional[str] = Field(None, min_length=1, max_length=25)
    product_name: Optional[str] = Field(None, min_length=1, max_length=255)
    lot_no: Optional[str] = Field(None, max_length=25)
    hsn_no: Optional[str] = Field(None, max_length=25)
    quantity: Optional[int] = Field(None, ge=0)
    w_rate: Optional[Decimal] = Field(None, ge=0)
    selling_price: Optional[Decimal] = Field(None, ge=0)
    mrp: Optional[Decimal] = Field(None, gt=0)

    class Config:
        str_strip_whitespace = True

    @field_validator("cat_no", "product_name", "quantity", "mrp")
    @classmethod
    def required_columns_not_null(cls, v):
        if v is None:
            raise ValueError("cannot be null")
        return v


class ItemResponse(BaseModel):
    id: int
    user_id: int
    cat_no: str
    product_name: str
    lot_no: Optional[str] = None
    hsn_no: Optional[str] = None
    quantity: int
    w_rate: Optional[float] = None
    selling_price: Optional[float] = None
    mrp: float
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ItemSearchResponse(BaseModel):
    count: int
    items: List[ItemResponse]


class ItemPage(BaseModel):
    items: List[ItemResponse]
    page: int
    page_size: int
    total_items: int
    total_pages: int


SearchType = Literal["cat_no", "product_name"]
