from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class InvoiceHeader(BaseModel):
    invoice_no: str = Field(..., min_length=1, max_length=25)
    party_name: str = Field(..., min_length=1, max_length=100)
    # Taken from the token; accepted for clients that still send it
    user_id: Optional[int] = None
    order_no: Optional[str] = Field(None, max_length=25)
    doctor_name: Optional[str] = Field(None, max_length=100)
    patient_name: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    pincode: Optional[str] = Field(None, max_length=10)
    mobile_no: Optional[str] = Field(None, max_length=10)
    gstin: Optional[str] = Field(None, max_length=15)
    road_permit: Optional[str] = Field(None, max_length=25)
    payment_mode: Optional[str] = Field(None, max_length=25)
    # Negative adjustment is a discount
    adjustment_percent: Optional[Decimal] = Field(None, ge=-100, le=100)
    cgst: Optional[Decimal] = Field(None, ge=0, le=100)
    sgst: Optional[Decimal] = Field(None, ge=0, le=100)
    igst: Optional[Decimal] = Field(None, ge=0, le=100)

    class Config:
        str_strip_whitespace = True

    @field_validator("order_no", "pincode", "mobile_no", mode="before")
    @classmethod
    def numbers_as_text(cls, v):
        # Forms send these as numbers
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class CartItemIn(BaseModel):
    item_id: int
    selected_quantity: int = Field(..., gt=0)
    selling_price: Decimal = Field(..., ge=0)  # after add-on
    total: Decimal = Field(..., ge=0)
    hsn_code: Optional[str] = Field(None, max_length=20)
    addon_percent: Optional[Decimal] = Field(None, ge=0)


class CartIn(BaseModel):
    items: List[CartItemIn] = Field(..., min_length=1)
    # Optional: recomputed on the server and checked when supplied
    cart_total: Optional[Decimal] = None
    net_amount: Optional[Decimal] = None
    net_payable_amount: Optional[Decimal] = None


class InvoiceCreate(BaseModel):
    invoice: InvoiceHeader
    cart: CartIn


class InvoiceCreated(BaseModel):
    message: str = "Invoice created successfully"
    invoice_id: int
    cart_id: int
    invoice_no: str


class NextInvoiceNumber(BaseModel):
    invoice_no: str


class InvoiceResponse(BaseModel):
    id: int
    invoice_no: str
    user_id: int
    party_name: str
    order_no: Optional[str] = None
    doctor_name: Optional[str] = None
    patient_name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    mobile_no: Optional[str] = None
    gstin: Optional[str] = None
    road_permit: Optional[str] = None
    payment_mode: Optional[str] = None
    adjustment_percent: float = 0
    cgst: float = 0
    sgst: float = 0
    igst: float = 0
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CartLineResponse(BaseModel):
    id: int
    cart_id: int
    item_id: int
    hsn_code: Optional[str] = None
    addon_percent: Optional[float] = None
    selected_quantity: int
    selling_price: float
    total: float
    # From the joined item; None once the item has been deleted
    product_name: Optional[str] = None
    lot_no: Optional[str] = None
    cat_no: Optional[str] = None
    mrp: Optional[float] = None


class CartResponse(BaseModel):
    id: int
    invoice_id: int
    cart_total: float
    net_amount: float
    net_payable_amount: Optional[float] = None
    items: List[CartLineResponse]


class InvoiceDetail(BaseModel):
    invoice: InvoiceResponse
    cart: CartResponse


class InvoiceSummary(BaseModel):
    id: int
    invoice_no: str
    party_name: str
    created_at: Optional[datetime] = None
    payment_mode: Optional[str] = None
    net_payable: Optional[float] = None
