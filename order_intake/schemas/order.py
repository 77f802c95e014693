"""Order request/response schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class CustomerInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, coerce_numbers_to_str=True)

    name: str
    email: str
    phone: str | None = None
    address: str | None = None
    student_name: str | None = Field(None, alias="studentName")
    special_instructions: str | None = Field(None, alias="specialInstructions")


class LineItem(BaseModel):
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    name: str
    quantity: int
    price: Decimal
    # Trusted from the caller; never recomputed from quantity * price.
    subtotal: Decimal


class Order(BaseModel):
    """A validated order. Lives for one request only; never persisted."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    customer: CustomerInfo
    items: list[LineItem] = Field(..., min_length=1)
    total: Decimal
    order_date: datetime = Field(..., alias="orderDate")


class OrderRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    order: Order
    order_number: str


class OrderSubmitResponse(BaseModel):
    success: bool = True
    order_number: str = Field(..., serialization_alias="orderNumber")
    message: str = "Order submitted successfully"
