"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands. Payment request fields are optional here so that
missing values reach the command layer and come back as 400 responses with
a message, not as schema errors.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class OrderItemSchema(BaseModel):
    product_id: str
    name: str
    quantity: int = Field(ge=1)
    unit_price: float = Field(ge=0)
    image: str | None = None


class ShippingAddressSchema(BaseModel):
    line1: str
    line2: str | None = None
    city: str
    state: str | None = None
    postal_code: str
    country: str


class PaymentResultSchema(BaseModel):
    id: str | None = None
    order_id: str | None = None
    status: str | None = None
    update_time: datetime | None = None
    email_address: str | None = None


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    items: list[OrderItemSchema]
    shipping_address: ShippingAddressSchema
    payment_method: str = "COD"
    order_code: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [
                        {
                            "product_id": "6f1c2b9e-7d1a-4f7e-9a51-0c8e2f6b1a11",
                            "name": "Wireless Mouse",
                            "quantity": 2,
                            "unit_price": 499.5,
                        }
                    ],
                    "shipping_address": {
                        "line1": "12 MG Road",
                        "city": "Bengaluru",
                        "state": "KA",
                        "postal_code": "560001",
                        "country": "IN",
                    },
                    "payment_method": "Online",
                }
            ]
        }
    }


# ---------------------------------------------------------------------------
# Payment Request Schemas
# ---------------------------------------------------------------------------
class CreateGatewayOrderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    amount: float | None = None
    order_id: str | None = Field(default=None, alias="orderId")


class VerifyPaymentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    razorpay_order_id: str | None = None
    razorpay_payment_id: str | None = None
    razorpay_signature: str | None = None
    order_id: str | None = Field(default=None, alias="orderId")


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class OrderIdResponse(BaseModel):
    success: bool = True
    order_id: str


class OrderResponse(BaseModel):
    id: str
    order_code: str
    status: str
    customer_id: str
    items: list[OrderItemSchema]
    shipping_address: ShippingAddressSchema | None = None
    payment_method: str
    payment_result: PaymentResultSchema | None = None
    items_price: float
    tax_price: float
    shipping_price: float
    total_price: float
    paid: bool
    paid_at: datetime | None = None
    delivered: bool
    delivered_at: datetime | None = None
    returned: bool
    returned_at: datetime | None = None
    created_at: datetime | None = None
    delivery_countdown_seconds: float | None = None


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]


class GatewayOrderSchema(BaseModel):
    id: str
    amount: int
    currency: str


class GatewayOrderResponse(BaseModel):
    success: bool = True
    order: GatewayOrderSchema
    key: str | None = None


class PaidOrderSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    order_code: str | None = Field(default=None, alias="orderId")
    paid: bool
    paid_at: datetime | None = Field(default=None, alias="paidAt")


class VerifyPaymentResponse(BaseModel):
    success: bool = True
    message: str = "Payment verified successfully"
    order: PaidOrderSchema


class GatewayConfigStatusResponse(BaseModel):
    gateway: str
    key_id: str
    key_secret: str
