"""Pydantic request schemas for the carts and orders API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

# --- Cart Request Schemas ---


class VariantRequest(BaseModel):
    name: str | None = Field(None, max_length=50)
    option: str | None = Field(None, max_length=50)


class AddToCartRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "8c1d6a4e-2f0b-4b7e-9d8a-0f1e2d3c4b5a",
                    "quantity": 2,
                    "variant": {"name": "Size", "option": "42"},
                }
            ]
        }
    }

    product_id: str
    quantity: int = Field(1, ge=1)
    variant: VariantRequest | None = None


class UpdateCartItemRequest(BaseModel):
    quantity: int


class ApplyDiscountRequest(BaseModel):
    code: str = Field(..., max_length=50)
    amount: float = Field(..., ge=0)
    type: str = Field("fixed", max_length=20)


class SetShippingRequest(BaseModel):
    cost: float = Field(..., ge=0)
    method: str | None = Field(None, max_length=50)


class SetTaxRequest(BaseModel):
    amount: float = Field(..., ge=0)


class AddressRequest(BaseModel):
    name: str = Field(..., max_length=100)
    email: str = Field(..., max_length=254)
    phone: str | None = Field(None, max_length=20)
    street: str = Field(..., max_length=255)
    city: str = Field(..., max_length=100)
    state: str = Field(..., max_length=100)
    zip_code: str = Field(..., max_length=20)
    country: str = Field(..., max_length=100)


class MergeCartsRequest(BaseModel):
    session_id: str = Field(..., max_length=255)


# --- Order Request Schemas ---


class PlaceOrderRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "payment_method": "credit_card",
                    "shipping_address": {
                        "name": "Jane Doe",
                        "email": "jane@example.com",
                        "street": "123 Main St",
                        "city": "Springfield",
                        "state": "IL",
                        "zip_code": "62701",
                        "country": "US",
                    },
                    "shipping_method": "express",
                    "customer_note": "Leave at the back door",
                }
            ]
        }
    }

    payment_method: str = Field(..., max_length=30)
    shipping_address: AddressRequest
    billing_address: AddressRequest | None = None
    shipping_method: str | None = Field(None, max_length=50)
    customer_note: str | None = Field(None, max_length=1000)
    source: str | None = Field(None, max_length=10)


class UpdateOrderStatusRequest(BaseModel):
    status: str = Field(..., max_length=20)
    note: str | None = Field(None, max_length=500)


class CancelOrderRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


class RefundOrderRequest(BaseModel):
    amount: float | None = Field(None, ge=0)
    reason: str | None = Field(None, max_length=500)


class RecordPaymentRequest(BaseModel):
    transaction_id: str = Field(..., max_length=255)
    gateway: str | None = Field(None, max_length=50)
    payment_intent_id: str | None = Field(None, max_length=255)


class PaymentFailureRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


class AddTrackingRequest(BaseModel):
    carrier: str = Field(..., max_length=100)
    tracking_number: str = Field(..., max_length=255)
    estimated_delivery: datetime | None = None
