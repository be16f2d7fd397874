"""Pydantic request schemas for the catalogue API."""

from __future__ import annotations

from pydantic import BaseModel, Field

# --- Category Request Schemas ---


class CreateCategoryRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Running Shoes",
                    "parent_id": "3f2b1c9e-5d1a-4c55-9a41-1b2c3d4e5f60",
                    "description": "Road and trail running shoes.",
                    "icon": "shoe",
                    "color": "#1e88e5",
                    "sort_order": 2,
                    "featured": True,
                }
            ]
        }
    }

    name: str = Field(..., max_length=50)
    parent_id: str | None = None
    description: str | None = Field(None, max_length=500)
    icon: str | None = Field(None, max_length=50)
    color: str | None = Field(None, max_length=20)
    sort_order: int = 0
    featured: bool = False


class UpdateCategoryRequest(BaseModel):
    name: str | None = Field(None, max_length=50)
    description: str | None = Field(None, max_length=500)
    icon: str | None = Field(None, max_length=50)
    color: str | None = Field(None, max_length=20)
    sort_order: int | None = None
    featured: bool | None = None
    image: dict | None = None
    seo: dict | None = None


class MoveCategoryRequest(BaseModel):
    parent_id: str | None = None


# --- Product Request Schemas ---


class InventoryRequest(BaseModel):
    quantity: int = Field(0, ge=0)
    low_stock_threshold: int = Field(10, ge=0)
    track_quantity: bool = True
    allow_backorder: bool = False
    max_order_quantity: int | None = Field(None, ge=1)


class CreateProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Trail Runner 2",
                    "description": "Lightweight trail shoe with a grippy outsole.",
                    "category_id": "3f2b1c9e-5d1a-4c55-9a41-1b2c3d4e5f60",
                    "brand": "Acme",
                    "price": 89.99,
                    "compare_at_price": 119.99,
                    "sku": "TR2-BLK-42",
                    "inventory": {"quantity": 40, "low_stock_threshold": 5},
                    "tags": ["running", "trail"],
                }
            ]
        }
    }

    name: str = Field(..., max_length=100)
    description: str = Field(..., max_length=2000)
    short_description: str | None = Field(None, max_length=200)
    category_id: str
    subcategory_id: str | None = None
    brand: str = Field(..., max_length=100)
    vendor_id: str | None = None
    price: float = Field(..., ge=0)
    compare_at_price: float | None = Field(None, ge=0)
    cost_price: float | None = Field(None, ge=0)
    currency: str | None = Field(None, max_length=3)
    sku: str | None = Field(None, max_length=64)
    barcode: str | None = Field(None, max_length=64)
    inventory: InventoryRequest | None = None
    tags: list[str] | None = None
    featured: bool = False


class UpdateProductDetailsRequest(BaseModel):
    name: str | None = Field(None, max_length=100)
    description: str | None = Field(None, max_length=2000)
    short_description: str | None = Field(None, max_length=200)
    brand: str | None = Field(None, max_length=100)
    subcategory_id: str | None = None
    tags: list[str] | None = None
    featured: bool | None = None
    seo: dict | None = None


class ChangePriceRequest(BaseModel):
    price: float = Field(..., ge=0)
    compare_at_price: float | None = Field(None, ge=0)
    cost_price: float | None = Field(None, ge=0)


class AdjustStockRequest(BaseModel):
    delta: int
    reason: str | None = Field(None, max_length=100)


class AddProductImageRequest(BaseModel):
    url: str = Field(..., max_length=500)
    alt: str | None = Field(None, max_length=255)
    is_primary: bool = False
