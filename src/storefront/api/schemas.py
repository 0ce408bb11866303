"""Pydantic request/response schemas for the storefront API."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from storefront.catalogue.product import MAX_PRICE

# --- Request Schemas ---


class SignInRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"email": "jane.doe@example.com", "password": "s3cret-pass"}]}}

    email: str = Field(..., max_length=254)
    password: str = Field(..., max_length=72)


class SignUpRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [{"email": "jane.doe@example.com", "password": "s3cret-pass", "full_name": "Jane Doe"}]
        }
    }

    email: str = Field(..., max_length=254)
    password: str = Field(..., max_length=72)
    full_name: str = Field(..., max_length=255)


class AddToCartRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"product_id": "8f0c6d2e-4b1a-4c55-9d1e-2f3a4b5c6d7e"}]}}

    product_id: str = Field(..., max_length=255)


class ProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Trail Running Shoes",
                    "description": "Lightweight shoes with a grippy outsole",
                    "price": 89.99,
                    "stock_quantity": 25,
                    "category": "Footwear",
                    "image_url": "https://cdn.example.com/shoes.jpg",
                }
            ]
        }
    }

    name: str = Field(..., max_length=255)
    description: str = Field(...)
    price: float = Field(..., ge=0, le=MAX_PRICE, allow_inf_nan=False)
    stock_quantity: int = Field(..., ge=0)
    category: str = Field(..., max_length=100)
    image_url: str = Field("", max_length=500)


# --- Response Schemas ---


class StatusResponse(BaseModel):
    status: str = "ok"


class NavigationResponse(BaseModel):
    path: str
    delay_seconds: float = 0.0
    message: str | None = None


class UserResponse(BaseModel):
    id: str
    email: str
    full_name: str | None = None
    role: str
    role_label: str


class SessionResponse(BaseModel):
    user: UserResponse | None = None
    home_route: str


class ProductResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    price: float
    stock_quantity: int
    category: str | None = None
    image_url: str | None = None


class ProductIdResponse(BaseModel):
    product_id: str


class CartLineResponse(BaseModel):
    product_id: str
    name: str | None = None
    quantity: int
    line_total: Decimal


class CartResponse(BaseModel):
    lines: list[CartLineResponse] = []
    item_count: int = 0
    total: Decimal = Decimal("0.00")


class CatalogResponse(BaseModel):
    products: list[ProductResponse]
    categories: list[str]
    search_term: str = ""
    category: str = ""
    cart: CartResponse


class CheckoutResponse(BaseModel):
    state: str
    cart: dict[str, int] = {}
    total: Decimal | None = None
    order_id: str | None = None
    success: str | None = None
    redirect: NavigationResponse | None = None


class OrderItemResponse(BaseModel):
    product_id: str
    quantity: int
    price_at_purchase: Decimal
    line_total: Decimal


class OrderResponse(BaseModel):
    id: str
    total_amount: Decimal
    status: str
    created_at: datetime | None = None
    items: list[OrderItemResponse] = []
