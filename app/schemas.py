"""
Pydantic Schemas for Request/Response Validation

Covers the menu catalog, order submission and the menu assistant. Field names
on the wire follow the web client (camelCase where the client sends or reads
camelCase, snake_case for persisted order rows).
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Any, List, Literal, Optional, Union
from datetime import datetime
from enum import Enum
import re

from app.models import MAX_ITEM_QUANTITY, MIN_ITEM_QUANTITY


# =============================================================================
# ENUMS
# =============================================================================

class MenuType(str, Enum):
    LIVE = "live"
    STATIC = "static"


def round_to_cents(price: float) -> float:
    """Round a price to cents; it must still be positive afterwards."""
    rounded = round(price, 2)
    if rounded <= 0:
        raise ValueError("Price must be at least 0.01")
    return rounded


# =============================================================================
# MENU
# =============================================================================

class MenuItem(BaseModel):
    """A dish on the menu, as served to the client and indexed for search."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Union[int, str]
    name: str = Field(..., min_length=1, max_length=200, examples=["Dragon Roll"])
    description: str = Field(default="", max_length=1000)
    price: float = Field(..., gt=0, examples=[14.99])
    image: str = Field(default="", max_length=1000)
    ingredients: Optional[str] = None
    category: Optional[str] = None
    dietary: List[str] = Field(default_factory=list)
    spice_level: Optional[int] = Field(None, ge=0, le=3, alias="spiceLevel")

    @field_validator("price")
    @classmethod
    def round_price(cls, v: float) -> float:
        return round_to_cents(v)

    @field_validator("dietary", mode="before")
    @classmethod
    def normalize_dietary(cls, v: Any) -> List[str]:
        """Dietary tags behave as a set: lower-cased, de-duplicated, order kept."""
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        tags: List[str] = []
        for tag in v:
            tag = str(tag).strip().lower()
            if tag and tag not in tags:
                tags.append(tag)
        return tags


# =============================================================================
# ORDER REQUEST SCHEMAS
# =============================================================================

class OrderItemCreate(BaseModel):
    """Single item in an order."""
    name: str = Field(..., min_length=1, max_length=200, examples=["Dragon Roll"])
    price: float = Field(..., gt=0, examples=[14.99])
    quantity: int = Field(..., ge=MIN_ITEM_QUANTITY, le=MAX_ITEM_QUANTITY, examples=[2])

    @field_validator("price")
    @classmethod
    def round_price(cls, v: float) -> float:
        return round_to_cents(v)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Item name is required")
        return v

    @property
    def subtotal(self) -> float:
        return round(self.price * self.quantity, 2)


class OrderCreate(BaseModel):
    """Request schema for creating a new order."""

    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(..., min_length=1, max_length=100, alias="firstName", examples=["Jane"])
    last_name: str = Field(..., min_length=1, max_length=100, alias="lastName", examples=["Doe"])
    phone: str = Field(..., max_length=20, examples=["(555) 123-4567"])
    credit_card: str = Field(..., max_length=23, alias="creditCard", examples=["4242 4242 4242 4242"])
    items: List[OrderItemCreate] = Field(..., min_length=1)
    total_price: float = Field(..., gt=0, alias="totalPrice", examples=[29.98])

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_names(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        cleaned = re.sub(r"[^\d]", "", v)
        if len(cleaned) != 10:
            raise ValueError("Phone number must be 10 digits")
        return v

    @field_validator("credit_card")
    @classmethod
    def validate_credit_card(cls, v: str) -> str:
        cleaned = re.sub(r"[^\d]", "", v)
        if not 13 <= len(cleaned) <= 16:
            raise ValueError("Credit card number must be 13-16 digits")
        return cleaned

    @model_validator(mode="after")
    def validate_total(self) -> "OrderCreate":
        expected = self.computed_total
        if round(abs(expected - self.total_price), 2) > 0.01:
            raise ValueError(
                f"totalPrice {self.total_price:.2f} does not match item total {expected:.2f}"
            )
        return self

    @property
    def computed_total(self) -> float:
        return round(sum(item.subtotal for item in self.items), 2)


# =============================================================================
# ORDER RESPONSE SCHEMAS
# =============================================================================

class OrderItemResponse(BaseModel):
    """A persisted order line."""
    id: int
    order_id: int
    item_name: str
    item_price: float
    quantity: int
    subtotal: float

    model_config = ConfigDict(from_attributes=True)


class OrderResponse(BaseModel):
    """Response schema for a single order with its items."""
    id: int
    first_name: str
    last_name: str
    phone: str
    payment_reference: str
    total_price: float
    created_at: Optional[datetime]
    items: List[OrderItemResponse]

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# ASSISTANT SCHEMAS
# =============================================================================

class SourceRef(BaseModel):
    """A menu item cited by an assistant answer."""
    id: Union[int, str]
    name: str
    price: float
    similarity: float


class RagAnswer(BaseModel):
    """Answer produced by the retrieval-augmented assistant."""
    answer: str
    sources: List[SourceRef] = Field(default_factory=list)


class ChatTurn(BaseModel):
    """One message of the conversation replayed by the client."""
    role: Literal["user", "assistant"]
    content: str


class AskRequest(BaseModel):
    question: str = Field(..., max_length=2000)


class ChatRequest(BaseModel):
    message: str = Field(..., max_length=2000)
    history: List[ChatTurn] = Field(default_factory=list)


class ToolUsage(BaseModel):
    tool: str
    sources: List[SourceRef] = Field(default_factory=list)


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    response: str
    tools_used: List[ToolUsage] = Field(default_factory=list, alias="toolsUsed")


class AssistantStatus(BaseModel):
    """Readiness of the assistant pieces."""
    model_config = ConfigDict(populate_by_name=True)

    agent: bool
    rag: bool
    vector_store: bool = Field(..., alias="vectorStore")


class ReindexResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    menu_type: MenuType = Field(..., alias="menuType")
    reindexed: bool
    indexed: int
    vector_store: bool = Field(..., alias="vectorStore")


# =============================================================================
# GENERIC RESPONSES
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[Any] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    timestamp: datetime
    error: Optional[str] = None
