from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _Strict(BaseModel):
    # unknown keys are rejected instead of silently stored
    model_config = ConfigDict(extra="forbid")


# ======== Orders ========
class OrderIn(_Strict):
    item: str = Field(min_length=1, max_length=255)
    price: float = Field(ge=0)


class OrderOut(BaseModel):
    id: str
    item: str
    price: float


# ======== Customers ========
class CustomerIn(_Strict):
    name: str = Field(min_length=1, max_length=255)
    orders: list[str] = Field(default_factory=list, description="Order ids")


class CustomerOrderRef(_Strict):
    order_id: str


class CustomerOut(BaseModel):
    id: str
    name: str
    orders: list[str]


class CustomerPopulatedOut(BaseModel):
    id: str
    name: str
    # None only when unresolved slots are kept
    orders: list[Optional[OrderOut]]


# ======== Users / addresses ========
class AddressIn(_Strict):
    location: str = Field(min_length=1, max_length=255)
    city: str = Field(min_length=1, max_length=255)


class AddressOut(BaseModel):
    location: str
    city: str


class UserIn(_Strict):
    username: str = Field(min_length=1, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    addresses: list[AddressIn] = Field(default_factory=list)


class UserOut(BaseModel):
    id: str
    username: str
    email: Optional[str] = None
    addresses: list[AddressOut] = []


# ======== Posts ========
class PostIn(_Strict):
    content: str = Field(min_length=1)
    likes: int = Field(default=0, ge=0)


class PostOut(BaseModel):
    id: str
    content: str
    likes: int
    user: str


class PostPopulatedOut(BaseModel):
    id: str
    content: str
    likes: int
    user: Optional[UserOut] = None
