"""
Request schemas

Pydantic models for the bodies accepted by the API. Stored records are plain
dicts (one JSON array per collection, see database.py); these models only
describe and coerce what callers send. Required-ness of billing and product
fields is checked by pricing.py and catalog.py so that every missing field is
reported together.
"""

from pydantic import BaseModel, Field, EmailStr
from typing import Optional, List, Union

# Products

class ProductIn(BaseModel):
    name: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    featured: bool = False

class ProductUpdate(BaseModel):
    name: Optional[str] = None
    price: Optional[float] = None
    category: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    featured: Optional[bool] = None

# Orders

class OrderItemIn(BaseModel):
    id: Optional[int] = Field(None, description="Catalog product id")
    quantity: Optional[Union[int, float]] = Field(None, description="Units requested, positive integer")

class OrderCreate(BaseModel):
    email: Optional[EmailStr] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    zipCode: Optional[str] = None
    paymentMethod: Optional[str] = None
    items: List[OrderItemIn] = Field(default_factory=list)
    total: Optional[float] = Field(None, description="Client-declared total, checked against catalog prices")
    userId: Optional[int] = None

class StatusUpdate(BaseModel):
    status: Optional[str] = None

# Users

class RegisterInput(BaseModel):
    name: str
    email: EmailStr
    password: str = Field(..., min_length=6)

class LoginInput(BaseModel):
    email: EmailStr
    password: str

class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
