from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

UserRole = Literal["super_admin", "manager"]
ContactStatus = Literal["new", "processing", "completed", "archived"]
CONTACT_STATUSES = ("new", "processing", "completed", "archived")


class CamelModel(BaseModel):
    """Snake_case attributes in Python, camelCase on the wire and on disk."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Users


class User(CamelModel):
    id: int
    username: str
    password: str
    role: UserRole = "manager"
    created_at: Optional[datetime] = None


class UserPublic(CamelModel):
    id: int
    username: str
    role: UserRole


class UserSummary(UserPublic):
    created_at: Optional[datetime] = None


class UserCreate(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8)
    role: UserRole = "manager"


class UserUpdate(CamelModel):
    password: Optional[str] = Field(default=None, min_length=8)
    role: Optional[UserRole] = None


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserEnvelope(BaseModel):
    user: UserPublic


# Catalog


class Category(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    image: Optional[str] = None
    created_at: Optional[datetime] = None


class CategoryCreate(CamelModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    image: Optional[str] = None


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    image: Optional[str] = None


class CategoryRef(CamelModel):
    id: int
    name: str


class Product(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    category_id: Optional[int] = None
    specifications: Optional[str] = None
    in_stock: bool = True
    discount: int = 0
    created_at: Optional[datetime] = None


class ProductCreate(CamelModel):
    name: str = Field(..., min_length=1)
    description: str
    category_id: Optional[int] = None
    specifications: Optional[str] = None
    in_stock: bool = True
    discount: int = Field(default=0, ge=0, le=100)


class ProductUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    category_id: Optional[int] = None
    specifications: Optional[str] = None
    in_stock: Optional[bool] = None
    discount: Optional[int] = Field(default=None, ge=0, le=100)


class ProductImage(CamelModel):
    id: int
    product_id: int
    image_url: str
    is_main: bool = False
    order: int = 0


class ProductImageCreate(CamelModel):
    product_id: int
    image_url: str = Field(..., min_length=1)
    is_main: bool = False
    order: int = 0


class ProductImageUpdate(CamelModel):
    image_url: Optional[str] = Field(default=None, min_length=1)
    is_main: Optional[bool] = None
    order: Optional[int] = None


class ProductListItem(Product):
    category: Optional[CategoryRef] = None
    main_image: Optional[str] = None


class ProductDetail(Product):
    category: Optional[CategoryRef] = None
    images: List[ProductImage] = Field(default_factory=list)


class HeroImage(CamelModel):
    id: int
    image_url: str
    title: Optional[str] = None
    subtitle: Optional[str] = None
    button_text: Optional[str] = None
    button_link: Optional[str] = None
    order: int = 0
    is_active: bool = True


class HeroImageCreate(CamelModel):
    image_url: str = Field(..., min_length=1)
    title: Optional[str] = None
    subtitle: Optional[str] = None
    button_text: Optional[str] = None
    button_link: Optional[str] = None
    order: int = 0
    is_active: bool = True


class HeroImageUpdate(CamelModel):
    image_url: Optional[str] = Field(default=None, min_length=1)
    title: Optional[str] = None
    subtitle: Optional[str] = None
    button_text: Optional[str] = None
    button_link: Optional[str] = None
    order: Optional[int] = None
    is_active: Optional[bool] = None


# Inbox and settings


class ContactRequest(CamelModel):
    id: int
    name: str
    email: str
    phone: str
    message: Optional[str] = None
    request_call_back: bool = False
    status: ContactStatus = "new"
    created_at: Optional[datetime] = None


class ContactRequestCreate(CamelModel):
    name: str = Field(..., min_length=2)
    email: EmailStr
    phone: str = Field(..., min_length=10)
    message: Optional[str] = None
    request_call_back: bool = False


class ContactStatusUpdate(BaseModel):
    status: str


class Setting(CamelModel):
    key: str
    value: Optional[str] = None


class SettingUpsert(CamelModel):
    key: str = Field(..., min_length=1)
    value: Optional[str] = None


class MessageResponse(BaseModel):
    message: str
