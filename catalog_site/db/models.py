from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, func
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class CreatedAtMixin:
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)


class User(Base, CreatedAtMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), nullable=False, unique=True)
    password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="manager")


class Category(Base, CreatedAtMixin):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(160), nullable=False)
    description = Column(Text, nullable=True)
    image = Column(Text, nullable=True)


class Product(Base, CreatedAtMixin):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(160), nullable=False)
    description = Column(Text, nullable=True)
    # soft reference: deleting a category leaves its products in place
    category_id = Column(Integer, nullable=True, index=True)
    specifications = Column(Text, nullable=True)
    in_stock = Column(Boolean, nullable=False, default=True)
    discount = Column(Integer, nullable=False, default=0)


class ProductImage(Base):
    __tablename__ = "product_images"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, nullable=False, index=True)
    image_url = Column(Text, nullable=False)
    is_main = Column(Boolean, nullable=False, default=False)
    order = Column(Integer, nullable=False, default=0)


class HeroImage(Base):
    __tablename__ = "hero_images"

    id = Column(Integer, primary_key=True, index=True)
    image_url = Column(Text, nullable=False)
    title = Column(String(255), nullable=True)
    subtitle = Column(Text, nullable=True)
    button_text = Column(String(120), nullable=True)
    button_link = Column(String(255), nullable=True)
    order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)


class ContactRequest(Base, CreatedAtMixin):
    __tablename__ = "contact_requests"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(160), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(40), nullable=False)
    message = Column(Text, nullable=True)
    request_call_back = Column(Boolean, nullable=False, default=False)
    status = Column(String(20), nullable=False, default="new")


class Setting(Base):
    __tablename__ = "settings"

    key = Column(String(120), primary_key=True)
    value = Column(Text, nullable=True)
