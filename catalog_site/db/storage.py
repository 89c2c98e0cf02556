"""Storage interface shared by the in-memory and SQL backends.

Lookups of a missing id return ``None`` and deletes of a missing id return
``False``. Backends raise :class:`~catalog_site.core.errors.StorageFault` only
when the underlying persistence medium fails.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Type

from fastapi import Request
from pydantic import BaseModel

from catalog_site import schemas


class Storage(ABC):
    # Users

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[schemas.User]: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[schemas.User]: ...

    @abstractmethod
    def list_users(self) -> List[schemas.User]: ...

    @abstractmethod
    def create_user(self, data: schemas.UserCreate) -> schemas.User:
        """Hash the password and store a new user. Duplicate usernames raise ValidationError."""

    @abstractmethod
    def update_user(self, user_id: int, data: schemas.UserUpdate) -> Optional[schemas.User]: ...

    @abstractmethod
    def validate_user(self, username: str, password: str) -> Optional[schemas.User]:
        """Return the user when the credentials match, otherwise None."""

    # Categories

    @abstractmethod
    def list_categories(self) -> List[schemas.Category]: ...

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[schemas.Category]: ...

    @abstractmethod
    def create_category(self, data: schemas.CategoryCreate) -> schemas.Category: ...

    @abstractmethod
    def update_category(self, category_id: int, data: schemas.CategoryUpdate) -> Optional[schemas.Category]: ...

    @abstractmethod
    def delete_category(self, category_id: int) -> bool:
        """Remove the category only. Products keep their category_id."""

    # Products

    @abstractmethod
    def list_products(self) -> List[schemas.Product]: ...

    @abstractmethod
    def list_products_by_category(self, category_id: int) -> List[schemas.Product]: ...

    @abstractmethod
    def get_product(self, product_id: int) -> Optional[schemas.Product]: ...

    @abstractmethod
    def create_product(self, data: schemas.ProductCreate) -> schemas.Product: ...

    @abstractmethod
    def update_product(self, product_id: int, data: schemas.ProductUpdate) -> Optional[schemas.Product]: ...

    @abstractmethod
    def delete_product(self, product_id: int) -> bool: ...

    # Product images

    @abstractmethod
    def list_product_images(self, product_id: int) -> List[schemas.ProductImage]:
        """Images of one product sorted by ``order``."""

    @abstractmethod
    def get_product_image(self, image_id: int) -> Optional[schemas.ProductImage]: ...

    @abstractmethod
    def create_product_image(self, data: schemas.ProductImageCreate) -> schemas.ProductImage:
        """Store an image. A main image demotes the product's other images atomically."""

    @abstractmethod
    def update_product_image(
        self, image_id: int, data: schemas.ProductImageUpdate
    ) -> Optional[schemas.ProductImage]: ...

    @abstractmethod
    def delete_product_image(self, image_id: int) -> bool: ...

    # Hero images

    @abstractmethod
    def get_hero_images(self) -> List[schemas.HeroImage]:
        """Active hero images in ascending ``order``."""

    @abstractmethod
    def list_hero_images(self) -> List[schemas.HeroImage]:
        """All hero images, including inactive ones, in ascending ``order``."""

    @abstractmethod
    def get_hero_image(self, image_id: int) -> Optional[schemas.HeroImage]: ...

    @abstractmethod
    def create_hero_image(self, data: schemas.HeroImageCreate) -> schemas.HeroImage: ...

    @abstractmethod
    def update_hero_image(self, image_id: int, data: schemas.HeroImageUpdate) -> Optional[schemas.HeroImage]: ...

    @abstractmethod
    def delete_hero_image(self, image_id: int) -> bool: ...

    # Contact requests

    @abstractmethod
    def list_contact_requests(self) -> List[schemas.ContactRequest]: ...

    @abstractmethod
    def get_contact_request(self, request_id: int) -> Optional[schemas.ContactRequest]: ...

    @abstractmethod
    def create_contact_request(self, data: schemas.ContactRequestCreate) -> schemas.ContactRequest: ...

    @abstractmethod
    def update_contact_request_status(self, request_id: int, status: str) -> Optional[schemas.ContactRequest]: ...

    @abstractmethod
    def delete_contact_request(self, request_id: int) -> bool: ...

    # Settings

    @abstractmethod
    def get_setting(self, key: str) -> Optional[schemas.Setting]: ...

    @abstractmethod
    def list_settings(self) -> List[schemas.Setting]: ...

    @abstractmethod
    def upsert_setting(self, key: str, value: Optional[str]) -> schemas.Setting: ...


def merge_changes(data: BaseModel, entity_cls: Type[BaseModel]) -> Dict[str, Any]:
    """Fields explicitly sent in a partial update.

    An explicit null only clears fields whose stored default is None; it is
    ignored for required or non-null fields such as ``name`` or ``in_stock``.
    """
    changes = {}
    for name, value in data.model_dump(exclude_unset=True).items():
        field = entity_cls.model_fields.get(name)
        if field is None:
            continue
        if value is None and field.default is not None:
            continue
        changes[name] = value
    return changes


def sort_by_order(images):
    return sorted(images, key=lambda image: (image.order, image.id))


def get_storage(request: Request) -> Storage:
    return request.app.state.storage
