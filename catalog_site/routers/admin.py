import logging
from typing import List

from fastapi import APIRouter, Depends, status

from catalog_site import schemas
from catalog_site.core.errors import NotFoundError, ValidationError
from catalog_site.core.permissions import (
    ProtectedAccount,
    ensure_can_manage_account,
    get_protected_account,
    require_super_admin,
    require_user,
)
from catalog_site.db.storage import Storage, get_storage

router = APIRouter(prefix="/api/admin", tags=["Admin"])
logger = logging.getLogger("catalog_site.admin")


def _summary(user: schemas.User) -> schemas.UserSummary:
    return schemas.UserSummary(id=user.id, username=user.username, role=user.role, created_at=user.created_at)


def _deleted(message: str) -> schemas.MessageResponse:
    return schemas.MessageResponse(message=message)


# Categories


@router.post("/categories", response_model=schemas.Category, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: schemas.CategoryCreate,
    admin: schemas.User = Depends(require_user),
    storage: Storage = Depends(get_storage),
):
    category = storage.create_category(payload)
    logger.info("category_created", extra={"category_id": category.id, "admin_id": admin.id})
    return category


@router.put("/categories/{category_id}", response_model=schemas.Category)
def update_category(
    category_id: int,
    payload: schemas.CategoryUpdate,
    admin: schemas.User = Depends(require_user),
    storage: Storage = Depends(get_storage),
):
    category = storage.update_category(category_id, payload)
    if not category:
        raise NotFoundError("Category not found")
    logger.info("category_updated", extra={"category_id": category_id, "admin_id": admin.id})
    return category


@router.delete("/categories/{category_id}", response_model=schemas.MessageResponse)
def delete_category(
    category_id: int,
    admin: schemas.User = Depends(require_user),
    storage: Storage = Depends(get_storage),
):
    if not storage.delete_category(category_id):
        raise NotFoundError("Category not found")
    logger.info("category_deleted", extra={"category_id": category_id, "admin_id": admin.id})
    return _deleted("Category deleted successfully")


# Products


@router.post("/products", response_model=schemas.Product, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: schemas.ProductCreate,
    admin: schemas.User = Depends(require_user),
    storage: Storage = Depends(get_storage),
):
    product = storage.create_product(payload)
    logger.info("product_created", extra={"product_id": product.id, "admin_id": admin.id})
    return product


@router.put("/products/{product_id}", response_model=schemas.Product)
def update_product(
    product_id: int,
    payload: schemas.ProductUpdate,
    admin: schemas.User = Depends(require_user),
    storage: Storage = Depends(get_storage),
):
    product = storage.update_product(product_id, payload)
    if not product:
        raise NotFoundError("Product not found")
    logger.info("product_updated", extra={"product_id": product_id, "admin_id": admin.id})
    return product


@router.delete("/products/{product_id}", response_model=schemas.MessageResponse)
def delete_product(
    product_id: int,
    admin: schemas.User = Depends(require_user),
    storage: Storage = Depends(get_storage),
):
    if not storage.delete_product(product_id):
        raise NotFoundError("Product not found")
    logger.info("product_deleted", extra={"product_id": product_id, "admin_id": admin.id})
    return _deleted("Product deleted successfully")


# Product images


@router.post("/product-images", response_model=schemas.ProductImage, status_code=status.HTTP_201_CREATED)
def create_product_image(
    payload: schemas.ProductImageCreate,
    admin: schemas.User = Depends(require_user),
    storage: Storage = Depends(get_storage),
):
    image = storage.create_product_image(payload)
    logger.info(
        "product_image_created",
        extra={"image_id": image.id, "product_id": image.product_id, "is_main": image.is_main, "admin_id": admin.id},
    )
    return image


@router.put("/product-images/{image_id}", response_model=schemas.ProductImage)
def update_product_image(
    image_id: int,
    payload: schemas.ProductImageUpdate,
    admin: schemas.User = Depends(require_user),
    storage: Storage = Depends(get_storage),
):
    image = storage.update_product_image(image_id, payload)
    if not image:
        raise NotFoundError("Image not found")
    logger.info("product_image_updated", extra={"image_id": image_id, "admin_id": admin.id})
    return image


@router.delete("/product-images/{image_id}", response_model=schemas.MessageResponse)
def delete_product_image(
    image_id: int,
    admin: schemas.User = Depends(require_user),
    storage: Storage = Depends(get_storage),
):
    if not storage.delete_product_image(image_id):
        raise NotFoundError("Image not found")
    logger.info("product_image_deleted", extra={"image_id": image_id, "admin_id": admin.id})
    return _deleted("Product image deleted successfully")


# Hero images


@router.get("/hero-images", response_model=List[schemas.HeroImage])
def list_hero_images(
    admin: schemas.User = Depends(require_user),
    storage: Storage = Depends(get_storage),
):
    return storage.list_hero_images()


@router.post("/hero-images", response_model=schemas.HeroImage, status_code=status.HTTP_201_CREATED)
def create_hero_image(
    payload: schemas.HeroImageCreate,
    admin: schemas.User = Depends(require_user),
    storage: Storage = Depends(get_storage),
):
    image = storage.create_hero_image(payload)
    logger.info("hero_image_created", extra={"hero_image_id": image.id, "admin_id": admin.id})
    return image


@router.put("/hero-images/{image_id}", response_model=schemas.HeroImage)
def update_hero_image(
    image_id: int,
    payload: schemas.HeroImageUpdate,
    admin: schemas.User = Depends(require_user),
    storage: Storage = Depends(get_storage),
):
    image = storage.update_hero_image(image_id, payload)
    if not image:
        raise NotFoundError("Hero image not found")
    logger.info("hero_image_updated", extra={"hero_image_id": image_id, "admin_id": admin.id})
    return image


@router.delete("/hero-images/{image_id}", response_model=schemas.MessageResponse)
def delete_hero_image(
    image_id: int,
    admin: schemas.User = Depends(require_user),
    storage: Storage = Depends(get_storage),
):
    if not storage.delete_hero_image(image_id):
        raise NotFoundError("Hero image not found")
    logger.info("hero_image_deleted", extra={"hero_image_id": image_id, "admin_id": admin.id})
    return _deleted("Hero image deleted successfully")


# Contact requests


@router.get("/contact-requests", response_model=List[schemas.ContactRequest])
def list_contact_requests(
    admin: schemas.User = Depends(require_user),
    storage: Storage = Depends(get_storage),
):
    return storage.list_contact_requests()


@router.put("/contact-requests/{request_id}/status", response_model=schemas.ContactRequest)
def update_contact_request_status(
    request_id: int,
    payload: schemas.ContactStatusUpdate,
    admin: schemas.User = Depends(require_user),
    storage: Storage = Depends(get_storage),
):
    if payload.status not in schemas.CONTACT_STATUSES:
        raise ValidationError("Invalid status value")
    contact = storage.update_contact_request_status(request_id, payload.status)
    if not contact:
        raise NotFoundError("Contact request not found")
    logger.info(
        "contact_request_status_updated",
        extra={"contact_request_id": request_id, "status": payload.status, "admin_id": admin.id},
    )
    return contact


@router.delete("/contact-requests/{request_id}", response_model=schemas.MessageResponse)
def delete_contact_request(
    request_id: int,
    admin: schemas.User = Depends(require_user),
    storage: Storage = Depends(get_storage),
):
    if not storage.delete_contact_request(request_id):
        raise NotFoundError("Contact request not found")
    logger.info("contact_request_deleted", extra={"contact_request_id": request_id, "admin_id": admin.id})
    return _deleted("Contact request deleted successfully")


# Settings


@router.get("/settings", response_model=List[schemas.Setting])
def list_settings(
    admin: schemas.User = Depends(require_user),
    storage: Storage = Depends(get_storage),
):
    return storage.list_settings()


@router.post("/settings", response_model=schemas.Setting, status_code=status.HTTP_201_CREATED)
def upsert_setting(
    payload: schemas.SettingUpsert,
    admin: schemas.User = Depends(require_user),
    storage: Storage = Depends(get_storage),
):
    setting = storage.upsert_setting(payload.key, payload.value)
    logger.info("setting_upserted", extra={"key": payload.key, "admin_id": admin.id})
    return setting


# Users (super admins only)


@router.get("/users", response_model=List[schemas.UserSummary])
def list_users(
    admin: schemas.User = Depends(require_super_admin),
    storage: Storage = Depends(get_storage),
):
    return [_summary(user) for user in storage.list_users()]


@router.post("/users", response_model=schemas.UserSummary, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: schemas.UserCreate,
    admin: schemas.User = Depends(require_super_admin),
    protected: ProtectedAccount = Depends(get_protected_account),
    storage: Storage = Depends(get_storage),
):
    ensure_can_manage_account(admin, protected, target_username=payload.username)
    if storage.get_user_by_username(payload.username):
        raise ValidationError("Username already exists")
    user = storage.create_user(payload)
    logger.info("user_created", extra={"user_id": user.id, "role": user.role, "admin_id": admin.id})
    return _summary(user)


@router.put("/users/{user_id}", response_model=schemas.UserSummary)
def update_user(
    user_id: int,
    payload: schemas.UserUpdate,
    admin: schemas.User = Depends(require_super_admin),
    protected: ProtectedAccount = Depends(get_protected_account),
    storage: Storage = Depends(get_storage),
):
    target = storage.get_user(user_id)
    ensure_can_manage_account(admin, protected, target_id=user_id, target_username=target.username if target else None)
    if not target:
        raise NotFoundError("User not found")
    user = storage.update_user(user_id, payload)
    if not user:
        raise NotFoundError("User not found")
    logger.info("user_updated", extra={"user_id": user_id, "admin_id": admin.id})
    return _summary(user)
