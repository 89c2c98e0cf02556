import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, status

from catalog_site import schemas
from catalog_site.core.config import get_app_settings
from catalog_site.core.email import notify_contact_request
from catalog_site.core.errors import NotFoundError
from catalog_site.db.storage import Storage, get_storage

router = APIRouter(prefix="/api", tags=["Site"])
logger = logging.getLogger("catalog_site.site")


def _category_ref(category: Optional[schemas.Category]) -> Optional[schemas.CategoryRef]:
    if not category:
        return None
    return schemas.CategoryRef(id=category.id, name=category.name)


def _main_image_url(images: List[schemas.ProductImage]) -> Optional[str]:
    if not images:
        return None
    main = next((image for image in images if image.is_main), images[0])
    return main.image_url


@router.get("/categories", response_model=List[schemas.Category])
def list_categories(storage: Storage = Depends(get_storage)):
    return storage.list_categories()


@router.get("/categories/{category_id}", response_model=schemas.Category)
def get_category(category_id: int, storage: Storage = Depends(get_storage)):
    category = storage.get_category(category_id)
    if not category:
        raise NotFoundError("Category not found")
    return category


@router.get("/products", response_model=List[schemas.ProductListItem])
def list_products(
    category_id: Optional[int] = Query(None, alias="categoryId"),
    storage: Storage = Depends(get_storage),
):
    if category_id:
        products = storage.list_products_by_category(category_id)
    else:
        products = storage.list_products()

    categories: Dict[int, schemas.Category] = {category.id: category for category in storage.list_categories()}
    items = []
    for product in products:
        category = categories.get(product.category_id) if product.category_id is not None else None
        items.append(
            schemas.ProductListItem(
                **product.model_dump(),
                category=_category_ref(category),
                main_image=_main_image_url(storage.list_product_images(product.id)),
            )
        )
    return items


@router.get("/products/{product_id}", response_model=schemas.ProductDetail)
def get_product(product_id: int, storage: Storage = Depends(get_storage)):
    product = storage.get_product(product_id)
    if not product:
        raise NotFoundError("Product not found")

    category = storage.get_category(product.category_id) if product.category_id is not None else None
    return schemas.ProductDetail(
        **product.model_dump(),
        category=_category_ref(category),
        images=storage.list_product_images(product.id),
    )


@router.get("/hero-images", response_model=List[schemas.HeroImage])
def list_hero_images(storage: Storage = Depends(get_storage)):
    return storage.get_hero_images()


@router.get("/settings", response_model=Dict[str, Optional[str]])
def site_settings(storage: Storage = Depends(get_storage)):
    return {setting.key: setting.value for setting in storage.list_settings()}


@router.post("/contact", response_model=schemas.ContactRequest, status_code=status.HTTP_201_CREATED)
def submit_contact(
    request: Request,
    payload: schemas.ContactRequestCreate,
    background_tasks: BackgroundTasks,
    storage: Storage = Depends(get_storage),
):
    contact = storage.create_contact_request(payload)
    logger.info("contact_request_created", extra={"contact_request_id": contact.id})
    background_tasks.add_task(notify_contact_request, get_app_settings(request), contact)
    return contact
