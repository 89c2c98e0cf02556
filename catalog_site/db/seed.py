import logging
from typing import Optional, Tuple

from catalog_site import schemas
from catalog_site.db.storage import Storage

logger = logging.getLogger("catalog_site.seed")

DEFAULT_SETTINGS = {
    "company_name": "Catalog Site",
    "company_tagline": "Chemicals & Compound Dealers",
    "company_address": "",
    "company_phone": "",
    "company_email": "",
    "company_hours": "Monday - Saturday: 9:00 AM - 6:00 PM",
    "company_delivery": "Nationwide Delivery Available",
    "social_whatsapp": "",
    "social_whatsapp_link": "",
    "google_maps_url": "",
}

DEFAULT_HERO_IMAGES = [
    schemas.HeroImageCreate(
        image_url="https://images.unsplash.com/photo-1603126857599-f6e157fa2fe6",
        title="Quality Chemicals & Compounds",
        subtitle="Your trusted partner for industrial chemicals.",
        button_text="Explore Products",
        button_link="/products",
        order=0,
    ),
    schemas.HeroImageCreate(
        image_url="https://images.unsplash.com/photo-1532187863486-abf9dbad1b69",
        title="Industrial Chemical Solutions",
        subtitle="Premium quality chemicals for manufacturing and industrial applications.",
        button_text="View Products",
        button_link="/products",
        order=1,
    ),
    schemas.HeroImageCreate(
        image_url="https://images.unsplash.com/photo-1581093196277-9f608af9db55",
        title="Nationwide Delivery",
        subtitle="Fast and reliable shipping.",
        button_text="Contact Us",
        button_link="/contact",
        order=2,
    ),
]


def seed_default_content(storage: Storage) -> None:
    """Populate settings and the hero carousel, leaving existing content alone."""
    existing = {setting.key for setting in storage.list_settings()}
    missing = {key: value for key, value in DEFAULT_SETTINGS.items() if key not in existing}
    for key, value in missing.items():
        storage.upsert_setting(key, value)

    hero_created = 0
    if not storage.list_hero_images():
        for image in DEFAULT_HERO_IMAGES:
            storage.create_hero_image(image)
            hero_created += 1

    if missing or hero_created:
        logger.info("default_content_seeded", extra={"settings": len(missing), "hero_images": hero_created})


def ensure_user(
    storage: Storage,
    username: str,
    password: Optional[str],
    role: schemas.UserRole = "super_admin",
) -> Tuple[schemas.User, bool]:
    """Create the user, or refresh its password and role when it already exists.

    Returns the user and a flag indicating whether it was newly created.
    """
    user = storage.get_user_by_username(username)
    if user:
        if password:
            changes = schemas.UserUpdate(role=role, password=password)
        else:
            changes = schemas.UserUpdate(role=role)
        return storage.update_user(user.id, changes), False

    if not password:
        raise ValueError("A password is required when creating a new user.")

    user = storage.create_user(schemas.UserCreate(username=username, password=password, role=role))
    logger.info("user_seeded", extra={"user_id": user.id, "role": role})
    return user, True
