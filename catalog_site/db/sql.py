import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional, Type

from pydantic import BaseModel
from sqlalchemy import inspect, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from catalog_site import schemas
from catalog_site.core.errors import StorageFault, ValidationError
from catalog_site.core.security import dummy_verify, hash_password, verify_password
from catalog_site.db import models
from catalog_site.db.storage import Storage, merge_changes

logger = logging.getLogger("catalog_site.storage")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Any) -> Any:
    # SQLite drops the offset of DateTime(timezone=True) columns; values are always stored as UTC.
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_entity(entity_cls: Type[BaseModel], row: Any) -> Any:
    values = {attr.key: _as_utc(getattr(row, attr.key)) for attr in inspect(row).mapper.column_attrs}
    return entity_cls.model_validate(values)


class SqlStorage(Storage):
    """SQLAlchemy-backed storage. Each operation runs in its own session and transaction."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("storage_query_failed")
            raise StorageFault(f"Database error: {exc}") from exc
        finally:
            session.close()

    # Generic helpers

    def _all(self, model, entity_cls, *criteria, order_by=None) -> List[Any]:
        stmt = select(model).where(*criteria)
        stmt = stmt.order_by(*order_by) if order_by is not None else stmt.order_by(model.id)
        with self._session() as session:
            return [_to_entity(entity_cls, row) for row in session.scalars(stmt).all()]

    def _get(self, model, entity_cls, entity_id) -> Optional[Any]:
        with self._session() as session:
            row = session.get(model, entity_id)
            return _to_entity(entity_cls, row) if row else None

    def _insert(self, model, entity_cls, values: Dict[str, Any]) -> Any:
        with self._session() as session:
            row = model(**values)
            session.add(row)
            session.commit()
            session.refresh(row)
            return _to_entity(entity_cls, row)

    def _update(self, model, entity_cls, entity_id, changes: Dict[str, Any]) -> Optional[Any]:
        with self._session() as session:
            row = session.get(model, entity_id)
            if row is None:
                return None
            for key, value in changes.items():
                setattr(row, key, value)
            session.commit()
            session.refresh(row)
            return _to_entity(entity_cls, row)

    def _delete(self, model, entity_id) -> bool:
        with self._session() as session:
            row = session.get(model, entity_id)
            if row is None:
                return False
            session.delete(row)
            session.commit()
            return True

    # Users

    def get_user(self, user_id: int) -> Optional[schemas.User]:
        return self._get(models.User, schemas.User, user_id)

    def get_user_by_username(self, username: str) -> Optional[schemas.User]:
        with self._session() as session:
            row = session.scalars(select(models.User).where(models.User.username == username)).first()
            return _to_entity(schemas.User, row) if row else None

    def list_users(self) -> List[schemas.User]:
        return self._all(models.User, schemas.User)

    def create_user(self, data: schemas.UserCreate) -> schemas.User:
        row = models.User(
            username=data.username,
            password=hash_password(data.password),
            role=data.role,
            created_at=_utcnow(),
        )
        with self._session() as session:
            session.add(row)
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                raise ValidationError("Username already exists")
            session.refresh(row)
            return _to_entity(schemas.User, row)

    def update_user(self, user_id: int, data: schemas.UserUpdate) -> Optional[schemas.User]:
        changes = merge_changes(data, schemas.User)
        if "password" in changes:
            changes["password"] = hash_password(changes["password"])
        return self._update(models.User, schemas.User, user_id, changes)

    def validate_user(self, username: str, password: str) -> Optional[schemas.User]:
        user = self.get_user_by_username(username)
        if user is None:
            dummy_verify()
            return None
        if not verify_password(password, user.password):
            return None
        return user

    # Categories

    def list_categories(self) -> List[schemas.Category]:
        return self._all(models.Category, schemas.Category)

    def get_category(self, category_id: int) -> Optional[schemas.Category]:
        return self._get(models.Category, schemas.Category, category_id)

    def create_category(self, data: schemas.CategoryCreate) -> schemas.Category:
        return self._insert(models.Category, schemas.Category, {**data.model_dump(), "created_at": _utcnow()})

    def update_category(self, category_id: int, data: schemas.CategoryUpdate) -> Optional[schemas.Category]:
        return self._update(models.Category, schemas.Category, category_id, merge_changes(data, schemas.Category))

    def delete_category(self, category_id: int) -> bool:
        return self._delete(models.Category, category_id)

    # Products

    def list_products(self) -> List[schemas.Product]:
        return self._all(models.Product, schemas.Product)

    def list_products_by_category(self, category_id: int) -> List[schemas.Product]:
        return self._all(models.Product, schemas.Product, models.Product.category_id == category_id)

    def get_product(self, product_id: int) -> Optional[schemas.Product]:
        return self._get(models.Product, schemas.Product, product_id)

    def create_product(self, data: schemas.ProductCreate) -> schemas.Product:
        return self._insert(models.Product, schemas.Product, {**data.model_dump(), "created_at": _utcnow()})

    def update_product(self, product_id: int, data: schemas.ProductUpdate) -> Optional[schemas.Product]:
        return self._update(models.Product, schemas.Product, product_id, merge_changes(data, schemas.Product))

    def delete_product(self, product_id: int) -> bool:
        return self._delete(models.Product, product_id)

    # Product images

    def list_product_images(self, product_id: int) -> List[schemas.ProductImage]:
        return self._all(
            models.ProductImage,
            schemas.ProductImage,
            models.ProductImage.product_id == product_id,
            order_by=(models.ProductImage.order.asc(), models.ProductImage.id.asc()),
        )

    def get_product_image(self, image_id: int) -> Optional[schemas.ProductImage]:
        return self._get(models.ProductImage, schemas.ProductImage, image_id)

    @staticmethod
    def _demote_main_images(session: Session, product_id: int, keep_id: Optional[int] = None) -> None:
        stmt = update(models.ProductImage).where(
            models.ProductImage.product_id == product_id,
            models.ProductImage.is_main.is_(True),
        )
        if keep_id is not None:
            stmt = stmt.where(models.ProductImage.id != keep_id)
        session.execute(stmt.values(is_main=False))

    def create_product_image(self, data: schemas.ProductImageCreate) -> schemas.ProductImage:
        with self._session() as session:
            if data.is_main:
                self._demote_main_images(session, data.product_id)
            row = models.ProductImage(**data.model_dump())
            session.add(row)
            session.commit()
            session.refresh(row)
            return _to_entity(schemas.ProductImage, row)

    def update_product_image(
        self, image_id: int, data: schemas.ProductImageUpdate
    ) -> Optional[schemas.ProductImage]:
        changes = merge_changes(data, schemas.ProductImage)
        with self._session() as session:
            row = session.get(models.ProductImage, image_id)
            if row is None:
                return None
            if changes.get("is_main"):
                self._demote_main_images(session, row.product_id, keep_id=image_id)
            for key, value in changes.items():
                setattr(row, key, value)
            session.commit()
            session.refresh(row)
            return _to_entity(schemas.ProductImage, row)

    def delete_product_image(self, image_id: int) -> bool:
        return self._delete(models.ProductImage, image_id)

    # Hero images

    def get_hero_images(self) -> List[schemas.HeroImage]:
        return self._all(
            models.HeroImage,
            schemas.HeroImage,
            models.HeroImage.is_active.is_(True),
            order_by=(models.HeroImage.order.asc(), models.HeroImage.id.asc()),
        )

    def list_hero_images(self) -> List[schemas.HeroImage]:
        return self._all(
            models.HeroImage,
            schemas.HeroImage,
            order_by=(models.HeroImage.order.asc(), models.HeroImage.id.asc()),
        )

    def get_hero_image(self, image_id: int) -> Optional[schemas.HeroImage]:
        return self._get(models.HeroImage, schemas.HeroImage, image_id)

    def create_hero_image(self, data: schemas.HeroImageCreate) -> schemas.HeroImage:
        return self._insert(models.HeroImage, schemas.HeroImage, data.model_dump())

    def update_hero_image(self, image_id: int, data: schemas.HeroImageUpdate) -> Optional[schemas.HeroImage]:
        return self._update(models.HeroImage, schemas.HeroImage, image_id, merge_changes(data, schemas.HeroImage))

    def delete_hero_image(self, image_id: int) -> bool:
        return self._delete(models.HeroImage, image_id)

    # Contact requests

    def list_contact_requests(self) -> List[schemas.ContactRequest]:
        return self._all(models.ContactRequest, schemas.ContactRequest)

    def get_contact_request(self, request_id: int) -> Optional[schemas.ContactRequest]:
        return self._get(models.ContactRequest, schemas.ContactRequest, request_id)

    def create_contact_request(self, data: schemas.ContactRequestCreate) -> schemas.ContactRequest:
        values = {**data.model_dump(), "status": "new", "created_at": _utcnow()}
        return self._insert(models.ContactRequest, schemas.ContactRequest, values)

    def update_contact_request_status(self, request_id: int, status: str) -> Optional[schemas.ContactRequest]:
        return self._update(models.ContactRequest, schemas.ContactRequest, request_id, {"status": status})

    def delete_contact_request(self, request_id: int) -> bool:
        return self._delete(models.ContactRequest, request_id)

    # Settings

    def get_setting(self, key: str) -> Optional[schemas.Setting]:
        return self._get(models.Setting, schemas.Setting, key)

    def list_settings(self) -> List[schemas.Setting]:
        return self._all(models.Setting, schemas.Setting, order_by=(models.Setting.key.asc(),))

    def upsert_setting(self, key: str, value: Optional[str]) -> schemas.Setting:
        with self._session() as session:
            row = session.get(models.Setting, key)
            if row is None:
                row = models.Setting(key=key, value=value)
                session.add(row)
            else:
                row.value = value
            session.commit()
            return schemas.Setting(key=key, value=value)
