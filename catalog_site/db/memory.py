import json
import logging
import os
import tempfile
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from threading import RLock
from typing import Any, Dict, Iterator, List, Optional, Type, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from catalog_site import schemas
from catalog_site.core.errors import StorageFault, ValidationError
from catalog_site.core.security import dummy_verify, hash_password, verify_password
from catalog_site.db.storage import Storage, merge_changes, sort_by_order

logger = logging.getLogger("catalog_site.storage")

# snapshot key -> entity type
COLLECTIONS: Dict[str, Type[BaseModel]] = {
    "users": schemas.User,
    "categories": schemas.Category,
    "products": schemas.Product,
    "productImages": schemas.ProductImage,
    "heroImages": schemas.HeroImage,
    "contactRequests": schemas.ContactRequest,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MemoryStorage(Storage):
    """Dict-backed storage with optional JSON snapshot persistence.

    Every mutation holds a single lock for its whole read-modify-write and,
    when a snapshot path is configured, rewrites the full snapshot before
    returning. The snapshot is written to a temporary file and moved into
    place. A failed write leaves both the previous snapshot and the in-memory
    state untouched.
    """

    def __init__(self, snapshot_path: Union[str, Path, None] = None):
        self._lock = RLock()
        self._snapshot_path = Path(snapshot_path) if snapshot_path else None
        self._tables: Dict[str, Dict[int, BaseModel]] = {name: {} for name in COLLECTIONS}
        self._settings: Dict[str, schemas.Setting] = {}
        self._next_ids: Dict[str, int] = {name: 1 for name in COLLECTIONS}
        if self._snapshot_path and self._snapshot_path.exists():
            self._load()

    # Snapshot handling

    def _load(self) -> None:
        try:
            raw = json.loads(self._snapshot_path.read_text(encoding="utf-8"))
            for name, entity_cls in COLLECTIONS.items():
                table = {int(key): entity_cls.model_validate(doc) for key, doc in raw.get(name, {}).items()}
                self._tables[name] = table
                self._next_ids[name] = max(table, default=0) + 1
            self._settings = {
                key: schemas.Setting.model_validate(doc) for key, doc in raw.get("settings", {}).items()
            }
        except (OSError, ValueError, PydanticValidationError) as exc:
            logger.error("storage_snapshot_load_failed", extra={"path": str(self._snapshot_path), "error": str(exc)})
            raise StorageFault(f"Could not load snapshot {self._snapshot_path}: {exc}") from exc
        logger.info(
            "storage_snapshot_loaded",
            extra={"path": str(self._snapshot_path), "counts": {k: len(v) for k, v in self._tables.items()}},
        )

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            document: Dict[str, Any] = {
                name: {str(key): entity.model_dump(mode="json", by_alias=True) for key, entity in table.items()}
                for name, table in self._tables.items()
            }
            document["settings"] = {
                key: setting.model_dump(mode="json", by_alias=True) for key, setting in self._settings.items()
            }
            return document

    def _persist(self) -> None:
        if not self._snapshot_path:
            return
        payload = json.dumps(self.snapshot(), indent=2)
        directory = self._snapshot_path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".snapshot-", suffix=".json", dir=directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_name, self._snapshot_path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            logger.exception("storage_snapshot_failed", extra={"path": str(self._snapshot_path)})
            raise StorageFault(f"Could not write snapshot {self._snapshot_path}: {exc}") from exc

    @contextmanager
    def _mutation(self) -> Iterator[None]:
        """Hold the lock for one change and persist it, restoring the previous state on failure.

        Entities are replaced, never mutated in place, so shallow copies of the
        tables are enough to roll back.
        """
        with self._lock:
            if not self._snapshot_path:
                yield
                return
            tables = {name: dict(table) for name, table in self._tables.items()}
            settings = dict(self._settings)
            next_ids = dict(self._next_ids)
            try:
                yield
                self._persist()
            except Exception:
                self._tables, self._settings, self._next_ids = tables, settings, next_ids
                raise

    # Generic table helpers

    def _all(self, table: str) -> List[Any]:
        with self._lock:
            return [entity.model_copy() for entity in self._tables[table].values()]

    def _get(self, table: str, entity_id: int) -> Optional[Any]:
        with self._lock:
            entity = self._tables[table].get(entity_id)
            return entity.model_copy() if entity else None

    def _add(self, table: str, values: Dict[str, Any]) -> Any:
        entity_id = self._next_ids[table]
        self._next_ids[table] = entity_id + 1
        entity = COLLECTIONS[table](id=entity_id, **values)
        self._tables[table][entity_id] = entity
        return entity.model_copy()

    def _replace(self, table: str, entity_id: int, changes: Dict[str, Any]) -> Optional[Any]:
        existing = self._tables[table].get(entity_id)
        if existing is None:
            return None
        updated = existing.model_copy(update=changes)
        self._tables[table][entity_id] = updated
        return updated.model_copy()

    def _insert(self, table: str, values: Dict[str, Any]) -> Any:
        with self._mutation():
            return self._add(table, values)

    def _update(self, table: str, entity_id: int, changes: Dict[str, Any]) -> Optional[Any]:
        with self._mutation():
            return self._replace(table, entity_id, changes)

    def _delete(self, table: str, entity_id: int) -> bool:
        with self._lock:
            if entity_id not in self._tables[table]:
                return False
            with self._mutation():
                del self._tables[table][entity_id]
            return True

    # Users

    def get_user(self, user_id: int) -> Optional[schemas.User]:
        return self._get("users", user_id)

    def get_user_by_username(self, username: str) -> Optional[schemas.User]:
        with self._lock:
            for user in self._tables["users"].values():
                if user.username == username:
                    return user.model_copy()
        return None

    def list_users(self) -> List[schemas.User]:
        return self._all("users")

    def create_user(self, data: schemas.UserCreate) -> schemas.User:
        hashed = hash_password(data.password)
        with self._lock:
            if self.get_user_by_username(data.username):
                raise ValidationError("Username already exists")
            return self._insert(
                "users",
                {"username": data.username, "password": hashed, "role": data.role, "created_at": _utcnow()},
            )

    def update_user(self, user_id: int, data: schemas.UserUpdate) -> Optional[schemas.User]:
        changes = merge_changes(data, schemas.User)
        if "password" in changes:
            changes["password"] = hash_password(changes["password"])
        return self._update("users", user_id, changes)

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
        return self._all("categories")

    def get_category(self, category_id: int) -> Optional[schemas.Category]:
        return self._get("categories", category_id)

    def create_category(self, data: schemas.CategoryCreate) -> schemas.Category:
        return self._insert("categories", {**data.model_dump(), "created_at": _utcnow()})

    def update_category(self, category_id: int, data: schemas.CategoryUpdate) -> Optional[schemas.Category]:
        return self._update("categories", category_id, merge_changes(data, schemas.Category))

    def delete_category(self, category_id: int) -> bool:
        return self._delete("categories", category_id)

    # Products

    def list_products(self) -> List[schemas.Product]:
        return self._all("products")

    def list_products_by_category(self, category_id: int) -> List[schemas.Product]:
        return [product for product in self._all("products") if product.category_id == category_id]

    def get_product(self, product_id: int) -> Optional[schemas.Product]:
        return self._get("products", product_id)

    def create_product(self, data: schemas.ProductCreate) -> schemas.Product:
        return self._insert("products", {**data.model_dump(), "created_at": _utcnow()})

    def update_product(self, product_id: int, data: schemas.ProductUpdate) -> Optional[schemas.Product]:
        return self._update("products", product_id, merge_changes(data, schemas.Product))

    def delete_product(self, product_id: int) -> bool:
        return self._delete("products", product_id)

    # Product images

    def list_product_images(self, product_id: int) -> List[schemas.ProductImage]:
        images = [image for image in self._all("productImages") if image.product_id == product_id]
        return sort_by_order(images)

    def get_product_image(self, image_id: int) -> Optional[schemas.ProductImage]:
        return self._get("productImages", image_id)

    def _demote_main_images(self, product_id: int, keep_id: Optional[int] = None) -> None:
        table = self._tables["productImages"]
        for image_id, image in list(table.items()):
            if image.product_id == product_id and image.is_main and image_id != keep_id:
                table[image_id] = image.model_copy(update={"is_main": False})

    def create_product_image(self, data: schemas.ProductImageCreate) -> schemas.ProductImage:
        with self._mutation():
            if data.is_main:
                self._demote_main_images(data.product_id)
            return self._add("productImages", data.model_dump())

    def update_product_image(
        self, image_id: int, data: schemas.ProductImageUpdate
    ) -> Optional[schemas.ProductImage]:
        changes = merge_changes(data, schemas.ProductImage)
        with self._mutation():
            existing = self._tables["productImages"].get(image_id)
            if existing is None:
                return None
            if changes.get("is_main"):
                self._demote_main_images(existing.product_id, keep_id=image_id)
            return self._replace("productImages", image_id, changes)

    def delete_product_image(self, image_id: int) -> bool:
        return self._delete("productImages", image_id)

    # Hero images

    def get_hero_images(self) -> List[schemas.HeroImage]:
        return sort_by_order([image for image in self._all("heroImages") if image.is_active])

    def list_hero_images(self) -> List[schemas.HeroImage]:
        return sort_by_order(self._all("heroImages"))

    def get_hero_image(self, image_id: int) -> Optional[schemas.HeroImage]:
        return self._get("heroImages", image_id)

    def create_hero_image(self, data: schemas.HeroImageCreate) -> schemas.HeroImage:
        return self._insert("heroImages", data.model_dump())

    def update_hero_image(self, image_id: int, data: schemas.HeroImageUpdate) -> Optional[schemas.HeroImage]:
        return self._update("heroImages", image_id, merge_changes(data, schemas.HeroImage))

    def delete_hero_image(self, image_id: int) -> bool:
        return self._delete("heroImages", image_id)

    # Contact requests

    def list_contact_requests(self) -> List[schemas.ContactRequest]:
        return self._all("contactRequests")

    def get_contact_request(self, request_id: int) -> Optional[schemas.ContactRequest]:
        return self._get("contactRequests", request_id)

    def create_contact_request(self, data: schemas.ContactRequestCreate) -> schemas.ContactRequest:
        return self._insert("contactRequests", {**data.model_dump(), "status": "new", "created_at": _utcnow()})

    def update_contact_request_status(self, request_id: int, status: str) -> Optional[schemas.ContactRequest]:
        return self._update("contactRequests", request_id, {"status": status})

    def delete_contact_request(self, request_id: int) -> bool:
        return self._delete("contactRequests", request_id)

    # Settings

    def get_setting(self, key: str) -> Optional[schemas.Setting]:
        with self._lock:
            setting = self._settings.get(key)
            return setting.model_copy() if setting else None

    def list_settings(self) -> List[schemas.Setting]:
        with self._lock:
            return [setting.model_copy() for setting in self._settings.values()]

    def upsert_setting(self, key: str, value: Optional[str]) -> schemas.Setting:
        setting = schemas.Setting(key=key, value=value)
        with self._mutation():
            self._settings[key] = setting
        return setting.model_copy()
