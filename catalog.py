"""
Product catalog: read-side lookups used by order pricing and the public
listing endpoints, plus admin-only create/update/delete.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from database import Record, RecordStore, find_index, next_id
from errors import DuplicateNameError, NotFoundError, ValidationError
from guard import Caller, require_admin
from logger import get_logger
from pricing import is_positive_amount
from query import contains_text, equals, run_query
from schemas import ProductIn, ProductUpdate

log = get_logger("catalog")

COLLECTION = "products"
SEARCH_FIELDS = ("name", "description", "category")
DEFAULT_IMAGE = "/api/placeholder/300/200"
FEATURED_LIMIT = 6


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _same_name(a: str, b: str) -> bool:
    return a.strip().lower() == b.strip().lower()


class Catalog:
    def __init__(self, store: RecordStore):
        self.store = store

    def all(self) -> List[Record]:
        return self.store.load(COLLECTION)

    def by_id(self) -> Dict[Any, Record]:
        return {p.get("id"): p for p in self.all()}

    def find_by_id(self, product_id: Any) -> Record:
        for product in self.all():
            if product.get("id") == product_id:
                return product
        raise NotFoundError("Product", product_id)

    def find_by_name(self, name: str) -> Record:
        for product in self.all():
            if _same_name(product.get("name", ""), name):
                return product
        raise NotFoundError("Product", name)

    def distinct_categories(self) -> List[str]:
        seen: List[str] = []
        for product in self.all():
            category = product.get("category")
            if category and category not in seen:
                seen.append(category)
        return seen

    def featured(self, limit: int = FEATURED_LIMIT) -> List[Record]:
        products = self.all()
        flagged = [p for p in products if p.get("featured")]
        # no featured products -> fall back to the head of the catalog
        return (flagged or products)[:limit]

    def list(self, category: Optional[str] = None, search: Optional[str] = None,
             page: int = 1, limit: Optional[int] = None) -> Dict[str, Any]:
        predicates = []
        if category and category != "All":
            predicates.append(equals("category", category, ignore_case=True))
        if search:
            predicates.append(contains_text(search, SEARCH_FIELDS))
        return run_query(self.all(), predicates, page=page, limit=limit)

    # Admin operations

    def create(self, data: ProductIn, caller: Caller) -> Record:
        require_admin(caller)
        missing = [f for f in ("name", "category", "description")
                   if not (getattr(data, f) or "").strip()]
        if not data.price:
            missing.append("price")
        if missing:
            raise ValidationError("Name, price, category, and description are required", missing)
        if not is_positive_amount(data.price):
            raise ValidationError("Price must be greater than 0", ["price"])

        products = self.store.load(COLLECTION, strict=True)
        if any(_same_name(p.get("name", ""), data.name) for p in products):
            raise DuplicateNameError(data.name)

        now = _now()
        product = {
            "id": next_id(products),
            "name": data.name.strip(),
            "price": float(data.price),
            "category": data.category.strip(),
            "description": data.description.strip(),
            "image": data.image or DEFAULT_IMAGE,
            "featured": bool(data.featured),
            "createdAt": now,
            "updatedAt": now,
        }
        products.append(product)
        self.store.save_or_raise(COLLECTION, products)
        log.info(f"Created product {product['id']} ({product['name']})")
        return product

    def update(self, product_id: Any, data: ProductUpdate, caller: Caller) -> Record:
        require_admin(caller)
        products = self.store.load(COLLECTION, strict=True)
        index = find_index(products, product_id)
        if index == -1:
            raise NotFoundError("Product", product_id)

        changes = {k: v for k, v in data.model_dump(exclude_unset=True, exclude_none=True).items()
                   if not (isinstance(v, str) and not v.strip())}
        if "price" in changes and not is_positive_amount(changes["price"]):
            raise ValidationError("Price must be greater than 0", ["price"])
        new_name = changes.get("name")
        if new_name is not None:
            clash = [p for p in products
                     if p.get("id") != product_id and _same_name(p.get("name", ""), new_name)]
            if clash:
                raise DuplicateNameError(new_name)

        product = products[index]
        for key, value in changes.items():
            if key == "price":
                value = float(value)
            elif key == "featured":
                value = bool(value)
            elif isinstance(value, str):
                value = value.strip()
            product[key] = value
        product["updatedAt"] = _now()

        self.store.save_or_raise(COLLECTION, products)
        log.info(f"Updated product {product_id}: {sorted(changes)}")
        return product

    def delete(self, product_id: Any, caller: Caller) -> Record:
        require_admin(caller)
        products = self.store.load(COLLECTION, strict=True)
        index = find_index(products, product_id)
        if index == -1:
            raise NotFoundError("Product", product_id)
        removed = products.pop(index)
        self.store.save_or_raise(COLLECTION, products)
        log.info(f"Deleted product {product_id}")
        return removed
