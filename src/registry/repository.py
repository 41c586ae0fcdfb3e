"""
Repository - Single source of truth for catalog entities.

Keyed in-memory storage for products, users, reviews and orders with
monotonic id sequences. Snapshots to/from plain dicts for persistence.
"""

import logging
import threading
from typing import Dict, List, Optional

import config.settings as settings
from src.models.order import Order
from src.models.product import Product
from src.models.review import Review, ReviewType
from src.models.user import User
from src.utils.clock import utc_now, to_iso

logger = logging.getLogger(__name__)

SEQUENCE_NAMES = ("product", "user", "review", "order")


class Repository:
    """
    Owns every entity. Services hold a reference to it and never keep
    entities of their own.

    Ids come from per-entity sequences that start at 1, only grow,
    and are never reused. Nothing is ever deleted.
    """

    def __init__(self):
        self.products: Dict[int, Product] = {}  # id -> Product
        self.users: Dict[int, User] = {}  # id -> User
        self.reviews: Dict[int, Review] = {}  # id -> Review
        self.orders: Dict[int, Order] = {}  # id -> Order
        self.sequences: Dict[str, int] = {name: 1 for name in SEQUENCE_NAMES}  # next id
        # Held across multi-step mutations (allocate id, insert, recompute)
        self.lock = threading.RLock()

    def next_id(self, sequence: str) -> int:
        """
        Allocate the next id of a sequence.

        Args:
            sequence: One of "product", "user", "review", "order"

        Returns:
            The allocated id
        """
        if sequence not in self.sequences:
            raise KeyError(f"Unknown sequence: {sequence}")
        with self.lock:
            value = self.sequences[sequence]
            self.sequences[sequence] = value + 1
        return value

    # Inserts

    def add_product(self, product: Product) -> Product:
        self._insert(self.products, product, "product")
        return product

    def add_user(self, user: User) -> User:
        self._insert(self.users, user, "user")
        return user

    def add_review(self, review: Review) -> Review:
        self._insert(self.reviews, review, "review")
        return review

    def add_order(self, order: Order) -> Order:
        self._insert(self.orders, order, "order")
        return order

    def _insert(self, table: Dict, entity, kind: str) -> None:
        if entity.id in table:
            raise ValueError(f"Duplicate {kind} id: {entity.id}")
        table[entity.id] = entity
        logger.debug(f"Stored {kind} #{entity.id}")

    # Lookups

    def get_product(self, product_id: int) -> Optional[Product]:
        """Retrieve product by ID. Returns None if not found."""
        return self.products.get(product_id)

    def get_user(self, user_id: int) -> Optional[User]:
        """Retrieve user by ID. Returns None if not found."""
        return self.users.get(user_id)

    def get_order(self, order_id: int) -> Optional[Order]:
        return self.orders.get(order_id)

    def find_user_by_username(self, username: str) -> Optional[User]:
        """Find user by username (case-insensitive)."""
        username_lower = username.lower()
        for user in self.users.values():
            if user.username.lower() == username_lower:
                return user
        return None

    def find_product_by_sku(self, sku: str) -> Optional[Product]:
        """Find product by SKU (case-insensitive)."""
        sku_lower = sku.lower()
        for product in self.products.values():
            if product.sku.lower() == sku_lower:
                return product
        return None

    def find_review(
        self,
        product_id: int,
        author_id: int,
        review_type: ReviewType
    ) -> Optional[Review]:
        """Find the review an author posted for a product, of the given type."""
        for review in self.reviews.values():
            if (
                review.product_id == product_id
                and review.author_id == author_id
                and review.type == review_type
            ):
                return review
        return None

    def reviews_for_product(
        self,
        product_id: int,
        review_type: Optional[ReviewType] = None
    ) -> List[Review]:
        """Reviews of a product in insertion order, optionally filtered by type."""
        return [
            r for r in self.reviews.values()
            if r.product_id == product_id and (review_type is None or r.type == review_type)
        ]

    def orders_for_user(self, user_id: int) -> List[Order]:
        return [o for o in self.orders.values() if o.user_id == user_id]

    # Snapshots

    def to_dict(self) -> dict:
        """Full snapshot: every entity and every sequence counter."""
        with self.lock:
            return {
                "version": settings.SNAPSHOT_VERSION,
                "saved_at": to_iso(utc_now()),
                "sequences": dict(self.sequences),
                "products": [p.to_dict() for p in self.products.values()],
                "users": [u.to_dict() for u in self.users.values()],
                "reviews": [r.to_dict() for r in self.reviews.values()],
                "orders": [o.to_dict() for o in self.orders.values()]
            }

    @classmethod
    def from_dict(cls, data: dict) -> "Repository":
        """
        Rebuild a repository from a snapshot dict.

        Uniqueness rules (SKU, username, one review per author, product
        and type) are re-checked, since a snapshot may have been edited.

        Raises:
            KeyError, TypeError, ValueError: If the snapshot is malformed
        """
        repo = cls()
        for item in _section(data, "products"):
            product = Product.from_dict(item)
            if repo.find_product_by_sku(product.sku) is not None:
                raise ValueError(f"Duplicate SKU in snapshot: {product.sku}")
            repo.add_product(product)
        for item in _section(data, "users"):
            user = User.from_dict(item)
            if repo.find_user_by_username(user.username) is not None:
                raise ValueError(f"Duplicate username in snapshot: {user.username}")
            repo.add_user(user)
        for item in _section(data, "reviews"):
            review = Review.from_dict(item)
            if repo.find_review(review.product_id, review.author_id, review.type) is not None:
                raise ValueError(
                    f"Duplicate {review.type.value} review by user #{review.author_id} "
                    f"for product #{review.product_id} in snapshot"
                )
            repo.add_review(review)
        for item in _section(data, "orders"):
            repo.add_order(Order.from_dict(item))

        sequences = data.get("sequences") or {}
        if not isinstance(sequences, dict):
            raise ValueError(f"Snapshot sequences must be an object, got {type(sequences).__name__}")
        tables = {
            "product": repo.products,
            "user": repo.users,
            "review": repo.reviews,
            "order": repo.orders,
        }
        for name, table in tables.items():
            # A sequence never falls behind ids already handed out
            floor = max(table.keys(), default=0) + 1
            repo.sequences[name] = max(int(sequences.get(name, floor)), floor)

        logger.info(
            f"Rebuilt repository: {len(repo.products)} products, {len(repo.users)} users, "
            f"{len(repo.reviews)} reviews, {len(repo.orders)} orders"
        )
        return repo

    def replace_with(self, other: "Repository") -> None:
        """Swap in the contents of another repository wholesale."""
        with self.lock:
            self.products = other.products
            self.users = other.users
            self.reviews = other.reviews
            self.orders = other.orders
            self.sequences = dict(other.sequences)


def _section(data: dict, key: str) -> list:
    """Entity list of a snapshot; a missing or null section is empty."""
    items = data.get(key) or []
    if not isinstance(items, list):
        raise ValueError(f"Snapshot section '{key}' must be a list, got {type(items).__name__}")
    return items
