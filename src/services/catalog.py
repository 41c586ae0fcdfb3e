"""
Catalog service.

Product creation, ranked listing, and product detail lookups.
"""

import logging
from typing import List, Tuple

import config.settings as settings
from src.errors import ConflictError, NotFoundError, ValidationError
from src.models.product import Product
from src.models.review import Review, ReviewType
from src.registry.repository import Repository

logger = logging.getLogger(__name__)


class CatalogService:

    def __init__(self, repository: Repository):
        self.repository = repository

    def add_product(
        self,
        sku: str,
        name: str,
        brand: str,
        category: str,
        description: str,
        price: float
    ) -> Product:
        """
        Add a product to the catalog.

        Args:
            sku: Stock keeping unit, unique (case-insensitive)
            name: Display name
            brand: Brand label
            category: Category, matched against experts' domains
            description: Free text
            price: Unit price in settings.CURRENCY

        Returns:
            The stored Product

        Raises:
            ValidationError: Blank SKU/name or price out of range
            ConflictError: SKU already exists
        """
        sku = (sku or "").strip()
        name = (name or "").strip()
        if not sku or not name:
            raise ValidationError("SKU and name must not be empty")
        if not (settings.MIN_PRICE <= price <= settings.MAX_PRICE):
            raise ValidationError(
                f"Price must be between {settings.MIN_PRICE} and {settings.MAX_PRICE}, got {price}"
            )

        with self.repository.lock:
            if self.repository.find_product_by_sku(sku) is not None:
                raise ConflictError(f"SKU already exists: {sku}")

            product = Product(
                id=self.repository.next_id("product"),
                sku=sku,
                name=name,
                brand=brand,
                category=category,
                description=description,
                price=float(price)
            )
            self.repository.add_product(product)

        logger.info(f"Added product #{product.id} {product.sku} '{product.name}'")
        return product

    def get_product(self, product_id: int) -> Product:
        """Raises NotFoundError when the product does not exist."""
        product = self.repository.get_product(product_id)
        if product is None:
            raise NotFoundError(f"Product not found: {product_id}")
        return product

    def list_products(self) -> List[Product]:
        """All products, best expert score first; unscored products last."""
        return sorted(
            self.repository.products.values(),
            key=lambda p: (p.avg_expert_score is None, -(p.avg_expert_score or 0.0), p.id)
        )

    def product_detail(self, product_id: int) -> Tuple[Product, List[Review], List[Review]]:
        """
        Product with its reviews.

        Returns:
            (product, expert_reviews, user_reviews)
        """
        product = self.get_product(product_id)
        return (
            product,
            self.repository.reviews_for_product(product_id, ReviewType.EXPERT),
            self.repository.reviews_for_product(product_id, ReviewType.USER),
        )
