"""
Scoring Engine.

Recomputes a product's aggregate expert and user scores from its reviews.
Expert scores are trust-weighted; user scores are a plain mean.
"""

import logging
from typing import Optional

import config.settings as settings
from src.models.product import Product
from src.models.review import ReviewType
from src.models.user import User
from src.registry.repository import Repository

logger = logging.getLogger(__name__)


class ScoringEngine:
    """
    Derives avg_expert_score and avg_user_score for products.
    """

    def __init__(
        self,
        repository: Repository,
        default_trust: float = settings.DEFAULT_TRUST,
        domain_boost: float = settings.DOMAIN_MATCH_BOOST
    ):
        """
        Initialize scoring engine.

        Args:
            repository: Shared entity repository
            default_trust: Weight for expert reviews whose author is missing
            domain_boost: Multiplier when product category == author's domain
        """
        self.repository = repository
        self.default_trust = default_trust
        self.domain_boost = domain_boost

    def effective_trust(self, author: Optional[User], product: Product) -> float:
        """
        Weight of one expert review.

        Trust is clamped to [0, 1], then boosted (without re-clamping) when
        the product's category matches the author's expertise domain.
        """
        if author is None:
            return self.default_trust

        trust = max(0.0, min(1.0, author.expertise_trust))
        if _same_label(product.category, author.expertise_domain):
            trust *= self.domain_boost
        return trust

    def recompute_product_scores(self, product_id: int) -> None:
        """
        Recompute both aggregate scores of one product in place.
        No-op if the product does not exist.

        Args:
            product_id: Product to recompute
        """
        product = self.repository.get_product(product_id)
        if product is None:
            logger.debug(f"Skipping recompute for unknown product #{product_id}")
            return

        weight_sum = 0.0
        weighted_total = 0.0
        expert_reviews = self.repository.reviews_for_product(product_id, ReviewType.EXPERT)
        for review in expert_reviews:
            author = self.repository.get_user(review.author_id)
            trust = self.effective_trust(author, product)
            weight_sum += trust
            weighted_total += trust * review.score

        if not expert_reviews:
            product.avg_expert_score = None
        elif weight_sum == 0:
            # Every contributing expert has zero trust
            logger.warning(
                f"Product #{product_id} has {len(expert_reviews)} expert reviews "
                f"but zero total trust; expert score left empty"
            )
            product.avg_expert_score = None
        else:
            product.avg_expert_score = weighted_total / weight_sum

        user_scores = [
            r.score for r in self.repository.reviews_for_product(product_id, ReviewType.USER)
        ]
        product.avg_user_score = sum(user_scores) / len(user_scores) if user_scores else None

        logger.debug(
            f"Recomputed product #{product_id}: expert={product.avg_expert_score} "
            f"({len(expert_reviews)} reviews), user={product.avg_user_score} "
            f"({len(user_scores)} reviews)"
        )

    def recompute_all(self) -> None:
        """Recompute scores for every product in the repository."""
        for product_id in list(self.repository.products):
            self.recompute_product_scores(product_id)
        logger.info(f"Recomputed scores for {len(self.repository.products)} products")


def _same_label(left: Optional[str], right: Optional[str]) -> bool:
    """Case-insensitive equality where a missing value never matches."""
    if left is None or right is None:
        return False
    return left.lower() == right.lower()
