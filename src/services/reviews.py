"""
Review Admission.

Validates and stores reviews, then triggers a score recompute
for the reviewed product.
"""

import logging

import config.settings as settings
from src.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from src.models.review import Review, ReviewType
from src.models.user import Role, User
from src.registry.repository import Repository
from src.services.scoring import ScoringEngine
from src.utils.clock import utc_now

logger = logging.getLogger(__name__)


class ReviewService:
    """
    The only way to create a Review. Reviews are never updated or deleted.
    """

    def __init__(self, repository: Repository, scoring: ScoringEngine):
        self.repository = repository
        self.scoring = scoring

    def add_review(
        self,
        user: User,
        product_id: int,
        score: int,
        body: str,
        review_type: ReviewType
    ) -> Review:
        """
        Admit a review and refresh the product's scores.

        Checks run in this order: role, score range, duplicate, product.

        Args:
            user: Acting user (the author)
            product_id: Reviewed product
            score: Integer score in [1, 10]
            body: Free text
            review_type: EXPERT or USER

        Returns:
            The stored Review

        Raises:
            AuthorizationError: EXPERT review from a non-expert
            ValidationError: Score is not an integer in range
            ConflictError: Author already reviewed this product with this type
            NotFoundError: Product does not exist
        """
        try:
            review_type = ReviewType(review_type)
        except ValueError:
            raise ValidationError(f"Invalid review type: {review_type!r}")

        if review_type == ReviewType.EXPERT and user.role != Role.EXPERT:
            raise AuthorizationError("Only EXPERT users can post EXPERT reviews")

        if (
            isinstance(score, bool)
            or not isinstance(score, int)
            or not (settings.MIN_SCORE <= score <= settings.MAX_SCORE)
        ):
            raise ValidationError(
                f"Score must be an integer {settings.MIN_SCORE}..{settings.MAX_SCORE}, got {score!r}"
            )

        with self.repository.lock:
            if self.repository.find_review(product_id, user.id, review_type) is not None:
                raise ConflictError(
                    f"You already posted a {review_type.value} review for product #{product_id}"
                )

            if self.repository.get_product(product_id) is None:
                raise NotFoundError(f"Product not found: {product_id}")

            review = Review(
                id=self.repository.next_id("review"),
                product_id=product_id,
                author_id=user.id,
                type=review_type,
                score=score,
                body=body,
                created_at=utc_now()
            )
            self.repository.add_review(review)
            self.scoring.recompute_product_scores(product_id)

        logger.info(
            f"Review #{review.id} ({review_type.value}, score={score}) by user #{user.id} "
            f"on product #{product_id}"
        )
        return review
