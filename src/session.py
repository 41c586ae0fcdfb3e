"""
Catalog Session.

Explicit session context: one repository, the logged-in user,
and every service wired to them.
"""

import logging
import os
from typing import List, Optional, Sequence, Tuple

import config.settings as settings
from src.errors import StorageError
from src.models.order import Order
from src.models.review import Review, ReviewType
from src.models.user import Capability, User
from src.registry.repository import Repository
from src.services.auth import AuthService
from src.services.catalog import CatalogService
from src.services.orders import OrderService
from src.services.reports import SalesReporter
from src.services.reviews import ReviewService
from src.services.scoring import ScoringEngine
from src.utils.storage import StorageManager

logger = logging.getLogger(__name__)


class CatalogSession:
    """
    Wires the services around a single repository.

    Every interactive command goes through a session, so state is passed
    explicitly instead of living in module globals.
    """

    def __init__(
        self,
        repository: Optional[Repository] = None,
        bills_dir: str = str(settings.BILLS_DIR),
        output_dir: str = str(settings.OUTPUT_ROOT)
    ):
        """
        Initialize session.

        Args:
            repository: Existing repository (default: a new empty one)
            bills_dir: Directory for bill files
            output_dir: Directory for reports
        """
        self.repository = repository or Repository()
        self.output_dir = output_dir

        self.storage = StorageManager(bills_dir)
        self.scoring = ScoringEngine(self.repository)
        self.reviews = ReviewService(self.repository, self.scoring)
        self.orders = OrderService(self.repository)
        self.auth = AuthService(self.repository)
        self.catalog = CatalogService(self.repository)
        self.reporter = SalesReporter(self.repository)

        logger.debug("Session initialized")

    @property
    def current_user(self) -> Optional[User]:
        return self.auth.current

    def post_review(
        self,
        product_id: int,
        score: int,
        body: str,
        review_type: ReviewType
    ) -> Review:
        """Post a review as the logged-in user."""
        capability = (
            Capability.POST_EXPERT_REVIEW
            if review_type == ReviewType.EXPERT
            else Capability.POST_USER_REVIEW
        )
        user = self.auth.require_capability(capability)
        return self.reviews.add_review(user, product_id, score, body, review_type)

    def purchase(self, product_ids: Sequence[int]) -> Tuple[Order, str, Optional[str]]:
        """
        Place an order as the logged-in user and write its bill.

        The order stands even when the bill file cannot be written; the
        bill path is then None and the caller still has the bill text.

        Returns:
            (order, bill_text, bill_path)
        """
        user = self.auth.require_capability(Capability.PURCHASE)
        order = self.orders.create_order(user, product_ids)
        bill = self.orders.generate_bill(order)
        try:
            bill_path = self.storage.save_bill(order.id, bill)
        except StorageError as e:
            logger.warning(f"Order #{order.id} placed but its bill was not saved: {e}")
            bill_path = None
        return order, bill, bill_path

    def my_orders(self) -> List[Order]:
        user = self.auth.require_login()
        return self.orders.orders_for_user(user.id)

    def export_sales_report(self, filename: str = "sales_report.csv") -> str:
        """Write the sales CSV (admins only). Returns its path."""
        self.auth.require_capability(Capability.VIEW_SALES_REPORT)
        return self.reporter.export(os.path.join(self.output_dir, filename))

    def save(self, path: str) -> None:
        self.storage.save_snapshot(self.repository, path)

    def load(self, path: str) -> None:
        """
        Replace the repository wholesale from a snapshot, then recompute
        every product's scores. On failure the current state is untouched.
        """
        loaded = self.storage.load_snapshot(path)
        self.repository.replace_with(loaded)
        self.scoring.recompute_all()
        self.auth.refresh()
        logger.info(f"Session state replaced from {path}")
