"""
Sales Report.

Aggregates orders into per-product units sold and revenue.
"""

import logging
import os
from typing import Iterable, Optional

import pandas as pd

from src.models.order import Order
from src.registry.repository import Repository
from src.services.orders import round2

logger = logging.getLogger(__name__)

COLUMNS = ["product_id", "sku", "name", "units", "revenue"]


class SalesReporter:
    """
    Builds the sales table from stored orders.
    """

    def __init__(self, repository: Repository):
        self.repository = repository

    def build(self, orders: Optional[Iterable[Order]] = None) -> pd.DataFrame:
        """
        Build the sales table.

        Args:
            orders: Orders to include (default: every stored order)

        Returns:
            DataFrame with one row per product sold, sorted by revenue descending
        """
        if orders is None:
            orders = self.repository.orders.values()

        # One row per unit sold
        units = pd.DataFrame(
            [{"order_id": o.id, "product_id": pid} for o in orders for pid in o.product_ids],
            columns=["order_id", "product_id"]
        )

        if units.empty:
            logger.warning("No orders found, creating empty sales report")
            return pd.DataFrame(columns=COLUMNS)

        counts = units.groupby("product_id", sort=False).size()

        rows = []
        for product_id, quantity in counts.items():
            product = self.repository.get_product(int(product_id))
            if not product:
                logger.warning(f"Product {product_id} not found in repository, skipping")
                continue
            rows.append({
                "product_id": product.id,
                "sku": product.sku,
                "name": product.name,
                "units": int(quantity),
                "revenue": round2(product.price * int(quantity))
            })

        df = pd.DataFrame(rows, columns=COLUMNS)
        df = df.sort_values(["revenue", "product_id"], ascending=[False, True]).reset_index(drop=True)

        logger.info(f"Sales report: {len(df)} products, {int(df['units'].sum())} units")
        return df

    def export(self, output_path: str, orders: Optional[Iterable[Order]] = None) -> str:
        """
        Write the sales table as CSV.

        Returns:
            Path to the generated CSV file
        """
        df = self.build(orders)
        directory = os.path.dirname(output_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        df.to_csv(output_path, index=False)
        logger.info(f"Sales report saved to {output_path}")
        return output_path
