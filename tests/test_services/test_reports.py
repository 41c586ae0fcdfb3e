"""
Unit tests for the sales report.
"""

import os
import tempfile

import pandas as pd
import pytest

from src.models.order import Order
from src.models.product import Product
from src.registry.repository import Repository
from src.services.reports import COLUMNS, SalesReporter


@pytest.fixture
def repo():
    repo = Repository()
    repo.add_product(Product(id=1, sku="LP-001", name="ZenBook X", price=79990))
    repo.add_product(Product(id=2, sku="HP-250", name="HyperPods", price=8990))
    repo.add_product(Product(id=3, sku="MB-100", name="Pixelate 9", price=65999))
    repo.add_order(Order(id=1, user_id=1, product_ids=[2, 2, 1]))
    repo.add_order(Order(id=2, user_id=2, product_ids=[2]))
    return repo


def test_build_aggregates_units_and_revenue(repo):
    df = SalesReporter(repo).build()

    assert list(df.columns) == COLUMNS
    assert df["sku"].tolist() == ["LP-001", "HP-250"]
    assert df["units"].tolist() == [1, 3]
    assert df["revenue"].tolist() == [79990.0, 26970.0]


def test_build_empty(repo):
    df = SalesReporter(repo).build(orders=[])
    assert df.empty
    assert list(df.columns) == COLUMNS


def test_export_csv(repo):
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "reports", "sales.csv")

        returned = SalesReporter(repo).export(path)

        assert returned == path
        loaded = pd.read_csv(path)
        assert loaded["product_id"].tolist() == [1, 2]
        assert int(loaded["units"].sum()) == 4
