"""
Unit tests for snapshot and bill storage.
"""

import json
import os
import tempfile

import pytest

from src.errors import StorageError
from src.models.product import Product
from src.models.user import Role, User
from src.registry.repository import Repository
from src.utils.storage import StorageManager


def _repo():
    repo = Repository()
    repo.add_product(Product(id=repo.next_id("product"), sku="LP-001", name="ZenBook X", price=79990))
    repo.add_user(User(id=repo.next_id("user"), username="alice", password="pass", role=Role.EXPERT,
                       expertise_trust=0.8, expertise_domain="Laptops"))
    return repo


def test_save_and_load_snapshot():
    """Snapshot persistence."""
    with tempfile.TemporaryDirectory() as tmpdir:
        storage = StorageManager(os.path.join(tmpdir, "bills"))
        path = os.path.join(tmpdir, "nested", "catalog.json")

        storage.save_snapshot(_repo(), path)
        loaded = storage.load_snapshot(path)

        assert loaded.get_product(1).name == "ZenBook X"
        assert loaded.get_user(1).role == Role.EXPERT
        assert loaded.sequences["product"] == 2
        assert not os.path.exists(f"{path}.tmp")


def test_save_creates_backup_of_previous_snapshot():
    with tempfile.TemporaryDirectory() as tmpdir:
        storage = StorageManager(tmpdir)
        path = os.path.join(tmpdir, "catalog.json")

        repo = _repo()
        storage.save_snapshot(repo, path)
        repo.add_product(Product(id=repo.next_id("product"), sku="MB-100", name="Pixelate 9", price=65999))
        storage.save_snapshot(repo, path)

        with open(f"{path}.backup") as f:
            backup = json.load(f)
        with open(path) as f:
            current = json.load(f)
        assert len(backup["products"]) == 1
        assert len(current["products"]) == 2


def test_load_missing_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        storage = StorageManager(tmpdir)
        with pytest.raises(StorageError, match="Load failed"):
            storage.load_snapshot(os.path.join(tmpdir, "missing.json"))


def test_load_corrupt_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "catalog.json")
        with open(path, "w") as f:
            f.write("{not json")

        with pytest.raises(StorageError, match="not a valid snapshot"):
            StorageManager(tmpdir).load_snapshot(path)


def test_load_malformed_snapshot():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "catalog.json")
        with open(path, "w") as f:
            json.dump({"products": [{"id": 1}]}, f)

        with pytest.raises(StorageError, match="malformed"):
            StorageManager(tmpdir).load_snapshot(path)


def test_storage_error_is_an_os_error():
    with tempfile.TemporaryDirectory() as tmpdir:
        with pytest.raises(OSError):
            StorageManager(tmpdir).load_snapshot(os.path.join(tmpdir, "missing.json"))


def test_save_bill():
    with tempfile.TemporaryDirectory() as tmpdir:
        bills_dir = os.path.join(tmpdir, "bills")
        storage = StorageManager(bills_dir)

        path = storage.save_bill(12, "Invoice No: 12\n")

        assert path == os.path.join(bills_dir, "bill-12.txt")
        assert storage.bill_path(12) == path
        with open(path, encoding="utf-8") as f:
            assert f.read() == "Invoice No: 12\n"


@pytest.mark.parametrize("sequences", [None, [1, 2], "product"])
def test_load_snapshot_with_bad_sequences(sequences):
    """A sequences field that is not an object is reported as a storage error."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "catalog.json")
        with open(path, "w") as f:
            json.dump({"sequences": sequences, "products": []}, f)

        with pytest.raises(StorageError, match="malformed"):
            StorageManager(tmpdir).load_snapshot(path)


def test_load_snapshot_with_null_sections():
    """Null entity sections load as empty."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "catalog.json")
        with open(path, "w") as f:
            json.dump({"sequences": None, "products": None, "users": None}, f)

        repo = StorageManager(tmpdir).load_snapshot(path)

        assert repo.products == {}
        assert repo.next_id("product") == 1


def test_save_bill_into_unwritable_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        blocker = os.path.join(tmpdir, "bills")
        with open(blocker, "w") as f:
            f.write("not a directory")

        with pytest.raises(StorageError, match="Could not save bill"):
            StorageManager(blocker).save_bill(1, "Invoice No: 1\n")
