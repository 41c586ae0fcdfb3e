"""
Storage utility.

File I/O for repository snapshots and bill artifacts.
"""

import json
import os
import shutil
import logging

from src.errors import StorageError
from src.registry.repository import Repository

logger = logging.getLogger(__name__)


class StorageManager:
    """
    Manages file I/O for all data persistence.

    Handles:
    - Repository snapshots (any path, JSON, atomic write + .backup)
    - Bills (bills_dir/bill-<order_id>.txt)
    """

    def __init__(self, bills_dir: str):
        """
        Initialize storage manager.

        Args:
            bills_dir: Directory bill files are written to
        """
        self.bills_dir = str(bills_dir)
        logger.info(f"Initialized StorageManager with bills_dir={self.bills_dir}")

    def save_snapshot(self, repository: Repository, path: str) -> None:
        """
        Persist the full repository with atomic write pattern.
        Backs up the previous snapshot before overwriting it.

        Args:
            repository: Repository to save
            path: Snapshot file path

        Raises:
            StorageError: If the snapshot could not be written
        """
        path = str(path)
        data = repository.to_dict()
        temp_path = f"{path}.tmp"

        try:
            directory = os.path.dirname(path)
            if directory:
                os.makedirs(directory, exist_ok=True)

            # Create backup if snapshot file exists
            if os.path.exists(path):
                backup_path = f"{path}.backup"
                shutil.copy(path, backup_path)
                logger.debug(f"Created backup: {backup_path}")

            with open(temp_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)

            # Atomic rename
            os.replace(temp_path, path)
            logger.info(
                f"Snapshot saved to {path}: {len(data['products'])} products, "
                f"{len(data['users'])} users, {len(data['reviews'])} reviews, "
                f"{len(data['orders'])} orders"
            )

        except OSError as e:
            logger.error(f"Failed to save snapshot to {path}: {e}")
            # Clean up temp file if it exists
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise StorageError(f"Save failed: {e}") from e

    def load_snapshot(self, path: str) -> Repository:
        """
        Load a snapshot into a new Repository.
        Nothing is returned unless the whole file parsed cleanly.

        Args:
            path: Snapshot file path

        Returns:
            Rebuilt Repository

        Raises:
            StorageError: Missing, unreadable, corrupt or malformed snapshot
        """
        path = str(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse snapshot JSON {path}: {e}")
            raise StorageError(f"Load failed: {path} is not a valid snapshot") from e
        except OSError as e:
            logger.error(f"Failed to read snapshot {path}: {e}")
            raise StorageError(f"Load failed: {e}") from e

        if not isinstance(data, dict):
            logger.error(f"Snapshot {path} has unexpected top-level type {type(data).__name__}")
            raise StorageError(f"Load failed: {path} is not a valid snapshot")

        try:
            repository = Repository.from_dict(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed snapshot {path}: {e}")
            raise StorageError(f"Load failed: malformed snapshot ({e})") from e

        logger.info(f"Loaded snapshot from {path} (version {data.get('version', 'unknown')})")
        return repository

    def bill_path(self, order_id: int) -> str:
        return os.path.join(self.bills_dir, f"bill-{order_id}.txt")

    def save_bill(self, order_id: int, bill: str) -> str:
        """
        Write an invoice as a text file.

        Args:
            order_id: Order the bill belongs to
            bill: Invoice text

        Returns:
            Path to the bill file

        Raises:
            StorageError: If the file could not be written
        """
        filepath = self.bill_path(order_id)

        try:
            os.makedirs(self.bills_dir, exist_ok=True)
            with open(filepath, 'w', encoding='utf-8') as f:
                f.write(bill)
            logger.info(f"Saved bill for order #{order_id} to {filepath}")
            return filepath
        except OSError as e:
            logger.error(f"Failed to save bill for order #{order_id}: {e}")
            raise StorageError(f"Could not save bill: {e}") from e
