"""
Configuration settings for ExpertCart.

Centralized configuration for scoring, billing, storage and logging.
"""

import os
from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
DATA_ROOT = Path(os.getenv("EXPERTCART_DATA_ROOT", PROJECT_ROOT / "data"))
OUTPUT_ROOT = Path(os.getenv("EXPERTCART_OUTPUT_ROOT", PROJECT_ROOT / "output"))
BILLS_DIR = OUTPUT_ROOT / "bills"
SNAPSHOT_PATH = DATA_ROOT / "catalog.json"
SNAPSHOT_VERSION = "1.0.0"

# Billing
TAX_RATE = float(os.getenv("EXPERTCART_TAX_RATE", "0.18"))  # 18% GST-style tax
CURRENCY = os.getenv("EXPERTCART_CURRENCY", "INR")  # label only
BILL_NAME_WIDTH = 20  # Product column width on invoices

# Catalog
MIN_PRICE = 0.01
MAX_PRICE = 100000.0

# Scoring
MIN_SCORE = 1
MAX_SCORE = 10
DEFAULT_TRUST = 0.5  # Regular users, and experts whose account is missing
EXPERT_TRUST = 0.7  # Trust assigned to newly registered experts
DOMAIN_MATCH_BOOST = 1.25  # Applied when category == expertise domain

# Logging
LOG_LEVEL = os.getenv("EXPERTCART_LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = "expertcart.log"
