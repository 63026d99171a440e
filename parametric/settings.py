"""
Runtime settings read from the environment.
"""

import os
from datetime import datetime, timezone

# Database URL - defaults to SQLite for development
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./parametric.db")

# Identity holding the contract administrator capability
ADMIN_IDENTITY = os.getenv("ADMIN_IDENTITY", "admin")

# Seed catalog of risk profiles, oracles and opening capital
CATALOG_FILE = os.getenv(
    "CATALOG_FILE",
    os.path.join(os.path.dirname(__file__), "config", "catalog.yaml")
)

# Time index 0 starts at INDEX_EPOCH and advances every INDEX_INTERVAL_SECONDS
INDEX_EPOCH = datetime.fromisoformat(
    os.getenv("INDEX_EPOCH", "2024-01-01T00:00:00+00:00")
).astimezone(timezone.utc)
INDEX_INTERVAL_SECONDS = int(os.getenv("INDEX_INTERVAL_SECONDS", "600"))

# Process claims as the administrator right after submission
AUTO_PROCESS_CLAIMS = os.getenv("AUTO_PROCESS_CLAIMS", "false").lower() in ("1", "true", "yes")

# Fixed-point denominator for rates and payout shares
BASIS_POINTS = 10000
