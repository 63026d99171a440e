"""
Catalog cache for seed configuration.

Keeps the parsed YAML catalog in memory so startup and tests do not
re-read it from disk.
"""

import yaml
from typing import Dict, Any, List, Optional
from threading import Lock

from parametric.settings import CATALOG_FILE

class ConfigCache:
    """Thread-safe catalog cache."""

    def __init__(self, catalog_file: str = CATALOG_FILE):
        self.catalog_file = catalog_file
        self._catalog: Optional[Dict[str, Any]] = None
        self._lock = Lock()

    def get_catalog(self) -> Dict[str, Any]:
        """Get cached catalog, loading from disk if not cached."""
        if self._catalog is None:
            with self._lock:
                if self._catalog is None:  # Double-check locking
                    with open(self.catalog_file, 'r') as f:
                        self._catalog = yaml.safe_load(f) or {}
        return self._catalog

    def get_risk_profiles(self) -> List[Dict[str, Any]]:
        """Get risk profile definitions."""
        return self.get_catalog().get("risk_profiles", [])

    def get_oracles(self) -> List[Dict[str, Any]]:
        """Get oracle registrations."""
        return self.get_catalog().get("oracles", [])

    def clear_cache(self):
        """Clear all cached data (useful for testing)."""
        with self._lock:
            self._catalog = None

# Global cache instance
config_cache = ConfigCache()
