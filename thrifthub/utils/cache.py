# thrifthub/utils/cache.py
from typing import Dict, Any, Optional
import logging
from datetime import datetime, timedelta


class DataCache:
    def __init__(self):
        self._cache: Dict[str, Any] = {}
        self._expiry_times: Dict[str, datetime] = {}
        self.default_ttl = timedelta(minutes=15)

    def set(self, key: str, data: Any, ttl: Optional[int] = None) -> None:
        """Stores a value for `ttl` seconds (15 minutes by default)."""
        expiration = datetime.now() + timedelta(seconds=ttl) if ttl else datetime.now() + self.default_ttl
        self._cache[key] = data
        self._expiry_times[key] = expiration
        logging.debug(f"Cache set for key: {key}")

    def get(self, key: str) -> Optional[Any]:
        """Returns the cached value, or None when missing or expired."""
        if key not in self._cache:
            return None

        if datetime.now() > self._expiry_times.get(key, datetime.min):
            del self._cache[key]
            del self._expiry_times[key]
            logging.debug(f"Cache expired for key: {key}")
            return None

        return self._cache[key]

    def clear(self, key: Optional[str] = None) -> None:
        """Removes one key, or everything when no key is given."""
        if key is None:
            self._cache.clear()
            self._expiry_times.clear()
            return
        if key in self._cache:
            del self._cache[key]
            del self._expiry_times[key]
            logging.debug(f"Cache cleared for key: {key}")
