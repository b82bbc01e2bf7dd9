# thrifthub/cache/cache.py
import logging
from typing import List, Optional
from sqlalchemy import func
from sqlmodel import Session, or_, select

from thrifthub.models.campus.campus import Campus
from thrifthub.models.campus.campus_zone import CampusZone
from thrifthub.schemas.campus.zone import ZoneRead
from thrifthub.utils.cache import DataCache

cache = DataCache()


class CacheManager:
    _cache_key_prefix = "main_data_"

    def __init__(self):
        self.cache = cache

    def get_cache_key(self, key: str) -> str:
        return f"{self._cache_key_prefix}{key}"

    def load_cached_data(self, key: str) -> Optional[list]:
        cache_key = self.get_cache_key(key)
        cached_data = self.cache.get(cache_key)
        if cached_data is not None:
            logging.info(f"CACHE >>> Hit for {cache_key}")
        return cached_data

    def cache_data(self, key: str, data: list) -> None:
        cache_key = self.get_cache_key(key)
        self.cache.set(cache_key, data, ttl=900)
        logging.info(f"CACHE >>> Stored {cache_key}")

    def get_campus_zones(self, session: Session, campus_name: str) -> List[dict]:
        """Zones of an active campus matched by name or code, case-insensitive."""
        key = f"zones_{campus_name.strip().lower()}"
        cached = self.load_cached_data(key)
        if cached is not None:
            return cached

        needle = campus_name.strip().lower()
        campus = session.exec(
            select(Campus).where(
                Campus.is_active == True,  # noqa: E712
                or_(func.lower(Campus.name) == needle, func.lower(Campus.code) == needle),
            )
        ).first()
        if not campus:
            return []

        zones = session.exec(select(CampusZone).where(CampusZone.campus_id == campus.id).order_by(CampusZone.code)).all()
        data = [ZoneRead.model_validate(zone).model_dump() for zone in zones]
        self.cache_data(key, data)
        return data

    def clear_zones(self) -> None:
        self.cache.clear()
