from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from thrifthub.cache.cache import CacheManager
from thrifthub.core.responses.envelope import ApiResponse, ok
from thrifthub.database.connection import get_session
from thrifthub.schemas.campus.zone import ZoneRead

db_session = get_session
cache_manager = CacheManager()


class CampusRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.add_api_route("/campus/zones", self.list_zones, methods=["GET"], response_model=ApiResponse[List[ZoneRead]])

    def list_zones(self, campus: Optional[str] = Query(None), session: Session = Depends(db_session)):
        if not campus or not campus.strip():
            return ok([])
        return ok(cache_manager.get_campus_zones(session, campus))
