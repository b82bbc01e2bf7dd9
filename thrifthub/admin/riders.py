import logging
from datetime import datetime, timezone
from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from thrifthub.auth.auth import AuthRouter
from thrifthub.core.exceptions.app_exception import ConflictException, ForbiddenException, NotFoundException
from thrifthub.core.middlewares.users import is_admin
from thrifthub.core.responses.envelope import ApiResponse, ok
from thrifthub.database.connection import get_session
from thrifthub.enums.user_role import UserRole
from thrifthub.models.campus.campus_zone import CampusZone
from thrifthub.models.delivery.rider import Rider
from thrifthub.models.user.user import User
from thrifthub.schemas.admin.admin import RiderAvailabilityUpdate, RiderCreate, RiderRead

get_current_user = AuthRouter().get_current_user


def rider_read(session: Session, rider: Rider) -> RiderRead:
    user = session.get(User, rider.user_id)
    zone = session.get(CampusZone, rider.zone_id)
    return RiderRead(
        id=rider.id,
        user_id=rider.user_id,
        name=user.full_name,
        email=user.email,
        phone=user.phone,
        zone_id=rider.zone_id,
        zone_code=zone.code if zone else None,
        zone_name=zone.name if zone else None,
        is_available=rider.is_available,
        total_deliveries=rider.total_deliveries,
        rating=rider.rating,
    )


class RiderAdminRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.add_api_route("/admin/riders", self.list_riders, methods=["GET"], response_model=ApiResponse[List[RiderRead]])
        self.add_api_route("/admin/riders", self.create_rider, methods=["POST"], response_model=ApiResponse[RiderRead], status_code=201)
        self.add_api_route("/admin/riders/{rider_id}/availability", self.update_availability, methods=["PATCH"], response_model=ApiResponse[RiderRead])

    def list_riders(
        self,
        zone_id: Optional[int] = None,
        is_available: Optional[bool] = None,
        session: Session = Depends(get_session),
        current_user: User = Depends(get_current_user),
    ):
        is_admin(current_user)
        query = select(Rider)
        if zone_id is not None:
            query = query.where(Rider.zone_id == zone_id)
        if is_available is not None:
            query = query.where(Rider.is_available == is_available)
        riders = session.exec(query.order_by(Rider.id)).all()
        return ok([rider_read(session, rider) for rider in riders])

    def create_rider(self, data: RiderCreate, session: Session = Depends(get_session), current_user: User = Depends(get_current_user)):
        is_admin(current_user)
        user = session.get(User, data.user_id)
        if not user:
            raise NotFoundException("User not found")
        if not session.get(CampusZone, data.zone_id):
            raise NotFoundException("Campus zone not found")
        if session.exec(select(Rider).where(Rider.user_id == user.id)).first():
            raise ConflictException("User is already a rider")

        rider = Rider(user_id=user.id, zone_id=data.zone_id, is_available=True)
        user.role = UserRole.RIDER
        user.updated_at = datetime.now(timezone.utc)
        session.add(rider)
        session.add(user)
        session.commit()
        session.refresh(rider)

        logging.info(f"ADMIN >>> User {user.id} promoted to rider {rider.id}")
        return ok(rider_read(session, rider), "Rider created successfully")

    def update_availability(
        self,
        rider_id: int,
        data: RiderAvailabilityUpdate,
        session: Session = Depends(get_session),
        current_user: User = Depends(get_current_user),
    ):
        rider = session.get(Rider, rider_id)
        if not rider:
            raise NotFoundException("Rider not found")
        if current_user.role != UserRole.ADMIN and rider.user_id != current_user.id:
            raise ForbiddenException("Access denied")

        rider.is_available = data.is_available
        rider.updated_at = datetime.now(timezone.utc)
        session.add(rider)
        session.commit()
        session.refresh(rider)

        state = "online" if rider.is_available else "offline"
        logging.info(f"DELIVERY >>> Rider {rider.id} is now {state}")
        return ok(rider_read(session, rider), f"Rider is now {state}")
