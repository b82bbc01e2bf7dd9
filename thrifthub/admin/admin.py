import logging
from datetime import datetime, timezone
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlmodel import Session, or_, select

from thrifthub.auth.auth import AuthRouter
from thrifthub.core.exceptions.app_exception import ConflictException, NotFoundException
from thrifthub.core.middlewares.users import is_admin
from thrifthub.core.responses.envelope import ApiResponse, Pagination, ok
from thrifthub.database.connection import get_session
from thrifthub.enums.order_status import OrderStatus, TERMINAL_ORDER_STATUSES
from thrifthub.enums.user_role import UserRole
from thrifthub.helpers.ai.indexing import generate_missing_embeddings
from thrifthub.helpers.order.presenters import order_summary
from thrifthub.integration.embeddings import EmbeddingService, get_embedding_service
from thrifthub.models.order.order import Order
from thrifthub.models.user.user import User
from thrifthub.schemas.admin.admin import EmbeddingRun, UserAdminUpdate
from thrifthub.schemas.auth.auth import UserRead
from thrifthub.schemas.order.order import OrderSummary, StatusUpdateRequest

get_current_user = AuthRouter().get_current_user


class AdminRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.add_api_route("/admin/users", self.list_users, methods=["GET"], response_model=ApiResponse[List[UserRead]])
        self.add_api_route("/admin/users/{user_id}", self.update_user, methods=["PATCH"], response_model=ApiResponse[UserRead])
        self.add_api_route("/admin/orders", self.list_orders, methods=["GET"], response_model=ApiResponse[List[OrderSummary]])
        self.add_api_route("/admin/orders/{order_id}/status", self.update_order_status, methods=["PATCH"], response_model=ApiResponse[OrderSummary])
        self.add_api_route("/admin/ai/generate-embeddings", self.generate_embeddings, methods=["POST"], response_model=ApiResponse[EmbeddingRun])

    def list_users(
        self,
        role: Optional[UserRole] = None,
        search: Optional[str] = None,
        page: int = Query(1, ge=1),
        limit: int = Query(20, ge=1, le=100),
        session: Session = Depends(get_session),
        current_user: User = Depends(get_current_user),
    ):
        is_admin(current_user)
        filters = []
        if role:
            filters.append(User.role == role)
        if search:
            term = f"%{search.strip()}%"
            filters.append(or_(User.email.ilike(term), User.first_name.ilike(term), User.last_name.ilike(term)))

        total = session.exec(select(func.count()).select_from(User).where(*filters)).one()
        users = session.exec(
            select(User).where(*filters).order_by(User.created_at.desc(), User.id.desc()).offset((page - 1) * limit).limit(limit)
        ).all()
        return ok([UserRead.model_validate(user) for user in users], pagination=Pagination.build(total, page, limit))

    def update_user(self, user_id: int, data: UserAdminUpdate, session: Session = Depends(get_session), current_user: User = Depends(get_current_user)):
        is_admin(current_user)
        db_user = session.get(User, user_id)
        if not db_user:
            raise NotFoundException("User not found")
        if db_user.id == current_user.id and (data.is_active is False or (data.role and data.role != UserRole.ADMIN)):
            raise ConflictException("You cannot demote or deactivate your own account")

        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(db_user, field, value)
        db_user.updated_at = datetime.now(timezone.utc)

        session.add(db_user)
        session.commit()
        session.refresh(db_user)
        logging.info(f"ADMIN >>> User {db_user.id} updated by {current_user.id}")
        return ok(UserRead.model_validate(db_user), "User updated")

    def list_orders(
        self,
        status: Optional[OrderStatus] = None,
        page: int = Query(1, ge=1),
        limit: int = Query(20, ge=1, le=100),
        session: Session = Depends(get_session),
        current_user: User = Depends(get_current_user),
    ):
        is_admin(current_user)
        filters = [Order.status == status] if status else []

        total = session.exec(select(func.count()).select_from(Order).where(*filters)).one()
        orders = session.exec(
            select(Order).where(*filters).order_by(Order.created_at.desc(), Order.id.desc()).offset((page - 1) * limit).limit(limit)
        ).all()
        return ok([order_summary(session, order) for order in orders], pagination=Pagination.build(total, page, limit))

    def update_order_status(self, order_id: int, data: StatusUpdateRequest, session: Session = Depends(get_session), current_user: User = Depends(get_current_user)):
        is_admin(current_user)
        order = session.get(Order, order_id)
        if not order:
            raise NotFoundException("Order not found")
        if order.status in TERMINAL_ORDER_STATUSES:
            raise ConflictException(f"Order is already {order.status.value}")

        order.status = data.status
        order.updated_at = datetime.now(timezone.utc)
        session.add(order)
        session.commit()
        session.refresh(order)

        logging.info(f"ADMIN >>> Order {order.order_number} set to {order.status.value}")
        return ok(order_summary(session, order), f"Status updated to {order.status.value}")

    def generate_embeddings(
        self,
        session: Session = Depends(get_session),
        current_user: User = Depends(get_current_user),
        embeddings: EmbeddingService = Depends(get_embedding_service),
    ):
        is_admin(current_user)
        run = generate_missing_embeddings(session, embeddings)
        return ok(run, f"Generated embeddings for {run.processed} products")
