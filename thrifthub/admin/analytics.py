from collections import OrderedDict
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlmodel import Session, select

from thrifthub.auth.auth import AuthRouter
from thrifthub.core.exceptions.app_exception import field_error
from thrifthub.core.middlewares.users import is_admin
from thrifthub.core.responses.envelope import ApiResponse, ok
from thrifthub.database.connection import get_session
from thrifthub.enums.order_status import OrderStatus
from thrifthub.models.order.order import Order
from thrifthub.models.order.order_item import OrderItem
from thrifthub.models.product.product import Product
from thrifthub.models.user.user import User
from thrifthub.schemas.admin.admin import AnalyticsOverview, SalesAnalytics, SalesPoint, SalesSummary, TopProduct

get_current_user = AuthRouter().get_current_user

SALES_STATUSES = [OrderStatus.PROCESSING, OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED]


def period_key(created_at: datetime, group_by: str) -> str:
    day = created_at.date()
    if group_by == "weekly":
        return (day - timedelta(days=day.weekday())).isoformat()
    if group_by == "monthly":
        return day.strftime("%Y-%m")
    return day.isoformat()


class AnalyticsRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.add_api_route("/admin/analytics/overview", self.overview, methods=["GET"], response_model=ApiResponse[AnalyticsOverview])
        self.add_api_route("/admin/analytics/sales", self.sales, methods=["GET"], response_model=ApiResponse[SalesAnalytics])

    def overview(self, session: Session = Depends(get_session), current_user: User = Depends(get_current_user)):
        is_admin(current_user)

        revenue, order_count = session.exec(
            select(func.coalesce(func.sum(Order.total_amount), 0), func.count(Order.id)).where(Order.status != OrderStatus.CANCELLED)
        ).one()
        by_status = {status.value: 0 for status in OrderStatus}
        for status, count in session.exec(select(Order.status, func.count(Order.id)).group_by(Order.status)).all():
            by_status[status.value] = count

        return ok(AnalyticsOverview(
            total_revenue=revenue,
            total_orders=order_count,
            total_users=session.exec(select(func.count(User.id))).one(),
            total_products=session.exec(select(func.count(Product.id)).where(Product.is_active == True)).one(),  # noqa: E712
            orders_by_status=by_status,
        ))

    def sales(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        group_by: str = Query("daily", pattern="^(daily|weekly|monthly)$"),
        session: Session = Depends(get_session),
        current_user: User = Depends(get_current_user),
    ):
        is_admin(current_user)
        date_to = date_to or datetime.now(timezone.utc).date()
        date_from = date_from or date_to - timedelta(days=30)
        if date_from > date_to:
            raise field_error("date_from", "date_from must be before date_to")

        start = datetime.combine(date_from, time.min)
        end = datetime.combine(date_to, time.max)
        window = [Order.created_at >= start, Order.created_at <= end, Order.status.in_(SALES_STATUSES)]

        orders = session.exec(select(Order).where(*window).order_by(Order.created_at)).all()
        buckets = OrderedDict()
        for order in orders:
            key = period_key(order.created_at, group_by)
            bucket = buckets.setdefault(key, {"date": key, "total_sales": Decimal("0.00"), "order_count": 0})
            bucket["total_sales"] += Decimal(order.total_amount)
            bucket["order_count"] += 1

        total_sales = sum((b["total_sales"] for b in buckets.values()), Decimal("0.00"))
        total_orders = len(orders)

        top_rows = session.exec(
            select(
                Product.id, Product.title, Product.category,
                func.sum(OrderItem.quantity).label("quantity_sold"),
                func.sum(OrderItem.unit_price * OrderItem.quantity).label("revenue"),
            )
            .join(Order, Order.id == OrderItem.order_id)
            .join(Product, Product.id == OrderItem.product_id)
            .where(*window)
            .group_by(Product.id, Product.title, Product.category)
            .order_by(func.sum(OrderItem.quantity).desc(), Product.id)
            .limit(10)
        ).all()

        return ok(SalesAnalytics(
            date_from=date_from,
            date_to=date_to,
            group_by=group_by,
            summary=SalesSummary(
                total_sales=total_sales,
                total_orders=total_orders,
                average_order_value=(total_sales / total_orders) if total_orders else 0,
            ),
            sales_data=[SalesPoint(**bucket) for bucket in sorted(buckets.values(), key=lambda b: b["date"])],
            top_products=[
                TopProduct(product_id=pid, title=title, category=category.value, quantity_sold=quantity or 0, total_revenue=revenue or 0)
                for pid, title, category, quantity, revenue in top_rows
            ],
        ))
