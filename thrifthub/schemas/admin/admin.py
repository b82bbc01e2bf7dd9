from datetime import date
from typing import Dict, List, Optional
from pydantic import BaseModel

from thrifthub.enums.user_role import UserRole


class UserAdminUpdate(BaseModel):
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class RiderCreate(BaseModel):
    user_id: int
    zone_id: int


class RiderAvailabilityUpdate(BaseModel):
    is_available: bool


class RiderRead(BaseModel):
    id: int
    user_id: int
    name: str
    email: str
    phone: Optional[str] = None
    zone_id: int
    zone_code: Optional[str] = None
    zone_name: Optional[str] = None
    is_available: bool
    total_deliveries: int
    rating: float


class AnalyticsOverview(BaseModel):
    total_revenue: float
    total_orders: int
    total_users: int
    total_products: int
    orders_by_status: Dict[str, int]


class SalesPoint(BaseModel):
    date: str
    total_sales: float
    order_count: int


class TopProduct(BaseModel):
    product_id: int
    title: str
    category: str
    quantity_sold: int
    total_revenue: float


class SalesSummary(BaseModel):
    total_sales: float
    total_orders: int
    average_order_value: float


class SalesAnalytics(BaseModel):
    date_from: date
    date_to: date
    group_by: str
    summary: SalesSummary
    sales_data: List[SalesPoint]
    top_products: List[TopProduct]


class EmbeddingRun(BaseModel):
    processed: int
    failed: int
    errors: List[str] = []
