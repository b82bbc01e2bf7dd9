"""
Test data factories backed by a live SQLModel session.
"""
import random
import string
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import select

from thrifthub.auth.auth import AuthRouter, hash_password
from thrifthub.enums.delivery_status import DeliveryStatus
from thrifthub.enums.order_status import OrderStatus
from thrifthub.enums.payment_method import PaymentMethod
from thrifthub.enums.payment_status import PaymentStatus
from thrifthub.enums.product_category import ProductCategory
from thrifthub.enums.product_condition import ProductCondition
from thrifthub.enums.user_role import UserRole
from thrifthub.models.campus.campus import Campus
from thrifthub.models.campus.campus_zone import CampusZone
from thrifthub.models.campus.zone_adjacency import ZoneAdjacency
from thrifthub.models.delivery.delivery import Delivery
from thrifthub.models.delivery.rider import Rider
from thrifthub.models.order.order import Order
from thrifthub.models.order.order_item import OrderItem
from thrifthub.models.payment.payment import Payment
from thrifthub.models.product.product import Product
from thrifthub.models.user.user import User

DEFAULT_PASSWORD = "secret123"

auth = AuthRouter()


class TestDataFactory:
    """Factory for creating test data"""

    __test__ = False

    def __init__(self, session):
        self.session = session

    @staticmethod
    def random_string(length=6):
        return "".join(random.choices(string.ascii_lowercase + string.digits, k=length))

    def _save(self, obj):
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def create_user(self, role=UserRole.STUDENT, email=None, password=DEFAULT_PASSWORD, phone=None, is_active=True, first_name="Ama"):
        return self._save(User(
            email=email or f"{self.random_string()}@ug.edu.gh",
            password_hash=hash_password(password),
            first_name=first_name,
            last_name="Mensah",
            phone=phone,
            role=role,
            is_active=is_active,
        ))

    def create_admin(self):
        return self.create_user(role=UserRole.ADMIN, first_name="Admin")

    @staticmethod
    def auth_headers(user):
        return {"Authorization": f"Bearer {auth.create_access_token(user)}"}

    def create_campus(self, code="UG", name="University of Ghana"):
        return self._save(Campus(code=code, name=name))

    def create_zone(self, campus=None, code=None, name=None, delivery_fee="5.00"):
        campus = campus or self.create_campus(code=f"C{self.random_string(4)}")
        code = code or f"ZONE-{self.random_string(4).upper()}"
        return self._save(CampusZone(campus_id=campus.id, code=code, name=name or code.title(), delivery_fee=Decimal(delivery_fee)))

    def link_zones(self, zone, other):
        return self._save(ZoneAdjacency(zone_id=zone.id, adjacent_zone_id=other.id))

    def create_product(self, title=None, price="50.00", stock=5, category=ProductCategory.TOPS, **overrides):
        data = dict(
            title=title or f"Item {self.random_string()}",
            description="Gently used",
            category=category,
            size="M",
            color="Blue",
            brand="Zara",
            condition=ProductCondition.GOOD,
            price=Decimal(price),
            stock=stock,
        )
        data.update(overrides)
        return self._save(Product(**data))

    def create_rider(self, zone, user=None, total_deliveries=0, is_available=True):
        user = user or self.create_user(role=UserRole.RIDER, first_name="Kofi", phone="0241234567")
        return self._save(Rider(user_id=user.id, zone_id=zone.id, total_deliveries=total_deliveries, is_available=is_available))

    def create_order(
        self,
        user,
        zone,
        lines=None,
        method=PaymentMethod.MOBILE_MONEY,
        status=OrderStatus.PENDING,
        payment_status=PaymentStatus.PENDING,
        delivery_status=DeliveryStatus.PENDING,
        rider=None,
        paid_amount="0.00",
        **payment_fields,
    ):
        """Order with its items, payment and delivery rows, bypassing checkout."""
        lines = lines if lines is not None else [(self.create_product(), 1)]
        subtotal = sum((product.price * quantity for product, quantity in lines), Decimal("0.00"))
        total = subtotal + zone.delivery_fee

        order = self._save(Order(
            user_id=user.id,
            subtotal=subtotal,
            delivery_fee=zone.delivery_fee,
            total_amount=total,
            delivery_address="Room 12, Commonwealth Hall",
            campus_zone=zone.code,
            status=status,
        ))
        for product, quantity in lines:
            self.session.add(OrderItem(order_id=order.id, product_id=product.id, quantity=quantity, unit_price=product.price))

        paid = Decimal(paid_amount)
        self.session.add(Payment(
            order_id=order.id,
            method=method,
            status=payment_status,
            amount=total,
            paid_amount=paid,
            remaining_amount=total - paid,
            installment_plan=method == PaymentMethod.INSTALLMENT,
            **payment_fields,
        ))
        self.session.add(Delivery(
            order_id=order.id,
            zone_id=zone.id,
            rider_id=rider.id if rider else None,
            status=delivery_status,
            delivery_address=order.delivery_address,
            assigned_at=datetime.now(timezone.utc) if rider else None,
        ))
        self.session.commit()
        self.session.refresh(order)
        return order

    def payment_for(self, order):
        return self.session.exec(select(Payment).where(Payment.order_id == order.id)).one()

    def delivery_for(self, order):
        return self.session.exec(select(Delivery).where(Delivery.order_id == order.id)).one()

    def user_of(self, rider):
        return self.session.get(User, rider.user_id)
