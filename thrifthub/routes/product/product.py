import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from thrifthub.auth.auth import AuthRouter
from thrifthub.core.exceptions.app_exception import NotFoundException
from thrifthub.core.middlewares.users import is_admin
from thrifthub.core.responses.envelope import ApiResponse, Pagination, ok
from thrifthub.database.connection import get_session
from thrifthub.enums.product_category import ProductCategory
from thrifthub.enums.product_condition import ProductCondition
from thrifthub.helpers.product.catalog import normalize_images, search_products
from thrifthub.models.product.product import Product
from thrifthub.models.user.user import User
from thrifthub.schemas.product.product import ProductCreate, ProductRead, ProductUpdate

db_session = get_session
get_current_user = AuthRouter().get_current_user

SORT_PATTERN = "^(newest|price_asc|price_desc)$"


class ProductRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.add_api_route("/products", self.list_products, methods=["GET"], response_model=ApiResponse[List[ProductRead]])
        self.add_api_route("/products", self.create_product, methods=["POST"], response_model=ApiResponse[ProductRead], status_code=201)
        self.add_api_route("/products/search", self.search, methods=["GET"], response_model=ApiResponse[List[ProductRead]])
        self.add_api_route("/products/{product_id}", self.get_product, methods=["GET"], response_model=ApiResponse[ProductRead])
        self.add_api_route("/products/{product_id}", self.update_product, methods=["PATCH"], response_model=ApiResponse[ProductRead])
        self.add_api_route("/products/{product_id}", self.delete_product, methods=["DELETE"], response_model=ApiResponse[None])

    def list_products(
        self,
        category: Optional[ProductCategory] = None,
        condition: Optional[ProductCondition] = None,
        min_price: Optional[Decimal] = Query(None, ge=0),
        max_price: Optional[Decimal] = Query(None, ge=0),
        size: Optional[str] = None,
        color: Optional[str] = None,
        search: Optional[str] = None,
        sort: str = Query("newest", pattern=SORT_PATTERN),
        page: int = Query(1, ge=1),
        limit: int = Query(20, ge=1, le=100),
        session: Session = Depends(db_session),
    ):
        products, total = search_products(
            session,
            category=category, condition=condition, min_price=min_price, max_price=max_price,
            size=size, color=color, search=search, sort=sort, page=page, limit=limit,
        )
        return ok([ProductRead.model_validate(p) for p in products], pagination=Pagination.build(total, page, limit))

    def search(
        self,
        q: str = Query(..., min_length=1),
        category: Optional[ProductCategory] = None,
        sort: str = Query("newest", pattern=SORT_PATTERN),
        page: int = Query(1, ge=1),
        limit: int = Query(20, ge=1, le=100),
        session: Session = Depends(db_session),
    ):
        products, total = search_products(session, search=q, category=category, sort=sort, page=page, limit=limit)
        return ok([ProductRead.model_validate(p) for p in products], pagination=Pagination.build(total, page, limit))

    def get_product(self, product_id: int, session: Session = Depends(db_session)):
        product = session.get(Product, product_id)
        if not product or not product.is_active:
            raise NotFoundException("Product not found")
        return ok(ProductRead.model_validate(product))

    def create_product(self, data: ProductCreate, current_user: User = Depends(get_current_user), session: Session = Depends(db_session)):
        is_admin(current_user)

        payload = data.model_dump()
        payload["images"] = normalize_images(payload["images"])
        product = Product(**payload)
        session.add(product)
        session.commit()
        session.refresh(product)

        logging.info(f"PRODUCT >>> Product {product.id} created by admin {current_user.id}")
        return ok(ProductRead.model_validate(product), "Product created")

    def update_product(self, product_id: int, data: ProductUpdate, current_user: User = Depends(get_current_user), session: Session = Depends(db_session)):
        is_admin(current_user)
        product = session.get(Product, product_id)
        if not product:
            raise NotFoundException("Product not found")

        update_data = data.model_dump(exclude_unset=True)
        if "images" in update_data:
            update_data["images"] = normalize_images(update_data["images"] or [])

        for field, value in update_data.items():
            setattr(product, field, value)
        product.updated_at = datetime.now(timezone.utc)

        session.add(product)
        session.commit()
        session.refresh(product)
        return ok(ProductRead.model_validate(product), "Product updated")

    def delete_product(self, product_id: int, current_user: User = Depends(get_current_user), session: Session = Depends(db_session)):
        is_admin(current_user)
        product = session.get(Product, product_id)
        if not product:
            raise NotFoundException("Product not found")

        product.is_active = False
        product.updated_at = datetime.now(timezone.utc)
        session.add(product)
        session.commit()

        logging.info(f"PRODUCT >>> Product {product.id} deactivated")
        return ok(None, "Product deleted")
