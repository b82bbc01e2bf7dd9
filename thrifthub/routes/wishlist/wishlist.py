from typing import List
from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from thrifthub.auth.auth import AuthRouter
from thrifthub.core.exceptions.app_exception import ConflictException, NotFoundException
from thrifthub.core.responses.envelope import ApiResponse, ok
from thrifthub.database.connection import get_session
from thrifthub.helpers.order.presenters import product_summary
from thrifthub.models.product.product import Product
from thrifthub.models.user.user import User
from thrifthub.models.wishlist.wishlist_item import WishlistItem
from thrifthub.schemas.wishlist.wishlist import WishlistCreate, WishlistItemRead

db_session = get_session
get_current_user = AuthRouter().get_current_user


class WishlistRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.add_api_route("/wishlist", self.get_wishlist, methods=["GET"], response_model=ApiResponse[List[WishlistItemRead]])
        self.add_api_route("/wishlist", self.add_to_wishlist, methods=["POST"], response_model=ApiResponse[WishlistItemRead], status_code=201)
        self.add_api_route("/wishlist/{product_id}", self.remove_from_wishlist, methods=["DELETE"], response_model=ApiResponse[None])

    def get_wishlist(self, current_user: User = Depends(get_current_user), session: Session = Depends(db_session)):
        rows = session.exec(
            select(WishlistItem, Product)
            .join(Product, Product.id == WishlistItem.product_id)
            .where(WishlistItem.user_id == current_user.id)
            .order_by(WishlistItem.created_at.desc(), WishlistItem.id.desc())
        ).all()
        items = [
            WishlistItemRead(id=item.id, product_id=product.id, product=product_summary(product), created_at=item.created_at)
            for item, product in rows
        ]
        return ok(items)

    def add_to_wishlist(self, data: WishlistCreate, current_user: User = Depends(get_current_user), session: Session = Depends(db_session)):
        product = session.get(Product, data.product_id)
        if not product or not product.is_active:
            raise NotFoundException("Product not found")

        existing = session.exec(
            select(WishlistItem).where(WishlistItem.user_id == current_user.id, WishlistItem.product_id == product.id)
        ).first()
        if existing:
            raise ConflictException("Product already in wishlist")

        item = WishlistItem(user_id=current_user.id, product_id=product.id)
        session.add(item)
        session.commit()
        session.refresh(item)
        return ok(WishlistItemRead(id=item.id, product_id=product.id, product=product_summary(product), created_at=item.created_at), "Added to wishlist")

    def remove_from_wishlist(self, product_id: int, current_user: User = Depends(get_current_user), session: Session = Depends(db_session)):
        item = session.exec(
            select(WishlistItem).where(WishlistItem.user_id == current_user.id, WishlistItem.product_id == product_id)
        ).first()
        if not item:
            raise NotFoundException("Product not in wishlist")
        session.delete(item)
        session.commit()
        return ok(None, "Removed from wishlist")
