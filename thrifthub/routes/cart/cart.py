import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from thrifthub.auth.auth import AuthRouter
from thrifthub.core.exceptions.app_exception import ConflictException, NotFoundException
from thrifthub.core.responses.envelope import ApiResponse, ok
from thrifthub.database.connection import get_session
from thrifthub.helpers.order.presenters import product_summary
from thrifthub.models.cart.cart import Cart
from thrifthub.models.cart.cart_item import CartItem
from thrifthub.models.product.product import Product
from thrifthub.models.user.user import User
from thrifthub.schemas.cart.cart import CartItemCreate, CartItemRead, CartItemUpdate, CartRead

db_session = get_session
get_current_user = AuthRouter().get_current_user


def get_or_create_cart(session: Session, user: User) -> Cart:
    cart = session.exec(select(Cart).where(Cart.user_id == user.id)).first()
    if not cart:
        cart = Cart(user_id=user.id)
        session.add(cart)
        session.commit()
        session.refresh(cart)
    return cart


def check_stock(product: Product, quantity: int):
    if not product.is_active:
        raise ConflictException("Product is no longer available")
    if quantity > product.stock:
        raise ConflictException(f"Only {product.stock} item(s) of '{product.title}' in stock")


def cart_read(cart: Cart) -> CartRead:
    items = [
        CartItemRead(
            id=item.id,
            product_id=item.product_id,
            quantity=item.quantity,
            subtotal=item.subtotal,
            product=product_summary(item.product),
        )
        for item in sorted(cart.items, key=lambda i: i.id)
    ]
    return CartRead(id=cart.id, items=items, total=cart.total, total_items=cart.total_items)


class CartRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.add_api_route("/cart", self.get_cart, methods=["GET"], response_model=ApiResponse[CartRead])
        self.add_api_route("/cart/items", self.add_item, methods=["POST"], response_model=ApiResponse[CartRead], status_code=201)
        self.add_api_route("/cart/items/{item_id}", self.update_item, methods=["PATCH"], response_model=ApiResponse[CartRead])
        self.add_api_route("/cart/items/{item_id}", self.remove_item, methods=["DELETE"], response_model=ApiResponse[CartRead])
        self.add_api_route("/cart/clear", self.clear_cart, methods=["DELETE"], response_model=ApiResponse[CartRead])

    def _own_item(self, session: Session, cart: Cart, item_id: int) -> CartItem:
        item = session.get(CartItem, item_id)
        if not item or item.cart_id != cart.id:
            raise NotFoundException("Cart item not found")
        return item

    def _touch(self, session: Session, cart: Cart):
        cart.updated_at = datetime.now(timezone.utc)
        session.add(cart)
        session.commit()
        session.refresh(cart)

    def get_cart(self, current_user: User = Depends(get_current_user), session: Session = Depends(db_session)):
        return ok(cart_read(get_or_create_cart(session, current_user)))

    def add_item(self, data: CartItemCreate, current_user: User = Depends(get_current_user), session: Session = Depends(db_session)):
        cart = get_or_create_cart(session, current_user)
        product = session.get(Product, data.product_id)
        if not product:
            raise NotFoundException("Product not found")

        item = session.exec(select(CartItem).where(CartItem.cart_id == cart.id, CartItem.product_id == product.id)).first()
        quantity = data.quantity + (item.quantity if item else 0)
        check_stock(product, quantity)

        if item:
            item.quantity = quantity
            item.updated_at = datetime.now(timezone.utc)
        else:
            item = CartItem(cart_id=cart.id, product_id=product.id, quantity=quantity)
        session.add(item)
        self._touch(session, cart)

        logging.info(f"CART >>> User {current_user.id} has {quantity} x product {product.id}")
        return ok(cart_read(cart), "Item added to cart")

    def update_item(self, item_id: int, data: CartItemUpdate, current_user: User = Depends(get_current_user), session: Session = Depends(db_session)):
        cart = get_or_create_cart(session, current_user)
        item = self._own_item(session, cart, item_id)
        check_stock(item.product, data.quantity)

        item.quantity = data.quantity
        item.updated_at = datetime.now(timezone.utc)
        session.add(item)
        self._touch(session, cart)
        return ok(cart_read(cart), "Cart updated")

    def remove_item(self, item_id: int, current_user: User = Depends(get_current_user), session: Session = Depends(db_session)):
        cart = get_or_create_cart(session, current_user)
        item = self._own_item(session, cart, item_id)
        session.delete(item)
        self._touch(session, cart)
        return ok(cart_read(cart), "Item removed")

    def clear_cart(self, current_user: User = Depends(get_current_user), session: Session = Depends(db_session)):
        cart = get_or_create_cart(session, current_user)
        for item in list(cart.items):
            session.delete(item)
        self._touch(session, cart)
        return ok(cart_read(cart), "Cart cleared")
