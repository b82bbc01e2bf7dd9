# thrifthub/models/__init__.py

from .user.user import User
from .campus.campus import Campus
from .campus.campus_zone import CampusZone
from .campus.zone_adjacency import ZoneAdjacency
from .product.product import Product
from .product.product_embedding import ProductEmbedding
from .cart.cart import Cart
from .cart.cart_item import CartItem
from .order.order import Order
from .order.order_item import OrderItem
from .payment.payment import Payment
from .delivery.rider import Rider
from .delivery.delivery import Delivery
from .review.review import Review
from .wishlist.wishlist_item import WishlistItem
