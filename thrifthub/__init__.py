import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from thrifthub.configuration.settings import Configuration
from thrifthub.core.exceptions.handlers import register_exception_handlers
from thrifthub.database import init_db
from thrifthub.functions.scheduler.scheduler import start_scheduler

from thrifthub.auth.auth import AuthRouter
from thrifthub.admin.admin import AdminRouter
from thrifthub.admin.analytics import AnalyticsRouter
from thrifthub.admin.riders import RiderAdminRouter

from thrifthub.routes.ai.style_match import StyleMatchRouter
from thrifthub.routes.campus.zones import CampusRouter
from thrifthub.routes.cart.cart import CartRouter
from thrifthub.routes.delivery.delivery import DeliveryRouter
from thrifthub.routes.order.order import OrderRouter
from thrifthub.routes.payment.payment import PaymentRouter
from thrifthub.routes.payment.webhook import WebhookRouter
from thrifthub.routes.product.product import ProductRouter
from thrifthub.routes.product.upload import UploadRouter
from thrifthub.routes.review.review import ReviewRouter
from thrifthub.routes.wishlist.wishlist import WishlistRouter

configuration = Configuration()

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logging.info(f"SYSTEM >>> Environment loaded: {configuration.environment}")


def create_app():
    """
    Builds the FastAPI application: database, scheduler, middlewares, routes
    and the error envelope handlers.
    """
    app = FastAPI(title="ThriftHub API")

    logging.info("SYSTEM >>> Initializing database...")
    init_db()
    app.state.scheduler = start_scheduler()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=configuration.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(AuthRouter())
    app.include_router(AdminRouter())
    app.include_router(RiderAdminRouter())
    app.include_router(AnalyticsRouter())

    app.include_router(ProductRouter())
    app.include_router(UploadRouter())
    app.include_router(CampusRouter())
    app.include_router(CartRouter())
    app.include_router(OrderRouter())
    app.include_router(PaymentRouter())
    app.include_router(WebhookRouter())
    app.include_router(DeliveryRouter())
    app.include_router(ReviewRouter())
    app.include_router(WishlistRouter())
    app.include_router(StyleMatchRouter())

    return app
