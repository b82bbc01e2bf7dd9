import logging
from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlmodel import Session, select

from thrifthub.auth.auth import AuthRouter
from thrifthub.core.exceptions.app_exception import ConflictException, NotFoundException
from thrifthub.core.middlewares.users import is_owner_or_admin
from thrifthub.core.responses.envelope import ApiResponse, ok
from thrifthub.database.connection import get_session
from thrifthub.enums.order_status import OrderStatus
from thrifthub.models.order.order import Order
from thrifthub.models.order.order_item import OrderItem
from thrifthub.models.product.product import Product
from thrifthub.models.review.review import Review
from thrifthub.models.user.user import User
from thrifthub.schemas.review.review import ProductReviews, ReviewCreate, ReviewRead

db_session = get_session
get_current_user = AuthRouter().get_current_user


def has_received_product(session: Session, user_id: int, product_id: int) -> bool:
    match = session.exec(
        select(OrderItem.id)
        .join(Order, Order.id == OrderItem.order_id)
        .where(Order.user_id == user_id, Order.status == OrderStatus.DELIVERED, OrderItem.product_id == product_id)
    ).first()
    return match is not None


def refresh_product_rating(session: Session, product: Product):
    average, count = session.exec(
        select(func.avg(Review.rating), func.count(Review.id)).where(Review.product_id == product.id)
    ).one()
    product.rating = round(float(average), 1) if average is not None else 0.0
    product.reviews_count = count
    session.add(product)


def review_read(review: Review, user: User) -> ReviewRead:
    return ReviewRead(
        id=review.id,
        product_id=review.product_id,
        user_id=review.user_id,
        user_name=f"{user.first_name} {user.last_name[:1]}.".strip() if user else "Anonymous",
        rating=review.rating,
        comment=review.comment,
        verified_purchase=review.verified_purchase,
        created_at=review.created_at,
    )


class ReviewRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.add_api_route("/reviews", self.create_review, methods=["POST"], response_model=ApiResponse[ReviewRead], status_code=201)
        self.add_api_route("/reviews/product/{product_id}", self.product_reviews, methods=["GET"], response_model=ApiResponse[ProductReviews])
        self.add_api_route("/reviews/{review_id}", self.delete_review, methods=["DELETE"], response_model=ApiResponse[None])

    def create_review(self, data: ReviewCreate, current_user: User = Depends(get_current_user), session: Session = Depends(db_session)):
        product = session.get(Product, data.product_id)
        if not product or not product.is_active:
            raise NotFoundException("Product not found")

        existing = session.exec(select(Review).where(Review.user_id == current_user.id, Review.product_id == product.id)).first()
        if existing:
            raise ConflictException("You have already reviewed this product")

        review = Review(
            product_id=product.id,
            user_id=current_user.id,
            rating=data.rating,
            comment=data.comment.strip() if data.comment else None,
            verified_purchase=has_received_product(session, current_user.id, product.id),
        )
        session.add(review)
        session.flush()
        refresh_product_rating(session, product)
        session.commit()
        session.refresh(review)

        logging.info(f"REVIEW >>> User {current_user.id} rated product {product.id} with {review.rating}")
        return ok(review_read(review, current_user), "Review submitted")

    def product_reviews(self, product_id: int, session: Session = Depends(db_session)):
        product = session.get(Product, product_id)
        if not product:
            raise NotFoundException("Product not found")

        rows = session.exec(
            select(Review, User).join(User, User.id == Review.user_id).where(Review.product_id == product_id).order_by(Review.created_at.desc(), Review.id.desc())
        ).all()

        distribution = {star: 0 for star in range(1, 6)}
        for review, _ in rows:
            distribution[review.rating] += 1
        total = len(rows)
        average = round(sum(review.rating for review, _ in rows) / total, 1) if total else 0.0

        return ok(ProductReviews(
            reviews=[review_read(review, user) for review, user in rows],
            average_rating=average,
            total_reviews=total,
            distribution=distribution,
        ))

    def delete_review(self, review_id: int, current_user: User = Depends(get_current_user), session: Session = Depends(db_session)):
        review = session.get(Review, review_id)
        if not review:
            raise NotFoundException("Review not found")
        is_owner_or_admin(current_user, review.user_id, "You can only delete your own reviews")

        product = session.get(Product, review.product_id)
        session.delete(review)
        session.flush()
        if product:
            refresh_product_rating(session, product)
        session.commit()
        return ok(None, "Review deleted")
