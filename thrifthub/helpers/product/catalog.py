from decimal import Decimal
from typing import Optional, Tuple, List
from sqlalchemy import func
from sqlmodel import Session, or_, select

from thrifthub.enums.product_category import ProductCategory
from thrifthub.enums.product_condition import ProductCondition
from thrifthub.models.product.product import Product

SORT_OPTIONS = {
    "newest": (Product.created_at.desc(), Product.id.desc()),
    "price_asc": (Product.price.asc(), Product.id.asc()),
    "price_desc": (Product.price.desc(), Product.id.desc()),
}


def search_products(
    session: Session,
    *,
    category: Optional[ProductCategory] = None,
    condition: Optional[ProductCondition] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    size: Optional[str] = None,
    color: Optional[str] = None,
    search: Optional[str] = None,
    sort: str = "newest",
    page: int = 1,
    limit: int = 20,
) -> Tuple[List[Product], int]:
    """Active products matching the filters, plus the total match count."""
    filters = [Product.is_active == True]  # noqa: E712

    if category:
        filters.append(Product.category == category)
    if condition:
        filters.append(Product.condition == condition)
    if min_price is not None:
        filters.append(Product.price >= min_price)
    if max_price is not None:
        filters.append(Product.price <= max_price)
    if size:
        filters.append(func.lower(Product.size) == size.strip().lower())
    if color:
        filters.append(Product.color.ilike(f"%{color.strip()}%"))
    if search:
        term = f"%{search.strip()}%"
        filters.append(or_(Product.title.ilike(term), Product.description.ilike(term), Product.brand.ilike(term)))

    total = session.exec(select(func.count()).select_from(Product).where(*filters)).one()
    products = session.exec(
        select(Product)
        .where(*filters)
        .order_by(*SORT_OPTIONS.get(sort, SORT_OPTIONS["newest"]))
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()
    return products, total


def normalize_images(images: List[dict]) -> List[dict]:
    """Exactly one primary image; the first one when none is flagged."""
    images = [dict(image) for image in images]
    if not images:
        return images
    primary = next((i for i, image in enumerate(images) if image.get("is_primary")), 0)
    for index, image in enumerate(images):
        image["is_primary"] = index == primary
    return images
