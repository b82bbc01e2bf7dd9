import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, File, UploadFile
from sqlmodel import Session

from thrifthub.auth.auth import AuthRouter
from thrifthub.core.exceptions.app_exception import NotFoundException, field_error
from thrifthub.core.middlewares.users import is_admin
from thrifthub.core.responses.envelope import ApiResponse, ok
from thrifthub.database.connection import get_session
from thrifthub.helpers.product.catalog import normalize_images
from thrifthub.models.product.product import Product
from thrifthub.models.user.user import User
from thrifthub.schemas.product.product import ProductRead
from thrifthub.storage.R2Service import R2Service, get_storage

db_session = get_session
get_current_user = AuthRouter().get_current_user

ALLOWED_IMAGE_TYPES = {"image/jpeg": "jpg", "image/jpg": "jpg", "image/png": "png"}
MAX_IMAGE_BYTES = 10 * 1024 * 1024


async def read_image(image: UploadFile, field: str = "image") -> bytes:
    """Reads an upload, accepting JPG/PNG up to 10 MB."""
    if image.content_type not in ALLOWED_IMAGE_TYPES:
        raise field_error(field, "Only JPG and PNG images are allowed")
    contents = await image.read()
    if not contents:
        raise field_error(field, "Image file is empty")
    if len(contents) > MAX_IMAGE_BYTES:
        raise field_error(field, "Image must be 10MB or smaller")
    return contents


class UploadRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.add_api_route("/upload/product-image/{product_id}", self.upload_product_image, methods=["POST"], response_model=ApiResponse[ProductRead])

    async def upload_product_image(
        self,
        product_id: int,
        image: UploadFile = File(...),
        current_user: User = Depends(get_current_user),
        session: Session = Depends(db_session),
        storage: R2Service = Depends(get_storage),
    ):
        is_admin(current_user)
        product = session.get(Product, product_id)
        if not product:
            raise NotFoundException("Product not found")

        contents = await read_image(image)
        extension = ALLOWED_IMAGE_TYPES[image.content_type]
        key = storage.build_key(f"{product.id}.{extension}")
        image_url = await storage.upload_file(file_content=contents, file_name=key, content_type=image.content_type)

        product.images = normalize_images(list(product.images or []) + [{"image_url": image_url, "is_primary": False}])
        product.updated_at = datetime.now(timezone.utc)
        session.add(product)
        session.commit()
        session.refresh(product)

        logging.info(f"PRODUCT >>> Image added to product {product.id}")
        return ok(ProductRead.model_validate(product), "Image uploaded")
