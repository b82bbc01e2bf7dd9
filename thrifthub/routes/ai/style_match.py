import logging
from typing import List
from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile
from pydantic import ValidationError
from sqlmodel import Session, select

from thrifthub.core.exceptions.app_exception import ValidationException, field_error
from thrifthub.core.responses.envelope import ApiResponse, ok
from thrifthub.database.connection import get_session
from thrifthub.helpers.ai.similarity import cosine_similarity, match_label, parse_embedding
from thrifthub.helpers.order.presenters import product_summary
from thrifthub.integration.embeddings import EmbeddingService, get_embedding_service
from thrifthub.models.product.product import Product
from thrifthub.models.product.product_embedding import ProductEmbedding
from thrifthub.routes.product.upload import ALLOWED_IMAGE_TYPES, read_image
from thrifthub.schemas.ai.style_match import StyleMatchRequest, StyleMatchResult
from thrifthub.storage.R2Service import R2Service, get_storage

db_session = get_session

MAX_RESULTS = 20


def rank_products(session: Session, query_vector: List[float], limit: int = MAX_RESULTS) -> List[StyleMatchResult]:
    """Active products ordered by cosine similarity to the query vector, best first."""
    rows = session.exec(
        select(Product, ProductEmbedding)
        .join(ProductEmbedding, ProductEmbedding.product_id == Product.id)
        .where(Product.is_active == True)  # noqa: E712
    ).all()

    scored = []
    for product, embedding in rows:
        vector = parse_embedding(embedding.embedding)
        if len(vector) != len(query_vector):
            logging.warning(f"AI >>> Skipping product {product.id}, embedding has {len(vector)} dimensions")
            continue
        scored.append((cosine_similarity(query_vector, vector), product))

    scored.sort(key=lambda pair: (-pair[0], pair[1].id))
    return [
        StyleMatchResult(
            product=product_summary(product),
            similarity_score=round(score, 4),
            match_label=match_label(score),
            category=product.category.value,
        )
        for score, product in scored[:limit]
    ]


class StyleMatchRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.add_api_route("/ai/style-match", self.style_match, methods=["POST"], response_model=ApiResponse[List[StyleMatchResult]])

    async def style_match(
        self,
        request: Request,
        session: Session = Depends(db_session),
        embeddings: EmbeddingService = Depends(get_embedding_service),
        storage: R2Service = Depends(get_storage),
    ):
        content_type = request.headers.get("content-type", "")

        if content_type.startswith("multipart/form-data"):
            form = await request.form()
            image = form.get("image")
            if not isinstance(image, UploadFile):
                raise field_error("image", "Image file is required")
            contents = await read_image(image)
            key = storage.build_key(f"query.{ALLOWED_IMAGE_TYPES[image.content_type]}", folder="style-match")
            image_url = await storage.upload_file(file_content=contents, file_name=key, content_type=image.content_type)
            try:
                query_vector = embeddings.embed_image(image_url)
            finally:
                await storage.delete_file(key)
        else:
            try:
                payload = StyleMatchRequest.model_validate(await request.json())
            except ValueError as e:
                details = [{"field": ".".join(str(p) for p in err["loc"]) or "image_url", "message": err["msg"]} for err in e.errors()] if isinstance(e, ValidationError) else None
                raise ValidationException("Either an image file or image_url is required", errors=details)
            query_vector = embeddings.embed_image(payload.image_url)

        results = rank_products(session, query_vector)
        logging.info(f"AI >>> Style match returned {len(results)} products")
        return ok(results, f"Found {len(results)} similar items")
