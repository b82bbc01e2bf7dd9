import logging
from sqlmodel import Session, select

from thrifthub.core.exceptions.app_exception import GatewayException
from thrifthub.helpers.ai.similarity import serialize_embedding
from thrifthub.integration.embeddings import EmbeddingService
from thrifthub.models.product.product import Product
from thrifthub.models.product.product_embedding import ProductEmbedding
from thrifthub.schemas.admin.admin import EmbeddingRun


def generate_missing_embeddings(session: Session, embeddings: EmbeddingService) -> EmbeddingRun:
    """Embeds the primary image of every active product that has none yet."""
    indexed = set(session.exec(select(ProductEmbedding.product_id)).all())
    products = session.exec(select(Product).where(Product.is_active == True).order_by(Product.id)).all()  # noqa: E712

    run = EmbeddingRun(processed=0, failed=0)
    for product in products:
        if product.id in indexed:
            continue
        image_url = product.primary_image
        if not image_url:
            continue
        try:
            vector = embeddings.embed_image(image_url)
        except GatewayException as e:
            run.failed += 1
            run.errors.append(f"Product {product.id}: {e.detail}")
            continue

        session.add(ProductEmbedding(product_id=product.id, embedding=serialize_embedding(vector)))
        session.commit()
        run.processed += 1

    logging.info(f"AI >>> Embeddings generated for {run.processed} products, {run.failed} failed")
    return run
