import logging
from typing import List, Optional

import httpx

from thrifthub.configuration.settings import Configuration
from thrifthub.core.exceptions.app_exception import GatewayException
from thrifthub.helpers.ai.similarity import EMBEDDING_DIMENSIONS, fit_dimensions

configuration = Configuration()


class EmbeddingError(GatewayException):
    def __init__(self, detail: str = "Failed to generate image embedding"):
        super().__init__(detail=detail)


class EmbeddingService:
    """Turns an image URL into a fixed-size vector through the embeddings API."""

    def __init__(self, api_key: Optional[str] = None, api_url: Optional[str] = None, model: Optional[str] = None, transport: Optional[httpx.BaseTransport] = None):
        self.api_key = api_key if api_key is not None else configuration.embedding_api_key
        self.api_url = api_url or configuration.embedding_api_url
        self.model = model or configuration.embedding_model
        self.transport = transport

    def embed_image(self, image_url: str) -> List[float]:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        payload = {"model": self.model, "input": f"image:{image_url}"}
        try:
            with httpx.Client(transport=self.transport, timeout=30.0) as client:
                response = client.post(self.api_url, json=payload, headers=headers)
                response.raise_for_status()
            vector = response.json()["data"][0]["embedding"]
        except httpx.HTTPStatusError as e:
            logging.error(f"AI >>> Embedding request failed with {e.response.status_code}")
            raise EmbeddingError()
        except httpx.RequestError as e:
            logging.error(f"AI >>> Embedding service unreachable: {e}")
            raise EmbeddingError()
        except (KeyError, IndexError, ValueError) as e:
            logging.error(f"AI >>> Unexpected embedding payload: {e}")
            raise EmbeddingError()

        return fit_dimensions(vector, EMBEDDING_DIMENSIONS)


def get_embedding_service() -> EmbeddingService:
    return EmbeddingService()
