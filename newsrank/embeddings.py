"""
Query embeddings with the Google Gen AI SDK.

Uses the async client (client.aio) so the event loop is not blocked while the
embedding request is in flight. Works against both the Gemini API (API key)
and Vertex AI (project + location).
"""

import logging
from typing import List, Optional

from google import genai

from .errors import ProviderError
from .retrieval.base import EmbeddingProvider

logger = logging.getLogger(__name__)

DEFAULT_EMBEDDING_MODEL = "text-embedding-004"


def create_genai_client(
    api_key: Optional[str] = None,
    project_id: Optional[str] = None,
    location: str = "us-central1",
) -> genai.Client:
    """
    Create a Gen AI client.

    An API key selects the Gemini API; otherwise Vertex AI is used with the
    given project and location.
    """
    if api_key:
        logger.info("Initializing Google Gen AI client (Gemini API)")
        return genai.Client(api_key=api_key)

    if not project_id:
        raise ValueError("GOOGLE_API_KEY or GCP_PROJECT_ID environment variable is required")

    logger.info(f"Initializing Google Gen AI client (project={project_id}, location={location})")
    return genai.Client(vertexai=True, project=project_id, location=location)


class GeminiEmbeddingProvider(EmbeddingProvider):
    """Embeds query text with a Google text-embedding model"""

    def __init__(self, client: genai.Client, model: str = DEFAULT_EMBEDDING_MODEL):
        self.client = client
        self.model = model

    async def embed(self, text: str) -> List[float]:
        try:
            response = await self.client.aio.models.embed_content(
                model=self.model,
                contents=text,
            )
        except Exception as e:
            logger.error(f"Error generating embedding with {self.model}: {e}")
            raise ProviderError("embedding", f"Failed to generate embedding: {e}") from e

        if not response.embeddings or not response.embeddings[0].values:
            raise ProviderError("embedding", f"{self.model} returned no embedding")

        return list(response.embeddings[0].values)

    def get_model_info(self) -> dict:
        return {
            "name": self.model,
            "type": "api",
            "provider": "google-genai",
        }
