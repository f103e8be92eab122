"""
Embedding providers.

The vector stores that do not embed server-side call one of these to turn
conversation turns and queries into vectors.
"""

import hashlib
import math
import re
from abc import ABC, abstractmethod
from typing import List

from ..config import Settings


class Embedder(ABC):
    """Abstract base class for embedding providers."""

    name: str = "base"
    dims: int = 0

    @abstractmethod
    def embed(self, texts: List[str]) -> List[List[float]]:
        """
        Embed a batch of texts.

        Args:
            texts: Texts to embed

        Returns:
            One vector per text, in input order
        """
        pass

    def embed_one(self, text: str) -> List[float]:
        return self.embed([text])[0]


class OpenAIEmbedder(Embedder):
    """OpenAI embeddings API."""

    name = "openai"

    def __init__(self, api_key: str, model: str = "text-embedding-3-small", dims: int = 1536, client=None):
        if client is None:
            from openai import OpenAI
            client = OpenAI(api_key=api_key)
        self.client = client
        self.model = model
        self.dims = dims

    def embed(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            return []
        response = self.client.embeddings.create(model=self.model, input=texts)
        # The API may not preserve order
        data = sorted(response.data, key=lambda d: d.index)
        return [list(d.embedding) for d in data]


_TOKEN = re.compile(r"[a-z0-9]+")


class HashingEmbedder(Embedder):
    """Bag-of-words vectors from hashed tokens. Local and deterministic."""

    name = "hashing"

    def __init__(self, dims: int = 256):
        self.dims = dims

    def embed(self, texts: List[str]) -> List[List[float]]:
        return [self._vector(t) for t in texts]

    def _vector(self, text: str) -> List[float]:
        vec = [0.0] * self.dims
        for token in _TOKEN.findall(text.lower()):
            digest = hashlib.md5(token.encode("utf-8")).digest()
            bucket = int.from_bytes(digest[:4], "big") % self.dims
            vec[bucket] += 1.0
        norm = math.sqrt(sum(v * v for v in vec))
        if norm:
            vec = [v / norm for v in vec]
        return vec


def get_embedder(settings: Settings) -> Embedder:
    """Build the embedder selected by EMBEDDING_PROVIDER."""
    provider = settings.embedding_provider.lower()
    if provider == "openai":
        return OpenAIEmbedder(
            api_key=settings.openai_api_key,
            model=settings.embedding_model,
            dims=settings.embedding_dims,
        )
    if provider == "hashing":
        return HashingEmbedder(dims=min(settings.embedding_dims, 256))
    raise ValueError(f"Unknown embedding provider: {provider}. Available: ['openai', 'hashing']")


def cosine_similarity(a: List[float], b: List[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if not norm_a or not norm_b:
        return 0.0
    return dot / (norm_a * norm_b)
