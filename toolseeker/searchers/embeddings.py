"""
Embedding providers for the semantic tool searcher.

The searcher only depends on the Embedder protocol. SentenceTransformerEmbedder
is the default implementation; its model is loaded lazily on first use so that
importing toolseeker never pays the model load cost. It needs the optional
"embeddings" extra (sentence-transformers).
"""

import logging
import threading
from typing import List, Optional, Protocol, runtime_checkable

import numpy as np

from ..config import settings

logger = logging.getLogger(__name__)


@runtime_checkable
class Embedder(Protocol):
    """Turns text into fixed-size vectors."""

    def embed_document(self, text: str) -> List[float]:
        ...

    def embed_query(self, text: str) -> List[float]:
        ...


class SentenceTransformerEmbedder:
    """
    Embedder backed by a sentence-transformers model.

    Args:
        model_name: Model id; defaults to settings.embedding_model.
        model: Pre-loaded model object exposing encode() (mainly for tests).
    """

    def __init__(self, model_name: Optional[str] = None, model=None):
        self.model_name = model_name or settings.embedding_model
        self._model = model
        self._lock = threading.Lock()

    def _get_model(self):
        """Load the model on first use."""
        if self._model is None:
            with self._lock:
                if self._model is None:
                    from sentence_transformers import SentenceTransformer

                    logger.info(f"Loading embedding model: {self.model_name}")
                    self._model = SentenceTransformer(self.model_name)
        return self._model

    def _encode(self, text: str) -> List[float]:
        vector = self._get_model().encode(text, convert_to_numpy=True)
        return np.asarray(vector, dtype=np.float32).tolist()

    def embed_document(self, text: str) -> List[float]:
        return self._encode(text)

    def embed_query(self, text: str) -> List[float]:
        return self._encode(text)
