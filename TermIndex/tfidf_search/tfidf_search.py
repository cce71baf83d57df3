import math
from typing import List, Optional, Tuple

import numpy as np

from ..preprocessing.normalizer import TextNormalizer
from .matrix import DocumentTermMatrix


def compute_cosine_similarity(vec1: np.ndarray, vec2: np.ndarray) -> float:
    """
    Compute cosine similarity between two vectors.

    Args:
        vec1: First vector
        vec2: Second vector of the same length

    Returns:
        Cosine similarity score, 0.0 when either vector has zero norm.
        Vectors holding infinite weights have no defined direction and also
        score 0.0.
    """
    magnitude1 = np.linalg.norm(vec1)
    magnitude2 = np.linalg.norm(vec2)

    # Avoid division by zero
    if magnitude1 == 0 or magnitude2 == 0:
        return 0.0
    if not (math.isfinite(magnitude1) and math.isfinite(magnitude2)):
        return 0.0

    return float(np.dot(vec1, vec2) / (magnitude1 * magnitude2))


class QueryEngine:
    """
    Ranks the documents of a built matrix against free-text queries.

    The engine keeps no state between calls; every query is a function of
    the query text and the (read-only) matrix.
    """

    def __init__(self, matrix: DocumentTermMatrix, normalizer: Optional[TextNormalizer] = None):
        """
        Args:
            matrix: Document-term matrix to search
            normalizer: The normalizer the indexed documents went through
        """
        self.matrix = matrix
        self.normalizer = normalizer or TextNormalizer()

    def query_terms(self, raw_text: str) -> List[str]:
        """Normalized query terms present in the matrix, duplicates kept."""
        return [term for term in self.normalizer.normalize(raw_text) if term in self.matrix]

    def _similarities(self, raw_text: str) -> List[Tuple[str, float]]:
        terms = self.query_terms(raw_text)
        if not terms or self.matrix.shape[1] == 0:
            return []

        # one dimension per query occurrence, weight 1.0 each
        query_vector = np.ones(len(terms), dtype=np.float64)
        document_slice = self.matrix.rows(terms)

        similarities = []
        for j, doc_id in enumerate(self.matrix.doc_ids):
            similarity = compute_cosine_similarity(query_vector, document_slice[:, j])
            if similarity == 0:
                continue
            similarities.append((doc_id, similarity))
        return similarities

    def query(self, raw_text: str) -> Optional[Tuple[str, float]]:
        """
        Find the single most similar document.

        Args:
            raw_text: Free-text query

        Returns:
            ``(doc_id, score)`` of the best document, ties resolved in favour
            of the first document in matrix order, or None when no document
            matches
        """
        best = None
        for doc_id, similarity in self._similarities(raw_text):
            if best is None or similarity > best[1]:
                best = (doc_id, similarity)
        return best

    def search(self, raw_text: str, top_k: int = 5) -> List[Tuple[str, float]]:
        """
        Rank matching documents by similarity.

        Args:
            raw_text: Free-text query
            top_k: Number of top results to return

        Returns:
            List of (doc_id, similarity_score) tuples, best first
        """
        similarities = self._similarities(raw_text)

        # sort is stable: equal scores stay in matrix order
        similarities.sort(key=lambda x: x[1], reverse=True)

        return similarities[:top_k]


def query(raw_text: str, matrix: DocumentTermMatrix,
          normalizer: Optional[TextNormalizer] = None) -> Optional[Tuple[str, float]]:
    """Best ``(doc_id, score)`` for ``raw_text`` against ``matrix``, or None."""
    return QueryEngine(matrix, normalizer).query(raw_text)
