"""
Dense document-term matrix with explicit term and document axis indexes.
"""
from typing import Dict, Iterable, List, Tuple

import numpy as np


class DocumentTermMatrix:
    """
    Term x document matrix of TF-IDF weights.

    Rows follow ``terms`` and columns follow ``doc_ids``; both are fixed at
    construction. The array is marked read-only so a built matrix can be
    shared between concurrent queries.
    """

    def __init__(self, weights: np.ndarray, terms: List[str], doc_ids: List[str]):
        if weights.shape != (len(terms), len(doc_ids)):
            raise ValueError(
                f"Matrix shape {weights.shape} does not match {len(terms)} terms x {len(doc_ids)} documents")
        self.weights = weights
        self.weights.flags.writeable = False
        self.terms = list(terms)
        self.doc_ids = list(doc_ids)
        self.term_index: Dict[str, int] = {term: i for i, term in enumerate(self.terms)}
        self.doc_index: Dict[str, int] = {doc_id: j for j, doc_id in enumerate(self.doc_ids)}

    @property
    def shape(self) -> Tuple[int, int]:
        return self.weights.shape

    def __contains__(self, term):
        return term in self.term_index

    def weight(self, term: str, doc_id: str) -> float:
        return float(self.weights[self.term_index[term], self.doc_index[doc_id]])

    def column(self, doc_id: str) -> np.ndarray:
        return self.weights[:, self.doc_index[doc_id]]

    def rows(self, terms: List[str]) -> np.ndarray:
        """Slice of the matrix for ``terms`` (repeats allowed), shape (len(terms), ndocs)."""
        return self.weights[[self.term_index[term] for term in terms], :]


def build_matrix(postings: Iterable) -> DocumentTermMatrix:
    """
    Build a document-term matrix from posting rows.

    Args:
        postings: Rows exposing ``term``, ``doc_id`` and ``tfidf``

    Returns:
        DocumentTermMatrix with sorted axes and 0.0 where no posting exists
    """
    postings = list(postings)
    terms = sorted({posting.term for posting in postings})
    doc_ids = sorted({posting.doc_id for posting in postings})

    term_index = {term: i for i, term in enumerate(terms)}
    doc_index = {doc_id: j for j, doc_id in enumerate(doc_ids)}

    weights = np.zeros((len(terms), len(doc_ids)), dtype=np.float64)
    for posting in postings:
        weights[term_index[posting.term], doc_index[posting.doc_id]] = posting.tfidf

    return DocumentTermMatrix(weights, terms, doc_ids)
