from typing import List, Optional

from .normalizer import TextNormalizer

DOC_ID_SEPARATOR = "_"


def make_doc_id(*parts) -> str:
    """
    Build a composite document key, e.g. ``make_doc_id("Lincoln", "1862-12-01")``
    gives ``"Lincoln_1862-12-01"``.
    """
    return DOC_ID_SEPARATOR.join(str(part) for part in parts)


class Document:
    """
    Represents a document in the information retrieval system.
    Stores the raw text and, once normalized, its ordered sequence of stems.
    """

    def __init__(self, doc_id: str, text: str = ""):
        """
        Initialize a document with content.

        Args:
            doc_id: Unique (composite) identifier for the document
            text: Raw document text
        """
        self.id = doc_id
        self.text = text or ""
        self.terms: Optional[tuple] = None

    def normalize(self, normalizer: TextNormalizer) -> 'Document':
        """
        Normalize the document text into stems. A document is normalized
        once; later calls keep the first result.

        Args:
            normalizer: Normalizer shared with the query side

        Returns:
            Self for chaining operations
        """
        if self.terms is None:
            self.terms = tuple(normalizer.normalize(self.text))
        return self

    def get_terms(self) -> List[str]:
        """
        Get the normalized terms of the document (empty before normalization).
        """
        return list(self.terms or ())

    def __repr__(self):
        return f"Document({self.id!r}, terms={len(self.terms) if self.terms is not None else None})"
