"""
Term frequency (TF) and inverse document frequency (IDF) weighting methods.

Both families are closed enumerations; a member is resolved from its name
once (``TFMethod.parse``) and then dispatches to a pure function. Undefined
results (division by zero, logarithm of a negative number) raise
``UndefinedWeightError``; a logarithm of exactly zero yields ``-inf``.
"""
import math
from enum import Enum
from typing import Dict, Mapping, Optional

from ..errors import UndefinedWeightError, UnknownMethodError


def _log10(value: float, method: str, term: str) -> float:
    if value == 0:
        return -math.inf
    if value < 0:
        raise UndefinedWeightError(method, term, reason=f"logarithm of negative value {value}")
    return math.log10(value)


# TF methods: count is the raw frequency of the term in the document,
# total / max_count summarize the document's full count mapping.

def raw_count(count: int, total: int, max_count: int) -> float:
    return float(count)


def boolean_freq(count: int, total: int, max_count: int) -> float:
    return 0.0 if count == 0 else 1.0


def log_scaled(count: int, total: int, max_count: int) -> float:
    return math.log10(1.0 + count)


def augmented(count: int, total: int, max_count: int) -> float:
    return 0.5 + 0.5 * count / max_count


def relative_freq(count: int, total: int, max_count: int) -> float:
    return count / (total - count)


class TFMethod(Enum):
    RAW_COUNT = "raw_count"
    BOOLEAN_FREQ = "boolean_freq"
    LOG_SCALED = "log_scaled"
    AUGMENTED = "augmented"
    RELATIVE_FREQ = "relative_freq"

    @classmethod
    def names(cls):
        return [member.value for member in cls]

    @classmethod
    def parse(cls, name) -> 'TFMethod':
        """
        Resolve a TF method from its name (members pass through).

        Raises:
            UnknownMethodError: ``name`` is not a TF method
        """
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            raise UnknownMethodError("tf", name, cls.names()) from None

    def compute(self, term: str, counts: Mapping[str, int], doc_id: Optional[str] = None) -> float:
        """
        TF score of ``term`` given the document's full term -> count mapping.

        Args:
            term: The term to weight
            counts: Raw counts of every term in the document
            doc_id: Document identifier, used in error messages

        Returns:
            TF score

        Raises:
            UndefinedWeightError: The formula divides by zero
        """
        values = counts.values()
        return self._score(term, counts.get(term, 0), sum(values), max(values, default=0), doc_id)

    def weigh_document(self, counts: Mapping[str, int], doc_id: Optional[str] = None) -> Dict[str, float]:
        """
        TF scores for every term of a document, summarizing the counts once.
        """
        total = sum(counts.values())
        max_count = max(counts.values(), default=0)
        return {term: self._score(term, count, total, max_count, doc_id)
                for term, count in counts.items()}

    def _score(self, term, count, total, max_count, doc_id) -> float:
        if self is TFMethod.RAW_COUNT:
            return raw_count(count, total, max_count)
        if self is TFMethod.BOOLEAN_FREQ:
            return boolean_freq(count, total, max_count)
        if self is TFMethod.LOG_SCALED:
            return log_scaled(count, total, max_count)
        if self is TFMethod.AUGMENTED:
            if max_count == 0:
                raise UndefinedWeightError(self.value, term, doc_id, "document has no terms")
            return augmented(count, total, max_count)
        if total - count == 0:
            raise UndefinedWeightError(
                self.value, term, doc_id,
                f"degenerate document: all {total} occurrences are this term")
        return relative_freq(count, total, max_count)


# IDF methods: df is the term's document frequency, ndocs the collection
# size and max_df the largest document frequency of any term.

def unary(df: int, ndocs: int, max_df: int, term: str = "") -> float:
    return 0.0 if df == 0 else 1.0


def inv_doc_freq(df: int, ndocs: int, max_df: int, term: str = "") -> float:
    if df == 0:
        raise UndefinedWeightError("inv_doc_freq", term, reason="document frequency is 0")
    return _log10(ndocs / df, "inv_doc_freq", term)


def inv_doc_freq_smooth(df: int, ndocs: int, max_df: int, term: str = "") -> float:
    return _log10(ndocs / (1.0 + df), "inv_doc_freq_smooth", term) + 1.0


def inv_doc_freq_max(df: int, ndocs: int, max_df: int, term: str = "") -> float:
    return _log10(max_df / (1.0 + df), "inv_doc_freq_max", term)


def probabilistic_inv_doc_freq(df: int, ndocs: int, max_df: int, term: str = "") -> float:
    if df == 0:
        raise UndefinedWeightError("probabilistic_inv_doc_freq", term, reason="document frequency is 0")
    return _log10((ndocs - df) / df, "probabilistic_inv_doc_freq", term)


class IDFMethod(Enum):
    UNARY = "unary"
    INV_DOC_FREQ = "inv_doc_freq"
    INV_DOC_FREQ_SMOOTH = "inv_doc_freq_smooth"
    INV_DOC_FREQ_MAX = "inv_doc_freq_max"
    PROBABILISTIC_INV_DOC_FREQ = "probabilistic_inv_doc_freq"

    @classmethod
    def names(cls):
        return [member.value for member in cls]

    @classmethod
    def parse(cls, name) -> 'IDFMethod':
        """
        Resolve an IDF method from its name (members pass through).

        Raises:
            UnknownMethodError: ``name`` is not an IDF method
        """
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            raise UnknownMethodError("idf", name, cls.names()) from None

    def compute(self, term: str, document_frequency: int, ndocs: int, max_document_frequency: int) -> float:
        """
        IDF score of a term.

        Args:
            term: The term, used in error messages
            document_frequency: Number of documents containing the term
            ndocs: Number of documents in the collection
            max_document_frequency: Largest document frequency over all terms

        Returns:
            IDF score, possibly ``-inf``

        Raises:
            UndefinedWeightError: The formula divides by zero or takes the
                logarithm of a negative number
        """
        if self is IDFMethod.UNARY:
            fn = unary
        elif self is IDFMethod.INV_DOC_FREQ:
            fn = inv_doc_freq
        elif self is IDFMethod.INV_DOC_FREQ_SMOOTH:
            fn = inv_doc_freq_smooth
        elif self is IDFMethod.INV_DOC_FREQ_MAX:
            fn = inv_doc_freq_max
        else:
            fn = probabilistic_inv_doc_freq
        return fn(document_frequency, ndocs, max_document_frequency, term)
