"""
Stemming preprocessor backed by the NLTK stemmers.
"""
from typing import Optional, Protocol

from nltk.stem import LancasterStemmer, PorterStemmer, SnowballStemmer

from .preprocess import TokenPreprocessor
from .tokenizer import Token


class Stemmer(Protocol):
    def stem(self, token: str) -> str:
        ...


STEMMER_ALGORITHMS = ("porter", "snowball", "lancaster")


def create_stemmer(algorithm: str = "porter") -> Stemmer:
    """
    Create an English stemmer.

    Args:
        algorithm: One of ``porter``, ``snowball`` or ``lancaster``

    Returns:
        Stemmer instance
    """
    if algorithm == "porter":
        return PorterStemmer()
    if algorithm == "snowball":
        return SnowballStemmer("english")
    if algorithm == "lancaster":
        return LancasterStemmer()
    raise ValueError(f"Unknown stemming algorithm {algorithm!r} (choose from: {', '.join(STEMMER_ALGORITHMS)})")


class StemPreprocessor(TokenPreprocessor):
    """Reduce each token to its stem."""

    def __init__(self, stemmer: Optional[Stemmer] = None, algorithm: str = "porter"):
        self.stemmer = stemmer or create_stemmer(algorithm)

    def preprocess(self, token: Token, document: str) -> Token:
        token.processed_form = self.stemmer.stem(token.processed_form)
        return token
