import json
from abc import ABC, abstractmethod
from typing import Container, Iterable, Optional

from .tokenizer import Token


class TokenPreprocessor(ABC):
    @abstractmethod
    def preprocess(self, token: Token, document: str) -> Token:
        raise NotImplementedError()

    def preprocess_all(self, tokens: list[Token], document: str) -> list[Token]:
        return [self.preprocess(token, document) for token in tokens]


class LowercasePreprocessor(TokenPreprocessor):
    def preprocess(self, token: Token, document: str) -> Token:
        # str.lower() is locale independent; tokens are ASCII at this point
        token.processed_form = token.processed_form.lower()
        return token


def load_stop_words(path: str) -> frozenset:
    """
    Load a stop word list stored as a JSON array of strings.

    Args:
        path: Path to the JSON file

    Returns:
        Frozen set of lowercase stop words
    """
    with open(path, "r", encoding="utf-8") as f:
        return frozenset(word.lower() for word in json.load(f))


class StopWordsPreprocessor(TokenPreprocessor):
    """Preprocessor for removing stop words."""

    def __init__(self, stop_words: Optional[Container[str]] = None, stop_words_file: Optional[str] = None):
        """
        Initialize preprocessor for removing stop words.

        Args:
            stop_words: Any container supporting membership tests
            stop_words_file: JSON file with the stop words, used when
                ``stop_words`` is not given
        """
        if stop_words is None:
            stop_words = load_stop_words(stop_words_file) if stop_words_file else frozenset()
        self.stop_words = stop_words

    def preprocess(self, token: Token, document: str) -> Token:
        """
        If token is a stop word, replace its processed_form with empty string.
        """
        if token.processed_form and token.processed_form.lower() in self.stop_words:
            token.processed_form = ""
        return token


class ShortTokenPreprocessor(TokenPreprocessor):
    """Preprocessor removing tokens shorter than a minimum length."""

    def __init__(self, min_word_length=2):
        self.min_word_length = min_word_length

    def preprocess(self, token: Token, document: str) -> Token:
        if len(token.processed_form) < self.min_word_length:
            token.processed_form = ""
        return token


class PreprocessingPipeline:
    """Pipeline of token preprocessors."""

    def __init__(self, preprocessors: Iterable[TokenPreprocessor], name="Default Pipeline"):
        """
        Initialize a preprocessing pipeline.

        Args:
            preprocessors: List of preprocessor objects
            name: Name of the pipeline
        """
        self.preprocessors = list(preprocessors)
        self.name = name

    def preprocess(self, tokens: list[Token], document: str) -> list[Token]:
        """
        Apply all preprocessors to the tokens.

        Tokens emptied by one preprocessor are dropped before the next one
        runs, so a stemmer never sees a removed stop word.

        Args:
            tokens: List of tokens to preprocess
            document: Original document text

        Returns:
            List of surviving tokens in source order
        """
        for preprocessor in self.preprocessors:
            tokens = [token for token in preprocessor.preprocess_all(tokens, document)
                      if token.processed_form]

        return tokens
