"""Shared fixtures for TermIndex tests."""
import pytest

from TermIndex.preprocessing.normalizer import TextNormalizer
from TermIndex.preprocessing.preprocess import (
    LowercasePreprocessor,
    PreprocessingPipeline,
    StopWordsPreprocessor,
)
from TermIndex.preprocessing.stem_preprocessor import StemPreprocessor


class StubStemmer:
    """Deterministic stemmer: strips a single trailing 's'."""

    def stem(self, token: str) -> str:
        if len(token) > 3 and token.endswith("s"):
            return token[:-1]
        return token


STUB_STOP_WORDS = frozenset({"the", "a", "an", "and", "of", "to", "in"})


@pytest.fixture()
def stub_normalizer() -> TextNormalizer:
    return TextNormalizer(PreprocessingPipeline([
        LowercasePreprocessor(),
        StopWordsPreprocessor(stop_words=STUB_STOP_WORDS),
        StemPreprocessor(stemmer=StubStemmer()),
    ], name="stub"))


@pytest.fixture()
def cat_dog_records():
    return [("d1", "the cat sat"), ("d2", "the dog sat")]
