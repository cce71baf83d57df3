"""
Text normalization shared by indexing and querying.
"""
import os
from typing import Any, Container, Dict, List, Optional

from .preprocess import (
    LowercasePreprocessor,
    PreprocessingPipeline,
    ShortTokenPreprocessor,
    StopWordsPreprocessor,
    load_stop_words,
)
from .stem_preprocessor import Stemmer, StemPreprocessor
from .tokenizer import LetterTokenizer, Tokenizer

STOP_WORDS_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "stopwords-en.json")


def create_pipeline(config: Dict[str, Any], stemmer: Optional[Stemmer] = None,
                    stop_words: Optional[Container[str]] = None) -> PreprocessingPipeline:
    """
    Create preprocessing pipeline based on configuration.

    Args:
        config: Configuration dictionary (see ``TermIndex.config``)
        stemmer: Stemmer to use instead of the configured NLTK one
        stop_words: Stop word set to use instead of the configured file

    Returns:
        PreprocessingPipeline object
    """
    preprocessors = []
    pipeline_name = []

    preproc_config = config.get("preprocessing", {})
    stemming_config = config.get("stemming", {})

    for step in config.get("pipeline_order", []):
        if step == "lowercase" and preproc_config.get("lowercase", True):
            preprocessors.append(LowercasePreprocessor())
            pipeline_name.append("Lowercase")

        elif step == "stop_words" and preproc_config.get("stop_words", {}).get("use", True):
            words = stop_words
            if words is None:
                words = load_stop_words(preproc_config["stop_words"].get("file") or STOP_WORDS_FILE)
            preprocessors.append(StopWordsPreprocessor(stop_words=words))
            pipeline_name.append("StopWords")

        elif step == "short_tokens" and preproc_config.get("short_tokens", {}).get("remove", False):
            min_length = preproc_config["short_tokens"].get("min_word_length", 2)
            preprocessors.append(ShortTokenPreprocessor(min_word_length=min_length))
            pipeline_name.append(f"ShortTokens(min={min_length})")

        elif step == "stemming" and stemming_config.get("use", True):
            algorithm = stemming_config.get("algorithm", "porter")
            preprocessors.append(StemPreprocessor(stemmer=stemmer, algorithm=algorithm))
            pipeline_name.append(f"Stemming({algorithm if stemmer is None else type(stemmer).__name__})")

    return PreprocessingPipeline(preprocessors, name="+".join(pipeline_name) or "Identity")


class TextNormalizer:
    """
    Turns raw text into the ordered list of terms used by the index.

    The same instance (or one built from the same configuration) must be
    used for documents and for queries.
    """

    def __init__(self, pipeline: Optional[PreprocessingPipeline] = None, tokenizer: Optional[Tokenizer] = None):
        self.tokenizer = tokenizer or LetterTokenizer()
        self.pipeline = pipeline or PreprocessingPipeline([
            LowercasePreprocessor(),
            StopWordsPreprocessor(stop_words_file=STOP_WORDS_FILE),
            StemPreprocessor(),
        ], name="Lowercase+StopWords+Stemming(porter)")

    @classmethod
    def from_config(cls, config: Dict[str, Any], stemmer: Optional[Stemmer] = None,
                    stop_words: Optional[Container[str]] = None) -> 'TextNormalizer':
        return cls(create_pipeline(config, stemmer=stemmer, stop_words=stop_words))

    def normalize(self, raw_text: str) -> List[str]:
        """
        Normalize text into stems, in source order with duplicates kept.

        Args:
            raw_text: Text to normalize

        Returns:
            List of terms (empty for empty input)
        """
        if not raw_text:
            return []

        tokens = self.tokenizer.tokenize(raw_text)
        tokens = self.pipeline.preprocess(tokens, raw_text)
        return [token.processed_form for token in tokens if token.processed_form]

    def __call__(self, raw_text: str) -> List[str]:
        return self.normalize(raw_text)
