"""
Tokenizers splitting raw text into tokens.
"""
import re
from abc import ABC, abstractmethod
from typing import List


class Token:
    """
    A single token of a document.

    ``text`` keeps the form found in the source, ``processed_form`` is
    rewritten by preprocessors; an empty ``processed_form`` marks a token
    that was filtered out.
    """

    __slots__ = ("text", "position", "processed_form")

    def __init__(self, text: str, position: int):
        self.text = text
        self.position = position
        self.processed_form = text

    def __repr__(self):
        return f"Token({self.text!r}, position={self.position}, processed_form={self.processed_form!r})"


class Tokenizer(ABC):
    @abstractmethod
    def tokenize(self, document: str) -> List[Token]:
        raise NotImplementedError()


class LetterTokenizer(Tokenizer):
    """
    Tokenizer keeping runs of ASCII letters only.

    Every character that is not an ASCII letter acts as a separator, so
    digits, punctuation, accented letters and whitespace never reach the
    token stream.
    """

    NON_LETTER = re.compile(r"[^A-Za-z]")

    def tokenize(self, document: str) -> List[Token]:
        if not document:
            return []
        cleaned = self.NON_LETTER.sub(" ", document)
        return [Token(word, i) for i, word in enumerate(cleaned.split())]
