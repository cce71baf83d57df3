"""
Error taxonomy for index building and querying.

Queries mentioning only unknown terms are not errors: the query engine
resolves them to ``None``.
"""


class TermIndexError(Exception):
    """Base class for all TermIndex errors."""


class ConfigError(TermIndexError):
    """Configuration file could not be read or parsed."""


class EmptyInputError(TermIndexError):
    """An operation needs documents (or a built index) and has none."""


class UnknownMethodError(TermIndexError, ValueError):
    """An invalid TF or IDF method name was requested."""

    def __init__(self, kind: str, name, choices):
        self.kind = kind
        self.name = name
        self.choices = list(choices)
        super().__init__(
            f"Unknown {kind} method {name!r} (choose from: {', '.join(self.choices)})"
        )


class UndefinedWeightError(TermIndexError, ValueError):
    """A TF or IDF formula has no defined value for the given inputs."""

    def __init__(self, method: str, term: str, doc_id: str = None, reason: str = ""):
        self.method = method
        self.term = term
        self.doc_id = doc_id
        self.reason = reason
        location = f"term {term!r}"
        if doc_id is not None:
            location += f" in document {doc_id!r}"
        message = f"{method} is undefined for {location}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
