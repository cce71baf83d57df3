"""
Inverted index construction: a dictionary of per-term collection statistics
and a sparse postings table of per-(document, term) TF-IDF weights.
"""
import json
import time
from collections import Counter
from concurrent.futures import ProcessPoolExecutor
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from .console import console, warn
from .preprocessing.document import Document
from .preprocessing.normalizer import TextNormalizer
from .tfidf_search.matrix import DocumentTermMatrix, build_matrix
from .tfidf_search.weighting import IDFMethod, TFMethod


@dataclass(frozen=True)
class DictionaryEntry:
    term: str
    document_frequency: int
    collection_frequency: int
    idf: float


@dataclass(frozen=True)
class Posting:
    term: str
    doc_id: str
    raw_frequency: int
    tf: float
    tfidf: float


class Dictionary:
    """Dictionary rows sorted by term, with lookup by term."""

    def __init__(self, entries: Iterable[DictionaryEntry] = (), ndocs: int = 0):
        self.entries: Tuple[DictionaryEntry, ...] = tuple(sorted(entries, key=lambda e: e.term))
        self.ndocs = ndocs
        self._by_term: Dict[str, DictionaryEntry] = {entry.term: entry for entry in self.entries}

    def __len__(self):
        return len(self.entries)

    def __iter__(self) -> Iterator[DictionaryEntry]:
        return iter(self.entries)

    def __contains__(self, term):
        return term in self._by_term

    def __getitem__(self, term: str) -> DictionaryEntry:
        return self._by_term[term]

    def __eq__(self, other):
        return isinstance(other, Dictionary) and self.entries == other.entries and self.ndocs == other.ndocs

    @property
    def terms(self) -> List[str]:
        return [entry.term for entry in self.entries]

    def idf(self, term: str) -> float:
        try:
            return self._by_term[term].idf
        except KeyError:
            raise KeyError(f"Term {term!r} is not in the dictionary") from None


class Postings:
    """Posting rows sorted by (doc_id, term)."""

    def __init__(self, rows: Iterable[Posting] = ()):
        self.rows: Tuple[Posting, ...] = tuple(sorted(rows, key=lambda p: (p.doc_id, p.term)))

    def __len__(self):
        return len(self.rows)

    def __iter__(self) -> Iterator[Posting]:
        return iter(self.rows)

    def __eq__(self, other):
        return isinstance(other, Postings) and self.rows == other.rows

    @property
    def doc_ids(self) -> List[str]:
        return sorted({posting.doc_id for posting in self.rows})

    def for_document(self, doc_id: str) -> List[Posting]:
        return [posting for posting in self.rows if posting.doc_id == doc_id]


def count_terms(tokens: Iterable[str]) -> Counter:
    """
    Count exact occurrences of each term.

    Args:
        tokens: Normalized terms of one document (or of the whole collection)

    Returns:
        Counter mapping term -> count (every count >= 1)
    """
    return Counter(tokens)


def merge_counts(partials: Iterable[Mapping[str, int]]) -> Counter:
    """
    Sum per-document counts into collection-wide counts. Addition is
    commutative, so the result does not depend on the order of ``partials``.
    """
    total = Counter()
    for partial in partials:
        total.update(partial)
    return total


def build_dictionary(documents: Sequence[Sequence[str]], idf_method="inv_doc_freq_smooth") -> Dictionary:
    """
    Build the dictionary table for an inverted index.

    Args:
        documents: Normalized terms of every document in the collection
        idf_method: IDF method (name or ``IDFMethod``)

    Returns:
        Dictionary with one entry per distinct term, sorted by term

    Raises:
        UnknownMethodError: ``idf_method`` is not a known IDF method
        UndefinedWeightError: The IDF method is undefined for some term
    """
    idf_method = IDFMethod.parse(idf_method)
    per_document = [count_terms(tokens) for tokens in documents]

    collection_frequency = merge_counts(per_document)
    # set membership: repeated terms within a document count once
    document_frequency = merge_counts(dict.fromkeys(counts, 1) for counts in per_document)

    ndocs = len(documents)
    max_df = max(document_frequency.values(), default=0)

    entries = [
        DictionaryEntry(
            term=term,
            document_frequency=document_frequency[term],
            collection_frequency=collection_frequency[term],
            idf=idf_method.compute(term, document_frequency[term], ndocs, max_df),
        )
        for term in sorted(collection_frequency)
    ]
    return Dictionary(entries, ndocs=ndocs)


def build_postings(documents: Sequence[Tuple[str, Sequence[str]]], dictionary: Dictionary,
                   tf_method="relative_freq", cache: Optional[Dict[str, Counter]] = None) -> Postings:
    """
    Build postings table for inverted index.

    Args:
        documents: ``(doc_id, terms)`` pairs
        dictionary: Dictionary providing the IDF of every term
        tf_method: TF method (name or ``TFMethod``)
        cache: Memo table of per-document counts keyed by doc_id; a fresh
            table is used when omitted, so nothing leaks between builds

    Returns:
        Postings with one row per co-occurring (doc_id, term) pair

    Raises:
        UnknownMethodError: ``tf_method`` is not a known TF method
        UndefinedWeightError: The TF method is undefined for some row
    """
    tf_method = TFMethod.parse(tf_method)
    if cache is None:
        cache = {}

    rows = []
    emitted = set()
    for doc_id, tokens in documents:
        if doc_id in emitted:
            continue
        emitted.add(doc_id)

        counts = cache.get(doc_id)
        if counts is None:
            counts = cache[doc_id] = count_terms(tokens)

        tf_scores = tf_method.weigh_document(counts, doc_id)
        for term, count in counts.items():
            tf = tf_scores[term]
            rows.append(Posting(term, doc_id, count, tf, tf * dictionary.idf(term)))

    return Postings(rows)


@dataclass(frozen=True)
class InvertedIndex:
    """Result of one index build."""

    dictionary: Dictionary
    postings: Postings
    documents: Tuple[Document, ...]
    tf_method: TFMethod
    idf_method: IDFMethod

    @property
    def document_count(self) -> int:
        return len(self.documents)

    def to_matrix(self) -> DocumentTermMatrix:
        return build_matrix(self.postings)

    def to_json_dict(self) -> dict:
        return {
            "metadata": {
                "document_count": self.document_count,
                "term_count": len(self.dictionary),
                "posting_count": len(self.postings),
                "tf_method": self.tf_method.value,
                "idf_method": self.idf_method.value,
                "creation_date": time.strftime("%Y-%m-%d %H:%M:%S"),
            },
            "dictionary": [asdict(entry) for entry in self.dictionary],
            "postings": [asdict(posting) for posting in self.postings],
        }

    def save_to_json(self, output_file: str) -> None:
        """
        Save the inverted index to a JSON file.

        Weights of ``-inf`` are written as ``-Infinity``.

        Args:
            output_file: Path to output JSON file
        """
        with open(output_file, "w", encoding="utf-8") as f:
            json.dump(self.to_json_dict(), f, ensure_ascii=False, indent=2)

        console.print(f"Inverted index saved to [cyan]{output_file}[/cyan]")

    def print_sample(self, sample_size=10) -> None:
        """Print a sample of the dictionary"""
        console.print("\nInverted Index Sample:")
        console.print("-" * 60)

        for entry in self.dictionary.entries[:sample_size]:
            console.print(
                f"'{entry.term}' -> df={entry.document_frequency} "
                f"cf={entry.collection_frequency} idf={entry.idf:.4f}"
            )

        console.print("-" * 60)


class InvertedIndexBuilder:
    """
    Builds an ``InvertedIndex`` from ``(doc_id, text)`` records.

    TF and IDF method names are resolved in the constructor, so an unknown
    name fails before any document is processed.
    """

    def __init__(self, tf_method="relative_freq", idf_method="inv_doc_freq_smooth",
                 normalizer: Optional[TextNormalizer] = None, workers: int = 1):
        self.tf_method = TFMethod.parse(tf_method)
        self.idf_method = IDFMethod.parse(idf_method)
        self.normalizer = normalizer or TextNormalizer()
        self.workers = max(1, int(workers))

    def _normalize_all(self, documents: List[Document]) -> None:
        if self.workers == 1 or len(documents) < 2:
            for document in documents:
                document.normalize(self.normalizer)
            return

        # map keeps input order, so the merge below is identical to a serial build
        texts = [document.text for document in documents]
        chunksize = max(1, len(texts) // (self.workers * 4))
        with ProcessPoolExecutor(max_workers=self.workers) as executor:
            results = executor.map(self.normalizer.normalize, texts, chunksize=chunksize)
            for document, terms in zip(documents, results):
                document.terms = tuple(terms)

    def build(self, records: Iterable[Tuple[Optional[str], Optional[str]]]) -> InvertedIndex:
        """
        Build the dictionary and postings tables.

        Records with a missing id or text are skipped; repeated ids keep the
        first record. With no usable record the result has zero rows.

        Args:
            records: ``(doc_id, text)`` pairs from a document source

        Returns:
            InvertedIndex with dictionary, postings and normalized documents

        Raises:
            UndefinedWeightError: A weight is undefined; no partial index is returned
        """
        start_time = time.time()

        documents = []
        seen = set()
        skipped = duplicates = 0
        for doc_id, text in records:
            if doc_id is None or doc_id == "" or text is None:
                skipped += 1
                continue
            if doc_id in seen:
                duplicates += 1
                continue
            seen.add(doc_id)
            documents.append(Document(doc_id, text))

        if skipped:
            warn(f"{skipped} records without an id or text were skipped")
        if duplicates:
            warn(f"{duplicates} records with a repeated document id were skipped")

        if not documents:
            warn("No documents to index, the index is empty")
            return InvertedIndex(Dictionary(), Postings(), (), self.tf_method, self.idf_method)

        self._normalize_all(documents)

        dictionary = build_dictionary([d.terms for d in documents], self.idf_method)
        postings = build_postings([(d.id, d.terms) for d in documents], dictionary, self.tf_method)

        console.print(
            f"Indexed [bold]{len(documents)}[/bold] documents in {time.time() - start_time:.2f} seconds "
            f"([bold]{len(dictionary)}[/bold] terms, [bold]{len(postings)}[/bold] postings)"
        )
        return InvertedIndex(dictionary, postings, tuple(documents), self.tf_method, self.idf_method)
