"""
Test the document-term matrix and cosine-similarity query engine
"""
import math

import numpy as np
import pytest

from TermIndex.build_inverted_index import InvertedIndexBuilder, Posting, Postings
from TermIndex.tfidf_search.matrix import build_matrix
from TermIndex.tfidf_search.tfidf_search import QueryEngine, compute_cosine_similarity, query


def _engine(records, normalizer, tf_method="raw_count", idf_method="unary"):
    index = InvertedIndexBuilder(tf_method, idf_method, normalizer=normalizer).build(records)
    return QueryEngine(index.to_matrix(), normalizer)


def test_cosine_similarity_properties():
    a = np.array([1.0, 2.0, 0.0])
    b = np.array([-3.0, 0.5, 4.0])
    assert compute_cosine_similarity(a, b) == pytest.approx(compute_cosine_similarity(b, a))
    assert -1.0 <= compute_cosine_similarity(a, b) <= 1.0
    assert compute_cosine_similarity(a, -a) == pytest.approx(-1.0)
    assert compute_cosine_similarity(np.array([1.0, 0.0]), np.array([0.0, 5.0])) == 0.0
    assert compute_cosine_similarity(np.zeros(2), np.array([1.0, 1.0])) == 0.0
    assert compute_cosine_similarity(np.array([1.0]), np.array([-math.inf])) == 0.0


def test_build_matrix_axes_and_cells():
    postings = Postings([
        Posting("war", "b", 1, 1.0, 0.5),
        Posting("peace", "a", 2, 2.0, 1.5),
        Posting("war", "a", 1, 1.0, 0.25),
    ])
    matrix = build_matrix(postings)

    assert matrix.terms == ["peace", "war"]
    assert matrix.doc_ids == ["a", "b"]
    assert matrix.shape == (2, 2)
    assert matrix.weight("peace", "a") == 1.5
    assert matrix.weight("peace", "b") == 0.0
    assert matrix.column("a").tolist() == [1.5, 0.25]
    assert matrix.rows(["war", "war"]).shape == (2, 2)
    assert "war" in matrix and "trade" not in matrix


def test_matrix_is_read_only():
    matrix = build_matrix([Posting("war", "a", 1, 1.0, 1.0)])
    with pytest.raises(ValueError):
        matrix.weights[0, 0] = 2.0


def test_query_single_term_scenario(stub_normalizer, cat_dog_records):
    engine = _engine(cat_dog_records, stub_normalizer, "relative_freq", "unary")
    assert engine.matrix.terms == ["cat", "dog", "sat"]

    doc_id, score = engine.query("cat")
    assert doc_id == "d1"
    assert score == pytest.approx(1.0)


def test_query_with_default_normalizer(cat_dog_records):
    index = InvertedIndexBuilder("relative_freq", "unary").build(cat_dog_records)
    result = query("The dog!", index.to_matrix())
    assert result == ("d2", pytest.approx(1.0))


def test_query_without_known_terms(stub_normalizer, cat_dog_records):
    engine = _engine(cat_dog_records, stub_normalizer)
    assert engine.query("xyz123") is None
    assert engine.query("") is None
    assert engine.query("the") is None
    assert engine.search("xyz123") == []


def test_query_against_empty_matrix(stub_normalizer):
    engine = _engine([], stub_normalizer)
    assert engine.matrix.shape == (0, 0)
    assert engine.query("cat") is None
    assert engine.search("anything") == []


def test_query_prefers_best_cosine(stub_normalizer):
    records = [("a", "cat"), ("b", "cat dog"), ("c", "bird")]
    engine = _engine(records, stub_normalizer)

    assert engine.query("cat dog") == ("b", pytest.approx(1.0))
    assert engine.search("cat dog") == [("b", pytest.approx(1.0)), ("a", pytest.approx(1 / math.sqrt(2)))]
    assert engine.search("cat dog", top_k=1) == [("b", pytest.approx(1.0))]


def test_query_ties_keep_matrix_order(stub_normalizer):
    records = [("b", "cat dog"), ("a", "cat bird")]
    engine = _engine(records, stub_normalizer)

    assert engine.matrix.doc_ids == ["a", "b"]
    assert engine.query("cat") == ("a", pytest.approx(1.0))
    assert [doc_id for doc_id, _ in engine.search("cat")] == ["a", "b"]


def test_query_repeated_terms_are_separate_dimensions(stub_normalizer):
    records = [("a", "cat cat dog"), ("b", "dog dog cat")]
    engine = _engine(records, stub_normalizer)

    assert engine.query_terms("cats and cat and xyz") == ["cat", "cat"]
    # query vector (1, 1, 1) against rows (cat, cat, dog)
    a_score = (2 + 2 + 1) / (math.sqrt(3) * math.sqrt(9))
    b_score = (1 + 1 + 2) / (math.sqrt(3) * math.sqrt(6))
    assert engine.query("cat cat dog") == ("a", pytest.approx(a_score))
    assert engine.search("cat cat dog")[1] == ("b", pytest.approx(b_score))


def test_query_negative_score_beats_non_matching_document(stub_normalizer):
    records = [("d1", "cat sat"), ("d2", "dog sat"), ("d3", "fish")]
    engine = _engine(records, stub_normalizer, "raw_count", "inv_doc_freq_max")

    # idf(sat) = log10(2 / 3) < 0; "fish" has no "sat" weight and scores 0
    assert engine.query("sat") == ("d1", pytest.approx(-1.0))
    assert engine.search("sat") == [("d1", pytest.approx(-1.0)), ("d2", pytest.approx(-1.0))]


def test_query_ignores_infinite_weights(stub_normalizer):
    records = [("a", "cat dog"), ("b", "cat bird")]
    engine = _engine(records, stub_normalizer, "raw_count", "probabilistic_inv_doc_freq")

    # "cat" is in every document: its weight is -inf everywhere
    assert engine.query("cat") is None
    # "dog" has idf log10(1) = 0, so no document scores
    assert engine.query("dog") is None


def test_concurrent_queries_share_matrix(stub_normalizer, cat_dog_records):
    from concurrent.futures import ThreadPoolExecutor

    engine = _engine(cat_dog_records, stub_normalizer, "relative_freq", "unary")
    with ThreadPoolExecutor(max_workers=4) as executor:
        results = list(executor.map(engine.query, ["cat", "dog", "sat", "xyz"] * 5))

    assert results[:4] == [("d1", pytest.approx(1.0)), ("d2", pytest.approx(1.0)),
                           ("d1", pytest.approx(1.0)), None]
