"""
Test SQLite persistence of documents and index tables
"""
import math

import pytest

from TermIndex import db
from TermIndex.build_inverted_index import InvertedIndexBuilder
from TermIndex.tfidf_search.matrix import build_matrix

SPEECH_ROWS = [
    ("Lincoln", "1862-12-01", "Fellow citizens, we cannot escape history."),
    ("Roosevelt", "1941-01-06", "Freedom of speech and freedom of worship."),
    ("Kennedy", None, "Missing date"),
    ("Johnson", "1964-01-08", None),
]


@pytest.fixture()
def conn():
    connection = db.connect(":memory:")
    db.load_table(connection, SPEECH_ROWS, "stateofunion", ["president", "date", "speech"])
    yield connection
    connection.close()


def test_load_and_get_table(conn):
    rows = db.get_table(conn, "stateofunion")
    assert len(rows) == 4
    assert rows[0]["president"] == "Lincoln"

    presidents = db.get_table(conn, "stateofunion", ["president"])
    assert [row["president"] for row in presidents] == ["Lincoln", "Roosevelt", "Kennedy", "Johnson"]


def test_load_table_replaces_existing_table(conn):
    db.load_table(conn, [("only",)], "stateofunion", ["speech"])
    assert [tuple(row) for row in db.get_table(conn, "stateofunion")] == [("only",)]


def test_fetch_documents_builds_composite_ids(conn):
    records = db.fetch_documents(conn, "stateofunion", ["president", "date"], "speech")
    assert records == [
        ("Lincoln_1862-12-01", "Fellow citizens, we cannot escape history."),
        ("Roosevelt_1941-01-06", "Freedom of speech and freedom of worship."),
        (None, "Missing date"),
        ("Johnson_1964-01-08", None),
    ]


def test_fetch_documents_then_build_skips_incomplete_rows(conn, stub_normalizer):
    records = db.fetch_documents(conn, "stateofunion", ["president", "date"], "speech")
    index = InvertedIndexBuilder(normalizer=stub_normalizer).build(records)
    assert [d.id for d in index.documents] == ["Lincoln_1862-12-01", "Roosevelt_1941-01-06"]


def test_invalid_identifiers_are_rejected(conn):
    with pytest.raises(ValueError):
        db.get_table(conn, "stateofunion; DROP TABLE stateofunion")
    with pytest.raises(ValueError):
        db.fetch_documents(conn, "stateofunion", ["president"], "speech --")
    with pytest.raises(ValueError):
        db.fetch_documents(conn, "stateofunion", [], "speech")


def test_save_index_round_trip(conn, stub_normalizer):
    records = db.fetch_documents(conn, "stateofunion", ["president", "date"], "speech")
    index = InvertedIndexBuilder("log_scaled", "inv_doc_freq", normalizer=stub_normalizer).build(records)

    counts = db.save_index(conn, index, "dictionary", "postings")
    assert counts == (len(index.dictionary), len(index.postings))

    assert db.read_postings(conn, "postings") == index.postings
    dictionary = db.read_dictionary(conn, "dictionary")
    assert dictionary.entries == index.dictionary.entries

    rebuilt = build_matrix(db.read_postings(conn, "postings"))
    assert rebuilt.terms == index.to_matrix().terms
    assert (rebuilt.weights == index.to_matrix().weights).all()


def test_save_index_keeps_minus_infinity(stub_normalizer):
    conn = db.connect(":memory:")
    index = InvertedIndexBuilder("raw_count", "probabilistic_inv_doc_freq", normalizer=stub_normalizer).build(
        [("a", "cat dog"), ("b", "cat bird")])
    db.save_index(conn, index)

    assert db.read_dictionary(conn)["cat"].idf == -math.inf
    conn.close()


def test_connect_without_create_needs_existing_file(tmp_path):
    missing = tmp_path / "missing.db"
    with pytest.raises(FileNotFoundError):
        db.connect(str(missing), create=False)
    assert not missing.exists()

    db.connect(str(missing)).close()
    db.connect(str(missing), create=False).close()
