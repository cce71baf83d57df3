"""
SQLite persistence for documents and inverted index tables.

The index core only needs ``(doc_id, text)`` records in and dictionary /
posting rows out; this module supplies both ends on top of ``sqlite3``.
"""
import os
import re
import sqlite3
from typing import Iterable, List, Optional, Sequence, Tuple

from .build_inverted_index import Dictionary, DictionaryEntry, InvertedIndex, Posting, Postings
from .preprocessing.document import make_doc_id

DICTIONARY_COLUMNS = ("term", "docfreq", "collectionfreq", "idf")
DICTIONARY_COLUMN_DEFS = [
    "term TEXT PRIMARY KEY NOT NULL",
    "docfreq INTEGER NOT NULL",
    "collectionfreq INTEGER NOT NULL",
    "idf REAL",
]

POSTINGS_COLUMNS = ("term", "doc_id", "termfreq", "tf", "tfidf")
POSTINGS_COLUMN_DEFS = [
    "term TEXT NOT NULL",
    "doc_id TEXT NOT NULL",
    "termfreq INTEGER NOT NULL",
    "tf REAL",
    "tfidf REAL",
    "PRIMARY KEY (doc_id, term)",
]

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _identifier(name: str) -> str:
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid table or column name: {name!r}")
    return name


def connect(path: str, create: bool = True) -> sqlite3.Connection:
    """
    Open a database connection.

    Args:
        path: SQLite database file (``:memory:`` for an in-memory database)
        create: Create the file when it does not exist

    Returns:
        Connection returning ``sqlite3.Row`` rows

    Raises:
        FileNotFoundError: ``create`` is False and the file does not exist
    """
    if not create and path != ":memory:" and not os.path.exists(path):
        raise FileNotFoundError(f"Database not found: {path}")

    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    return conn


def get_table(conn: sqlite3.Connection, table: str, columns: Sequence[str] = ("*",)) -> List[sqlite3.Row]:
    """
    Retrieve an entire table.

    Args:
        conn: Database connection
        table: Table name
        columns: Column names to select (default: all)

    Returns:
        List of rows
    """
    selected = ", ".join(column if column == "*" else _identifier(column) for column in columns)
    return conn.execute(f"SELECT {selected} FROM {_identifier(table)}").fetchall()


def create_table(conn: sqlite3.Connection, table: str, column_defs: Sequence[str]) -> None:
    """
    Drop and re-create a table.

    Args:
        conn: Database connection
        table: Table name
        column_defs: Column definitions, e.g. ``"id INTEGER PRIMARY KEY NOT NULL"``
    """
    table = _identifier(table)
    conn.execute(f"DROP TABLE IF EXISTS {table}")
    conn.execute(f"CREATE TABLE {table} (\n    " + ",\n    ".join(column_defs) + "\n)")


def load_table(conn: sqlite3.Connection, rows: Iterable[Sequence], table: str, columns: Sequence[str],
               column_defs: Optional[Sequence[str]] = None) -> int:
    """
    Create a table and bulk insert rows into it.

    Args:
        conn: Database connection
        rows: Row tuples, values in ``columns`` order
        table: Table name
        columns: Column names
        column_defs: Column definitions (default: every column as ``TEXT``)

    Returns:
        Number of inserted rows
    """
    columns = [_identifier(column) for column in columns]
    if column_defs is None:
        column_defs = [f"{column} TEXT" for column in columns]

    rows = [tuple(row) for row in rows]
    with conn:
        create_table(conn, table, column_defs)
        placeholders = ", ".join("?" for _ in columns)
        conn.executemany(
            f"INSERT INTO {_identifier(table)} ({', '.join(columns)}) VALUES ({placeholders})",
            rows,
        )
    return len(rows)


def fetch_documents(conn: sqlite3.Connection, table: str, id_columns: Sequence[str],
                    text_column: str) -> List[Tuple[Optional[str], Optional[str]]]:
    """
    Read ``(doc_id, text)`` records from a table.

    The document id joins the ``id_columns`` values with ``_``. A NULL id
    part gives a ``None`` id and a NULL text a ``None`` text, so the index
    builder can skip and report such records.

    Args:
        conn: Database connection
        table: Source table, e.g. ``stateofunion``
        id_columns: Columns forming the composite key, e.g. ``("president", "date")``
        text_column: Column holding the document text

    Returns:
        List of records in table order
    """
    if not id_columns:
        raise ValueError("At least one id column is required")

    records = []
    for row in get_table(conn, table, [*id_columns, text_column]):
        key_parts = [row[column] for column in id_columns]
        doc_id = None if any(part is None for part in key_parts) else make_doc_id(*key_parts)
        records.append((doc_id, row[text_column]))
    return records


def save_index(conn: sqlite3.Connection, index: InvertedIndex,
               dictionary_table: str = "dictionary", postings_table: str = "postings") -> Tuple[int, int]:
    """
    Write the dictionary and postings tables, replacing existing ones.

    Returns:
        Number of dictionary rows and postings rows written
    """
    dictionary_rows = load_table(
        conn,
        ((e.term, e.document_frequency, e.collection_frequency, e.idf) for e in index.dictionary),
        dictionary_table, DICTIONARY_COLUMNS, DICTIONARY_COLUMN_DEFS,
    )
    postings_rows = load_table(
        conn,
        ((p.term, p.doc_id, p.raw_frequency, p.tf, p.tfidf) for p in index.postings),
        postings_table, POSTINGS_COLUMNS, POSTINGS_COLUMN_DEFS,
    )
    return dictionary_rows, postings_rows


def read_dictionary(conn: sqlite3.Connection, table: str = "dictionary") -> Dictionary:
    """Read a saved dictionary table back (``ndocs`` is not stored and reads as 0)."""
    return Dictionary(
        DictionaryEntry(row["term"], row["docfreq"], row["collectionfreq"], row["idf"])
        for row in get_table(conn, table, DICTIONARY_COLUMNS)
    )


def read_postings(conn: sqlite3.Connection, table: str = "postings") -> Postings:
    """Read a saved postings table back, e.g. to rebuild the document-term matrix."""
    return Postings(
        Posting(row["term"], row["doc_id"], row["termfreq"], row["tf"], row["tfidf"])
        for row in get_table(conn, table, POSTINGS_COLUMNS)
    )
