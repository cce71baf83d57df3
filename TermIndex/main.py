import argparse
import json
import sqlite3
import time
import traceback
from typing import Any, Dict, List, Optional, Sequence, Tuple

from rich import box
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.syntax import Syntax
from rich.table import Table

from . import db
from .build_inverted_index import InvertedIndex, InvertedIndexBuilder
from .config import load_config
from .console import console, error, warn
from .errors import EmptyInputError, TermIndexError
from .preprocessing.document import make_doc_id
from .preprocessing.normalizer import TextNormalizer
from .tfidf_search.matrix import build_matrix
from .tfidf_search.tfidf_search import QueryEngine
from .tfidf_search.weighting import IDFMethod, TFMethod

Record = Tuple[Optional[str], Optional[str]]


def records_from_json(data: Any, id_fields: Sequence[str], text_field: str) -> List[Record]:
    """
    Extract ``(doc_id, text)`` records from parsed JSON.

    Supported layouts are a list of objects (the id joins ``id_fields``), an
    object keyed by document id, and a list of plain strings (the id is the
    position). Missing fields come back as ``None``.

    Args:
        data: Parsed JSON document collection
        id_fields: Fields forming the composite document id
        text_field: Field holding the document text

    Returns:
        List of records
    """
    records = []
    if isinstance(data, dict):
        for doc_id, doc in data.items():
            text = doc.get(text_field) if isinstance(doc, dict) else doc
            records.append((str(doc_id), text if isinstance(text, str) else None))
        return records

    for i, doc in enumerate(data):
        if isinstance(doc, str):
            records.append((str(i), doc))
            continue
        if not isinstance(doc, dict):
            records.append((None, None))
            continue
        key_parts = [doc.get(field) for field in id_fields]
        doc_id = None if not key_parts or any(part is None for part in key_parts) else make_doc_id(*key_parts)
        text = doc.get(text_field)
        records.append((doc_id, text if isinstance(text, str) else None))
    return records


class TermIndex:
    """
    Unified interface: load documents, build the inverted index, persist
    its tables and answer queries.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, normalizer: Optional[TextNormalizer] = None):
        self.config = config or load_config()
        self.normalizer = normalizer or TextNormalizer.from_config(self.config)
        self.records: List[Record] = []
        self.index: Optional[InvertedIndex] = None
        self.engine: Optional[QueryEngine] = None

    def load_documents(self, documents_path: str, id_fields: Optional[Sequence[str]] = None,
                       text_field: Optional[str] = None) -> int:
        """
        Load documents from a JSON file.

        Args:
            documents_path: Path to the JSON file with documents
            id_fields: Fields forming the document id (default from config)
            text_field: Field holding the text (default from config)

        Returns:
            Number of records read
        """
        source = self.config["source"]
        console.print(f"Loading documents from: [cyan]{documents_path}[/cyan]")
        with open(documents_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        self.records = records_from_json(data, id_fields or source["id_columns"],
                                         text_field or source["text_column"])
        console.print(f"[green]Loaded [bold]{len(self.records)}[/bold] records[/green]")
        return len(self.records)

    def load_database(self, db_path: str, table: Optional[str] = None, id_columns: Optional[Sequence[str]] = None,
                      text_column: Optional[str] = None) -> int:
        """
        Load documents from an SQLite table.

        Returns:
            Number of records read
        """
        source = self.config["source"]
        table = table or source["table"]
        console.print(f"Loading documents from table [cyan]{table}[/cyan] in [cyan]{db_path}[/cyan]")
        conn = db.connect(db_path, create=False)
        try:
            self.records = db.fetch_documents(conn, table, id_columns or source["id_columns"],
                                              text_column or source["text_column"])
        finally:
            conn.close()

        console.print(f"[green]Loaded [bold]{len(self.records)}[/bold] records[/green]")
        return len(self.records)

    def build_index(self, tf_method=None, idf_method=None, workers: Optional[int] = None) -> InvertedIndex:
        """
        Build the inverted index and the query engine from the loaded records.

        Args:
            tf_method: TF method name (default from config)
            idf_method: IDF method name (default from config)
            workers: Processes used for normalization (default from config)

        Returns:
            The built InvertedIndex
        """
        index_config = self.config["index"]
        builder = InvertedIndexBuilder(
            tf_method=tf_method or index_config["tf_method"],
            idf_method=idf_method or index_config["idf_method"],
            normalizer=self.normalizer,
            workers=workers or index_config.get("workers", 1),
        )
        console.print(
            f"Building index with tf=[cyan]{builder.tf_method.value}[/cyan] "
            f"idf=[cyan]{builder.idf_method.value}[/cyan]"
        )
        self.index = builder.build(self.records)
        self.engine = QueryEngine(self.index.to_matrix(), self.normalizer)
        return self.index

    def load_matrix_from_tables(self, db_path: str, postings_table: Optional[str] = None) -> None:
        """Rebuild the query engine from a previously saved postings table."""
        postings_table = postings_table or self.config["database"]["postings_table"]
        conn = db.connect(db_path, create=False)
        try:
            postings = db.read_postings(conn, postings_table)
        finally:
            conn.close()

        self.engine = QueryEngine(build_matrix(postings), self.normalizer)
        console.print(
            f"Loaded [bold]{len(postings)}[/bold] postings from [cyan]{postings_table}[/cyan] "
            f"({self.engine.matrix.shape[0]} terms x {self.engine.matrix.shape[1]} documents)"
        )

    def save_tables(self, db_path: str, dictionary_table: Optional[str] = None,
                    postings_table: Optional[str] = None) -> Tuple[int, int]:
        """
        Write dictionary and postings tables into an SQLite database.

        Raises:
            EmptyInputError: No index has been built
        """
        if self.index is None:
            raise EmptyInputError("No index built. Build the index before saving its tables.")

        database_config = self.config["database"]
        dictionary_table = dictionary_table or database_config["dictionary_table"]
        postings_table = postings_table or database_config["postings_table"]

        conn = db.connect(db_path)
        try:
            counts = db.save_index(conn, self.index, dictionary_table, postings_table)
        finally:
            conn.close()

        console.print(
            f"[green]Saved [bold]{counts[0]}[/bold] rows to [cyan]{dictionary_table}[/cyan] and "
            f"[bold]{counts[1]}[/bold] rows to [cyan]{postings_table}[/cyan][/green]"
        )
        return counts

    def _require_engine(self) -> QueryEngine:
        if self.engine is None:
            raise EmptyInputError("No index available. Load documents and build the index first.")
        return self.engine

    def query(self, text: str) -> Optional[Tuple[str, float]]:
        return self._require_engine().query(text)

    def search(self, text: str, top_k: Optional[int] = None) -> List[Tuple[str, float]]:
        if top_k is None:
            top_k = self.config["search"]["top_k"]
        return self._require_engine().search(text, top_k=top_k)


def display_results(query: str, results: List[Tuple[str, float]]) -> None:
    """Display search results in a formatted way"""
    if not results:
        console.print(f"[yellow]No results found for '{escape(query)}'.[/yellow]")
        return

    table = Table(
        box=box.HEAVY_EDGE,
        show_header=True,
        header_style="bold magenta",
        title=f"[bold]Found {len(results)} document(s) ranked by relevance[/bold]",
        title_style="yellow",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Document", style="cyan bold")
    table.add_column("Score", width=10)

    for i, (doc_id, score) in enumerate(results):
        score_str = f"{score:.4f}"
        if score > 0.7:
            score_display = f"[bold green]{score_str}[/bold green]"
        elif score > 0.4:
            score_display = f"[yellow]{score_str}[/yellow]"
        else:
            score_display = f"[dim]{score_str}[/dim]"

        table.add_row(str(i + 1), escape(doc_id), score_display, style="on blue" if i == 0 else "")

    console.print(table)


def run_query(retriever: TermIndex, query: str, top_k: Optional[int]) -> None:
    console.print(f"Executing search: '[cyan]{escape(query)}[/cyan]'")
    start_time = time.time()
    results = retriever.search(query, top_k)
    console.print(f"Search time: {time.time() - start_time:.6f} seconds")
    display_results(query, results)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="TermIndex - TF-IDF inverted index and cosine-similarity search"
    )
    parser.add_argument("--config", help="Path to configuration file")
    parser.add_argument("--documents", help="Path to documents JSON file")
    parser.add_argument("--database", help="Path to SQLite database (document source and/or table output)")
    parser.add_argument("--table", help="Source table holding the documents")
    parser.add_argument("--id-columns", help="Comma separated fields forming the document id")
    parser.add_argument("--text-column", help="Field holding the document text")
    parser.add_argument("--tf-method", choices=TFMethod.names(), help="Term frequency weighting")
    parser.add_argument("--idf-method", choices=IDFMethod.names(), help="Inverse document frequency weighting")
    parser.add_argument("--workers", type=int, help="Processes used to normalize documents")
    parser.add_argument("--save-tables", action="store_true",
                        help="Write dictionary and postings tables into --database")
    parser.add_argument("--from-tables", action="store_true",
                        help="Search a postings table saved in --database instead of re-indexing")
    parser.add_argument("--dictionary-table", help="Dictionary table name")
    parser.add_argument("--postings-table", help="Postings table name")
    parser.add_argument("--output", help="Write the inverted index to a JSON file")
    parser.add_argument("--query", help="Query string to search for")
    parser.add_argument("--top", type=int, help="Number of top results to display")
    parser.add_argument("--interactive", action="store_true", help="Run in interactive mode")
    return parser


def _progress():
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
        retriever = TermIndex(config)
        id_columns = args.id_columns.split(",") if args.id_columns else None
        database = args.database or config["database"]["path"]

        if args.from_tables:
            if not database:
                error("--from-tables needs --database")
                return 1
            retriever.load_matrix_from_tables(database, args.postings_table)
        else:
            if args.documents:
                retriever.load_documents(args.documents, id_columns, args.text_column)
            elif database:
                retriever.load_database(database, args.table, id_columns, args.text_column)
            else:
                error("No document source. Use --documents or --database.")
                return 1

            with _progress() as progress:
                task = progress.add_task("Building index...", total=None)
                index = retriever.build_index(args.tf_method, args.idf_method, args.workers)
                progress.update(task, completed=True)
            index.print_sample()

            if args.output:
                index.save_to_json(args.output)
            if args.save_tables:
                if not database:
                    error("--save-tables needs --database")
                    return 1
                retriever.save_tables(database, args.dictionary_table, args.postings_table)

        if args.query:
            run_query(retriever, args.query, args.top)

        if args.interactive:
            console.print("\n[bold blue]TermIndex[/bold blue] interactive mode, type 'quit' to exit")
            while True:
                try:
                    query = console.input("\n[bold cyan]Enter search query: [/bold cyan]").strip()
                except EOFError:
                    break
                if query.lower() in ("quit", "exit"):
                    break
                if not query:
                    warn("Empty query. Please try again.")
                    continue
                run_query(retriever, query, args.top)

    except TermIndexError as e:
        error(str(e))
        return 1
    except (OSError, ValueError, sqlite3.Error) as e:
        error(str(e))
        console.print(Syntax(traceback.format_exc(), "python", theme="monokai", line_numbers=True))
        return 1

    return 0


def cli() -> None:
    raise SystemExit(main())


if __name__ == "__main__":
    cli()
