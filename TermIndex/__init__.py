"""
TermIndex - term-based search index with configurable TF-IDF weighting
and cosine-similarity ranking over a small static corpus.
"""

__version__ = "0.1.0"
