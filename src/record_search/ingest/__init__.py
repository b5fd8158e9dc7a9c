"""Corpus loading for the search engine host."""

from record_search.ingest.corpus import load_corpus, normalize_corpus, normalize_record

__all__ = ["load_corpus", "normalize_corpus", "normalize_record"]
