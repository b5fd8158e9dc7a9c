"""HTTP host for the search engine."""
