"""Time series metadata helpers: queries, filters, id set operations, results, caching and ingest records."""

__version__ = "0.1.0"