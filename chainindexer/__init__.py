"""Storage of chain validator data, table records, coin encoding and chain indexing modules."""

__version__ = "0.1.0"