"""Ingestion layer.

Turns untyped station records into typed state-tree entries.
"""

__all__: list[str] = []
