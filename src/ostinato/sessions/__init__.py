"""Persistence for suspended and finished agent sessions.

- :class:`TraceStore` - SQLite storage of serialized traces, keyed by session id
"""

from ostinato.sessions.storage import SessionSummary, TraceStore

__all__ = ["SessionSummary", "TraceStore"]
