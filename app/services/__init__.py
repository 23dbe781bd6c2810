"""Service layer: the bug record store."""

from app.services.bug_store import BugStore, build_bug_store, get_bug_store

__all__ = ["BugStore", "build_bug_store", "get_bug_store"]
