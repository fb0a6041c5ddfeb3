"""Local persistence."""

from src.coinfeed.storage.local_store import LocalStore

__all__ = ["LocalStore"]
