"""
BMK - Command Bookmarks

Save shell commands under short names and run them later.

Design Principles:
- A single JSON file maps bookmark names to raw command lines
- Commands are stored verbatim and only tokenized at execution time
- Handlers receive their store and config explicitly, no global state

Example Usage:
    >>> from bmk import BookmarkFileStore, split_on_space
    >>> store = BookmarkFileStore("bookmarks.json")
    >>> bookmarks = store.load()
    >>> bookmarks["hello"] = 'echo "Hello World"'
    >>> store.update(bookmarks)
    >>> split_on_space(bookmarks["hello"])
    ['echo', '"Hello World"']
"""

__version__ = "1.0.2"
__author__ = "BMK Contributors"

# Store
from bmk.store import (
    BookmarkContainer,
    BookmarkLoader,
    BookmarkUpdater,
    BookmarkLoadUpdater,
    BookmarkFileStore,
    StoreError,
    StoreReadError,
    StoreFormatError,
    StoreWriteError,
)

# Configuration
from bmk.config import BmkConfig, ConfigError, init_config

# Tokenizer
from bmk.tokenizer import split_on_space, join_tokens

__all__ = [
    # Store
    "BookmarkContainer",
    "BookmarkLoader",
    "BookmarkUpdater",
    "BookmarkLoadUpdater",
    "BookmarkFileStore",
    "StoreError",
    "StoreReadError",
    "StoreFormatError",
    "StoreWriteError",
    # Config
    "BmkConfig",
    "ConfigError",
    "init_config",
    # Tokenizer
    "split_on_space",
    "join_tokens",
]
