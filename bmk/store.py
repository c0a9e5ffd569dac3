"""
Bookmark persistence for BMK.

Bookmarks live in a single JSON file mapping bookmark names to the shell
command they stand for. Callers depend on the narrowest capability they
need: read-only commands take a ``BookmarkLoader``, commands that change
the store take a ``BookmarkLoadUpdater``.
"""
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Union

logger = logging.getLogger(__name__)

BookmarkContainer = Dict[str, str]

DEFAULT_STORE_MODE = 0o600


# ============================================================================
# Errors
# ============================================================================

class StoreError(Exception):
    """Base class for bookmark store failures."""

    def __init__(self, path: Union[str, Path], message: str):
        self.path = Path(path)
        super().__init__(f"{message}: {self.path}")


class StoreReadError(StoreError):
    """The store file exists but could not be read."""


class StoreFormatError(StoreError):
    """The store file is not a JSON object of string to string."""


class StoreWriteError(StoreError):
    """The store file could not be written."""


# ============================================================================
# Capabilities
# ============================================================================

class BookmarkLoader(ABC):
    """Anything bookmarks can be loaded from."""

    @abstractmethod
    def load(self) -> BookmarkContainer:
        """Return the saved bookmarks."""
        pass


class BookmarkUpdater(ABC):
    """Anything bookmarks can be written to."""

    @abstractmethod
    def update(self, container: BookmarkContainer) -> None:
        """Replace the saved bookmarks with ``container``."""
        pass


class BookmarkLoadUpdater(BookmarkLoader, BookmarkUpdater):
    """A store that supports both loading and updating."""


# ============================================================================
# File store
# ============================================================================

def validate_container(data, path: Union[str, Path]) -> BookmarkContainer:
    """
    Check that decoded JSON is a mapping of bookmark names to commands.

    Raises:
        StoreFormatError: If ``data`` is not an object of string to string
    """
    if not isinstance(data, dict):
        raise StoreFormatError(path, f"Expected a JSON object, got {type(data).__name__}")

    for name, command in data.items():
        if not name:
            raise StoreFormatError(path, "Bookmark with an empty name")
        if not isinstance(command, str) or not command:
            raise StoreFormatError(path, f"Command for bookmark '{name}' is not a non-empty string")

    return data


class BookmarkFileStore(BookmarkLoadUpdater):
    """
    Bookmark store backed by a JSON file.

    The file is read on every ``load`` and rewritten in full on every
    ``update``; nothing is cached between calls.
    """

    def __init__(self, path: Union[str, Path], mode: int = DEFAULT_STORE_MODE):
        """
        Args:
            path: Location of the JSON store file
            mode: Permission bits applied to the file on every write
        """
        self.path = Path(path)
        self.mode = mode

    def __repr__(self) -> str:
        return f"BookmarkFileStore({str(self.path)!r})"

    def load(self) -> BookmarkContainer:
        """
        Load bookmarks from the store file.

        A missing file is an empty store, not an error.

        Raises:
            StoreReadError: If the file exists but cannot be read
            StoreFormatError: If the contents are not a JSON object of strings
        """
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            logger.debug(f"No store at {self.path}. Starting with no bookmarks.")
            return {}
        except OSError as e:
            raise StoreReadError(self.path, f"Unable to read bookmark store ({e.strerror or e})") from e

        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise StoreFormatError(self.path, f"Invalid bookmark store ({e})") from e

        container = validate_container(data, self.path)
        logger.debug(f"Loaded {len(container)} bookmarks from {self.path}.")
        return container

    def update(self, container: BookmarkContainer) -> None:
        """
        Write the full set of bookmarks to the store file.

        The data is written to a temporary file next to the store and then
        renamed over it.

        Raises:
            StoreWriteError: If any part of the write fails
        """
        try:
            payload = json.dumps(container, ensure_ascii=False, indent=2)
        except (TypeError, ValueError) as e:
            raise StoreWriteError(self.path, f"Unable to serialize bookmarks ({e})") from e

        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.chmod(tmp_path, self.mode)
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            raise StoreWriteError(self.path, f"Unable to write bookmark store ({e.strerror or e})") from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)

        logger.debug(f"Saved {len(container)} bookmarks to {self.path}.")
