import pytest
from argparse import Namespace
from io import StringIO

from rich.console import Console

from bmk.cli import CommandContext
from bmk.config import BmkConfig
from bmk.store import BookmarkLoadUpdater


class MemoryBookmarkStore(BookmarkLoadUpdater):
    """In-memory store double that records every write."""

    def __init__(self, bookmarks=None):
        self.bookmarks = dict(bookmarks or {})
        self.update_count = 0

    def load(self):
        return dict(self.bookmarks)

    def update(self, container):
        self.bookmarks = dict(container)
        self.update_count += 1


@pytest.fixture
def memory_store():
    """Empty in-memory bookmark store."""
    return MemoryBookmarkStore()


@pytest.fixture
def populated_store():
    """In-memory store with a couple of bookmarks."""
    return MemoryBookmarkStore({
        "hello": 'echo "Hello world"',
        "list": "ls",
    })


@pytest.fixture
def console():
    """Console that renders plain text into a buffer."""
    return Console(file=StringIO(), width=200, force_terminal=False, color_system=None)


@pytest.fixture
def make_ctx(console, tmp_path, monkeypatch):
    """Build a CommandContext around a given store, with its config saved to disk."""
    home = tmp_path / "home"
    home.mkdir(exist_ok=True)
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))

    def _make(store):
        config = BmkConfig(store=str(tmp_path / "bookmarks.json"))
        config_path = tmp_path / "config.json"
        config.save(config_path)
        return CommandContext(config=config, store=store, console=console,
                              config_path=config_path)
    return _make


@pytest.fixture
def output(console):
    """Return everything printed to the test console so far."""
    return lambda: console.file.getvalue()


def make_args(**kwargs):
    """Namespace with the global options every handler expects."""
    defaults = {"quiet": False, "verbose": False, "output": "plain"}
    defaults.update(kwargs)
    return Namespace(**defaults)


@pytest.fixture
def args():
    return make_args
