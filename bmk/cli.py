#!/usr/bin/env python3
"""
BMK - Command Bookmarks

Save shell commands under short names, then list, search, run or remove
them from the command line.
"""
import sys
import argparse
import json
import logging
import os
import shutil
import subprocess
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from bmk import __version__
from bmk.config import BmkConfig, ConfigError, OUTPUT_FORMATS, LOG_LEVELS, init_config, default_config_path
from bmk.store import BookmarkContainer, BookmarkFileStore, BookmarkLoader, BookmarkLoadUpdater
from bmk.tokenizer import split_on_space, join_tokens

logger = logging.getLogger(__name__)

NO_BOOKMARKS = "You have no saved bookmarks"
DEFAULT_STORE_FILENAME = "bookmarks.json"


@dataclass
class CommandContext:
    """Everything a command handler needs for one invocation."""
    config: BmkConfig
    store: BookmarkLoadUpdater
    console: Console
    config_path: Optional[Path] = None


def confirm(console: Console, prompt: str) -> bool:
    """Ask a y/N question; only an explicit 'y' counts as yes."""
    try:
        answer = console.input(prompt)
    except EOFError:
        answer = ""
    return answer.strip().lower() == "y"


def not_found(console: Console, name: str):
    console.print(f'[yellow]Unable to find bookmark: "{escape(name)}"[/yellow]')


def shell_command(command: str) -> list:
    """Build the argv that hands ``command`` to the platform shell."""
    if sys.platform == "win32":
        return ["cmd", "/c", command]
    return ["bash", "-c", command]


def output_bookmarks(console: Console, store: BookmarkContainer, format: str = "table"):
    """Output bookmarks in the specified format, sorted by name."""
    names = sorted(store)

    if format == "table":
        table = Table(title="Bookmarks")
        table.add_column("ID", style="cyan")
        table.add_column("Bookmark", style="green")
        table.add_column("Command", style="blue")

        for i, name in enumerate(names, 1):
            table.add_row(str(i), escape(name), escape(store[name]))

        console.print(table)
    elif format == "json":
        console.out(json.dumps({name: store[name] for name in names}, indent=2, ensure_ascii=False),
                    highlight=False)
    else:  # plain
        console.out("ID: BOOKMARK: COMMAND", highlight=False)
        for i, name in enumerate(names, 1):
            console.out(f"{i}: {name}: {store[name]}", highlight=False)


def cmd_add(args, ctx: CommandContext):
    """Add a new bookmark, or override an existing one after confirmation."""
    store: BookmarkLoadUpdater = ctx.store
    name = args.name
    command = " ".join(args.cmd)

    if not name or not command.strip():
        ctx.console.print("[red]Error: bookmark name and command must not be empty[/red]")
        sys.exit(1)

    bookmarks = store.load()

    if name in bookmarks:
        ctx.console.print(f"{escape(name)} already exists: {escape(bookmarks[name])}", highlight=False)
        if confirm(ctx.console, "Do you want to override it (y/N)? "):
            bookmarks[name] = command
            store.update(bookmarks)
            if not args.quiet:
                ctx.console.print(f'[green]Bookmark "{escape(name)}" has been updated successfully![/green]')
        else:
            logger.debug(f"Kept existing bookmark {name}")
        return

    bookmarks[name] = command
    store.update(bookmarks)
    if not args.quiet:
        ctx.console.print(f'[green]New bookmark "{escape(name)}" has been added successfully![/green]')


def cmd_exec(args, ctx: CommandContext) -> int:
    """Run a saved bookmark through the platform shell."""
    store: BookmarkLoader = ctx.store
    bookmarks = store.load()

    if not bookmarks:
        ctx.console.print(NO_BOOKMARKS)
        return 0

    if args.name not in bookmarks:
        not_found(ctx.console, args.name)
        return 0

    command = join_tokens(split_on_space(bookmarks[args.name]))
    argv = shell_command(command)
    logger.debug(f"Executing {argv}")

    # stdout/stderr are inherited so output streams as it is produced
    result = subprocess.run(argv)
    if result.returncode != 0:
        logger.info(f"Bookmark {args.name} exited with status {result.returncode}")
    return result.returncode


def cmd_list(args, ctx: CommandContext):
    """List saved bookmarks."""
    store: BookmarkLoader = ctx.store
    bookmarks = store.load()

    if not bookmarks:
        ctx.console.print(NO_BOOKMARKS)
        return

    output_bookmarks(ctx.console, bookmarks, args.output)


def cmd_search(args, ctx: CommandContext):
    """Print the command saved under a bookmark name."""
    store: BookmarkLoader = ctx.store
    bookmarks = store.load()

    if not bookmarks:
        ctx.console.print(NO_BOOKMARKS)
        return

    if args.name in bookmarks:
        ctx.console.out(bookmarks[args.name], highlight=False)
        return

    not_found(ctx.console, args.name)


def cmd_remove(args, ctx: CommandContext):
    """Remove a bookmark after confirmation."""
    store: BookmarkLoadUpdater = ctx.store
    bookmarks = store.load()

    if not bookmarks:
        ctx.console.print(NO_BOOKMARKS)
        return

    name = args.name
    if name not in bookmarks:
        not_found(ctx.console, name)
        return

    if not confirm(ctx.console, f'Are you sure you want to remove "{escape(name)}" (y/N)? '):
        return

    del bookmarks[name]
    store.update(bookmarks)
    if not args.quiet:
        ctx.console.print(f'[green]"{escape(name)}" was removed successfully![/green]')


def cmd_version(args, ctx: CommandContext):
    """Print the version of bmk."""
    ctx.console.out(f"v{__version__}", highlight=False)


def set_store_path(config: BmkConfig, value: str) -> Path:
    """
    Point the config at a new store location, moving the current store there.

    A value ending in a path separator (or naming an existing directory) is
    treated as a directory and gets the default store file name.
    """
    new_path = Path(os.path.expanduser(value))
    if value.endswith(("/", os.sep)) or new_path.is_dir():
        new_path = new_path / DEFAULT_STORE_FILENAME
    new_path = new_path.absolute()

    new_path.parent.mkdir(mode=0o750, parents=True, exist_ok=True)

    old_path = config.get_store_path()
    if old_path.exists() and old_path != new_path:
        shutil.move(str(old_path), str(new_path))
        logger.debug(f"Moved store {old_path} -> {new_path}")

    config.store = str(new_path)
    return new_path


def stored_config(ctx: CommandContext) -> BmkConfig:
    """The config exactly as saved on disk, without env or flag overrides."""
    return BmkConfig.load(ctx.config_path, create=False, env=False)


def cmd_config(args, ctx: CommandContext):
    """Manage configuration."""
    config = ctx.config

    if args.action == "show":
        if args.key:
            if args.key not in asdict(config):
                ctx.console.print(f"[red]Unknown config key: {escape(args.key)}[/red]")
                sys.exit(1)
            ctx.console.out(str(getattr(config, args.key)), highlight=False)
        else:
            ctx.console.out(json.dumps(asdict(config), indent=4), highlight=False)

    elif args.action == "set":
        if not args.key or args.value is None:
            ctx.console.print("[red]Usage: bmk config set <key> <value>[/red]")
            sys.exit(1)

        # Only the key being set changes; overrides for this run are not persisted
        config = stored_config(ctx)

        if args.key == "store":
            value = str(set_store_path(config, args.value))
        elif args.key == "output_format":
            if args.value not in OUTPUT_FORMATS:
                ctx.console.print(f"[red]Invalid output format: {escape(args.value)}[/red]")
                sys.exit(1)
            value = config.output_format = args.value
        elif args.key == "log_level":
            if args.value.upper() not in LOG_LEVELS:
                ctx.console.print(f"[red]Invalid log level: {escape(args.value)}[/red]")
                sys.exit(1)
            value = config.log_level = args.value.upper()
        else:
            ctx.console.print(f"[red]Unknown config key: {escape(args.key)}[/red]")
            sys.exit(1)

        config.save(ctx.config_path)
        if not args.quiet:
            ctx.console.print(f"[green]Set {args.key} = {escape(value)}[/green]")

    elif args.action == "init":
        config_path = ctx.config_path or default_config_path()
        stored_config(ctx).save(config_path)
        ctx.console.print(f"[green]Created config at {escape(str(config_path))}[/green]")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for all bmk commands."""
    parser = argparse.ArgumentParser(
        prog="bmk",
        description="BMK - save shell commands as named bookmarks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  bmk add hello echo "Hello World"
  bmk list
  bmk search hello
  bmk exec hello
  bmk remove hello

  bmk config show
  bmk config set store ~/dotfiles/bookmarks.json

Configuration:
  Config file: ~/.config/bmk/config.json (or $BMK_CONFIG)
  Environment: BMK_STORE, BMK_OUTPUT_FORMAT, BMK_LOG_LEVEL
        """
    )

    # Global options
    parser.add_argument("--config", help="Config file path")
    parser.add_argument("--store", help="Bookmark store file (overrides config)")
    parser.add_argument("-q", "--quiet", action="store_true", help="Minimal output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-o", "--output", choices=OUTPUT_FORMATS, help="Output format")

    subparsers = parser.add_subparsers(dest="command", required=True, help="Commands")

    add_parser = subparsers.add_parser("add", help="Add a new bookmark")
    add_parser.add_argument("name", help="Bookmark name")
    add_parser.add_argument("cmd", nargs="+", help="Command to save")
    add_parser.set_defaults(func=cmd_add)

    exec_parser = subparsers.add_parser("exec", help="Execute a bookmark")
    exec_parser.add_argument("name", help="Bookmark name")
    exec_parser.set_defaults(func=cmd_exec)

    list_parser = subparsers.add_parser("list", help="List your saved bookmarks")
    list_parser.set_defaults(func=cmd_list)

    remove_parser = subparsers.add_parser("remove", help="Remove a bookmark")
    remove_parser.add_argument("name", help="Bookmark name")
    remove_parser.set_defaults(func=cmd_remove)

    search_parser = subparsers.add_parser("search", help="Search for a bookmark")
    search_parser.add_argument("name", help="Bookmark name")
    search_parser.set_defaults(func=cmd_search)

    version_parser = subparsers.add_parser("version", help="Print the version of bmk")
    version_parser.set_defaults(func=cmd_version)

    config_parser = subparsers.add_parser("config", help="Manage configuration")
    config_parser.add_argument("action", choices=["show", "set", "init"],
                               help="Config action")
    config_parser.add_argument("key", nargs="?", help="Config key")
    config_parser.add_argument("value", nargs="?", help="Config value (for set)")
    config_parser.set_defaults(func=cmd_config)

    return parser


def setup_logging(level: str, verbose: bool = False):
    """Configure root logging for a CLI run."""
    if verbose:
        level = "DEBUG"
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.WARNING),
        format="%(levelname)s: %(message)s",
    )


def main(argv=None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    console = Console()

    try:
        config = init_config(config_file=args.config, store=args.store,
                             output_format=args.output)
    except ConfigError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)

    setup_logging(config.log_level, args.verbose)

    if not args.output:
        args.output = config.output_format

    ctx = CommandContext(
        config=config,
        store=BookmarkFileStore(config.get_store_path()),
        console=console,
        config_path=Path(args.config) if args.config else None,
    )
    logger.debug(f"Using {ctx.store}")

    # Execute command
    try:
        return_code = args.func(args, ctx)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        sys.exit(1)

    if return_code:
        sys.exit(return_code)


if __name__ == "__main__":
    main()
