"""
CLI interface for reviewing and tagging a record corpus.

Usage:
    cobb review ~/pasiv --scope 2022
    cobb list ~/pasiv --scope 2022-12
    cobb tags ~/pasiv
"""

import os
from pathlib import Path
from typing import Optional, Sequence

import typer
from typing_extensions import Annotated

from .api import Reviewer
from .config import LAST_DIRECTORY_KEY, TomlSettings, load_or_create_config
from .errors import CobbError, EmptyMissionError, MissionCancelled
from .filesystem import LocalDirectory
from .logging_config import configure_quiet_mode, enable_debug_mode
from .mission import hidden, select
from .types import Action, Command, Record

# Configure quiet mode by default
# Set COBB_VERBOSE=1 to enable debug mode via environment
if os.environ.get("COBB_VERBOSE") == "1":
    enable_debug_mode()
else:
    configure_quiet_mode(quiet=True)


HELP_TEXT = """\
Commands:
  n, next        save and go to the next record
  p, prev        save and go to the previous record
  +TAG           add a concept
  -TAG           remove a concept
  t TAG          toggle a concept
  new [TAG]      define a new concept and add it
  hide           hide this record from future missions
  q, quit        save and stop
  ?              this help"""


def _version_callback(value: bool):
    if value:
        from importlib.metadata import version
        print(f"cobb {version('cobb-tagger')}")
        raise typer.Exit()


def _verbose_callback(value: bool):
    if value:
        enable_debug_mode()


app = typer.Typer(
    name="cobb",
    help="Review and tag time-stamped text records.",
    no_args_is_help=True,
    rich_markup_mode=None,
)


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option(
        "--verbose", "-v",
        help="Enable debug-level logging to stderr",
        callback=_verbose_callback,
        is_eager=True,
    )] = False,
    version: Annotated[Optional[bool], typer.Option(
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    )] = None,
):
    """Review and tag time-stamped text records."""


# -----------------------------------------------------------------------------
# Common Options
# -----------------------------------------------------------------------------

DirectoryArgument = Annotated[
    Optional[Path],
    typer.Argument(
        help="Directory of shard files (default: the last one opened)",
    )
]

ScopeOption = Annotated[
    Optional[str],
    typer.Option(
        "--scope",
        help="Timestamp prefix selecting the mission, e.g. 2022 or 2022-12",
    )
]


# -----------------------------------------------------------------------------
# Terminal operator
# -----------------------------------------------------------------------------

def parse_command(line: str) -> Optional[Command]:
    """Parse one line of operator input. Returns None for unrecognized input."""
    text = line.strip()
    if not text:
        return None
    if text.startswith("+") and len(text) > 1:
        return Command(Action.ADD, text[1:].strip())
    if text.startswith("-") and len(text) > 1:
        return Command(Action.REMOVE, text[1:].strip())

    word, _, rest = text.partition(" ")
    word = word.lower()
    rest = rest.strip() or None
    if word in ("n", "next"):
        return Command(Action.NEXT)
    if word in ("p", "prev"):
        return Command(Action.PREV)
    if word in ("t", "toggle") and rest:
        return Command(Action.TOGGLE, rest)
    if word == "new":
        return Command(Action.NEW, rest)
    if word == "hide":
        return Command(Action.HIDE)
    if word in ("q", "quit", "exit"):
        return Command(Action.QUIT)
    return None


class TerminalOperator:
    """Operator interface on stdin/stdout via typer prompts."""

    def __init__(self, default_scope: str = ""):
        self._default_scope = default_scope

    def prompt_scope(self) -> Optional[str]:
        try:
            return typer.prompt(
                "Mission scope (e.g. 2022 or 2022-12, empty for all)",
                default=self._default_scope,
                show_default=bool(self._default_scope),
            )
        except typer.Abort:
            return None

    def prompt_new_tag_name(self) -> Optional[str]:
        try:
            return typer.prompt("New concept name", default="", show_default=False)
        except typer.Abort:
            return None

    def confirm_hide(self, record: Record) -> bool:
        try:
            return typer.confirm(
                f"Hide this record?\n\nIndex: {record.index}\n"
                "This action cannot be easily undone."
            )
        except typer.Abort:
            return False

    def notify(self, message: str) -> None:
        typer.echo(message, err=True)

    def render_record(
        self,
        record: Record,
        pending_tags: Sequence[str],
        vocabulary: Sequence[str],
        position: int,
        total: int,
    ) -> None:
        typer.echo()
        typer.echo(f"Memory Node: {position} / {total}")
        typer.echo(f"Index: {record.index or 'N/A'}  "
                   f"Timestamp: {record.timestamp or 'N/A'}  "
                   f"CharCount: {record.char_count or 'N/A'}")
        typer.echo("-" * 40)
        typer.echo(record.content)
        typer.echo("-" * 40)
        typer.echo(f"Tags: {', '.join(pending_tags) or '(none)'}")
        typer.echo(f"Concepts: {', '.join(vocabulary) or '(none)'}")

    def render_mission_complete(self) -> None:
        typer.echo("Mission Complete. All records in this scope have been processed.")

    def read_command(self) -> Optional[Command]:
        while True:
            try:
                line = typer.prompt("cobb", default="", show_default=False, prompt_suffix="> ")
            except typer.Abort:
                return None
            command = parse_command(line)
            if command is not None:
                return command
            typer.echo(HELP_TEXT)


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------

def _resolve_directory(directory: Optional[Path], settings: TomlSettings) -> Path:
    """Pick the directory argument, or the remembered one."""
    if directory is None:
        remembered = settings.get(LAST_DIRECTORY_KEY)
        if not remembered:
            typer.echo("Error: No directory given and none remembered", err=True)
            raise typer.Exit(1)
        directory = Path(remembered)
    directory = directory.expanduser().resolve()
    if not directory.is_dir():
        typer.echo(f"Error: Not a directory: {directory}", err=True)
        raise typer.Exit(1)
    return directory


def _open_reviewer(directory: Optional[Path]) -> Reviewer:
    config = load_or_create_config()
    settings = TomlSettings(config)
    path = _resolve_directory(directory, settings)
    reviewer = Reviewer(
        LocalDirectory(path),
        TerminalOperator(config.default_scope),
        config=config,
    )
    try:
        reviewer.open()
    except CobbError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    settings.set(LAST_DIRECTORY_KEY, str(path))
    return reviewer


@app.command()
def review(
    directory: DirectoryArgument = None,
    scope: ScopeOption = None,
):
    """
    Review records one at a time, adding and removing concepts.

    Tags are saved back to the record's year file whenever you move
    to another record, hide a record, or quit.
    """
    reviewer = _open_reviewer(directory)
    try:
        reviewer.run(scope)
    except (MissionCancelled, EmptyMissionError):
        raise typer.Exit(1)
    finally:
        reviewer.close()


@app.command("list")
def list_records(
    directory: DirectoryArgument = None,
    scope: ScopeOption = None,
    show_hidden: Annotated[bool, typer.Option(
        "--hidden",
        help="List hidden records instead",
    )] = False,
):
    """List the records a mission would cover."""
    reviewer = _open_reviewer(directory)
    try:
        records = reviewer.load()
        hidden_tag = reviewer.hidden_tag
        if show_hidden:
            chosen = hidden(records, hidden_tag)
        else:
            chosen = select(records, scope or "", hidden_tag)
        for record in chosen:
            typer.echo(f"{record.index}\t{record.timestamp}\t{', '.join(record.tags)}")
    finally:
        reviewer.close()


@app.command()
def tags(
    directory: DirectoryArgument = None,
):
    """List the concepts in use across the corpus."""
    reviewer = _open_reviewer(directory)
    try:
        reviewer.vocabulary.rebuild(reviewer.load())
        for tag in reviewer.vocabulary.assignable():
            typer.echo(tag)
    finally:
        reviewer.close()


@app.command()
def config():
    """Show the configuration file and its values."""
    cfg = load_or_create_config()
    typer.echo(f"file: {cfg.config_path}")
    typer.echo(f"extension: {cfg.extension}")
    typer.echo(f"hidden_tag: {cfg.hidden_tag}")
    typer.echo(f"default_scope: {cfg.default_scope}")
    typer.echo(f"last_directory: {cfg.last_directory or ''}")


# -----------------------------------------------------------------------------

def main():
    try:
        app()
    except SystemExit:
        raise  # Let typer handle exit codes
    except KeyboardInterrupt:
        raise SystemExit(130)  # Standard exit code for Ctrl+C
    except Exception as e:
        # Log full traceback to file, show clean message to user
        from .errors import log_exception
        log_path = log_exception(e, context="cobb CLI")
        typer.echo(f"Error: {e}", err=True)
        typer.echo(f"Details logged to {log_path}", err=True)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
