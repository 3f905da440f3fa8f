"""
Review API: ties a corpus directory, an operator and an edit session together.

Typical flow::

    reviewer = Reviewer(LocalDirectory(path), operator, config=config)
    reviewer.open()          # permission check
    reviewer.run()           # prompt scope, load, review until quit or done
    reviewer.close()
"""

import logging
from functools import partial
from typing import Optional

from .config import CobbConfig
from .errors import (
    DuplicateTagError,
    EmptyMissionError,
    MissionCancelled,
    PermissionDeniedError,
    ReservedTagError,
    SaveError,
)
from .loader import load_corpus
from .mission import select
from .protocol import DirectoryProtocol, OperatorProtocol
from .session import EditSession, SessionState
from .shard import save_record
from .types import (
    DEFAULT_EXTENSION,
    HIDDEN_TAG,
    Action,
    Command,
    NavigationResult,
    Record,
)
from .vocabulary import Vocabulary

logger = logging.getLogger(__name__)

BOUNDARY_MESSAGES = {
    NavigationResult.AT_LAST: "You've reached the last record of this mission.",
    NavigationResult.AT_FIRST: "You're at the first record of this mission.",
}


class Reviewer:
    """
    One operator reviewing one corpus directory.

    Holds the vocabulary and the current edit session. A failed or
    cancelled mission start leaves both as they were.
    """

    def __init__(
        self,
        directory: DirectoryProtocol,
        operator: OperatorProtocol,
        *,
        config: Optional[CobbConfig] = None,
    ):
        self._directory = directory
        self._operator = operator
        self._config = config
        self._extension = config.extension if config else DEFAULT_EXTENSION
        self._hidden_tag = config.hidden_tag if config else HIDDEN_TAG
        self._ops_log_handler = None
        self.vocabulary = Vocabulary(self._hidden_tag)
        self.session: Optional[EditSession] = None

    @property
    def directory(self) -> DirectoryProtocol:
        return self._directory

    @property
    def hidden_tag(self) -> str:
        return self._hidden_tag

    # -------------------------------------------------------------------------
    # Setup
    # -------------------------------------------------------------------------

    def open(self) -> None:
        """Make sure the directory is readable and writable.

        Asks for permission when it is not already granted.

        Raises:
            PermissionDeniedError: If permission is refused.
        """
        if not self._directory.query_permission("readwrite"):
            if not self._directory.request_permission("readwrite"):
                raise PermissionDeniedError("Permission to access directory was denied.")
        if self._config is not None and self._ops_log_handler is None:
            from .logging_config import configure_ops_log
            self._ops_log_handler = configure_ops_log(self._config.path)
        logger.info("Opened %r", self._directory)

    def load(self) -> list[Record]:
        """Load the full corpus (all records, hidden included)."""
        return load_corpus(self._directory, self._extension)

    def start_mission(self, scope: Optional[str] = None) -> EditSession:
        """
        Load the corpus and start a session over the records in ``scope``.

        Prompts the operator for the scope when none is given.

        Raises:
            MissionCancelled: If the operator cancels the scope prompt.
            EmptyMissionError: If no non-hidden record matches the scope.
        """
        if scope is None:
            scope = self._operator.prompt_scope()
            if scope is None:
                self._operator.notify("Mission cancelled.")
                raise MissionCancelled("Mission cancelled.")

        records = self.load()
        vocabulary = Vocabulary(self._hidden_tag)
        vocabulary.rebuild(records)
        working_set = select(records, scope, self._hidden_tag)

        session = EditSession(
            partial(save_record, self._directory, extension=self._extension),
            vocabulary,
            hidden_tag=self._hidden_tag,
            on_save_error=self._report_save_error,
        )
        try:
            session.start(working_set, scope)
        except EmptyMissionError as e:
            self._operator.notify(str(e))
            raise

        logger.info("Mission %r started: %d of %d records", scope, len(working_set), len(records))
        self.vocabulary = vocabulary
        self.session = session
        return session

    def _report_save_error(self, error: SaveError) -> None:
        self._operator.notify(f"Error: {error}")

    # -------------------------------------------------------------------------
    # Review loop
    # -------------------------------------------------------------------------

    def render(self) -> None:
        session = self.session
        if session is None or session.state == SessionState.UNSTARTED:
            return
        if session.state == SessionState.EXHAUSTED:
            self._operator.render_mission_complete()
            return
        self._operator.render_record(
            session.current,
            session.pending_tags.sorted(),
            self.vocabulary.assignable(),
            session.current_index + 1,
            len(session.records),
        )

    def dispatch(self, command: Command) -> None:
        """Apply one operator command to the active session."""
        session = self.session
        action = command.action

        if action in (Action.NEXT, Action.PREV):
            result = session.navigate(1 if action == Action.NEXT else -1)
            if result in BOUNDARY_MESSAGES:
                self._operator.notify(BOUNDARY_MESSAGES[result])

        elif action in (Action.ADD, Action.TOGGLE):
            tag = (command.tag or "").strip()
            if not tag:
                return
            try:
                session.check_assignable(tag)
                if tag not in session.pending_tags and tag not in self.vocabulary:
                    self._operator.notify(f"Unknown concept '{tag}'. Use 'new' to define it.")
                    return
                if action == Action.ADD:
                    session.add_tag(tag)
                else:
                    session.toggle_tag(tag)
            except ReservedTagError as e:
                self._operator.notify(str(e))

        elif action == Action.REMOVE:
            if command.tag:
                session.remove_tag(command.tag.strip())

        elif action == Action.NEW:
            name = command.tag
            if name is None:
                name = self._operator.prompt_new_tag_name()
                if name is None:
                    return
            try:
                session.define_new_tag(name)
            except (DuplicateTagError, ReservedTagError) as e:
                self._operator.notify(str(e))

        elif action == Action.HIDE:
            if self._operator.confirm_hide(session.current):
                session.hide()

        elif action == Action.QUIT:
            session.save_current()

    def run(self, scope: Optional[str] = None) -> EditSession:
        """
        Start a mission and process operator commands until it ends.

        Ends when the operator quits (the current record is saved first
        if it has unsaved tags) or every record has been hidden.
        """
        session = self.start_mission(scope)
        while session.state == SessionState.ACTIVE:
            self.render()
            command = self._operator.read_command()
            if command is None:
                command = Command(Action.QUIT)
            self.dispatch(command)
            if command.action == Action.QUIT:
                break
        if session.state == SessionState.EXHAUSTED:
            self._operator.render_mission_complete()
        return session

    def close(self) -> None:
        if self._ops_log_handler is not None:
            logging.getLogger("cobb").removeHandler(self._ops_log_handler)
            self._ops_log_handler.close()
            self._ops_log_handler = None
